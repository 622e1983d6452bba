"""Error kinds and error values produced while resolving and generating."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Sequence, Tuple


class ErrorKind(Enum):
    """Categories of expected generation failures."""
    UNABLE_TO_DETECT_PLATFORM = "unable_to_detect_platform"
    UNSUPPORTED_PLATFORM = "unsupported_platform"
    UNSUPPORTED_VERSION = "unsupported_version"
    DETECTION_PARSE_FAILURE = "detection_parse_failure"
    INVALID_USAGE = "invalid_usage"


@dataclass(frozen=True)
class BuildError:
    """Failure returned as a value by the resolver and the generators."""
    kind: ErrorKind
    message: str
    platform: Optional[str] = None
    requested_version: Optional[str] = None
    supported_versions: Tuple[str, ...] = field(default_factory=tuple)
    supported_platforms: Tuple[str, ...] = field(default_factory=tuple)

    def __str__(self) -> str:
        return self.message


class InvalidUsageError(ValueError):
    """Raised for contradictory or missing invocation settings."""


class DetectionParseError(Exception):
    """Raised by a platform detector when a repository file cannot be parsed."""

    def __init__(self, platform: str, path: str, reason: str):
        self.platform = platform
        self.path = path
        self.reason = reason
        super().__init__(f"Failed to parse '{path}' for platform '{platform}': {reason}")


def unsupported_platform(name: str, enabled: Sequence[str]) -> BuildError:
    """Build the UNSUPPORTED_PLATFORM error for an unknown or disabled name."""
    names = tuple(enabled)
    return BuildError(
        kind=ErrorKind.UNSUPPORTED_PLATFORM,
        message=(
            f"'{name}' platform is not supported. "
            f"Supported platforms are: {', '.join(names)}"
        ),
        platform=name,
        supported_platforms=names,
    )


def unsupported_version(name: str, requested: Optional[str], supported: Sequence[str]) -> BuildError:
    """Build the UNSUPPORTED_VERSION error naming the full supported set."""
    versions = tuple(supported)
    return BuildError(
        kind=ErrorKind.UNSUPPORTED_VERSION,
        message=(
            f"Platform '{name}' version '{requested}' is unsupported. "
            f"Supported versions: {', '.join(versions)}"
        ),
        platform=name,
        requested_version=requested,
        supported_versions=versions,
    )
