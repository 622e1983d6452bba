"""Data models for platform version resolution."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple


class ResolutionMode(Enum):
    """Resolution strategy derived from the requested version."""
    DEFAULT = "default"
    EXACT = "exact"
    RANGE = "range"
    LATEST = "latest"


@dataclass
class VersionSpec:
    """Normalized representation of a version spec and derived behavior flags."""
    raw: str
    mode: ResolutionMode
    include_prerelease: bool


@dataclass
class VersionResolution:
    """Resolution outcome: either a concrete version or an error message."""
    requested: Optional[str]
    resolved_version: Optional[str]
    resolution_mode: ResolutionMode
    candidate_count: int
    error: Optional[str]
    supported: Tuple[str, ...] = field(default_factory=tuple)

    @property
    def ok(self) -> bool:
        """True when a supported version was selected."""
        return self.resolved_version is not None and self.error is None
