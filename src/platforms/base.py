"""Capability contract implemented by every language platform."""

from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

from generation.errors import DetectionParseError
from .installer import PlatformInstaller


@dataclass(frozen=True)
class DetectionResult:
    """What a detector found: the language and, optionally, its version.

    A None language_version means "use the platform default".
    """
    language: str
    language_version: Optional[str] = None


def read_repo_text(repo, platform_name: str, path: str) -> str:
    """Read a repository file that a detector must parse.

    Raises:
        DetectionParseError: If the file is not valid UTF-8.
    """
    try:
        return repo.read_file(path)
    except UnicodeDecodeError as e:
        raise DetectionParseError(platform_name, path, f"not valid UTF-8 text ({e.reason})") from e


class Platform:
    """Base class for platform plugins.

    Subclasses set ``name`` and implement ``detect`` and
    ``generate_build_snippet``. Everything else has a working default.
    """

    name: str = ""
    build_only: bool = False
    runtime_name: Optional[str] = None
    manifest_version_key: Optional[str] = None

    def __init__(
        self,
        supported_versions: Sequence[str] = (),
        default_version: Optional[str] = None,
        enabled: bool = True,
        multi_platform: bool = True,
        installer: Optional[PlatformInstaller] = None,
    ):
        self.supported_versions: Tuple[str, ...] = tuple(supported_versions)
        self.default_version = default_version
        self.enabled = enabled
        self.multi_platform = multi_platform
        self.installer = installer if installer is not None else PlatformInstaller(self.name)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r}, enabled={self.enabled})"

    def is_enabled(self) -> bool:
        return self.enabled

    def is_enabled_for_multi_platform_build(self) -> bool:
        return self.multi_platform

    def detect(self, context) -> Optional[DetectionResult]:
        """Inspect the source repository.

        Args:
            context: BuildContext of the current run.

        Returns:
            DetectionResult when the platform applies to the repository,
            otherwise None.

        Raises:
            DetectionParseError: If a file the platform must read is malformed.
        """
        raise NotImplementedError

    def validate_properties(self, context) -> None:
        """Check the property-bag values this platform reads.

        Raises:
            InvalidUsageError: If a value is not acceptable.
        """

    def normalize_version(self, raw: str) -> str:
        """Strip platform-specific decorations from a requested version."""
        return raw

    def is_version_already_installed(self, version: str) -> bool:
        return self.installer.is_version_installed(version)

    def generate_install_snippet(self, version: str) -> Optional[str]:
        """Shell lines installing the SDK, or None when nothing is needed."""
        return self.installer.install_snippet(version)

    def sentinel_snippet(self, version: str) -> Optional[str]:
        """Shell line recording a finished dynamic install."""
        return self.installer.sentinel_snippet(version)

    def generate_build_snippet(self, context, version: str) -> str:
        """Shell lines building the application with the given SDK version."""
        raise NotImplementedError

    def environment_setup_args(self, version: str) -> str:
        """Argument handed to the environment-setup script, e.g. ``php=8.2.22``."""
        return f"{self.name}={version}"

    def manifest_entries(self, context, version: str) -> dict:
        """Extra manifest keys contributed by the platform."""
        key = self.manifest_version_key or f"{self.name}_version"
        return {key: version}
