"""Selection of the platforms (and their versions) a repository is built with.

The registry order is authoritative: the first platform whose name matches an
explicit request, or whose detector matches the repository, is the main
platform. In multi-platform mode every other participating platform that
detects is added after it, in registry order.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from common.logging_utils import Timer, extra_context, is_debug_enabled
from versioning.resolver import resolve_version
from .errors import (
    BuildError,
    DetectionParseError,
    ErrorKind,
    unsupported_platform,
    unsupported_version,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResolvedPlatform:
    """A platform bound to the concrete version the build will use."""
    platform: object
    version: str
    detection: Optional[object] = None

    @property
    def name(self) -> str:
        return self.platform.name


@dataclass(frozen=True)
class Resolution:
    """Outcome of platform resolution: platforms in build order, or an error."""
    platforms: Tuple[ResolvedPlatform, ...] = ()
    error: Optional[BuildError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def main(self) -> Optional[ResolvedPlatform]:
        return self.platforms[0] if self.platforms else None


def find_platform(registry: Iterable, name: Optional[str]):
    """Return the first platform whose name matches, case-insensitively."""
    if not name:
        return None
    wanted = name.strip().lower()
    for platform in registry:
        if platform.name.lower() == wanted:
            return platform
    return None


def tool_versions(resolution: Resolution) -> Dict[str, str]:
    """Ordered ``{platform name: version}`` for a successful resolution."""
    return {rp.name: rp.version for rp in resolution.platforms}


class CompatiblePlatformResolver:
    """Resolves a BuildContext against an ordered platform registry."""

    def __init__(self, registry: Sequence):
        self.registry = list(registry)

    def enabled_platforms(self) -> List:
        return [p for p in self.registry if p.is_enabled()]

    def _resolve_version(self, platform, requested: Optional[str]):
        """Run the version resolver; returns (version, error)."""
        result = resolve_version(
            requested,
            platform.supported_versions,
            platform.default_version,
            normalize=platform.normalize_version,
        )
        if result.ok:
            return result.resolved_version, None
        logger.debug("Version resolution failed for %s: %s", platform.name, result.error)
        shown = requested if requested is not None else platform.default_version
        return None, unsupported_version(platform.name, shown, platform.supported_versions)

    def _main_platform(self, context):
        """Return (platform, detection, error) for the main platform."""
        if context.platform:
            platform = find_platform(self.registry, context.platform)
            if platform is None or not platform.is_enabled():
                return None, None, unsupported_platform(
                    context.platform, [p.name for p in self.enabled_platforms()]
                )
            detection = None
            if not context.platform_version and not context.version_override(platform.name):
                detection = platform.detect(context)
            return platform, detection, None

        for platform in self.enabled_platforms():
            detection = platform.detect(context)
            if detection is not None:
                return platform, detection, None
        return None, None, BuildError(
            kind=ErrorKind.UNABLE_TO_DETECT_PLATFORM,
            message="Could not detect the platform and version of the repository.",
            supported_platforms=tuple(p.name for p in self.enabled_platforms()),
        )

    def resolve(self, context) -> Resolution:
        """Resolve the platforms for one build.

        Args:
            context: BuildContext of the current run.

        Returns:
            Resolution: Platforms in build order, or the first error met.
        """
        with Timer() as timer:
            try:
                resolution = self._resolve(context)
            except DetectionParseError as e:
                logger.warning("%s", e)
                resolution = Resolution(
                    error=BuildError(
                        kind=ErrorKind.DETECTION_PARSE_FAILURE,
                        message=str(e),
                        platform=e.platform,
                    )
                )
        if is_debug_enabled(logger):
            logger.debug(
                "Platform resolution finished",
                extra=extra_context(
                    event="decision",
                    component="compatibility",
                    action="resolve",
                    outcome="resolved" if resolution.ok else resolution.error.kind.value,
                    platforms=tool_versions(resolution) if resolution.ok else None,
                    duration_ms=timer.duration_ms(),
                ),
            )
        return resolution

    def _resolve(self, context) -> Resolution:
        main, detection, error = self._main_platform(context)
        if error is not None:
            return Resolution(error=error)

        requested = (
            context.platform_version
            or context.version_override(main.name)
            or (detection.language_version if detection is not None else None)
        )
        version, error = self._resolve_version(main, requested)
        if error is not None:
            return Resolution(error=error)
        resolved = [ResolvedPlatform(main, version, detection)]
        logger.info("Detected platform: %s %s", main.name, version)

        if not context.multi_platform_enabled:
            return Resolution(platforms=tuple(resolved))

        for platform in self.enabled_platforms():
            if platform is main or not platform.is_enabled_for_multi_platform_build():
                continue
            other = platform.detect(context)
            if other is None:
                continue
            requested = context.version_override(platform.name) or other.language_version
            version, error = self._resolve_version(platform, requested)
            if error is not None:
                return Resolution(error=error)
            resolved.append(ResolvedPlatform(platform, version, other))
            logger.info("Detected platform: %s %s", platform.name, version)

        return Resolution(platforms=tuple(resolved))
