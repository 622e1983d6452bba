"""Maximum-satisfying version resolution over a platform's supported versions.

Supported versions are plain strings as published by a platform ("3.7",
"12.22.12", "2.1.30"). Partial strings are coerced to semantic versions for
comparison only; the string handed back is always the supported entry itself.
"""

import logging
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Tuple

import semantic_version

from common.logging_utils import extra_context, is_debug_enabled
from .models import ResolutionMode, VersionResolution
from .parser import parse_version_spec

logger = logging.getLogger(__name__)

Normalizer = Callable[[str], str]


def _version_from_str(v: str) -> Optional[semantic_version.Version]:
    """Safely coerce a version string ("3.7" -> 3.7.0)."""
    try:
        return semantic_version.Version.coerce(v.strip())
    except ValueError:
        return None


def _candidates(supported: Iterable[str]) -> List[Tuple[semantic_version.Version, str]]:
    """Pair each parseable supported string with its semantic version.

    When two entries coerce to the same version the first one wins.
    """
    seen: Dict[semantic_version.Version, str] = {}
    for raw in supported:
        ver = _version_from_str(raw)
        if ver is None or ver in seen:
            continue
        seen[ver] = raw
    return list(seen.items())


def sort_versions(versions: Iterable[str], reverse: bool = False) -> List[str]:
    """Sort version strings semantically; unparseable entries are dropped."""
    pairs = _candidates(versions)
    pairs.sort(key=lambda p: p[0], reverse=reverse)
    return [raw for _, raw in pairs]


def _parse_npm_spec(spec_str: str):
    """Parse an npm-style range. Returns (spec, error)."""
    try:
        return semantic_version.NpmSpec(spec_str), None
    except ValueError as e:
        return None, f"Invalid version spec '{spec_str}': {str(e)}"


def _pick_range(
    spec_str: str,
    supported: Sequence[str],
    include_prerelease: bool,
) -> Tuple[Optional[str], Optional[str]]:
    """Apply an npm range and pick the highest matching supported version."""
    npm_spec, err = _parse_npm_spec(spec_str)
    if err or npm_spec is None:
        return None, err

    matching: List[Tuple[semantic_version.Version, str]] = []
    for ver, raw in _candidates(supported):
        if ver.prerelease and not include_prerelease:
            continue
        if npm_spec.match(ver):
            matching.append((ver, raw))

    if not matching:
        return None, f"No supported version matches '{spec_str}'"

    matching.sort(key=lambda p: p[0], reverse=True)
    return matching[0][1], None


def resolve_version(
    requested: Optional[str],
    supported: Sequence[str],
    default_version: Optional[str],
    normalize: Optional[Normalizer] = None,
) -> VersionResolution:
    """Resolve a requested version against the supported set.

    Args:
        requested: Version or range asked for; None/blank means "use default".
        supported: Ordered supported version strings of the platform.
        default_version: Version returned when nothing was requested.
        normalize: Platform hook stripping decorations (e.g. "netcoreapp2.2").

    Returns:
        VersionResolution carrying either the selected version or an error.
    """
    supported_t = tuple(supported)
    raw = requested
    if raw is not None and normalize is not None and raw.strip():
        raw = normalize(raw.strip())

    spec = parse_version_spec(raw)

    if spec is None:
        if default_version and default_version in supported_t:
            return VersionResolution(
                requested=requested,
                resolved_version=default_version,
                resolution_mode=ResolutionMode.DEFAULT,
                candidate_count=len(supported_t),
                error=None,
                supported=supported_t,
            )
        return VersionResolution(
            requested=requested,
            resolved_version=None,
            resolution_mode=ResolutionMode.DEFAULT,
            candidate_count=len(supported_t),
            error=f"Default version '{default_version}' is not a supported version",
            supported=supported_t,
        )

    if spec.mode == ResolutionMode.LATEST:
        ordered = sort_versions(supported_t, reverse=True)
        resolved = ordered[0] if ordered else None
        error = None if resolved else "No versions available"
    elif spec.raw in supported_t:
        resolved, error = spec.raw, None
    else:
        resolved, error = _pick_range(spec.raw, supported_t, spec.include_prerelease)

    if is_debug_enabled(logger):
        logger.debug(
            "Version resolved",
            extra=extra_context(
                event="decision",
                component="version_resolver",
                action="resolve",
                requested=requested,
                normalized=spec.raw,
                mode=spec.mode.value,
                outcome="resolved" if resolved else "unsupported",
                resolved=resolved,
            ),
        )

    return VersionResolution(
        requested=requested,
        resolved_version=resolved,
        resolution_mode=spec.mode,
        candidate_count=len(supported_t),
        error=error,
        supported=supported_t,
    )
