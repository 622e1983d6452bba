"""Version spec parsing utilities."""

from typing import Optional

from .models import ResolutionMode, VersionSpec

LATEST = "latest"


def _determine_resolution_mode(spec: str) -> ResolutionMode:
    """Determine resolution mode from spec string.

    Anything that is not a complete ``major.minor.patch`` triple is a range:
    partial versions such as ``2`` or ``3.7`` select the highest matching
    patch release.
    """
    range_ops = ['^', '~', '*', 'x', 'X', ' - ', '<', '>', '=', '|', ' ']
    if any(op in spec for op in range_ops):
        return ResolutionMode.RANGE
    core = spec.split('-', 1)[0].split('+', 1)[0]
    if core.count('.') < 2:
        return ResolutionMode.RANGE
    return ResolutionMode.EXACT


def _determine_include_prerelease(spec: str) -> bool:
    """Prereleases are only eligible when the spec names one."""
    return any(pre in spec.lower() for pre in ['-pre', '-rc', '-alpha', '-beta', '-preview'])


def parse_version_spec(raw: Optional[str]) -> Optional[VersionSpec]:
    """Parse a requested version into a VersionSpec.

    Returns None for a missing or blank value, meaning "use the default".
    """
    if raw is None or raw.strip() == '':
        return None
    spec = raw.strip()
    if spec.lower() == LATEST:
        return VersionSpec(raw=spec, mode=ResolutionMode.LATEST, include_prerelease=False)
    return VersionSpec(
        raw=spec,
        mode=_determine_resolution_mode(spec),
        include_prerelease=_determine_include_prerelease(spec),
    )
