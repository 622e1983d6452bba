"""Build manifest: flat ``key="value"`` lines written into the destination dir."""

import os
from typing import Dict, Mapping

try:
    import tomllib
except ImportError:  # Python < 3.11
    import tomli as tomllib

from constants import Constants, ManifestKeys

SINGLE_PLATFORM = "single-platform"
MULTI_PLATFORM = "multi-platform"


_ESCAPES = {"\\": "\\\\", '"': '\\"', "\b": "\\b", "\t": "\\t", "\n": "\\n", "\f": "\\f", "\r": "\\r"}


def _escape_char(ch: str) -> str:
    if ch in _ESCAPES:
        return _ESCAPES[ch]
    if ord(ch) < 0x20 or ord(ch) == 0x7F:
        return f"\\u{ord(ch):04X}"
    return ch


def _quote(value: str) -> str:
    """TOML basic string; the result never spans lines."""
    return '"' + "".join(_escape_char(ch) for ch in str(value)) + '"'


def manifest_entries(context, resolution) -> Dict[str, str]:
    """Collect manifest keys for a successful resolution, in write order."""
    entries: Dict[str, str] = {}
    for rp in resolution.platforms:
        entries.update(rp.platform.manifest_entries(context, rp.version))
    entries[ManifestKeys.PLATFORMS] = ",".join(rp.name for rp in resolution.platforms)
    if context.operation_id:
        entries[ManifestKeys.OPERATION_ID] = context.operation_id
    entries[ManifestKeys.BUILD_TYPE] = (
        MULTI_PLATFORM if len(resolution.platforms) > 1 else SINGLE_PLATFORM
    )
    return entries


def render_manifest(entries: Mapping[str, str]) -> str:
    return "".join(f"{key}={_quote(value)}\n" for key, value in entries.items())


def manifest_write_snippet(entries: Mapping[str, str], destination_var: str = "$DESTINATION_DIR") -> str:
    """Shell lines writing the manifest; the heredoc is quoted so nothing expands."""
    path = f'"{destination_var}/{Constants.MANIFEST_FILE}"'
    return (
        f'mkdir -p "{destination_var}"\n'
        f"cat > {path} <<'BUILDSMITH_MANIFEST'\n"
        f"{render_manifest(entries)}"
        "BUILDSMITH_MANIFEST\n"
    )


def parse_manifest(text: str) -> Dict[str, str]:
    """Parse manifest text into a dict of strings."""
    data = tomllib.loads(text)
    return {key: str(value) for key, value in data.items()}


def read_manifest(directory: str) -> Dict[str, str]:
    """Read ``build-manifest.toml`` from a build output directory.

    Returns an empty dict when the directory has no manifest.
    """
    path = os.path.join(directory, Constants.MANIFEST_FILE)
    if not os.path.isfile(path):
        return {}
    with open(path, "r", encoding="utf-8") as fh:
        return parse_manifest(fh.read())
