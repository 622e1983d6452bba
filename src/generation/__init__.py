"""Platform resolution and build artifact generation."""

from .compatibility import (
    CompatiblePlatformResolver,
    Resolution,
    ResolvedPlatform,
    find_platform,
    tool_versions,
)
from .context import BuildContext, parse_bool, validate_context
from .dockerfile import DockerfileGenerator, DockerfileResult, DockerfileRules
from .errors import BuildError, DetectionParseError, ErrorKind, InvalidUsageError
from .manifest import read_manifest
from .script import BuildScriptGenerator, ScriptResult

__all__ = [
    "BuildContext",
    "BuildError",
    "BuildScriptGenerator",
    "CompatiblePlatformResolver",
    "DetectionParseError",
    "DockerfileGenerator",
    "DockerfileResult",
    "DockerfileRules",
    "ErrorKind",
    "InvalidUsageError",
    "Resolution",
    "ResolvedPlatform",
    "ScriptResult",
    "find_platform",
    "parse_bool",
    "read_manifest",
    "tool_versions",
    "validate_context",
]
