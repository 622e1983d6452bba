"""Configuration loading for the CLI.

Builds one BuildOptions value from, in increasing precedence: built-in
defaults, a YAML/JSON config file, the source directory's build.env, the
process environment and CLI flags. The generators only ever see the result.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

import yaml
from jsonschema import Draft7Validator

from constants import Constants, EnvVars, PlatformNames
from common.logging_utils import new_operation_id
from common.source_repo import LocalSourceRepo
from generation.context import BuildContext, parse_bool
from generation.errors import InvalidUsageError

logger = logging.getLogger(__name__)

_STRING_MAP = {"type": "object", "additionalProperties": {"type": "string"}}

CONFIG_SCHEMA: Dict[str, Any] = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "type": "object",
    "additionalProperties": False,
    "properties": {
        "platform": {"type": "string"},
        "platform_version": {"type": "string"},
        "runtime_platform": {"type": "string"},
        "temp_dir": {"type": "string"},
        "multi_platform": {"type": "boolean"},
        "dynamic_install": {"type": "boolean"},
        "checkers": {"type": "boolean"},
        "properties": _STRING_MAP,
        "versions": _STRING_MAP,
        "hooks": {
            "type": "object",
            "additionalProperties": False,
            "properties": {var: {"type": "string"} for var in EnvVars.HOOK_VARS},
        },
        "disabled_platforms": {"type": "array", "items": {"type": "string"}},
        "multi_platform_opt_out": {"type": "array", "items": {"type": "string"}},
        "supported_versions": {
            "type": "object",
            "additionalProperties": {"type": "array", "items": {"type": "string"}, "minItems": 1},
        },
        "default_versions": _STRING_MAP,
        "node_min_lts_major": {"type": "integer", "minimum": 0},
        "dockerfile": {
            "type": "object",
            "additionalProperties": False,
            "properties": {
                "fallback_tag": {"type": "string"},
                "build_image": {"type": "string"},
                "runtime_image_repository": {"type": "string"},
                "runtime_names": _STRING_MAP,
                "tags": {
                    "type": "object",
                    "additionalProperties": {
                        "type": "array",
                        "items": {
                            "type": "object",
                            "required": ["range", "tag"],
                            "properties": {
                                "range": {"type": "string"},
                                "tag": {"type": "string"},
                            },
                        },
                    },
                },
                "args": {
                    "type": "object",
                    "additionalProperties": {"type": "array", "items": {"type": "string"}},
                },
            },
        },
    },
}

# Environment-variable stems per platform; the first one is canonical.
_ENV_STEMS = {
    PlatformNames.DOTNET.value: ("DOTNET",),
    PlatformNames.NODEJS.value: ("NODE", "NODEJS"),
    PlatformNames.PHP.value: ("PHP",),
    PlatformNames.PYTHON.value: ("PYTHON",),
}


@dataclass
class BuildOptions:  # pylint: disable=too-many-instance-attributes
    """Resolved settings for one CLI invocation."""
    source_dir: Optional[str] = None
    destination_dir: Optional[str] = None
    intermediate_dir: Optional[str] = None
    temp_dir: str = Constants.DEFAULT_TEMP_DIR
    platform: Optional[str] = None
    platform_version: Optional[str] = None
    runtime_platform: Optional[str] = None
    multi_platform_enabled: bool = False
    dynamic_install_enabled: bool = False
    checkers_enabled: bool = False
    properties: Dict[str, str] = field(default_factory=dict)
    version_overrides: Dict[str, str] = field(default_factory=dict)
    build_environment: Dict[str, str] = field(default_factory=dict)
    disabled_platforms: List[str] = field(default_factory=list)
    multi_platform_opt_out: List[str] = field(default_factory=list)
    supported_versions: Dict[str, List[str]] = field(default_factory=dict)
    default_versions: Dict[str, str] = field(default_factory=dict)
    node_min_lts_major: int = Constants.NODE_MIN_LTS_MAJOR
    dockerfile: Dict[str, Any] = field(default_factory=dict)
    operation_id: str = field(default_factory=new_operation_id)


def validate_config(data: Any) -> None:
    """Validate config content and raise on the first error."""
    validator = Draft7Validator(CONFIG_SCHEMA)
    errs = sorted(validator.iter_errors(data), key=lambda e: [str(p) for p in e.path])
    if errs:
        first = errs[0]
        path = "/".join([str(p) for p in first.path])
        raise InvalidUsageError(f"Invalid configuration at '{path}': {first.message}")


def load_config_file(path: Optional[str]) -> Dict[str, Any]:
    """Load and validate a YAML or JSON configuration file.

    Raises:
        FileNotFoundError: If the file does not exist.
        InvalidUsageError: If the content cannot be parsed or fails validation.
    """
    if not path:
        return {}
    with open(path, "r", encoding="utf-8") as fh:
        text = fh.read()
    try:
        if path.lower().endswith(".json"):
            data = json.loads(text)
        else:
            data = yaml.safe_load(text)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise InvalidUsageError(f"Could not parse configuration file '{path}': {e}") from e
    data = data or {}
    validate_config(data)
    logger.debug("Loaded configuration from %s", path)
    return data


def read_build_env(source_dir: Optional[str]) -> Dict[str, str]:
    """Read ``KEY=VALUE`` lines from build.env in the source directory."""
    if not source_dir:
        return {}
    path = os.path.join(source_dir, Constants.BUILD_ENV_FILE)
    if not os.path.isfile(path):
        return {}
    values: Dict[str, str] = {}
    with open(path, "r", encoding="utf-8") as fh:
        for raw in fh:
            line = raw.strip()
            if not line or line.startswith("#") or "=" not in line:
                continue
            if line.startswith("export "):
                line = line[len("export "):].strip()
            key, value = line.split("=", 1)
            value = value.strip()
            if len(value) >= 2 and value[0] == value[-1] and value[0] in ("'", '"'):
                value = value[1:-1]
            values[key.strip()] = value
    return values


def parse_properties(items: Optional[List[str]]) -> Dict[str, str]:
    """Parse ``-p KEY=VALUE`` flags."""
    props: Dict[str, str] = {}
    for item in items or []:
        if "=" not in item:
            raise InvalidUsageError(f"Invalid property '{item}'. Expected KEY=VALUE.")
        key, value = item.split("=", 1)
        key = key.strip()
        if not key:
            raise InvalidUsageError(f"Invalid property '{item}'. Expected KEY=VALUE.")
        props[key] = value.strip()
    return props


def _apply_settings(options: BuildOptions, settings: Mapping[str, str]) -> None:
    """Apply environment-style settings (build.env or process environment)."""
    for attr, var in (
        ("multi_platform_enabled", EnvVars.ENABLE_MULTIPLATFORM_BUILD),
        ("dynamic_install_enabled", EnvVars.ENABLE_DYNAMIC_INSTALL),
        ("checkers_enabled", EnvVars.ENABLE_CHECKERS),
    ):
        if settings.get(var):
            setattr(options, attr, parse_bool(settings[var], var))
    if settings.get(EnvVars.PLATFORM_NAME):
        options.platform = settings[EnvVars.PLATFORM_NAME]
    if settings.get(EnvVars.PLATFORM_VERSION):
        options.platform_version = settings[EnvVars.PLATFORM_VERSION]

    for name, stems in _ENV_STEMS.items():
        for stem in stems:
            version = settings.get(f"{stem}_VERSION")
            if version:
                options.version_overrides[name] = version
                break
        for stem in stems:
            disabled = settings.get(f"DISABLE_{stem}_BUILD")
            if disabled and parse_bool(disabled, f"DISABLE_{stem}_BUILD"):
                if name not in options.disabled_platforms:
                    options.disabled_platforms.append(name)

    for var in EnvVars.HOOK_VARS:
        if settings.get(var):
            options.build_environment[var] = settings[var]


def _apply_config(options: BuildOptions, config: Mapping[str, Any]) -> None:
    for attr, key in (
        ("platform", "platform"),
        ("platform_version", "platform_version"),
        ("runtime_platform", "runtime_platform"),
        ("temp_dir", "temp_dir"),
        ("multi_platform_enabled", "multi_platform"),
        ("dynamic_install_enabled", "dynamic_install"),
        ("checkers_enabled", "checkers"),
        ("node_min_lts_major", "node_min_lts_major"),
    ):
        if key in config:
            setattr(options, attr, config[key])
    options.properties.update(config.get("properties") or {})
    options.version_overrides.update(config.get("versions") or {})
    options.build_environment.update(config.get("hooks") or {})
    options.disabled_platforms.extend(config.get("disabled_platforms") or [])
    options.multi_platform_opt_out.extend(config.get("multi_platform_opt_out") or [])
    options.supported_versions.update(config.get("supported_versions") or {})
    options.default_versions.update(config.get("default_versions") or {})
    options.dockerfile = dict(config.get("dockerfile") or {})


def _apply_args(options: BuildOptions, args) -> None:
    """CLI flags have the highest precedence."""
    for attr, dest in (
        ("destination_dir", "DESTINATION_DIR"),
        ("intermediate_dir", "INTERMEDIATE_DIR"),
        ("temp_dir", "TEMP_DIR"),
        ("platform", "PLATFORM"),
        ("platform_version", "PLATFORM_VERSION"),
        ("runtime_platform", "RUNTIME_PLATFORM"),
    ):
        value = getattr(args, dest, None)
        if value:
            setattr(options, attr, value)
    for attr, dest, flag in (
        ("multi_platform_enabled", "ENABLE_MULTI_PLATFORM", "--enable-multi-platform"),
        ("dynamic_install_enabled", "ENABLE_DYNAMIC_INSTALL", "--enable-dynamic-install"),
        ("checkers_enabled", "ENABLE_CHECKERS", "--enable-checkers"),
    ):
        value = getattr(args, dest, None)
        if value is not None:
            setattr(options, attr, parse_bool(value, flag))
    options.properties.update(parse_properties(getattr(args, "PROPERTIES", None)))


def resolve_options(args, environ: Optional[Mapping[str, str]] = None) -> BuildOptions:
    """Merge every configuration source into a BuildOptions value.

    Args:
        args: Parsed argparse namespace.
        environ: Process environment; defaults to os.environ.

    Returns:
        BuildOptions: Settings for the invocation.

    Raises:
        InvalidUsageError: On invalid values in any source.
    """
    options = BuildOptions()
    options.source_dir = getattr(args, "SOURCE_DIR", None)
    _apply_config(options, load_config_file(getattr(args, "CONFIG", None)))
    _apply_settings(options, read_build_env(options.source_dir))
    _apply_settings(options, os.environ if environ is None else environ)
    _apply_args(options, args)
    if options.source_dir and not options.destination_dir:
        options.destination_dir = options.source_dir
    return options


def build_context(options: BuildOptions, repo=None) -> BuildContext:
    """Create the immutable BuildContext handed to the generators."""
    if repo is None and options.source_dir:
        repo = LocalSourceRepo(options.source_dir)
    return BuildContext(
        source_repo=repo,
        source_dir=options.source_dir or "",
        destination_dir=options.destination_dir or options.source_dir or "",
        temp_dir=options.temp_dir,
        intermediate_dir=options.intermediate_dir,
        platform=options.platform,
        platform_version=options.platform_version,
        multi_platform_enabled=options.multi_platform_enabled,
        dynamic_install_enabled=options.dynamic_install_enabled,
        checkers_enabled=options.checkers_enabled,
        properties=options.properties,
        version_overrides=options.version_overrides,
        build_environment=options.build_environment,
        runtime_platform=options.runtime_platform,
        operation_id=options.operation_id,
    )
