"""Immutable per-invocation input shared by the resolver and the generators."""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Iterable, Mapping, Optional

from .errors import InvalidUsageError

_TRUE_VALUES = ("true",)
_FALSE_VALUES = ("false",)


def parse_bool(value: Any, setting: str) -> bool:
    """Parse a true/false setting value.

    Args:
        value: Raw value (bool or string).
        setting: Name of the setting, used in the error message.

    Returns:
        bool: Parsed value.

    Raises:
        InvalidUsageError: If the value is neither 'true' nor 'false'.
    """
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in _TRUE_VALUES:
        return True
    if text in _FALSE_VALUES:
        return False
    raise InvalidUsageError(
        f"Invalid value '{value}' for '{setting}'. Expected 'true' or 'false'."
    )


@dataclass(frozen=True)
class BuildContext:  # pylint: disable=too-many-instance-attributes
    """Everything one generation run needs; never mutated after construction."""
    source_repo: Any
    source_dir: str
    destination_dir: str
    temp_dir: str
    intermediate_dir: Optional[str] = None
    platform: Optional[str] = None
    platform_version: Optional[str] = None
    multi_platform_enabled: bool = False
    dynamic_install_enabled: bool = False
    checkers_enabled: bool = False
    properties: Mapping[str, str] = field(default_factory=dict)
    version_overrides: Mapping[str, str] = field(default_factory=dict)
    build_environment: Mapping[str, str] = field(default_factory=dict)
    runtime_platform: Optional[str] = None
    operation_id: Optional[str] = None

    def __post_init__(self):
        # Freeze the mappings as well so the whole context is read-only.
        for name in ("properties", "version_overrides", "build_environment"):
            object.__setattr__(self, name, MappingProxyType(dict(getattr(self, name))))

    def get_property(self, key: str, default: Optional[str] = None) -> Optional[str]:
        """Return a property-bag value (``-p key=value``)."""
        return self.properties.get(key, default)

    def get_bool_property(self, key: str, default: bool = False) -> bool:
        """Return a property-bag value parsed as a strict boolean."""
        raw = self.properties.get(key)
        if raw is None or str(raw).strip() == "":
            return default
        return parse_bool(raw, key)

    def version_override(self, platform_name: str) -> Optional[str]:
        """Return the per-platform version setting, matched case-insensitively."""
        wanted = platform_name.lower()
        for name, value in self.version_overrides.items():
            if name.lower() == wanted and value and str(value).strip():
                return str(value).strip()
        return None


def validate_context(context: BuildContext, platforms: Iterable = ()) -> None:
    """Reject contradictory or incomplete contexts before any work is done.

    Args:
        context: BuildContext of the current run.
        platforms: Enabled platforms; each checks the property-bag values it reads.

    Raises:
        InvalidUsageError: On the first invalid field or property value.
    """
    if not context.source_dir or not str(context.source_dir).strip():
        raise InvalidUsageError("Source directory must be provided.")
    if not context.temp_dir or not str(context.temp_dir).strip():
        raise InvalidUsageError("Temp directory must be provided.")
    if context.platform_version and not context.platform:
        raise InvalidUsageError(
            "Cannot use a platform version without specifying the platform name as well."
        )
    if context.source_repo is None:
        raise InvalidUsageError("Source repository must be provided.")
    for platform in platforms:
        platform.validate_properties(context)
