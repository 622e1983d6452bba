"""Construction of the ordered platform registry."""

import logging
from typing import Dict, Iterable, List, Type

from constants import Constants
from generation.compatibility import find_platform  # noqa: F401  re-exported
from .base import Platform
from .dotnetcore import DotNetCorePlatform
from .node import NodePlatform
from .php import PhpPlatform
from .python import PythonPlatform

logger = logging.getLogger(__name__)

# Registry order decides which platform wins when several detectors match.
PLATFORM_TYPES: List[Type[Platform]] = [
    DotNetCorePlatform,
    NodePlatform,
    PhpPlatform,
    PythonPlatform,
]


def build_registry(options=None) -> List[Platform]:
    """Instantiate every built-in platform with configured versions.

    Args:
        options: Object exposing ``supported_versions``, ``default_versions``,
            ``disabled_platforms`` and ``multi_platform_opt_out`` (BuildOptions);
            None uses the built-in defaults.

    Returns:
        list[Platform]: Platforms in registry order.
    """
    supported: Dict[str, List[str]] = dict(Constants.SUPPORTED_VERSIONS)
    defaults: Dict[str, str] = dict(Constants.DEFAULT_VERSIONS)
    disabled: Iterable[str] = ()
    opted_out: Iterable[str] = ()
    if options is not None:
        supported.update(getattr(options, "supported_versions", None) or {})
        defaults.update(getattr(options, "default_versions", None) or {})
        disabled = getattr(options, "disabled_platforms", None) or ()
        opted_out = getattr(options, "multi_platform_opt_out", None) or ()
    disabled_set = {d.lower() for d in disabled}
    opted_out_set = {o.lower() for o in opted_out}

    registry: List[Platform] = []
    for platform_type in PLATFORM_TYPES:
        name = platform_type.name
        registry.append(
            platform_type(
                supported_versions=supported.get(name, ()),
                default_version=defaults.get(name),
                enabled=name not in disabled_set,
                multi_platform=name not in opted_out_set,
            )
        )
    logger.debug(
        "Platform registry: %s",
        ", ".join(f"{p.name}{'' if p.enabled else ' (disabled)'}" for p in registry),
    )
    return registry
