"""Language platform plugins and the registry that orders them."""

from .base import DetectionResult, Platform
from .installer import PlatformInstaller
from .dotnetcore import DotNetCorePlatform
from .node import NodePlatform
from .php import PhpPlatform
from .python import PythonPlatform
from .registry import build_registry, find_platform

__all__ = [
    "DetectionResult",
    "Platform",
    "PlatformInstaller",
    "DotNetCorePlatform",
    "NodePlatform",
    "PhpPlatform",
    "PythonPlatform",
    "build_registry",
    "find_platform",
]
