"""Configuration parsing modules for coregen."""

from .board_properties import BoardProperties, BoardPropertiesError
from .host_context import EXCLUDED_DISTRIBUTIONS, HostContext
from .ini_parser import ProjectConfig, ProjectConfigError
from .platform_descriptor import (
    PlatformDescriptor,
    PlatformDiscoveryError,
    discover_platform,
)

__all__ = [
    "BoardProperties",
    "BoardPropertiesError",
    "HostContext",
    "EXCLUDED_DISTRIBUTIONS",
    "ProjectConfig",
    "ProjectConfigError",
    "PlatformDescriptor",
    "PlatformDiscoveryError",
    "discover_platform",
]
