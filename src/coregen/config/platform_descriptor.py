"""
Platform discovery for Arduino-style hardware packages.

A platform directory looks like:

    hardware/arduino/avr/
    ├── boards.txt
    ├── platform.txt
    ├── cores/
    │   └── arduino/
    └── variants/
        ├── standard/
        ├── mega/
        └── leonardo/

Discovery runs once per platform; the resulting descriptor is read-only.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, FrozenSet

from .board_properties import BoardProperties

logger = logging.getLogger(__name__)


class PlatformDiscoveryError(Exception):
    """Raised when a platform directory does not have the expected layout."""

    pass


@dataclass(frozen=True)
class PlatformDescriptor:
    """Known cores and variants of a platform and where their sources live."""

    name: str
    architecture: str
    root: Path
    core_paths: Dict[str, Path] = field(default_factory=dict)
    variant_paths: Dict[str, Path] = field(default_factory=dict)

    @property
    def known_cores(self) -> FrozenSet[str]:
        return frozenset(self.core_paths)

    @property
    def known_variants(self) -> FrozenSet[str]:
        return frozenset(self.variant_paths)

    def core_path(self, name: str) -> Path:
        """
        Get the source root of a core.

        Raises:
            KeyError: If the core is not known to this platform
        """
        return self.core_paths[name]

    def variant_path(self, name: str) -> Path:
        """
        Get the source root of a variant.

        Raises:
            KeyError: If the variant is not known to this platform
        """
        return self.variant_paths[name]


def _list_subdirectories(directory: Path) -> Dict[str, Path]:
    if not directory.is_dir():
        return {}
    return {
        child.name.lower(): child
        for child in sorted(directory.iterdir())
        if child.is_dir()
    }


def discover_platform(platform_dir: Path) -> PlatformDescriptor:
    """
    Build a PlatformDescriptor from a platform directory.

    Args:
        platform_dir: Platform root (contains cores/ and variants/)

    Returns:
        PlatformDescriptor for the platform

    Raises:
        PlatformDiscoveryError: If the directory or its cores/ folder is missing
    """
    platform_dir = Path(platform_dir).resolve()
    if not platform_dir.is_dir():
        raise PlatformDiscoveryError(f"Platform directory not found: {platform_dir}")

    cores_dir = platform_dir / "cores"
    if not cores_dir.is_dir():
        raise PlatformDiscoveryError(f"Platform has no cores directory: {cores_dir}")

    platform_data: Dict[str, str] = {}
    platform_txt = platform_dir / "platform.txt"
    if platform_txt.exists():
        platform_data = BoardProperties.parse_properties_file(platform_txt)

    architecture = platform_data.get("architecture", platform_dir.name)
    descriptor = PlatformDescriptor(
        name=platform_data.get("name", platform_dir.name),
        architecture=architecture.upper(),
        root=platform_dir,
        core_paths=_list_subdirectories(cores_dir),
        variant_paths=_list_subdirectories(platform_dir / "variants"),
    )

    logger.info(
        f"Discovered platform {descriptor.name}: "
        f"cores={sorted(descriptor.known_cores)}, "
        f"variants={sorted(descriptor.known_variants)}"
    )
    return descriptor
