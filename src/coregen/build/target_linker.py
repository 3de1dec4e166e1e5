"""
Linking of core libraries into firmware targets.

Firmware executables may be declared after their core library is created;
a link request for an executable that does not exist yet is deferred and must
be re-issued once the executable is declared.
"""

import logging
from enum import Enum

from .build_graph import BuildGraph, Executable
from .core_library_cache import CoreLibraryArtifact

logger = logging.getLogger(__name__)


class LinkDeferralError(Exception):
    """Raised when the firmware target to link is not declared yet."""

    def __init__(self, firmware_target_name: str):
        super().__init__(f"Firmware target {firmware_target_name} is not declared yet")
        self.firmware_target_name = firmware_target_name


class TargetLinkError(Exception):
    """Raised when a firmware target is already linked to another core library."""

    pass


class LinkStatus(Enum):
    LINKED = "linked"
    ALREADY_LINKED = "already_linked"
    DEFERRED = "deferred"


class TargetLinker:
    """Wires core library artifacts to firmware executables."""

    def __init__(self, graph: BuildGraph):
        self.graph = graph

    def link(self, firmware_target_name: str, artifact: CoreLibraryArtifact) -> LinkStatus:
        """
        Make a firmware target depend on a core library.

        The library's public include directories reach the firmware target
        through the dependency edge.

        Args:
            firmware_target_name: Name of the firmware executable
            artifact: Core library to link

        Returns:
            LinkStatus.LINKED or LinkStatus.ALREADY_LINKED

        Raises:
            LinkDeferralError: If the firmware target is not declared yet
            TargetLinkError: If the target already links a different core library
        """
        if not self.graph.has_target(firmware_target_name):
            raise LinkDeferralError(firmware_target_name)

        firmware = self.graph.get_target(firmware_target_name)
        if not isinstance(firmware, Executable):
            raise TargetLinkError(f"Target {firmware_target_name} is not an executable")

        if firmware.core_library is not None and firmware.core_library != artifact.name:
            raise TargetLinkError(
                f"Firmware target {firmware_target_name} already links "
                f"{firmware.core_library}, cannot also link {artifact.name}"
            )

        added = self.graph.add_dependency(firmware, artifact.target)
        firmware.core_library = artifact.name
        artifact.add_dependent(firmware_target_name)

        if not added:
            return LinkStatus.ALREADY_LINKED

        logger.info(f"Linked {artifact.name} into {firmware_target_name}")
        return LinkStatus.LINKED
