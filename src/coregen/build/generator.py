"""
Core library generation entry point.

``CoreLibraryGenerator.ensure_core_library_linked`` is the single call an
application needs: it creates (or reuses) the core library for a board and
links it into the application's firmware target.
"""

import logging
from typing import Dict, List, Optional, Tuple

from ..config.board_properties import BoardProperties
from ..config.host_context import HostContext
from ..config.platform_descriptor import PlatformDescriptor
from .board_resolver import BoardResolver, ConfigurationError
from .build_graph import BuildGraph, Executable
from .core_library_cache import CoreLibraryArtifact, CoreLibraryCache
from .flag_builder import FlagBuilder
from .source_scanner import SourceScanner
from .target_linker import LinkDeferralError, LinkStatus, TargetLinker

logger = logging.getLogger(__name__)


class CoreLibraryGenerator:
    """
    Creates core libraries and links them into firmware targets.

    Example usage:
        generator = CoreLibraryGenerator.for_platform(graph, properties, descriptor)
        graph.create_executable("blink", sources, board_id="uno")
        generator.ensure_core_library_linked("blink", "uno")
    """

    def __init__(
        self,
        graph: BuildGraph,
        cache: CoreLibraryCache,
        linker: TargetLinker,
    ):
        self.graph = graph
        self.cache = cache
        self.linker = linker
        self._pending: Dict[Tuple[str, str], None] = {}

    @classmethod
    def for_platform(
        cls,
        graph: BuildGraph,
        properties: BoardProperties,
        descriptor: PlatformDescriptor,
        host_context: Optional[HostContext] = None,
        qualifier: str = "",
    ) -> "CoreLibraryGenerator":
        """Wire the default resolver, scanner, flag builder, cache and linker."""
        if host_context is None:
            host_context = HostContext.detect()

        cache = CoreLibraryCache(
            graph=graph,
            resolver=BoardResolver(properties, descriptor),
            scanner=SourceScanner(),
            flag_builder=FlagBuilder(properties, descriptor.architecture),
            descriptor=descriptor,
            host_context=host_context,
            qualifier=qualifier,
        )
        return cls(graph, cache, TargetLinker(graph))

    @property
    def pending_links(self) -> List[Tuple[str, str]]:
        """(firmware_target_id, board_id) requests waiting for their target."""
        return list(self._pending)

    def ensure_core_library_linked(
        self, firmware_target_id: str, board_id: str
    ) -> LinkStatus:
        """
        Ensure the board's core library exists and is linked into the target.

        Args:
            firmware_target_id: Name of the firmware executable
            board_id: Board the firmware is built for

        Returns:
            LinkStatus.LINKED, ALREADY_LINKED, or DEFERRED if the target is
            not declared yet (the request is kept in pending_links)

        Raises:
            ConfigurationError: If the board is invalid, or the target was
                declared for a different board
            DiscoveryError: If the core library has no sources
            TargetLinkError: If the target already links another core library
        """
        self._check_board_matches(firmware_target_id, board_id)

        artifact = self.cache.get_or_create(board_id)

        try:
            status = self.linker.link(firmware_target_id, artifact)
        except LinkDeferralError:
            logger.warning(
                f"Deferring link of {artifact.name} into {firmware_target_id}: "
                "target not declared yet"
            )
            self._pending[(firmware_target_id, board_id)] = None
            return LinkStatus.DEFERRED

        firmware = self.graph.get_target(firmware_target_id)
        if isinstance(firmware, Executable) and firmware.board_id is None:
            firmware.board_id = board_id

        self._pending.pop((firmware_target_id, board_id), None)
        return status

    def retry_pending(self) -> Dict[Tuple[str, str], LinkStatus]:
        """Re-issue every deferred link request."""
        return {
            request: self.ensure_core_library_linked(*request)
            for request in self.pending_links
        }

    def core_library_for(self, board_id: str) -> CoreLibraryArtifact:
        return self.cache.get_or_create(board_id)

    def _check_board_matches(self, firmware_target_id: str, board_id: str) -> None:
        if not self.graph.has_target(firmware_target_id):
            return
        target = self.graph.get_target(firmware_target_id)
        if isinstance(target, Executable) and target.board_id not in (None, board_id):
            raise ConfigurationError(
                f"Firmware target {firmware_target_id} is declared for board "
                f"\"{target.board_id}\", not \"{board_id}\"",
                board_id,
                "board",
                target.board_id,
            )
