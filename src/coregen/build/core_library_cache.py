"""
Core library registry.

Every Arduino application links a static library built from its board's core
and variant sources. Boards that share a (core, variant) pair, such as an
original board and its clones, share one library: the registry maps each pair
to the library created for it and hands the same artifact back on every later
request.

Graph construction is single-threaded, so the lookup and the create-and-register
step need no locking.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Tuple

from ..config.host_context import HostContext
from ..config.platform_descriptor import PlatformDescriptor
from .board_resolver import BoardResolver
from .build_graph import BuildGraph, StaticLibrary
from .flag_builder import FlagBuilder, Language
from .source_scanner import DiscoveryError, SourceScanner

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CoreLibraryKey:
    """Identity of a core library: the resolved (core, variant) pair."""

    core: str
    variant: str

    @property
    def target_name(self) -> str:
        return self.qualified_name("")

    def qualified_name(self, qualifier: str) -> str:
        """Target name with a qualifier between the variant and the suffix."""
        parts = [self.core, self.variant, qualifier, "core_lib"]
        name = "_".join(part for part in parts if part)
        return name.replace(".", "_").replace("-", "_").lower()

    def __str__(self) -> str:
        return f"({self.core}, {self.variant})"


@dataclass
class CoreLibraryArtifact:
    """A core library target and the firmware targets linked to it."""

    key: CoreLibraryKey
    target: StaticLibrary
    dependents: List[str] = field(default_factory=list)

    @property
    def name(self) -> str:
        return self.target.name

    @property
    def sources(self) -> Tuple[Path, ...]:
        return tuple(self.target.sources)

    @property
    def include_dirs(self) -> Tuple[Path, ...]:
        return tuple(self.target.public_include_dirs)

    @property
    def compile_flags(self) -> Dict[str, str]:
        return dict(self.target.compile_flags)

    @property
    def link_flags(self) -> str:
        return self.target.link_flags

    def add_dependent(self, firmware_target_name: str) -> None:
        if firmware_target_name not in self.dependents:
            self.dependents.append(firmware_target_name)


class CoreLibraryCache:
    """
    Get-or-create registry of core library artifacts.

    Example usage:
        cache = CoreLibraryCache(graph, resolver, scanner, flag_builder,
                                 descriptor, HostContext.detect())
        artifact = cache.get_or_create("uno")
        assert cache.get_or_create("uno_clone") is artifact  # same core/variant

    Several caches may share one graph (one per platform and override set).
    When a library name is already taken by another cache, a cache with a
    qualifier inserts it into the name: ``arduino_standard_<qualifier>_core_lib``.
    """

    def __init__(
        self,
        graph: BuildGraph,
        resolver: BoardResolver,
        scanner: SourceScanner,
        flag_builder: FlagBuilder,
        descriptor: PlatformDescriptor,
        host_context: HostContext,
        qualifier: str = "",
    ):
        self.graph = graph
        self.resolver = resolver
        self.scanner = scanner
        self.flag_builder = flag_builder
        self.descriptor = descriptor
        self.host_context = host_context
        self.qualifier = qualifier
        self._artifacts: Dict[CoreLibraryKey, CoreLibraryArtifact] = {}

    def __contains__(self, key: CoreLibraryKey) -> bool:
        return key in self._artifacts

    def __len__(self) -> int:
        return len(self._artifacts)

    def __iter__(self) -> Iterator[CoreLibraryArtifact]:
        return iter(list(self._artifacts.values()))

    def keys(self) -> List[CoreLibraryKey]:
        return list(self._artifacts)

    def get(self, key: CoreLibraryKey) -> Optional[CoreLibraryArtifact]:
        return self._artifacts.get(key)

    def get_or_create(self, board_id: str) -> CoreLibraryArtifact:
        """
        Get the core library for a board, creating it on first request.

        Args:
            board_id: Board identifier

        Returns:
            The artifact registered for the board's (core, variant)

        Raises:
            ConfigurationError: If the board's core or variant is unknown
            DiscoveryError: If the core/variant roots are missing or empty
        """
        core, variant = self.resolver.resolve(board_id)
        key = CoreLibraryKey(core, variant)

        artifact = self._artifacts.get(key)
        if artifact is not None:
            logger.debug(f"Reusing core library {artifact.name} for board {board_id}")
            return artifact

        artifact = self._create(board_id, key)
        self._artifacts[key] = artifact
        return artifact

    def _create(self, board_id: str, key: CoreLibraryKey) -> CoreLibraryArtifact:
        core_dir = self.descriptor.core_path(key.core)
        variant_dir = self.descriptor.variant_path(key.variant)

        # Everything that can fail runs before the graph is touched
        sources = self.scanner.discover_many([core_dir, variant_dir], self.host_context)
        if not sources:
            raise DiscoveryError(
                f"No source files found for core library {key} of board {board_id} "
                f"(searched {core_dir} and {variant_dir})"
            )

        compile_flags = {
            language.scope: self.flag_builder.compose(board_id, language)
            for language in Language
        }
        link_flags = self.flag_builder.compose_link(board_id)

        name = key.target_name
        if self.qualifier and name in self.graph:
            name = key.qualified_name(self.qualifier)

        library = self.graph.create_static_library(name, sources)
        self.graph.add_public_include_dir(library, core_dir)
        self.graph.add_public_include_dir(library, variant_dir)
        for scope, flags in compile_flags.items():
            self.graph.set_compile_flags(library, scope, flags)
        self.graph.set_link_flags(library, link_flags)

        logger.info(
            f"Created core library {library.name} for board {board_id} "
            f"({len(sources)} sources)"
        )
        return CoreLibraryArtifact(key=key, target=library)
