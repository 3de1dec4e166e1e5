"""
Generation orchestration for coregen projects.

This module drives a whole generation run, from parsing platformio.ini to
writing the build graph:
- Configuration parsing (platformio.ini, boards.txt, platform.txt)
- Platform lookup or download
- Firmware target declaration
- Core library creation and linking
- Build graph export
"""

import hashlib
import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple

from ..config import (
    BoardProperties,
    BoardPropertiesError,
    HostContext,
    PlatformDescriptor,
    PlatformDiscoveryError,
    ProjectConfig,
    ProjectConfigError,
    discover_platform,
)
from ..packages import Cache, PlatformPackage
from ..packages.downloader import ChecksumError, DownloadError, ExtractionError
from ..packages.platform_package import PlatformPackageError
from .board_resolver import ConfigurationError
from .build_graph import BuildGraph, BuildGraphError
from .generator import CoreLibraryGenerator
from .source_scanner import DiscoveryError, SourceScanner
from .target_linker import LinkStatus, TargetLinkError

logger = logging.getLogger(__name__)

# (platform dir, board id, overrides); board id is None without overrides
GeneratorKey = Tuple[Path, Optional[str], Tuple[Tuple[str, str], ...]]


@dataclass
class GenerationResult:
    """Result of a complete generation run."""

    success: bool
    graph_path: Optional[Path]
    link_status: Dict[str, LinkStatus] = field(default_factory=dict)
    core_libraries: List[str] = field(default_factory=list)
    generation_time: float = 0.0
    message: str = ""


class GenerationError(Exception):
    """Exception raised for generation orchestration errors."""

    pass


class GenerationOrchestrator:
    """
    Orchestrates build graph generation for a project.

    Phases:
    1. Parse platformio.ini
    2. Select environments
    3. Locate (or download) each environment's platform
    4. Declare firmware targets and link their core libraries
    5. Write the build graph

    Example usage:
        orchestrator = GenerationOrchestrator()
        result = orchestrator.generate(project_dir=Path("."))
        if result.success:
            print(f"Build graph: {result.graph_path}")
    """

    def __init__(
        self,
        cache: Optional[Cache] = None,
        host_context: Optional[HostContext] = None,
        platform_package: Optional[PlatformPackage] = None,
        verbose: bool = False,
    ):
        """
        Initialize generation orchestrator.

        Args:
            cache: Cache instance (defaults to the project's .coregen/)
            host_context: Host identity (detected when omitted)
            platform_package: Platform resolver (created from the cache when omitted)
            verbose: Enable verbose output
        """
        self.cache = cache
        self.host_context = host_context
        self.platform_package = platform_package
        self.verbose = verbose
        self.scanner = SourceScanner()

    def generate(
        self,
        project_dir: Path,
        env_names: Optional[Sequence[str]] = None,
        clean: bool = False,
        verbose: Optional[bool] = None,
    ) -> GenerationResult:
        """
        Run a complete generation.

        Args:
            project_dir: Project root directory containing platformio.ini
            env_names: Environments to generate (defaults to all)
            clean: Remove previously generated files first
            verbose: Override verbose setting

        Returns:
            GenerationResult; a fatal error yields success=False and no graph
        """
        start_time = time.time()
        verbose_mode = verbose if verbose is not None else self.verbose

        try:
            project_dir = Path(project_dir).resolve()
            if self.cache is None:
                self.cache = Cache(project_dir)
            if self.platform_package is None:
                self.platform_package = PlatformPackage(self.cache, show_progress=verbose_mode)
            if self.host_context is None:
                self.host_context = HostContext.detect()

            if verbose_mode:
                print("[1/4] Parsing platformio.ini...")
            config = ProjectConfig(project_dir / "platformio.ini")

            envs = list(env_names) if env_names else config.get_environments()
            if not envs:
                raise GenerationError("No environments found in platformio.ini")

            if clean:
                self.cache.clean_build()

            graph = BuildGraph()
            platforms: Dict[Path, Tuple[PlatformDescriptor, BoardProperties]] = {}
            generators: Dict[GeneratorKey, CoreLibraryGenerator] = {}
            link_status: Dict[str, LinkStatus] = {}

            for env_name in envs:
                if verbose_mode:
                    print(f"[2/4] Preparing environment {env_name}...")
                env_config = config.get_env_config(env_name)
                board_id = env_config["board"]

                platform_dir = self.platform_package.ensure_platform(
                    env_config["platform"], base_dir=project_dir
                )
                if platform_dir not in platforms:
                    platforms[platform_dir] = self._load_platform(platform_dir)

                # Overrides belong to one environment; boards that carry them
                # get a generator (and core libraries) of their own
                overrides = config.get_board_overrides(env_name)
                generator_key = self._generator_key(platform_dir, board_id, overrides)
                generator = generators.get(generator_key)
                if generator is None:
                    descriptor, properties = platforms[platform_dir]
                    if overrides:
                        properties = properties.with_overrides(board_id, overrides)
                    generator = CoreLibraryGenerator.for_platform(
                        graph,
                        properties,
                        descriptor,
                        self.host_context,
                        qualifier=self._qualifier(generator_key),
                    )
                    generators[generator_key] = generator

                if verbose_mode:
                    print(f"[3/4] Linking core library for {env_name} (board {board_id})...")
                app_sources = self.scanner.discover_application(
                    config.get_src_dir(env_name), self.cache.get_build_dir(env_name)
                )
                graph.create_executable(env_name, app_sources, board_id=board_id)
                link_status[env_name] = generator.ensure_core_library_linked(env_name, board_id)

                if verbose_mode:
                    library = generator.core_library_for(board_id)
                    print(f"      {env_name} -> {library.name} ({link_status[env_name].value})")

            for generator in generators.values():
                for (target, _board), status in generator.retry_pending().items():
                    link_status[target] = status

            deferred = [name for name, status in link_status.items() if status is LinkStatus.DEFERRED]
            if deferred:
                raise GenerationError(
                    f"Firmware targets were never declared: {', '.join(deferred)}"
                )

            if verbose_mode:
                print("[4/4] Writing build graph...")
            graph_path = graph.write_json(self.cache.graph_path)

            core_libraries = [
                artifact.name
                for generator in generators.values()
                for artifact in generator.cache
            ]
            generation_time = time.time() - start_time
            logger.info(
                f"Generated {len(envs)} firmware target(s) and "
                f"{len(core_libraries)} core library target(s) in {generation_time:.2f}s"
            )

            return GenerationResult(
                success=True,
                graph_path=graph_path,
                link_status=link_status,
                core_libraries=core_libraries,
                generation_time=generation_time,
                message="Generation successful",
            )

        except (
            GenerationError,
            ConfigurationError,
            DiscoveryError,
            TargetLinkError,
            BuildGraphError,
            BoardPropertiesError,
            PlatformDiscoveryError,
            PlatformPackageError,
            ProjectConfigError,
            DownloadError,
            ChecksumError,
            ExtractionError,
        ) as e:
            logger.error(f"Generation failed: {e}")
            return GenerationResult(
                success=False,
                graph_path=None,
                generation_time=time.time() - start_time,
                message=str(e),
            )

    @staticmethod
    def _load_platform(platform_dir: Path) -> Tuple[PlatformDescriptor, BoardProperties]:
        descriptor = discover_platform(platform_dir)
        properties = BoardProperties.from_platform_dir(
            platform_dir, architecture=descriptor.architecture
        )
        return descriptor, properties

    @staticmethod
    def _generator_key(
        platform_dir: Path, board_id: str, overrides: Dict[str, str]
    ) -> GeneratorKey:
        if not overrides:
            return (platform_dir, None, ())
        return (platform_dir, board_id, tuple(sorted(overrides.items())))

    @staticmethod
    def _qualifier(generator_key: GeneratorKey) -> str:
        """Short stable tag naming a platform and override set."""
        platform_dir, board_id, overrides = generator_key
        text = f"{platform_dir.as_posix()}|{board_id}|{overrides}"
        return hashlib.sha256(text.encode("utf-8")).hexdigest()[:8]
