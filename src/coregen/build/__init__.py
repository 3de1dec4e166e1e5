"""
Build graph generation for coregen.

This module provides:
- Board core/variant resolution
- Core and variant source discovery
- Compiler and linker flag composition
- The core library registry and firmware linking
- Whole-project generation orchestration
"""

from .board_resolver import BoardConfiguration, BoardResolver, ConfigurationError
from .build_graph import BuildGraph, BuildGraphError, Executable, StaticLibrary, Target
from .core_library_cache import CoreLibraryArtifact, CoreLibraryCache, CoreLibraryKey
from .flag_builder import FlagBuilder, Language
from .generator import CoreLibraryGenerator
from .orchestrator import GenerationError, GenerationOrchestrator, GenerationResult
from .source_scanner import DiscoveryError, SourceScanner
from .target_linker import LinkDeferralError, LinkStatus, TargetLinker, TargetLinkError

__all__ = [
    "BoardConfiguration",
    "BoardResolver",
    "ConfigurationError",
    "BuildGraph",
    "BuildGraphError",
    "Executable",
    "StaticLibrary",
    "Target",
    "CoreLibraryArtifact",
    "CoreLibraryCache",
    "CoreLibraryKey",
    "FlagBuilder",
    "Language",
    "CoreLibraryGenerator",
    "GenerationError",
    "GenerationOrchestrator",
    "GenerationResult",
    "DiscoveryError",
    "SourceScanner",
    "LinkDeferralError",
    "LinkStatus",
    "TargetLinker",
    "TargetLinkError",
]
