"""
In-memory build graph.

This module models the native build-system entities coregen generates:
static libraries and executables, their sources, include directories,
per-language compile flags, link flags and dependency edges. The graph is
exported as JSON for the native build backend. Flags are written both as the
composed string and as an argument list split the way a shell would.

Visibility follows the usual build-system convention:
    - PUBLIC include directories propagate to every consumer, transitively
    - compile and link flags are PRIVATE to the target that declares them
"""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from .flag_builder import FlagBuilder

logger = logging.getLogger(__name__)


class BuildGraphError(Exception):
    """Raised when a build graph operation is invalid."""

    pass


@dataclass
class Target:
    """Base build target."""

    name: str
    sources: List[Path] = field(default_factory=list)
    public_include_dirs: List[Path] = field(default_factory=list)
    compile_flags: Dict[str, str] = field(default_factory=dict)
    link_flags: str = ""
    dependencies: List[str] = field(default_factory=list)

    kind = "target"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "kind": self.kind,
            "sources": [str(path) for path in self.sources],
            "public_include_dirs": [str(path) for path in self.public_include_dirs],
            "compile_flags": dict(self.compile_flags),
            "link_flags": self.link_flags,
            "compile_args": {
                scope: FlagBuilder.parse_flag_string(flags)
                for scope, flags in self.compile_flags.items()
            },
            "link_args": FlagBuilder.parse_flag_string(self.link_flags),
            "dependencies": list(self.dependencies),
        }


@dataclass
class StaticLibrary(Target):
    """A static library target (e.g., the core library)."""

    kind = "static_library"


@dataclass
class Executable(Target):
    """
    A firmware executable target.

    The board id is an explicit attribute of the target; ``core_library``
    names the single core library it links once linking happened.
    """

    board_id: Optional[str] = None
    core_library: Optional[str] = None

    kind = "executable"

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["board_id"] = self.board_id
        data["core_library"] = self.core_library
        return data


class BuildGraph:
    """
    Registry of build targets and the primitives to wire them together.

    Example usage:
        graph = BuildGraph()
        lib = graph.create_static_library("arduino_standard_core_lib", sources)
        graph.add_public_include_dir(lib, core_dir)
        graph.set_compile_flags(lib, "CXX", "-Os -mmcu=atmega328p")
        app = graph.create_executable("blink", board_id="uno")
        graph.add_dependency(app, lib)
    """

    def __init__(self) -> None:
        self._targets: Dict[str, Target] = {}

    def __contains__(self, name: str) -> bool:
        return name in self._targets

    def __len__(self) -> int:
        return len(self._targets)

    @property
    def targets(self) -> List[Target]:
        return list(self._targets.values())

    def has_target(self, name: str) -> bool:
        return name in self._targets

    def get_target(self, name: str) -> Target:
        """
        Get a declared target by name.

        Raises:
            BuildGraphError: If no such target exists
        """
        try:
            return self._targets[name]
        except KeyError:
            raise BuildGraphError(f"Unknown target: {name}") from None

    def create_static_library(self, name: str, sources: Sequence[Path]) -> StaticLibrary:
        """
        Declare a static library.

        Raises:
            BuildGraphError: If a target with this name already exists
        """
        if name in self._targets:
            raise BuildGraphError(f"Target already exists: {name}")
        library = StaticLibrary(name=name, sources=list(sources))
        self._targets[name] = library
        logger.debug(f"Declared static library {name} ({len(library.sources)} sources)")
        return library

    def create_executable(
        self,
        name: str,
        sources: Sequence[Path] = (),
        board_id: Optional[str] = None,
    ) -> Executable:
        """
        Declare an executable, or return the existing one of the same name.

        Raises:
            BuildGraphError: If the name is taken by a non-executable target
        """
        existing = self._targets.get(name)
        if existing is not None:
            if not isinstance(existing, Executable):
                raise BuildGraphError(f"Target {name} exists and is not an executable")
            return existing

        executable = Executable(name=name, sources=list(sources), board_id=board_id)
        self._targets[name] = executable
        logger.debug(f"Declared executable {name} for board {board_id}")
        return executable

    def add_public_include_dir(self, target: Target, path: Path) -> None:
        self._check_owned(target)
        if path not in target.public_include_dirs:
            target.public_include_dirs.append(path)

    def set_compile_flags(self, target: Target, language_scope: str, flags: str) -> None:
        self._check_owned(target)
        target.compile_flags[language_scope] = flags

    def set_link_flags(self, target: Target, flags: str) -> None:
        self._check_owned(target)
        target.link_flags = flags

    def add_dependency(self, consumer: Target, provider: Target) -> bool:
        """
        Make ``consumer`` depend on ``provider``.

        Returns:
            True if a new edge was added, False if it already existed
        """
        self._check_owned(consumer)
        self._check_owned(provider)
        if consumer.name == provider.name:
            raise BuildGraphError(f"Target {consumer.name} cannot depend on itself")
        if provider.name in consumer.dependencies:
            return False
        consumer.dependencies.append(provider.name)
        return True

    def interface_include_dirs(self, target: Target) -> List[Path]:
        """
        Resolve the include directories a target sees through its dependencies.

        Public include directories propagate transitively, in dependency order,
        without duplicates.
        """
        result: List[Path] = []
        visited = set()

        def visit(name: str) -> None:
            if name in visited:
                return
            visited.add(name)
            dependency = self.get_target(name)
            for path in dependency.public_include_dirs:
                if path not in result:
                    result.append(path)
            for child in dependency.dependencies:
                visit(child)

        for name in target.dependencies:
            visit(name)
        return result

    def to_dict(self) -> Dict[str, Any]:
        targets = []
        for target in self._targets.values():
            data = target.to_dict()
            data["interface_include_dirs"] = [
                str(path) for path in self.interface_include_dirs(target)
            ]
            targets.append(data)
        return {"targets": targets}

    def write_json(self, path: Path) -> Path:
        """Write the graph to a JSON file and return its path."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(self.to_dict(), f, indent=2)
        return path

    def _check_owned(self, target: Target) -> None:
        if self._targets.get(target.name) is not target:
            raise BuildGraphError(f"Target {target.name} is not part of this graph")
