"""
Source file discovery.

This module handles:
- Recursively finding assembly, C and C++ sources under a core or variant root
- Dropping core entry-point files on hosts that supply their own
- Scanning application directories, including .ino sketch preprocessing
"""

import logging
import re
from pathlib import Path
from typing import Iterable, List, Optional, Tuple

from ..config.host_context import HostContext

logger = logging.getLogger(__name__)


class DiscoveryError(Exception):
    """Raised when a source root is missing or yields no sources."""

    pass


class SourceScanner:
    """
    Finds compilable sources in deterministic order.

    Example usage:
        scanner = SourceScanner()
        sources = scanner.discover(Path("cores/arduino"), HostContext.detect())
    """

    SOURCE_EXTENSIONS = frozenset({".S", ".s", ".c", ".cpp", ".cc", ".cxx"})
    ENTRY_POINT_PATTERN = re.compile(r"main\.c.*", re.IGNORECASE)
    EXCLUDED_DIRS = frozenset({".git", ".pio", ".coregen", "build", "__pycache__"})

    def discover(self, root_path: Path, host_context: HostContext) -> Tuple[Path, ...]:
        """
        Recursively discover sources under a core or variant root.

        Args:
            root_path: Directory to scan
            host_context: Host the build graph is generated on

        Returns:
            Source paths sorted lexicographically

        Raises:
            DiscoveryError: If root_path does not exist or is not a directory
        """
        root_path = Path(root_path)
        if not root_path.is_dir():
            raise DiscoveryError(f"Source directory does not exist: {root_path}")

        sources = self._scan(root_path)

        if host_context.excludes_entry_points:
            kept = [path for path in sources if not self.is_entry_point(path)]
            if len(kept) != len(sources):
                logger.debug(
                    f"Excluded {len(sources) - len(kept)} entry point file(s) from "
                    f"{root_path} on {host_context.distribution_id}"
                )
            sources = kept

        return tuple(sources)

    def discover_many(
        self, roots: Iterable[Path], host_context: HostContext
    ) -> Tuple[Path, ...]:
        """Discover several roots, keeping per-root order and dropping duplicates."""
        seen = set()
        combined: List[Path] = []
        for root in roots:
            for path in self.discover(root, host_context):
                if path not in seen:
                    seen.add(path)
                    combined.append(path)
        return tuple(combined)

    def discover_application(
        self, src_dir: Path, build_dir: Optional[Path] = None
    ) -> Tuple[Path, ...]:
        """
        Discover an application's sources.

        Entry points are never excluded here. If the directory holds .ino
        sketches and a build_dir is given, they are combined into a generated
        sketch.cpp which is returned first.

        Raises:
            DiscoveryError: If src_dir does not exist
        """
        src_dir = Path(src_dir)
        if not src_dir.is_dir():
            raise DiscoveryError(f"Application source directory does not exist: {src_dir}")

        sources = self._scan(src_dir)

        ino_files = sorted(src_dir.glob("*.ino"))
        if ino_files and build_dir is not None:
            sources.insert(0, self._preprocess_ino_files(ino_files, Path(build_dir)))

        return tuple(sources)

    @classmethod
    def is_entry_point(cls, path: Path) -> bool:
        return cls.ENTRY_POINT_PATTERN.fullmatch(path.name) is not None

    def _scan(self, root: Path) -> List[Path]:
        found = set()
        for path in root.rglob("*"):
            if not path.is_file() or path.suffix not in self.SOURCE_EXTENSIONS:
                continue
            relative_parts = path.relative_to(root).parts[:-1]
            if any(part in self.EXCLUDED_DIRS for part in relative_parts):
                continue
            found.add(path)
        return sorted(found, key=lambda p: p.as_posix())

    def _preprocess_ino_files(self, ino_files: List[Path], build_dir: Path) -> Path:
        """
        Combine .ino files into one C++ translation unit.

        Sketches are concatenated alphabetically, prefixed with
        ``#include <Arduino.h>`` and forward declarations of their functions.
        """
        output_file = build_dir / "sketch.cpp"
        output_file.parent.mkdir(parents=True, exist_ok=True)

        content = "\n\n".join(path.read_text(encoding="utf-8") for path in ino_files)
        lines = ["#include <Arduino.h>", ""]
        lines.extend(self._extract_function_prototypes(content))
        lines.extend(["", content])

        output_file.write_text("\n".join(lines), encoding="utf-8")
        return output_file

    _FUNCTION_DEFINITION = re.compile(
        r"^([a-zA-Z_][\w\s\*&:<>,]*?)\s+([a-zA-Z_]\w*)\s*\((.*?)\)\s*\{"
    )

    def _extract_function_prototypes(self, content: str) -> List[str]:
        prototypes = []
        in_comment = False

        for line in content.split("\n"):
            stripped = line.strip()
            if "/*" in stripped:
                in_comment = True
            if "*/" in stripped:
                in_comment = False
                continue
            if in_comment or stripped.startswith(("//", "#")):
                continue

            match = self._FUNCTION_DEFINITION.match(stripped)
            if match and match.group(2) not in ("if", "while", "for", "switch"):
                prototypes.append(
                    f"{match.group(1).strip()} {match.group(2)}({match.group(3).strip()});"
                )

        return prototypes
