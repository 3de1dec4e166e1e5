"""
Board property loader for Arduino platform definitions.

This module reads the two hierarchical key/value files that describe an
Arduino platform and answers property lookups for a specific board:

- boards.txt: board-specific definitions (``uno.build.core=arduino``)
- platform.txt: platform-wide defaults (``compiler.c.flags=-c -g -Os ...``)

A board value overrides the platform default for the same key, and values may
reference other properties through ``{placeholder}`` syntax.
"""

import logging
import re
from pathlib import Path
from typing import Dict, List, Optional

logger = logging.getLogger(__name__)

_PLACEHOLDER = re.compile(r"\{([A-Za-z0-9_.\-]+)\}")


class BoardPropertiesError(Exception):
    """Exception raised when property files cannot be loaded."""

    pass


class BoardProperties:
    """
    Layered property lookup over boards.txt and platform.txt.

    Example boards.txt entry:
        uno.name=Arduino Uno
        uno.build.mcu=atmega328p
        uno.build.core=arduino
        uno.build.variant=standard

    Usage:
        properties = BoardProperties.from_platform_dir(Path("hardware/arduino/avr"))
        properties.get_board_property("uno", "build.core")  # -> "arduino"
        properties.get_board_property("uno", "compiler.c.flags")  # platform default
    """

    def __init__(
        self,
        board_data: Dict[str, str],
        platform_data: Optional[Dict[str, str]] = None,
        architecture: str = "",
        overrides: Optional[Dict[str, Dict[str, str]]] = None,
    ):
        """
        Initialize property lookup.

        Args:
            board_data: Raw boards.txt entries (fully qualified keys)
            platform_data: Raw platform.txt entries
            architecture: Platform architecture, exposed as ``build.arch``
            overrides: Per-board property overrides (e.g., board_build.* keys)
        """
        self.board_data = board_data
        self.platform_data = platform_data or {}
        self.architecture = architecture
        self.overrides = overrides or {}

    @classmethod
    def from_platform_dir(
        cls, platform_dir: Path, architecture: Optional[str] = None
    ) -> "BoardProperties":
        """
        Load properties from a platform directory.

        Args:
            platform_dir: Directory containing boards.txt (and optionally platform.txt)
            architecture: Platform architecture (defaults to the directory name)

        Returns:
            BoardProperties instance

        Raises:
            BoardPropertiesError: If boards.txt is missing or unreadable
        """
        platform_dir = Path(platform_dir)
        boards_txt = platform_dir / "boards.txt"
        if not boards_txt.exists():
            raise BoardPropertiesError(f"boards.txt not found: {boards_txt}")

        board_data = cls.parse_properties_file(boards_txt)

        platform_txt = platform_dir / "platform.txt"
        platform_data: Dict[str, str] = {}
        if platform_txt.exists():
            platform_data = cls.parse_properties_file(platform_txt)

        if architecture is None:
            architecture = platform_data.get("architecture", platform_dir.name)

        logger.debug(
            f"Loaded {len(board_data)} board properties and "
            f"{len(platform_data)} platform properties from {platform_dir}"
        )
        return cls(board_data, platform_data, architecture=architecture)

    @staticmethod
    def parse_properties_file(path: Path) -> Dict[str, str]:
        """
        Parse a key=value properties file.

        Args:
            path: Path to boards.txt or platform.txt

        Returns:
            Dictionary of keys to values, in file order

        Raises:
            BoardPropertiesError: If the file cannot be read
        """
        data: Dict[str, str] = {}
        try:
            with open(path, "r", encoding="utf-8") as f:
                for line in f:
                    line = line.strip()

                    # Skip comments and empty lines
                    if not line or line.startswith("#"):
                        continue
                    if "=" not in line:
                        continue

                    key, value = line.split("=", 1)
                    data[key.strip()] = value.strip()
        except OSError as e:
            raise BoardPropertiesError(f"Failed to parse {path}: {e}") from e

        return data

    def with_overrides(
        self, board_id: str, overrides: Dict[str, str]
    ) -> "BoardProperties":
        """
        Layer overrides (e.g., from platformio.ini) on top of a board's values.

        The parsed files are shared, the overrides are not: this instance is
        left unchanged and a new view is returned.
        """
        layered = {board: dict(values) for board, values in self.overrides.items()}
        if overrides:
            layered.setdefault(board_id, {}).update(overrides)
        return BoardProperties(
            self.board_data, self.platform_data, self.architecture, layered
        )

    def board_ids(self) -> List[str]:
        """
        List boards declared in boards.txt.

        A board is any id with a ``<id>.name`` entry. Menu entries
        (``menu.cpu=Processor``) are not boards.

        Returns:
            Board ids in file order
        """
        ids = []
        for key in self.board_data:
            board_id, _, field = key.partition(".")
            if field == "name" and board_id != "menu" and board_id not in ids:
                ids.append(board_id)
        return ids

    def has_board(self, board_id: str) -> bool:
        return f"{board_id}.name" in self.board_data

    def get_board_property(self, board_id: str, key: str) -> Optional[str]:
        """
        Get a property value for a board, with placeholders expanded.

        Lookup order: overrides, ``{board_id}.{key}`` in boards.txt,
        ``{key}`` in platform.txt.

        Args:
            board_id: Board identifier (e.g., "uno")
            key: Property key (e.g., "build.core", "compiler.cpp.flags")

        Returns:
            Expanded value, or None if the property is not defined
        """
        raw = self._lookup_raw(board_id, key)
        if raw is None:
            return None
        return self._expand(board_id, raw, {key})

    def _lookup_raw(self, board_id: str, key: str) -> Optional[str]:
        board_overrides = self.overrides.get(board_id, {})
        if key in board_overrides:
            return board_overrides[key]

        board_key = f"{board_id}.{key}"
        if board_key in self.board_data:
            return self.board_data[board_key]

        if key in self.platform_data:
            return self.platform_data[key]

        if key == "build.arch" and self.architecture:
            return self.architecture.upper()

        return None

    def _expand(self, board_id: str, value: str, seen: set) -> str:
        def replace(match: "re.Match[str]") -> str:
            name = match.group(1)
            if name in seen:
                logger.debug(f"Circular placeholder {{{name}}} for board {board_id}")
                return ""
            raw = self._lookup_raw(board_id, name)
            if raw is None:
                logger.debug(f"Unresolved placeholder {{{name}}} for board {board_id}")
                return ""
            return self._expand(board_id, raw, seen | {name})

        return _PLACEHOLDER.sub(replace, value)

    def __repr__(self) -> str:
        return (
            f"BoardProperties(boards={len(self.board_ids())}, "
            f"architecture='{self.architecture}')"
        )
