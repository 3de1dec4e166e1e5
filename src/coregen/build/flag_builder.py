"""Compilation Flag Builder.

This module composes compiler and linker flag strings for a board from the
platform's layered properties.

Design:
    - One flag string per language scope (assembler, C, C++) plus the linker
    - Property layering and placeholder expansion belong to the property
      source; this module only asks for the right keys
    - Adds the board defines every Arduino core expects (F_CPU, ARDUINO, ...)
"""

import re
import shlex
from enum import Enum
from typing import List, Optional, Protocol

# A shell-like word: unquoted runs and quoted spans, with stray quotes kept
_WORD = re.compile(r"""(?:[^\s"']+|"[^"]*"|'[^']*'|["'])+""")


class PropertySource(Protocol):
    def get_board_property(self, board_id: str, key: str) -> Optional[str]: ...


class Language(Enum):
    """Compilation unit kinds, with their property token and build scope."""

    ASM = ("S", "ASM")
    C = ("c", "C")
    CXX = ("cpp", "CXX")

    @property
    def property_token(self) -> str:
        return self.value[0]

    @property
    def scope(self) -> str:
        return self.value[1]


class FlagBuilder:
    """Builds compiler and linker flag strings for a board.

    Example:
        builder = FlagBuilder(properties, architecture="AVR")
        builder.compose("uno", Language.CXX)
        # '-c -g -Os ... -mmcu=atmega328p -DF_CPU=16000000L -DARDUINO=10819 ...'
    """

    DEFAULT_IDE_VERSION = "10819"

    def __init__(self, properties: PropertySource, architecture: str):
        """Initialize flag builder.

        Args:
            properties: Layered board property source
            architecture: Platform architecture (e.g., "AVR")
        """
        self.properties = properties
        self.architecture = architecture.upper()

    @staticmethod
    def parse_flag_string(flag_string: str) -> List[str]:
        """Parse a flag string that may contain quoted values.

        Example:
            >>> FlagBuilder.parse_flag_string('-DFOO="bar baz" -DTEST')
            ['-DFOO=bar baz', '-DTEST']
        """
        try:
            return shlex.split(flag_string)
        except ValueError:
            return flag_string.split()

    def compose(self, board_id: str, language: Language) -> str:
        """Compose the compile flags of one language scope.

        Args:
            board_id: Board identifier
            language: Language scope

        Returns:
            Space-separated flag string
        """
        token = language.property_token
        parts = [
            self._get(board_id, f"compiler.{token}.flags"),
            self._get(board_id, f"compiler.{token}.extra_flags"),
            self._mcu_flag(board_id),
        ]
        parts.extend(self.board_defines(board_id))
        parts.append(self._get(board_id, "build.extra_flags"))
        return self._join(parts)

    def compose_link(self, board_id: str) -> str:
        """Compose the linker flags for a board."""
        return self._join([
            self._get(board_id, "compiler.c.elf.flags"),
            self._mcu_flag(board_id),
            self._get(board_id, "compiler.c.elf.extra_flags"),
            self._get(board_id, "compiler.ldflags"),
        ])

    def board_defines(self, board_id: str) -> List[str]:
        """Get the preprocessor defines identifying the board and platform."""
        defines = []

        f_cpu = self._get(board_id, "build.f_cpu")
        if f_cpu:
            defines.append(f"-DF_CPU={f_cpu}")

        ide_version = self._get(board_id, "runtime.ide.version") or self.DEFAULT_IDE_VERSION
        defines.append(f"-DARDUINO={ide_version}")

        board = self._get(board_id, "build.board")
        if board:
            defines.append(f"-DARDUINO_{board}")

        if self.architecture:
            defines.append(f"-DARDUINO_ARCH_{self.architecture}")

        return defines

    def _mcu_flag(self, board_id: str) -> str:
        mcu = self._get(board_id, "build.mcu")
        return f"-mmcu={mcu}" if mcu else ""

    def _get(self, board_id: str, key: str) -> str:
        return self.properties.get_board_property(board_id, key) or ""

    @staticmethod
    def _join(parts: List[str]) -> str:
        """Join parts with single spaces, leaving quoted values untouched."""
        return " ".join(word for part in parts if part for word in _WORD.findall(part))
