"""
Board core/variant resolution.

Boards declare the core and variant they build against in boards.txt:

    uno.build.core=arduino
    uno.build.variant=standard

A board whose core or variant is not shipped by the platform cannot produce a
usable core library, so resolution fails the whole generation run instead of
guessing a default.
"""

from dataclasses import dataclass
from typing import Optional, Protocol, Tuple

from ..config.platform_descriptor import PlatformDescriptor


class ConfigurationError(Exception):
    """Raised when a board declares an unknown core or variant."""

    def __init__(self, message: str, board_id: str, property_name: str, value: Optional[str]):
        super().__init__(message)
        self.board_id = board_id
        self.property_name = property_name
        self.value = value


class PropertySource(Protocol):
    def get_board_property(self, board_id: str, key: str) -> Optional[str]: ...


@dataclass(frozen=True)
class BoardConfiguration:
    """A board with its validated core and variant."""

    board_id: str
    core: str
    variant: str


class BoardResolver:
    """Looks up and validates a board's core and variant."""

    CORE_PROPERTY = "build.core"
    VARIANT_PROPERTY = "build.variant"

    def __init__(self, properties: PropertySource, descriptor: PlatformDescriptor):
        self.properties = properties
        self.descriptor = descriptor

    def resolve(self, board_id: str) -> Tuple[str, str]:
        """
        Resolve a board's core and variant.

        Args:
            board_id: Board identifier (e.g., "uno")

        Returns:
            (core, variant), both lower-cased

        Raises:
            ConfigurationError: If either is missing or unknown to the platform
        """
        core = self._get_validated(
            board_id, self.CORE_PROPERTY, self.descriptor.known_cores, "core"
        )
        variant = self._get_validated(
            board_id, self.VARIANT_PROPERTY, self.descriptor.known_variants, "variant"
        )
        return core, variant

    def resolve_configuration(self, board_id: str) -> BoardConfiguration:
        core, variant = self.resolve(board_id)
        return BoardConfiguration(board_id=board_id, core=core, variant=variant)

    def _get_validated(self, board_id, property_name, known, label) -> str:
        value = self.properties.get_board_property(board_id, property_name)
        if not value:
            raise ConfigurationError(
                f"Board \"{board_id}\" does not declare a {label} ({property_name})",
                board_id,
                property_name,
                value,
            )

        # "vendor:core" references a core of another platform by name
        value = value.split(":")[-1].strip().lower()
        if value not in known:
            raise ConfigurationError(
                f"Unknown board {label} \"{value}\" for the {board_id} board",
                board_id,
                property_name,
                value,
            )
        return value
