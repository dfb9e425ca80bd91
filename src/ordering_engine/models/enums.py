"""Enumerations and ordering constants for the ordering engine."""

from enum import Enum, IntEnum, auto


class ItemKind(IntEnum):
    """Discriminator of a UnifiedItem."""

    EXERCISE = auto()
    SUPERSET = auto()


class Direction(Enum):
    """Single-step move direction within a unified view.

    Values match the strings the UI layer sends, so ``Direction("up")`` works.
    """

    UP = "up"
    DOWN = "down"

    @property
    def offset(self) -> int:
        return -1 if self is Direction.UP else 1


# ---------------------------------------------------------------------------
# Ordering constants
# ---------------------------------------------------------------------------
# A superset is a set of at least two exercises performed back-to-back.
MIN_SUPERSET_MEMBERS = 2

# Display numbers are human-facing labels ("Superset 1", "Superset 2", ...).
FIRST_DISPLAY_NUMBER = 1

# Positions are re-assigned from this value on every write.
FIRST_POSITION = 0
