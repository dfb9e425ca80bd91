"""Exercise record — one exercise instance placed in a training session."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Hashable, Mapping


@dataclass(frozen=True)
class ExerciseRecord:
    """A single exercise as stored in the flat plan collection.

    ``section_id`` is the exercise's home section ("part"). The
    ``display_section_id`` is where it is rendered; it defaults to the home
    section and only differs while the exercise belongs to a superset hosted
    elsewhere. ``payload`` carries the training fields (sets, reps, rest,
    notes, ...) untouched.
    """

    id: Hashable
    session_id: Hashable
    section_id: str
    position: int = 0
    superset_id: Hashable | None = None
    display_section_id: str | None = None
    payload: Mapping[str, Any] = field(default_factory=dict, compare=False)

    def __post_init__(self) -> None:
        if self.display_section_id is None:
            object.__setattr__(self, "display_section_id", self.section_id)

    @property
    def is_standalone(self) -> bool:
        return self.superset_id is None

    @property
    def scope_section_id(self) -> str:
        """Section whose position sequence this record takes part in."""
        if self.is_standalone:
            return self.section_id
        return self.display_section_id  # type: ignore[return-value]


def id_sort_key(value: Hashable) -> tuple[int, Any]:
    """Total ordering over opaque ids: numbers first, then everything as text."""
    if isinstance(value, bool):
        return (1, str(value))
    if isinstance(value, (int, float)):
        return (0, value)
    return (1, str(value))


def record_sort_key(record: ExerciseRecord) -> tuple[int, tuple[int, Any]]:
    """Position ascending, ties broken by id ascending."""
    return (record.position, id_sort_key(record.id))
