"""Superset bookkeeping and the derived superset group aggregate."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Hashable

from ordering_engine.models.enums import MIN_SUPERSET_MEMBERS
from ordering_engine.models.exercise import ExerciseRecord


@dataclass(frozen=True)
class SupersetInfo:
    """Stored bookkeeping for one live superset.

    Membership is never stored here; it is always read back from the
    exercise records sharing ``id`` as their ``superset_id``.
    """

    id: Hashable
    session_id: Hashable
    host_section_id: str
    display_number: int


@dataclass(frozen=True)
class SupersetGroup:
    """A superset as rendered: bookkeeping plus its ordered members.

    Members are ordered by position, ties by id. The group's position for
    ordering against other items is the lowest member position.
    """

    id: Hashable
    session_id: Hashable
    host_section_id: str
    display_number: int | None = None
    exercises: tuple[ExerciseRecord, ...] = field(default_factory=tuple)

    @property
    def position(self) -> int:
        return min(e.position for e in self.exercises)

    @property
    def member_ids(self) -> tuple[Hashable, ...]:
        return tuple(e.id for e in self.exercises)

    @property
    def needs_more_exercises(self) -> bool:
        """True for a pending group that is not yet a real superset."""
        return len(self.exercises) < MIN_SUPERSET_MEMBERS

    @property
    def label(self) -> str:
        if self.display_number is None:
            return "Superset"
        return f"Superset {self.display_number}"
