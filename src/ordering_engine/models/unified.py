"""UnifiedItem — one entry of a section's unified ordered view.

A unified view interleaves standalone exercises and whole superset groups.
The two variants are explicit classes discriminated by ``kind``; callers
should branch on ``kind`` (or ``isinstance``) rather than probing fields.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Hashable, Union

from ordering_engine.models.enums import ItemKind
from ordering_engine.models.exercise import ExerciseRecord
from ordering_engine.models.superset import SupersetGroup


@dataclass(frozen=True)
class ExerciseItem:
    """A standalone exercise."""

    exercise: ExerciseRecord

    kind = ItemKind.EXERCISE

    @property
    def key(self) -> Hashable:
        return self.exercise.id

    @property
    def position(self) -> int:
        return self.exercise.position

    @property
    def exercises(self) -> tuple[ExerciseRecord, ...]:
        return (self.exercise,)


@dataclass(frozen=True)
class SupersetItem:
    """A superset group, ordered as one atomic unit."""

    group: SupersetGroup

    kind = ItemKind.SUPERSET

    @property
    def key(self) -> Hashable:
        return self.group.id

    @property
    def position(self) -> int:
        return self.group.position

    @property
    def exercises(self) -> tuple[ExerciseRecord, ...]:
        return self.group.exercises


UnifiedItem = Union[ExerciseItem, SupersetItem]
