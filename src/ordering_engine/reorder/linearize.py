"""Position re-linearization helpers.

A section layout is a list of *slots*, one per unified item, each slot being
the tuple of exercise ids the item occupies (one id for a standalone
exercise, the members in order for a superset). Linearizing walks the slots
and hands out positions 0, 1, 2, ... so every superset occupies a contiguous
block.
"""

from __future__ import annotations

import dataclasses
from typing import Any, Hashable, Iterable, Mapping, Sequence

from ordering_engine.models.enums import FIRST_POSITION
from ordering_engine.models.exercise import ExerciseRecord
from ordering_engine.models.unified import UnifiedItem

Slot = tuple[Hashable, ...]


def slots_of(items: Iterable[UnifiedItem]) -> list[Slot]:
    """Slots of a unified view, in view order."""
    return [tuple(record.id for record in item.exercises) for item in items]


def linearize(slots: Sequence[Slot]) -> dict[Hashable, int]:
    """Map every exercise id in *slots* to its new position."""
    positions: dict[Hashable, int] = {}
    position = FIRST_POSITION
    for slot in slots:
        for exercise_id in slot:
            positions[exercise_id] = position
            position += 1
    return positions


def rebuild(
    exercises: Iterable[ExerciseRecord],
    *,
    updates: Mapping[Hashable, Mapping[str, Any]] | None = None,
    positions: Mapping[Hashable, int] | None = None,
    removed: Iterable[Hashable] = (),
    added: Iterable[ExerciseRecord] = (),
) -> tuple[ExerciseRecord, ...]:
    """Copy-on-write rebuild of the flat collection.

    Records keep their original order; *added* records go last. A record is
    only replaced when one of its fields actually changes, so untouched
    records are shared with the input.
    """
    updates = updates or {}
    positions = positions or {}
    removed = set(removed)

    result: list[ExerciseRecord] = []
    for record in [*exercises, *added]:
        if record.id in removed:
            continue
        changes = dict(updates.get(record.id, {}))
        if record.id in positions:
            changes["position"] = positions[record.id]
        result.append(_replace(record, changes))
    return tuple(result)


def _replace(record: ExerciseRecord, changes: Mapping[str, Any]) -> ExerciseRecord:
    if all(getattr(record, name) == value for name, value in changes.items()):
        return record
    return dataclasses.replace(record, **changes)
