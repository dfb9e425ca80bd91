"""PlanState — the immutable snapshot every engine operation consumes and returns."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Hashable, Iterable

from ordering_engine.models.enums import FIRST_DISPLAY_NUMBER
from ordering_engine.models.exercise import ExerciseRecord, record_sort_key
from ordering_engine.models.superset import SupersetGroup, SupersetInfo


@dataclass(frozen=True)
class PlanState:
    """Flat exercise collection plus superset bookkeeping.

    The application layer loads this before each operation and stores the
    returned snapshot afterwards. The engine never mutates it; operations
    return a new PlanState sharing every untouched record.
    """

    exercises: tuple[ExerciseRecord, ...] = field(default_factory=tuple)
    supersets: tuple[SupersetInfo, ...] = field(default_factory=tuple)

    # -- Factory ----------------------------------------------------------

    @classmethod
    def from_records(
        cls,
        records: Iterable[ExerciseRecord],
        supersets: Iterable[SupersetInfo] = (),
    ) -> PlanState:
        """Create a PlanState, rebuilding bookkeeping the caller did not supply.

        Superset ids referenced by records but missing from *supersets* get a
        SupersetInfo hosted in the first member's display section, numbered
        with the smallest unused display numbers of their session in order of
        first appearance. Bookkeeping for groups with no members is dropped.
        """
        exercises = tuple(records)
        referenced = {e.superset_id for e in exercises if e.superset_id is not None}
        infos = [s for s in supersets if s.id in referenced]
        known = {s.id for s in infos}

        for record in exercises:
            if record.superset_id is None or record.superset_id in known:
                continue
            used = {s.display_number for s in infos if s.session_id == record.session_id}
            infos.append(
                SupersetInfo(
                    id=record.superset_id,
                    session_id=record.session_id,
                    host_section_id=record.display_section_id,  # type: ignore[arg-type]
                    display_number=smallest_unused_number(used),
                )
            )
            known.add(record.superset_id)

        return cls(exercises=exercises, supersets=tuple(infos))

    # -- Query helpers ----------------------------------------------------

    def exercise(self, exercise_id: Hashable) -> ExerciseRecord | None:
        """Return the record with *exercise_id*, or None."""
        for record in self.exercises:
            if record.id == exercise_id:
                return record
        return None

    def superset(self, superset_id: Hashable) -> SupersetInfo | None:
        """Return the bookkeeping for *superset_id*, or None."""
        for info in self.supersets:
            if info.id == superset_id:
                return info
        return None

    def session_exercises(self, session_id: Hashable) -> tuple[ExerciseRecord, ...]:
        return tuple(e for e in self.exercises if e.session_id == session_id)

    def session_supersets(self, session_id: Hashable) -> tuple[SupersetInfo, ...]:
        """Live supersets of a session ordered by display number."""
        return tuple(
            sorted(
                (s for s in self.supersets if s.session_id == session_id),
                key=lambda s: s.display_number,
            )
        )

    def members(self, superset_id: Hashable) -> tuple[ExerciseRecord, ...]:
        """Records of a superset ordered by position, ties by id."""
        return tuple(
            sorted(
                (e for e in self.exercises if e.superset_id == superset_id),
                key=record_sort_key,
            )
        )

    def group(self, superset_id: Hashable) -> SupersetGroup | None:
        """Assemble the SupersetGroup for *superset_id*, or None."""
        info = self.superset(superset_id)
        if info is None:
            return None
        return SupersetGroup(
            id=info.id,
            session_id=info.session_id,
            host_section_id=info.host_section_id,
            display_number=info.display_number,
            exercises=self.members(superset_id),
        )

    def groups(self, session_id: Hashable) -> tuple[SupersetGroup, ...]:
        """All live groups of a session ordered by display number."""
        return tuple(
            self.group(info.id)  # type: ignore[misc]
            for info in self.session_supersets(session_id)
        )

    def section_ids(self, session_id: Hashable) -> tuple[str, ...]:
        """Sections in which the session currently displays anything, sorted."""
        return tuple(
            sorted({e.scope_section_id for e in self.exercises if e.session_id == session_id})
        )


def smallest_unused_number(used: Iterable[int]) -> int:
    """Smallest positive display number not present in *used*."""
    taken = set(used)
    number = FIRST_DISPLAY_NUMBER
    while number in taken:
        number += 1
    return number
