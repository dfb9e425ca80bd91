"""Consistency checks run after every write operation.

A failure here means the engine was handed inconsistent input (or has a
bug); it is never a user-facing condition.
"""

from __future__ import annotations

from collections import Counter
from typing import Hashable, Iterable

from ordering_engine.exceptions import InvariantViolation
from ordering_engine.models.enums import FIRST_DISPLAY_NUMBER, FIRST_POSITION, MIN_SUPERSET_MEMBERS
from ordering_engine.models.plan import PlanState
from ordering_engine.view.builder import build_unified_view


def check_invariants(
    plan: PlanState,
    session_id: Hashable,
    sections: Iterable[str] | None = None,
    pending: Iterable[Hashable] = (),
) -> None:
    """Raise InvariantViolation if the session is not in a consistent state.

    Args:
        plan: Snapshot to check.
        session_id: Session to check.
        sections: Sections whose positions must be exactly 0..N-1. Defaults
            to every section the session displays.
        pending: Superset ids allowed to have a single member (a group that
            was just created and still needs more exercises).
    """
    _check_unique_ids(plan)
    _check_membership(plan, session_id, frozenset(pending))
    _check_display_numbers(plan, session_id)
    for section_id in sections if sections is not None else plan.section_ids(session_id):
        _check_positions(plan, session_id, section_id)


def _check_unique_ids(plan: PlanState) -> None:
    duplicates = [key for key, count in Counter(e.id for e in plan.exercises).items() if count > 1]
    if duplicates:
        raise InvariantViolation(f"Duplicate exercise ids: {duplicates!r}")


def _check_membership(plan: PlanState, session_id: Hashable, pending: frozenset) -> None:
    infos = {s.id: s for s in plan.session_supersets(session_id)}
    counts: Counter = Counter()

    for record in plan.session_exercises(session_id):
        if record.superset_id is None:
            if record.display_section_id != record.section_id:
                raise InvariantViolation(
                    f"Standalone exercise {record.id!r} displayed outside its home section"
                )
            continue
        info = infos.get(record.superset_id)
        if info is None:
            raise InvariantViolation(
                f"Exercise {record.id!r} references unknown superset {record.superset_id!r}"
            )
        if record.display_section_id != info.host_section_id:
            raise InvariantViolation(
                f"Exercise {record.id!r} is not displayed in the host section "
                f"{info.host_section_id!r} of superset {info.id!r}"
            )
        counts[record.superset_id] += 1

    for superset_id in infos:
        minimum = 1 if superset_id in pending else MIN_SUPERSET_MEMBERS
        if counts[superset_id] < minimum:
            raise InvariantViolation(
                f"Superset {superset_id!r} has {counts[superset_id]} member(s)"
            )


def _check_display_numbers(plan: PlanState, session_id: Hashable) -> None:
    numbers = sorted(s.display_number for s in plan.session_supersets(session_id))
    expected = list(range(FIRST_DISPLAY_NUMBER, FIRST_DISPLAY_NUMBER + len(numbers)))
    if numbers != expected:
        raise InvariantViolation(f"Display numbers {numbers} are not {expected}")


def _check_positions(plan: PlanState, session_id: Hashable, section_id: str) -> None:
    items = build_unified_view(plan.exercises, session_id, section_id, plan.supersets)
    positions = [record.position for item in items for record in item.exercises]
    expected = list(range(FIRST_POSITION, FIRST_POSITION + len(positions)))
    if positions != expected:
        raise InvariantViolation(
            f"Positions in section {section_id!r} are {positions}, expected {expected}"
        )
