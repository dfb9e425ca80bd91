"""Shared test fixtures: exercise factories, sample plans, a deterministic engine."""

from __future__ import annotations

import itertools
from typing import Callable

import pytest

from ordering_engine.models.exercise import ExerciseRecord
from ordering_engine.models.plan import PlanState
from ordering_engine.reorder.engine import ReorderEngine


@pytest.fixture
def make_exercise() -> Callable[..., ExerciseRecord]:
    """Factory fixture for ExerciseRecords in session "s1".

    Usage:
        a = make_exercise("a", position=0)
        x = make_exercise("x", section="sprint", superset_id="ss-1", display="gym")
    """

    def factory(
        exercise_id: str,
        section: str = "gym",
        position: int = 0,
        session: str = "s1",
        superset_id: str | None = None,
        display: str | None = None,
        **payload: object,
    ) -> ExerciseRecord:
        return ExerciseRecord(
            id=exercise_id,
            session_id=session,
            section_id=section,
            position=position,
            superset_id=superset_id,
            display_section_id=display,
            payload=payload,
        )

    return factory


@pytest.fixture
def engine() -> ReorderEngine:
    """Engine with invariant checks on and predictable superset ids ss-1, ss-2, ..."""
    counter = itertools.count(1)
    return ReorderEngine(check_invariants=True, id_factory=lambda: f"ss-{next(counter)}")


@pytest.fixture
def gym_plan(make_exercise: Callable[..., ExerciseRecord]) -> PlanState:
    """Standalone A, B, C in gym at positions 0, 1, 2."""
    return PlanState.from_records(
        [
            make_exercise("a", position=0, sets=3, reps=10),
            make_exercise("b", position=1, sets=4, reps=8),
            make_exercise("c", position=2, sets=3, reps=12),
        ]
    )


@pytest.fixture
def mixed_plan(make_exercise: Callable[..., ExerciseRecord]) -> PlanState:
    """Two sessions, three sections, one superset.

    s1/gym:    a(0)  [ss-g: b(1), c(2)]  d(3)
    s1/sprint: s(0)  t(1)
    s1/warmup: w(0)
    s2/gym:    a2(0)
    """
    return PlanState.from_records(
        [
            make_exercise("a", position=0),
            make_exercise("b", position=1, superset_id="ss-g"),
            make_exercise("c", position=2, superset_id="ss-g"),
            make_exercise("d", position=3),
            make_exercise("s", section="sprint", position=0),
            make_exercise("t", section="sprint", position=1),
            make_exercise("w", section="warmup", position=0),
            make_exercise("a2", session="s2", position=0),
        ]
    )
