"""Tests for PlanState and superset bookkeeping reconstruction."""

from __future__ import annotations

from typing import Callable

import pytest

from ordering_engine.models.exercise import ExerciseRecord
from ordering_engine.models.plan import PlanState, smallest_unused_number
from ordering_engine.models.superset import SupersetInfo


class TestFromRecords:
    def test_derives_missing_bookkeeping(self, mixed_plan: PlanState) -> None:
        info = mixed_plan.superset("ss-g")
        assert info == SupersetInfo(id="ss-g", session_id="s1", host_section_id="gym", display_number=1)

    def test_numbers_per_session_in_first_appearance_order(
        self, make_exercise: Callable[..., ExerciseRecord]
    ) -> None:
        plan = PlanState.from_records(
            [
                make_exercise("a", superset_id="ss-b"),
                make_exercise("b", superset_id="ss-a"),
                make_exercise("c", superset_id="ss-b"),
                make_exercise("d", session="s2", superset_id="ss-c"),
            ]
        )
        assert plan.superset("ss-b").display_number == 1
        assert plan.superset("ss-a").display_number == 2
        assert plan.superset("ss-c").display_number == 1

    def test_supplied_bookkeeping_kept_and_gaps_filled(
        self, make_exercise: Callable[..., ExerciseRecord]
    ) -> None:
        plan = PlanState.from_records(
            [
                make_exercise("a", superset_id="ss-x"),
                make_exercise("b", superset_id="ss-y"),
            ],
            [SupersetInfo(id="ss-x", session_id="s1", host_section_id="gym", display_number=2)],
        )
        assert plan.superset("ss-x").display_number == 2
        assert plan.superset("ss-y").display_number == 1

    def test_bookkeeping_without_members_dropped(
        self, make_exercise: Callable[..., ExerciseRecord]
    ) -> None:
        plan = PlanState.from_records(
            [make_exercise("a")],
            [SupersetInfo(id="ss-gone", session_id="s1", host_section_id="gym", display_number=1)],
        )
        assert plan.supersets == ()

    def test_host_taken_from_display_section(
        self, make_exercise: Callable[..., ExerciseRecord]
    ) -> None:
        plan = PlanState.from_records(
            [make_exercise("x", section="sprint", superset_id="ss-1", display="gym")]
        )
        assert plan.superset("ss-1").host_section_id == "gym"


class TestQueries:
    def test_exercise_lookup(self, mixed_plan: PlanState) -> None:
        assert mixed_plan.exercise("d").position == 3
        assert mixed_plan.exercise("nope") is None

    def test_members_sorted_by_position(self, mixed_plan: PlanState) -> None:
        assert [m.id for m in mixed_plan.members("ss-g")] == ["b", "c"]

    def test_group_assembly(self, mixed_plan: PlanState) -> None:
        group = mixed_plan.group("ss-g")
        assert group is not None
        assert group.member_ids == ("b", "c")
        assert group.position == 1
        assert group.label == "Superset 1"
        assert not group.needs_more_exercises

    def test_group_missing(self, mixed_plan: PlanState) -> None:
        assert mixed_plan.group("ss-nope") is None

    def test_session_scoping(self, mixed_plan: PlanState) -> None:
        assert [e.id for e in mixed_plan.session_exercises("s2")] == ["a2"]
        assert mixed_plan.session_supersets("s2") == ()
        assert len(mixed_plan.groups("s1")) == 1

    def test_section_ids(self, mixed_plan: PlanState) -> None:
        assert mixed_plan.section_ids("s1") == ("gym", "sprint", "warmup")

    def test_frozen(self, mixed_plan: PlanState) -> None:
        with pytest.raises(AttributeError):
            mixed_plan.exercises = ()  # type: ignore[misc]


class TestSmallestUnusedNumber:
    @pytest.mark.parametrize(
        "used, expected",
        [
            ([], 1),
            ([1, 2, 3], 4),
            ([2, 3], 1),
            ([1, 3], 2),
        ],
    )
    def test_smallest_unused(self, used: list[int], expected: int) -> None:
        assert smallest_unused_number(used) == expected
