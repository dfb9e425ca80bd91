"""Tests for ReorderEngine moves: items, directions, members and re-hosting."""

from __future__ import annotations

from typing import Callable

import pytest

from ordering_engine.exceptions import InvalidOperationError, NotFoundError
from ordering_engine.models.enums import Direction
from ordering_engine.models.exercise import ExerciseRecord
from ordering_engine.models.plan import PlanState
from ordering_engine.reorder.engine import ReorderEngine
from ordering_engine.view.builder import build_unified_view, view_order


def _positions(plan: PlanState, *ids: str) -> list[int]:
    return [plan.exercise(i).position for i in ids]


def _order(plan: PlanState, section: str, session: str = "s1") -> list:
    return view_order(build_unified_view(plan.exercises, session, section, plan.supersets))


class TestMoveDirection:
    def test_move_up_swaps_with_previous(self, engine: ReorderEngine, gym_plan: PlanState) -> None:
        result = engine.move_direction(gym_plan, "s1", "gym", "b", Direction.UP)
        assert _order(result, "gym") == ["b", "a", "c"]
        assert _positions(result, "b", "a", "c") == [0, 1, 2]

    def test_accepts_direction_string(self, engine: ReorderEngine, gym_plan: PlanState) -> None:
        result = engine.move_direction(gym_plan, "s1", "gym", "b", "down")
        assert _order(result, "gym") == ["a", "c", "b"]

    def test_first_item_cannot_move_up(self, engine: ReorderEngine, gym_plan: PlanState) -> None:
        assert engine.move_direction(gym_plan, "s1", "gym", "a", Direction.UP) is gym_plan

    def test_last_item_cannot_move_down(self, engine: ReorderEngine, gym_plan: PlanState) -> None:
        assert engine.move_direction(gym_plan, "s1", "gym", "c", Direction.DOWN) is gym_plan

    def test_unknown_direction(self, engine: ReorderEngine, gym_plan: PlanState) -> None:
        with pytest.raises(ValueError):
            engine.move_direction(gym_plan, "s1", "gym", "a", "sideways")

    def test_superset_moves_as_a_block(self, engine: ReorderEngine, mixed_plan: PlanState) -> None:
        result = engine.move_direction(mixed_plan, "s1", "gym", "ss-g", Direction.DOWN)
        assert _order(result, "gym") == ["a", "d", "b", "c"]
        assert _positions(result, "a", "d", "b", "c") == [0, 1, 2, 3]


class TestMoveItem:
    def test_superset_to_front(self, engine: ReorderEngine, mixed_plan: PlanState) -> None:
        result = engine.move_item(mixed_plan, "s1", "gym", "ss-g", 0)
        assert _order(result, "gym") == ["b", "c", "a", "d"]
        assert _positions(result, "b", "c", "a", "d") == [0, 1, 2, 3]

    def test_index_clamped_to_end(self, engine: ReorderEngine, mixed_plan: PlanState) -> None:
        result = engine.move_item(mixed_plan, "s1", "gym", "a", 99)
        assert _order(result, "gym") == ["b", "c", "d", "a"]

    def test_negative_index_clamped_to_start(
        self, engine: ReorderEngine, mixed_plan: PlanState
    ) -> None:
        result = engine.move_item(mixed_plan, "s1", "gym", "d", -5)
        assert _order(result, "gym") == ["d", "a", "b", "c"]

    def test_same_slot_is_noop(self, engine: ReorderEngine, mixed_plan: PlanState) -> None:
        assert engine.move_item(mixed_plan, "s1", "gym", "ss-g", 1) is mixed_plan

    def test_unknown_key(self, engine: ReorderEngine, mixed_plan: PlanState) -> None:
        with pytest.raises(NotFoundError) as excinfo:
            engine.move_item(mixed_plan, "s1", "gym", "zzz", 0)
        assert excinfo.value.key == "zzz"

    def test_member_is_not_an_item(self, engine: ReorderEngine, mixed_plan: PlanState) -> None:
        with pytest.raises(NotFoundError):
            engine.move_item(mixed_plan, "s1", "gym", "b", 0)

    def test_empty_section(self, engine: ReorderEngine, mixed_plan: PlanState) -> None:
        with pytest.raises(InvalidOperationError):
            engine.move_item(mixed_plan, "s1", "plyometric", "a", 0)

    def test_other_sections_and_sessions_untouched(
        self, engine: ReorderEngine, mixed_plan: PlanState
    ) -> None:
        result = engine.move_item(mixed_plan, "s1", "gym", "d", 0)
        for exercise_id in ("s", "t", "w", "a2"):
            assert result.exercise(exercise_id) is mixed_plan.exercise(exercise_id)

    def test_gapped_positions_are_normalised(
        self, engine: ReorderEngine, make_exercise: Callable[..., ExerciseRecord]
    ) -> None:
        plan = PlanState.from_records(
            [
                make_exercise("a", position=0),
                make_exercise("b", position=5),
                make_exercise("c", position=9),
            ]
        )
        result = engine.move_direction(plan, "s1", "gym", "c", Direction.UP)
        assert _order(result, "gym") == ["a", "c", "b"]
        assert _positions(result, "a", "c", "b") == [0, 1, 2]

    def test_input_not_mutated(self, engine: ReorderEngine, mixed_plan: PlanState) -> None:
        before = [(e.id, e.position) for e in mixed_plan.exercises]
        engine.move_item(mixed_plan, "s1", "gym", "d", 0)
        assert [(e.id, e.position) for e in mixed_plan.exercises] == before

    def test_pending_superset_can_be_moved(
        self, engine: ReorderEngine, gym_plan: PlanState
    ) -> None:
        plan = engine.create_superset(gym_plan, "s1", "gym", ["c"])
        result = engine.move_item(plan, "s1", "gym", "ss-1", 0)
        assert _order(result, "gym") == ["c", "a", "b"]
        assert result.group("ss-1").needs_more_exercises


class TestReorderWithinSuperset:
    def test_member_moves_inside_block(self, engine: ReorderEngine, mixed_plan: PlanState) -> None:
        result = engine.reorder_within_superset(mixed_plan, "ss-g", "c", 0)
        assert result.group("ss-g").member_ids == ("c", "b")
        assert _order(result, "gym") == ["a", "c", "b", "d"]

    def test_same_index_is_noop(self, engine: ReorderEngine, mixed_plan: PlanState) -> None:
        assert engine.reorder_within_superset(mixed_plan, "ss-g", "c", 5) is mixed_plan

    def test_not_a_member(self, engine: ReorderEngine, mixed_plan: PlanState) -> None:
        with pytest.raises(NotFoundError):
            engine.reorder_within_superset(mixed_plan, "ss-g", "a", 0)

    def test_unknown_superset(self, engine: ReorderEngine, mixed_plan: PlanState) -> None:
        with pytest.raises(NotFoundError):
            engine.reorder_within_superset(mixed_plan, "ss-nope", "b", 0)


class TestMoveSupersetToSection:
    def test_rehosts_at_end_of_target(self, engine: ReorderEngine, mixed_plan: PlanState) -> None:
        result = engine.move_superset_to_section(mixed_plan, "ss-g", "sprint")
        assert _order(result, "sprint") == ["s", "t", "b", "c"]
        assert _order(result, "gym") == ["a", "d"]
        assert _positions(result, "a", "d") == [0, 1]
        assert _positions(result, "s", "t", "b", "c") == [0, 1, 2, 3]
        assert result.superset("ss-g").host_section_id == "sprint"
        assert result.exercise("b").display_section_id == "sprint"
        assert result.exercise("b").section_id == "gym"

    def test_same_section_is_noop(self, engine: ReorderEngine, mixed_plan: PlanState) -> None:
        assert engine.move_superset_to_section(mixed_plan, "ss-g", "gym") is mixed_plan
