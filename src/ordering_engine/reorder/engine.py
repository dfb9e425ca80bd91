"""ReorderEngine — position and grouping changes on a plan snapshot.

Every operation reads a PlanState, works against the unified view of the
sections it touches, and returns a new PlanState whose positions are
re-linearized (0..N-1 per touched section). Inputs are never mutated.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import replace
from typing import Callable, Hashable, Iterable

from ordering_engine import config
from ordering_engine.exceptions import InvalidOperationError, NotFoundError
from ordering_engine.invariants import check_invariants
from ordering_engine.models.enums import MIN_SUPERSET_MEMBERS, Direction, ItemKind
from ordering_engine.models.exercise import ExerciseRecord
from ordering_engine.models.plan import PlanState
from ordering_engine.models.superset import SupersetInfo
from ordering_engine.models.unified import UnifiedItem
from ordering_engine.reorder.linearize import Slot, linearize, rebuild, slots_of
from ordering_engine.reorder.numbering import compact_display_numbers, next_display_number
from ordering_engine.view.builder import build_unified_view, find_item_index

logger = logging.getLogger(__name__)


def _default_superset_id() -> str:
    return f"{config.SUPERSET_ID_PREFIX}-{uuid.uuid4().hex[:12]}"


class ReorderEngine:
    """Applies move / group / ungroup operations to a plan snapshot.

    The engine holds no plan state between calls. The caller serializes
    operations per session: read the snapshot, call the engine, store the
    result, then accept the next operation.

    Usage:
        engine = ReorderEngine()
        plan = engine.move_direction(plan, "s1", "gym", "b", Direction.UP)
        plan = engine.create_superset(plan, "s1", "gym", ["a", "b"])
    """

    def __init__(
        self,
        check_invariants: bool | None = None,
        id_factory: Callable[[], Hashable] | None = None,
    ) -> None:
        self.check_invariants = (
            config.CHECK_INVARIANTS if check_invariants is None else check_invariants
        )
        self.id_factory = id_factory or _default_superset_id

    # -- Moves --------------------------------------------------------------

    def move_item(
        self,
        plan: PlanState,
        session_id: Hashable,
        section_id: str,
        item_key: Hashable,
        to_index: int,
    ) -> PlanState:
        """Move one unified item (exercise or whole superset) to *to_index*.

        *to_index* is clamped into the view. Moving an item onto its own
        slot returns *plan* unchanged.

        Raises:
            InvalidOperationError: The section has nothing to move.
            NotFoundError: No item with *item_key* in the section.
        """
        items = self._view(plan, session_id, section_id)
        index = self._require_item(items, item_key, section_id)
        target = max(0, min(to_index, len(items) - 1))
        if target == index:
            logger.debug("Move of %r in %r is a no-op", item_key, section_id)
            return plan

        moved = items.pop(index)
        items.insert(target, moved)
        logger.debug("Moved %r in %r from %d to %d", item_key, section_id, index, target)

        exercises = rebuild(plan.exercises, positions=linearize(slots_of(items)))
        return self._finish(
            PlanState(exercises=exercises, supersets=plan.supersets),
            session_id,
            {section_id},
            pending=self._undersized(plan, session_id),
        )

    def move_direction(
        self,
        plan: PlanState,
        session_id: Hashable,
        section_id: str,
        item_key: Hashable,
        direction: Direction | str,
    ) -> PlanState:
        """Move an item one step up or down; no-op at either end of the section."""
        direction = Direction(direction)
        items = self._view(plan, session_id, section_id)
        index = self._require_item(items, item_key, section_id)
        target = index + direction.offset
        if target < 0 or target >= len(items):
            logger.debug("Cannot move %r %s from index %d", item_key, direction.value, index)
            return plan
        return self.move_item(plan, session_id, section_id, item_key, target)

    def reorder_within_superset(
        self,
        plan: PlanState,
        superset_id: Hashable,
        exercise_id: Hashable,
        to_index: int,
    ) -> PlanState:
        """Move a member to *to_index* inside its superset block (clamped)."""
        info = self._require_superset(plan, superset_id)
        member_ids = [m.id for m in plan.members(superset_id)]
        if exercise_id not in member_ids:
            raise NotFoundError(
                f"Exercise {exercise_id!r} is not a member of superset {superset_id!r}",
                key=exercise_id,
            )
        index = member_ids.index(exercise_id)
        target = max(0, min(to_index, len(member_ids) - 1))
        if target == index:
            return plan

        member_ids.insert(target, member_ids.pop(index))
        slots = self._slots(plan, info.session_id, info.host_section_id)
        slots[self._group_slot(plan, info)] = tuple(member_ids)

        exercises = rebuild(plan.exercises, positions=linearize(slots))
        return self._finish(
            PlanState(exercises=exercises, supersets=plan.supersets),
            info.session_id,
            {info.host_section_id},
            pending=self._undersized(plan, info.session_id),
        )

    def move_superset_to_section(
        self,
        plan: PlanState,
        superset_id: Hashable,
        section_id: str,
    ) -> PlanState:
        """Re-host a superset in another section, appended at its end."""
        info = self._require_superset(plan, superset_id)
        old_host = info.host_section_id
        if section_id == old_host:
            return plan

        old_slots = self._slots(plan, info.session_id, old_host)
        group_slot = old_slots.pop(self._group_slot(plan, info))
        new_slots = self._slots(plan, info.session_id, section_id) + [group_slot]

        positions = {**linearize(old_slots), **linearize(new_slots)}
        updates = {member_id: {"display_section_id": section_id} for member_id in group_slot}
        supersets = tuple(
            replace(s, host_section_id=section_id) if s.id == superset_id else s
            for s in plan.supersets
        )
        logger.info("Superset %r moved from %r to %r", superset_id, old_host, section_id)

        return self._finish(
            PlanState(
                exercises=rebuild(plan.exercises, updates=updates, positions=positions),
                supersets=supersets,
            ),
            info.session_id,
            {old_host, section_id},
            pending=self._undersized(plan, info.session_id),
        )

    # -- Structural operations ---------------------------------------------

    def add_exercise(self, plan: PlanState, exercise: ExerciseRecord) -> PlanState:
        """Append a new exercise at the end of its section (or to its superset).

        Raises:
            InvalidOperationError: An exercise with the same id exists.
        """
        if plan.exercise(exercise.id) is not None:
            raise InvalidOperationError(f"Exercise {exercise.id!r} already exists")
        if exercise.superset_id is not None:
            return self.add_to_superset(plan, exercise.superset_id, exercise)

        record = ExerciseRecord(
            id=exercise.id,
            session_id=exercise.session_id,
            section_id=exercise.section_id,
            position=exercise.position,
            payload=exercise.payload,
        )
        slots = self._slots(plan, record.session_id, record.section_id) + [(record.id,)]
        exercises = rebuild(plan.exercises, positions=linearize(slots), added=[record])
        logger.debug("Added exercise %r to %r", record.id, record.section_id)

        plan, touched = self._settle(
            PlanState(exercises=exercises, supersets=plan.supersets), record.session_id
        )
        return self._finish(plan, record.session_id, touched | {record.section_id})

    def remove_exercise(self, plan: PlanState, exercise_id: Hashable) -> PlanState:
        """Delete an exercise; a superset left with one member is dissolved.

        Raises:
            NotFoundError: No exercise with *exercise_id*.
        """
        record = self._require_exercise(plan, exercise_id)
        if record.superset_id is not None:
            plan, touched = self._leave_superset(plan, record.superset_id, record, delete=True)
        else:
            slots = [
                slot
                for slot in self._slots(plan, record.session_id, record.section_id)
                if slot != (record.id,)
            ]
            plan = PlanState(
                exercises=rebuild(plan.exercises, positions=linearize(slots), removed=[record.id]),
                supersets=plan.supersets,
            )
            touched = {record.section_id}
        logger.debug("Removed exercise %r", exercise_id)

        plan, settled = self._settle(plan, record.session_id)
        return self._finish(plan, record.session_id, touched | settled)

    def create_superset(
        self,
        plan: PlanState,
        session_id: Hashable,
        section_id: str,
        exercise_ids: Iterable[Hashable],
        host_section_id: str | None = None,
        superset_id: Hashable | None = None,
    ) -> PlanState:
        """Group standalone exercises into a new superset.

        The group takes the slot of its earliest selected member in the host
        section; selected exercises from other sections join at the end of
        the group, and the group goes to the end of the host section when
        none of its members was displayed there. A single id creates a
        pending group that needs more exercises.

        Args:
            plan: Current plan snapshot.
            session_id: Session the exercises belong to.
            section_id: Section the operation was started from.
            exercise_ids: Exercises to group, at least one.
            host_section_id: Section displaying the group. Defaults to
                *section_id*.
            superset_id: Id for the new group. Generated when omitted.

        Raises:
            InvalidOperationError: No ids, an exercise already grouped, or
                the superset id is taken.
            NotFoundError: An id is not an exercise of the session.
        """
        ids = list(dict.fromkeys(exercise_ids))
        if not ids:
            raise InvalidOperationError("A superset needs at least one exercise")
        host = host_section_id or section_id

        selected: list[ExerciseRecord] = []
        for exercise_id in ids:
            record = plan.exercise(exercise_id)
            if record is None or record.session_id != session_id:
                raise NotFoundError(
                    f"Exercise {exercise_id!r} not found in session {session_id!r}",
                    key=exercise_id,
                )
            if record.superset_id is not None:
                raise InvalidOperationError(
                    f"Exercise {exercise_id!r} already belongs to superset {record.superset_id!r}"
                )
            selected.append(record)

        new_id = superset_id if superset_id is not None else self.id_factory()
        if plan.superset(new_id) is not None or any(e.superset_id == new_id for e in plan.exercises):
            raise InvalidOperationError(f"Superset id {new_id!r} is already in use")

        selected_ids = set(ids)
        host_items = self._view(plan, session_id, host)
        in_host = [
            i
            for i, item in enumerate(host_items)
            if item.kind == ItemKind.EXERCISE and item.key in selected_ids
        ]
        host_members = [host_items[i].key for i in in_host]
        member_ids = tuple(host_members + [r.id for r in selected if r.id not in set(host_members)])

        skipped = set(in_host)
        host_slots = [slot for i, slot in enumerate(slots_of(host_items)) if i not in skipped]
        # Earliest member's slot; nothing selected precedes it
        anchor = in_host[0] if in_host else len(host_slots)
        host_slots.insert(anchor, member_ids)

        positions = linearize(host_slots)
        touched = {host}
        for source in sorted({r.section_id for r in selected} - {host}):
            source_slots = [
                slot
                for slot in self._slots(plan, session_id, source)
                if not set(slot) & selected_ids
            ]
            positions.update(linearize(source_slots))
            touched.add(source)

        updates = {
            exercise_id: {"superset_id": new_id, "display_section_id": host}
            for exercise_id in member_ids
        }
        info = SupersetInfo(
            id=new_id,
            session_id=session_id,
            host_section_id=host,
            display_number=next_display_number(plan.supersets, session_id),
        )
        logger.debug(
            "Created superset %r (#%d) in %r with %d exercise(s)",
            new_id,
            info.display_number,
            host,
            len(member_ids),
        )

        plan = PlanState(
            exercises=rebuild(plan.exercises, updates=updates, positions=positions),
            supersets=plan.supersets + (info,),
        )
        plan, settled = self._settle(plan, session_id, keep={new_id})
        pending = {new_id} if len(member_ids) < MIN_SUPERSET_MEMBERS else set()
        return self._finish(plan, session_id, touched | settled, pending=pending)

    def add_to_superset(
        self,
        plan: PlanState,
        superset_id: Hashable,
        exercise: ExerciseRecord,
    ) -> PlanState:
        """Append an exercise to the end of a superset.

        A new exercise is inserted; an exercise already in the plan leaves
        its current slot (or its current superset) first. The other items of
        the host section keep their relative order.

        Raises:
            NotFoundError: Unknown superset.
            InvalidOperationError: The exercise is already a member, or
                belongs to another session.
        """
        info = self._require_superset(plan, superset_id)
        if exercise.session_id != info.session_id:
            raise InvalidOperationError(
                f"Exercise {exercise.id!r} is not in session {info.session_id!r}"
            )

        touched: set[str] = set()
        existing = plan.exercise(exercise.id)
        if existing is not None:
            if existing.superset_id == superset_id:
                raise InvalidOperationError(
                    f"Exercise {exercise.id!r} is already in superset {superset_id!r}"
                )
            plan, touched = self._detach_existing(plan, existing)

        host = info.host_section_id
        members = plan.members(superset_id)
        host_slots = self._slots(plan, info.session_id, host)
        if members:
            index = self._group_slot(plan, info)
            host_slots[index] = host_slots[index] + (exercise.id,)
        else:
            host_slots.append((exercise.id,))

        record = ExerciseRecord(
            id=exercise.id,
            session_id=info.session_id,
            section_id=exercise.section_id,
            position=max((m.position for m in members), default=-1) + 1,
            superset_id=superset_id,
            display_section_id=host,
            payload=exercise.payload,
        )
        logger.debug("Added exercise %r to superset %r", exercise.id, superset_id)

        plan = PlanState(
            exercises=rebuild(plan.exercises, positions=linearize(host_slots), added=[record]),
            supersets=plan.supersets,
        )
        plan, settled = self._settle(plan, info.session_id)
        return self._finish(plan, info.session_id, touched | settled | {host})

    def remove_from_superset(
        self,
        plan: PlanState,
        superset_id: Hashable,
        exercise_id: Hashable,
    ) -> PlanState:
        """Take a member out of a superset, back to standalone in its home section.

        When fewer than two members remain the superset is dissolved and the
        remaining member (if any) also reverts to standalone.

        Raises:
            NotFoundError: Unknown superset, or the exercise is not a member.
        """
        info = self._require_superset(plan, superset_id)
        record = plan.exercise(exercise_id)
        if record is None or record.superset_id != superset_id:
            raise NotFoundError(
                f"Exercise {exercise_id!r} is not a member of superset {superset_id!r}",
                key=exercise_id,
            )
        plan, touched = self._leave_superset(plan, superset_id, record, delete=False)
        plan, settled = self._settle(plan, info.session_id)
        return self._finish(plan, info.session_id, touched | settled)

    def dissolve_superset(self, plan: PlanState, superset_id: Hashable) -> PlanState:
        """Break a superset up.

        Members whose home section is the host section stay where the group
        was, as standalone exercises. Members from other sections cannot be
        displayed outside a superset and are removed from the plan.

        Raises:
            NotFoundError: Unknown superset.
        """
        info = self._require_superset(plan, superset_id)
        plan, touched = self._dissolve(plan, info, drop_foreign=True)
        plan, settled = self._settle(plan, info.session_id)
        return self._finish(plan, info.session_id, touched | settled)

    def prune_pending_supersets(self, plan: PlanState, session_id: Hashable) -> PlanState:
        """Dissolve every superset of the session left with fewer than two members."""
        plan, touched = self._settle(plan, session_id)
        return self._finish(plan, session_id, touched)

    # -- Internals ----------------------------------------------------------

    def _view(self, plan: PlanState, session_id: Hashable, section_id: str) -> list[UnifiedItem]:
        return build_unified_view(plan.exercises, session_id, section_id, plan.supersets)

    def _slots(self, plan: PlanState, session_id: Hashable, section_id: str) -> list[Slot]:
        return slots_of(self._view(plan, session_id, section_id))

    def _group_slot(self, plan: PlanState, info: SupersetInfo) -> int:
        """Index of a superset's item in its host section view."""
        items = self._view(plan, info.session_id, info.host_section_id)
        for index, item in enumerate(items):
            if item.kind == ItemKind.SUPERSET and item.key == info.id:
                return index
        raise NotFoundError(
            f"Superset {info.id!r} has no members in {info.host_section_id!r}", key=info.id
        )

    def _require_item(self, items: list[UnifiedItem], key: Hashable, section_id: str) -> int:
        if not items:
            raise InvalidOperationError(f"Section {section_id!r} has no items to move")
        index = find_item_index(items, key)
        if index is None:
            raise NotFoundError(f"Item {key!r} not found in section {section_id!r}", key=key)
        return index

    def _require_exercise(self, plan: PlanState, exercise_id: Hashable) -> ExerciseRecord:
        record = plan.exercise(exercise_id)
        if record is None:
            raise NotFoundError(f"Exercise {exercise_id!r} not found", key=exercise_id)
        return record

    def _require_superset(self, plan: PlanState, superset_id: Hashable) -> SupersetInfo:
        info = plan.superset(superset_id)
        if info is None:
            raise NotFoundError(f"Superset {superset_id!r} not found", key=superset_id)
        return info

    def _undersized(self, plan: PlanState, session_id: Hashable) -> set[Hashable]:
        return {
            info.id
            for info in plan.session_supersets(session_id)
            if len(plan.members(info.id)) < MIN_SUPERSET_MEMBERS
        }

    def _detach_existing(
        self, plan: PlanState, record: ExerciseRecord
    ) -> tuple[PlanState, set[str]]:
        """Take an existing exercise out of the plan so it can be re-inserted."""
        if record.superset_id is not None:
            return self._leave_superset(plan, record.superset_id, record, delete=True)
        slots = [
            slot
            for slot in self._slots(plan, record.session_id, record.section_id)
            if slot != (record.id,)
        ]
        exercises = rebuild(plan.exercises, positions=linearize(slots), removed=[record.id])
        return PlanState(exercises=exercises, supersets=plan.supersets), {record.section_id}

    def _leave_superset(
        self,
        plan: PlanState,
        superset_id: Hashable,
        record: ExerciseRecord,
        delete: bool,
    ) -> tuple[PlanState, set[str]]:
        """Remove *record* from its superset, dissolving the group below two members.

        With *delete* the record is dropped from the plan; otherwise it becomes
        standalone right after the group (home == host) or at the end of its
        home section.
        """
        info = self._require_superset(plan, superset_id)
        host = info.host_section_id
        remaining = tuple(m.id for m in plan.members(superset_id) if m.id != record.id)

        host_slots = self._slots(plan, info.session_id, host)
        index = self._group_slot(plan, info)
        replacement: list[Slot] = [remaining] if remaining else []
        touched = {host}
        positions: dict[Hashable, int] = {}
        updates: dict[Hashable, dict] = {}

        if not delete:
            updates[record.id] = {"superset_id": None, "display_section_id": record.section_id}
            if record.section_id == host:
                replacement.append((record.id,))
            else:
                home_slots = self._slots(plan, info.session_id, record.section_id)
                positions.update(linearize(home_slots + [(record.id,)]))
                touched.add(record.section_id)
        host_slots[index : index + 1] = replacement
        positions.update(linearize(host_slots))

        plan = PlanState(
            exercises=rebuild(
                plan.exercises,
                updates=updates,
                positions=positions,
                removed=[record.id] if delete else [],
            ),
            supersets=plan.supersets,
        )
        logger.debug(
            "%s exercise %r from superset %r",
            "Deleted" if delete else "Detached",
            record.id,
            superset_id,
        )

        if len(remaining) < MIN_SUPERSET_MEMBERS:
            plan, dissolved = self._dissolve(plan, info, drop_foreign=False)
            touched |= dissolved
        return plan, touched

    def _dissolve(
        self,
        plan: PlanState,
        info: SupersetInfo,
        drop_foreign: bool,
    ) -> tuple[PlanState, set[str]]:
        """Delete a superset and turn its members back into standalone exercises.

        Members from the host section stay in the group's slot. Members from
        other sections are removed when *drop_foreign* is set, otherwise they
        go to the end of their home section.
        """
        host = info.host_section_id
        members = plan.members(info.id)
        local = [m for m in members if m.section_id == host]
        foreign = [m for m in members if m.section_id != host]

        touched = {host}
        positions: dict[Hashable, int] = {}
        updates = {
            m.id: {"superset_id": None, "display_section_id": m.section_id} for m in members
        }
        removed: list[Hashable] = []

        host_slots = self._slots(plan, info.session_id, host)
        if members:
            index = self._group_slot(plan, info)
            host_slots[index : index + 1] = [(m.id,) for m in local]
        positions.update(linearize(host_slots))

        if drop_foreign:
            removed = [m.id for m in foreign]
            for m in foreign:
                logger.info(
                    "Removed exercise %r (home %r) with dissolved superset %r",
                    m.id,
                    m.section_id,
                    info.id,
                )
        else:
            for home in sorted({m.section_id for m in foreign}):
                home_slots = self._slots(plan, info.session_id, home)
                home_slots += [(m.id,) for m in foreign if m.section_id == home]
                positions.update(linearize(home_slots))
                touched.add(home)

        supersets = compact_display_numbers(
            (s for s in plan.supersets if s.id != info.id), info.session_id
        )
        logger.info("Dissolved superset %r in %r", info.id, host)

        plan = PlanState(
            exercises=rebuild(plan.exercises, updates=updates, positions=positions, removed=removed),
            supersets=supersets,
        )
        return plan, touched

    def _settle(
        self,
        plan: PlanState,
        session_id: Hashable,
        keep: Iterable[Hashable] = (),
    ) -> tuple[PlanState, set[str]]:
        """Dissolve pending supersets of the session, except those in *keep*."""
        keep = set(keep)
        touched: set[str] = set()
        for superset_id in sorted(self._undersized(plan, session_id) - keep, key=str):
            info = plan.superset(superset_id)
            if info is None:
                continue
            logger.debug("Dissolving pending superset %r", superset_id)
            plan, dissolved = self._dissolve(plan, info, drop_foreign=False)
            touched |= dissolved
        return plan, touched

    def _finish(
        self,
        plan: PlanState,
        session_id: Hashable,
        sections: Iterable[str],
        pending: Iterable[Hashable] = (),
    ) -> PlanState:
        if self.check_invariants:
            check_invariants(plan, session_id, sections=sorted(set(sections)), pending=pending)
        return plan
