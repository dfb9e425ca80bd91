"""OrderedViewBuilder — derive a section's unified view from flat records.

The unified view is what the UI renders and what every reorder operation
works against: standalone exercises and whole superset groups, one item
each, ordered by position. A superset member is visible only in its host
(display) section; a standalone exercise only in its home section.

All functions are pure (no I/O, no caching).
"""

from __future__ import annotations

from typing import Hashable, Iterable

from ordering_engine.exceptions import InvalidOperationError
from ordering_engine.models.exercise import ExerciseRecord, record_sort_key
from ordering_engine.models.superset import SupersetGroup, SupersetInfo
from ordering_engine.models.unified import ExerciseItem, SupersetItem, UnifiedItem


def build_unified_view(
    exercises: Iterable[ExerciseRecord],
    session_id: Hashable,
    section_id: str,
    supersets: Iterable[SupersetInfo] = (),
) -> list[UnifiedItem]:
    """Build the ordered list of items displayed in one section of a session.

    Args:
        exercises: Flat exercise collection (any sessions, any sections).
        session_id: Session to build the view for.
        section_id: Section to build the view for.
        supersets: Optional superset bookkeeping. Groups take their display
            number and host section from it when present.

    Returns:
        Items sorted by ordering key; a superset's key is its lowest member
        position. Equal keys keep encounter order.
    """
    infos = {s.id: s for s in supersets}

    seen: set[Hashable] = set()
    # Encounter order of items: ("exercise", record) or ("superset", superset_id)
    slots: list[tuple[str, object]] = []
    members: dict[Hashable, list[ExerciseRecord]] = {}

    for record in exercises:
        # Duplicate ids resolve to the first record anywhere in the collection
        if record.id in seen:
            continue
        seen.add(record.id)
        if not _is_visible(record, session_id, section_id):
            continue

        if record.superset_id is None:
            slots.append(("exercise", record))
        else:
            if record.superset_id not in members:
                members[record.superset_id] = []
                slots.append(("superset", record.superset_id))
            members[record.superset_id].append(record)

    items: list[UnifiedItem] = []
    for kind, value in slots:
        if kind == "exercise":
            items.append(ExerciseItem(value))  # type: ignore[arg-type]
            continue
        group_members = members[value]
        if not group_members:
            continue
        items.append(
            SupersetItem(
                _make_group(value, group_members, session_id, section_id, infos.get(value))
            )
        )

    # list.sort is stable, so items with equal keys keep encounter order
    items.sort(key=lambda item: item.position)
    return items


def _is_visible(record: ExerciseRecord, session_id: Hashable, section_id: str) -> bool:
    if record.session_id != session_id:
        return False
    if record.superset_id is not None:
        return record.display_section_id == section_id
    return record.section_id == section_id


def _make_group(
    superset_id: Hashable,
    group_members: list[ExerciseRecord],
    session_id: Hashable,
    section_id: str,
    info: SupersetInfo | None,
) -> SupersetGroup:
    return SupersetGroup(
        id=superset_id,
        session_id=session_id,
        host_section_id=info.host_section_id if info is not None else section_id,
        display_number=info.display_number if info is not None else None,
        exercises=tuple(sorted(group_members, key=record_sort_key)),
    )


def find_item_index(items: list[UnifiedItem], key: Hashable) -> int | None:
    """Index of the item whose key is *key*, or None.

    Exercise ids and superset ids share one key space in a view; when both
    match, the caller has to disambiguate, so the first match is not guessed.
    """
    matches = [i for i, item in enumerate(items) if item.key == key]
    if not matches:
        return None
    if len(matches) > 1:
        raise InvalidOperationError(f"Item key {key!r} is ambiguous in this section")
    return matches[0]


def view_order(items: list[UnifiedItem]) -> list[Hashable]:
    """Exercise ids in reading order, superset members expanded in place."""
    return [record.id for item in items for record in item.exercises]
