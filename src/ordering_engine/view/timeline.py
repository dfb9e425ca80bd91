"""Session timeline — the reading order of a whole session across sections.

Sections are laid out in the order the session shows them; inside a
section the unified view decides the order and superset members are
expanded in place.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Hashable, Sequence

import pandas as pd

from ordering_engine.models.exercise import ExerciseRecord
from ordering_engine.models.plan import PlanState
from ordering_engine.models.unified import SupersetItem
from ordering_engine.view.builder import build_unified_view

TIMELINE_COLUMNS = [
    "section_id",
    "item_index",
    "exercise_id",
    "home_section_id",
    "position",
    "superset_id",
    "display_number",
]


@dataclass(frozen=True)
class TimelineRow:
    """One exercise in the session timeline."""

    section_id: str
    item_index: int          # index of the owning unified item in its section
    exercise: ExerciseRecord
    superset_id: Hashable | None = None
    display_number: int | None = None


def build_session_timeline(
    plan: PlanState,
    session_id: Hashable,
    section_order: Sequence[str] | None = None,
) -> list[TimelineRow]:
    """Flatten every section of a session into one ordered list of rows.

    Args:
        plan: Current plan snapshot.
        session_id: Session to lay out.
        section_order: Sections in display order. Sections holding exercises
            but missing from the order are appended sorted by id. Defaults to
            all sections of the session sorted by id.

    Returns:
        Rows in reading order.
    """
    present = plan.section_ids(session_id)
    if section_order is None:
        sections = list(present)
    else:
        sections = list(dict.fromkeys(section_order))
        sections += [s for s in present if s not in sections]

    rows: list[TimelineRow] = []
    for section_id in sections:
        items = build_unified_view(plan.exercises, session_id, section_id, plan.supersets)
        for index, item in enumerate(items):
            if isinstance(item, SupersetItem):
                for record in item.group.exercises:
                    rows.append(
                        TimelineRow(
                            section_id=section_id,
                            item_index=index,
                            exercise=record,
                            superset_id=item.group.id,
                            display_number=item.group.display_number,
                        )
                    )
            else:
                rows.append(TimelineRow(section_id=section_id, item_index=index, exercise=item.exercise))
    return rows


def timeline_frame(
    plan: PlanState,
    session_id: Hashable,
    section_order: Sequence[str] | None = None,
) -> pd.DataFrame:
    """Session timeline as a DataFrame, one row per exercise in reading order."""
    rows = build_session_timeline(plan, session_id, section_order)
    records = [
        {
            "section_id": row.section_id,
            "item_index": row.item_index,
            "exercise_id": row.exercise.id,
            "home_section_id": row.exercise.section_id,
            "position": row.exercise.position,
            "superset_id": row.superset_id,
            "display_number": row.display_number,
        }
        for row in rows
    ]
    frame = pd.DataFrame.from_records(records, columns=TIMELINE_COLUMNS)
    # Nullable integer: standalone rows have no display number
    frame["display_number"] = frame["display_number"].astype("Int64")
    return frame
