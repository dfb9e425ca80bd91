"""Conversion between application record dicts and engine records.

The planner stores exercises as plain dicts using the keys ``id``,
``session``, ``part`` (home section), ``section`` (display section, null
when it is the home section), ``supersetId`` and ``position``. Every other
key is training data and round-trips untouched through ``payload``.

All functions are pure (no I/O).
"""

from __future__ import annotations

import json
from typing import Any, Iterable, Mapping

from ordering_engine.exceptions import InvalidOperationError
from ordering_engine.models.exercise import ExerciseRecord
from ordering_engine.models.plan import PlanState
from ordering_engine.models.superset import SupersetInfo

_ORDERING_KEYS = ("id", "session", "part", "section", "supersetId", "position")
_REQUIRED_KEYS = ("id", "session", "part")


def record_from_dict(data: Mapping[str, Any]) -> ExerciseRecord:
    """Build an ExerciseRecord from an application record dict."""
    missing = [key for key in _REQUIRED_KEYS if data.get(key) is None]
    if missing:
        raise InvalidOperationError(f"Exercise record is missing {', '.join(missing)}")

    superset_id = data.get("supersetId")
    if superset_id == "":
        superset_id = None
    display = data.get("section") if superset_id is not None else None
    return ExerciseRecord(
        id=data["id"],
        session_id=data["session"],
        section_id=data["part"],
        position=int(data.get("position") or 0),
        superset_id=superset_id,
        display_section_id=display or data["part"],
        payload={k: v for k, v in data.items() if k not in _ORDERING_KEYS},
    )


def record_to_dict(record: ExerciseRecord) -> dict[str, Any]:
    """Inverse of record_from_dict; ``section`` is null for standalone records."""
    result = dict(record.payload)
    result.update(
        {
            "id": record.id,
            "session": record.session_id,
            "part": record.section_id,
            "section": None if record.is_standalone else record.display_section_id,
            "supersetId": record.superset_id,
            "position": record.position,
        }
    )
    return result


def superset_from_dict(data: Mapping[str, Any]) -> SupersetInfo:
    return SupersetInfo(
        id=data["id"],
        session_id=data["session"],
        host_section_id=data["hostSection"],
        display_number=int(data["displayNumber"]),
    )


def superset_to_dict(info: SupersetInfo) -> dict[str, Any]:
    return {
        "id": info.id,
        "session": info.session_id,
        "hostSection": info.host_section_id,
        "displayNumber": info.display_number,
    }


def plan_from_dicts(
    exercises: Iterable[Mapping[str, Any]],
    supersets: Iterable[Mapping[str, Any]] = (),
) -> PlanState:
    """Load a PlanState, rebuilding any superset bookkeeping that is missing."""
    return PlanState.from_records(
        (record_from_dict(e) for e in exercises),
        (superset_from_dict(s) for s in supersets),
    )


def plan_to_dicts(plan: PlanState) -> dict[str, list[dict[str, Any]]]:
    """Dump a PlanState as ``{"exercises": [...], "supersets": [...]}``."""
    return {
        "exercises": [record_to_dict(e) for e in plan.exercises],
        "supersets": [superset_to_dict(s) for s in plan.supersets],
    }


def plan_to_json_string(plan: PlanState, indent: int = 2) -> str:
    """Dump a PlanState as a JSON string."""
    return json.dumps(plan_to_dicts(plan), indent=indent)


def plan_from_json_string(text: str) -> PlanState:
    data = json.loads(text)
    return plan_from_dicts(data.get("exercises", []), data.get("supersets", []))
