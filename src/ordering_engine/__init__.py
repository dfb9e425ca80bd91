"""Ordering engine for training-plan sessions.

Keeps a flat collection of exercise records consistent with the unified
view (standalone exercises and superset groups) that coaches reorder.
"""

from ordering_engine.exceptions import (
    InvalidOperationError,
    InvariantViolation,
    NotFoundError,
    OrderingError,
)
from ordering_engine.invariants import check_invariants
from ordering_engine.models import (
    Direction,
    ExerciseItem,
    ExerciseRecord,
    ItemKind,
    PlanState,
    SupersetGroup,
    SupersetInfo,
    SupersetItem,
    UnifiedItem,
)
from ordering_engine.reorder import ReorderEngine
from ordering_engine.view import build_session_timeline, build_unified_view, timeline_frame

__all__ = [
    "Direction",
    "ExerciseItem",
    "ExerciseRecord",
    "InvalidOperationError",
    "InvariantViolation",
    "ItemKind",
    "NotFoundError",
    "OrderingError",
    "PlanState",
    "ReorderEngine",
    "SupersetGroup",
    "SupersetInfo",
    "SupersetItem",
    "UnifiedItem",
    "build_session_timeline",
    "build_unified_view",
    "check_invariants",
    "timeline_frame",
]
