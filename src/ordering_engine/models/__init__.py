"""Data model: exercise records, superset bookkeeping, unified items, plan snapshots."""

from ordering_engine.models.enums import Direction, ItemKind
from ordering_engine.models.exercise import ExerciseRecord
from ordering_engine.models.plan import PlanState
from ordering_engine.models.superset import SupersetGroup, SupersetInfo
from ordering_engine.models.unified import ExerciseItem, SupersetItem, UnifiedItem

__all__ = [
    "Direction",
    "ExerciseItem",
    "ExerciseRecord",
    "ItemKind",
    "PlanState",
    "SupersetGroup",
    "SupersetInfo",
    "SupersetItem",
    "UnifiedItem",
]
