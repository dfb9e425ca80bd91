"""Reorder engine: moves, superset grouping and position re-linearization."""

from ordering_engine.reorder.engine import ReorderEngine

__all__ = ["ReorderEngine"]
