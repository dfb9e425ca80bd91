"""Superset display-number allocation and compaction."""

from __future__ import annotations

from dataclasses import replace
from typing import Hashable, Iterable

from ordering_engine.models.enums import FIRST_DISPLAY_NUMBER
from ordering_engine.models.plan import smallest_unused_number
from ordering_engine.models.superset import SupersetInfo


def next_display_number(supersets: Iterable[SupersetInfo], session_id: Hashable) -> int:
    """Smallest display number not used by a live superset of the session."""
    return smallest_unused_number(s.display_number for s in supersets if s.session_id == session_id)


def compact_display_numbers(
    supersets: Iterable[SupersetInfo], session_id: Hashable
) -> tuple[SupersetInfo, ...]:
    """Renumber the session's supersets 1..N keeping their relative order.

    Supersets of other sessions, and the tuple order, are left as they are.
    """
    supersets = tuple(supersets)
    ranked = sorted(
        (s for s in supersets if s.session_id == session_id),
        key=lambda s: s.display_number,
    )
    renumbered = {s.id: FIRST_DISPLAY_NUMBER + rank for rank, s in enumerate(ranked)}

    return tuple(
        replace(s, display_number=renumbered[s.id])
        if s.id in renumbered and s.display_number != renumbered[s.id]
        else s
        for s in supersets
    )
