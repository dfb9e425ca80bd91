"""Unified view building and the session timeline."""

from ordering_engine.view.builder import build_unified_view
from ordering_engine.view.timeline import TimelineRow, build_session_timeline, timeline_frame

__all__ = ["TimelineRow", "build_session_timeline", "build_unified_view", "timeline_frame"]
