from __future__ import annotations

from .timeline_index import TimelineIndex

__all__ = ["TimelineIndex"]
