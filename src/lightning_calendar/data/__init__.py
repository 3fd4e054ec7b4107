"""Data access layer."""

from __future__ import annotations

from .cache import CacheStats, QueryCache
from .event_store import EventStore
from .index import TimelineIndex

__all__ = ["CacheStats", "EventStore", "QueryCache", "TimelineIndex"]
