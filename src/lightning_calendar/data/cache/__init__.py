from __future__ import annotations

from .query_cache import CacheStats, QueryCache

__all__ = ["CacheStats", "QueryCache"]
