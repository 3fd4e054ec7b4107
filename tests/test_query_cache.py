"""Tests for the bounded range-query cache."""

import pytest

from lightning_calendar.data import QueryCache
from lightning_calendar.domain import CachePolicy


class TestQueryCache:
    """Tests for QueryCache bookkeeping and eviction."""

    def test_lookup_counts_hits_and_misses(self):
        cache = QueryCache(capacity=4)

        assert cache.lookup("a") is None
        cache.store("a", 1)
        assert cache.lookup("a") == 1

        assert cache.stats.hits == 1
        assert cache.stats.misses == 1
        assert cache.stats.hit_rate == 0.5

    def test_lru_refreshes_on_hit(self):
        """Under LRU the least recently used entry is evicted first."""
        cache = QueryCache(capacity=2, policy=CachePolicy.LRU)
        cache.store("a", 1)
        cache.store("b", 2)
        cache.lookup("a")

        cache.store("c", 3)

        assert "a" in cache
        assert "b" not in cache
        assert cache.stats.evictions == 1

    def test_fifo_ignores_hits(self):
        """Under FIFO the oldest insertion is evicted regardless of use."""
        cache = QueryCache(capacity=2, policy=CachePolicy.FIFO)
        cache.store("a", 1)
        cache.store("b", 2)
        cache.lookup("a")

        cache.store("c", 3)

        assert "a" not in cache
        assert "b" in cache

    def test_invalidate_counts_separately_from_evictions(self):
        cache = QueryCache(capacity=8)
        for key in range(5):
            cache.store(key, key)

        dropped = cache.invalidate(lambda key: key % 2 == 0)

        assert dropped == 3
        assert len(cache) == 2
        assert cache.stats.invalidations == 3
        assert cache.stats.evictions == 0

    def test_clear_resets_stats(self):
        cache = QueryCache(capacity=2)
        cache.store("a", 1)
        cache.lookup("a")
        cache.lookup("b")

        cache.clear()

        assert len(cache) == 0
        assert cache.to_dict() == {
            "hits": 0,
            "misses": 0,
            "evictions": 0,
            "invalidations": 0,
            "hit_rate": 0.0,
            "size": 0,
            "capacity": 2,
            "policy": "lru",
        }

    def test_capacity_must_be_positive(self):
        with pytest.raises(ValueError):
            QueryCache(capacity=0)
