from __future__ import annotations

from collections import OrderedDict
from dataclasses import dataclass
from typing import Any, Callable, Dict, Generic, Hashable, Optional, TypeVar

from ...domain import CachePolicy

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")


@dataclass
class CacheStats:
    hits: int = 0
    misses: int = 0
    evictions: int = 0
    invalidations: int = 0

    @property
    def hit_rate(self) -> float:
        total = self.hits + self.misses
        return self.hits / total if total else 0.0

    def reset(self) -> None:
        self.hits = self.misses = self.evictions = self.invalidations = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "hits": self.hits,
            "misses": self.misses,
            "evictions": self.evictions,
            "invalidations": self.invalidations,
            "hit_rate": round(self.hit_rate, 4),
        }


class QueryCache(Generic[K, V]):
    """Bounded mapping of query keys to computed results.

    ``CachePolicy.LRU`` refreshes an entry on every hit; ``CachePolicy.FIFO``
    evicts strictly in insertion order. Not thread-safe on its own: the
    owning store serializes access.
    """

    def __init__(self, capacity: int = 128, policy: CachePolicy = CachePolicy.LRU) -> None:
        if capacity < 1:
            raise ValueError("cache capacity must be at least 1")
        self.capacity = capacity
        self.policy = CachePolicy(policy)
        self.stats = CacheStats()
        self._entries: "OrderedDict[K, V]" = OrderedDict()

    def lookup(self, key: K) -> Optional[V]:
        """Return the cached value, counting a hit or a miss."""

        if key not in self._entries:
            self.stats.misses += 1
            return None
        self.stats.hits += 1
        if self.policy is CachePolicy.LRU:
            self._entries.move_to_end(key)
        return self._entries[key]

    def store(self, key: K, value: V) -> None:
        if key in self._entries:
            self._entries.move_to_end(key)
        self._entries[key] = value
        while len(self._entries) > self.capacity:
            self._entries.popitem(last=False)
            self.stats.evictions += 1

    def invalidate(self, predicate: Callable[[K], bool]) -> int:
        stale = [key for key in self._entries if predicate(key)]
        for key in stale:
            del self._entries[key]
        self.stats.invalidations += len(stale)
        return len(stale)

    def clear(self, *, reset_stats: bool = True) -> None:
        self._entries.clear()
        if reset_stats:
            self.stats.reset()

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def to_dict(self) -> Dict[str, Any]:
        payload = self.stats.to_dict()
        payload.update({"size": len(self._entries), "capacity": self.capacity, "policy": self.policy.value})
        return payload
