"""Per-tier hit, miss and eviction counters.

Shared by the strong and weak tiers of :class:`~pixcache.memory.memory_cache.MemoryCache`
and safe to update from decode worker threads.
"""

from __future__ import annotations

import threading
from collections import Counter
from dataclasses import dataclass


@dataclass(frozen=True)
class TierStats:
    """Immutable snapshot of one tier's counters."""

    hits: int = 0
    misses: int = 0
    evictions: int = 0

    @property
    def lookups(self) -> int:
        return self.hits + self.misses

    @property
    def hit_rate(self) -> float:
        """Hit rate in [0.0, 1.0]; 0.0 before the first lookup."""
        if self.lookups == 0:
            return 0.0
        return self.hits / self.lookups


class CacheStatsCollector:
    """Thread-safe collector keyed by tier name (``"strong"``, ``"weak"``)."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._hits: Counter[str] = Counter()
        self._misses: Counter[str] = Counter()
        self._evictions: Counter[str] = Counter()

    def record_hit(self, tier: str) -> None:
        with self._lock:
            self._hits[tier] += 1

    def record_miss(self, tier: str) -> None:
        with self._lock:
            self._misses[tier] += 1

    def record_eviction(self, tier: str, count: int = 1) -> None:
        with self._lock:
            self._evictions[tier] += count

    def get(self, tier: str) -> TierStats:
        with self._lock:
            return self._snapshot(tier)

    def all(self) -> dict[str, TierStats]:
        """Snapshots for every tier that has recorded anything, sorted by name."""
        with self._lock:
            tiers = set(self._hits) | set(self._misses) | set(self._evictions)
            return {tier: self._snapshot(tier) for tier in sorted(tiers)}

    def reset(self, tier: str | None = None) -> None:
        """Reset one tier, or every tier when *tier* is ``None``."""
        with self._lock:
            counters = (self._hits, self._misses, self._evictions)
            for counter in counters:
                if tier is None:
                    counter.clear()
                else:
                    counter.pop(tier, None)

    def _snapshot(self, tier: str) -> TierStats:
        return TierStats(
            hits=self._hits[tier],
            misses=self._misses[tier],
            evictions=self._evictions[tier],
        )
