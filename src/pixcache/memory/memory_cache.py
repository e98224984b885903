"""Two-tier memory cache entry point: strong tier, then weak tier."""

from __future__ import annotations

import logging
from typing import Any, Hashable

from ..errors import CacheClosedError
from ..infrastructure.services.cache_stats import CacheStatsCollector
from .key import CachedValue
from .strong_cache import StrongMemoryCache
from .weak_cache import ValueCache

LOGGER = logging.getLogger(__name__)

STRONG_TIER = "strong"
WEAK_TIER = "weak"


class MemoryCache:
    """Unified lookup over the strong and weak tiers.

    Readers call :meth:`get` before falling back to a fresh decode.  Decoded
    buffers enter through :meth:`set` into the strong tier, which hands them
    to the weak tier when it lets go of them.  After :meth:`close` every
    operation raises :class:`~pixcache.errors.CacheClosedError`.
    """

    def __init__(
        self,
        strong: StrongMemoryCache,
        weak: ValueCache,
        *,
        stats: CacheStatsCollector | None = None,
    ) -> None:
        self._strong = strong
        self._weak = weak
        self._stats = stats
        self._closed = False

    def get(self, key: Hashable) -> CachedValue | None:
        """Synchronous lookup: strong -> weak.  Returns *None* on miss."""
        self._ensure_open()
        value = self._strong.get(key)
        if value is not None:
            if self._stats:
                self._stats.record_hit(STRONG_TIER)
            return value

        value = self._weak.get(key)
        if self._stats:
            self._stats.record_miss(STRONG_TIER)
            if value is not None:
                self._stats.record_hit(WEAK_TIER)
            else:
                self._stats.record_miss(WEAK_TIER)
        return value

    def set(self, key: Hashable, buffer: Any, is_sampled: bool = False, size: int | None = None) -> None:
        self._ensure_open()
        self._strong.set(key, buffer, is_sampled, size)

    def remove(self, key: Hashable) -> bool:
        """Remove *key* from both tiers; return whether either held it."""
        self._ensure_open()
        removed_strong = self._strong.remove(key)
        removed_weak = self._weak.remove(key)
        return removed_strong or removed_weak

    def remove_buffer(self, buffer: Any) -> bool:
        """Forget *buffer* in the weak tier, e.g. after it was recycled."""
        self._ensure_open()
        return self._weak.remove_buffer(buffer)

    def clear_memory(self) -> None:
        self._ensure_open()
        self._strong.clear_memory()
        self._weak.clear_memory()

    def trim_memory(self, level: int) -> None:
        """Forward a memory-pressure *level* to both tiers."""
        self._ensure_open()
        LOGGER.debug("Memory cache received trim level %s", level)
        self._strong.trim_memory(level)
        self._weak.trim_memory(level)

    def close(self) -> None:
        """Release both tiers.  Calling it again does nothing."""
        if self._closed:
            return
        self._closed = True
        self._strong.clear_memory()
        self._weak.close()

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def size(self) -> int:
        """Bytes currently held by the strong tier."""
        return self._strong.size

    @property
    def max_size(self) -> int:
        return self._strong.max_size

    @property
    def strong(self) -> StrongMemoryCache:
        return self._strong

    @property
    def weak(self) -> ValueCache:
        return self._weak

    @property
    def stats(self) -> CacheStatsCollector | None:
        return self._stats

    def _ensure_open(self) -> None:
        if self._closed:
            raise CacheClosedError("MemoryCache used after close()")
