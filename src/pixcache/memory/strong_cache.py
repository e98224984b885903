"""Strong tier: LRU cache that owns decoded buffers within a byte budget."""

from __future__ import annotations

import logging
import threading
from collections import OrderedDict
from dataclasses import dataclass
from typing import Any, Callable, Hashable

from ..infrastructure.services.cache_stats import CacheStatsCollector
from ..utils.sizing import allocation_size
from .key import CachedValue
from .trim import TrimLevel
from .weak_cache import ValueCache

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class _StrongEntry:
    buffer: Any
    is_sampled: bool
    size: int


class StrongMemoryCache:
    """LRU memory cache holding strong references to buffers.

    Evicts the least-recently-used entries once the summed *size* exceeds
    *max_size*.  Every entry that leaves this tier (evicted, replaced or
    removed) is handed to *weak_cache* so it can still be found while the
    application keeps it alive.  Buffers that cannot be weakly referenced
    (``bytes``, ``bytearray``) are dropped at that point.  A buffer larger
    than the whole budget skips this tier and goes straight to *weak_cache*.
    """

    def __init__(
        self,
        max_size: int,
        weak_cache: ValueCache,
        *,
        size_of: Callable[[Any], int] = allocation_size,
        stats: CacheStatsCollector | None = None,
    ) -> None:
        if max_size < 0:
            raise ValueError(f"max_size must be non-negative, got {max_size}")
        self._max_size = max_size
        self._weak = weak_cache
        self._size_of = size_of
        self._stats = stats
        self._cache: OrderedDict[Hashable, _StrongEntry] = OrderedDict()
        self._size = 0
        self._lock = threading.Lock()

    def get(self, key: Hashable) -> CachedValue | None:
        with self._lock:
            entry = self._cache.get(key)
            if entry is None:
                return None
            self._cache.move_to_end(key)
            return CachedValue(entry.buffer, entry.is_sampled)

    def set(self, key: Hashable, buffer: Any, is_sampled: bool = False, size: int | None = None) -> None:
        """Store *buffer* under *key*; *size* defaults to its allocation size."""
        if size is None:
            size = self._size_of(buffer)
        if size < 0:
            raise ValueError(f"size must be non-negative, got {size}")
        entry = _StrongEntry(buffer, is_sampled, size)
        with self._lock:
            released = []
            previous = self._cache.pop(key, None)
            if previous is not None:
                self._size -= previous.size
                released.append((key, previous))
            if size > self._max_size:
                released.append((key, entry))
            else:
                self._cache[key] = entry
                self._size += size
                released.extend(self._evict_to(self._max_size))
        self._release(released)

    def remove(self, key: Hashable) -> bool:
        with self._lock:
            entry = self._cache.pop(key, None)
            if entry is None:
                return False
            self._size -= entry.size
        self._release([(key, entry)])
        return True

    def trim_to_size(self, size: int) -> None:
        """Evict least-recently-used entries until at most *size* bytes remain."""
        with self._lock:
            released = self._evict_to(max(0, size))
        self._release(released)

    def clear_memory(self) -> None:
        self.trim_to_size(0)

    def trim_memory(self, level: int) -> None:
        """Shrink the tier in response to a memory-pressure *level*.

        In the background everything goes; while running low the tier
        halves.  Other levels leave it untouched.
        """
        if level >= TrimLevel.BACKGROUND:
            LOGGER.debug("Trim level %s: clearing strong cache", level)
            self.clear_memory()
        elif TrimLevel.RUNNING_LOW <= level < TrimLevel.UI_HIDDEN:
            target = self.size // 2
            LOGGER.debug("Trim level %s: trimming strong cache to %d bytes", level, target)
            self.trim_to_size(target)

    @property
    def size(self) -> int:
        with self._lock:
            return self._size

    @property
    def max_size(self) -> int:
        return self._max_size

    def __len__(self) -> int:
        with self._lock:
            return len(self._cache)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _evict_to(self, size: int) -> list[tuple[Hashable, _StrongEntry]]:
        evicted = []
        while self._size > size and self._cache:
            key, entry = self._cache.popitem(last=False)  # evict oldest
            self._size -= entry.size
            evicted.append((key, entry))
        if self._stats and evicted:
            self._stats.record_eviction("strong", len(evicted))
        return evicted

    def _release(self, released: list[tuple[Hashable, _StrongEntry]]) -> None:
        # Runs outside the lock; the weak tier has its own.
        for key, entry in released:
            try:
                self._weak.set(key, entry.buffer, entry.is_sampled, entry.size)
            except TypeError:
                # bytes and bytearray cannot be weakly referenced.
                LOGGER.debug(
                    "Dropping %s for %s: not weakly referenceable",
                    type(entry.buffer).__name__,
                    key,
                )
