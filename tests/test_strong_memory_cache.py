"""Tests for StrongMemoryCache: the owning LRU tier."""

from __future__ import annotations

import pytest

from pixcache.infrastructure.services.cache_stats import CacheStatsCollector
from pixcache.memory.key import CachedValue
from pixcache.memory.strong_cache import StrongMemoryCache
from pixcache.memory.trim import TrimLevel
from pixcache.memory.weak_cache import NullValueCache, WeakValueCache


class RecordingValueCache(NullValueCache):
    """Captures everything the strong tier hands over."""

    def __init__(self):
        self.received: list[tuple] = []

    def set(self, key, buffer, is_sampled=False, size=0):
        self.received.append((key, buffer, is_sampled, size))


@pytest.fixture()
def weak():
    return RecordingValueCache()


class TestStrongMemoryCache:
    def test_set_and_get(self, weak):
        cache = StrongMemoryCache(1000, weak)
        cache.set("a", b"pixels", True, 100)
        assert cache.get("a") == CachedValue(b"pixels", True)
        assert cache.size == 100
        assert len(cache) == 1

    def test_get_miss(self, weak):
        assert StrongMemoryCache(1000, weak).get("missing") is None

    def test_size_defaults_to_allocation_size(self, weak):
        cache = StrongMemoryCache(1000, weak)
        cache.set("a", b"x" * 64)
        assert cache.size == 64

    def test_lru_eviction_hands_buffer_to_weak_tier(self, weak):
        cache = StrongMemoryCache(250, weak)
        cache.set("a", "A", False, 100)
        cache.set("b", "B", True, 100)
        cache.get("a")  # a becomes most recent
        cache.set("c", "C", False, 100)

        assert cache.get("b") is None
        assert cache.get("a") is not None
        assert weak.received == [("b", "B", True, 100)]
        assert cache.size == 200

    def test_oversized_buffer_bypasses_strong_tier(self, weak):
        cache = StrongMemoryCache(50, weak)
        cache.set("big", "BIG", False, 51)
        assert cache.get("big") is None
        assert weak.received == [("big", "BIG", False, 51)]
        assert cache.size == 0

    def test_oversized_replacement_releases_previous(self, weak):
        cache = StrongMemoryCache(50, weak)
        cache.set("k", "small", True, 10)
        cache.set("k", "BIG", False, 80)
        assert cache.get("k") is None
        assert weak.received == [("k", "small", True, 10), ("k", "BIG", False, 80)]

    def test_replacement_hands_previous_to_weak_tier(self, weak):
        cache = StrongMemoryCache(1000, weak)
        cache.set("k", "placeholder", True, 10)
        cache.set("k", "final", False, 100)
        assert cache.get("k").buffer == "final"
        assert weak.received == [("k", "placeholder", True, 10)]
        assert cache.size == 100

    def test_remove(self, weak):
        cache = StrongMemoryCache(1000, weak)
        cache.set("k", "K", False, 10)
        assert cache.remove("k") is True
        assert cache.remove("k") is False
        assert weak.received == [("k", "K", False, 10)]
        assert cache.size == 0

    def test_clear_memory_releases_everything(self, weak):
        cache = StrongMemoryCache(1000, weak)
        cache.set("a", "A", False, 10)
        cache.set("b", "B", False, 10)
        cache.clear_memory()
        assert len(cache) == 0
        assert [entry[0] for entry in weak.received] == ["a", "b"]

    def test_trim_to_size(self, weak):
        cache = StrongMemoryCache(1000, weak)
        for name in "abcd":
            cache.set(name, name.upper(), False, 100)
        cache.trim_to_size(250)
        assert cache.size == 200
        assert cache.get("a") is None and cache.get("b") is None

    @pytest.mark.parametrize("level", [TrimLevel.BACKGROUND, TrimLevel.MODERATE, TrimLevel.COMPLETE])
    def test_trim_memory_clears_in_background(self, weak, level):
        cache = StrongMemoryCache(1000, weak)
        cache.set("a", "A", False, 100)
        cache.trim_memory(level)
        assert cache.size == 0

    @pytest.mark.parametrize("level", [TrimLevel.RUNNING_LOW, TrimLevel.RUNNING_CRITICAL])
    def test_trim_memory_halves_when_running_low(self, weak, level):
        cache = StrongMemoryCache(1000, weak)
        for name in "abcd":
            cache.set(name, name.upper(), False, 100)
        cache.trim_memory(level)
        assert cache.size == 200

    @pytest.mark.parametrize("level", [TrimLevel.RUNNING_MODERATE, TrimLevel.UI_HIDDEN])
    def test_trim_memory_ignores_mild_levels(self, weak, level):
        cache = StrongMemoryCache(1000, weak)
        cache.set("a", "A", False, 100)
        cache.trim_memory(level)
        assert cache.size == 100
        assert weak.received == []

    def test_evictions_recorded_in_stats(self, weak):
        stats = CacheStatsCollector()
        cache = StrongMemoryCache(100, weak, stats=stats)
        cache.set("a", "A", False, 100)
        cache.set("b", "B", False, 100)
        assert stats.get("strong").evictions == 1

    def test_negative_budget_rejected(self, weak):
        with pytest.raises(ValueError):
            StrongMemoryCache(-1, weak)

    def test_negative_size_rejected(self, weak):
        cache = StrongMemoryCache(100, weak)
        with pytest.raises(ValueError):
            cache.set("a", "A", False, -5)
        assert len(cache) == 0

    def test_replacements_and_removals_are_not_evictions(self, weak):
        stats = CacheStatsCollector()
        cache = StrongMemoryCache(1000, weak, stats=stats)
        cache.set("a", "A", True, 10)
        cache.set("a", "A2", False, 10)
        cache.remove("a")
        assert stats.get("strong").evictions == 0
        assert len(weak.received) == 2


class TestBytesBuffers:
    def test_evicting_bytes_does_not_raise(self):
        weak = WeakValueCache()
        cache = StrongMemoryCache(10, weak)
        cache.set("a", b"12345678")
        cache.set("b", b"abcdefgh")  # evicts a, which the weak tier cannot hold

        assert cache.get("a") is None
        assert cache.get("b") == CachedValue(b"abcdefgh", False)
        assert cache.size == 8
        assert weak.get("a") is None

    def test_remaining_entries_still_handed_over(self):
        weak = WeakValueCache()
        cache = StrongMemoryCache(1000, weak)
        picture = _Picture()
        cache.set("raw", b"x" * 100)
        cache.set("picture", picture, False, 100)
        cache.clear_memory()

        assert len(cache) == 0
        assert weak.get("raw") is None
        assert weak.get("picture").buffer is picture


class _Picture:
    pass
