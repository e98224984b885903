"""Tests for NullValueCache: the disabled weak tier."""

from __future__ import annotations

from pixcache.memory.trim import TrimLevel
from pixcache.memory.weak_cache import NullValueCache, ValueCache


class _Bitmap:
    pass


def test_is_a_value_cache():
    assert isinstance(NullValueCache(), ValueCache)


def test_never_retains_anything():
    cache = NullValueCache()
    bitmap = _Bitmap()
    cache.set("k", bitmap, False, 100)
    assert cache.get("k") is None
    assert cache.remove("k") is False
    assert cache.remove_buffer(bitmap) is False


def test_maintenance_calls_are_no_ops():
    cache = NullValueCache()
    cache.clear_memory()
    cache.trim_memory(TrimLevel.COMPLETE)
    cache.close()
    assert cache.get("k") is None
