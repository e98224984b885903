"""Two-tier in-memory cache for decoded image buffers."""

from .bootstrap import create_memory_cache, create_pressure_monitor
from .memory import (
    CachedValue,
    MemoryCache,
    MemoryCacheKey,
    NullValueCache,
    StrongMemoryCache,
    TrimLevel,
    ValueCache,
    WeakValueCache,
)

__all__ = [
    "CachedValue",
    "MemoryCache",
    "MemoryCacheKey",
    "NullValueCache",
    "StrongMemoryCache",
    "TrimLevel",
    "ValueCache",
    "WeakValueCache",
    "create_memory_cache",
    "create_pressure_monitor",
]
