"""In-memory caching tiers for decoded image buffers."""

from .handles import CollectibleHandle, WeakHandle, identity_of
from .key import CachedValue, MemoryCacheKey
from .memory_cache import MemoryCache
from .strong_cache import StrongMemoryCache
from .trim import TrimLevel, is_backgrounded, is_low_memory
from .weak_cache import NullValueCache, ValueCache, WeakValueCache

__all__ = [
    "CachedValue",
    "CollectibleHandle",
    "MemoryCache",
    "MemoryCacheKey",
    "NullValueCache",
    "StrongMemoryCache",
    "TrimLevel",
    "ValueCache",
    "WeakHandle",
    "WeakValueCache",
    "identity_of",
    "is_backgrounded",
    "is_low_memory",
]
