"""Build configured cache instances from settings."""

from __future__ import annotations

import logging
from typing import Any

from .infrastructure.services.cache_stats import CacheStatsCollector
from .infrastructure.services.memory_monitor import MemoryPressureMonitor, MemoryReader
from .memory.memory_cache import MemoryCache
from .memory.strong_cache import StrongMemoryCache
from .memory.weak_cache import NullValueCache, ValueCache, WeakValueCache
from .settings.loader import parse_settings
from .utils.sizing import memory_budget

LOGGER = logging.getLogger(__name__)


def create_memory_cache(
    settings: dict[str, Any] | None = None,
    *,
    stats: CacheStatsCollector | None = None,
) -> MemoryCache:
    """Return a :class:`MemoryCache` configured by *settings*.

    A disabled weak tier becomes a :class:`NullValueCache`.  A disabled
    strong tier keeps a zero byte budget so every buffer passes straight to
    the weak tier.
    """
    config = parse_settings(settings)["memory_cache"]

    weak: ValueCache
    if config["weak_references_enabled"]:
        weak = WeakValueCache(clean_up_interval=config["clean_up_interval"])
    else:
        weak = NullValueCache()

    if not config["strong_references_enabled"]:
        max_size = 0
    elif config["max_size_bytes"] is not None:
        max_size = config["max_size_bytes"]
    else:
        max_size = memory_budget(config["max_size_percent"])

    LOGGER.debug(
        "Creating memory cache: strong budget %d bytes, weak tier %s",
        max_size,
        type(weak).__name__,
    )
    strong = StrongMemoryCache(max_size, weak, stats=stats)
    return MemoryCache(strong, weak, stats=stats)


def create_pressure_monitor(
    cache: MemoryCache,
    settings: dict[str, Any] | None = None,
    *,
    reader: MemoryReader | None = None,
) -> MemoryPressureMonitor:
    """Return a :class:`MemoryPressureMonitor` wired to ``cache.trim_memory``."""
    config = parse_settings(settings)["memory_pressure"]
    monitor = MemoryPressureMonitor(
        config["moderate_percent"],
        config["low_percent"],
        config["critical_percent"],
        reader=reader,
    )
    monitor.add_listener(cache.trim_memory)
    return monitor
