"""System memory-pressure monitor feeding ``trim_memory`` listeners.

Samples system memory through :mod:`psutil`, maps the used share onto a
:class:`~pixcache.memory.trim.TrimLevel` and notifies listeners (typically
:meth:`MemoryCache.trim_memory`) when pressure escalates.  Designed to be
polled periodically, e.g. from a timer or background thread, rather than
running its own loop.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple

import psutil

from ...config import (
    PRESSURE_CRITICAL_PERCENT,
    PRESSURE_LOW_PERCENT,
    PRESSURE_MODERATE_PERCENT,
)
from ...memory.trim import TrimLevel

LOGGER = logging.getLogger(__name__)

MiB: int = 1 << 20


@dataclass(frozen=True)
class MemorySnapshot:
    """Point-in-time system memory reading."""

    total_bytes: int = 0
    available_bytes: int = 0

    @property
    def used_percent(self) -> float:
        if self.total_bytes <= 0:
            return 0.0
        used = self.total_bytes - self.available_bytes
        return 100.0 * used / self.total_bytes

    @property
    def available_mib(self) -> float:
        return self.available_bytes / MiB


# Listener signature, e.g. ``MemoryCache.trim_memory``.
TrimListener = Callable[[int], None]

# Returns ``(total_bytes, available_bytes)``.
MemoryReader = Callable[[], Tuple[int, int]]


def _read_virtual_memory() -> Tuple[int, int]:
    mem = psutil.virtual_memory()
    return mem.total, mem.available


class MemoryPressureMonitor:
    """Translate system memory usage into trim levels.

    Parameters
    ----------
    moderate_percent, low_percent, critical_percent:
        Used-memory percentages at which ``RUNNING_MODERATE``,
        ``RUNNING_LOW`` and ``RUNNING_CRITICAL`` are reported.  Must be
        strictly increasing.
    reader:
        Optional callable returning ``(total_bytes, available_bytes)``;
        defaults to :func:`psutil.virtual_memory`.
    """

    def __init__(
        self,
        moderate_percent: float = PRESSURE_MODERATE_PERCENT,
        low_percent: float = PRESSURE_LOW_PERCENT,
        critical_percent: float = PRESSURE_CRITICAL_PERCENT,
        *,
        reader: MemoryReader | None = None,
    ) -> None:
        if not moderate_percent < low_percent < critical_percent:
            raise ValueError(
                "pressure thresholds must be strictly increasing: "
                f"{moderate_percent}, {low_percent}, {critical_percent}"
            )
        self._thresholds = (
            (critical_percent, TrimLevel.RUNNING_CRITICAL),
            (low_percent, TrimLevel.RUNNING_LOW),
            (moderate_percent, TrimLevel.RUNNING_MODERATE),
        )
        self._reader = reader or _read_virtual_memory

        self._listeners: List[TrimListener] = []
        self._lock = threading.Lock()
        self._last_snapshot = MemorySnapshot()
        self._last_level: Optional[TrimLevel] = None

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------

    def add_listener(self, listener: TrimListener) -> None:
        with self._lock:
            self._listeners.append(listener)

    def remove_listener(self, listener: TrimListener) -> None:
        with self._lock:
            try:
                self._listeners.remove(listener)
            except ValueError:
                pass

    # ------------------------------------------------------------------
    # Polling
    # ------------------------------------------------------------------

    def check(self) -> MemorySnapshot:
        """Sample memory and notify listeners if pressure escalated.

        A level is dispatched once; it fires again only after usage drops
        below its threshold and climbs back.  Returns the latest
        :class:`MemorySnapshot`.
        """
        total, available = self._reader()
        snap = MemorySnapshot(total_bytes=total, available_bytes=available)
        level = self._level_for(snap.used_percent)
        with self._lock:
            self._last_snapshot = snap
            previous = self._last_level
            self._last_level = level
            escalated = level is not None and (previous is None or level > previous)
            listeners = list(self._listeners)

        if escalated:
            LOGGER.warning(
                "Memory pressure %s: %.1f%% used, %.1f MiB available",
                level.name,
                snap.used_percent,
                snap.available_mib,
            )
            self._dispatch(listeners, level)
        return snap

    def notify_backgrounded(self) -> None:
        """Tell listeners the UI went away; not a low-memory signal."""
        with self._lock:
            listeners = list(self._listeners)
        self._dispatch(listeners, TrimLevel.UI_HIDDEN)

    @property
    def last_snapshot(self) -> MemorySnapshot:
        with self._lock:
            return self._last_snapshot

    @property
    def last_level(self) -> Optional[TrimLevel]:
        with self._lock:
            return self._last_level

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _level_for(self, used_percent: float) -> Optional[TrimLevel]:
        for threshold, level in self._thresholds:
            if used_percent >= threshold:
                return level
        return None

    @staticmethod
    def _dispatch(listeners: List[TrimListener], level: TrimLevel) -> None:
        for listener in listeners:
            try:
                listener(level)
            except Exception:
                LOGGER.exception("Error in trim_memory listener for level %s", level.name)
