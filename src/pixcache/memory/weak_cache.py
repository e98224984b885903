"""Weak-reference tier for decoded image buffers.

Buffers land here when the strong tier lets go of them.  Ownership has by
then moved to application code (a view still drawing the image, a pending
export), so this tier only records a non-owning handle.  If the buffer is
still alive when it is requested again it can be reused instead of being
decoded a second time; if the collector has reclaimed it the lookup is a
plain miss.

Several buffers may be registered for the same key, for example a sampled
placeholder and the full-resolution result.  They are kept largest first so
that :meth:`WeakValueCache.get` prefers the best quality buffer still alive.
"""

from __future__ import annotations

import logging
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable, Hashable

from ..config import CLEAN_UP_INTERVAL
from ..errors import CacheClosedError
from .handles import CollectibleHandle, HandleFactory, WeakHandle, identity_of
from .key import CachedValue
from .trim import is_low_memory

LOGGER = logging.getLogger(__name__)


class ValueCache(ABC):
    """Interface shared by the weak tier and its disabled stand-in."""

    @abstractmethod
    def get(self, key: Hashable) -> CachedValue | None:
        """Return the value associated with *key*, or ``None`` on a miss."""

    @abstractmethod
    def set(self, key: Hashable, buffer: Any, is_sampled: bool = False, size: int = 0) -> None:
        """Register *buffer* as a candidate for *key* without owning it."""

    @abstractmethod
    def remove(self, key: Hashable) -> bool:
        """Drop every candidate stored for *key*."""

    @abstractmethod
    def remove_buffer(self, buffer: Any) -> bool:
        """Drop the first candidate that refers to *buffer*."""

    @abstractmethod
    def clear_memory(self) -> None:
        """Remove all values from this cache."""

    @abstractmethod
    def trim_memory(self, level: int) -> None:
        """React to a memory-pressure *level* from the host runtime."""

    def close(self) -> None:
        """Release the cache.  The default implementation does nothing."""


class NullValueCache(ValueCache):
    """A :class:`ValueCache` that holds no references at all.

    Used when the weak tier is disabled so callers never have to check
    whether it is active.
    """

    def get(self, key: Hashable) -> CachedValue | None:
        return None

    def set(self, key: Hashable, buffer: Any, is_sampled: bool = False, size: int = 0) -> None:
        pass

    def remove(self, key: Hashable) -> bool:
        return False

    def remove_buffer(self, buffer: Any) -> bool:
        return False

    def clear_memory(self) -> None:
        pass

    def trim_memory(self, level: int) -> None:
        pass


@dataclass(frozen=True)
class _Candidate:
    identity: int
    handle: CollectibleHandle
    is_sampled: bool
    size: int

    def is_alive(self) -> bool:
        return self.handle.get() is not None


class WeakValueCache(ValueCache):
    """Thread-safe weak tier keyed by logical decode request.

    Each key maps to a list of candidates sorted by descending *size*.
    Collected candidates are tolerated and pruned lazily: every
    *clean_up_interval* operations a sweep drops dead candidates and empty
    keys, and :meth:`trim_memory` forces a sweep when the runtime is short
    on memory.

    Parameters
    ----------
    clean_up_interval:
        Number of ``get``/``set``/``remove`` calls between two sweeps.
    handle_factory:
        Callable ``(buffer, identity) -> CollectibleHandle``.  Defaults to
        :class:`~pixcache.memory.handles.WeakHandle`.
    identity:
        Callable returning the identity recorded for a buffer at ``set``
        time.  Defaults to :func:`id`.
    """

    def __init__(
        self,
        *,
        clean_up_interval: int = CLEAN_UP_INTERVAL,
        handle_factory: HandleFactory = WeakHandle,
        identity: Callable[[Any], int] = identity_of,
    ) -> None:
        if clean_up_interval < 1:
            raise ValueError("clean_up_interval must be at least 1")
        self._clean_up_interval = clean_up_interval
        self._handle_factory = handle_factory
        self._identity = identity
        self._entries: dict[Hashable, list[_Candidate]] = {}
        self._operations_since_clean_up = 0
        self._closed = False
        self._lock = threading.RLock()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def get(self, key: Hashable) -> CachedValue | None:
        """Return the largest candidate for *key* whose buffer is still alive."""
        with self._lock:
            self._ensure_open()
            value = None
            for candidate in self._entries.get(key, ()):
                # Liveness is read once; the buffer may vanish right after.
                buffer = candidate.handle.get()
                if buffer is not None:
                    value = CachedValue(buffer, candidate.is_sampled)
                    break
            self._clean_up_if_necessary()
            return value

    def set(self, key: Hashable, buffer: Any, is_sampled: bool = False, size: int = 0) -> None:
        """Insert *buffer* into the candidate list of *key*, largest first.

        The new candidate goes before the first existing one whose size is
        not larger.  If that candidate already refers to the same buffer it
        is replaced instead of duplicated.
        """
        if size < 0:
            raise ValueError(f"size must be non-negative, got {size}")
        with self._lock:
            self._ensure_open()
            identity = self._identity(buffer)
            candidate = _Candidate(identity, self._handle_factory(buffer, identity), is_sampled, size)
            candidates = self._entries.setdefault(key, [])
            self._insert(candidates, candidate, buffer)
            self._clean_up_if_necessary()

    def remove(self, key: Hashable) -> bool:
        """Remove every candidate for *key*; return whether the key existed."""
        with self._lock:
            self._ensure_open()
            removed = self._entries.pop(key, None) is not None
            self._clean_up_if_necessary()
            return removed

    def remove_buffer(self, buffer: Any) -> bool:
        """Remove the first candidate wrapping *buffer*, searching all keys.

        A key left without candidates is dropped right away.
        """
        with self._lock:
            self._ensure_open()
            identity = self._identity(buffer)
            removed = False
            for key, candidates in self._entries.items():
                index = self._index_of(candidates, identity, buffer)
                if index is None:
                    continue
                del candidates[index]
                if not candidates:
                    del self._entries[key]
                removed = True
                break
            self._clean_up_if_necessary()
            return removed

    def clear_memory(self) -> None:
        with self._lock:
            self._ensure_open()
            self._operations_since_clean_up = 0
            self._entries.clear()

    def trim_memory(self, level: int) -> None:
        """Sweep collected candidates immediately when memory is low.

        Levels that merely report the UI being hidden are ignored.
        """
        with self._lock:
            self._ensure_open()
            if is_low_memory(level):
                LOGGER.debug("Trim level %s: sweeping weak cache", level)
                self._clean_up()

    def clean_up(self) -> None:
        """Remove every candidate whose buffer has been collected."""
        with self._lock:
            self._ensure_open()
            self._clean_up()

    def close(self) -> None:
        """Drop all handles; any later operation raises :class:`CacheClosedError`."""
        with self._lock:
            if self._closed:
                return
            self._entries.clear()
            self._operations_since_clean_up = 0
            self._closed = True

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    @property
    def closed(self) -> bool:
        with self._lock:
            return self._closed

    @property
    def key_count(self) -> int:
        """Number of keys currently tracked, including all-dead ones."""
        with self._lock:
            return len(self._entries)

    @property
    def operations_since_clean_up(self) -> int:
        with self._lock:
            return self._operations_since_clean_up

    def candidate_count(self, key: Hashable) -> int:
        """Number of candidates recorded for *key*, dead ones included."""
        with self._lock:
            return len(self._entries.get(key, ()))

    def __len__(self) -> int:
        with self._lock:
            return sum(len(candidates) for candidates in self._entries.values())

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _ensure_open(self) -> None:
        if self._closed:
            raise CacheClosedError("WeakValueCache used after close()")

    @staticmethod
    def _insert(candidates: list[_Candidate], candidate: _Candidate, buffer: Any) -> None:
        for index, existing in enumerate(candidates):
            if candidate.size >= existing.size:
                if existing.identity == candidate.identity and existing.handle.get() is buffer:
                    candidates[index] = candidate
                else:
                    candidates.insert(index, candidate)
                return
        candidates.append(candidate)

    @staticmethod
    def _index_of(candidates: list[_Candidate], identity: int, buffer: Any) -> int | None:
        # id() values are recycled after collection, so a matching identity
        # only counts while the handle still points at this very buffer.
        for index, candidate in enumerate(candidates):
            if candidate.identity == identity and candidate.handle.get() is buffer:
                return index
        return None

    def _clean_up_if_necessary(self) -> None:
        self._operations_since_clean_up += 1
        if self._operations_since_clean_up >= self._clean_up_interval:
            self._clean_up()

    def _clean_up(self) -> None:
        self._operations_since_clean_up = 0
        dead_keys = []
        pruned = 0
        for key, candidates in self._entries.items():
            if len(candidates) <= 1:
                # Typically a key holds a single buffer; check it directly.
                if not candidates or not candidates[0].is_alive():
                    dead_keys.append(key)
                    pruned += len(candidates)
                continue
            live = [candidate for candidate in candidates if candidate.is_alive()]
            pruned += len(candidates) - len(live)
            if live:
                candidates[:] = live
            else:
                dead_keys.append(key)
        for key in dead_keys:
            del self._entries[key]
        if pruned or dead_keys:
            LOGGER.debug(
                "Weak cache sweep pruned %d candidate(s) and %d key(s)",
                pruned,
                len(dead_keys),
            )
