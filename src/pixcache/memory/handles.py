"""Non-owning handles to cached buffers.

The weak tier never keeps a buffer alive.  It stores a
:class:`CollectibleHandle` instead, which yields the buffer while something
else still references it and ``None`` once the garbage collector has
reclaimed it.
"""

from __future__ import annotations

import weakref
from typing import Any, Callable, Generic, Protocol, TypeVar

T = TypeVar("T")


class CollectibleHandle(Protocol[T]):
    """Protocol for handles that may be cleared by the collector at any time."""

    @property
    def identity(self) -> int: ...

    def get(self) -> T | None: ...


class WeakHandle(Generic[T]):
    """:class:`CollectibleHandle` backed by :class:`weakref.ref`.

    *identity* is captured when the handle is created so it stays usable
    after the referent is gone.  Raises :class:`TypeError` when *obj* does
    not support weak references.
    """

    __slots__ = ("_ref", "_identity")

    def __init__(self, obj: T, identity: int) -> None:
        self._identity = identity
        self._ref = weakref.ref(obj)

    @property
    def identity(self) -> int:
        return self._identity

    def get(self) -> T | None:
        return self._ref()

    def __repr__(self) -> str:
        ref = getattr(self, "_ref", None)
        state = "dead" if ref is None or ref() is None else "live"
        return f"<WeakHandle identity={self._identity:#x} {state}>"


# Signature of the factory the weak tier uses to wrap buffers.
HandleFactory = Callable[[Any, int], CollectibleHandle]


def identity_of(buffer: Any) -> int:
    """Return the identity used to recognise *buffer* inside the weak tier."""
    return id(buffer)
