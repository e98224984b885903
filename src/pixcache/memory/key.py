"""Cache keys and the values handed back to callers."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping


@dataclass(frozen=True)
class MemoryCacheKey:
    """Identifies one logical decode request.

    ``key`` is usually derived from the source (file path, URL) and
    ``extras`` carries the transformation parameters that make two decodes
    of the same source distinct (target size, crop, filters).  Two keys are
    equal when both parts are equal.
    """

    key: str
    extras: tuple[tuple[str, str], ...] = field(default=())

    @classmethod
    def create(cls, key: str, extras: Mapping[str, Any] | None = None) -> "MemoryCacheKey":
        """Build a key, normalising *extras* into sorted string pairs."""
        if not extras:
            return cls(key)
        pairs = tuple(sorted((str(k), str(v)) for k, v in extras.items()))
        return cls(key, pairs)

    def __str__(self) -> str:
        if not self.extras:
            return self.key
        params = ", ".join(f"{k}={v}" for k, v in self.extras)
        return f"{self.key} [{params}]"


@dataclass(frozen=True)
class CachedValue:
    """A cache hit: the live buffer and whether it is a sampled variant."""

    buffer: Any
    is_sampled: bool = False
