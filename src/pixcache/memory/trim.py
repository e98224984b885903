"""Memory-pressure levels delivered by the host runtime."""

from __future__ import annotations

from enum import IntEnum


class TrimLevel(IntEnum):
    """Ordered severity ladder for ``trim_memory`` callbacks.

    The ``RUNNING_*`` levels are sent while the application is in the
    foreground.  ``UI_HIDDEN`` only signals that the user interface went
    away and says nothing about memory scarcity.  ``BACKGROUND`` and above
    are sent while the process sits in the background list.
    """

    RUNNING_MODERATE = 5
    RUNNING_LOW = 10
    RUNNING_CRITICAL = 15
    UI_HIDDEN = 20
    BACKGROUND = 40
    MODERATE = 60
    COMPLETE = 80


def is_low_memory(level: int) -> bool:
    """Return ``True`` when *level* reports actual memory scarcity."""
    return level >= TrimLevel.RUNNING_LOW and level != TrimLevel.UI_HIDDEN


def is_backgrounded(level: int) -> bool:
    """Return ``True`` when the process has been moved to the background."""
    return level >= TrimLevel.BACKGROUND


__all__ = ["TrimLevel", "is_backgrounded", "is_low_memory"]
