"""Custom exception hierarchy for pixcache."""

from __future__ import annotations


class PixCacheError(Exception):
    """Base class for all custom errors raised by pixcache."""


# --- Cache errors ---

class CacheError(PixCacheError):
    """Base class for cache usage errors."""


class CacheClosedError(CacheError, RuntimeError):
    """Raised when a cache is used after :meth:`close` was called."""


# --- Settings errors ---

class SettingsError(PixCacheError):
    """Base class for settings related failures."""


class SettingsLoadError(SettingsError):
    """Raised when the settings file cannot be read or parsed."""


class SettingsValidationError(SettingsError):
    """Raised when settings data fails schema validation."""


__all__ = [
    "CacheClosedError",
    "CacheError",
    "PixCacheError",
    "SettingsError",
    "SettingsLoadError",
    "SettingsValidationError",
]
