"""Schema helpers for the cache settings document."""

from __future__ import annotations

from copy import deepcopy
from typing import Any

from jsonschema import Draft202012Validator

from ..config import (
    CLEAN_UP_INTERVAL,
    DEFAULT_MAX_SIZE_PERCENT,
    PRESSURE_CRITICAL_PERCENT,
    PRESSURE_LOW_PERCENT,
    PRESSURE_MODERATE_PERCENT,
    SETTINGS_SCHEMA_ID,
)

_PERCENT = {"type": "number", "minimum": 0, "maximum": 100}

SETTINGS_SCHEMA: dict[str, Any] = {
    "$id": "pixcache/settings.schema.json",
    "type": "object",
    "required": ["schema", "memory_cache", "memory_pressure"],
    "properties": {
        "schema": {"const": SETTINGS_SCHEMA_ID},
        "memory_cache": {
            "type": "object",
            "properties": {
                "strong_references_enabled": {"type": "boolean"},
                "weak_references_enabled": {"type": "boolean"},
                "max_size_percent": {"type": "number", "minimum": 0, "maximum": 1},
                "max_size_bytes": {"type": ["integer", "null"], "minimum": 0},
                "clean_up_interval": {"type": "integer", "minimum": 1},
            },
            "additionalProperties": False,
        },
        "memory_pressure": {
            "type": "object",
            "properties": {
                "moderate_percent": _PERCENT,
                "low_percent": _PERCENT,
                "critical_percent": _PERCENT,
            },
            "additionalProperties": False,
        },
    },
    "additionalProperties": True,
}

DEFAULT_SETTINGS: dict[str, Any] = {
    "schema": SETTINGS_SCHEMA_ID,
    "memory_cache": {
        "strong_references_enabled": True,
        "weak_references_enabled": True,
        "max_size_percent": DEFAULT_MAX_SIZE_PERCENT,
        "max_size_bytes": None,
        "clean_up_interval": CLEAN_UP_INTERVAL,
    },
    "memory_pressure": {
        "moderate_percent": PRESSURE_MODERATE_PERCENT,
        "low_percent": PRESSURE_LOW_PERCENT,
        "critical_percent": PRESSURE_CRITICAL_PERCENT,
    },
}

_SECTIONS = ("memory_cache", "memory_pressure")

_validator = Draft202012Validator(SETTINGS_SCHEMA)


def merge_with_defaults(data: dict[str, Any] | None) -> dict[str, Any]:
    """Merge *data* with :data:`DEFAULT_SETTINGS` and validate the result.

    Raises :class:`jsonschema.ValidationError` when the merged document is
    invalid.
    """

    merged = deepcopy(DEFAULT_SETTINGS)
    if data:
        for key, value in data.items():
            if key in _SECTIONS and isinstance(value, dict):
                merged[key].update(value)
                continue
            merged[key] = value
    _validator.validate(merged)
    return merged


def validate_settings(data: dict[str, Any]) -> None:
    """Validate *data* against the settings schema."""

    _validator.validate(data)


__all__ = ["DEFAULT_SETTINGS", "SETTINGS_SCHEMA", "merge_with_defaults", "validate_settings"]
