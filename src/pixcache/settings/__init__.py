"""Settings loading and validation."""

from .loader import load_settings, parse_settings
from .schema import DEFAULT_SETTINGS, SETTINGS_SCHEMA, merge_with_defaults, validate_settings

__all__ = [
    "DEFAULT_SETTINGS",
    "SETTINGS_SCHEMA",
    "load_settings",
    "merge_with_defaults",
    "parse_settings",
    "validate_settings",
]
