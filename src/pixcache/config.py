"""Default configuration values for pixcache."""

from __future__ import annotations

from typing import Final

# Number of weak-tier operations between two sweeps of collected candidates.
# Bounds how many dead handles can pile up without paying for a full scan on
# every call.
CLEAN_UP_INTERVAL: Final[int] = 10

# Share of total system memory granted to the strong tier when no explicit
# byte budget is configured.
DEFAULT_MAX_SIZE_PERCENT: Final[float] = 0.25

# System memory usage (percent of total) at which the pressure monitor
# escalates to the matching trim level.
PRESSURE_MODERATE_PERCENT: Final[float] = 70.0
PRESSURE_LOW_PERCENT: Final[float] = 85.0
PRESSURE_CRITICAL_PERCENT: Final[float] = 95.0

SETTINGS_SCHEMA_ID: Final[str] = "pixcache/settings@1"
