"""Load cache settings from a JSON file."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from jsonschema import ValidationError

from ..errors import SettingsLoadError, SettingsValidationError
from .schema import merge_with_defaults

LOGGER = logging.getLogger(__name__)


def load_settings(path: Path | None = None) -> dict[str, Any]:
    """Return validated settings from *path*, or the defaults.

    A missing file is not an error.  Unreadable JSON raises
    :class:`SettingsLoadError`; a document that fails the schema raises
    :class:`SettingsValidationError`.
    """

    payload = None
    if path is not None and path.exists():
        try:
            payload = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            raise SettingsLoadError(f"{path}: {exc}") from exc
        if not isinstance(payload, dict):
            raise SettingsLoadError(f"{path}: expected a JSON object")
    elif path is not None:
        LOGGER.debug("Settings file %s not found; using defaults", path)
    return parse_settings(payload)


def parse_settings(data: dict[str, Any] | None) -> dict[str, Any]:
    """Merge *data* with the defaults, translating schema failures."""

    try:
        return merge_with_defaults(data)
    except ValidationError as exc:
        raise SettingsValidationError(exc.message) from exc
