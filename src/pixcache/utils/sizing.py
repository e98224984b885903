"""Byte-size helpers for decoded image buffers."""

from __future__ import annotations

from typing import Any

import numpy as np
import psutil
from PIL import Image

# Bytes per pixel for the Pillow modes we expect to cache.  Modes missing
# here fall back to one byte per band.
_MODE_BYTES_PER_PIXEL: dict[str, int] = {
    "1": 1,
    "L": 1,
    "P": 1,
    "LA": 2,
    "La": 2,
    "PA": 2,
    "RGB": 3,
    "YCbCr": 3,
    "LAB": 3,
    "HSV": 3,
    "RGBA": 4,
    "RGBa": 4,
    "RGBX": 4,
    "CMYK": 4,
    "I": 4,
    "F": 4,
    "I;16": 2,
    "I;16L": 2,
    "I;16B": 2,
    "I;16N": 2,
}


def allocation_size(buffer: Any) -> int:
    """Return the logical size of *buffer* in bytes.

    Supports Pillow images, numpy arrays and any object exposing the buffer
    protocol.  Raises :class:`TypeError` for anything else.
    """
    if isinstance(buffer, Image.Image):
        width, height = buffer.size
        per_pixel = _MODE_BYTES_PER_PIXEL.get(buffer.mode, len(buffer.getbands()))
        return width * height * per_pixel
    if isinstance(buffer, np.ndarray):
        return int(buffer.nbytes)
    try:
        view = memoryview(buffer)
    except TypeError:
        raise TypeError(f"cannot determine the size of {type(buffer).__name__!r}") from None
    with view:
        return view.nbytes


def memory_budget(percent: float) -> int:
    """Return *percent* (``0.0``-``1.0``) of total system memory in bytes."""
    if not 0.0 <= percent <= 1.0:
        raise ValueError(f"percent must be between 0 and 1, got {percent}")
    return int(psutil.virtual_memory().total * percent)


__all__ = ["allocation_size", "memory_budget"]
