"""Tests for WeakHandle and buffer identity."""

from __future__ import annotations

import gc

import pytest

from pixcache.memory.handles import WeakHandle, identity_of


class _Bitmap:
    pass


def test_live_handle():
    bitmap = _Bitmap()
    handle = WeakHandle(bitmap, identity_of(bitmap))
    assert handle.get() is bitmap
    assert handle.identity == id(bitmap)
    assert "live" in repr(handle)


def test_identity_survives_collection():
    bitmap = _Bitmap()
    expected = id(bitmap)
    handle = WeakHandle(bitmap, expected)
    del bitmap
    gc.collect()
    assert handle.get() is None
    assert handle.identity == expected
    assert "dead" in repr(handle)


def test_non_weakrefable_buffer_raises():
    with pytest.raises(TypeError):
        WeakHandle(b"pixels", 1)


def test_repr_of_partially_initialised_handle():
    handle = WeakHandle.__new__(WeakHandle)
    handle._identity = 0x10
    assert repr(handle) == "<WeakHandle identity=0x10 dead>"
