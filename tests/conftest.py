import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"

if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))


class ClearableHandle:
    """Collectible handle whose referent is dropped on demand.

    Holds a strong reference until :meth:`clear` is called, so liveness is
    fully controlled by the test instead of by the garbage collector.
    """

    def __init__(self, obj, identity: int) -> None:
        self._obj = obj
        self._identity = identity

    @property
    def identity(self) -> int:
        return self._identity

    def get(self):
        return self._obj

    def clear(self) -> None:
        self._obj = None


class HandleRegistry:
    """Handle factory that lets tests mark buffers as collected."""

    def __init__(self) -> None:
        self.handles: list[ClearableHandle] = []

    def __call__(self, obj, identity: int) -> ClearableHandle:
        handle = ClearableHandle(obj, identity)
        self.handles.append(handle)
        return handle

    def collect(self, buffer) -> None:
        for handle in self.handles:
            if handle.get() is buffer:
                handle.clear()


@pytest.fixture()
def handles() -> HandleRegistry:
    return HandleRegistry()
