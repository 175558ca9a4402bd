from __future__ import annotations

import pytest

from floorplan.config import EditorSettings
from floorplan.controller import LayoutController
from floorplan.store import LayoutStore


class FakeListeners:
    """Records listener scopes handed out by the gesture router."""

    def __init__(self, fail_on_detach: bool = False) -> None:
        self.attached = 0
        self.detached = 0
        self.handlers = None
        self.fail_on_detach = fail_on_detach

    @property
    def active(self) -> int:
        return self.attached - self.detached

    def attach(self, on_move, on_release, on_cancel):
        self.attached += 1
        self.handlers = (on_move, on_release, on_cancel)

        def detach() -> None:
            self.detached += 1
            self.handlers = None
            if self.fail_on_detach:
                raise RuntimeError("listener already gone")

        return detach


@pytest.fixture
def store() -> LayoutStore:
    return LayoutStore()


@pytest.fixture
def listeners() -> FakeListeners:
    return FakeListeners()


@pytest.fixture
def empty_controller(listeners) -> LayoutController:
    return LayoutController(settings=EditorSettings(seed_layout=False), listeners=listeners)
