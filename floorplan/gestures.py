"""Pointer gesture routing for the layout canvas.

A gesture is one press-move-release interaction and is exactly one of

* ``PanningViewport`` -- the press landed on the background, movement shifts
  the whole scaled wrapper by the raw screen delta;
* ``DraggingItem`` -- the press landed on an item while edit mode was on,
  movement shifts that item by the screen delta divided by the zoom factor.

Item hits take priority over the background.  Only one gesture is active at a
time; presses arriving while a gesture is active are ignored, and so are
moves and releases coming from any pointer other than the one that started
it.

Move/release listeners are acquired from a :class:`ListenerHost` when a
gesture starts and released on every exit path (release, cancel, teardown).
Nothing is listened to while the router is idle.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Protocol, Union

from .geometry import XY, add, pan_delta, screen_delta_to_world_delta, sub
from .store import LayoutStore

logger = logging.getLogger(__name__)

PointerHandler = Callable[["Pointer"], Any]
Detach = Callable[[], None]


# ---------------------------------------------------------------------------
# Pointer abstraction
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Pointer:
    """Screen position of a mouse, pen or the first touch point."""

    x: float
    y: float
    pointer_id: int = 0
    source: str = "mouse"  # mouse | touch | pen
    primary: bool = True

    @property
    def xy(self) -> XY:
        return (self.x, self.y)

    @staticmethod
    def from_mouse(args: Dict[str, Any]) -> "Pointer":
        return Pointer(
            x=float(args.get("clientX", 0.0)),
            y=float(args.get("clientY", 0.0)),
            pointer_id=int(args.get("pointerId", 0) or 0),
            source=str(args.get("pointerType") or "mouse"),
            primary=bool(args.get("isPrimary", True)),
        )

    @staticmethod
    def from_touch(args: Dict[str, Any]) -> Optional["Pointer"]:
        """Use the first touch point; later fingers are ignored.

        ``touchend`` reports the lifted finger in ``changedTouches`` only.
        """
        if args.get("type") in ("touchend", "touchcancel"):
            touches = args.get("changedTouches") or []
        else:
            touches = args.get("touches") or args.get("changedTouches") or []
        if not touches:
            return None
        first = touches[0] or {}
        return Pointer(
            x=float(first.get("clientX", 0.0)),
            y=float(first.get("clientY", 0.0)),
            pointer_id=int(first.get("identifier", 0) or 0),
            source="touch",
        )

    @staticmethod
    def from_event(args: Optional[Dict[str, Any]]) -> Optional["Pointer"]:
        args = args or {}
        if "touches" in args or "changedTouches" in args:
            return Pointer.from_touch(args)
        if "clientX" not in args and "clientY" not in args:
            return None
        return Pointer.from_mouse(args)


# ---------------------------------------------------------------------------
# Gesture states
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Idle:
    pass


@dataclass(frozen=True)
class PanningViewport:
    start: XY
    origin_pan: XY
    pointer_id: int = 0


@dataclass(frozen=True)
class DraggingItem:
    uid: str
    start: XY
    origin_position: XY
    pointer_id: int = 0


GestureState = Union[Idle, PanningViewport, DraggingItem]
IDLE = Idle()


# ---------------------------------------------------------------------------
# Listener scope
# ---------------------------------------------------------------------------


class ListenerHost(Protocol):
    """Window/document level listener registration supplied by the host."""

    def attach(
        self,
        on_move: PointerHandler,
        on_release: PointerHandler,
        on_cancel: PointerHandler,
    ) -> Detach:
        ...


class NullListenerHost:
    """For hosts that already forward every move/release to the router."""

    def attach(self, on_move: PointerHandler, on_release: PointerHandler, on_cancel: PointerHandler) -> Detach:
        return lambda: None


# ---------------------------------------------------------------------------
# Router
# ---------------------------------------------------------------------------


class GestureRouter:
    """Turn pointer events into viewport pans and item drags."""

    def __init__(
        self,
        store: LayoutStore,
        listeners: Optional[ListenerHost] = None,
        *,
        on_item_selected: Optional[Callable[[str], None]] = None,
    ) -> None:
        self.store = store
        self.listeners: ListenerHost = listeners or NullListenerHost()
        self.on_item_selected = on_item_selected or (lambda uid: None)
        self._state: GestureState = IDLE
        self._detach: Optional[Detach] = None

    # ------------------------------------------------------------------
    @property
    def state(self) -> GestureState:
        return self._state

    @property
    def is_active(self) -> bool:
        return not isinstance(self._state, Idle)

    @property
    def dragging_uid(self) -> Optional[str]:
        return self._state.uid if isinstance(self._state, DraggingItem) else None

    # ------------------------------------------------------------------
    def on_pointer_down(self, pointer: Pointer, target_uid: Optional[str] = None, edit_mode: bool = False) -> bool:
        """Start a gesture.  ``target_uid`` is the item under the pointer, if any.

        Returns ``True`` when the press was consumed (a gesture started or an
        item was selected).
        """
        if self.is_active:
            logger.debug("Ignoring pointer-down during %s", type(self._state).__name__)
            return False
        if not pointer.primary:
            return False

        if target_uid is not None:
            origin = self.store.position_of(target_uid)
            if origin is not None:
                if not edit_mode:
                    self.on_item_selected(target_uid)
                    return True
                self._begin(DraggingItem(target_uid, pointer.xy, origin, pointer.pointer_id))
                return True

        self._begin(PanningViewport(pointer.xy, self.store.pan, pointer.pointer_id))
        return True

    def on_pointer_move(self, pointer: Pointer) -> bool:
        state = self._state
        if isinstance(state, Idle) or pointer.pointer_id != state.pointer_id:
            return False
        dx, dy = sub(pointer.xy, state.start)
        if isinstance(state, PanningViewport):
            self.store.set_pan(add(state.origin_pan, pan_delta(dx, dy)))
            return True
        delta = screen_delta_to_world_delta(dx, dy, self.store.scale)
        # the item may have been removed mid-gesture; the move is then a no-op
        return self.store.move_item(state.uid, add(state.origin_position, delta))

    def on_pointer_up(self, pointer: Optional[Pointer] = None) -> bool:
        return self._release(pointer, "release")

    def on_pointer_cancel(self, pointer: Optional[Pointer] = None) -> bool:
        # no rollback: the last processed move stays applied
        return self._release(pointer, "cancel")

    def teardown(self) -> None:
        """End any active gesture, e.g. when the host component goes away."""
        if self.is_active:
            self._finish("teardown")

    # ------------------------------------------------------------------
    def _begin(self, state: GestureState) -> None:
        detach = self.listeners.attach(self.on_pointer_move, self.on_pointer_up, self.on_pointer_cancel)
        self._detach = detach
        self._state = state
        logger.debug("Gesture started: %s", state)

    def _release(self, pointer: Optional[Pointer], reason: str) -> bool:
        state = self._state
        if isinstance(state, Idle):
            return False
        if pointer is not None and pointer.pointer_id != state.pointer_id:
            return False
        self._finish(reason)
        return True

    def _finish(self, reason: str) -> None:
        detach, self._detach = self._detach, None
        ended, self._state = self._state, IDLE
        logger.debug("Gesture ended (%s): %s", reason, ended)
        if detach is None:
            return
        try:
            detach()
        except Exception:
            logger.exception("Failed to release gesture listeners")


__all__ = [
    "Pointer",
    "Idle",
    "PanningViewport",
    "DraggingItem",
    "GestureState",
    "IDLE",
    "ListenerHost",
    "NullListenerHost",
    "GestureRouter",
]
