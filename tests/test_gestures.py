from __future__ import annotations

import logging

from conftest import FakeListeners

from floorplan.gestures import DraggingItem, GestureRouter, Idle, PanningViewport, Pointer
from floorplan.models import ItemSpec
from floorplan.store import LayoutStore


def _router(store: LayoutStore, listeners: FakeListeners, selected=None) -> GestureRouter:
    return GestureRouter(store, listeners, on_item_selected=selected)


def _item(store: LayoutStore, x: float = 50.0, y: float = 50.0) -> str:
    return store.add_item(ItemSpec("machine", (x, y), reference_id="M-1"))


def test_idle_router_ignores_moves_and_releases(store, listeners) -> None:
    router = _router(store, listeners)
    assert router.on_pointer_move(Pointer(10, 10)) is False
    assert router.on_pointer_up(Pointer(10, 10)) is False
    assert router.on_pointer_cancel() is False
    assert listeners.attached == 0
    assert store.pan == (0.0, 0.0)


def test_background_press_pans_by_raw_delta(store, listeners) -> None:
    store.set_scale(2.0)
    router = _router(store, listeners)
    assert router.on_pointer_down(Pointer(100, 100))
    assert isinstance(router.state, PanningViewport)

    router.on_pointer_move(Pointer(130, 80))
    assert store.pan == (30.0, -20.0)
    router.on_pointer_move(Pointer(150, 150))
    assert store.pan == (50.0, 50.0)

    router.on_pointer_up(Pointer(150, 150))
    assert isinstance(router.state, Idle)
    assert (listeners.attached, listeners.detached) == (1, 1)


def test_pan_starts_from_existing_offset(store, listeners) -> None:
    store.set_pan((10, 10))
    router = _router(store, listeners)
    router.on_pointer_down(Pointer(0, 0))
    router.on_pointer_move(Pointer(5, -5))
    assert store.pan == (15.0, 5.0)


def test_item_drag_divides_delta_by_scale(store, listeners) -> None:
    uid = _item(store)
    store.set_scale(2.0)
    router = _router(store, listeners)
    assert router.on_pointer_down(Pointer(200, 200), uid, edit_mode=True)
    assert router.dragging_uid == uid

    router.on_pointer_move(Pointer(220, 240))
    assert store.position_of(uid) == (60.0, 70.0)
    assert store.pan == (0.0, 0.0)

    router.on_pointer_up()
    assert router.dragging_uid is None
    assert listeners.active == 0


def test_item_press_outside_edit_mode_selects(store, listeners) -> None:
    uid = _item(store)
    picked = []
    router = _router(store, listeners, picked.append)
    assert router.on_pointer_down(Pointer(200, 200), uid, edit_mode=False)
    assert picked == [uid]
    assert not router.is_active
    assert listeners.attached == 0
    assert store.position_of(uid) == (50.0, 50.0)


def test_press_on_unknown_item_falls_back_to_pan(store, listeners) -> None:
    router = _router(store, listeners)
    router.on_pointer_down(Pointer(0, 0), "ghost", edit_mode=True)
    assert isinstance(router.state, PanningViewport)


def test_only_one_gesture_at_a_time(store, listeners) -> None:
    uid = _item(store)
    router = _router(store, listeners)
    router.on_pointer_down(Pointer(0, 0, pointer_id=1))
    assert router.on_pointer_down(Pointer(5, 5, pointer_id=2), uid, edit_mode=True) is False
    assert isinstance(router.state, PanningViewport)
    assert listeners.attached == 1


def test_moves_from_other_pointers_are_ignored(store, listeners) -> None:
    router = _router(store, listeners)
    router.on_pointer_down(Pointer(0, 0, pointer_id=1, source="touch"))
    assert router.on_pointer_move(Pointer(50, 50, pointer_id=2, source="touch")) is False
    assert router.on_pointer_up(Pointer(50, 50, pointer_id=2, source="touch")) is False
    assert router.is_active
    assert store.pan == (0.0, 0.0)


def test_secondary_pointer_cannot_start_gesture(store, listeners) -> None:
    router = _router(store, listeners)
    assert router.on_pointer_down(Pointer(0, 0, primary=False)) is False
    assert listeners.attached == 0


def test_cancel_keeps_last_applied_move(store, listeners) -> None:
    uid = _item(store)
    router = _router(store, listeners)
    router.on_pointer_down(Pointer(0, 0), uid, edit_mode=True)
    router.on_pointer_move(Pointer(10, 20))
    assert router.on_pointer_cancel()
    assert store.position_of(uid) == (60.0, 70.0)
    assert listeners.active == 0


def test_item_removed_mid_drag(store, listeners) -> None:
    uid = _item(store)
    router = _router(store, listeners)
    router.on_pointer_down(Pointer(0, 0), uid, edit_mode=True)
    store.remove_item(uid)
    assert router.on_pointer_move(Pointer(10, 10)) is False
    assert uid not in store
    router.on_pointer_up()
    assert listeners.active == 0


def test_listener_handlers_drive_the_router(store, listeners) -> None:
    router = _router(store, listeners)
    router.on_pointer_down(Pointer(0, 0))
    on_move, on_release, _ = listeners.handlers
    on_move(Pointer(7, 8))
    on_release(Pointer(7, 8))
    assert store.pan == (7.0, 8.0)
    assert listeners.handlers is None


def test_teardown_releases_listeners(store, listeners) -> None:
    router = _router(store, listeners)
    router.teardown()
    assert listeners.detached == 0
    router.on_pointer_down(Pointer(0, 0))
    router.teardown()
    assert not router.is_active
    assert listeners.active == 0


def test_failing_detach_is_logged_and_router_recovers(store, caplog) -> None:
    listeners = FakeListeners(fail_on_detach=True)
    router = _router(store, listeners)
    router.on_pointer_down(Pointer(0, 0))
    with caplog.at_level(logging.ERROR, logger="floorplan.gestures"):
        router.on_pointer_up()
    assert "Failed to release gesture listeners" in caplog.text
    assert not router.is_active
    assert router.on_pointer_down(Pointer(0, 0))


def test_gesture_states_carry_origin() -> None:
    state = DraggingItem("a", (1.0, 2.0), (3.0, 4.0), 7)
    assert state.origin_position == (3.0, 4.0)
    assert state.pointer_id == 7


def test_pointer_from_mouse_payload() -> None:
    pointer = Pointer.from_event(
        {"clientX": 12, "clientY": 34, "pointerId": 3, "pointerType": "pen", "isPrimary": True}
    )
    assert pointer == Pointer(12.0, 34.0, 3, "pen", True)


def test_pointer_from_touch_payloads() -> None:
    start = Pointer.from_event({"type": "touchstart", "touches": [{"clientX": 1, "clientY": 2, "identifier": 5}]})
    assert start == Pointer(1.0, 2.0, 5, "touch", True)
    end = Pointer.from_event(
        {"type": "touchend", "touches": [], "changedTouches": [{"clientX": 3, "clientY": 4, "identifier": 5}]}
    )
    assert end.xy == (3.0, 4.0)
    assert Pointer.from_event({"type": "touchmove", "touches": []}) is None
    assert Pointer.from_event({}) is None


def test_background_press_during_drag_is_ignored(store, listeners) -> None:
    uid = _item(store)
    router = _router(store, listeners)
    router.on_pointer_down(Pointer(0, 0, pointer_id=1), uid, edit_mode=True)
    assert router.on_pointer_down(Pointer(300, 300, pointer_id=2), None, edit_mode=True) is False
    assert isinstance(router.state, DraggingItem)
    assert router.dragging_uid == uid
    assert listeners.attached == 1
