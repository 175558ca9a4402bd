"""Host-facing facade over the store, the gesture router and the placement policy."""
from __future__ import annotations

import logging
import math
import threading
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Optional, Union

from .catalog import default_layout, default_machines
from .config import EditorSettings
from .gestures import GestureRouter, ListenerHost, NullListenerHost, Pointer, PointerHandler
from .geometry import XY, screen_to_world, zoom_in, zoom_out
from .models import InvalidItemSpec, LayoutItem, Machine, PlacementResult, Snapshot, ViewportState
from .placement import ItemPlacementPolicy
from .rendering import DELETE_BADGE_RADIUS, delete_badge_center, footprint_rect, render_layout_svg
from .store import LayoutStore

logger = logging.getLogger(__name__)


class _LockedListeners:
    """Run listener callbacks under the controller lock."""

    def __init__(self, inner: ListenerHost, lock: threading.RLock) -> None:
        self.inner = inner
        self.lock = lock

    def _wrap(self, handler: PointerHandler) -> PointerHandler:
        def locked(pointer: Pointer) -> Any:
            with self.lock:
                return handler(pointer)

        return locked

    def attach(self, on_move: PointerHandler, on_release: PointerHandler, on_cancel: PointerHandler):
        return self.inner.attach(self._wrap(on_move), self._wrap(on_release), self._wrap(on_cancel))


@dataclass
class LayoutController:
    """Coordinate layout state, pointer gestures and placement edits."""

    settings: EditorSettings = field(default_factory=EditorSettings)
    machines: List[Machine] = field(default_factory=default_machines)
    listeners: Optional[ListenerHost] = None
    on_item_selected: Optional[Callable[[str], None]] = None

    def __post_init__(self) -> None:
        self._lock = threading.RLock()
        self._edit_mode = False
        self._catalog: Dict[str, Machine] = {m.id: m for m in self.machines}
        self.store = LayoutStore(self.settings.viewport)
        self.policy = ItemPlacementPolicy(self.store, self.settings.canvas)
        self.router = GestureRouter(
            self.store,
            _LockedListeners(self.listeners or NullListenerHost(), self._lock),
            on_item_selected=self._item_selected,
        )
        if self.settings.seed_layout:
            self.policy.seed(default_layout())

    # ------------------------------------------------------------------
    # Catalog
    # ------------------------------------------------------------------
    @property
    def catalog(self) -> Dict[str, Machine]:
        return dict(self._catalog)

    def set_machines(self, machines: Iterable[Machine]) -> None:
        with self._lock:
            self._catalog = {m.id: m for m in machines}

    def catalog_entries(self) -> List[Dict[str, Any]]:
        with self._lock:
            placed = self.policy.placed_reference_ids()
            return [dict(m.to_dict(), placed=m.id in placed) for m in self._catalog.values()]

    # ------------------------------------------------------------------
    # Snapshots
    # ------------------------------------------------------------------
    def get_snapshot(self) -> Snapshot:
        with self._lock:
            return self.store.snapshot()

    def snapshot_dict(self) -> Dict[str, Any]:
        return self.get_snapshot().to_dict()

    def load_snapshot_dict(self, data: Dict[str, Any]) -> Snapshot:
        """Restore a layout previously produced by :meth:`snapshot_dict`."""
        if not isinstance(data, dict):
            raise InvalidItemSpec("Layout must be a mapping")
        entries = data.get("items", [])
        if not isinstance(entries, list):
            raise InvalidItemSpec("Layout items must be a list")
        viewport_data = data.get("viewport") or {}
        if not isinstance(viewport_data, dict):
            raise InvalidItemSpec("Layout viewport must be a mapping")
        specs = [LayoutItem.spec_from_dict(entry).validate() for entry in entries]
        refs = [s.reference_id for s in specs if s.reference_id]
        if len(refs) != len(set(refs)):
            raise InvalidItemSpec("A machine may appear only once in the layout")
        viewport = ViewportState.from_dict(viewport_data)
        with self._lock:
            self.router.teardown()
            self.store.load(specs, viewport)
            logger.info("Loaded layout with %d items", len(self.store))
            return self.store.snapshot()

    def render_svg(self, selected_uid: Optional[str] = None) -> str:
        with self._lock:
            snapshot = self.store.snapshot()
            catalog = dict(self._catalog)
            edit_mode = self._edit_mode
        return render_layout_svg(snapshot, catalog, self.settings, edit_mode=edit_mode, selected_uid=selected_uid)

    # ------------------------------------------------------------------
    # Edit mode
    # ------------------------------------------------------------------
    @property
    def edit_mode(self) -> bool:
        return self._edit_mode

    def set_edit_mode(self, enabled: bool) -> None:
        with self._lock:
            self._edit_mode = bool(enabled)
            if not self._edit_mode and self.router.dragging_uid is not None:
                self.router.on_pointer_cancel()

    # ------------------------------------------------------------------
    # Hit testing
    # ------------------------------------------------------------------
    def to_world(self, local: XY) -> XY:
        viewport = self.store.viewport
        return screen_to_world(local, viewport.pan, viewport.scale, self.settings.canvas.center)

    def hit_test(self, local: XY) -> Optional[str]:
        """Topmost item under a canvas-local screen point, or ``None``."""
        with self._lock:
            world = self.to_world(local)
            for item in reversed(self.store.items()):
                if footprint_rect(item, self.settings, self._catalog).contains(world):
                    return item.uid
        return None

    def hit_test_delete(self, local: XY) -> Optional[str]:
        with self._lock:
            world = self.to_world(local)
            for item in reversed(self.store.items()):
                bx, by = delete_badge_center(footprint_rect(item, self.settings, self._catalog))
                if math.hypot(world[0] - bx, world[1] - by) <= DELETE_BADGE_RADIUS:
                    return item.uid
        return None

    # ------------------------------------------------------------------
    # Pointer input
    # ------------------------------------------------------------------
    def on_pointer_down(
        self,
        pointer: Pointer,
        edit_mode: Optional[bool] = None,
        *,
        local: Optional[XY] = None,
    ) -> bool:
        """Route a press.  ``local`` is the canvas-relative position used for hit tests.

        Edit mode exposes the delete badge and item dragging; outside it a
        press on an item selects it.  The background always pans.
        """
        with self._lock:
            if edit_mode is not None:
                self._edit_mode = bool(edit_mode)
            if self.router.is_active:
                return False
            local = local if local is not None else pointer.xy
            if self._edit_mode:
                doomed = self.hit_test_delete(local)
                if doomed is not None:
                    self.remove_item(doomed)
                    return True
            return self.router.on_pointer_down(pointer, self.hit_test(local), self._edit_mode)

    def on_pointer_move(self, pointer: Pointer) -> bool:
        with self._lock:
            return self.router.on_pointer_move(pointer)

    def on_pointer_up(self, pointer: Optional[Pointer] = None) -> bool:
        with self._lock:
            return self.router.on_pointer_up(pointer)

    def on_pointer_cancel(self, pointer: Optional[Pointer] = None) -> bool:
        with self._lock:
            return self.router.on_pointer_cancel(pointer)

    def _item_selected(self, uid: str) -> None:
        if self.on_item_selected is not None:
            self.on_item_selected(uid)

    def teardown(self) -> None:
        with self._lock:
            self.router.teardown()

    # ------------------------------------------------------------------
    # Viewport
    # ------------------------------------------------------------------
    def zoom_in(self) -> float:
        limits = self.settings.viewport
        with self._lock:
            return self.store.set_scale(zoom_in(self.store.scale, limits.zoom_step, limits.min_scale, limits.max_scale))

    def zoom_out(self) -> float:
        limits = self.settings.viewport
        with self._lock:
            return self.store.set_scale(zoom_out(self.store.scale, limits.zoom_step, limits.min_scale, limits.max_scale))

    def reset_view(self) -> ViewportState:
        with self._lock:
            self.store.set_scale(1.0)
            self.store.set_pan((0.0, 0.0))
            return self.store.viewport

    # ------------------------------------------------------------------
    # Placement
    # ------------------------------------------------------------------
    def add_backing_entity(self, entity: Union[Machine, Dict[str, Any]]) -> PlacementResult:
        if isinstance(entity, dict):
            entity = Machine.from_dict(entity)
        with self._lock:
            self._catalog.setdefault(entity.id, entity)
            return self.policy.place_backing_entity(entity)

    def add_label(self, text: str, *, kind: str = "label") -> PlacementResult:
        with self._lock:
            return self.policy.place_label(text, kind=kind)

    def remove_item(self, uid: str) -> bool:
        with self._lock:
            return self.policy.remove_item(uid)

    def relabel(self, uid: str, text: Optional[str]) -> bool:
        with self._lock:
            return self.store.relabel(uid, text)

    def placed_reference_ids(self) -> frozenset:
        with self._lock:
            return self.policy.placed_reference_ids()


__all__ = ["LayoutController"]
