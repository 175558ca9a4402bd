"""NiceGUI page hosting the interactive cell layout."""

from __future__ import annotations

import argparse
import logging
from typing import Any, Callable, Dict, List, Optional

from nicegui import events, ui

from .config import AppState, EditorSettings
from .controller import LayoutController
from .gestures import Detach, Pointer, PointerHandler

logger = logging.getLogger(__name__)

APP_CONFIG: Dict[str, Any] = {"seed_layout": True}

MOVE_EVENT = "floorplan_move"
RELEASE_EVENT = "floorplan_up"
CANCEL_EVENT = "floorplan_cancel"

# Forwards window level pointer events while a gesture is active.
_ATTACH_JS = f"""
(() => {{
  if (window.__floorplanGesture) return;
  const send = (name) => (e) => {{
    emitEvent(name, {{
      type: e.type, clientX: e.clientX, clientY: e.clientY,
      pointerId: e.pointerId, pointerType: e.pointerType, isPrimary: e.isPrimary,
      buttons: e.buttons,
    }});
  }};
  const handlers = {{
    pointermove: send('{MOVE_EVENT}'),
    pointerup: send('{RELEASE_EVENT}'),
    pointercancel: send('{CANCEL_EVENT}'),
  }};
  window.__floorplanGesture = handlers;
  for (const [type, fn] of Object.entries(handlers)) window.addEventListener(type, fn);
}})();
"""

_DETACH_JS = """
(() => {
  const handlers = window.__floorplanGesture;
  if (!handlers) return;
  for (const [type, fn] of Object.entries(handlers)) window.removeEventListener(type, fn);
  delete window.__floorplanGesture;
})();
"""

_POINTER_DOWN_JS = """
(e) => {
  e.preventDefault();
  const r = e.currentTarget.getBoundingClientRect();
  emit({
    type: e.type, clientX: e.clientX, clientY: e.clientY,
    localX: e.clientX - r.left, localY: e.clientY - r.top,
    pointerId: e.pointerId, pointerType: e.pointerType, isPrimary: e.isPrimary,
  });
}
"""


class WindowListeners:
    """Installs browser window listeners for the duration of one gesture."""

    def __init__(self) -> None:
        self._handlers: Optional[Dict[str, PointerHandler]] = None
        self.on_change: Callable[[], None] = lambda: None

    def attach(self, on_move: PointerHandler, on_release: PointerHandler, on_cancel: PointerHandler) -> Detach:
        self._handlers = {MOVE_EVENT: on_move, RELEASE_EVENT: on_release, CANCEL_EVENT: on_cancel}
        ui.run_javascript(_ATTACH_JS)

        def detach() -> None:
            self._handlers = None
            ui.run_javascript(_DETACH_JS)

        return detach

    def dispatch(self, name: str, e: events.GenericEventArguments) -> None:
        if self._handlers is None:
            return
        data = e.args or {}
        pointer = Pointer.from_event(data)
        if pointer is None:
            return
        # the release can arrive before the listeners are installed
        if name == MOVE_EVENT and data.get("buttons", 1) == 0:
            name = RELEASE_EVENT
        if self._handlers[name](pointer):
            self.on_change()

    def bind(self) -> None:
        for name in (MOVE_EVENT, RELEASE_EVENT, CANCEL_EVENT):
            ui.on(name, lambda e, n=name: self.dispatch(n, e))


class LayoutApp:
    """Encapsulates layout creation and interactions for the NiceGUI page."""

    def __init__(self, *, settings: Optional[EditorSettings] = None) -> None:
        self.settings = settings or EditorSettings(seed_layout=bool(APP_CONFIG.get("seed_layout", True)))
        self.state = AppState()
        self.listeners = WindowListeners()
        self.listeners.on_change = self._update_canvas
        self.controller = LayoutController(
            settings=self.settings,
            listeners=self.listeners,
            on_item_selected=self._on_item_selected,
        )
        self.canvas = None
        self.zoom_label = None
        self.edit_button = None
        self.edit_toolbar = None
        self.status_container = None
        self.selection_label = None
        self.add_dialog = None
        self.catalog_grid = None
        self.detail_dialog = None
        self.detail_body = None

    def _compact_button(self, label: str, on_click, *, icon: Optional[str] = None, color: Optional[str] = None) -> ui.button:
        button = ui.button(label, on_click=on_click, icon=icon, color=color)
        button.props("unelevated dense size='sm'")
        button.classes("px-2 py-1 text-xs")
        return button

    def _apply_toggle_style(self, button: ui.button, active: bool) -> None:
        if active:
            button.props(remove="outline", add="unelevated")
            button.style("box-shadow: 0 2px 10px rgba(0,0,0,0.20);")
        else:
            button.props(remove="unelevated", add="outline")
            button.style("box-shadow: none;")

    # ------------------------------------------------------------------
    # Layout builders
    # ------------------------------------------------------------------
    def create(self) -> None:
        self.listeners.bind()
        with ui.header().classes("items-center justify-between bg-primary text-white py-2 px-3"):
            ui.label("Cell Layout").classes("text-lg font-semibold")
            with ui.row().classes("items-center gap-2"):
                self._compact_button("", self._zoom_out, icon="zoom_out")
                self._compact_button("", self._reset_view, icon="restart_alt")
                self._compact_button("", self._zoom_in, icon="zoom_in")
                self.zoom_label = ui.label("100%").classes("text-xs w-10")
                self.edit_button = ui.button("Edit", icon="edit", on_click=self._toggle_edit_mode).props("size='sm'")
                self._apply_toggle_style(self.edit_button, self.state.edit_mode)

        with ui.row().classes("w-full p-3 gap-3 items-start").style("flex-wrap: nowrap;"):
            with ui.column().classes("gap-2"):
                self.edit_toolbar = ui.row().classes("gap-2 items-center")
                with self.edit_toolbar:
                    self._compact_button("Add machine", self._open_add_dialog, icon="add", color="positive")
                    self._compact_button("Add label", self._add_label, icon="title")
                    self._compact_button("Delete selected", self._delete_selected, icon="delete", color="negative")
                    ui.label("Drag the background to pan, drag items to move them.").classes(
                        "text-[11px] text-gray-500"
                    )
                self.edit_toolbar.set_visibility(self.state.edit_mode)
                width, height = self.settings.canvas.as_tuple()
                self.canvas = ui.html(content=self.controller.render_svg(), sanitize=False).classes(
                    "rounded-lg border"
                ).style(f"width:{width:.0f}px; height:{height:.0f}px; touch-action:none; cursor:grab;")
                self.canvas.on("pointerdown", self._handle_canvas_pointer_down, js_handler=_POINTER_DOWN_JS)
            with ui.column().classes("gap-2").style("width: 320px;"):
                with ui.card().classes("p-2 gap-2 w-full"):
                    ui.label("Selection").classes("text-[11px] font-medium text-gray-600")
                    self.selection_label = ui.label("No selection").classes("text-[11px] text-gray-700")
                with ui.card().classes("p-2 gap-1 w-full"):
                    ui.label("Recent activity").classes("text-[11px] font-medium text-gray-600")
                    self.status_container = ui.column().classes("gap-1 text-[11px] text-gray-700")
        self._build_add_dialog()
        self._build_detail_dialog()
        self._update_status_panels()
        ui.context.client.on_disconnect(self.controller.teardown)

    def _build_add_dialog(self) -> None:
        with ui.dialog() as self.add_dialog, ui.card().classes("w-[720px] max-w-full"):
            ui.label("Add machine to layout").classes("text-lg font-semibold")
            self.catalog_grid = ui.grid(columns=3).classes("w-full gap-2")
            with ui.row().classes("w-full justify-end"):
                ui.button("Cancel", on_click=self.add_dialog.close).props("flat")

    def _build_detail_dialog(self) -> None:
        with ui.dialog() as self.detail_dialog, ui.card().classes("min-w-[320px]"):
            self.detail_body = ui.column().classes("gap-1")
            ui.button("Close", on_click=self.detail_dialog.close).props("flat")

    # ------------------------------------------------------------------
    # Canvas
    # ------------------------------------------------------------------
    def _update_canvas(self) -> None:
        if self.canvas is not None:
            self.canvas.set_content(self.controller.render_svg(self.state.selected_uid))
        if self.zoom_label is not None:
            self.zoom_label.text = f"{self.controller.store.scale * 100:.0f}%"

    def _handle_canvas_pointer_down(self, e: events.GenericEventArguments) -> None:
        data = e.args or {}
        pointer = Pointer.from_event(data)
        if pointer is None:
            return
        local = (float(data.get("localX", pointer.x)), float(data.get("localY", pointer.y)))
        before = len(self.controller.store)
        consumed = self.controller.on_pointer_down(pointer, self.state.edit_mode, local=local)
        if not consumed:
            return
        if len(self.controller.store) < before:
            self._log_status("Removed item from layout.")
            if self.state.selected_uid not in self.controller.store:
                self._select(None)
        dragging = self.controller.router.dragging_uid
        if dragging is not None:
            self._select(dragging)
        self._update_canvas()

    def _on_item_selected(self, uid: str) -> None:
        self._select(uid)
        item = self.controller.store.get(uid)
        if item is None or self.detail_body is None or self.detail_dialog is None:
            return
        machine = self.controller.catalog.get(item.reference_id or "")
        self.detail_body.clear()
        with self.detail_body:
            if machine is None:
                ui.label(item.display_text or item.kind).classes("text-lg font-semibold")
            else:
                ui.label(machine.name).classes("text-lg font-semibold")
                ui.label(f"ID: {machine.id}").classes("text-xs font-mono")
                ui.label(f"Type: {machine.type}").classes("text-sm")
                ui.label(f"Model: {machine.model}").classes("text-sm")
                ui.label(f"Status: {machine.status}").classes("text-sm")
        self.detail_dialog.open()

    def _select(self, uid: Optional[str]) -> None:
        self.state.selected_uid = uid
        if self.selection_label is None:
            return
        item = self.controller.store.get(uid) if uid else None
        if item is None:
            self.selection_label.text = "No selection"
            return
        x, y = item.position
        self.selection_label.text = f"{item.display_text or item.uid} ({item.kind}) at ({x:.0f}, {y:.0f})"

    # ------------------------------------------------------------------
    # Toolbar actions
    # ------------------------------------------------------------------
    def _toggle_edit_mode(self) -> None:
        self.state.edit_mode = not self.state.edit_mode
        self.controller.set_edit_mode(self.state.edit_mode)
        if self.edit_button is not None:
            self.edit_button.text = "Save" if self.state.edit_mode else "Edit"
            self._apply_toggle_style(self.edit_button, self.state.edit_mode)
        if self.edit_toolbar is not None:
            self.edit_toolbar.set_visibility(self.state.edit_mode)
        self._log_status("Edit mode on." if self.state.edit_mode else "Edit mode off.")
        self._update_canvas()

    def _zoom_in(self) -> None:
        self.controller.zoom_in()
        self._update_canvas()

    def _zoom_out(self) -> None:
        self.controller.zoom_out()
        self._update_canvas()

    def _reset_view(self) -> None:
        self.controller.reset_view()
        self._update_canvas()

    def _open_add_dialog(self) -> None:
        if self.catalog_grid is None or self.add_dialog is None:
            return
        self.catalog_grid.clear()
        with self.catalog_grid:
            for entry in self.controller.catalog_entries():
                caption = f"{entry['name']}\n{entry['id']}"
                button = ui.button(caption, on_click=lambda _, mid=entry["id"]: self._add_machine(mid))
                button.props("outline no-caps").classes("text-xs whitespace-pre-line")
                if entry["placed"]:
                    button.props("disable")
                    button.tooltip("Already on the layout")
        self.add_dialog.open()

    def _add_machine(self, machine_id: str) -> None:
        machine = self.controller.catalog.get(machine_id)
        if machine is None:
            return
        result = self.controller.add_backing_entity(machine)
        if result.placed:
            self._select(result.uid)
            self._log_status(f"Placed {machine.name} ({machine.id}).")
            if self.add_dialog is not None:
                self.add_dialog.close()
        else:
            self._notify(f"{machine.id} is already on the layout.")
        self._update_canvas()

    def _delete_selected(self) -> None:
        uid = self.state.selected_uid
        if uid is None:
            self._notify("Nothing selected.")
            return
        if self.controller.remove_item(uid):
            self._log_status(f"Removed {uid} from layout.")
        self._select(None)
        self._update_canvas()

    def _add_label(self) -> None:
        result = self.controller.add_label("LABEL")
        if result.placed:
            self._select(result.uid)
            self._log_status("Added label.")
        self._update_canvas()

    # ------------------------------------------------------------------
    # Status helpers
    # ------------------------------------------------------------------
    def _notify(self, message: str) -> None:
        ui.notify(message)
        self._log_status(message)

    def _log_status(self, message: str) -> None:
        logger.info(message)
        self.state.log(message)
        self._update_status_panels()

    def _update_status_panels(self) -> None:
        if self.status_container is None:
            return
        self.status_container.clear()
        recent: List[str] = self.state.status_lines[-8:]
        with self.status_container:
            for line in reversed(recent):
                ui.label(line)


@ui.page("/")
def main_page() -> None:
    """Instantiate and render the layout editor for the active client."""
    layout_app = LayoutApp()
    layout_app.create()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Launch the cell layout editor.")
    parser.add_argument("--host", default="0.0.0.0", help="Interface to bind (default: 0.0.0.0).")
    parser.add_argument("--port", type=int, default=8080, help="Port to listen on (default: 8080).")
    parser.add_argument(
        "--no-seed",
        dest="seed_layout",
        action="store_false",
        help="Start with an empty layout instead of the default cell arrangement.",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging.")
    return parser


def run(argv: Optional[List[str]] = None, **kwargs) -> None:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    APP_CONFIG["seed_layout"] = args.seed_layout
    kwargs.setdefault("title", "Cell Layout")
    kwargs.setdefault("reload", False)
    kwargs.setdefault("show", False)
    ui.run(host=args.host, port=args.port, **kwargs)


__all__ = ["LayoutApp", "WindowListeners", "build_parser", "run", "main_page"]
