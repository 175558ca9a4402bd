"""Top-level package for the cell layout editor.

This package exposes the layout store, the pointer gesture router and the
placement rules that back the interactive shop-floor map, plus a controller
that ties them together for the NiceGUI page and the HTTP API.
"""

from .config import EditorSettings
from .controller import LayoutController
from .gestures import GestureRouter, Pointer
from .models import InvalidItemSpec, ItemSpec, LayoutItem, Machine, PlacementResult, Snapshot, ViewportState
from .placement import ItemPlacementPolicy
from .store import LayoutStore

__all__ = [
    "EditorSettings",
    "LayoutController",
    "GestureRouter",
    "Pointer",
    "InvalidItemSpec",
    "ItemSpec",
    "LayoutItem",
    "Machine",
    "PlacementResult",
    "Snapshot",
    "ViewportState",
    "ItemPlacementPolicy",
    "LayoutStore",
]
