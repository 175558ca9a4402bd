"""In-memory owner of the placed items and the viewport."""
from __future__ import annotations

import itertools
import logging
from typing import Dict, Iterable, Iterator, List, Optional, Set, Tuple

from .config import ViewportLimits
from .geometry import XY, is_finite_xy
from .models import InvalidItemSpec, ItemSpec, LayoutItem, Snapshot, ViewportState

logger = logging.getLogger(__name__)


class LayoutStore:
    """Single source of truth for layout items and viewport state.

    Items are kept in insertion order, which is also the drawing order: later
    items are drawn on top and win hit tests.  Every mutation completes before
    it returns, so callers never observe a half-applied update.  Operations on
    an unknown uid are silent no-ops because a gesture may legitimately race a
    deletion.
    """

    def __init__(self, limits: Optional[ViewportLimits] = None) -> None:
        self.limits = limits or ViewportLimits()
        self._items: Dict[str, LayoutItem] = {}
        self._viewport = ViewportState()
        self._issued: Set[str] = set()
        self._counter = itertools.count(1)

    # ------------------------------------------------------------------
    # Items
    # ------------------------------------------------------------------
    def add_item(self, spec: ItemSpec) -> str:
        """Validate ``spec``, assign a fresh uid and append the item.

        Raises :class:`InvalidItemSpec` when the spec is malformed; the store
        is left untouched in that case.
        """
        clean = spec.validate()
        return self._insert(clean, self._claim_uid(clean.uid))

    def _insert(self, clean: ItemSpec, uid: str) -> str:
        self._items[uid] = LayoutItem(
            uid=uid,
            kind=clean.kind,
            position=clean.position,
            reference_id=clean.reference_id,
            display_text=clean.display_text,
            size_class=clean.size_class,
            size_override=clean.size_override,
        )
        logger.debug("Added %s item %s at (%.1f, %.1f)", clean.kind, uid, *clean.position)
        return uid

    def _claim_uid(self, preferred: Optional[str]) -> str:
        if preferred is not None:
            preferred = str(preferred)
            if not preferred or preferred in self._issued:
                raise InvalidItemSpec(f"uid {preferred!r} was already issued")
            self._issued.add(preferred)
            return preferred
        while True:
            uid = f"item-{next(self._counter)}"
            if uid not in self._issued:
                self._issued.add(uid)
                return uid

    def move_item(self, uid: str, position: XY) -> bool:
        item = self._items.get(uid)
        if item is None:
            return False
        if not is_finite_xy(position):
            logger.debug("Ignoring non-finite position %r for %s", position, uid)
            return False
        item.position = (float(position[0]), float(position[1]))
        return True

    def remove_item(self, uid: str) -> bool:
        removed = self._items.pop(uid, None)
        if removed is None:
            return False
        logger.debug("Removed item %s", uid)
        return True

    def relabel(self, uid: str, text: Optional[str]) -> bool:
        item = self._items.get(uid)
        if item is None:
            return False
        item.display_text = text
        return True

    def get(self, uid: str) -> Optional[LayoutItem]:
        item = self._items.get(uid)
        return item.clone() if item is not None else None

    def position_of(self, uid: str) -> Optional[XY]:
        item = self._items.get(uid)
        return item.position if item is not None else None

    def items(self) -> Tuple[LayoutItem, ...]:
        return tuple(item.clone() for item in self._items.values())

    def reference_ids(self) -> Set[str]:
        return {item.reference_id for item in self._items.values() if item.kind == "machine" and item.reference_id}

    def find_by_reference(self, reference_id: str) -> Optional[str]:
        for item in self._items.values():
            if item.kind == "machine" and item.reference_id == reference_id:
                return item.uid
        return None

    def clear(self) -> None:
        """Drop every item; issued uids stay reserved."""
        self._items.clear()

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, uid: object) -> bool:
        return uid in self._items

    def __iter__(self) -> Iterator[LayoutItem]:
        return iter(self.items())

    # ------------------------------------------------------------------
    # Viewport
    # ------------------------------------------------------------------
    @property
    def viewport(self) -> ViewportState:
        return ViewportState(pan=self._viewport.pan, scale=self._viewport.scale)

    @property
    def scale(self) -> float:
        return self._viewport.scale

    @property
    def pan(self) -> XY:
        return self._viewport.pan

    def set_scale(self, s: float) -> float:
        try:
            s = float(s)
        except (TypeError, ValueError):
            return self._viewport.scale
        if s != s:  # NaN
            return self._viewport.scale
        self._viewport.scale = self.limits.clamp(s)
        return self._viewport.scale

    def set_pan(self, p: XY) -> XY:
        if is_finite_xy(p):
            self._viewport.pan = (float(p[0]), float(p[1]))
        return self._viewport.pan

    # ------------------------------------------------------------------
    # Snapshots
    # ------------------------------------------------------------------
    def snapshot(self) -> Snapshot:
        return Snapshot(items=list(self.items()), viewport=self.viewport)

    def load(self, specs: Iterable[ItemSpec], viewport: Optional[ViewportState] = None) -> List[str]:
        """Replace the contents with ``specs``; all or nothing.

        Every spec is validated before the store is touched.  Uids in the
        specs are honoured when they were never issued by this store.
        """
        cleaned = [spec.validate() for spec in specs]
        seen: Set[str] = set()
        for spec in cleaned:
            if spec.uid is None:
                continue
            if spec.uid in seen:
                raise InvalidItemSpec(f"Duplicate uid {spec.uid!r} in layout")
            seen.add(spec.uid)
        live = set(self._items)
        for uid in seen:
            if uid in self._issued and uid not in live:
                raise InvalidItemSpec(f"uid {uid!r} was already issued")
        self._items.clear()
        self._issued.update(seen)
        uids = [
            self._insert(spec, spec.uid if spec.uid is not None else self._claim_uid(None))
            for spec in cleaned
        ]
        if viewport is not None:
            self.set_pan(viewport.pan)
            self.set_scale(viewport.scale)
        return uids


__all__ = ["LayoutStore"]
