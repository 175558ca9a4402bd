"""Placement rules for host-triggered additions and removals."""
from __future__ import annotations

import logging
from typing import FrozenSet, Iterable, List, Optional

from .config import CanvasConfig
from .geometry import XY, center_in_world
from .models import InvalidItemSpec, ItemSpec, Machine, PlacementResult
from .store import LayoutStore

logger = logging.getLogger(__name__)


class ItemPlacementPolicy:
    """Mediates add/remove requests before they reach the store.

    A backing entity can be on the layout at most once.  Refusals come back
    as a :class:`PlacementResult` so the host can show a disabled control
    instead of an error dialog.
    """

    def __init__(self, store: LayoutStore, canvas: Optional[CanvasConfig] = None) -> None:
        self.store = store
        self.canvas = canvas or CanvasConfig()

    def initial_position(self) -> XY:
        return center_in_world(self.canvas.as_tuple(), self.store.pan)

    def is_placed(self, reference_id: str) -> bool:
        return str(reference_id) in self.store.reference_ids()

    def placed_reference_ids(self) -> FrozenSet[str]:
        return frozenset(self.store.reference_ids())

    def place_backing_entity(self, entity: Machine, *, size_class: str = "medium") -> PlacementResult:
        if self.is_placed(entity.id):
            logger.info("Refusing duplicate placement of %s", entity.id)
            return PlacementResult(False, self.store.find_by_reference(str(entity.id)), "duplicate")
        spec = ItemSpec(
            kind="machine",
            position=self.initial_position(),
            reference_id=str(entity.id),
            display_text=entity.display_label,
            size_class=size_class,
        )
        try:
            uid = self.store.add_item(spec)
        except InvalidItemSpec as exc:
            logger.warning("Cannot place %s: %s", entity.id, exc)
            return PlacementResult(False, None, "invalid")
        logger.info("Placed machine %s as %s", entity.id, uid)
        return PlacementResult(True, uid)

    def place_label(self, text: str, *, kind: str = "label", size_class: str = "medium") -> PlacementResult:
        try:
            uid = self.store.add_item(
                ItemSpec(kind=kind, position=self.initial_position(), display_text=text, size_class=size_class)
            )
        except InvalidItemSpec as exc:
            logger.warning("Cannot place %s %r: %s", kind, text, exc)
            return PlacementResult(False, None, "invalid")
        logger.info("Placed %s %r as %s", kind, text, uid)
        return PlacementResult(True, uid)

    def remove_item(self, uid: str) -> bool:
        removed = self.store.remove_item(uid)
        if removed:
            logger.info("Removed item %s", uid)
        return removed

    def seed(self, specs: Iterable[ItemSpec]) -> List[str]:
        """Load startup items, skipping duplicates and malformed entries."""
        uids: List[str] = []
        for spec in specs:
            if spec.reference_id and self.is_placed(spec.reference_id):
                logger.warning("Skipping seed item %s: %s already placed", spec.uid, spec.reference_id)
                continue
            try:
                uids.append(self.store.add_item(spec))
            except InvalidItemSpec as exc:
                logger.warning("Skipping seed item %s: %s", spec.uid, exc)
        return uids


__all__ = ["ItemPlacementPolicy"]
