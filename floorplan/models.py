"""Data models shared by the layout store, the gesture router and the hosts."""
from __future__ import annotations

import copy
import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from .config import FootprintTable
from .geometry import DEFAULT_PAN, DEFAULT_SCALE, XY, Rect, clamp_scale, is_finite_xy

ITEM_KINDS = ("machine", "label", "zone")
SIZE_CLASSES = ("small", "medium", "large")

# Legacy size names used by exported layouts ("sm" | "md" | "lg").
_SIZE_ALIASES = {"sm": "small", "md": "medium", "lg": "large"}

SizeOverride = Tuple[Optional[float], Optional[float]]


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------


class LayoutError(Exception):
    """Base class for refusals raised by the layout core."""


class InvalidItemSpec(LayoutError, ValueError):
    """Raised when an item cannot be created from the given fields."""


# ---------------------------------------------------------------------------
# Layout items
# ---------------------------------------------------------------------------


def normalize_size_class(value: Any) -> str:
    if not isinstance(value, str):
        raise InvalidItemSpec(f"Size class must be a string, got {value!r}")
    value = _SIZE_ALIASES.get(value, value)
    if value not in SIZE_CLASSES:
        raise InvalidItemSpec(f"Unsupported size class: {value!r}")
    return value


@dataclass
class ItemSpec:
    """Fields of a layout item before the store assigns a uid."""

    kind: str
    position: XY
    reference_id: Optional[str] = None
    display_text: Optional[str] = None
    size_class: str = "medium"
    size_override: Optional[SizeOverride] = None
    uid: Optional[str] = None  # preferred uid, honoured only if never issued

    def validate(self) -> "ItemSpec":
        """Return a normalised copy or raise :class:`InvalidItemSpec`."""
        if self.kind not in ITEM_KINDS:
            raise InvalidItemSpec(f"Unsupported item kind: {self.kind!r}")
        if not is_finite_xy(self.position):
            raise InvalidItemSpec(f"Position must be two finite numbers, got {self.position!r}")
        _require_key("reference_id", self.reference_id)
        _require_key("uid", self.uid)
        if self.kind == "machine" and not self.reference_id:
            raise InvalidItemSpec("Machine items require a reference_id")
        if self.kind != "machine" and self.reference_id:
            raise InvalidItemSpec(f"{self.kind} items cannot reference an entity")
        if self.display_text is not None and not isinstance(self.display_text, str):
            raise InvalidItemSpec(f"display_text must be a string, got {self.display_text!r}")
        size_class = normalize_size_class(self.size_class)
        override = _normalize_override(self.size_override)
        x, y = self.position
        return ItemSpec(
            kind=self.kind,
            position=(float(x), float(y)),
            reference_id=str(self.reference_id) if self.reference_id else None,
            display_text=self.display_text,
            size_class=size_class,
            size_override=override,
            uid=str(self.uid) if self.uid is not None else None,
        )


def _require_key(name: str, value: Any) -> None:
    if value is not None and (isinstance(value, bool) or not isinstance(value, (str, int))):
        raise InvalidItemSpec(f"{name} must be a string, got {value!r}")


def _normalize_override(value: Any) -> Optional[SizeOverride]:
    if value is None:
        return None
    try:
        w, h = value
    except (TypeError, ValueError) as exc:
        raise InvalidItemSpec(f"Size override must be (width, height), got {value!r}") from exc
    out: List[Optional[float]] = []
    for dim in (w, h):
        if dim is None:
            out.append(None)
            continue
        try:
            dim = float(dim)
        except (TypeError, ValueError) as exc:
            raise InvalidItemSpec(f"Size override must be numeric, got {dim!r}") from exc
        if not (math.isfinite(dim) and dim > 0):
            raise InvalidItemSpec(f"Size override must be positive and finite, got {dim!r}")
        out.append(dim)
    if out[0] is None and out[1] is None:
        return None
    return out[0], out[1]


@dataclass
class LayoutItem:
    """One placed icon, label or zone."""

    uid: str
    kind: str
    position: XY
    reference_id: Optional[str] = None
    display_text: Optional[str] = None
    size_class: str = "medium"
    size_override: Optional[SizeOverride] = None

    def size(self, footprints: FootprintTable, *, placeholder: bool = False) -> Tuple[float, float]:
        """Width/height in world units; each override dimension wins on its own."""
        default_w, default_h = footprints.lookup(
            self.size_class, placeholder=placeholder or self.kind != "machine"
        )
        if self.size_override is None:
            return default_w, default_h
        w, h = self.size_override
        return (default_w if w is None else w), (default_h if h is None else h)

    def bounds(self, footprints: FootprintTable, *, placeholder: bool = False) -> Rect:
        w, h = self.size(footprints, placeholder=placeholder)
        return Rect(self.position[0], self.position[1], w, h)

    def clone(self) -> "LayoutItem":
        return copy.deepcopy(self)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "uid": self.uid,
            "kind": self.kind,
            "reference_id": self.reference_id,
            "display_text": self.display_text,
            "position": [float(self.position[0]), float(self.position[1])],
            "size_class": self.size_class,
            "size_override": list(self.size_override) if self.size_override else None,
        }

    @staticmethod
    def spec_from_dict(data: Dict[str, Any]) -> ItemSpec:
        try:
            x, y = data["position"]
            kind = data["kind"]
        except (KeyError, TypeError, ValueError) as exc:
            raise InvalidItemSpec(f"Malformed item: {data!r}") from exc
        return ItemSpec(
            kind=kind,
            position=(x, y),
            reference_id=data.get("reference_id"),
            display_text=data.get("display_text"),
            size_class=data.get("size_class", "medium"),
            size_override=data.get("size_override"),
            uid=data.get("uid"),
        )


# ---------------------------------------------------------------------------
# Viewport
# ---------------------------------------------------------------------------


@dataclass
class ViewportState:
    """Pan (screen units, unbounded) and zoom factor (clamped)."""

    pan: XY = DEFAULT_PAN
    scale: float = DEFAULT_SCALE

    def __post_init__(self) -> None:
        self.scale = clamp_scale(float(self.scale))

    def to_dict(self) -> Dict[str, Any]:
        return {"pan": [float(self.pan[0]), float(self.pan[1])], "scale": float(self.scale)}

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> "ViewportState":
        pan = data.get("pan", DEFAULT_PAN)
        if not is_finite_xy(pan):
            pan = DEFAULT_PAN
        px, py = pan
        try:
            scale = float(data.get("scale", DEFAULT_SCALE))
        except (TypeError, ValueError):
            scale = DEFAULT_SCALE
        return ViewportState(pan=(float(px), float(py)), scale=scale)


@dataclass
class Snapshot:
    """Read-only copy of the store handed to the host for rendering."""

    items: List[LayoutItem] = field(default_factory=list)
    viewport: ViewportState = field(default_factory=ViewportState)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "items": [item.to_dict() for item in self.items],
            "viewport": self.viewport.to_dict(),
        }


# ---------------------------------------------------------------------------
# Backing entities
# ---------------------------------------------------------------------------


@dataclass
class Machine:
    """Machine record owned by the host; only ``id`` and the label are read."""

    id: str
    name: str
    type: str = ""
    model: str = ""
    status: str = "Operacional"

    @property
    def display_label(self) -> str:
        words = self.type.split()
        if words:
            return words[0].upper()
        return self.name.upper()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "type": self.type,
            "model": self.model,
            "status": self.status,
        }

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> "Machine":
        return Machine(
            id=str(data["id"]),
            name=str(data.get("name", data["id"])),
            type=str(data.get("type", "")),
            model=str(data.get("model", "")),
            status=str(data.get("status", "Operacional")),
        )


@dataclass(frozen=True)
class PlacementResult:
    """Outcome of a host-triggered placement."""

    placed: bool
    uid: Optional[str] = None
    reason: Optional[str] = None  # None | "duplicate" | "invalid"

    def __bool__(self) -> bool:
        return self.placed


__all__ = [
    "ITEM_KINDS",
    "SIZE_CLASSES",
    "LayoutError",
    "InvalidItemSpec",
    "ItemSpec",
    "LayoutItem",
    "ViewportState",
    "Snapshot",
    "Machine",
    "PlacementResult",
]
