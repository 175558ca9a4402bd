"""Coordinate conversion between screen space and world space.

Item positions are stored in world space.  The host renders the layout inside a
wrapper that is first translated by ``pan`` (screen units) and then scaled by
``scale`` about a fixed origin, the centre of the unscaled canvas.  Everything
here is a pure function so the gesture router, the placement policy and the
renderers can share the same maths without importing any UI code.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple
import math

XY = Tuple[float, float]

MIN_SCALE = 0.5
MAX_SCALE = 2.5
ZOOM_STEP = 0.1
DEFAULT_SCALE = 1.0
DEFAULT_PAN: XY = (0.0, 0.0)


# ---------------------------------------------------------------------------
# Scale
# ---------------------------------------------------------------------------


def clamp_scale(s: float, lo: float = MIN_SCALE, hi: float = MAX_SCALE) -> float:
    """Clamp ``s`` into ``[lo, hi]``.  Out of range values are pinned silently."""
    if math.isnan(s):
        return DEFAULT_SCALE
    return max(lo, min(hi, s))


def zoom_in(scale: float, step: float = ZOOM_STEP, lo: float = MIN_SCALE, hi: float = MAX_SCALE) -> float:
    # rounding keeps ten +0.1 steps from drifting away from 2.0
    return clamp_scale(round(scale + step, 6), lo, hi)


def zoom_out(scale: float, step: float = ZOOM_STEP, lo: float = MIN_SCALE, hi: float = MAX_SCALE) -> float:
    return clamp_scale(round(scale - step, 6), lo, hi)


# ---------------------------------------------------------------------------
# Deltas
# ---------------------------------------------------------------------------


def screen_delta_to_world_delta(dx: float, dy: float, scale: float) -> XY:
    """Convert a pointer delta into an item delta.

    Dragged items live inside the scaled wrapper, so the delta is divided by
    the current scale to keep the item under the pointer 1:1 on screen.
    """
    if not math.isfinite(scale) or scale <= 0:
        raise ValueError(f"scale must be positive and finite, got {scale!r}")
    return dx / scale, dy / scale


def pan_delta(dx: float, dy: float) -> XY:
    """Pan offsets are screen units applied outside the scale, never divided."""
    return float(dx), float(dy)


def add(a: XY, b: XY) -> XY:
    return a[0] + b[0], a[1] + b[1]


def sub(a: XY, b: XY) -> XY:
    return a[0] - b[0], a[1] - b[1]


# ---------------------------------------------------------------------------
# Points
# ---------------------------------------------------------------------------


def is_finite_xy(p: object) -> bool:
    try:
        x, y = p  # type: ignore[misc]
        return math.isfinite(float(x)) and math.isfinite(float(y))
    except (TypeError, ValueError):
        return False


def viewport_center(canvas_size: XY) -> XY:
    w, h = canvas_size
    return w / 2.0, h / 2.0


def center_in_world(canvas_size: XY, pan: XY) -> XY:
    """World position where new items appear: the visual centre minus pan.

    The zoom factor is not applied.
    """
    return sub(viewport_center(canvas_size), pan)


def world_to_screen(point: XY, pan: XY, scale: float, origin: XY) -> XY:
    ox, oy = origin
    return (
        ox + (point[0] - ox) * scale + pan[0],
        oy + (point[1] - oy) * scale + pan[1],
    )


def screen_to_world(point: XY, pan: XY, scale: float, origin: XY) -> XY:
    if scale <= 0:
        raise ValueError(f"scale must be positive, got {scale!r}")
    ox, oy = origin
    return (
        ox + (point[0] - pan[0] - ox) / scale,
        oy + (point[1] - pan[1] - oy) / scale,
    )


@dataclass(frozen=True)
class Rect:
    """Axis aligned rectangle anchored at its top-left corner."""

    x: float
    y: float
    w: float
    h: float

    def contains(self, point: XY) -> bool:
        px, py = point
        return self.x <= px <= self.x + self.w and self.y <= py <= self.y + self.h

    @property
    def center(self) -> XY:
        return self.x + self.w / 2.0, self.y + self.h / 2.0


__all__ = [
    "XY",
    "MIN_SCALE",
    "MAX_SCALE",
    "ZOOM_STEP",
    "Rect",
    "clamp_scale",
    "zoom_in",
    "zoom_out",
    "screen_delta_to_world_delta",
    "pan_delta",
    "is_finite_xy",
    "viewport_center",
    "center_in_world",
    "world_to_screen",
    "screen_to_world",
]
