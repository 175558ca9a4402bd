"""Configuration models for the layout editor."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple


@dataclass
class ViewportLimits:
    """Bounds and step size for the zoom factor."""

    min_scale: float = 0.5
    max_scale: float = 2.5
    zoom_step: float = 0.1

    def clamp(self, value: float) -> float:
        return max(self.min_scale, min(self.max_scale, value))


@dataclass
class CanvasConfig:
    """Size of the unscaled layout wrapper, in screen units."""

    width: float = 850.0
    height: float = 550.0

    def as_tuple(self) -> tuple[float, float]:
        return self.width, self.height

    @property
    def center(self) -> tuple[float, float]:
        return self.width / 2.0, self.height / 2.0


@dataclass
class FootprintTable:
    """Default width/height per size class, in world units.

    Machines with a backing record use ``machine``; labels, zones and machine
    items whose record is missing fall back to ``placeholder``.
    """

    machine: Dict[str, Tuple[float, float]] = field(
        default_factory=lambda: {
            "small": (56.0, 56.0),
            "medium": (80.0, 64.0),
            "large": (112.0, 96.0),
        }
    )
    placeholder: Dict[str, Tuple[float, float]] = field(
        default_factory=lambda: {
            "small": (48.0, 48.0),
            "medium": (64.0, 56.0),
            "large": (96.0, 80.0),
        }
    )

    def lookup(self, size_class: str, *, placeholder: bool = False) -> Tuple[float, float]:
        table = self.placeholder if placeholder else self.machine
        return table.get(size_class, table["medium"])


@dataclass
class EditorSettings:
    """Aggregate settings shared by the core, the renderer and the hosts."""

    viewport: ViewportLimits = field(default_factory=ViewportLimits)
    canvas: CanvasConfig = field(default_factory=CanvasConfig)
    footprints: FootprintTable = field(default_factory=FootprintTable)
    seed_layout: bool = True


@dataclass
class AppState:
    """Mutable host state shared between UI handlers."""

    edit_mode: bool = False
    selected_uid: Optional[str] = None
    status_lines: List[str] = field(default_factory=lambda: ["Layout ready."])

    def log(self, message: str) -> None:
        self.status_lines.append(message)
        if len(self.status_lines) > 200:
            del self.status_lines[: len(self.status_lines) - 200]


__all__ = ["ViewportLimits", "CanvasConfig", "FootprintTable", "EditorSettings", "AppState"]
