"""SVG rendering of a layout snapshot.

The core does not care how the layout is drawn; this module is the renderer
used by the bundled NiceGUI host.  The scaled wrapper is a ``<g>`` element with
``translate(pan) scale(scale)`` applied about the canvas centre, so the
coordinate maths here is the same as in :mod:`floorplan.geometry`.
"""
from __future__ import annotations

from html import escape
from typing import List, Mapping, Optional

from .catalog import status_color
from .config import EditorSettings
from .geometry import Rect
from .models import LayoutItem, Machine, Snapshot

DELETE_BADGE_RADIUS = 8.0


def footprint_rect(item: LayoutItem, settings: EditorSettings, machines: Mapping[str, Machine]) -> Rect:
    """World-space bounds of ``item``; machines without a record use placeholder sizes."""
    placeholder = item.kind == "machine" and item.reference_id not in machines
    return item.bounds(settings.footprints, placeholder=placeholder)


def delete_badge_center(rect: Rect) -> tuple[float, float]:
    return rect.x + rect.w, rect.y


def _wrapper_transform(snapshot: Snapshot, settings: EditorSettings) -> str:
    cx, cy = settings.canvas.center
    px, py = snapshot.viewport.pan
    s = snapshot.viewport.scale
    # translate(pan), then scale about the centre
    return (
        f"translate({px:.2f} {py:.2f}) "
        f"translate({cx:.2f} {cy:.2f}) scale({s:.4f}) translate({-cx:.2f} {-cy:.2f})"
    )


def _render_item(
    item: LayoutItem,
    rect: Rect,
    machine: Optional[Machine],
    *,
    edit_mode: bool,
    selected: bool,
) -> str:
    parts: List[str] = []
    stroke = "#38bdf8" if selected else "#475569"
    stroke_width = 2.5 if selected else 1.2
    uid = escape(item.uid, quote=True)
    if item.kind == "machine" and machine is not None:
        caption = item.display_text or machine.name.split(" ")[0]
        short_id = machine.id if len(machine.id) <= 5 else "..." + machine.id[-4:]
        parts.append(
            f'<rect x="{rect.x:.1f}" y="{rect.y:.1f}" width="{rect.w:.1f}" height="{rect.h:.1f}" rx="10" '
            f'fill="#1e293b" stroke="{stroke}" stroke-width="{stroke_width}" />'
        )
        parts.append(
            f'<circle cx="{rect.x + rect.w - 8:.1f}" cy="{rect.y + 8:.1f}" r="4" '
            f'fill="{status_color(machine.status)}" />'
        )
        parts.append(
            f'<text x="{rect.center[0]:.1f}" y="{rect.center[1] - 4:.1f}" class="caption">{escape(caption)}</text>'
        )
        parts.append(
            f'<text x="{rect.center[0]:.1f}" y="{rect.center[1] + 10:.1f}" class="ident">{escape(short_id)}</text>'
        )
    else:
        dashed = ' stroke-dasharray="4 3"' if item.kind != "label" else ""
        parts.append(
            f'<rect x="{rect.x:.1f}" y="{rect.y:.1f}" width="{rect.w:.1f}" height="{rect.h:.1f}" rx="4" '
            f'fill="rgba(51, 65, 85, 0.5)" stroke="{stroke}" stroke-width="{stroke_width}"{dashed} />'
        )
        parts.append(
            f'<text x="{rect.center[0]:.1f}" y="{rect.center[1] + 3:.1f}" class="caption">'
            f'{escape(item.display_text or "Vazio")}</text>'
        )
    if edit_mode:
        bx, by = delete_badge_center(rect)
        parts.append(
            f'<g class="delete-badge"><circle cx="{bx:.1f}" cy="{by:.1f}" r="{DELETE_BADGE_RADIUS:.0f}" fill="#ef4444" />'
            f'<text x="{bx:.1f}" y="{by + 3:.1f}" class="badge">×</text></g>'
        )
    return f'<g data-uid="{uid}">' + "".join(parts) + "</g>"


def render_layout_svg(
    snapshot: Snapshot,
    machines: Mapping[str, Machine],
    settings: EditorSettings,
    *,
    edit_mode: bool = False,
    selected_uid: Optional[str] = None,
) -> str:
    width, height = settings.canvas.as_tuple()
    items: List[str] = []
    for item in snapshot.items:
        rect = footprint_rect(item, settings, machines)
        machine = machines.get(item.reference_id) if item.reference_id else None
        items.append(
            _render_item(item, rect, machine, edit_mode=edit_mode, selected=item.uid == selected_uid)
        )
    svg = f"""
    <svg width="{width:.0f}" height="{height:.0f}" viewBox="0 0 {width:.0f} {height:.0f}" xmlns="http://www.w3.org/2000/svg" style="user-select:none;">
      <defs>
        <style>
          .caption {{ font-size: 9px; font-weight: 700; fill: #94a3b8; text-anchor: middle; }}
          .ident {{ font-size: 9px; font-family: monospace; fill: #e2e8f0; text-anchor: middle; }}
          .badge {{ font-size: 11px; fill: #fff; text-anchor: middle; }}
        </style>
      </defs>
      <rect x="0" y="0" width="{width:.0f}" height="{height:.0f}" fill="#0f172a" />
      <g transform="{_wrapper_transform(snapshot, settings)}">
        {''.join(items)}
      </g>
    </svg>
    """
    return svg


__all__ = ["footprint_rect", "delete_badge_center", "render_layout_svg"]
