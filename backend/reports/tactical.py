"""
reports.tactical — Pure geometry and bookkeeping helpers for the tactical map.

A report's map lives in a ``MAP_SIZE`` × ``MAP_SIZE`` simple coordinate
system (x to the right, y up, origin at the bottom-left corner).  Markers
and shapes are stored as plain JSON on the report::

    {"markers": [{"id": "M1", "x": 120.5, "y": 88, "color": "red",
                  "title": "Stash", "desc": "Behind the garage"}],
     "shapes":  [{"id": "S1", "type": "circle", "coords": [{"x": 10, "y": 10}],
                  "radius": 40, "color": "#ef4444"}]}

The legend maps a marker colour to its meaning.  Nothing in this module
touches the database.
"""

from __future__ import annotations

import re
from typing import Any, Iterable

MAP_SIZE = 4096

# Marker colour name → hex
PALETTE: dict[str, str] = {
    "red": "#ef4444",
    "blue": "#3b82f6",
    "yellow": "#eab308",
    "green": "#22c55e",
    "orange": "#f97316",
    "purple": "#a855f7",
    "black": "#1f2937",
    "white": "#f3f4f6",
}
MARKER_COLORS = tuple(PALETTE)

SHAPE_TYPES = ("polyline", "polygon", "rect", "circle")

_ID_RE = re.compile(r"^([A-Za-z])(\d+)$")
_HEX_RE = re.compile(r"^#[0-9a-fA-F]{6}$")


# ── Identifiers ─────────────────────────────────────────────────────


def _next_id(prefix: str, items: Iterable[dict[str, Any]]) -> str:
    """
    ``<prefix><n+1>`` where ``n`` is the number of the last item's id.

    Ids that do not follow ``<letter><digits>`` are skipped when looking
    for the last numbered item.
    """
    for item in reversed(list(items)):
        match = _ID_RE.match(str(item.get("id", "")))
        if match:
            return f"{prefix}{int(match.group(2)) + 1}"
    return f"{prefix}1"


def next_marker_id(markers: Iterable[dict[str, Any]]) -> str:
    return _next_id("M", markers)


def next_shape_id(shapes: Iterable[dict[str, Any]]) -> str:
    return _next_id("S", shapes)


def next_evidence_id(prefix: str, items: Iterable[dict[str, Any]]) -> str:
    """Sequential evidence ids: ``E<n>`` for photos, ``V<n>`` for video."""
    highest = 0
    for item in items:
        match = _ID_RE.match(str(item.get("id", "")))
        if match and match.group(1) == prefix:
            highest = max(highest, int(match.group(2)))
    return f"{prefix}{highest + 1}"


# ── Colours and legend ──────────────────────────────────────────────


def color_hex(color: str) -> str:
    """Hex value for a palette name; hex strings pass through."""
    if color in PALETTE:
        return PALETTE[color]
    if _HEX_RE.match(color or ""):
        return color.lower()
    return PALETTE["red"]


def is_valid_shape_color(color: str) -> bool:
    return color in PALETTE or bool(_HEX_RE.match(color or ""))


def used_colors(markers: Iterable[dict[str, Any]]) -> list[str]:
    """Distinct marker colours, in order of first use."""
    seen: list[str] = []
    for marker in markers:
        color = marker.get("color")
        if color and color not in seen:
            seen.append(color)
    return seen


def exportable_legend(
    markers: Iterable[dict[str, Any]],
    legend: dict[str, str] | None,
) -> list[tuple[str, str]]:
    """
    ``(color, description)`` pairs for colours that are on the map and
    carry a non-blank description.  Incomplete entries are not exported.
    """
    legend = legend or {}
    rows = []
    for color in used_colors(markers):
        description = (legend.get(color) or "").strip()
        if description:
            rows.append((color, description))
    return rows


# ── Coordinates ─────────────────────────────────────────────────────


def in_bounds(x: float, y: float, size: int = MAP_SIZE) -> bool:
    return 0 <= x <= size and 0 <= y <= size


def clamp_pan_offset(
    offset: tuple[float, float],
    image_size: tuple[float, float],
    viewport: tuple[float, float],
) -> tuple[float, float]:
    """
    Bound a drag offset so the image never leaves a gap in the viewport.

    On each axis: if the image fits inside the viewport the offset is
    pinned to 0; otherwise it is clamped to ``[viewport - image, 0]``.
    A zero-sized image (not loaded yet) leaves the offset untouched.
    """
    if image_size[0] == 0:
        return offset

    def _axis(value: float, image: float, view: float) -> float:
        if image <= view:
            return 0
        return min(0, max(view - image, value))

    return (
        _axis(offset[0], image_size[0], viewport[0]),
        _axis(offset[1], image_size[1], viewport[1]),
    )


def markers_in_rect(
    markers: Iterable[dict[str, Any]],
    rect: tuple[float, float, float, float],
) -> list[dict[str, Any]]:
    """
    Markers whose point lies inside ``rect`` (``x1, y1, x2, y2``, corners
    in any order, edges inclusive).
    """
    x1, y1, x2, y2 = rect
    left, right = sorted((x1, x2))
    bottom, top = sorted((y1, y2))
    return [
        m for m in markers
        if left <= m["x"] <= right and bottom <= m["y"] <= top
    ]


def shape_bounds(shape: dict[str, Any]) -> tuple[float, float, float, float]:
    """Axis-aligned bounding box ``(min_x, min_y, max_x, max_y)`` of a shape."""
    coords = shape["coords"]
    if shape["type"] == "circle":
        cx, cy, r = coords[0]["x"], coords[0]["y"], shape.get("radius") or 0
        return (cx - r, cy - r, cx + r, cy + r)
    xs = [c["x"] for c in coords]
    ys = [c["y"] for c in coords]
    return (min(xs), min(ys), max(xs), max(ys))
