"""Pure helpers behind the tactical map."""

from __future__ import annotations

import pytest

from reports import tactical


def test_next_marker_id_follows_last_numbered_item():
    assert tactical.next_marker_id([]) == "M1"
    assert tactical.next_marker_id([{"id": "M1"}, {"id": "M4"}]) == "M5"
    assert tactical.next_marker_id([{"id": "M2"}, {"id": "junk"}]) == "M3"


def test_next_evidence_id_uses_highest_of_prefix():
    items = [{"id": "E3"}, {"id": "E1"}, {"id": "V9"}]

    assert tactical.next_evidence_id("E", items) == "E4"
    assert tactical.next_evidence_id("V", items) == "V10"


def test_color_hex():
    assert tactical.color_hex("blue") == "#3b82f6"
    assert tactical.color_hex("#ABCDEF") == "#abcdef"
    assert tactical.color_hex("nonsense") == tactical.PALETTE["red"]


def test_used_colors_keeps_first_use_order():
    markers = [{"color": "green"}, {"color": "red"}, {"color": "green"}]

    assert tactical.used_colors(markers) == ["green", "red"]


def test_exportable_legend_skips_blank_and_unused():
    markers = [{"color": "red"}, {"color": "blue"}]
    legend = {"red": "Dealer", "blue": "   ", "green": "Unused"}

    assert tactical.exportable_legend(markers, legend) == [("red", "Dealer")]
    assert tactical.exportable_legend(markers, None) == []


@pytest.mark.parametrize(
    "offset, image, viewport, expected",
    [
        ((-50, -50), (500, 500), (800, 600), (0, 0)),
        ((-900, 20), (1000, 1000), (800, 600), (-200, 0)),
        ((-100, -100), (1000, 1000), (800, 600), (-100, -100)),
        ((-30, -30), (0, 0), (800, 600), (-30, -30)),
    ],
)
def test_clamp_pan_offset(offset, image, viewport, expected):
    assert tactical.clamp_pan_offset(offset, image, viewport) == expected


def test_markers_in_rect_accepts_any_corner_order():
    markers = [{"id": "M1", "x": 5, "y": 5}, {"id": "M2", "x": 20, "y": 5}, {"id": "M3", "x": 10, "y": 10}]

    hits = tactical.markers_in_rect(markers, (10, 10, 0, 0))

    assert [m["id"] for m in hits] == ["M1", "M3"]


def test_shape_bounds():
    circle = {"type": "circle", "coords": [{"x": 10, "y": 20}], "radius": 5}
    poly = {"type": "polygon", "coords": [{"x": 0, "y": 4}, {"x": 8, "y": 1}, {"x": 3, "y": 9}]}

    assert tactical.shape_bounds(circle) == (5, 15, 15, 25)
    assert tactical.shape_bounds(poly) == (0, 1, 8, 9)


def test_in_bounds_edges_are_inclusive():
    assert tactical.in_bounds(0, tactical.MAP_SIZE)
    assert not tactical.in_bounds(-0.1, 10)
