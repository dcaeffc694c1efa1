"""Tests for compass handle selection."""

import math

import pytest

from smallworld_viz.anchors import angle_degrees, handle_direction, resolve_handles
from smallworld_viz.models import CompassHandle, HandleRole, NodePosition


def _at(deg: float) -> tuple[float, float]:
    rad = math.radians(deg)
    return math.cos(rad), math.sin(rad)


@pytest.mark.parametrize(
    "dx, dy, expected",
    [
        (1, 0, CompassHandle.RIGHT),
        (1, 1, CompassHandle.BOTTOM_RIGHT),
        (0, 1, CompassHandle.BOTTOM),
        (-1, 1, CompassHandle.BOTTOM_LEFT),
        (-1, 0, CompassHandle.LEFT),
        (-1, -1, CompassHandle.TOP_LEFT),
        (0, -1, CompassHandle.TOP),
        (1, -1, CompassHandle.TOP_RIGHT),
    ],
)
def test_cardinal_and_diagonal(dx: float, dy: float, expected: CompassHandle) -> None:
    assert handle_direction(dx, dy) is expected


@pytest.mark.parametrize(
    "deg, expected",
    [
        (22.4999, CompassHandle.RIGHT),
        (22.5001, CompassHandle.BOTTOM_RIGHT),
        (67.4999, CompassHandle.BOTTOM_RIGHT),
        (67.5001, CompassHandle.BOTTOM),
        (157.4999, CompassHandle.BOTTOM_LEFT),
        (202.5001, CompassHandle.TOP_LEFT),
        (292.4999, CompassHandle.TOP),
        (337.4999, CompassHandle.TOP_RIGHT),
        (337.5001, CompassHandle.RIGHT),
    ],
)
def test_sector_boundaries(deg: float, expected: CompassHandle) -> None:
    assert handle_direction(*_at(deg)) is expected


def test_angle_normalized() -> None:
    assert angle_degrees(1, 0) == 0.0
    assert angle_degrees(0, -1) == pytest.approx(270.0)
    assert 0.0 <= angle_degrees(1, -1e-18) < 360.0


def test_zero_vector_is_right() -> None:
    assert handle_direction(0, 0) is CompassHandle.RIGHT


def test_resolve_vertical_edge() -> None:
    positions = {1: NodePosition(0, 0), 2: NodePosition(0, 120)}
    src, tgt = resolve_handles(1, 2, positions)
    assert src.direction is CompassHandle.BOTTOM
    assert src.role is HandleRole.SOURCE
    assert tgt.direction is CompassHandle.TOP
    assert tgt.role is HandleRole.TARGET
    assert (src.id, tgt.id) == ("bottom-src", "top-tgt")


def test_resolve_target_faces_source() -> None:
    positions = {1: NodePosition(200, 0), 2: NodePosition(0, 120)}
    src, tgt = resolve_handles(1, 2, positions)
    assert src.direction is CompassHandle.BOTTOM_LEFT
    assert tgt.direction is CompassHandle.TOP_RIGHT


def test_resolve_missing_endpoint() -> None:
    positions = {1: NodePosition(0, 0)}
    assert resolve_handles(1, 2, positions) == (None, None)
    assert resolve_handles(3, 1, positions) == (None, None)
