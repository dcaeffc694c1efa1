"""
Compass handle selection for edge endpoints.

Each endpoint attaches on the side of its node facing the other endpoint,
chosen among eight 45°-wide sectors centered on the cardinal and diagonal
directions. Screen coordinates are used: y grows downwards, so 90° is
``bottom``.
"""

from __future__ import annotations

import math
from typing import Mapping, Optional

from smallworld_viz.layout_engine import LayoutEngineConfig
from smallworld_viz.models import CompassHandle, Handle, HandleRole, NodePosition, Vertex

# Counter-clockwise from 0° in screen space; sector i covers
# [i*45 - 22.5, i*45 + 22.5).
_SECTORS = (
    CompassHandle.RIGHT,
    CompassHandle.BOTTOM_RIGHT,
    CompassHandle.BOTTOM,
    CompassHandle.BOTTOM_LEFT,
    CompassHandle.LEFT,
    CompassHandle.TOP_LEFT,
    CompassHandle.TOP,
    CompassHandle.TOP_RIGHT,
)


def angle_degrees(dx: float, dy: float) -> float:
    """Angle of the vector (dx, dy) normalized to [0, 360)."""
    deg = math.degrees(math.atan2(dy, dx)) % 360.0
    # -0.0 % 360 and tiny negatives can round up to exactly 360
    return 0.0 if deg >= 360.0 else deg


def handle_direction(dx: float, dy: float) -> CompassHandle:
    """Map a direction vector to its compass sector."""
    deg = angle_degrees(dx, dy)
    return _SECTORS[int(((deg + 22.5) % 360.0) // 45.0)]


def resolve_handles(
    source: Vertex,
    target: Vertex,
    positions: Mapping[Vertex, NodePosition],
    config: LayoutEngineConfig | None = None,
) -> tuple[Optional[Handle], Optional[Handle]]:
    """Pick the source and target handles of one edge.

    The source handle follows the vector source → target, the target handle
    the reversed vector, so an incoming edge attaches on the side facing its
    source. If either endpoint has no position, ``(None, None)`` is returned.
    """
    src_pos = positions.get(source)
    tgt_pos = positions.get(target)
    if src_pos is None or tgt_pos is None:
        return None, None

    cfg = config or LayoutEngineConfig()
    sx, sy = src_pos.center(cfg.node_width, cfg.node_height)
    tx, ty = tgt_pos.center(cfg.node_width, cfg.node_height)
    dx = tx - sx
    dy = ty - sy
    return (
        Handle(handle_direction(dx, dy), HandleRole.SOURCE),
        Handle(handle_direction(-dx, -dy), HandleRole.TARGET),
    )
