"""
Edge compositor: builds the renderable edge layers.

Every input edge becomes a background edge (z-order 0). When an
optimization result is present, each directed result edge becomes an
overlay edge (z-order 1) drawn above the background, and the background
switches from the plain undirected look to the subdued variant.
"""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import Iterable, Mapping, Optional

from smallworld_viz.anchors import resolve_handles
from smallworld_viz.layout_engine import LayoutEngineConfig
from smallworld_viz.models import (
    DirectedOverlayEdge,
    EdgeLayer,
    EdgeVariant,
    LayoutGraph,
    NodePosition,
    RenderEdge,
    Vertex,
)
from smallworld_viz.styles import ColorTheme, EdgeVisual, EdgeVisualPreset, Themes

logger = logging.getLogger(__name__)

BACKGROUND_Z = 0
OVERLAY_Z = 1

_ID_PREFIX = {
    EdgeVariant.UNDIRECTED: "undir",
    EdgeVariant.BACKGROUND: "bg",
    EdgeVariant.DIRECTED: "dir",
}


@dataclass
class ComposeConfig:
    """Configuration for edge composition."""
    theme: ColorTheme = field(default_factory=lambda: Themes.LIGHT)
    layout: LayoutEngineConfig = field(default_factory=LayoutEngineConfig)


def compose(
    graph: LayoutGraph,
    overlay_edges: Optional[Iterable[DirectedOverlayEdge]],
    positions: Mapping[Vertex, NodePosition],
    config: ComposeConfig | None = None,
) -> list[RenderEdge]:
    """Build background and overlay render edges, background first."""
    cfg = config or ComposeConfig()
    overlay = list(overlay_edges or [])

    bg_variant = EdgeVariant.BACKGROUND if overlay else EdgeVariant.UNDIRECTED
    bg_preset = EdgeVisualPreset.BACKGROUND if overlay else EdgeVisualPreset.UNDIRECTED
    bg_visual = cfg.theme.apply(bg_preset)
    overlay_visual = cfg.theme.apply(EdgeVisualPreset.DIRECTED)

    edges: list[RenderEdge] = []
    seen: Counter[str] = Counter()

    for e in graph.edges:
        edges.append(_make_edge(
            e.source, e.target, EdgeLayer.BACKGROUND, bg_variant,
            bg_visual, BACKGROUND_Z, positions, cfg, seen,
        ))
    for d in overlay:
        edges.append(_make_edge(
            d.source, d.target, EdgeLayer.OVERLAY, EdgeVariant.DIRECTED,
            overlay_visual, OVERLAY_Z, positions, cfg, seen,
        ))

    logger.debug(
        "compose: %d background (%s), %d overlay",
        len(graph.edges), bg_variant.value, len(overlay),
    )
    return edges


def edge_id(variant: EdgeVariant, source: Vertex, target: Vertex, occurrence: int = 1) -> str:
    """Deterministic id; repeated endpoint pairs get an occurrence suffix."""
    base = f"{_ID_PREFIX[variant]}-{source}-{target}"
    return base if occurrence == 1 else f"{base}~{occurrence}"


def _make_edge(
    source: Vertex,
    target: Vertex,
    layer: EdgeLayer,
    variant: EdgeVariant,
    visual: EdgeVisual,
    z_order: int,
    positions: Mapping[Vertex, NodePosition],
    cfg: ComposeConfig,
    seen: Counter[str],
) -> RenderEdge:
    base = edge_id(variant, source, target)
    seen[base] += 1
    src_handle, tgt_handle = resolve_handles(source, target, positions, cfg.layout)
    if src_handle is None:
        logger.debug("edge %s: endpoint without position, handles skipped", base)
    return RenderEdge(
        id=edge_id(variant, source, target, seen[base]),
        source=source,
        target=target,
        layer=layer,
        variant=variant,
        style=visual,
        z_order=z_order,
        source_handle=src_handle,
        target_handle=tgt_handle,
    )
