"""
Render pipeline.

``render`` is the single entry point a caller invokes whenever the graph,
the optimization result or the prior positions change:

    graph → normalize → layout → stabilize → handles → compose → RenderModel
"""

from __future__ import annotations

from typing import Iterable, Mapping, Optional, Union

from smallworld_viz.compositor import ComposeConfig, compose
from smallworld_viz.layout_engine import layout
from smallworld_viz.models import (
    DirectedOverlayEdge,
    LayoutGraph,
    NodePosition,
    OptimizationResult,
    ParsedGraph,
    RenderModel,
    RenderNode,
    Vertex,
    normalize,
)
from smallworld_viz.stabilizer import stabilize


def render(
    graph: Union[LayoutGraph, ParsedGraph],
    overlay: Union[OptimizationResult, Iterable[DirectedOverlayEdge], None] = None,
    prior_positions: Optional[Mapping[Vertex, NodePosition]] = None,
    config: ComposeConfig | None = None,
) -> RenderModel:
    """Compute the node and edge render model of *graph*.

    Args:
        graph: A ``LayoutGraph`` or a parser-produced ``ParsedGraph``.
        overlay: Optimization result (or its directed edges); ``None`` when
            no optimization has been applied.
        prior_positions: Positions of the previous render, or manual
            overrides. Reused verbatim when the vertex set is unchanged.
        config: Layout and styling configuration.
    """
    cfg = config or ComposeConfig()
    if isinstance(graph, ParsedGraph):
        graph = normalize(graph.vertices, graph.edges)
    if isinstance(overlay, OptimizationResult):
        overlay = overlay.edges

    positions = stabilize(layout(graph, cfg.layout), prior_positions)
    nodes = [RenderNode(id=v, position=positions[v]) for v in graph.vertices]
    edges = compose(graph, overlay, positions, cfg)
    return RenderModel(nodes=nodes, edges=edges)
