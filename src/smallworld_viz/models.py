"""
Core data model for graph rendering.

Holds the canonical layout graph, node positions, compass handles and the
render records handed to the renderer, plus ``normalize`` which turns raw
vertex / edge lists into a ``LayoutGraph``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Hashable, Iterable, Optional

Vertex = Hashable


class GraphContractError(Exception):
    """Raised when the canonical graph would violate an internal invariant."""


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class CompassHandle(Enum):
    """Eight attachment directions on a node boundary (screen coordinates)."""
    RIGHT = "right"
    BOTTOM_RIGHT = "bottom-right"
    BOTTOM = "bottom"
    BOTTOM_LEFT = "bottom-left"
    LEFT = "left"
    TOP_LEFT = "top-left"
    TOP = "top"
    TOP_RIGHT = "top-right"


class HandleRole(Enum):
    SOURCE = "src"
    TARGET = "tgt"


class EdgeLayer(Enum):
    BACKGROUND = "background"
    OVERLAY = "overlay"


class EdgeVariant(Enum):
    """Visual variant of a render edge."""
    UNDIRECTED = "undirected"   # no optimization applied yet
    BACKGROUND = "background"   # original edge drawn under an overlay
    DIRECTED = "directed"       # optimizer result


# ---------------------------------------------------------------------------
# Data classes
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class NodePosition:
    """Top-left corner of a node's square footprint."""
    x: float
    y: float

    def center(self, width: float, height: float) -> tuple[float, float]:
        return self.x + width / 2, self.y + height / 2


@dataclass(frozen=True)
class LayoutEdge:
    """Edge directed first → second; the direction only seeds ranking."""
    source: Vertex
    target: Vertex


@dataclass(frozen=True)
class LayoutGraph:
    """Immutable working graph consumed by the layout engine."""
    vertices: tuple[Vertex, ...] = ()
    edges: tuple[LayoutEdge, ...] = ()

    def index_of(self) -> dict[Vertex, int]:
        return {v: i for i, v in enumerate(self.vertices)}


@dataclass(frozen=True)
class DirectedOverlayEdge:
    """Directed edge returned by the optimizer (draw an arrow source → target)."""
    source: Vertex
    target: Vertex


@dataclass(frozen=True)
class Handle:
    """A compass direction qualified by the role of the endpoint."""
    direction: CompassHandle
    role: HandleRole

    @property
    def id(self) -> str:
        return f"{self.direction.value}-{self.role.value}"


@dataclass
class ParsedGraph:
    """Validated graph produced by the text parser."""
    vertices: list[int] = field(default_factory=list)
    edges: list[tuple[int, int]] = field(default_factory=list)

    def to_request(self) -> dict[str, Any]:
        return {
            "vertices": list(self.vertices),
            "edges": [[u, v] for u, v in self.edges],
        }


@dataclass
class OptimizationResult:
    """Optimizer response: directed edges plus two display-only scores."""
    edges: list[DirectedOverlayEdge] = field(default_factory=list)
    optimized_graph_score: float = 0.0
    bidirectional_graph_score: float = 0.0

    def scores(self) -> dict[str, float]:
        return {
            "optimized_graph_score": self.optimized_graph_score,
            "bidirectional_graph_score": self.bidirectional_graph_score,
        }


@dataclass
class RenderEdge:
    """Finalized edge record handed to the renderer."""
    id: str
    source: Vertex
    target: Vertex
    layer: EdgeLayer
    variant: EdgeVariant
    style: Any  # styles.EdgeVisual
    z_order: int = 0
    source_handle: Optional[Handle] = None
    target_handle: Optional[Handle] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "source": str(self.source),
            "target": str(self.target),
            "sourceHandle": self.source_handle.id if self.source_handle else None,
            "targetHandle": self.target_handle.id if self.target_handle else None,
            "layer": self.layer.value,
            "variant": self.variant.value,
            "style": self.style.to_dict(),
            "zOrder": self.z_order,
        }


@dataclass
class RenderNode:
    id: Vertex
    position: NodePosition

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": str(self.id),
            "position": {"x": self.position.x, "y": self.position.y},
        }


@dataclass
class RenderModel:
    """Nodes and edges of one render, in drawing order."""
    nodes: list[RenderNode] = field(default_factory=list)
    edges: list[RenderEdge] = field(default_factory=list)

    @property
    def positions(self) -> dict[Vertex, NodePosition]:
        """Positions keyed by vertex, suitable as the next prior positions."""
        return {n.id: n.position for n in self.nodes}

    def edges_in(self, layer: EdgeLayer) -> list[RenderEdge]:
        return [e for e in self.edges if e.layer is layer]

    def to_dict(self) -> dict[str, Any]:
        return {
            "nodes": [n.to_dict() for n in self.nodes],
            "edges": [e.to_dict() for e in self.edges],
        }


# ---------------------------------------------------------------------------
# Graph normalization
# ---------------------------------------------------------------------------

def normalize(
    vertices: Iterable[Vertex],
    edges: Iterable[tuple[Vertex, Vertex]],
) -> LayoutGraph:
    """Build a ``LayoutGraph`` from raw vertex and edge lists.

    Input order is preserved and nothing is deduplicated: every input edge
    yields one layout edge directed from its first element to its second.
    Edge endpoints are not checked against the vertex list.

    Raises:
        GraphContractError: if a vertex appears more than once.
    """
    vertex_tuple = tuple(vertices)
    seen: set[Vertex] = set()
    for v in vertex_tuple:
        if v in seen:
            raise GraphContractError(f"vertex {v!r} appears more than once")
        seen.add(v)
    edge_tuple = tuple(LayoutEdge(source=u, target=v) for u, v in edges)
    return LayoutGraph(vertices=vertex_tuple, edges=edge_tuple)
