"""
Layered layout engine for undirected graphs.

Implements a Sugiyama-style drawing in the spirit of Graphviz 'dot':
- Cycle breaking (DFS back-edges are excluded from rank constraints)
- Layer assignment by longest path
- Virtual nodes for edges spanning several ranks
- Crossing minimization (barycenter heuristic, multi-pass)
- Coordinate assignment with fixed node / rank spacing

The input graph is logically undirected; every edge is treated as directed
from its first endpoint to its second purely to seed ranking. The whole
pipeline is deterministic for identical, identically ordered input.
"""

from __future__ import annotations

import logging
from collections import defaultdict, deque
from dataclasses import dataclass

from smallworld_viz.models import LayoutGraph, NodePosition, Vertex

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------

@dataclass
class LayoutEngineConfig:
    """Configuration for the layered layout engine."""
    # Spacing
    rank_spacing: float = 80       # Gap between ranks
    node_spacing: float = 60       # Gap between nodes in the same rank

    # Node footprint (fixed square, used for centering only)
    node_width: float = 40
    node_height: float = 40

    # Algorithm tuning
    barycenter_iterations: int = 4  # Crossing minimization sweeps

    # TB (top-bottom), BT, LR, RL
    direction: str = "TB"

    # Starting position
    start_x: float = 0
    start_y: float = 0


# ---------------------------------------------------------------------------
# Internal structures
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class _Virtual:
    """Identifier of a virtual node; never equal to a user vertex."""
    serial: int


@dataclass
class _Node:
    """Internal node representation for the layout passes."""
    id: object
    index: int          # Input order; virtual nodes follow all real ones
    rank: int = 0       # Layer assignment
    order: float = 0    # Position within layer
    x: float = 0
    y: float = 0
    is_virtual: bool = False


# ---------------------------------------------------------------------------
# Sugiyama layered layout
# ---------------------------------------------------------------------------

def layout(
    graph: LayoutGraph,
    config: LayoutEngineConfig | None = None,
) -> dict[Vertex, NodePosition]:
    """Assign a position to every vertex of *graph*.

    Steps:
    1. Cycle breaking (DFS in input order, back-edges ignored for ranking)
    2. Layer assignment (longest path over the remaining DAG)
    3. Virtual node insertion for long edges
    4. Crossing minimization (barycenter heuristic, multi-pass)
    5. Coordinate assignment

    Edges whose endpoints are not vertices of the graph are ignored.

    Returns:
        Mapping of vertex → top-left ``NodePosition``, in vertex input order.
    """
    cfg = config or LayoutEngineConfig()
    if not graph.vertices:
        return {}

    index = graph.index_of()
    adj: dict[Vertex, list[Vertex]] = {v: [] for v in graph.vertices}
    layout_edges: list[tuple[Vertex, Vertex]] = []
    for edge in graph.edges:
        if edge.source in index and edge.target in index:
            adj[edge.source].append(edge.target)
            layout_edges.append((edge.source, edge.target))

    nodes: dict[object, _Node] = {
        v: _Node(id=v, index=i) for i, v in enumerate(graph.vertices)
    }

    # --- Step 1: Cycle breaking ---
    back_edges = _find_back_edges(graph.vertices, adj)

    # --- Step 2: Layer assignment ---
    ranks = _assign_ranks_longest_path(graph.vertices, adj, back_edges)
    for v, rank in ranks.items():
        nodes[v].rank = rank

    # --- Step 3: Virtual nodes for long edges ---
    expanded_edges: list[tuple[object, object]] = []
    virtual_count = 0
    for src, tgt in layout_edges:
        if ranks[src] == ranks[tgt]:
            continue  # self-loop; nothing to order
        upper, lower = (src, tgt) if ranks[src] < ranks[tgt] else (tgt, src)
        prev: object = upper
        for r in range(ranks[upper] + 1, ranks[lower]):
            vid = _Virtual(virtual_count)
            nodes[vid] = _Node(
                id=vid, index=len(graph.vertices) + virtual_count,
                rank=r, is_virtual=True,
            )
            virtual_count += 1
            expanded_edges.append((prev, vid))
            prev = vid
        expanded_edges.append((prev, lower))

    # --- Step 4: Crossing minimization ---
    by_rank: dict[int, list[object]] = defaultdict(list)
    for nid, node in nodes.items():
        by_rank[node.rank].append(nid)

    # Neighbors one rank up / one rank down
    up: dict[object, list[object]] = defaultdict(list)
    down: dict[object, list[object]] = defaultdict(list)
    for s, t in expanded_edges:
        down[s].append(t)
        up[t].append(s)

    max_rank = max(by_rank.keys())

    for rank_nodes in by_rank.values():
        for i, nid in enumerate(rank_nodes):
            nodes[nid].order = float(i)

    for _ in range(cfg.barycenter_iterations):
        for r in range(1, max_rank + 1):
            _barycenter_sort(by_rank[r], nodes, up)
        for r in range(max_rank - 1, -1, -1):
            _barycenter_sort(by_rank[r], nodes, down)

    # --- Step 5: Coordinate assignment ---
    _assign_coordinates(by_rank, nodes, cfg)

    logger.debug(
        "layout: %d vertices, %d ranks, %d back-edges, %d virtual nodes",
        len(graph.vertices), max_rank + 1, len(back_edges), virtual_count,
    )
    return {v: NodePosition(nodes[v].x, nodes[v].y) for v in graph.vertices}


def _find_back_edges(
    vertices: tuple[Vertex, ...],
    adj: dict[Vertex, list[Vertex]],
) -> set[tuple[Vertex, Vertex]]:
    """Find back-edges (including self-loops) using iterative DFS.

    Roots are tried in input order and neighbors are followed in edge
    input order, so the result only depends on the input ordering.
    """
    WHITE, GRAY, BLACK = 0, 1, 2
    color: dict[Vertex, int] = {v: WHITE for v in vertices}
    back_edges: set[tuple[Vertex, Vertex]] = set()

    for start in vertices:
        if color[start] != WHITE:
            continue
        # Each frame is (node, index of next neighbor).
        color[start] = GRAY
        stack: list[tuple[Vertex, int]] = [(start, 0)]
        while stack:
            u, idx = stack[-1]
            neighbors = adj[u]
            if idx < len(neighbors):
                stack[-1] = (u, idx + 1)
                v = neighbors[idx]
                if color[v] == GRAY:
                    back_edges.add((u, v))
                elif color[v] == WHITE:
                    color[v] = GRAY
                    stack.append((v, 0))
            else:
                color[u] = BLACK
                stack.pop()

    return back_edges


def _assign_ranks_longest_path(
    vertices: tuple[Vertex, ...],
    adj: dict[Vertex, list[Vertex]],
    back_edges: set[tuple[Vertex, Vertex]],
) -> dict[Vertex, int]:
    """Assign ranks by longest path from the sources of the acyclic part."""
    in_degree: dict[Vertex, int] = {v: 0 for v in vertices}
    for u in vertices:
        for v in adj[u]:
            if (u, v) not in back_edges:
                in_degree[v] += 1

    ranks: dict[Vertex, int] = {v: 0 for v in vertices}
    queue = deque(v for v in vertices if in_degree[v] == 0)
    while queue:
        u = queue.popleft()
        for v in adj[u]:
            if (u, v) in back_edges:
                continue
            ranks[v] = max(ranks[v], ranks[u] + 1)
            in_degree[v] -= 1
            if in_degree[v] == 0:
                queue.append(v)

    return ranks


def _barycenter_sort(
    rank_nodes: list[object],
    nodes: dict[object, _Node],
    neighbor_adj: dict[object, list[object]],
) -> None:
    """Sort nodes in a rank by barycenter of their neighbors.

    Nodes without neighbors keep their current order as barycenter; ties
    fall back to input order.
    """
    barycenters: dict[object, float] = {}
    for nid in rank_nodes:
        neighbor_orders = [nodes[n].order for n in neighbor_adj.get(nid, [])]
        if neighbor_orders:
            barycenters[nid] = sum(neighbor_orders) / len(neighbor_orders)
        else:
            barycenters[nid] = nodes[nid].order

    rank_nodes.sort(key=lambda n: (barycenters[n], nodes[n].index))
    for i, nid in enumerate(rank_nodes):
        nodes[nid].order = float(i)


def _assign_coordinates(
    by_rank: dict[int, list[object]],
    nodes: dict[object, _Node],
    cfg: LayoutEngineConfig,
) -> None:
    """Assign x, y coordinates based on rank and order."""
    vertical = cfg.direction in ("TB", "BT")
    # Along-rank extent and across-rank extent of one node
    along = cfg.node_width if vertical else cfg.node_height
    across = cfg.node_height if vertical else cfg.node_width

    def real_count(rank: int) -> int:
        return sum(1 for n in by_rank[rank] if not nodes[n].is_virtual)

    def rank_extent(count: int) -> float:
        return count * along + max(count - 1, 0) * cfg.node_spacing

    widest = max(rank_extent(real_count(r)) for r in by_rank)
    max_rank = max(by_rank.keys())
    reverse = cfg.direction in ("BT", "RL")

    for rank, rank_nodes in sorted(by_rank.items()):
        level = (max_rank - rank) if reverse else rank
        rank_pos = level * (across + cfg.rank_spacing)
        cursor = (widest - rank_extent(real_count(rank))) / 2

        for nid in rank_nodes:
            node = nodes[nid]
            if vertical:
                node.x = cfg.start_x + cursor
                node.y = cfg.start_y + rank_pos
            else:
                node.x = cfg.start_x + rank_pos
                node.y = cfg.start_y + cursor
            if not node.is_virtual:
                cursor += along + cfg.node_spacing
