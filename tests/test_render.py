"""End-to-end tests for the render pipeline."""

from smallworld_viz.compositor import ComposeConfig
from smallworld_viz.layout_engine import LayoutEngineConfig, layout
from smallworld_viz.models import (
    DirectedOverlayEdge,
    EdgeLayer,
    NodePosition,
    OptimizationResult,
    ParsedGraph,
    normalize,
)
from smallworld_viz.render import render

CYCLE = ParsedGraph(vertices=[1, 2, 3, 4, 5], edges=[(1, 2), (2, 3), (3, 4), (4, 5), (5, 1)])
RESULT = OptimizationResult(
    edges=[DirectedOverlayEdge(u, v) for u, v in [(1, 2), (2, 3), (3, 4), (4, 5), (5, 1)]],
    optimized_graph_score=0.82,
    bidirectional_graph_score=0.64,
)


def test_cycle_graph() -> None:
    model = render(CYCLE)
    assert len(model.nodes) == 5
    assert len({n.position for n in model.nodes}) == 5
    assert len(model.edges_in(EdgeLayer.BACKGROUND)) == 5
    assert model.edges_in(EdgeLayer.OVERLAY) == []


def test_overlay_applied_keeps_positions() -> None:
    before = render(CYCLE)
    after = render(CYCLE, RESULT, before.positions)
    assert len(after.edges) == 10
    background = after.edges_in(EdgeLayer.BACKGROUND)
    overlay = after.edges_in(EdgeLayer.OVERLAY)
    assert len(background) == 5 and len(overlay) == 5
    assert min(e.z_order for e in overlay) > max(e.z_order for e in background)
    assert after.positions == before.positions


def test_overlay_as_edge_list() -> None:
    model = render(CYCLE, RESULT.edges)
    assert len(model.edges_in(EdgeLayer.OVERLAY)) == 5


def test_dragged_positions_survive_overlay() -> None:
    before = render(CYCLE)
    dragged = before.positions
    dragged[3] = NodePosition(400, 40)
    after = render(CYCLE, RESULT, dragged)
    assert after.positions[3] == NodePosition(400, 40)


def test_vertex_set_change_relayouts() -> None:
    small = ParsedGraph(vertices=[1, 2, 3], edges=[(1, 2), (2, 3)])
    large = ParsedGraph(vertices=[1, 2, 3, 4], edges=[(1, 2), (2, 3), (1, 4)])
    first = render(small)
    moved = {v: NodePosition(p.x + 500, p.y) for v, p in first.positions.items()}
    second = render(large, None, moved)
    assert second.positions == layout(normalize(large.vertices, large.edges))


def test_layout_graph_input() -> None:
    g = normalize(["a", "b"], [("a", "b")])
    model = render(g)
    assert [n.id for n in model.nodes] == ["a", "b"]
    assert model.edges[0].id == "undir-a-b"


def test_empty_graph() -> None:
    model = render(ParsedGraph())
    assert model.nodes == [] and model.edges == []


def test_config_passed_through() -> None:
    cfg = ComposeConfig(layout=LayoutEngineConfig(rank_spacing=10))
    model = render(ParsedGraph(vertices=[1, 2], edges=[(1, 2)]), config=cfg)
    assert model.positions[2] == NodePosition(0, 50)


def test_deterministic() -> None:
    assert render(CYCLE, RESULT).to_dict() == render(CYCLE, RESULT).to_dict()
