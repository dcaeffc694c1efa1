"""Tests for render sessions."""

import pytest

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
from smallworld_viz.session import RenderSession
from smallworld_viz.styles import Themes

CYCLE = ParsedGraph(vertices=[1, 2, 3, 4, 5], edges=[(1, 2), (2, 3), (3, 4), (4, 5), (5, 1)])
RESULT = OptimizationResult(edges=[DirectedOverlayEdge(1, 2), DirectedOverlayEdge(2, 3)])


def test_draw_then_apply_keeps_positions() -> None:
    s = RenderSession()
    before = s.draw(CYCLE).positions
    assert s.apply_result(RESULT, s.begin_optimize())
    assert s.model.positions == before
    assert len(s.model.edges_in(EdgeLayer.OVERLAY)) == 2


def test_redraw_clears_result() -> None:
    s = RenderSession()
    s.draw(CYCLE)
    s.apply_result(RESULT)
    s.draw(CYCLE)
    assert s.result is None
    assert s.model.edges_in(EdgeLayer.OVERLAY) == []


def test_stale_result_discarded() -> None:
    s = RenderSession()
    s.draw(CYCLE)
    revision = s.begin_optimize()
    s.draw(ParsedGraph(vertices=[1, 2], edges=[(1, 2)]))
    assert not s.apply_result(RESULT, revision)
    assert s.result is None


def test_move_node_survives_overlay() -> None:
    s = RenderSession()
    s.draw(CYCLE)
    s.move_node(2, 300, 10)
    s.apply_result(RESULT)
    assert s.model.positions[2] == NodePosition(300, 10)


def test_move_unknown_node() -> None:
    s = RenderSession()
    s.draw(CYCLE)
    with pytest.raises(KeyError):
        s.move_node(42, 0, 0)


def test_reset_relayouts() -> None:
    s = RenderSession()
    s.draw(CYCLE)
    s.move_node(2, 300, 10)
    s.reset()
    assert s.model.positions == layout(normalize(CYCLE.vertices, CYCLE.edges))


def test_reset_without_graph() -> None:
    s = RenderSession()
    assert s.reset().nodes == []


def test_operations_need_a_graph() -> None:
    s = RenderSession()
    with pytest.raises(LookupError):
        s.begin_optimize()
    with pytest.raises(LookupError):
        s.apply_result(RESULT)


FAN = ParsedGraph(vertices=[1, 2, 3], edges=[(1, 2), (1, 3)])


def test_redraw_with_new_layout_relayouts() -> None:
    s = RenderSession()
    before = s.draw(FAN).positions
    lr = ComposeConfig(layout=LayoutEngineConfig(direction="LR", rank_spacing=10))
    after = s.draw(FAN, lr).positions
    assert after != before
    assert after == layout(normalize(FAN.vertices, FAN.edges), lr.layout)
    assert s.config is lr


def test_redraw_with_new_theme_keeps_positions() -> None:
    s = RenderSession()
    s.draw(FAN)
    s.move_node(2, 300, 10)
    s.draw(FAN, ComposeConfig(theme=Themes.DARK))
    assert s.model.positions[2] == NodePosition(300, 10)
