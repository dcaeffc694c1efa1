"""
Small-world graph viewer MCP server.

Lets an agent draw an undirected graph, overlay the directed routing
computed by the optimizer service, and read back the render model or a
draw.io export of it.

Tools:
  1. graph    — state: draw, optimize, apply_result, move_node, reset, delete
  2. inspect  — read-only: model, scores, positions, list
  3. export   — draw.io XML of the current render (returned or saved)
"""

from __future__ import annotations

import json
import logging
import threading
from pathlib import Path
from typing import Any

from mcp.server.fastmcp import FastMCP

from smallworld_viz.compositor import ComposeConfig
from smallworld_viz.export import to_drawio_xml
from smallworld_viz.layout_engine import LayoutEngineConfig
from smallworld_viz.optimizer import OptimizerClient, OptimizerError
from smallworld_viz.session import RenderSession
from smallworld_viz.styles import Themes
from smallworld_viz.validation import (
    ValidationError,
    validate_action,
    validate_and_parse,
    validate_direction,
    validate_int,
    validate_non_empty_string,
    validate_number,
    validate_optimizer_response,
    validate_spacing,
    validate_target,
    validate_theme,
    _GRAPH_ACTIONS,
    _INSPECT_ACTIONS,
)

# ---------------------------------------------------------------------------
# Logging: keep routine FastMCP INFO messages off stderr.
# ---------------------------------------------------------------------------
logging.getLogger("mcp.server").setLevel(logging.WARNING)
logger = logging.getLogger("smallworld-viz")

# ---------------------------------------------------------------------------
# MCP Server
# ---------------------------------------------------------------------------
mcp = FastMCP(
    "smallworld-viz",
    instructions=(
        "MCP server that lays out an undirected graph and overlays the\n"
        "directed edges returned by the small-world optimizer.\n\n"
        "1. graph(action='draw', vertices='1,2,3', edges='1 2\\n2 3') — draw.\n"
        "2. graph(action='optimize', target='small-world'|'naoto') — call the\n"
        "   optimizer and overlay its result; node positions do not move.\n"
        "3. inspect(action='model'|'scores'|'positions'|'list') — read back.\n"
        "4. export(session, file_path?) — draw.io XML of the current picture.\n"
    ),
)

# In-memory session registry: name -> RenderSession
# Guarded by _sessions_lock for thread-safety.
_sessions: dict[str, RenderSession] = {}
_sessions_lock = threading.Lock()

# Replaced in tests to inject a mock transport.
_optimizer_factory = OptimizerClient


def _get_session(name: str) -> RenderSession:
    name = validate_non_empty_string(name, "session")
    sess = _sessions.get(name)
    if sess is None:
        raise ValidationError(f"session '{name}' not found.")
    return sess


def _model_json(sess: RenderSession, **extra: Any) -> str:
    payload: dict[str, Any] = dict(extra)
    payload.update(sess.model.to_dict())
    return json.dumps(payload, indent=2)


# ===================================================================
# TOOL 1: graph (render state)
# ===================================================================

@mcp.tool()
def graph(
    action: str,
    session: str = "default",
    # -- draw --
    vertices: str = "",
    edges: str = "",
    direction: str = "TB",
    node_spacing: float = 60,
    rank_spacing: float = 80,
    theme: str = "light",
    # -- optimize --
    target: str = "small-world",
    # -- apply_result --
    result: dict[str, Any] | None = None,
    # -- move_node --
    vertex: int | None = None,
    x: float = 0,
    y: float = 0,
) -> str:
    """Render state operations.

    Actions:
      draw          — Parse and draw a graph. Params: vertices (e.g. "1,2,3"),
                      edges (one "u v" pair per line), direction, node_spacing,
                      rank_spacing, theme (light/dark). Redrawing the same
                      vertex set keeps the node positions.
      optimize      — Send the drawn graph to the optimizer and overlay the
                      directed result. Params: target (small-world/naoto).
      apply_result  — Overlay an optimizer response obtained elsewhere.
                      Params: result ({edges: [{_from, to}], scores...}).
      move_node     — Pin a node at a new position. Params: vertex, x, y.
      reset         — Discard positions and lay the graph out again.
      delete        — Drop the session.

    Returns:
        JSON render model or an "Error: ..." message.
    """
    try:
        action = validate_action(action, "graph", _GRAPH_ACTIONS)
        session = validate_non_empty_string(session, "session")
    except ValidationError as exc:
        return f"Error: {exc.message}"

    if action == "draw":
        try:
            parsed = validate_and_parse(vertices, edges)
            config = ComposeConfig(
                theme=Themes.get(validate_theme(theme)),
                layout=LayoutEngineConfig(
                    direction=validate_direction(direction),
                    node_spacing=validate_spacing(node_spacing, "node_spacing"),
                    rank_spacing=validate_spacing(rank_spacing, "rank_spacing"),
                ),
            )
        except ValidationError as exc:
            return f"Error: {exc.message}"
        with _sessions_lock:
            sess = _sessions.setdefault(session, RenderSession(name=session))
            sess.draw(parsed, config)
            return _model_json(sess)

    elif action == "optimize":
        try:
            target = validate_target(target)
            with _sessions_lock:
                sess = _get_session(session)
                if sess.graph is None:
                    return f"Error: session '{session}' has no graph drawn."
                parsed = sess.graph
                revision = sess.begin_optimize()
        except ValidationError as exc:
            return f"Error: {exc.message}"
        # The network call runs outside the lock; a draw that lands in the
        # meantime bumps the revision and the response is discarded.
        try:
            with _optimizer_factory() as client:
                opt = client.optimize(parsed, target)
        except OptimizerError as exc:
            logger.warning("optimizer call failed: %s", exc.message)
            return f"Error: {exc.message}"
        with _sessions_lock:
            applied = sess.apply_result(opt, revision)
            if not applied:
                return "Error: the graph changed while the optimizer was running; result discarded."
            return _model_json(sess, scores=opt.scores())

    elif action == "apply_result":
        try:
            opt = validate_optimizer_response(result)
            with _sessions_lock:
                sess = _get_session(session)
                if sess.graph is None:
                    return f"Error: session '{session}' has no graph drawn."
                sess.apply_result(opt)
                return _model_json(sess, scores=opt.scores())
        except ValidationError as exc:
            return f"Error: {exc.message}"

    elif action == "move_node":
        try:
            vertex = validate_int(vertex, "vertex")
            x = validate_number(x, "x")
            y = validate_number(y, "y")
            with _sessions_lock:
                sess = _get_session(session)
                try:
                    sess.move_node(vertex, x, y)
                except KeyError:
                    return f"Error: vertex {vertex} is not in session '{session}'."
                return _model_json(sess)
        except ValidationError as exc:
            return f"Error: {exc.message}"

    elif action == "reset":
        try:
            with _sessions_lock:
                sess = _get_session(session)
                sess.reset()
                return _model_json(sess)
        except ValidationError as exc:
            return f"Error: {exc.message}"

    elif action == "delete":
        with _sessions_lock:
            if _sessions.pop(session, None) is None:
                return f"Error: session '{session}' not found."
        return f"Session '{session}' deleted."

    else:
        return f"Error: unknown graph action '{action}'."


# ===================================================================
# TOOL 2: inspect (read-only)
# ===================================================================

@mcp.tool()
def inspect(action: str, session: str = "default") -> str:
    """Read-only inspection of render sessions.

    Actions:
      model      — Full render model (nodes + edges). Params: session.
      scores     — Scores of the applied optimizer result. Params: session.
      positions  — Node positions only. Params: session.
      list       — All sessions with vertex / edge counts.

    Returns:
        JSON data or an "Error: ..." message.
    """
    try:
        action = validate_action(action, "inspect", _INSPECT_ACTIONS)
    except ValidationError as exc:
        return f"Error: {exc.message}"

    if action == "list":
        with _sessions_lock:
            entries = [
                {
                    "session": name,
                    "vertices": len(s.graph.vertices) if s.graph else 0,
                    "edges": len(s.graph.edges) if s.graph else 0,
                    "optimized": s.result is not None,
                }
                for name, s in _sessions.items()
            ]
        return json.dumps(entries, indent=2)

    try:
        with _sessions_lock:
            sess = _get_session(session)
            if action == "model":
                return _model_json(sess)
            elif action == "scores":
                if sess.result is None:
                    return json.dumps(None)
                return json.dumps(sess.result.scores(), indent=2)
            else:
                return json.dumps(sess.model.to_dict()["nodes"], indent=2)
    except ValidationError as exc:
        return f"Error: {exc.message}"


# ===================================================================
# TOOL 3: export (draw.io XML)
# ===================================================================

@mcp.tool()
def export(session: str = "default", file_path: str = "") -> str:
    """Export the current render as draw.io XML.

    Args:
        session: Session name.
        file_path: When given, the XML is written there instead of returned.

    Returns:
        The XML, a confirmation message, or an "Error: ..." message.
    """
    try:
        with _sessions_lock:
            sess = _get_session(session)
            xml = to_drawio_xml(sess.model, name=sess.name, config=sess.config)
    except ValidationError as exc:
        return f"Error: {exc.message}"
    if not file_path:
        return xml
    path = Path(file_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(xml, encoding="utf-8")
    return f"Graph saved to {path.resolve()}"


# ===================================================================
# Entry point
# ===================================================================

def main() -> None:
    """Run the MCP server."""
    mcp.run()


if __name__ == "__main__":
    main()
