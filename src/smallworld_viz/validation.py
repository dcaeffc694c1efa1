"""
Input validation and parsing for the graph tools.

Turns the raw vertex / edge text fields into a validated ``ParsedGraph``
and checks optimizer responses. Every failure raises ``ValidationError``
with a message suitable for showing to the caller.
"""

from __future__ import annotations

import re
from typing import Any

from smallworld_viz.models import DirectedOverlayEdge, OptimizationResult, ParsedGraph


# ---------------------------------------------------------------------------
# Validation result
# ---------------------------------------------------------------------------

class ValidationError(Exception):
    """Raised when input validation fails."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


# ---------------------------------------------------------------------------
# Primitive validators
# ---------------------------------------------------------------------------

def validate_non_empty_string(value: Any, field_name: str) -> str:
    """Ensure *value* is a non-empty string after stripping whitespace."""
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"'{field_name}' must be a non-empty string.")
    return value.strip()


def validate_number(
    value: Any,
    field_name: str,
    *,
    min_val: float | None = None,
    max_val: float | None = None,
) -> float:
    """Validate a numeric value and optional range."""
    if not isinstance(value, (int, float)) or isinstance(value, bool):
        raise ValidationError(
            f"'{field_name}' must be a number, got {type(value).__name__}."
        )
    val = float(value)
    if min_val is not None and val < min_val:
        raise ValidationError(
            f"'{field_name}' must be >= {min_val}, got {val}."
        )
    if max_val is not None and val > max_val:
        raise ValidationError(
            f"'{field_name}' must be <= {max_val}, got {val}."
        )
    return val


def validate_int(value: Any, field_name: str) -> int:
    """Validate an integer value."""
    if not isinstance(value, int) or isinstance(value, bool):
        raise ValidationError(
            f"'{field_name}' must be an integer, got {type(value).__name__}."
        )
    return value


def validate_enum(value: Any, field_name: str, allowed: set[str]) -> str:
    """Validate that a string value is one of the allowed choices (case-insensitive)."""
    if not isinstance(value, str):
        raise ValidationError(
            f"'{field_name}' must be a string, got {type(value).__name__}."
        )
    normalized = value.strip().upper()
    if normalized not in {a.upper() for a in allowed}:
        choices = ", ".join(sorted(allowed))
        raise ValidationError(
            f"'{field_name}' must be one of [{choices}], got '{value}'."
        )
    return normalized


def validate_list(value: Any, field_name: str) -> list:
    """Ensure *value* is a list."""
    if not isinstance(value, list):
        raise ValidationError(
            f"'{field_name}' must be a list, got {type(value).__name__}."
        )
    return value


def validate_dict(value: Any, field_name: str) -> dict:
    """Ensure *value* is a dict."""
    if not isinstance(value, dict):
        raise ValidationError(
            f"'{field_name}' must be a dict/object, got {type(value).__name__}."
        )
    return value


def validate_spacing(value: Any, field_name: str) -> float:
    return validate_number(value, field_name, min_val=0, max_val=1000)


# ---------------------------------------------------------------------------
# Action / option validators
# ---------------------------------------------------------------------------

_VALID_DIRECTIONS = {"TB", "BT", "LR", "RL"}
_VALID_THEMES = {"LIGHT", "DARK"}
_VALID_TARGETS = {"SMALL-WORLD", "NAOTO"}

_GRAPH_ACTIONS = {"DRAW", "OPTIMIZE", "APPLY_RESULT", "MOVE_NODE", "RESET", "DELETE"}
_INSPECT_ACTIONS = {"MODEL", "SCORES", "POSITIONS", "LIST"}


def validate_action(value: Any, tool_name: str, allowed: set[str]) -> str:
    """Validate and normalise an action name for a tool."""
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"'{tool_name}' requires a non-empty 'action' string.")
    normalized = value.strip().upper()
    if normalized not in allowed:
        choices = ", ".join(sorted(a.lower() for a in allowed))
        raise ValidationError(
            f"Unknown {tool_name} action '{value}'. Valid actions: {choices}."
        )
    return normalized.lower()


def validate_direction(value: Any) -> str:
    """Validate layout direction (TB, BT, LR, RL)."""
    return validate_enum(value, "direction", _VALID_DIRECTIONS)


def validate_theme(value: Any) -> str:
    return validate_enum(value, "theme", _VALID_THEMES).lower()


def validate_target(value: Any) -> str:
    """Validate the optimizer endpoint name."""
    return validate_enum(value, "target", _VALID_TARGETS).lower()


# ---------------------------------------------------------------------------
# Graph text parsing
# ---------------------------------------------------------------------------

_SEPARATORS = re.compile(r"[\s,]+")


def _parse_int(token: str, where: str) -> int:
    if not re.fullmatch(r"[+-]?\d+", token):
        raise ValidationError(f"{where}: '{token}' is not an integer.")
    return int(token)


def parse_vertices(raw: Any) -> list[int]:
    """Parse integers separated by commas and/or whitespace.

    Raises:
        ValidationError: on an empty list, a non-integer token or a
            duplicated vertex.
    """
    text = validate_non_empty_string(raw, "vertices")
    vertices: list[int] = []
    seen: set[int] = set()
    for token in _SEPARATORS.split(text):
        if not token:
            continue
        v = _parse_int(token, "Vertices")
        if v in seen:
            raise ValidationError(f"Vertices: duplicate vertex {v}.")
        seen.add(v)
        vertices.append(v)
    if not vertices:
        raise ValidationError("'vertices' must contain at least one vertex.")
    return vertices


def parse_edges(raw: Any, vertices: list[int]) -> list[tuple[int, int]]:
    """Parse one ``u v`` (or ``u,v``) pair per non-blank line.

    Both endpoints must be declared vertices; self-loops and repeated
    undirected pairs (``1 2`` and ``2 1``) are rejected. An empty string
    means a graph without edges.
    """
    if raw is None or raw == "":
        return []
    if not isinstance(raw, str):
        raise ValidationError(f"'edges' must be a string, got {type(raw).__name__}.")
    known = set(vertices)
    edges: list[tuple[int, int]] = []
    seen: set[frozenset[int]] = set()
    for lineno, line in enumerate(raw.splitlines(), start=1):
        tokens = [t for t in _SEPARATORS.split(line.strip()) if t]
        if not tokens:
            continue
        where = f"Edge line {lineno}"
        if len(tokens) != 2:
            raise ValidationError(
                f"{where}: expected two vertices, got {len(tokens)} ('{line.strip()}')."
            )
        u = _parse_int(tokens[0], where)
        v = _parse_int(tokens[1], where)
        for endpoint in (u, v):
            if endpoint not in known:
                raise ValidationError(f"{where}: vertex {endpoint} is not in the vertex list.")
        if u == v:
            raise ValidationError(f"{where}: self-loop on vertex {u} is not allowed.")
        key = frozenset((u, v))
        if key in seen:
            raise ValidationError(f"{where}: duplicate edge {u}-{v}.")
        seen.add(key)
        edges.append((u, v))
    return edges


def validate_and_parse(vertices_raw: Any, edges_raw: Any) -> ParsedGraph:
    """Parse both text fields into a ``ParsedGraph``."""
    vertices = parse_vertices(vertices_raw)
    edges = parse_edges(edges_raw, vertices)
    return ParsedGraph(vertices=vertices, edges=edges)


# ---------------------------------------------------------------------------
# Optimizer response
# ---------------------------------------------------------------------------

def validate_directed_edge_dict(e: Any, index: int) -> DirectedOverlayEdge:
    """Validate one ``{"_from": u, "to": v}`` record (``from`` also accepted)."""
    if not isinstance(e, dict):
        raise ValidationError(f"Edge at index {index} must be a dict/object.")
    source_key = "_from" if "_from" in e else "from"
    if source_key not in e:
        raise ValidationError(f"Edge at index {index} missing required key '_from'.")
    if "to" not in e:
        raise ValidationError(f"Edge at index {index} missing required key 'to'.")
    source = validate_int(e[source_key], f"edges[{index}].{source_key}")
    target = validate_int(e["to"], f"edges[{index}].to")
    return DirectedOverlayEdge(source=source, target=target)


def validate_optimizer_response(data: Any) -> OptimizationResult:
    """Validate a decoded optimizer response body."""
    body = validate_dict(data, "response")
    edges = validate_list(body.get("edges"), "edges")
    for key in ("optimized_graph_score", "bidirectional_graph_score"):
        if key not in body:
            raise ValidationError(f"Response missing required key '{key}'.")
    return OptimizationResult(
        edges=[validate_directed_edge_dict(e, i) for i, e in enumerate(edges)],
        optimized_graph_score=validate_number(
            body["optimized_graph_score"], "optimized_graph_score"),
        bidirectional_graph_score=validate_number(
            body["bidirectional_graph_score"], "bidirectional_graph_score"),
    )
