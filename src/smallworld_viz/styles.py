"""
Edge visuals, color palettes and draw.io style strings.

Provides the visual presets used by the edge compositor, light / dark
palettes for the neutral edge colors, a fluent builder for draw.io style
strings and the port coordinates of each compass handle.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Optional

from smallworld_viz.models import CompassHandle


# ---------------------------------------------------------------------------
# Style builder
# ---------------------------------------------------------------------------

class StyleBuilder:
    """Fluent builder for semicolon-delimited draw.io style strings."""

    def __init__(self, base: str = "") -> None:
        self._parts: dict[str, str] = {}
        self._prefix: str = ""
        if base:
            self._parse(base)

    def _parse(self, raw: str) -> None:
        tokens = [t.strip() for t in raw.split(";") if t.strip()]
        for tok in tokens:
            if "=" in tok:
                k, v = tok.split("=", 1)
                self._parts[k] = v
            else:
                # Shape name prefix like "ellipse"
                self._prefix = tok

    def fill_color(self, color: str) -> StyleBuilder:
        self._parts["fillColor"] = color
        return self

    def stroke_color(self, color: str) -> StyleBuilder:
        self._parts["strokeColor"] = color
        return self

    def stroke_width(self, width: float) -> StyleBuilder:
        self._parts["strokeWidth"] = f"{width:g}"
        return self

    def dashed(self, on: bool = True, pattern: str = "") -> StyleBuilder:
        self._parts["dashed"] = "1" if on else "0"
        if on and pattern:
            self._parts["dashPattern"] = pattern
        return self

    def end_arrow(self, arrow: str) -> StyleBuilder:
        self._parts["endArrow"] = arrow
        return self

    def end_fill(self, on: bool = True) -> StyleBuilder:
        self._parts["endFill"] = "1" if on else "0"
        return self

    def flow_animation(self, on: bool = True) -> StyleBuilder:
        self._parts["flowAnimation"] = "1" if on else "0"
        return self

    def build(self) -> str:
        parts = []
        if self._prefix:
            parts.append(self._prefix)
        parts.extend(f"{k}={v}" for k, v in self._parts.items())
        return ";".join(parts) + ";"


NODE_STYLE = "ellipse;whiteSpace=wrap;html=1;aspect=fixed;"


# ---------------------------------------------------------------------------
# Edge visuals
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class EdgeVisual:
    """Renderer-facing style attributes of one edge."""
    stroke: str
    stroke_width: float
    dash_array: Optional[str] = None
    animated: bool = False
    marker_end: Optional[str] = None  # "arrowclosed" or None
    marker_color: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {
            "stroke": self.stroke,
            "strokeWidth": self.stroke_width,
            "animated": self.animated,
        }
        if self.dash_array:
            d["strokeDasharray"] = self.dash_array
        if self.marker_end:
            d["markerEnd"] = {"type": self.marker_end, "color": self.marker_color}
        return d

    def to_drawio(self) -> str:
        """Equivalent draw.io edge style string."""
        b = StyleBuilder("html=1;").stroke_color(self.stroke).stroke_width(self.stroke_width)
        if self.dash_array:
            b.dashed(True, self.dash_array)
        if self.marker_end:
            b.end_arrow("block").end_fill(True)
        else:
            b.end_arrow("none")
        if self.animated:
            b.flow_animation(True)
        return b.build()


OVERLAY_COLOR = "#dc2626"


class EdgeVisualPreset:
    """Edge visuals per variant; neutral strokes are resolved by a theme."""
    UNDIRECTED = EdgeVisual(stroke="edge-undir", stroke_width=2)
    BACKGROUND = EdgeVisual(stroke="edge-bg", stroke_width=1)
    DIRECTED = EdgeVisual(
        stroke=OVERLAY_COLOR,
        stroke_width=3,
        dash_array="8 4",
        animated=True,
        marker_end="arrowclosed",
        marker_color=OVERLAY_COLOR,
    )


# ---------------------------------------------------------------------------
# Color themes
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ColorTheme:
    """A named palette for the neutral edge colors."""
    name: str
    edge_undirected: str
    edge_background: str
    node_fill: str
    node_stroke: str

    def apply(self, visual: EdgeVisual) -> EdgeVisual:
        """Resolve a preset's symbolic stroke to this palette."""
        if visual.stroke == "edge-undir":
            return replace(visual, stroke=self.edge_undirected)
        if visual.stroke == "edge-bg":
            return replace(visual, stroke=self.edge_background)
        return visual

    def node_style(self) -> str:
        return (
            StyleBuilder(NODE_STYLE)
            .fill_color(self.node_fill)
            .stroke_color(self.node_stroke)
            .build()
        )


class Themes:
    """Pre-built palettes."""
    LIGHT = ColorTheme(
        name="light",
        edge_undirected="#64748b",
        edge_background="#cbd5e1",
        node_fill="#dae8fc",
        node_stroke="#6c8ebf",
    )
    DARK = ColorTheme(
        name="dark",
        edge_undirected="#94a3b8",
        edge_background="#475569",
        node_fill="#1e293b",
        node_stroke="#94a3b8",
    )

    @classmethod
    def get(cls, name: str) -> ColorTheme:
        theme = getattr(cls, name.strip().upper(), None)
        if not isinstance(theme, ColorTheme):
            raise KeyError(name)
        return theme


# ---------------------------------------------------------------------------
# Connection point per compass handle (relative to shape 0..1)
# ---------------------------------------------------------------------------

class Port:
    """Named connection point positions (exitX/exitY or entryX/entryY).

    Values are (x, y) tuples where 0,0 = top-left, 1,1 = bottom-right.
    """
    TOP = (0.5, 0)
    BOTTOM = (0.5, 1)
    LEFT = (0, 0.5)
    RIGHT = (1, 0.5)
    TOP_LEFT = (0, 0)
    TOP_RIGHT = (1, 0)
    BOTTOM_LEFT = (0, 1)
    BOTTOM_RIGHT = (1, 1)

    @classmethod
    def for_handle(cls, direction: CompassHandle) -> tuple[float, float]:
        return getattr(cls, direction.name)
