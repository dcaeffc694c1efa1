"""
Render session: the state one viewer keeps between renders.

A session owns the current graph, the applied optimization result and the
last render model. Every state change re-runs the pure ``render`` pipeline
with the previous positions as prior, so overlaying a result or redrawing
the same vertex set never reshuffles the picture.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional

from smallworld_viz.compositor import ComposeConfig
from smallworld_viz.models import NodePosition, OptimizationResult, ParsedGraph, RenderModel, Vertex
from smallworld_viz.render import render

logger = logging.getLogger(__name__)


@dataclass
class RenderSession:
    name: str = "default"
    config: ComposeConfig = field(default_factory=ComposeConfig)
    graph: Optional[ParsedGraph] = None
    result: Optional[OptimizationResult] = None
    model: RenderModel = field(default_factory=RenderModel)
    # Bumped by draw; optimizer responses carry the revision
    # they were requested at.
    revision: int = 0

    def draw(self, graph: ParsedGraph, config: Optional[ComposeConfig] = None) -> RenderModel:
        """Show a new graph; clears any applied optimization result.

        A changed layout configuration discards the previous positions,
        otherwise an unchanged vertex set keeps its picture.
        """
        prior: Optional[dict[Vertex, NodePosition]] = self.model.positions
        if config is not None:
            if config.layout != self.config.layout:
                prior = None
            self.config = config
        self.graph = graph
        self.result = None
        self.revision += 1
        return self._rerender(prior)

    def begin_optimize(self) -> int:
        """Return the revision an optimizer request is issued against."""
        if self.graph is None:
            raise LookupError("no graph has been drawn")
        return self.revision

    def apply_result(self, result: OptimizationResult, revision: Optional[int] = None) -> bool:
        """Overlay *result*; returns False when it answers an outdated graph."""
        if self.graph is None:
            raise LookupError("no graph has been drawn")
        if revision is not None and revision != self.revision:
            logger.warning(
                "session %s: discarding optimizer result for revision %d (current %d)",
                self.name, revision, self.revision,
            )
            return False
        self.result = result
        self._rerender(self.model.positions)
        return True

    def move_node(self, vertex: Vertex, x: float, y: float) -> RenderModel:
        """Record a manual drag as an override of the prior positions."""
        positions = self.model.positions
        if vertex not in positions:
            raise KeyError(vertex)
        positions[vertex] = NodePosition(x, y)
        return self._rerender(positions)

    def reset(self) -> RenderModel:
        """Forget all positions and lay the current graph out from scratch."""
        if self.graph is None:
            self.model = RenderModel()
            return self.model
        return self._rerender(None)

    def _rerender(self, prior: Optional[dict[Vertex, NodePosition]]) -> RenderModel:
        assert self.graph is not None
        self.model = render(self.graph, self.result, prior, self.config)
        return self.model
