"""Carry node positions over between renders of the same vertex set."""

from __future__ import annotations

import logging
from typing import Mapping, Optional

from smallworld_viz.models import NodePosition, Vertex

logger = logging.getLogger(__name__)


def stabilize(
    fresh: Mapping[Vertex, NodePosition],
    prior: Optional[Mapping[Vertex, NodePosition]],
) -> dict[Vertex, NodePosition]:
    """Return *prior* when it covers exactly the vertices of *fresh*.

    All-or-nothing: if the vertex sets differ by even one element, the
    freshly computed positions are used unmodified. Iteration order of the
    result follows *fresh*.
    """
    if prior and prior.keys() == fresh.keys():
        logger.debug("stabilize: vertex set unchanged, reusing %d positions", len(prior))
        return {v: prior[v] for v in fresh}
    logger.debug("stabilize: vertex set changed, full relayout")
    return dict(fresh)
