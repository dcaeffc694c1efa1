"""
HTTP client for the graph optimizer service.

The optimizer receives the undirected graph and answers with a set of
directed edges plus two scores. Two endpoints are available, selected by
target name.
"""

from __future__ import annotations

import logging
import os
from typing import Any, Optional

import httpx

from smallworld_viz.models import OptimizationResult, ParsedGraph
from smallworld_viz.validation import ValidationError, validate_optimizer_response

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "http://localhost:8000"
DEFAULT_TIMEOUT = 30.0

ENDPOINTS = {
    "small-world": "/api/optimize/small-world",
    "naoto": "/api/optimize/naoto",
}


class OptimizerError(Exception):
    """Raised when the optimizer request fails or returns an error status."""

    def __init__(self, message: str, status_code: Optional[int] = None, response_text: str = "") -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.response_text = response_text


class OptimizerClient:
    """Synchronous optimizer client on top of ``httpx.Client``."""

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.base_url = base_url or os.environ.get("SMALLWORLD_OPTIMIZER_URL", DEFAULT_BASE_URL)
        if timeout is None:
            timeout = float(os.environ.get("SMALLWORLD_OPTIMIZER_TIMEOUT", DEFAULT_TIMEOUT))
        self._client = httpx.Client(base_url=self.base_url, timeout=timeout, transport=transport)

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> OptimizerClient:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def optimize(self, graph: ParsedGraph, target: str = "small-world") -> OptimizationResult:
        """POST *graph* to the optimizer and return its validated result."""
        path = ENDPOINTS.get(target)
        if path is None:
            raise OptimizerError(f"Unknown optimizer target '{target}'.")

        logger.debug(
            "optimize: POST %s (%d vertices, %d edges)",
            path, len(graph.vertices), len(graph.edges),
        )
        try:
            response = self._client.post(path, json=graph.to_request())
        except httpx.HTTPError as exc:
            raise OptimizerError(f"Optimizer request failed: {exc}") from exc

        if response.is_error:
            text = response.text
            raise OptimizerError(
                f"Optimizer request failed ({response.status_code}): {text or response.reason_phrase}",
                status_code=response.status_code,
                response_text=text,
            )

        try:
            return validate_optimizer_response(response.json())
        except ValueError as exc:
            raise OptimizerError(f"Optimizer returned invalid JSON: {exc}") from exc
        except ValidationError as exc:
            raise OptimizerError(f"Optimizer returned an invalid response: {exc.message}") from exc
