"""Tests for the optimizer HTTP client."""

import json

import httpx
import pytest

from smallworld_viz.models import DirectedOverlayEdge, ParsedGraph
from smallworld_viz.optimizer import OptimizerClient, OptimizerError

GRAPH = ParsedGraph(vertices=[1, 2, 3], edges=[(1, 2), (2, 3)])
RESPONSE = {
    "edges": [{"_from": 1, "to": 2}, {"_from": 3, "to": 2}],
    "optimized_graph_score": 1.5,
    "bidirectional_graph_score": 2.0,
}


def _client(handler) -> OptimizerClient:
    return OptimizerClient(base_url="http://optimizer.test", transport=httpx.MockTransport(handler))


def test_optimize_small_world() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=RESPONSE)

    with _client(handler) as client:
        result = client.optimize(GRAPH)

    assert seen[0].method == "POST"
    assert seen[0].url.path == "/api/optimize/small-world"
    assert json.loads(seen[0].content) == {"vertices": [1, 2, 3], "edges": [[1, 2], [2, 3]]}
    assert result.edges == [DirectedOverlayEdge(1, 2), DirectedOverlayEdge(3, 2)]
    assert result.scores() == {"optimized_graph_score": 1.5, "bidirectional_graph_score": 2.0}


def test_optimize_naoto_endpoint() -> None:
    paths: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        paths.append(request.url.path)
        return httpx.Response(200, json=RESPONSE)

    with _client(handler) as client:
        client.optimize(GRAPH, target="naoto")
    assert paths == ["/api/optimize/naoto"]


def test_unknown_target() -> None:
    with _client(lambda r: httpx.Response(200, json=RESPONSE)) as client:
        with pytest.raises(OptimizerError, match="Unknown optimizer target"):
            client.optimize(GRAPH, target="other")


def test_error_status() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500, text="solver crashed")

    with _client(handler) as client:
        with pytest.raises(OptimizerError) as info:
            client.optimize(GRAPH)
    assert info.value.status_code == 500
    assert info.value.response_text == "solver crashed"
    assert "(500)" in info.value.message


def test_transport_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with _client(handler) as client:
        with pytest.raises(OptimizerError, match="request failed") as info:
            client.optimize(GRAPH)
    assert info.value.status_code is None


def test_invalid_json() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text="<html>")

    with _client(handler) as client:
        with pytest.raises(OptimizerError, match="invalid JSON"):
            client.optimize(GRAPH)


def test_invalid_response_shape() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"edges": "nope"})

    with _client(handler) as client:
        with pytest.raises(OptimizerError, match="invalid response"):
            client.optimize(GRAPH)


def test_base_url_from_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SMALLWORLD_OPTIMIZER_URL", "http://env.test")
    client = OptimizerClient(transport=httpx.MockTransport(lambda r: httpx.Response(200)))
    try:
        assert client.base_url == "http://env.test"
    finally:
        client.close()
