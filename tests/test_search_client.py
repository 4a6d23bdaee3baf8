"""Tests for the iTunes search client."""

from __future__ import annotations

import httpx
import pytest

from errors import HttpError, TransportError
from services import SearchClient

from conftest import BEATLES_RESULTS

ENDPOINT = "https://itunes.apple.com/search"


def _client(handler) -> SearchClient:
    transport = httpx.MockTransport(handler)
    return SearchClient(httpx.AsyncClient(transport=transport), ENDPOINT, limit=25)


@pytest.mark.asyncio
async def test_search_sends_encoded_term_and_returns_results():
    requested: list[httpx.URL] = []

    async def handler(request: httpx.Request) -> httpx.Response:
        requested.append(request.url)
        return httpx.Response(200, json={"resultCount": 2, "results": BEATLES_RESULTS})

    client = _client(handler)
    response, error = await client.search("The Beatles")
    await client.aclose()

    assert error is None
    assert response.results == BEATLES_RESULTS
    assert len(requested) == 1
    assert requested[0].host == "itunes.apple.com"
    assert requested[0].path == "/search"
    assert requested[0].params["term"] == "The Beatles"
    assert requested[0].params["limit"] == "25"


@pytest.mark.asyncio
async def test_search_without_results_field_is_empty():
    async def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"resultCount": 0})

    response, error = await _client(handler).search("nothing")
    assert error is None
    assert response.results == []


@pytest.mark.asyncio
async def test_non_2xx_status_is_http_error():
    async def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(503)

    response, error = await _client(handler).search("Beatles")
    assert response is None
    assert isinstance(error, HttpError)
    assert error.status == 503
    assert error.message == "Service Unavailable"
    assert error.describe() == "HTTP 503 Service Unavailable"


@pytest.mark.asyncio
async def test_transport_failure_is_transport_error():
    async def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    response, error = await _client(handler).search("Beatles")
    assert response is None
    assert isinstance(error, TransportError)
    assert error.describe() == "Network failure: connection refused"


@pytest.mark.asyncio
async def test_timeout_is_transport_error():
    async def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    _, error = await _client(handler).search("Beatles")
    assert isinstance(error, TransportError)


@pytest.mark.asyncio
@pytest.mark.parametrize("body", [b"<html>not json</html>", b"[1, 2, 3]", b'{"results": "oops"}'])
async def test_malformed_body_is_transport_error(body):
    async def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, content=body)

    response, error = await _client(handler).search("Beatles")
    assert response is None
    assert isinstance(error, TransportError)
    assert error.message == "Malformed response body"


@pytest.mark.asyncio
async def test_overlong_query_is_transport_error():
    async def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"results": []})

    response, error = await _client(handler).search("a" * 70000)
    assert response is None
    assert isinstance(error, TransportError)
