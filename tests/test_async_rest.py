"""Tests for the async REST client retry and error mapping."""

from __future__ import annotations

import asyncio
from typing import Any

import pytest

from aleo_client.async_rest import (
    AsyncNotFoundError,
    AsyncRateLimitError,
    AsyncRestClient,
    AsyncRestError,
    AsyncRestRequest,
    AsyncTransientApiError,
    path_segment,
)
from dca.errors import RemoteUnavailable
from fakes import FakeResponse, FakeSession


@pytest.mark.asyncio
async def test_async_rest_get_encodes_query_params() -> None:
    session = FakeSession([FakeResponse(200, {"content": "bc1q"})])
    client = AsyncRestClient(base_url="https://api.example/", session=session)

    response = await client.get("/resolver", params={"name": "a.ans", "category": "btc"})

    assert response == {"content": "bc1q"}
    request = session.requests[0]
    assert request["method"] == "GET"
    assert request["url"] == "https://api.example/resolver?name=a.ans&category=btc"
    assert request["data"] is None


@pytest.mark.asyncio
async def test_async_rest_returns_bare_json_scalars() -> None:
    session = FakeSession([FakeResponse(200, 123456)])
    client = AsyncRestClient(base_url="https://api.example", session=session)

    assert await client.get("/testnet/latest/height") == 123456


@pytest.mark.asyncio
async def test_async_rest_post_sends_compact_json_body() -> None:
    session = FakeSession([FakeResponse(200, {"ok": True})])
    client = AsyncRestClient(base_url="https://api.example", session=session)

    await client.send(
        AsyncRestRequest(method="POST", path="/submit", body={"a": 1, "b": "x"})
    )

    request = session.requests[0]
    assert request["data"] == b'{"a":1,"b":"x"}'
    assert request["headers"]["Content-Type"] == "application/json"


@pytest.mark.asyncio
async def test_async_rest_404_raises_not_found_without_retry() -> None:
    session = FakeSession([FakeResponse(404, {"error": "missing"})])
    client = AsyncRestClient(base_url="https://api.example", session=session)

    with pytest.raises(AsyncNotFoundError) as excinfo:
        await client.get("/address/nobody.ans")

    assert excinfo.value.status_code == 404
    assert len(session.requests) == 1


@pytest.mark.asyncio
async def test_async_rest_rate_limit_raises_retry_after() -> None:
    session = FakeSession(
        [FakeResponse(429, {"error": "rate"}, headers={"Retry-After": "1.5"})]
    )
    client = AsyncRestClient(
        base_url="https://api.example", session=session, max_retries=0
    )

    with pytest.raises(AsyncRateLimitError) as excinfo:
        await client.send(AsyncRestRequest(method="GET", path="/ping"))

    assert excinfo.value.retry_after == 1.5


@pytest.mark.asyncio
async def test_async_rest_retries_transient_server_errors() -> None:
    session = FakeSession([FakeResponse(503, "busy"), FakeResponse(200, {"ok": True})])
    client = AsyncRestClient(
        base_url="https://api.example",
        session=session,
        max_retries=1,
        backoff_factor=0.0,
    )

    assert await client.get("/ping") == {"ok": True}
    assert len(session.requests) == 2


@pytest.mark.asyncio
async def test_async_rest_retries_on_timeout() -> None:
    call_count = {"count": 0}

    class TimeoutSession:
        def request(
            self,
            method: str,
            url: str,
            headers: dict[str, str] | None = None,
            data: bytes | None = None,
            timeout: Any | None = None,
        ) -> FakeResponse:
            call_count["count"] += 1
            if call_count["count"] == 1:
                raise asyncio.TimeoutError()
            return FakeResponse(200, {"data": {"ok": True}})

        async def close(self) -> None:
            return None

    client = AsyncRestClient(
        base_url="https://api.example",
        session=TimeoutSession(),
        max_retries=1,
        backoff_factor=0.0,
    )

    response = await client.send(AsyncRestRequest(method="GET", path="/ping"))

    assert response["data"]["ok"] is True
    assert call_count["count"] == 2


@pytest.mark.asyncio
async def test_async_rest_client_errors_are_remote_unavailable() -> None:
    session = FakeSession([FakeResponse(400, "bad request")])
    client = AsyncRestClient(base_url="https://api.example", session=session)

    with pytest.raises(AsyncRestError) as excinfo:
        await client.get("/ping")

    assert isinstance(excinfo.value, RemoteUnavailable)
    assert not isinstance(excinfo.value, AsyncTransientApiError)
    assert "HTTP error 400: bad request" in str(excinfo.value)


@pytest.mark.asyncio
async def test_async_rest_invalid_json_raises() -> None:
    session = FakeSession([FakeResponse(200, "<html>")])
    client = AsyncRestClient(base_url="https://api.example", session=session)

    with pytest.raises(AsyncRestError):
        await client.get("/ping")


def test_path_segment_quotes_slashes():
    assert path_segment("a/b c") == "a%2Fb%20c"
