"""UpstreamClient retry policy and error wrapping."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

import httpx
import pytest

from dawnfire_dashboard.exceptions import UpstreamDataError, UpstreamError
from dawnfire_dashboard.http_client import UpstreamClient

URL = "https://upstream.example.com/resource"


def _client(handler: Any, max_retries: int = 1) -> UpstreamClient:
    return UpstreamClient(
        "Example",
        logging.getLogger("test_http_client"),
        max_retries=max_retries,
        retry_delay_seconds=0,
        client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
    )


def _get_json(client: UpstreamClient) -> Any:
    async def _go() -> Any:
        async with client:
            return await client.get_json(URL, context="probe")

    return asyncio.run(_go())


def test_transient_server_error_is_retried_until_success() -> None:
    statuses = iter([503, 200])
    calls: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        status = next(statuses)
        return httpx.Response(status, json={"ok": status == 200})

    assert _get_json(_client(handler)) == {"ok": True}
    assert len(calls) == 2


def test_rate_limit_is_retried() -> None:
    statuses = iter([429, 200])

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(next(statuses), json={})

    assert _get_json(_client(handler)) == {}


def test_client_error_is_not_retried() -> None:
    calls: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(404, text="not found")

    with pytest.raises(UpstreamError, match="Example probe failed with status 404") as exc_info:
        _get_json(_client(handler, max_retries=3))

    assert exc_info.value.status_code == 404
    assert len(calls) == 1


def test_transport_error_exhausts_retries_without_status() -> None:
    calls: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(UpstreamError, match="ConnectError") as exc_info:
        _get_json(_client(handler, max_retries=2))

    assert exc_info.value.status_code is None
    assert len(calls) == 3


def test_error_body_is_truncated_and_redacted() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(403, text="password=hunter2 " + "x" * 1000)

    with pytest.raises(UpstreamError) as exc_info:
        _get_json(_client(handler))

    message = str(exc_info.value)
    assert "hunter2" not in message
    assert len(message) < 400


def test_non_json_body_raises_upstream_data_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text="<html></html>")

    with pytest.raises(UpstreamDataError, match="non-JSON"):
        _get_json(_client(handler))


def test_injected_client_is_left_open() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=[])

    http = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    upstream = UpstreamClient("Example", logging.getLogger("test"), client=http)

    async def _go() -> None:
        await upstream.aclose()
        assert not http.is_closed
        await http.aclose()

    asyncio.run(_go())


def test_zero_retries_makes_a_single_attempt() -> None:
    calls: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(503, text="unavailable")

    with pytest.raises(UpstreamError, match="failed with status 503") as exc_info:
        _get_json(_client(handler, max_retries=0))

    assert exc_info.value.status_code == 503
    assert len(calls) == 1
