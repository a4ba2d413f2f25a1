"""OpenWeatherMap provider: request shape, error mapping and normalization."""

from __future__ import annotations

import asyncio
from datetime import UTC, datetime, timedelta
from typing import Any

import httpx
import pytest

from dawnfire_dashboard.clock import ReferenceClock
from dawnfire_dashboard.exceptions import (
    ConfigurationError,
    UpstreamDataError,
    UpstreamError,
    ValidationError,
)
from dawnfire_dashboard.weather.openweathermap import OpenWeatherMapProvider, get_weather

FORECAST_URL = "https://api.openweathermap.org/data/2.5/forecast"
NOW = datetime(2025, 6, 15, 9, tzinfo=UTC)


def _forecast_payload() -> dict[str, Any]:
    start = datetime(2025, 6, 15, 6, tzinfo=UTC)
    items = []
    for i in range(16):
        moment = start + timedelta(hours=3 * i)
        items.append(
            {
                "dt": int(moment.timestamp()),
                "main": {"temp": 55.0 + i, "humidity": 60, "pressure": 1011},
                "wind": {"speed": 5.6, "deg": 270},
                "weather": [{"main": "Clear", "icon": "01d"}],
                "pop": 0.05,
            }
        )
    return {"list": items, "city": {"sunrise": 1749964000, "sunset": 1750019000}}


def _provider(
    handler: Any, api_key: str | None = "owm-key-123", **kwargs: Any
) -> OpenWeatherMapProvider:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return OpenWeatherMapProvider(
        api_key,
        clock=ReferenceClock.fixed(NOW),
        retry_delay_seconds=0,
        http_client=client,
        **kwargs,
    )


def _run(provider: OpenWeatherMapProvider, location: str = "Seattle,US") -> Any:
    async def _go() -> Any:
        async with provider:
            return await provider.get_weather(location)

    return asyncio.run(_go())


def test_get_weather_sends_imperial_query_and_normalizes() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=_forecast_payload())

    result = _run(_provider(handler))

    assert len(seen) == 1
    request = seen[0]
    assert request.method == "GET"
    assert str(request.url).startswith(FORECAST_URL)
    assert request.url.params["q"] == "Seattle,US"
    assert request.url.params["units"] == "imperial"
    assert request.url.params["appid"] == "owm-key-123"

    assert result.current.temp == 55
    assert result.current.wind_speed == 6
    assert result.current.sunrise == 1749964000
    assert result.current.sunset == 1750019000
    # 09:00 UTC "now": 12:00 .. 21:00 remain today.
    assert [entry.temp for entry in result.hourly] == [57, 58, 59, 60]
    assert [day.date for day in result.daily] == ["2025-06-16", "2025-06-17"]


def test_missing_api_key_fails_before_any_request() -> None:
    calls: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(200, json=_forecast_payload())

    with pytest.raises(ConfigurationError, match="API key not configured"):
        _run(_provider(handler, api_key=None))
    assert calls == []


def test_blank_location_is_rejected() -> None:
    def handler(request: httpx.Request) -> httpx.Response:  # pragma: no cover - never called
        raise AssertionError("no request expected")

    with pytest.raises(ValidationError):
        _run(_provider(handler), location="   ")


def test_unauthorized_response_raises_upstream_error_with_status() -> None:
    calls: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(401, json={"cod": 401, "message": "Invalid API key."})

    with pytest.raises(UpstreamError) as exc_info:
        _run(_provider(handler))

    assert exc_info.value.status_code == 401
    assert "owm-key-123" not in str(exc_info.value)
    assert len(calls) == 1


def test_server_error_is_retried_then_raised() -> None:
    calls: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(502, text="bad gateway")

    with pytest.raises(UpstreamError) as exc_info:
        _run(_provider(handler, max_retries=1))

    assert exc_info.value.status_code == 502
    assert len(calls) == 2


def test_non_json_body_raises_upstream_data_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text="<html>maintenance</html>")

    with pytest.raises(UpstreamDataError, match="non-JSON"):
        _run(_provider(handler))


def test_empty_forecast_list_raises_upstream_data_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"list": [], "city": {}})

    with pytest.raises(UpstreamDataError, match="empty"):
        _run(_provider(handler))


def test_module_level_get_weather_accepts_explicit_now() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=_forecast_payload())

    async def _go() -> Any:
        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        async with client:
            return await get_weather("Portland,US", "k", now=NOW, http_client=client)

    result = asyncio.run(_go())
    assert len(result.hourly) == 4
