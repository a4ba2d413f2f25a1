"""Binds loaded settings to the weather, calendar and metrics pipelines."""

from __future__ import annotations

from typing import Any

import httpx

from .calendars.caldav_client import CalDAVCalendarClient
from .clock import ReferenceClock
from .config import Settings
from .http_client import DEFAULT_HEADERS
from .metrics.prometheus import PrometheusClient
from .weather.openweathermap import OpenWeatherMapProvider


class DashboardService:
    """Entry points the HTTP layer calls; each returns JSON-ready data.

    A single ``httpx.AsyncClient`` is shared by all pipelines and closed with
    the service.
    """

    def __init__(
        self,
        settings: Settings,
        *,
        clock: ReferenceClock | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self.settings = settings
        self.clock = clock or settings.clock()
        self._owns_client = http_client is None
        self._http = http_client or httpx.AsyncClient(
            timeout=settings.http_timeout_seconds,
            headers=DEFAULT_HEADERS,
        )

    async def __aenter__(self) -> DashboardService:
        return self

    async def __aexit__(self, exc_type: Any, exc: Any, exc_tb: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._http.aclose()

    def _retry_kwargs(self) -> dict[str, Any]:
        return {
            "timeout_seconds": self.settings.http_timeout_seconds,
            "max_retries": self.settings.http_max_retries,
            "retry_delay_seconds": self.settings.http_retry_delay_seconds,
            "http_client": self._http,
        }

    async def weather(self, location: str | None = None) -> dict[str, Any]:
        provider = OpenWeatherMapProvider(
            self.settings.openweathermap_api_key,
            forecast_url=self.settings.openweathermap_forecast_url,
            clock=self.clock,
            **self._retry_kwargs(),
        )
        async with provider:
            result = await provider.get_weather(location or self.settings.openweathermap_location)
        return result.to_payload()

    async def calendar_events(self, date: str | None = "today") -> list[dict[str, Any]]:
        client = CalDAVCalendarClient(
            self.settings.nextcloud_url,
            self.settings.nextcloud_user,
            self.settings.nextcloud_password,
            clock=self.clock,
            max_concurrency=self.settings.calendar_max_concurrency,
            **self._retry_kwargs(),
        )
        async with client:
            events = await client.get_events(date)
        return [event.to_payload() for event in events]

    async def prometheus_query(self, query: str | None) -> Any:
        async with PrometheusClient(self.settings.prometheus_url, **self._retry_kwargs()) as client:
            return await client.query(query)

    def health(self) -> dict[str, Any]:
        return {
            "status": "ok",
            "environment": self.settings.app_env,
            "configReady": self.settings.weather_configured,
            "integrations": {
                "weather": self.settings.weather_configured,
                "calendar": self.settings.calendar_configured,
                "metrics": self.settings.metrics_configured,
            },
        }
