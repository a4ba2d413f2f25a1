"""OpenWeatherMap 5-day / 3-hour forecast provider."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any

import httpx

from ..clock import ReferenceClock
from ..config import DEFAULT_FORECAST_URL
from ..exceptions import ConfigurationError, UpstreamDataError, ValidationError
from ..http_client import DEFAULT_TIMEOUT_SECONDS, UpstreamClient
from .base import WeatherProvider
from .models import NormalizedWeather
from .normalizer import extract_sun_times, normalize_forecast, parse_forecast_samples

logger = logging.getLogger(__name__)


class OpenWeatherMapProvider(WeatherProvider):
    """Fetches the 3-hour forecast feed and normalizes it for the widgets."""

    provider_name = "openweathermap"

    def __init__(
        self,
        api_key: str | None,
        *,
        forecast_url: str = DEFAULT_FORECAST_URL,
        clock: ReferenceClock | None = None,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        max_retries: int = 1,
        retry_delay_seconds: float = 1.0,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._api_key = api_key
        self._forecast_url = forecast_url
        self._clock = clock or ReferenceClock()
        self._upstream = UpstreamClient(
            "OpenWeatherMap",
            logger,
            timeout_seconds=timeout_seconds,
            max_retries=max_retries,
            retry_delay_seconds=retry_delay_seconds,
            client=http_client,
        )

    async def __aenter__(self) -> OpenWeatherMapProvider:
        return self

    async def __aexit__(self, exc_type: Any, exc: Any, exc_tb: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._upstream.aclose()

    async def fetch_forecast_raw(self, location: str) -> dict[str, Any]:
        """Return the raw ``/forecast`` JSON body for ``location``."""
        if not self._api_key:
            raise ConfigurationError("OpenWeatherMap API key not configured")
        if not location or not location.strip():
            raise ValidationError("Missing location parameter")

        payload = await self._upstream.get_json(
            self._forecast_url,
            context="forecast fetch",
            params={"q": location.strip(), "units": "imperial", "appid": self._api_key},
        )
        if not isinstance(payload, dict):
            raise UpstreamDataError(
                f"OpenWeatherMap returned unexpected payload type {type(payload).__name__}."
            )
        return payload

    async def get_weather(
        self,
        location: str,
        *,
        now: datetime | None = None,
    ) -> NormalizedWeather:
        payload = await self.fetch_forecast_raw(location)
        samples = parse_forecast_samples(payload)
        sunrise, sunset = extract_sun_times(payload)
        reference = now if now is not None else self._clock.now()
        weather = normalize_forecast(samples, reference, sunrise=sunrise, sunset=sunset)
        logger.info(
            "Normalized forecast for %s: samples=%d hourly=%d daily=%d",
            location,
            len(samples),
            len(weather.hourly),
            len(weather.daily),
            extra={"context": {"location": location}},
        )
        return weather


async def get_weather(
    location: str,
    api_key: str | None,
    *,
    now: datetime | None = None,
    forecast_url: str = DEFAULT_FORECAST_URL,
    http_client: httpx.AsyncClient | None = None,
) -> NormalizedWeather:
    """One-shot convenience wrapper around :class:`OpenWeatherMapProvider`."""
    async with OpenWeatherMapProvider(
        api_key, forecast_url=forecast_url, http_client=http_client
    ) as provider:
        return await provider.get_weather(location, now=now)
