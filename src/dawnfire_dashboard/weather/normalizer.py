"""Forecast normalization: 3-hour samples -> current / hourly / daily payload.

The normalizer is a pure function over already-fetched data. "Today" for the
hourly window is evaluated in the timezone carried by ``now``; daily buckets
are keyed by each sample's UTC date and are never shifted to local time.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from datetime import UTC, datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from ..clock import end_of_day
from ..exceptions import UpstreamDataError
from .models import (
    CurrentConditions,
    DailyForecast,
    ForecastSample,
    HourlyForecast,
    NormalizedWeather,
)

MAX_HOURLY_ENTRIES = 12
MAX_DAILY_ENTRIES = 3


def round_half_away(value: float) -> int:
    """Round to the nearest integer, ties away from zero."""
    return int(Decimal(value).quantize(Decimal(1), rounding=ROUND_HALF_UP))


def normalize_forecast(
    samples: Sequence[ForecastSample],
    now: datetime,
    *,
    sunrise: int | float | None = None,
    sunset: int | float | None = None,
) -> NormalizedWeather:
    """Build the UI weather payload from an ascending 3-hour series."""
    if not samples:
        raise UpstreamDataError("Forecast series is empty; cannot derive current conditions.")
    if now.tzinfo is None:
        now = now.astimezone()

    return NormalizedWeather(
        current=_current(samples[0], sunrise=sunrise, sunset=sunset),
        hourly=_hourly(samples, now),
        daily=_daily(samples, now),
    )


def _current(
    sample: ForecastSample, *, sunrise: int | float | None, sunset: int | float | None
) -> CurrentConditions:
    return CurrentConditions(
        temp=round_half_away(sample.temp),
        condition=sample.condition,
        humidity=sample.humidity,
        wind_speed=round_half_away(sample.wind_speed) if sample.wind_speed is not None else None,
        wind_dir=sample.wind_deg,
        aqi=None,
        pressure=sample.pressure,
        pressure_mb=sample.pressure,
        sunrise=sunrise,
        sunset=sunset,
    )


def _hourly(samples: Iterable[ForecastSample], now: datetime) -> list[HourlyForecast]:
    today_end = end_of_day(now)
    hourly: list[HourlyForecast] = []
    for sample in samples:
        if len(hourly) >= MAX_HOURLY_ENTRIES:
            break
        sample_time = sample.time
        if now < sample_time <= today_end:
            hourly.append(
                HourlyForecast(
                    time=sample_time,
                    temp=round_half_away(sample.temp),
                    condition=sample.condition,
                    icon=sample.icon,
                    precip_probability=round_half_away(sample.pop * 100),
                    pressure=sample.pressure,
                    pressure_mb=sample.pressure,
                )
            )
    return hourly


def _daily(samples: Iterable[ForecastSample], now: datetime) -> list[DailyForecast]:
    groups: dict[str, list[ForecastSample]] = {}
    for sample in samples:
        groups.setdefault(sample.time.date().isoformat(), []).append(sample)

    today_utc = now.astimezone(UTC).date().isoformat()
    future_dates = [day for day in sorted(groups) if day > today_utc]
    return [_aggregate_day(day, groups[day]) for day in future_dates[:MAX_DAILY_ENTRIES]]


def _aggregate_day(day: str, group: list[ForecastSample]) -> DailyForecast:
    temps = [sample.temp for sample in group]
    pressures = [sample.pressure for sample in group if sample.pressure is not None]
    # a single missing reading makes the day's mean 0
    complete = bool(group) and len(pressures) == len(group)
    pressure_avg = sum(pressures) / len(group) if complete else 0
    # dict keeps first-seen order while de-duplicating
    conditions = dict.fromkeys(sample.condition for sample in group if sample.condition)
    return DailyForecast(
        date=day,
        high=round_half_away(max(temps)),
        low=round_half_away(min(temps)),
        precip_max=round_half_away(max(sample.pop * 100 for sample in group)),
        pressure_avg=round_half_away(pressure_avg),
        condition=", ".join(conditions),
    )


def parse_forecast_samples(payload: Any) -> list[ForecastSample]:
    """Convert an OpenWeatherMap ``/forecast`` body into ordered samples."""
    if not isinstance(payload, dict):
        raise UpstreamDataError(
            f"Forecast payload has unexpected type {type(payload).__name__}."
        )
    raw_list = payload.get("list")
    if not isinstance(raw_list, list):
        raise UpstreamDataError("Forecast payload missing 'list' array.")
    return [_parse_sample(index, item) for index, item in enumerate(raw_list)]


def extract_sun_times(payload: dict[str, Any]) -> tuple[int | float | None, int | float | None]:
    city = payload.get("city")
    if not isinstance(city, dict):
        return None, None
    return _as_epoch(city.get("sunrise")), _as_epoch(city.get("sunset"))


def _parse_sample(index: int, item: Any) -> ForecastSample:
    if not isinstance(item, dict):
        raise UpstreamDataError(f"Forecast sample {index} is not an object.")
    main = item.get("main")
    weather = item.get("weather")
    if not isinstance(main, dict):
        raise UpstreamDataError(f"Forecast sample {index} missing 'main' object.")
    if not isinstance(weather, list) or not weather or not isinstance(weather[0], dict):
        raise UpstreamDataError(f"Forecast sample {index} missing 'weather[0]' object.")
    wind = item.get("wind") if isinstance(item.get("wind"), dict) else {}
    try:
        return ForecastSample(
            dt=item.get("dt"),
            temp=main.get("temp"),
            humidity=main.get("humidity"),
            pressure=main.get("pressure"),
            wind_speed=wind.get("speed"),
            wind_deg=wind.get("deg"),
            condition=weather[0].get("main"),
            icon=weather[0].get("icon"),
            pop=item.get("pop") or 0.0,
        )
    except PydanticValidationError as exc:
        raise UpstreamDataError(f"Forecast sample {index} is malformed: {exc}") from exc


def _as_epoch(value: Any) -> int | float | None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return value
