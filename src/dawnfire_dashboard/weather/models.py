"""Typed models for raw forecast samples and the normalized weather payload."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_serializer

from ..clock import to_js_iso


class ForecastSample(BaseModel):
    """One 3-hour step of the upstream forecast feed."""

    dt: int = Field(description="Sample time in epoch seconds")
    temp: float
    humidity: float | None = None
    pressure: float | None = None
    wind_speed: float | None = None
    wind_deg: float | None = None
    condition: str | None = None
    icon: str | None = None
    pop: float = Field(default=0.0, description="Precipitation probability, 0-1")

    @property
    def time(self) -> datetime:
        return datetime.fromtimestamp(self.dt, tz=UTC)


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json")


class CurrentConditions(_CamelModel):
    temp: int
    condition: str | None = None
    humidity: float | None = None
    wind_speed: int | None = Field(default=None, alias="windSpeed")
    wind_dir: float | None = Field(default=None, alias="windDir")
    aqi: int | None = None
    pressure: float | None = None
    pressure_mb: float | None = Field(default=None, alias="pressureMb")
    sunrise: int | float | None = None
    sunset: int | float | None = None


class HourlyForecast(_CamelModel):
    time: datetime
    temp: int
    condition: str | None = None
    icon: str | None = None
    precip_probability: int = Field(alias="precipProbability")
    pressure: float | None = None
    pressure_mb: float | None = Field(default=None, alias="pressureMb")

    @field_serializer("time")
    def _serialize_time(self, value: datetime) -> str:
        return to_js_iso(value)


class DailyForecast(_CamelModel):
    date: str = Field(description="UTC calendar date, YYYY-MM-DD")
    high: int
    low: int
    precip_max: int = Field(alias="precipMax")
    pressure_avg: int = Field(alias="pressureAvg")
    condition: str


class NormalizedWeather(_CamelModel):
    current: CurrentConditions
    hourly: list[HourlyForecast] = Field(default_factory=list)
    daily: list[DailyForecast] = Field(default_factory=list)
