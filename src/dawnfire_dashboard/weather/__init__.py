"""Weather forecast fetching and normalization."""

from .base import WeatherProvider
from .models import (
    CurrentConditions,
    DailyForecast,
    ForecastSample,
    HourlyForecast,
    NormalizedWeather,
)
from .normalizer import normalize_forecast, parse_forecast_samples
from .openweathermap import OpenWeatherMapProvider, get_weather

__all__ = [
    "CurrentConditions",
    "DailyForecast",
    "ForecastSample",
    "HourlyForecast",
    "NormalizedWeather",
    "OpenWeatherMapProvider",
    "WeatherProvider",
    "get_weather",
    "normalize_forecast",
    "parse_forecast_samples",
]
