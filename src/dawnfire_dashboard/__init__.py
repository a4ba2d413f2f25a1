"""Dawnfire dashboard backend: weather, calendar and metrics pipelines."""

from .calendars import CalendarEvent, get_calendar_events, parse_event
from .exceptions import (
    ConfigurationError,
    DashboardError,
    ParseError,
    UpstreamDataError,
    UpstreamError,
    ValidationError,
)
from .metrics import query_metrics
from .weather import NormalizedWeather, get_weather, normalize_forecast

__version__ = "0.1.0"

__all__ = [
    "CalendarEvent",
    "ConfigurationError",
    "DashboardError",
    "NormalizedWeather",
    "ParseError",
    "UpstreamDataError",
    "UpstreamError",
    "ValidationError",
    "get_calendar_events",
    "get_weather",
    "normalize_forecast",
    "parse_event",
    "query_metrics",
]
