"""Provider-agnostic weather interface."""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime

from .models import NormalizedWeather


class WeatherProvider(ABC):
    """Base contract for forecast providers feeding the weather widgets."""

    @abstractmethod
    async def get_weather(
        self,
        location: str,
        *,
        now: datetime | None = None,
    ) -> NormalizedWeather:
        """Fetch and normalize the forecast for ``location``."""

    @abstractmethod
    async def aclose(self) -> None:
        """Release provider resources."""
