"""Typed settings loader for the dashboard backend."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import AliasChoices, Field, field_validator, model_validator
from pydantic import ValidationError as PydanticValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from .clock import ReferenceClock, resolve_timezone
from .exceptions import ConfigurationError

DEFAULT_FORECAST_URL = "https://api.openweathermap.org/data/2.5/forecast"


class Settings(BaseSettings):
    """Application settings loaded from environment variables and `.env`.

    Aliases keep the variable names used by the existing dashboard deployment.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    app_env: Literal["development", "production", "test"] = Field(
        default="development",
        validation_alias=AliasChoices("APP_ENV", "NODE_ENV", "app_env"),
    )

    openweathermap_api_key: str | None = Field(
        default=None, alias="VITE_OPENWEATHERMAP_API_KEY", repr=False
    )
    openweathermap_location: str = Field(
        default="Seattle,US", alias="VITE_OPENWEATHERMAP_LOCATION"
    )
    openweathermap_forecast_url: str = Field(
        default=DEFAULT_FORECAST_URL, alias="OPENWEATHERMAP_FORECAST_URL"
    )

    nextcloud_url: str | None = Field(default=None, alias="VITE_NEXTCLOUD_URL")
    nextcloud_user: str | None = Field(default=None, alias="VITE_NEXTCLOUD_USER")
    nextcloud_password: str | None = Field(
        default=None, alias="VITE_NEXTCLOUD_PASSWORD", repr=False
    )

    prometheus_url: str | None = Field(default=None, alias="VITE_PROMETHEUS_URL")

    dashboard_timezone: str | None = Field(default=None, alias="DASHBOARD_TIMEZONE")
    http_timeout_seconds: float = Field(default=15.0, alias="HTTP_TIMEOUT_SECONDS")
    http_max_retries: int = Field(default=1, alias="HTTP_MAX_RETRIES")
    http_retry_delay_seconds: float = Field(default=1.0, alias="HTTP_RETRY_DELAY_SECONDS")
    calendar_max_concurrency: int = Field(default=4, alias="CALENDAR_MAX_CONCURRENCY")
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO", alias="LOG_LEVEL"
    )

    @field_validator(
        "openweathermap_api_key",
        "nextcloud_url",
        "nextcloud_user",
        "nextcloud_password",
        "prometheus_url",
        "dashboard_timezone",
        mode="before",
    )
    @classmethod
    def empty_string_to_none(cls, value: Any) -> Any:
        """Treat empty env-string values as unset."""
        if isinstance(value, str) and value.strip() == "":
            return None
        return value

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().upper() or "INFO"
        return value

    @field_validator("nextcloud_url", "prometheus_url")
    @classmethod
    def strip_trailing_slash(cls, value: str | None) -> str | None:
        return value.rstrip("/") if value else value

    @model_validator(mode="after")
    def validate_limits(self) -> Settings:
        """Validate numeric limits and the configured timezone."""
        if self.http_timeout_seconds <= 0:
            raise ValueError("HTTP_TIMEOUT_SECONDS must be > 0.")
        if self.http_max_retries < 0:
            raise ValueError("HTTP_MAX_RETRIES must be >= 0.")
        if self.http_retry_delay_seconds < 0:
            raise ValueError("HTTP_RETRY_DELAY_SECONDS must be >= 0.")
        if self.calendar_max_concurrency <= 0:
            raise ValueError("CALENDAR_MAX_CONCURRENCY must be > 0.")
        if not self.openweathermap_location.strip():
            raise ValueError("VITE_OPENWEATHERMAP_LOCATION must not be empty.")
        if not self.openweathermap_forecast_url.startswith(("http://", "https://")):
            raise ValueError("OPENWEATHERMAP_FORECAST_URL must be an http(s) URL.")
        try:
            resolve_timezone(self.dashboard_timezone)
        except ConfigurationError as exc:
            raise ValueError(f"DASHBOARD_TIMEZONE is invalid: {exc}") from exc
        return self

    @property
    def weather_configured(self) -> bool:
        return bool(self.openweathermap_api_key)

    @property
    def calendar_configured(self) -> bool:
        return bool(self.nextcloud_url and self.nextcloud_user and self.nextcloud_password)

    @property
    def metrics_configured(self) -> bool:
        return bool(self.prometheus_url)

    def clock(self) -> ReferenceClock:
        """Reference clock bound to the configured (or host) timezone."""
        return ReferenceClock(tz=resolve_timezone(self.dashboard_timezone))

    def safe_summary(self) -> dict[str, Any]:
        """Return config summary safe for logging (no credentials)."""
        return {
            "app_env": self.app_env,
            "openweathermap_location": self.openweathermap_location,
            "openweathermap_forecast_url": self.openweathermap_forecast_url,
            "weather_configured": self.weather_configured,
            "nextcloud_url": self.nextcloud_url,
            "nextcloud_user": self.nextcloud_user,
            "calendar_configured": self.calendar_configured,
            "prometheus_url": self.prometheus_url,
            "dashboard_timezone": self.dashboard_timezone,
            "http_timeout_seconds": self.http_timeout_seconds,
            "http_max_retries": self.http_max_retries,
            "calendar_max_concurrency": self.calendar_max_concurrency,
            "log_level": self.log_level,
        }


def load_settings(**overrides: Any) -> Settings:
    """Load and validate settings, raising ConfigurationError on failure."""
    try:
        return Settings(**overrides)
    except PydanticValidationError as exc:
        raise ConfigurationError(f"Invalid configuration: {exc}") from exc
    except OSError as exc:
        raise ConfigurationError(f"Failed reading environment/.env: {exc}") from exc
