"""Typed settings loader for the map weather client."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import Field, ValidationError, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .exceptions import ConfigError


class Settings(BaseSettings):
    """Application settings loaded from environment variables and `.env`."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    weather_api_base_url: str = Field(
        default="https://api.open-meteo.com/v1/forecast",
        alias="WEATHER_API_BASE_URL",
    )
    weather_timeout_seconds: float = Field(default=10.0, alias="WEATHER_TIMEOUT_SECONDS")
    weather_cache_ttl_seconds: float = Field(default=600.0, alias="WEATHER_CACHE_TTL_SECONDS")
    weather_cache_max_entries: int | None = Field(
        default=None,
        alias="WEATHER_CACHE_MAX_ENTRIES",
    )

    # Point this at a dev-proxy prefix (e.g. http://localhost:5173/ali-geo/areas_v3/bound)
    # to route boundary requests through the front-end server.
    geo_boundary_base_url: str = Field(
        default="https://geo.datav.aliyun.com/areas_v3/bound",
        alias="GEO_BOUNDARY_BASE_URL",
    )
    geo_timeout_seconds: float = Field(default=10.0, alias="GEO_TIMEOUT_SECONDS")

    http_user_agent: str = Field(
        default="map-weather/0.1 (+https://open-meteo.com)",
        alias="HTTP_USER_AGENT",
    )
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        alias="LOG_LEVEL",
    )

    @field_validator("weather_cache_max_entries", mode="before")
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
            return value.strip().upper()
        return value

    @model_validator(mode="after")
    def validate_ranges(self) -> Settings:
        """Validate numeric bounds and URL shapes."""
        for name, url in (
            ("WEATHER_API_BASE_URL", self.weather_api_base_url),
            ("GEO_BOUNDARY_BASE_URL", self.geo_boundary_base_url),
        ):
            if not url.startswith(("http://", "https://")):
                raise ValueError(f"{name} must be an http(s) URL.")
        if self.weather_timeout_seconds <= 0:
            raise ValueError("WEATHER_TIMEOUT_SECONDS must be > 0.")
        if self.weather_cache_ttl_seconds <= 0:
            raise ValueError("WEATHER_CACHE_TTL_SECONDS must be > 0.")
        if self.weather_cache_max_entries is not None and self.weather_cache_max_entries <= 0:
            raise ValueError("WEATHER_CACHE_MAX_ENTRIES must be > 0 when set.")
        if self.geo_timeout_seconds <= 0:
            raise ValueError("GEO_TIMEOUT_SECONDS must be > 0.")
        if not self.http_user_agent.strip():
            raise ValueError("HTTP_USER_AGENT must not be empty.")
        self.geo_boundary_base_url = self.geo_boundary_base_url.rstrip("/")
        return self

    @property
    def weather_cache_ttl_ms(self) -> int:
        return int(self.weather_cache_ttl_seconds * 1000)

    def safe_summary(self) -> dict[str, Any]:
        """Return config summary safe for logging."""
        return {
            "weather_api_base_url": self.weather_api_base_url,
            "weather_timeout_seconds": self.weather_timeout_seconds,
            "weather_cache_ttl_seconds": self.weather_cache_ttl_seconds,
            "weather_cache_max_entries": self.weather_cache_max_entries,
            "geo_boundary_base_url": self.geo_boundary_base_url,
            "geo_timeout_seconds": self.geo_timeout_seconds,
            "log_level": self.log_level,
        }


def load_settings() -> Settings:
    """Load and validate settings, raising ConfigError on failure."""
    try:
        return Settings()
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration: {exc}") from exc
    except OSError as exc:
        raise ConfigError(f"Failed reading environment/.env: {exc}") from exc
