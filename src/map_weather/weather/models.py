"""Typed models for normalized current-weather lookups."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, computed_field

from .codes import decode_weather_code

LookupStatus = Literal["ok", "no_data", "failed"]


class Coordinate(BaseModel):
    """Query point; `external_id` is an opaque caller tag (e.g. a region adcode)."""

    model_config = ConfigDict(frozen=True)

    latitude: float
    longitude: float
    external_id: str | None = None


class WeatherRecord(BaseModel):
    """Normalized current-conditions observation."""

    model_config = ConfigDict(frozen=True)

    temperature_celsius: float | None = None
    wind_speed_kmh: float | None = None
    wind_direction_degrees: float | None = None
    weather_code: int
    observed_at: str | None = Field(
        default=None, description="Provider-supplied observation time, kept as-is"
    )

    @computed_field  # type: ignore[prop-decorator]
    @property
    def weather_label(self) -> str:
        return decode_weather_code(self.weather_code)


class CacheEntry(BaseModel):
    """Cached record together with the epoch-ms time it was fetched."""

    record: WeatherRecord
    fetched_at_epoch_ms: int


class WeatherLookup(BaseModel):
    """Per-coordinate batch outcome.

    `ok` carries a record (from cache or provider), `no_data` means the
    provider answered without current conditions, `failed` means the
    remote call for this coordinate did not complete.
    """

    coordinate: Coordinate
    status: LookupStatus
    record: WeatherRecord | None = None
    from_cache: bool = False
