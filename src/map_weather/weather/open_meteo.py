"""Open-Meteo (api.open-meteo.com) current-weather provider implementation."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

import httpx

from ..config import Settings
from ..exceptions import WeatherProviderError
from ..http import LoopBoundClient
from .base import WeatherProvider
from .models import Coordinate, WeatherRecord

_FIXED_PARAMS = {
    "current_weather": "true",
    "windspeed_unit": "kmh",
    "timezone": "auto",
}


class OpenMeteoWeatherProvider(WeatherProvider):
    """Fetches and normalizes `current_weather` blocks from Open-Meteo."""

    provider_name = "open-meteo"

    def __init__(
        self,
        settings: Settings,
        logger: logging.Logger,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.settings = settings
        self.logger = logger
        self.base_url = settings.weather_api_base_url
        self._client = LoopBoundClient(
            timeout=settings.weather_timeout_seconds,
            headers={
                "Accept": "application/json",
                "User-Agent": settings.http_user_agent,
            },
            transport=transport,
        )

    async def __aenter__(self) -> OpenMeteoWeatherProvider:
        return self

    async def __aexit__(self, exc_type: Any, exc: Any, exc_tb: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def fetch_current(self, lat: float, lng: float) -> WeatherRecord | None:
        """Fetch current conditions for a single coordinate."""
        payload = await self._request_json(
            {"latitude": str(lat), "longitude": str(lng)},
            context="current weather",
        )
        if isinstance(payload, list):
            # A single-coordinate request never yields the list form, but be lenient.
            payload = payload[0] if len(payload) == 1 else None
        return self._normalize_location_payload(payload)

    async def fetch_current_many(
        self, coords: Sequence[Coordinate]
    ) -> list[WeatherRecord | None]:
        """Fetch current conditions for all coordinates with one request.

        Results are aligned positionally with ``coords``. A list response whose
        length differs from the request is rejected instead of being merged.
        """
        if not coords:
            return []
        params = {
            "latitude": ",".join(str(c.latitude) for c in coords),
            "longitude": ",".join(str(c.longitude) for c in coords),
        }
        payload = await self._request_json(params, context="batch current weather")

        if isinstance(payload, list):
            if len(payload) != len(coords):
                raise WeatherProviderError(
                    f"Open-Meteo returned {len(payload)} locations for "
                    f"{len(coords)} requested coordinates."
                )
            return [
                self._normalize_batch_item(item, coord) for item, coord in zip(payload, coords)
            ]

        if len(coords) != 1:
            raise WeatherProviderError(
                f"Open-Meteo returned a single location for {len(coords)} requested coordinates."
            )
        return [self._normalize_batch_item(payload, coords[0])]

    def _normalize_batch_item(self, item: Any, coord: Coordinate) -> WeatherRecord | None:
        # A malformed item only loses its own slot.
        try:
            return self._normalize_location_payload(item)
        except WeatherProviderError as exc:
            self.logger.warning(
                "Dropping unparseable Open-Meteo item for %s,%s: %s",
                coord.latitude, coord.longitude, exc,
            )
            return None

    async def _request_json(self, params: dict[str, str], context: str) -> Any:
        query = {**params, **_FIXED_PARAMS}
        try:
            response = await self._client.current().get(self.base_url, params=query)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            status = exc.response.status_code
            self.logger.error(
                "Open-Meteo %s failed with status %d", context, status,
                extra={"status_code": status},
            )
            raise WeatherProviderError(
                f"Open-Meteo {context} failed with status {status}: {exc.response.text[:300]}"
            ) from exc
        except httpx.HTTPError as exc:
            self.logger.error(
                "Open-Meteo %s request failed (%s): %s", context, type(exc).__name__, exc
            )
            raise WeatherProviderError(
                f"Open-Meteo {context} request failed: {type(exc).__name__}: {exc}"
            ) from exc

        try:
            payload = response.json()
        except ValueError as exc:
            self.logger.error("Open-Meteo %s returned non-JSON response", context)
            raise WeatherProviderError(
                f"Open-Meteo {context} returned non-JSON response."
            ) from exc

        if not isinstance(payload, (dict, list)):
            raise WeatherProviderError(
                f"Open-Meteo {context} returned unexpected payload type "
                f"{type(payload).__name__}."
            )
        return payload

    def _normalize_location_payload(self, payload: Any) -> WeatherRecord | None:
        if not isinstance(payload, dict):
            return None
        current = payload.get("current_weather")
        if not isinstance(current, dict):
            return None
        return self._normalize_current(current)

    def _normalize_current(self, current: dict[str, Any]) -> WeatherRecord:
        code = self._as_int(current.get("weathercode"))
        if code is None:
            self.logger.error(
                "Open-Meteo current_weather missing 'weathercode': %r", current.get("weathercode")
            )
            raise WeatherProviderError("Open-Meteo current_weather missing 'weathercode'.")
        return WeatherRecord(
            temperature_celsius=self._as_float(current.get("temperature")),
            wind_speed_kmh=self._as_float(current.get("windspeed")),
            wind_direction_degrees=self._as_float(current.get("winddirection")),
            weather_code=code,
            observed_at=self._as_str(current.get("time")),
        )

    @staticmethod
    def _as_str(value: Any) -> str | None:
        if isinstance(value, str) and value.strip():
            return value.strip()
        return None

    @staticmethod
    def _as_int(value: Any) -> int | None:
        if isinstance(value, bool):
            return None
        if isinstance(value, int):
            return value
        if isinstance(value, float) and value.is_integer():
            return int(value)
        return None

    @staticmethod
    def _as_float(value: Any) -> float | None:
        if isinstance(value, bool):
            return None
        if isinstance(value, (int, float)):
            return float(value)
        return None
