"""Entry points consumed by the dashboard application."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any

from .cache import InMemoryWeatherCache, WeatherCache
from .config import Settings, load_settings
from .geo.boundary import GeoBoundaryFetcher
from .log_setup import setup_logger
from .service import BatchWeatherService
from .weather.base import WeatherProvider
from .weather.models import Coordinate, WeatherLookup, WeatherRecord
from .weather.open_meteo import OpenMeteoWeatherProvider

LocationInput = Coordinate | Mapping[str, Any]


def to_coordinate(location: LocationInput) -> Coordinate:
    """Accept a Coordinate or a mapping with lat/lng/adcode (or latitude/longitude/external_id)."""
    if isinstance(location, Coordinate):
        return location
    lat = location.get("latitude", location.get("lat"))
    lng = location.get("longitude", location.get("lng"))
    if lat is None or lng is None:
        raise ValueError(f"Location is missing latitude/longitude: {dict(location)!r}")
    external_id = location.get("external_id", location.get("adcode"))
    return Coordinate(
        latitude=lat,
        longitude=lng,
        external_id=None if external_id is None else str(external_id),
    )


class MapWeatherClient:
    """Wires provider, cache, batch service and boundary fetcher together.

    Everything is injectable so the host controls cache lifetime and eviction.
    """

    def __init__(
        self,
        settings: Settings,
        logger: logging.Logger,
        *,
        provider: WeatherProvider | None = None,
        cache: WeatherCache | None = None,
        geo_fetcher: GeoBoundaryFetcher | None = None,
    ) -> None:
        self.settings = settings
        self.logger = logger
        self.provider = provider or OpenMeteoWeatherProvider(settings=settings, logger=logger)
        self.cache = cache or InMemoryWeatherCache(
            ttl_ms=settings.weather_cache_ttl_ms,
            max_entries=settings.weather_cache_max_entries,
        )
        self.service = BatchWeatherService(
            provider=self.provider, cache=self.cache, logger=logger
        )
        self.geo = geo_fetcher or GeoBoundaryFetcher(settings=settings, logger=logger)

    async def __aenter__(self) -> MapWeatherClient:
        return self

    async def __aexit__(self, exc_type: Any, exc: Any, exc_tb: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self.provider.aclose()
        await self.geo.aclose()

    async def get_weather_by_location(self, lat: float, lng: float) -> WeatherRecord | None:
        return await self.service.get_current(lat, lng)

    async def get_batch_weather(
        self, locations: Iterable[LocationInput] | None
    ) -> list[WeatherRecord | None]:
        coords = [to_coordinate(location) for location in locations or ()]
        return await self.service.get_batch(coords)

    async def lookup_batch_weather(
        self, locations: Iterable[LocationInput] | None
    ) -> list[WeatherLookup]:
        coords = [to_coordinate(location) for location in locations or ()]
        return await self.service.lookup_batch(coords)

    async def get_area_geojson(self, adcode: str | int) -> dict[str, Any] | None:
        return await self.geo.get_boundary(adcode)


_default_client: MapWeatherClient | None = None


def get_default_client() -> MapWeatherClient:
    """Return the shared client, building it from environment settings on first use."""
    global _default_client
    if _default_client is None:
        settings = load_settings()
        logger = setup_logger(settings=settings)
        _default_client = MapWeatherClient(settings=settings, logger=logger)
    return _default_client


def set_default_client(client: MapWeatherClient | None) -> None:
    global _default_client
    _default_client = client


async def aclose_default_client() -> None:
    """Close and forget the shared client; the next call builds a fresh one."""
    global _default_client
    client, _default_client = _default_client, None
    if client is not None:
        await client.aclose()


async def get_weather_by_location(lat: float, lng: float) -> WeatherRecord | None:
    """Current weather for one point. Provider errors are raised."""
    return await get_default_client().get_weather_by_location(lat, lng)


async def get_batch_weather(
    locations: Iterable[LocationInput] | None,
) -> list[WeatherRecord | None]:
    """Current weather for many points; never raises for transport failures."""
    return await get_default_client().get_batch_weather(locations)


async def get_area_geojson(adcode: str | int) -> dict[str, Any] | None:
    """Boundary GeoJSON for an adcode, or None when unavailable."""
    return await get_default_client().get_area_geojson(adcode)
