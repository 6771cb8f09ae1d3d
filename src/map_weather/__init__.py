"""Current weather and boundary GeoJSON lookups for map dashboards."""

from .api import (
    MapWeatherClient,
    aclose_default_client,
    get_area_geojson,
    get_batch_weather,
    get_weather_by_location,
    set_default_client,
)
from .cache import InMemoryWeatherCache, WeatherCache
from .service import BatchWeatherService
from .weather.models import Coordinate, WeatherLookup, WeatherRecord

__all__ = [
    "BatchWeatherService",
    "Coordinate",
    "InMemoryWeatherCache",
    "MapWeatherClient",
    "WeatherCache",
    "WeatherLookup",
    "WeatherRecord",
    "aclose_default_client",
    "get_area_geojson",
    "get_batch_weather",
    "get_weather_by_location",
    "set_default_client",
]
