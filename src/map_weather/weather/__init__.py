"""Current-weather provider integrations."""

from .base import WeatherProvider
from .codes import UNKNOWN_WEATHER_LABEL, decode_weather_code
from .models import CacheEntry, Coordinate, LookupStatus, WeatherLookup, WeatherRecord
from .open_meteo import OpenMeteoWeatherProvider

__all__ = [
    "UNKNOWN_WEATHER_LABEL",
    "CacheEntry",
    "Coordinate",
    "LookupStatus",
    "OpenMeteoWeatherProvider",
    "WeatherLookup",
    "WeatherProvider",
    "WeatherRecord",
    "decode_weather_code",
]
