"""Application exception classes."""


class ConfigError(Exception):
    """Raised when configuration is invalid or incomplete."""


class WeatherProviderError(Exception):
    """Raised when weather provider requests or normalization fail."""


class BoundaryFetchError(Exception):
    """Raised when a boundary GeoJSON tier cannot be fetched or decoded."""
