"""Provider-agnostic weather interface."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence

from .models import Coordinate, WeatherRecord


class WeatherProvider(ABC):
    """Base contract for current-conditions providers used by the batch service."""

    @abstractmethod
    async def fetch_current(self, lat: float, lng: float) -> WeatherRecord | None:
        """Fetch current conditions for one point; None when the provider has none."""

    @abstractmethod
    async def fetch_current_many(
        self, coords: Sequence[Coordinate]
    ) -> list[WeatherRecord | None]:
        """Fetch current conditions for many points in one request, in input order."""

    @abstractmethod
    async def aclose(self) -> None:
        """Release provider resources."""
