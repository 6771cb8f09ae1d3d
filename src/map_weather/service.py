"""Batched, cached current-weather lookups."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Sequence

from .cache import WeatherCache
from .weather.base import WeatherProvider
from .weather.models import Coordinate, WeatherLookup, WeatherRecord


def epoch_ms() -> int:
    return int(time.time() * 1000)


class BatchWeatherService:
    """Serves batches from cache and fetches all misses with one provider call.

    Any failure of the miss fetch is logged and degrades the missed
    coordinates to ``failed`` lookups; they are never raised to the caller.
    """

    def __init__(
        self,
        provider: WeatherProvider,
        cache: WeatherCache,
        logger: logging.Logger,
        now_ms: Callable[[], int] = epoch_ms,
    ) -> None:
        self.provider = provider
        self.cache = cache
        self.logger = logger
        self._now_ms = now_ms

    async def get_current(self, lat: float, lng: float) -> WeatherRecord | None:
        """Uncached single lookup; provider errors propagate."""
        return await self.provider.fetch_current(lat, lng)

    async def get_batch(self, coords: Sequence[Coordinate]) -> list[WeatherRecord | None]:
        """Return one record (or None) per coordinate, in input order."""
        lookups = await self.lookup_batch(coords)
        return [lookup.record for lookup in lookups]

    async def lookup_batch(self, coords: Sequence[Coordinate]) -> list[WeatherLookup]:
        """Like `get_batch`, but each slot says whether it was a hit, no data, or a failure."""
        if not coords:
            return []

        now = self._now_ms()
        results: list[WeatherLookup | None] = [None] * len(coords)
        pending_indices: list[int] = []
        pending: list[Coordinate] = []

        for index, coord in enumerate(coords):
            cached = self.cache.get(coord.latitude, coord.longitude, now)
            if cached is not None:
                results[index] = WeatherLookup(
                    coordinate=coord, status="ok", record=cached, from_cache=True
                )
            else:
                pending_indices.append(index)
                pending.append(coord)

        if not pending:
            return [lookup for lookup in results if lookup is not None]

        self.logger.debug(
            "Weather batch: %d cached, %d pending", len(coords) - len(pending), len(pending)
        )
        try:
            fresh = await self.provider.fetch_current_many(pending)
        except Exception as exc:
            self.logger.error(
                "Batch weather fetch failed for %d coordinates: %s: %s",
                len(pending), type(exc).__name__, exc,
                extra={"batch_size": len(coords), "pending": len(pending)},
            )
            return self._fail_pending(results, pending_indices, pending)

        if len(fresh) != len(pending):
            self.logger.error(
                "Batch weather fetch returned %d results for %d coordinates; not merging",
                len(fresh), len(pending),
            )
            return self._fail_pending(results, pending_indices, pending)

        for index, coord, record in zip(pending_indices, pending, fresh):
            if record is None:
                results[index] = WeatherLookup(coordinate=coord, status="no_data")
                continue
            self.cache.put(coord.latitude, coord.longitude, record, now)
            results[index] = WeatherLookup(coordinate=coord, status="ok", record=record)

        return [lookup for lookup in results if lookup is not None]

    @staticmethod
    def _fail_pending(
        results: list[WeatherLookup | None],
        pending_indices: list[int],
        pending: list[Coordinate],
    ) -> list[WeatherLookup]:
        for index, coord in zip(pending_indices, pending):
            results[index] = WeatherLookup(coordinate=coord, status="failed")
        return [lookup for lookup in results if lookup is not None]
