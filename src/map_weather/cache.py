"""Time-boxed cache for normalized weather records."""

from __future__ import annotations

from collections import OrderedDict
from typing import Protocol, runtime_checkable

from .weather.models import CacheEntry, WeatherRecord

DEFAULT_TTL_MS = 10 * 60 * 1000


def cache_key(lat: float, lng: float) -> str:
    """Key on the raw coordinate values; no rounding is applied."""
    return f"{lat},{lng}"


@runtime_checkable
class WeatherCache(Protocol):
    """Storage contract the batch service reads from and writes to."""

    def get(self, lat: float, lng: float, now_ms: int) -> WeatherRecord | None:
        """Return the record if present and fresh at ``now_ms``, else None."""
        ...

    def put(self, lat: float, lng: float, record: WeatherRecord, now_ms: int) -> None:
        """Create or overwrite the entry for the coordinate."""
        ...


class InMemoryWeatherCache:
    """Process-local TTL cache with optional LRU size bound.

    Stale entries are skipped on read but left in place until overwritten,
    swept, or pushed out by the size bound.
    """

    def __init__(self, ttl_ms: int = DEFAULT_TTL_MS, max_entries: int | None = None) -> None:
        if ttl_ms <= 0:
            raise ValueError("ttl_ms must be > 0")
        if max_entries is not None and max_entries <= 0:
            raise ValueError("max_entries must be > 0 when set")
        self.ttl_ms = ttl_ms
        self.max_entries = max_entries
        self._entries: OrderedDict[str, CacheEntry] = OrderedDict()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def get(self, lat: float, lng: float, now_ms: int) -> WeatherRecord | None:
        key = cache_key(lat, lng)
        entry = self._entries.get(key)
        if entry is None:
            return None
        if now_ms - entry.fetched_at_epoch_ms >= self.ttl_ms:
            return None
        if self.max_entries is not None:
            self._entries.move_to_end(key)
        return entry.record

    def put(self, lat: float, lng: float, record: WeatherRecord, now_ms: int) -> None:
        key = cache_key(lat, lng)
        self._entries[key] = CacheEntry(record=record, fetched_at_epoch_ms=now_ms)
        self._entries.move_to_end(key)
        if self.max_entries is not None:
            while len(self._entries) > self.max_entries:
                self._entries.popitem(last=False)

    def entry(self, lat: float, lng: float) -> CacheEntry | None:
        """Return the raw entry regardless of freshness."""
        return self._entries.get(cache_key(lat, lng))

    def sweep(self, now_ms: int) -> int:
        """Drop every entry that is stale at ``now_ms``; return how many were removed."""
        stale = [
            key
            for key, entry in self._entries.items()
            if now_ms - entry.fetched_at_epoch_ms >= self.ttl_ms
        ]
        for key in stale:
            del self._entries[key]
        return len(stale)

    def clear(self) -> None:
        self._entries.clear()
