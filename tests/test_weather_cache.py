"""Tests for the in-memory TTL weather cache."""

from __future__ import annotations

import pytest

from map_weather.cache import DEFAULT_TTL_MS, InMemoryWeatherCache, WeatherCache, cache_key
from map_weather.weather.models import WeatherRecord


def _record(code: int = 0, temp: float = 20.0) -> WeatherRecord:
    return WeatherRecord(
        temperature_celsius=temp,
        wind_speed_kmh=5.0,
        wind_direction_degrees=180.0,
        weather_code=code,
        observed_at="2026-10-17T12:00",
    )


def test_put_then_get_within_ttl_returns_record() -> None:
    cache = InMemoryWeatherCache()
    record = _record()
    cache.put(39.9, 116.4, record, now_ms=1_000)
    assert cache.get(39.9, 116.4, now_ms=1_000 + DEFAULT_TTL_MS - 1) == record


def test_get_after_ttl_returns_none_without_removing_entry() -> None:
    cache = InMemoryWeatherCache()
    cache.put(39.9, 116.4, _record(), now_ms=1_000)
    assert cache.get(39.9, 116.4, now_ms=1_000 + 600_001) is None
    assert cache.get(39.9, 116.4, now_ms=1_000 + 600_000) is None
    assert len(cache) == 1
    assert cache.entry(39.9, 116.4) is not None


def test_put_overwrites_entry_and_timestamp() -> None:
    cache = InMemoryWeatherCache(ttl_ms=100)
    cache.put(1.0, 2.0, _record(temp=1.0), now_ms=0)
    cache.put(1.0, 2.0, _record(temp=2.0), now_ms=500)
    cached = cache.get(1.0, 2.0, now_ms=550)
    assert cached is not None
    assert cached.temperature_celsius == 2.0
    entry = cache.entry(1.0, 2.0)
    assert entry is not None
    assert entry.fetched_at_epoch_ms == 500


def test_distinct_coordinates_do_not_collide() -> None:
    cache = InMemoryWeatherCache()
    cache.put(10.0, 20.0, _record(code=0), now_ms=0)
    cache.put(20.0, 10.0, _record(code=3), now_ms=0)
    cache.put(10.0, 20.000001, _record(code=61), now_ms=0)
    assert cache.get(10.0, 20.0, now_ms=1).weather_code == 0  # type: ignore[union-attr]
    assert cache.get(20.0, 10.0, now_ms=1).weather_code == 3  # type: ignore[union-attr]
    assert cache.get(10.0, 20.000001, now_ms=1).weather_code == 61  # type: ignore[union-attr]
    assert len(cache) == 3


def test_cache_key_uses_raw_values() -> None:
    assert cache_key(39.9, 116.4) == "39.9,116.4"
    assert cache_key(39.9, 116.4) != cache_key(39.90000000000001, 116.4)


def test_max_entries_evicts_least_recently_used() -> None:
    cache = InMemoryWeatherCache(max_entries=2)
    cache.put(1.0, 1.0, _record(code=1), now_ms=0)
    cache.put(2.0, 2.0, _record(code=2), now_ms=0)
    assert cache.get(1.0, 1.0, now_ms=1) is not None
    cache.put(3.0, 3.0, _record(code=3), now_ms=2)
    assert len(cache) == 2
    assert cache.get(2.0, 2.0, now_ms=3) is None
    assert cache.get(1.0, 1.0, now_ms=3) is not None
    assert cache.get(3.0, 3.0, now_ms=3) is not None


def test_sweep_removes_only_stale_entries() -> None:
    cache = InMemoryWeatherCache(ttl_ms=1_000)
    cache.put(1.0, 1.0, _record(), now_ms=0)
    cache.put(2.0, 2.0, _record(), now_ms=800)
    assert cache.sweep(now_ms=1_500) == 1
    assert len(cache) == 1
    assert cache.get(2.0, 2.0, now_ms=1_500) is not None
    cache.clear()
    assert len(cache) == 0


@pytest.mark.parametrize(("ttl_ms", "max_entries"), [(0, None), (-1, None), (1_000, 0)])
def test_invalid_bounds_rejected(ttl_ms: int, max_entries: int | None) -> None:
    with pytest.raises(ValueError):
        InMemoryWeatherCache(ttl_ms=ttl_ms, max_entries=max_entries)


def test_in_memory_cache_satisfies_protocol() -> None:
    assert isinstance(InMemoryWeatherCache(), WeatherCache)
