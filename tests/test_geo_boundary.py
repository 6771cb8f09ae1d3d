"""Tests for the two-tier boundary GeoJSON fetcher."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from types import SimpleNamespace
from typing import Any

import httpx

from map_weather.geo.boundary import GeoBoundaryFetcher

BASE_URL = "https://geo.example.test/areas_v3/bound"

DETAILED = {
    "type": "FeatureCollection",
    "features": [
        {"type": "Feature", "properties": {"adcode": 110101, "name": "Dongcheng"}},
        {"type": "Feature", "properties": {"adcode": 110102, "name": "Xicheng"}},
    ],
}
SIMPLE = {
    "type": "FeatureCollection",
    "features": [{"type": "Feature", "properties": {"adcode": 110101, "name": "Dongcheng"}}],
}


def _make_settings(**overrides: Any) -> Any:
    defaults = {
        "geo_boundary_base_url": BASE_URL,
        "geo_timeout_seconds": 10.0,
        "http_user_agent": "map-weather-tests/0.1",
    }
    defaults.update(overrides)
    return SimpleNamespace(**defaults)


def _fetcher(handler: Callable[[httpx.Request], httpx.Response]) -> GeoBoundaryFetcher:
    return GeoBoundaryFetcher(
        settings=_make_settings(),
        logger=logging.getLogger("test_geo_boundary"),
        transport=httpx.MockTransport(handler),
    )


def test_detailed_tier_success_is_cached() -> None:
    calls: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(str(request.url))
        return httpx.Response(200, json=DETAILED)

    async def _go() -> tuple[Any, Any]:
        async with _fetcher(handler) as fetcher:
            return await fetcher.get_boundary("110000"), await fetcher.get_boundary("110000")

    first, second = asyncio.run(_go())
    assert first == DETAILED
    assert second == DETAILED
    assert calls == [f"{BASE_URL}/110000_full.json"]


def test_detailed_failure_falls_back_to_simple_and_caches_it() -> None:
    calls: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(str(request.url))
        if request.url.path.endswith("_full.json"):
            return httpx.Response(404, text="not found")
        return httpx.Response(200, json=SIMPLE)

    async def _go() -> tuple[Any, Any, list[str]]:
        async with _fetcher(handler) as fetcher:
            first = await fetcher.get_boundary("110101")
            calls_after_first = list(calls)
            second = await fetcher.get_boundary("110101")
            return first, second, calls_after_first

    first, second, calls_after_first = asyncio.run(_go())
    assert first == SIMPLE
    assert second == SIMPLE
    assert calls_after_first == [
        f"{BASE_URL}/110101_full.json",
        f"{BASE_URL}/110101.json",
    ]
    assert calls == calls_after_first


def test_both_tiers_failing_returns_none_and_is_not_cached() -> None:
    calls: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(str(request.url))
        raise httpx.ConnectError("unreachable", request=request)

    async def _go() -> tuple[Any, list[str]]:
        async with _fetcher(handler) as fetcher:
            result = await fetcher.get_boundary("999999")
            return result, fetcher.cached_codes()

    result, cached = asyncio.run(_go())
    assert result is None
    assert cached == []
    assert len(calls) == 2


def test_non_object_payload_counts_as_tier_failure() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path.endswith("_full.json"):
            return httpx.Response(200, json=["not", "geojson"])
        return httpx.Response(200, json=SIMPLE)

    async def _go() -> Any:
        async with _fetcher(handler) as fetcher:
            return await fetcher.get_boundary(110000)

    assert asyncio.run(_go()) == SIMPLE


def test_integer_and_string_codes_share_cache_entry() -> None:
    calls: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(str(request.url))
        return httpx.Response(200, json=DETAILED)

    async def _go() -> list[str]:
        async with _fetcher(handler) as fetcher:
            await fetcher.get_boundary(110000)
            await fetcher.get_boundary("110000")
            return fetcher.cached_codes()

    assert asyncio.run(_go()) == ["110000"]
    assert len(calls) == 1


def test_unexpected_exception_on_detailed_tier_falls_back_to_simple() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path.endswith("_full.json"):
            raise RuntimeError("Event loop is closed")
        return httpx.Response(200, json=SIMPLE)

    async def _go() -> Any:
        async with _fetcher(handler) as fetcher:
            return await fetcher.get_boundary("110000")

    assert asyncio.run(_go()) == SIMPLE


def test_unexpected_exception_on_both_tiers_returns_none() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise RuntimeError("Event loop is closed")

    async def _go() -> tuple[Any, list[str]]:
        async with _fetcher(handler) as fetcher:
            return await fetcher.get_boundary("110000"), fetcher.cached_codes()

    assert asyncio.run(_go()) == (None, [])


def test_fetcher_is_reusable_across_event_loops() -> None:
    fetcher = _fetcher(lambda request: httpx.Response(200, json=DETAILED))

    first = asyncio.run(fetcher.get_boundary("110000"))
    fetcher.clear()
    second = asyncio.run(fetcher.get_boundary("110000"))

    assert first == DETAILED
    assert second == DETAILED
