"""Administrative boundary GeoJSON fetcher (Aliyun DataV areas_v3)."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from ..config import Settings
from ..exceptions import BoundaryFetchError
from ..http import LoopBoundClient


class GeoBoundaryFetcher:
    """Fetches boundary GeoJSON by adcode with a permanent in-memory cache.

    The detailed form (``{code}_full.json``, with sub-region features) is tried
    first; the outline-only form (``{code}.json``) is the fallback.
    """

    def __init__(
        self,
        settings: Settings,
        logger: logging.Logger,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.settings = settings
        self.logger = logger
        self.base_url = settings.geo_boundary_base_url.rstrip("/")
        self._cache: dict[str, dict[str, Any]] = {}
        self._client = LoopBoundClient(
            timeout=settings.geo_timeout_seconds,
            headers={
                "Accept": "application/json",
                "User-Agent": settings.http_user_agent,
            },
            transport=transport,
        )

    async def __aenter__(self) -> GeoBoundaryFetcher:
        return self

    async def __aexit__(self, exc_type: Any, exc: Any, exc_tb: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    def detailed_url(self, code: str) -> str:
        return f"{self.base_url}/{code}_full.json"

    def simple_url(self, code: str) -> str:
        return f"{self.base_url}/{code}.json"

    async def get_boundary(self, code: str | int) -> dict[str, Any] | None:
        """Return GeoJSON for ``code``, or None if both tiers fail."""
        key = str(code)
        cached = self._cache.get(key)
        if cached is not None:
            return cached

        try:
            geojson = await self._request_geojson(self.detailed_url(key))
        except Exception as exc:
            self.logger.warning(
                "Detailed boundary for %s unavailable: %s: %s", key, type(exc).__name__, exc
            )
            try:
                geojson = await self._request_geojson(self.simple_url(key))
            except Exception as fallback_exc:
                self.logger.error(
                    "GeoJSON load failed for %s: %s", key, fallback_exc, extra={"adcode": key}
                )
                return None

        self._cache[key] = geojson
        return geojson

    def cached_codes(self) -> list[str]:
        return list(self._cache)

    def clear(self) -> None:
        self._cache.clear()

    async def _request_geojson(self, url: str) -> dict[str, Any]:
        try:
            response = await self._client.current().get(url)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise BoundaryFetchError(
                f"status {exc.response.status_code} at {url}"
            ) from exc
        except httpx.HTTPError as exc:
            raise BoundaryFetchError(f"{type(exc).__name__} at {url}: {exc}") from exc

        try:
            payload = response.json()
        except ValueError as exc:
            raise BoundaryFetchError(f"non-JSON response at {url}") from exc
        if not isinstance(payload, dict):
            raise BoundaryFetchError(
                f"unexpected payload type {type(payload).__name__} at {url}"
            )
        return payload
