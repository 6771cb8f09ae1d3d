"""Shared httpx client handling for the weather and boundary fetchers."""

from __future__ import annotations

import asyncio
from typing import Any

import httpx


class LoopBoundClient:
    """Holds one ``httpx.AsyncClient`` per running event loop.

    Pooled connections belong to the loop that opened them, so a client
    created under one ``asyncio.run`` is replaced when a later call runs
    on a different loop.
    """

    def __init__(self, **client_kwargs: Any) -> None:
        self._client_kwargs = client_kwargs
        self._client: httpx.AsyncClient | None = None
        self._loop: asyncio.AbstractEventLoop | None = None

    def current(self) -> httpx.AsyncClient:
        loop = asyncio.get_running_loop()
        if self._client is None or self._loop is not loop:
            # The previous loop is gone; its client cannot be closed from here.
            self._client = httpx.AsyncClient(**self._client_kwargs)
            self._loop = loop
        return self._client

    async def aclose(self) -> None:
        client, loop = self._client, self._loop
        self._client = None
        self._loop = None
        if client is not None and loop is asyncio.get_running_loop():
            await client.aclose()
