"""Redis client lifecycle and health check."""

from __future__ import annotations

import logging
from typing import Any

import redis.asyncio as aioredis

logger = logging.getLogger("order_relay.messaging.redis")


class RedisConnectionManager:
    """Owns one ``redis.asyncio`` client shared by publisher and consumer."""

    def __init__(self, url: str = "redis://localhost:6379/0", **client_kwargs: Any) -> None:
        self._url = url
        self._client_kwargs = client_kwargs
        self._client: aioredis.Redis | None = None

    @property
    def client(self) -> aioredis.Redis:
        """Return the client, creating it lazily (no I/O until first command)."""
        if self._client is None:
            self._client = aioredis.from_url(self._url, **self._client_kwargs)
        return self._client

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def health_check(self) -> bool:
        """Return True if the server answers PING."""
        try:
            return bool(await self.client.ping())
        except Exception:  # noqa: BLE001
            return False
