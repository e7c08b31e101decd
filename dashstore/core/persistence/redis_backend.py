"""Redis blob backend: one string key per collection.

Keys are prefixed with "dashstore:" to avoid collisions with other tenants
of the same Redis database.
"""

from __future__ import annotations

import redis.asyncio as redis

from dashstore.core.exceptions import PersistenceReadError
from dashstore.core.persistence import BlobBackend


class RedisBackend(BlobBackend):
    """Redis-based blob storage using plain GET/SET/DEL."""

    def __init__(self, redis_url: str, prefix: str = "dashstore:"):
        """Initialize Redis blob backend.

        Args:
            redis_url: Redis connection URL
            prefix: Namespace prepended to every key
        """
        self._redis_url = redis_url
        self._prefix = prefix
        self._client: redis.Redis | None = None

    async def _get_client(self) -> redis.Redis:
        """Get or create Redis client (lazy initialization)."""
        if self._client is None:
            self._client = redis.from_url(
                self._redis_url,
                encoding="utf-8",
                decode_responses=True,
            )
        return self._client

    async def read(self, key: str) -> str | None:
        client = await self._get_client()
        try:
            return await client.get(f"{self._prefix}{key}")
        except (redis.RedisError, UnicodeDecodeError) as exc:
            raise PersistenceReadError(key, str(exc)) from exc

    async def write(self, key: str, blob: str) -> None:
        client = await self._get_client()
        await client.set(f"{self._prefix}{key}", blob)

    async def remove(self, key: str) -> None:
        client = await self._get_client()
        await client.delete(f"{self._prefix}{key}")

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None
