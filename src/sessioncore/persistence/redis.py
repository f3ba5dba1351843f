"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Module: persistence/redis.py.
"""

from __future__ import annotations

from typing import Any

from .base import PersistenceAdapter


class RedisPersistence(PersistenceAdapter):
    """
    Redis-backed store for hosts that keep session state outside the process.

    Requires ``redis.asyncio`` (``pip install redis``).

    Args:
        redis_client: An ``redis.asyncio.Redis`` client instance.
        prefix: Key prefix for namespacing.
    """

    backend_id: str = "redis"

    def __init__(self, redis_client: Any, *, prefix: str = "sessioncore") -> None:
        self._redis = redis_client
        self._prefix = prefix

    def _key(self, key: str) -> str:
        return f"{self._prefix}:{key}"

    async def get(self, key: str) -> str | None:
        blob = await self._redis.get(self._key(key))
        if blob is None:
            return None
        if isinstance(blob, bytes):
            return blob.decode("utf-8")
        return str(blob)

    async def set(self, key: str, value: str) -> None:
        await self._redis.set(self._key(key), value)

    async def delete(self, key: str) -> None:
        await self._redis.delete(self._key(key))
