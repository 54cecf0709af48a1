"""JSON key-value storage: Redis, with an in-process fallback."""

from __future__ import annotations

import json
from typing import Any, Protocol

import redis.asyncio as aioredis

from src.utils.logging import get_logger

logger = get_logger(__name__)


class KeyValueStore(Protocol):
    async def get(self, key: str) -> Any | None: ...

    async def set(self, key: str, value: Any, ttl: int | None = None) -> None: ...

    async def delete(self, key: str) -> None: ...

    async def ping(self) -> bool: ...

    async def close(self) -> None: ...


class RedisStore:
    """Redis-backed store for connection profiles and query history."""

    def __init__(self, redis_url: str) -> None:
        self._client = aioredis.from_url(redis_url, decode_responses=True)

    async def get(self, key: str) -> Any | None:
        raw = await self._client.get(key)
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except json.JSONDecodeError:
            return raw

    async def set(self, key: str, value: Any, ttl: int | None = None) -> None:
        serialized = json.dumps(value) if not isinstance(value, str) else value
        await self._client.set(key, serialized, ex=ttl)

    async def delete(self, key: str) -> None:
        await self._client.delete(key)

    async def ping(self) -> bool:
        return bool(await self._client.ping())

    async def close(self) -> None:
        await self._client.aclose()


class MemoryStore:
    """Process-local store used when Redis is unavailable, and in tests.

    Values go through a JSON round-trip so callers see the same types they
    would get back from Redis. TTLs are ignored.
    """

    def __init__(self) -> None:
        self._data: dict[str, str] = {}

    async def get(self, key: str) -> Any | None:
        raw = self._data.get(key)
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except json.JSONDecodeError:
            return raw

    async def set(self, key: str, value: Any, ttl: int | None = None) -> None:
        self._data[key] = json.dumps(value) if not isinstance(value, str) else value

    async def delete(self, key: str) -> None:
        self._data.pop(key, None)

    async def ping(self) -> bool:
        return True

    async def close(self) -> None:
        self._data.clear()


async def connect_store(redis_url: str) -> KeyValueStore:
    """Connect to Redis, falling back to an in-memory store when it cannot be reached."""
    store = RedisStore(redis_url)
    try:
        await store.ping()
    except Exception as exc:
        logger.warning("redis_unavailable_using_memory_store", error=str(exc))
        await store.close()
        return MemoryStore()
    logger.info("redis_connected", url=redis_url)
    return store
