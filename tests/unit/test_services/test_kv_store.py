"""Unit tests for key-value stores and the session registry."""

from __future__ import annotations

from unittest.mock import AsyncMock, patch

import pytest

from src.services.kv_store import MemoryStore, RedisStore, connect_store
from src.services.session_manager import SessionManager
from src.utils.exceptions import SessionNotFoundError


@pytest.mark.asyncio
async def test_memory_store_json_round_trip():
    store = MemoryStore()
    await store.set("k", {"a": [1, 2]})
    assert await store.get("k") == {"a": [1, 2]}
    await store.set("s", "plain")
    assert await store.get("s") == "plain"
    await store.delete("k")
    assert await store.get("k") is None
    assert await store.ping() is True


@pytest.mark.asyncio
async def test_redis_store_serializes_json():
    with patch("src.services.kv_store.aioredis.from_url") as from_url:
        client = AsyncMock()
        client.get = AsyncMock(return_value='["g.V()"]')
        from_url.return_value = client
        store = RedisStore("redis://localhost:6379/0")

        await store.set("k", ["g.V()"])
        client.set.assert_awaited_once_with("k", '["g.V()"]', ex=None)
        assert await store.get("k") == ["g.V()"]


@pytest.mark.asyncio
async def test_connect_store_falls_back_to_memory():
    with patch("src.services.kv_store.aioredis.from_url") as from_url:
        client = AsyncMock()
        client.ping = AsyncMock(side_effect=ConnectionRefusedError("no redis"))
        from_url.return_value = client

        store = await connect_store("redis://localhost:6379/0")

    assert isinstance(store, MemoryStore)
    client.aclose.assert_awaited_once()


@pytest.mark.asyncio
async def test_session_manager_lifecycle(fake_executor, memory_store, local_profile):
    await memory_store.set("gremlin_query_history", ["g.E()", "g.V()"])
    manager = SessionManager(fake_executor, memory_store)

    session = await manager.create()
    assert manager.get(session.session_id) is session
    assert session.history.entries == ["g.E()", "g.V()"]

    session.profile = local_profile
    await session.click_node("1")
    manager.close(session.session_id)

    assert len(session.detail_cache) == 0
    with pytest.raises(SessionNotFoundError):
        manager.get(session.session_id)
    with pytest.raises(SessionNotFoundError):
        manager.close(session.session_id)


@pytest.mark.asyncio
async def test_sessions_have_separate_caches(fake_executor, memory_store):
    manager = SessionManager(fake_executor, memory_store)
    first, second = await manager.create(), await manager.create()
    assert first.detail_cache is not second.detail_cache
    assert len(manager) == 2
    manager.close_all()
    assert len(manager) == 0
