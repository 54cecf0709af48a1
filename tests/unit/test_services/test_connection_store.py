"""Unit tests for encrypted connection profile storage."""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest

from src.models.schemas import ConnectionProfile
from src.services.connection_store import CONNECTIONS_KEY, ConnectionStore, fernet_for
from src.utils.exceptions import ProfileNotFoundError, ProfileValidationError, StoreError


@pytest.fixture
def store(memory_store):
    return ConnectionStore(memory_store, "test-secret")


@pytest.mark.asyncio
async def test_create_and_list_round_trip(store, local_profile, cosmos_profile):
    await store.create(local_profile)
    await store.create(cosmos_profile)

    profiles = await store.list()

    assert profiles == [local_profile, cosmos_profile]
    assert (await store.get("cosmos-1")).details["accessKey"] == "secret-key"


@pytest.mark.asyncio
async def test_stored_as_ciphertexts(store, memory_store, cosmos_profile):
    await store.create(cosmos_profile)

    stored = await memory_store.get(CONNECTIONS_KEY)

    assert isinstance(stored, list) and len(stored) == 1
    assert "secret-key" not in stored[0]
    assert fernet_for("test-secret").decrypt(stored[0].encode()).startswith(b"{")


@pytest.mark.asyncio
async def test_wrong_secret_reads_empty(memory_store, local_profile):
    await ConnectionStore(memory_store, "one").create(local_profile)
    assert await ConnectionStore(memory_store, "two").list() == []


@pytest.mark.asyncio
async def test_corrupt_value_reads_empty(store, memory_store):
    await memory_store.set(CONNECTIONS_KEY, ["not-a-token"])
    assert await store.list() == []
    await memory_store.set(CONNECTIONS_KEY, "garbage")
    assert await store.list() == []


@pytest.mark.asyncio
async def test_create_rejects_missing_details(store):
    with pytest.raises(ProfileValidationError, match="dbName"):
        await store.create(
            ConnectionProfile(name="c", type="cosmos", details={"url": "wss://x", "accessKey": "k", "graphName": "g"})
        )
    with pytest.raises(ProfileValidationError):
        await store.create(ConnectionProfile(name=" ", type="local", details={"url": "ws://x"}))


@pytest.mark.asyncio
async def test_create_duplicate_id(store, local_profile):
    await store.create(local_profile)
    with pytest.raises(ProfileValidationError):
        await store.create(local_profile)


@pytest.mark.asyncio
async def test_update(store, local_profile):
    await store.create(local_profile)

    updated = await store.update("local-1", {"name": "Renamed", "id": "ignored"})

    assert updated.id == "local-1"
    assert updated.name == "Renamed"
    assert (await store.get("local-1")).name == "Renamed"


@pytest.mark.asyncio
async def test_update_invalid_type(store, local_profile):
    await store.create(local_profile)
    with pytest.raises(ProfileValidationError):
        await store.update("local-1", {"type": "neptune"})


@pytest.mark.asyncio
async def test_missing_profile(store):
    with pytest.raises(ProfileNotFoundError):
        await store.get("nope")
    with pytest.raises(ProfileNotFoundError):
        await store.update("nope", {"name": "x"})
    with pytest.raises(ProfileNotFoundError):
        await store.delete("nope")


@pytest.mark.asyncio
async def test_delete(store, local_profile, cosmos_profile):
    await store.create(local_profile)
    await store.create(cosmos_profile)

    await store.delete("local-1")

    assert [p.id for p in await store.list()] == ["cosmos-1"]


@pytest.mark.asyncio
async def test_backend_failure_raises_store_error():
    backend = AsyncMock()
    backend.get = AsyncMock(side_effect=ConnectionRefusedError("down"))
    with pytest.raises(StoreError):
        await ConnectionStore(backend, "s").list()
