"""Unit tests for the connection session state machine."""

from __future__ import annotations

import asyncio
from typing import Any
from unittest.mock import AsyncMock

import pytest

from src.explorer.detail_cache import MISS, VertexDetailCache
from src.explorer.session import ConnectionSession, ConnectionState, QueryState
from src.models.schemas import ConnectionProfile
from src.utils.exceptions import GraphConnectionError, QueryError


class GatedExecutor:
    """Executor whose responses are released by the test, one gate per call key."""

    def __init__(self) -> None:
        self.gates: dict[str, asyncio.Event] = {}
        self.responses: dict[str, dict[str, Any]] = {}
        self.calls: list[tuple[str, str | None]] = []

    def hold(self, key: str, response: dict[str, Any]) -> asyncio.Event:
        self.gates[key] = asyncio.Event()
        self.responses[key] = response
        return self.gates[key]

    async def execute(self, connection_type: str, details: dict, query: str | None = None) -> dict[str, Any]:
        key = query if query is not None else f"schema:{details.get('url')}"
        self.calls.append((connection_type, query))
        gate = self.gates.get(key)
        if gate is not None:
            await gate.wait()
        return self.responses.get(key, {"success": True, "result": {"vertexLabels": [], "edgeLabels": []}})


async def _settle() -> None:
    for _ in range(5):
        await asyncio.sleep(0)


# ── connection selection ─────────────────────────────────────────────


@pytest.mark.asyncio
async def test_select_local_without_url_fails_without_dispatch(fake_executor):
    session = ConnectionSession(fake_executor)
    profile = ConnectionProfile(name="broken", type="local", details={})

    state = await session.select_connection(profile)

    assert state is ConnectionState.ERROR
    assert isinstance(session.connection_error, GraphConnectionError)
    assert "url" in str(session.connection_error)
    fake_executor.execute.assert_not_awaited()


@pytest.mark.asyncio
async def test_select_cosmos_missing_fields(fake_executor, cosmos_profile):
    profile = cosmos_profile.model_copy(update={"details": {"url": "wss://x"}})
    session = ConnectionSession(fake_executor)

    await session.select_connection(profile)

    assert session.connection_state is ConnectionState.ERROR
    assert "accessKey" in str(session.connection_error)
    fake_executor.execute.assert_not_awaited()


@pytest.mark.asyncio
async def test_select_fetches_schema(fake_executor, local_profile):
    session = ConnectionSession(fake_executor)

    state = await session.select_connection(local_profile)

    assert state is ConnectionState.CONNECTED
    assert session.schema.vertex_labels == ["person", "software"]
    assert session.schema.edge_labels == ["knows", "created"]
    fake_executor.execute.assert_awaited_once_with("local", local_profile.details)


@pytest.mark.asyncio
async def test_schema_failure_envelope(local_profile):
    executor = AsyncMock()
    executor.execute = AsyncMock(return_value={"success": False, "error": "Connection refused"})
    session = ConnectionSession(executor)

    await session.select_connection(local_profile)

    assert session.connection_state is ConnectionState.ERROR
    assert str(session.connection_error) == "Connection refused"
    assert session.schema is None


@pytest.mark.asyncio
async def test_schema_executor_raises(local_profile):
    executor = AsyncMock()
    executor.execute = AsyncMock(side_effect=OSError("socket closed"))
    session = ConnectionSession(executor)

    await session.select_connection(local_profile)

    assert session.connection_state is ConnectionState.ERROR
    assert "socket closed" in str(session.connection_error)


@pytest.mark.asyncio
async def test_stale_schema_response_discarded():
    executor = GatedExecutor()
    slow = ConnectionProfile(id="a", name="A", type="local", details={"url": "ws://a"})
    fast = ConnectionProfile(id="b", name="B", type="local", details={"url": "ws://b"})
    gate = executor.hold("schema:ws://a", {"success": True, "result": {"vertexLabels": ["stale"], "edgeLabels": []}})
    executor.responses["schema:ws://b"] = {"success": True, "result": {"vertexLabels": ["fresh"], "edgeLabels": []}}
    session = ConnectionSession(executor)

    first = asyncio.create_task(session.select_connection(slow))
    await _settle()
    await session.select_connection(fast)
    gate.set()
    await first

    assert session.profile.id == "b"
    assert session.connection_state is ConnectionState.CONNECTED
    assert session.schema.vertex_labels == ["fresh"]


@pytest.mark.asyncio
async def test_select_resets_query_state(fake_executor, local_profile):
    session = ConnectionSession(fake_executor)
    await session.select_connection(local_profile)
    await session.submit_query("g.V()")
    session.hover_node("1")

    await session.select_connection(local_profile)

    assert session.query_result is None
    assert session.query_succeeded is None
    assert session.hovered_node_id is None
    assert session.selected_node_data is None


# ── queries ──────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_submit_without_connection_is_noop(fake_executor):
    session = ConnectionSession(fake_executor)
    assert await session.submit_query("g.V()") is None
    assert session.history.entries == []
    fake_executor.execute.assert_not_awaited()


@pytest.mark.asyncio
async def test_blank_query_not_dispatched(fake_executor, local_profile):
    session = ConnectionSession(fake_executor)
    await session.select_connection(local_profile)
    fake_executor.execute.reset_mock()

    assert await session.submit_query("   ") is None
    fake_executor.execute.assert_not_awaited()
    assert session.history.entries == []


@pytest.mark.asyncio
async def test_submit_success(fake_executor, local_profile, modern_result, memory_store):
    fake_executor.execute = AsyncMock(
        side_effect=lambda t, d, q=None: {"success": True, "result": modern_result}
    )
    session = ConnectionSession(fake_executor, history_store=memory_store)
    session.profile = local_profile

    assert await session.submit_query("  g.V().bothE()  ") is True

    fake_executor.execute.assert_awaited_once_with("local", local_profile.details, "g.V().bothE()")
    assert session.query_state is QueryState.IDLE
    assert session.query_result == modern_result
    assert session.query_error is None
    assert session.query_elapsed_ms is not None
    assert session.history.entries == ["g.V().bothE()"]
    assert await memory_store.get("gremlin_query_history") == ["g.V().bothE()"]


@pytest.mark.asyncio
async def test_submit_failure_sets_query_error(local_profile):
    executor = AsyncMock()
    executor.execute = AsyncMock(return_value={"success": False, "error": "No such property: x"})
    session = ConnectionSession(executor)
    session.profile = local_profile

    assert await session.submit_query("g.V().x()") is False

    assert isinstance(session.query_error, QueryError)
    assert str(session.query_error) == "No such property: x"
    assert session.query_result is None
    assert session.history.entries == ["g.V().x()"]


@pytest.mark.asyncio
async def test_submit_executor_raises(local_profile):
    executor = AsyncMock()
    executor.execute = AsyncMock(side_effect=TimeoutError())
    session = ConnectionSession(executor)
    session.profile = local_profile

    assert await session.submit_query("g.V()") is False
    assert str(session.query_error) == "TimeoutError"


@pytest.mark.asyncio
async def test_submit_with_incomplete_profile_skips_dispatch(fake_executor):
    session = ConnectionSession(fake_executor)
    session.profile = ConnectionProfile(name="x", type="local", details={})

    assert await session.submit_query("g.V()") is False
    fake_executor.execute.assert_not_awaited()
    assert session.history.entries == ["g.V()"]


@pytest.mark.asyncio
async def test_history_persist_failure_is_not_raised(fake_executor, local_profile):
    store = AsyncMock()
    store.set = AsyncMock(side_effect=ConnectionRefusedError("redis down"))
    session = ConnectionSession(fake_executor, history_store=store)
    session.profile = local_profile

    assert await session.submit_query("g.V()") is True
    assert session.history.entries == ["g.V()"]


@pytest.mark.asyncio
async def test_last_issued_query_wins(local_profile):
    executor = GatedExecutor()
    gate = executor.hold("g.V().slow()", {"success": True, "result": ["slow"]})
    executor.responses["g.V().fast()"] = {"success": True, "result": ["fast"]}
    session = ConnectionSession(executor)
    session.profile = local_profile

    first = asyncio.create_task(session.submit_query("g.V().slow()"))
    await _settle()
    assert session.query_state is QueryState.RUNNING
    assert await session.submit_query("g.V().fast()") is True
    gate.set()
    assert await first is None

    assert session.query_result == ["fast"]
    assert session.last_query == "g.V().fast()"
    assert session.query_state is QueryState.IDLE
    assert session.history.entries == ["g.V().fast()", "g.V().slow()"]


# ── node events ──────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_click_node_fetches_then_caches(fake_executor, local_profile):
    session = ConnectionSession(fake_executor)
    session.profile = local_profile

    first = await session.click_node("1")
    second = await session.click_node("1")

    assert first == second
    assert first["success"] is True
    assert fake_executor.execute.await_count == 1
    fake_executor.execute.assert_awaited_with("local", local_profile.details, "g.V(1)")
    assert session.selected_node_data == first
    assert session.node_detail_loading is False


@pytest.mark.asyncio
async def test_click_node_zero_padded_id_is_string(fake_executor, local_profile):
    session = ConnectionSession(fake_executor)
    session.profile = local_profile

    await session.click_node("007")
    await session.click_node("abc-1")

    queries = [call.args[2] for call in fake_executor.execute.await_args_list]
    assert queries == ["g.V('007')", "g.V('abc-1')"]


@pytest.mark.asyncio
async def test_click_node_failure_is_cached(local_profile):
    executor = AsyncMock()
    executor.execute = AsyncMock(return_value={"success": False, "error": "vertex lookup exploded"})
    session = ConnectionSession(executor)
    session.profile = local_profile

    payload = await session.click_node("5")
    again = await session.click_node("5")

    assert payload == {"error": "vertex lookup exploded"}
    assert again == payload
    assert executor.execute.await_count == 1
    assert session.selected_node_data == payload


@pytest.mark.asyncio
async def test_click_without_connection(fake_executor):
    session = ConnectionSession(fake_executor)
    assert await session.click_node("1") is None
    fake_executor.execute.assert_not_awaited()


@pytest.mark.asyncio
async def test_stale_detail_not_presented_but_cached(local_profile):
    executor = GatedExecutor()
    gate = executor.hold("g.V(1)", {"success": True, "result": ["one"]})
    executor.responses["g.V(2)"] = {"success": True, "result": ["two"]}
    session = ConnectionSession(executor)
    session.profile = local_profile

    first = asyncio.create_task(session.click_node("1"))
    await _settle()
    assert session.node_detail_loading is True
    await session.click_node("2")
    gate.set()
    await first

    assert session.selected_node_data["result"] == ["two"]
    assert session.detail_cache.get("1")["result"] == ["one"]


@pytest.mark.asyncio
async def test_detail_from_previous_connection_not_cached(local_profile):
    executor = GatedExecutor()
    gate = executor.hold("g.V(1)", {"success": True, "result": ["old"]})
    session = ConnectionSession(executor)
    session.profile = local_profile

    pending = asyncio.create_task(session.click_node("1"))
    await _settle()
    await session.select_connection(local_profile)
    gate.set()
    await pending

    assert session.detail_cache.get("1") is MISS
    assert session.selected_node_data is None


@pytest.mark.asyncio
async def test_switching_connection_drops_cached_details(local_profile):
    other = local_profile.model_copy(update={"id": "local-2", "details": {"url": "ws://other:8182/gremlin"}})
    executor = AsyncMock()
    executor.execute = AsyncMock(return_value={"success": True, "result": {"vertexLabels": [], "edgeLabels": []}})
    session = ConnectionSession(executor)

    await session.select_connection(local_profile)
    executor.execute.return_value = {"success": True, "result": [{"id": 1, "label": "graph-a"}]}
    await session.click_node("1")

    executor.execute.return_value = {"success": True, "result": {"vertexLabels": [], "edgeLabels": []}}
    await session.select_connection(other)
    executor.execute.reset_mock()
    executor.execute.return_value = {"success": True, "result": [{"id": 1, "label": "graph-b"}]}
    await session.click_node("1")

    executor.execute.assert_awaited_once_with("local", other.details, "g.V(1)")
    assert session.selected_node_data["result"][0]["label"] == "graph-b"


def test_hover_node(fake_executor):
    session = ConnectionSession(fake_executor)
    session.hover_node(3)
    assert session.hovered_node_id == "3"
    session.hover_node(None)
    assert session.hovered_node_id is None


# ── labels / lifecycle ───────────────────────────────────────────────


@pytest.mark.asyncio
async def test_create_label_refreshes_schema(fake_executor, local_profile):
    session = ConnectionSession(fake_executor)
    await session.select_connection(local_profile)
    fake_executor.execute.reset_mock()

    assert await session.create_label("company", "vertex") is True

    calls = [call.args for call in fake_executor.execute.await_args_list]
    assert calls[0] == ("local", local_profile.details, "g.addV('company')")
    assert calls[1] == ("local", local_profile.details)
    assert session.connection_state is ConnectionState.CONNECTED


@pytest.mark.asyncio
async def test_create_label_failure(local_profile):
    executor = AsyncMock()
    executor.execute = AsyncMock(return_value={"success": False, "error": "read only"})
    session = ConnectionSession(executor)
    session.profile = local_profile

    assert await session.create_label("company", "edge") is False
    assert str(session.query_error) == "read only"
    assert executor.execute.await_count == 1


@pytest.mark.asyncio
async def test_close_discards_cache(fake_executor, local_profile):
    cache = VertexDetailCache()
    session = ConnectionSession(fake_executor, detail_cache=cache)
    session.profile = local_profile
    await session.click_node("1")

    session.close()

    assert len(cache) == 0
    assert session.closed is True


@pytest.mark.asyncio
async def test_activity_and_snapshot(fake_executor, local_profile):
    session = ConnectionSession(fake_executor)
    await session.select_connection(local_profile)
    await session.submit_query("g.V()")

    snap = session.snapshot()
    assert snap["connection_state"] == "connected"
    assert snap["query_state"] == "query_idle"
    assert snap["schema"] == {"vertex_labels": ["person", "software"], "edge_labels": ["knows", "created"]}
    assert snap["history"] == ["g.V()"]

    entries = session.activity.entries
    assert entries[0].type == "query"
    assert entries[0].success is True
    assert entries[-1].type == "connection"
    assert all("secret" not in str(e.details) for e in entries)
