"""Shared test fixtures."""

from __future__ import annotations

import re
from typing import Any
from unittest.mock import AsyncMock

import pytest


@pytest.fixture(autouse=True)
def _env_setup(monkeypatch):
    """Set required environment variables for tests."""
    monkeypatch.setenv("REDIS_URL", "redis://localhost:6379/0")
    monkeypatch.setenv("CONNECTIONS_SECRET_KEY", "test-secret")
    monkeypatch.setenv("DEFAULT_SERVER_URL", "ws://localhost:8182/gremlin")
    monkeypatch.setenv("LOG_FORMAT", "console")


@pytest.fixture
def settings():
    from src.config import Settings

    return Settings(CONNECTIONS_SECRET_KEY="test-secret", QUERY_HISTORY_LIMIT=20)


@pytest.fixture
def memory_store():
    from src.services.kv_store import MemoryStore

    return MemoryStore()


VERTEX_LOOKUP = re.compile(r"^g\.V\([^()]+\)$")
SCHEMA_RESULT = {"vertexLabels": ["person", "software"], "edgeLabels": ["knows", "created"]}


def _default_response(connection_type: str, details: dict, query: str | None = None) -> dict[str, Any]:
    if query is None:
        return {"success": True, "result": SCHEMA_RESULT}
    if VERTEX_LOOKUP.match(query):
        return {"success": True, "result": [{"id": 1, "label": "person", "properties": {}}]}
    return {"success": True, "result": []}


@pytest.fixture
def fake_executor():
    """Executor double: schema calls return ``SCHEMA_RESULT``, queries return an empty list."""
    executor = AsyncMock()
    executor.execute = AsyncMock(side_effect=_default_response)
    return executor


@pytest.fixture
def local_profile():
    from src.models.schemas import ConnectionProfile

    return ConnectionProfile(id="local-1", name="Local", type="local", details={"url": "ws://localhost:8182/gremlin"})


@pytest.fixture
def cosmos_profile():
    from src.models.schemas import ConnectionProfile

    return ConnectionProfile(
        id="cosmos-1",
        name="Cosmos",
        type="cosmos",
        details={
            "url": "wss://example.gremlin.cosmos.azure.com:443/",
            "accessKey": "secret-key",
            "dbName": "db",
            "graphName": "graph",
        },
    )


@pytest.fixture
def modern_result() -> list[dict[str, Any]]:
    """``g.V().bothE()``-style mixed result: two vertices and one edge between them."""
    return [
        {"id": 1, "label": "person", "type": "vertex", "properties": {"name": [{"id": 0, "value": "marko"}]}},
        {"id": 2, "label": "person", "type": "vertex", "properties": {"name": [{"id": 2, "value": "vadas"}]}},
        {
            "id": 7,
            "label": "knows",
            "type": "edge",
            "outV": 1,
            "outVLabel": "person",
            "inV": 2,
            "inVLabel": "person",
            "properties": {"weight": [{"value": 0.5}]},
        },
    ]


@pytest.fixture
def path_result() -> list[dict[str, Any]]:
    """``g.V(1).outE().inV().path()`` result."""
    return [
        {
            "labels": [[], [], []],
            "objects": [
                {"id": 1, "label": "person", "properties": {"name": [{"value": "marko"}]}},
                {"id": 9, "label": "created", "outV": 1, "inV": 3, "properties": {}},
                {"id": 3, "label": "software", "properties": {"name": [{"value": "lop"}]}},
            ],
        }
    ]
