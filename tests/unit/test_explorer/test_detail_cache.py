"""Unit tests for the vertex detail cache and activity log."""

from __future__ import annotations

from src.explorer.activity import ActivityLog
from src.explorer.detail_cache import MISS, VertexDetailCache


def test_miss_then_hit():
    cache = VertexDetailCache()
    assert cache.get("1") is MISS
    assert cache.set("1", {"success": True}) is True
    assert cache.get("1") == {"success": True}
    assert "1" in cache


def test_write_once():
    cache = VertexDetailCache()
    cache.set("1", {"error": "boom"})
    assert cache.set("1", {"success": True}) is False
    assert cache.get("1") == {"error": "boom"}


def test_falsy_values_are_hits():
    cache = VertexDetailCache()
    cache.set(0, [])
    assert cache.get(0) == []
    assert cache.get(0) is not MISS


def test_keys_are_not_coerced():
    cache = VertexDetailCache()
    cache.set(1, "int")
    assert cache.get("1") is MISS


def test_clear():
    cache = VertexDetailCache()
    cache.set("a", 1)
    cache.clear()
    assert len(cache) == 0
    assert not MISS


def test_activity_log_newest_first():
    log = ActivityLog()
    first = log.record("connection", "Selected")
    second = log.record("error", "boom", success=False, query="g.V(")
    assert (first.id, second.id) == (1, 2)
    assert [e.message for e in log.entries] == ["boom", "Selected"]
    assert log.entries[0].success is False
    assert len(log) == 2
