"""Shared FastAPI dependency injection."""

from __future__ import annotations

from src.services.connection_store import ConnectionStore
from src.services.gremlin_service import GremlinService
from src.services.kv_store import KeyValueStore
from src.services.session_manager import SessionManager

_store: KeyValueStore | None = None
_connection_store: ConnectionStore | None = None
_gremlin_service: GremlinService | None = None
_session_manager: SessionManager | None = None


def set_store(store: KeyValueStore | None) -> None:
    global _store
    _store = store


def set_connection_store(store: ConnectionStore | None) -> None:
    global _connection_store
    _connection_store = store


def set_gremlin_service(service: GremlinService | None) -> None:
    global _gremlin_service
    _gremlin_service = service


def set_session_manager(manager: SessionManager | None) -> None:
    global _session_manager
    _session_manager = manager


def get_store() -> KeyValueStore:
    if _store is None:
        raise RuntimeError("Key-value store not initialized")
    return _store


def get_connection_store() -> ConnectionStore:
    if _connection_store is None:
        raise RuntimeError("Connection store not initialized")
    return _connection_store


def get_gremlin_service() -> GremlinService:
    if _gremlin_service is None:
        raise RuntimeError("Gremlin service not initialized")
    return _gremlin_service


def get_session_manager() -> SessionManager:
    if _session_manager is None:
        raise RuntimeError("Session manager not initialized")
    return _session_manager
