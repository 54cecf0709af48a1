"""API client for the gxplorer backend."""

from __future__ import annotations

from typing import Any

import requests


def get_base_url() -> str:
    """Backend API base URL (no trailing slash)."""
    import os
    return (os.environ.get("GXPLORER_API_URL") or "http://localhost:8000").rstrip("/")


def _url(path: str) -> str:
    return f"{get_base_url()}/api/v1{path}"


def health() -> dict[str, Any]:
    """GET /api/v1/health."""
    r = requests.get(_url("/health"), timeout=5)
    r.raise_for_status()
    return r.json()


def ready() -> dict[str, Any]:
    """GET /api/v1/ready."""
    r = requests.get(_url("/ready"), timeout=5)
    r.raise_for_status()
    return r.json()


# ----- Connections -----


def list_connections() -> list[dict[str, Any]]:
    r = requests.get(_url("/connections"), timeout=10)
    r.raise_for_status()
    return r.json()


def create_connection(name: str, type: str, details: dict[str, Any]) -> dict[str, Any]:
    """POST /api/v1/connections — returns the stored profile with its id."""
    r = requests.post(_url("/connections"), json={"name": name, "type": type, "details": details}, timeout=10)
    r.raise_for_status()
    return r.json()


def update_connection(connection_id: str, **changes: Any) -> dict[str, Any]:
    r = requests.put(_url(f"/connections/{connection_id}"), json=changes, timeout=10)
    r.raise_for_status()
    return r.json()


def delete_connection(connection_id: str) -> dict[str, Any]:
    r = requests.delete(_url(f"/connections/{connection_id}"), timeout=10)
    r.raise_for_status()
    return r.json()


# ----- Sessions -----


def start_session() -> dict[str, Any]:
    """POST /api/v1/sessions — new session with persisted query history loaded."""
    r = requests.post(_url("/sessions"), timeout=10)
    r.raise_for_status()
    return r.json()


def get_session(session_id: str) -> dict[str, Any]:
    r = requests.get(_url(f"/sessions/{session_id}"), timeout=10)
    r.raise_for_status()
    return r.json()


def end_session(session_id: str) -> dict[str, Any]:
    r = requests.delete(_url(f"/sessions/{session_id}"), timeout=10)
    r.raise_for_status()
    return r.json()


def select_connection(session_id: str, connection_id: str) -> dict[str, Any]:
    """POST /api/v1/sessions/{id}/connection — select a profile and fetch its schema."""
    r = requests.post(
        _url(f"/sessions/{session_id}/connection"),
        json={"connection_id": connection_id},
        timeout=60,
    )
    r.raise_for_status()
    return r.json()


def refresh_schema(session_id: str) -> dict[str, Any]:
    r = requests.post(_url(f"/sessions/{session_id}/schema"), timeout=60)
    r.raise_for_status()
    return r.json()


def submit_query(session_id: str, query: str) -> dict[str, Any]:
    r = requests.post(_url(f"/sessions/{session_id}/query"), json={"query": query}, timeout=300)
    r.raise_for_status()
    return r.json()


def clear_history(session_id: str) -> dict[str, Any]:
    r = requests.delete(_url(f"/sessions/{session_id}/history"), timeout=10)
    r.raise_for_status()
    return r.json()


def get_graph(session_id: str) -> dict[str, Any]:
    """GET /api/v1/sessions/{id}/graph — render elements and counts."""
    r = requests.get(_url(f"/sessions/{session_id}/graph"), timeout=30)
    r.raise_for_status()
    return r.json()


def export_graph(session_id: str, format: str = "png") -> bytes:
    """GET /api/v1/sessions/{id}/graph/export?format=json|graphml|png|jpeg."""
    r = requests.get(_url(f"/sessions/{session_id}/graph/export"), params={"format": format}, timeout=60)
    r.raise_for_status()
    return r.content


def click_node(session_id: str, vertex_id: str) -> dict[str, Any]:
    r = requests.post(_url(f"/sessions/{session_id}/nodes/{vertex_id}/click"), timeout=60)
    r.raise_for_status()
    return r.json()


def hover_node(session_id: str, vertex_id: str | None) -> dict[str, Any]:
    r = requests.post(_url(f"/sessions/{session_id}/hover"), json={"vertex_id": vertex_id}, timeout=10)
    r.raise_for_status()
    return r.json()


def create_label(session_id: str, label: str, kind: str = "vertex") -> dict[str, Any]:
    r = requests.post(_url(f"/sessions/{session_id}/labels"), json={"label": label, "kind": kind}, timeout=60)
    r.raise_for_status()
    return r.json()


def get_activity(session_id: str) -> list[dict[str, Any]]:
    r = requests.get(_url(f"/sessions/{session_id}/activity"), timeout=10)
    r.raise_for_status()
    return r.json().get("entries", [])
