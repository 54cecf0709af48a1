"""Explorer session endpoints: connection selection, queries, graph and node events."""

from __future__ import annotations

import asyncio
from typing import Literal

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import Response

from src.api.dependencies import get_connection_store, get_session_manager
from src.api.graph_image import render_graph_image
from src.api.v1.schemas.session import (
    ActivityResponse,
    CreateLabelRequest,
    GraphElementsResponse,
    HistoryResponse,
    HoverRequest,
    NodeDetailResponse,
    QueryRequest,
    SelectConnectionRequest,
    SessionState,
)
from src.explorer.session import ConnectionSession, QueryState
from src.graph.export import split_elements, to_graphml, to_json
from src.graph.projector import project_raw, sanitize_data
from src.models.graph import RenderEdge, RenderNode
from src.services.connection_store import ConnectionStore
from src.services.session_manager import SessionManager
from src.utils.exceptions import ProfileNotFoundError, SessionNotFoundError, StoreError
from src.utils.logging import get_logger

logger = get_logger(__name__)
router = APIRouter(prefix="/sessions", tags=["sessions"])

_MEDIA_TYPES = {
    "json": "application/json",
    "graphml": "application/xml",
    "png": "image/png",
    "jpeg": "image/jpeg",
}


def _session(session_id: str, manager: SessionManager) -> ConnectionSession:
    try:
        return manager.get(session_id)
    except SessionNotFoundError:
        raise HTTPException(status_code=404, detail="Session not found")


def _state(session: ConnectionSession) -> SessionState:
    return SessionState.model_validate(session.snapshot())


def _elements(session: ConnectionSession) -> list[RenderNode | RenderEdge]:
    if not session.query_succeeded or session.query_state is QueryState.RUNNING:
        return []
    return project_raw(session.query_result)


@router.post("", response_model=SessionState, status_code=201)
async def start_session(manager: SessionManager = Depends(get_session_manager)) -> SessionState:
    session = await manager.create()
    return _state(session)


@router.get("/{session_id}", response_model=SessionState)
async def get_session(session_id: str, manager: SessionManager = Depends(get_session_manager)) -> SessionState:
    return _state(_session(session_id, manager))


@router.delete("/{session_id}", status_code=200)
async def end_session(session_id: str, manager: SessionManager = Depends(get_session_manager)) -> dict:
    try:
        manager.close(session_id)
    except SessionNotFoundError:
        raise HTTPException(status_code=404, detail="Session not found")
    return {"session_id": session_id, "closed": True}


@router.post("/{session_id}/connection", response_model=SessionState)
async def select_connection(
    session_id: str,
    request: SelectConnectionRequest,
    manager: SessionManager = Depends(get_session_manager),
    store: ConnectionStore = Depends(get_connection_store),
) -> SessionState:
    session = _session(session_id, manager)
    try:
        profile = await store.get(request.connection_id)
    except ProfileNotFoundError:
        raise HTTPException(status_code=404, detail="Connection not found")
    except StoreError as exc:
        logger.error("connection_store_failed", error=str(exc))
        raise HTTPException(status_code=503, detail="Connection store unavailable")
    await session.select_connection(profile)
    return _state(session)


@router.post("/{session_id}/schema", response_model=SessionState)
async def refresh_schema(session_id: str, manager: SessionManager = Depends(get_session_manager)) -> SessionState:
    session = _session(session_id, manager)
    await session.refresh_schema()
    return _state(session)


@router.post("/{session_id}/query", response_model=SessionState)
async def submit_query(
    session_id: str,
    request: QueryRequest,
    manager: SessionManager = Depends(get_session_manager),
) -> SessionState:
    session = _session(session_id, manager)
    if session.profile is None:
        raise HTTPException(status_code=409, detail="No connection selected")
    await session.submit_query(request.query)
    return _state(session)


@router.get("/{session_id}/history", response_model=HistoryResponse)
async def get_history(session_id: str, manager: SessionManager = Depends(get_session_manager)) -> HistoryResponse:
    session = _session(session_id, manager)
    return HistoryResponse(session_id=session_id, history=session.history.entries)


@router.delete("/{session_id}/history", response_model=HistoryResponse)
async def clear_history(session_id: str, manager: SessionManager = Depends(get_session_manager)) -> HistoryResponse:
    session = _session(session_id, manager)
    await session.clear_history()
    return HistoryResponse(session_id=session_id, history=session.history.entries)


@router.get("/{session_id}/graph", response_model=GraphElementsResponse)
async def get_graph(session_id: str, manager: SessionManager = Depends(get_session_manager)) -> GraphElementsResponse:
    """Projected render elements for the last successful query."""
    session = _session(session_id, manager)
    elements = _elements(session)
    nodes, edges = split_elements(elements)
    hovered = next((n for n in nodes if n.id == session.hovered_node_id), None)
    return GraphElementsResponse(
        session_id=session_id,
        elements=elements,
        node_count=len(nodes),
        edge_count=len(edges),
        hovered_node_id=session.hovered_node_id,
        hovered_node=sanitize_data(hovered.to_cytoscape()["data"]) if hovered else None,
    )


@router.get("/{session_id}/graph/export")
async def export_graph(
    session_id: str,
    format: Literal["json", "graphml", "png", "jpeg"] = "json",
    manager: SessionManager = Depends(get_session_manager),
) -> Response:
    """Export the current graph as JSON, GraphML or a rendered image."""
    session = _session(session_id, manager)
    elements = _elements(session)

    if format == "json":
        content: str | bytes = to_json(elements)
    elif format == "graphml":
        content = to_graphml(elements)
    else:
        content = await asyncio.to_thread(render_graph_image, elements, format)

    extension = "jpg" if format == "jpeg" else format
    return Response(
        content=content,
        media_type=_MEDIA_TYPES[format],
        headers={"Content-Disposition": f"attachment; filename=graph_{session_id}.{extension}"},
    )


@router.post("/{session_id}/nodes/{vertex_id}/click", response_model=NodeDetailResponse)
async def click_node(
    session_id: str,
    vertex_id: str,
    manager: SessionManager = Depends(get_session_manager),
) -> NodeDetailResponse:
    session = _session(session_id, manager)
    if session.profile is None:
        raise HTTPException(status_code=409, detail="No connection selected")
    data = await session.click_node(vertex_id)
    return NodeDetailResponse(session_id=session_id, vertex_id=vertex_id, data=data)


@router.post("/{session_id}/hover", response_model=SessionState)
async def hover_node(
    session_id: str,
    request: HoverRequest,
    manager: SessionManager = Depends(get_session_manager),
) -> SessionState:
    session = _session(session_id, manager)
    session.hover_node(request.vertex_id)
    return _state(session)


@router.post("/{session_id}/labels", response_model=SessionState)
async def create_label(
    session_id: str,
    request: CreateLabelRequest,
    manager: SessionManager = Depends(get_session_manager),
) -> SessionState:
    session = _session(session_id, manager)
    if session.profile is None:
        raise HTTPException(status_code=409, detail="No connection selected")
    await session.create_label(request.label, request.kind)
    return _state(session)


@router.get("/{session_id}/activity", response_model=ActivityResponse)
async def get_activity(session_id: str, manager: SessionManager = Depends(get_session_manager)) -> ActivityResponse:
    session = _session(session_id, manager)
    return ActivityResponse(session_id=session_id, entries=session.activity.entries)
