"""Request/response models for the explorer session API."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, Field

from src.explorer.activity import ActivityEntry
from src.models.graph import RenderElement


class SessionState(BaseModel):
    session_id: str
    created_at: datetime
    connection_id: str | None = None
    connection_name: str | None = None
    connection_state: Literal["idle", "connecting", "connected", "error"] = "idle"
    connection_error: str | None = None
    schema_: dict[str, list[str]] | None = Field(default=None, alias="schema")
    query_state: Literal["query_idle", "query_running"] = "query_idle"
    last_query: str | None = None
    query_result: Any = None
    query_error: str | None = None
    query_succeeded: bool | None = None
    query_elapsed_ms: float | None = None
    history: list[str] = Field(default_factory=list)
    selected_node_id: str | None = None
    selected_node_data: Any = None
    node_detail_loading: bool = False
    hovered_node_id: str | None = None

    model_config = {"populate_by_name": True}


class SelectConnectionRequest(BaseModel):
    connection_id: str = Field(..., min_length=1)


class QueryRequest(BaseModel):
    query: str = Field(..., examples=["g.V().limit(10)"])


class HoverRequest(BaseModel):
    vertex_id: str | None = None


class CreateLabelRequest(BaseModel):
    label: str = Field(..., min_length=1, examples=["person"])
    kind: Literal["vertex", "edge"] = "vertex"


class HistoryResponse(BaseModel):
    session_id: str
    history: list[str] = Field(default_factory=list)


class GraphElementsResponse(BaseModel):
    session_id: str
    elements: list[RenderElement] = Field(default_factory=list)
    node_count: int = 0
    edge_count: int = 0
    hovered_node_id: str | None = None
    hovered_node: dict[str, Any] | None = None


class NodeDetailResponse(BaseModel):
    session_id: str
    vertex_id: str
    data: Any = None


class ActivityResponse(BaseModel):
    session_id: str
    entries: list[ActivityEntry] = Field(default_factory=list)
