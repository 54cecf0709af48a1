"""Request/response models for the Gremlin bridge."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class GremlinRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    type: str = Field(..., examples=["local"])
    url: str | None = Field(default=None, examples=["ws://localhost:8182/gremlin"])
    query: str | None = Field(default=None, examples=["g.V().limit(10)"])
    access_key: str | None = Field(default=None, alias="accessKey")
    db_name: str | None = Field(default=None, alias="dbName")
    graph_name: str | None = Field(default=None, alias="graphName")

    def details(self) -> dict[str, Any]:
        """Connection details in the profile ``details`` shape."""
        raw = {
            "url": self.url,
            "accessKey": self.access_key,
            "dbName": self.db_name,
            "graphName": self.graph_name,
        }
        return {k: v for k, v in raw.items() if v is not None}


class GremlinResponse(BaseModel):
    success: bool
    result: Any = None
    error: str | None = None
