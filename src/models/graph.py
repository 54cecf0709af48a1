"""Canonical graph element models shared by the normalizer, projector and renderers."""

from __future__ import annotations

from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, Field


# ── Canonical elements (normalizer output) ───────────────────────────


class Vertex(BaseModel):
    id: str
    label: str = ""
    properties: dict[str, Any] = Field(default_factory=dict)


class Edge(BaseModel):
    id: str
    label: str = ""
    source_id: str = ""
    target_id: str = ""
    properties: dict[str, Any] = Field(default_factory=dict)


class NormalizedGraph(BaseModel):
    vertices: list[Vertex] = Field(default_factory=list)
    edges: list[Edge] = Field(default_factory=list)


# ── Render elements (projector output) ───────────────────────────────


class RenderNode(BaseModel):
    group: Literal["nodes"] = "nodes"
    id: str
    label: str = ""
    color: str
    properties: dict[str, Any] = Field(default_factory=dict)
    raw_properties: dict[str, Any] = Field(default_factory=dict)

    def to_cytoscape(self) -> dict[str, Any]:
        """Element dict in the shape browser graph libraries (Cytoscape.js) consume."""
        return {
            "group": self.group,
            "data": {
                **self.properties,
                "id": self.id,
                "label": self.label,
                "color": self.color,
                "rawProperties": self.raw_properties,
            },
        }


class RenderEdge(BaseModel):
    group: Literal["edges"] = "edges"
    id: str
    source: str
    target: str
    label: str = ""
    properties: dict[str, Any] = Field(default_factory=dict)

    def to_cytoscape(self) -> dict[str, Any]:
        return {
            "group": self.group,
            "data": {
                **self.properties,
                "id": self.id,
                "source": self.source,
                "target": self.target,
                "label": self.label,
            },
        }


RenderElement = Annotated[Union[RenderNode, RenderEdge], Field(discriminator="group")]
