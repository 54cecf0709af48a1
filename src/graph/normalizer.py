"""Reduce loosely typed Gremlin responses to a canonical vertex/edge graph.

Gremlin servers and drivers return traversal results in many shapes:
plain vertex and edge records, TinkerPop ``{"type": "vertex"}`` records,
paths (``{"labels": [...], "objects": [...]}``), value maps, aggregates,
and driver collections wrapped in ``{"_items": [...]}``. Everything here is
a pure function of its input and never raises on malformed data; items
that match no known shape contribute nothing.

Recognized shapes, first match wins:

1. a mapping with ``nodes`` and ``edges`` lists (pre-classified input);
2. a list of items, each classified by :func:`classify`;
3. anything else yields an empty graph.
"""

from __future__ import annotations

import enum
import json
from typing import Any, Mapping

from src.models.graph import Edge, NormalizedGraph, Vertex


class ItemKind(str, enum.Enum):
    VERTEX = "vertex"
    EDGE = "edge"
    PATH = "path"
    UNKNOWN = "unknown"


def is_edge_shaped(item: Any) -> bool:
    return isinstance(item, Mapping) and (
        ("source" in item and "target" in item) or ("outV" in item and "inV" in item)
    )


def is_vertex_shaped(item: Any) -> bool:
    return (
        isinstance(item, Mapping)
        and "id" in item
        and "label" in item
        and not is_edge_shaped(item)
    )


def classify(item: Any) -> ItemKind:
    """Classify one result item by structural predicates, in priority order:

    1. edge: ``source`` + ``target`` or ``outV`` + ``inV``
    2. vertex: ``id`` + ``label``
    3. TinkerPop record: ``type`` of ``"vertex"`` or ``"edge"``
    4. path: an ``objects`` list
    """
    if not isinstance(item, Mapping):
        return ItemKind.UNKNOWN
    if is_edge_shaped(item):
        return ItemKind.EDGE
    if is_vertex_shaped(item):
        return ItemKind.VERTEX
    if item.get("type") == "vertex":
        return ItemKind.VERTEX
    if item.get("type") == "edge":
        return ItemKind.EDGE
    if isinstance(item.get("objects"), list):
        return ItemKind.PATH
    return ItemKind.UNKNOWN


def stringify_id(value: Any) -> str | None:
    """Canonical string form of an element id, or None when there is no id.

    Renders like JavaScript's ``String()`` for scalars so ids stay stable
    between the browser and the API; composite ids become sorted-key JSON.
    """
    if value is None:
        return None
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (Mapping, list, tuple)):
        try:
            return json.dumps(value, sort_keys=True, default=str, separators=(",", ":"))
        except (TypeError, ValueError, RecursionError):
            return str(value)
    text = str(value)
    return text or None


def _label(value: Any) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


def _properties(value: Any) -> dict[str, Any]:
    if isinstance(value, Mapping):
        return {str(k): v for k, v in value.items()}
    return {}


def _endpoint_id(item: Mapping[str, Any], primary: str, fallback: str) -> str:
    raw = item[primary] if primary in item else item.get(fallback)
    if isinstance(raw, Mapping) and raw.get("id") not in (None, ""):
        raw = raw["id"]
    return stringify_id(raw) or ""


class _GraphAccumulator:
    """Insertion-ordered, first-seen-wins vertex and edge maps."""

    def __init__(self) -> None:
        self.vertices: dict[str, Vertex] = {}
        self.edges: dict[str, Edge] = {}

    def add_vertex(self, item: Any) -> None:
        if not isinstance(item, Mapping):
            return
        vid = stringify_id(item.get("id"))
        if vid is None or vid in self.vertices:
            return
        self.vertices[vid] = Vertex(
            id=vid,
            label=_label(item.get("label")),
            properties=_properties(item.get("properties")),
        )

    def add_edge(self, item: Any) -> None:
        if not isinstance(item, Mapping):
            return
        eid = stringify_id(item.get("id"))
        if eid is None or eid in self.edges:
            return
        self.edges[eid] = Edge(
            id=eid,
            label=_label(item.get("label")),
            source_id=_endpoint_id(item, "outV", "source"),
            target_id=_endpoint_id(item, "inV", "target"),
            properties=_properties(item.get("properties")),
        )

    def add_edge_with_endpoints(self, item: Mapping[str, Any]) -> None:
        """Add an edge plus synthetic vertices for endpoints it embeds or labels."""
        self.add_edge(item)
        for end in ("outV", "inV"):
            endpoint = item.get(end)
            if isinstance(endpoint, Mapping):
                self.add_vertex(endpoint)
            elif endpoint not in (None, "") and item.get(f"{end}Label"):
                self.add_vertex({"id": endpoint, "label": item[f"{end}Label"]})

    def add_item(self, item: Any) -> None:
        kind = classify(item)
        if kind is ItemKind.EDGE:
            if is_edge_shaped(item):
                self.add_edge_with_endpoints(item)
            else:
                self.add_edge(item)
        elif kind is ItemKind.VERTEX:
            self.add_vertex(item)
        elif kind is ItemKind.PATH:
            for obj in item["objects"]:
                if is_vertex_shaped(obj):
                    self.add_vertex(obj)
                if is_edge_shaped(obj):
                    self.add_edge(obj)

    def result(self) -> NormalizedGraph:
        return NormalizedGraph(
            vertices=list(self.vertices.values()),
            edges=list(self.edges.values()),
        )


def unwrap(raw: Any) -> Any:
    """Unwrap one level of a driver collection (``{"_items": [...]}``)."""
    if isinstance(raw, Mapping) and isinstance(raw.get("_items"), list):
        return raw["_items"]
    return raw


def normalize(raw: Any) -> NormalizedGraph:
    """Extract deduplicated vertices and edges from any Gremlin response payload."""
    data = unwrap(raw)
    acc = _GraphAccumulator()

    if (
        isinstance(data, Mapping)
        and isinstance(data.get("nodes"), list)
        and isinstance(data.get("edges"), list)
    ):
        for node in data["nodes"]:
            acc.add_vertex(node)
        for edge in data["edges"]:
            acc.add_edge(edge)
    elif isinstance(data, (list, tuple)):
        for item in data:
            acc.add_item(item)

    return acc.result()
