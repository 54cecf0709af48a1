"""Convert gremlinpython result objects into plain JSON-compatible values.

The driver deserializes GraphSON into ``Vertex``/``Edge``/``Path`` objects and
keys ``valueMap``/``elementMap`` results with ``T``/``Direction`` enums. The
explorer works on the GraphSON-style dict shapes instead, so results are
flattened here before they leave the bridge.
"""

from __future__ import annotations

import enum
import uuid
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from typing import Any

from gremlin_python.process.traversal import Direction, T
from gremlin_python.structure.graph import Edge, Path, Property, Vertex, VertexProperty


def _key(key: Any) -> str:
    if key is Direction.OUT:
        return "outV"
    if key is Direction.IN:
        return "inV"
    if isinstance(key, enum.Enum):
        return key.name
    return str(key)


def _element_properties(element: Any) -> dict[str, list[dict[str, Any]]]:
    """Group an element's materialized properties into ``{key: [{id?, value}]}``."""
    grouped: dict[str, list[dict[str, Any]]] = {}
    for prop in getattr(element, "properties", None) or []:
        if isinstance(prop, VertexProperty):
            entry = {"id": to_jsonable(prop.id), "value": to_jsonable(prop.value)}
            grouped.setdefault(prop.label or prop.key, []).append(entry)
        elif isinstance(prop, Property):
            grouped.setdefault(prop.key, []).append({"value": to_jsonable(prop.value)})
    return grouped


def vertex_to_dict(vertex: Vertex) -> dict[str, Any]:
    return {
        "id": to_jsonable(vertex.id),
        "label": vertex.label,
        "type": "vertex",
        "properties": _element_properties(vertex),
    }


def edge_to_dict(edge: Edge) -> dict[str, Any]:
    out_v, in_v = edge.outV, edge.inV
    return {
        "id": to_jsonable(edge.id),
        "label": edge.label,
        "type": "edge",
        "outV": to_jsonable(out_v.id) if isinstance(out_v, Vertex) else to_jsonable(out_v),
        "outVLabel": out_v.label if isinstance(out_v, Vertex) else None,
        "inV": to_jsonable(in_v.id) if isinstance(in_v, Vertex) else to_jsonable(in_v),
        "inVLabel": in_v.label if isinstance(in_v, Vertex) else None,
        "properties": _element_properties(edge),
    }


def to_jsonable(value: Any) -> Any:
    """Recursively convert a driver result into JSON-compatible data."""
    if value is None or isinstance(value, (bool, int, float, str)):
        return value
    if isinstance(value, Vertex):
        return vertex_to_dict(value)
    if isinstance(value, Edge):
        return edge_to_dict(value)
    if isinstance(value, VertexProperty):
        return {"id": to_jsonable(value.id), "label": value.label, "value": to_jsonable(value.value)}
    if isinstance(value, Property):
        return {"key": value.key, "value": to_jsonable(value.value)}
    if isinstance(value, Path):
        return {
            "labels": [sorted(labels) for labels in value.labels],
            "objects": [to_jsonable(obj) for obj in value.objects],
        }
    if isinstance(value, (T, Direction)):
        return value.name
    if isinstance(value, dict):
        return {_key(k): to_jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple, set, frozenset)):
        return [to_jsonable(v) for v in value]
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    if isinstance(value, timedelta):
        return value.total_seconds()
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, uuid.UUID):
        return str(value)
    if isinstance(value, enum.Enum):
        return value.name
    return str(value)
