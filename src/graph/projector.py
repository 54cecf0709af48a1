"""Project canonical vertices/edges into renderer-ready elements."""

from __future__ import annotations

from typing import Any, Iterable, Mapping, Union

from src.graph.normalizer import normalize
from src.models.graph import Edge, NormalizedGraph, RenderEdge, RenderNode, Vertex

LABEL_COLOR_PALETTE: tuple[str, ...] = (
    "#1976d2",  # blue
    "#43a047",  # green
    "#fbc02d",  # yellow
    "#e64a19",  # orange
    "#8e24aa",  # purple
    "#00838f",  # teal
    "#c62828",  # red
    "#6d4c41",  # brown
    "#3949ab",  # indigo
    "#00acc1",  # cyan
)


def _to_int32(value: int) -> int:
    value &= 0xFFFFFFFF
    return value - 0x100000000 if value >= 0x80000000 else value


def label_hash(label: str) -> int:
    """String hash ``h = code + ((h << 5) - h)`` with JavaScript int32 shift semantics.

    Iterates UTF-16 code units so colors match the browser-side palette.
    """
    h = 0
    units = label.encode("utf-16-le")
    for i in range(0, len(units), 2):
        code = units[i] | (units[i + 1] << 8)
        h = code + (_to_int32(_to_int32(h) << 5) - h)
    return h


def color_for_label(label: str) -> str:
    if not label:
        return LABEL_COLOR_PALETTE[0]
    return LABEL_COLOR_PALETTE[abs(label_hash(label)) % len(LABEL_COLOR_PALETTE)]


def flatten_properties(properties: Mapping[str, Any] | None) -> dict[str, Any]:
    """Take ``properties[key][0]["value"]`` per key, ``""`` when absent or malformed."""
    flat: dict[str, Any] = {}
    for key, values in (properties or {}).items():
        value: Any = ""
        if isinstance(values, (list, tuple)) and values:
            first = values[0]
            if isinstance(first, Mapping) and first.get("value") is not None:
                value = first["value"]
        flat[str(key)] = value
    return flat


def project(
    vertices: Iterable[Vertex],
    edges: Iterable[Edge],
) -> list[Union[RenderNode, RenderEdge]]:
    """Build render elements: all nodes in vertex order, then surviving edges in edge order.

    Edges whose source or target is not an emitted node are dropped.
    """
    nodes: dict[str, RenderNode] = {}
    for vertex in vertices:
        if vertex.id in nodes:
            continue
        nodes[vertex.id] = RenderNode(
            id=vertex.id,
            label=vertex.label,
            color=color_for_label(vertex.label),
            properties=flatten_properties(vertex.properties),
            raw_properties=dict(vertex.properties),
        )

    rendered_edges: dict[str, RenderEdge] = {}
    for edge in edges:
        if edge.id in rendered_edges:
            continue
        source, target = str(edge.source_id), str(edge.target_id)
        if source not in nodes or target not in nodes:
            continue
        rendered_edges[edge.id] = RenderEdge(
            id=edge.id,
            source=source,
            target=target,
            label=edge.label,
            properties=flatten_properties(edge.properties),
        )

    return [*nodes.values(), *rendered_edges.values()]


def project_graph(graph: NormalizedGraph) -> list[Union[RenderNode, RenderEdge]]:
    return project(graph.vertices, graph.edges)


def project_raw(raw: Any) -> list[Union[RenderNode, RenderEdge]]:
    """``project(normalize(raw))`` for consumers holding a raw query result."""
    return project_graph(normalize(raw))


def sanitize_data(data: Mapping[str, Any]) -> dict[str, Any]:
    """Drop None, callables, and empty lists/maps from element data shown to users."""
    clean: dict[str, Any] = {}
    for key, value in data.items():
        if value is None or callable(value):
            continue
        if isinstance(value, (list, tuple, Mapping)) and len(value) == 0:
            continue
        clean[key] = value
    return clean
