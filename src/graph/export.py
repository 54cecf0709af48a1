"""Serialize projected graph elements to JSON or GraphML."""

from __future__ import annotations

import json
from typing import Any, Sequence, Union

from src.models.graph import RenderEdge, RenderNode

Elements = Sequence[Union[RenderNode, RenderEdge]]


def split_elements(elements: Elements) -> tuple[list[RenderNode], list[RenderEdge]]:
    nodes = [el for el in elements if isinstance(el, RenderNode)]
    edges = [el for el in elements if isinstance(el, RenderEdge)]
    return nodes, edges


def to_json(elements: Elements) -> str:
    nodes, edges = split_elements(elements)
    payload: dict[str, Any] = {
        "nodes": [n.model_dump(exclude={"group", "raw_properties"}) for n in nodes],
        "edges": [e.model_dump(exclude={"group"}) for e in edges],
        "node_count": len(nodes),
        "edge_count": len(edges),
    }
    return json.dumps(payload, indent=2, default=str)


def to_graphml(elements: Elements) -> str:
    """Convert render elements to GraphML XML."""
    nodes, edges = split_elements(elements)
    lines = [
        '<?xml version="1.0" encoding="UTF-8"?>',
        '<graphml xmlns="http://graphml.graphdrawing.org/xmlns">',
        '  <key id="label" for="node" attr.name="label" attr.type="string"/>',
        '  <key id="name" for="node" attr.name="name" attr.type="string"/>',
        '  <key id="color" for="node" attr.name="color" attr.type="string"/>',
        '  <key id="edge_label" for="edge" attr.name="label" attr.type="string"/>',
        '  <graph id="G" edgedefault="directed">',
    ]

    for node in nodes:
        lines.append(f'    <node id="{_xml_escape(node.id)}">')
        lines.append(f'      <data key="label">{_xml_escape(node.label)}</data>')
        name = node.properties.get("name")
        if name not in (None, ""):
            lines.append(f'      <data key="name">{_xml_escape(str(name))}</data>')
        lines.append(f'      <data key="color">{node.color}</data>')
        lines.append("    </node>")

    for edge in edges:
        lines.append(
            f'    <edge id="{_xml_escape(edge.id)}" '
            f'source="{_xml_escape(edge.source)}" target="{_xml_escape(edge.target)}">'
        )
        lines.append(f'      <data key="edge_label">{_xml_escape(edge.label)}</data>')
        lines.append("    </edge>")

    lines.append("  </graph>")
    lines.append("</graphml>")
    return "\n".join(lines)


def _xml_escape(s: str) -> str:
    return s.replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;").replace('"', "&quot;")
