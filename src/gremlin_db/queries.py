"""Gremlin query templates and builders used by the explorer."""

from __future__ import annotations

import re
from typing import Any

SCHEMA_VERTEX_LABELS = "g.V().label().dedup()"
SCHEMA_EDGE_LABELS = "g.E().label().dedup()"

HEALTH_CHECK = "g.inject(1)"

_NUMERIC_TOKEN = re.compile(r"^-?\d+(\.\d+)?$")


def gremlin_string(value: str) -> str:
    """Single-quoted Gremlin string literal."""
    return "'" + value.replace("\\", "\\\\").replace("'", "\\'") + "'"


def vertex_id_literal(vertex_id: Any) -> str:
    """Render a clicked vertex id as a Gremlin literal.

    Ids are numeric unless they stringify to a non-numeric token, or are
    strings with a leading zero (zero-padded string ids stay strings).
    """
    if isinstance(vertex_id, bool):
        return gremlin_string(str(vertex_id).lower())
    if isinstance(vertex_id, (int, float)):
        if isinstance(vertex_id, float) and vertex_id.is_integer():
            return str(int(vertex_id))
        return str(vertex_id)
    text = str(vertex_id)
    if _NUMERIC_TOKEN.match(text) and not text.startswith("0"):
        return text
    return gremlin_string(text)


def vertex_lookup_query(vertex_id: Any) -> str:
    return f"g.V({vertex_id_literal(vertex_id)})"


def create_label_query(label: str, kind: str = "vertex") -> str:
    """Query that introduces ``label`` into the schema.

    Edge labels need two endpoint vertices, so two unlabeled vertices are
    created alongside the edge.
    """
    literal = gremlin_string(label)
    if kind == "vertex":
        return f"g.addV({literal})"
    if kind == "edge":
        return f"g.addV().as('a').addV().as('b').addE({literal}).from('a').to('b')"
    raise ValueError(f"Unknown label kind: {kind!r}")
