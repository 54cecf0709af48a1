"""Unit tests for Gremlin query builders."""

from __future__ import annotations

import pytest

from src.gremlin_db.queries import create_label_query, gremlin_string, vertex_id_literal, vertex_lookup_query


@pytest.mark.parametrize(
    ("vertex_id", "literal"),
    [
        (1, "1"),
        ("1", "1"),
        ("-12", "-12"),
        ("3.5", "3.5"),
        (2.0, "2"),
        ("007", "'007'"),
        ("0", "'0'"),
        ("abc", "'abc'"),
        ("1e5", "'1e5'"),
        ("6b1d-4f", "'6b1d-4f'"),
        (True, "'true'"),
    ],
)
def test_vertex_id_literal(vertex_id, literal):
    assert vertex_id_literal(vertex_id) == literal


def test_vertex_lookup_query():
    assert vertex_lookup_query("42") == "g.V(42)"
    assert vertex_lookup_query("it's") == "g.V('it\\'s')"


def test_gremlin_string_escapes():
    assert gremlin_string("a\\b'c") == "'a\\\\b\\'c'"


def test_create_label_query():
    assert create_label_query("person") == "g.addV('person')"
    assert create_label_query("knows", "edge") == (
        "g.addV().as('a').addV().as('b').addE('knows').from('a').to('b')"
    )
    with pytest.raises(ValueError):
        create_label_query("x", "property")
