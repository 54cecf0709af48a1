"""Session-scoped cache of vertex detail lookups."""

from __future__ import annotations

from typing import Any, Hashable


class _Miss:
    def __repr__(self) -> str:
        return "MISS"

    def __bool__(self) -> bool:
        return False


MISS: Any = _Miss()


class VertexDetailCache:
    """In-memory vertex id -> raw detail payload mapping.

    Keys are the ids exactly as the click event delivered them. Entries are
    write-once and never evicted; the cache lives and dies with its session.
    """

    def __init__(self) -> None:
        self._entries: dict[Hashable, Any] = {}

    def get(self, vertex_id: Hashable) -> Any:
        return self._entries.get(vertex_id, MISS)

    def set(self, vertex_id: Hashable, value: Any) -> bool:
        """Store ``value`` unless ``vertex_id`` already has an entry. Returns True when stored."""
        if vertex_id in self._entries:
            return False
        self._entries[vertex_id] = value
        return True

    def clear(self) -> None:
        self._entries.clear()

    def __contains__(self, vertex_id: object) -> bool:
        return vertex_id in self._entries

    def __len__(self) -> int:
        return len(self._entries)
