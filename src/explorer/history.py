"""Bounded, most-recent-first log of submitted queries."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Iterable, Iterator

from src.utils.logging import get_logger

if TYPE_CHECKING:
    from src.services.kv_store import KeyValueStore

logger = get_logger(__name__)

QUERY_HISTORY_KEY = "gremlin_query_history"
DEFAULT_HISTORY_LIMIT = 20


class QueryHistory:
    """Distinct, trimmed query strings, newest first, capped at ``limit``.

    Re-submitting the current head is a no-op; an older duplicate moves
    back to the head.
    """

    def __init__(self, entries: Iterable[Any] | None = None, limit: int = DEFAULT_HISTORY_LIMIT) -> None:
        self._limit = limit
        self._entries: list[str] = []
        for entry in entries or ():
            if isinstance(entry, str) and entry.strip() and entry.strip() not in self._entries:
                self._entries.append(entry.strip())
        del self._entries[limit:]

    @property
    def entries(self) -> list[str]:
        return list(self._entries)

    @property
    def limit(self) -> int:
        return self._limit

    def push(self, query: str) -> list[str]:
        trimmed = (query or "").strip()
        if not trimmed:
            return self.entries
        if self._entries and self._entries[0] == trimmed:
            return self.entries
        self._entries = [trimmed, *(q for q in self._entries if q != trimmed)][: self._limit]
        return self.entries

    def clear(self) -> None:
        self._entries = []

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._entries))

    @classmethod
    async def load(
        cls,
        store: KeyValueStore,
        key: str = QUERY_HISTORY_KEY,
        limit: int = DEFAULT_HISTORY_LIMIT,
    ) -> "QueryHistory":
        """Reload persisted history; unreadable or malformed data starts empty."""
        try:
            stored = await store.get(key)
        except Exception as exc:
            logger.warning("query_history_load_failed", key=key, error=str(exc))
            return cls(limit=limit)
        if not isinstance(stored, list):
            return cls(limit=limit)
        return cls(stored, limit=limit)

    async def save(self, store: KeyValueStore, key: str = QUERY_HISTORY_KEY) -> None:
        await store.set(key, self._entries)
