"""Per-session activity console entries."""

from __future__ import annotations

import itertools
from datetime import datetime, timezone
from typing import Any, Literal

from pydantic import BaseModel

ActivityType = Literal["query", "connection", "error", "info"]


class ActivityEntry(BaseModel):
    id: int
    time: str
    type: ActivityType
    message: str
    endpoint: str | None = None
    query: str | None = None
    success: bool | None = None
    details: Any = None


class ActivityLog:
    def __init__(self) -> None:
        self._entries: list[ActivityEntry] = []
        self._ids = itertools.count(1)

    def record(
        self,
        type: ActivityType,
        message: str,
        *,
        endpoint: str | None = None,
        query: str | None = None,
        success: bool | None = None,
        details: Any = None,
    ) -> ActivityEntry:
        entry = ActivityEntry(
            id=next(self._ids),
            time=datetime.now(timezone.utc).isoformat(timespec="seconds"),
            type=type,
            message=message,
            endpoint=endpoint,
            query=query,
            success=success,
            details=details,
        )
        self._entries.append(entry)
        return entry

    @property
    def entries(self) -> list[ActivityEntry]:
        """Newest first."""
        return list(reversed(self._entries))

    def __len__(self) -> int:
        return len(self._entries)
