"""Gremlin bridge: one request, one client, one response envelope."""

from __future__ import annotations

from typing import Any, Mapping

from src.gremlin_db.connection import GremlinConnection
from src.gremlin_db.queries import SCHEMA_EDGE_LABELS, SCHEMA_VERTEX_LABELS
from src.utils.exceptions import ProfileValidationError
from src.utils.logging import get_logger

logger = get_logger(__name__)


class GremlinService:
    """Executes traversals (or the schema label queries) for a connection profile.

    Every call opens a fresh driver client and closes it before returning.
    Failures never raise: they come back as ``{"success": False, "error": ...}``.
    """

    def __init__(self, pool_size: int = 4) -> None:
        self._pool_size = pool_size

    def _connect(self, connection_type: str, details: Mapping[str, Any]) -> GremlinConnection:
        return GremlinConnection(connection_type, details, pool_size=self._pool_size)

    async def execute(
        self,
        connection_type: str,
        details: Mapping[str, Any],
        query: str | None = None,
    ) -> dict[str, Any]:
        try:
            conn = self._connect(connection_type, details)
        except ProfileValidationError as exc:
            logger.warning("gremlin_request_rejected", connection_type=connection_type, error=str(exc))
            return {"success": False, "error": str(exc)}

        try:
            if query:
                result: Any = await conn.submit(query)
            else:
                result = {
                    "vertexLabels": await conn.submit(SCHEMA_VERTEX_LABELS),
                    "edgeLabels": await conn.submit(SCHEMA_EDGE_LABELS),
                }
        except Exception as exc:
            message = str(exc) or type(exc).__name__
            logger.error(
                "gremlin_request_failed",
                connection_type=connection_type,
                schema=not query,
                error=message,
            )
            return {"success": False, "error": message}
        finally:
            await conn.close()

        logger.info("gremlin_request_completed", connection_type=connection_type, schema=not query)
        return {"success": True, "result": result}
