"""Per-session connection/query lifecycle.

A session owns one selected connection profile and walks it through schema
fetch, query execution and node drill-down:

    connection:  IDLE -> CONNECTING -> CONNECTED | ERROR
    query:       QUERY_IDLE -> QUERY_RUNNING -> QUERY_IDLE

Every request kind (``schema``, ``query``, ``detail``) has a sequence token.
A response is applied only while its token is still the latest issued for
its slot; older responses are discarded ("last issued wins"). Selecting a
connection supersedes outstanding query and detail requests as well.

Collaborator failures never escape the session: they become
``connection_error``, ``query_error`` or an ``{"error": ...}`` detail payload.
"""

from __future__ import annotations

import enum
import time
import uuid
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any, Hashable, Mapping, Protocol

from src.explorer.activity import ActivityLog
from src.explorer.detail_cache import MISS, VertexDetailCache
from src.explorer.history import QUERY_HISTORY_KEY, QueryHistory
from src.gremlin_db.queries import create_label_query, vertex_lookup_query
from src.models.schemas import ConnectionProfile, SchemaInfo
from src.utils.exceptions import (
    DetailFetchError,
    GraphConnectionError,
    ProfileValidationError,
    QueryError,
)
from src.utils.logging import get_logger

if TYPE_CHECKING:
    from src.services.kv_store import KeyValueStore

logger = get_logger(__name__)

BRIDGE_ENDPOINT = "/api/v1/gremlin"


class ConnectionState(str, enum.Enum):
    IDLE = "idle"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    ERROR = "error"


class QueryState(str, enum.Enum):
    IDLE = "query_idle"
    RUNNING = "query_running"


class QueryExecutor(Protocol):
    async def execute(
        self,
        connection_type: str,
        details: Mapping[str, Any],
        query: str | None = None,
    ) -> dict[str, Any]: ...


def _error_message(exc: BaseException) -> str:
    return str(exc) or type(exc).__name__


def _envelope_error(response: Any, default: str) -> str | None:
    """Error message of a failed executor envelope, or None when it succeeded."""
    if not isinstance(response, Mapping):
        return default
    if response.get("success"):
        return None
    return str(response.get("error") or default)


class ConnectionSession:
    """Connection selection, schema, query and node-detail state for one user session."""

    def __init__(
        self,
        executor: QueryExecutor,
        *,
        session_id: str | None = None,
        history: QueryHistory | None = None,
        detail_cache: VertexDetailCache | None = None,
        activity: ActivityLog | None = None,
        history_store: KeyValueStore | None = None,
        history_key: str = QUERY_HISTORY_KEY,
    ) -> None:
        self.session_id = session_id or uuid.uuid4().hex
        self.created_at = datetime.now(timezone.utc)
        self._executor = executor
        self.history = history if history is not None else QueryHistory()
        self.detail_cache = detail_cache if detail_cache is not None else VertexDetailCache()
        self.activity = activity if activity is not None else ActivityLog()
        self._history_store = history_store
        self._history_key = history_key
        self._tokens: dict[str, int] = {"schema": 0, "query": 0, "detail": 0}
        self._connection_epoch = 0
        self.closed = False
        self._log = logger.bind(session_id=self.session_id)

        # connection
        self.profile: ConnectionProfile | None = None
        self.connection_state = ConnectionState.IDLE
        self.schema: SchemaInfo | None = None
        self.connection_error: GraphConnectionError | None = None

        # query
        self.query_state = QueryState.IDLE
        self.last_query: str | None = None
        self.query_result: Any = None
        self.query_error: QueryError | None = None
        self.query_succeeded: bool | None = None
        self.query_elapsed_ms: float | None = None

        # renderer feedback
        self.selected_node_id: Any = None
        self.selected_node_data: Any = None
        self.node_detail_loading = False
        self.hovered_node_id: str | None = None

    # ── sequence tokens ──────────────────────────────────────────────

    def _issue(self, slot: str) -> int:
        self._tokens[slot] += 1
        return self._tokens[slot]

    def _is_current(self, slot: str, token: int) -> bool:
        current = self._tokens[slot] == token
        if not current:
            self._log.info("stale_response_discarded", slot=slot, token=token, latest=self._tokens[slot])
        return current

    # ── connection / schema ──────────────────────────────────────────

    async def select_connection(self, profile: ConnectionProfile) -> ConnectionState:
        """Make ``profile`` the active connection and fetch its schema."""
        self.profile = profile
        self._connection_epoch += 1
        self.schema = None
        self.connection_error = None
        self.query_result = None
        self.query_error = None
        self.query_succeeded = None
        self.query_elapsed_ms = None
        self.query_state = QueryState.IDLE
        self.selected_node_id = None
        self.selected_node_data = None
        self.node_detail_loading = False
        self.hovered_node_id = None
        self.detail_cache.clear()
        self._issue("query")
        self._issue("detail")
        self._log.info("connection_selected", connection_id=profile.id, connection_type=profile.type)
        self.activity.record(
            "connection",
            f"Selected connection {profile.name}",
            details=profile.redacted(),
        )
        await self._fetch_schema(profile)
        return self.connection_state

    async def refresh_schema(self) -> ConnectionState:
        if self.profile is None:
            return self.connection_state
        self.schema = None
        self.connection_error = None
        await self._fetch_schema(self.profile)
        return self.connection_state

    async def _fetch_schema(self, profile: ConnectionProfile) -> None:
        token = self._issue("schema")
        self.connection_state = ConnectionState.CONNECTING

        try:
            missing = profile.missing_details()
        except ProfileValidationError as exc:
            self._fail_connection(token, str(exc))
            return
        if missing:
            self._fail_connection(token, f"Missing {', '.join(missing)} for {profile.type} connection.")
            return

        try:
            response = await self._executor.execute(profile.type, profile.details)
        except Exception as exc:
            self._log.warning("schema_fetch_raised", error=_error_message(exc))
            self._fail_connection(token, _error_message(exc))
            return

        if not self._is_current("schema", token):
            return
        error = _envelope_error(response, "Failed to fetch schema")
        if error is not None:
            self._fail_connection(token, error)
            return

        self.schema = SchemaInfo.from_result(response.get("result"))
        self.connection_state = ConnectionState.CONNECTED
        self._log.info(
            "schema_fetched",
            vertex_labels=len(self.schema.vertex_labels),
            edge_labels=len(self.schema.edge_labels),
        )
        self.activity.record(
            "connection",
            f"Schema loaded for {profile.name}",
            endpoint=BRIDGE_ENDPOINT,
            success=True,
            details=self.schema.model_dump(),
        )

    def _fail_connection(self, token: int, message: str) -> None:
        if not self._is_current("schema", token):
            return
        self.connection_error = GraphConnectionError(message)
        self.connection_state = ConnectionState.ERROR
        self._log.warning("schema_fetch_failed", error=message)
        self.activity.record("error", message, endpoint=BRIDGE_ENDPOINT, success=False)

    # ── queries ──────────────────────────────────────────────────────

    async def submit_query(self, query: str) -> bool | None:
        """Run a traversal on the selected connection.

        Returns True/False for success/failure once the response is applied,
        or None when nothing was dispatched or the response was superseded.
        """
        if self.profile is None:
            self._log.info("query_skipped_no_connection")
            return None
        trimmed = (query or "").strip()
        if not trimmed:
            return None

        self.history.push(trimmed)
        await self._persist_history()

        profile = self.profile
        token = self._issue("query")
        self.query_state = QueryState.RUNNING
        self.last_query = trimmed
        self.query_result = None
        self.query_error = None
        self.activity.record("query", "Query submitted", endpoint=BRIDGE_ENDPOINT, query=trimmed)

        started = time.perf_counter()
        missing = profile.missing_details()
        if missing:
            response: Any = {
                "success": False,
                "error": f"Missing {', '.join(missing)} for {profile.type} connection.",
            }
        else:
            try:
                response = await self._executor.execute(profile.type, profile.details, trimmed)
            except Exception as exc:
                response = {"success": False, "error": _error_message(exc)}
        elapsed_ms = round((time.perf_counter() - started) * 1000, 2)

        if not self._is_current("query", token):
            return None

        self.query_state = QueryState.IDLE
        self.query_elapsed_ms = elapsed_ms
        error = _envelope_error(response, "Query failed")
        if error is None:
            self.query_result = response.get("result")
            self.query_succeeded = True
            self._log.info("query_completed", elapsed_ms=elapsed_ms)
            self.activity.record(
                "query",
                f"Query completed in {elapsed_ms} ms",
                endpoint=BRIDGE_ENDPOINT,
                query=trimmed,
                success=True,
            )
        else:
            self.query_error = QueryError(error)
            self.query_succeeded = False
            self._log.warning("query_failed", elapsed_ms=elapsed_ms, error=error)
            self.activity.record("error", error, endpoint=BRIDGE_ENDPOINT, query=trimmed, success=False)
        return self.query_succeeded

    async def _persist_history(self) -> None:
        if self._history_store is None:
            return
        try:
            await self.history.save(self._history_store, self._history_key)
        except Exception as exc:
            self._log.warning("query_history_persist_failed", error=_error_message(exc))

    async def clear_history(self) -> None:
        self.history.clear()
        await self._persist_history()

    async def create_label(self, label: str, kind: str = "vertex") -> bool:
        """Introduce a vertex or edge label, then refresh the schema."""
        if self.profile is None:
            return False
        name = (label or "").strip()
        if not name:
            return False

        query = create_label_query(name, kind)
        profile = self.profile
        try:
            response = await self._executor.execute(profile.type, profile.details, query)
        except Exception as exc:
            response = {"success": False, "error": _error_message(exc)}

        error = _envelope_error(response, "Failed to create label")
        if error is not None:
            self.query_error = QueryError(error)
            self.activity.record("error", error, endpoint=BRIDGE_ENDPOINT, query=query, success=False)
            return False

        self._log.info("label_created", label=name, kind=kind)
        self.activity.record(
            "info", f"Created {kind} label {name}", endpoint=BRIDGE_ENDPOINT, query=query, success=True
        )
        await self.refresh_schema()
        return True

    # ── renderer events ──────────────────────────────────────────────

    async def click_node(self, vertex_id: Hashable) -> Any:
        """Fetch (or reuse) detail for a clicked vertex and present it.

        Failures are cached and presented as ``{"error": message}`` like any
        other result.
        """
        if self.profile is None:
            return None
        self.selected_node_id = vertex_id

        cached = self.detail_cache.get(vertex_id)
        if cached is not MISS:
            self._issue("detail")
            self.selected_node_data = cached
            self.node_detail_loading = False
            self._log.debug("vertex_detail_cache_hit", vertex_id=str(vertex_id))
            return cached

        profile = self.profile
        epoch = self._connection_epoch
        token = self._issue("detail")
        self.node_detail_loading = True
        query = vertex_lookup_query(vertex_id)

        try:
            response = await self._executor.execute(profile.type, profile.details, query)
        except Exception as exc:
            response = {"success": False, "error": _error_message(exc)}

        error = _envelope_error(response, "Vertex lookup failed")
        if error is None:
            payload = response
        else:
            payload = {"error": str(DetailFetchError(error))}
            self._log.warning("vertex_detail_failed", vertex_id=str(vertex_id), error=error)

        # responses for a connection that is no longer selected are not cached
        if epoch == self._connection_epoch:
            self.detail_cache.set(vertex_id, payload)
            self.activity.record(
                "query",
                f"Fetched vertex {vertex_id}",
                endpoint=BRIDGE_ENDPOINT,
                query=query,
                success=error is None,
            )

        if self._is_current("detail", token):
            self.selected_node_data = payload
            self.node_detail_loading = False
        return payload

    def hover_node(self, vertex_id: Any | None) -> None:
        self.hovered_node_id = None if vertex_id is None else str(vertex_id)

    # ── lifecycle ────────────────────────────────────────────────────

    def close(self) -> None:
        """End the session: discard cached details and supersede in-flight requests."""
        for slot in self._tokens:
            self._issue(slot)
        self.detail_cache.clear()
        self.closed = True
        self._log.info("session_closed")

    def snapshot(self) -> dict[str, Any]:
        return {
            "session_id": self.session_id,
            "created_at": self.created_at,
            "connection_id": self.profile.id if self.profile else None,
            "connection_name": self.profile.name if self.profile else None,
            "connection_state": self.connection_state.value,
            "connection_error": str(self.connection_error) if self.connection_error else None,
            "schema": self.schema.model_dump() if self.schema else None,
            "query_state": self.query_state.value,
            "last_query": self.last_query,
            "query_result": self.query_result,
            "query_error": str(self.query_error) if self.query_error else None,
            "query_succeeded": self.query_succeeded,
            "query_elapsed_ms": self.query_elapsed_ms,
            "history": self.history.entries,
            "selected_node_id": None if self.selected_node_id is None else str(self.selected_node_id),
            "selected_node_data": self.selected_node_data,
            "node_detail_loading": self.node_detail_loading,
            "hovered_node_id": self.hovered_node_id,
        }
