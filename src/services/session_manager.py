"""Registry of live explorer sessions."""

from __future__ import annotations

from src.explorer.detail_cache import VertexDetailCache
from src.explorer.history import QUERY_HISTORY_KEY, QueryHistory
from src.explorer.session import ConnectionSession, QueryExecutor
from src.services.kv_store import KeyValueStore
from src.utils.exceptions import SessionNotFoundError
from src.utils.logging import get_logger

logger = get_logger(__name__)


class SessionManager:
    """Creates, looks up and ends sessions.

    Each session gets its own detail cache and starts from the persisted
    query history.
    """

    def __init__(
        self,
        executor: QueryExecutor,
        store: KeyValueStore,
        history_limit: int = 20,
        history_key: str = QUERY_HISTORY_KEY,
    ) -> None:
        self._executor = executor
        self._store = store
        self._history_limit = history_limit
        self._history_key = history_key
        self._sessions: dict[str, ConnectionSession] = {}

    async def create(self) -> ConnectionSession:
        history = await QueryHistory.load(self._store, self._history_key, self._history_limit)
        session = ConnectionSession(
            self._executor,
            history=history,
            detail_cache=VertexDetailCache(),
            history_store=self._store,
            history_key=self._history_key,
        )
        self._sessions[session.session_id] = session
        logger.info("session_created", session_id=session.session_id, history=len(history))
        return session

    def get(self, session_id: str) -> ConnectionSession:
        session = self._sessions.get(session_id)
        if session is None:
            raise SessionNotFoundError(f"Session {session_id} not found")
        return session

    def close(self, session_id: str) -> None:
        session = self._sessions.pop(session_id, None)
        if session is None:
            raise SessionNotFoundError(f"Session {session_id} not found")
        session.close()

    def close_all(self) -> None:
        for session in self._sessions.values():
            session.close()
        self._sessions.clear()

    def __len__(self) -> int:
        return len(self._sessions)
