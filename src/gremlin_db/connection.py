"""Gremlin driver client construction for local and Cosmos DB connections."""

from __future__ import annotations

import asyncio
from typing import Any, Mapping

from gremlin_python.driver import client, serializer

from src.gremlin_db.queries import HEALTH_CHECK
from src.gremlin_db.serialization import to_jsonable
from src.models.schemas import missing_details
from src.utils.exceptions import GraphConnectionError, ProfileValidationError
from src.utils.logging import get_logger

logger = get_logger(__name__)


def cosmos_resource_path(db_name: str, graph_name: str) -> str:
    return f"/dbs/{db_name}/colls/{graph_name}"


class GremlinConnection:
    """One driver client for one connection profile.

    The gremlinpython client is synchronous; ``submit`` runs it on a worker
    thread so callers stay on the event loop.
    """

    def __init__(self, connection_type: str, details: Mapping[str, Any], pool_size: int = 4) -> None:
        if connection_type == "local":
            if missing_details(connection_type, details):
                raise ProfileValidationError("Missing url for local connection.")
        elif connection_type == "cosmos":
            if missing_details(connection_type, details):
                raise ProfileValidationError("Missing fields for cosmos connection.")
        else:
            raise ProfileValidationError("Unsupported connection type.")
        self._type = connection_type
        self._details = dict(details)
        self._pool_size = pool_size
        self._client: client.Client | None = None

    @property
    def url(self) -> str:
        return str(self._details["url"])

    def _build_client(self) -> client.Client:
        if self._type == "cosmos":
            return client.Client(
                self.url,
                "g",
                username=cosmos_resource_path(self._details["dbName"], self._details["graphName"]),
                password=self._details["accessKey"],
                message_serializer=serializer.GraphSONSerializersV2d0(),
                pool_size=self._pool_size,
            )
        return client.Client(
            self.url,
            "g",
            message_serializer=serializer.GraphSONSerializersV2d0(),
            pool_size=self._pool_size,
        )

    @property
    def client(self) -> client.Client:
        if self._client is None:
            try:
                self._client = self._build_client()
            except Exception as exc:
                raise GraphConnectionError(f"Could not connect to {self.url}: {exc}") from exc
            logger.info("gremlin_client_created", connection_type=self._type, url=self.url)
        return self._client

    def _submit_sync(self, query: str) -> list[Any]:
        result_set = self.client.submit(query)
        return [to_jsonable(item) for item in result_set.all().result()]

    async def submit(self, query: str) -> list[Any]:
        """Run ``query`` and return its results as JSON-compatible data."""
        return await asyncio.to_thread(self._submit_sync, query)

    async def health_check(self) -> bool:
        result = await self.submit(HEALTH_CHECK)
        return result == [1]

    async def close(self) -> None:
        """Close the driver client on a worker thread.

        The aiohttp transport drives its own private event loop, which cannot
        run inside a thread that already has a running loop.
        """
        if self._client is not None:
            try:
                await asyncio.to_thread(self._client.close)
            except Exception as exc:
                logger.warning("gremlin_client_close_failed", error=str(exc))
            self._client = None
            logger.debug("gremlin_client_closed", connection_type=self._type)
