"""FastAPI application factory with lifespan events."""

from __future__ import annotations

import uuid
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from src.api.dependencies import (
    set_connection_store,
    set_gremlin_service,
    set_session_manager,
    set_store,
)
from src.api.router import api_router
from src.config import get_settings
from src.services.connection_store import ConnectionStore
from src.services.gremlin_service import GremlinService
from src.services.kv_store import connect_store
from src.services.session_manager import SessionManager
from src.utils.logging import get_logger, setup_logging

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application startup and shutdown resources."""
    settings = get_settings()
    setup_logging(settings.LOG_LEVEL, settings.LOG_FORMAT)

    # Redis, or in-memory when unreachable
    store = await connect_store(settings.REDIS_URL)
    set_store(store)
    set_connection_store(ConnectionStore(store, settings.CONNECTIONS_SECRET_KEY))

    # Gremlin bridge + sessions
    gremlin = GremlinService(pool_size=settings.GREMLIN_POOL_SIZE)
    set_gremlin_service(gremlin)
    sessions = SessionManager(gremlin, store, history_limit=settings.QUERY_HISTORY_LIMIT)
    set_session_manager(sessions)

    logger.info("app_started", store=type(store).__name__)
    yield

    # Shutdown
    sessions.close_all()
    await store.close()
    logger.info("app_stopped")


def create_app() -> FastAPI:
    settings = get_settings()
    setup_logging(settings.LOG_LEVEL, settings.LOG_FORMAT)

    application = FastAPI(
        title="gxplorer",
        description="Gremlin graph database explorer",
        version="0.1.0",
        lifespan=lifespan,
    )

    application.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    application.include_router(api_router)

    @application.middleware("http")
    async def request_id_middleware(request: Request, call_next) -> Response:
        request_id = request.headers.get("X-Request-ID", str(uuid.uuid4()))
        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(request_id=request_id)
        response = await call_next(request)
        response.headers["X-Request-ID"] = request_id
        return response

    @application.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.error("unhandled_exception", error=str(exc), path=request.url.path)
        return JSONResponse(
            status_code=500,
            content={"detail": "Internal server error", "type": type(exc).__name__},
        )

    return application


app = create_app()
