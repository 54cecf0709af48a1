"""Top-level API router aggregating all v1 sub-routers."""

from __future__ import annotations

from fastapi import APIRouter

from src.api.v1.connections import router as connections_router
from src.api.v1.gremlin import router as gremlin_router
from src.api.v1.health import router as health_router
from src.api.v1.sessions import router as sessions_router

api_router = APIRouter(prefix="/api/v1")
api_router.include_router(health_router)
api_router.include_router(gremlin_router)
api_router.include_router(connections_router)
api_router.include_router(sessions_router)
