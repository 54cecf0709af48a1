"""Health and readiness probe endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from src.api.dependencies import get_store
from src.services.kv_store import KeyValueStore

router = APIRouter(tags=["health"])


@router.get("/health")
async def health() -> dict:
    return {"status": "healthy"}


@router.get("/ready")
async def ready(store: KeyValueStore = Depends(get_store)) -> dict:
    try:
        ok = await store.ping()
        return {"status": "ready" if ok else "degraded", "store": ok, "backend": type(store).__name__}
    except Exception as exc:
        return {"status": "not_ready", "error": str(exc)}
