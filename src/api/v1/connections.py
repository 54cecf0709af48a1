"""Connection profile CRUD endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from src.api.dependencies import get_connection_store
from src.api.v1.schemas.connection import ConnectionCreate, ConnectionOut, ConnectionUpdate
from src.services.connection_store import ConnectionStore
from src.utils.exceptions import ProfileNotFoundError, ProfileValidationError, StoreError
from src.utils.logging import get_logger

logger = get_logger(__name__)
router = APIRouter(prefix="/connections", tags=["connections"])


def _store_failed(exc: StoreError) -> HTTPException:
    logger.error("connection_store_failed", error=str(exc))
    return HTTPException(status_code=503, detail="Connection store unavailable")


@router.get("", response_model=list[ConnectionOut])
async def list_connections(store: ConnectionStore = Depends(get_connection_store)) -> list[ConnectionOut]:
    try:
        profiles = await store.list()
    except StoreError as exc:
        raise _store_failed(exc)
    return [ConnectionOut.from_profile(p) for p in profiles]


@router.post("", response_model=ConnectionOut, status_code=201)
async def create_connection(
    request: ConnectionCreate,
    store: ConnectionStore = Depends(get_connection_store),
) -> ConnectionOut:
    try:
        profile = await store.create(request.to_profile())
    except ProfileValidationError as exc:
        raise HTTPException(status_code=422, detail=str(exc))
    except StoreError as exc:
        raise _store_failed(exc)
    return ConnectionOut.from_profile(profile)


@router.get("/{connection_id}", response_model=ConnectionOut)
async def get_connection(
    connection_id: str,
    store: ConnectionStore = Depends(get_connection_store),
) -> ConnectionOut:
    try:
        profile = await store.get(connection_id)
    except ProfileNotFoundError:
        raise HTTPException(status_code=404, detail="Connection not found")
    except StoreError as exc:
        raise _store_failed(exc)
    return ConnectionOut.from_profile(profile)


@router.put("/{connection_id}", response_model=ConnectionOut)
async def update_connection(
    connection_id: str,
    request: ConnectionUpdate,
    store: ConnectionStore = Depends(get_connection_store),
) -> ConnectionOut:
    try:
        profile = await store.update(connection_id, request.changes())
    except ProfileNotFoundError:
        raise HTTPException(status_code=404, detail="Connection not found")
    except ProfileValidationError as exc:
        raise HTTPException(status_code=422, detail=str(exc))
    except StoreError as exc:
        raise _store_failed(exc)
    return ConnectionOut.from_profile(profile)


@router.delete("/{connection_id}", status_code=200)
async def delete_connection(
    connection_id: str,
    store: ConnectionStore = Depends(get_connection_store),
) -> dict:
    try:
        await store.delete(connection_id)
    except ProfileNotFoundError:
        raise HTTPException(status_code=404, detail="Connection not found")
    except StoreError as exc:
        raise _store_failed(exc)
    return {"id": connection_id, "deleted": True}
