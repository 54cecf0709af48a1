"""Encrypted persistence of connection profiles."""

from __future__ import annotations

import base64
import hashlib
import json
from typing import Any

from cryptography.fernet import Fernet, InvalidToken
from pydantic import ValidationError

from src.models.schemas import ConnectionProfile
from src.services.kv_store import KeyValueStore
from src.utils.exceptions import ProfileNotFoundError, ProfileValidationError, StoreError
from src.utils.logging import get_logger

logger = get_logger(__name__)

CONNECTIONS_KEY = "gxplorer_connections"


def fernet_for(secret: str) -> Fernet:
    """Derive a Fernet key from an arbitrary passphrase."""
    digest = hashlib.sha256(secret.encode("utf-8")).digest()
    return Fernet(base64.urlsafe_b64encode(digest))


class ConnectionStore:
    """Connection profiles stored as a JSON list of per-profile ciphertexts.

    The set is always read and written as a whole. A set that cannot be
    decrypted or parsed reads as empty.
    """

    def __init__(self, store: KeyValueStore, secret: str, key: str = CONNECTIONS_KEY) -> None:
        self._store = store
        self._fernet = fernet_for(secret)
        self._key = key

    def _encrypt(self, profile: ConnectionProfile) -> str:
        return self._fernet.encrypt(profile.model_dump_json().encode("utf-8")).decode("ascii")

    def _decrypt(self, token: str) -> ConnectionProfile:
        return ConnectionProfile.model_validate_json(self._fernet.decrypt(token.encode("ascii")))

    async def _read(self) -> list[ConnectionProfile]:
        try:
            stored = await self._store.get(self._key)
        except Exception as exc:
            raise StoreError(f"Failed to read connections: {exc}") from exc
        if stored is None:
            return []
        if not isinstance(stored, list):
            logger.warning("connections_malformed", key=self._key)
            return []
        try:
            return [self._decrypt(token) for token in stored]
        except (InvalidToken, ValidationError, AttributeError, ValueError) as exc:
            logger.warning("connections_decrypt_failed", error=type(exc).__name__)
            return []

    async def _write(self, profiles: list[ConnectionProfile]) -> None:
        try:
            await self._store.set(self._key, [self._encrypt(p) for p in profiles])
        except Exception as exc:
            raise StoreError(f"Failed to save connections: {exc}") from exc

    async def list(self) -> list[ConnectionProfile]:
        return await self._read()

    async def get(self, profile_id: str) -> ConnectionProfile:
        for profile in await self._read():
            if profile.id == profile_id:
                return profile
        raise ProfileNotFoundError(f"Connection {profile_id} not found")

    async def create(self, profile: ConnectionProfile) -> ConnectionProfile:
        _validate(profile)
        profiles = await self._read()
        if any(p.id == profile.id for p in profiles):
            raise ProfileValidationError(f"Connection {profile.id} already exists")
        profiles.append(profile)
        await self._write(profiles)
        logger.info("connection_created", connection_id=profile.id, connection_type=profile.type)
        return profile

    async def update(self, profile_id: str, changes: dict[str, Any]) -> ConnectionProfile:
        profiles = await self._read()
        for index, existing in enumerate(profiles):
            if existing.id == profile_id:
                try:
                    updated = ConnectionProfile.model_validate(
                        {**existing.model_dump(), **changes, "id": profile_id}
                    )
                except ValidationError as exc:
                    raise ProfileValidationError(str(exc)) from exc
                _validate(updated)
                profiles[index] = updated
                await self._write(profiles)
                logger.info("connection_updated", connection_id=profile_id)
                return updated
        raise ProfileNotFoundError(f"Connection {profile_id} not found")

    async def delete(self, profile_id: str) -> None:
        profiles = await self._read()
        remaining = [p for p in profiles if p.id != profile_id]
        if len(remaining) == len(profiles):
            raise ProfileNotFoundError(f"Connection {profile_id} not found")
        await self._write(remaining)
        logger.info("connection_deleted", connection_id=profile_id)


def _validate(profile: ConnectionProfile) -> None:
    if not profile.name.strip():
        raise ProfileValidationError("Connection name is required")
    missing = profile.missing_details()
    if missing:
        raise ProfileValidationError(
            f"Missing {', '.join(missing)} for {profile.type} connection."
        )
