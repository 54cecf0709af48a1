"""Request/response models for connection profile management."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from src.models.schemas import ConnectionProfile, ConnectionType


class ConnectionCreate(BaseModel):
    name: str = Field(..., min_length=1, examples=["Local Gremlin"])
    type: ConnectionType = "local"
    details: dict[str, Any] = Field(default_factory=dict, examples=[{"url": "ws://localhost:8182/gremlin"}])

    def to_profile(self) -> ConnectionProfile:
        return ConnectionProfile(name=self.name, type=self.type, details=self.details)


class ConnectionUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1)
    type: ConnectionType | None = None
    details: dict[str, Any] | None = None

    def changes(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True)


class ConnectionOut(BaseModel):
    id: str
    name: str
    type: ConnectionType
    details: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_profile(cls, profile: ConnectionProfile) -> "ConnectionOut":
        return cls.model_validate(profile.model_dump())
