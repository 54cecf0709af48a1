"""Internal Pydantic models for connection profiles and schema data."""

from __future__ import annotations

import uuid
from typing import Any, Literal, Mapping

from pydantic import BaseModel, Field

from src.utils.exceptions import ProfileValidationError

ConnectionType = Literal["local", "cosmos"]

# Details each connection type needs before any request can be built.
REQUIRED_DETAILS: dict[str, tuple[str, ...]] = {
    "local": ("url",),
    "cosmos": ("url", "accessKey", "dbName", "graphName"),
}


def missing_details(connection_type: str, details: Mapping[str, Any]) -> list[str]:
    """Return the required detail keys that are absent or empty.

    Raises:
        ProfileValidationError: If the connection type is not supported.
    """
    required = REQUIRED_DETAILS.get(connection_type)
    if required is None:
        raise ProfileValidationError(f"Unsupported connection type: {connection_type!r}")
    return [key for key in required if not details.get(key)]


# ── Connection profiles ──────────────────────────────────────────────


class ConnectionProfile(BaseModel):
    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    name: str
    type: ConnectionType
    details: dict[str, Any] = Field(default_factory=dict)

    def missing_details(self) -> list[str]:
        return missing_details(self.type, self.details)

    def redacted(self) -> dict[str, Any]:
        """Profile dump safe for logs and console entries."""
        details = {k: ("***" if k == "accessKey" and v else v) for k, v in self.details.items()}
        return {"id": self.id, "name": self.name, "type": self.type, "details": details}


# ── Schema ───────────────────────────────────────────────────────────


class SchemaInfo(BaseModel):
    vertex_labels: list[str] = Field(default_factory=list)
    edge_labels: list[str] = Field(default_factory=list)

    @classmethod
    def from_result(cls, result: Any) -> "SchemaInfo":
        """Build from the executor's schema payload ``{vertexLabels, edgeLabels}``."""
        if not isinstance(result, Mapping):
            return cls()
        return cls(
            vertex_labels=_labels(result.get("vertexLabels")),
            edge_labels=_labels(result.get("edgeLabels")),
        )


def _labels(value: Any) -> list[str]:
    if isinstance(value, Mapping) and isinstance(value.get("_items"), list):
        value = value["_items"]
    if not isinstance(value, (list, tuple)):
        return []
    return [str(v) for v in value if v is not None]
