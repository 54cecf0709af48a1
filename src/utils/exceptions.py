"""Custom exception hierarchy for the graph explorer."""

from __future__ import annotations


class GxplorerError(Exception):
    """Base exception for all explorer errors."""


class GraphConnectionError(GxplorerError):
    """Schema fetch for the selected connection failed.

    Raised for missing profile fields, a failed executor envelope, or a
    driver exception. Not named ``ConnectionError`` to keep the builtin usable.
    """


class QueryError(GxplorerError):
    """Traversal execution failed."""


class DetailFetchError(GxplorerError):
    """Vertex detail lookup failed."""


class ProfileValidationError(GxplorerError):
    """Connection profile has an unsupported type or is missing required details."""


class ProfileNotFoundError(GxplorerError):
    """No stored connection profile with the given id."""


class SessionNotFoundError(GxplorerError):
    """No active explorer session with the given id."""


class StoreError(GxplorerError):
    """Key-value store operation failure."""
