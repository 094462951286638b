"""Exception hierarchy shared by the client, repository and store layers."""

from __future__ import annotations


class DocumentStoreError(RuntimeError):
    """Base class for every error raised by the facade."""


class StoreConnectionError(DocumentStoreError, ConnectionError):
    """Raised when a client cannot be constructed or cannot reach the server."""


class EncodingError(DocumentStoreError, ValueError):
    """Raised when a mapping cannot be converted to or from BSON."""


class InvalidIdentifierError(DocumentStoreError, ValueError):
    """Raised when a document identifier string is not a well-formed ObjectId."""


class StoreError(DocumentStoreError):
    """Raised when the driver reports a failure, including timeouts."""


class DocumentNotFoundError(StoreError):
    """Raised when a caller requires a document that no filter matched."""


__all__ = [
    "DocumentNotFoundError",
    "DocumentStoreError",
    "EncodingError",
    "InvalidIdentifierError",
    "StoreConnectionError",
    "StoreError",
]
