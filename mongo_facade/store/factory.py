"""Factory helpers for constructing the document store façade."""

from __future__ import annotations

from pymongo.collection import Collection

from mongo_facade.db.client import StoreSettings
from mongo_facade.repositories.collection_repository import CollectionRepository

from .document_store import DocumentStore


def create_document_store(
    collection: Collection,
    *,
    settings: StoreSettings | None = None,
) -> DocumentStore:
    """Build a DocumentStore over ``collection`` with the default repository."""
    repository = CollectionRepository(collection, settings=settings)
    return DocumentStore(repository)


__all__ = ["create_document_store"]
