"""Module-level CRUD functions taking a collection handle directly.

These mirror the ``DocumentStore`` methods for callers that keep raw
collection handles around. Each call uses the default ``StoreSettings``;
pass ``timeout`` to override the 30 second default for that call.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from typing import Any

from pymongo.collection import Collection

from mongo_facade.models.document import Document, MutationResult
from mongo_facade.repositories.filters import FilterSpec
from mongo_facade.store import DocumentStore, create_document_store


def _store(collection: Collection) -> DocumentStore:
    return create_document_store(collection)


def add(collection: Collection, document: Mapping[str, Any], *, timeout: float | None = None) -> str:
    return _store(collection).add(document, timeout=timeout)


def update(
    collection: Collection,
    filter_spec: FilterSpec,
    update_spec: Mapping[str, Any],
    *,
    timeout: float | None = None,
) -> MutationResult:
    return _store(collection).update(filter_spec, update_spec, timeout=timeout)


def update_by_id(
    collection: Collection,
    document_id: str,
    update_spec: Mapping[str, Any],
    *,
    timeout: float | None = None,
) -> MutationResult:
    return _store(collection).update_by_id(document_id, update_spec, timeout=timeout)


def remove(collection: Collection, filter_spec: FilterSpec, *, timeout: float | None = None) -> MutationResult:
    return _store(collection).remove(filter_spec, timeout=timeout)


def remove_by_id(collection: Collection, document_id: str, *, timeout: float | None = None) -> MutationResult:
    return _store(collection).remove_by_id(document_id, timeout=timeout)


def get_all(collection: Collection, *, timeout: float | None = None) -> list[Document]:
    return _store(collection).get_all(timeout=timeout)


def iter_all(collection: Collection, *, timeout: float | None = None) -> Iterator[Document]:
    return _store(collection).iter_all(timeout=timeout)


def find(
    collection: Collection,
    filter_spec: FilterSpec,
    *,
    limit: int | None = None,
    timeout: float | None = None,
) -> list[Document]:
    return _store(collection).find(filter_spec, limit=limit, timeout=timeout)


__all__ = [
    "add",
    "find",
    "get_all",
    "iter_all",
    "remove",
    "remove_by_id",
    "update",
    "update_by_id",
]
