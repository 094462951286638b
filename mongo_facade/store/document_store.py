"""Facade exposing CRUD operations over a single collection."""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from typing import Any

from mongo_facade.models.document import Document, MutationResult, parse_document_id
from mongo_facade.repositories.collection_repository import CollectionRepository
from mongo_facade.repositories.filters import FilterSpec, id_filter


class DocumentStore:
    """Thin façade around the repository for one collection handle.

    Every method accepts ``timeout`` in seconds, overriding the default held by
    the repository's ``StoreSettings`` for that call only. Update operators are
    forwarded verbatim; the caller is responsible for their correctness.
    """

    def __init__(self, repository: CollectionRepository):
        """Internal constructor; prefer ``create_document_store`` for public use."""
        self._repository = repository

    @property
    def repository(self) -> CollectionRepository:
        return self._repository

    # ----------------------------------------------------------- Mutating ops
    def add(self, document: Mapping[str, Any], *, timeout: float | None = None) -> str:
        """Insert ``document`` and return the store-assigned identifier."""
        return self._repository.insert(document, timeout=timeout)

    def update(
        self,
        filter_spec: FilterSpec,
        update_spec: Mapping[str, Any],
        *,
        timeout: float | None = None,
    ) -> MutationResult:
        """Update the first document matching ``filter_spec``.

        Fields named in the operator payload are overwritten; nested objects and
        arrays given as values replace the stored ones rather than merging.
        """
        return self._repository.find_one_and_update(filter_spec, update_spec, timeout=timeout)

    def update_by_id(
        self,
        document_id: str,
        update_spec: Mapping[str, Any],
        *,
        timeout: float | None = None,
    ) -> MutationResult:
        """Update the document identified by ``document_id``."""
        object_id = parse_document_id(document_id)
        return self._repository.find_one_and_update(
            id_filter(object_id), update_spec, timeout=timeout
        )

    def remove(self, filter_spec: FilterSpec, *, timeout: float | None = None) -> MutationResult:
        """Delete the first document matching ``filter_spec``."""
        return self._repository.find_one_and_delete(filter_spec, timeout=timeout)

    def remove_by_id(self, document_id: str, *, timeout: float | None = None) -> MutationResult:
        """Delete the document identified by ``document_id``."""
        object_id = parse_document_id(document_id)
        return self._repository.find_one_and_delete(id_filter(object_id), timeout=timeout)

    # ------------------------------------------------------------------ Queries
    def get_all(self, *, timeout: float | None = None) -> list[Document]:
        """Return every document in the collection in natural order."""
        return self._repository.find(None, timeout=timeout)

    def iter_all(self, *, timeout: float | None = None) -> Iterator[Document]:
        """Stream every document in the collection without materialising it."""
        return self._repository.iter_documents(None, timeout=timeout)

    def find(
        self,
        filter_spec: FilterSpec,
        *,
        limit: int | None = None,
        timeout: float | None = None,
    ) -> list[Document]:
        """Return documents matching ``filter_spec``."""
        return self._repository.find(filter_spec, limit=limit, timeout=timeout)


__all__ = ["DocumentStore"]
