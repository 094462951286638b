"""pymongo-backed repository issuing one driver call per operation."""

from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from typing import Any

from bson import ObjectId
from pymongo import ReturnDocument
from pymongo.collection import Collection
from pymongo.errors import PyMongoError

from mongo_facade.db.client import StoreSettings, call_scope
from mongo_facade.errors import DocumentStoreError, StoreError
from mongo_facade.models.document import (
    ID_FIELD,
    Document,
    MutationOutcome,
    MutationResult,
    format_document_id,
)
from mongo_facade.repositories.encoding import decode_document, filter_to_wire, to_wire
from mongo_facade.repositories.filters import FilterSpec, resolve_filter

logger = logging.getLogger(__name__)


class CollectionRepository:
    """Repository that encodes payloads, calls the driver and decodes results.

    Every method encodes its inputs before opening a ``call_scope`` so that
    encoding failures never reach the network. Driver failures are raised as
    ``StoreError`` chained to the original exception.
    """

    def __init__(self, collection: Collection, *, settings: StoreSettings | None = None):
        self._collection = collection
        self._settings = settings or StoreSettings()

    @property
    def collection(self) -> Collection:
        return self._collection

    @property
    def settings(self) -> StoreSettings:
        return self._settings

    @property
    def name(self) -> str:
        return getattr(self._collection, "full_name", None) or self._collection.name

    def insert(self, document: Mapping[str, Any], *, timeout: float | None = None) -> str:
        """Insert ``document`` and return its identifier as a string."""
        payload = to_wire(document)
        if ID_FIELD not in payload:
            payload = {ID_FIELD: ObjectId(), **payload}
        seconds = self._settings.resolve_timeout(timeout)

        with self._driver_errors("insert_one"), call_scope(seconds):
            result = self._collection.insert_one(payload)

        document_id = format_document_id(result.inserted_id)
        logger.debug("Inserted %s into %s", document_id, self.name)
        return document_id

    def find_one_and_update(
        self,
        filter_spec: FilterSpec,
        update_spec: Mapping[str, Any],
        *,
        timeout: float | None = None,
    ) -> MutationResult:
        """Atomically update the first match and return its post-update image."""
        wire_filter = filter_to_wire(resolve_filter(filter_spec))
        wire_update = to_wire(update_spec)
        seconds = self._settings.resolve_timeout(timeout)

        with self._driver_errors("find_one_and_update"), call_scope(seconds):
            raw = self._collection.find_one_and_update(
                wire_filter,
                wire_update,
                return_document=ReturnDocument.AFTER,
            )

        return self._mutation_result(raw, MutationOutcome.UPDATED)

    def find_one_and_delete(
        self,
        filter_spec: FilterSpec,
        *,
        timeout: float | None = None,
    ) -> MutationResult:
        """Atomically delete the first match and return its pre-deletion image."""
        wire_filter = filter_to_wire(resolve_filter(filter_spec))
        seconds = self._settings.resolve_timeout(timeout)

        with self._driver_errors("find_one_and_delete"), call_scope(seconds):
            raw = self._collection.find_one_and_delete(wire_filter)

        return self._mutation_result(raw, MutationOutcome.REMOVED)

    def find(
        self,
        filter_spec: FilterSpec | None = None,
        *,
        limit: int | None = None,
        timeout: float | None = None,
    ) -> list[Document]:
        """Materialise every matching document; partial reads are discarded on error."""
        if limit is not None and limit < 0:
            raise ValueError("Limit must be a non-negative integer or None.")
        wire_filter = filter_to_wire(resolve_filter(filter_spec))
        seconds = self._settings.resolve_timeout(timeout)

        with self._driver_errors("find"), call_scope(seconds):
            cursor = self._collection.find(wire_filter)
            try:
                if limit:
                    cursor = cursor.limit(limit)
                return [decode_document(raw) for raw in cursor]
            finally:
                cursor.close()

    def iter_documents(
        self,
        filter_spec: FilterSpec | None = None,
        *,
        timeout: float | None = None,
    ) -> Iterator[Document]:
        """Return a lazy iterator over matching documents.

        Each fetch from the cursor runs in its own ``call_scope``. The cursor is
        closed once the iterator is exhausted or closed; it cannot be restarted.
        """
        wire_filter = filter_to_wire(resolve_filter(filter_spec))
        seconds = self._settings.resolve_timeout(timeout)
        return self._iterate(wire_filter, seconds)

    # ----------------------------------------------------------------- Helpers
    def _iterate(self, wire_filter: dict[str, Any], seconds: float) -> Iterator[Document]:
        with self._driver_errors("find"):
            cursor = self._collection.find(wire_filter)
        try:
            while True:
                with self._driver_errors("find"), call_scope(seconds):
                    raw = next(cursor, None)
                if raw is None:
                    return
                yield decode_document(raw)
        finally:
            cursor.close()

    def _mutation_result(self, raw: Any, outcome: MutationOutcome) -> MutationResult:
        if raw is None:
            logger.debug("%s on %s matched nothing", outcome.value, self.name)
            return MutationResult.not_found()
        document = decode_document(raw)
        logger.debug("%s %s in %s", outcome.value, document.get(ID_FIELD), self.name)
        return MutationResult(outcome, document)

    @contextmanager
    def _driver_errors(self, operation: str) -> Iterator[None]:
        # pymongo rejects malformed update documents client-side with ValueError.
        try:
            yield
        except DocumentStoreError:
            raise
        except (PyMongoError, ValueError) as exc:
            reason = "timed out" if getattr(exc, "timeout", False) else "failed"
            logger.warning("%s on %s %s: %s", operation, self.name, reason, exc)
            raise StoreError(f"{operation} on {self.name} {reason}: {exc}") from exc


__all__ = ["CollectionRepository"]
