from __future__ import annotations

from contextlib import contextmanager

import pymongo
import pytest
from bson import ObjectId
from pymongo.errors import AutoReconnect, NetworkTimeout

from mongo_facade.db.client import StoreSettings
from mongo_facade.errors import EncodingError, StoreError
from mongo_facade.models.document import MutationOutcome
from mongo_facade.repositories import collection_repository as repository_module
from mongo_facade.repositories.collection_repository import CollectionRepository
from mongo_facade.repositories.filters import FilterOperator, PropertyFilter


class FakeCursor:
    """Cursor yielding ``documents`` then optionally failing."""

    def __init__(self, documents, error: Exception | None = None) -> None:
        self._documents = list(documents)
        self._error = error
        self.closed = False

    def __iter__(self):
        return self

    def __next__(self):
        if self._documents:
            return self._documents.pop(0)
        if self._error is not None:
            raise self._error
        raise StopIteration

    def limit(self, limit: int):
        self._documents = self._documents[:limit]
        return self

    def close(self) -> None:
        self.closed = True


class FakeCollection:
    name = "fake"
    full_name = "test.fake"

    def __init__(self, cursor: FakeCursor | None = None, error: Exception | None = None) -> None:
        self.cursor = cursor
        self.error = error

    def find(self, filter_document):
        return self.cursor

    def insert_one(self, document):
        raise self.error


@pytest.fixture
def recorded_scopes(monkeypatch: pytest.MonkeyPatch) -> list[float]:
    scopes: list[float] = []

    @contextmanager
    def recording_scope(timeout: float):
        scopes.append(timeout)
        yield

    monkeypatch.setattr(repository_module, "call_scope", recording_scope)
    return scopes


def test_insert_assigns_object_id_without_mutating_input(repository, collection) -> None:
    document = {"item": "a", "qty": 2}

    document_id = repository.insert(document)

    assert len(document_id) == 24
    assert document == {"item": "a", "qty": 2}
    stored = collection.find_one({"_id": ObjectId(document_id)})
    assert stored == {"_id": ObjectId(document_id), "item": "a", "qty": 2}


def test_insert_keeps_caller_supplied_id(repository) -> None:
    object_id = ObjectId()

    assert repository.insert({"_id": object_id, "item": "a"}) == str(object_id)


def test_insert_duplicate_id_raises_store_error(repository) -> None:
    object_id = ObjectId()
    repository.insert({"_id": object_id})

    with pytest.raises(StoreError):
        repository.insert({"_id": object_id})


def test_encoding_failures_never_reach_the_driver(unreachable_collection) -> None:
    repository = CollectionRepository(unreachable_collection)

    with pytest.raises(EncodingError):
        repository.insert({"bad": object()})
    with pytest.raises(EncodingError):
        repository.find_one_and_update({"item": "a"}, {"$set": {"bad": {1, 2}}})
    with pytest.raises(EncodingError):
        repository.find_one_and_delete({"bad": object()})
    with pytest.raises(EncodingError):
        repository.iter_documents({"bad": object()})


def test_default_and_per_call_timeouts_reach_the_call_scope(collection, recorded_scopes) -> None:
    repository = CollectionRepository(collection, settings=StoreSettings(timeout=7))

    repository.insert({"item": "a"})
    repository.insert({"item": "b"}, timeout=0.5)
    repository.find()

    assert recorded_scopes == [7, 0.5, 7]


def test_driver_timeouts_are_reported_as_store_errors() -> None:
    repository = CollectionRepository(FakeCollection(error=NetworkTimeout("timed out reading")))

    with pytest.raises(StoreError, match="timed out") as excinfo:
        repository.insert({"item": "a"})

    assert isinstance(excinfo.value.__cause__, NetworkTimeout)


def test_malformed_update_operators_surface_as_store_errors() -> None:
    client = pymongo.MongoClient(
        "mongodb://localhost:27017", connect=False, serverSelectionTimeoutMS=1
    )
    try:
        repository = CollectionRepository(client["mongo_facade_test"]["items"])
        with pytest.raises(StoreError):
            repository.find_one_and_update({"item": "a"}, {"item": "b"})
    finally:
        client.close()


def test_update_and_delete_report_not_found(repository) -> None:
    updated = repository.find_one_and_update({"item": "missing"}, {"$set": {"item": "b"}})
    removed = repository.find_one_and_delete({"item": "missing"})

    assert updated.outcome is MutationOutcome.NOT_FOUND
    assert removed.outcome is MutationOutcome.NOT_FOUND


def test_find_accepts_filter_expressions_and_limit(repository) -> None:
    for title in ("alpha", "beta", "alphabet"):
        repository.insert({"title": title})

    matches = repository.find(PropertyFilter("title", "alpha", FilterOperator.CONTAINS))
    limited = repository.find(None, limit=1)

    assert sorted(doc["title"] for doc in matches) == ["alpha", "alphabet"]
    assert len(limited) == 1
    with pytest.raises(ValueError):
        repository.find(None, limit=-1)


def test_find_discards_partial_results_and_closes_cursor() -> None:
    cursor = FakeCursor([{"_id": ObjectId()}], error=AutoReconnect("connection reset"))
    repository = CollectionRepository(FakeCollection(cursor=cursor))

    with pytest.raises(StoreError):
        repository.find()

    assert cursor.closed


def test_iter_documents_is_lazy_and_closes_cursor(recorded_scopes) -> None:
    documents = [{"_id": ObjectId(), "n": n} for n in range(3)]
    cursor = FakeCursor(documents)
    repository = CollectionRepository(FakeCollection(cursor=cursor))

    iterator = repository.iter_documents(timeout=3)
    assert recorded_scopes == []

    first = next(iterator)
    assert first["n"] == 0
    assert not cursor.closed

    rest = list(iterator)
    assert [doc["n"] for doc in rest] == [1, 2]
    assert cursor.closed
    # One scope per fetch, including the one that found the cursor exhausted.
    assert recorded_scopes == [3, 3, 3, 3]


def test_iter_documents_closes_cursor_when_abandoned() -> None:
    cursor = FakeCursor([{"n": 1}, {"n": 2}])
    repository = CollectionRepository(FakeCollection(cursor=cursor))

    iterator = repository.iter_documents()
    next(iterator)
    iterator.close()

    assert cursor.closed


def test_iter_documents_translates_driver_errors() -> None:
    cursor = FakeCursor([{"n": 1}], error=AutoReconnect("connection reset"))
    repository = CollectionRepository(FakeCollection(cursor=cursor))

    iterator = repository.iter_documents()
    assert next(iterator) == {"n": 1}
    with pytest.raises(StoreError):
        next(iterator)
    assert cursor.closed
