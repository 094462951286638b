from __future__ import annotations

import os
from collections.abc import Iterator
from uuid import uuid4

import mongomock
import pymongo
import pytest

from mongo_facade.repositories.collection_repository import CollectionRepository
from mongo_facade.store import DocumentStore, create_document_store


@pytest.fixture(scope="session")
def mongodb_url() -> str | None:
    """Return the MongoDB test URL if provided via env."""
    return os.getenv("MONGODB_TEST_URL")


@pytest.fixture
def client(mongodb_url: str | None) -> Iterator:
    """Yield a real client when configured; otherwise an in-memory mongomock client."""
    client = (
        pymongo.MongoClient(mongodb_url, serverSelectionTimeoutMS=5000)
        if mongodb_url
        else mongomock.MongoClient()
    )
    try:
        yield client
    finally:
        client.close()


@pytest.fixture
def collection(client):
    collection = client["mongo_facade_test"][f"docs_{uuid4().hex}"]
    try:
        yield collection
    finally:
        collection.drop()


@pytest.fixture
def repository(collection) -> CollectionRepository:
    return CollectionRepository(collection)


@pytest.fixture
def document_store(collection) -> DocumentStore:
    return create_document_store(collection)


class UnreachableCollection:
    """Collection stand-in that fails the test if any driver call is issued."""

    name = "unreachable"
    full_name = "test.unreachable"

    def __getattr__(self, attribute: str):
        raise AssertionError(f"Driver call {attribute!r} should not have been issued.")


@pytest.fixture
def unreachable_collection() -> UnreachableCollection:
    return UnreachableCollection()
