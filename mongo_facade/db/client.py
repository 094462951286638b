"""MongoDB client helpers."""

from __future__ import annotations

import logging
import re
from collections.abc import Iterator
from contextlib import contextmanager

import pymongo
from pydantic import BaseModel, ConfigDict, Field
from pymongo import MongoClient
from pymongo.collection import Collection
from pymongo.errors import PyMongoError

from mongo_facade.errors import StoreConnectionError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 30.0
DEFAULT_SCHEME = "mongodb"
DEFAULT_PORT = 27017

# Bare host or service name: no scheme, port, credentials or path.
_ADDRESS_PATTERN = re.compile(r"[A-Za-z0-9](?:[A-Za-z0-9._-]*[A-Za-z0-9])?")


class StoreSettings(BaseModel):
    """Connection and per-call defaults shared by every operation on a client."""

    timeout: float = Field(default=DEFAULT_TIMEOUT_SECONDS, gt=0)
    connect_timeout: float = Field(default=DEFAULT_TIMEOUT_SECONDS, gt=0)

    model_config = ConfigDict(frozen=True, extra="forbid")

    def resolve_timeout(self, timeout: float | None) -> float:
        """Return ``timeout`` when given, otherwise the configured default."""
        if timeout is None:
            return self.timeout
        if timeout <= 0:
            raise ValueError("Timeout must be a positive number of seconds.")
        return float(timeout)


@contextmanager
def call_scope(timeout: float) -> Iterator[None]:
    """Bound every driver call issued inside the block by ``timeout`` seconds.

    Scopes are independent: each operation opens its own and tears it down on
    exit. Expiry surfaces as a ``PyMongoError`` whose ``timeout`` flag is set.
    """
    with pymongo.timeout(timeout):
        yield


def build_uri(address: str) -> str:
    """Return the connection URI for a bare host or service name.

    Scheme and port are fixed; callers cannot override them.
    """
    if not isinstance(address, str) or not _ADDRESS_PATTERN.fullmatch(address):
        raise StoreConnectionError(
            f"Address {address!r} must be a bare host or service name."
        )
    return f"{DEFAULT_SCHEME}://{address}:{DEFAULT_PORT}"


def connect(address: str, *, settings: StoreSettings | None = None) -> MongoClient:
    """Create a client for ``address`` and verify the server is reachable.

    Parameters
    ----------
    address:
        Host or service name; scheme and port are fixed.
    settings:
        Optional ``StoreSettings``; ``connect_timeout`` bounds server selection
        and the initial ``ping``.

    Notes
    -----
    - The caller owns the returned client and must ``close()`` it.
    - Failures are not retried. A client whose ping failed is closed before
      ``StoreConnectionError`` is raised.
    """
    settings = settings or StoreSettings()
    uri = build_uri(address)

    try:
        client: MongoClient = MongoClient(
            uri,
            serverSelectionTimeoutMS=int(settings.connect_timeout * 1000),
        )
    except (PyMongoError, ValueError, TypeError) as exc:
        raise StoreConnectionError(f"Could not create a client for {uri}: {exc}") from exc

    try:
        with call_scope(settings.connect_timeout):
            client.admin.command("ping")
    except PyMongoError as exc:
        client.close()
        raise StoreConnectionError(f"Could not connect to {uri}: {exc}") from exc

    logger.debug("Connected to %s", uri)
    return client


def get_collection(client: MongoClient, database: str, collection: str) -> Collection:
    """Return the handle for ``database.collection`` on a connected client."""
    if not database or not collection:
        raise ValueError("Database and collection names cannot be empty.")
    return client[database][collection]


__all__ = [
    "DEFAULT_PORT",
    "DEFAULT_SCHEME",
    "DEFAULT_TIMEOUT_SECONDS",
    "StoreSettings",
    "build_uri",
    "call_scope",
    "connect",
    "get_collection",
]
