"""Timeout-bounded CRUD façade over a MongoDB collection."""

__version__ = "0.1.0"

from .db.client import StoreSettings, connect, get_collection  # noqa: E402
from .errors import (  # noqa: E402
    DocumentNotFoundError,
    DocumentStoreError,
    EncodingError,
    InvalidIdentifierError,
    StoreConnectionError,
    StoreError,
)
from .models.document import MutationOutcome, MutationResult  # noqa: E402
from .operations import (  # noqa: E402
    add,
    find,
    get_all,
    iter_all,
    remove,
    remove_by_id,
    update,
    update_by_id,
)
from .store import DocumentStore, create_document_store  # noqa: E402

__all__ = [
    "__version__",
    "DocumentNotFoundError",
    "DocumentStore",
    "DocumentStoreError",
    "EncodingError",
    "InvalidIdentifierError",
    "MutationOutcome",
    "MutationResult",
    "StoreConnectionError",
    "StoreError",
    "StoreSettings",
    "add",
    "connect",
    "create_document_store",
    "find",
    "get_all",
    "get_collection",
    "iter_all",
    "remove",
    "remove_by_id",
    "update",
    "update_by_id",
]
