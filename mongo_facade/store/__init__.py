"""Document store orchestration helpers."""

from .document_store import DocumentStore
from .factory import create_document_store

__all__ = ["DocumentStore", "create_document_store"]
