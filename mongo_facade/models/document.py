"""Document value types, identifiers and mutation outcomes."""

from __future__ import annotations

import re
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Union

from bson import Decimal128, ObjectId

from mongo_facade.errors import DocumentNotFoundError, EncodingError, InvalidIdentifierError

ID_FIELD = "_id"

DocumentScalar = Union[str, int, float, bool, None, datetime, bytes, ObjectId, Decimal128]
DocumentValue = Union[DocumentScalar, list["DocumentValue"], dict[str, "DocumentValue"]]
Document = dict[str, DocumentValue]

_SCALAR_TYPES: tuple[type, ...] = (
    str,
    int,
    float,
    bool,
    type(None),
    datetime,
    bytes,
    ObjectId,
    Decimal128,
)

_OBJECT_ID_PATTERN = re.compile(r"[0-9a-fA-F]{24}")


def validate_document(document: Any, *, path: str = "") -> None:
    """Raise ``EncodingError`` unless ``document`` is a mapping of ``DocumentValue``s.

    The error names the dotted path of the first offending field.
    """
    if not isinstance(document, Mapping):
        label = path or "document"
        raise EncodingError(f"{label} must be a mapping, received {type(document).__name__}.")
    for key, value in document.items():
        if not isinstance(key, str):
            raise EncodingError(
                f"Field names must be strings, received {type(key).__name__} at '{path or '.'}'."
            )
        _validate_value(value, f"{path}.{key}" if path else key)


def _validate_value(value: Any, path: str) -> None:
    if isinstance(value, _SCALAR_TYPES):
        return
    if isinstance(value, Mapping):
        validate_document(value, path=path)
        return
    if isinstance(value, Sequence) and not isinstance(value, (str, bytes)):
        for index, item in enumerate(value):
            _validate_value(item, f"{path}.{index}")
        return
    raise EncodingError(f"Field '{path}' holds unsupported type {type(value).__name__}.")


def is_document_id(value: object) -> bool:
    """Return True when ``value`` is a 24-character hexadecimal string."""
    return isinstance(value, str) and _OBJECT_ID_PATTERN.fullmatch(value) is not None


def parse_document_id(value: object) -> ObjectId:
    """Convert the external identifier string into an ``ObjectId``."""
    if not is_document_id(value):
        raise InvalidIdentifierError(
            f"{value!r} is not a 24-character hexadecimal document identifier."
        )
    return ObjectId(value)


def format_document_id(value: Any) -> str:
    """Render a stored identifier as its external string form (hex for ObjectIds)."""
    return str(value)


class MutationOutcome(str, Enum):
    """Result of a find-and-modify call that did not fail."""

    UPDATED = "updated"
    REMOVED = "removed"
    NOT_FOUND = "not_found"


@dataclass(frozen=True, slots=True)
class MutationResult:
    """Outcome of an update or remove, carrying the affected document when found.

    ``document`` is the post-update image for updates and the pre-deletion
    image for removals.
    """

    outcome: MutationOutcome
    document: Document | None = None

    def __post_init__(self) -> None:
        if self.outcome is MutationOutcome.NOT_FOUND and self.document is not None:
            raise ValueError("NOT_FOUND results cannot carry a document.")
        if self.outcome is not MutationOutcome.NOT_FOUND and self.document is None:
            raise ValueError(f"{self.outcome.value} results require a document.")

    @classmethod
    def not_found(cls) -> MutationResult:
        return cls(MutationOutcome.NOT_FOUND)

    @property
    def found(self) -> bool:
        return self.outcome is not MutationOutcome.NOT_FOUND

    @property
    def document_id(self) -> str | None:
        if self.document is None or ID_FIELD not in self.document:
            return None
        return format_document_id(self.document[ID_FIELD])

    def require(self) -> Document:
        """Return the document or raise ``DocumentNotFoundError``."""
        if self.document is None:
            raise DocumentNotFoundError("No document matched the filter.")
        return self.document


__all__ = [
    "Document",
    "DocumentScalar",
    "DocumentValue",
    "ID_FIELD",
    "MutationOutcome",
    "MutationResult",
    "format_document_id",
    "is_document_id",
    "parse_document_id",
    "validate_document",
]
