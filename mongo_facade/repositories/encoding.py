"""Conversion between generic mappings and BSON documents."""

from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime, timezone
from typing import Any

import bson
from bson.codec_options import CodecOptions
from bson.errors import BSONError
from bson.raw_bson import RawBSONDocument

from mongo_facade.errors import EncodingError
from mongo_facade.models.document import Document, validate_document

# Datetimes come back as UTC-aware values truncated to milliseconds.
CODEC_OPTIONS: CodecOptions = CodecOptions(document_class=dict, tz_aware=True, tzinfo=timezone.utc)


def encode_document(document: Mapping[str, Any]) -> bytes:
    """Encode ``document`` as BSON, raising ``EncodingError`` for unsupported values."""
    validate_document(document)
    return _encode(document)


def decode_document(data: bytes | Mapping[str, Any]) -> Document:
    """Return a plain ``dict`` for BSON bytes or a driver-returned mapping.

    Driver mappings may hold naive datetimes (BSON stores UTC); they are
    returned UTC-aware so reads compare equal to what was written.
    """
    if isinstance(data, RawBSONDocument):
        data = data.raw
    if isinstance(data, (bytes, bytearray, memoryview)):
        try:
            return bson.decode(bytes(data), codec_options=CODEC_OPTIONS)
        except (BSONError, ValueError) as exc:
            raise EncodingError(f"Malformed BSON document: {exc}") from exc
    if isinstance(data, Mapping):
        return _to_plain(data)
    raise EncodingError(f"Cannot decode value of type {type(data).__name__} as a document.")


def to_wire(document: Mapping[str, Any]) -> Document:
    """Return the mapping exactly as the store will see it after encoding."""
    return decode_document(encode_document(document))


def filter_to_wire(filter_document: Mapping[str, Any]) -> dict[str, Any]:
    """Encode a filter without the document value check.

    Filters may carry query-only BSON types (``re.Pattern``, ``Regex``,
    ``Timestamp``, ``MinKey``) that stored documents never hold.
    """
    if not isinstance(filter_document, Mapping):
        raise EncodingError(
            f"Filter must be a mapping, received {type(filter_document).__name__}."
        )
    return decode_document(_encode(filter_document))


def _encode(document: Mapping[str, Any]) -> bytes:
    try:
        return bson.encode(document, codec_options=CODEC_OPTIONS)
    except (BSONError, OverflowError, TypeError) as exc:
        raise EncodingError(f"Document cannot be encoded as BSON: {exc}") from exc


def _to_plain(value: Any) -> Any:
    if isinstance(value, Mapping):
        return {key: _to_plain(item) for key, item in value.items()}
    if isinstance(value, list):
        return [_to_plain(item) for item in value]
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)
    return value


__all__ = ["CODEC_OPTIONS", "decode_document", "encode_document", "filter_to_wire", "to_wire"]
