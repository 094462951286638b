"""Filter primitives and helpers for collection queries."""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable

from bson import ObjectId

from mongo_facade.models.document import ID_FIELD


class FilterOperator(str, Enum):
    """Comparison applied to one field; each member compiles to a Mongo query form.

    ``EQUALS`` is an implicit equality match, ``NOT_EQUALS`` is ``$ne``, ``IN``
    is ``$in`` and ``CONTAINS`` is an escaped ``$regex`` substring match.
    """

    EQUALS = "equals"
    NOT_EQUALS = "not_equals"
    IN = "in"
    CONTAINS = "contains"


@dataclass(frozen=True, slots=True)
class PropertyFilter:
    """Match on a dotted Mongo field path such as ``meta.color`` or ``tags.0``.

    Paths may not start with ``$`` or contain empty segments; such paths would
    be read by the server as operators or rejected outright.
    """

    path: str
    value: Any
    operator: FilterOperator = FilterOperator.EQUALS

    def __post_init__(self) -> None:
        _validate_field_path(self.path)
        if self.operator is FilterOperator.IN:
            if isinstance(self.value, (str, bytes)) or not isinstance(self.value, Iterable):
                raise TypeError(
                    "PropertyFilter with operator 'in' expects a non-string iterable value."
                )
        if self.operator is FilterOperator.CONTAINS and not isinstance(self.value, str):
            raise TypeError(
                "PropertyFilter with operator 'contains' expects a string value."
            )


class LogicalOperator(str, Enum):
    """Query combinators: ``$and``, ``$or`` and ``$nor`` for ``NOT``."""

    AND = "and"
    OR = "or"
    NOT = "not"


@dataclass(frozen=True, slots=True)
class BooleanFilter:
    """Combine nested filters under one of the Mongo logical operators."""

    operator: LogicalOperator
    operands: tuple["FilterExpression", ...]

    def __post_init__(self) -> None:
        if not self.operands:
            raise ValueError("BooleanFilter requires at least one operand.")
        if self.operator in (LogicalOperator.AND, LogicalOperator.OR) and len(self.operands) < 2:
            raise ValueError(f"{self.operator.value} requires two or more operands.")
        if self.operator is LogicalOperator.NOT and len(self.operands) != 1:
            raise ValueError("NOT requires exactly one operand.")


FilterExpression = PropertyFilter | BooleanFilter
FilterSpec = Mapping[str, Any] | FilterExpression


def _validate_field_path(path: str) -> None:
    if not isinstance(path, str) or not path.strip():
        raise ValueError("Field path cannot be empty.")
    if path.startswith("$") or "" in path.split("."):
        raise ValueError(f"{path!r} is not a valid Mongo field path.")


def _build_property_filter(property_filter: PropertyFilter) -> dict[str, Any]:
    operator = property_filter.operator
    path = property_filter.path

    if operator is FilterOperator.EQUALS:
        return {path: property_filter.value}
    if operator is FilterOperator.NOT_EQUALS:
        return {path: {"$ne": property_filter.value}}
    if operator is FilterOperator.IN:
        values = list(property_filter.value)
        if not values:
            raise ValueError("PropertyFilter with operator 'in' requires at least one value.")
        return {path: {"$in": values}}
    if operator is FilterOperator.CONTAINS:
        return {path: {"$regex": re.escape(property_filter.value)}}

    raise ValueError(f"Unsupported filter operator: {operator}")


def build_filter_document(filter_expression: FilterExpression) -> dict[str, Any]:
    """Compile a filter expression into a MongoDB filter document."""
    if isinstance(filter_expression, PropertyFilter):
        return _build_property_filter(filter_expression)
    if isinstance(filter_expression, BooleanFilter):
        compiled_operands = [
            build_filter_document(operand) for operand in filter_expression.operands
        ]
        if filter_expression.operator is LogicalOperator.AND:
            return {"$and": compiled_operands}
        if filter_expression.operator is LogicalOperator.OR:
            return {"$or": compiled_operands}
        if filter_expression.operator is LogicalOperator.NOT:
            return {"$nor": compiled_operands}
        raise ValueError(f"Unsupported logical operator: {filter_expression.operator}")

    raise TypeError(f"Unsupported filter expression type: {type(filter_expression)!r}")


def resolve_filter(filter_spec: FilterSpec | None) -> dict[str, Any]:
    """Return a filter document; raw mappings are forwarded verbatim."""
    if filter_spec is None:
        return {}
    if isinstance(filter_spec, (PropertyFilter, BooleanFilter)):
        return build_filter_document(filter_spec)
    if isinstance(filter_spec, Mapping):
        return dict(filter_spec)
    raise TypeError(f"Unsupported filter type: {type(filter_spec)!r}")


def id_filter(document_id: ObjectId) -> dict[str, Any]:
    """Filter selecting a single document by its identifier."""
    return {ID_FIELD: document_id}


__all__ = [
    "BooleanFilter",
    "FilterExpression",
    "FilterOperator",
    "FilterSpec",
    "LogicalOperator",
    "PropertyFilter",
    "build_filter_document",
    "id_filter",
    "resolve_filter",
]
