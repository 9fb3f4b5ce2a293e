"""Build schema trees from Python type descriptions.

Supports dataclasses, ``Enum`` subclasses, ``Literal``, ``Optional``/union
types, ``list``/``tuple``/``set`` and ``dict[str, X]`` along with the common
scalar types. Dataclass field metadata may carry ``json_name``,
``read_only``, ``write_only``, ``format`` and ``description``.

Example:
    >>> @dataclass
    ... class User:
    ...     id: int = field(metadata={"read_only": True})
    ...     email: str = field(metadata={"format": "email"})
    ...     nickname: str | None = None
    >>> schema = schema_for_type(User)
"""

from __future__ import annotations

import dataclasses
import types
import typing
import uuid
from datetime import date, datetime, time
from decimal import Decimal
from enum import Enum
from typing import Any

from api_contract_framework.core.schema.definition import (
    CompositionKind,
    SchemaNode,
    array_schema,
    boolean_schema,
    integer_schema,
    null_schema,
    number_schema,
    object_schema,
    string_schema,
    union_schema,
)

_FORMATTED_STRINGS: dict[type, str] = {
    datetime: "date-time",
    date: "date",
    time: "time",
    uuid.UUID: "uuid",
}

_FIELD_ATTRIBUTES = ("read_only", "write_only", "format", "description")


def schema_for_type(annotation: Any) -> SchemaNode:
    """Reflect *annotation* into a schema node.

    Raises:
        TypeError: If the annotation cannot be expressed as JSON, or a
            dataclass refers to itself.
    """
    return _reflect(annotation, frozenset())


def _reflect(annotation: Any, seen: frozenset[type]) -> SchemaNode:
    if annotation is type(None):
        return null_schema()
    if annotation is bool:
        return boolean_schema()
    if annotation is int:
        return integer_schema()
    if annotation in (float, Decimal):
        return number_schema()
    if annotation is str:
        return string_schema()
    if annotation in _FORMATTED_STRINGS:
        return string_schema(format=_FORMATTED_STRINGS[annotation])
    if isinstance(annotation, type) and issubclass(annotation, Enum):
        return _enum_schema(annotation)
    if dataclasses.is_dataclass(annotation) and isinstance(annotation, type):
        return _dataclass_schema(annotation, seen)

    origin = typing.get_origin(annotation)
    args = typing.get_args(annotation)
    if origin is typing.Literal:
        return _literal_schema(args)
    if origin in (typing.Union, types.UnionType):
        return _union_schema(args, seen)
    if origin in (list, set, frozenset, tuple) or annotation in (list, set, frozenset, tuple):
        return _sequence_schema(origin or annotation, args, seen)
    if origin is dict or annotation is dict:
        return object_schema()
    raise TypeError(f"Cannot build a JSON schema for {annotation!r}")


def _enum_schema(enum_type: type[Enum]) -> SchemaNode:
    values = tuple(member.value for member in enum_type)
    if all(isinstance(v, bool) for v in values):
        return boolean_schema(enum=values, title=enum_type.__name__)
    if all(isinstance(v, int) and not isinstance(v, bool) for v in values):
        return integer_schema(enum=values, title=enum_type.__name__)
    return string_schema(enum=tuple(str(v) for v in values), title=enum_type.__name__)


def _literal_schema(values: tuple[Any, ...]) -> SchemaNode:
    if all(isinstance(v, bool) for v in values):
        return boolean_schema(enum=values)
    if all(isinstance(v, int) and not isinstance(v, bool) for v in values):
        return integer_schema(enum=values)
    if all(isinstance(v, str) for v in values):
        return string_schema(enum=values)
    raise TypeError(f"Literal values must share one JSON type: {values!r}")


def _union_schema(args: tuple[Any, ...], seen: frozenset[type]) -> SchemaNode:
    members = [arg for arg in args if arg is not type(None)]
    nullable = len(members) != len(args)
    if len(members) == 1:
        node = _reflect(members[0], seen)
        return dataclasses.replace(node, nullable=nullable) if nullable else node
    return union_schema(
        *(_reflect(member, seen) for member in members),
        composition=CompositionKind.ANY_OF,
        nullable=nullable,
    )


def _sequence_schema(origin: Any, args: tuple[Any, ...], seen: frozenset[type]) -> SchemaNode:
    unique = origin in (set, frozenset)
    if origin is tuple and args and args[-1] is not Ellipsis:
        if len(set(args)) != 1:
            raise TypeError("Heterogeneous tuples cannot be expressed as a JSON array")
        return array_schema(_reflect(args[0], seen), min_items=len(args), max_items=len(args))
    item_type = args[0] if args else str
    return array_schema(_reflect(item_type, seen), unique_items=unique)


def _dataclass_schema(cls: type, seen: frozenset[type]) -> SchemaNode:
    if cls in seen:
        raise TypeError(f"Recursive dataclass {cls.__name__} is not supported")
    seen = seen | {cls}
    hints = typing.get_type_hints(cls)
    properties: dict[str, SchemaNode] = {}
    required: list[str] = []
    for dc_field in dataclasses.fields(cls):
        metadata = dc_field.metadata
        name = metadata.get("json_name", dc_field.name)
        node = _reflect(hints[dc_field.name], seen)
        overrides = {key: metadata[key] for key in _FIELD_ATTRIBUTES if key in metadata}
        if overrides:
            node = dataclasses.replace(node, **overrides)
        properties[name] = node
        has_default = dc_field.default is not dataclasses.MISSING or dc_field.default_factory is not dataclasses.MISSING
        if not has_default and not node.nullable:
            required.append(name)
    return object_schema(properties, required, title=cls.__name__)
