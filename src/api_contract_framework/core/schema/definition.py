"""Immutable schema tree describing an expected JSON shape."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any


class SchemaKind(str, Enum):
    """Variant tag of a schema node.

    The ``str`` mixin allows natural string comparison without ``.value``.
    """

    OBJECT = "object"
    ARRAY = "array"
    STRING = "string"
    INTEGER = "integer"
    NUMBER = "number"
    BOOLEAN = "boolean"
    NULL = "null"
    UNION = "union"


class CompositionKind(str, Enum):
    """How the members of a union combine."""

    ANY_OF = "anyOf"
    ONE_OF = "oneOf"
    ALL_OF = "allOf"


class _Unset(Enum):
    UNSET = "UNSET"

    def __repr__(self) -> str:
        return "UNSET"


UNSET = _Unset.UNSET
"""Marker for ``const``, ``default`` and ``example`` when not declared.

``None`` is a legitimate JSON value for all three, so it cannot double as
the "absent" marker.
"""


@dataclass(frozen=True)
class Discriminator:
    """Names the property whose string value selects a union member.

    Args:
        property_name: The discriminating property (e.g. ``"kind"``).
        mapping: Explicit value to member schema mapping. When empty,
            members are selected by a case-insensitive ``title`` match.
    """

    property_name: str
    mapping: Mapping[str, SchemaNode] = field(default_factory=dict, hash=False)

    def __post_init__(self) -> None:
        if not self.property_name:
            raise ValueError("property_name must not be empty")
        object.__setattr__(self, "mapping", MappingProxyType(dict(self.mapping)))


@dataclass(frozen=True)
class SchemaNode:
    """One node of a schema tree.

    Exactly one ``kind`` per node. Attributes that do not apply to the kind
    are left at their defaults. Nodes are built once and shared by
    reference; they are never mutated after construction.
    """

    kind: SchemaKind

    # object
    properties: Mapping[str, SchemaNode] = field(default_factory=dict, hash=False)
    required: frozenset[str] = frozenset()
    additional_properties: bool = True

    # array
    items: SchemaNode | None = None
    min_items: int | None = None
    max_items: int | None = None
    unique_items: bool = False

    # string
    format: str | None = None
    pattern: str | None = None
    min_length: int | None = None
    max_length: int | None = None

    # integer / number
    minimum: float | None = None
    maximum: float | None = None
    exclusive_minimum: float | None = None
    exclusive_maximum: float | None = None
    multiple_of: float | None = None

    # union
    composition: CompositionKind | None = None
    members: tuple[SchemaNode, ...] = ()
    discriminator: Discriminator | None = None

    # any kind
    enum: tuple[Any, ...] | None = None
    nullable: bool = False
    read_only: bool = False
    write_only: bool = False
    const: Any = UNSET
    default: Any = UNSET
    example: Any = UNSET
    title: str | None = None
    description: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "kind", SchemaKind(self.kind))
        object.__setattr__(self, "properties", MappingProxyType(dict(self.properties)))
        object.__setattr__(self, "required", frozenset(self.required))
        object.__setattr__(self, "members", tuple(self.members))
        if self.enum is not None:
            object.__setattr__(self, "enum", tuple(self.enum))
        if self.composition is not None:
            object.__setattr__(self, "composition", CompositionKind(self.composition))
        self._check_structure()
        self._check_bounds()

    def _check_structure(self) -> None:
        if self.kind is SchemaKind.UNION:
            if self.composition is None:
                raise ValueError("union nodes must declare a composition")
            if not self.members:
                raise ValueError("union nodes must have at least one member")
            if self.discriminator is not None and self.composition is CompositionKind.ALL_OF:
                raise ValueError("discriminator is not allowed on allOf")
        elif self.members or self.composition is not None or self.discriminator is not None:
            raise ValueError(f"{self.kind.value} nodes cannot carry union members")
        if self.kind is SchemaKind.ARRAY and self.items is None:
            raise ValueError("array nodes must declare items")
        if self.kind is not SchemaKind.ARRAY and self.items is not None:
            raise ValueError(f"{self.kind.value} nodes cannot declare items")
        if self.kind is not SchemaKind.OBJECT and self.properties:
            raise ValueError(f"{self.kind.value} nodes cannot declare properties")
        if self.read_only and self.write_only:
            raise ValueError("a node cannot be both read_only and write_only")

    def _check_bounds(self) -> None:
        for name in ("min_items", "max_items", "min_length", "max_length"):
            value = getattr(self, name)
            if value is not None and value < 0:
                raise ValueError(f"{name} must be non-negative")
        _check_order("min_items", self.min_items, "max_items", self.max_items)
        _check_order("min_length", self.min_length, "max_length", self.max_length)
        _check_order("minimum", self.minimum, "maximum", self.maximum)
        if self.multiple_of is not None and self.multiple_of <= 0:
            raise ValueError("multiple_of must be positive")

    @property
    def type_name(self) -> str:
        """Type label used in messages and body type comparisons."""
        if self.kind is SchemaKind.UNION and self.composition is not None:
            return self.composition.value
        return self.kind.value

    @property
    def is_discriminated(self) -> bool:
        return self.discriminator is not None

    def get_property(self, name: str) -> SchemaNode | None:
        """Look up a declared property by name.

        Returns:
            The property schema, or ``None`` if not declared.
        """
        return self.properties.get(name)

    def accepts_null(self) -> bool:
        return self.nullable or self.kind is SchemaKind.NULL


def _check_order(low_name: str, low: float | None, high_name: str, high: float | None) -> None:
    if low is not None and high is not None and low > high:
        raise ValueError(f"{low_name} must not exceed {high_name}")


def object_schema(
    properties: Mapping[str, SchemaNode] | None = None,
    required: Iterable[str] = (),
    *,
    additional_properties: bool = True,
    **attributes: Any,
) -> SchemaNode:
    """Build an object node.

    Example:
        >>> user = object_schema(
        ...     {"id": integer_schema(), "name": string_schema()},
        ...     required=["id"],
        ...     additional_properties=False,
        ... )
    """
    return SchemaNode(
        kind=SchemaKind.OBJECT,
        properties=properties or {},
        required=frozenset(required),
        additional_properties=additional_properties,
        **attributes,
    )


def array_schema(items: SchemaNode, **attributes: Any) -> SchemaNode:
    return SchemaNode(kind=SchemaKind.ARRAY, items=items, **attributes)


def string_schema(**attributes: Any) -> SchemaNode:
    return SchemaNode(kind=SchemaKind.STRING, **attributes)


def integer_schema(**attributes: Any) -> SchemaNode:
    return SchemaNode(kind=SchemaKind.INTEGER, **attributes)


def number_schema(**attributes: Any) -> SchemaNode:
    return SchemaNode(kind=SchemaKind.NUMBER, **attributes)


def boolean_schema(**attributes: Any) -> SchemaNode:
    return SchemaNode(kind=SchemaKind.BOOLEAN, **attributes)


def null_schema(**attributes: Any) -> SchemaNode:
    return SchemaNode(kind=SchemaKind.NULL, **attributes)


def union_schema(
    *members: SchemaNode,
    composition: CompositionKind = CompositionKind.ANY_OF,
    **attributes: Any,
) -> SchemaNode:
    """Build an anyOf/oneOf/allOf node over *members*."""
    return SchemaNode(kind=SchemaKind.UNION, composition=composition, members=members, **attributes)


def discriminated_union(
    property_name: str,
    mapping: Mapping[str, SchemaNode],
    *,
    composition: CompositionKind = CompositionKind.ONE_OF,
    **attributes: Any,
) -> SchemaNode:
    """Build a union whose member is selected by *property_name*.

    Example:
        >>> pet = discriminated_union("kind", {"cat": cat_schema, "dog": dog_schema})
    """
    return SchemaNode(
        kind=SchemaKind.UNION,
        composition=composition,
        members=tuple(mapping.values()),
        discriminator=Discriminator(property_name, mapping),
        **attributes,
    )
