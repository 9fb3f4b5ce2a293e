"""Discriminator resolution for polymorphic unions.

Resolution is expressed as a decision table: :func:`resolve_discriminator`
classifies a value into one :class:`DiscriminatorOutcome`, and validators
dispatch on the outcome. Keeping the classification separate from the
violations it produces lets each branch be tested on its own.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

from api_contract_framework.core.schema.definition import SchemaNode


class DiscriminatorOutcome(Enum):
    """Result of reading a union's discriminator from a value."""

    NOT_APPLICABLE = "not_applicable"
    """No discriminator declared, or the value is not an object."""

    MISSING_PROPERTY = "missing_property"
    """The property is absent or not a string."""

    UNMAPPED_VALUE = "unmapped_value"
    """The property holds a value no member is registered for."""

    RESOLVED = "resolved"
    """A single member was selected."""


@dataclass(frozen=True)
class DiscriminatorResolution:
    """Outcome of resolving a discriminator plus the data each branch needs."""

    outcome: DiscriminatorOutcome
    property_name: str | None = None
    value: Any = None
    branch: SchemaNode | None = None
    valid_values: tuple[str, ...] = ()


def valid_discriminator_values(node: SchemaNode) -> tuple[str, ...]:
    """Return the values a discriminated union accepts.

    Mapping keys when a mapping is declared, otherwise member titles.
    """
    if node.discriminator is None:
        return ()
    if node.discriminator.mapping:
        return tuple(node.discriminator.mapping)
    return tuple(member.title for member in node.members if member.title)


def resolve_discriminator(value: Any, node: SchemaNode) -> DiscriminatorResolution:
    """Classify *value* against the discriminator of union *node*."""
    discriminator = node.discriminator
    if discriminator is None or not isinstance(value, dict):
        return DiscriminatorResolution(DiscriminatorOutcome.NOT_APPLICABLE)

    name = discriminator.property_name
    valid = valid_discriminator_values(node)
    selector = value.get(name)
    if not isinstance(selector, str):
        return DiscriminatorResolution(
            DiscriminatorOutcome.MISSING_PROPERTY,
            property_name=name,
            value=selector,
            valid_values=valid,
        )

    branch = discriminator.mapping.get(selector)
    if branch is None:
        folded = selector.casefold()
        branch = next(
            (m for m in node.members if m.title is not None and m.title.casefold() == folded),
            None,
        )
    if branch is None:
        return DiscriminatorResolution(
            DiscriminatorOutcome.UNMAPPED_VALUE,
            property_name=name,
            value=selector,
            valid_values=valid,
        )
    return DiscriminatorResolution(
        DiscriminatorOutcome.RESOLVED,
        property_name=name,
        value=selector,
        branch=branch,
        valid_values=valid,
    )
