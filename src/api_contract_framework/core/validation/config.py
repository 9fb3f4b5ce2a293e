"""Partial validation policy and field visibility rules."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from enum import Enum
from types import MappingProxyType
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from api_contract_framework.core.matching.matchers import Matcher


class ValidationDirection(str, Enum):
    """Which side of an exchange a payload belongs to.

    Controls visibility of ``readOnly`` (hidden on requests) and
    ``writeOnly`` (hidden on responses) properties.
    """

    REQUEST = "request"
    RESPONSE = "response"
    BOTH = "both"


class FieldDisposition(Enum):
    """What the object validator does with a declared property."""

    VALIDATE = "validate"
    FILTERED_OUT = "filtered_out"
    DIRECTION_HIDDEN = "direction_hidden"


# (selected by field filter, hidden for direction) -> disposition
_DISPOSITIONS: dict[tuple[bool, bool], FieldDisposition] = {
    (True, False): FieldDisposition.VALIDATE,
    (True, True): FieldDisposition.DIRECTION_HIDDEN,
    (False, False): FieldDisposition.FILTERED_OUT,
    (False, True): FieldDisposition.FILTERED_OUT,
}


def hidden_for_direction(read_only: bool, write_only: bool, direction: ValidationDirection) -> bool:
    """Return ``True`` if a property must not appear on *direction*."""
    if direction is ValidationDirection.REQUEST:
        return read_only
    if direction is ValidationDirection.RESPONSE:
        return write_only
    return False


@dataclass(frozen=True)
class PartialValidationConfig:
    """Policy controlling how strictly a payload is validated.

    The field filter and matcher overrides apply to the root object (and to
    the items of a root array). Direction, strict mode and extra-field
    tolerance apply at every depth.
    """

    fields_to_validate: frozenset[str] = frozenset()
    """Root fields to check; empty means all fields. Case-insensitive."""

    ignore_extra_fields: bool = False
    """Never report undeclared properties, even on closed objects."""

    strict_mode: bool = False
    """Report undeclared properties even when the schema allows them."""

    direction: ValidationDirection = ValidationDirection.BOTH
    """Exchange side the payload belongs to."""

    matcher_overrides: Mapping[str, Matcher] = field(default_factory=dict, hash=False)
    """Root field name to matcher used instead of the schema."""

    def __post_init__(self) -> None:
        object.__setattr__(self, "fields_to_validate", frozenset(self.fields_to_validate))
        object.__setattr__(self, "direction", ValidationDirection(self.direction))
        object.__setattr__(self, "matcher_overrides", MappingProxyType(dict(self.matcher_overrides)))
        if any(not name for name in self.fields_to_validate):
            raise ValueError("fields_to_validate must not contain empty names")

    @classmethod
    def only(cls, *fields: str, **options: object) -> PartialValidationConfig:
        """Build a config that checks only the named root fields."""
        return cls(fields_to_validate=frozenset(fields), **options)  # type: ignore[arg-type]

    def for_direction(self, direction: ValidationDirection | str) -> PartialValidationConfig:
        return replace(self, direction=ValidationDirection(direction))

    def with_matcher(self, field_name: str, matcher: Matcher) -> PartialValidationConfig:
        overrides = dict(self.matcher_overrides)
        overrides[field_name] = matcher
        return replace(self, matcher_overrides=overrides)

    def for_nested(self) -> PartialValidationConfig:
        """Return the config applied below the root object."""
        if not self.fields_to_validate and not self.matcher_overrides:
            return self
        return replace(self, fields_to_validate=frozenset(), matcher_overrides={})

    def selects(self, field_name: str) -> bool:
        """Return ``True`` if the field filter admits *field_name*."""
        if not self.fields_to_validate:
            return True
        folded = field_name.casefold()
        return any(name.casefold() == folded for name in self.fields_to_validate)

    def matcher_for(self, field_name: str) -> Matcher | None:
        """Look up a matcher override, exact name first then case-insensitive."""
        matcher = self.matcher_overrides.get(field_name)
        if matcher is not None:
            return matcher
        folded = field_name.casefold()
        for name, candidate in self.matcher_overrides.items():
            if name.casefold() == folded:
                return candidate
        return None

    def rejects_extra_fields(self, additional_properties: bool) -> bool:
        """Return ``True`` if undeclared properties must be reported."""
        if self.ignore_extra_fields:
            return False
        return self.strict_mode or not additional_properties

    def disposition(self, field_name: str, read_only: bool, write_only: bool) -> FieldDisposition:
        """Classify a declared property for the object validator."""
        selected = self.selects(field_name)
        hidden = hidden_for_direction(read_only, write_only, self.direction)
        return _DISPOSITIONS[(selected, hidden)]

