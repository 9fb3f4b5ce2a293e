"""Recursive validation of JSON values against a schema tree.

The public entry points are :func:`validate_json` and :func:`validate_value`.
Both are pure: they hold no state between calls, never mutate their inputs
and return violations in a deterministic order. Violations accumulate; the
only short-circuits are a type mismatch at a node (its constraints are not
checked further) and the discriminator outcomes that stop union matching.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable
from typing import Any

from api_contract_framework.core.schema.definition import UNSET, CompositionKind, SchemaKind, SchemaNode
from api_contract_framework.core.schema.discriminator import (
    DiscriminatorOutcome,
    DiscriminatorResolution,
    resolve_discriminator,
)
from api_contract_framework.core.validation.config import FieldDisposition, PartialValidationConfig
from api_contract_framework.core.validation.formats import check_format
from api_contract_framework.core.validation.json_values import (
    first_duplicate,
    is_number,
    json_equal,
    json_type_name,
    parse_json,
    render,
)
from api_contract_framework.core.validation.violation import (
    ROOT_PATH,
    Violation,
    ViolationType,
    child_path,
    item_path,
)

logger = logging.getLogger(__name__)

_NO_TOLERATED: frozenset[str] = frozenset()
_MULTIPLE_TOLERANCE = 1e-9


def validate_json(
    json_text: str,
    schema: SchemaNode,
    location: str,
    config: PartialValidationConfig | None = None,
) -> list[Violation]:
    """Validate a JSON document against *schema*.

    Args:
        json_text: Raw JSON text.
        schema: Root schema node.
        location: Label attached to every violation (e.g. ``"GET /users"``).
        config: Optional partial validation policy.

    Returns:
        Violations in detection order. Malformed JSON yields exactly one
        ``InvalidType`` violation at ``$``.

    Raises:
        ValueError: If any required argument is ``None``.
    """
    if json_text is None:
        raise ValueError("json_text must not be None")
    _require_arguments(schema, location)
    try:
        value = parse_json(json_text)
    except ValueError as exc:
        return [
            Violation(
                location=location,
                path=ROOT_PATH,
                message=f"Invalid JSON: {exc}",
                type=ViolationType.INVALID_TYPE,
                expected="valid JSON",
                actual="malformed JSON",
            )
        ]
    return validate_value(value, schema, location, config)


def validate_value(
    value: Any,
    schema: SchemaNode,
    location: str,
    config: PartialValidationConfig | None = None,
) -> list[Violation]:
    """Validate an already decoded JSON value against *schema*.

    Raises:
        ValueError: If *schema* or *location* is ``None``.
    """
    _require_arguments(schema, location)
    return _NodeValidator(location).validate(value, schema, ROOT_PATH, config or PartialValidationConfig())


def _require_arguments(schema: SchemaNode, location: str) -> None:
    if schema is None:
        raise ValueError("schema must not be None")
    if location is None:
        raise ValueError("location must not be None")


class _NodeValidator:
    """Per-call walker; carries only the location label."""

    def __init__(self, location: str) -> None:
        self._location = location
        self._kind_handlers: dict[SchemaKind, Callable[..., list[Violation]]] = {
            SchemaKind.OBJECT: self._validate_object,
            SchemaKind.ARRAY: self._validate_array,
            SchemaKind.STRING: self._validate_string,
            SchemaKind.INTEGER: self._validate_number,
            SchemaKind.NUMBER: self._validate_number,
            SchemaKind.BOOLEAN: self._validate_boolean,
            SchemaKind.NULL: self._validate_null,
        }
        self._discriminator_handlers: dict[DiscriminatorOutcome, Callable[..., list[Violation]]] = {
            DiscriminatorOutcome.NOT_APPLICABLE: self._match_sequentially,
            DiscriminatorOutcome.MISSING_PROPERTY: self._missing_discriminator,
            DiscriminatorOutcome.UNMAPPED_VALUE: self._unmapped_discriminator,
            DiscriminatorOutcome.RESOLVED: self._resolved_branch,
        }

    def validate(
        self,
        value: Any,
        node: SchemaNode,
        path: str,
        config: PartialValidationConfig,
        tolerated: frozenset[str] = _NO_TOLERATED,
    ) -> list[Violation]:
        if node.kind is SchemaKind.UNION:
            return self._validate_union(value, node, path, config, tolerated)
        if value is None:
            if node.accepts_null():
                return []
            return [
                self._violation(
                    path,
                    "Value must not be null",
                    ViolationType.UNEXPECTED_NULL,
                    expected=node.type_name,
                    actual="null",
                )
            ]
        return self._kind_handlers[node.kind](value, node, path, config, tolerated)

    def _violation(
        self,
        path: str,
        message: str,
        violation_type: ViolationType,
        expected: str | None = None,
        actual: str | None = None,
    ) -> Violation:
        return Violation(self._location, path, message, violation_type, expected, actual)

    def _type_mismatch(self, value: Any, expected: str, path: str) -> list[Violation]:
        actual = json_type_name(value)
        return [
            self._violation(
                path,
                f"Expected {expected} but got {actual}",
                ViolationType.INVALID_TYPE,
                expected=expected,
                actual=actual,
            )
        ]

    def _allowed_values(self, value: Any, node: SchemaNode, path: str) -> list[Violation]:
        violations: list[Violation] = []
        if node.const is not UNSET and not json_equal(value, node.const):
            violations.append(
                self._violation(
                    path,
                    f"Value must be {render(node.const)}",
                    ViolationType.INVALID_ENUM_VALUE,
                    expected=render(node.const),
                    actual=render(value),
                )
            )
        if node.enum is not None and not any(json_equal(value, option) for option in node.enum):
            allowed = ", ".join(render(option) for option in node.enum)
            violations.append(
                self._violation(
                    path,
                    f"Value must be one of: {allowed}",
                    ViolationType.INVALID_ENUM_VALUE,
                    expected=allowed,
                    actual=render(value),
                )
            )
        return violations

    # -- unions ------------------------------------------------------------

    def _validate_union(
        self,
        value: Any,
        node: SchemaNode,
        path: str,
        config: PartialValidationConfig,
        tolerated: frozenset[str],
    ) -> list[Violation]:
        if value is None and node.nullable:
            return []
        if node.composition is CompositionKind.ALL_OF:
            if value is None:
                return self._null_against_members(node, path, config, require_all=True)
            violations: list[Violation] = []
            for member in node.members:
                violations.extend(self.validate(value, member, path, config, tolerated))
            return violations
        if value is None:
            return self._null_against_members(node, path, config, require_all=False)
        resolution = resolve_discriminator(value, node)
        return self._discriminator_handlers[resolution.outcome](value, node, path, config, resolution)

    def _null_against_members(
        self,
        node: SchemaNode,
        path: str,
        config: PartialValidationConfig,
        *,
        require_all: bool,
    ) -> list[Violation]:
        outcomes = [not self.validate(None, member, path, config) for member in node.members]
        accepted = all(outcomes) if require_all else any(outcomes)
        if accepted:
            return []
        return [
            self._violation(
                path,
                "Value must not be null",
                ViolationType.UNEXPECTED_NULL,
                expected=node.type_name,
                actual="null",
            )
        ]

    def _match_sequentially(
        self,
        value: Any,
        node: SchemaNode,
        path: str,
        config: PartialValidationConfig,
        resolution: DiscriminatorResolution,
    ) -> list[Violation]:
        for member in node.members:
            if not self.validate(value, member, path, config):
                return []
        return [
            self._violation(
                path,
                "Value does not match any of the allowed schemas",
                ViolationType.INVALID_TYPE,
                expected=" | ".join(member.title or member.type_name for member in node.members),
                actual=json_type_name(value),
            )
        ]

    def _missing_discriminator(
        self,
        value: Any,
        node: SchemaNode,
        path: str,
        config: PartialValidationConfig,
        resolution: DiscriminatorResolution,
    ) -> list[Violation]:
        name = resolution.property_name or ""
        present = name in value
        message = (
            f"Discriminator property '{name}' must be a string"
            if present
            else f"Missing required discriminator property '{name}'"
        )
        return [
            self._violation(
                child_path(path, name),
                message,
                ViolationType.MISSING_REQUIRED,
                expected=name,
                actual=json_type_name(resolution.value) if present else "missing",
            )
        ]

    def _unmapped_discriminator(
        self,
        value: Any,
        node: SchemaNode,
        path: str,
        config: PartialValidationConfig,
        resolution: DiscriminatorResolution,
    ) -> list[Violation]:
        name = resolution.property_name or ""
        return [
            self._violation(
                child_path(path, name),
                f"Unknown discriminator value '{resolution.value}' for property '{name}'",
                ViolationType.DISCRIMINATOR_MISMATCH,
                expected=", ".join(resolution.valid_values),
                actual=str(resolution.value),
            )
        ]

    def _resolved_branch(
        self,
        value: Any,
        node: SchemaNode,
        path: str,
        config: PartialValidationConfig,
        resolution: DiscriminatorResolution,
    ) -> list[Violation]:
        branch = resolution.branch
        if branch is None:
            return self._match_sequentially(value, node, path, config, resolution)
        tolerated = frozenset({resolution.property_name}) if resolution.property_name else _NO_TOLERATED
        return self.validate(value, branch, path, config, tolerated)

    # -- containers --------------------------------------------------------

    def _validate_object(
        self,
        value: Any,
        node: SchemaNode,
        path: str,
        config: PartialValidationConfig,
        tolerated: frozenset[str],
    ) -> list[Violation]:
        if not isinstance(value, dict):
            return self._type_mismatch(value, "object", path)

        violations = self._allowed_values(value, node, path)
        nested = config.for_nested()

        for name, prop in node.properties.items():
            disposition = config.disposition(name, prop.read_only, prop.write_only)
            present = name in value
            field_path = child_path(path, name)
            if disposition is FieldDisposition.FILTERED_OUT:
                continue
            if disposition is FieldDisposition.DIRECTION_HIDDEN:
                if present:
                    access = "read-only" if prop.read_only else "write-only"
                    violations.append(
                        self._violation(
                            field_path,
                            f"Field '{name}' is {access} and must not appear in a {config.direction.value}",
                            ViolationType.UNEXPECTED_FIELD,
                            expected="absent",
                            actual="present",
                        )
                    )
                continue
            if not present:
                if name in node.required:
                    violations.append(self._missing_field(name, field_path, prop.type_name))
                continue
            matcher = config.matcher_for(name)
            if matcher is not None:
                violations.extend(matcher.validate(value[name], self._location, field_path))
            else:
                violations.extend(self.validate(value[name], prop, field_path, nested))

        for name in sorted(n for n in node.required if n not in node.properties):
            if name not in value and config.selects(name):
                violations.append(self._missing_field(name, child_path(path, name), None))

        reject_extra = config.rejects_extra_fields(node.additional_properties)
        for name, item in value.items():
            if name in node.properties or name in tolerated:
                continue
            matcher = config.matcher_for(name)
            if matcher is not None:
                violations.extend(matcher.validate(item, self._location, child_path(path, name)))
            elif reject_extra:
                violations.append(
                    self._violation(
                        child_path(path, name),
                        f"Unexpected field '{name}'",
                        ViolationType.UNEXPECTED_FIELD,
                        actual=json_type_name(item),
                    )
                )
        return violations

    def _missing_field(self, name: str, path: str, expected: str | None) -> Violation:
        return self._violation(
            path,
            f"Missing required field '{name}'",
            ViolationType.MISSING_REQUIRED,
            expected=expected,
            actual="missing",
        )

    def _validate_array(
        self,
        value: Any,
        node: SchemaNode,
        path: str,
        config: PartialValidationConfig,
        tolerated: frozenset[str],
    ) -> list[Violation]:
        if not isinstance(value, list):
            return self._type_mismatch(value, "array", path)

        violations = self._allowed_values(value, node, path)
        count = len(value)
        if node.min_items is not None and count < node.min_items:
            violations.append(
                self._violation(
                    path,
                    f"Array must contain at least {node.min_items} items",
                    ViolationType.OUT_OF_RANGE,
                    expected=f">= {node.min_items} items",
                    actual=f"{count} items",
                )
            )
        if node.max_items is not None and count > node.max_items:
            violations.append(
                self._violation(
                    path,
                    f"Array must contain at most {node.max_items} items",
                    ViolationType.OUT_OF_RANGE,
                    expected=f"<= {node.max_items} items",
                    actual=f"{count} items",
                )
            )
        if node.unique_items:
            duplicate = first_duplicate(value)
            if duplicate is not None:
                first, repeat = duplicate
                violations.append(
                    self._violation(
                        path,
                        f"Array items must be unique; item {repeat} duplicates item {first}",
                        ViolationType.OUT_OF_RANGE,
                        expected="unique items",
                        actual=f"duplicate {render(value[repeat])}",
                    )
                )
        items = node.items
        if items is not None:
            for index, item in enumerate(value):
                violations.extend(self.validate(item, items, item_path(path, index), config))
        return violations

    # -- scalars -----------------------------------------------------------

    def _validate_string(
        self,
        value: Any,
        node: SchemaNode,
        path: str,
        config: PartialValidationConfig,
        tolerated: frozenset[str],
    ) -> list[Violation]:
        if not isinstance(value, str):
            return self._type_mismatch(value, "string", path)

        violations = self._allowed_values(value, node, path)
        length = len(value)
        if node.min_length is not None and length < node.min_length:
            violations.append(
                self._violation(
                    path,
                    f"String must be at least {node.min_length} characters",
                    ViolationType.OUT_OF_RANGE,
                    expected=f">= {node.min_length} characters",
                    actual=f"{length} characters",
                )
            )
        if node.max_length is not None and length > node.max_length:
            violations.append(
                self._violation(
                    path,
                    f"String must be at most {node.max_length} characters",
                    ViolationType.OUT_OF_RANGE,
                    expected=f"<= {node.max_length} characters",
                    actual=f"{length} characters",
                )
            )
        if node.pattern is not None and not _pattern_matches(node.pattern, value):
            violations.append(
                self._violation(
                    path,
                    f"Value does not match pattern '{node.pattern}'",
                    ViolationType.PATTERN_MISMATCH,
                    expected=node.pattern,
                    actual=value,
                )
            )
        if node.format is not None and not check_format(node.format, value):
            violations.append(
                self._violation(
                    path,
                    f"Value does not match format '{node.format}'",
                    ViolationType.INVALID_FORMAT,
                    expected=node.format,
                    actual=value,
                )
            )
        return violations

    def _validate_number(
        self,
        value: Any,
        node: SchemaNode,
        path: str,
        config: PartialValidationConfig,
        tolerated: frozenset[str],
    ) -> list[Violation]:
        if not is_number(value):
            return self._type_mismatch(value, node.kind.value, path)
        if node.kind is SchemaKind.INTEGER and isinstance(value, float) and not value.is_integer():
            return [
                self._violation(
                    path,
                    "Expected integer but got decimal",
                    ViolationType.INVALID_TYPE,
                    expected="integer",
                    actual="number",
                )
            ]

        violations = self._allowed_values(value, node, path)
        lower = _lower_bound_violation(value, node)
        if lower is not None:
            message, expected = lower
            violations.append(
                self._violation(path, message, ViolationType.OUT_OF_RANGE, expected, _format_number(value))
            )
        upper = _upper_bound_violation(value, node)
        if upper is not None:
            message, expected = upper
            violations.append(
                self._violation(path, message, ViolationType.OUT_OF_RANGE, expected, _format_number(value))
            )
        if node.multiple_of is not None and not is_multiple_of(value, node.multiple_of):
            divisor = _format_number(node.multiple_of)
            violations.append(
                self._violation(
                    path,
                    f"Value is not a multiple of {divisor}",
                    ViolationType.OUT_OF_RANGE,
                    expected=f"multiple of {divisor}",
                    actual=_format_number(value),
                )
            )
        return violations

    def _validate_boolean(
        self,
        value: Any,
        node: SchemaNode,
        path: str,
        config: PartialValidationConfig,
        tolerated: frozenset[str],
    ) -> list[Violation]:
        if not isinstance(value, bool):
            return self._type_mismatch(value, "boolean", path)
        return self._allowed_values(value, node, path)

    def _validate_null(
        self,
        value: Any,
        node: SchemaNode,
        path: str,
        config: PartialValidationConfig,
        tolerated: frozenset[str],
    ) -> list[Violation]:
        return self._type_mismatch(value, "null", path)


def _pattern_matches(pattern: str, value: str) -> bool:
    try:
        return re.search(pattern, value) is not None
    except re.error as exc:
        logger.debug("Invalid pattern %r treated as a mismatch: %s", pattern, exc)
        return False


def _lower_bound_violation(value: float, node: SchemaNode) -> tuple[str, str] | None:
    """Exclusive bound first; at most one violation for the lower side."""
    if node.exclusive_minimum is not None and value <= node.exclusive_minimum:
        return "Value is not greater than minimum", f"> {_format_number(node.exclusive_minimum)}"
    if node.minimum is not None and value < node.minimum:
        return "Value is less than minimum", f">= {_format_number(node.minimum)}"
    return None


def _upper_bound_violation(value: float, node: SchemaNode) -> tuple[str, str] | None:
    """Exclusive bound first; at most one violation for the upper side."""
    if node.exclusive_maximum is not None and value >= node.exclusive_maximum:
        return "Value is not less than maximum", f"< {_format_number(node.exclusive_maximum)}"
    if node.maximum is not None and value > node.maximum:
        return "Value is greater than maximum", f"<= {_format_number(node.maximum)}"
    return None


def is_multiple_of(value: float, divisor: float) -> bool:
    """Return ``True`` if *value* is a multiple of *divisor*.

    Integers use exact modulo; anything involving a float tolerates
    rounding error.
    """
    if isinstance(value, int) and isinstance(divisor, int):
        return value % divisor == 0
    quotient = value / divisor
    return abs(quotient - round(quotient)) < _MULTIPLE_TOLERANCE


def _format_number(value: float) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)
