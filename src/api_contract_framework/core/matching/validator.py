"""Body validator driven by a matcher tree."""

from __future__ import annotations

from typing import Any

from api_contract_framework.core.matching.matchers import EachLikeMatcher, Matcher, ObjectMatcher, as_matcher
from api_contract_framework.core.validation.config import PartialValidationConfig, ValidationDirection
from api_contract_framework.core.validation.json_values import json_type_name, parse_json
from api_contract_framework.core.validation.violation import ROOT_PATH, Violation, ViolationType, child_path, item_path


class MatcherSchemaValidator:
    """Validates bodies against a declarative matcher tree.

    Unlike the schema validators, undeclared fields are ignored by default.

    Args:
        body: A matcher, or a specification accepted by ``as_matcher``
            (e.g. a ``dict`` of field name to matcher).
        ignore_extra_fields: When ``False``, fields that no ``ObjectMatcher``
            names are reported as ``UnexpectedField``.
        label: Optional display name for diagnostics.
    """

    def __init__(self, body: Any, *, ignore_extra_fields: bool = True, label: str | None = None) -> None:
        self._matcher = as_matcher(body)
        self._ignore_extra_fields = ignore_extra_fields
        self._label = label

    @property
    def matcher(self) -> Matcher:
        return self._matcher

    @property
    def expected_type_label(self) -> str:
        return self._label or self._matcher.description

    @property
    def schema_type_name(self) -> str:
        return self._matcher.json_type

    def validate(
        self,
        json_text: str,
        location: str,
        config: PartialValidationConfig | None = None,
    ) -> list[Violation]:
        """Validate a JSON document against the matcher tree.

        Raises:
            ValueError: If *json_text* or *location* is ``None``.
        """
        if json_text is None:
            raise ValueError("json_text must not be None")
        if location is None:
            raise ValueError("location must not be None")
        try:
            value = parse_json(json_text)
        except ValueError as exc:
            return [
                Violation(
                    location,
                    ROOT_PATH,
                    f"Invalid JSON: {exc}",
                    ViolationType.INVALID_TYPE,
                    expected="valid JSON",
                    actual="malformed JSON",
                )
            ]

        matcher = self._matcher
        if config is not None and config.fields_to_validate and isinstance(matcher, ObjectMatcher):
            matcher = matcher.restricted_to(config.fields_to_validate)
        violations = matcher.validate(value, location, ROOT_PATH)
        if self._reports_extra_fields(config):
            violations.extend(_extra_fields(self._matcher, value, location, ROOT_PATH))
        return violations

    def generate_sample(self, direction: ValidationDirection = ValidationDirection.BOTH) -> Any:
        return self._matcher.generate_sample()

    def _reports_extra_fields(self, config: PartialValidationConfig | None) -> bool:
        if config is None:
            return not self._ignore_extra_fields
        if config.ignore_extra_fields:
            return False
        return config.strict_mode or not self._ignore_extra_fields

    def __repr__(self) -> str:
        return f"MatcherSchemaValidator({self.expected_type_label!r})"


def _extra_fields(matcher: Matcher, value: Any, location: str, path: str) -> list[Violation]:
    """Report fields no ``ObjectMatcher`` names, descending through arrays."""
    violations: list[Violation] = []
    if isinstance(matcher, ObjectMatcher) and isinstance(value, dict):
        for name, item in value.items():
            nested = matcher.fields.get(name)
            if nested is None:
                violations.append(
                    Violation(
                        location,
                        child_path(path, name),
                        f"Unexpected field '{name}'",
                        ViolationType.UNEXPECTED_FIELD,
                        actual=json_type_name(item),
                    )
                )
            else:
                violations.extend(_extra_fields(nested, item, location, child_path(path, name)))
    elif isinstance(matcher, EachLikeMatcher) and isinstance(value, list):
        for index, element in enumerate(value):
            violations.extend(_extra_fields(matcher.item, element, location, item_path(path, index)))
    return violations
