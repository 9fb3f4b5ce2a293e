"""Declarative matchers for loose, Pact-style body assertions.

A matcher checks the *shape* of a value rather than its exact content:
``GuidMatcher`` accepts any GUID, ``IntegerMatcher(min_value=1)`` any integer
of at least one, ``EachLikeMatcher(item)`` any array whose elements match
``item``. ``ObjectMatcher`` checks only the fields it names and ignores the
rest.

Every matcher validates with ``validate(value, location, path)`` and
produces an accepted example with ``generate_sample()``.
"""

from __future__ import annotations

import re
import uuid
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from enum import Enum
from types import MappingProxyType
from typing import Any, ClassVar, Protocol, runtime_checkable

from api_contract_framework.core.validation.formats import is_date, is_date_time, is_email, is_time, is_uri, is_uuid
from api_contract_framework.core.validation.json_values import is_number, json_equal, json_type_name, render
from api_contract_framework.core.validation.violation import Violation, ViolationType, child_path, item_path


class MatcherType(str, Enum):
    """Kinds of matcher."""

    GUID = "guid"
    STRING = "string"
    NON_EMPTY_STRING = "non_empty_string"
    EMAIL = "email"
    URI = "uri"
    REGEX = "regex"
    TYPE = "type"
    INTEGER = "integer"
    DECIMAL = "decimal"
    BOOLEAN = "boolean"
    DATE_TIME = "date_time"
    DATE_ONLY = "date_only"
    TIME_ONLY = "time_only"
    EACH_LIKE = "each_like"
    ANY = "any"
    OBJECT = "object"
    NULL = "null"
    ONE_OF = "one_of"


@runtime_checkable
class Matcher(Protocol):
    """Protocol shared by all matchers."""

    matcher_type: ClassVar[MatcherType]
    json_type: ClassVar[str]

    @property
    def description(self) -> str:
        """Short phrase naming what the matcher accepts (e.g. ``"a GUID"``)."""
        ...

    def validate(self, value: Any, location: str, path: str) -> list[Violation]:
        """Check *value*; return violations, empty when it matches."""
        ...

    def generate_sample(self) -> Any:
        """Return a value this matcher accepts."""
        ...


def _unexpected_null(matcher: Matcher, location: str, path: str) -> list[Violation]:
    return [
        Violation(
            location,
            path,
            f"Expected {matcher.description} but got null",
            ViolationType.UNEXPECTED_NULL,
            expected=matcher.description,
            actual="null",
        )
    ]


def _wrong_type(matcher: Matcher, value: Any, location: str, path: str) -> list[Violation]:
    actual = json_type_name(value)
    return [
        Violation(
            location,
            path,
            f"Expected {matcher.description} but got {actual}",
            ViolationType.INVALID_TYPE,
            expected=matcher.description,
            actual=actual,
        )
    ]


def _bad_format(matcher: Matcher, value: Any, location: str, path: str) -> list[Violation]:
    return [
        Violation(
            location,
            path,
            f"Value does not match {matcher.description}",
            ViolationType.INVALID_FORMAT,
            expected=matcher.description,
            actual=render(value),
        )
    ]


def _check_string(
    matcher: Matcher,
    value: Any,
    location: str,
    path: str,
    predicate: Any = None,
) -> list[Violation]:
    """Shared null, type and format check for string-shaped matchers."""
    if value is None:
        return _unexpected_null(matcher, location, path)
    if not isinstance(value, str):
        return _wrong_type(matcher, value, location, path)
    if predicate is not None and not predicate(value):
        return _bad_format(matcher, value, location, path)
    return []


@dataclass(frozen=True)
class GuidMatcher:
    matcher_type: ClassVar[MatcherType] = MatcherType.GUID
    json_type: ClassVar[str] = "string"

    @property
    def description(self) -> str:
        return "a GUID"

    def validate(self, value: Any, location: str, path: str) -> list[Violation]:
        return _check_string(self, value, location, path, is_uuid)

    def generate_sample(self) -> Any:
        return str(uuid.uuid4())


@dataclass(frozen=True)
class StringMatcher:
    matcher_type: ClassVar[MatcherType] = MatcherType.STRING
    json_type: ClassVar[str] = "string"

    @property
    def description(self) -> str:
        return "a string"

    def validate(self, value: Any, location: str, path: str) -> list[Violation]:
        return _check_string(self, value, location, path)

    def generate_sample(self) -> Any:
        return "string"


@dataclass(frozen=True)
class NonEmptyStringMatcher:
    matcher_type: ClassVar[MatcherType] = MatcherType.NON_EMPTY_STRING
    json_type: ClassVar[str] = "string"

    @property
    def description(self) -> str:
        return "a non-empty string"

    def validate(self, value: Any, location: str, path: str) -> list[Violation]:
        return _check_string(self, value, location, path, lambda text: bool(text.strip()))

    def generate_sample(self) -> Any:
        return "string"


@dataclass(frozen=True)
class EmailMatcher:
    matcher_type: ClassVar[MatcherType] = MatcherType.EMAIL
    json_type: ClassVar[str] = "string"

    @property
    def description(self) -> str:
        return "an email address"

    def validate(self, value: Any, location: str, path: str) -> list[Violation]:
        return _check_string(self, value, location, path, is_email)

    def generate_sample(self) -> Any:
        return "user@example.com"


@dataclass(frozen=True)
class UriMatcher:
    matcher_type: ClassVar[MatcherType] = MatcherType.URI
    json_type: ClassVar[str] = "string"

    @property
    def description(self) -> str:
        return "an absolute URI"

    def validate(self, value: Any, location: str, path: str) -> list[Violation]:
        return _check_string(self, value, location, path, is_uri)

    def generate_sample(self) -> Any:
        return "https://example.com"


@dataclass(frozen=True)
class RegexMatcher:
    """Accepts strings containing a match for *pattern*.

    Args:
        pattern: Regular expression, searched anywhere in the value. Anchor
            it with ``^...$`` for a full match.
        example: Optional sample value; must match the pattern.

    Raises:
        ValueError: If the pattern does not compile or the example does
            not match it.
    """

    pattern: str
    example: str | None = None

    matcher_type: ClassVar[MatcherType] = MatcherType.REGEX
    json_type: ClassVar[str] = "string"

    def __post_init__(self) -> None:
        try:
            compiled = re.compile(self.pattern)
        except re.error as exc:
            raise ValueError(f"Invalid regex pattern '{self.pattern}': {exc}") from exc
        if self.example is not None and compiled.search(self.example) is None:
            raise ValueError(f"example '{self.example}' does not match pattern '{self.pattern}'")

    @property
    def description(self) -> str:
        return f"a string matching '{self.pattern}'"

    def validate(self, value: Any, location: str, path: str) -> list[Violation]:
        if value is None:
            return _unexpected_null(self, location, path)
        if not isinstance(value, str):
            return _wrong_type(self, value, location, path)
        if re.search(self.pattern, value) is None:
            return [
                Violation(
                    location,
                    path,
                    f"Value does not match pattern '{self.pattern}'",
                    ViolationType.PATTERN_MISMATCH,
                    expected=self.pattern,
                    actual=value,
                )
            ]
        return []

    def generate_sample(self) -> Any:
        return self.example if self.example is not None else "<matches pattern>"


@dataclass(frozen=True)
class TypeMatcher:
    """Accepts any value of the same JSON type as *example*."""

    example: Any

    matcher_type: ClassVar[MatcherType] = MatcherType.TYPE

    def __post_init__(self) -> None:
        if self.example is None:
            raise ValueError("example must not be None; use NullMatcher instead")

    @property
    def json_type(self) -> str:  # type: ignore[override]
        return json_type_name(self.example)

    @property
    def description(self) -> str:
        return f"a value like {render(self.example)}"

    def validate(self, value: Any, location: str, path: str) -> list[Violation]:
        if value is None:
            return _unexpected_null(self, location, path)
        expected = json_type_name(self.example)
        actual = json_type_name(value)
        # a float example admits integers, an integer example does not admit floats
        if actual == expected or (expected == "number" and actual == "integer"):
            return []
        return _wrong_type(self, value, location, path)

    def generate_sample(self) -> Any:
        return self.example


def _check_range(
    matcher: Matcher,
    value: float,
    min_value: float | None,
    max_value: float | None,
    location: str,
    path: str,
) -> list[Violation]:
    if min_value is not None and value < min_value:
        return [
            Violation(
                location,
                path,
                f"Value {value} is less than minimum {min_value}",
                ViolationType.OUT_OF_RANGE,
                expected=f">= {min_value}",
                actual=str(value),
            )
        ]
    if max_value is not None and value > max_value:
        return [
            Violation(
                location,
                path,
                f"Value {value} is greater than maximum {max_value}",
                ViolationType.OUT_OF_RANGE,
                expected=f"<= {max_value}",
                actual=str(value),
            )
        ]
    return []


def _check_bounds_order(min_value: float | None, max_value: float | None) -> None:
    if min_value is not None and max_value is not None and min_value > max_value:
        raise ValueError("min_value must not exceed max_value")


@dataclass(frozen=True)
class IntegerMatcher:
    min_value: int | None = None
    max_value: int | None = None

    matcher_type: ClassVar[MatcherType] = MatcherType.INTEGER
    json_type: ClassVar[str] = "integer"

    def __post_init__(self) -> None:
        _check_bounds_order(self.min_value, self.max_value)

    @property
    def description(self) -> str:
        return "an integer"

    def validate(self, value: Any, location: str, path: str) -> list[Violation]:
        if value is None:
            return _unexpected_null(self, location, path)
        if not is_number(value) or (isinstance(value, float) and not value.is_integer()):
            return _wrong_type(self, value, location, path)
        return _check_range(self, value, self.min_value, self.max_value, location, path)

    def generate_sample(self) -> Any:
        if self.min_value is not None and self.max_value is not None:
            return (self.min_value + self.max_value) // 2
        if self.min_value is not None:
            return self.min_value
        if self.max_value is not None:
            return self.max_value
        return 1


@dataclass(frozen=True)
class DecimalMatcher:
    min_value: float | None = None
    max_value: float | None = None

    matcher_type: ClassVar[MatcherType] = MatcherType.DECIMAL
    json_type: ClassVar[str] = "number"

    def __post_init__(self) -> None:
        _check_bounds_order(self.min_value, self.max_value)

    @property
    def description(self) -> str:
        return "a number"

    def validate(self, value: Any, location: str, path: str) -> list[Violation]:
        if value is None:
            return _unexpected_null(self, location, path)
        if not is_number(value):
            return _wrong_type(self, value, location, path)
        return _check_range(self, value, self.min_value, self.max_value, location, path)

    def generate_sample(self) -> Any:
        if self.min_value is not None and self.max_value is not None:
            return (self.min_value + self.max_value) / 2
        if self.min_value is not None:
            return self.min_value
        if self.max_value is not None:
            return self.max_value
        return 1.0


@dataclass(frozen=True)
class BooleanMatcher:
    matcher_type: ClassVar[MatcherType] = MatcherType.BOOLEAN
    json_type: ClassVar[str] = "boolean"

    @property
    def description(self) -> str:
        return "a boolean"

    def validate(self, value: Any, location: str, path: str) -> list[Violation]:
        if value is None:
            return _unexpected_null(self, location, path)
        if not isinstance(value, bool):
            return _wrong_type(self, value, location, path)
        return []

    def generate_sample(self) -> Any:
        return True


@dataclass(frozen=True)
class DateTimeMatcher:
    matcher_type: ClassVar[MatcherType] = MatcherType.DATE_TIME
    json_type: ClassVar[str] = "string"

    @property
    def description(self) -> str:
        return "an ISO 8601 date-time"

    def validate(self, value: Any, location: str, path: str) -> list[Violation]:
        return _check_string(self, value, location, path, is_date_time)

    def generate_sample(self) -> Any:
        return datetime.now(timezone.utc).replace(microsecond=0).isoformat()


@dataclass(frozen=True)
class DateOnlyMatcher:
    matcher_type: ClassVar[MatcherType] = MatcherType.DATE_ONLY
    json_type: ClassVar[str] = "string"

    @property
    def description(self) -> str:
        return "an ISO 8601 date"

    def validate(self, value: Any, location: str, path: str) -> list[Violation]:
        return _check_string(self, value, location, path, is_date)

    def generate_sample(self) -> Any:
        return date.today().isoformat()


@dataclass(frozen=True)
class TimeOnlyMatcher:
    matcher_type: ClassVar[MatcherType] = MatcherType.TIME_ONLY
    json_type: ClassVar[str] = "string"

    @property
    def description(self) -> str:
        return "an ISO 8601 time"

    def validate(self, value: Any, location: str, path: str) -> list[Violation]:
        return _check_string(self, value, location, path, is_time)

    def generate_sample(self) -> Any:
        return datetime.now(timezone.utc).strftime("%H:%M:%S")


@dataclass(frozen=True)
class EachLikeMatcher:
    """Accepts arrays of any length whose every element matches *item*.

    Args:
        item: Matcher applied to each element.
        min_count: Minimum number of elements (default 0).
    """

    item: Matcher
    min_count: int = 0

    matcher_type: ClassVar[MatcherType] = MatcherType.EACH_LIKE
    json_type: ClassVar[str] = "array"

    def __post_init__(self) -> None:
        if self.min_count < 0:
            raise ValueError("min_count must be non-negative")

    @property
    def description(self) -> str:
        return f"an array of {self.item.description}"

    def validate(self, value: Any, location: str, path: str) -> list[Violation]:
        if value is None:
            return _unexpected_null(self, location, path)
        if not isinstance(value, list):
            return _wrong_type(self, value, location, path)
        violations: list[Violation] = []
        if len(value) < self.min_count:
            violations.append(
                Violation(
                    location,
                    path,
                    f"Array must contain at least {self.min_count} items",
                    ViolationType.OUT_OF_RANGE,
                    expected=f">= {self.min_count} items",
                    actual=f"{len(value)} items",
                )
            )
        for index, element in enumerate(value):
            violations.extend(self.item.validate(element, location, item_path(path, index)))
        return violations

    def generate_sample(self) -> Any:
        return [self.item.generate_sample() for _ in range(max(self.min_count, 1))]


@dataclass(frozen=True)
class AnyMatcher:
    matcher_type: ClassVar[MatcherType] = MatcherType.ANY
    json_type: ClassVar[str] = "any"

    @property
    def description(self) -> str:
        return "any value"

    def validate(self, value: Any, location: str, path: str) -> list[Violation]:
        return []

    def generate_sample(self) -> Any:
        return None


@dataclass(frozen=True)
class NullMatcher:
    matcher_type: ClassVar[MatcherType] = MatcherType.NULL
    json_type: ClassVar[str] = "null"

    @property
    def description(self) -> str:
        return "null"

    def validate(self, value: Any, location: str, path: str) -> list[Violation]:
        if value is None:
            return []
        return _wrong_type(self, value, location, path)

    def generate_sample(self) -> Any:
        return None


@dataclass(frozen=True)
class OneOfMatcher:
    """Accepts exactly one of a fixed set of JSON values."""

    values: tuple[Any, ...]

    matcher_type: ClassVar[MatcherType] = MatcherType.ONE_OF
    json_type: ClassVar[str] = "enum"

    def __post_init__(self) -> None:
        object.__setattr__(self, "values", tuple(self.values))
        if not self.values:
            raise ValueError("values must not be empty")

    @property
    def description(self) -> str:
        return "one of " + ", ".join(render(v) for v in self.values)

    def validate(self, value: Any, location: str, path: str) -> list[Violation]:
        if any(json_equal(value, option) for option in self.values):
            return []
        if value is None:
            return _unexpected_null(self, location, path)
        allowed = ", ".join(render(v) for v in self.values)
        return [
            Violation(
                location,
                path,
                f"Value must be one of: {allowed}",
                ViolationType.INVALID_ENUM_VALUE,
                expected=allowed,
                actual=render(value),
            )
        ]

    def generate_sample(self) -> Any:
        return self.values[0]


@dataclass(frozen=True)
class ObjectMatcher:
    """Accepts objects whose named fields satisfy their matchers.

    Unnamed fields are ignored. A named field may be absent only when its
    matcher accepts null.
    """

    fields: Mapping[str, Matcher] = field(default_factory=dict, hash=False)

    matcher_type: ClassVar[MatcherType] = MatcherType.OBJECT
    json_type: ClassVar[str] = "object"

    def __post_init__(self) -> None:
        object.__setattr__(self, "fields", MappingProxyType(dict(self.fields)))

    @property
    def description(self) -> str:
        return "an object"

    def validate(self, value: Any, location: str, path: str) -> list[Violation]:
        if value is None:
            return _unexpected_null(self, location, path)
        if not isinstance(value, dict):
            return _wrong_type(self, value, location, path)
        violations: list[Violation] = []
        for name, matcher in self.fields.items():
            field_path = child_path(path, name)
            if name not in value:
                if matcher.validate(None, location, field_path):
                    violations.append(
                        Violation(
                            location,
                            field_path,
                            f"Missing required field '{name}'",
                            ViolationType.MISSING_REQUIRED,
                            expected=matcher.description,
                            actual="missing",
                        )
                    )
                continue
            violations.extend(matcher.validate(value[name], location, field_path))
        return violations

    def generate_sample(self) -> Any:
        return {name: matcher.generate_sample() for name, matcher in self.fields.items()}

    def restricted_to(self, names: frozenset[str]) -> ObjectMatcher:
        """Return a matcher over the named fields only (case-insensitive)."""
        folded = {name.casefold() for name in names}
        return ObjectMatcher({k: m for k, m in self.fields.items() if k.casefold() in folded})


@dataclass(frozen=True)
class OptionalMatcher:
    """Accepts null, absence, or anything *inner* accepts."""

    inner: Matcher

    @property
    def matcher_type(self) -> MatcherType:  # type: ignore[override]
        return self.inner.matcher_type

    @property
    def json_type(self) -> str:  # type: ignore[override]
        return self.inner.json_type

    @property
    def description(self) -> str:
        return f"{self.inner.description} or null"

    def validate(self, value: Any, location: str, path: str) -> list[Violation]:
        if value is None:
            return []
        return self.inner.validate(value, location, path)

    def generate_sample(self) -> Any:
        return self.inner.generate_sample()


def as_matcher(spec: Any) -> Matcher:
    """Coerce a matcher specification into a matcher.

    * matchers are returned unchanged;
    * a ``dict`` becomes an ``ObjectMatcher`` over its coerced values;
    * a one-element ``list`` becomes ``EachLikeMatcher`` of its element;
    * ``None`` becomes ``NullMatcher``;
    * any other literal must be matched exactly.
    """
    if isinstance(spec, Matcher):
        return spec
    if isinstance(spec, dict):
        return ObjectMatcher({str(k): as_matcher(v) for k, v in spec.items()})
    if isinstance(spec, list) and len(spec) == 1:
        return EachLikeMatcher(as_matcher(spec[0]))
    if spec is None:
        return NullMatcher()
    return OneOfMatcher((spec,))
