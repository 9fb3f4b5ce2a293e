"""Factory functions for building matcher trees.

Example:
    >>> from api_contract_framework.core.matching import factories as m
    >>> body = m.object_like(
    ...     id=m.guid(),
    ...     email=m.email(),
    ...     age=m.integer(min_value=0),
    ...     tags=m.each_like(m.string()),
    ... )
"""

from __future__ import annotations

from typing import Any

from api_contract_framework.core.matching.matchers import (
    AnyMatcher,
    BooleanMatcher,
    DateOnlyMatcher,
    DateTimeMatcher,
    DecimalMatcher,
    EachLikeMatcher,
    EmailMatcher,
    GuidMatcher,
    IntegerMatcher,
    Matcher,
    NonEmptyStringMatcher,
    NullMatcher,
    ObjectMatcher,
    OneOfMatcher,
    OptionalMatcher,
    RegexMatcher,
    StringMatcher,
    TimeOnlyMatcher,
    TypeMatcher,
    UriMatcher,
    as_matcher,
)


def guid() -> GuidMatcher:
    return GuidMatcher()


def string() -> StringMatcher:
    return StringMatcher()


def non_empty_string() -> NonEmptyStringMatcher:
    return NonEmptyStringMatcher()


def email() -> EmailMatcher:
    return EmailMatcher()


def uri() -> UriMatcher:
    return UriMatcher()


def regex(pattern: str, example: str | None = None) -> RegexMatcher:
    """Match strings containing *pattern*.

    Raises:
        ValueError: If the pattern is invalid or *example* does not match.
    """
    return RegexMatcher(pattern, example)


def like(example: Any) -> TypeMatcher:
    """Match any value of the same JSON type as *example*."""
    return TypeMatcher(example)


def integer(min_value: int | None = None, max_value: int | None = None) -> IntegerMatcher:
    return IntegerMatcher(min_value, max_value)


def decimal(min_value: float | None = None, max_value: float | None = None) -> DecimalMatcher:
    return DecimalMatcher(min_value, max_value)


def boolean() -> BooleanMatcher:
    return BooleanMatcher()


def date_time() -> DateTimeMatcher:
    return DateTimeMatcher()


def date_only() -> DateOnlyMatcher:
    return DateOnlyMatcher()


def time_only() -> TimeOnlyMatcher:
    return TimeOnlyMatcher()


def each_like(item: Any, min_count: int = 0) -> EachLikeMatcher:
    """Match arrays whose every element matches *item*.

    Args:
        item: A matcher, or a specification accepted by ``as_matcher``.
        min_count: Minimum number of elements.
    """
    return EachLikeMatcher(as_matcher(item), min_count)


def any_value() -> AnyMatcher:
    return AnyMatcher()


def null() -> NullMatcher:
    return NullMatcher()


def one_of(*values: Any) -> OneOfMatcher:
    """Match exactly one of *values*.

    Raises:
        ValueError: If no values are given.
    """
    return OneOfMatcher(values)


def object_like(fields: dict[str, Any] | None = None, **named: Any) -> ObjectMatcher:
    """Match objects whose named fields satisfy their matchers.

    Field specifications may be given as a mapping, keyword arguments, or
    both; values are coerced with ``as_matcher``.
    """
    merged: dict[str, Matcher] = {}
    for name, spec in {**(fields or {}), **named}.items():
        merged[name] = as_matcher(spec)
    return ObjectMatcher(merged)


def optional(matcher: Any) -> OptionalMatcher:
    """Accept *matcher* or null, and allow the field to be absent."""
    return OptionalMatcher(as_matcher(matcher))
