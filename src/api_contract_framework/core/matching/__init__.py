"""Pact-style matchers and the matcher-driven body validator."""

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
    MatcherType,
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
from api_contract_framework.core.matching.validator import MatcherSchemaValidator

__all__ = [
    "AnyMatcher",
    "BooleanMatcher",
    "DateOnlyMatcher",
    "DateTimeMatcher",
    "DecimalMatcher",
    "EachLikeMatcher",
    "EmailMatcher",
    "GuidMatcher",
    "IntegerMatcher",
    "Matcher",
    "MatcherSchemaValidator",
    "MatcherType",
    "NonEmptyStringMatcher",
    "NullMatcher",
    "ObjectMatcher",
    "OneOfMatcher",
    "OptionalMatcher",
    "RegexMatcher",
    "StringMatcher",
    "TimeOnlyMatcher",
    "TypeMatcher",
    "UriMatcher",
    "as_matcher",
]
