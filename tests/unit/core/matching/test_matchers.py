"""Tests for Pact-style matchers and their factories."""

from __future__ import annotations

from typing import Any

import pytest

from api_contract_framework.core.matching import factories as m
from api_contract_framework.core.matching.matchers import (
    EachLikeMatcher,
    Matcher,
    MatcherType,
    NullMatcher,
    ObjectMatcher,
    OneOfMatcher,
    as_matcher,
)
from api_contract_framework.core.validation.violation import ViolationType

LOC = "GET /users"


def _types(matcher: Matcher, value: Any) -> list[ViolationType]:
    return [v.type for v in matcher.validate(value, LOC, "$")]


class TestProtocol:
    @pytest.mark.parametrize(
        "matcher",
        [
            m.guid(),
            m.string(),
            m.non_empty_string(),
            m.email(),
            m.uri(),
            m.regex("^a", example="abc"),
            m.like(1),
            m.integer(),
            m.decimal(),
            m.boolean(),
            m.date_time(),
            m.date_only(),
            m.time_only(),
            m.each_like(m.string()),
            m.any_value(),
            m.null(),
            m.one_of("a"),
            m.object_like(id=m.integer()),
            m.optional(m.string()),
        ],
    )
    def test_samples_are_accepted(self, matcher: Matcher) -> None:
        assert isinstance(matcher, Matcher)
        assert matcher.validate(matcher.generate_sample(), LOC, "$") == []


class TestStringMatchers:
    @pytest.mark.parametrize(
        ("matcher", "good", "bad"),
        [
            (m.guid(), "123e4567-e89b-12d3-a456-426614174000", "abc"),
            (m.email(), "ada@example.com", "ada"),
            (m.uri(), "https://example.com", "example"),
            (m.date_time(), "2024-01-01T10:00:00Z", "2024-01-01"),
            (m.date_only(), "2024-01-01", "01/01/2024"),
            (m.time_only(), "10:30:00", "25:00"),
            (m.non_empty_string(), "x", "   "),
        ],
    )
    def test_format(self, matcher: Matcher, good: str, bad: str) -> None:
        assert _types(matcher, good) == []
        assert _types(matcher, bad) == [ViolationType.INVALID_FORMAT]

    def test_null_is_unexpected(self) -> None:
        violations = m.guid().validate(None, LOC, "$.id")
        assert violations[0].type is ViolationType.UNEXPECTED_NULL
        assert violations[0].message == "Expected a GUID but got null"

    def test_wrong_type(self) -> None:
        violations = m.string().validate(5, LOC, "$.name")
        assert violations[0].type is ViolationType.INVALID_TYPE
        assert violations[0].message == "Expected a string but got integer"

    def test_matcher_types(self) -> None:
        assert m.guid().matcher_type is MatcherType.GUID
        assert m.email().json_type == "string"


class TestRegexMatcher:
    def test_searches_anywhere(self) -> None:
        assert _types(m.regex("[0-9]{3}"), "ab123") == []

    def test_mismatch(self) -> None:
        violations = m.regex("^[A-Z]+$").validate("abc", LOC, "$")
        assert violations[0].type is ViolationType.PATTERN_MISMATCH
        assert violations[0].message == "Value does not match pattern '^[A-Z]+$'"

    def test_invalid_pattern(self) -> None:
        with pytest.raises(ValueError, match="Invalid regex pattern"):
            m.regex("(")

    def test_example_must_match(self) -> None:
        with pytest.raises(ValueError, match="does not match pattern"):
            m.regex("^[0-9]+$", example="abc")

    def test_example_is_sample(self) -> None:
        assert m.regex("^[0-9]+$", example="42").generate_sample() == "42"


class TestTypeMatcher:
    def test_same_type(self) -> None:
        assert _types(m.like("text"), "other") == []

    def test_float_example_admits_integers(self) -> None:
        assert _types(m.like(1.5), 2) == []

    def test_integer_example_rejects_floats(self) -> None:
        assert _types(m.like(1), 2.5) == [ViolationType.INVALID_TYPE]

    def test_none_example_rejected(self) -> None:
        with pytest.raises(ValueError, match="use NullMatcher"):
            m.like(None)

    def test_json_type_follows_example(self) -> None:
        assert m.like([1]).json_type == "array"


class TestNumericMatchers:
    def test_integer_accepts_whole_float(self) -> None:
        assert _types(m.integer(), 3.0) == []

    def test_integer_rejects_decimal_and_bool(self) -> None:
        assert _types(m.integer(), 3.5) == [ViolationType.INVALID_TYPE]
        assert _types(m.integer(), True) == [ViolationType.INVALID_TYPE]

    def test_integer_range(self) -> None:
        matcher = m.integer(min_value=1, max_value=10)
        assert _types(matcher, 0) == [ViolationType.OUT_OF_RANGE]
        violations = matcher.validate(11, LOC, "$")
        assert violations[0].message == "Value 11 is greater than maximum 10"

    def test_integer_sample_between_bounds(self) -> None:
        assert m.integer(min_value=2, max_value=8).generate_sample() == 5

    def test_bounds_order(self) -> None:
        with pytest.raises(ValueError, match="min_value must not exceed max_value"):
            m.decimal(min_value=5, max_value=1)

    def test_decimal_accepts_integers(self) -> None:
        assert _types(m.decimal(), 3) == []

    def test_decimal_range(self) -> None:
        violations = m.decimal(min_value=0.5).validate(0.1, LOC, "$")
        assert violations[0].message == "Value 0.1 is less than minimum 0.5"

    def test_boolean(self) -> None:
        assert _types(m.boolean(), False) == []
        assert _types(m.boolean(), "true") == [ViolationType.INVALID_TYPE]


class TestEachLike:
    def test_each_element_checked(self) -> None:
        violations = m.each_like(m.integer()).validate([1, "x", 3], LOC, "$.ids")
        assert [v.path for v in violations] == ["$.ids[1]"]

    def test_empty_array_accepted_by_default(self) -> None:
        assert _types(m.each_like(m.integer()), []) == []

    def test_min_count(self) -> None:
        violations = m.each_like(m.integer(), min_count=2).validate([1], LOC, "$")
        assert violations[0].message == "Array must contain at least 2 items"

    def test_negative_min_count(self) -> None:
        with pytest.raises(ValueError, match="min_count must be non-negative"):
            m.each_like(m.integer(), min_count=-1)

    def test_sample_respects_min_count(self) -> None:
        assert m.each_like(m.boolean(), min_count=3).generate_sample() == [True, True, True]

    def test_description(self) -> None:
        assert m.each_like(m.guid()).description == "an array of a GUID"


class TestAnyAndNull:
    def test_any_accepts_everything(self) -> None:
        for value in (None, 1, "x", [1], {"a": 1}):
            assert _types(m.any_value(), value) == []

    def test_null(self) -> None:
        assert _types(m.null(), None) == []
        assert _types(m.null(), 0) == [ViolationType.INVALID_TYPE]


class TestOneOf:
    def test_accepts_listed_value(self) -> None:
        assert _types(m.one_of("active", "disabled"), "active") == []

    def test_numbers_compare_by_value(self) -> None:
        assert _types(m.one_of(1, 2), 2.0) == []

    def test_rejects_other_value(self) -> None:
        violations = m.one_of("active", "disabled").validate("deleted", LOC, "$")
        assert violations[0].type is ViolationType.INVALID_ENUM_VALUE
        assert violations[0].expected == '"active", "disabled"'

    def test_null_allowed_when_listed(self) -> None:
        assert _types(m.one_of("a", None), None) == []

    def test_null_not_listed(self) -> None:
        assert _types(m.one_of("a"), None) == [ViolationType.UNEXPECTED_NULL]

    def test_empty_rejected(self) -> None:
        with pytest.raises(ValueError, match="values must not be empty"):
            m.one_of()


class TestObjectMatcher:
    def test_named_fields_checked(self) -> None:
        matcher = m.object_like(id=m.guid(), age=m.integer(min_value=0))
        violations = matcher.validate({"id": "nope", "age": -1}, LOC, "$")
        assert [(v.path, v.type) for v in violations] == [
            ("$.id", ViolationType.INVALID_FORMAT),
            ("$.age", ViolationType.OUT_OF_RANGE),
        ]

    def test_unnamed_fields_ignored(self) -> None:
        assert _types(m.object_like(id=m.integer()), {"id": 1, "other": "x"}) == []

    def test_missing_field(self) -> None:
        violations = m.object_like(id=m.integer()).validate({}, LOC, "$")
        assert violations[0].type is ViolationType.MISSING_REQUIRED
        assert violations[0].message == "Missing required field 'id'"
        assert violations[0].expected == "an integer"

    def test_optional_field_may_be_absent(self) -> None:
        assert _types(m.object_like(nickname=m.optional(m.string())), {}) == []

    def test_optional_field_still_typed(self) -> None:
        matcher = m.object_like(nickname=m.optional(m.string()))
        assert _types(matcher, {"nickname": 1}) == [ViolationType.INVALID_TYPE]

    def test_nested_paths(self) -> None:
        matcher = m.object_like(owner={"email": m.email()})
        violations = matcher.validate({"owner": {"email": "x"}}, LOC, "$")
        assert violations[0].path == "$.owner.email"

    def test_mapping_and_keywords_merge(self) -> None:
        matcher = m.object_like({"a": m.integer()}, b=m.string())
        assert set(matcher.fields) == {"a", "b"}

    def test_restricted_to(self) -> None:
        matcher = m.object_like(Id=m.integer(), name=m.string()).restricted_to(frozenset({"id"}))
        assert set(matcher.fields) == {"Id"}

    def test_sample(self) -> None:
        assert m.object_like(ok=m.boolean(), n=m.integer()).generate_sample() == {"ok": True, "n": 1}


class TestOptionalMatcher:
    def test_delegates_type_information(self) -> None:
        matcher = m.optional(m.guid())
        assert matcher.matcher_type is MatcherType.GUID
        assert matcher.json_type == "string"
        assert matcher.description == "a GUID or null"

    def test_accepts_null(self) -> None:
        assert _types(m.optional(m.integer()), None) == []


class TestAsMatcher:
    def test_matcher_returned_unchanged(self) -> None:
        matcher = m.guid()
        assert as_matcher(matcher) is matcher

    def test_dict_becomes_object_matcher(self) -> None:
        assert isinstance(as_matcher({"a": m.integer()}), ObjectMatcher)

    def test_single_element_list_becomes_each_like(self) -> None:
        matcher = as_matcher([m.integer()])
        assert isinstance(matcher, EachLikeMatcher)

    def test_none_becomes_null_matcher(self) -> None:
        assert isinstance(as_matcher(None), NullMatcher)

    def test_literal_matches_exactly(self) -> None:
        matcher = as_matcher("v1")
        assert isinstance(matcher, OneOfMatcher)
        assert _types(matcher, "v2") == [ViolationType.INVALID_ENUM_VALUE]
