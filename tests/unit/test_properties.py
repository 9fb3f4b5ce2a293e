"""Property-based tests using Hypothesis.

Covers invariants for JSON value helpers, sample generation, path
templates, partial validation and contract comparison.
"""

from __future__ import annotations

import json
import string
from typing import Any

from hypothesis import assume, given, settings
from hypothesis import strategies as st

from api_contract_framework.core.contracts.comparer import compare_contracts
from api_contract_framework.core.contracts.diff import ContractChangeType
from api_contract_framework.core.contracts.paths import normalize_path_template, templates_equivalent
from api_contract_framework.core.metrics.registry import InMemoryRegistry
from api_contract_framework.core.schema.definition import (
    SchemaNode,
    array_schema,
    boolean_schema,
    integer_schema,
    number_schema,
    object_schema,
    string_schema,
)
from api_contract_framework.core.schema.generator import generate_sample
from api_contract_framework.core.schema.validator import validate_value
from api_contract_framework.core.validation.config import PartialValidationConfig, ValidationDirection
from api_contract_framework.core.validation.json_values import first_duplicate, json_equal
from tests.factories import make_contract, make_endpoint, make_response, make_user_schema

# ---------------------------------------------------------------------------
# Strategies
# ---------------------------------------------------------------------------

_identifier = st.text(alphabet=string.ascii_lowercase + string.digits + "_", min_size=1, max_size=12)

_json_scalars = st.none() | st.booleans() | st.integers() | st.floats(allow_nan=False, allow_infinity=False) | st.text()

_json_values = st.recursive(
    _json_scalars,
    lambda children: st.lists(children, max_size=4) | st.dictionaries(st.text(max_size=8), children, max_size=4),
    max_leaves=12,
)

_segment = _identifier | _identifier.map(lambda name: "{" + name + "}")

_templates = st.lists(_segment, min_size=1, max_size=5).map(lambda parts: "/" + "/".join(parts))

_directions = st.sampled_from(list(ValidationDirection))

_bounded_numbers = st.builds(
    lambda low, span: number_schema(minimum=low, maximum=low + span),
    st.floats(-1000, 1000, allow_nan=False),
    st.floats(0.01, 1000, allow_nan=False),
)

_array_items = st.one_of(
    st.just(integer_schema(minimum=0)),
    st.integers(-50, 50).map(lambda low: integer_schema(minimum=low, maximum=low + 10)),
    st.integers(1, 4).map(lambda step: integer_schema(minimum=0, maximum=40, multiple_of=step)),
    _bounded_numbers,
    st.just(number_schema(exclusive_minimum=0, exclusive_maximum=1)),
    st.just(string_schema(min_length=1, max_length=6)),
    st.just(object_schema({"flag": boolean_schema()})),
    st.just(object_schema({"id": integer_schema(minimum=0, maximum=9), "ok": boolean_schema()})),
)


# ---------------------------------------------------------------------------
# JSON value helpers
# ---------------------------------------------------------------------------


class TestJsonValueProperties:
    @given(value=_json_values)
    def test_json_equal_is_reflexive(self, value: Any) -> None:
        assert json_equal(value, value)

    @given(value=_json_values)
    def test_json_equal_survives_round_trip(self, value: Any) -> None:
        assert json_equal(value, json.loads(json.dumps(value)))

    @given(items=st.lists(_json_values, min_size=1, max_size=6))
    def test_repeating_an_item_is_a_duplicate(self, items: list[Any]) -> None:
        assert first_duplicate(items + [items[0]]) is not None

    @given(items=st.lists(st.integers(), unique=True, max_size=20))
    def test_distinct_integers_have_no_duplicate(self, items: list[int]) -> None:
        assert first_duplicate(items) is None


# ---------------------------------------------------------------------------
# Sample generation
# ---------------------------------------------------------------------------


class TestGeneratorProperties:
    @given(low=st.integers(-1000, 1000), span=st.integers(0, 1000))
    def test_integer_sample_within_bounds(self, low: int, span: int) -> None:
        schema = integer_schema(minimum=low, maximum=low + span)
        sample = generate_sample(schema)
        assert low <= sample <= low + span
        assert validate_value(sample, schema, "prop") == []

    @given(
        low=st.floats(-1e6, 1e6, allow_nan=False),
        span=st.floats(0, 1e6, allow_nan=False),
    )
    def test_number_sample_within_bounds(self, low: float, span: float) -> None:
        schema = number_schema(minimum=low, maximum=low + span)
        assert validate_value(generate_sample(schema), schema, "prop") == []

    @given(min_length=st.integers(0, 30), extra=st.integers(0, 30))
    def test_string_sample_respects_length(self, min_length: int, extra: int) -> None:
        schema = string_schema(min_length=min_length, max_length=min_length + extra)
        assert validate_value(generate_sample(schema), schema, "prop") == []

    @given(items=_array_items, min_items=st.integers(0, 5), unique=st.booleans())
    def test_array_sample_validates(self, items: SchemaNode, min_items: int, unique: bool) -> None:
        schema = array_schema(items, min_items=min_items, unique_items=unique)
        sample = generate_sample(schema)
        assert len(sample) == max(min_items, 1)
        assert validate_value(sample, schema, "prop") == []

    @given(min_items=st.integers(1, 2), unique=st.booleans())
    def test_boolean_array_sample_validates(self, min_items: int, unique: bool) -> None:
        schema = array_schema(boolean_schema(), min_items=min_items, unique_items=unique)
        assert validate_value(generate_sample(schema), schema, "prop") == []

    @given(direction=_directions)
    @settings(max_examples=10)
    def test_user_sample_validates_in_its_direction(self, direction: ValidationDirection) -> None:
        schema = make_user_schema(additional_properties=False)
        sample = generate_sample(schema, direction)
        assert validate_value(sample, schema, "prop", PartialValidationConfig(direction=direction)) == []


# ---------------------------------------------------------------------------
# Path templates
# ---------------------------------------------------------------------------


class TestPathTemplateProperties:
    @given(template=_templates)
    def test_normalize_is_idempotent(self, template: str) -> None:
        normalized = normalize_path_template(template)
        assert normalize_path_template(normalized) == normalized

    @given(parts=st.lists(_identifier, min_size=1, max_size=4), suffix=_identifier)
    def test_renaming_parameters_keeps_equivalence(self, parts: list[str], suffix: str) -> None:
        original = "/" + "/".join("{" + p + "}" for p in parts)
        renamed = "/" + "/".join("{" + p + suffix + "}" for p in parts)
        assert templates_equivalent(original, renamed)

    @given(template=_templates)
    def test_trailing_slash_ignored(self, template: str) -> None:
        assert templates_equivalent(template, template + "/")


# ---------------------------------------------------------------------------
# Partial validation config
# ---------------------------------------------------------------------------


class TestPartialValidationConfigProperties:
    @given(names=st.lists(_identifier, min_size=1, max_size=5))
    def test_selection_is_case_insensitive(self, names: list[str]) -> None:
        config = PartialValidationConfig.only(*names)
        for name in names:
            assert config.selects(name.upper())

    @given(name=_identifier)
    def test_empty_selection_selects_everything(self, name: str) -> None:
        assert PartialValidationConfig().selects(name)


# ---------------------------------------------------------------------------
# Contract comparison
# ---------------------------------------------------------------------------


def _contract(paths: set[str], name: str):  # type: ignore[no-untyped-def]
    endpoints = [make_endpoint(f"/{path}", responses=(make_response(200),)) for path in sorted(paths)]
    return make_contract(*endpoints, name=name)


class TestCompareContractsProperties:
    @given(paths=st.sets(_identifier, min_size=1, max_size=6))
    def test_contract_is_compatible_with_itself(self, paths: set[str]) -> None:
        diff = compare_contracts(_contract(paths, "a"), _contract(paths, "b"))
        assert diff.changes == ()

    @given(old=st.sets(_identifier, min_size=1, max_size=6), new=st.sets(_identifier, min_size=1, max_size=6))
    def test_endpoint_set_differences(self, old: set[str], new: set[str]) -> None:
        assume(old != new)
        diff = compare_contracts(_contract(old, "old"), _contract(new, "new"))
        removed = [c for c in diff.changes if c.change_type is ContractChangeType.ENDPOINT_REMOVED]
        added = [c for c in diff.changes if c.change_type is ContractChangeType.ENDPOINT_ADDED]
        assert len(removed) == len(old - new)
        assert len(added) == len(new - old)
        assert diff.is_compatible is (not old - new)


# ---------------------------------------------------------------------------
# InMemoryRegistry
# ---------------------------------------------------------------------------


class TestRegistryProperties:
    @given(values=st.lists(st.floats(0, 1000, allow_nan=False), max_size=20))
    def test_counter_total_is_sum(self, values: list[float]) -> None:
        registry = InMemoryRegistry()
        for index, value in enumerate(values):
            registry.counter("acf.test", value, tags={"shard": str(index % 3)})
        assert abs(registry.counter_total("acf.test") - sum(values)) < 1e-6

    @given(durations=st.lists(st.floats(0, 1e4, allow_nan=False), min_size=1, max_size=20))
    def test_timer_bounds(self, durations: list[float]) -> None:
        registry = InMemoryRegistry()
        for duration in durations:
            registry.timer("acf.test", duration)
        stats = registry.get_timer("acf.test")
        assert stats.count == len(durations)
        assert stats.min_ms == min(durations)
        assert stats.max_ms == max(durations)
