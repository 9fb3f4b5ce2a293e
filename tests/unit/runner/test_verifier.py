"""Tests for ContractVerifier."""

from __future__ import annotations

import json
from unittest.mock import MagicMock

import pytest

from api_contract_framework.core.config import ValidationSettings, VerificationConfig
from api_contract_framework.core.contracts.models import (
    EndpointContract,
    HeaderExpectation,
    QueryParameterExpectation,
    QueryParameterType,
    ResponseExpectation,
)
from api_contract_framework.core.exceptions import ContractViolationError
from api_contract_framework.core.schema.body import SchemaValidator
from api_contract_framework.core.validation.config import PartialValidationConfig
from api_contract_framework.core.validation.violation import ViolationType
from api_contract_framework.runner.result import VerificationStatus
from api_contract_framework.runner.verifier import ContractVerifier
from tests.factories import (
    make_contract,
    make_endpoint,
    make_exchange,
    make_response,
    make_user,
    make_user_schema,
    users_contract_v1,
)


def _verifier(**config: object) -> ContractVerifier:
    return ContractVerifier(users_contract_v1(), VerificationConfig(**config))  # type: ignore[arg-type]


def _types(result: object) -> list[ViolationType]:
    return [v.type for v in result.violations]  # type: ignore[attr-defined]


class TestConstruction:
    def test_contract_required(self) -> None:
        with pytest.raises(ValueError, match="contract must not be None"):
            ContractVerifier(None)  # type: ignore[arg-type]

    def test_defaults(self) -> None:
        verifier = ContractVerifier(users_contract_v1())
        assert verifier.contract.name == "users-v1"
        assert verifier.config == VerificationConfig()

    def test_exchange_required(self) -> None:
        with pytest.raises(ValueError, match="exchange must not be None"):
            _verifier().verify(None)  # type: ignore[arg-type]


class TestResponseChecks:
    def test_valid_exchange(self) -> None:
        result = _verifier().verify(make_exchange(response_body=make_user()))
        assert result.is_valid
        assert result.location == "GET /users/{id}"
        assert result.endpoint is not None

    def test_unmatched_exchange(self) -> None:
        result = _verifier().verify(make_exchange("DELETE", "/users/1"))
        assert result.endpoint is None
        assert result.location == "DELETE /users/1"
        assert result.violations[0].message == "No contract definition found for endpoint DELETE /users/1"

    def test_unexpected_status_code(self) -> None:
        result = _verifier().verify(make_exchange(status_code=404, response_body={"error": "x"}))
        violation = result.violations[0]
        assert violation.type is ViolationType.UNEXPECTED_STATUS_CODE
        assert (violation.expected, violation.actual) == ("200", "404")
        assert len(result.violations) == 1

    def test_endpoint_without_responses_accepts_any_status(self) -> None:
        verifier = ContractVerifier(make_contract(make_endpoint(responses=())))
        assert verifier.verify(make_exchange(status_code=500)).is_valid

    def test_body_violations(self) -> None:
        body = make_user()
        del body["name"]
        result = _verifier().verify(make_exchange(response_body=body))
        assert [(v.type, v.path) for v in result.violations] == [(ViolationType.MISSING_REQUIRED, "$.name")]

    def test_empty_body_not_validated(self) -> None:
        assert _verifier().verify(make_exchange(response_body="")).is_valid

    def test_content_type_mismatch(self) -> None:
        exchange = make_exchange(response_body=make_user(), response_content_type="text/html")
        assert _types(_verifier().verify(exchange)) == [ViolationType.INVALID_CONTENT_TYPE]

    def test_content_type_parameters_ignored(self) -> None:
        exchange = make_exchange(response_body=make_user(), response_content_type="Application/JSON; charset=utf-8")
        assert _verifier().verify(exchange).is_valid

    def test_content_type_check_can_be_disabled(self) -> None:
        exchange = make_exchange(response_body=make_user(), response_content_type="text/html")
        assert _verifier(validate_content_type=False).verify(exchange).is_valid

    def test_default_partial_config_applies(self) -> None:
        verifier = _verifier(validation=ValidationSettings(strict_mode=True))
        result = verifier.verify(make_exchange(response_body=make_user(extra=1)))
        assert [(v.type, v.path) for v in result.violations] == [(ViolationType.UNEXPECTED_FIELD, "$.extra")]

    def test_expectation_partial_config_wins(self) -> None:
        response = ResponseExpectation(
            200,
            body_validator=SchemaValidator(make_user_schema()),
            partial_config=PartialValidationConfig.only("name"),
        )
        endpoint = make_endpoint(responses=(response,))
        verifier = ContractVerifier(make_contract(endpoint))
        assert verifier.verify(make_exchange(response_body={"name": "Ada"})).is_valid

    def test_response_headers(self) -> None:
        endpoint = make_endpoint(
            responses=(make_response(200, headers=(HeaderExpectation.with_value("X-Version", "2"),)),)
        )
        verifier = ContractVerifier(make_contract(endpoint))
        result = verifier.verify(make_exchange(response_headers={"x-version": "1"}))
        violation = result.violations[0]
        assert violation.type is ViolationType.INVALID_HEADER_VALUE
        assert violation.path == "header:X-Version"
        assert (violation.expected, violation.actual) == ("2", "1")

    def test_timed_out(self) -> None:
        result = _verifier().verify(make_exchange(timed_out=True, duration_ms=1500.0))
        assert _types(result) == [ViolationType.TIMEOUT]
        assert result.violations[0].message == "Exchange timed out after 1500ms"


class TestRequestChecks:
    def test_required_body_missing(self) -> None:
        result = _verifier().verify(make_exchange("POST", "/users", 201, make_user()))
        assert result.violations[0].message == "Request body is required but was not provided"

    def test_request_body_validated(self) -> None:
        exchange = make_exchange("POST", "/users", 201, make_user(), request_body=json.dumps({"email": "x"}))
        result = _verifier().verify(exchange)
        assert [(v.type, v.path) for v in result.violations] == [
            (ViolationType.MISSING_REQUIRED, "$.name"),
            (ViolationType.INVALID_FORMAT, "$.email"),
        ]

    def test_request_validation_can_be_disabled(self) -> None:
        exchange = make_exchange("POST", "/users", 201, make_user())
        assert _verifier(validate_request=False).verify(exchange).is_valid

    def test_request_headers_case_insensitive(self) -> None:
        endpoint = make_endpoint(headers=(HeaderExpectation("Authorization"),))
        verifier = ContractVerifier(make_contract(endpoint))
        missing = verifier.verify(make_exchange(response_body=make_user()))
        assert [(v.type, v.path) for v in missing.violations] == [
            (ViolationType.MISSING_HEADER, "header:Authorization")
        ]
        present = verifier.verify(make_exchange(response_body=make_user(), request_headers={"authorization": "t"}))
        assert present.is_valid

    def test_header_checks_can_be_disabled(self) -> None:
        endpoint = make_endpoint(headers=(HeaderExpectation("Authorization"),))
        verifier = ContractVerifier(make_contract(endpoint), VerificationConfig(validate_headers=False))
        assert verifier.verify(make_exchange(response_body=make_user())).is_valid


class TestQueryChecks:
    @pytest.fixture
    def verifier(self) -> ContractVerifier:
        endpoint = make_endpoint(
            "/users",
            query_parameters=(
                QueryParameterExpectation("page", required=True, type=QueryParameterType.INTEGER),
                QueryParameterExpectation("sort"),
            ),
            responses=(make_response(200),),
        )
        return ContractVerifier(make_contract(endpoint))

    def test_missing_required(self, verifier: ContractVerifier) -> None:
        result = verifier.verify(make_exchange(path="/users"))
        assert [(v.type, v.path) for v in result.violations] == [
            (ViolationType.MISSING_QUERY_PARAMETER, "query:page")
        ]

    def test_blank_value_counts_as_missing(self, verifier: ContractVerifier) -> None:
        assert _types(verifier.verify(make_exchange(path="/users?page="))) == [ViolationType.MISSING_QUERY_PARAMETER]

    def test_invalid_value(self, verifier: ContractVerifier) -> None:
        result = verifier.verify(make_exchange(path="/users?page=two"))
        violation = result.violations[0]
        assert violation.type is ViolationType.INVALID_QUERY_PARAMETER_VALUE
        assert (violation.expected, violation.actual) == ("integer", "two")

    def test_parsed_from_path(self, verifier: ContractVerifier) -> None:
        assert verifier.verify(make_exchange(path="/users?page=2&sort=name")).is_valid

    def test_explicit_query_mapping(self, verifier: ContractVerifier) -> None:
        assert verifier.verify(make_exchange(path="/users", query={"page": ["1", "2"]})).is_valid
        assert verifier.verify(make_exchange(path="/users", query={"page": "3"})).is_valid

    def test_can_be_disabled(self) -> None:
        endpoint = EndpointContract(
            "/users", "GET", query_parameters=(QueryParameterExpectation("page", required=True),)
        )
        verifier = ContractVerifier(make_contract(endpoint), VerificationConfig(validate_query_parameters=False))
        assert verifier.verify(make_exchange(path="/users")).is_valid


class TestFailOnViolation:
    def test_verify_raises(self) -> None:
        with pytest.raises(ContractViolationError, match="Contract violation at GET /users/\\{id\\}"):
            _verifier(fail_on_violation=True).verify(make_exchange(status_code=500))

    def test_verify_all_does_not_raise(self) -> None:
        summary = _verifier(fail_on_violation=True).verify_all([make_exchange(status_code=500)])
        assert summary.status is VerificationStatus.FAILURE


class TestVerifyAll:
    def test_summary(self) -> None:
        summary = _verifier().verify_all(
            [make_exchange(response_body=make_user()), make_exchange(status_code=404)]
        )
        assert summary.contract_name == "users-v1"
        assert summary.status is VerificationStatus.PARTIAL_SUCCESS
        assert len(summary.passed) == 1

    def test_empty(self) -> None:
        assert _verifier().verify_all([]).status is VerificationStatus.EMPTY


class TestHooksAndTiming:
    def test_hooks_called(self) -> None:
        hooks = MagicMock()
        verifier = ContractVerifier(users_contract_v1(), hooks=hooks)
        matched, unmatched = make_exchange(response_body=make_user()), make_exchange("DELETE", "/users/1")

        summary = verifier.verify_all([matched, unmatched])

        assert hooks.before_exchange.call_count == 2
        assert hooks.after_exchange.call_count == 2
        hooks.on_unmatched_exchange.assert_called_once_with(unmatched)
        hooks.after_verification.assert_called_once_with(summary)

    def test_duration_uses_clock(self) -> None:
        ticks = iter([10.0, 10.25])
        verifier = ContractVerifier(users_contract_v1(), clock=lambda: next(ticks))
        result = verifier.verify(make_exchange(response_body=make_user()))
        assert result.duration_ms == pytest.approx(250.0)
