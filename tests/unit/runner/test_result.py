"""Tests for exchange and verification result models."""

from __future__ import annotations

import pytest

from api_contract_framework.core.diagnostics.json_diff import JsonDiff
from api_contract_framework.core.exceptions import ContractViolationError
from api_contract_framework.core.validation.violation import ValidationResult, Violation, ViolationType
from api_contract_framework.runner.result import VerificationResult, VerificationStatus, VerificationSummary
from tests.factories import make_endpoint, make_exchange

LOC = "GET /users/{id}"


def _result(*violations: Violation) -> VerificationResult:
    return VerificationResult(make_exchange(), make_endpoint(), ValidationResult(LOC, list(violations)))


def _violation() -> Violation:
    return Violation(LOC, "$.id", "Missing required field 'id'", ViolationType.MISSING_REQUIRED)


class TestCapturedExchange:
    def test_str(self) -> None:
        assert str(make_exchange("get", "/users/1?x=1")) == "GET /users/1?x=1"

    def test_factory_serializes_body(self) -> None:
        exchange = make_exchange(response_body={"id": 1})
        assert exchange.response_body == '{"id": 1}'
        assert exchange.response_content_type == "application/json"


class TestVerificationResult:
    def test_valid(self) -> None:
        result = _result()
        assert result.is_valid
        assert result.violations == []
        assert result.location == LOC

    def test_report(self) -> None:
        result = VerificationResult(
            make_exchange(status_code=500, response_body="oops", request_body="{}"),
            make_endpoint(),
            ValidationResult(LOC, [_violation()]),
        )
        report = result.report
        assert report.endpoint == LOC
        assert report.status_code == 500
        assert report.expected_status_codes == (200,)
        assert report.request_sent == "{}"
        assert report.response_received == "oops"
        assert not report.is_valid

    def test_report_without_endpoint(self) -> None:
        result = VerificationResult(make_exchange(), None, ValidationResult("GET /x", [_violation()]))
        assert result.report.expected_status_codes == ()

    def test_report_against_diffs_response_body(self) -> None:
        result = VerificationResult(
            make_exchange(response_body={"id": 1, "name": "Bob"}),
            make_endpoint(),
            ValidationResult(LOC, [_violation()]),
        )
        report = result.report_against('{"id": 1, "name": "Ada"}')
        assert report.body_diffs == (JsonDiff.changed("$.name", '"Ada"', '"Bob"'),)
        assert report.violations == result.report.violations
        assert result.report.body_diffs == ()

    def test_report_against_matching_body_has_no_diffs(self) -> None:
        result = VerificationResult(make_exchange(response_body={"id": 1}), make_endpoint(), ValidationResult(LOC))
        assert result.report_against('{"id": 1.0}').body_diffs == ()


class TestVerificationSummary:
    @pytest.mark.parametrize(
        ("valid_flags", "status"),
        [
            ((), VerificationStatus.EMPTY),
            ((True, True), VerificationStatus.SUCCESS),
            ((True, False), VerificationStatus.PARTIAL_SUCCESS),
            ((False, False), VerificationStatus.FAILURE),
        ],
    )
    def test_status(self, valid_flags: tuple[bool, ...], status: VerificationStatus) -> None:
        results = [_result() if ok else _result(_violation()) for ok in valid_flags]
        assert VerificationSummary("users", results).status is status

    def test_partitions(self) -> None:
        passed, failed = _result(), _result(_violation())
        summary = VerificationSummary("users", [passed, failed])
        assert summary.passed == [passed]
        assert summary.failed == [failed]
        assert len(summary.violations) == 1

    def test_raise_if_failed(self) -> None:
        summary = VerificationSummary("users", [_result(), _result(_violation(), _violation())])
        with pytest.raises(ContractViolationError) as exc_info:
            summary.raise_if_failed()
        assert len(exc_info.value.violations) == 2

    def test_raise_if_failed_passes(self) -> None:
        VerificationSummary("users", [_result()]).raise_if_failed()
