"""Captured exchanges and verification result models."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field, replace
from enum import Enum

from api_contract_framework.core.contracts.models import EndpointContract
from api_contract_framework.core.diagnostics.json_diff import compare_json
from api_contract_framework.core.diagnostics.report import DiagnosticReport
from api_contract_framework.core.exceptions import ContractViolationError
from api_contract_framework.core.validation.violation import ValidationResult, Violation

QueryValues = Mapping[str, str | Sequence[str]]


@dataclass(frozen=True)
class CapturedExchange:
    """One HTTP request/response pair captured by a caller.

    The framework never performs I/O; test clients, proxies or middleware
    record exchanges and hand them to the verifier.

    Args:
        method: HTTP method of the request.
        path: Request path, optionally with a ``?query`` suffix.
        status_code: Response status code.
        response_body: Raw response body text, if any.
        response_headers: Response headers.
        response_content_type: Response ``Content-Type`` value.
        request_body: Raw request body text, if any.
        request_headers: Request headers.
        query: Query parameters. When ``None`` they are parsed from *path*.
        duration_ms: Round-trip time reported by the caller.
        timed_out: Whether the exchange did not complete in time.
    """

    method: str
    path: str
    status_code: int = 200
    response_body: str | None = None
    response_headers: Mapping[str, str] = field(default_factory=dict)
    response_content_type: str | None = None
    request_body: str | None = None
    request_headers: Mapping[str, str] = field(default_factory=dict)
    query: QueryValues | None = None
    duration_ms: float | None = None
    timed_out: bool = False

    def __str__(self) -> str:
        return f"{self.method.upper()} {self.path}"


@dataclass
class VerificationResult:
    """Outcome of verifying one captured exchange."""

    exchange: CapturedExchange
    endpoint: EndpointContract | None
    validation: ValidationResult
    duration_ms: float = 0.0

    @property
    def is_valid(self) -> bool:
        return self.validation.is_valid

    @property
    def violations(self) -> list[Violation]:
        return self.validation.violations

    @property
    def location(self) -> str:
        return self.validation.location

    @property
    def report(self) -> DiagnosticReport:
        """Diagnostic report for this exchange."""
        return DiagnosticReport(
            self.location,
            tuple(self.violations),
            self.exchange.status_code,
            self.endpoint.expected_status_codes if self.endpoint is not None else (),
            self.exchange.request_body,
            self.exchange.response_body,
        )

    def report_against(self, expected_body: str | None) -> DiagnosticReport:
        """Diagnostic report that also diffs the response against *expected_body*.

        Args:
            expected_body: Raw JSON the response was expected to carry, e.g.
                a recorded example or a generated sample.
        """
        return replace(self.report, body_diffs=tuple(compare_json(expected_body, self.exchange.response_body)))


class VerificationStatus(str, Enum):
    """Overall outcome of verifying many exchanges."""

    SUCCESS = "success"
    PARTIAL_SUCCESS = "partial_success"
    FAILURE = "failure"
    EMPTY = "empty"


@dataclass
class VerificationSummary:
    """Aggregate result of :meth:`ContractVerifier.verify_all`."""

    contract_name: str
    results: list[VerificationResult] = field(default_factory=list)

    @property
    def passed(self) -> list[VerificationResult]:
        return [r for r in self.results if r.is_valid]

    @property
    def failed(self) -> list[VerificationResult]:
        return [r for r in self.results if not r.is_valid]

    @property
    def status(self) -> VerificationStatus:
        if not self.results:
            return VerificationStatus.EMPTY
        failed = len(self.failed)
        if failed == 0:
            return VerificationStatus.SUCCESS
        if failed == len(self.results):
            return VerificationStatus.FAILURE
        return VerificationStatus.PARTIAL_SUCCESS

    @property
    def violations(self) -> list[Violation]:
        return [v for r in self.results for v in r.violations]

    def raise_if_failed(self) -> None:
        """Raise when any exchange failed.

        Raises:
            ContractViolationError: Carrying every violation found.
        """
        violations = self.violations
        if violations:
            raise ContractViolationError(violations)
