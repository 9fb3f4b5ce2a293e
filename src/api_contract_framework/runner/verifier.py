"""Verify captured exchanges against a contract."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Iterable, Mapping, Sequence
from urllib.parse import parse_qs, urlsplit

from api_contract_framework.core.config.verification import VerificationConfig
from api_contract_framework.core.contracts.models import (
    Contract,
    EndpointContract,
    HeaderExpectation,
    QueryParameterExpectation,
    ResponseExpectation,
)
from api_contract_framework.core.diagnostics.formatter import HEADER_PREFIX, QUERY_PREFIX
from api_contract_framework.core.exceptions import ContractViolationError
from api_contract_framework.core.validation.config import PartialValidationConfig, ValidationDirection
from api_contract_framework.core.validation.violation import ROOT_PATH, ValidationResult, Violation, ViolationType
from api_contract_framework.runner.hooks import NoOpHooks, VerificationHooks
from api_contract_framework.runner.result import CapturedExchange, VerificationResult, VerificationSummary

logger = logging.getLogger(__name__)


def _media_type(content_type: str) -> str:
    return content_type.split(";", 1)[0].strip().lower()


def _query_values(exchange: CapturedExchange) -> dict[str, list[str]]:
    if exchange.query is None:
        return parse_qs(urlsplit(exchange.path).query, keep_blank_values=True)
    values: dict[str, list[str]] = {}
    for name, raw in exchange.query.items():
        values[name] = [raw] if isinstance(raw, str) else list(raw)
    return values


class ContractVerifier:
    """Checks captured exchanges against the endpoints of a contract.

    The verifier performs no I/O. For each exchange it locates the matching
    endpoint and checks, in order: request headers, query parameters,
    request body, response status, content type, response headers and
    response body.

    Args:
        contract: Contract to verify against.
        config: Verification options. Defaults to :class:`VerificationConfig`.
        hooks: Lifecycle hooks. Defaults to :class:`NoOpHooks`.
        clock: Injectable monotonic clock for testing.
    """

    def __init__(
        self,
        contract: Contract,
        config: VerificationConfig | None = None,
        hooks: VerificationHooks | None = None,
        clock: Callable[[], float] | None = None,
    ) -> None:
        if contract is None:
            raise ValueError("contract must not be None")
        self._contract = contract
        self._config = config or VerificationConfig()
        self._hooks: VerificationHooks = hooks or NoOpHooks()
        self._clock = clock or time.monotonic
        self._default_partial = self._config.validation.to_partial_config()

    @property
    def contract(self) -> Contract:
        return self._contract

    @property
    def config(self) -> VerificationConfig:
        return self._config

    def verify(self, exchange: CapturedExchange) -> VerificationResult:
        """Verify a single exchange.

        Raises:
            ValueError: If *exchange* is ``None``.
            ContractViolationError: If ``fail_on_violation`` is set and the
                exchange has violations.
        """
        result = self._verify(exchange)
        if self._config.fail_on_violation and result.violations:
            raise ContractViolationError(result.violations)
        return result

    def verify_all(self, exchanges: Iterable[CapturedExchange]) -> VerificationSummary:
        """Verify many exchanges and aggregate the outcome.

        ``fail_on_violation`` is not applied per exchange; call
        :meth:`VerificationSummary.raise_if_failed` on the summary instead.
        """
        summary = VerificationSummary(self._contract.name)
        for exchange in exchanges:
            summary.results.append(self._verify(exchange))
        self._hooks.after_verification(summary)
        return summary

    def _verify(self, exchange: CapturedExchange) -> VerificationResult:
        if exchange is None:
            raise ValueError("exchange must not be None")
        self._hooks.before_exchange(exchange)
        start = self._clock()

        endpoint = self._contract.find_endpoint(exchange.path, exchange.method)
        if endpoint is None:
            self._hooks.on_unmatched_exchange(exchange)
            location = str(exchange)
            violations = [
                Violation(
                    location,
                    ROOT_PATH,
                    f"No contract definition found for endpoint {location}",
                    ViolationType.MISSING_REQUIRED,
                )
            ]
        else:
            location = str(endpoint)
            violations = self._check(endpoint, exchange, location)

        duration_ms = (self._clock() - start) * 1000
        result = VerificationResult(exchange, endpoint, ValidationResult(location, violations), duration_ms)
        logger.debug("Verified %s: %d violation(s)", location, len(violations))
        self._hooks.after_exchange(exchange, result, duration_ms)
        return result

    def _check(self, endpoint: EndpointContract, exchange: CapturedExchange, location: str) -> list[Violation]:
        if exchange.timed_out:
            elapsed = f" after {exchange.duration_ms:.0f}ms" if exchange.duration_ms is not None else ""
            return [Violation(location, ROOT_PATH, f"Exchange timed out{elapsed}", ViolationType.TIMEOUT)]

        violations: list[Violation] = []
        if self._config.validate_headers:
            violations.extend(_check_headers(endpoint.headers, exchange.request_headers, location))
        if self._config.validate_query_parameters:
            violations.extend(_check_query(endpoint.query_parameters, _query_values(exchange), location))
        if self._config.validate_request:
            violations.extend(self._check_request_body(endpoint, exchange, location))
        violations.extend(self._check_response(endpoint, exchange, location))
        return violations

    def _partial_for(
        self, partial_config: PartialValidationConfig | None, direction: ValidationDirection
    ) -> PartialValidationConfig:
        return (partial_config or self._default_partial).for_direction(direction)

    def _check_request_body(
        self, endpoint: EndpointContract, exchange: CapturedExchange, location: str
    ) -> list[Violation]:
        request = endpoint.request
        if request is None:
            return []
        if not exchange.request_body:
            if request.required:
                return [
                    Violation(
                        location,
                        ROOT_PATH,
                        "Request body is required but was not provided",
                        ViolationType.MISSING_REQUIRED,
                    )
                ]
            return []
        if request.body_validator is None:
            return []
        config = self._partial_for(request.partial_config, ValidationDirection.REQUEST)
        return request.body_validator.validate(exchange.request_body, location, config)

    def _check_response(
        self, endpoint: EndpointContract, exchange: CapturedExchange, location: str
    ) -> list[Violation]:
        expectation = endpoint.response_for(exchange.status_code)
        if expectation is None:
            if not endpoint.responses:
                return []
            expected = ", ".join(str(code) for code in endpoint.expected_status_codes)
            return [
                Violation(
                    location,
                    ROOT_PATH,
                    f"Unexpected status code {exchange.status_code}",
                    ViolationType.UNEXPECTED_STATUS_CODE,
                    expected=expected,
                    actual=str(exchange.status_code),
                )
            ]

        violations: list[Violation] = []
        if self._config.validate_content_type:
            violations.extend(_check_content_type(expectation, exchange.response_content_type, location))
        if self._config.validate_headers:
            violations.extend(_check_headers(expectation.headers, exchange.response_headers, location))
        if expectation.body_validator is not None and exchange.response_body:
            config = self._partial_for(expectation.partial_config, ValidationDirection.RESPONSE)
            violations.extend(expectation.body_validator.validate(exchange.response_body, location, config))
        return violations


def _check_content_type(expectation: ResponseExpectation, actual: str | None, location: str) -> list[Violation]:
    if expectation.content_type is None or actual is None:
        return []
    if _media_type(actual).startswith(_media_type(expectation.content_type)):
        return []
    return [
        Violation(
            location,
            ROOT_PATH,
            "Content type mismatch",
            ViolationType.INVALID_CONTENT_TYPE,
            expected=expectation.content_type,
            actual=actual,
        )
    ]


def _check_headers(
    expectations: Sequence[HeaderExpectation], headers: Mapping[str, str], location: str
) -> list[Violation]:
    received = {name.lower(): value for name, value in headers.items()}
    violations: list[Violation] = []
    for expectation in expectations:
        path = f"{HEADER_PREFIX}{expectation.name}"
        value = received.get(expectation.key)
        if value is None:
            if expectation.required:
                violations.append(
                    Violation(
                        location,
                        path,
                        f"Missing required header '{expectation.name}'",
                        ViolationType.MISSING_HEADER,
                    )
                )
        elif not expectation.accepts(value):
            violations.append(
                Violation(
                    location,
                    path,
                    f"Header '{expectation.name}' has incorrect value",
                    ViolationType.INVALID_HEADER_VALUE,
                    expected=expectation.describe_value(),
                    actual=value,
                )
            )
    return violations


def _check_query(
    expectations: Sequence[QueryParameterExpectation], query: Mapping[str, list[str]], location: str
) -> list[Violation]:
    violations: list[Violation] = []
    for expectation in expectations:
        path = f"{QUERY_PREFIX}{expectation.name}"
        values = [value for value in query.get(expectation.name, []) if value != ""]
        if not values:
            if expectation.required:
                violations.append(
                    Violation(
                        location,
                        path,
                        f"Missing required query parameter '{expectation.name}'",
                        ViolationType.MISSING_QUERY_PARAMETER,
                    )
                )
            continue
        for value in values:
            if not expectation.accepts(value):
                violations.append(
                    Violation(
                        location,
                        path,
                        f"Query parameter '{expectation.name}' has invalid value",
                        ViolationType.INVALID_QUERY_PARAMETER_VALUE,
                        expected=expectation.type.value,
                        actual=value,
                    )
                )
                break
    return violations
