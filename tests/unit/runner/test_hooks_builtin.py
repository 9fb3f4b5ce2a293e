"""Tests for built-in verification hooks (logging and metrics)."""

from __future__ import annotations

import logging
from unittest.mock import MagicMock

from api_contract_framework.core.metrics.registry import InMemoryRegistry
from api_contract_framework.core.validation.violation import ValidationResult, Violation, ViolationType
from api_contract_framework.runner.hooks_builtin import LoggingHooks, MetricsHooks
from api_contract_framework.runner.result import VerificationResult, VerificationSummary
from tests.factories import make_endpoint, make_exchange

LOC = "GET /users/{id}"


def _result(*violations: Violation) -> VerificationResult:
    return VerificationResult(make_exchange(), make_endpoint(), ValidationResult(LOC, list(violations)))


def _violation(violation_type: ViolationType = ViolationType.MISSING_REQUIRED) -> Violation:
    return Violation(LOC, "$.id", "Missing required field 'id'", violation_type)


class TestLoggingHooks:
    """Tests for LoggingHooks."""

    def test_default_logger_name(self) -> None:
        """Default logger is named 'acf.verification'."""
        assert LoggingHooks().logger.name == "acf.verification"

    def test_custom_logger(self) -> None:
        """A custom logger can be injected."""
        custom = logging.getLogger("custom.test")
        assert LoggingHooks(logger=custom).logger is custom

    def test_before_exchange_logs_debug(self) -> None:
        mock_logger = MagicMock(spec=logging.Logger)
        LoggingHooks(logger=mock_logger).before_exchange(make_exchange())
        mock_logger.debug.assert_called_once()

    def test_passed_exchange_logs_info(self) -> None:
        """A valid exchange emits a single info line."""
        mock_logger = MagicMock(spec=logging.Logger)
        LoggingHooks(logger=mock_logger).after_exchange(make_exchange(), _result(), 4.2)
        mock_logger.info.assert_called_once()
        assert "PASSED" in str(mock_logger.info.call_args)
        mock_logger.warning.assert_not_called()

    def test_failed_exchange_logs_each_violation(self) -> None:
        """A failed exchange logs a summary plus one warning per violation."""
        mock_logger = MagicMock(spec=logging.Logger)
        result = _result(_violation(), _violation(ViolationType.INVALID_TYPE))
        LoggingHooks(logger=mock_logger).after_exchange(make_exchange(), result, 1.0)
        assert mock_logger.warning.call_count == 3

    def test_violation_logging_can_be_disabled(self) -> None:
        mock_logger = MagicMock(spec=logging.Logger)
        result = _result(_violation(), _violation())
        LoggingHooks(logger=mock_logger, log_violations=False).after_exchange(make_exchange(), result, 1.0)
        mock_logger.warning.assert_called_once()

    def test_unmatched_exchange_logs_warning(self) -> None:
        mock_logger = MagicMock(spec=logging.Logger)
        LoggingHooks(logger=mock_logger).on_unmatched_exchange(make_exchange("DELETE", "/users/1"))
        mock_logger.warning.assert_called_once()
        assert "DELETE /users/1" in str(mock_logger.warning.call_args)

    def test_after_verification_logs_counts(self) -> None:
        mock_logger = MagicMock(spec=logging.Logger)
        summary = VerificationSummary("users-v1", [_result(), _result(_violation())])
        LoggingHooks(logger=mock_logger).after_verification(summary)
        mock_logger.info.assert_called_once()
        args = mock_logger.info.call_args.args
        assert args[1:] == ("users-v1", "partial_success", 1, 1)


class TestMetricsHooks:
    """Tests for MetricsHooks."""

    def test_registry_property(self) -> None:
        registry = InMemoryRegistry()
        assert MetricsHooks(registry).registry is registry

    def test_passed_exchange(self) -> None:
        registry = InMemoryRegistry()
        MetricsHooks(registry).after_exchange(make_exchange(), _result(), 25.0)

        assert registry.get_counter("acf.exchanges", {"endpoint": LOC, "outcome": "passed"}) == 1.0
        assert registry.counter_total("acf.exchanges.failed") == 0.0
        assert registry.get_timer("acf.exchange.duration", {"endpoint": LOC}).total_ms == 25.0

    def test_failed_exchange_counts_violations_by_type(self) -> None:
        registry = InMemoryRegistry()
        result = _result(_violation(), _violation(), _violation(ViolationType.INVALID_TYPE))
        MetricsHooks(registry).after_exchange(make_exchange(), result, 1.0)

        assert registry.get_counter("acf.exchanges", {"endpoint": LOC, "outcome": "failed"}) == 1.0
        assert registry.get_counter("acf.exchanges.failed", {"endpoint": LOC}) == 1.0
        assert registry.get_counter("acf.violations", {"type": "MissingRequired"}) == 2.0
        assert registry.get_counter("acf.violations", {"type": "InvalidType"}) == 1.0

    def test_unmatched_exchange(self) -> None:
        registry = InMemoryRegistry()
        MetricsHooks(registry).on_unmatched_exchange(make_exchange())
        assert registry.get_counter("acf.exchanges.unmatched") == 1.0

    def test_custom_prefix(self) -> None:
        registry = InMemoryRegistry()
        MetricsHooks(registry, prefix="contracts").on_unmatched_exchange(make_exchange())
        assert registry.get_counter("contracts.exchanges.unmatched") == 1.0

    def test_no_op_events(self) -> None:
        registry = InMemoryRegistry()
        hooks = MetricsHooks(registry)
        hooks.before_exchange(make_exchange())
        hooks.after_verification(VerificationSummary("users"))
        assert registry.get_metrics() == {"counters": {}, "timers": {}}
