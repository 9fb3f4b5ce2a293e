"""Built-in verification hooks: logging and metrics collection."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from api_contract_framework.core.diagnostics.formatter import format_summary_line
from api_contract_framework.core.metrics.registry import MeterRegistry

if TYPE_CHECKING:
    from api_contract_framework.runner.result import CapturedExchange, VerificationResult, VerificationSummary


class LoggingHooks:
    """Hooks that log verification events.

    Args:
        logger: Custom logger instance. Defaults to
            ``logging.getLogger("acf.verification")``.
        log_violations: Log every violation of a failed exchange.
    """

    def __init__(self, logger: logging.Logger | None = None, log_violations: bool = True) -> None:
        self._logger = logger or logging.getLogger("acf.verification")
        self._log_violations = log_violations

    @property
    def logger(self) -> logging.Logger:
        """Return the logger used by this hooks instance."""
        return self._logger

    def before_exchange(self, exchange: CapturedExchange) -> None:
        self._logger.debug("Verifying %s -> %d", exchange, exchange.status_code)

    def after_exchange(self, exchange: CapturedExchange, result: VerificationResult, duration_ms: float) -> None:
        if result.is_valid:
            self._logger.info("%s (%.1fms)", format_summary_line(result.location, result.violations), duration_ms)
            return
        self._logger.warning(
            "%s failed with %d violation(s): %s",
            result.location,
            len(result.violations),
            format_summary_line(result.location, result.violations),
        )
        if self._log_violations:
            for violation in result.violations:
                self._logger.warning("%s", violation)

    def on_unmatched_exchange(self, exchange: CapturedExchange) -> None:
        self._logger.warning("No contract endpoint matches %s", exchange)

    def after_verification(self, summary: VerificationSummary) -> None:
        self._logger.info(
            "Contract '%s' verification %s: %d passed, %d failed",
            summary.contract_name,
            summary.status.value,
            len(summary.passed),
            len(summary.failed),
        )


class MetricsHooks:
    """Hooks that record verification metrics in a meter registry.

    Metric names (with the default prefix):

    * ``acf.exchanges`` counter tagged by ``endpoint`` and ``outcome``;
    * ``acf.exchanges.failed`` counter tagged by ``endpoint``;
    * ``acf.exchanges.unmatched`` counter;
    * ``acf.violations`` counter tagged by violation ``type``;
    * ``acf.exchange.duration`` timer tagged by ``endpoint``.

    Args:
        registry: Registry receiving the measurements.
        prefix: Prefix for every metric name.
    """

    def __init__(self, registry: MeterRegistry, prefix: str = "acf") -> None:
        self._registry = registry
        self._prefix = prefix

    @property
    def registry(self) -> MeterRegistry:
        return self._registry

    def _name(self, suffix: str) -> str:
        return f"{self._prefix}.{suffix}"

    def before_exchange(self, exchange: CapturedExchange) -> None:
        pass

    def after_exchange(self, exchange: CapturedExchange, result: VerificationResult, duration_ms: float) -> None:
        endpoint = result.location
        outcome = "passed" if result.is_valid else "failed"
        self._registry.counter(self._name("exchanges"), tags={"endpoint": endpoint, "outcome": outcome})
        self._registry.timer(self._name("exchange.duration"), duration_ms, tags={"endpoint": endpoint})
        if not result.is_valid:
            self._registry.counter(self._name("exchanges.failed"), tags={"endpoint": endpoint})
        for violation_type, count in result.validation.errors_by_type().items():
            self._registry.counter(self._name("violations"), float(count), tags={"type": violation_type.value})

    def on_unmatched_exchange(self, exchange: CapturedExchange) -> None:
        self._registry.counter(self._name("exchanges.unmatched"))

    def after_verification(self, summary: VerificationSummary) -> None:
        pass
