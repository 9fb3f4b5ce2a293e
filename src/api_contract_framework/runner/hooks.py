"""Verification lifecycle hooks protocol and infrastructure."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from api_contract_framework.runner.result import CapturedExchange, VerificationResult, VerificationSummary

logger = logging.getLogger(__name__)


class VerificationHooks(Protocol):
    """Protocol defining callbacks around exchange verification.

    This protocol is NOT ``@runtime_checkable``; use structural typing.
    """

    def before_exchange(self, exchange: CapturedExchange) -> None:
        """Called before an exchange is verified."""
        ...

    def after_exchange(self, exchange: CapturedExchange, result: VerificationResult, duration_ms: float) -> None:
        """Called after an exchange is verified (valid or not)."""
        ...

    def on_unmatched_exchange(self, exchange: CapturedExchange) -> None:
        """Called when no endpoint in the contract matches an exchange."""
        ...

    def after_verification(self, summary: VerificationSummary) -> None:
        """Called after a batch of exchanges has been verified."""
        ...


class NoOpHooks:
    """Hooks implementation that does nothing."""

    def before_exchange(self, exchange: CapturedExchange) -> None:
        pass

    def after_exchange(self, exchange: CapturedExchange, result: VerificationResult, duration_ms: float) -> None:
        pass

    def on_unmatched_exchange(self, exchange: CapturedExchange) -> None:
        pass

    def after_verification(self, summary: VerificationSummary) -> None:
        pass


class CompositeHooks:
    """Broadcasts verification events to multiple hooks implementations.

    Exceptions raised by individual hooks are caught and logged so that
    one misbehaving hook does not break verification.
    """

    def __init__(self, *hooks: VerificationHooks) -> None:
        self._hooks: tuple[VerificationHooks, ...] = hooks

    @property
    def hooks(self) -> tuple[VerificationHooks, ...]:
        return self._hooks

    def _call_all(self, method: str, *args: Any) -> None:
        for hook in self._hooks:
            try:
                getattr(hook, method)(*args)
            except Exception:
                logger.warning(
                    "Hook %s.%s raised an exception",
                    type(hook).__name__,
                    method,
                    exc_info=True,
                )

    def before_exchange(self, exchange: CapturedExchange) -> None:
        self._call_all("before_exchange", exchange)

    def after_exchange(self, exchange: CapturedExchange, result: VerificationResult, duration_ms: float) -> None:
        self._call_all("after_exchange", exchange, result, duration_ms)

    def on_unmatched_exchange(self, exchange: CapturedExchange) -> None:
        self._call_all("on_unmatched_exchange", exchange)

    def after_verification(self, summary: VerificationSummary) -> None:
        self._call_all("after_verification", summary)
