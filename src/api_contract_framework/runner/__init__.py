"""Verification runner: hooks, exchange verification, and mock responses."""

from api_contract_framework.runner.bootstrap import configure_logging, create_verifier
from api_contract_framework.runner.hooks import CompositeHooks, NoOpHooks, VerificationHooks
from api_contract_framework.runner.hooks_builtin import LoggingHooks, MetricsHooks
from api_contract_framework.runner.loader import ContractLoadError, load_contract
from api_contract_framework.runner.mock_responses import MockResponder, MockResponse, apply_overrides
from api_contract_framework.runner.result import (
    CapturedExchange,
    VerificationResult,
    VerificationStatus,
    VerificationSummary,
)
from api_contract_framework.runner.verifier import ContractVerifier

__all__ = [
    "CapturedExchange",
    "CompositeHooks",
    "ContractLoadError",
    "ContractVerifier",
    "LoggingHooks",
    "MetricsHooks",
    "MockResponder",
    "MockResponse",
    "NoOpHooks",
    "VerificationHooks",
    "VerificationResult",
    "VerificationStatus",
    "VerificationSummary",
    "apply_overrides",
    "configure_logging",
    "create_verifier",
    "load_contract",
]
