"""Wire a verifier from configuration."""

from __future__ import annotations

import logging
import sys

from api_contract_framework.core.config.hooks import LoggingConfig
from api_contract_framework.core.config.verification import VerificationConfig
from api_contract_framework.core.contracts.models import Contract
from api_contract_framework.core.metrics.factory import create_registry
from api_contract_framework.core.metrics.registry import MeterRegistry
from api_contract_framework.runner.hooks import CompositeHooks, VerificationHooks
from api_contract_framework.runner.hooks_builtin import LoggingHooks, MetricsHooks
from api_contract_framework.runner.verifier import ContractVerifier

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def configure_logging(config: LoggingConfig) -> None:
    """Configure the root logger from a :class:`LoggingConfig`."""
    if config.output == "stdout":
        handler: logging.Handler = logging.StreamHandler(sys.stdout)
    elif config.output == "stderr":
        handler = logging.StreamHandler(sys.stderr)
    else:
        handler = logging.FileHandler(config.output)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logging.basicConfig(level=config.level.value, handlers=[handler], force=True)


def create_verifier(
    contract: Contract,
    config: VerificationConfig | None = None,
    *extra_hooks: VerificationHooks,
    registry: MeterRegistry | None = None,
) -> ContractVerifier:
    """Build a :class:`ContractVerifier` with hooks derived from *config*.

    Logging hooks are always installed. Metrics hooks are installed when
    ``config.metrics.enabled`` is set or a *registry* is passed.

    Args:
        contract: Contract to verify against.
        config: Verification configuration. Defaults to
            :class:`VerificationConfig`.
        *extra_hooks: Additional hooks appended after the built-in ones.
        registry: Registry overriding the configured metrics backend.
    """
    config = config or VerificationConfig()
    hooks: list[VerificationHooks] = [LoggingHooks(log_violations=config.logging.log_violations)]
    if registry is None and config.metrics.enabled:
        registry = create_registry(config.metrics)
    if registry is not None:
        hooks.append(MetricsHooks(registry, prefix=config.metrics.prefix))
    hooks.extend(extra_hooks)
    return ContractVerifier(contract, config, CompositeHooks(*hooks))
