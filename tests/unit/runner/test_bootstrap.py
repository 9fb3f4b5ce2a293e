"""Tests for verifier bootstrap helpers."""

from __future__ import annotations

import logging
import sys
from collections.abc import Iterator
from pathlib import Path

import pytest

from api_contract_framework.core.config import LoggingConfig, LogLevel, MetricsConfig, VerificationConfig
from api_contract_framework.core.metrics.registry import InMemoryRegistry
from api_contract_framework.runner.bootstrap import configure_logging, create_verifier
from api_contract_framework.runner.hooks import NoOpHooks
from api_contract_framework.runner.hooks_builtin import LoggingHooks, MetricsHooks
from tests.factories import make_exchange, make_user, users_contract_v1


@pytest.fixture
def restore_root_logger() -> Iterator[None]:
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.mark.usefixtures("restore_root_logger")
class TestConfigureLogging:
    def test_stdout(self) -> None:
        configure_logging(LoggingConfig(level=LogLevel.DEBUG, output="stdout"))
        root = logging.getLogger()
        assert root.level == logging.DEBUG
        assert len(root.handlers) == 1
        assert root.handlers[0].stream is sys.stdout  # type: ignore[attr-defined]

    def test_stderr_default(self) -> None:
        configure_logging(LoggingConfig())
        assert logging.getLogger().handlers[0].stream is sys.stderr  # type: ignore[attr-defined]

    def test_file(self, tmp_path: Path) -> None:
        log_file = tmp_path / "acf.log"
        configure_logging(LoggingConfig(level=LogLevel.WARNING, output=str(log_file)))
        logging.getLogger("acf.test").warning("written to file")
        for handler in logging.getLogger().handlers:
            handler.flush()
        assert "[WARNING] acf.test: written to file" in log_file.read_text()


class TestCreateVerifier:
    def _hooks(self, verifier: object) -> tuple[object, ...]:
        return verifier._hooks.hooks  # type: ignore[attr-defined]

    def test_logging_hooks_always_installed(self) -> None:
        hooks = self._hooks(create_verifier(users_contract_v1()))
        assert len(hooks) == 1
        assert isinstance(hooks[0], LoggingHooks)

    def test_metrics_enabled_by_config(self) -> None:
        config = VerificationConfig(metrics=MetricsConfig(enabled=True))
        hooks = self._hooks(create_verifier(users_contract_v1(), config))
        assert isinstance(hooks[1], MetricsHooks)
        assert isinstance(hooks[1].registry, InMemoryRegistry)  # type: ignore[attr-defined]

    def test_explicit_registry_records(self) -> None:
        registry = InMemoryRegistry()
        config = VerificationConfig(metrics=MetricsConfig(prefix="contracts"))
        verifier = create_verifier(users_contract_v1(), config, registry=registry)

        verifier.verify(make_exchange(response_body=make_user()))

        assert registry.counter_total("contracts.exchanges") == 1.0

    def test_extra_hooks_appended(self) -> None:
        extra = NoOpHooks()
        hooks = self._hooks(create_verifier(users_contract_v1(), None, extra))
        assert hooks[-1] is extra

    def test_config_passed_through(self) -> None:
        config = VerificationConfig(fail_on_violation=True)
        assert create_verifier(users_contract_v1(), config).config is config
