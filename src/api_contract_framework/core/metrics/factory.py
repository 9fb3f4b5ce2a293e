"""Build a meter registry from configuration."""

from __future__ import annotations

from api_contract_framework.core.config.base import MetricsBackend
from api_contract_framework.core.config.hooks import MetricsConfig
from api_contract_framework.core.metrics.registry import InMemoryRegistry, MeterRegistry


def create_registry(config: MetricsConfig) -> MeterRegistry:
    """Return the registry for ``config.backend``.

    Raises:
        ImportError: If the backend's optional library is missing.
    """
    backend = MetricsBackend(config.backend)
    if backend is MetricsBackend.PROMETHEUS:
        from api_contract_framework.core.metrics.exporters import PrometheusRegistry

        return PrometheusRegistry()
    if backend is MetricsBackend.OPENTELEMETRY:
        from api_contract_framework.core.metrics.exporters import OpenTelemetryRegistry

        return OpenTelemetryRegistry()
    return InMemoryRegistry()
