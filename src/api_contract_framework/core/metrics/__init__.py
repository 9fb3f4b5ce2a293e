"""Metrics collection and export abstractions."""

from api_contract_framework.core.metrics.exporters import OpenTelemetryRegistry, PrometheusRegistry
from api_contract_framework.core.metrics.factory import create_registry
from api_contract_framework.core.metrics.registry import InMemoryRegistry, MeterRegistry, TimerStats

__all__ = [
    "InMemoryRegistry",
    "MeterRegistry",
    "OpenTelemetryRegistry",
    "PrometheusRegistry",
    "TimerStats",
    "create_registry",
]
