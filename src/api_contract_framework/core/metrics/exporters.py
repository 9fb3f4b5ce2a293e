"""Registry adapters for Prometheus and OpenTelemetry.

Both adapters implement :class:`MeterRegistry`. Each library import is
guarded so it is only needed when the adapter is instantiated. Install the
optional extras to use them::

    pip install api-contract-framework[metrics]
"""

from __future__ import annotations

import re
import threading
from collections.abc import Callable
from typing import Any

from api_contract_framework.core.metrics.registry import Tags

_INVALID_PROMETHEUS_CHARS = re.compile(r"[^a-zA-Z0-9_:]")


def prometheus_name(name: str) -> str:
    """Convert a dotted metric name into a valid Prometheus name.

    Example:
        >>> prometheus_name("acf.exchange.duration")
        'acf_exchange_duration'
    """
    sanitized = _INVALID_PROMETHEUS_CHARS.sub("_", name)
    return f"_{sanitized}" if sanitized[:1].isdigit() else sanitized


class _InstrumentCache:
    """Lazily creates one instrument per (kind, name) and reuses it."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._instruments: dict[tuple[str, str], Any] = {}

    def get(self, kind: str, name: str, create: Callable[[], Any]) -> Any:
        with self._lock:
            key = (kind, name)
            if key not in self._instruments:
                self._instruments[key] = create()
            return self._instruments[key]

    def names(self) -> dict[str, list[str]]:
        with self._lock:
            grouped: dict[str, list[str]] = {}
            for kind, name in self._instruments:
                grouped.setdefault(kind, []).append(name)
            return grouped


class PrometheusRegistry:
    """Adapter that forwards metrics to ``prometheus_client``.

    Counters map to :class:`~prometheus_client.Counter` and timers to
    :class:`~prometheus_client.Histogram` observed in milliseconds. Label
    names come from the tag keys of the first call for a metric.

    Args:
        registry: Collector registry to register with. Defaults to the
            ``prometheus_client`` global registry.

    Raises:
        ImportError: If ``prometheus_client`` is not installed.
    """

    def __init__(self, registry: Any = None) -> None:
        try:
            import prometheus_client
        except ImportError:
            raise ImportError(
                "prometheus_client is required for PrometheusRegistry. Install it with: pip install prometheus-client"
            ) from None

        self._client = prometheus_client
        self._registry = registry if registry is not None else prometheus_client.REGISTRY
        self._cache = _InstrumentCache()

    def counter(self, name: str, value: float = 1.0, tags: Tags | None = None) -> None:
        metric = self._cache.get(
            "counters",
            name,
            lambda: self._client.Counter(
                prometheus_name(name), f"Counter {name}", sorted(tags or {}), registry=self._registry
            ),
        )
        (metric.labels(**tags) if tags else metric).inc(value)

    def timer(self, name: str, duration_ms: float, tags: Tags | None = None) -> None:
        metric = self._cache.get(
            "timers",
            name,
            lambda: self._client.Histogram(
                prometheus_name(name), f"Duration of {name} in ms", sorted(tags or {}), registry=self._registry
            ),
        )
        (metric.labels(**tags) if tags else metric).observe(duration_ms)

    def get_metrics(self) -> dict[str, Any]:
        """Return registered metric names grouped by kind."""
        return self._cache.names()


class OpenTelemetryRegistry:
    """Adapter that forwards metrics to OpenTelemetry.

    Counters map to OTel counters and timers to histograms recorded in
    milliseconds.

    Raises:
        ImportError: If ``opentelemetry-api`` is not installed.
    """

    def __init__(self, meter_name: str = "api_contract_framework") -> None:
        try:
            from opentelemetry import metrics as otel_metrics
        except ImportError:
            raise ImportError(
                "opentelemetry-api is required for OpenTelemetryRegistry. "
                "Install it with: pip install opentelemetry-api"
            ) from None

        self._meter = otel_metrics.get_meter(meter_name)
        self._cache = _InstrumentCache()

    def counter(self, name: str, value: float = 1.0, tags: Tags | None = None) -> None:
        instrument = self._cache.get("counters", name, lambda: self._meter.create_counter(name))
        instrument.add(value, attributes=dict(tags or {}))

    def timer(self, name: str, duration_ms: float, tags: Tags | None = None) -> None:
        instrument = self._cache.get("timers", name, lambda: self._meter.create_histogram(name, unit="ms"))
        instrument.record(duration_ms, attributes=dict(tags or {}))

    def get_metrics(self) -> dict[str, Any]:
        """Return registered metric names grouped by kind."""
        return self._cache.names()
