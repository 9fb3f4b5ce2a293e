"""Tests for the meter registry protocol and in-memory implementation."""

from __future__ import annotations

import pytest

from api_contract_framework.core.config import MetricsBackend, MetricsConfig
from api_contract_framework.core.metrics import InMemoryRegistry, MeterRegistry, TimerStats, create_registry


class TestInMemoryRegistry:
    def test_implements_protocol(self) -> None:
        assert isinstance(InMemoryRegistry(), MeterRegistry)

    def test_counter_accumulates(self) -> None:
        reg = InMemoryRegistry()
        reg.counter("acf.exchanges")
        reg.counter("acf.exchanges", value=2.0)
        assert reg.get_counter("acf.exchanges") == 3.0

    def test_counter_series_keyed_by_sorted_tags(self) -> None:
        reg = InMemoryRegistry()
        reg.counter("acf.violations", tags={"type": "MissingRequired", "endpoint": "GET /a"})
        reg.counter("acf.violations", tags={"endpoint": "GET /a", "type": "MissingRequired"})
        reg.counter("acf.violations", tags={"type": "InvalidType", "endpoint": "GET /a"})
        assert reg.get_counter("acf.violations", {"endpoint": "GET /a", "type": "MissingRequired"}) == 2.0
        assert reg.counter_total("acf.violations") == 3.0

    def test_unknown_counter_is_zero(self) -> None:
        assert InMemoryRegistry().get_counter("missing") == 0.0

    def test_timer_stats(self) -> None:
        reg = InMemoryRegistry()
        for duration in (30.0, 10.0, 20.0):
            reg.timer("acf.exchange.duration", duration)
        stats = reg.get_timer("acf.exchange.duration")
        assert (stats.count, stats.total_ms, stats.min_ms, stats.max_ms) == (3, 60.0, 10.0, 30.0)
        assert stats.mean_ms == 20.0

    def test_get_timer_returns_copy(self) -> None:
        reg = InMemoryRegistry()
        reg.timer("t", 1.0)
        reg.get_timer("t").observe(100.0)
        assert reg.get_timer("t").count == 1

    def test_unknown_timer_is_empty(self) -> None:
        assert InMemoryRegistry().get_timer("missing") == TimerStats()

    def test_get_metrics_snapshot(self) -> None:
        reg = InMemoryRegistry()
        reg.counter("acf.exchanges")
        reg.counter("acf.violations", tags={"type": "Timeout", "endpoint": "GET /a"})
        reg.timer("acf.exchange.duration", 5.0)
        assert reg.get_metrics() == {
            "counters": {
                "acf.exchanges": {"": 1.0},
                "acf.violations": {"endpoint=GET /a,type=Timeout": 1.0},
            },
            "timers": {
                "acf.exchange.duration": {"": {"count": 1, "total_ms": 5.0, "min_ms": 5.0, "max_ms": 5.0}},
            },
        }

    def test_reset(self) -> None:
        reg = InMemoryRegistry()
        reg.counter("c")
        reg.timer("t", 1.0)
        reg.reset()
        assert reg.get_metrics() == {"counters": {}, "timers": {}}


class TestTimerStats:
    def test_empty_mean(self) -> None:
        assert TimerStats().mean_ms == 0.0


class TestCreateRegistry:
    def test_in_memory_default(self) -> None:
        assert isinstance(create_registry(MetricsConfig()), InMemoryRegistry)

    def test_raw_backend_value(self) -> None:
        config = MetricsConfig(backend="in_memory")  # type: ignore[arg-type]
        assert isinstance(create_registry(config), InMemoryRegistry)

    def test_prometheus(self) -> None:
        pytest.importorskip("prometheus_client")
        from api_contract_framework.core.metrics import PrometheusRegistry

        assert isinstance(create_registry(MetricsConfig(backend=MetricsBackend.PROMETHEUS)), PrometheusRegistry)
