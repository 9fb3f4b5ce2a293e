"""Meter registry protocol and in-memory implementation.

Verification hooks record two kinds of measurement: counters (exchanges,
failures, violations by type) and durations. Backends implement
:class:`MeterRegistry`; :class:`InMemoryRegistry` keeps everything in
process and is the default when no exporter is configured.
"""

from __future__ import annotations

import threading
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable

Tags = Mapping[str, str]
_SeriesKey = tuple[str, tuple[tuple[str, str], ...]]


@runtime_checkable
class MeterRegistry(Protocol):
    """Protocol for recording verification metrics.

    All methods must be safe to call from multiple threads.
    """

    def counter(self, name: str, value: float = 1.0, tags: Tags | None = None) -> None:
        """Increment a counter.

        Args:
            name: Dotted metric name (e.g. ``"acf.violations"``).
            value: Amount to increment by.
            tags: Optional labels.
        """
        ...

    def timer(self, name: str, duration_ms: float, tags: Tags | None = None) -> None:
        """Record one duration in milliseconds."""
        ...

    def get_metrics(self) -> dict[str, Any]:
        """Return a snapshot of what has been recorded."""
        ...


def _series_key(name: str, tags: Tags | None) -> _SeriesKey:
    return name, tuple(sorted((tags or {}).items()))


def _render_tags(labels: tuple[tuple[str, str], ...]) -> str:
    return ",".join(f"{k}={v}" for k, v in labels)


@dataclass
class TimerStats:
    """Aggregated durations of one timer series."""

    count: int = 0
    total_ms: float = 0.0
    min_ms: float = 0.0
    max_ms: float = 0.0

    def observe(self, duration_ms: float) -> None:
        if self.count == 0:
            self.min_ms = self.max_ms = duration_ms
        else:
            self.min_ms = min(self.min_ms, duration_ms)
            self.max_ms = max(self.max_ms, duration_ms)
        self.count += 1
        self.total_ms += duration_ms

    @property
    def mean_ms(self) -> float:
        return self.total_ms / self.count if self.count else 0.0


class InMemoryRegistry:
    """Thread-safe in-memory registry.

    Series are identified by name plus sorted tags, so
    ``{"type": "a", "x": "1"}`` and ``{"x": "1", "type": "a"}`` share a
    bucket.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._counters: dict[_SeriesKey, float] = {}
        self._timers: dict[_SeriesKey, TimerStats] = {}

    def counter(self, name: str, value: float = 1.0, tags: Tags | None = None) -> None:
        key = _series_key(name, tags)
        with self._lock:
            self._counters[key] = self._counters.get(key, 0.0) + value

    def timer(self, name: str, duration_ms: float, tags: Tags | None = None) -> None:
        key = _series_key(name, tags)
        with self._lock:
            self._timers.setdefault(key, TimerStats()).observe(duration_ms)

    def get_metrics(self) -> dict[str, Any]:
        """Return a snapshot of all recorded metrics.

        Returns:
            ``{"counters": {name: {tags: value}}, "timers": {name: {tags:
            {"count", "total_ms", "min_ms", "max_ms"}}}}`` where ``tags`` is
            rendered as ``"k=v,k2=v2"`` (empty string when untagged).
        """
        counters: dict[str, dict[str, float]] = {}
        timers: dict[str, dict[str, dict[str, float]]] = {}
        with self._lock:
            for (name, labels), value in self._counters.items():
                counters.setdefault(name, {})[_render_tags(labels)] = value
            for (name, labels), stats in self._timers.items():
                timers.setdefault(name, {})[_render_tags(labels)] = {
                    "count": stats.count,
                    "total_ms": stats.total_ms,
                    "min_ms": stats.min_ms,
                    "max_ms": stats.max_ms,
                }
        return {"counters": counters, "timers": timers}

    def get_counter(self, name: str, tags: Tags | None = None) -> float:
        """Current value of one counter series, or ``0.0``."""
        with self._lock:
            return self._counters.get(_series_key(name, tags), 0.0)

    def counter_total(self, name: str) -> float:
        """Sum of a counter across all of its tag combinations."""
        with self._lock:
            return sum(value for (series, _), value in self._counters.items() if series == name)

    def get_timer(self, name: str, tags: Tags | None = None) -> TimerStats:
        """Copy of one timer series; empty stats if never recorded."""
        with self._lock:
            stats = self._timers.get(_series_key(name, tags))
            return TimerStats(stats.count, stats.total_ms, stats.min_ms, stats.max_ms) if stats else TimerStats()

    def reset(self) -> None:
        """Clear all recorded metrics."""
        with self._lock:
            self._counters.clear()
            self._timers.clear()
