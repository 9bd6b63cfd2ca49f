"""Pipeline metrics: windowed latencies with percentiles, plus counters.

Example usage:
    collector = PerformanceMetricsCollector()

    collector.record("vector_search", 12.4)
    collector.increment("items_analyzed")
    collector.increment("llm_cost_usd", 0.0021)

    with collector.measure("analysis"):
        await orchestrator.analyze(item)

    collector.get_stats("vector_search")["p95_ms"]
"""

import time
from collections import deque
from collections.abc import Generator
from contextlib import contextmanager
from dataclasses import dataclass, field
from threading import Lock
from typing import Any

# Counter names recorded by the pipeline
ITEMS_SCANNED = "items_scanned"
ITEMS_ANALYZED = "items_analyzed"
ANALYSIS_ERRORS = "analysis_errors"
LLM_REQUESTS = "llm_requests"
LLM_COST_USD = "llm_cost_usd"
VECTORS_INDEXED = "vectors_indexed"
VECTOR_SEARCHES = "vector_searches"

# Latency names
ANALYSIS_LATENCY = "analysis"
VECTOR_SEARCH_LATENCY = "vector_search"
LLM_CALL_LATENCY = "llm_call"


@dataclass
class MetricWindow:
    """Timestamped samples; only those inside ``window_seconds`` count."""

    values: deque = field(default_factory=lambda: deque(maxlen=1000))
    window_seconds: int = 300

    def add(self, value: float) -> None:
        self.values.append((time.time(), value))

    def get_values_in_window(self) -> list[float]:
        now = time.time()
        return [v for t, v in self.values if now - t < self.window_seconds]


class PerformanceMetricsCollector:
    """Process-wide, thread-safe metrics singleton.

    All instances share the same data. Latencies are kept per operation in a
    ``MetricWindow``; counters are plain running totals.
    """

    _instance = None
    _lock = Lock()

    def __new__(cls) -> "PerformanceMetricsCollector":
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    instance = super().__new__(cls)
                    instance._metrics: dict[str, MetricWindow] = {}
                    instance._counters: dict[str, float] = {}
                    instance._metrics_lock = Lock()
                    cls._instance = instance
        return cls._instance

    def record(self, operation: str, duration_ms: float) -> None:
        with self._metrics_lock:
            if operation not in self._metrics:
                self._metrics[operation] = MetricWindow()
            self._metrics[operation].add(duration_ms)

    @contextmanager
    def measure(self, operation: str) -> Generator[None, None, None]:
        """Record the duration of the enclosed block, even when it raises."""
        start = time.perf_counter()
        try:
            yield
        finally:
            self.record(operation, (time.perf_counter() - start) * 1000)

    def increment(self, counter: str, amount: float = 1) -> None:
        with self._metrics_lock:
            self._counters[counter] = self._counters.get(counter, 0) + amount

    def get_counter(self, counter: str) -> float:
        with self._metrics_lock:
            return self._counters.get(counter, 0)

    def get_counters(self) -> dict[str, float]:
        with self._metrics_lock:
            return dict(self._counters)

    def get_stats(self, operation: str) -> dict[str, float]:
        """Count, average, min, max and p50/p95/p99 for one operation.

        Returns an empty dict when nothing was recorded inside the window.
        """
        with self._metrics_lock:
            window = self._metrics.get(operation)
            values = window.get_values_in_window() if window else []

        if not values:
            return {}

        sorted_values = sorted(values)
        n = len(sorted_values)
        return {
            "count": n,
            "avg_ms": sum(values) / n,
            "min_ms": sorted_values[0],
            "max_ms": sorted_values[-1],
            "p50_ms": self._percentile(sorted_values, 50),
            "p95_ms": self._percentile(sorted_values, 95),
            "p99_ms": self._percentile(sorted_values, 99),
        }

    def get_all_stats(self) -> dict[str, dict[str, float]]:
        with self._metrics_lock:
            operations = list(self._metrics.keys())
        return {op: self.get_stats(op) for op in operations}

    def clear(self, operation: str | None = None) -> None:
        """Drop latencies for one operation, or everything (counters too)."""
        with self._metrics_lock:
            if operation is None:
                self._metrics.clear()
                self._counters.clear()
            else:
                self._metrics.pop(operation, None)
                self._counters.pop(operation, None)

    def export(
        self, baseline_counters: dict[str, float] | None = None
    ) -> dict[str, Any]:
        """Snapshot of counters and latency stats.

        With ``baseline_counters`` (an earlier ``get_counters()`` result),
        counters are reported as the change since that snapshot; counters
        that did not change are omitted.
        """
        counters = self.get_counters()
        if baseline_counters is not None:
            counters = {
                name: value - baseline_counters.get(name, 0)
                for name, value in counters.items()
                if value != baseline_counters.get(name, 0)
            }
        return {
            "timestamp": time.time(),
            "counters": counters,
            "latencies": self.get_all_stats(),
        }

    @staticmethod
    def _percentile(sorted_values: list[float], percentile: int) -> float:
        if not sorted_values:
            return 0.0

        n = len(sorted_values)
        if n == 1:
            return sorted_values[0]

        # Linear interpolation between closest ranks
        k = (percentile / 100) * (n - 1)
        f = int(k)
        c = f + 1 if f + 1 < n else f
        if f == c:
            return sorted_values[f]
        return sorted_values[f] + (k - f) * (sorted_values[c] - sorted_values[f])


def get_collector() -> PerformanceMetricsCollector:
    return PerformanceMetricsCollector()


__all__ = [
    "MetricWindow",
    "PerformanceMetricsCollector",
    "get_collector",
    "ITEMS_SCANNED",
    "ITEMS_ANALYZED",
    "ANALYSIS_ERRORS",
    "LLM_REQUESTS",
    "LLM_COST_USD",
    "VECTORS_INDEXED",
    "VECTOR_SEARCHES",
    "ANALYSIS_LATENCY",
    "VECTOR_SEARCH_LATENCY",
    "LLM_CALL_LATENCY",
]
