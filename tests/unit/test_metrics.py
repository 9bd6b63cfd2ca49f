"""Unit tests for metrics collection and timing helpers."""

import asyncio
import time
from unittest.mock import patch

import pytest

from debt_collector.performance.metrics import (
    PerformanceMetricsCollector,
    get_collector,
)
from debt_collector.performance.timing import PerformanceTimer, timed


class TestPerformanceMetricsCollector:
    """Tests for the metrics singleton."""

    def test_singleton(self):
        assert PerformanceMetricsCollector() is PerformanceMetricsCollector()
        assert get_collector() is PerformanceMetricsCollector()

    def test_record_and_stats(self):
        collector = PerformanceMetricsCollector()
        for value in (10.0, 20.0, 30.0, 40.0, 50.0):
            collector.record("op", value)

        stats = collector.get_stats("op")

        assert stats["count"] == 5
        assert stats["avg_ms"] == pytest.approx(30.0)
        assert stats["min_ms"] == 10.0
        assert stats["max_ms"] == 50.0
        assert stats["p50_ms"] == pytest.approx(30.0)
        assert stats["p95_ms"] == pytest.approx(48.0)

    def test_single_sample_percentiles(self):
        collector = PerformanceMetricsCollector()
        collector.record("op", 7.0)

        stats = collector.get_stats("op")

        assert stats["p50_ms"] == stats["p99_ms"] == 7.0

    def test_unknown_operation(self):
        assert PerformanceMetricsCollector().get_stats("missing") == {}

    def test_samples_outside_window_are_ignored(self):
        collector = PerformanceMetricsCollector()
        collector.record("op", 5.0)

        with patch(
            "debt_collector.performance.metrics.time.time",
            return_value=time.time() + 3600,
        ):
            assert collector.get_stats("op") == {}

    def test_counters(self):
        collector = PerformanceMetricsCollector()
        collector.increment("items")
        collector.increment("items", 2)
        collector.increment("cost", 0.5)

        assert collector.get_counter("items") == 3
        assert collector.get_counter("missing") == 0
        assert collector.get_counters() == {"items": 3, "cost": 0.5}

    def test_measure(self):
        collector = PerformanceMetricsCollector()

        with collector.measure("block"):
            pass

        assert collector.get_stats("block")["count"] == 1

    def test_measure_records_on_error(self):
        collector = PerformanceMetricsCollector()

        with pytest.raises(RuntimeError):
            with collector.measure("block"):
                raise RuntimeError("boom")

        assert collector.get_stats("block")["count"] == 1

    def test_clear_one_operation(self):
        collector = PerformanceMetricsCollector()
        collector.record("a", 1.0)
        collector.record("b", 1.0)

        collector.clear("a")

        assert set(collector.get_all_stats()) == {"b"}

    def test_export(self):
        collector = PerformanceMetricsCollector()
        collector.record("op", 1.0)
        collector.increment("n")

        exported = collector.export()

        assert exported["counters"] == {"n": 1}
        assert exported["latencies"]["op"]["count"] == 1
        assert "timestamp" in exported

    def test_export_since_baseline(self):
        collector = PerformanceMetricsCollector()
        collector.increment("scanned", 4)
        collector.increment("unchanged")
        baseline = collector.get_counters()

        collector.increment("scanned", 4)
        collector.increment("analyzed", 2)

        assert collector.export(baseline_counters=baseline)["counters"] == {
            "scanned": 4,
            "analyzed": 2,
        }


class TestTimed:
    """Tests for the @timed decorator."""

    def test_sync_function(self):
        @timed("sync_op")
        def add(a, b):
            return a + b

        assert add(1, 2) == 3
        assert PerformanceMetricsCollector().get_stats("sync_op")["count"] == 1

    def test_defaults_to_function_name(self):
        @timed()
        def named():
            return None

        named()

        assert "named" in PerformanceMetricsCollector().get_all_stats()
        assert named.__name__ == "named"

    @pytest.mark.asyncio
    async def test_async_function_covers_awaited_work(self):
        @timed("async_op")
        async def slow():
            await asyncio.sleep(0.01)
            return "done"

        assert await slow() == "done"
        assert PerformanceMetricsCollector().get_stats("async_op")["min_ms"] >= 5

    def test_errors_are_recorded_and_reraised(self):
        @timed("failing")
        def fail():
            raise ValueError("bad")

        with pytest.raises(ValueError):
            fail()

        assert PerformanceMetricsCollector().get_stats("failing")["count"] == 1

    def test_record_metric_disabled(self):
        @timed("quiet", record_metric=False)
        def noop():
            return None

        noop()

        assert PerformanceMetricsCollector().get_stats("quiet") == {}


class TestPerformanceTimer:
    def test_duration(self):
        with PerformanceTimer("block") as timer:
            time.sleep(0.005)

        assert timer.duration_ms >= 4

    def test_exception_propagates(self):
        with pytest.raises(KeyError):
            with PerformanceTimer("block", auto_log=False):
                raise KeyError("x")
