"""Performance measurement for the debt collection pipeline.

- **timing**: ``@timed`` decorator and ``PerformanceTimer`` context manager
- **metrics**: ``PerformanceMetricsCollector`` singleton with latency
  percentiles and counters

Example usage:

    from debt_collector.performance import PerformanceTimer, get_collector

    with PerformanceTimer("collect") as timer:
        items, errors = pipeline.collect(root)

    get_collector().increment("items_scanned", len(items))
"""

from .metrics import MetricWindow, PerformanceMetricsCollector, get_collector
from .timing import PerformanceTimer, timed

__all__ = [
    "timed",
    "PerformanceTimer",
    "MetricWindow",
    "PerformanceMetricsCollector",
    "get_collector",
]
