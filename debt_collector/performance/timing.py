"""Timing helpers for pipeline stages.

- ``@timed`` decorator for sync and async functions
- ``PerformanceTimer`` context manager for code blocks
"""

import functools
import inspect
import time
from collections.abc import Callable
from typing import Any, ParamSpec, TypeVar

from ..collector_logging import get_logger
from .metrics import PerformanceMetricsCollector

P = ParamSpec("P")
T = TypeVar("T")


def _log_duration(op_name: str, duration_ms: float, error: Exception | None) -> None:
    logger = get_logger()
    extra = {"duration_ms": duration_ms, "operation": op_name}
    if error is None:
        logger.debug(f"[PERF] {op_name} completed in {duration_ms:.2f}ms", extra=extra)
    else:
        logger.error(
            f"[PERF] {op_name} failed after {duration_ms:.2f}ms: {error}", extra=extra
        )


def timed(
    operation_name: str | None = None, record_metric: bool = True
) -> Callable[[Callable[P, T]], Callable[P, T]]:
    """Decorator to time a function and log the duration at DEBUG level.

    Coroutine functions are wrapped with an async wrapper so the measured
    time covers the awaited work. When ``record_metric`` is set the duration
    is also fed into the metrics collector under the operation name.

    Example:
        >>> @timed("llm_call")
        ... async def analyze(item, context):
        ...     ...
    """

    def decorator(func: Callable[P, T]) -> Callable[P, T]:
        op_name = operation_name or func.__name__

        def finish(start: float, error: Exception | None) -> None:
            duration_ms = (time.perf_counter() - start) * 1000
            _log_duration(op_name, duration_ms, error)
            if record_metric:
                PerformanceMetricsCollector().record(op_name, duration_ms)

        if inspect.iscoroutinefunction(func):

            @functools.wraps(func)
            async def async_wrapper(*args: P.args, **kwargs: P.kwargs) -> Any:
                start = time.perf_counter()
                try:
                    result = await func(*args, **kwargs)
                except Exception as e:
                    finish(start, e)
                    raise
                finish(start, None)
                return result

            return async_wrapper  # type: ignore[return-value]

        @functools.wraps(func)
        def wrapper(*args: P.args, **kwargs: P.kwargs) -> T:
            start = time.perf_counter()
            try:
                result = func(*args, **kwargs)
            except Exception as e:
                finish(start, e)
                raise
            finish(start, None)
            return result

        return wrapper

    return decorator


class PerformanceTimer:
    """Context manager for timing code blocks.

    The duration is available as ``duration_ms`` after the block exits.

    Example:
        >>> with PerformanceTimer("collect") as timer:
        ...     items, errors = pipeline.collect(root)
        >>> timer.duration_ms
    """

    def __init__(self, operation_name: str, auto_log: bool = True):
        self.operation_name = operation_name
        self.auto_log = auto_log
        self.start_time: float = 0
        self.duration_ms: float = 0

    def __enter__(self) -> "PerformanceTimer":
        self.start_time = time.perf_counter()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: Any,
    ) -> None:
        self.duration_ms = (time.perf_counter() - self.start_time) * 1000
        if self.auto_log:
            error = exc_val if isinstance(exc_val, Exception) else None
            if exc_type is not None and error is None:
                # Cancellation or interpreter exit: not a failure of the block
                return
            _log_duration(self.operation_name, self.duration_ms, error)


__all__ = ["timed", "PerformanceTimer"]
