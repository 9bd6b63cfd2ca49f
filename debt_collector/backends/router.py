"""Primary-then-fallback backend selection."""

from collections.abc import Iterable

from ..collector_logging import LogCategory, get_category_logger
from ..exceptions import NoBackendAvailableError
from ..models import DebtItem
from ..performance.metrics import (
    LLM_CALL_LATENCY,
    LLM_COST_USD,
    LLM_REQUESTS,
    PerformanceMetricsCollector,
)
from .base import AnalysisBackend, AnalysisResult

logger = get_category_logger(LogCategory.BACKEND)


class BackendRouter:
    """Routes each request to the primary backend or the first available fallback.

    Backends are registered by ``name``; ``primary`` and ``fallbacks`` refer
    to those names and may be set before the backends are registered.
    """

    def __init__(self, primary: str, fallbacks: Iterable[str] = ()):
        self.primary = primary
        self.fallbacks: list[str] = list(fallbacks)
        self.backends: dict[str, AnalysisBackend] = {}
        self._metrics = PerformanceMetricsCollector()

    def register(self, backend: AnalysisBackend) -> None:
        self.backends[backend.name] = backend

    def add_fallback(self, name: str) -> None:
        self.fallbacks.append(name)

    def route(self) -> AnalysisBackend | None:
        primary = self.backends.get(self.primary)
        if primary is not None and primary.is_available():
            return primary

        for name in self.fallbacks:
            backend = self.backends.get(name)
            if backend is not None and backend.is_available():
                logger.debug(
                    f"Primary backend {self.primary} unavailable, using {name}"
                )
                return backend

        return None

    async def analyze(self, item: DebtItem, context: str) -> AnalysisResult:
        """Delegate to the routed backend.

        Backend errors propagate unchanged.

        Raises:
            NoBackendAvailableError: Neither the primary nor any fallback is
                registered and available.
        """
        backend = self.route()
        if backend is None:
            raise NoBackendAvailableError()

        self._metrics.increment(LLM_REQUESTS)
        with self._metrics.measure(LLM_CALL_LATENCY):
            result = await backend.analyze(item, context)

        self._metrics.increment(LLM_COST_USD, result.cost)
        return result
