"""Unit tests for backend routing."""

import pytest

from debt_collector.backends.base import AnalysisResult
from debt_collector.backends.mock import MockBackend
from debt_collector.backends.router import BackendRouter
from debt_collector.exceptions import BackendError, NoBackendAvailableError
from debt_collector.performance.metrics import (
    LLM_CALL_LATENCY,
    LLM_COST_USD,
    LLM_REQUESTS,
    PerformanceMetricsCollector,
)


@pytest.fixture
def router():
    router = BackendRouter(primary="primary", fallbacks=["backup"])
    router.register(MockBackend(name="primary"))
    router.register(MockBackend(name="backup"))
    return router


class TestRoute:
    """Tests for backend selection."""

    def test_primary_when_available(self, router):
        assert router.route().name == "primary"

    def test_fallback_when_primary_unavailable(self, router):
        router.backends["primary"].available = False
        assert router.route().name == "backup"

    def test_none_when_nothing_available(self, router):
        for backend in router.backends.values():
            backend.available = False
        assert router.route() is None

    def test_unregistered_names_are_skipped(self):
        router = BackendRouter(primary="missing", fallbacks=["also-missing", "ok"])
        router.register(MockBackend(name="ok"))

        assert router.route().name == "ok"

    def test_add_fallback(self):
        router = BackendRouter(primary="missing")
        router.register(MockBackend(name="late"))
        assert router.route() is None

        router.add_fallback("late")

        assert router.route().name == "late"


class TestAnalyze:
    """Tests for BackendRouter.analyze."""

    @pytest.mark.asyncio
    async def test_delegates_and_records_metrics(self, make_item):
        backend = MockBackend(
            name="paid",
            script=[
                AnalysisResult(explanation="e", severity=2, priority="LOW", cost=0.25)
            ],
        )
        router = BackendRouter(primary="paid")
        router.register(backend)

        result = await router.analyze(make_item(), "ctx")

        assert result.explanation == "e"
        assert backend.calls[0][1] == "ctx"
        metrics = PerformanceMetricsCollector()
        assert metrics.get_counter(LLM_REQUESTS) == 1
        assert metrics.get_counter(LLM_COST_USD) == pytest.approx(0.25)
        assert metrics.get_stats(LLM_CALL_LATENCY)["count"] == 1

    @pytest.mark.asyncio
    async def test_no_backend(self, make_item):
        router = BackendRouter(primary="missing")

        with pytest.raises(NoBackendAvailableError, match="no AI backend available"):
            await router.analyze(make_item(), "")

        assert PerformanceMetricsCollector().get_counter(LLM_REQUESTS) == 0

    @pytest.mark.asyncio
    async def test_backend_error_propagates(self, mock_router, make_item):
        router, _ = mock_router(BackendError("quota exceeded"))

        with pytest.raises(BackendError, match="quota exceeded"):
            await router.analyze(make_item(), "")
