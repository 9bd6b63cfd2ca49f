"""End-to-end collection: scan, detect, score, enrich, report."""

import asyncio
from pathlib import Path

from .agent import AgentOrchestrator
from .backends.openai import OpenAIBackend
from .backends.router import BackendRouter
from .collector_logging import LogCategory, get_category_logger
from .config.models import CollectorConfig
from .detector import Detector, calculate_frequency
from .embeddings.registry import create_embedder_from_config
from .exceptions import AnalysisFailedError, FileReadError, NoBackendAvailableError
from .models import DebtItem
from .performance.metrics import (
    ANALYSIS_ERRORS,
    ANALYSIS_LATENCY,
    ITEMS_ANALYZED,
    ITEMS_SCANNED,
    PerformanceMetricsCollector,
)
from .performance.timing import PerformanceTimer
from .rag.similarity import SimilarityIndex
from .reporting import Report
from .scanner import RepositoryScanner
from .scoring import RiskScorer

logger = get_category_logger(LogCategory.PIPELINE)


class DebtPipeline:
    """Runs one collection over a repository.

    Collaborators default to fresh instances built from ``config``. Without
    an orchestrator, enrichment is skipped. An injected ``scanner`` is used
    as is and decides which root gets walked.
    """

    def __init__(
        self,
        config: CollectorConfig,
        scanner: RepositoryScanner | None = None,
        detector: Detector | None = None,
        scorer: RiskScorer | None = None,
        orchestrator: AgentOrchestrator | None = None,
        index: SimilarityIndex | None = None,
    ):
        self.config = config
        self.scanner = scanner
        self.detector = detector or Detector()
        self.scorer = scorer or RiskScorer()
        self.orchestrator = orchestrator
        if index is None and orchestrator is not None:
            index = orchestrator.index
        self.index = index
        self.metrics = PerformanceMetricsCollector()

    def _scanner_for(self, root: str | Path) -> RepositoryScanner:
        if self.scanner is not None:
            return self.scanner
        return RepositoryScanner(
            root,
            exclude_dirs=self.config.exclude_dirs,
            include_extensions=self.config.include_extensions,
            skip_hidden=self.config.skip_hidden,
        )

    def collect(self, root: str | Path) -> tuple[list[DebtItem], list[str]]:
        """Detect, count and score every item under ``root``.

        Unreadable files are reported in the returned error list and skipped.

        Returns:
            Items sorted by descending risk, and per-file error messages.

        Raises:
            RepositoryNotFoundError: ``root`` is not a directory.
        """
        scanner = self._scanner_for(root)
        files = scanner.scan_files()
        logger.info(f"Found {len(files)} source files")

        items: list[DebtItem] = []
        errors: list[str] = []
        for file_path in files:
            try:
                items.extend(
                    self.detector.detect_in_file(
                        file_path, scanner.file_importance(file_path)
                    )
                )
            except FileReadError as e:
                logger.warning(f"Could not scan {file_path}: {e.cause}")
                errors.append(str(e))

        calculate_frequency(items)
        self.scorer.score_all(items)
        self.metrics.increment(ITEMS_SCANNED, len(items))
        logger.info(f"Found {len(items)} debt items")

        return self.scorer.sort_by_risk(items), errors

    async def _index_item(self, item: DebtItem) -> None:
        if self.index is None:
            return
        try:
            await self.index.index(
                item.id, item.file_path, item.line_number, item.message, item.risk
            )
        except Exception as e:
            logger.warning(
                f"Could not index {item.location}: {e}", extra={"item_id": item.id}
            )

    async def _enrich_one(
        self, orchestrator: AgentOrchestrator, item: DebtItem, errors: list[str]
    ) -> None:
        try:
            with self.metrics.measure(ANALYSIS_LATENCY):
                analysis = await orchestrator.analyze(item)
        except AnalysisFailedError as e:
            self.metrics.increment(ANALYSIS_ERRORS)
            logger.error(
                f"Could not enrich {item.location}: {e}", extra={"item_id": item.id}
            )
            errors.append(f"{item.location}: {e}")
        else:
            final = analysis.final_result
            item.llm_explanation = final.explanation
            item.llm_priority = final.priority
            item.llm_recommendation = final.recommendation or None
            self.metrics.increment(ITEMS_ANALYZED)
            logger.debug(f"Enriched {item.location}", extra={"item_id": item.id})

        await self._index_item(item)

    async def enrich(self, items: list[DebtItem]) -> list[str]:
        """Run the agent over the top ``enrich_limit`` items.

        ``items`` must already be sorted by risk. Each processed item is
        indexed afterwards, so later items can retrieve it.

        Returns:
            Per-item error messages for items whose analysis failed.
        """
        orchestrator = self.orchestrator
        if orchestrator is None:
            return []

        targets = items[: self.config.enrich_limit]
        delay = self.config.request_delay_seconds
        errors: list[str] = []
        logger.info(f"Enriching {len(targets)} items with AI analysis")

        if self.config.max_concurrency <= 1:
            for i, item in enumerate(targets):
                await self._enrich_one(orchestrator, item, errors)
                if delay and i < len(targets) - 1:
                    await asyncio.sleep(delay)
            return errors

        semaphore = asyncio.Semaphore(self.config.max_concurrency)

        async def worker(item: DebtItem) -> None:
            async with semaphore:
                await self._enrich_one(orchestrator, item, errors)
                if delay:
                    await asyncio.sleep(delay)

        async with asyncio.TaskGroup() as group:
            for item in targets:
                group.create_task(worker(item))
        return errors

    async def run(self, root: str | Path) -> Report:
        """Collect, optionally enrich, and assemble the report for ``root``.

        Enrichment is skipped without an error when no orchestrator is
        configured. A configured orchestrator whose router has no available
        backend is recorded in ``Report.errors``. Report counters cover this
        run only.
        """
        baseline = self.metrics.get_counters()
        with PerformanceTimer("collect") as timer:
            items, errors = self.collect(root)
        stats = self.scorer.stats(items)
        logger.info(
            f"Risk distribution: critical={stats.critical} high={stats.high} "
            f"medium={stats.medium} low={stats.low}",
            extra={"duration_ms": timer.duration_ms},
        )

        if not self.config.enable_llm:
            logger.info("AI enrichment disabled")
        elif self.orchestrator is None:
            logger.info("No AI backend configured, skipping enrichment")
        elif self.orchestrator.router.route() is None:
            error = NoBackendAvailableError()
            logger.warning(f"Skipping enrichment: {error}")
            errors.append(str(error))
        else:
            errors.extend(await self.enrich(items))

        if self.index is not None:
            logger.debug(f"Embedder: {self.index.embedder.get_model_info()}")

        return Report.from_items(
            items,
            root,
            stats,
            errors=errors,
            metrics=self.metrics.export(baseline_counters=baseline),
        )


def build_pipeline_from_config(config: CollectorConfig) -> DebtPipeline:
    """Wire the default components for ``config``.

    An OpenAI backend is registered only when an API key is configured. The
    OpenAI embedder needs the same key; without one the local hashing
    embedder is used instead.
    """
    if config.embedding_provider == "openai" and not config.has_openai_key:
        logger.info("No OpenAI API key, using local hashing embeddings")
        config = config.model_copy(update={"embedding_provider": "hashing"})

    index = SimilarityIndex(create_embedder_from_config(config))

    orchestrator = None
    if config.enable_llm and config.has_openai_key:
        backend = OpenAIBackend(api_key=config.openai_api_key, model=config.chat_model)
        router = BackendRouter(primary=backend.name)
        router.register(backend)
        orchestrator = AgentOrchestrator(
            router, index=index, confidence_threshold=config.confidence_threshold
        )

    return DebtPipeline(config, orchestrator=orchestrator, index=index)
