"""Multi-step, retrieval-augmented analysis of a single debt item.

Each item goes through four steps in order:

1. ``rag_search``: look up similar, previously indexed items
2. ``llm_analysis``: initial assessment with the retrieved context
3. ``confidence_check``: record whether the assessment clears the threshold
4. ``finalize``: ask for a refined assessment, falling back to the initial one

Only the initial assessment is fatal. Retrieval and finalize failures are
logged and absorbed. ``asyncio.CancelledError`` is never absorbed.
"""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum

from .backends.base import AnalysisResult
from .backends.router import BackendRouter
from .collector_logging import LogCategory, get_category_logger
from .exceptions import AnalysisFailedError
from .models import DebtItem
from .rag.similarity import SimilarItem, SimilarityIndex

logger = get_category_logger(LogCategory.AGENT)

FINALIZE_SUFFIX = "\n\nProvide final refined assessment."


class AgentAction(Enum):
    RAG_SEARCH = "rag_search"
    LLM_ANALYSIS = "llm_analysis"
    CONFIDENCE_CHECK = "confidence_check"
    FINALIZE = "finalize"


@dataclass(frozen=True)
class AgentStep:
    """Audit record for one step of the analysis."""

    step_number: int
    action: AgentAction
    reasoning: str
    result: str
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))


@dataclass
class AgentAnalysis:
    item: DebtItem
    steps: list[AgentStep]
    initial_result: AnalysisResult
    final_result: AnalysisResult
    final_confidence: float


def build_context(similar: list[SimilarItem]) -> str:
    """Render search hits as the context block passed to the model."""
    if not similar:
        return ""

    lines = ["Similar debt items in codebase:"]
    for i, hit in enumerate(similar, start=1):
        lines.append(f"{i}. [{hit.file}:{hit.line}] Risk: {hit.risk:.1f}")
    return "\n".join(lines) + "\n"


class AgentOrchestrator:
    """Runs the four-step analysis for one item at a time.

    The orchestrator holds no per-item state, so one instance can analyze
    several items concurrently.
    """

    def __init__(
        self,
        router: BackendRouter,
        index: SimilarityIndex | None = None,
        confidence_threshold: float = 0.8,
        top_k: int = 3,
    ):
        self.router = router
        self.index = index
        self.confidence_threshold = confidence_threshold
        self.top_k = top_k

    async def _retrieve_context(self, item: DebtItem) -> str:
        if self.index is None:
            return ""
        try:
            similar = await self.index.search(item.message, self.top_k)
        except Exception as e:
            logger.warning(
                f"RAG search failed for {item.location} (continuing): {e}",
                extra={"item_id": item.id, "step": 1},
            )
            return ""
        return build_context(similar)

    async def analyze(self, item: DebtItem) -> AgentAnalysis:
        """Run all four steps for ``item``.

        Raises:
            AnalysisFailedError: The initial assessment failed; chained from
                the backend or routing error.
        """
        logger.info(f"Analyzing {item.location}", extra={"item_id": item.id})
        steps: list[AgentStep] = []

        logger.debug("Step 1: searching for similar patterns", extra={"step": 1})
        context = await self._retrieve_context(item)
        steps.append(
            AgentStep(
                step_number=1,
                action=AgentAction.RAG_SEARCH,
                reasoning="Find similar debt patterns",
                result=f"Context prepared: {len(context)} chars",
            )
        )

        logger.debug("Step 2: initial analysis", extra={"step": 2})
        try:
            initial = await self.router.analyze(item, context)
        except Exception as e:
            raise AnalysisFailedError(e, item_id=item.id) from e
        steps.append(
            AgentStep(
                step_number=2,
                action=AgentAction.LLM_ANALYSIS,
                reasoning="Generate initial assessment",
                result=(
                    f"Backend: {initial.backend}, "
                    f"latency: {initial.latency_ms:.0f}ms"
                ),
            )
        )

        # Recorded for the audit trail only; finalize always runs
        logger.debug(
            f"Step 3: confidence check ({initial.confidence:.2f})", extra={"step": 3}
        )
        if initial.confidence < self.confidence_threshold:
            reasoning = (
                f"Confidence {initial.confidence:.2f} < "
                f"{self.confidence_threshold:.2f}, needs refinement"
            )
            outcome = "Proceeding to refinement"
        else:
            reasoning = f"Confidence: {initial.confidence:.2f}"
            outcome = "Confidence acceptable, proceeding"
        steps.append(
            AgentStep(
                step_number=3,
                action=AgentAction.CONFIDENCE_CHECK,
                reasoning=reasoning,
                result=outcome,
            )
        )

        logger.debug("Step 4: finalizing", extra={"step": 4})
        try:
            final = await self.router.analyze(item, context + FINALIZE_SUFFIX)
        except Exception as e:
            logger.warning(
                f"Final assessment failed for {item.location}, keeping initial: {e}",
                extra={"item_id": item.id, "step": 4},
            )
            final = initial
        steps.append(
            AgentStep(
                step_number=4,
                action=AgentAction.FINALIZE,
                reasoning="Generate final assessment",
                result=(
                    f"Final severity: {final.severity}, "
                    f"confidence: {final.confidence:.2f}"
                ),
            )
        )

        return AgentAnalysis(
            item=item,
            steps=steps,
            initial_result=initial,
            final_result=final,
            final_confidence=final.confidence,
        )
