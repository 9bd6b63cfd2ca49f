"""Language-model backend interface and shared prompt helpers."""

from abc import ABC, abstractmethod
from dataclasses import dataclass

from ..models import DebtItem

SYSTEM_PROMPT = """You are an expert software architect analyzing technical debt.
Be concise and actionable. Provide analysis in this format:
EXPLANATION: [why it's risky]
SEVERITY: [1-5]
PRIORITY: [HIGH/MEDIUM/LOW]
IMPACT: [business consequences]
FIX: [time estimate]
RECOMMENDATION: [concrete next step]
CONFIDENCE: [0.0-1.0]"""


@dataclass(frozen=True)
class AnalysisResult:
    """One backend assessment of a debt item."""

    explanation: str
    severity: int
    priority: str
    business_impact: str = ""
    fix_estimate: str = ""
    confidence: float = 0.5
    backend: str = ""
    latency_ms: float = 0.0
    cost: float = 0.0
    recommendation: str = ""
    raw_response: str = ""


def build_analysis_prompt(item: DebtItem, context: str) -> str:
    """User prompt for one item, with retrieved context appended."""
    return (
        "Analyze this technical debt:\n\n"
        f"File: {item.file_path} (Line {item.line_number})\n"
        f"Type: {item.type.value}\n"
        f"Comment: {item.message}\n"
        f"Risk: {item.risk:.1f}/100\n\n"
        f"Context:\n{context}\n\n"
        "Provide analysis with explanation, severity, priority, business impact, "
        "and fix estimate."
    )


class AnalysisBackend(ABC):
    """A language model that scores one debt item at a time.

    Implementations are stateless with respect to items; each ``analyze``
    call is independent.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Registry key and the ``backend`` recorded on results."""

    @property
    @abstractmethod
    def cost_per_1k(self) -> float:
        """Price in USD per 1000 tokens."""

    @property
    def max_tokens(self) -> int:
        return 4096

    @abstractmethod
    def is_available(self) -> bool:
        """Whether the backend can take requests right now."""

    @abstractmethod
    async def analyze(self, item: DebtItem, context: str) -> AnalysisResult:
        """Assess ``item`` given retrieved ``context``.

        Raises:
            BackendError: Provider failure.
        """
