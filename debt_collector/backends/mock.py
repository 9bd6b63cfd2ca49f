"""Scripted backend for tests and offline runs."""

from collections.abc import Iterable

from ..models import DebtItem
from .base import AnalysisBackend, AnalysisResult
from .parsing import parse_analysis_response

DEFAULT_RESPONSE = """EXPLANATION: Marker left in code without follow-up.
SEVERITY: 3
PRIORITY: MEDIUM
IMPACT: Slows future changes to this area.
FIX: 1-2 hours
RECOMMENDATION: Schedule the cleanup in the next sprint."""


class MockBackend(AnalysisBackend):
    """Replays a script of responses.

    Each script entry is consumed by one ``analyze`` call: a string is parsed
    like a model response, an ``AnalysisResult`` is returned as is, and an
    exception instance is raised. When the script runs out the default
    response is used.
    """

    def __init__(
        self,
        name: str = "mock",
        script: Iterable[str | AnalysisResult | BaseException] = (),
        available: bool = True,
        cost_per_1k: float = 0.0,
    ):
        self._name = name
        self._script = list(script)
        self._cost_per_1k = cost_per_1k
        self.available = available
        self.calls: list[tuple[DebtItem, str]] = []

    @property
    def name(self) -> str:
        return self._name

    @property
    def cost_per_1k(self) -> float:
        return self._cost_per_1k

    def is_available(self) -> bool:
        return self.available

    async def analyze(self, item: DebtItem, context: str) -> AnalysisResult:
        self.calls.append((item, context))
        entry = self._script.pop(0) if self._script else DEFAULT_RESPONSE

        if isinstance(entry, BaseException):
            raise entry
        if isinstance(entry, AnalysisResult):
            return entry
        return parse_analysis_response(entry, item, backend=self.name)
