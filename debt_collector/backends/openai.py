"""Hosted OpenAI chat-completion backend."""

import time

import openai

from ..collector_logging import LogCategory, get_category_logger
from ..exceptions import BackendError
from ..models import DebtItem
from .base import SYSTEM_PROMPT, AnalysisBackend, AnalysisResult, build_analysis_prompt
from .parsing import parse_analysis_response

logger = get_category_logger(LogCategory.BACKEND)


class OpenAIBackend(AnalysisBackend):
    """Chat completions through ``openai.AsyncOpenAI``."""

    # USD per 1K tokens
    MODEL_COSTS = {
        "gpt-3.5-turbo": 0.002,
        "gpt-4o-mini": 0.0006,
        "gpt-4o": 0.01,
        "gpt-4": 0.03,
    }
    DEFAULT_COST_PER_1K = 0.03

    def __init__(
        self,
        api_key: str,
        model: str = "gpt-3.5-turbo",
        timeout: float = 60.0,
        temperature: float = 0.7,
        max_completion_tokens: int = 2000,
        client: openai.AsyncOpenAI | None = None,
    ):
        if not api_key and client is None:
            raise ValueError("Valid OpenAI API key required")

        self.model = model
        self.temperature = temperature
        self.max_completion_tokens = max_completion_tokens
        self.client = client or openai.AsyncOpenAI(api_key=api_key, timeout=timeout)

    @property
    def name(self) -> str:
        return f"openai-{self.model}"

    @property
    def cost_per_1k(self) -> float:
        return self.MODEL_COSTS.get(self.model, self.DEFAULT_COST_PER_1K)

    def is_available(self) -> bool:
        return self.client is not None

    async def analyze(self, item: DebtItem, context: str) -> AnalysisResult:
        start = time.perf_counter()
        try:
            response = await self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": build_analysis_prompt(item, context)},
                ],
                temperature=self.temperature,
                max_tokens=self.max_completion_tokens,
            )
        except openai.OpenAIError as e:
            raise BackendError(f"openai error: {e}") from e

        if not response.choices:
            raise BackendError("openai error: empty response")

        latency_ms = (time.perf_counter() - start) * 1000
        total_tokens = response.usage.total_tokens if response.usage else 0
        cost = total_tokens / 1000 * self.cost_per_1k

        logger.debug(
            f"{self.name} answered in {latency_ms:.0f}ms ({total_tokens} tokens)",
            extra={"item_id": item.id, "duration_ms": latency_ms},
        )

        return parse_analysis_response(
            response.choices[0].message.content or "",
            item,
            backend=self.name,
            latency_ms=latency_ms,
            cost=cost,
        )
