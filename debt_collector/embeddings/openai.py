"""OpenAI embeddings with retry logic and rate limiting."""

import time
from typing import Any

import openai

from ..collector_logging import LogCategory, get_category_logger
from .base import EmbeddingResult, RetryableEmbedder, TiktokenMixin

logger = get_category_logger(LogCategory.RAG)


class OpenAIEmbedder(TiktokenMixin, RetryableEmbedder):
    """Hosted OpenAI embeddings."""

    MODELS = {
        "text-embedding-3-small": {
            "dimensions": 1536,
            "max_tokens": 8191,
            "cost_per_1k_tokens": 0.00002,
        },
        "text-embedding-3-large": {
            "dimensions": 3072,
            "max_tokens": 8191,
            "cost_per_1k_tokens": 0.00013,
        },
        "text-embedding-ada-002": {
            "dimensions": 1536,
            "max_tokens": 8191,
            "cost_per_1k_tokens": 0.0001,
        },
    }

    def __init__(
        self,
        api_key: str | None = None,
        model: str = "text-embedding-3-small",
        max_retries: int = 3,
        base_delay: float = 1.0,
        timeout: float = 30.0,
        requests_per_minute: int = 3000,
    ) -> None:
        if not api_key:
            raise ValueError("Valid OpenAI API key required")
        if model not in self.MODELS:
            raise ValueError(
                f"Unsupported model: {model}. Available: {list(self.MODELS.keys())}"
            )

        self.model = model
        self.model_config = self.MODELS[model]

        super().__init__(max_retries=max_retries, base_delay=base_delay)

        self.client = openai.OpenAI(api_key=api_key, timeout=timeout)
        self._requests_per_minute = requests_per_minute
        self._request_times: list[float] = []

    def _check_rate_limits(self) -> None:
        """Sleep until a request slot frees up in the trailing minute."""
        now = time.time()
        self._request_times = [t for t in self._request_times if now - t < 60]
        if len(self._request_times) >= self._requests_per_minute:
            sleep_time = 60 - (now - self._request_times[0]) + 1
            if sleep_time > 0:
                logger.info(f"Rate limit reached. Sleeping for {sleep_time:.1f}s...")
                time.sleep(sleep_time)

    def _calculate_cost(self, token_count: int) -> float:
        return token_count * self.model_config["cost_per_1k_tokens"] / 1000

    def embed_text(self, text: str) -> EmbeddingResult:
        return self.embed_batch([text])[0]

    def embed_batch(self, texts: list[str]) -> list[EmbeddingResult]:
        if not texts:
            return []

        start_time = time.time()
        truncated = [self.truncate_text(text) for text in texts]

        def _embed() -> Any:
            self._check_rate_limits()
            response = self.client.embeddings.create(
                model=self.model, input=truncated, encoding_format="float"
            )
            self._request_times.append(time.time())
            return response

        try:
            response = self._embed_with_retry(_embed)
        except Exception as e:
            logger.error(f"OpenAI embedding request failed: {e}")
            return [
                EmbeddingResult(
                    text=text,
                    embedding=[],
                    model=self.model,
                    processing_time=time.time() - start_time,
                    error=str(e),
                )
                for text in truncated
            ]

        tokens = response.usage.total_tokens
        elapsed = time.time() - start_time
        return [
            EmbeddingResult(
                text=text,
                embedding=data.embedding,
                model=self.model,
                token_count=tokens // len(truncated),
                processing_time=elapsed / len(truncated),
                cost_estimate=self._calculate_cost(tokens) / len(truncated),
            )
            for text, data in zip(truncated, response.data, strict=True)
        ]

    def get_model_info(self) -> dict[str, Any]:
        return {
            "provider": "openai",
            "model": self.model,
            "dimensions": self.model_config["dimensions"],
            "max_tokens": self.model_config["max_tokens"],
            "cost_per_1k_tokens": self.model_config["cost_per_1k_tokens"],
        }

    def get_max_tokens(self) -> int:
        return int(self.model_config["max_tokens"])
