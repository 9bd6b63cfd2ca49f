"""Base classes and interfaces for text embedding generation."""

import hashlib
import random
import time
from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, TypeVar

import tiktoken

from ..collector_logging import LogCategory, get_category_logger

T = TypeVar("T")


@dataclass
class EmbeddingResult:
    """Result of an embedding operation.

    Providers report failures on the result (``error``) instead of raising;
    callers that need an exception check ``success``.
    """

    text: str
    embedding: list[float]

    model: str = ""
    token_count: int = 0
    processing_time: float = 0.0
    cost_estimate: float = 0.0
    error: str | None = None

    @property
    def success(self) -> bool:
        return self.error is None and len(self.embedding) > 0

    @property
    def dimension(self) -> int:
        return len(self.embedding)


class TiktokenMixin:
    """Mixin for accurate token counting with tiktoken."""

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self._tiktoken_encoder: tiktoken.Encoding | None = None
        self._init_tiktoken()

    def _init_tiktoken(self) -> None:
        logger = get_category_logger(LogCategory.RAG)
        try:
            model = getattr(self, "model", None)
            if model:
                try:
                    self._tiktoken_encoder = tiktoken.encoding_for_model(model)
                except KeyError:
                    self._tiktoken_encoder = tiktoken.get_encoding("cl100k_base")
            else:
                self._tiktoken_encoder = tiktoken.get_encoding("cl100k_base")
        except Exception as e:
            # Encoding files are fetched lazily; offline runs approximate
            logger.warning(f"tiktoken initialization failed: {e}")
            self._tiktoken_encoder = None

    def _estimate_tokens_with_tiktoken(self, text: str) -> int:
        if self._tiktoken_encoder is not None:
            return max(1, len(self._tiktoken_encoder.encode(text)))
        return max(1, len(text) // 4)


class Embedder(ABC):
    """Abstract base class for text embedding generators."""

    @abstractmethod
    def embed_text(self, text: str) -> EmbeddingResult:
        """Generate embedding for a single text."""

    @abstractmethod
    def embed_batch(self, texts: list[str]) -> list[EmbeddingResult]:
        """Generate embeddings for multiple texts, one result per input."""

    @abstractmethod
    def get_model_info(self) -> dict[str, Any]:
        """Get information about the embedding model."""

    @abstractmethod
    def get_max_tokens(self) -> int:
        """Get maximum token limit for input text."""

    def truncate_text(self, text: str, max_tokens: int | None = None) -> str:
        """Truncate text to fit within the model's token limit."""
        if max_tokens is None:
            max_tokens = self.get_max_tokens()

        count_tokens: Callable[[str], int] = getattr(
            self, "_estimate_tokens_with_tiktoken", lambda t: max(1, len(t) // 4)
        )
        if count_tokens(text) <= max_tokens:
            return text

        # Binary search for the longest prefix within the limit
        left, right = 0, len(text)
        best_length = 0
        while left <= right:
            mid = (left + right) // 2
            if count_tokens(text[:mid]) <= max_tokens:
                best_length = mid
                left = mid + 1
            else:
                right = mid - 1

        truncated = text[:best_length]
        last_space = truncated.rfind(" ")
        if last_space > best_length * 0.8:
            truncated = truncated[:last_space]

        return truncated + "..."


class RetryableEmbedder(Embedder):
    """Base class for embedders that retry transient provider errors."""

    TRANSIENT_ERRORS = (
        "rate limit",
        "timeout",
        "connection",
        "temporary",
        "503",
        "502",
        "429",
    )

    def __init__(
        self,
        max_retries: int = 3,
        base_delay: float = 1.0,
        max_delay: float = 60.0,
        backoff_factor: float = 2.0,
    ):
        self.max_retries = max_retries
        self.base_delay = base_delay
        self.max_delay = max_delay
        self.backoff_factor = backoff_factor

    def _calculate_delay(self, attempt: int) -> float:
        """Exponential backoff with jitter."""
        delay = min(self.base_delay * (self.backoff_factor**attempt), self.max_delay)
        return delay + random.uniform(0.1, 0.3) * delay

    def _should_retry(self, error: Exception, attempt: int) -> bool:
        if attempt >= self.max_retries:
            return False
        error_str = str(error).lower()
        return any(err in error_str for err in self.TRANSIENT_ERRORS)

    def _embed_with_retry(self, operation_func: Callable[[], T]) -> T:
        logger = get_category_logger(LogCategory.RAG)
        attempt = 0
        while True:
            try:
                return operation_func()
            except Exception as e:
                if not self._should_retry(e, attempt):
                    raise
                delay = self._calculate_delay(attempt)
                logger.warning(
                    f"Embedding attempt {attempt + 1} failed: {e}. "
                    f"Retrying in {delay:.1f}s..."
                )
                time.sleep(delay)
                attempt += 1


class CachingEmbedder(Embedder):
    """In-memory cache in front of any embedder.

    Only successful results are cached, so a failed lookup is retried on
    the next call.
    """

    def __init__(self, embedder: Embedder, max_cache_size: int = 10000):
        self.embedder = embedder
        self.max_cache_size = max_cache_size
        self._cache: dict[str, EmbeddingResult] = {}
        self._hits = 0
        self._misses = 0

    @staticmethod
    def _get_cache_key(text: str) -> str:
        return hashlib.sha256(text.encode("utf-8")).hexdigest()[:16]

    def _add_to_cache(self, text: str, result: EmbeddingResult) -> None:
        if len(self._cache) >= self.max_cache_size:
            # Drop the oldest half (FIFO)
            for key in list(self._cache)[: len(self._cache) // 2]:
                del self._cache[key]
        self._cache[self._get_cache_key(text)] = result

    def embed_text(self, text: str) -> EmbeddingResult:
        cached = self._cache.get(self._get_cache_key(text))
        if cached is not None:
            self._hits += 1
            return cached

        self._misses += 1
        result = self.embedder.embed_text(text)
        if result.success:
            self._add_to_cache(text, result)
        return result

    def embed_batch(self, texts: list[str]) -> list[EmbeddingResult]:
        results: list[EmbeddingResult | None] = [None] * len(texts)
        uncached_texts: list[str] = []
        uncached_indices: list[int] = []

        for i, text in enumerate(texts):
            cached = self._cache.get(self._get_cache_key(text))
            if cached is not None:
                self._hits += 1
                results[i] = cached
            else:
                uncached_texts.append(text)
                uncached_indices.append(i)

        if uncached_texts:
            self._misses += len(uncached_texts)
            fresh = self.embedder.embed_batch(uncached_texts)
            for index, text, result in zip(
                uncached_indices, uncached_texts, fresh, strict=True
            ):
                results[index] = result
                if result.success:
                    self._add_to_cache(text, result)

        return [r for r in results if r is not None]

    def get_model_info(self) -> dict[str, Any]:
        info = self.embedder.get_model_info()
        info["caching_enabled"] = True
        info["memory_cache_size"] = len(self._cache)
        info["cache_hits"] = self._hits
        info["cache_misses"] = self._misses
        return info

    def get_max_tokens(self) -> int:
        return self.embedder.get_max_tokens()
