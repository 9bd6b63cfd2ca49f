"""Deterministic local embedder based on feature hashing."""

import hashlib
import re
import time
from typing import Any

import numpy as np

from .base import EmbeddingResult, Embedder

TOKEN_PATTERN = re.compile(r"[a-z0-9_]+")


class HashingEmbedder(Embedder):
    """Bag-of-words feature hashing into a fixed-size, L2-normalized vector.

    Needs no network or API key and maps equal texts to equal vectors, which
    makes it the offline default and the embedder of choice in tests. Texts
    without any word token embed to the zero vector.
    """

    def __init__(self, dimensions: int = 256, max_tokens: int = 8192):
        if dimensions <= 0:
            raise ValueError("dimensions must be positive")
        self.dimensions = dimensions
        self.max_tokens = max_tokens

    def _bucket(self, token: str) -> tuple[int, float]:
        digest = hashlib.sha256(token.encode("utf-8")).digest()
        index = int.from_bytes(digest[:4], "big") % self.dimensions
        sign = 1.0 if digest[4] & 1 else -1.0
        return index, sign

    def _vectorize(self, text: str) -> list[float]:
        vector = np.zeros(self.dimensions, dtype=np.float64)
        for token in TOKEN_PATTERN.findall(text.lower()):
            index, sign = self._bucket(token)
            vector[index] += sign

        norm = np.linalg.norm(vector)
        if norm > 0:
            vector /= norm
        return vector.tolist()

    def embed_text(self, text: str) -> EmbeddingResult:
        start = time.time()
        return EmbeddingResult(
            text=text,
            embedding=self._vectorize(text),
            model=f"hashing-{self.dimensions}",
            token_count=len(TOKEN_PATTERN.findall(text.lower())),
            processing_time=time.time() - start,
        )

    def embed_batch(self, texts: list[str]) -> list[EmbeddingResult]:
        return [self.embed_text(text) for text in texts]

    def get_model_info(self) -> dict[str, Any]:
        return {
            "provider": "hashing",
            "model": f"hashing-{self.dimensions}",
            "dimensions": self.dimensions,
            "max_tokens": self.max_tokens,
            "cost_per_1k_tokens": 0.0,
        }

    def get_max_tokens(self) -> int:
        return self.max_tokens
