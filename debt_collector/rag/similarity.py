"""In-process similarity index over embedded debt item messages."""

import asyncio
from dataclasses import dataclass

import numpy as np

from ..collector_logging import LogCategory, get_category_logger
from ..embeddings.base import Embedder
from ..exceptions import EmbeddingError
from ..performance.metrics import (
    VECTOR_SEARCH_LATENCY,
    VECTOR_SEARCHES,
    VECTORS_INDEXED,
    PerformanceMetricsCollector,
)

logger = get_category_logger(LogCategory.RAG)


@dataclass
class StoredEmbeddingItem:
    """An indexed item; ``text`` is frozen at indexing time."""

    id: str
    file: str
    line: int
    text: str
    risk: float
    embedding: list[float]


@dataclass
class SimilarItem:
    """A search hit."""

    score: float
    id: str
    file: str
    line: int
    text: str
    risk: float


def cosine_similarity(a: list[float], b: list[float]) -> float:
    """Cosine similarity of two vectors.

    Returns 0.0 for vectors of different length or when either has zero norm.
    """
    if len(a) != len(b) or not a:
        return 0.0

    va = np.asarray(a, dtype=np.float64)
    vb = np.asarray(b, dtype=np.float64)
    norm_a = np.linalg.norm(va)
    norm_b = np.linalg.norm(vb)
    if norm_a == 0 or norm_b == 0:
        return 0.0

    return float(np.dot(va, vb) / (norm_a * norm_b))


class SimilarityIndex:
    """Append-only nearest-neighbour store with linear cosine search.

    Appends and searches are serialized by one ``asyncio.Lock``. Embedding
    calls run in a worker thread, so a cancelled caller stops waiting
    immediately.
    """

    def __init__(self, embedder: Embedder):
        self.embedder = embedder
        self._items: list[StoredEmbeddingItem] = []
        self._lock = asyncio.Lock()
        self._metrics = PerformanceMetricsCollector()

    def __len__(self) -> int:
        return len(self._items)

    def items(self) -> list[StoredEmbeddingItem]:
        """Snapshot of the stored items in insertion order."""
        return list(self._items)

    async def _embed(self, text: str) -> list[float]:
        result = await asyncio.to_thread(self.embedder.embed_text, text)
        if not result.success:
            raise EmbeddingError(
                result.error or "embedding provider returned no vector"
            )
        return result.embedding

    async def index(
        self, id: str, file: str, line: int, text: str, risk: float
    ) -> None:
        """Embed ``text`` and append it. Re-indexing an id appends a duplicate.

        Raises:
            EmbeddingError: The embedder failed; nothing is appended.
        """
        async with self._lock:
            embedding = await self._embed(text)
            self._items.append(
                StoredEmbeddingItem(
                    id=id,
                    file=file,
                    line=line,
                    text=text,
                    risk=risk,
                    embedding=embedding,
                )
            )

        self._metrics.increment(VECTORS_INDEXED)
        logger.debug(f"Indexed {file}:{line}", extra={"item_id": id})

    async def search(self, query_text: str, k: int) -> list[SimilarItem]:
        """Return up to ``k`` items by descending cosine similarity.

        Ties keep insertion order. An empty index returns ``[]`` without
        calling the embedder.

        Raises:
            EmbeddingError: The query could not be embedded.
        """
        async with self._lock:
            if not self._items or k <= 0:
                return []

            with self._metrics.measure(VECTOR_SEARCH_LATENCY):
                query = await self._embed(query_text)
                scored = [
                    (cosine_similarity(query, item.embedding), item)
                    for item in self._items
                ]

        self._metrics.increment(VECTOR_SEARCHES)
        scored.sort(key=lambda pair: pair[0], reverse=True)
        return [
            SimilarItem(
                score=score,
                id=item.id,
                file=item.file,
                line=item.line,
                text=item.text,
                risk=item.risk,
            )
            for score, item in scored[:k]
        ]
