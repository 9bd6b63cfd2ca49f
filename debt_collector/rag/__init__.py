"""Retrieval over previously seen debt items."""

from .similarity import (
    SimilarItem,
    SimilarityIndex,
    StoredEmbeddingItem,
    cosine_similarity,
)

__all__ = ["SimilarityIndex", "SimilarItem", "StoredEmbeddingItem", "cosine_similarity"]
