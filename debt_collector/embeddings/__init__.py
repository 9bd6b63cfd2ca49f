"""Text embedding backends for the similarity index."""

from .base import CachingEmbedder, Embedder, EmbeddingResult, RetryableEmbedder
from .hashing import HashingEmbedder
from .openai import OpenAIEmbedder
from .registry import EmbedderRegistry, create_embedder_from_config

__all__ = [
    "Embedder",
    "EmbeddingResult",
    "RetryableEmbedder",
    "CachingEmbedder",
    "OpenAIEmbedder",
    "HashingEmbedder",
    "EmbedderRegistry",
    "create_embedder_from_config",
]
