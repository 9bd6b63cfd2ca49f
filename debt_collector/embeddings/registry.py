"""Registry for creating embedders from configuration."""

from typing import Any

from .base import CachingEmbedder, Embedder
from .hashing import HashingEmbedder
from .openai import OpenAIEmbedder


class EmbedderRegistry:
    """Maps provider names to embedder classes."""

    def __init__(self) -> None:
        self._embedders: dict[str, type[Embedder]] = {}
        self.register("openai", OpenAIEmbedder)
        self.register("hashing", HashingEmbedder)

    def register(self, name: str, embedder_class: type[Embedder]) -> None:
        self._embedders[name] = embedder_class

    def create_embedder(
        self,
        provider: str,
        config: dict[str, Any],
        enable_caching: bool = True,
        cache_size: int = 10000,
    ) -> Embedder:
        """Instantiate a provider, optionally wrapped in a memory cache.

        Raises:
            ValueError: Unknown provider.
            RuntimeError: The provider rejected its configuration.
        """
        if provider not in self._embedders:
            available = list(self._embedders.keys())
            raise ValueError(
                f"Unknown embedder provider: {provider}. Available: {available}"
            )

        try:
            embedder = self._embedders[provider](**config)
        except Exception as e:
            raise RuntimeError(f"Failed to create {provider} embedder: {e}") from e

        if enable_caching:
            embedder = CachingEmbedder(embedder, max_cache_size=cache_size)
        return embedder


def create_embedder_from_config(config: Any) -> Embedder:
    """Create the embedder selected by a ``CollectorConfig`` or a plain dict.

    Dict form: ``{"provider": ..., "enable_caching": ..., **provider_kwargs}``.
    """
    registry = EmbedderRegistry()

    if hasattr(config, "embedding_provider"):
        provider = config.embedding_provider
        enable_caching = True
        if provider == "openai":
            provider_config: dict[str, Any] = {
                "api_key": config.openai_api_key,
                "model": config.embedding_model,
            }
        else:
            provider_config = {}
    else:
        provider = config.get("provider", "hashing")
        enable_caching = config.get("enable_caching", True)
        provider_config = {
            k: v for k, v in config.items() if k not in ("provider", "enable_caching")
        }

    return registry.create_embedder(provider, provider_config, enable_caching)
