"""Configuration model for a collection run."""

from typing import Literal

from pydantic import BaseModel, Field, field_validator

from ..scanner import DEFAULT_EXCLUDE_DIRS, DEFAULT_EXTENSIONS


class CollectorConfig(BaseModel):
    """Run configuration with validation."""

    # API
    openai_api_key: str = Field(default="")
    chat_model: str = Field(default="gpt-3.5-turbo")

    # Embeddings
    embedding_provider: Literal["openai", "hashing"] = Field(default="openai")
    embedding_model: str = Field(default="text-embedding-3-small")

    # Enrichment
    enable_llm: bool = Field(default=True)
    enrich_limit: int = Field(default=10, ge=0, le=1000)
    request_delay_seconds: float = Field(default=0.1, ge=0)
    max_concurrency: int = Field(default=1, ge=1, le=32)
    confidence_threshold: float = Field(default=0.8, ge=0, le=1)

    # Scanning
    exclude_dirs: list[str] = Field(default_factory=lambda: list(DEFAULT_EXCLUDE_DIRS))
    include_extensions: list[str] = Field(
        default_factory=lambda: list(DEFAULT_EXTENSIONS)
    )
    skip_hidden: bool = Field(default=True)

    # Output
    output_format: Literal["json", "text"] = Field(default="json")
    output_path: str = Field(default="report.json")
    log_format: Literal["text", "json"] = Field(default="text")
    verbose: bool = Field(default=False)

    @field_validator("include_extensions")
    @classmethod
    def normalize_extensions(cls, v: list[str]) -> list[str]:
        return [ext if ext.startswith(".") else f".{ext}" for ext in v]

    @field_validator("exclude_dirs", "include_extensions", mode="before")
    @classmethod
    def split_comma_list(cls, v: object) -> object:
        if isinstance(v, str):
            return [part.strip() for part in v.split(",") if part.strip()]
        return v

    @property
    def has_openai_key(self) -> bool:
        return bool(self.openai_api_key)


# Environment variable -> config field
ENV_VARS = {
    "OPENAI_API_KEY": "openai_api_key",
    "OPENAI_MODEL": "chat_model",
    "EMBEDDING_PROVIDER": "embedding_provider",
    "EMBEDDING_MODEL": "embedding_model",
}
