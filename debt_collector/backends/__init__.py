"""Language-model backends and routing."""

from .base import AnalysisBackend, AnalysisResult, build_analysis_prompt
from .mock import MockBackend
from .openai import OpenAIBackend
from .parsing import parse_analysis_response
from .router import BackendRouter

__all__ = [
    "AnalysisBackend",
    "AnalysisResult",
    "BackendRouter",
    "MockBackend",
    "OpenAIBackend",
    "build_analysis_prompt",
    "parse_analysis_response",
]
