"""Tech Debt Collector: ranked, AI-annotated technical debt from marker comments."""

from .agent import AgentAnalysis, AgentOrchestrator
from .detector import Detector, calculate_frequency
from .models import DebtItem, DebtType, Priority
from .pipeline import DebtPipeline, build_pipeline_from_config
from .scoring import RiskScorer, RiskStats

__version__ = "1.0.0"

__all__ = [
    "__version__",
    "AgentAnalysis",
    "AgentOrchestrator",
    "DebtItem",
    "DebtPipeline",
    "DebtType",
    "Detector",
    "Priority",
    "RiskScorer",
    "RiskStats",
    "build_pipeline_from_config",
    "calculate_frequency",
]
