"""Core data models for detected technical-debt items."""

import hashlib
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any


class DebtType(Enum):
    """Marker comment types recognized by the detector."""

    TODO = "TODO"
    FIXME = "FIXME"
    HACK = "HACK"
    DEPRECATED = "DEPRECATED"
    XXX = "XXX"


class Priority(Enum):
    """Priority buckets shared by the risk scorer and model assessments."""

    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"


def make_item_id(file_path: str, line_number: int, debt_type: DebtType) -> str:
    """Deterministic identifier for one marker occurrence."""
    key = f"{file_path}:{line_number}:{debt_type.value}"
    return hashlib.md5(key.encode("utf-8")).hexdigest()[:12]


@dataclass
class DebtItem:
    """A single marker occurrence with its derived scores.

    ``frequency`` and ``risk`` are filled in by the frequency counter and
    the risk scorer; the ``llm_*`` fields stay ``None`` until enrichment.
    """

    id: str
    file_path: str
    line_number: int
    type: DebtType
    message: str
    severity: int
    file_importance: int
    frequency: int = 1
    risk: float = 0.0
    detected_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    llm_explanation: str | None = None
    llm_priority: str | None = None
    llm_recommendation: str | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.type, DebtType):
            self.type = DebtType(str(self.type).upper())
        for name in ("severity", "file_importance", "frequency"):
            value = getattr(self, name)
            if not 1 <= value <= 5:
                raise ValueError(f"{name} must be between 1 and 5, got {value}")

    @property
    def location(self) -> str:
        return f"{self.file_path}:{self.line_number}"

    @property
    def is_enriched(self) -> bool:
        return self.llm_explanation is not None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "id": self.id,
            "file_path": self.file_path,
            "line_number": self.line_number,
            "type": self.type.value,
            "message": self.message,
            "severity": self.severity,
            "file_importance": self.file_importance,
            "frequency": self.frequency,
            "risk": self.risk,
            "detected_at": self.detected_at.isoformat(),
            "llm_explanation": self.llm_explanation,
            "llm_priority": self.llm_priority,
            "llm_recommendation": self.llm_recommendation,
        }
