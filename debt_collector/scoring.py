"""Deterministic weighted risk model."""

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

from .collector_logging import LogCategory, get_category_logger
from .models import DebtItem, Priority

logger = get_category_logger(LogCategory.SCORER)


@dataclass
class RiskStats:
    """Risk distribution over a set of items.

    ``high``/``medium``/``low`` are mutually exclusive buckets; ``critical``
    is counted separately (risk >= 80) and overlaps ``high``.
    """

    critical: int = 0
    high: int = 0
    medium: int = 0
    low: int = 0

    @property
    def total(self) -> int:
        return self.high + self.medium + self.low

    def to_dict(self) -> dict[str, Any]:
        return {
            "critical": self.critical,
            "high": self.high,
            "medium": self.medium,
            "low": self.low,
        }


class RiskScorer:
    """Turn severity, file importance and frequency into a 0-100 risk score."""

    SEVERITY_WEIGHT = 0.50
    IMPORTANCE_WEIGHT = 0.35
    FREQUENCY_WEIGHT = 0.15

    HIGH_THRESHOLD = 75.0
    MEDIUM_THRESHOLD = 50.0
    CRITICAL_THRESHOLD = 80.0

    def score(self, severity: int, file_importance: int, frequency: int) -> float:
        """Weighted sum of the three inputs, each normalized by 5, scaled to 100."""
        risk = (
            (severity / 5.0) * self.SEVERITY_WEIGHT
            + (file_importance / 5.0) * self.IMPORTANCE_WEIGHT
            + (frequency / 5.0) * self.FREQUENCY_WEIGHT
        )
        return risk * 100

    def score_item(self, item: DebtItem) -> float:
        item.risk = self.score(item.severity, item.file_importance, item.frequency)
        return item.risk

    def score_all(self, items: Iterable[DebtItem]) -> list[DebtItem]:
        scored = list(items)
        for item in scored:
            self.score_item(item)
        logger.debug(f"Scored {len(scored)} items")
        return scored

    def categorize(self, risk: float) -> Priority:
        """Map a risk score to HIGH/MEDIUM/LOW (closed lower bounds)."""
        if risk >= self.HIGH_THRESHOLD:
            return Priority.HIGH
        if risk >= self.MEDIUM_THRESHOLD:
            return Priority.MEDIUM
        return Priority.LOW

    def is_critical(self, risk: float) -> bool:
        return risk >= self.CRITICAL_THRESHOLD

    def sort_by_risk(self, items: Iterable[DebtItem]) -> list[DebtItem]:
        """Sort by descending risk; ties keep their original (detection) order."""
        return sorted(items, key=lambda item: item.risk, reverse=True)

    def stats(self, items: Iterable[DebtItem]) -> RiskStats:
        stats = RiskStats()
        for item in items:
            priority = self.categorize(item.risk)
            if priority is Priority.HIGH:
                stats.high += 1
            elif priority is Priority.MEDIUM:
                stats.medium += 1
            else:
                stats.low += 1

            if self.is_critical(item.risk):
                stats.critical += 1
        return stats
