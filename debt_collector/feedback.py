"""User feedback on AI assessments.

Feedback is collected and summarized for humans; nothing in the analysis
pipeline reads it.
"""

import threading
import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta

MISCLASSIFIED_THRESHOLD = 3.0


@dataclass
class UserFeedback:
    """A user's rating of one analyzed item. Ratings are 1-5."""

    item_id: str
    explanation_rating: int
    severity_accuracy: int
    priority_accuracy: int
    file_path: str = ""
    line_number: int = 0
    user_comment: str = ""
    actual_severity: int | None = None
    actual_priority: str | None = None
    is_fixed: bool = False
    time_to_fix: str = ""
    id: str = field(default_factory=lambda: uuid.uuid4().hex)
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    def __post_init__(self) -> None:
        for name in ("explanation_rating", "severity_accuracy", "priority_accuracy"):
            value = getattr(self, name)
            if not 1 <= value <= 5:
                raise ValueError(f"{name} must be between 1 and 5, got {value}")

    @property
    def average_rating(self) -> float:
        return (
            self.explanation_rating + self.severity_accuracy + self.priority_accuracy
        ) / 3.0


@dataclass
class Trends:
    avg_explanation: float = 0.0
    avg_severity: float = 0.0
    avg_priority: float = 0.0
    fixed_rate: float = 0.0
    total_items: int = 0
    low_rated_count: int = 0


class FeedbackStorage(ABC):
    @abstractmethod
    def save(self, feedback: UserFeedback) -> None: ...

    @abstractmethod
    def get_by_item_id(self, item_id: str) -> list[UserFeedback]: ...

    @abstractmethod
    def get_trends(self, days: int) -> Trends: ...

    @abstractmethod
    def get_low_rated(self, threshold: float) -> list[UserFeedback]: ...


class MemoryFeedbackStorage(FeedbackStorage):
    """Thread-safe in-process storage keyed by feedback id."""

    def __init__(self) -> None:
        self._items: dict[str, UserFeedback] = {}
        self._lock = threading.Lock()

    def save(self, feedback: UserFeedback) -> None:
        with self._lock:
            self._items[feedback.id] = feedback

    def get_by_item_id(self, item_id: str) -> list[UserFeedback]:
        with self._lock:
            return [fb for fb in self._items.values() if fb.item_id == item_id]

    def get_trends(self, days: int) -> Trends:
        cutoff = datetime.now(UTC) - timedelta(days=days)
        with self._lock:
            recent = [fb for fb in self._items.values() if fb.created_at > cutoff]

        if not recent:
            return Trends()

        n = len(recent)
        return Trends(
            avg_explanation=sum(fb.explanation_rating for fb in recent) / n,
            avg_severity=sum(fb.severity_accuracy for fb in recent) / n,
            avg_priority=sum(fb.priority_accuracy for fb in recent) / n,
            fixed_rate=sum(1 for fb in recent if fb.is_fixed) / n,
            total_items=n,
            low_rated_count=sum(
                1 for fb in recent if fb.average_rating < MISCLASSIFIED_THRESHOLD
            ),
        )

    def get_low_rated(self, threshold: float) -> list[UserFeedback]:
        with self._lock:
            return [fb for fb in self._items.values() if fb.average_rating < threshold]


class FeedbackCollector:
    def __init__(self, storage: FeedbackStorage | None = None):
        self.storage = storage or MemoryFeedbackStorage()

    def record(self, feedback: UserFeedback) -> UserFeedback:
        """Stamp ``created_at`` with the current time and store the feedback."""
        feedback.created_at = datetime.now(UTC)
        self.storage.save(feedback)
        return feedback

    def analyze(self, days: int = 30) -> Trends:
        return self.storage.get_trends(days)

    def get_misclassified(self) -> list[UserFeedback]:
        """Feedback whose average rating is below 3."""
        return self.storage.get_low_rated(MISCLASSIFIED_THRESHOLD)
