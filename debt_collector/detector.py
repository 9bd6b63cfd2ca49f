"""Marker comment detection and per-file frequency scoring."""

import re
from collections import Counter, defaultdict
from collections.abc import Iterable
from pathlib import Path

from .collector_logging import LogCategory, get_category_logger
from .exceptions import FileReadError
from .models import DebtItem, DebtType, make_item_id

logger = get_category_logger(LogCategory.DETECTOR)


class Detector:
    """Detect TODO, FIXME, HACK, DEPRECATED and XXX markers in source text."""

    # Baseline severity per marker type
    BASELINE_SEVERITY = {
        DebtType.TODO: 2,
        DebtType.FIXME: 3,
        DebtType.HACK: 4,
        DebtType.DEPRECATED: 3,
        DebtType.XXX: 4,
    }

    CRITICAL_KEYWORDS = (
        "security",
        "crash",
        "memory",
        "leak",
        "deadlock",
        "race",
        "critical",
        "production",
        "urgent",
        "asap",
    )

    # No "fix" here: "TODO: fix this" keeps its baseline severity
    HIGH_KEYWORDS = ("error", "bug", "broken", "severe")

    def __init__(self) -> None:
        # Marker, optional whitespace/colon separator, trailing text
        self.patterns = {
            debt_type: re.compile(rf"({debt_type.value})[\s:]*(.*)$", re.IGNORECASE)
            for debt_type in DebtType
        }

    def detect_in_text(
        self, text: str, file_path: str, file_importance: int
    ) -> list[DebtItem]:
        """Scan line-oriented text for markers.

        A line may yield several items when it contains more than one
        marker type.

        Args:
            text: File content.
            file_path: Path recorded on each item.
            file_importance: Externally supplied importance score (1-5).

        Returns:
            Items in line order, then marker order within a line.
        """
        items: list[DebtItem] = []

        for line_number, line in enumerate(text.split("\n"), start=1):
            line = line.rstrip("\r")
            for debt_type, pattern in self.patterns.items():
                match = pattern.search(line)
                if not match:
                    continue

                message = match.group(2).strip()
                items.append(
                    DebtItem(
                        id=make_item_id(file_path, line_number, debt_type),
                        file_path=file_path,
                        line_number=line_number,
                        type=debt_type,
                        message=message,
                        severity=self.detect_severity(debt_type, message),
                        file_importance=file_importance,
                    )
                )

        return items

    def detect_in_file(
        self, file_path: str | Path, file_importance: int
    ) -> list[DebtItem]:
        """Read a file and detect markers in it.

        Raises:
            FileReadError: If the file cannot be read. No partial items are
                returned for a failed file.
        """
        path = Path(file_path)
        try:
            text = path.read_text(encoding="utf-8", errors="replace")
        except OSError as e:
            raise FileReadError(path, e) from e

        items = self.detect_in_text(text, str(file_path), file_importance)
        if items:
            logger.debug(f"Found {len(items)} markers in {file_path}")
        return items

    def detect_severity(self, debt_type: DebtType, message: str) -> int:
        """Infer severity from the marker type and message keywords."""
        severity = self.BASELINE_SEVERITY[debt_type]
        lower = message.lower()

        for keyword in self.CRITICAL_KEYWORDS:
            if keyword in lower:
                return 5

        for keyword in self.HIGH_KEYWORDS:
            if keyword in lower:
                if severity < 4:
                    severity = 4
                break

        return severity


def frequency_to_score(count: int) -> int:
    """Bucket a per-file, per-type marker count into a 1-5 score."""
    if count <= 1:
        return 1
    if count <= 2:
        return 2
    if count <= 5:
        return 3
    if count <= 10:
        return 4
    return 5


def calculate_frequency(
    items: Iterable[DebtItem], file_path: str | None = None
) -> dict[DebtType, int]:
    """Set ``frequency`` on each item from its file's per-type marker count.

    Args:
        items: Detected items; mutated in place.
        file_path: Restrict counting and updating to this file. When omitted,
            every item is grouped by its own file.

    Returns:
        Per-type counts for ``file_path``, or summed over all files when no
        path is given.
    """
    by_file: dict[str, list[DebtItem]] = defaultdict(list)
    for item in items:
        if file_path is None or item.file_path == file_path:
            by_file[item.file_path].append(item)

    totals: Counter[DebtType] = Counter()
    for file_items in by_file.values():
        counts = Counter(item.type for item in file_items)
        for item in file_items:
            item.frequency = frequency_to_score(counts[item.type])
        totals.update(counts)

    return dict(totals)
