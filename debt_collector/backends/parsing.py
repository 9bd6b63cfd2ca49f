"""Parse labelled model responses into ``AnalysisResult``."""

import re

from ..models import DebtItem, Priority
from .base import AnalysisResult

# Label -> AnalysisResult field
LABELS = {
    "EXPLANATION": "explanation",
    "SEVERITY": "severity",
    "PRIORITY": "priority",
    "IMPACT": "business_impact",
    "FIX": "fix_estimate",
    "RECOMMENDATION": "recommendation",
    "CONFIDENCE": "confidence",
}

# Labels that count towards the heuristic confidence
CORE_LABELS = ("EXPLANATION", "SEVERITY", "PRIORITY", "IMPACT", "FIX")

LABEL_PATTERN = re.compile(
    r"^\s*\**(" + "|".join(LABELS) + r")\**\s*:\s*(.*)$", re.IGNORECASE
)
WORD_PATTERN = re.compile(r"[A-Za-z]+")
INT_PATTERN = re.compile(r"-?\d+")
FLOAT_PATTERN = re.compile(r"-?\d+(?:\.\d+)?")

EXPLANATION_FALLBACK_CHARS = 200
MIN_HEURISTIC_CONFIDENCE = 0.5
MAX_HEURISTIC_CONFIDENCE = 0.95


def _clamp_severity(value: int) -> int:
    return max(1, min(5, value))


def _parse_labels(raw: str) -> dict[str, str]:
    fields: dict[str, str] = {}
    for line in raw.splitlines():
        match = LABEL_PATTERN.match(line)
        if match:
            label = match.group(1).upper()
            # First occurrence wins
            fields.setdefault(label, match.group(2).strip())
    return fields


def _parse_priority(value: str | None) -> str:
    if value:
        match = WORD_PATTERN.search(value)
        if match and match.group().upper() in Priority.__members__:
            return match.group().upper()
    return Priority.MEDIUM.value


def _parse_severity(value: str | None, fallback: int) -> int:
    if value:
        match = INT_PATTERN.search(value)
        if match:
            return _clamp_severity(int(match.group()))
    return _clamp_severity(fallback)


def _parse_confidence(value: str | None, fields: dict[str, str]) -> float:
    if value:
        match = FLOAT_PATTERN.search(value)
        if match:
            confidence = float(match.group())
            # "85%" and a bare whole number such as "85" are percentages
            is_percent = value.strip().endswith("%") or (
                1 < confidence <= 100 and confidence.is_integer()
            )
            if is_percent:
                confidence /= 100
            return max(0.0, min(1.0, confidence))

    present = sum(1 for label in CORE_LABELS if fields.get(label))
    span = MAX_HEURISTIC_CONFIDENCE - MIN_HEURISTIC_CONFIDENCE
    return MIN_HEURISTIC_CONFIDENCE + span * present / len(CORE_LABELS)


def parse_analysis_response(
    raw: str,
    item: DebtItem,
    backend: str = "",
    latency_ms: float = 0.0,
    cost: float = 0.0,
) -> AnalysisResult:
    """Build a result from a ``LABEL: value`` response.

    Never raises: missing or malformed fields fall back to defaults
    (explanation to the start of the raw text, priority to MEDIUM, severity
    to the item's own severity).
    """
    raw = raw or ""
    fields = _parse_labels(raw)

    explanation = fields.get("EXPLANATION") or raw.strip()[:EXPLANATION_FALLBACK_CHARS]

    return AnalysisResult(
        explanation=explanation,
        severity=_parse_severity(fields.get("SEVERITY"), item.severity),
        priority=_parse_priority(fields.get("PRIORITY")),
        business_impact=fields.get("IMPACT", ""),
        fix_estimate=fields.get("FIX", ""),
        confidence=_parse_confidence(fields.get("CONFIDENCE"), fields),
        backend=backend,
        latency_ms=latency_ms,
        cost=cost,
        recommendation=fields.get("RECOMMENDATION", ""),
        raw_response=raw,
    )
