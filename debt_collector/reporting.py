"""Report assembly and JSON/text output."""

import json
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from .models import DebtItem
from .scoring import RiskStats

DEFAULT_SUMMARY = "Technical Debt Analysis Report"
TEXT_REPORT_ITEMS = 10
MAX_RECOMMENDATIONS = 5

HEAVY_RULE = "═" * 63
LIGHT_RULE = "─" * 61


def summarize_recommendations(
    items: Iterable[DebtItem], limit: int = MAX_RECOMMENDATIONS
) -> list[str]:
    """One line per enriched item that carries a recommendation, riskiest first."""
    enriched = [item for item in items if item.llm_recommendation]
    enriched.sort(key=lambda item: item.risk, reverse=True)
    return [
        f"[{item.llm_priority or 'MEDIUM'}] {item.location}: {item.llm_recommendation}"
        for item in enriched[:limit]
    ]


@dataclass
class Report:
    repository_path: str
    items: list[DebtItem]
    total_items: int = 0
    critical_items: int = 0
    high_items: int = 0
    medium_items: int = 0
    low_items: int = 0
    summary: str = DEFAULT_SUMMARY
    recommendations: list[str] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    metrics: dict[str, Any] = field(default_factory=dict)
    generated_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    @classmethod
    def from_items(
        cls,
        items: list[DebtItem],
        repository_path: str | Path,
        stats: RiskStats,
        errors: Iterable[str] = (),
        metrics: dict[str, Any] | None = None,
    ) -> "Report":
        enriched = sum(1 for item in items if item.is_enriched)
        summary = (
            f"{len(items)} debt items: {stats.critical} critical, {stats.high} high, "
            f"{stats.medium} medium, {stats.low} low"
        )
        if enriched:
            summary += f" ({enriched} enriched by AI analysis)"

        return cls(
            repository_path=str(repository_path),
            items=items,
            total_items=len(items),
            critical_items=stats.critical,
            high_items=stats.high,
            medium_items=stats.medium,
            low_items=stats.low,
            summary=summary if items else DEFAULT_SUMMARY,
            recommendations=summarize_recommendations(items),
            errors=list(errors),
            metrics=metrics or {},
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "generated_at": self.generated_at.isoformat(),
            "repository_path": self.repository_path,
            "total_items": self.total_items,
            "critical_items": self.critical_items,
            "high_items": self.high_items,
            "medium_items": self.medium_items,
            "low_items": self.low_items,
            "debt_items": [item.to_dict() for item in self.items],
            "summary": self.summary,
            "recommendations": self.recommendations,
            "errors": self.errors,
            "metrics": self.metrics,
        }


def format_text_report(report: Report) -> str:
    lines = [
        HEAVY_RULE,
        "                  TECH DEBT ANALYSIS REPORT",
        HEAVY_RULE,
        "",
        f"Repository: {report.repository_path}",
        f"Generated: {report.generated_at.strftime('%Y-%m-%d %H:%M:%S')}",
        "",
        "SUMMARY:",
        f"  Total Items: {report.total_items}",
        f"  Critical: {report.critical_items} | High: {report.high_items} | "
        f"Medium: {report.medium_items} | Low: {report.low_items}",
        f"  {report.summary}",
        "",
        f"TOP {TEXT_REPORT_ITEMS} ITEMS:",
        LIGHT_RULE,
    ]

    for i, item in enumerate(report.items[:TEXT_REPORT_ITEMS], start=1):
        lines.append("")
        lines.append(f"{i}. [{item.type.value}] {item.location}")
        lines.append(f"   Message: {item.message}")
        lines.append(f"   Risk: {item.risk:.1f}/100 | Severity: {item.severity}/5")
        if item.llm_explanation:
            lines.append(f"   Analysis: {item.llm_explanation}")
        if item.llm_priority:
            lines.append(f"   Priority: {item.llm_priority}")

    if report.recommendations:
        lines += ["", "", "RECOMMENDATIONS:", LIGHT_RULE]
        lines += [
            f"{i}. {rec}" for i, rec in enumerate(report.recommendations, start=1)
        ]

    if report.errors:
        lines += ["", "", f"ERRORS ({len(report.errors)}):", LIGHT_RULE]
        lines += [f"- {error}" for error in report.errors]

    lines += ["", HEAVY_RULE, ""]
    return "\n".join(lines)


def write_report(report: Report, path: str | Path, fmt: str = "json") -> Path:
    """Write ``report`` to ``path`` as ``json`` or ``text``.

    Raises:
        ValueError: Unsupported format.
        OSError: The file could not be written.
    """
    if fmt == "json":
        content = json.dumps(report.to_dict(), indent=2)
    elif fmt == "text":
        content = format_text_report(report)
    else:
        raise ValueError(f"unsupported format: {fmt}")

    output = Path(path)
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(content, encoding="utf-8")
    return output
