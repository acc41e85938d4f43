"""Groups a flat list of check results into a categorized scan report."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from typing import Any

from sqldiag.models import CheckResult, Status
from sqldiag.reporting.display_names import UNCATEGORIZED
from sqldiag.reporting.friendly_copy import get_explanation


@dataclass
class ReportDatabase:
    name: str = ""
    server: str | None = None
    scanned_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


@dataclass
class ReportSummary:
    passed: int = 0
    warnings: int = 0
    failed: int = 0
    duration_ms: int = 0


@dataclass
class ReportEntry:
    """One check in the report.

    The explanation fields are only filled in for non-passing checks.
    """

    id: int
    code: str
    category: str
    status: str
    title: str
    message: str
    items: list[str] = field(default_factory=list)
    item_count: int = 0
    duration_ms: int = 0
    whats_wrong: str | None = None
    why_it_matters: str | None = None
    what_to_do_next: str | None = None


@dataclass
class ReportCategory:
    name: str
    checks: list[ReportEntry] = field(default_factory=list)


@dataclass
class ScanReport:
    database: ReportDatabase = field(default_factory=ReportDatabase)
    summary: ReportSummary = field(default_factory=ReportSummary)
    categories: list[ReportCategory] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """JSON-ready representation."""
        return {
            "database": {
                "name": self.database.name,
                "server": self.database.server,
                "scanned_at": self.database.scanned_at.isoformat(),
            },
            "summary": {
                "pass": self.summary.passed,
                "warn": self.summary.warnings,
                "fail": self.summary.failed,
                "duration_ms": self.summary.duration_ms,
            },
            "categories": [
                {"name": c.name, "checks": [asdict(e) for e in c.checks]}
                for c in self.categories
            ],
        }

    def entries(self) -> list[ReportEntry]:
        return [entry for category in self.categories for entry in category.checks]


def build_report(
    results: Sequence[CheckResult],
    database_name: str | None = None,
    server: str | None = None,
    scanned_at: datetime | None = None,
) -> ScanReport:
    """Build a :class:`ScanReport` from raw results.

    Args:
        results: One result per executed check, in any order.
        database_name: Target database name for the report header.
        server: Server label for the report header.
        scanned_at: Scan timestamp; defaults to now (UTC).

    Returns:
        Report with summary counts and results grouped by category.
        Categories are sorted case-insensitively with "Uncategorized" last;
        checks keep their input order within a category.
    """
    return ScanReport(
        database=ReportDatabase(
            name=database_name or "",
            server=server,
            scanned_at=scanned_at or datetime.now(timezone.utc),
        ),
        summary=_build_summary(results),
        categories=_build_categories(results),
    )


def _build_summary(results: Sequence[CheckResult]) -> ReportSummary:
    summary = ReportSummary()
    for result in results:
        if result.status == Status.PASS:
            summary.passed += 1
        elif result.status == Status.WARNING:
            summary.warnings += 1
        elif result.status == Status.FAIL:
            summary.failed += 1
        summary.duration_ms += result.elapsed_ms
    return summary


def _build_categories(results: Sequence[CheckResult]) -> list[ReportCategory]:
    groups: dict[str, ReportCategory] = {}
    for result in results:
        name = result.category if result.category and result.category.strip() else UNCATEGORIZED
        group = groups.setdefault(name.casefold(), ReportCategory(name=name))
        group.checks.append(_to_entry(result, group.name))

    return sorted(
        groups.values(),
        key=lambda c: (c.name.casefold() == UNCATEGORIZED.casefold(), c.name.casefold()),
    )


def _to_entry(result: CheckResult, category: str) -> ReportEntry:
    entry = ReportEntry(
        id=result.check_id,
        code=result.code or "",
        category=category,
        status=result.status.value,
        title=result.name,
        message=result.message,
        items=list(result.evidence),
        item_count=result.evidence_count,
        duration_ms=result.elapsed_ms,
    )
    if result.status != Status.PASS:
        explanation = get_explanation(result.code, result.evidence_count)
        entry.whats_wrong = explanation.whats_wrong
        entry.why_it_matters = explanation.why_it_matters
        entry.what_to_do_next = explanation.what_to_do_next
    return entry
