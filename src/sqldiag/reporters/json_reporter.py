"""JSON rendering of a scan report."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

from sqldiag import __version__

if TYPE_CHECKING:
    from sqldiag.reporting.report_builder import ScanReport


class JSONReporter:
    """Serialize a :class:`ScanReport` for CI pipelines and dashboards.

    Writing the text anywhere is left to the caller.
    """

    def __init__(self, report: ScanReport) -> None:
        self.report = report

    def to_dict(self) -> dict[str, Any]:
        data = {"tool": "SQLDiag", "version": __version__}
        data.update(self.report.to_dict())
        return data

    def render(self, indent: int | None = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent, default=str, ensure_ascii=False)
