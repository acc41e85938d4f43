"""Console reporter: Rich terminal output of a scan report."""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from sqldiag.reporting.display_names import category_display_name, check_title, status_label
from sqldiag.utils.formatting import format_duration, status_color, summarize_items, truncate

if TYPE_CHECKING:
    from sqldiag.reporting.report_builder import ReportCategory, ScanReport


class ConsoleReporter:
    """Render a scan report to the terminal using Rich.

    One table per category, followed by the explanations for every check
    that did not pass.
    """

    def __init__(
        self, report: ScanReport, console: Console | None = None, item_limit: int = 5
    ) -> None:
        self.report = report
        self.console = console or Console()
        self.item_limit = item_limit

    def print_report(self) -> None:
        """Print the full report to the console."""
        self._print_header()
        for category in self.report.categories:
            self._print_category(category)
        self._print_findings()

    def _print_header(self) -> None:
        db = self.report.database
        summary = self.report.summary
        server = f" on {db.server}" if db.server else ""
        self.console.print(
            Panel(
                f"[bold white]SQLDiag Report[/]\n"
                f"Database: {escape(db.name or '(unknown)')}{escape(server)}\n"
                f"Scanned: {db.scanned_at.strftime('%Y-%m-%d %H:%M:%S %Z')}\n"
                f"[green]{summary.passed} passed[/]  "
                f"[yellow]{summary.warnings} warning(s)[/]  "
                f"[red]{summary.failed} failed[/]  "
                f"({format_duration(summary.duration_ms)} of check time)",
                style="bold blue",
            )
        )

    def _print_category(self, category: ReportCategory) -> None:
        table = Table(title=f"{category.name}: {category_display_name(category.name)}")
        table.add_column("#", justify="right", style="dim")
        table.add_column("Check", style="bold")
        table.add_column("Status")
        table.add_column("Items", justify="right")
        table.add_column("Message")

        for entry in category.checks:
            color = status_color(entry.status)
            table.add_row(
                str(entry.id),
                check_title(entry.code, entry.title),
                f"[{color}]{entry.status}[/]",
                str(entry.item_count) if entry.item_count else "-",
                escape(truncate(entry.message, 100)),
            )

        self.console.print(table)

    def _print_findings(self) -> None:
        failing = [e for e in self.report.entries() if e.whats_wrong is not None]
        if not failing:
            self.console.print(f"\n[green]{status_label('PASS')}[/green]")
            return

        self.console.print(f"\n[bold]{status_label('WARNING')}[/bold]")
        for entry in failing:
            lines = [f"[bold]{entry.whats_wrong}[/]"]
            if entry.why_it_matters:
                lines.append(f"Why it matters: {entry.why_it_matters}")
            lines.append(f"Next step: {entry.what_to_do_next}")
            if entry.items:
                lines.append(
                    "Details: " + escape(summarize_items(entry.items, self.item_limit, ", "))
                )
            else:
                lines.append(f"Details: {escape(entry.message)}")
            self.console.print(
                Panel(
                    "\n".join(lines),
                    title=check_title(entry.code, entry.title),
                    style=status_color(entry.status),
                )
            )
