"""
SQLDiag -- Demo Scan Script

Shows how to use SQLDiag as a Python library: describe the target
database, run the diagnostics (optionally for one category), and read the
categorized report or hand it to a reporter.

NOTE: This is a demonstration script. It needs a real database. Replace
the placeholder connection values with your own before running it.
"""

import logging

from sqldiag import DatabaseDiagnostics, DiagnosticsConfig, ScanReport
from sqldiag.reporters.console_reporter import ConsoleReporter
from sqldiag.reporters.json_reporter import JSONReporter

logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

# ---------------------------------------------------------------------------
# 1. Describe the target database
# ---------------------------------------------------------------------------
# SQL Server and PostgreSQL are supported. Every query SQLDiag sends is
# read-only.

diagnostics = DatabaseDiagnostics(
    provider="sqlserver",
    server="your-server.example.com",
    database="YourDatabase",
    username="your_username",
    password="your_password",
    config=DiagnosticsConfig(max_concurrency=4, batch_size=20),
)

# PostgreSQL with a libpq connection string (uncomment to use):
# diagnostics = DatabaseDiagnostics(
#     provider="postgresql",
#     connection_string="host=localhost port=5432 dbname=sales user=app password=secret",
# )


# ---------------------------------------------------------------------------
# 2. Run every check
# ---------------------------------------------------------------------------
# Checks run concurrently. A failing check becomes a FAIL entry in the
# report; it never stops the others.

report: ScanReport = diagnostics.scan()

print(f"{report.summary.passed} passed, {report.summary.warnings} warning(s), "
      f"{report.summary.failed} failed")

for category in report.categories:
    print(f"\n{category.name}")
    for entry in category.checks:
        print(f"  [{entry.status}] #{entry.id} {entry.title}: {entry.message}")
        if entry.whats_wrong:
            print(f"      {entry.whats_wrong}. Next: {entry.what_to_do_next}")


# ---------------------------------------------------------------------------
# 3. Only one category
# ---------------------------------------------------------------------------
# The Schema Overview summary is always included, whatever the filter.

integrity = diagnostics.scan(category="Referential Integrity")
for entry in integrity.entries():
    print(f"{entry.code}: {entry.item_count} item(s)")


# ---------------------------------------------------------------------------
# 4. Render the report
# ---------------------------------------------------------------------------

ConsoleReporter(report).print_report()

with open("sqldiag-report.json", "w", encoding="utf-8") as f:
    f.write(JSONReporter(report).render())
print("JSON report saved to sqldiag-report.json")
