"""Tests for the DatabaseDiagnostics library entry point."""

from __future__ import annotations

from sqldiag import DatabaseDiagnostics
from sqldiag.checks.base import BaseCheck
from sqldiag.checks.registry import CheckRegistry
from sqldiag.config import ConnectionConfig, DiagnosticsConfig
from sqldiag.models import Status


class _TableCountCheck(BaseCheck):
    id = 1
    name = "Table Count"
    category = "Keys & Constraints"
    code = "MISSING_PK"

    def run(self, executor):
        table = f"{executor.config.database}.dbo.Audit"
        return self.warning("Found 1 table(s) with no PK", [table])


class TestDatabaseDiagnostics:
    def test_default_port_per_provider(self) -> None:
        postgres = DatabaseDiagnostics(provider="postgresql", database="db")
        assert postgres.connection_config.port == 5432
        assert DatabaseDiagnostics(database="db").connection_config.port == 1433

    def test_connection_string_parsed(self) -> None:
        diagnostics = DatabaseDiagnostics(connection_string="Server=db1;Database=SalesDB;Uid=sa")
        assert diagnostics.connection_config.database == "SalesDB"
        assert diagnostics.connection_config.server == "db1"

    def test_default_registry_uses_display_limit(self) -> None:
        diagnostics = DatabaseDiagnostics(
            database="db", config=DiagnosticsConfig(evidence_display_limit=4)
        )
        assert {c.display_limit for c in diagnostics.registry} == {4}

    def test_scan_builds_report(self, connection_config: ConnectionConfig) -> None:
        diagnostics = DatabaseDiagnostics.from_config(
            connection_config, registry=CheckRegistry([_TableCountCheck()])
        )

        report = diagnostics.scan()

        assert report.database.name == "SalesDB"
        assert report.database.server == "localhost"
        assert report.summary.warnings == 1
        [entry] = report.entries()
        assert entry.items == ["SalesDB.dbo.Audit"]
        assert entry.whats_wrong == "Found 1 table(s) with no primary key"

    def test_run_returns_raw_results(self, connection_config: ConnectionConfig) -> None:
        diagnostics = DatabaseDiagnostics.from_config(
            connection_config, registry=CheckRegistry([_TableCountCheck()])
        )
        [result] = diagnostics.run()
        assert result.status == Status.WARNING

    def test_unusable_connection_gives_empty_report(self) -> None:
        diagnostics = DatabaseDiagnostics(registry=CheckRegistry([_TableCountCheck()]))
        report = diagnostics.scan()
        assert report.categories == []
        assert report.summary.passed == report.summary.warnings == report.summary.failed == 0
