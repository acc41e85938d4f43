"""Tests for CLI commands using Click testing utilities."""

from __future__ import annotations

import json
from unittest.mock import patch

from click.testing import CliRunner
from rich.console import Console

from sqldiag.cli import _build_config, _build_diagnostics, main
from sqldiag.reporting.report_builder import ScanReport, build_report

CREDENTIALS = ["--database", "SalesDB", "--user", "sa", "--password", "test"]


class TestCLI:
    """Tests for the sqldiag CLI commands."""

    def test_main_group_shows_help(self) -> None:
        """Running 'sqldiag --help' should show the help text and exit 0."""
        result = CliRunner().invoke(main, ["--help"])

        assert result.exit_code == 0
        assert "SQLDiag" in result.output
        assert "schema diagnostics" in result.output

    def test_version_flag(self) -> None:
        result = CliRunner().invoke(main, ["--version"])

        assert result.exit_code == 0
        assert "sqldiag" in result.output

    def test_subcommands_registered(self) -> None:
        assert {"scan", "checks"} <= set(main.commands)

    def test_scan_requires_database(self) -> None:
        """Validation errors are printed and the command exits 1."""
        result = CliRunner().invoke(main, ["scan", "--user", "sa", "--password", "test"])

        assert result.exit_code == 1
        assert "Database name is required" in result.output

    def test_scan_rejects_zero_concurrency(self) -> None:
        result = CliRunner().invoke(main, ["scan", *CREDENTIALS, "--concurrency", "0"])
        assert result.exit_code == 2

    def test_scan_console_output(self, sample_report: ScanReport) -> None:
        with patch("sqldiag.cli._build_diagnostics") as mock_build:
            mock_build.return_value.scan.return_value = sample_report
            result = CliRunner().invoke(main, ["scan", *CREDENTIALS])

        assert result.exit_code == 0
        assert "SQLDiag Report" in result.output
        assert "SalesDB" in result.output

    def test_scan_passes_category(self, sample_report: ScanReport) -> None:
        with patch("sqldiag.cli._build_diagnostics") as mock_build:
            mock_build.return_value.scan.return_value = sample_report
            CliRunner().invoke(main, ["scan", *CREDENTIALS, "--category", "Index Health"])

        mock_build.return_value.scan.assert_called_once_with("Index Health")

    def test_scan_json_output(self, sample_report: ScanReport) -> None:
        with patch("sqldiag.cli._build_diagnostics") as mock_build:
            mock_build.return_value.scan.return_value = sample_report
            result = CliRunner().invoke(main, ["scan", *CREDENTIALS, "--format", "json"])

        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["tool"] == "SQLDiag"
        assert data["summary"]["warn"] == 3

    def test_scan_with_no_results(self) -> None:
        with patch("sqldiag.cli._build_diagnostics") as mock_build:
            mock_build.return_value.scan.return_value = build_report([])
            result = CliRunner().invoke(main, ["scan", *CREDENTIALS])

        assert result.exit_code == 0
        assert "No checks were run." in result.output

    def test_checks_lists_catalogue(self) -> None:
        with patch("sqldiag.cli.console", Console(width=200)):
            result = CliRunner().invoke(main, ["checks"])

        assert result.exit_code == 0
        assert "MISSING_PK" in result.output
        assert "INCONSISTENT_FORMATS" in result.output
        assert "Referential Integrity: Relationships & foreign keys" in result.output

    def test_checks_category_filter(self) -> None:
        with patch("sqldiag.cli.console", Console(width=200)):
            result = CliRunner().invoke(main, ["checks", "--category", "index health"])

        assert result.exit_code == 0
        assert "UNUSED_INDEXES" in result.output
        assert "SCHEMA_SUMMARY" in result.output
        assert "MISSING_PK" not in result.output


class TestBuildConfig:
    """Click parameters to connection settings."""

    def test_postgresql_default_port(self) -> None:
        config = _build_config({"provider": "postgresql", "database": "sales", "user": "app"})
        assert config.port == 5432
        assert config.server == "localhost"

    def test_connection_string_without_database(self) -> None:
        config = _build_config({"connection_string": "Server=db1;Database=SalesDB;Uid=sa;Pwd=x"})
        assert config.database == "SalesDB"
        assert config.server == "db1"

    def test_build_diagnostics_uses_concurrency(self) -> None:
        diagnostics = _build_diagnostics(
            {"database": "SalesDB", "user": "sa", "password": "x", "concurrency": 3}
        )
        assert diagnostics.config.max_concurrency == 3
        assert diagnostics.connection_config.database == "SalesDB"

