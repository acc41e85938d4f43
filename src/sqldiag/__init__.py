"""SQLDiag: schema diagnostics for SQL Server and PostgreSQL.

Runs a catalogue of read-only checks against a live database (missing
keys, unenforced relationships, orphaned rows, type mismatches, index
health, data quality) and groups the results into a categorized report.
"""

from __future__ import annotations

__version__ = "1.0.0"

import logging

from sqldiag.checks.registry import CheckRegistry, build_registry
from sqldiag.config import ConnectionConfig, DiagnosticsConfig
from sqldiag.models import CheckResult, Status
from sqldiag.reporting.report_builder import ScanReport, build_report
from sqldiag.runner import DiagnosticsRunner

logger = logging.getLogger(__name__)


class DatabaseDiagnostics:
    """Main entry point for the SQLDiag library API.

    Example:
        >>> diagnostics = DatabaseDiagnostics(
        ...     provider="sqlserver",
        ...     server="localhost",
        ...     database="MyDB",
        ...     username="sa",
        ...     password="secret"
        ... )
        >>> report = diagnostics.scan()
        >>> print(f"{report.summary.warnings} warning(s)")
    """

    def __init__(
        self,
        provider: str = "sqlserver",
        server: str = "localhost",
        database: str = "",
        username: str = "",
        password: str = "",
        port: int | None = None,
        connection_string: str = "",
        trusted_connection: bool = False,
        ssl: bool = False,
        config: DiagnosticsConfig | None = None,
        registry: CheckRegistry | None = None,
    ) -> None:
        if connection_string and not database:
            self.connection_config = ConnectionConfig.from_connection_string(
                connection_string, provider
            )
        else:
            self.connection_config = ConnectionConfig(
                provider=provider,
                server=server,
                database=database,
                username=username,
                password=password,
                port=port or (1433 if provider == "sqlserver" else 5432),
                connection_string=connection_string,
                trusted_connection=trusted_connection,
                ssl=ssl,
            )
        self.config = config or DiagnosticsConfig()
        self.registry = registry or build_registry(
            display_limit=self.config.evidence_display_limit
        )

    @classmethod
    def from_config(
        cls,
        connection_config: ConnectionConfig,
        config: DiagnosticsConfig | None = None,
        registry: CheckRegistry | None = None,
    ) -> DatabaseDiagnostics:
        """Build from a prepared :class:`ConnectionConfig`."""
        diagnostics = cls(provider=connection_config.provider, config=config, registry=registry)
        diagnostics.connection_config = connection_config
        return diagnostics

    def run(self, category: str | None = None) -> list[CheckResult]:
        """Run the checks and return raw results in completion order."""
        runner = DiagnosticsRunner(
            registry=self.registry,
            config=self.config,
            provider=self.connection_config.provider,
        )
        return runner.run(self.connection_config, category)

    def scan(self, category: str | None = None) -> ScanReport:
        """Run the checks and build the categorized report."""
        results = self.run(category)
        logger.info("Scan finished with %d result(s)", len(results))
        return build_report(
            results,
            database_name=self.connection_config.database,
            server=self.connection_config.server,
        )


__all__ = [
    "__version__",
    "CheckRegistry",
    "CheckResult",
    "ConnectionConfig",
    "DatabaseDiagnostics",
    "DiagnosticsConfig",
    "DiagnosticsRunner",
    "ScanReport",
    "Status",
    "build_registry",
    "build_report",
]
