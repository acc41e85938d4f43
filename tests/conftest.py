"""Shared test fixtures for a fictional SalesDB."""

from __future__ import annotations

import sqlite3
from datetime import datetime, timezone
from pathlib import Path
from typing import Any
from unittest.mock import MagicMock

import pytest

from sqldiag.analyzers.relationship_inference import (
    ALL_COLUMNS_SQL,
    DECLARED_EDGES_SQL,
    KEY_COLUMNS_SQL,
)
from sqldiag.config import ConnectionConfig
from sqldiag.connectors.base import BaseConnector
from sqldiag.errors import Fault, FaultKind, QueryError
from sqldiag.execution.query_executor import QueryExecutor
from sqldiag.models import CheckResult, Status
from sqldiag.reporting.report_builder import ScanReport, build_report


class SqliteConnector(BaseConnector):
    """Test-only connector over a SQLite file, speaking ANSI-quoted SQL."""

    dialect = "postgresql"

    def __init__(self, config: ConnectionConfig, path: Path) -> None:
        super().__init__(config)
        self.path = path

    def connect(self) -> None:
        self._connection = sqlite3.connect(str(self.path))

    def disconnect(self) -> None:
        if self._connection is not None:
            self._connection.close()
            self._connection = None

    def fetch(self, query, timeout=None):  # type: ignore[override]
        try:
            cursor = self._connection.execute(query)
            columns = [d[0] for d in cursor.description] if cursor.description else []
            return columns, [tuple(row) for row in cursor.fetchall()]
        except sqlite3.Error as exc:
            raise QueryError(Fault(FaultKind.OTHER, "", str(exc))) from exc


@pytest.fixture
def connection_config() -> ConnectionConfig:
    """Standard SQL Server connection config."""
    return ConnectionConfig(
        provider="sqlserver",
        server="localhost",
        database="SalesDB",
        username="sa",
        password="test-password",
        port=1433,
    )


@pytest.fixture
def sales_db(tmp_path: Path) -> Path:
    """SQLite SalesDB with two orphaned orders and one NULL customer reference."""
    path = tmp_path / "sales.db"
    conn = sqlite3.connect(str(path))
    conn.executescript(
        """
        CREATE TABLE Customers (CustomerId INTEGER PRIMARY KEY, Name TEXT, Email TEXT);
        CREATE TABLE Orders (OrderId INTEGER PRIMARY KEY, CustomerId INTEGER, Total REAL);
        CREATE TABLE Products (ProductId INTEGER PRIMARY KEY, Sku TEXT, Status TEXT);

        INSERT INTO Customers VALUES (1, 'Ada', 'ada@example.com');
        INSERT INTO Customers VALUES (2, 'Grace', 'grace@example.com');
        INSERT INTO Customers VALUES (3, 'Ada', 'ada@example.com');

        INSERT INTO Orders VALUES (10, 1, 25.0);
        INSERT INTO Orders VALUES (11, 2, 14.5);
        INSERT INTO Orders VALUES (12, 99, 3.0);
        INSERT INTO Orders VALUES (13, 98, 8.0);
        INSERT INTO Orders VALUES (14, NULL, 1.0);
        INSERT INTO Orders VALUES (15, 1, 2.0);

        INSERT INTO Products VALUES (1, 'SKU-1', 'Active');
        INSERT INTO Products VALUES (2, 'SKU-2', 'active');
        INSERT INTO Products VALUES (3, 'SKU-3', 'Retired ');
        """
    )
    conn.commit()
    conn.close()
    return path


@pytest.fixture
def sqlite_executor(sales_db: Path) -> QueryExecutor:
    """QueryExecutor whose round trips go to the SQLite SalesDB."""
    config = ConnectionConfig(provider="postgresql", server="local", database="SalesDB")
    return QueryExecutor(config, connector_factory=lambda cfg: SqliteConnector(cfg, sales_db))


# ── Catalog rows for MagicMock executors ────────────────────────────

# (schema, table, column, type) of single-column PK/unique keys
MOCK_KEY_COLUMNS = [
    ("dbo", "Customers", "CustomerId", "int"),
    ("dbo", "Orders", "OrderId", "int"),
    ("dbo", "Products", "ProductId", "int"),
    ("sales", "Regions", "RegionCode", "char"),
]

MOCK_ALL_COLUMNS = [
    ("dbo", "Customers", "CustomerId", "int"),
    ("dbo", "Customers", "Name", "nvarchar"),
    ("dbo", "Customers", "RegionCode", "nvarchar"),
    ("dbo", "OrderLines", "OrderId", "int"),
    ("dbo", "OrderLines", "ProductId", "bigint"),
    ("dbo", "Orders", "CustomerId", "int"),
    ("dbo", "Orders", "OrderId", "int"),
    ("dbo", "Products", "ProductId", "int"),
    ("sales", "Regions", "RegionCode", "char"),
]

# (child schema, table, column, parent schema, table, column)
MOCK_DECLARED_EDGES = [
    ("dbo", "OrderLines", "OrderId", "dbo", "Orders", "OrderId"),
]


def _catalog_rows(sql: str, timeout: Any = None) -> list[tuple[Any, ...]]:
    if sql == KEY_COLUMNS_SQL["sqlserver"]:
        return MOCK_KEY_COLUMNS
    if sql == ALL_COLUMNS_SQL["sqlserver"]:
        return MOCK_ALL_COLUMNS
    if sql == DECLARED_EDGES_SQL["sqlserver"]:
        return MOCK_DECLARED_EDGES
    raise AssertionError(f"unexpected query: {sql[:60]}")


@pytest.fixture
def mock_executor() -> MagicMock:
    """Executor double answering the relationship catalog queries for SalesDB."""
    executor = MagicMock()
    executor.provider = "sqlserver"
    executor.dialect = "sqlserver"
    executor.run_rows.side_effect = _catalog_rows
    return executor


@pytest.fixture
def sample_results() -> list[CheckResult]:
    """Results from a typical run, in completion order."""
    return [
        CheckResult(
            check_id=8,
            name="Orphan Records",
            status=Status.WARNING,
            message="Found orphan(s): dbo.Orders.CustomerId -> dbo.Customers (2 orphan(s))",
            elapsed_ms=40,
            category="Referential Integrity",
            code="ORPHAN_RECORDS",
            evidence=["dbo.Orders.CustomerId -> dbo.Customers (2 orphan(s))"],
        ),
        CheckResult(
            check_id=15,
            name="Schema Summary",
            status=Status.PASS,
            message="1 schema • 3 tables",
            elapsed_ms=12,
            category="Schema Overview",
            code="SCHEMA_SUMMARY",
        ),
        CheckResult(
            check_id=1,
            name="Missing Primary Keys",
            status=Status.WARNING,
            message="Found 2 table(s) with no PK: dbo.Audit, dbo.Staging",
            elapsed_ms=9,
            category="Keys & Constraints",
            code="MISSING_PK",
            evidence=["dbo.Audit", "dbo.Staging"],
        ),
        CheckResult(
            check_id=7,
            name="Missing Foreign Keys",
            status=Status.FAIL,
            message="Query failed | TIMEOUT | Code: HYT00 | Query timeout expired",
            elapsed_ms=10_000,
            category="referential integrity",
            code="MISSING_FOREIGN_KEYS",
        ),
        CheckResult(
            check_id=99,
            name="Custom Check",
            status=Status.WARNING,
            message="Something odd",
            elapsed_ms=1,
            category=None,
            code="CUSTOM_THING",
            evidence=["x"],
        ),
    ]


@pytest.fixture
def sample_report(sample_results: list[CheckResult]) -> ScanReport:
    """Report built from ``sample_results`` for SalesDB on db1."""
    return build_report(
        sample_results,
        database_name="SalesDB",
        server="db1",
        scanned_at=datetime(2026, 3, 1, 9, 30, tzinfo=timezone.utc),
    )
