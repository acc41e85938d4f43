"""Data Quality checks. These sample table data, not just the catalog."""

from __future__ import annotations

from collections.abc import Iterable
from typing import TYPE_CHECKING

from sqldiag.checks.base import PG_USER_TABLES, BaseCheck, Outcome, first_int
from sqldiag.models import Candidate
from sqldiag.utils.sql_quoting import qualified_name, quote_identifier

if TYPE_CHECKING:
    from sqldiag.execution.query_executor import QueryExecutor

CATEGORY = "Data Quality"

MAX_CANDIDATES = 25


def _candidate_columns(executor: QueryExecutor, sql: dict[str, str]) -> list[tuple[str, str, str]]:
    rows = executor.run_rows(sql[executor.dialect])
    columns = [(str(r[0]), str(r[1]), str(r[2])) for r in rows if len(r) >= 3]
    return columns[:MAX_CANDIDATES]


class DuplicateRecordsCheck(BaseCheck):
    """Repeated values in columns that look like natural keys."""

    id = 17
    name = "Duplicate Records"
    category = CATEGORY
    code = "DUPLICATE_RECORDS"

    candidate_sql = {
        "sqlserver": """
            SELECT s.name, t.name, c.name
            FROM sys.columns c
            JOIN sys.tables t ON t.object_id = c.object_id
            JOIN sys.schemas s ON s.schema_id = t.schema_id
            WHERE t.is_ms_shipped = 0
              AND (c.name IN ('Code', 'Email', 'Sku', 'Name')
                   OR c.name LIKE '%Code' OR c.name LIKE '%Email' OR c.name LIKE '%Sku')
            ORDER BY s.name, t.name, c.name
        """,
        "postgresql": f"""
            SELECT n.nspname, c.relname, a.attname
            FROM pg_attribute a
            JOIN pg_class c ON c.oid = a.attrelid
            JOIN pg_namespace n ON n.oid = c.relnamespace
            WHERE {PG_USER_TABLES}
              AND a.attnum > 0 AND NOT a.attisdropped
              AND (a.attname ILIKE 'name'
                   OR a.attname ILIKE '%code' OR a.attname ILIKE '%email'
                   OR a.attname ILIKE '%sku')
            ORDER BY 1, 2, 3
        """,
    }

    def run(self, executor: QueryExecutor) -> Outcome:
        dialect = executor.dialect
        candidates = []
        for schema, table, column in _candidate_columns(executor, self.candidate_sql):
            col = quote_identifier(column, dialect)
            sql = (
                f"SELECT COUNT(*) AS duplicate_values FROM ("
                f"SELECT {col} FROM {qualified_name(schema, table, dialect)} "
                f"WHERE {col} IS NOT NULL GROUP BY {col} HAVING COUNT(*) > 1) x"
            )
            candidates.append(Candidate(f"{schema}.{table}.{column}", sql))

        results = self.run_candidates(executor, candidates)

        items = []
        for candidate in candidates:
            count = first_int(results.get(candidate.label, []))
            if count > 0:
                items.append(f"{candidate.label} ({count} duplicate value(s))")

        if not items:
            return self.passed("No duplicate values found in key-like columns")
        return self.warning(f"Found duplicates in {len(items)} column(s)", items)


def detect_inconsistencies(values: Iterable[str | None]) -> tuple[list[str], int]:
    """Find spellings of the same value that differ in case or padding.

    Returns:
        ``(casing_examples, whitespace_count)``: up to five original
        spellings from every group that has more than one, and the number
        of values with leading or trailing whitespace.
    """
    groups: dict[str, list[str]] = {}
    whitespace_count = 0
    for value in values:
        if value is None:
            continue
        trimmed = value.strip()
        if value != trimmed:
            whitespace_count += 1
        if not trimmed:
            continue
        spellings = groups.setdefault(trimmed.lower(), [])
        if value not in spellings:
            spellings.append(value)

    casing_examples: list[str] = []
    for spellings in groups.values():
        if len(spellings) > 1:
            casing_examples.extend(spellings[:5])
    return casing_examples, whitespace_count


class InconsistentFormatsCheck(BaseCheck):
    """Status-like text columns whose values differ only in casing or padding."""

    id = 28
    name = "Inconsistent Formats"
    category = CATEGORY
    code = "INCONSISTENT_FORMATS"

    sample_size = 100
    batch_size = 15

    candidate_sql = {
        "sqlserver": """
            SELECT s.name, t.name, c.name
            FROM sys.columns c
            JOIN sys.tables t ON t.object_id = c.object_id
            JOIN sys.schemas s ON s.schema_id = t.schema_id
            JOIN sys.types ty ON ty.user_type_id = c.user_type_id
            WHERE t.is_ms_shipped = 0
              AND s.name NOT IN ('sys', 'INFORMATION_SCHEMA')
              AND ty.name IN ('nvarchar', 'varchar', 'nchar', 'char')
              AND (c.name LIKE '%Status%' OR c.name LIKE '%Type%'
                   OR c.name LIKE '%Gender%' OR c.name LIKE '%State%' OR c.name LIKE '%Role%')
            ORDER BY s.name, t.name, c.name
        """,
        "postgresql": f"""
            SELECT n.nspname, c.relname, a.attname
            FROM pg_attribute a
            JOIN pg_class c ON c.oid = a.attrelid
            JOIN pg_namespace n ON n.oid = c.relnamespace
            WHERE {PG_USER_TABLES}
              AND a.attnum > 0 AND NOT a.attisdropped
              AND format_type(a.atttypid, NULL) IN ('character varying', 'character', 'text')
              AND (a.attname ILIKE '%status%' OR a.attname ILIKE '%type%'
                   OR a.attname ILIKE '%gender%' OR a.attname ILIKE '%state%'
                   OR a.attname ILIKE '%role%')
            ORDER BY 1, 2, 3
        """,
    }

    def sample_sql(self, schema: str, table: str, column: str, dialect: str) -> str:
        col = quote_identifier(column, dialect)
        source = qualified_name(schema, table, dialect)
        if dialect == "sqlserver":
            # Binary collation so DISTINCT keeps 'Active' and 'active' apart.
            return (
                f"SELECT DISTINCT TOP {self.sample_size} "
                f"{col} COLLATE Latin1_General_BIN2 AS val "
                f"FROM {source} WHERE {col} IS NOT NULL"
            )
        return (
            f"SELECT DISTINCT {col} AS val FROM {source} "
            f"WHERE {col} IS NOT NULL LIMIT {self.sample_size}"
        )

    def run(self, executor: QueryExecutor) -> Outcome:
        candidates = [
            Candidate(f"{schema}.{table}.{column}", self.sample_sql(schema, table, column, executor.dialect))
            for schema, table, column in _candidate_columns(executor, self.candidate_sql)
        ]
        results = self.run_candidates(executor, candidates, batch_size=self.batch_size)

        items = []
        for candidate in candidates:
            rows = results.get(candidate.label, [])
            values = [None if row[0] is None else str(row[0]) for row in rows if row]
            casing, whitespace = detect_inconsistencies(values)
            if casing:
                examples = ", ".join(f"'{value}'" for value in casing[:5])
                items.append(f"{candidate.label}: mixed casing (e.g. {examples})")
            if whitespace:
                items.append(
                    f"{candidate.label}: leading/trailing whitespace in {whitespace} value(s)"
                )

        if not items:
            return self.passed("No inconsistent formats found in status-like columns")
        return self.warning("Found format issue(s)", items)
