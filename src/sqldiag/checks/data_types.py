"""Data Type Consistency checks."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqldiag.analyzers.relationship_inference import RelationshipAnalyzer
from sqldiag.checks.base import PG_USER_TABLES, BaseCheck, CatalogListCheck, Outcome

if TYPE_CHECKING:
    from sqldiag.execution.query_executor import QueryExecutor

CATEGORY = "Data Type Consistency"


class ForeignKeyTypeMismatchCheck(BaseCheck):
    """Inferred parent/child columns declared with different data types."""

    id = 9
    name = "ForeignKey Type Mismatch"
    category = CATEGORY
    code = "FK_TYPE_MISMATCH"

    def run(self, executor: QueryExecutor) -> Outcome:
        mismatches = RelationshipAnalyzer(executor).type_mismatches()
        items = [
            f"{edge.child} ({edge.child.data_type}) vs {edge.parent} ({edge.parent.data_type})"
            for edge in mismatches
        ]
        if not items:
            return self.passed("No FK type mismatches found")
        return self.warning(f"Found {len(items)} mismatch(es)", items)


class MoneyStoredAsFloatCheck(CatalogListCheck):
    """Total/Amount/Price/Money columns stored as approximate numerics."""

    id = 10
    name = "Money Stored As Float"
    category = CATEGORY
    code = "MONEY_AS_FLOAT"
    display_limit = 15

    pass_message = "No money-like columns stored as float/real"
    warning_message = "Found {count} column(s)"

    sql = {
        "sqlserver": """
            SELECT s.name, t.name, c.name
            FROM sys.columns c
            JOIN sys.types ty ON ty.user_type_id = c.user_type_id
            JOIN sys.tables t ON t.object_id = c.object_id
            JOIN sys.schemas s ON s.schema_id = t.schema_id
            WHERE t.is_ms_shipped = 0
              AND s.name NOT IN ('sys', 'INFORMATION_SCHEMA')
              AND ty.name IN ('float', 'real')
              AND (c.name LIKE '%Total%' OR c.name LIKE '%Amount%'
                   OR c.name LIKE '%Price%' OR c.name LIKE '%Money%')
            ORDER BY s.name, t.name, c.name
        """,
        "postgresql": f"""
            SELECT n.nspname, c.relname, a.attname
            FROM pg_attribute a
            JOIN pg_class c ON c.oid = a.attrelid
            JOIN pg_namespace n ON n.oid = c.relnamespace
            WHERE {PG_USER_TABLES}
              AND a.attnum > 0 AND NOT a.attisdropped
              AND format_type(a.atttypid, NULL) IN ('double precision', 'real')
              AND (a.attname ILIKE '%total%' OR a.attname ILIKE '%amount%'
                   OR a.attname ILIKE '%price%' OR a.attname ILIKE '%money%')
            ORDER BY 1, 2, 3
        """,
    }
