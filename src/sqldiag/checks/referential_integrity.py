"""Referential Integrity checks.

Missing foreign keys and orphan records start from relationships inferred
by column name (see :mod:`sqldiag.analyzers.relationship_inference`);
circular dependencies only look at declared constraints.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqldiag.analyzers.cycle_detector import find_table_cycles
from sqldiag.analyzers.relationship_inference import RelationshipAnalyzer, orphan_count_sql
from sqldiag.checks.base import BaseCheck, CatalogListCheck, Outcome, first_int
from sqldiag.models import Candidate

if TYPE_CHECKING:
    from sqldiag.execution.query_executor import QueryExecutor, Row

CATEGORY = "Referential Integrity"


class MissingForeignKeysCheck(BaseCheck):
    """Name-matched parent/child columns with no constraint enforcing them."""

    id = 7
    name = "Missing Foreign Keys"
    category = CATEGORY
    code = "MISSING_FOREIGN_KEYS"

    def run(self, executor: QueryExecutor) -> Outcome:
        missing = RelationshipAnalyzer(executor).missing_foreign_keys()
        items = [str(edge) for edge in missing]
        if not items:
            return self.passed("No missing FK relationships found (all enforced by DB or N/A)")
        return self.warning(
            f"Found {len(items)} relationship(s) without FK "
            "(consider adding FK or document as app-managed)",
            items,
        )


class OrphanRecordsCheck(BaseCheck):
    """Child rows whose value matches no row of the inferred parent.

    One left-anti-join count per inferred relationship, sent through the
    batched executor. A relationship whose count query cannot run (for
    example incompatible column types) is skipped and logged.
    """

    id = 8
    name = "Orphan Records"
    category = CATEGORY
    code = "ORPHAN_RECORDS"

    def run(self, executor: QueryExecutor) -> Outcome:
        edges = RelationshipAnalyzer(executor).inferred_edges()
        candidates = [
            Candidate(str(edge), orphan_count_sql(edge, executor.dialect)) for edge in edges
        ]
        results = self.run_candidates(executor, candidates)

        items = []
        for candidate in candidates:
            count = first_int(results.get(candidate.label, []))
            if count > 0:
                items.append(f"{candidate.label} ({count} orphan(s))")

        if not items:
            return self.passed("No orphan records found")
        return self.warning("Found orphan(s)", items)


class NullableForeignKeyColumnsCheck(CatalogListCheck):
    """Columns of declared foreign keys that allow NULL."""

    id = 23
    name = "Nullable FK Columns"
    category = CATEGORY
    code = "NULLABLE_FK_COLUMNS"
    separator = "; "

    pass_message = "No nullable FK columns found"
    warning_message = "FK columns that allow NULL; review if required"

    sql = {
        "sqlserver": """
            SELECT OBJECT_SCHEMA_NAME(fk.parent_object_id), OBJECT_NAME(fk.parent_object_id),
                   fk.name, c.name
            FROM sys.foreign_keys fk
            JOIN sys.foreign_key_columns fkc ON fkc.constraint_object_id = fk.object_id
            JOIN sys.columns c
                ON c.object_id = fkc.parent_object_id AND c.column_id = fkc.parent_column_id
            JOIN sys.tables t ON t.object_id = fk.parent_object_id AND t.is_ms_shipped = 0
            WHERE c.is_nullable = 1
            ORDER BY 1, 2, 3
        """,
        "postgresql": """
            SELECT n.nspname, c.relname, con.conname, a.attname
            FROM pg_constraint con
            CROSS JOIN LATERAL unnest(con.conkey) AS k(attnum)
            JOIN pg_class c ON c.oid = con.conrelid
            JOIN pg_namespace n ON n.oid = c.relnamespace
            JOIN pg_attribute a ON a.attrelid = con.conrelid AND a.attnum = k.attnum
            WHERE con.contype = 'f' AND NOT a.attnotnull
            ORDER BY 1, 2, 3
        """,
    }

    def describe(self, row: Row) -> str:
        return f"{row[0]}.{row[1]}.{row[3]} (FK: {row[2]})"


class CircularForeignKeyCheck(BaseCheck):
    """Tables that take part in a cycle of declared foreign keys."""

    id = 25
    name = "Circular FK Dependencies"
    category = CATEGORY
    code = "CIRCULAR_FK"

    def run(self, executor: QueryExecutor) -> Outcome:
        tables = find_table_cycles(RelationshipAnalyzer(executor).declared_edges())
        if not tables:
            return self.passed("No circular FK dependencies")
        return self.warning("Circular FK dependency detected", tables)
