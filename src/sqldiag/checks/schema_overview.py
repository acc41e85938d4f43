"""Schema Overview: a summary that is shown under every category filter."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqldiag.checks.base import PG_USER_TABLES, BaseCheck, Outcome
from sqldiag.utils.formatting import format_size_mb, plural

if TYPE_CHECKING:
    from sqldiag.execution.query_executor import QueryExecutor

CATEGORY = "Schema Overview"

SUMMARY_SQL = {
    "sqlserver": {
        "schemas": "SELECT COUNT(DISTINCT schema_id) FROM sys.tables WHERE is_ms_shipped = 0",
        "tables": "SELECT COUNT(*) FROM sys.tables WHERE is_ms_shipped = 0",
        "rows": (
            "SELECT COALESCE(SUM(p.rows), 0) FROM sys.partitions p "
            "JOIN sys.tables t ON p.object_id = t.object_id "
            "WHERE t.is_ms_shipped = 0 AND p.index_id IN (0, 1)"
        ),
        "size_mb": (
            "SELECT COALESCE(SUM(ps.reserved_page_count), 0) * 8.0 / 1024 "
            "FROM sys.dm_db_partition_stats ps "
            "JOIN sys.tables t ON ps.object_id = t.object_id WHERE t.is_ms_shipped = 0"
        ),
        "indexes": (
            "SELECT COUNT(*) FROM sys.indexes i "
            "JOIN sys.tables t ON i.object_id = t.object_id WHERE t.is_ms_shipped = 0"
        ),
        "views": "SELECT COUNT(*) FROM sys.views WHERE is_ms_shipped = 0",
        "foreign_keys": "SELECT COUNT(*) FROM sys.foreign_keys",
    },
    "postgresql": {
        "schemas": (
            "SELECT COUNT(DISTINCT c.relnamespace) FROM pg_class c "
            f"JOIN pg_namespace n ON n.oid = c.relnamespace WHERE {PG_USER_TABLES}"
        ),
        "tables": (
            "SELECT COUNT(*) FROM pg_class c "
            f"JOIN pg_namespace n ON n.oid = c.relnamespace WHERE {PG_USER_TABLES}"
        ),
        "rows": "SELECT COALESCE(SUM(n_live_tup), 0) FROM pg_stat_user_tables",
        "size_mb": (
            "SELECT COALESCE(SUM(pg_total_relation_size(relid)), 0) / 1048576.0 "
            "FROM pg_stat_user_tables"
        ),
        "indexes": "SELECT COUNT(*) FROM pg_stat_user_indexes",
        "views": (
            "SELECT COUNT(*) FROM pg_class c JOIN pg_namespace n ON n.oid = c.relnamespace "
            "WHERE c.relkind IN ('v', 'm') "
            "AND n.nspname NOT IN ('pg_catalog', 'information_schema')"
        ),
        "foreign_keys": "SELECT COUNT(*) FROM pg_constraint WHERE contype = 'f'",
    },
}


class SchemaSummaryCheck(BaseCheck):
    """Counts of schemas, tables, rows, size, indexes, views and relationships.

    Always passes unless a query fails; it exists to give context to the
    other findings.
    """

    id = 15
    name = "Schema Summary"
    category = CATEGORY
    code = "SCHEMA_SUMMARY"

    def run(self, executor: QueryExecutor) -> Outcome:
        queries = SUMMARY_SQL[executor.dialect]
        counts = {
            key: executor.run_scalar(sql, default=0)
            for key, sql in queries.items()
        }

        views = int(counts["views"])
        fks = int(counts["foreign_keys"])
        parts = [
            plural(int(counts["schemas"]), "schema"),
            plural(int(counts["tables"]), "table"),
            f"~{int(counts['rows']):,} rows",
            format_size_mb(float(counts["size_mb"])),
            plural(int(counts["indexes"]), "index", "indexes"),
            "no views" if views == 0 else plural(views, "view"),
            "no relationships" if fks == 0 else plural(fks, "relationship"),
        ]
        return self.passed(" • ".join(parts))
