"""Index Health checks, based on usage and physical statistics."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqldiag.checks.base import CatalogListCheck

if TYPE_CHECKING:
    from sqldiag.execution.query_executor import Row

CATEGORY = "Index Health"


class MissingIndexSuggestionsCheck(CatalogListCheck):
    """Tables the optimizer thinks need an index.

    SQL Server reports this through the missing-index DMVs. PostgreSQL has
    no equivalent, so large tables read mostly by sequential scans are
    reported instead.
    """

    id = 11
    name = "Missing Index Suggestions"
    category = CATEGORY
    code = "MISSING_INDEX_SUGGESTIONS"
    display_limit = 15

    pass_message = "No missing index suggestions"
    warning_message = "Found {count} table(s) with missing index suggestion(s)"

    sql = {
        "sqlserver": """
            SELECT DISTINCT s.name, t.name
            FROM sys.dm_db_missing_index_details mid
            JOIN sys.tables t ON t.object_id = mid.object_id
            JOIN sys.schemas s ON s.schema_id = t.schema_id
            ORDER BY s.name, t.name
        """,
        "postgresql": """
            SELECT schemaname, relname
            FROM pg_stat_user_tables
            WHERE seq_scan > COALESCE(idx_scan, 0)
              AND n_live_tup >= 10000
            ORDER BY 1, 2
        """,
    }


class UnusedIndexesCheck(CatalogListCheck):
    """Indexes with no reads since statistics were last reset."""

    id = 12
    name = "Unused Indexes"
    category = CATEGORY
    code = "UNUSED_INDEXES"
    display_limit = 15

    pass_message = "No unused indexes found"
    warning_message = "Found {count} unused index(es)"

    sql = {
        "sqlserver": """
            SELECT s.name, t.name, i.name
            FROM sys.indexes i
            JOIN sys.tables t ON t.object_id = i.object_id
            JOIN sys.schemas s ON s.schema_id = t.schema_id
            LEFT JOIN sys.dm_db_index_usage_stats u
                ON u.object_id = i.object_id AND u.index_id = i.index_id
               AND u.database_id = DB_ID()
            WHERE i.type > 0
              AND i.name IS NOT NULL
              AND t.is_ms_shipped = 0
              AND s.name NOT IN ('sys', 'INFORMATION_SCHEMA')
              AND (u.user_seeks IS NULL OR u.user_seeks = 0)
              AND (u.user_scans IS NULL OR u.user_scans = 0)
            ORDER BY s.name, t.name, i.name
        """,
        # Constraint-backing indexes are needed whether or not they are read.
        "postgresql": """
            SELECT s.schemaname, s.relname, s.indexrelname
            FROM pg_stat_user_indexes s
            JOIN pg_index x ON x.indexrelid = s.indexrelid
            WHERE s.idx_scan = 0
              AND NOT x.indisprimary
              AND NOT x.indisunique
            ORDER BY 1, 2, 3
        """,
    }


class FragmentationCheck(CatalogListCheck):
    """Indexes of at least 8 pages with more than 10% fragmentation."""

    id = 13
    name = "Fragmentation"
    category = CATEGORY
    code = "FRAGMENTATION"
    providers = ("sqlserver",)

    pass_message = "No significant index fragmentation"
    warning_message = "Found {count} fragmented index(es)"

    sql = {
        "sqlserver": """
            SELECT s.name, t.name, i.name,
                   CAST(ps.avg_fragmentation_in_percent AS DECIMAL(5, 2))
            FROM sys.dm_db_index_physical_stats(DB_ID(), NULL, NULL, NULL, 'LIMITED') ps
            JOIN sys.indexes i ON i.object_id = ps.object_id AND i.index_id = ps.index_id
            JOIN sys.tables t ON t.object_id = ps.object_id
            JOIN sys.schemas s ON s.schema_id = t.schema_id
            WHERE ps.avg_fragmentation_in_percent > 10
              AND ps.page_count >= 8
              AND i.name IS NOT NULL
              AND t.is_ms_shipped = 0
              AND s.name NOT IN ('sys', 'INFORMATION_SCHEMA')
            ORDER BY ps.avg_fragmentation_in_percent DESC
        """,
    }

    def describe(self, row: Row) -> str:
        return f"{row[0]}.{row[1]}.{row[2]} ({row[3]}%)"
