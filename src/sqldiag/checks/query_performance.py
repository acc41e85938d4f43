"""Query Performance checks, based on cumulative statement statistics."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqldiag.checks.base import CatalogListCheck, Outcome

if TYPE_CHECKING:
    from sqldiag.execution.query_executor import QueryExecutor, Row

CATEGORY = "Query Performance"

SNIPPET_LENGTH = 80

PG_STAT_STATEMENTS_SQL = (
    "SELECT COUNT(*) FROM pg_extension WHERE extname = 'pg_stat_statements'"
)


class TopSlowQueriesCheck(CatalogListCheck):
    """The five statements with the highest total elapsed time.

    SQL Server reads ``sys.dm_exec_query_stats``. PostgreSQL needs the
    ``pg_stat_statements`` extension; without it the check passes with a note.
    """

    id = 14
    name = "Top Slow Queries"
    category = CATEGORY
    code = "TOP_SLOW_QUERIES"
    display_limit = 5
    separator = " | "

    pass_message = "No query stats available (or empty)"
    warning_message = "Top slow"

    sql = {
        "sqlserver": """
            SELECT TOP 5
                qs.total_elapsed_time / 1000,
                qs.total_logical_reads,
                SUBSTRING(
                    st.text,
                    (qs.statement_start_offset / 2) + 1,
                    ((CASE qs.statement_end_offset
                          WHEN -1 THEN DATALENGTH(st.text)
                          ELSE qs.statement_end_offset
                      END - qs.statement_start_offset) / 2) + 1
                )
            FROM sys.dm_exec_query_stats qs
            CROSS APPLY sys.dm_exec_sql_text(qs.sql_handle) st
            WHERE st.dbid = DB_ID()
            ORDER BY qs.total_elapsed_time DESC
        """,
        "postgresql": """
            SELECT CAST(s.total_exec_time AS bigint),
                   s.shared_blks_hit + s.shared_blks_read,
                   s.query
            FROM pg_stat_statements s
            WHERE s.dbid = (SELECT oid FROM pg_database WHERE datname = current_database())
            ORDER BY s.total_exec_time DESC
            LIMIT 5
        """,
    }

    def describe(self, row: Row) -> str:
        text = " ".join(str(row[2] or "").split())
        if len(text) > SNIPPET_LENGTH:
            text = text[:SNIPPET_LENGTH] + "..."
        return f"[{row[0]}ms, {row[1]} reads] {text}"

    def run(self, executor: QueryExecutor) -> Outcome:
        if executor.dialect == "postgresql" and not executor.run_scalar(
            PG_STAT_STATEMENTS_SQL, default=0
        ):
            return self.passed("Query stats unavailable: pg_stat_statements is not installed")
        return super().run(executor)
