"""Schema & Structure checks."""

from __future__ import annotations

from sqldiag.checks.base import PG_USER_TABLES, CatalogListCheck

CATEGORY = "Schema & Structure"


class HeapTablesCheck(CatalogListCheck):
    """Tables with no clustered index. PostgreSQL tables are always heaps."""

    id = 2
    name = "Heap Tables"
    category = CATEGORY
    code = "HEAP_TABLES"
    providers = ("sqlserver",)
    display_limit = 15

    pass_message = "No heap tables found"
    warning_message = "Found {count} heap table(s)"

    sql = {
        "sqlserver": """
            SELECT s.name, t.name
            FROM sys.tables t
            JOIN sys.schemas s ON t.schema_id = s.schema_id
            WHERE t.is_ms_shipped = 0
              AND s.name NOT IN ('sys', 'INFORMATION_SCHEMA')
              AND NOT EXISTS (
                SELECT 1 FROM sys.indexes i WHERE i.object_id = t.object_id AND i.type = 1
              )
            ORDER BY s.name, t.name
        """,
    }


class ExtremeNullableRatioCheck(CatalogListCheck):
    """Tables where more than half of the columns allow NULL."""

    id = 3
    name = "Extreme Nullable Ratio"
    category = CATEGORY
    code = "EXTREME_NULLABLE_RATIO"
    display_limit = 15

    pass_message = "No tables with extreme nullable ratio"
    warning_message = "Found {count} table(s) with >50% nullable columns"

    sql = {
        "sqlserver": """
            SELECT s.name, t.name
            FROM sys.tables t
            JOIN sys.schemas s ON t.schema_id = s.schema_id
            JOIN sys.columns c ON c.object_id = t.object_id
            WHERE t.is_ms_shipped = 0
              AND s.name NOT IN ('sys', 'INFORMATION_SCHEMA')
            GROUP BY s.name, t.name
            HAVING CAST(SUM(CASE WHEN c.is_nullable = 1 THEN 1 ELSE 0 END) AS FLOAT) / COUNT(*) > 0.5
            ORDER BY s.name, t.name
        """,
        "postgresql": f"""
            SELECT n.nspname, c.relname
            FROM pg_class c
            JOIN pg_namespace n ON n.oid = c.relnamespace
            JOIN pg_attribute a ON a.attrelid = c.oid AND a.attnum > 0 AND NOT a.attisdropped
            WHERE {PG_USER_TABLES}
            GROUP BY n.nspname, c.relname
            HAVING SUM(CASE WHEN a.attnotnull THEN 0 ELSE 1 END)::float / COUNT(*) > 0.5
            ORDER BY 1, 2
        """,
    }


class JunctionMissingKeyCheck(CatalogListCheck):
    """Tables with two or more ``...Id`` columns but no composite PK or unique key.

    Such tables usually link two parents; without a key over the pair the
    same link can be stored twice.
    """

    id = 4
    name = "Suspected Junction Missing Key"
    category = CATEGORY
    code = "JUNCTION_MISSING_KEY"
    display_limit = 15

    pass_message = "No suspected junction tables without composite key"
    warning_message = "Found {count} table(s)"

    sql = {
        "sqlserver": """
            WITH id_tables AS (
                SELECT t.object_id, s.name AS sch, t.name AS tbl
                FROM sys.tables t
                JOIN sys.schemas s ON t.schema_id = s.schema_id
                JOIN sys.columns c ON c.object_id = t.object_id
                WHERE t.is_ms_shipped = 0
                  AND s.name NOT IN ('sys', 'INFORMATION_SCHEMA')
                  AND c.name LIKE '%Id'
                GROUP BY t.object_id, s.name, t.name
                HAVING COUNT(*) >= 2
            ),
            has_composite AS (
                SELECT kc.parent_object_id
                FROM sys.key_constraints kc
                JOIN sys.index_columns ic
                    ON ic.object_id = kc.parent_object_id AND ic.index_id = kc.unique_index_id
                WHERE kc.type IN ('PK', 'UQ')
                GROUP BY kc.parent_object_id
                HAVING COUNT(*) >= 2
            )
            SELECT id_tables.sch, id_tables.tbl
            FROM id_tables
            LEFT JOIN has_composite h ON h.parent_object_id = id_tables.object_id
            WHERE h.parent_object_id IS NULL
            ORDER BY id_tables.sch, id_tables.tbl
        """,
        "postgresql": f"""
            SELECT n.nspname, c.relname
            FROM pg_class c
            JOIN pg_namespace n ON n.oid = c.relnamespace
            JOIN pg_attribute a ON a.attrelid = c.oid AND a.attnum > 0 AND NOT a.attisdropped
            WHERE {PG_USER_TABLES}
              AND a.attname ILIKE '%id'
              AND NOT EXISTS (
                SELECT 1 FROM pg_constraint k
                WHERE k.conrelid = c.oid AND k.contype IN ('p', 'u')
                  AND cardinality(k.conkey) >= 2
              )
            GROUP BY n.nspname, c.relname
            HAVING COUNT(*) >= 2
            ORDER BY 1, 2
        """,
    }
