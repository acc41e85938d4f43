"""Keys & Constraints checks."""

from __future__ import annotations

from sqldiag.checks.base import PG_USER_TABLES, CatalogListCheck

CATEGORY = "Keys & Constraints"


class MissingPrimaryKeysCheck(CatalogListCheck):
    """Tables with no primary key constraint."""

    id = 1
    name = "Missing Primary Keys"
    category = CATEGORY
    code = "MISSING_PK"
    display_limit = 15

    pass_message = "All tables have primary keys defined"
    warning_message = "Found {count} table(s) with no PK"

    sql = {
        "sqlserver": """
            SELECT s.name, t.name
            FROM sys.tables t
            JOIN sys.schemas s ON t.schema_id = s.schema_id
            WHERE t.is_ms_shipped = 0
              AND s.name NOT IN ('sys', 'INFORMATION_SCHEMA')
              AND NOT EXISTS (
                SELECT 1 FROM sys.key_constraints kc
                WHERE kc.parent_object_id = t.object_id AND kc.type = 'PK'
              )
            ORDER BY s.name, t.name
        """,
        "postgresql": f"""
            SELECT n.nspname, c.relname
            FROM pg_class c
            JOIN pg_namespace n ON n.oid = c.relnamespace
            WHERE {PG_USER_TABLES}
              AND NOT EXISTS (
                SELECT 1 FROM pg_constraint k
                WHERE k.conrelid = c.oid AND k.contype = 'p'
              )
            ORDER BY 1, 2
        """,
    }


class MissingUniqueConstraintsCheck(CatalogListCheck):
    """Email/Sku-like columns that no single-column unique index protects."""

    id = 6
    name = "Missing Unique Constraints"
    category = CATEGORY
    code = "MISSING_UNIQUE_CONSTRAINTS"
    display_limit = 15

    pass_message = "No Email/Sku-like columns without unique constraints"
    warning_message = "Found {count} column(s)"

    sql = {
        "sqlserver": """
            SELECT s.name, t.name, c.name
            FROM sys.columns c
            JOIN sys.tables t ON t.object_id = c.object_id
            JOIN sys.schemas s ON s.schema_id = t.schema_id
            WHERE t.is_ms_shipped = 0
              AND s.name NOT IN ('sys', 'INFORMATION_SCHEMA')
              AND (c.name = 'Email' OR c.name = 'Sku' OR c.name LIKE '%Email' OR c.name LIKE '%Sku')
              AND NOT EXISTS (
                SELECT 1 FROM sys.index_columns ic
                JOIN sys.indexes i ON i.object_id = ic.object_id AND i.index_id = ic.index_id
                WHERE ic.object_id = c.object_id AND ic.column_id = c.column_id
                  AND i.is_unique = 1
                  AND (SELECT COUNT(*) FROM sys.index_columns ic2
                       WHERE ic2.object_id = ic.object_id AND ic2.index_id = ic.index_id) = 1
              )
            ORDER BY s.name, t.name, c.name
        """,
        "postgresql": f"""
            SELECT n.nspname, c.relname, a.attname
            FROM pg_attribute a
            JOIN pg_class c ON c.oid = a.attrelid
            JOIN pg_namespace n ON n.oid = c.relnamespace
            WHERE {PG_USER_TABLES}
              AND a.attnum > 0 AND NOT a.attisdropped
              AND (a.attname ILIKE '%email' OR a.attname ILIKE '%sku')
              AND NOT EXISTS (
                SELECT 1 FROM pg_index x
                WHERE x.indrelid = c.oid AND x.indisunique
                  AND x.indnkeyatts = 1 AND x.indkey[0] = a.attnum
              )
            ORDER BY 1, 2, 3
        """,
    }


class MissingCheckConstraintsCheck(CatalogListCheck):
    """Status-like columns that no CHECK constraint restricts."""

    id = 5
    name = "Missing Check Constraints"
    category = CATEGORY
    code = "MISSING_CHECK_CONSTRAINTS"
    display_limit = 15

    pass_message = "No status-like columns without check constraints"
    warning_message = "Found {count} column(s)"

    sql = {
        "sqlserver": """
            SELECT s.name, t.name, c.name
            FROM sys.columns c
            JOIN sys.tables t ON t.object_id = c.object_id
            JOIN sys.schemas s ON s.schema_id = t.schema_id
            WHERE t.is_ms_shipped = 0
              AND s.name NOT IN ('sys', 'INFORMATION_SCHEMA')
              AND c.name LIKE '%Status'
              AND NOT EXISTS (
                SELECT 1 FROM sys.check_constraints cc
                WHERE cc.parent_object_id = c.object_id
                  AND (cc.parent_column_id = c.column_id
                       OR cc.definition LIKE '%[[]' + c.name + ']%')
              )
            ORDER BY s.name, t.name, c.name
        """,
        "postgresql": f"""
            SELECT n.nspname, c.relname, a.attname
            FROM pg_attribute a
            JOIN pg_class c ON c.oid = a.attrelid
            JOIN pg_namespace n ON n.oid = c.relnamespace
            WHERE {PG_USER_TABLES}
              AND a.attnum > 0 AND NOT a.attisdropped
              AND a.attname ILIKE '%status'
              AND NOT EXISTS (
                SELECT 1 FROM pg_constraint k
                WHERE k.conrelid = c.oid AND k.contype = 'c'
                  AND a.attnum = ANY (k.conkey)
              )
            ORDER BY 1, 2, 3
        """,
    }
