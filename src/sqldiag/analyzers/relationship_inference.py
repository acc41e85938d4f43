"""Relationship inference: guesses parent/child column links from names.

Many schemas never declare their foreign keys, so the missing-FK, orphan,
and type-mismatch checks start from *inferred* links:

- candidate parents are columns that alone make up a primary key or
  unique index;
- candidate children are all columns of all tables;
- a child links to a parent when the column names are exactly equal
  (case-sensitive) and the tables differ.

No disambiguation is attempted. A column such as ``Name`` can link to
several parents and every one of them is kept.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import TYPE_CHECKING, Any

from sqldiag.checks.base import PG_USER_TABLES
from sqldiag.models import ColumnRef, RelationshipEdge
from sqldiag.utils.sql_quoting import qualified_name, quote_identifier

if TYPE_CHECKING:
    from sqldiag.execution.query_executor import QueryExecutor

logger = logging.getLogger(__name__)

INFERRED = "inferred"
DECLARED = "declared"

KEY_COLUMNS_SQL = {
    "sqlserver": """
        SELECT DISTINCT s.name, t.name, c.name, ty.name
        FROM sys.indexes i
        JOIN sys.index_columns ic
            ON ic.object_id = i.object_id AND ic.index_id = i.index_id
           AND ic.is_included_column = 0
        JOIN sys.columns c ON c.object_id = ic.object_id AND c.column_id = ic.column_id
        JOIN sys.types ty ON ty.user_type_id = c.user_type_id
        JOIN sys.tables t ON t.object_id = i.object_id
        JOIN sys.schemas s ON s.schema_id = t.schema_id
        WHERE t.is_ms_shipped = 0
          AND (i.is_primary_key = 1 OR i.is_unique = 1)
          AND (SELECT COUNT(*) FROM sys.index_columns k
               WHERE k.object_id = i.object_id AND k.index_id = i.index_id
                 AND k.is_included_column = 0) = 1
        ORDER BY s.name, t.name, c.name
    """,
    "postgresql": f"""
        SELECT DISTINCT n.nspname, c.relname, a.attname, format_type(a.atttypid, NULL)
        FROM pg_index x
        JOIN pg_class c ON c.oid = x.indrelid
        JOIN pg_namespace n ON n.oid = c.relnamespace
        JOIN pg_attribute a ON a.attrelid = c.oid AND a.attnum = x.indkey[0]
        WHERE (x.indisprimary OR x.indisunique)
          AND x.indnkeyatts = 1
          AND x.indexprs IS NULL
          AND {PG_USER_TABLES}
        ORDER BY 1, 2, 3
    """,
}

ALL_COLUMNS_SQL = {
    "sqlserver": """
        SELECT s.name, t.name, c.name, ty.name
        FROM sys.columns c
        JOIN sys.types ty ON ty.user_type_id = c.user_type_id
        JOIN sys.tables t ON t.object_id = c.object_id
        JOIN sys.schemas s ON s.schema_id = t.schema_id
        WHERE t.is_ms_shipped = 0
        ORDER BY s.name, t.name, c.column_id
    """,
    "postgresql": f"""
        SELECT n.nspname, c.relname, a.attname, format_type(a.atttypid, NULL)
        FROM pg_attribute a
        JOIN pg_class c ON c.oid = a.attrelid
        JOIN pg_namespace n ON n.oid = c.relnamespace
        WHERE a.attnum > 0
          AND NOT a.attisdropped
          AND {PG_USER_TABLES}
        ORDER BY 1, 2, a.attnum
    """,
}

DECLARED_EDGES_SQL = {
    "sqlserver": """
        SELECT cs.name, ct.name, cc.name, ps.name, pt.name, pc.name
        FROM sys.foreign_key_columns fkc
        JOIN sys.tables ct ON ct.object_id = fkc.parent_object_id
        JOIN sys.schemas cs ON cs.schema_id = ct.schema_id
        JOIN sys.columns cc
            ON cc.object_id = fkc.parent_object_id AND cc.column_id = fkc.parent_column_id
        JOIN sys.tables pt ON pt.object_id = fkc.referenced_object_id
        JOIN sys.schemas ps ON ps.schema_id = pt.schema_id
        JOIN sys.columns pc
            ON pc.object_id = fkc.referenced_object_id
           AND pc.column_id = fkc.referenced_column_id
        WHERE ct.is_ms_shipped = 0
        ORDER BY cs.name, ct.name, cc.name
    """,
    "postgresql": """
        SELECT cn.nspname, ct.relname, ca.attname, pn.nspname, pt.relname, pa.attname
        FROM pg_constraint con
        CROSS JOIN LATERAL unnest(con.conkey, con.confkey) AS k(child_attnum, parent_attnum)
        JOIN pg_class ct ON ct.oid = con.conrelid
        JOIN pg_namespace cn ON cn.oid = ct.relnamespace
        JOIN pg_attribute ca ON ca.attrelid = con.conrelid AND ca.attnum = k.child_attnum
        JOIN pg_class pt ON pt.oid = con.confrelid
        JOIN pg_namespace pn ON pn.oid = pt.relnamespace
        JOIN pg_attribute pa ON pa.attrelid = con.confrelid AND pa.attnum = k.parent_attnum
        WHERE con.contype = 'f'
          AND con.conparentid = 0
        ORDER BY 1, 2, 3
    """,
}


def infer_relationships(
    key_columns: Iterable[ColumnRef], all_columns: Iterable[ColumnRef]
) -> list[RelationshipEdge]:
    """Link every column to each key column of the same name in another table.

    Args:
        key_columns: Columns that alone form a primary key or unique index.
        all_columns: Every column of every table.

    Returns:
        Inferred edges ordered by child, then parent.
    """
    parents_by_name: dict[str, list[ColumnRef]] = {}
    for parent in key_columns:
        parents_by_name.setdefault(parent.column, []).append(parent)

    edges: list[RelationshipEdge] = []
    seen: set[tuple[str, ...]] = set()
    for child in all_columns:
        for parent in parents_by_name.get(child.column, ()):
            if (parent.schema, parent.table) == (child.schema, child.table):
                continue
            edge = RelationshipEdge(child=child, parent=parent, source=INFERRED)
            if edge.key in seen:
                continue
            seen.add(edge.key)
            edges.append(edge)

    return sorted(edges, key=lambda e: e.key)


def subtract_declared(
    inferred: Iterable[RelationshipEdge], declared: Iterable[RelationshipEdge]
) -> list[RelationshipEdge]:
    """Inferred edges whose exact column pair is not backed by a constraint."""
    declared_keys = {edge.key for edge in declared}
    return [edge for edge in inferred if edge.key not in declared_keys]


def find_type_mismatches(edges: Iterable[RelationshipEdge]) -> list[RelationshipEdge]:
    """Edges whose child and parent columns have different declared types."""
    return [
        edge
        for edge in edges
        if edge.child.data_type.lower() != edge.parent.data_type.lower()
    ]


def orphan_count_sql(edge: RelationshipEdge, dialect: str = "sqlserver") -> str:
    """Left-anti-join count of child rows whose value has no parent row.

    NULL child values are not counted; they reference nothing.
    """
    child_col = quote_identifier(edge.child.column, dialect)
    parent_col = quote_identifier(edge.parent.column, dialect)
    return (
        f"SELECT COUNT(*) AS orphan_count "
        f"FROM {qualified_name(edge.child.schema, edge.child.table, dialect)} c "
        f"LEFT JOIN {qualified_name(edge.parent.schema, edge.parent.table, dialect)} p "
        f"ON c.{child_col} = p.{parent_col} "
        f"WHERE c.{child_col} IS NOT NULL AND p.{parent_col} IS NULL"
    )


class RelationshipAnalyzer:
    """Loads catalog metadata through a :class:`QueryExecutor` and applies
    the inference rules above.

    Results are cached on the instance; build a new analyzer per check run.
    """

    def __init__(self, executor: QueryExecutor) -> None:
        self.executor = executor
        self._key_columns: list[ColumnRef] | None = None
        self._columns: list[ColumnRef] | None = None
        self._declared: list[RelationshipEdge] | None = None

    def key_columns(self) -> list[ColumnRef]:
        if self._key_columns is None:
            rows = self.executor.run_rows(KEY_COLUMNS_SQL[self.executor.dialect])
            self._key_columns = [_column(row) for row in rows if len(row) >= 3]
        return self._key_columns

    def columns(self) -> list[ColumnRef]:
        if self._columns is None:
            rows = self.executor.run_rows(ALL_COLUMNS_SQL[self.executor.dialect])
            self._columns = [_column(row) for row in rows if len(row) >= 3]
        return self._columns

    def declared_edges(self) -> list[RelationshipEdge]:
        """Edges backed by actual foreign key constraints."""
        if self._declared is None:
            rows = self.executor.run_rows(DECLARED_EDGES_SQL[self.executor.dialect])
            self._declared = [
                RelationshipEdge(
                    child=ColumnRef(str(r[0]), str(r[1]), str(r[2])),
                    parent=ColumnRef(str(r[3]), str(r[4]), str(r[5])),
                    source=DECLARED,
                )
                for r in rows
                if len(r) >= 6
            ]
        return self._declared

    def inferred_edges(self) -> list[RelationshipEdge]:
        edges = infer_relationships(self.key_columns(), self.columns())
        logger.debug("Inferred %d relationship(s) from column names", len(edges))
        return edges

    def missing_foreign_keys(self) -> list[RelationshipEdge]:
        return subtract_declared(self.inferred_edges(), self.declared_edges())

    def type_mismatches(self) -> list[RelationshipEdge]:
        return find_type_mismatches(self.inferred_edges())


def _column(row: tuple[Any, ...]) -> ColumnRef:
    data_type = str(row[3]) if len(row) > 3 and row[3] is not None else ""
    return ColumnRef(str(row[0]), str(row[1]), str(row[2]), data_type)
