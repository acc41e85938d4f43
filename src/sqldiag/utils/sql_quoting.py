"""Identifier quoting and literal escaping for generated SQL.

Every name that comes out of catalog metadata and is spliced back into a
statement goes through here. SQL Server uses ``[brackets]`` and ``N'...'``
literals; PostgreSQL uses ANSI ``"double quotes"`` and ``'...'``.
"""

from __future__ import annotations


def quote_identifier(name: str, dialect: str = "sqlserver") -> str:
    """Quote a single identifier so embedded delimiters cannot end it early.

    >>> quote_identifier("Order]Lines")
    '[Order]]Lines]'
    >>> quote_identifier('odd"name', "postgresql")
    '"odd""name"'
    """
    if dialect == "sqlserver":
        return "[" + name.replace("]", "]]") + "]"
    return '"' + name.replace('"', '""') + '"'


def quote_literal(value: str, dialect: str = "sqlserver") -> str:
    """Render ``value`` as a string literal, doubling embedded single quotes."""
    escaped = "'" + value.replace("'", "''") + "'"
    if dialect == "sqlserver":
        return "N" + escaped
    return escaped


def qualified_name(schema: str, table: str, dialect: str = "sqlserver") -> str:
    """Quote a two-part ``schema.table`` name."""
    return f"{quote_identifier(schema, dialect)}.{quote_identifier(table, dialect)}"
