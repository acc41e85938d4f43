"""Human-facing names for statuses, categories and checks."""

from __future__ import annotations

from types import MappingProxyType

UNCATEGORIZED = "Uncategorized"

STATUS_LABELS = MappingProxyType(
    {
        "PASS": "All checks passed",
        "WARNING": "Issues found",
        "FAIL": "System unable to detect or unsuccessful",
    }
)

CATEGORY_NAMES = MappingProxyType(
    {
        "keys & constraints": "Primary keys, unique & check constraints",
        "schema & structure": "Table structure & design",
        "referential integrity": "Relationships & foreign keys",
        "data type consistency": "Data types & consistency",
        "index health": "Index usage & maintenance",
        "schema overview": "Database overview",
        "data quality": "Data quality & duplicates",
        "query performance": "Query performance",
    }
)

CHECK_TITLES = MappingProxyType(
    {
        "MISSING_PK": "Tables without primary keys",
        "HEAP_TABLES": "Tables without clustered index (heaps)",
        "EXTREME_NULLABLE_RATIO": "Tables with many nullable columns",
        "JUNCTION_MISSING_KEY": "Junction tables without composite key",
        "MISSING_CHECK_CONSTRAINTS": "Status or enumerated columns without check constraint",
        "MISSING_UNIQUE_CONSTRAINTS": "Business identifier columns without unique constraint",
        "MISSING_FOREIGN_KEYS": "Relationships without foreign key",
        "ORPHAN_RECORDS": "Orphaned rows (child without parent)",
        "FK_TYPE_MISMATCH": "Foreign key type mismatches",
        "MONEY_AS_FLOAT": "Monetary or amount columns using approximate numeric type (float/real)",
        "MISSING_INDEX_SUGGESTIONS": "Suggested missing indexes",
        "UNUSED_INDEXES": "Unused indexes",
        "FRAGMENTATION": "Fragmented indexes",
        "TOP_SLOW_QUERIES": "Slowest queries by total elapsed time",
        "SCHEMA_SUMMARY": "Database summary",
        "DUPLICATE_RECORDS": "Duplicate values in candidate key or business identifier columns",
        "NULLABLE_FK_COLUMNS": "Nullable foreign key columns",
        "CIRCULAR_FK": "Circular foreign key dependencies",
        "INCONSISTENT_FORMATS": "Inconsistent formats (casing, whitespace) in status-like columns",
    }
)


def status_label(status: str | None) -> str:
    if not status or not status.strip():
        return status or ""
    return STATUS_LABELS.get(status.upper(), status)


def category_display_name(category: str | None) -> str:
    if not category or not category.strip():
        return UNCATEGORIZED
    return CATEGORY_NAMES.get(category.casefold(), category)


def check_title(code: str | None, fallback: str | None = None) -> str:
    """Display title for a check code, else ``fallback``, else 'Check'."""
    if code and code.upper() in CHECK_TITLES:
        return CHECK_TITLES[code.upper()]
    return fallback if fallback and fallback.strip() else "Check"
