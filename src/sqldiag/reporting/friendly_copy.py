"""Plain-language explanations for non-passing checks, keyed by check code."""

from __future__ import annotations

from types import MappingProxyType
from typing import NamedTuple


class Explanation(NamedTuple):
    whats_wrong: str
    why_it_matters: str
    what_to_do_next: str


FALLBACK = Explanation(
    whats_wrong="See message below",
    why_it_matters="",
    what_to_do_next="Review the details and fix as needed",
)

# ``{0}`` in whats_wrong is replaced by the number of offending items.
GLOSSARY = MappingProxyType(
    {
        "MISSING_FOREIGN_KEYS": Explanation(
            "Found {0} relationship(s) without a foreign key",
            "Without FKs, the database won't enforce referential integrity and deletes "
            "can leave orphaned or inconsistent data.",
            "Add foreign keys for the pairs listed in Details, or document why they're "
            "intentional.",
        ),
        "ORPHAN_RECORDS": Explanation(
            "Found {0} orphaned record set(s)",
            "Child rows point to missing parents; this can break reports and joins.",
            "Fix or delete the orphan rows, then add or fix foreign keys so it doesn't "
            "happen again.",
        ),
        "MISSING_PK": Explanation(
            "Found {0} table(s) with no primary key",
            "Updates and deletes can't target rows reliably; tools and ORMs expect a key.",
            "Add a primary key to each table listed in Details.",
        ),
        "HEAP_TABLES": Explanation(
            "Found {0} heap table(s) (no clustered index)",
            "Heaps can slow down range scans and leave rows in random order.",
            "Consider adding a clustered index; often the primary key is clustered.",
        ),
        "FRAGMENTATION": Explanation(
            "Found {0} fragmented index(es)",
            "Fragmentation can slow down queries and waste I/O.",
            "Review the list in Details; rebuild or reorganize indexes during a "
            "maintenance window.",
        ),
        "UNUSED_INDEXES": Explanation(
            "Found {0} unused index(es)",
            "Unused indexes slow writes and use storage without helping reads.",
            "Review in Details; drop if truly unused, or keep if for rare critical queries.",
        ),
        "MISSING_INDEX_SUGGESTIONS": Explanation(
            "Found {0} table(s) with missing index suggestion(s)",
            "The database is pointing at tables where an index could speed up queries.",
            "Review suggestions in Details and add indexes where they match real workload.",
        ),
        "MONEY_AS_FLOAT": Explanation(
            "Found {0} column(s) that look like money but use float/real",
            "Float can cause rounding errors in money; use decimal for currency.",
            "Change those columns to decimal in Details, or document why float is acceptable.",
        ),
        "FK_TYPE_MISMATCH": Explanation(
            "Found {0} FK/column type mismatch(es)",
            "Type mismatches can cause subtle bugs and poor index use.",
            "Align types between referenced and referencing columns (see Details).",
        ),
        "MISSING_UNIQUE_CONSTRAINTS": Explanation(
            "Found {0} column(s) that look like Email/Sku without unique constraint",
            "Duplicates can creep in and break business rules.",
            "Add unique constraints (or unique indexes) for the columns in Details.",
        ),
        "MISSING_CHECK_CONSTRAINTS": Explanation(
            "Found {0} status-like column(s) without check constraint",
            "Invalid values can get stored and break application logic.",
            "Add check constraints for valid values (see Details).",
        ),
        "JUNCTION_MISSING_KEY": Explanation(
            "Found {0} suspected junction table(s) without composite key",
            "Duplicate links can appear and complicate joins.",
            "Add a composite primary key (or unique constraint) on the two FK columns.",
        ),
        "TOP_SLOW_QUERIES": Explanation(
            "Found slow query stats",
            "Slow queries affect user experience and server load.",
            "Review the queries in Details; tune or add indexes as needed.",
        ),
        "EXTREME_NULLABLE_RATIO": Explanation(
            "Found {0} table(s) with >50% nullable columns",
            "Too many nulls can make queries and reporting harder and suggest missing "
            "design clarity.",
            "Review table design; make columns NOT NULL where a value is always required.",
        ),
        "DUPLICATE_RECORDS": Explanation(
            "Found duplicate values in {0} key-like column(s)",
            "Codes, emails and SKUs are usually meant to identify one row; duplicates "
            "make lookups return the wrong record.",
            "Clean up the duplicates listed in Details, then add a unique constraint.",
        ),
        "NULLABLE_FK_COLUMNS": Explanation(
            "Found {0} foreign key column(s) that allow NULL",
            "A NULL foreign key means the row has no parent, which is often unintended.",
            "Make the columns NOT NULL where every row must have a parent.",
        ),
        "CIRCULAR_FK": Explanation(
            "Found {0} table(s) in circular foreign key chains",
            "Circular references complicate insert order, deletes and staged migrations.",
            "Break the cycle with a nullable FK or a deferred constraint, or document "
            "the load order.",
        ),
        "INCONSISTENT_FORMATS": Explanation(
            "Found {0} format issue(s) in status-like columns",
            "Values that differ only in casing or spacing split reports and break "
            "equality filters.",
            "Normalize the stored values and add a check constraint or lookup table.",
        ),
    }
)


def get_explanation(code: str | None, item_count: int) -> Explanation:
    """Explanation for ``code`` (case-insensitive), or :data:`FALLBACK`."""
    entry = GLOSSARY.get((code or "").upper())
    if entry is None:
        return FALLBACK
    return entry._replace(whats_wrong=entry.whats_wrong.replace("{0}", str(item_count)))
