"""The check catalogue."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator, Sequence

from sqldiag.checks.base import BaseCheck
from sqldiag.checks.data_quality import DuplicateRecordsCheck, InconsistentFormatsCheck
from sqldiag.checks.data_types import ForeignKeyTypeMismatchCheck, MoneyStoredAsFloatCheck
from sqldiag.checks.index_health import (
    FragmentationCheck,
    MissingIndexSuggestionsCheck,
    UnusedIndexesCheck,
)
from sqldiag.checks.keys_constraints import (
    MissingCheckConstraintsCheck,
    MissingPrimaryKeysCheck,
    MissingUniqueConstraintsCheck,
)
from sqldiag.checks.query_performance import TopSlowQueriesCheck
from sqldiag.checks.referential_integrity import (
    CircularForeignKeyCheck,
    MissingForeignKeysCheck,
    NullableForeignKeyColumnsCheck,
    OrphanRecordsCheck,
)
from sqldiag.checks.schema_overview import SchemaSummaryCheck
from sqldiag.checks.schema_structure import (
    ExtremeNullableRatioCheck,
    HeapTablesCheck,
    JunctionMissingKeyCheck,
)

OVERVIEW_CATEGORY = "Schema Overview"

# Construction order is catalogue order.
CHECK_CLASSES: tuple[type[BaseCheck], ...] = (
    MissingPrimaryKeysCheck,
    HeapTablesCheck,
    ExtremeNullableRatioCheck,
    JunctionMissingKeyCheck,
    MissingCheckConstraintsCheck,
    MissingUniqueConstraintsCheck,
    MissingForeignKeysCheck,
    OrphanRecordsCheck,
    ForeignKeyTypeMismatchCheck,
    MoneyStoredAsFloatCheck,
    MissingIndexSuggestionsCheck,
    UnusedIndexesCheck,
    FragmentationCheck,
    TopSlowQueriesCheck,
    SchemaSummaryCheck,
    DuplicateRecordsCheck,
    NullableForeignKeyColumnsCheck,
    CircularForeignKeyCheck,
    InconsistentFormatsCheck,
)


class CheckRegistry:
    """Ordered, read-only collection of checks."""

    def __init__(self, checks: Iterable[BaseCheck]) -> None:
        self._checks: tuple[BaseCheck, ...] = tuple(checks)
        # First spelling of each category wins.
        names: dict[str, str] = {}
        for check in self._checks:
            if check.category:
                names.setdefault(check.category.casefold(), check.category)
        self._categories: tuple[str, ...] = tuple(sorted(names.values(), key=str.casefold))

    def __len__(self) -> int:
        return len(self._checks)

    def __iter__(self) -> Iterator[BaseCheck]:
        return iter(self._checks)

    def all(self) -> tuple[BaseCheck, ...]:
        return self._checks

    def categories(self) -> tuple[str, ...]:
        """Distinct category names, sorted case-insensitively."""
        return self._categories

    def get(self, check_id: int) -> BaseCheck | None:
        for check in self._checks:
            if check.id == check_id:
                return check
        return None

    def select(
        self, category: str | None = None, overview_category: str = OVERVIEW_CATEGORY
    ) -> list[BaseCheck]:
        """Checks to run for an optional category filter.

        With a filter, the result is the checks of that category plus the
        checks of ``overview_category``. Matching ignores case and
        surrounding whitespace.
        """
        if category is None or not category.strip():
            return list(self._checks)
        wanted = {category.strip().casefold(), overview_category.casefold()}
        return [c for c in self._checks if c.category and c.category.casefold() in wanted]


def build_registry(
    logger: logging.Logger | None = None,
    display_limit: int | None = None,
    check_classes: Sequence[type[BaseCheck]] = CHECK_CLASSES,
) -> CheckRegistry:
    """Construct the catalogue.

    Args:
        logger: Passed to every check; batched checks log skipped candidates
            through it. Defaults to each check module's own logger.
        display_limit: Override how many items check messages show.
        check_classes: Check types to instantiate, in order.
    """
    checks = []
    for check_class in check_classes:
        check = check_class(logger=logger)
        if display_limit is not None:
            check.display_limit = display_limit
        checks.append(check)
    return CheckRegistry(checks)
