"""Base class for diagnostic checks."""

from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from sqldiag.config import SUPPORTED_PROVIDERS
from sqldiag.errors import QueryError
from sqldiag.models import Candidate, CheckResult, Status
from sqldiag.utils.formatting import summarize_items

if TYPE_CHECKING:
    from sqldiag.execution.query_executor import QueryExecutor, Row

#: Predicate over ``pg_class c`` joined to ``pg_namespace n`` selecting user tables.
PG_USER_TABLES = (
    "c.relkind IN ('r', 'p') AND NOT c.relispartition "
    "AND n.nspname NOT IN ('pg_catalog', 'information_schema') "
    "AND n.nspname NOT LIKE 'pg_toast%'"
)


@dataclass
class Outcome:
    """What a check's rule concluded, before timing and identity are attached."""

    status: Status
    message: str
    evidence: list[str] = field(default_factory=list)


class BaseCheck(ABC):
    """One diagnostic rule.

    Subclasses set the identity attributes and implement :meth:`run`.
    :meth:`execute` adds timing, provider gating, and turns query failures
    into a Fail result. Anything else a check raises is left for the
    runner's error boundary.
    """

    id: int = 0
    name: str = ""
    category: str | None = None
    code: str = ""
    providers: tuple[str, ...] = SUPPORTED_PROVIDERS

    #: How many offending items the message shows before "... and K more".
    display_limit: int = 10

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self.logger = logger or logging.getLogger(type(self).__module__)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} id={self.id} code={self.code}>"

    def execute(self, executor: QueryExecutor) -> CheckResult:
        """Run the rule against ``executor``'s database and return one result."""
        started = time.perf_counter()

        if executor.provider not in self.providers:
            outcome = Outcome(Status.PASS, f"Not applicable to {executor.provider}")
        else:
            try:
                outcome = self.run(executor)
            except QueryError as exc:
                self.logger.debug("%s query failed: %s", self.code, exc.fault.describe())
                outcome = Outcome(Status.FAIL, f"Query failed | {exc.fault.describe()}")

        return CheckResult(
            check_id=self.id,
            name=self.name,
            status=outcome.status,
            message=outcome.message,
            elapsed_ms=int((time.perf_counter() - started) * 1000),
            category=self.category,
            code=self.code,
            evidence=list(outcome.evidence),
        )

    @abstractmethod
    def run(self, executor: QueryExecutor) -> Outcome:
        """Apply the rule. May raise :class:`QueryError`."""

    # ------------------------------------------------------------------
    # Helpers for subclasses
    # ------------------------------------------------------------------

    def passed(self, message: str) -> Outcome:
        return Outcome(Status.PASS, message)

    def warning(
        self, prefix: str, items: Sequence[str], separator: str = "; "
    ) -> Outcome:
        """Warning whose message lists the first items after ``prefix``."""
        shown = summarize_items(items, self.display_limit, separator)
        return Outcome(Status.WARNING, f"{prefix}: {shown}", list(items))

    def run_candidates(
        self,
        executor: QueryExecutor,
        candidates: Sequence[Candidate],
        batch_size: int | None = None,
    ) -> dict[str, list[Row]]:
        """Batched execution, logging any candidate that had to be skipped."""
        results = executor.run_batched(candidates, batch_size=batch_size)
        skipped = [c.label for c in candidates if c.label not in results]
        if skipped:
            self.logger.warning(
                "%s skipped %d candidate(s): %s",
                self.code,
                len(skipped),
                summarize_items(skipped, self.display_limit, ", "),
            )
        return results


def first_int(rows: Sequence[Row], default: int = 0) -> int:
    """Integer in the first column of the first row (e.g. a COUNT)."""
    if not rows or not rows[0] or rows[0][0] is None:
        return default
    try:
        return int(rows[0][0])
    except (TypeError, ValueError):
        return default


class CatalogListCheck(BaseCheck):
    """A check that warns about every row one catalog query returns.

    Subclasses provide ``sql`` per dialect and the two message templates.
    ``warning_message`` may use ``{count}``.
    """

    sql: dict[str, str] = {}
    pass_message: str = ""
    warning_message: str = "Found {count} item(s)"
    separator: str = ", "

    def describe(self, row: Row) -> str:
        return ".".join(str(value) for value in row)

    def run(self, executor: QueryExecutor) -> Outcome:
        rows = executor.run_rows(self.sql[executor.dialect])
        items = [self.describe(row) for row in rows]
        if not items:
            return self.passed(self.pass_message)
        return self.warning(
            self.warning_message.format(count=len(items)), items, self.separator
        )
