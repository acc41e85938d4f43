"""Query execution helper shared by all checks.

Each round trip opens its own connector, runs one statement under a
statement timeout, and closes the connector again, so checks running on
different threads never share a connection.

``run_batched`` merges many structurally similar candidate queries into a
few ``UNION ALL`` statements. Each branch is tagged with a literal label
column that is used to route rows back to their candidate and stripped
before the rows are returned. When a merged statement fails the batch is
retried one candidate at a time; a candidate that still fails is skipped.
Connection and login faults are not candidate specific and are
raised to the caller instead.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from typing import Any

from sqldiag.config import ConnectionConfig
from sqldiag.connectors import create_connector
from sqldiag.connectors.base import BaseConnector
from sqldiag.errors import Fault, FaultKind, QueryError
from sqldiag.models import Candidate
from sqldiag.utils.sql_quoting import quote_identifier, quote_literal

logger = logging.getLogger(__name__)

LABEL_COLUMN = "__sqldiag_label"
DEFAULT_BATCH_SIZE = 25

Row = tuple[Any, ...]


class QueryExecutor:
    """Runs read-only statements against one target database.

    Args:
        config: Connection settings for the target.
        connector_factory: Builds an unconnected connector for ``config``.
        metadata_timeout: Default timeout for plain catalog queries.
        candidate_timeout: Default timeout for batched/candidate queries.
        batch_size: Default number of candidates merged into one statement.
    """

    def __init__(
        self,
        config: ConnectionConfig,
        connector_factory: Callable[[ConnectionConfig], BaseConnector] = create_connector,
        metadata_timeout: int = 10,
        candidate_timeout: int = 30,
        batch_size: int = DEFAULT_BATCH_SIZE,
    ) -> None:
        self.config = config
        self.connector_factory = connector_factory
        self.metadata_timeout = metadata_timeout
        self.candidate_timeout = candidate_timeout
        self.batch_size = batch_size

    @property
    def provider(self) -> str:
        return self.config.provider

    @property
    def dialect(self) -> str:
        """SQL dialect for quoting; PostgreSQL uses ANSI quoting."""
        return "sqlserver" if self.config.provider == "sqlserver" else "postgresql"

    def fetch(self, sql: str, timeout: int | None = None) -> tuple[list[str], list[Row]]:
        """One round trip on a fresh connection."""
        connector = self.connector_factory(self.config)
        with connector:
            return connector.fetch(sql, timeout if timeout is not None else self.metadata_timeout)

    def run_query(self, sql: str, timeout: int | None = None) -> list[dict[str, Any]]:
        """Run a statement and return rows as dicts keyed by column name."""
        columns, rows = self.fetch(sql, timeout)
        return [dict(zip(columns, row)) for row in rows]

    def run_rows(self, sql: str, timeout: int | None = None) -> list[Row]:
        """Run a statement and return positional rows."""
        return self.fetch(sql, timeout)[1]

    def run_scalar(self, sql: str, default: Any = None, timeout: int | None = None) -> Any:
        """Return the first column of the first row, or ``default``."""
        rows = self.run_rows(sql, timeout)
        if not rows or not rows[0] or rows[0][0] is None:
            return default
        return rows[0][0]

    def run_batched(
        self,
        candidates: Sequence[Candidate],
        batch_size: int | None = None,
        timeout: int | None = None,
    ) -> dict[str, list[Row]]:
        """Run many candidate queries in as few round trips as possible.

        Args:
            candidates: Label + inner query pairs. Labels must be unique.
            batch_size: Maximum candidates merged into one statement
                (defaults to the executor-wide ``batch_size``).
            timeout: Statement timeout (defaults to ``candidate_timeout``).

        Returns:
            Map of label to positional rows, in candidate order. The rows for
            a label are the rows its inner query returns on its own. Labels
            of skipped candidates are absent.
        """
        if batch_size is None:
            batch_size = self.batch_size
        if batch_size < 1:
            raise ValueError(f"batch_size must be positive, got {batch_size}")
        labels = [c.label for c in candidates]
        if len(set(labels)) != len(labels):
            duplicates = sorted({label for label in labels if labels.count(label) > 1})
            raise ValueError(f"Duplicate candidate labels: {', '.join(duplicates)}")

        effective_timeout = timeout if timeout is not None else self.candidate_timeout
        results: dict[str, list[Row]] = {}

        for start in range(0, len(candidates), batch_size):
            batch = list(candidates[start : start + batch_size])
            try:
                results.update(self._run_merged(batch, effective_timeout))
            except QueryError as exc:
                if exc.fault.fatal:
                    raise
                logger.warning(
                    "Batched query of %d candidate(s) failed (%s); retrying individually",
                    len(batch),
                    exc.fault.describe(),
                )
                results.update(self._run_individually(batch, effective_timeout))

        return {label: results[label] for label in labels if label in results}

    def build_merged_sql(self, batch: Sequence[Candidate]) -> str:
        """UNION ALL of every candidate, each tagged with its label literal."""
        label_column = quote_identifier(LABEL_COLUMN, self.dialect)
        branches = [
            f"SELECT {quote_literal(c.label, self.dialect)} AS {label_column}, q.* "
            f"FROM ({c.sql}) AS q"
            for c in batch
        ]
        return "\nUNION ALL\n".join(branches)

    def _run_merged(self, batch: Sequence[Candidate], timeout: int) -> dict[str, list[Row]]:
        _, rows = self.fetch(self.build_merged_sql(batch), timeout)
        buckets: dict[str, list[Row]] = {c.label: [] for c in batch}
        for row in rows:
            label = row[0]
            if label not in buckets:
                raise QueryError(
                    Fault(FaultKind.OTHER, "", f"Unexpected batch label in result: {label!r}")
                )
            buckets[label].append(tuple(row[1:]))
        return buckets

    def _run_individually(
        self, batch: Sequence[Candidate], timeout: int
    ) -> dict[str, list[Row]]:
        buckets: dict[str, list[Row]] = {}
        for candidate in batch:
            try:
                buckets[candidate.label] = self.run_rows(candidate.sql, timeout)
            except QueryError as exc:
                if exc.fault.fatal:
                    raise
                logger.warning(
                    "Skipping candidate %s: %s", candidate.label, exc.fault.describe()
                )
        return buckets
