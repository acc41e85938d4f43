"""Diagnostics runner: selects checks and executes them concurrently."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor, as_completed

from sqldiag.checks.base import BaseCheck
from sqldiag.checks.registry import CheckRegistry, build_registry
from sqldiag.config import ConnectionConfig, DiagnosticsConfig
from sqldiag.connectors import create_connector
from sqldiag.connectors.base import BaseConnector
from sqldiag.execution.query_executor import QueryExecutor
from sqldiag.models import CheckResult, Status

logger = logging.getLogger(__name__)


class DiagnosticsRunner:
    """Run the selected checks against one database.

    At most ``config.max_concurrency`` checks run at once; a check starts
    only when a worker is free. Every check runs inside an error boundary,
    so a check that raises produces a Fail result for itself and leaves
    the other results alone.

    Args:
        registry: Check catalogue. Built with :func:`build_registry` if omitted.
        config: Concurrency, batching and timeout settings.
        connector_factory: Opens connectors for the executor.
        provider: Provider assumed for raw connection strings.
    """

    def __init__(
        self,
        registry: CheckRegistry | None = None,
        config: DiagnosticsConfig | None = None,
        connector_factory: Callable[[ConnectionConfig], BaseConnector] = create_connector,
        provider: str = "sqlserver",
    ) -> None:
        self.config = config or DiagnosticsConfig()
        if self.config.max_concurrency < 1:
            raise ValueError(
                f"max_concurrency must be at least 1, got {self.config.max_concurrency}"
            )
        self.registry = registry or build_registry(
            display_limit=self.config.evidence_display_limit
        )
        self.connector_factory = connector_factory
        self.provider = provider

    def run(
        self, connection: str | ConnectionConfig | None, category: str | None = None
    ) -> list[CheckResult]:
        """Execute the checks and return one result per selected check.

        Args:
            connection: Raw connection string or a prepared config. A blank
                or unusable handle yields an empty list.
            category: Optional category filter. The overview category is
                always included.

        Returns:
            Results in completion order, not catalogue order.
        """
        target = self._resolve_connection(connection)
        if target is None:
            return []

        checks = self.registry.select(category, self.config.overview_category)
        executor = QueryExecutor(
            target,
            connector_factory=self.connector_factory,
            metadata_timeout=self.config.metadata_timeout,
            candidate_timeout=self.config.candidate_timeout,
            batch_size=self.config.batch_size,
        )

        logger.info(
            "Running %d check(s) against %s (concurrency %d)",
            len(checks),
            target.get_masked_connection_info(),
            self.config.max_concurrency,
        )
        started = time.perf_counter()

        results: list[CheckResult] = []
        with ThreadPoolExecutor(
            max_workers=self.config.max_concurrency, thread_name_prefix="sqldiag-check"
        ) as pool:
            futures = [pool.submit(self._execute_guarded, check, executor) for check in checks]
            for future in as_completed(futures):
                results.append(future.result())

        logger.info(
            "Finished %d check(s) in %.0f ms",
            len(results),
            (time.perf_counter() - started) * 1000,
        )
        return results

    def _resolve_connection(
        self, connection: str | ConnectionConfig | None
    ) -> ConnectionConfig | None:
        if connection is None:
            logger.warning("No connection supplied; nothing to run")
            return None
        if isinstance(connection, str):
            if not connection.strip():
                logger.warning("Blank connection string; nothing to run")
                return None
            connection = ConnectionConfig.from_connection_string(connection, self.provider)

        problems = connection.validate()
        if problems:
            logger.warning("Unusable connection (%s); nothing to run", "; ".join(problems))
            return None
        return connection

    @staticmethod
    def _execute_guarded(check: BaseCheck, executor: QueryExecutor) -> CheckResult:
        started = time.perf_counter()
        try:
            return check.execute(executor)
        except Exception as exc:
            logger.error("Check %s (%s) threw", check.id, check.name, exc_info=True)
            return CheckResult(
                check_id=check.id,
                name=check.name,
                status=Status.FAIL,
                message=f"Check threw: {exc}",
                elapsed_ms=int((time.perf_counter() - started) * 1000),
                category=check.category,
                code=check.code,
            )
