"""Abstract base connector for database connections."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any

from sqldiag.config import ConnectionConfig

logger = logging.getLogger(__name__)


class BaseConnector(ABC):
    """Abstract base class for database connectors.

    All connectors are strictly read-only. They never execute DDL or DML
    statements that modify the database. Driver exceptions are translated
    into :class:`sqldiag.errors.QueryError` at this boundary.
    """

    #: Identifier/literal dialect used when building SQL for this connector.
    dialect = "sqlserver"

    def __init__(self, config: ConnectionConfig) -> None:
        self.config = config
        self._connection: Any = None

    @abstractmethod
    def connect(self) -> None:
        """Establish a connection to the database."""

    @abstractmethod
    def disconnect(self) -> None:
        """Close the database connection."""

    @abstractmethod
    def fetch(
        self, query: str, timeout: int | None = None
    ) -> tuple[list[str], list[tuple[Any, ...]]]:
        """Execute a SELECT query and return (column names, positional rows).

        Args:
            query: Read-only SQL statement.
            timeout: Statement timeout in seconds (None = driver default).
        """

    def execute_query(self, query: str, timeout: int | None = None) -> list[dict[str, Any]]:
        """Execute a SELECT query and return results as list of dicts."""
        columns, rows = self.fetch(query, timeout)
        return [dict(zip(columns, row)) for row in rows]

    @property
    def is_connected(self) -> bool:
        """Check if the connector has an active connection."""
        return self._connection is not None

    def __enter__(self) -> BaseConnector:
        self.connect()
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.disconnect()
