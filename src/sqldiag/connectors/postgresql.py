"""PostgreSQL database connector using psycopg2."""

from __future__ import annotations

import logging
from typing import Any

from sqldiag.config import ConnectionConfig
from sqldiag.connectors.base import BaseConnector
from sqldiag.errors import QueryError, classify_fault

logger = logging.getLogger(__name__)


class PostgreSQLConnector(BaseConnector):
    """Connector for PostgreSQL databases.

    Uses psycopg2 for database connectivity. All operations are read-only.
    """

    dialect = "postgresql"

    def __init__(self, config: ConnectionConfig) -> None:
        super().__init__(config)

    def connect(self) -> None:
        """Establish connection to PostgreSQL."""
        import psycopg2

        try:
            if self.config.connection_string:
                logger.debug("Connecting to PostgreSQL via connection string")
                self._connection = psycopg2.connect(
                    self.config.connection_string,
                    connect_timeout=self.config.connect_timeout,
                )
            else:
                logger.debug(
                    "Connecting to PostgreSQL: %s", self.config.get_masked_connection_info()
                )
                kwargs: dict[str, Any] = {
                    "host": self.config.server,
                    "port": self.config.port,
                    "dbname": self.config.database,
                    "user": self.config.username,
                    "password": self.config.password,
                    "connect_timeout": self.config.connect_timeout,
                }
                if self.config.ssl:
                    kwargs["sslmode"] = "require"
                self._connection = psycopg2.connect(**kwargs)

            self._connection.set_session(readonly=True, autocommit=True)
        except psycopg2.Error as exc:
            raise QueryError(classify_fault(exc)) from exc

    def disconnect(self) -> None:
        """Close PostgreSQL connection."""
        if self._connection is not None:
            self._connection.close()
            self._connection = None

    def fetch(
        self, query: str, timeout: int | None = None
    ) -> tuple[list[str], list[tuple[Any, ...]]]:
        """Execute a read-only query and return column names and rows."""
        if self._connection is None:
            raise ConnectionError("Not connected to database")

        import psycopg2

        cursor = self._connection.cursor()
        try:
            if timeout is not None:
                cursor.execute("SET statement_timeout = %s", (int(timeout) * 1000,))
            cursor.execute(query)

            if cursor.description is None:
                return [], []
            columns = [desc[0] for desc in cursor.description]
            return columns, [tuple(row) for row in cursor.fetchall()]
        except psycopg2.Error as exc:
            raise QueryError(classify_fault(exc)) from exc
        finally:
            cursor.close()
