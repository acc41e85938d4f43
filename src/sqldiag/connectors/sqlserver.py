"""SQL Server database connector using pyodbc."""

from __future__ import annotations

import logging
from typing import Any

from sqldiag.config import ConnectionConfig
from sqldiag.connectors.base import BaseConnector
from sqldiag.errors import QueryError, classify_fault

logger = logging.getLogger(__name__)


class SQLServerConnector(BaseConnector):
    """Connector for Microsoft SQL Server databases.

    Uses pyodbc for database connectivity. All operations are read-only.
    """

    dialect = "sqlserver"

    def __init__(self, config: ConnectionConfig) -> None:
        super().__init__(config)

    def _build_connection_string(self) -> str:
        """Build ODBC connection string from config."""
        if self.config.connection_string:
            return self.config.connection_string

        parts = [
            "DRIVER={ODBC Driver 17 for SQL Server}",
            f"SERVER={self.config.server},{self.config.port}",
            f"DATABASE={self.config.database}",
        ]

        if self.config.trusted_connection:
            parts.append("Trusted_Connection=Yes")
        else:
            parts.append(f"UID={self.config.username}")
            parts.append(f"PWD={self.config.password}")

        if self.config.ssl:
            parts.append("Encrypt=Yes")
            parts.append("TrustServerCertificate=No")

        return ";".join(parts)

    def connect(self) -> None:
        """Establish connection to SQL Server."""
        import pyodbc

        conn_str = self._build_connection_string()
        logger.debug("Connecting to SQL Server: %s", self.config.get_masked_connection_info())
        try:
            self._connection = pyodbc.connect(
                conn_str, readonly=True, timeout=self.config.connect_timeout
            )
        except pyodbc.Error as exc:
            raise QueryError(classify_fault(exc)) from exc

    def disconnect(self) -> None:
        """Close SQL Server connection."""
        if self._connection is not None:
            self._connection.close()
            self._connection = None

    def fetch(
        self, query: str, timeout: int | None = None
    ) -> tuple[list[str], list[tuple[Any, ...]]]:
        """Execute a read-only query and return column names and rows."""
        if self._connection is None:
            raise ConnectionError("Not connected to database")

        import pyodbc

        if timeout is not None:
            self._connection.timeout = timeout

        cursor = self._connection.cursor()
        try:
            cursor.execute(query)
            columns = [desc[0] for desc in cursor.description] if cursor.description else []
            rows = [tuple(row) for row in cursor.fetchall()] if cursor.description else []
            return columns, rows
        except pyodbc.Error as exc:
            raise QueryError(classify_fault(exc)) from exc
        finally:
            cursor.close()
