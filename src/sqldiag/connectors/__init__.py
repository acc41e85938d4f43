"""Database connectors for SQLDiag."""

from __future__ import annotations

from sqldiag.config import ConnectionConfig
from sqldiag.connectors.base import BaseConnector
from sqldiag.connectors.postgresql import PostgreSQLConnector
from sqldiag.connectors.sqlserver import SQLServerConnector
from sqldiag.errors import ConfigurationError


def create_connector(config: ConnectionConfig) -> BaseConnector:
    """Return an unconnected connector for the configured provider."""
    if config.provider == "sqlserver":
        return SQLServerConnector(config)
    if config.provider == "postgresql":
        return PostgreSQLConnector(config)
    raise ConfigurationError(f"Unsupported provider: {config.provider}")


__all__ = ["BaseConnector", "SQLServerConnector", "PostgreSQLConnector", "create_connector"]
