"""Configuration classes for SQLDiag connections and diagnostics runs."""

from __future__ import annotations

import re
from dataclasses import dataclass

SUPPORTED_PROVIDERS = ("sqlserver", "postgresql")

_ODBC_DATABASE_KEYS = ("database", "initial catalog")
_ODBC_SERVER_KEYS = ("server", "data source", "address", "addr")


@dataclass
class ConnectionConfig:
    """Database connection configuration.

    Attributes:
        provider: Database provider ('sqlserver' or 'postgresql').
        server: Server hostname or IP address.
        database: Database name to diagnose.
        username: Login username.
        password: Login password (never logged or stored).
        port: Connection port.
        connection_string: Full connection string (overrides individual params).
        trusted_connection: Use Windows authentication (SQL Server).
        ssl: Enable SSL/TLS for the connection.
        connect_timeout: Login timeout in seconds.
    """

    provider: str = "sqlserver"
    server: str = "localhost"
    database: str = ""
    username: str = ""
    password: str = ""
    port: int = 1433
    connection_string: str = ""
    trusted_connection: bool = False
    ssl: bool = False
    connect_timeout: int = 5

    def __repr__(self) -> str:
        """Return string representation with password masked."""
        return (
            f"ConnectionConfig(provider={self.provider!r}, server={self.server!r}, "
            f"database={self.database!r}, username={self.username!r}, password='***', "
            f"port={self.port}, trusted_connection={self.trusted_connection}, ssl={self.ssl})"
        )

    @classmethod
    def from_connection_string(
        cls, connection_string: str, provider: str = "sqlserver"
    ) -> ConnectionConfig:
        """Build a config around a raw connection string.

        Server and database names are parsed out of the string so reports
        can name the target; the string itself is passed to the driver as-is.
        """
        pairs = _parse_key_value_pairs(connection_string)
        if provider == "postgresql":
            database = pairs.get("dbname", "")
            server = pairs.get("host", "")
            port = int(pairs["port"]) if pairs.get("port", "").isdigit() else 5432
        else:
            database = next((pairs[k] for k in _ODBC_DATABASE_KEYS if k in pairs), "")
            server = next((pairs[k] for k in _ODBC_SERVER_KEYS if k in pairs), "")
            port = 1433
            if "," in server:
                server, _, raw_port = server.partition(",")
                if raw_port.strip().isdigit():
                    port = int(raw_port.strip())
        return cls(
            provider=provider,
            server=server,
            database=database,
            port=port,
            connection_string=connection_string,
        )

    def get_masked_connection_info(self) -> str:
        """Return connection info with password masked for logging."""
        if self.connection_string:
            return re.sub(
                r"(password|pwd)\s*=\s*[^;\s]+",
                r"\1=***",
                self.connection_string,
                flags=re.IGNORECASE,
            )
        return f"{self.provider}://{self.username}:***@{self.server}:{self.port}/{self.database}"

    def validate(self) -> list[str]:
        """Validate configuration and return list of errors."""
        errors: list[str] = []
        if self.provider not in SUPPORTED_PROVIDERS:
            errors.append(f"Unsupported provider: {self.provider}")
        if not (1 <= self.port <= 65535):
            errors.append(f"Port must be between 1 and 65535, got {self.port}")
        if not self.connection_string:
            if not self.database:
                errors.append("Database name is required")
            if not self.trusted_connection and not self.username:
                errors.append("Username is required (or use trusted_connection)")
        return errors


@dataclass
class DiagnosticsConfig:
    """Configuration for a diagnostics run.

    Attributes:
        max_concurrency: How many checks may run at the same time.
        batch_size: Candidates merged into one batched statement.
        metadata_timeout: Statement timeout (seconds) for catalog lookups.
        candidate_timeout: Statement timeout (seconds) for batched/candidate queries.
        overview_category: Category that is always run, whatever the filter.
        evidence_display_limit: Items shown in a message before "... and K more".
            None keeps each check's own limit (15 for table lists, 10 otherwise).
    """

    max_concurrency: int = 5
    batch_size: int = 25
    metadata_timeout: int = 10
    candidate_timeout: int = 30
    overview_category: str = "Schema Overview"
    evidence_display_limit: int | None = None


def _parse_key_value_pairs(connection_string: str) -> dict[str, str]:
    """Split 'a=b;c=d' (ODBC) or 'a=b c=d' (libpq) into a lowercase-keyed dict."""
    separator = ";" if ";" in connection_string else None
    pairs: dict[str, str] = {}
    for part in connection_string.split(separator):
        key, sep, value = part.partition("=")
        if sep:
            pairs[key.strip().lower()] = value.strip().strip("'")
    return pairs
