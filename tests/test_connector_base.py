"""Tests for the connector base class and the driver-backed connectors."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest

from sqldiag.config import ConnectionConfig
from sqldiag.connectors import create_connector
from sqldiag.connectors.base import BaseConnector
from sqldiag.connectors.postgresql import PostgreSQLConnector
from sqldiag.connectors.sqlserver import SQLServerConnector
from sqldiag.errors import ConfigurationError, FaultKind, QueryError


class ConcreteConnector(BaseConnector):
    """Minimal concrete implementation for testing the base class."""

    def connect(self) -> None:
        self._connection = "active"

    def disconnect(self) -> None:
        self._connection = None

    def fetch(self, query, timeout=None):  # type: ignore[override]
        return ["id", "name"], [(1, "Ada"), (2, "Grace")]


class _DriverError(Exception):
    """Stand-in for a driver's base Error class."""


@pytest.fixture
def config() -> ConnectionConfig:
    return ConnectionConfig(
        provider="sqlserver",
        server="localhost",
        database="SalesDB",
        username="sa",
        password="secret",
    )


class TestBaseConnector:
    def test_is_connected_false_initially(self, config: ConnectionConfig) -> None:
        assert ConcreteConnector(config).is_connected is False

    def test_context_manager_connects_and_disconnects(self, config: ConnectionConfig) -> None:
        conn = ConcreteConnector(config)
        with conn:
            assert conn.is_connected is True
        assert conn.is_connected is False

    def test_context_manager_disconnects_on_exception(self, config: ConnectionConfig) -> None:
        conn = ConcreteConnector(config)
        with pytest.raises(ValueError):
            with conn:
                raise ValueError("test error")
        assert conn.is_connected is False

    def test_execute_query_returns_dicts(self, config: ConnectionConfig) -> None:
        rows = ConcreteConnector(config).execute_query("SELECT id, name FROM t")
        assert rows == [{"id": 1, "name": "Ada"}, {"id": 2, "name": "Grace"}]


class TestCreateConnector:
    def test_sqlserver(self, config: ConnectionConfig) -> None:
        assert isinstance(create_connector(config), SQLServerConnector)

    def test_postgresql(self) -> None:
        connector = create_connector(ConnectionConfig(provider="postgresql", database="db"))
        assert isinstance(connector, PostgreSQLConnector)
        assert connector.dialect == "postgresql"

    def test_unknown_provider(self) -> None:
        with pytest.raises(ConfigurationError, match="Unsupported provider"):
            create_connector(ConnectionConfig(provider="oracle"))


class TestSQLServerConnector:
    def test_login_failure_raises_query_error(self) -> None:
        config = ConnectionConfig(
            provider="sqlserver",
            server="nonexistent",
            database="SalesDB",
            username="sa",
            password="wrong",
        )
        connector = SQLServerConnector(config)

        mock_pyodbc = MagicMock()
        mock_pyodbc.Error = _DriverError
        mock_pyodbc.connect.side_effect = _DriverError(
            "28000", "[28000] Login failed for user 'sa'. (18456)"
        )
        with patch.dict("sys.modules", {"pyodbc": mock_pyodbc}):
            with pytest.raises(QueryError) as info:
                connector.connect()

        assert info.value.kind == FaultKind.AUTHORIZATION

    def test_connect_is_read_only_with_timeout(self, config: ConnectionConfig) -> None:
        mock_pyodbc = MagicMock()
        mock_pyodbc.Error = _DriverError
        with patch.dict("sys.modules", {"pyodbc": mock_pyodbc}):
            SQLServerConnector(config).connect()

        _, kwargs = mock_pyodbc.connect.call_args
        assert kwargs == {"readonly": True, "timeout": config.connect_timeout}

    def test_fetch_sets_timeout_and_returns_rows(self, config: ConnectionConfig) -> None:
        connector = SQLServerConnector(config)
        cursor = MagicMock()
        cursor.description = [("n",)]
        cursor.fetchall.return_value = [(3,)]
        connector._connection = MagicMock()
        connector._connection.cursor.return_value = cursor

        with patch.dict("sys.modules", {"pyodbc": MagicMock(Error=_DriverError)}):
            result = connector.fetch("SELECT COUNT(*) AS n FROM t", timeout=12)

        assert result == (["n"], [(3,)])
        assert connector._connection.timeout == 12
        cursor.close.assert_called_once()

    def test_fetch_without_connection_raises(self) -> None:
        connector = SQLServerConnector(ConnectionConfig(provider="sqlserver", database="DB"))
        with pytest.raises(ConnectionError, match="Not connected"):
            connector.fetch("SELECT 1")

    def test_build_connection_string_trusted(self) -> None:
        config = ConnectionConfig(
            provider="sqlserver", server="myhost", database="MyDB", trusted_connection=True
        )
        conn_str = SQLServerConnector(config)._build_connection_string()
        assert "Trusted_Connection=Yes" in conn_str
        assert "UID=" not in conn_str

    def test_build_connection_string_ssl(self, config: ConnectionConfig) -> None:
        config.ssl = True
        assert "Encrypt=Yes" in SQLServerConnector(config)._build_connection_string()

    def test_build_connection_string_custom(self) -> None:
        custom = "Server=myhost;Database=MyDB;Trusted_Connection=True;"
        config = ConnectionConfig(provider="sqlserver", connection_string=custom)
        assert SQLServerConnector(config)._build_connection_string() == custom


class TestPostgreSQLConnector:
    def test_connection_failure_raises_query_error(self) -> None:
        config = ConnectionConfig(
            provider="postgresql",
            server="nonexistent",
            database="salesdb",
            username="postgres",
            password="wrong",
            port=5432,
        )

        class OperationalError(_DriverError):
            pass

        mock_pg = MagicMock()
        mock_pg.Error = _DriverError
        mock_pg.connect.side_effect = OperationalError("could not connect to server")
        with patch.dict("sys.modules", {"psycopg2": mock_pg}):
            with pytest.raises(QueryError) as info:
                PostgreSQLConnector(config).connect()

        assert info.value.kind == FaultKind.CONNECTIVITY

    def test_session_is_read_only(self) -> None:
        config = ConnectionConfig(provider="postgresql", database="salesdb", port=5432, ssl=True)
        mock_pg = MagicMock()
        mock_pg.Error = _DriverError
        with patch.dict("sys.modules", {"psycopg2": mock_pg}):
            PostgreSQLConnector(config).connect()

        assert mock_pg.connect.call_args.kwargs["sslmode"] == "require"
        mock_pg.connect.return_value.set_session.assert_called_once_with(
            readonly=True, autocommit=True
        )

    def test_fetch_sets_statement_timeout(self) -> None:
        connector = PostgreSQLConnector(ConnectionConfig(provider="postgresql", database="db"))
        cursor = MagicMock()
        cursor.description = [("n",)]
        cursor.fetchall.return_value = [(3,)]
        connector._connection = MagicMock()
        connector._connection.cursor.return_value = cursor

        with patch.dict("sys.modules", {"psycopg2": MagicMock(Error=_DriverError)}):
            result = connector.fetch("SELECT 3 AS n", timeout=5)

        assert result == (["n"], [(3,)])
        cursor.execute.assert_any_call("SET statement_timeout = %s", (5000,))

    def test_fetch_without_connection_raises(self) -> None:
        connector = PostgreSQLConnector(ConnectionConfig(provider="postgresql", database="DB"))
        with pytest.raises(ConnectionError, match="Not connected"):
            connector.fetch("SELECT 1")
