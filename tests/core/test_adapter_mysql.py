"""Tests for ``sqlkv.core.adapters.mysql``: MySQL connector."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest

from sqlkv import SqlStore
from sqlkv.core.adapters.mysql import MySQLExecutor, mysql_connector
from sqlkv.core.errors import ConfigError, DatabaseConnectionError


@pytest.fixture
def cursor():
    cursor = MagicMock()
    cursor.with_rows = False
    cursor.fetchall.return_value = []
    return cursor


@pytest.fixture
def conn(cursor):
    conn = MagicMock()
    conn.cursor.return_value = cursor
    return conn


@pytest.fixture
def fake_mysql(conn):
    connector_module = MagicMock()
    connector_module.connect.return_value = conn
    package = MagicMock()
    package.connector = connector_module
    with patch.dict("sys.modules", {"mysql": package, "mysql.connector": connector_module}):
        yield connector_module


class TestMySQLConnector:
    @pytest.mark.asyncio
    async def test_connect(self, fake_mysql, conn):
        executor = await mysql_connector(
            host="db", port=3307, database="kv", user="app", password="secret"
        )()

        assert isinstance(executor, MySQLExecutor)
        kwargs = fake_mysql.connect.call_args.kwargs
        assert kwargs["host"] == "db"
        assert kwargs["port"] == 3307
        assert kwargs["database"] == "kv"
        assert kwargs["user"] == "app"
        assert kwargs["charset"] == "utf8mb4"
        assert kwargs["autocommit"] is False

    @pytest.mark.asyncio
    async def test_missing_driver_raises_config_error(self):
        with patch.dict("sys.modules", {"mysql": None, "mysql.connector": None}):
            with pytest.raises(ConfigError, match="mysql-connector-python is required"):
                await mysql_connector()()

    @pytest.mark.asyncio
    async def test_connect_failure(self, fake_mysql):
        fake_mysql.connect.side_effect = OSError("Can't connect to MySQL server")
        with pytest.raises(DatabaseConnectionError, match="Failed to connect to MySQL"):
            await mysql_connector()()


class TestMySQLExecutor:
    @pytest.mark.asyncio
    async def test_select_returns_rows(self, conn, cursor):
        cursor.with_rows = True
        cursor.fetchall.return_value = [{"key": "endb:a", "value": "1"}]

        rows = await MySQLExecutor(conn)("SELECT 1")

        assert rows == [{"key": "endb:a", "value": "1"}]
        conn.cursor.assert_called_once_with(dictionary=True)
        cursor.execute.assert_called_once_with("SELECT 1")
        conn.commit.assert_called_once()
        cursor.close.assert_called_once()

    @pytest.mark.asyncio
    async def test_statement_without_rows(self, conn, cursor):
        assert await MySQLExecutor(conn)("DELETE FROM endb") == []
        cursor.fetchall.assert_not_called()

    @pytest.mark.asyncio
    async def test_failure_rolls_back(self, conn, cursor):
        cursor.execute.side_effect = RuntimeError("Lock wait timeout exceeded")
        with pytest.raises(RuntimeError):
            await MySQLExecutor(conn)("DELETE FROM endb")
        conn.rollback.assert_called_once()
        conn.commit.assert_not_called()
        cursor.close.assert_called_once()

    @pytest.mark.asyncio
    async def test_aclose(self, conn):
        await MySQLExecutor(conn).aclose()
        conn.close.assert_called_once()

    @pytest.mark.asyncio
    async def test_store_sends_escaped_backslashes(self, fake_mysql, cursor):
        store = SqlStore("mysql", mysql_connector())
        await store.set("endb:path", "C:\\temp")

        sent = [call.args[0] for call in cursor.execute.call_args_list]
        assert sent[0].startswith("CREATE TABLE IF NOT EXISTS endb")
        assert sent[1].startswith("REPLACE INTO endb")
        assert "'C:\\\\temp'" in sent[1]
