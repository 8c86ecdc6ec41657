"""Tests for ``sqlkv.core.adapters.sqlite``: SQLite connector."""

from __future__ import annotations

import sqlite3
from unittest.mock import patch

import pytest

from sqlkv.core.adapters.sqlite import SQLiteExecutor, sqlite_connector
from sqlkv.core.errors import DatabaseConnectionError


class TestSQLiteConnector:
    @pytest.mark.asyncio
    async def test_connect_memory(self):
        executor = await sqlite_connector()()
        assert isinstance(executor, SQLiteExecutor)
        assert await executor("SELECT 1 AS one") == [{"one": 1}]
        await executor.aclose()

    @pytest.mark.asyncio
    async def test_like_is_case_sensitive(self):
        executor = await sqlite_connector()()
        assert await executor("SELECT 'A:1' LIKE 'a:%' AS hit") == [{"hit": 0}]
        await executor.aclose()

    @pytest.mark.asyncio
    async def test_each_call_opens_a_new_connection(self):
        connect = sqlite_connector()
        first = await connect()
        second = await connect()
        await first("CREATE TABLE t (x TEXT)")
        with pytest.raises(sqlite3.OperationalError):
            await second("SELECT * FROM t")
        await first.aclose()
        await second.aclose()

    @pytest.mark.asyncio
    async def test_connect_failure_raises(self):
        failure = sqlite3.OperationalError("unable to open database")
        with patch("sqlite3.connect", side_effect=failure):
            with pytest.raises(DatabaseConnectionError, match="Failed to connect to SQLite"):
                await sqlite_connector("/nonexistent/path.db")()


class TestSQLiteExecutor:
    @pytest.fixture
    def connect(self, tmp_path):
        return sqlite_connector(str(tmp_path / "kv.db"))

    @pytest.mark.asyncio
    async def test_rows_are_dicts(self, connect):
        executor = await connect()
        await executor("CREATE TABLE t (key TEXT, value TEXT)")
        await executor("INSERT INTO t VALUES ('a', '1')")
        assert await executor("SELECT key, value FROM t") == [{"key": "a", "value": "1"}]
        await executor.aclose()

    @pytest.mark.asyncio
    async def test_statements_are_committed(self, connect):
        writer = await connect()
        await writer("CREATE TABLE t (x TEXT)")
        await writer("INSERT INTO t VALUES ('a')")

        reader = await connect()
        assert await reader("SELECT x FROM t") == [{"x": "a"}]
        await writer.aclose()
        await reader.aclose()

    @pytest.mark.asyncio
    async def test_failed_statement_rolls_back_and_raises(self, connect):
        executor = await connect()
        await executor("CREATE TABLE t (x TEXT PRIMARY KEY)")
        await executor("INSERT INTO t VALUES ('a')")
        with pytest.raises(sqlite3.IntegrityError):
            await executor("INSERT INTO t VALUES ('a')")
        assert await executor("SELECT x FROM t") == [{"x": "a"}]
        await executor.aclose()

    @pytest.mark.asyncio
    async def test_non_select_returns_empty_list(self, connect):
        executor = await connect()
        assert await executor("CREATE TABLE t (x TEXT)") == []
        await executor.aclose()
