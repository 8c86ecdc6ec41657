"""SQLite connector.

Uses the built-in sqlite3 module, run in a worker thread so the event loop
never blocks. Suitable for:
- Development and testing
- Single-process applications
"""

from __future__ import annotations

import asyncio
import sqlite3
from collections.abc import Sequence
from typing import Any

from sqlkv.core.errors import DatabaseConnectionError
from sqlkv.core.protocols import Connector


class SQLiteExecutor:
    """Query executor over one sqlite3 connection.

    Statements are serialized on an ``asyncio.Lock`` and each one is
    committed before the next runs.
    """

    def __init__(self, conn: sqlite3.Connection):
        self._conn = conn
        self._lock = asyncio.Lock()

    async def __call__(self, sql: str) -> Sequence[dict[str, Any]]:
        async with self._lock:
            return await asyncio.to_thread(self._run, sql)

    def _run(self, sql: str) -> list[dict[str, Any]]:
        try:
            cursor = self._conn.execute(sql)
            rows = [dict(row) for row in cursor.fetchall()]
            self._conn.commit()
        except Exception:
            self._conn.rollback()
            raise
        return rows

    async def aclose(self) -> None:
        async with self._lock:
            await asyncio.to_thread(self._conn.close)


def sqlite_connector(path: str = ":memory:", *, timeout: float = 5.0) -> Connector:
    """Connector opening ``path`` (a file, ``:memory:`` or a ``file:`` URI)."""

    def open_connection() -> sqlite3.Connection:
        uri = path.startswith("file:") or "?" in path
        conn = sqlite3.connect(path, timeout=timeout, check_same_thread=False, uri=uri)
        conn.row_factory = sqlite3.Row

        # Namespace prefixes are matched with LIKE
        conn.execute("PRAGMA case_sensitive_like = ON")
        return conn

    async def connect() -> SQLiteExecutor:
        try:
            conn = await asyncio.to_thread(open_connection)
        except sqlite3.Error as e:
            raise DatabaseConnectionError(
                f"Failed to connect to SQLite: {e}",
                cause=e,
            ) from e
        return SQLiteExecutor(conn)

    return connect


__all__ = [
    "SQLiteExecutor",
    "sqlite_connector",
]
