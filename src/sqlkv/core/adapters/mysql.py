"""MySQL / MariaDB connector.

Uses ``mysql.connector`` from the ``mysql-connector-python`` package, run
in a worker thread. Install the driver::

    pip install mysql-connector-python
    # or:  pip install sqlkv[mysql]

This connector is import-guarded: if ``mysql.connector`` is not installed
a clear :class:`~sqlkv.core.errors.ConfigError` is raised when the store
bootstraps.

Statements arrive as finished SQL text and are sent without parameters,
so the server sees backslashes exactly as the dialect strategy escaped
them.
"""

from __future__ import annotations

import asyncio
from collections.abc import Sequence
from typing import Any

from sqlkv.core.errors import ConfigError, DatabaseConnectionError
from sqlkv.core.protocols import Connector


class MySQLExecutor:
    """Query executor over one ``mysql.connector`` connection."""

    def __init__(self, conn: Any):
        self._conn = conn
        self._lock = asyncio.Lock()

    async def __call__(self, sql: str) -> Sequence[dict[str, Any]]:
        async with self._lock:
            return await asyncio.to_thread(self._run, sql)

    def _run(self, sql: str) -> list[dict[str, Any]]:
        cursor = self._conn.cursor(dictionary=True)
        try:
            cursor.execute(sql)
            rows = list(cursor.fetchall()) if cursor.with_rows else []
            self._conn.commit()
            return rows
        except Exception:
            self._conn.rollback()
            raise
        finally:
            cursor.close()

    async def aclose(self) -> None:
        async with self._lock:
            await asyncio.to_thread(self._conn.close)


def mysql_connector(
    host: str = "localhost",
    port: int = 3306,
    database: str = "",
    user: str | None = None,
    password: str | None = None,
    *,
    charset: str = "utf8mb4",
    connect_timeout: int = 10,
) -> Connector:
    """Connector opening one MySQL connection."""

    async def connect() -> MySQLExecutor:
        try:
            import mysql.connector
        except ImportError:
            raise ConfigError(
                "mysql-connector-python is required for MySQL. "
                "Install with: pip install sqlkv[mysql]"
            ) from None

        try:
            conn = await asyncio.to_thread(
                mysql.connector.connect,
                host=host,
                port=port,
                database=database,
                user=user,
                password=password,
                charset=charset,
                connection_timeout=connect_timeout,
                autocommit=False,
            )
        except Exception as e:
            raise DatabaseConnectionError(
                f"Failed to connect to MySQL: {e}",
                cause=e,
            ) from e
        return MySQLExecutor(conn)

    return connect


__all__ = [
    "MySQLExecutor",
    "mysql_connector",
]
