"""PostgreSQL connector.

Uses an ``asyncpg`` connection pool. Install the driver::

    pip install asyncpg
    # or:  pip install sqlkv[postgresql]

This connector is import-guarded: if ``asyncpg`` is not installed a clear
:class:`~sqlkv.core.errors.ConfigError` is raised when the store
bootstraps, and the store degrades like any other bootstrap failure.
"""

from __future__ import annotations

import re
from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

from sqlkv.core.errors import ConfigError, DatabaseConnectionError
from sqlkv.core.protocols import Connector

if TYPE_CHECKING:
    from asyncpg import Pool


def normalize_database_url(url: str) -> str:
    """Normalize database URL for asyncpg compatibility.

    Converts SQLAlchemy-style URLs (postgresql+asyncpg://) to
    plain PostgreSQL URLs (postgresql://) and removes unsupported
    query parameters.

    Examples:
        >>> normalize_database_url("postgresql+asyncpg://localhost/db")
        'postgresql://localhost/db'

        >>> normalize_database_url("postgresql://localhost/db?sslmode=require")
        'postgresql://localhost/db'
    """
    if url.startswith("postgresql+asyncpg://"):
        url = url.replace("postgresql+asyncpg://", "postgresql://", 1)

    # asyncpg takes SSL through ssl=, not the libpq query parameter
    if "?sslmode=" in url or "&sslmode=" in url:
        url = re.sub(r"[?&]sslmode=[^&]*", "", url)
        url = url.rstrip("?&")

    return url


class AsyncpgExecutor:
    """Query executor over an asyncpg pool."""

    def __init__(self, pool: Pool):
        self._pool = pool

    @property
    def pool(self) -> Pool:
        return self._pool

    async def __call__(self, sql: str) -> Sequence[dict[str, Any]]:
        records = await self._pool.fetch(sql)
        return [dict(record) for record in records]

    async def aclose(self) -> None:
        await self._pool.close()


def asyncpg_connector(
    dsn: str,
    *,
    min_size: int = 1,
    max_size: int = 10,
    command_timeout: float = 60.0,
) -> Connector:
    """Connector creating an asyncpg pool for ``dsn``."""

    async def connect() -> AsyncpgExecutor:
        try:
            import asyncpg
        except ImportError:
            raise ConfigError(
                "asyncpg is required for PostgreSQL. "
                "Install with: pip install sqlkv[postgresql]"
            ) from None

        try:
            pool = await asyncpg.create_pool(
                normalize_database_url(dsn),
                min_size=min_size,
                max_size=max_size,
                command_timeout=command_timeout,
            )
        except Exception as e:
            raise DatabaseConnectionError(
                f"Failed to connect to PostgreSQL: {e}",
                cause=e,
            ) from e
        return AsyncpgExecutor(pool)

    return connect


__all__ = [
    "AsyncpgExecutor",
    "asyncpg_connector",
    "normalize_database_url",
]
