"""
Protocol definitions for the store's collaborators.

The store never talks to a database driver directly. It receives a
*connector*: an async factory that, when awaited once, yields a
*query executor*. The executor takes one SQL string and returns the rows
it produced (an empty sequence for statements that return nothing).

Architecture:
    ::

        Connector        async () -> QueryExecutor          (called once)
        QueryExecutor    async (sql: str) -> Sequence[Row]  (per query)
        Row              Mapping with at least "key" and "value"

    Bundled implementations live in ``sqlkv.core.adapters``:
    ``sqlite_connector``, ``asyncpg_connector``, ``mysql_connector``.

Tags:
    protocol, connector, executor, async, sqlkv, contracts

Doc-Types:
    - API Reference
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Mapping, Sequence
from typing import Any, Protocol, runtime_checkable

Row = Mapping[str, Any]


@runtime_checkable
class QueryExecutor(Protocol):
    """Runs one SQL string against the backend and returns its rows."""

    def __call__(self, sql: str) -> Awaitable[Sequence[Row]]: ...


Connector = Callable[[], Awaitable[QueryExecutor]]


__all__ = [
    "Row",
    "QueryExecutor",
    "Connector",
]
