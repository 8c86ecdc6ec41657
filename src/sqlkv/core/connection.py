"""
One-shot, memoized connection bootstrap shared by every store operation.

Manifesto:
    A store must be constructible without a running event loop and without
    a reachable database. Connecting therefore happens lazily, on the first
    query, and exactly once: concurrent first queries all await the *same*
    in-flight bootstrap, so the connector is invoked at most once and the
    table is created at most once per store.

    A failed bootstrap is terminal. It is logged, recorded in ``state`` /
    ``error`` and published once as ``store.error``; it is never raised.
    From then on ``execute()`` resolves to ``None`` for every query and the
    store answers with empty defaults.

Architecture:
    ::

        PENDING ──first execute()/initialize()──► CONNECTING
                                                    │
                          connector() + CREATE TABLE IF NOT EXISTS
                                                    │
                                  ┌─────────────────┴─────────────────┐
                                  ▼                                   ▼
                          READY(executor)                     FAILED(BootstrapError)
                          execute() → rows                    execute() → None
                                                              publish("store.error")

Examples:
    >>> manager = ConnectionManager(connector, define_table(), get_dialect("sqlite"))
    >>> manager.state
    <ConnectionState.PENDING: 'pending'>
    >>> rows = await manager.execute("SELECT 1")
    >>> manager.state
    <ConnectionState.READY: 'ready'>

Tags:
    connection, bootstrap, lazy-init, memoization, asyncio, sqlkv

Doc-Types:
    - API Reference
    - Architecture Documentation
"""

from __future__ import annotations

import asyncio
import inspect
from collections.abc import Sequence
from enum import Enum

from sqlalchemy import Table

from sqlkv.core.dialect import DialectStrategy
from sqlkv.core.errors import BootstrapError
from sqlkv.core.events import STORE_ERROR, Event, EventBus
from sqlkv.core.events.memory import InMemoryEventBus
from sqlkv.core.logging import get_logger
from sqlkv.core.protocols import Connector, QueryExecutor, Row
from sqlkv.core.result import Err, Ok, Result
from sqlkv.core.schema import create_table_statement

log = get_logger(__name__)


class ConnectionState(str, Enum):
    """Lifecycle of a store's connection handle."""

    PENDING = "pending"
    CONNECTING = "connecting"
    READY = "ready"
    FAILED = "failed"


class ConnectionManager:
    """Lazily connects once and memoizes the executor or the failure.

    Args:
        connector: Async factory returning the query executor; called at most once.
        table: Table to create (if absent) before the first query.
        strategy: Dialect strategy used to compile the create statement.
        bus: Event bus receiving ``store.error``; a private in-memory bus by default.
    """

    def __init__(
        self,
        connector: Connector,
        table: Table,
        strategy: DialectStrategy,
        *,
        bus: EventBus | None = None,
    ):
        self._connector = connector
        self._table = table
        self._strategy = strategy
        self._bus: EventBus = bus if bus is not None else InMemoryEventBus()

        self._state = ConnectionState.PENDING
        self._executor: QueryExecutor | None = None
        self._error: BootstrapError | None = None
        self._bootstrap: asyncio.Future[Result[QueryExecutor]] | None = None

        self._log = log.bind(table=table.name, dialect=strategy.name)

    @property
    def state(self) -> ConnectionState:
        """Current lifecycle state (inspectable without awaiting)."""
        return self._state

    @property
    def error(self) -> BootstrapError | None:
        """The bootstrap failure, once ``state`` is ``FAILED``."""
        return self._error

    @property
    def bus(self) -> EventBus:
        return self._bus

    async def initialize(self) -> Result[QueryExecutor]:
        """Run (or join) the bootstrap and return its outcome. Never raises.

        Cancelling one waiting caller does not cancel the bootstrap other
        callers are waiting on. Once the failure is recorded (before
        ``store.error`` handlers run) callers get ``Err`` without waiting,
        so a handler may itself call the store.
        """
        if self._executor is not None:
            return Ok(self._executor)
        if self._error is not None:
            return Err(self._error)
        if self._bootstrap is None:
            self._state = ConnectionState.CONNECTING
            self._bootstrap = asyncio.ensure_future(self._run_bootstrap())
        return await asyncio.shield(self._bootstrap)

    async def execute(self, sql: str) -> Sequence[Row] | None:
        """Run ``sql`` through the memoized executor.

        Returns ``None`` without touching the backend when the bootstrap
        failed. Errors raised by the executor itself propagate to the caller.
        """
        match await self.initialize():
            case Ok(executor):
                return await executor(sql)
            case Err():
                self._log.debug("query_skipped_degraded")
                return None

    async def close(self) -> None:
        """Release the executor (when it exposes ``aclose``) and the event bus."""
        aclose = getattr(self._executor, "aclose", None)
        if aclose is not None:
            result = aclose()
            if inspect.isawaitable(result):
                await result
        await self._bus.close()

    async def _run_bootstrap(self) -> Result[QueryExecutor]:
        self._log.info("bootstrap_started")
        try:
            executor = await self._connector()
            if not callable(executor):
                raise TypeError(
                    f"connector must return a callable executor, got {type(executor).__name__}"
                )
            await executor(self._strategy.compile(create_table_statement(self._table)))
        except Exception as exc:
            return await self._fail(exc)

        self._executor = executor
        self._state = ConnectionState.READY
        self._log.info("bootstrap_ready")
        return Ok(executor)

    async def _fail(self, exc: Exception) -> Result[QueryExecutor]:
        error = BootstrapError(
            f"Store bootstrap failed: {exc}",
            cause=exc,
        ).with_context(table=self._table.name, dialect=self._strategy.name)

        self._error = error
        self._state = ConnectionState.FAILED
        self._log.error("bootstrap_failed", **error.to_dict())

        await self._bus.publish(
            Event(
                event_type=STORE_ERROR,
                source=self._table.name,
                payload={
                    "error": error,
                    "table": self._table.name,
                    "dialect": self._strategy.name,
                },
            )
        )
        return Err(error)


__all__ = [
    "ConnectionState",
    "ConnectionManager",
]
