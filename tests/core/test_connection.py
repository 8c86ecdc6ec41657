"""Tests for the one-shot lazy bootstrap and degraded mode."""

from __future__ import annotations

import asyncio

import pytest

from sqlkv.core.connection import ConnectionManager, ConnectionState
from sqlkv.core.dialect import get_dialect
from sqlkv.core.errors import BootstrapError
from sqlkv.core.events import STORE_ERROR, Event
from sqlkv.core.events.memory import InMemoryEventBus
from sqlkv.core.result import Err, Ok
from sqlkv.core.schema import define_table
from tests._support import CountingConnector, FailingConnector, RecordingExecutor


def make_manager(connector, dialect="sqlite", **kwargs) -> ConnectionManager:
    return ConnectionManager(connector, define_table(), get_dialect(dialect), **kwargs)


class TestLazyBootstrap:
    def test_construction_does_not_connect(self, counting_connector):
        manager = make_manager(counting_connector)
        assert manager.state == ConnectionState.PENDING
        assert manager.error is None
        assert counting_connector.calls == 0

    @pytest.mark.asyncio
    async def test_first_query_creates_table_then_runs(self, counting_connector, recorder):
        manager = make_manager(counting_connector)
        await manager.execute("SELECT 1")

        assert manager.state == ConnectionState.READY
        assert len(recorder.statements) == 2
        assert recorder.statements[0].startswith("CREATE TABLE IF NOT EXISTS endb")
        assert recorder.statements[1] == "SELECT 1"

    @pytest.mark.asyncio
    async def test_connector_called_once_under_concurrency(self, recorder):
        connector = CountingConnector(recorder, delay=0.01)
        manager = make_manager(connector)

        await asyncio.gather(*(manager.execute(f"SELECT {i}") for i in range(20)))

        assert connector.calls == 1
        creates = [s for s in recorder.statements if s.startswith("CREATE TABLE")]
        assert len(creates) == 1
        assert len(recorder.queries) == 20

    @pytest.mark.asyncio
    async def test_initialize_returns_executor(self, counting_connector, recorder):
        manager = make_manager(counting_connector)
        match await manager.initialize():
            case Ok(executor):
                assert executor is recorder
            case Err(error):
                pytest.fail(f"unexpected bootstrap failure: {error}")

        # memoized: a second call does not reconnect
        assert (await manager.initialize()).unwrap() is recorder
        assert counting_connector.calls == 1

    @pytest.mark.asyncio
    async def test_cancelled_waiter_does_not_cancel_bootstrap(self, recorder):
        connector = CountingConnector(recorder, delay=0.05)
        manager = make_manager(connector)

        waiter = asyncio.ensure_future(manager.execute("SELECT 1"))
        await asyncio.sleep(0.01)
        waiter.cancel()
        with pytest.raises(asyncio.CancelledError):
            await waiter

        await manager.execute("SELECT 2")
        assert manager.state == ConnectionState.READY
        assert connector.calls == 1


class TestBootstrapFailure:
    @pytest.mark.asyncio
    async def test_connector_failure_degrades(self, failing_connector):
        manager = make_manager(failing_connector, dialect="postgresql")

        assert await manager.execute("SELECT 1") is None
        assert manager.state == ConnectionState.FAILED
        assert isinstance(manager.error, BootstrapError)
        assert manager.error.cause is failing_connector.exc
        assert manager.error.context.table == "endb"
        assert manager.error.context.dialect == "postgresql"

    @pytest.mark.asyncio
    async def test_initialize_returns_err(self, failing_connector):
        manager = make_manager(failing_connector)
        result = await manager.initialize()
        assert result.is_err()
        assert result.error is manager.error

    @pytest.mark.asyncio
    async def test_failure_is_terminal(self, failing_connector):
        manager = make_manager(failing_connector)
        for _ in range(3):
            assert await manager.execute("SELECT 1") is None
        assert failing_connector.calls == 1

    @pytest.mark.asyncio
    async def test_create_table_failure_degrades(self):
        def responder(sql):
            if sql.startswith("CREATE TABLE"):
                raise PermissionError("permission denied for schema public")
            return []

        executor = RecordingExecutor(responder)
        manager = make_manager(CountingConnector(executor))

        assert await manager.execute("SELECT 1") is None
        assert manager.state == ConnectionState.FAILED
        assert isinstance(manager.error.cause, PermissionError)
        assert executor.queries == []

    @pytest.mark.asyncio
    async def test_non_callable_executor_degrades(self):
        manager = make_manager(CountingConnector(object()))
        assert await manager.execute("SELECT 1") is None
        assert isinstance(manager.error.cause, TypeError)

    @pytest.mark.asyncio
    async def test_error_event_published_once(self, failing_connector):
        bus = InMemoryEventBus()
        events = []

        async def handler(event):
            events.append(event)

        await bus.subscribe(STORE_ERROR, handler)
        manager = make_manager(failing_connector, dialect="mysql", bus=bus)

        await asyncio.gather(*(manager.execute("SELECT 1") for _ in range(5)))
        await manager.execute("SELECT 2")

        assert len(events) == 1
        payload = events[0].payload
        assert payload["error"] is manager.error
        assert payload["table"] == "endb"
        assert payload["dialect"] == "mysql"
        assert events[0].source == "endb"


class TestQueryErrors:
    @pytest.mark.asyncio
    async def test_query_error_propagates_unchanged(self):
        boom = RuntimeError("deadlock detected")

        def responder(sql):
            if sql.startswith("SELECT"):
                raise boom
            return []

        manager = make_manager(CountingConnector(RecordingExecutor(responder)))

        with pytest.raises(RuntimeError) as exc_info:
            await manager.execute("SELECT 1")
        assert exc_info.value is boom
        assert manager.state == ConnectionState.READY
        assert manager.error is None


class TestClose:
    @pytest.mark.asyncio
    async def test_close_releases_executor_and_bus(self, counting_connector, recorder):
        manager = make_manager(counting_connector)
        await manager.execute("SELECT 1")
        received = []

        async def handler(event):
            received.append(event)

        await manager.bus.subscribe(STORE_ERROR, handler)

        await manager.close()
        await manager.bus.publish(Event(event_type=STORE_ERROR, source="endb"))

        assert recorder.closed is True
        assert received == []

    @pytest.mark.asyncio
    async def test_close_before_bootstrap(self, counting_connector):
        manager = make_manager(counting_connector)
        await manager.close()
        assert counting_connector.calls == 0
