"""
Shared pytest fixtures for sqlkv tests.

This module provides:
- A recording executor and a store over it, for asserting generated SQL
- A store over a private in-memory SQLite database, for real round-trips
- A store whose connector always fails, for degraded-mode tests

Usage:
    Fixtures are auto-discovered by pytest. Simply use them as function
    arguments (pytest injects them automatically).

    @pytest.mark.asyncio
    async def test_roundtrip(sqlite_store):
        await sqlite_store.set("endb:a", "1")
"""

from __future__ import annotations

import pytest

from sqlkv import SqlStore, sqlite_connector
from tests._support import CountingConnector, FailingConnector, RecordingExecutor


@pytest.fixture
def recorder() -> RecordingExecutor:
    return RecordingExecutor()


@pytest.fixture
def sqlite_store() -> SqlStore:
    """Store over a private in-memory SQLite database."""
    return SqlStore("sqlite", sqlite_connector(":memory:"))


@pytest.fixture
def failing_connector() -> FailingConnector:
    return FailingConnector()


@pytest.fixture
def failing_store(failing_connector: FailingConnector) -> SqlStore:
    """Store whose connector always fails."""
    return SqlStore("postgresql", failing_connector)


@pytest.fixture
def counting_connector(recorder: RecordingExecutor) -> CountingConnector:
    return CountingConnector(recorder)
