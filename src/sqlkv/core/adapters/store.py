"""SQL-backed key-value store.

Manifesto:
    A generic cache layer needs one durable primitive: ``get`` / ``set`` /
    ``has`` / ``delete`` / ``clear`` / ``all`` over string keys and string
    values. ``SqlStore`` provides it on any relational backend by building
    each operation as a SQLAlchemy Core statement, compiling it for the
    configured dialect, and running it through the injected executor.

    - **Namespace-scoped:** ``clear``/``all`` only touch ``"<namespace>:*"``
    - **Fail-safe:** a failed bootstrap degrades to empty defaults, never raises
    - **Dialect-correct:** upsert and escaping come from the dialect strategy

Architecture::

    SqlStore ──► StoreConfig (dialect, connector, table_name, key_size)
       │
       ├── DialectStrategy   upsert() / escape() / compile()
       ├── Table             key VARCHAR(key_size) PK, value TEXT
       └── ConnectionManager execute(sql) -> rows | None
              ▲
    NamespaceView ── shares the store's ConnectionManager, fixed namespace

Operations::

    get(key)         -> str | None        exact match, None when absent
    has(key)         -> bool
    set(key, value)  -> raw backend result
    delete(key)      -> bool              True only when a row was present
    clear()          -> None              keys starting with "<namespace>:"
    all()            -> list[StoredEntry] keys starting with "<namespace>:"

Degraded mode (bootstrap failed): ``get`` → ``None``, ``has``/``delete`` →
``False``, ``all`` → ``[]``, ``set``/``clear`` → ``None``.

Examples:
    >>> from sqlkv import SqlStore, sqlite_connector
    >>> store = SqlStore("sqlite", sqlite_connector(":memory:"), namespace="sessions")
    >>> await store.set("sessions:abc", '{"user": 1}')
    >>> await store.get("sessions:abc")
    '{"user": 1}'
    >>> await store.delete("sessions:abc")
    True

Guardrails:
    ❌ DON'T: Share one store between namespaces by flipping ``store.namespace``
    ✅ DO: ``store.view("sessions")`` per namespace

Tags:
    key-value, storage-adapter, sqlalchemy, namespace, async, sqlkv

Doc-Types:
    - API Reference
    - Architecture Documentation
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

from sqlalchemy import Table, delete, select
from sqlalchemy.sql.expression import ClauseElement, ColumnElement

from sqlkv.core.connection import ConnectionManager, ConnectionState
from sqlkv.core.dialect import DialectStrategy, get_dialect
from sqlkv.core.errors import BootstrapError, ConfigError, KeyTooLongError, ValidationError
from sqlkv.core.events import STORE_ERROR, EventBus, EventHandler
from sqlkv.core.logging import get_logger
from sqlkv.core.protocols import Connector, QueryExecutor, Row
from sqlkv.core.result import Result
from sqlkv.core.schema import DEFAULT_KEY_SIZE, DEFAULT_TABLE_NAME, define_table
from sqlkv.core.settings import StoreSettings

log = get_logger(__name__)

DEFAULT_NAMESPACE = "endb"


@dataclass(frozen=True)
class StoredEntry:
    """One persisted row."""

    key: str
    value: str

    def to_dict(self) -> dict[str, str]:
        return {"key": self.key, "value": self.value}


@dataclass(frozen=True)
class StoreConfig:
    """Immutable store configuration, validated at construction.

    Raises:
        ConfigError: Unknown dialect, empty table name, non-positive key size,
            or a connector that is not callable.
    """

    dialect: str | DialectStrategy
    connector: Connector
    table_name: str = DEFAULT_TABLE_NAME
    key_size: int = DEFAULT_KEY_SIZE

    def __post_init__(self) -> None:
        if not callable(self.connector):
            raise ConfigError("connector must be an async callable returning a query executor")
        get_dialect(self.dialect)
        define_table(self.table_name, self.key_size)


class SqlStore:
    """Asynchronous key-value store persisted in one SQL table.

    Construction never touches the database; the connector runs on the first
    operation (or on :meth:`initialize`).

    Args:
        dialect: Dialect name (``sqlite``, ``postgresql``, ``mysql``...) or strategy.
        connector: Async factory returning the query executor.
        table_name: Physical table name.
        key_size: Maximum key length, also the ``VARCHAR`` size of ``key``.
        namespace: Initial namespace used by :meth:`clear` and :meth:`all`.
        bus: Event bus for ``store.error``; a private in-memory bus by default.
    """

    def __init__(
        self,
        dialect: str | DialectStrategy,
        connector: Connector,
        *,
        table_name: str = DEFAULT_TABLE_NAME,
        key_size: int = DEFAULT_KEY_SIZE,
        namespace: str = DEFAULT_NAMESPACE,
        bus: EventBus | None = None,
    ):
        self._config = StoreConfig(
            dialect=dialect,
            connector=connector,
            table_name=table_name,
            key_size=key_size,
        )
        self._strategy = get_dialect(dialect)
        self._table = define_table(table_name, key_size)
        self._connection = ConnectionManager(connector, self._table, self._strategy, bus=bus)
        self._log = log.bind(table=table_name, dialect=self._strategy.name)

        self.namespace = namespace

    @classmethod
    def from_config(
        cls,
        config: StoreConfig,
        *,
        namespace: str = DEFAULT_NAMESPACE,
        bus: EventBus | None = None,
    ) -> SqlStore:
        return cls(
            config.dialect,
            config.connector,
            table_name=config.table_name,
            key_size=config.key_size,
            namespace=namespace,
            bus=bus,
        )

    @classmethod
    def from_settings(
        cls,
        connector: Connector,
        settings: StoreSettings | None = None,
    ) -> SqlStore:
        """Build a store from ``SQLKV_*`` settings (read from the environment by default)."""
        settings = settings or StoreSettings()
        return cls.from_config(settings.to_config(connector), namespace=settings.namespace)

    # ── Introspection ────────────────────────────────────────────

    @property
    def config(self) -> StoreConfig:
        return self._config

    @property
    def dialect(self) -> DialectStrategy:
        return self._strategy

    @property
    def table(self) -> Table:
        return self._table

    @property
    def state(self) -> ConnectionState:
        """Connection lifecycle state, inspectable without awaiting."""
        return self._connection.state

    @property
    def error(self) -> BootstrapError | None:
        """Bootstrap failure, if the store is degraded."""
        return self._connection.error

    # ── Lifecycle ────────────────────────────────────────────────

    async def initialize(self) -> Result[QueryExecutor]:
        """Connect and create the table now instead of on the first operation.

        Returns ``Ok(executor)`` or ``Err(BootstrapError)``; never raises.
        """
        return await self._connection.initialize()

    async def on_error(self, handler: EventHandler) -> str:
        """Subscribe ``handler`` to the ``store.error`` event; returns a subscription ID."""
        return await self._connection.bus.subscribe(STORE_ERROR, handler)

    async def off_error(self, subscription_id: str) -> None:
        await self._connection.bus.unsubscribe(subscription_id)

    async def close(self) -> None:
        await self._connection.close()

    def view(self, namespace: str) -> NamespaceView:
        """A namespace-bound view sharing this store's connection."""
        return NamespaceView(self, namespace)

    # ── Operations ───────────────────────────────────────────────

    async def get(self, key: str) -> str | None:
        """Value stored under ``key``, or ``None`` when absent."""
        if not self._fits(key):
            return None
        rows = await self._query("get", self._select_key(key))
        if not rows:
            return None
        return rows[0]["value"]

    async def has(self, key: str) -> bool:
        if not self._fits(key):
            return False
        rows = await self._query("has", self._select_key(key))
        return bool(rows)

    async def set(self, key: str, value: str) -> Any:
        """Insert or overwrite ``key``; returns the backend's raw result.

        Raises:
            KeyTooLongError: ``key`` is longer than ``key_size``.
            ValidationError: ``value`` is not a string.
        """
        if not self._fits(key):
            raise KeyTooLongError(key, self._config.key_size).with_context(
                table=self._table.name, operation="set"
            )
        if not isinstance(value, str):
            raise ValidationError(
                f"value must be a string, got {type(value).__name__}"
            ).with_context(table=self._table.name, operation="set", key=key)

        statement = self._strategy.upsert(self._table, key, self._strategy.escape(value))
        return await self._query("set", statement)

    async def delete(self, key: str) -> bool:
        """Remove ``key``; ``True`` only when a row was present.

        The presence check and the delete are two statements. A caller whose
        check saw the row reports ``True`` even if a concurrent delete removed
        it first.
        """
        if not self._fits(key):
            return False
        rows = await self._query("delete", self._select_key(key))
        if not rows:
            return False
        await self._query(
            "delete", delete(self._table).where(self._table.c["key"] == key)
        )
        return True

    async def clear(self, namespace: str | None = None) -> None:
        """Remove every key under ``namespace`` (default: ``self.namespace``)."""
        await self._query(
            "clear", delete(self._table).where(self._in_namespace(namespace))
        )

    async def all(self, namespace: str | None = None) -> list[StoredEntry]:
        """Every entry under ``namespace`` (default: ``self.namespace``), unordered."""
        rows = await self._query(
            "all", select(self._table).where(self._in_namespace(namespace))
        )
        return [StoredEntry(key=row["key"], value=row["value"]) for row in rows or []]

    # ── Query building ───────────────────────────────────────────

    def _fits(self, key: str) -> bool:
        return len(key) <= self._config.key_size

    def _select_key(self, key: str) -> ClauseElement:
        return select(self._table).where(self._table.c["key"] == key)

    def _in_namespace(self, namespace: str | None) -> ColumnElement[bool]:
        prefix = f"{self.namespace if namespace is None else namespace}:"
        # autoescape: '%' and '_' in a namespace match literally
        return self._table.c["key"].startswith(prefix, autoescape=True)

    async def _query(self, operation: str, statement: ClauseElement) -> Sequence[Row] | None:
        sql = self._strategy.compile(statement)
        self._log.debug("query_executed", operation=operation)
        return await self._connection.execute(sql)

    def __repr__(self) -> str:
        return (
            f"SqlStore(dialect={self._strategy.name!r}, table={self._table.name!r}, "
            f"namespace={self.namespace!r}, state={self.state.value})"
        )


class NamespaceView:
    """A store bound to one namespace.

    Keys passed to a view are *local*: ``view.get("abc")`` reads
    ``"<namespace>:abc"``. Entries returned by :meth:`all` carry the full
    stored key. Views never change ``store.namespace``.
    """

    def __init__(self, store: SqlStore, namespace: str):
        self._store = store
        self._namespace = namespace

    @property
    def namespace(self) -> str:
        return self._namespace

    @property
    def store(self) -> SqlStore:
        return self._store

    def key(self, local_key: str) -> str:
        """Full stored key for ``local_key``."""
        return f"{self._namespace}:{local_key}"

    async def get(self, key: str) -> str | None:
        return await self._store.get(self.key(key))

    async def has(self, key: str) -> bool:
        return await self._store.has(self.key(key))

    async def set(self, key: str, value: str) -> Any:
        return await self._store.set(self.key(key), value)

    async def delete(self, key: str) -> bool:
        return await self._store.delete(self.key(key))

    async def clear(self) -> None:
        await self._store.clear(namespace=self._namespace)

    async def all(self) -> list[StoredEntry]:
        return await self._store.all(namespace=self._namespace)

    def __repr__(self) -> str:
        return f"NamespaceView(namespace={self._namespace!r}, store={self._store!r})"


__all__ = [
    "DEFAULT_NAMESPACE",
    "StoredEntry",
    "StoreConfig",
    "SqlStore",
    "NamespaceView",
]
