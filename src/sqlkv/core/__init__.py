"""
sqlkv core primitives.

Modules
-------
errors          SqlKvError hierarchy with category and context
result          Ok / Err result values
logging         structlog configuration and context binding
settings        SQLKV_* environment settings (pydantic-settings)
schema          The (key, value) table definition
dialect         Dialect strategies: upsert and escaping per backend
connection      One-shot lazy bootstrap and degraded mode
events          store.error event and in-memory event bus
adapters        SqlStore, NamespaceView and bundled connectors
"""

from sqlkv.core.adapters import (
    DEFAULT_NAMESPACE,
    NamespaceView,
    SqlStore,
    StoreConfig,
    StoredEntry,
    asyncpg_connector,
    mysql_connector,
    sqlite_connector,
)
from sqlkv.core.connection import ConnectionManager, ConnectionState
from sqlkv.core.dialect import (
    BackslashEscapingStrategy,
    ConflictClauseStrategy,
    DialectFamily,
    DialectStrategy,
    ReplaceStrategy,
    get_dialect,
    register_dialect,
    supported_dialects,
)
from sqlkv.core.errors import (
    BootstrapError,
    ConfigError,
    DatabaseConnectionError,
    DatabaseError,
    ErrorCategory,
    ErrorContext,
    KeyTooLongError,
    SqlKvError,
    ValidationError,
)
from sqlkv.core.events import STORE_ERROR, Event, EventBus
from sqlkv.core.events.memory import InMemoryEventBus
from sqlkv.core.logging import configure_logging, get_logger
from sqlkv.core.protocols import Connector, QueryExecutor, Row
from sqlkv.core.result import Err, Ok, Result
from sqlkv.core.schema import DEFAULT_KEY_SIZE, DEFAULT_TABLE_NAME, define_table
from sqlkv.core.settings import StoreSettings

__all__ = [
    # Store
    "SqlStore",
    "NamespaceView",
    "StoreConfig",
    "StoredEntry",
    "StoreSettings",
    "DEFAULT_NAMESPACE",
    "DEFAULT_TABLE_NAME",
    "DEFAULT_KEY_SIZE",
    "define_table",
    # Connectors
    "Connector",
    "QueryExecutor",
    "Row",
    "sqlite_connector",
    "asyncpg_connector",
    "mysql_connector",
    # Connection
    "ConnectionManager",
    "ConnectionState",
    # Dialects
    "DialectFamily",
    "DialectStrategy",
    "ConflictClauseStrategy",
    "BackslashEscapingStrategy",
    "ReplaceStrategy",
    "get_dialect",
    "register_dialect",
    "supported_dialects",
    # Errors
    "ErrorCategory",
    "ErrorContext",
    "SqlKvError",
    "ConfigError",
    "ValidationError",
    "KeyTooLongError",
    "DatabaseError",
    "DatabaseConnectionError",
    "BootstrapError",
    # Results
    "Ok",
    "Err",
    "Result",
    # Events
    "STORE_ERROR",
    "Event",
    "EventBus",
    "InMemoryEventBus",
    # Logging
    "configure_logging",
    "get_logger",
]
