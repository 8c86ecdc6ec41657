"""Store and connectors -- the key-value surface over SQL backends.

Manifesto:
    The store is backend-agnostic: it builds SQLAlchemy Core statements,
    compiles them for its dialect strategy, and hands the SQL text to an
    injected executor. Connectors are the only code that knows a driver.

    Each connector is **import-guarded**: the database driver is only
    required when the store bootstraps, not at import time. Install the
    corresponding extra::

        pip install sqlkv[postgresql]   # asyncpg
        pip install sqlkv[mysql]        # mysql-connector-python

Architecture::

    SqlStore (store.py)              get/has/set/delete/clear/all
        |-- NamespaceView            same store, fixed namespace
        |-- StoreConfig              dialect, connector, table_name, key_size
        '-- StoredEntry              one (key, value) row

    sqlite_connector (sqlite.py)     stdlib sqlite3 (always available)
    asyncpg_connector (postgresql.py) asyncpg pool (optional)
    mysql_connector (mysql.py)       mysql.connector (optional)

Modules
-------
store           SqlStore, NamespaceView, StoreConfig, StoredEntry
sqlite          SQLite connector (stdlib, always available)
postgresql      PostgreSQL connector (requires asyncpg)
mysql           MySQL / MariaDB connector (requires mysql-connector-python)

Guardrails:
    ❌ Importing optional drivers at module scope
    ✅ Import-guarded inside the connector with a clear ``ConfigError``

Tags:
    sqlkv, adapters, connectors, import-guarded, postgresql, sqlite, mysql

Doc-Types:
    package-overview, architecture-map, module-index
"""

from .mysql import MySQLExecutor, mysql_connector
from .postgresql import AsyncpgExecutor, asyncpg_connector, normalize_database_url
from .sqlite import SQLiteExecutor, sqlite_connector
from .store import DEFAULT_NAMESPACE, NamespaceView, SqlStore, StoreConfig, StoredEntry

__all__ = [
    # Store
    "DEFAULT_NAMESPACE",
    "NamespaceView",
    "SqlStore",
    "StoreConfig",
    "StoredEntry",
    # Connectors
    "AsyncpgExecutor",
    "MySQLExecutor",
    "SQLiteExecutor",
    "asyncpg_connector",
    "mysql_connector",
    "normalize_database_url",
    "sqlite_connector",
]
