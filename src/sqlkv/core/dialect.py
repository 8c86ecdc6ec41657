"""Dialect strategies: how a store upserts and escapes for each backend.

Every supported backend belongs to one ``DialectFamily``. The family decides
two things the store cannot express portably: how ``set`` performs an
insert-or-update, and whether the value must be escaped before it is
embedded in SQL text. Everything else (selects, deletes, prefix matching,
DDL) is generated by SQLAlchemy Core for the strategy's bound dialect.

Manifesto:
    Branching on dialect name strings inside every operation scatters
    backend knowledge across the store. A strategy object is resolved once,
    at construction, and the store only ever calls ``upsert()``,
    ``escape()`` and ``compile()``.

    - **One interface:** ``DialectStrategy`` for every backend
    - **Resolved once:** ``get_dialect(name)`` at store construction
    - **Pluggable:** ``register_dialect()`` for custom backends and test doubles

Architecture::

    ┌──────────────────┬──────────────────────────────┬──────────────────┐
    │ Family           │ Upsert                       │ Value escaping   │
    ├──────────────────┼──────────────────────────────┼──────────────────┤
    │ CONFLICT_CLAUSE  │ INSERT … ON CONFLICT (key)   │ none             │
    │  postgresql      │   DO UPDATE SET value = …    │                  │
    │ BACKSLASH_SENS.  │ REPLACE INTO …               │ double every \\   │
    │  mysql, mariadb  │                              │                  │
    │ GENERIC          │ REPLACE INTO …               │ none             │
    │  sqlite          │                              │                  │
    └──────────────────┴──────────────────────────────┴──────────────────┘

Examples:
    >>> from sqlkv.core.dialect import get_dialect
    >>> from sqlkv.core.schema import define_table
    >>> strategy = get_dialect("mysql")
    >>> strategy.escape("C:\\\\temp")
    'C:\\\\\\\\temp'
    >>> sql = strategy.compile(strategy.upsert(define_table(), "ns:a", "1"))
    >>> sql.startswith("REPLACE INTO endb")
    True

Guardrails:
    ❌ DON'T: Compare ``config.dialect == "mysql"`` inside store operations
    ✅ DO: Ask the strategy (``strategy.escape(value)``)

    ❌ DON'T: Escape the value twice (the bound SQLAlchemy dialect must not)
    ✅ DO: Let ``escape()`` be the only escaping step

Tags:
    dialect, sql, strategy, upsert, escaping, sqlalchemy, sqlkv

Doc-Types:
    - API Reference
    - Database Portability Guide
"""

from __future__ import annotations

import copy
from enum import Enum
from typing import Any, Protocol, runtime_checkable

from sqlalchemy import Table
from sqlalchemy.dialects import mysql, postgresql, sqlite
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.engine import Dialect as SADialect
from sqlalchemy.ext.compiler import compiles
from sqlalchemy.sql.expression import ClauseElement, Executable
from sqlalchemy.sql.dml import Insert

from sqlkv.core.errors import ConfigError


class DialectFamily(str, Enum):
    """Upsert/escaping behaviour shared by a group of backends."""

    CONFLICT_CLAUSE = "conflict_clause"
    BACKSLASH_SENSITIVE = "backslash_sensitive"
    GENERIC = "generic"


# =========================================================================
# REPLACE INTO
# =========================================================================


class Replace(Insert):
    """``REPLACE INTO`` statement: delete-then-insert on key conflict."""

    inherit_cache = True


@compiles(Replace)
def _compile_replace(element: Replace, compiler: Any, **kw: Any) -> str:
    sql = compiler.visit_insert(element, **kw)
    return "REPLACE" + sql[len("INSERT"):]


def replace(table: Table) -> Replace:
    """Build a ``REPLACE INTO`` statement for ``table``."""
    return Replace(table)


# =========================================================================
# Strategy contract
# =========================================================================


@runtime_checkable
class DialectStrategy(Protocol):
    """What a store needs to know about its backend.

    ``compile()`` renders any SQLAlchemy statement to inline SQL text (bound
    values rendered as literals), because the injected executor takes a
    plain string.
    """

    @property
    def name(self) -> str: ...

    @property
    def family(self) -> DialectFamily: ...

    def escape(self, value: str) -> str:
        """Prepare a value for embedding in SQL text."""
        ...

    def upsert(self, table: Table, key: str, value: str) -> Executable:
        """Insert-or-update statement for one ``(key, value)`` row."""
        ...

    def compile(self, statement: ClauseElement) -> str:
        """Render ``statement`` to SQL text for this backend."""
        ...


class _BoundDialect:
    """Shared compile step for strategies backed by a SQLAlchemy dialect."""

    family: DialectFamily

    def __init__(self, name: str, sa_dialect: SADialect):
        # Private copy: the caller's dialect keeps its own escaping.
        sa_dialect = copy.copy(sa_dialect)
        # Literal rendering must leave backslashes alone: escape() owns that.
        sa_dialect._backslash_escapes = False
        self._name = name
        self._sa_dialect = sa_dialect

    @property
    def name(self) -> str:
        return self._name

    @property
    def sa_dialect(self) -> SADialect:
        return self._sa_dialect

    def escape(self, value: str) -> str:
        return value

    def compile(self, statement: ClauseElement) -> str:
        compiled = statement.compile(
            dialect=self._sa_dialect,
            compile_kwargs={"literal_binds": True},
        )
        return str(compiled).strip()

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name={self._name!r})"


class ConflictClauseStrategy(_BoundDialect):
    """PostgreSQL: ``INSERT … ON CONFLICT (key) DO UPDATE SET value = excluded.value``."""

    family = DialectFamily.CONFLICT_CLAUSE

    def __init__(self, name: str = "postgresql"):
        super().__init__(name, postgresql.dialect(paramstyle="named"))

    def upsert(self, table: Table, key: str, value: str) -> Executable:
        stmt = pg_insert(table).values(key=key, value=value)
        return stmt.on_conflict_do_update(
            index_elements=[table.c["key"]],
            set_={"value": stmt.excluded["value"]},
        )


class BackslashEscapingStrategy(_BoundDialect):
    """MySQL / MariaDB: ``REPLACE INTO``, backslashes doubled in values."""

    family = DialectFamily.BACKSLASH_SENSITIVE

    def __init__(self, name: str = "mysql"):
        super().__init__(name, mysql.dialect(paramstyle="named"))

    def escape(self, value: str) -> str:
        return value.replace("\\", "\\\\")

    def upsert(self, table: Table, key: str, value: str) -> Executable:
        return replace(table).values(key=key, value=value)


class ReplaceStrategy(_BoundDialect):
    """SQLite and other backends with a native ``REPLACE INTO``."""

    family = DialectFamily.GENERIC

    def __init__(self, name: str = "sqlite", sa_dialect: SADialect | None = None):
        super().__init__(name, sa_dialect if sa_dialect is not None else sqlite.dialect())

    def upsert(self, table: Table, key: str, value: str) -> Executable:
        return replace(table).values(key=key, value=value)


# =========================================================================
# Registry / Factory
# =========================================================================

# Strategies are stateless once bound
_DIALECTS: dict[str, DialectStrategy] = {
    "postgresql": ConflictClauseStrategy("postgresql"),
    "postgres": ConflictClauseStrategy("postgres"),  # alias
    "mysql": BackslashEscapingStrategy("mysql"),
    "mariadb": BackslashEscapingStrategy("mariadb"),
    "sqlite": ReplaceStrategy("sqlite"),
}


def get_dialect(name: str | DialectStrategy) -> DialectStrategy:
    """Resolve a dialect name to its strategy.

    Args:
        name: ``'postgresql'``/``'postgres'``, ``'mysql'``/``'mariadb'``,
              ``'sqlite'``, any name added with :func:`register_dialect`,
              or a strategy instance (returned unchanged).

    Raises:
        ConfigError: If ``name`` is not registered.
    """
    if not isinstance(name, str):
        return name
    key = name.strip().lower()
    if key not in _DIALECTS:
        raise ConfigError(
            f"Unknown dialect '{name}'. Supported: {supported_dialects()}"
        )
    return _DIALECTS[key]


def register_dialect(name: str, strategy: DialectStrategy) -> None:
    """Register a custom dialect strategy (lower-cased automatically)."""
    _DIALECTS[name.lower()] = strategy


def supported_dialects() -> list[str]:
    """Registered dialect names, sorted."""
    return sorted(_DIALECTS)


__all__ = [
    "DialectFamily",
    "DialectStrategy",
    "ConflictClauseStrategy",
    "BackslashEscapingStrategy",
    "ReplaceStrategy",
    "Replace",
    "replace",
    "get_dialect",
    "register_dialect",
    "supported_dialects",
]
