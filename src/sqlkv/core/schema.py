"""Table definition for the key-value store.

One physical table holds every namespace::

    ┌──────────────────────────────┬────────┐
    │ key  VARCHAR(key_size) PK    │ value  │
    │ "<namespace>:<localKey>"     │ TEXT   │
    └──────────────────────────────┴────────┘

The same ``Table`` object describes the idempotent ``CREATE TABLE IF NOT
EXISTS`` issued at bootstrap and every query the store builds afterwards.
Schema changes are not supported: an existing table is used as-is.
"""

from __future__ import annotations

from sqlalchemy import Column, MetaData, String, Table, Text
from sqlalchemy.schema import CreateTable

from sqlkv.core.errors import ConfigError

DEFAULT_TABLE_NAME = "endb"
DEFAULT_KEY_SIZE = 255


def define_table(
    table_name: str = DEFAULT_TABLE_NAME,
    key_size: int = DEFAULT_KEY_SIZE,
) -> Table:
    """Describe the ``(key, value)`` table.

    Each call gets its own ``MetaData`` so two stores may use the same table
    name with different key sizes without clashing.

    Raises:
        ConfigError: If ``table_name`` is empty or ``key_size`` is not positive.
    """
    if not table_name or not table_name.strip():
        raise ConfigError("table_name must be a non-empty string")
    if isinstance(key_size, bool) or not isinstance(key_size, int) or key_size <= 0:
        raise ConfigError(f"key_size must be a positive integer, got {key_size!r}")

    return Table(
        table_name,
        MetaData(),
        Column("key", String(key_size), primary_key=True),
        Column("value", Text),
    )


def create_table_statement(table: Table) -> CreateTable:
    """``CREATE TABLE IF NOT EXISTS`` for ``table``."""
    return CreateTable(table, if_not_exists=True)


__all__ = [
    "DEFAULT_TABLE_NAME",
    "DEFAULT_KEY_SIZE",
    "define_table",
    "create_table_statement",
]
