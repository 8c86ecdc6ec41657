"""Environment-driven settings for a store.

Manifesto:
    Configuration should be explicit, validated, and environment-driven.
    The connector is code and is always injected, but everything else a
    store needs (dialect, table, key size, namespace, logging) can come
    from ``SQLKV_*`` environment variables or a ``.env`` file.

Examples:
    >>> from sqlkv.core.settings import StoreSettings
    >>> settings = StoreSettings(dialect="postgresql", table_name="cache")
    >>> config = settings.to_config(connector)
    >>> config.table_name
    'cache'

Tags:
    settings, configuration, pydantic, environment, sqlkv

Doc-Types:
    - API Reference
    - Configuration Guide
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from sqlkv.core.logging import configure_logging
from sqlkv.core.schema import DEFAULT_KEY_SIZE, DEFAULT_TABLE_NAME

if TYPE_CHECKING:
    from sqlkv.core.adapters.store import StoreConfig
    from sqlkv.core.protocols import Connector


class StoreSettings(BaseSettings):
    """Settings for one store, read from ``SQLKV_*`` environment variables.

    Fields
    ──────
    dialect      : Dialect name (``sqlite``, ``postgresql``, ``mysql``...)
    table_name   : Physical table name
    key_size     : Maximum key length, also the ``VARCHAR`` size of ``key``
    namespace    : Initial namespace of the store
    log_level    : Structlog log level
    json_logs    : JSON output (True), console (False), auto (None)
    """

    model_config = SettingsConfigDict(
        env_prefix="SQLKV_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Storage ──────────────────────────────────────────────────
    dialect: str = "sqlite"
    table_name: str = Field(default=DEFAULT_TABLE_NAME, min_length=1)
    key_size: int = Field(default=DEFAULT_KEY_SIZE, gt=0)
    namespace: str = "endb"

    # ── Observability ────────────────────────────────────────────
    log_level: str = "INFO"
    json_logs: bool | None = None

    @field_validator("dialect")
    @classmethod
    def _normalize_dialect(cls, value: str) -> str:
        return value.strip().lower()

    def to_config(self, connector: Connector) -> StoreConfig:
        """Build the immutable store configuration around ``connector``."""
        from sqlkv.core.adapters.store import StoreConfig

        return StoreConfig(
            dialect=self.dialect,
            connector=connector,
            table_name=self.table_name,
            key_size=self.key_size,
        )

    def configure_logging(self) -> None:
        """Apply ``log_level`` and ``json_logs`` to structlog."""
        configure_logging(level=self.log_level, json_format=self.json_logs)


__all__ = [
    "StoreSettings",
]
