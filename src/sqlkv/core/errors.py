"""
Structured error types for sqlkv.

Every error raised or reported by the store extends :class:`SqlKvError`,
which carries a category, a retry flag, structured context and an optional
chained cause. Bootstrap failures are never raised to callers; they are
wrapped in :class:`BootstrapError` and reported through the store's error
signal instead.

Manifesto:
    - **Typed hierarchy:** Config, validation and database errors are distinct
    - **Explicit retry semantics:** Each error knows if it is retryable
    - **Rich context:** Errors carry table/dialect metadata for logging
    - **Error chaining:** The driver exception is preserved as ``cause``

Architecture:
    ::

        ┌──────────────────────────────────────────────────────────┐
        │                       SqlKvError                          │
        │  (category, retryable, context, cause)                    │
        ├──────────────────────────────────────────────────────────┤
        │  ConfigError       ValidationError     DatabaseError      │
        │  (CONFIG)          (VALIDATION)        (DATABASE)         │
        │                         │                   │             │
        │                    KeyTooLongError    BootstrapError      │
        └──────────────────────────────────────────────────────────┘

Examples:
    >>> error = KeyTooLongError("ns:" + "x" * 300, key_size=255)
    >>> error.category
    <ErrorCategory.VALIDATION: 'VALIDATION'>
    >>> error.with_context(table="endb").context.table
    'endb'

Tags:
    error-handling, exception-hierarchy, error-context, sqlkv

Doc-Types:
    - API Reference
    - Error Handling Guide
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """
    Standard error categories for classification and routing.

    Attributes:
        DATABASE: Connector, table creation, query failures
        VALIDATION: Keys or values the store refuses
        CONFIG: Unknown dialect, invalid table name or key size
        INTERNAL: Bugs, unexpected state
    """

    DATABASE = "DATABASE"
    VALIDATION = "VALIDATION"
    CONFIG = "CONFIG"
    INTERNAL = "INTERNAL"


@dataclass
class ErrorContext:
    """
    Structured metadata attached to an error.

    Attributes:
        table: Physical table the store writes to
        dialect: Dialect name the store was configured with
        operation: Store operation in flight (``get``, ``set``...)
        key: Key involved, when there is exactly one
        metadata: Additional key-value pairs
    """

    table: str | None = None
    dialect: str | None = None
    operation: str | None = None
    key: str | None = None

    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        result = {}
        for key in ["table", "dialect", "operation", "key"]:
            value = getattr(self, key)
            if value is not None:
                result[key] = value
        if self.metadata:
            result.update(self.metadata)
        return result


class SqlKvError(Exception):
    """
    Base exception for all sqlkv errors.

    Subclasses set ``default_category`` and ``default_retryable`` to give
    sensible defaults for their domain.

    Examples:
        >>> error = SqlKvError("Something went wrong")
        >>> error.retryable
        False
        >>> error.to_dict()["category"]
        'INTERNAL'
    """

    default_category: ErrorCategory = ErrorCategory.INTERNAL
    default_retryable: bool = False

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        retryable: bool | None = None,
        context: ErrorContext | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.retryable = retryable if retryable is not None else self.default_retryable
        self.context = context or ErrorContext()
        self.cause = cause

        if cause is not None:
            self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> SqlKvError:
        """
        Add context to this error (fluent API).

        Usage:
            raise BootstrapError("connector rejected").with_context(
                table="endb", dialect="postgresql"
            )
        """
        for key, value in kwargs.items():
            if hasattr(self.context, key):
                setattr(self.context, key, value)
            else:
                self.context.metadata[key] = value
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        result = {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "category": self.category.value,
            "retryable": self.retryable,
        }

        context_dict = self.context.to_dict()
        if context_dict:
            result["context"] = context_dict

        if self.cause is not None:
            result["cause"] = str(self.cause)

        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, category={self.category.value})"


# =============================================================================
# CONFIGURATION ERRORS
# =============================================================================


class ConfigError(SqlKvError):
    """Invalid store configuration (unknown dialect, bad key size...)."""

    default_category = ErrorCategory.CONFIG
    default_retryable = False


# =============================================================================
# VALIDATION ERRORS
# =============================================================================


class ValidationError(SqlKvError):
    """Input the store refuses to persist."""

    default_category = ErrorCategory.VALIDATION
    default_retryable = False


class KeyTooLongError(ValidationError):
    """Key is longer than the configured ``key_size``."""

    def __init__(self, key: str, key_size: int, **kwargs: Any):
        super().__init__(
            f"Key of length {len(key)} exceeds key_size {key_size}",
            **kwargs,
        )
        self.key_size = key_size
        self.context.key = key


# =============================================================================
# DATABASE ERRORS
# =============================================================================


class DatabaseError(SqlKvError):
    """Database-related error."""

    default_category = ErrorCategory.DATABASE
    default_retryable = False


class DatabaseConnectionError(DatabaseError):
    """Connector could not open a connection or pool."""

    default_retryable = True


class BootstrapError(DatabaseError):
    """Connector rejected or the table could not be created.

    Terminal for the store that produced it: the store never retries.
    """


__all__ = [
    "ErrorCategory",
    "ErrorContext",
    "SqlKvError",
    "ConfigError",
    "ValidationError",
    "KeyTooLongError",
    "DatabaseError",
    "DatabaseConnectionError",
    "BootstrapError",
]
