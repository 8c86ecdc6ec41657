"""
Result envelope for explicit success/failure handling.

``SqlStore.initialize()`` must never raise: a store whose connector fails
still has to be constructible and usable in degraded mode. The bootstrap
outcome is therefore returned as ``Ok(executor)`` or ``Err(BootstrapError)``
and the caller decides what to do with it.

Examples:
    >>> from sqlkv.core.result import Ok, Err
    >>> Ok(10).unwrap()
    10
    >>> Err(ValueError("oops")).is_err()
    True

    Pattern matching:

    >>> match await store.initialize():
    ...     case Ok(executor):
    ...         ...
    ...     case Err(error):
    ...         log.warning("store_degraded", **error.to_dict())

Tags:
    result-pattern, error-handling, sqlkv, type-safety

Doc-Types:
    - API Reference
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class Ok(Generic[T]):
    """Successful result containing a value."""

    value: T

    def is_ok(self) -> bool:
        return True

    def is_err(self) -> bool:
        return False

    def unwrap(self) -> T:
        """Get the value. Safe for Ok."""
        return self.value

    def __repr__(self) -> str:
        return f"Ok({self.value!r})"


@dataclass(frozen=True, slots=True)
class Err(Generic[T]):
    """Failed result containing an error."""

    error: Exception

    def is_ok(self) -> bool:
        return False

    def is_err(self) -> bool:
        return True

    def unwrap(self) -> T:
        """Raise the error. Use only when you're sure it's Ok."""
        raise self.error

    def __repr__(self) -> str:
        return f"Err({self.error!r})"


Result = Ok[T] | Err[T]


__all__ = [
    "Ok",
    "Err",
    "Result",
]
