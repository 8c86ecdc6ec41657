"""Event signalling for store lifecycle failures.

Why This Package Exists
-----------------------
A store's bootstrap (connect, create table) runs off the call stack of any
individual operation, so a failure there has no synchronous receiver to
raise into. Instead the store publishes a single named event,
``store.error``, carrying the :class:`~sqlkv.core.errors.BootstrapError`.
Subscribing is purely observational: operations keep resolving to their
empty defaults and nothing is retried. The event is published once, so a
handler subscribed after the failure reads ``store.error`` instead.

Usage::

    from sqlkv.core.events import STORE_ERROR, Event

    async def report(event: Event) -> None:
        log.error("cache_backend_down", **event.payload["error"].to_dict())

    sub_id = await store.on_error(report)

Modules
-------
memory      InMemoryEventBus -- asyncio, single process
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any, Protocol, runtime_checkable

__all__ = [
    "STORE_ERROR",
    "Event",
    "EventBus",
    "EventHandler",
]

# Name of the bootstrap failure event
STORE_ERROR = "store.error"


# ── Event Model ──────────────────────────────────────────────────────────


@dataclass(frozen=True)
class Event:
    """A named signal and its data.

    Attributes:
        event_type: Exact event name (``store.error``)
        source: Origin component, the table name of the store
        payload: Event-specific data
    """

    event_type: str
    source: str
    payload: dict[str, Any] = field(default_factory=dict)


# ── Type Aliases ─────────────────────────────────────────────────────────

EventHandler = Callable[[Event], Awaitable[None]]


# ── EventBus Protocol ────────────────────────────────────────────────────


@runtime_checkable
class EventBus(Protocol):
    """Protocol for event bus implementations."""

    async def publish(self, event: Event) -> None:
        """Deliver an event to the handlers subscribed to its type."""
        ...

    async def subscribe(self, event_type: str, handler: EventHandler) -> str:
        """Subscribe to one event type; returns a subscription ID."""
        ...

    async def unsubscribe(self, subscription_id: str) -> None:
        """Remove a subscription."""
        ...

    async def close(self) -> None:
        """Clean up resources."""
        ...
