"""
In-memory event bus implementation.

Every store owns one bus, so subscribers of one store never see another
store's failures. Events are delivered immediately and not persisted: a
handler subscribed after ``store.error`` was published never receives it
and should read ``store.error`` instead.

Tags:
    sqlkv, events, in-memory, asyncio

Doc-Types:
    api-reference
"""

from __future__ import annotations

import itertools

from sqlkv.core.events import Event, EventHandler
from sqlkv.core.logging import get_logger

__all__ = ["InMemoryEventBus"]

log = get_logger("sqlkv.events")


class InMemoryEventBus:
    """In-process event bus keyed by exact event type.

    Example::

        bus = InMemoryEventBus()

        async def report(event: Event):
            print(f"{event.source}: {event.payload['error']}")

        await bus.subscribe(STORE_ERROR, report)
        await bus.publish(Event(event_type=STORE_ERROR, source="endb"))
    """

    def __init__(self) -> None:
        self._handlers: dict[str, dict[str, EventHandler]] = {}
        self._ids = itertools.count(1)
        self._closed = False

    async def publish(self, event: Event) -> None:
        """Call each handler subscribed to ``event.event_type``, in subscription order.

        A failing handler is logged and does not stop delivery to the rest.
        """
        if self._closed:
            return

        # Snapshot: a handler may subscribe or unsubscribe while we deliver
        for sub_id, handler in list(self._handlers.get(event.event_type, {}).items()):
            try:
                await handler(event)
            except Exception as e:
                log.warning(
                    "event_handler_error",
                    subscription_id=sub_id,
                    event_type=event.event_type,
                    error=str(e),
                )

    async def subscribe(self, event_type: str, handler: EventHandler) -> str:
        sub_id = f"sub_{next(self._ids)}"
        self._handlers.setdefault(event_type, {})[sub_id] = handler
        return sub_id

    async def unsubscribe(self, subscription_id: str) -> None:
        """Remove a subscription; unknown IDs are ignored."""
        for handlers in self._handlers.values():
            handlers.pop(subscription_id, None)

    async def close(self) -> None:
        """Drop every subscription; later publishes are no-ops."""
        self._closed = True
        self._handlers.clear()
