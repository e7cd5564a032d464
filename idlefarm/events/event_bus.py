"""In-process dispatch of domain events.

The executor, the process manager and the state store publish facts here;
the engine turns the ones it listens for into the tick's ``GameEvent`` list.
Dispatch is synchronous and keyed on the exact event class, so a tick's
events arrive in the order they happened.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Callable
from typing import TypeVar

T = TypeVar("T")


class EventBus:
    """Synchronous publish/subscribe keyed on event type.

        bus = EventBus()
        bus.subscribe(StorageLimitHitEvent, record_waste)
        bus.emit(StorageLimitHitEvent(material="wood", requested=20, stored=5, discarded=15))
    """

    def __init__(self) -> None:
        self._handlers: dict[type, list[Callable]] = defaultdict(list)

    def emit(self, event: object) -> None:
        # Iterate a copy: a handler may unsubscribe itself mid-dispatch.
        for handler in list(self._handlers.get(type(event), ())):
            handler(event)

    def subscribe(self, event_type: type[T], handler: Callable[[T], None]) -> None:
        self._handlers[event_type].append(handler)

    def unsubscribe(self, event_type: type[T], handler: Callable[[T], None]) -> bool:
        """Drop ``handler``; False when it was not registered for ``event_type``."""
        handlers = self._handlers.get(event_type)
        if not handlers or handler not in handlers:
            return False
        handlers.remove(handler)
        return True
