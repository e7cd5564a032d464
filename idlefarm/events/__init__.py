"""Events module for domain event dispatch.

Provides the EventBus plus the event types produced during a tick.
"""

from idlefarm.events.domain_events import (
    ActionExecutedEvent,
    ActionFailedEvent,
    GameEvent,
    ProcessFinishedEvent,
    StorageLimitHitEvent,
    TickFaultEvent,
)
from idlefarm.events.event_bus import EventBus

__all__ = [
    "ActionExecutedEvent",
    "ActionFailedEvent",
    "EventBus",
    "GameEvent",
    "ProcessFinishedEvent",
    "StorageLimitHitEvent",
    "TickFaultEvent",
]
