"""Tests for the EventBus domain event dispatch system."""

import dataclasses

import pytest

from idlefarm.enums import Importance, ProcessKind
from idlefarm.events import EventBus
from idlefarm.events.domain_events import (
    GameEvent,
    ProcessFinishedEvent,
    StorageLimitHitEvent,
)


def _storage_event() -> StorageLimitHitEvent:
    return StorageLimitHitEvent(material="wood", requested=20, stored=5, discarded=15)


class TestEventBus:
    """Test suite for EventBus functionality."""

    def test_emit_reaches_subscriber(self) -> None:
        """Verify events are delivered to subscribed handlers."""
        bus = EventBus()
        received_events: list = []

        bus.subscribe(StorageLimitHitEvent, received_events.append)
        event = _storage_event()
        bus.emit(event)

        assert len(received_events) == 1
        assert received_events[0] is event
        assert received_events[0].discarded == 15

    def test_no_subscribers_no_crash(self) -> None:
        """Verify emitting with no subscribers is a no-op."""
        bus = EventBus()
        bus.emit(_storage_event())

    def test_multiple_handlers_called_in_registration_order(self) -> None:
        bus = EventBus()
        calls: list = []
        bus.subscribe(GameEvent, lambda e: calls.append(("first", e.type)))
        bus.subscribe(GameEvent, lambda e: calls.append(("second", e.type)))

        bus.emit(GameEvent(timestamp=480, type="crop_ready", description="carrot is ready"))

        assert calls == [("first", "crop_ready"), ("second", "crop_ready")]

    def test_dispatch_is_by_exact_type(self) -> None:
        """A GameEvent subscriber does not see other event classes."""
        bus = EventBus()
        game_events: list = []
        bus.subscribe(GameEvent, game_events.append)

        bus.emit(_storage_event())
        bus.emit(ProcessFinishedEvent("crop-1", ProcessKind.CROP_GROWTH, True, 490))

        assert game_events == []

    def test_unsubscribe(self) -> None:
        bus = EventBus()
        received: list = []
        bus.subscribe(StorageLimitHitEvent, received.append)

        assert bus.unsubscribe(StorageLimitHitEvent, received.append) is True
        assert bus.unsubscribe(StorageLimitHitEvent, received.append) is False
        bus.emit(_storage_event())
        assert received == []

    def test_handler_may_unsubscribe_during_emit(self) -> None:
        bus = EventBus()
        calls: list = []

        def once(event: GameEvent) -> None:
            calls.append("once")
            bus.unsubscribe(GameEvent, once)

        bus.subscribe(GameEvent, once)
        bus.subscribe(GameEvent, lambda e: calls.append("always"))

        bus.emit(GameEvent(1, "a", "first"))
        bus.emit(GameEvent(2, "b", "second"))

        assert calls == ["once", "always", "always"]


class TestDomainEvents:
    def test_events_are_frozen(self) -> None:
        event = GameEvent(timestamp=500, type="level_up", description="Hero reached level 2")
        with pytest.raises(dataclasses.FrozenInstanceError):
            event.type = "other"  # type: ignore[misc]

    def test_game_event_defaults(self) -> None:
        event = GameEvent(timestamp=500, type="crop_ready", description="ready")
        assert event.importance is Importance.LOW
        assert dict(event.data) == {}
