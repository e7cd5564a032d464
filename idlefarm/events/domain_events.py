"""Domain event definitions.

``GameEvent`` is the timestamped, severity-tagged record that ends up in a
``TickResult``. The typed events carry the same facts with structured fields
for subscribers that want more than a description string (telemetry,
statistics, the test-suite).

All events are frozen dataclasses: they describe something that already
happened.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping

from idlefarm.enums import ActionKind, Importance, ProcessKind, ScreenId


@dataclass(frozen=True)
class GameEvent:
    """A timestamped, severity-tagged occurrence reported to the caller.

    Attributes:
        timestamp: Total in-game minutes when the event happened
        type: Short machine-readable tag ("action_executed", "error", ...)
        description: Human-readable summary
        importance: Severity
        data: Extra structured context
    """

    timestamp: int
    type: str
    description: str
    importance: Importance = Importance.LOW
    data: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class ActionExecutedEvent:
    """An action was applied to the state.

    Attributes:
        kind: Action kind
        target: Target id (crop, blueprint, route, screen...)
        screen: Screen the action ran on
        minute: Total in-game minutes
    """

    kind: ActionKind
    target: str
    screen: ScreenId
    minute: int


@dataclass(frozen=True)
class ActionFailedEvent:
    """An action passed filtering but could not be applied."""

    kind: ActionKind
    target: str
    reason: str
    minute: int


@dataclass(frozen=True)
class ProcessFinishedEvent:
    """A long-running process ended.

    Attributes:
        process_id: Id assigned when the process started
        kind: Process kind
        success: False for failed adventures, failed crafts, withered crops
        minute: Total in-game minutes
    """

    process_id: str
    kind: ProcessKind
    success: bool
    minute: int


@dataclass(frozen=True)
class StorageLimitHitEvent:
    """A material addition was clamped to its storage cap.

    Attributes:
        material: Material id
        requested: Amount the caller tried to add
        stored: Amount actually stored
        discarded: Overflow thrown away
    """

    material: str
    requested: int
    stored: int
    discarded: int


@dataclass(frozen=True)
class TickFaultEvent:
    """An unexpected exception was caught at the tick boundary."""

    tick: int
    minute: int
    error_type: str
    message: str
