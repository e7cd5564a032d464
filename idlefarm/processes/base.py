"""Base class and shared types for long-running processes.

Every process kind (crop growth, crafting, mining, seed catching, adventure,
helper training) is driven by one ``ProcessHandler``. Handlers keep no
records of their own: every running instance lives in
``GameState.processes`` so a rolled-back transaction also rolls back
process progress. Handlers only hold their collaborators.

Lifecycle:
    start(spec) -> Ok(process_id) | Err(reason)
    tick(delta) -> ProcessTickReport (completed, failed, events)
    cancel(process_id) -> bool
"""

from __future__ import annotations

import random
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from idlefarm.config.parameters import PersonaTraits, SimulationParameters
from idlefarm.data.provider import StaticDataProvider
from idlefarm.enums import Importance, ProcessKind
from idlefarm.events.domain_events import GameEvent
from idlefarm.result import Result
from idlefarm.state.model import GameState
from idlefarm.state.store import StateStore

__all__ = [
    "ProcessContext",
    "ProcessHandler",
    "ProcessTickReport",
]


@dataclass
class ProcessContext:
    """Collaborators shared by every handler.

    Attributes:
        store: State store (all writes go through it or its state)
        data: Static balance rows
        parameters: Tunable parameters
        persona: Persona traits (seed-catching skill)
        rng: The run's random stream
    """

    store: StateStore
    data: StaticDataProvider
    parameters: SimulationParameters
    persona: PersonaTraits
    rng: random.Random

    @property
    def state(self) -> GameState:
        return self.store.state

    @property
    def now(self) -> int:
        return self.store.state.clock.total_minutes


@dataclass
class ProcessTickReport:
    """What one ``tick`` of one or more handlers produced.

    Attributes:
        completed: Ids of processes that finished successfully
        failed: Ids of processes that ended without their reward
        events: Events to report for this tick
        details: Handler-specific counters (e.g. {"crops_ready": 2})
    """

    completed: List[str] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)
    events: List[GameEvent] = field(default_factory=list)
    details: Dict[str, Any] = field(default_factory=dict)

    def __add__(self, other: "ProcessTickReport") -> "ProcessTickReport":
        details = dict(self.details)
        for key, value in other.details.items():
            if key in details and isinstance(value, (int, float)):
                details[key] = details[key] + value
            else:
                details[key] = value
        return ProcessTickReport(
            completed=self.completed + other.completed,
            failed=self.failed + other.failed,
            events=self.events + other.events,
            details=details,
        )


class ProcessHandler(ABC):
    """Abstract base for one process kind."""

    kind: ProcessKind

    def __init__(self, context: ProcessContext) -> None:
        self._ctx = context

    @property
    def context(self) -> ProcessContext:
        return self._ctx

    @abstractmethod
    def start(self, spec: Any) -> Result[str, str]:
        """Begin a new instance; returns its process id."""

    @abstractmethod
    def tick(self, delta: float) -> ProcessTickReport:
        """Advance every instance of this kind by ``delta`` minutes."""

    @abstractmethod
    def cancel(self, process_id: str) -> bool:
        """Stop an instance without reward. False if the id is unknown."""

    @abstractmethod
    def active_ids(self) -> List[str]:
        """Ids of instances that are still running."""

    def event(
        self,
        type_: str,
        description: str,
        importance: Importance = Importance.LOW,
        **data: Any,
    ) -> GameEvent:
        return GameEvent(
            timestamp=self._ctx.now,
            type=type_,
            description=description,
            importance=importance,
            data=data,
        )

    def get_debug_info(self) -> Dict[str, Any]:
        return {"kind": self.kind.value, "active": len(self.active_ids())}

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(active={len(self.active_ids())})"


def substeps(delta: float, step: float = 1.0) -> List[float]:
    """Split ``delta`` into steps of at most ``step`` minutes."""
    steps = []
    remaining = delta
    while remaining > 1e-9:
        current = min(step, remaining)
        steps.append(current)
        remaining -= current
    return steps


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def optional_row_value(row: Optional[dict], key: str, default: Any) -> Any:
    if row is None:
        return default
    value = row.get(key)
    return default if value is None else value
