"""Base class for per-tick simulation systems.

A system owns one passive behaviour that runs every tick regardless of
what the persona decides: the clock, helper gnomes, automation upgrades.
Systems are built with their collaborators injected, can be disabled
without code changes and report what they did through ``SystemResult``.

    @runs_in_phase(TickPhase.AUTOMATION)
    class AutomationSystem(BaseSystem):
        def _do_update(self, delta: float) -> SystemResult:
            ...
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from idlefarm.systems.phases import TickPhase

__all__ = ["SystemResult", "BaseSystem"]


@dataclass
class SystemResult:
    """What one system did in one tick.

    ``affected`` counts plots, gnomes or tanks touched; ``details`` holds
    system-specific counters such as ``{"water_pumped": 3}``. Results add
    up, which is how the engine keeps per-system totals for a run.
    """

    affected: int = 0
    events_emitted: int = 0
    skipped: bool = False
    details: Dict[str, Any] = field(default_factory=dict)

    @staticmethod
    def skipped_result() -> "SystemResult":
        return SystemResult(skipped=True)

    @staticmethod
    def empty() -> "SystemResult":
        return SystemResult()

    def __add__(self, other: "SystemResult") -> "SystemResult":
        if other.skipped:
            return self
        if self.skipped:
            return other
        details = dict(self.details)
        for key, value in other.details.items():
            if isinstance(value, (int, float)) and key in details:
                details[key] += value
            else:
                details[key] = value
        return SystemResult(
            affected=self.affected + other.affected,
            events_emitted=self.events_emitted + other.events_emitted,
            details=details,
        )


class BaseSystem(ABC):
    """A named, switchable per-tick behaviour.

    Subclasses implement ``_do_update``. A disabled system is skipped
    without touching state.
    """

    _phase: Optional[TickPhase] = None

    def __init__(self, name: str) -> None:
        self._name = name
        self.enabled = True
        self.update_count = 0

    @property
    def name(self) -> str:
        return self._name

    @property
    def phase(self) -> Optional[TickPhase]:
        return self._phase

    def update(self, delta: float) -> SystemResult:
        """Run one tick of ``delta`` in-game minutes."""
        if not self.enabled:
            return SystemResult.skipped_result()
        result = self._do_update(delta)
        self.update_count += 1
        return result if result is not None else SystemResult.empty()

    @abstractmethod
    def _do_update(self, delta: float) -> Optional[SystemResult]:
        ...

    def get_debug_info(self) -> Dict[str, Any]:
        return {
            "name": self._name,
            "enabled": self.enabled,
            "update_count": self.update_count,
            "phase": self._phase.name if self._phase else None,
        }

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._name!r}, enabled={self.enabled})"
