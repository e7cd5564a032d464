"""Tick phase definitions.

One simulation tick runs these phases in order. Systems declare the phase
they belong to with ``@runs_in_phase`` so diagnostics can say which phase
a system runs in. The tick pipeline (``idlefarm.simulation.pipeline``) still
owns the actual execution order.
"""

from __future__ import annotations

from enum import Enum, auto
from typing import TYPE_CHECKING, Callable, Dict, Optional

if TYPE_CHECKING:
    from idlefarm.systems.base import BaseSystem


class TickPhase(Enum):
    CLOCK = auto()
    PROCESSES = auto()
    HELPERS = auto()
    AUTOMATION = auto()
    DECIDE = auto()
    EXECUTE = auto()
    PROGRESSION = auto()
    TERMINAL = auto()


PHASE_DESCRIPTIONS: Dict[TickPhase, str] = {
    TickPhase.CLOCK: "Advance in-game time and time on screen",
    TickPhase.PROCESSES: "Advance crops, crafting, mining, catching, adventures, training",
    TickPhase.HELPERS: "Assigned gnomes perform their roles",
    TickPhase.AUTOMATION: "Passive pump and auto-catcher production",
    TickPhase.DECIDE: "Rank actions when the persona checks in",
    TickPhase.EXECUTE: "Apply ranked actions in order",
    TickPhase.PROGRESSION: "Report farm stage and phase changes",
    TickPhase.TERMINAL: "Evaluate victory and stuck predicates",
}


def runs_in_phase(phase: TickPhase) -> Callable:
    """Decorator to declare which phase a system runs in.

    Example:
        @runs_in_phase(TickPhase.HELPERS)
        class HelperSystem(BaseSystem):
            ...
    """

    def decorator(cls):
        cls._phase = phase
        return cls

    return decorator


def get_system_phase(system: "BaseSystem") -> Optional[TickPhase]:
    return getattr(system, "_phase", None)
