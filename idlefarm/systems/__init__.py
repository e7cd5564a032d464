"""Per-tick systems that run whether or not the persona checks in."""

from idlefarm.systems.automation import AutomationSystem
from idlefarm.systems.base import BaseSystem, SystemResult
from idlefarm.systems.clock import ClockSystem
from idlefarm.systems.helpers import HelperSystem
from idlefarm.systems.phases import PHASE_DESCRIPTIONS, TickPhase, runs_in_phase

__all__ = [
    "AutomationSystem",
    "BaseSystem",
    "ClockSystem",
    "HelperSystem",
    "PHASE_DESCRIPTIONS",
    "SystemResult",
    "TickPhase",
    "runs_in_phase",
]
