"""In-game time."""

from __future__ import annotations

import logging
from typing import Any, Dict

from idlefarm.state.store import StateStore
from idlefarm.systems.base import BaseSystem, SystemResult
from idlefarm.systems.phases import TickPhase, runs_in_phase

logger = logging.getLogger(__name__)


@runs_in_phase(TickPhase.CLOCK)
class ClockSystem(BaseSystem):
    """Advances the clock and the time spent on the current screen.

    The clock is the only thing allowed to move time forward.
    """

    def __init__(self, store: StateStore) -> None:
        super().__init__("Clock")
        self._store = store

    def _do_update(self, delta: float) -> SystemResult:
        state = self._store.state
        clock = state.clock
        day_before = clock.day
        minutes = int(delta)
        clock.advance(minutes)
        state.location.time_on_screen += minutes
        if clock.day != day_before:
            logger.debug(f"Day {clock.day} begins")
        return SystemResult(details={"minutes": minutes, "new_day": clock.day != day_before})

    def get_debug_info(self) -> Dict[str, Any]:
        clock = self._store.state.clock
        info = super().get_debug_info()
        info.update(day=clock.day, time=f"{clock.hour:02d}:{clock.minute:02d}", speed=clock.speed)
        return info
