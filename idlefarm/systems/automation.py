"""Passive production from automation upgrades.

The best owned auto-pump fills a share of the tank's capacity every hour;
the best owned auto-catcher pulls seeds out of the tower's wind every
minute. Both produce whole units only; the fractions carry over in
``AutomationState``.
"""

from __future__ import annotations

import logging
import math
import random
from typing import Dict, Optional, Tuple

from idlefarm.config import balance
from idlefarm.data.provider import StaticDataProvider
from idlefarm.enums import ResourceKind
from idlefarm.processes.seed_catching import seed_pool_for, wind_level
from idlefarm.state.model import GameState
from idlefarm.state.store import StateStore
from idlefarm.systems.base import BaseSystem, SystemResult
from idlefarm.systems.phases import TickPhase, runs_in_phase

logger = logging.getLogger(__name__)


def best_rate(upgrades, rates: Dict[str, float]) -> float:
    """Highest rate among the owned upgrades (0 when none is owned)."""
    return max((rate for item, rate in rates.items() if item in upgrades), default=0.0)


def _take_whole(accumulated: float) -> Tuple[int, float]:
    whole = math.floor(accumulated)
    return whole, accumulated - whole


@runs_in_phase(TickPhase.AUTOMATION)
class AutomationSystem(BaseSystem):
    def __init__(
        self,
        store: StateStore,
        data: StaticDataProvider,
        rng: Optional[random.Random] = None,
    ) -> None:
        super().__init__("Automation")
        self._store = store
        self._data = data
        self._rng = rng or random.Random()

    def _do_update(self, delta: float) -> SystemResult:
        state = self._store.state
        pumped = self._run_pump(state, delta)
        caught = self._run_catcher(state, delta)
        return SystemResult(
            affected=int(pumped > 0) + int(caught > 0),
            details={"water_pumped": pumped, "seeds_caught": caught},
        )

    def _run_pump(self, state: GameState, delta: float) -> int:
        upgrades = state.progression.unlocked_upgrades
        rate = best_rate(upgrades, balance.AUTO_PUMP_RATES)
        water = state.resources.water
        automation = state.automation
        if rate <= 0 or water.free <= 0:
            # A full tank wastes the pump's output
            automation.pump_accumulator = 0.0
            return 0
        per_minute = rate * water.maximum / 60
        amount, automation.pump_accumulator = _take_whole(automation.pump_accumulator + per_minute * delta)
        if amount <= 0:
            return 0
        update = self._store.add(ResourceKind.WATER, amount, reason="auto-pump").unwrap()
        return int(update.delta)

    def _run_catcher(self, state: GameState, delta: float) -> int:
        rate = best_rate(state.progression.unlocked_upgrades, balance.AUTO_CATCHER_RATES)
        if rate <= 0 or state.progression.tower_level < 1:
            return 0
        automation = state.automation
        caught, automation.catcher_accumulator = _take_whole(automation.catcher_accumulator + rate * delta)
        if caught <= 0:
            return 0
        known = {row["id"] for row in self._data.get_by_category("crop")}
        pool = seed_pool_for(wind_level(state), known)
        if not pool:
            return 0
        for _ in range(caught):
            self._store.add(ResourceKind.SEEDS, 1, self._rng.choice(pool), reason="auto-catcher")
        logger.debug(f"Auto-catcher caught {caught} seeds")
        return caught
