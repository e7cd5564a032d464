"""Assigned gnomes doing their jobs.

Every tick each assigned, housed gnome that is not in training performs its
role, scaled by its efficiency:

==============  ===============================================
waterer         re-waters drying crops (plots per minute)
pump_operator   fills the tank (water per hour)
sower           plants free plots from stock (plots per minute)
harvester       harvests ready crops (plots per minute)
miner           passive: reduces mining drain (see mining)
seed_catcher    catches seeds from the tower's wind (per hour)
forager         gathers wood once stumps are cleared (per hour)
==============  ===============================================

Work is counted in whole units; fractions carry over in
``AutomationState.helper_accumulators`` so slow roles still produce over
several ticks.
"""

from __future__ import annotations

import logging
import math
import random
from typing import Any, Callable, Dict, Optional

from idlefarm.config import balance
from idlefarm.config.parameters import SimulationParameters
from idlefarm.data.provider import StaticDataProvider
from idlefarm.enums import HelperRole, Importance, ProcessKind, ResourceKind
from idlefarm.events.domain_events import GameEvent
from idlefarm.events.event_bus import EventBus
from idlefarm.processes.crops import CropSpec, free_plot_ids, harvest_rewards
from idlefarm.processes.manager import ProcessManager
from idlefarm.processes.seed_catching import seed_pool_for, wind_level
from idlefarm.state.model import GameState, Gnome
from idlefarm.state.store import StateStore
from idlefarm.systems.base import BaseSystem, SystemResult
from idlefarm.systems.phases import TickPhase, runs_in_phase

logger = logging.getLogger(__name__)

MINUTES_PER_HOUR = 60
DRY_CROP_LEVEL = 0.5
FORAGING_CLEANUP_PREFIX = "clear_stumps"


@runs_in_phase(TickPhase.HELPERS)
class HelperSystem(BaseSystem):
    def __init__(
        self,
        store: StateStore,
        processes: ProcessManager,
        data: StaticDataProvider,
        parameters: SimulationParameters,
        rng: Optional[random.Random] = None,
        event_bus: Optional[EventBus] = None,
    ) -> None:
        super().__init__("Helpers")
        self._store = store
        self._processes = processes
        self._data = data
        self._params = parameters
        self._rng = rng or random.Random()
        self._event_bus = event_bus
        self._emitted = 0
        self._work: Dict[HelperRole, Callable[[Gnome, float], int]] = {
            HelperRole.WATERER: self._water,
            HelperRole.PUMP_OPERATOR: self._pump,
            HelperRole.SOWER: self._sow,
            HelperRole.HARVESTER: self._harvest,
            HelperRole.MINER: self._assist_miner,
            HelperRole.SEED_CATCHER: self._catch_seeds,
            HelperRole.FORAGER: self._forage,
        }

    @property
    def _state(self) -> GameState:
        return self._store.state

    def _do_update(self, delta: float) -> SystemResult:
        state = self._state
        if not state.helpers.gnomes:
            return SystemResult.empty()

        self._emitted = 0
        training = {session.gnome_id for session in state.processes.training}
        details: Dict[str, Any] = {}
        working = 0
        for gnome in state.helpers.gnomes.values():
            if not gnome.assigned or gnome.role is None or gnome.id in training:
                continue
            working += 1
            units = self._work[gnome.role](gnome, delta)
            key = gnome.role.value
            details[key] = details.get(key, 0) + units
        return SystemResult(affected=working, events_emitted=self._emitted, details=details)

    def _accrue(self, gnome: Gnome, amount: float) -> int:
        """Add ``amount`` to the gnome's accumulator and take the whole units."""
        accumulators = self._state.automation.helper_accumulators
        total = accumulators.get(gnome.id, 0.0) + amount
        whole = math.floor(total)
        accumulators[gnome.id] = total - whole
        return whole

    def _rate(self, gnome: Gnome) -> float:
        return balance.HELPER_ROLE_RATES[gnome.role] * gnome.efficiency

    # ------------------------------------------------------------------
    # Farm roles
    # ------------------------------------------------------------------

    def _water(self, gnome: Gnome, delta: float) -> int:
        if not self._params.automation.watering_enabled:
            gnome.current_task = "watering disabled"
            return 0
        budget = self._accrue(gnome, self._rate(gnome) * delta)
        dry = sorted(
            (
                crop
                for crop in self._state.processes.crops.values()
                if not crop.withered and not crop.ready_to_harvest and crop.water_level < DRY_CROP_LEVEL
            ),
            key=lambda crop: crop.water_level,
        )
        watered = 0
        for crop in dry[:budget]:
            if self._store.subtract(ResourceKind.WATER, 1, reason="helper watering").is_err():
                gnome.current_task = "waiting for water"
                break
            crop.water_level = 1.0
            crop.drought_minutes = 0.0
            watered += 1
        if watered:
            gnome.current_task = f"watered {watered} plots"
        elif not dry:
            gnome.current_task = "no plots need water"
        return watered

    def _pump(self, gnome: Gnome, delta: float) -> int:
        water = self._state.resources.water
        if water.free <= 0:
            gnome.current_task = "tank full"
            return 0
        amount = self._accrue(gnome, self._rate(gnome) * delta / MINUTES_PER_HOUR)
        if amount <= 0:
            return 0
        update = self._store.add(ResourceKind.WATER, amount, reason="pump operator").unwrap()
        gnome.current_task = f"pumped {update.delta:g} water"
        return int(update.delta)

    def _sow(self, gnome: Gnome, delta: float) -> int:
        if not self._params.automation.planting_enabled:
            gnome.current_task = "planting disabled"
            return 0
        budget = self._accrue(gnome, self._rate(gnome) * delta)
        planted = 0
        for plot_id in free_plot_ids(self._state)[:budget]:
            seed = self._pick_seed()
            if seed is None:
                gnome.current_task = "no seeds"
                break
            self._store.subtract(ResourceKind.SEEDS, 1, seed, reason="helper sowing").unwrap()
            started = self._processes.start(
                ProcessKind.CROP_GROWTH, CropSpec(plot_id, seed, water_level=balance.PLANTED_WATER_LEVEL)
            )
            if started.is_err():
                self._store.add(ResourceKind.SEEDS, 1, seed, reason="sowing refund")
                break
            planted += 1
        if planted:
            gnome.current_task = f"planted {planted} plots"
        return planted

    def _pick_seed(self) -> Optional[str]:
        """The most plentiful seed that grows into a known crop."""
        seeds = self._state.resources.seeds
        known = [seed for seed, qty in seeds.items() if qty > 0 and self._is_crop(seed)]
        if not known:
            return None
        return max(known, key=lambda seed: (seeds[seed], seed))

    def _is_crop(self, seed: str) -> bool:
        row = self._data.get_by_id(seed)
        return row is not None and row.get("category") == "crop"

    def _harvest(self, gnome: Gnome, delta: float) -> int:
        if not self._params.automation.harvesting_enabled:
            gnome.current_task = "harvesting disabled"
            return 0
        budget = self._accrue(gnome, self._rate(gnome) * delta)
        state = self._state
        energy = state.resources.energy
        harvested = 0
        gained = 0.0
        for crop in state.ready_crops[:budget]:
            value, xp = harvest_rewards(self._data, crop.crop_id)
            if energy.current + value > energy.maximum:
                gnome.current_task = "energy full"
                break
            self._store.add(ResourceKind.ENERGY, value, reason="helper harvest")
            del state.processes.crops[crop.plot_id]
            if state.progression.add_experience(xp):
                self._notify(
                    "level_up",
                    f"Hero reached level {state.progression.hero_level}",
                    Importance.MEDIUM,
                    level=state.progression.hero_level,
                )
            harvested += 1
            gained += value
        if harvested:
            gnome.current_task = f"harvested {harvested} plots for {gained:g} energy"
        return harvested

    # ------------------------------------------------------------------
    # Other roles
    # ------------------------------------------------------------------

    def _assist_miner(self, gnome: Gnome, delta: float) -> int:
        # Drain reduction is applied by the mining handler
        gnome.current_task = "mining support" if self._state.processes.mining else "waiting at the mine"
        return 0

    def _catch_seeds(self, gnome: Gnome, delta: float) -> int:
        state = self._state
        if state.progression.tower_level < 1:
            gnome.current_task = "needs a tower"
            return 0
        caught = self._accrue(gnome, self._rate(gnome) * delta / MINUTES_PER_HOUR)
        if caught <= 0:
            return 0
        known = {row["id"] for row in self._data.get_by_category("crop")}
        pool = seed_pool_for(wind_level(state), known)
        if not pool:
            return 0
        for _ in range(caught):
            seed = self._rng.choice(pool)
            self._store.add(ResourceKind.SEEDS, 1, seed, reason="helper catching")
        gnome.current_task = f"caught {caught} seeds"
        return caught

    def _forage(self, gnome: Gnome, delta: float) -> int:
        cleared = self._state.progression.completed_cleanups
        if not any(c.startswith(FORAGING_CLEANUP_PREFIX) for c in cleared):
            gnome.current_task = "nothing to forage"
            return 0
        wood = self._accrue(gnome, self._rate(gnome) * delta / MINUTES_PER_HOUR)
        if wood <= 0:
            return 0
        update = self._store.add_materials({"wood": wood}, reason="foraging")["wood"]
        gnome.current_task = f"foraged {update.delta:g} wood"
        return int(update.delta)

    def _notify(self, type_: str, description: str, importance: Importance, **data: Any) -> None:
        if self._event_bus is not None:
            now = self._state.clock.total_minutes
            self._event_bus.emit(GameEvent(now, type_, description, importance, data))
            self._emitted += 1

    def get_debug_info(self) -> Dict[str, Any]:
        info = super().get_debug_info()
        info["tasks"] = {g.id: g.current_task for g in self._state.helpers.gnomes.values()}
        return info
