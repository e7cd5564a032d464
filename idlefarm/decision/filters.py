"""Drop candidate actions that cannot be performed right now.

Rejections are silent at the engine level: an action with an unmet
prerequisite, a missing resource, a locked screen or an already completed
one-time target simply never reaches scoring. ``rejection_reason`` exposes
why, for diagnostics and tests.
"""

from __future__ import annotations

import logging
from typing import Iterable, List, Optional

from idlefarm.config import balance
from idlefarm.config.parameters import SimulationParameters
from idlefarm.data.provider import StaticDataProvider
from idlefarm.decision.actions import GameAction
from idlefarm.decision.prerequisites import unmet
from idlefarm.enums import ActionKind, ScreenId
from idlefarm.state.model import GameState

logger = logging.getLogger(__name__)

EPSILON = 1e-9


class ActionFilter:
    """Validity checks shared by the decision engine and the executor."""

    def __init__(self, data: StaticDataProvider, parameters: SimulationParameters) -> None:
        self._data = data
        self._params = parameters

    def filter(self, actions: Iterable[GameAction], state: GameState) -> List[GameAction]:
        valid = []
        for action in actions:
            reason = self.rejection_reason(action, state)
            if reason is None:
                valid.append(action)
            else:
                logger.debug(f"Filtered {action.id}: {reason}")
        return valid

    def is_valid(self, action: GameAction, state: GameState) -> bool:
        return self.rejection_reason(action, state) is None

    def rejection_reason(self, action: GameAction, state: GameState) -> Optional[str]:
        """Why ``action`` is invalid in ``state``, or None if it is valid."""
        screens = state.progression.unlocked_screens
        if action.screen not in screens:
            return f"screen {action.screen.value} is locked"
        if action.kind is ActionKind.MOVE:
            destination = ScreenId.from_id(action.target)
            if destination not in screens:
                return f"destination {destination.value} is locked"
            if destination is state.location.current_screen:
                return "already there"

        missing = unmet(action.prerequisites, state)
        if missing:
            return f"unmet prerequisites {missing}"

        return self._resource_problem(action, state) or self._target_problem(action, state)

    def _resource_problem(self, action: GameAction, state: GameState) -> Optional[str]:
        resources = state.resources
        if action.energy_cost > resources.energy.current + EPSILON:
            return f"needs {action.energy_cost:g} energy"
        if action.gold_cost > resources.gold:
            return f"needs {action.gold_cost} gold"
        if action.water_cost > resources.water.current + EPSILON:
            return f"needs {action.water_cost:g} water"
        for material, qty in action.material_costs.items():
            if resources.materials.get(material, 0) < qty:
                return f"needs {qty} {material}"
        for seed, qty in action.seed_costs.items():
            if resources.seeds.get(seed, 0) < qty:
                return f"needs {qty} {seed} seeds"

        farm = self._params.farm
        if action.kind is ActionKind.WATER and resources.water.current <= farm.min_water_to_irrigate:
            return "tank too low to irrigate"
        if action.kind is ActionKind.CLEANUP and not action.is_emergency:
            if resources.energy.current - action.energy_cost < farm.energy_reserve - EPSILON:
                return "would dip into the energy reserve"
        if action.kind is ActionKind.PUMP and resources.water.free <= EPSILON:
            return "tank is full"
        return None

    def _target_problem(self, action: GameAction, state: GameState) -> Optional[str]:
        kind = action.kind
        progression = state.progression
        inventory = state.inventory
        processes = state.processes

        if kind is ActionKind.HARVEST:
            crop = processes.crops.get(action.target)
            if crop is None or not crop.ready_to_harvest:
                return "nothing ready on that plot"
        elif kind is ActionKind.WATER:
            crop = processes.crops.get(action.target)
            if crop is None or crop.withered or crop.ready_to_harvest:
                return "no growing crop on that plot"
        elif kind is ActionKind.PLANT:
            if state.empty_plots <= 0:
                return "no free plot"
        elif kind is ActionKind.CLEANUP:
            row = self._data.get_by_id(action.target)
            if row is None:
                return "unknown cleanup"
            if not row.get("repeatable") and action.target in progression.completed_cleanups:
                return "already cleared"
        elif kind is ActionKind.PURCHASE:
            if action.target.startswith("blueprint_"):
                record = inventory.blueprints.get(action.target)
                if record is not None and record.purchased:
                    return "blueprint already owned"
            elif action.target in progression.unlocked_upgrades or inventory.owns(action.target):
                return "already owned"
        elif kind is ActionKind.BUILD:
            record = inventory.blueprints.get(action.target)
            if record is None or not record.purchased:
                return "blueprint not purchased"
            if record.built:
                return "already built"
        elif kind is ActionKind.CATCH_SEEDS:
            if processes.seed_catching is not None:
                return "already catching"
        elif kind is ActionKind.ADVENTURE:
            if processes.adventure is not None:
                return "already adventuring"
            if not inventory.weapons:
                return "no weapon"
            route = self._data.get_by_id(action.target)
            if route is not None and progression.hero_level < int(route.get("min_level") or 1):
                return "hero level too low"
        elif kind is ActionKind.CRAFT:
            if len(processes.crafting_queue) >= balance.FORGE_MAX_QUEUE:
                return "crafting queue is full"
            item = action.params.get("item", "")
            if item and inventory.owns(item):
                return "already owned"
        elif kind is ActionKind.STOKE:
            if processes.forge_heat >= balance.FORGE_MAX_HEAT:
                return "forge is at full heat"
        elif kind is ActionKind.MINE:
            if processes.mining is not None:
                return "already mining"
        elif kind is ActionKind.RESCUE_HELPER:
            if action.target in state.helpers.gnomes:
                return "already rescued"
        elif kind is ActionKind.ASSIGN_HELPER:
            gnome = state.helpers.gnomes.get(action.target)
            if gnome is None or gnome.assigned:
                return "gnome unavailable"
            if state.helpers.assigned_count >= progression.housing_capacity:
                return "no free housing"
        elif kind is ActionKind.TRAIN_HELPER:
            if action.target not in state.helpers.gnomes:
                return "unknown gnome"
            if any(s.gnome_id == action.target for s in processes.training):
                return "already training"
        return None
