"""Apply decided actions to the state.

The executor re-validates every action against the *current* state (earlier
actions in the same tick may have spent the energy it counted on), then runs
the kind-specific effect inside a nested store transaction: either the whole
effect lands or none of it does. Outcomes are published on the event bus as
typed ``ActionExecutedEvent`` / ``ActionFailedEvent`` plus a ``GameEvent``
for the tick report.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

from idlefarm.config import balance
from idlefarm.config.parameters import SimulationParameters
from idlefarm.data.provider import StaticDataProvider
from idlefarm.decision.actions import GameAction
from idlefarm.decision.filters import ActionFilter
from idlefarm.enums import (
    ActionKind,
    ArmorEffect,
    Importance,
    ProcessKind,
    ResourceKind,
    RouteLength,
    ScreenId,
)
from idlefarm.events.domain_events import ActionExecutedEvent, ActionFailedEvent, GameEvent
from idlefarm.events.event_bus import EventBus
from idlefarm.processes import (
    AdventureSpec,
    CraftingSpec,
    CropSpec,
    MiningSpec,
    ProcessManager,
    SeedCatchingSpec,
    TrainingSpec,
)
from idlefarm.processes.crops import free_plot_ids, harvest_rewards
from idlefarm.result import Err, Ok, Result
from idlefarm.state.model import ArmorPiece, BlueprintRecord, BuildCost, GameState, Gnome
from idlefarm.state.progression import water_capacity_for
from idlefarm.state.store import StateStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExecutionReport:
    """A successfully applied action.

    Attributes:
        action: The action as decided
        description: What happened, for logs and events
        process_id: Id of the process the action started, if any
    """

    action: GameAction
    description: str
    process_id: Optional[str] = None


class ActionExecutor:
    def __init__(
        self,
        store: StateStore,
        processes: ProcessManager,
        data: StaticDataProvider,
        parameters: SimulationParameters,
        event_bus: Optional[EventBus] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        self._store = store
        self._processes = processes
        self._data = data
        self._params = parameters
        self._event_bus = event_bus
        self._rng = rng or random.Random()
        self._filter = ActionFilter(data, parameters)
        self._handlers: Dict[ActionKind, Callable[[GameAction], Result[ExecutionReport, str]]] = {
            ActionKind.HARVEST: self._harvest,
            ActionKind.WATER: self._water,
            ActionKind.PLANT: self._plant,
            ActionKind.PUMP: self._pump,
            ActionKind.CLEANUP: self._cleanup,
            ActionKind.BUILD: self._build,
            ActionKind.CATCH_SEEDS: self._catch_seeds,
            ActionKind.PURCHASE: self._purchase,
            ActionKind.SELL_MATERIAL: self._sell_material,
            ActionKind.ADVENTURE: self._adventure,
            ActionKind.CRAFT: self._craft,
            ActionKind.STOKE: self._stoke,
            ActionKind.MINE: self._mine,
            ActionKind.RESCUE_HELPER: self._rescue_helper,
            ActionKind.ASSIGN_HELPER: self._assign_helper,
            ActionKind.TRAIN_HELPER: self._train_helper,
            ActionKind.MOVE: self._move,
        }

    @property
    def _state(self) -> GameState:
        return self._store.state

    @property
    def _now(self) -> int:
        return self._store.state.clock.total_minutes

    def execute(self, action: GameAction) -> Result[ExecutionReport, str]:
        state = self._state
        if action.screen is not state.location.current_screen:
            return self._fail(action, f"hero is on {state.location.current_screen.value}")
        problem = self._filter.rejection_reason(action, state)
        if problem is not None:
            return self._fail(action, problem)

        tx = self._store.begin_transaction()
        try:
            result = self._handlers[action.kind](action)
        except Exception:
            self._store.rollback(tx)
            raise
        if result.is_err():
            self._store.rollback(tx)
            return self._fail(action, result.error)
        self._store.commit(tx)

        report = result.unwrap()
        state.tracking.actions_executed += 1
        logger.debug(f"Executed {action.id}: {report.description}")
        self._emit(ActionExecutedEvent(action.kind, action.target, action.screen, self._now))
        self._emit(
            GameEvent(
                timestamp=self._now,
                type="action_executed",
                description=report.description,
                data={"kind": action.kind.value, "target": action.target},
            )
        )
        return result

    def _fail(self, action: GameAction, reason: str) -> Result[ExecutionReport, str]:
        self._state.tracking.actions_failed += 1
        logger.warning(f"Action {action.id} failed: {reason}")
        self._emit(ActionFailedEvent(action.kind, action.target, reason, self._now))
        self._emit(
            GameEvent(
                timestamp=self._now,
                type="action_failed",
                description=f"{action.describe()} failed: {reason}",
                importance=Importance.MEDIUM,
                data={"kind": action.kind.value, "target": action.target},
            )
        )
        return Err(reason)

    def _emit(self, event: Any) -> None:
        if self._event_bus is not None:
            self._event_bus.emit(event)

    def _notify(self, type_: str, description: str, importance: Importance, **data: Any) -> None:
        self._emit(GameEvent(self._now, type_, description, importance, data))

    def _spend(self, action: GameAction) -> Result[Any, str]:
        return self._store.spend(
            energy=action.energy_cost,
            gold=action.gold_cost,
            water=action.water_cost,
            materials=action.material_costs,
            seeds=action.seed_costs,
            reason=action.kind.value,
        )

    def _gain_experience(self, xp: int) -> None:
        progression = self._state.progression
        if progression.add_experience(xp):
            self._notify(
                "level_up",
                f"Hero reached level {progression.hero_level}",
                Importance.MEDIUM,
                level=progression.hero_level,
            )

    # ------------------------------------------------------------------
    # Farm
    # ------------------------------------------------------------------

    def _harvest(self, action: GameAction) -> Result[ExecutionReport, str]:
        crops = self._state.processes.crops
        crop = crops[action.target]
        energy, xp = harvest_rewards(self._data, crop.crop_id)
        self._store.add(ResourceKind.ENERGY, energy, reason="harvest")
        self._gain_experience(xp)
        del crops[action.target]
        return Ok(ExecutionReport(action, f"Harvested {crop.crop_id} on {crop.plot_id} (+{energy:g} energy)"))

    def _water(self, action: GameAction) -> Result[ExecutionReport, str]:
        paid = self._spend(action)
        if paid.is_err():
            return Err(paid.error)
        crop = self._state.processes.crops[action.target]
        crop.water_level = 1.0
        crop.drought_minutes = 0.0
        return Ok(ExecutionReport(action, f"Watered {crop.crop_id} on {crop.plot_id}"))

    def _plant(self, action: GameAction) -> Result[ExecutionReport, str]:
        seed = action.params["seed"]
        free = free_plot_ids(self._state)
        if not free:
            return Err("no free plot")
        plot_id = action.target if action.target in free else free[0]
        paid = self._spend(action)
        if paid.is_err():
            return Err(paid.error)
        started = self._processes.start(
            ProcessKind.CROP_GROWTH, CropSpec(plot_id, seed, water_level=balance.PLANTED_WATER_LEVEL)
        )
        if started.is_err():
            return Err(started.error)
        return Ok(ExecutionReport(action, f"Planted {seed} on {plot_id}", started.unwrap()))

    def _pump(self, action: GameAction) -> Result[ExecutionReport, str]:
        paid = self._spend(action)
        if paid.is_err():
            return Err(paid.error)
        gain = action.expected_rewards.get("water", 0)
        update = self._store.add(ResourceKind.WATER, gain, reason="pump").unwrap()
        return Ok(ExecutionReport(action, f"Pumped {update.delta:g} water"))

    def _cleanup(self, action: GameAction) -> Result[ExecutionReport, str]:
        row = self._data.get_by_id(action.target)
        if row is None:
            return Err(f"unknown cleanup {action.target!r}")
        paid = self._spend(action)
        if paid.is_err():
            return Err(paid.error)
        progression = self._state.progression
        plots = int(row.get("plots_added") or 0)
        progression.farm_plots += plots
        progression.completed_cleanups.add(action.target)
        self._store.add_materials(row.get("materials_gain") or {}, reason="cleanup")
        self._gain_experience(int(row.get("xp") or 0))
        if plots:
            self._notify(
                "plots_added",
                f"Cleared {action.target}: +{plots} plots ({progression.farm_plots} total)",
                Importance.MEDIUM,
                plots=progression.farm_plots,
            )
        return Ok(ExecutionReport(action, f"Completed {action.target}"))

    def _build(self, action: GameAction) -> Result[ExecutionReport, str]:
        record = self._state.inventory.blueprints[action.target]
        paid = self._store.spend(
            energy=record.build_cost.energy,
            materials=record.build_cost.materials,
            reason="build",
        )
        if paid.is_err():
            return Err(paid.error)
        progression = self._state.progression
        screens_before = progression.unlocked_screens
        structure = action.target[len("blueprint_"):]
        record.built = True
        progression.built_structures.add(structure)
        self._notify("structure_built", f"Built {structure}", Importance.MEDIUM, structure=structure)
        for screen in sorted(progression.unlocked_screens - screens_before):
            self._notify("screen_unlocked", f"Unlocked the {screen.value} screen", Importance.HIGH, screen=screen.value)
        return Ok(ExecutionReport(action, f"Built {structure}"))

    # ------------------------------------------------------------------
    # Tower and town
    # ------------------------------------------------------------------

    def _catch_seeds(self, action: GameAction) -> Result[ExecutionReport, str]:
        duration = float(action.params.get("duration", action.duration))
        started = self._processes.start(ProcessKind.SEED_CATCHING, SeedCatchingSpec(duration))
        if started.is_err():
            return Err(started.error)
        return Ok(ExecutionReport(action, f"Catching seeds for {duration:g} minutes", started.unwrap()))

    def _purchase(self, action: GameAction) -> Result[ExecutionReport, str]:
        row = self._data.get_by_id(action.target)
        if row is None:
            return Err(f"unknown item {action.target!r}")
        paid = self._spend(action)
        if paid.is_err():
            return Err(paid.error)

        if row["category"] == "blueprint":
            self._state.inventory.blueprints[action.target] = BlueprintRecord(
                purchased=True,
                build_cost=BuildCost(
                    energy=float(row.get("build_energy") or 0),
                    materials=dict(row.get("build_materials") or {}),
                ),
                purchased_at=self._now,
            )
        else:
            self._grant_upgrade(row)
        return Ok(ExecutionReport(action, f"Bought {action.target} for {action.gold_cost} gold"))

    def _grant_upgrade(self, row) -> None:
        state = self._state
        inventory = state.inventory
        item = row["id"]
        kind = row.get("kind", "upgrade")
        state.progression.unlocked_upgrades.append(item)
        if kind in ("tool", "net"):
            inventory.tools[item] = True
        elif kind == "weapon":
            family = row["family"]
            inventory.weapons[family] = max(inventory.weapons.get(family, 0), int(row.get("level") or 1))
        elif kind == "armor":
            defense = float(row.get("defense") or 0)
            effect = ArmorEffect.from_id(row.get("effect") or "none")
            inventory.armor[item] = ArmorPiece(item, defense, effect)
            equipped = inventory.equipped_armor_piece
            if equipped is None or equipped.defense < defense:
                inventory.equipped_armor = item
        elif kind == "water_tank":
            water = state.resources.water
            water.maximum = water_capacity_for(state.progression.unlocked_upgrades, water.maximum)

    def _sell_material(self, action: GameAction) -> Result[ExecutionReport, str]:
        quantity = int(action.params["quantity"])
        gold = int(action.params["rate"]) * quantity
        paid = self._spend(action)
        if paid.is_err():
            return Err(paid.error)
        self._store.add(ResourceKind.GOLD, gold, reason="sale")
        return Ok(ExecutionReport(action, f"Sold {quantity} {action.target} for {gold} gold"))

    def _train_helper(self, action: GameAction) -> Result[ExecutionReport, str]:
        paid = self._spend(action)
        if paid.is_err():
            return Err(paid.error)
        started = self._processes.start(ProcessKind.HELPER_TRAINING, TrainingSpec(action.target))
        if started.is_err():
            return Err(started.error)
        return Ok(ExecutionReport(action, f"Training {action.target}", started.unwrap()))

    # ------------------------------------------------------------------
    # Adventure, forge, mine
    # ------------------------------------------------------------------

    def _adventure(self, action: GameAction) -> Result[ExecutionReport, str]:
        paid = self._spend(action)
        if paid.is_err():
            return Err(paid.error)
        length = action.params.get("length", RouteLength.SHORT)
        seed = self._rng.randrange(2**31)
        started = self._processes.start(ProcessKind.ADVENTURE, AdventureSpec(action.target, length, seed))
        if started.is_err():
            return Err(started.error)
        return Ok(ExecutionReport(action, f"Set out on {action.target} ({length.value})", started.unwrap()))

    def _rescue_helper(self, action: GameAction) -> Result[ExecutionReport, str]:
        paid = self._spend(action)
        if paid.is_err():
            return Err(paid.error)
        name = str(action.params.get("name", action.target))
        self._state.helpers.gnomes[action.target] = Gnome(id=action.target, name=name)
        self._notify("helper_rescued", f"Rescued {name}", Importance.MEDIUM, gnome=action.target)
        return Ok(ExecutionReport(action, f"Rescued {name}"))

    def _assign_helper(self, action: GameAction) -> Result[ExecutionReport, str]:
        gnome = self._state.helpers.gnomes[action.target]
        role = action.params["role"]
        gnome.role = role
        gnome.assigned = True
        gnome.current_task = role.value
        return Ok(ExecutionReport(action, f"{gnome.name} now works as {role.value}"))

    def _craft(self, action: GameAction) -> Result[ExecutionReport, str]:
        paid = self._spend(action)
        if paid.is_err():
            return Err(paid.error)
        started = self._processes.start(ProcessKind.CRAFTING, CraftingSpec(action.target))
        if started.is_err():
            return Err(started.error)
        return Ok(ExecutionReport(action, f"Queued {action.params.get('item', action.target)}", started.unwrap()))

    def _stoke(self, action: GameAction) -> Result[ExecutionReport, str]:
        paid = self._spend(action)
        if paid.is_err():
            return Err(paid.error)
        processes = self._state.processes
        heat = float(action.expected_rewards.get("heat", 0))
        processes.forge_heat = min(balance.FORGE_MAX_HEAT, processes.forge_heat + heat)
        return Ok(ExecutionReport(action, f"Stoked the forge to {processes.forge_heat:g} heat"))

    def _mine(self, action: GameAction) -> Result[ExecutionReport, str]:
        depth = float(action.params.get("target_depth", self._params.mining.planned_depth))
        started = self._processes.start(ProcessKind.MINING, MiningSpec(depth))
        if started.is_err():
            return Err(started.error)
        return Ok(ExecutionReport(action, f"Descending to depth {depth:g}", started.unwrap()))

    def _move(self, action: GameAction) -> Result[ExecutionReport, str]:
        destination = ScreenId.from_id(action.target)
        self._state.location.move_to(destination, action.reason)
        return Ok(ExecutionReport(action, f"Moved to {destination.value}"))

