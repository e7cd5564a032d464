"""Candidate generation, one enumerator per subsystem.

Enumerators are generous: they propose every action that makes sense in
principle and leave affordability, prerequisites and screen locks to
``ActionFilter``. Each candidate names the screen it must be performed on;
the engine turns candidates on other screens into navigation.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Tuple

from idlefarm.config import balance
from idlefarm.config.parameters import PersonaTraits, SimulationParameters
from idlefarm.data.provider import (
    BLUEPRINT,
    CLEANUP,
    HELPER,
    RECIPE,
    ROUTE,
    UPGRADE,
    StaticDataProvider,
)
from idlefarm.decision.actions import GameAction
from idlefarm.decision.bottlenecks import seed_needs
from idlefarm.enums import ActionKind, HelperRole, RouteLength, ScreenId
from idlefarm.processes.crops import free_plot_ids, harvest_rewards
from idlefarm.processes.seed_catching import expected_yield
from idlefarm.processes.training import MAX_HELPER_LEVEL, training_cost
from idlefarm.state.model import GameState

TOWER_BLUEPRINT = "blueprint_tower_reach_1"
HARVEST_MINUTES = 2
PLANT_MINUTES = 1
PUMP_MINUTES = 2
CLEANUP_MINUTES = 5
STOKE_HEAT = balance.STOKE_WOOD_COST * balance.FORGE_HEAT_PER_WOOD

# Roles handed out in this order as gnomes arrive
ROLE_PRIORITY = (
    HelperRole.WATERER,
    HelperRole.HARVESTER,
    HelperRole.SOWER,
    HelperRole.PUMP_OPERATOR,
    HelperRole.SEED_CATCHER,
    HelperRole.FORAGER,
    HelperRole.MINER,
)


@dataclass
class EnumerationContext:
    state: GameState
    data: StaticDataProvider
    parameters: SimulationParameters
    persona: PersonaTraits

    @property
    def screen(self) -> ScreenId:
        return self.state.location.current_screen


def move(ctx: EnumerationContext, destination: ScreenId, reason: str) -> GameAction:
    return GameAction(
        kind=ActionKind.MOVE,
        screen=ctx.screen,
        target=destination.value,
        duration=1,
        reason=reason,
    )


# ----------------------------------------------------------------------
# Emergencies
# ----------------------------------------------------------------------


def emergency_actions(ctx: EnumerationContext) -> List[GameAction]:
    actions: List[GameAction] = []
    actions.extend(_seed_emergency(ctx))

    resources = ctx.state.resources
    farm = ctx.parameters.farm
    if resources.water.current < resources.water.maximum * farm.water_emergency_fraction:
        if ctx.screen is ScreenId.FARM:
            actions.append(_pump(ctx).as_emergency("water emergency"))

    ready = ctx.state.ready_crops
    if resources.energy.current <= farm.energy_emergency_level and ready:
        if ctx.screen is ScreenId.FARM:
            actions.append(_harvest(ctx, ready[0].plot_id, ready[0].crop_id).as_emergency("energy emergency"))
        else:
            actions.append(move(ctx, ScreenId.FARM, "energy emergency: crops ready").as_emergency("energy emergency"))
    return actions


def _seed_emergency(ctx: EnumerationContext) -> List[GameAction]:
    state = ctx.state
    if not seed_needs(state, ctx.parameters.farm).is_critical:
        return []

    if state.progression.tower_level >= 1:
        if ctx.screen is ScreenId.TOWER:
            if state.processes.seed_catching is not None:
                return []
            minutes = ctx.parameters.seeds.emergency_catch_minutes
            return [_catch(ctx, minutes).as_emergency("seed emergency")]
        return [move(ctx, ScreenId.TOWER, "seed emergency").as_emergency("seed emergency")]

    row = ctx.data.get_by_id(TOWER_BLUEPRINT)
    if row is None:
        return []
    record = state.inventory.blueprints.get(TOWER_BLUEPRINT)
    if record is None or not record.purchased:
        if ctx.screen is ScreenId.TOWN:
            return [_purchase_blueprint(row).as_emergency("seed emergency: buy tower blueprint")]
        if state.resources.gold >= int(row.get("gold_cost") or 0):
            return [move(ctx, ScreenId.TOWN, "seed emergency: buy tower blueprint").as_emergency("seed emergency")]
        return []
    if not record.built:
        if ctx.screen is ScreenId.FARM:
            build = _build(ctx, TOWER_BLUEPRINT)
            return [build.as_emergency("seed emergency: build tower")] if build else []
        return [move(ctx, ScreenId.FARM, "seed emergency: build tower").as_emergency("seed emergency")]
    return []


# ----------------------------------------------------------------------
# Farm
# ----------------------------------------------------------------------


def _harvest(ctx: EnumerationContext, plot_id: str, crop_id: str) -> GameAction:
    energy, xp = harvest_rewards(ctx.data, crop_id)
    return GameAction(
        kind=ActionKind.HARVEST,
        screen=ScreenId.FARM,
        target=plot_id,
        duration=HARVEST_MINUTES,
        expected_rewards={"energy": energy, "experience": xp},
        params={"crop": crop_id},
    )


def _pump(ctx: EnumerationContext) -> GameAction:
    return GameAction(
        kind=ActionKind.PUMP,
        screen=ScreenId.FARM,
        duration=PUMP_MINUTES,
        energy_cost=balance.PUMP_ENERGY_COST,
        expected_rewards={"water": balance.PUMP_WATER_GAIN},
    )


def farm_actions(ctx: EnumerationContext) -> List[GameAction]:
    state = ctx.state
    farm = ctx.parameters.farm
    actions = [_harvest(ctx, crop.plot_id, crop.crop_id) for crop in state.ready_crops]

    for crop in state.processes.crops.values():
        if crop.withered or crop.ready_to_harvest:
            continue
        if crop.water_level < farm.watering_threshold:
            actions.append(
                GameAction(
                    kind=ActionKind.WATER,
                    screen=ScreenId.FARM,
                    target=crop.plot_id,
                    duration=1,
                    energy_cost=balance.WATER_ENERGY_COST,
                    water_cost=1,
                )
            )

    # Best crops first, one candidate per free plot
    seeds = dict(state.resources.seeds)
    order = sorted(
        (seed for seed, qty in seeds.items() if qty > 0),
        key=lambda seed: (-harvest_rewards(ctx.data, seed)[0], seed),
    )
    for plot_id in free_plot_ids(state):
        seed = next((s for s in order if seeds[s] > 0), None)
        if seed is None:
            break
        seeds[seed] -= 1
        actions.append(
            GameAction(
                kind=ActionKind.PLANT,
                screen=ScreenId.FARM,
                target=plot_id,
                duration=PLANT_MINUTES,
                seed_costs={seed: 1},
                expected_rewards={"energy": harvest_rewards(ctx.data, seed)[0]},
                params={"seed": seed},
            )
        )

    if state.resources.water.fraction < 1.0:
        actions.append(_pump(ctx))
    return actions


def cleanup_actions(ctx: EnumerationContext) -> List[GameAction]:
    state = ctx.state
    low = ctx.parameters.mining.low_material_level
    actions = []
    for row in ctx.data.get_by_category(CLEANUP):
        cleanup_id = row["id"]
        gain = dict(row.get("materials_gain") or {})
        if row.get("repeatable"):
            # Chores only make sense while the material is scarce
            if not any(state.resources.materials.get(m, 0) < low for m in gain):
                continue
        elif cleanup_id in state.progression.completed_cleanups:
            continue
        prerequisites = tuple(row["prerequisites"])
        if row.get("tool_required"):
            prerequisites += (row["tool_required"],)
        actions.append(
            GameAction(
                kind=ActionKind.CLEANUP,
                screen=ScreenId.FARM,
                target=cleanup_id,
                duration=CLEANUP_MINUTES,
                energy_cost=float(row.get("energy_cost") or 0),
                prerequisites=prerequisites,
                expected_rewards={
                    "plots": int(row.get("plots_added") or 0),
                    "experience": int(row.get("xp") or 0),
                    "priority": float(row.get("priority") or 1.0),
                    **{f"material:{m}": q for m, q in gain.items()},
                },
            )
        )
    return actions


def _build(ctx: EnumerationContext, blueprint_id: str) -> Optional[GameAction]:
    record = ctx.state.inventory.blueprints.get(blueprint_id)
    if record is None:
        return None
    return GameAction(
        kind=ActionKind.BUILD,
        screen=ScreenId.FARM,
        target=blueprint_id,
        duration=CLEANUP_MINUTES,
        energy_cost=float(record.build_cost.energy),
        material_costs=dict(record.build_cost.materials),
        params={"structure": blueprint_id[len("blueprint_"):]},
    )


def build_actions(ctx: EnumerationContext) -> List[GameAction]:
    actions = []
    for blueprint_id, record in ctx.state.inventory.blueprints.items():
        if record.purchased and not record.built:
            build = _build(ctx, blueprint_id)
            if build is not None:
                actions.append(build)
    return actions


# ----------------------------------------------------------------------
# Tower
# ----------------------------------------------------------------------


def _catch(ctx: EnumerationContext, minutes: float) -> GameAction:
    expected = expected_yield(ctx.state, minutes, ctx.persona.catching_skill)
    return GameAction(
        kind=ActionKind.CATCH_SEEDS,
        screen=ScreenId.TOWER,
        target=str(ctx.state.progression.tower_level),
        duration=minutes,
        expected_rewards={"seeds": expected},
        params={"duration": minutes},
    )


def tower_actions(ctx: EnumerationContext) -> List[GameAction]:
    if ctx.state.progression.tower_level < 1 or ctx.state.processes.seed_catching is not None:
        return []
    seeds = ctx.parameters.seeds
    spread = seeds.manual_catch_max_minutes - seeds.manual_catch_min_minutes
    minutes = seeds.manual_catch_min_minutes + round(spread * ctx.persona.optimization)
    return [_catch(ctx, minutes)]


# ----------------------------------------------------------------------
# Town
# ----------------------------------------------------------------------


def _purchase_blueprint(row) -> GameAction:
    return GameAction(
        kind=ActionKind.PURCHASE,
        screen=ScreenId.TOWN,
        target=row["id"],
        duration=1,
        gold_cost=int(row.get("gold_cost") or 0),
        material_costs=dict(row.get("materials_cost") or {}),
        prerequisites=tuple(row["prerequisites"]),
        params={"item_kind": "blueprint"},
    )


def town_actions(ctx: EnumerationContext) -> List[GameAction]:
    state = ctx.state
    actions = []
    for row in ctx.data.get_by_category(BLUEPRINT):
        record = state.inventory.blueprints.get(row["id"])
        if record is None or not record.purchased:
            actions.append(_purchase_blueprint(row))

    for row in ctx.data.get_by_category(UPGRADE):
        item = row["id"]
        if item in state.progression.unlocked_upgrades or state.inventory.owns(item):
            continue
        actions.append(
            GameAction(
                kind=ActionKind.PURCHASE,
                screen=ScreenId.TOWN,
                target=item,
                duration=1,
                gold_cost=int(row.get("gold_cost") or 0),
                material_costs=dict(row.get("materials_cost") or {}),
                prerequisites=tuple(row["prerequisites"]),
                params={"item_kind": row.get("kind", "upgrade"), "item": item},
            )
        )

    if state.resources.gold < ctx.parameters.farm.material_sale_gold_ceiling:
        for material, (rate, lot) in balance.MATERIAL_TRADE_RATES.items():
            # Keep one lot in reserve
            if state.resources.materials.get(material, 0) >= 2 * lot:
                actions.append(
                    GameAction(
                        kind=ActionKind.SELL_MATERIAL,
                        screen=ScreenId.TOWN,
                        target=material,
                        duration=1,
                        material_costs={material: lot},
                        expected_rewards={"gold": rate * lot},
                        params={"quantity": lot, "rate": rate},
                    )
                )

    for gnome in state.helpers.gnomes.values():
        if gnome.level < MAX_HELPER_LEVEL:
            actions.append(
                GameAction(
                    kind=ActionKind.TRAIN_HELPER,
                    screen=ScreenId.TOWN,
                    target=gnome.id,
                    duration=1,
                    gold_cost=training_cost(gnome.level),
                )
            )
    return actions


# ----------------------------------------------------------------------
# Adventure
# ----------------------------------------------------------------------


def adventure_actions(ctx: EnumerationContext) -> List[GameAction]:
    state = ctx.state
    actions = []
    if state.processes.adventure is None:
        for row in ctx.data.get_by_category(ROUTE):
            energy = row.get("energy_costs") or {}
            gold = row.get("gold_rewards") or {}
            durations = row.get("durations") or {}
            for length in RouteLength:
                if length.value not in energy:
                    continue
                actions.append(
                    GameAction(
                        kind=ActionKind.ADVENTURE,
                        screen=ScreenId.ADVENTURE,
                        target=row["id"],
                        duration=float(durations.get(length.value, 0)),
                        energy_cost=float(energy[length.value]),
                        prerequisites=tuple(row["prerequisites"]),
                        expected_rewards={"gold": float(gold.get(length.value, 0))},
                        params={"length": length},
                    )
                )

    for row in ctx.data.get_by_category(HELPER):
        if row["id"] in state.helpers.gnomes:
            continue
        actions.append(
            GameAction(
                kind=ActionKind.RESCUE_HELPER,
                screen=ScreenId.ADVENTURE,
                target=row["id"],
                duration=10,
                energy_cost=float(row.get("energy_cost") or 0),
                prerequisites=tuple(row["prerequisites"]),
                params={"name": row.get("name", row["id"])},
            )
        )
    return actions


# ----------------------------------------------------------------------
# Forge and mine
# ----------------------------------------------------------------------


def forge_actions(ctx: EnumerationContext) -> List[GameAction]:
    state = ctx.state
    actions = []
    for row in ctx.data.get_by_category(RECIPE):
        item = row.get("item", row["id"])
        if state.inventory.owns(item):
            continue
        actions.append(
            GameAction(
                kind=ActionKind.CRAFT,
                screen=ScreenId.FORGE,
                target=row["id"],
                duration=float(row.get("craft_time") or 0),
                energy_cost=float(row.get("energy_cost") or 0),
                material_costs=dict(row.get("materials_cost") or {}),
                prerequisites=tuple(row["prerequisites"]),
                params={"item": item, "item_kind": row.get("kind", "")},
            )
        )

    if state.processes.forge_heat < balance.STOKE_HEAT_THRESHOLD:
        actions.append(
            GameAction(
                kind=ActionKind.STOKE,
                screen=ScreenId.FORGE,
                duration=1,
                energy_cost=balance.STOKE_ENERGY_COST,
                material_costs={"wood": balance.STOKE_WOOD_COST},
                expected_rewards={"heat": STOKE_HEAT},
            )
        )
    return actions


def mine_actions(ctx: EnumerationContext) -> List[GameAction]:
    state = ctx.state
    mining = ctx.parameters.mining
    if state.processes.mining is not None:
        return []
    if state.resources.energy.current <= mining.energy_threshold:
        return []
    return [
        GameAction(
            kind=ActionKind.MINE,
            screen=ScreenId.MINE,
            target="mine",
            duration=mining.planned_depth / balance.MINING_DEPTH_PER_MINUTE,
            prerequisites=("mine_entrance", "pickaxe_1"),
            params={"target_depth": mining.planned_depth},
        )
    ]


# ----------------------------------------------------------------------
# Helpers
# ----------------------------------------------------------------------


def next_role(state: GameState) -> HelperRole:
    taken = {g.role for g in state.helpers.gnomes.values() if g.assigned}
    for role in ROLE_PRIORITY:
        if role not in taken:
            return role
    return ROLE_PRIORITY[0]


def helper_actions(ctx: EnumerationContext) -> List[GameAction]:
    state = ctx.state
    role = next_role(state)
    return [
        GameAction(
            kind=ActionKind.ASSIGN_HELPER,
            screen=ScreenId.FARM,
            target=gnome.id,
            duration=1,
            params={"role": role},
        )
        for gnome in state.helpers.gnomes.values()
        if not gnome.assigned
    ]


Enumerator = Callable[[EnumerationContext], List[GameAction]]

# Subsystems in priority order; emergencies are enumerated separately
SUBSYSTEM_ENUMERATORS: Tuple[Enumerator, ...] = (
    farm_actions,
    cleanup_actions,
    build_actions,
    tower_actions,
    town_actions,
    adventure_actions,
    forge_actions,
    mine_actions,
    helper_actions,
)


def enumerate_candidates(ctx: EnumerationContext) -> List[GameAction]:
    actions: List[GameAction] = []
    for enumerator in SUBSYSTEM_ENUMERATORS:
        actions.extend(enumerator(ctx))
    return actions


def group_by_screen(actions: List[GameAction]) -> Dict[ScreenId, List[GameAction]]:
    grouped: Dict[ScreenId, List[GameAction]] = {}
    for action in actions:
        grouped.setdefault(action.screen, []).append(action)
    return grouped


