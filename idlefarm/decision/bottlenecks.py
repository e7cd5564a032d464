"""Detect what is currently holding progress back."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import FrozenSet

from idlefarm.config.parameters import FarmParameters
from idlefarm.data.provider import CLEANUP, StaticDataProvider
from idlefarm.decision.actions import GameAction
from idlefarm.decision.prerequisites import all_met
from idlefarm.enums import ActionKind, ScreenId
from idlefarm.state.model import GameState

PLOT_UTILIZATION_LIMIT = 0.9
WATER_PER_PLOT = 2


@dataclass(frozen=True)
class Bottlenecks:
    water_shortage: bool = False
    seed_shortage: bool = False
    plot_capacity: bool = False
    missing_tools: FrozenSet[str] = field(default_factory=frozenset)

    @property
    def any(self) -> bool:
        return self.water_shortage or self.seed_shortage or self.plot_capacity or bool(self.missing_tools)


@dataclass(frozen=True)
class SeedNeeds:
    """Seed stock thresholds for the current farm size.

    Attributes:
        total: Seeds held
        critical: Below this the farm cannot be fully planted (= plots)
        low: 70% of the buffer, rounded down
        buffer: Comfortable stock (2 per plot, at least 6)
    """

    total: int
    critical: int
    low: int
    buffer: int

    @property
    def is_critical(self) -> bool:
        return self.total < self.critical

    @property
    def is_low(self) -> bool:
        return self.total < self.low


def seed_needs(state: GameState, farm: FarmParameters) -> SeedNeeds:
    plots = state.progression.farm_plots
    buffer = max(plots * farm.seed_buffer_per_plot, farm.seed_buffer_minimum)
    return SeedNeeds(
        total=state.resources.total_seeds,
        critical=plots,
        low=math.floor(buffer * farm.seed_low_fraction),
        buffer=buffer,
    )


def plot_utilization(state: GameState) -> float:
    plots = state.progression.farm_plots
    if plots <= 0:
        return 0.0
    growing = sum(1 for crop in state.processes.crops.values() if not crop.withered)
    return growing / plots


def detect(state: GameState, data: StaticDataProvider) -> Bottlenecks:
    progression = state.progression
    missing = set()
    for row in data.get_by_category(CLEANUP):
        tool = row.get("tool_required")
        if not tool or state.inventory.owns(tool):
            continue
        if row["id"] in progression.completed_cleanups and not row.get("repeatable"):
            continue
        if all_met(row["prerequisites"], state):
            missing.add(tool)

    return Bottlenecks(
        water_shortage=state.resources.water.current < WATER_PER_PLOT * progression.farm_plots,
        seed_shortage=state.resources.total_seeds < progression.farm_plots,
        plot_capacity=plot_utilization(state) >= PLOT_UTILIZATION_LIMIT,
        missing_tools=frozenset(missing),
    )


def relieves(action: GameAction, bottlenecks: Bottlenecks) -> bool:
    """True when performing ``action`` works against a detected bottleneck."""
    kind = action.kind
    if bottlenecks.water_shortage:
        if kind is ActionKind.PUMP:
            return True
        if kind is ActionKind.PURCHASE and ("water_tank" in action.target or "pump" in action.target):
            return True
    if bottlenecks.seed_shortage:
        if kind is ActionKind.CATCH_SEEDS:
            return True
        if kind is ActionKind.MOVE and action.target == ScreenId.TOWER.value:
            return True
        if kind in (ActionKind.PURCHASE, ActionKind.BUILD) and "tower_reach" in action.target:
            return True
    if bottlenecks.plot_capacity and kind is ActionKind.CLEANUP:
        return action.expected_rewards.get("plots", 0) > 0
    if bottlenecks.missing_tools and kind in (ActionKind.PURCHASE, ActionKind.CRAFT):
        item = action.params.get("item", action.target)
        return item in bottlenecks.missing_tools
    return False
