"""Action scoring.

    score = (base x urgency + future value) -> persona -> bottleneck -> jitter

The base score reflects what kind of action it is and how badly the farm
needs it right now; urgency multipliers sharpen that for low energy, low
water, low gold and idle plots; future value credits long-term rewards.
Scores never drop below 1.
"""

from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Optional

from idlefarm.config.parameters import SimulationParameters
from idlefarm.decision.actions import GameAction
from idlefarm.decision.bottlenecks import Bottlenecks, plot_utilization, relieves, seed_needs
from idlefarm.decision.persona import PersonaStrategy
from idlefarm.enums import ActionKind, ScreenId
from idlefarm.state.model import GameState

MIN_SCORE = 1.0
DEFAULT_SCORE = 10.0
BUILD_SCORE = 900.0
NAVIGATION_SCORE = 20.0
COMMON_MATERIALS = ("stone", "copper", "iron")


@dataclass(frozen=True)
class ScoreBreakdown:
    base: float
    urgency: float
    future: float
    persona: float
    bottleneck: float
    jitter: float
    total: float

    def describe(self, action: GameAction) -> str:
        return (
            f"{action.kind.value} scored {self.total:.0f} (base {self.base:.0f}, "
            f"urgency {self.urgency:.2f}x, future {self.future:.0f}, "
            f"persona {self.persona:.2f}x, bottleneck {self.bottleneck:.1f}x)"
        )


class ActionScorer:
    def __init__(self, parameters: SimulationParameters, strategy: PersonaStrategy) -> None:
        self._params = parameters
        self._strategy = strategy

    def score(
        self,
        action: GameAction,
        state: GameState,
        bottlenecks: Bottlenecks,
        rng: Optional[random.Random] = None,
    ) -> float:
        return self.breakdown(action, state, bottlenecks, rng).total

    def breakdown(
        self,
        action: GameAction,
        state: GameState,
        bottlenecks: Bottlenecks,
        rng: Optional[random.Random] = None,
    ) -> ScoreBreakdown:
        base = self.base_score(action, state)
        urgency = self.urgency_multiplier(action, state)
        future = self.future_value(action)
        raw = base * urgency + future

        adjusted = self._strategy.adjust_score(action, raw, state)
        persona = adjusted / raw if raw else 1.0
        bottleneck = self._params.decisions.bottleneck_multiplier if relieves(action, bottlenecks) else 1.0
        adjusted *= bottleneck

        jitter = 0.0
        spread = self._params.decisions.jitter
        if rng is not None and spread > 0:
            jitter = rng.uniform(-spread, spread)
        total = max(MIN_SCORE, adjusted + jitter)
        return ScoreBreakdown(base, urgency, future, persona, bottleneck, jitter, total)

    def base_score(self, action: GameAction, state: GameState) -> float:
        resources = state.resources
        kind = action.kind
        if kind is ActionKind.HARVEST:
            score = 100.0
            if resources.energy.current < 50:
                score += 20
        elif kind is ActionKind.WATER:
            score = 60.0
            if self._params.automation.watering_enabled:
                score += 10
        elif kind is ActionKind.PLANT:
            score = 40.0
            if resources.energy.current > self._params.farm.energy_reserve + 20:
                score += 15
        elif kind is ActionKind.CLEANUP:
            rewards = action.expected_rewards
            score = 70.0 + 20 * rewards.get("plots", 0)
            score *= rewards.get("priority", 1.0)
            if state.progression.farm_plots < 10:
                score *= 1.5
        elif kind is ActionKind.PUMP:
            score = 50.0
            if resources.water.fraction < self._params.farm.pump_threshold:
                score = 90.0
            elif resources.water.fraction < 0.5:
                score = 70.0
        elif kind is ActionKind.MOVE:
            score = self.navigation_score(action, state)
        elif kind is ActionKind.ADVENTURE:
            score = 30.0
            if resources.energy.current > 60:
                score += 30
            score += action.expected_rewards.get("gold", 0) * 0.5
            if resources.gold < 100:
                score += 20
        elif kind is ActionKind.CATCH_SEEDS:
            score = self.seed_catching_score(state)
        elif kind is ActionKind.BUILD:
            score = BUILD_SCORE
        elif kind is ActionKind.PURCHASE:
            score = 50.0
            if resources.gold > action.gold_cost * 2:
                score += 30
            if action.target.startswith("blueprint_"):
                score += 40
        elif kind is ActionKind.CRAFT:
            score = 40.0
            if action.params.get("item_kind") in ("weapon", "tool"):
                score += 20
        elif kind is ActionKind.MINE:
            score = 35.0
            low = self._params.mining.low_material_level
            if any(resources.materials.get(m, 0) < low for m in COMMON_MATERIALS):
                score += 25
        else:
            score = DEFAULT_SCORE
        return max(score, MIN_SCORE)

    def navigation_score(self, action: GameAction, state: GameState) -> float:
        destination = action.target
        current = state.location.current_screen
        needs = seed_needs(state, self._params.farm)

        if destination == ScreenId.TOWN.value and self._needs_tower_blueprint(state, needs.is_low):
            return 800.0
        if destination == ScreenId.TOWER.value:
            if needs.is_critical:
                return 998.0
            if needs.is_low:
                return 700.0
        if current is ScreenId.TOWER and destination != ScreenId.TOWER.value:
            if needs.is_critical:
                return 1.0
            if needs.is_low:
                return 5.0
        return self._params.decisions.screen_priorities.get(destination, NAVIGATION_SCORE)

    def _needs_tower_blueprint(self, state: GameState, seeds_low: bool) -> bool:
        if "tower_reach_1" in state.progression.built_structures:
            return False
        record = state.inventory.blueprints.get("blueprint_tower_reach_1")
        if record is not None and record.purchased:
            return False
        return seeds_low and state.resources.gold >= 25

    def seed_catching_score(self, state: GameState) -> float:
        needs = seed_needs(state, self._params.farm)
        at_tower = state.location.current_screen is ScreenId.TOWER
        if needs.is_critical:
            return 9999.0 if at_tower else 999.0
        if needs.is_low:
            return 750.0 if at_tower else 400.0
        if needs.total / max(1, needs.critical) < 3:
            return 200.0
        return 25.0

    def urgency_multiplier(self, action: GameAction, state: GameState) -> float:
        resources = state.resources
        kind = action.kind
        multiplier = 1.0
        if kind is ActionKind.HARVEST and resources.energy.fraction < 0.2:
            multiplier *= 1.5
        if kind in (ActionKind.PUMP, ActionKind.WATER) and resources.water.fraction < 0.3:
            multiplier *= 1.3
        if kind is ActionKind.ADVENTURE and resources.gold < 50:
            multiplier *= 1.2
        if kind is ActionKind.PLANT and plot_utilization(state) < 0.5:
            multiplier *= 1.4
        return multiplier

    def future_value(self, action: GameAction) -> float:
        rewards = action.expected_rewards
        value = (
            rewards.get("gold", 0) * 0.1
            + rewards.get("energy", 0) * 0.5
            + rewards.get("experience", 0) * 0.2
            + rewards.get("plots", 0) * 15
        )
        if action.kind in (ActionKind.BUILD, ActionKind.CLEANUP):
            value += 20
        if action.kind is ActionKind.PURCHASE and action.target.startswith("blueprint_"):
            value += 30
        return value
