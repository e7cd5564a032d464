"""Persona strategies: how a kind of player biases scores and check-ins.

Every strategy applies the shared trait scaling and then its own biases on
top. Each trait scales a group of action kinds by ``floor + span * trait``:
efficiency scales everything, optimization the investment actions, risk
tolerance the dangerous ones and learning rate the helper actions, whose
pay-off compounds for players who pick up the game's systems quickly.
"""

from __future__ import annotations

from typing import Dict, FrozenSet, Type

from idlefarm.config.parameters import PersonaTraits
from idlefarm.decision.actions import GameAction
from idlefarm.enums import ActionKind
from idlefarm.state.model import GameState

OPTIMIZED_KINDS: FrozenSet[ActionKind] = frozenset(
    {ActionKind.PLANT, ActionKind.BUILD, ActionKind.PURCHASE, ActionKind.CRAFT}
)
RISKY_KINDS: FrozenSet[ActionKind] = frozenset({ActionKind.ADVENTURE, ActionKind.MINE})
LEARNED_KINDS: FrozenSet[ActionKind] = frozenset(
    {ActionKind.RESCUE_HELPER, ActionKind.ASSIGN_HELPER, ActionKind.TRAIN_HELPER}
)


class PersonaStrategy:
    """Base strategy: trait scaling plus check-in cadence."""

    base_interval = 10
    max_idle = 45
    emergency_factor = 1.0

    def __init__(self, traits: PersonaTraits) -> None:
        self.traits = traits

    def adjust_score(self, action: GameAction, score: float, state: GameState) -> float:
        adjusted = score * self.traits.efficiency
        kind = action.kind
        if kind in OPTIMIZED_KINDS:
            adjusted *= 0.5 + 0.5 * self.traits.optimization
        if kind in RISKY_KINDS:
            adjusted *= 0.3 + 0.7 * self.traits.risk_tolerance
        if kind in LEARNED_KINDS:
            adjusted *= 0.5 + self.traits.learning_rate
        return adjusted

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.traits.id})"


class CasualStrategy(PersonaStrategy):
    """Plays for fun: likes farming and adventures, neglects automation."""

    base_interval = 10
    max_idle = 45
    emergency_factor = 1.5

    def adjust_score(self, action: GameAction, score: float, state: GameState) -> float:
        adjusted = super().adjust_score(action, score, state)
        if action.kind in (ActionKind.HARVEST, ActionKind.PLANT):
            adjusted *= 1.1
        if action.kind in (ActionKind.ASSIGN_HELPER, ActionKind.PURCHASE):
            adjusted *= 0.8
        if action.kind is ActionKind.ADVENTURE:
            adjusted *= 1.2
        return adjusted


class SpeedrunnerStrategy(PersonaStrategy):
    """Optimizes every action and pushes progression purchases."""

    base_interval = 5
    max_idle = 30

    def adjust_score(self, action: GameAction, score: float, state: GameState) -> float:
        adjusted = super().adjust_score(action, score, state)
        if action.kind in (ActionKind.BUILD, ActionKind.PURCHASE):
            adjusted *= 1.3
        if action.kind is ActionKind.MOVE and "blueprint" in action.reason:
            adjusted *= 1.5
        if action.kind in (ActionKind.ASSIGN_HELPER, ActionKind.PUMP) or "pump" in action.target:
            adjusted *= 1.2
        return adjusted


class WeekendWarriorStrategy(PersonaStrategy):
    """Barely plays on weekdays and binges on weekends."""

    base_interval = 15
    max_idle = 60

    def adjust_score(self, action: GameAction, score: float, state: GameState) -> float:
        adjusted = super().adjust_score(action, score, state)
        if state.clock.is_weekend:
            adjusted *= 1.2
            if action.kind in (ActionKind.BUILD, ActionKind.ADVENTURE, ActionKind.MINE):
                adjusted *= 1.3
        else:
            adjusted *= 0.7
            if action.kind not in (ActionKind.HARVEST, ActionKind.WATER):
                adjusted *= 0.5
        return adjusted


STRATEGIES: Dict[str, Type[PersonaStrategy]] = {
    "casual": CasualStrategy,
    "speedrunner": SpeedrunnerStrategy,
    "weekend_warrior": WeekendWarriorStrategy,
}


def strategy_for(traits: PersonaTraits) -> PersonaStrategy:
    return STRATEGIES[traits.strategy](traits)
