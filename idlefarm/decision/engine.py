"""The decision engine: what should the player do next?

Each evaluation:

1. enumerates emergencies and per-subsystem candidates
2. filters out anything that cannot be performed (``ActionFilter``)
3. turns valid candidates on other screens into navigation moves
4. scores candidates on the current screen and the moves (``ActionScorer``)
5. returns emergencies first, then the best scored actions, top-K overall

Sorting is stable, so equal scores keep enumeration order.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from idlefarm.config.parameters import PersonaTraits, SimulationParameters
from idlefarm.data.provider import StaticDataProvider
from idlefarm.decision.actions import GameAction
from idlefarm.decision.bottlenecks import detect
from idlefarm.decision.enumerators import (
    EnumerationContext,
    emergency_actions,
    enumerate_candidates,
    group_by_screen,
    move,
)
from idlefarm.decision.filters import ActionFilter
from idlefarm.decision.persona import PersonaStrategy, strategy_for
from idlefarm.decision.scorer import ActionScorer
from idlefarm.enums import ScreenId
from idlefarm.state.model import GameState

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DecisionExplanation:
    """Diagnostics for one evaluation.

    Attributes:
        best: The action that would run first (None when nothing is valid)
        reasoning: One line per ranked action explaining its score
        alternatives: The other ranked actions, best first
    """

    best: Optional[GameAction]
    reasoning: Tuple[str, ...]
    alternatives: Tuple[GameAction, ...]


class DecisionEngine:
    def __init__(self, persona: PersonaTraits, rng: Optional[random.Random] = None) -> None:
        self._persona = persona
        self._strategy: PersonaStrategy = strategy_for(persona)
        self._rng = rng or random.Random()

    @property
    def persona(self) -> PersonaTraits:
        return self._persona

    @property
    def strategy(self) -> PersonaStrategy:
        return self._strategy

    def evaluate(
        self,
        state: GameState,
        parameters: SimulationParameters,
        static_data: StaticDataProvider,
    ) -> List[GameAction]:
        """Ranked top-K actions for ``state``. Consumes the engine RNG for jitter."""
        ranked, _ = self._rank(state, parameters, static_data, self._rng)
        top = ranked[: parameters.decisions.top_k]
        if top:
            logger.debug(f"Decided {[repr(a) for a in top]}")
        return top

    def explain(
        self,
        state: GameState,
        parameters: SimulationParameters,
        static_data: StaticDataProvider,
        rng: Optional[random.Random] = None,
    ) -> DecisionExplanation:
        """Like ``evaluate`` but with reasons. Uses ``rng`` (if any) for jitter."""
        ranked, reasons = self._rank(state, parameters, static_data, rng)
        top = ranked[: parameters.decisions.top_k]
        if not top:
            return DecisionExplanation(None, ("nothing to do",), ())
        return DecisionExplanation(
            best=top[0],
            reasoning=tuple(reasons[id(action)] for action in top),
            alternatives=tuple(top[1:]),
        )

    def _rank(
        self,
        state: GameState,
        parameters: SimulationParameters,
        data: StaticDataProvider,
        rng: Optional[random.Random],
    ) -> Tuple[List[GameAction], Dict[int, str]]:
        ctx = EnumerationContext(state, data, parameters, self._persona)
        action_filter = ActionFilter(data, parameters)
        scorer = ActionScorer(parameters, self._strategy)
        bottlenecks = detect(state, data)
        current = state.location.current_screen

        emergencies = action_filter.filter(emergency_actions(ctx), state)
        candidates = action_filter.filter(enumerate_candidates(ctx), state)
        by_screen = group_by_screen(candidates)

        local = by_screen.pop(current, [])
        moves = []
        for screen in ScreenId:
            remote = by_screen.get(screen)
            if not remote:
                continue
            best = max(remote, key=lambda a: scorer.base_score(a, state))
            moves.append(move(ctx, screen, f"{best.describe()} on {screen.value}"))
        moves = action_filter.filter(moves, state)

        reasons: Dict[int, str] = {}
        claimed = set()
        ranked: List[GameAction] = []
        for action in emergencies:
            if action.id in claimed:
                continue
            claimed.add(action.id)
            ranked.append(action)
            reasons[id(action)] = f"emergency: {action.reason}"

        scored = []
        for action in local + moves:
            if action.id in claimed:
                continue
            breakdown = scorer.breakdown(action, state, bottlenecks, rng)
            scored_action = action.with_score(breakdown.total)
            reasons[id(scored_action)] = breakdown.describe(action)
            scored.append(scored_action)
        scored.sort(key=lambda a: -a.score)
        ranked.extend(scored)
        return ranked, reasons
