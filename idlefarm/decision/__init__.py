"""Scored, persona-biased action selection."""

from idlefarm.decision.actions import GameAction
from idlefarm.decision.checkin import CheckInDecision, evaluate_check_in, should_check_in
from idlefarm.decision.engine import DecisionEngine, DecisionExplanation
from idlefarm.decision.filters import ActionFilter
from idlefarm.decision.persona import PersonaStrategy, strategy_for
from idlefarm.decision.scorer import ActionScorer

__all__ = [
    "ActionFilter",
    "ActionScorer",
    "CheckInDecision",
    "DecisionEngine",
    "DecisionExplanation",
    "GameAction",
    "PersonaStrategy",
    "evaluate_check_in",
    "should_check_in",
    "strategy_for",
]
