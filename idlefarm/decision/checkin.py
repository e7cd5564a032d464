"""When does the simulated player look at the game?

``should_check_in`` is a pure function of the clock, the last check-in and
the state. The rules, in order:

1. The first check-in of a run is immediate.
2. The opening stretch (``checkin.early_game_minutes``) is played without gaps.
3. Nobody plays at night (22:00-06:00) unless the farm has run out of seeds.
4. An emergency shortens the wait: 2 minutes for a seed crisis, 5 for a
   water crisis, 10 when energy is nearly full, 8 when crops are ready.
   Casual players react half as fast again.
5. Otherwise the persona's base interval applies, and no persona idles
   longer than its maximum idle time.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional

from idlefarm.config.parameters import PersonaTraits, SimulationParameters
from idlefarm.decision.persona import strategy_for
from idlefarm.state.model import GameState, SimulationClock

HIGH_ENERGY_FRACTION = 0.85
WATER_CRISIS_FRACTION = 0.2


@dataclass(frozen=True)
class CheckInDecision:
    allowed: bool
    reason: str
    interval: float = 0.0


def is_night(clock: SimulationClock, parameters: SimulationParameters) -> bool:
    checkin = parameters.checkin
    return clock.hour >= checkin.night_start_hour or clock.hour < checkin.night_end_hour


def emergency_interval(state: GameState, parameters: SimulationParameters) -> float:
    """Shortest wait the current emergencies allow (inf when there are none)."""
    checkin = parameters.checkin
    resources = state.resources
    if resources.total_seeds < state.progression.farm_plots:
        return checkin.seed_crisis_interval
    if resources.water.current < resources.water.maximum * WATER_CRISIS_FRACTION:
        return checkin.water_crisis_interval
    if resources.energy.current > resources.energy.maximum * HIGH_ENERGY_FRACTION:
        return checkin.high_energy_interval
    if state.ready_crops:
        return checkin.ready_crop_interval
    return math.inf


def evaluate_check_in(
    now: SimulationClock,
    last: Optional[int],
    state: GameState,
    persona: PersonaTraits,
    parameters: SimulationParameters,
) -> CheckInDecision:
    if last is None:
        return CheckInDecision(True, "first check-in")
    if now.total_minutes < parameters.checkin.early_game_minutes:
        return CheckInDecision(True, "early game")
    seed_crisis = state.resources.total_seeds < state.progression.farm_plots
    if is_night(now, parameters) and not seed_crisis:
        return CheckInDecision(False, "night")

    strategy = strategy_for(persona)
    elapsed = now.total_minutes - last
    emergency = emergency_interval(state, parameters) * strategy.emergency_factor
    if elapsed >= emergency:
        return CheckInDecision(True, "emergency", emergency)
    if elapsed > strategy.max_idle:
        return CheckInDecision(True, "idle too long", strategy.max_idle)
    interval = min(strategy.base_interval, emergency)
    if elapsed >= strategy.base_interval:
        return CheckInDecision(True, "interval elapsed", interval)
    return CheckInDecision(False, "waiting", interval)


def should_check_in(
    now: SimulationClock,
    last: Optional[int],
    state: GameState,
    persona: PersonaTraits,
    parameters: SimulationParameters,
) -> bool:
    return evaluate_check_in(now, last, state, persona, parameters).allowed
