"""Terminal predicates: victory and stuck detection.

A run counts as making progress whenever plots grow, the hero levels up, or
gold climbs more than ``victory.stuck_gold_threshold`` above its baseline.
The gold baseline follows gold down, so spending never hides later
earnings. A run with no progress for ``victory.stuck_days`` in-game days is
stuck.
"""

from __future__ import annotations

from idlefarm.config.parameters import VictoryParameters
from idlefarm.state.model import MINUTES_PER_DAY, GameState


def record_progress(state: GameState, victory: VictoryParameters) -> bool:
    """Update the progress baseline.

    Returns:
        True if the state progressed since the last baseline
    """
    tracking = state.tracking
    progression = state.progression
    gold = state.resources.gold

    progressed = (
        progression.farm_plots > tracking.last_progress_plots
        or progression.hero_level > tracking.last_progress_level
        or gold > tracking.last_progress_gold + victory.stuck_gold_threshold
    )
    if progressed:
        tracking.last_progress_minute = state.clock.total_minutes
        tracking.last_progress_plots = progression.farm_plots
        tracking.last_progress_level = progression.hero_level
        tracking.last_progress_gold = gold
    elif gold < tracking.last_progress_gold:
        tracking.last_progress_gold = gold
    return progressed


def is_stuck(state: GameState, victory: VictoryParameters) -> bool:
    idle = state.clock.total_minutes - state.tracking.last_progress_minute
    return idle >= victory.stuck_days * MINUTES_PER_DAY


def is_complete(state: GameState, victory: VictoryParameters) -> bool:
    progression = state.progression
    return progression.farm_plots >= victory.plots or progression.hero_level >= victory.hero_level
