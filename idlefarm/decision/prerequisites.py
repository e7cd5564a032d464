"""Prerequisite ids and whether the current state satisfies them.

A prerequisite id names one fact about the run:

* a built structure (``tower_reach_1``, ``forge``)
* an unlocked upgrade (``net_i``, ``gnome_hut``)
* a completed cleanup (``clear_weeds_1``)
* a completed adventure route, any length (``meadow_path``) or a specific
  one (``meadow_path_long``)
* an owned tool, armour piece or weapon level (``hoe``, ``sword_2``)
* a purchased blueprint (``blueprint_forge``)
* a threshold: ``hero_level_N``, ``plots_N`` or ``farm_stage_N``
"""

from __future__ import annotations

import re
from typing import Iterable, List

from idlefarm.state.model import GameState

_THRESHOLD = re.compile(r"^(hero_level|plots|farm_stage)_(\d+)$")


def is_met(prerequisite: str, state: GameState) -> bool:
    progression = state.progression
    if prerequisite in progression.built_structures:
        return True
    if prerequisite in progression.unlocked_upgrades:
        return True
    if prerequisite in progression.completed_cleanups:
        return True
    if prerequisite in progression.completed_adventures:
        return True
    if state.inventory.owns(prerequisite):
        return True
    blueprint = state.inventory.blueprints.get(prerequisite)
    if blueprint is not None and blueprint.purchased:
        return True

    match = _THRESHOLD.match(prerequisite)
    if match:
        kind, value = match.group(1), int(match.group(2))
        if kind == "hero_level":
            return progression.hero_level >= value
        if kind == "plots":
            return progression.farm_plots >= value
        return progression.farm_stage >= value
    return False


def unmet(prerequisites: Iterable[str], state: GameState) -> List[str]:
    return [p for p in prerequisites if not is_met(p, state)]


def all_met(prerequisites: Iterable[str], state: GameState) -> bool:
    return all(is_met(p, state) for p in prerequisites)
