"""Derived progression values.

Farm stage, phase, unlocked screens, tower level, housing capacity and
storage caps are never stored. They are recomputed from primitive facts
(plot count, hero level, built structures, unlocked upgrades) whenever
they are read.
"""

from __future__ import annotations

import re
from typing import Collection, FrozenSet, Iterable

from idlefarm.config import balance
from idlefarm.enums import GamePhase, ScreenId

_TOWER_REACH = re.compile(r"^tower_reach_(\d+)$")


def farm_stage_for(plots: int) -> int:
    """Farm stage 1..5 from the plot-count breakpoint table."""
    stage = 1
    for breakpoint in balance.FARM_STAGE_BREAKPOINTS:
        if plots >= breakpoint:
            stage += 1
    return stage


def phase_for(plots: int, hero_level: int) -> GamePhase:
    if plots < 20 and hero_level < 3:
        return GamePhase.TUTORIAL
    if plots < 40 or hero_level < 6:
        return GamePhase.EARLY
    if plots < 65 or hero_level < 9:
        return GamePhase.MID
    if plots < 90 or hero_level < 12:
        return GamePhase.LATE
    return GamePhase.END


def tower_level_for(built_structures: Iterable[str]) -> int:
    """Highest tower reach built (0 when no tower exists)."""
    level = 0
    for structure in built_structures:
        match = _TOWER_REACH.match(structure)
        if match:
            level = max(level, int(match.group(1)))
    return level


def unlocked_screens_for(built_structures: Collection[str]) -> FrozenSet[ScreenId]:
    screens = set(balance.BASE_SCREENS)
    for structure in built_structures:
        for prefix, screen in balance.STRUCTURE_SCREENS.items():
            if structure == prefix or structure.startswith(prefix + "_"):
                screens.add(screen)
    return frozenset(screens)


def housing_capacity_for(upgrades: Collection[str]) -> int:
    capacity = 0
    for upgrade_id, slots in balance.GNOME_HOUSING:
        if upgrade_id in upgrades:
            capacity = max(capacity, slots)
    return capacity


def storage_tier_for(upgrades: Collection[str]) -> int:
    """Number of storage upgrades owned, counted in purchase order."""
    tier = 0
    for upgrade_id in balance.STORAGE_UPGRADES:
        if upgrade_id not in upgrades:
            break
        tier += 1
    return tier


def storage_limit_for(material: str, upgrades: Collection[str]) -> int:
    if material in balance.BOSS_MATERIALS:
        return balance.UNLIMITED_STORAGE
    limits = balance.MATERIAL_STORAGE_LIMITS.get(material)
    if limits is None:
        return balance.DEFAULT_STORAGE_LIMIT
    base, tiers = limits
    tier = storage_tier_for(upgrades)
    if tier == 0:
        return base
    return tiers[min(tier, len(tiers)) - 1]


def water_capacity_for(upgrades: Collection[str], base_capacity: float) -> float:
    capacity = base_capacity
    for upgrade_id, tank_capacity in balance.WATER_TANK_UPGRADES.items():
        if upgrade_id in upgrades:
            capacity = max(capacity, tank_capacity)
    return capacity


def xp_for_next_level(level: int) -> int:
    return level * balance.BASE_XP_PER_LEVEL


def hero_max_hp(level: int) -> int:
    return balance.HERO_BASE_HP + balance.HERO_HP_PER_LEVEL * level
