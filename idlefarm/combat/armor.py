"""Armour mitigation and special effects."""

from __future__ import annotations

import math
import random

from idlefarm.combat.types import ArmorLoadout
from idlefarm.enums import ArmorEffect

MAX_DEFENSE = 80.0

REFLECTION_CHANCE = 0.15
REFLECTION_REDUCTION = 0.30
EVASION_CHANCE = 0.10
CRITICAL_SHIELD_CHANCE = 0.20
TYPE_RESIST_CHANCE = 0.25
TYPE_RESIST_REDUCTION = 0.40
REGENERATION_PER_WAVE = 3
VAMPIRIC_HEAL_PER_KILL = 1
GOLD_MAGNET_MULTIPLIER = 1.25
ARMOR_DROP_CHANCE = 0.30

DROPPABLE_EFFECTS = (
    ArmorEffect.REFLECTION,
    ArmorEffect.EVASION,
    ArmorEffect.CRITICAL_SHIELD,
    ArmorEffect.TYPE_RESIST,
    ArmorEffect.REGENERATION,
    ArmorEffect.VAMPIRIC,
    ArmorEffect.GOLD_MAGNET,
)


def mitigate(base_damage: float, defense: float) -> float:
    """``base x (1 - defense / 100)`` with defense capped at 80."""
    capped = min(max(defense, 0.0), MAX_DEFENSE)
    return base_damage * (1.0 - capped / 100.0)


def incoming_hit(base_damage: float, armor: ArmorLoadout, rng: random.Random) -> int:
    """Damage from one enemy attack after defense and armour effects.

    Proc effects roll exactly once per attack so the random stream consumed
    does not depend on which effect is equipped.
    """
    damage = mitigate(base_damage, armor.defense)
    roll = rng.random()
    effect = armor.effect
    if effect is ArmorEffect.EVASION and roll < EVASION_CHANCE:
        return 0
    if effect is ArmorEffect.CRITICAL_SHIELD and roll < CRITICAL_SHIELD_CHANCE:
        return 0
    if effect is ArmorEffect.REFLECTION and roll < REFLECTION_CHANCE:
        damage *= 1.0 - REFLECTION_REDUCTION
    elif effect is ArmorEffect.TYPE_RESIST and roll < TYPE_RESIST_CHANCE:
        damage *= 1.0 - TYPE_RESIST_REDUCTION
    return math.ceil(damage)


def wave_regeneration(armor: ArmorLoadout) -> int:
    return REGENERATION_PER_WAVE if armor.effect is ArmorEffect.REGENERATION else 0


def kill_heal(armor: ArmorLoadout) -> int:
    return VAMPIRIC_HEAL_PER_KILL if armor.effect is ArmorEffect.VAMPIRIC else 0


def gold_multiplier(armor: ArmorLoadout) -> float:
    return GOLD_MAGNET_MULTIPLIER if armor.effect is ArmorEffect.GOLD_MAGNET else 1.0
