"""Enemy stats, the weapon/enemy advantage pentagon and roster rolls."""

from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

from idlefarm.combat.types import RouteDefinition
from idlefarm.enums import EnemyType, RouteLength, WeaponFamily

ADVANTAGE_MULTIPLIER = 1.5
RESISTED_MULTIPLIER = 0.5
NEUTRAL_MULTIPLIER = 1.0
MAX_WAVE_SIZE = 5


@dataclass(frozen=True)
class EnemyStats:
    hp: float
    damage: float
    attack_speed: float


@dataclass(frozen=True)
class WeaponStats:
    damage: float
    attack_speed: float


ENEMY_STATS: Dict[EnemyType, EnemyStats] = {
    EnemyType.SLIMES: EnemyStats(20, 3, 1.0),
    EnemyType.ARMORED_INSECTS: EnemyStats(30, 4, 0.8),
    EnemyType.PREDATORY_BEASTS: EnemyStats(25, 6, 1.2),
    EnemyType.FLYING_PREDATORS: EnemyStats(20, 5, 1.5),
    EnemyType.VENOMOUS_CRAWLERS: EnemyStats(35, 4, 1.0),
    EnemyType.LIVING_PLANTS: EnemyStats(40, 3, 0.7),
}

# Level-1 weapon stats; damage grows by half the base per extra level
WEAPON_STATS: Dict[WeaponFamily, WeaponStats] = {
    WeaponFamily.SPEAR: WeaponStats(12, 1.0),
    WeaponFamily.SWORD: WeaponStats(15, 0.9),
    WeaponFamily.BOW: WeaponStats(10, 1.3),
    WeaponFamily.CROSSBOW: WeaponStats(18, 0.7),
    WeaponFamily.WAND: WeaponStats(14, 1.0),
}

WEAPON_ADVANTAGES: Dict[WeaponFamily, EnemyType] = {
    WeaponFamily.SPEAR: EnemyType.ARMORED_INSECTS,
    WeaponFamily.SWORD: EnemyType.PREDATORY_BEASTS,
    WeaponFamily.BOW: EnemyType.FLYING_PREDATORS,
    WeaponFamily.CROSSBOW: EnemyType.VENOMOUS_CRAWLERS,
    WeaponFamily.WAND: EnemyType.LIVING_PLANTS,
}

WEAPON_RESISTANCES: Dict[WeaponFamily, EnemyType] = {
    WeaponFamily.SPEAR: EnemyType.LIVING_PLANTS,
    WeaponFamily.SWORD: EnemyType.FLYING_PREDATORS,
    WeaponFamily.BOW: EnemyType.PREDATORY_BEASTS,
    WeaponFamily.CROSSBOW: EnemyType.ARMORED_INSECTS,
    WeaponFamily.WAND: EnemyType.VENOMOUS_CRAWLERS,
}


def type_multiplier(weapon: WeaponFamily, enemy: Optional[EnemyType]) -> float:
    if enemy is None:
        return NEUTRAL_MULTIPLIER
    if WEAPON_ADVANTAGES[weapon] == enemy:
        return ADVANTAGE_MULTIPLIER
    if WEAPON_RESISTANCES[weapon] == enemy:
        return RESISTED_MULTIPLIER
    return NEUTRAL_MULTIPLIER


def weapon_damage(weapon: WeaponFamily, level: int) -> float:
    base = WEAPON_STATS[weapon].damage
    return base * (1 + 0.5 * (max(1, level) - 1))


def equipped_pair(weapons: Mapping[WeaponFamily, int]) -> Tuple[WeaponFamily, ...]:
    """The two weapons the hero carries: highest level first, pentagon order on ties."""
    order = list(WeaponFamily)
    owned = [w for w in order if weapons.get(w, 0) > 0]
    owned.sort(key=lambda w: (-weapons[w], order.index(w)))
    return tuple(owned[:2])


def choose_weapon(
    carried: Sequence[WeaponFamily], enemy: Optional[EnemyType]
) -> Optional[WeaponFamily]:
    """Advantaged weapon if carried, else a neutral one, else the resisted one."""
    if not carried:
        return None
    return max(carried, key=lambda w: (type_multiplier(w, enemy), -carried.index(w)))


def _type_weights(enemy_types: Sequence[EnemyType]) -> List[int]:
    """Earlier-listed enemy types are more common on a route."""
    return [max(1, 3 - index) for index in range(len(enemy_types))]


def roll_roster(
    route: RouteDefinition, length: RouteLength, rng: random.Random
) -> List[Tuple[EnemyType, ...]]:
    """Draw every regular wave of a route once, before combat starts."""
    base_size = 1 if route.id == "meadow_path" else 2
    weights = _type_weights(route.enemy_types)
    waves = []
    for wave in range(route.waves_for(length)):
        size = rng.randint(1, min(MAX_WAVE_SIZE, base_size + wave // 3))
        waves.append(tuple(rng.choices(route.enemy_types, weights=weights, k=size)))
    return waves
