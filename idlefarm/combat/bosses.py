"""Route bosses and their scripted quirks.

Every boss uses the same damage formula as regular enemies; the quirk
layers one extra rule on top:

========================  ================================================
giant_slime               splits into two slimes at half HP
beetle_lord               hardened shell: fight lasts twice as long
                          without a spear
alpha_wolf                summons two predatory beasts at half HP
sky_serpent               aerial phase: 20% max HP unavoidable damage
                          without a bow
crystal_spider            web trap: fight lasts 15% longer
frost_wyrm                frost armour: fight lasts 50% longer without a
                          wand
lava_titan                molten core: 10% max HP unavoidable damage
                          without Regeneration armour
========================  ================================================
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional, Sequence, Tuple

from idlefarm.enums import ArmorEffect, BossId, EnemyType, WeaponFamily

BOSS_WEAKNESS_MULTIPLIER = 1.5
BOSS_GOLD = 50
BOSS_XP = 20


@dataclass(frozen=True)
class BossStats:
    name: str
    hp: float
    damage: float
    attack_speed: float
    weakness: Optional[WeaponFamily]


@dataclass(frozen=True)
class BossQuirk:
    """Numbers a boss quirk contributes to the fight.

    Attributes:
        duration_multiplier: Scales how long the hero needs to kill the boss
        unavoidable_fraction: Share of hero max HP lost regardless of armour
        adds: Extra enemies spawned when the boss drops to half HP
    """

    duration_multiplier: float = 1.0
    unavoidable_fraction: float = 0.0
    adds: Tuple[EnemyType, ...] = ()


BOSS_STATS: Dict[BossId, BossStats] = {
    BossId.GIANT_SLIME: BossStats("Giant Slime", 150, 8, 0.5, None),
    BossId.BEETLE_LORD: BossStats("Beetle Lord", 200, 10, 0.4, WeaponFamily.SPEAR),
    BossId.ALPHA_WOLF: BossStats("Alpha Wolf", 250, 12, 0.8, WeaponFamily.SWORD),
    BossId.SKY_SERPENT: BossStats("Sky Serpent", 300, 10, 1.0, WeaponFamily.BOW),
    BossId.CRYSTAL_SPIDER: BossStats("Crystal Spider", 400, 12, 0.6, WeaponFamily.CROSSBOW),
    BossId.FROST_WYRM: BossStats("Frost Wyrm", 500, 15, 0.7, WeaponFamily.WAND),
    BossId.LAVA_TITAN: BossStats("Lava Titan", 600, 18, 0.5, WeaponFamily.WAND),
}


def boss_quirk(
    boss: BossId, carried: Sequence[WeaponFamily], armor_effect: ArmorEffect
) -> BossQuirk:
    if boss is BossId.GIANT_SLIME:
        return BossQuirk(adds=(EnemyType.SLIMES, EnemyType.SLIMES))
    if boss is BossId.BEETLE_LORD:
        return BossQuirk(duration_multiplier=1.0 if WeaponFamily.SPEAR in carried else 2.0)
    if boss is BossId.ALPHA_WOLF:
        return BossQuirk(adds=(EnemyType.PREDATORY_BEASTS, EnemyType.PREDATORY_BEASTS))
    if boss is BossId.SKY_SERPENT:
        return BossQuirk(unavoidable_fraction=0.0 if WeaponFamily.BOW in carried else 0.2)
    if boss is BossId.CRYSTAL_SPIDER:
        return BossQuirk(duration_multiplier=1.15)
    if boss is BossId.FROST_WYRM:
        return BossQuirk(duration_multiplier=1.0 if WeaponFamily.WAND in carried else 1.5)
    if boss is BossId.LAVA_TITAN:
        regenerating = armor_effect is ArmorEffect.REGENERATION
        return BossQuirk(unavoidable_fraction=0.0 if regenerating else 0.1)
    return BossQuirk()


def boss_multiplier(boss: BossId, weapon: Optional[WeaponFamily]) -> float:
    weakness = BOSS_STATS[boss].weakness
    if weapon is not None and weapon == weakness:
        return BOSS_WEAKNESS_MULTIPLIER
    return 1.0
