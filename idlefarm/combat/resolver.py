"""Deterministic wave-by-wave adventure combat.

``CombatResolver.resolve`` is referentially transparent: every random draw
comes from a private ``random.Random(seed)``, so the same route, loadout,
hero level and seed always produce an equal ``AdventureOutcome`` (including
the log). Nothing here touches the game state; the adventure process
applies the outcome.

Combat model
------------
The hero fights the enemies of a wave one at a time. Killing an enemy takes
``hp / (weapon damage x type multiplier x attack speed)`` seconds and every
enemy still standing attacks throughout that window. Each enemy attack deals
``base x (1 - min(defense, 80) / 100)``, rounded up, then armour effects
apply. The adventure fails the instant hero HP reaches zero.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

from idlefarm.combat import armor as armor_rules
from idlefarm.combat.bosses import BOSS_GOLD, BOSS_STATS, BOSS_XP, boss_multiplier, boss_quirk
from idlefarm.combat.roster import (
    ENEMY_STATS,
    WEAPON_STATS,
    choose_weapon,
    equipped_pair,
    roll_roster,
    type_multiplier,
    weapon_damage,
)
from idlefarm.combat.types import AdventureOutcome, ArmorDrop, ArmorLoadout, RouteDefinition
from idlefarm.enums import BossId, EnemyType, RouteLength, WeaponFamily
from idlefarm.exceptions import CombatError
from idlefarm.state.model import ArmorPiece
from idlefarm.state.progression import hero_max_hp

logger = logging.getLogger(__name__)

ENEMY_GOLD_RANGE = (2, 6)
ENEMY_XP = 2
ROUTE_XP_PER_WAVE = 5
LOOT_CHANCE = 0.70
UNARMED_DAMAGE = 2.0


@dataclass
class _Foe:
    name: str
    hp: float
    damage: float
    attack_speed: float
    enemy_type: Optional[EnemyType] = None
    is_boss: bool = False


class CombatResolver:
    """Pure combat simulation. Holds no state between calls."""

    def resolve(
        self,
        route: RouteDefinition,
        weapons: Mapping[WeaponFamily, int],
        armor: ArmorLoadout,
        hero_level: int,
        seed: int,
        length: RouteLength = RouteLength.SHORT,
    ) -> AdventureOutcome:
        """Simulate one adventure.

        Args:
            route: Parsed route definition
            weapons: Owned weapon families and their levels
            armor: Equipped armour (defense and effect)
            hero_level: Hero level (sets max HP)
            seed: Seed for the roster roll and every combat draw
            length: Which route variant to run

        Returns:
            AdventureOutcome with success flag, rewards and the combat log

        Raises:
            CombatError: For routes without the requested length
        """
        if hero_level < 1:
            raise CombatError(f"Invalid hero level {hero_level}")

        rng = random.Random(seed)
        carried = equipped_pair(weapons)
        roster = roll_roster(route, length, rng)
        run = _Run(
            rng=rng,
            carried=carried,
            weapons=weapons,
            armor=armor,
            max_hp=hero_max_hp(hero_level),
        )
        run.log.append(
            f"{route.id} ({length.value}): {len(roster)} waves, "
            f"HP {run.hp:g}, weapons {[w.value for w in carried] or ['none']}"
        )

        waves_cleared = 0
        alive = True
        for index, wave in enumerate(roster, start=1):
            foes = [self._enemy(enemy) for enemy in wave]
            run.log.append(f"Wave {index}: {', '.join(f.name for f in foes)}")
            alive = run.fight(foes)
            if not alive:
                break
            waves_cleared += 1
            regen = armor_rules.wave_regeneration(armor)
            if regen:
                run.heal(regen)
        if alive:
            alive = self._fight_boss(route, run)

        if not alive:
            run.log.append(f"Defeated after {waves_cleared} waves")
            logger.debug(f"{route.id} ({length.value}) lost after {waves_cleared} waves, seed={seed}")
            return AdventureOutcome(
                route_id=route.id,
                length=length,
                success=False,
                final_hp=0,
                total_gold=int(run.gold * armor_rules.gold_multiplier(armor)),
                total_xp=run.xp,
                log=tuple(run.log),
                waves_cleared=waves_cleared,
            )

        run.gold += route.gold_rewards.get(length, 0)
        run.xp += ROUTE_XP_PER_WAVE * len(roster)
        loot = self._roll_loot(route, rng)
        drop = self._roll_armor_drop(route, length, rng)
        run.log.append(f"Victory with {run.hp:g} HP")
        logger.debug(f"{route.id} ({length.value}) won with {run.hp:g} HP, seed={seed}")
        return AdventureOutcome(
            route_id=route.id,
            length=length,
            success=True,
            final_hp=run.hp,
            total_gold=int(run.gold * armor_rules.gold_multiplier(armor)),
            total_xp=run.xp,
            loot=loot,
            log=tuple(run.log),
            waves_cleared=waves_cleared,
            armor_drop=drop,
        )

    @staticmethod
    def _enemy(enemy: EnemyType) -> _Foe:
        stats = ENEMY_STATS[enemy]
        return _Foe(enemy.value, stats.hp, stats.damage, stats.attack_speed, enemy)

    def _fight_boss(self, route: RouteDefinition, run: "_Run") -> bool:
        """Fight the route boss in two halves; quirk adds join at half HP."""
        stats = BOSS_STATS[route.boss]
        quirk = boss_quirk(route.boss, run.carried, run.armor.effect)
        run.log.append(f"Boss: {stats.name}")

        if quirk.unavoidable_fraction and not run.take(
            run.max_hp * quirk.unavoidable_fraction, f"{stats.name} (quirk)"
        ):
            return False

        half = stats.hp / 2
        for phase in (1, 2):
            foes = [_Foe(stats.name, half, stats.damage, stats.attack_speed, is_boss=True)]
            if phase == 2 and quirk.adds:
                run.log.append(f"{stats.name} calls {len(quirk.adds)} {quirk.adds[0].value}")
                foes = [self._enemy(enemy) for enemy in quirk.adds] + foes
            if not run.fight(foes, boss_id=route.boss, duration_multiplier=quirk.duration_multiplier):
                return False

        run.gold += BOSS_GOLD
        run.xp += BOSS_XP
        run.log.append(f"{stats.name} defeated")
        return True

    @staticmethod
    def _roll_loot(route: RouteDefinition, rng: random.Random) -> Dict[str, int]:
        loot: Dict[str, int] = {}
        for entry in route.loot:
            if rng.random() < LOOT_CHANCE:
                qty = rng.randint(entry.minimum, entry.maximum)
                loot[entry.material] = loot.get(entry.material, 0) + qty
        if route.boss_material:
            loot[route.boss_material] = loot.get(route.boss_material, 0) + 1
        return loot

    @staticmethod
    def _roll_armor_drop(
        route: RouteDefinition, length: RouteLength, rng: random.Random
    ) -> Optional[ArmorDrop]:
        if rng.random() >= armor_rules.ARMOR_DROP_CHANCE:
            return None
        effect = rng.choice(armor_rules.DROPPABLE_EFFECTS)
        defense = 5 + 5 * route.min_level + 5 * list(RouteLength).index(length)
        return ArmorDrop(f"{route.id}_{effect.value}_armor", float(defense), effect)


class _Run:
    """Mutable bookkeeping for one resolve() call."""

    def __init__(
        self,
        rng: random.Random,
        carried: Tuple[WeaponFamily, ...],
        weapons: Mapping[WeaponFamily, int],
        armor: ArmorLoadout,
        max_hp: float,
    ) -> None:
        self.rng = rng
        self.carried = carried
        self.weapons = weapons
        self.armor = armor
        self.max_hp = max_hp
        self.hp = max_hp
        self.gold = 0
        self.xp = 0
        self.log: List[str] = []

    def heal(self, amount: float) -> None:
        self.hp = min(self.max_hp, self.hp + amount)

    def take(self, damage: float, source: str) -> bool:
        """Apply damage; returns False once the hero is down."""
        self.hp = max(0.0, self.hp - damage)
        if self.hp <= 0:
            self.log.append(f"Hero falls to {source}")
            return False
        return True

    def _dps(self, foe: _Foe, boss_id: Optional[BossId]) -> Tuple[float, Optional[WeaponFamily]]:
        weapon = choose_weapon(self.carried, foe.enemy_type)
        if weapon is None:
            return UNARMED_DAMAGE, None
        if foe.is_boss:
            multiplier = boss_multiplier(boss_id, weapon)
        else:
            multiplier = type_multiplier(weapon, foe.enemy_type)
        damage = weapon_damage(weapon, self.weapons.get(weapon, 1)) * multiplier
        return damage * WEAPON_STATS[weapon].attack_speed, weapon

    def fight(
        self,
        foes: Sequence[_Foe],
        boss_id: Optional[BossId] = None,
        duration_multiplier: float = 1.0,
    ) -> bool:
        """Kill ``foes`` in order while every survivor keeps attacking.

        Returns False the moment hero HP reaches zero.
        """
        for index, target in enumerate(foes):
            dps, weapon = self._dps(target, boss_id)
            seconds = target.hp / dps
            if target.is_boss:
                seconds *= duration_multiplier
            for attacker in foes[index:]:
                attacks = int(attacker.attack_speed * seconds + 0.5)
                for _ in range(attacks):
                    hit = armor_rules.incoming_hit(attacker.damage, self.armor, self.rng)
                    if not self.take(hit, attacker.name):
                        return False
            weapon_name = weapon.value if weapon else "fists"
            self.log.append(f"  {target.name} down in {seconds:.1f}s ({weapon_name}), HP {self.hp:g}")
            if not target.is_boss:
                self.gold += self.rng.randint(*ENEMY_GOLD_RANGE)
                self.xp += ENEMY_XP
            heal = armor_rules.kill_heal(self.armor)
            if heal:
                self.heal(heal)
        return True


def loadout_from_inventory(armor_piece: Optional[ArmorPiece]) -> ArmorLoadout:
    """ArmorLoadout for an equipped ``ArmorPiece`` (or none)."""
    if armor_piece is None:
        return ArmorLoadout()
    return ArmorLoadout(defense=armor_piece.defense, effect=armor_piece.effect)
