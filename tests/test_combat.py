"""Tests for deterministic adventure combat."""

import random

import pytest

from idlefarm.combat import CombatResolver, RouteDefinition, loadout_from_inventory
from idlefarm.combat.armor import incoming_hit, mitigate
from idlefarm.combat.bosses import boss_multiplier, boss_quirk
from idlefarm.combat.roster import choose_weapon, equipped_pair, roll_roster, type_multiplier
from idlefarm.combat.types import ArmorLoadout, LootEntry, parse_loot_table
from idlefarm.data.defaults import create_default_provider
from idlefarm.enums import (
    ArmorEffect,
    BossId,
    EnemyType,
    RouteLength,
    WeaponFamily,
)
from idlefarm.exceptions import CombatError, DataError
from idlefarm.state.model import ArmorPiece


@pytest.fixture
def routes():
    provider = create_default_provider()
    return {row["id"]: RouteDefinition.from_row(row) for row in provider.get_by_category("route")}


class TestTypeAdvantages:
    def test_pentagon(self) -> None:
        assert type_multiplier(WeaponFamily.SPEAR, EnemyType.ARMORED_INSECTS) == 1.5
        assert type_multiplier(WeaponFamily.SPEAR, EnemyType.LIVING_PLANTS) == 0.5
        assert type_multiplier(WeaponFamily.SPEAR, EnemyType.SLIMES) == 1.0
        assert type_multiplier(WeaponFamily.BOW, None) == 1.0

    def test_equipped_pair_prefers_highest_level(self) -> None:
        weapons = {WeaponFamily.SPEAR: 2, WeaponFamily.SWORD: 3, WeaponFamily.BOW: 2}
        assert equipped_pair(weapons) == (WeaponFamily.SWORD, WeaponFamily.SPEAR)
        assert equipped_pair({}) == ()

    def test_choose_weapon(self) -> None:
        carried = (WeaponFamily.SPEAR, WeaponFamily.BOW)
        assert choose_weapon(carried, EnemyType.FLYING_PREDATORS) is WeaponFamily.BOW
        assert choose_weapon(carried, EnemyType.ARMORED_INSECTS) is WeaponFamily.SPEAR
        # Neutral beats resisted
        assert choose_weapon(carried, EnemyType.LIVING_PLANTS) is WeaponFamily.BOW
        # Ties keep the first carried weapon
        assert choose_weapon(carried, EnemyType.SLIMES) is WeaponFamily.SPEAR
        assert choose_weapon((), EnemyType.SLIMES) is None


class TestArmor:
    def test_mitigation_caps_defense(self) -> None:
        assert mitigate(10, 0) == 10
        assert mitigate(10, 50) == pytest.approx(5.0)
        assert mitigate(10, 100) == pytest.approx(2.0)

    def test_incoming_hit_rounds_up(self) -> None:
        assert incoming_hit(3, ArmorLoadout(defense=50), random.Random(1)) == 2

    def test_evasion_can_dodge(self) -> None:
        class _LowRoll:
            def random(self) -> float:
                return 0.0

        evasive = ArmorLoadout(defense=0, effect=ArmorEffect.EVASION)
        assert incoming_hit(10, evasive, _LowRoll()) == 0

    def test_loadout_from_inventory(self) -> None:
        assert loadout_from_inventory(None) == ArmorLoadout()
        piece = ArmorPiece("leather_vest", 10)
        assert loadout_from_inventory(piece) == ArmorLoadout(defense=10)


class TestBosses:
    def test_weakness(self) -> None:
        assert boss_multiplier(BossId.BEETLE_LORD, WeaponFamily.SPEAR) == 1.5
        assert boss_multiplier(BossId.BEETLE_LORD, WeaponFamily.SWORD) == 1.0
        assert boss_multiplier(BossId.GIANT_SLIME, None) == 1.0

    def test_quirks_depend_on_loadout(self) -> None:
        no_spear = boss_quirk(BossId.BEETLE_LORD, (WeaponFamily.SWORD,), ArmorEffect.NONE)
        with_spear = boss_quirk(BossId.BEETLE_LORD, (WeaponFamily.SPEAR,), ArmorEffect.NONE)
        assert no_spear.duration_multiplier == 2.0
        assert with_spear.duration_multiplier == 1.0

        titan = boss_quirk(BossId.LAVA_TITAN, (), ArmorEffect.REGENERATION)
        assert titan.unavoidable_fraction == 0.0
        assert boss_quirk(BossId.LAVA_TITAN, (), ArmorEffect.NONE).unavoidable_fraction == 0.1
        assert len(boss_quirk(BossId.GIANT_SLIME, (), ArmorEffect.NONE).adds) == 2


class TestRouteDefinition:
    def test_parse_loot(self) -> None:
        assert parse_loot_table("Wood x5-10;Copper x2") == (
            LootEntry("wood", 5, 10),
            LootEntry("copper", 2, 2),
        )
        with pytest.raises(DataError):
            parse_loot_table("Wood lots")

    def test_from_row(self, routes) -> None:
        meadow = routes["meadow_path"]
        assert meadow.boss is BossId.GIANT_SLIME
        assert meadow.enemy_types == (EnemyType.SLIMES,)
        assert meadow.waves_for(RouteLength.SHORT) == 3
        assert meadow.energy_cost(RouteLength.LONG) == 35
        assert meadow.boss_material == "enchanted_wood"
        assert routes["pine_vale"].prerequisites == ("meadow_path",)

    def test_missing_length_raises(self) -> None:
        route = RouteDefinition(
            id="stub",
            boss=BossId.GIANT_SLIME,
            enemy_types=(EnemyType.SLIMES,),
            wave_counts={RouteLength.SHORT: 1},
            energy_costs={},
            gold_rewards={},
            durations={},
        )
        with pytest.raises(CombatError):
            route.waves_for(RouteLength.LONG)

    def test_roster_sizes(self, routes) -> None:
        roster = roll_roster(routes["dark_forest"], RouteLength.LONG, random.Random(3))
        assert len(roster) == 12
        assert all(1 <= len(wave) <= 5 for wave in roster)


class TestCombatResolver:
    def test_same_seed_same_outcome(self, routes) -> None:
        resolver = CombatResolver()
        args = (routes["pine_vale"], {WeaponFamily.SPEAR: 2}, ArmorLoadout(defense=10), 4)
        first = resolver.resolve(*args, seed=1234, length=RouteLength.MEDIUM)
        second = resolver.resolve(*args, seed=1234, length=RouteLength.MEDIUM)
        assert first == second
        assert first.log

    def test_strong_hero_clears_meadow(self, routes) -> None:
        outcome = CombatResolver().resolve(
            routes["meadow_path"], {WeaponFamily.SPEAR: 4}, ArmorLoadout(), 20, seed=7
        )
        assert outcome.success
        assert outcome.final_hp > 0
        assert outcome.waves_cleared == 3
        assert outcome.loot["enchanted_wood"] == 1
        assert outcome.total_gold >= 20 + 50
        assert outcome.log[-1].startswith("Victory")

    def test_unarmed_novice_fails_volcano(self, routes) -> None:
        outcome = CombatResolver().resolve(
            routes["volcano_core"], {}, ArmorLoadout(), 1, seed=7, length=RouteLength.LONG
        )
        assert not outcome.success
        assert outcome.final_hp == 0
        assert outcome.loot == {}
        assert outcome.armor_drop is None

    def test_invalid_level(self, routes) -> None:
        with pytest.raises(CombatError):
            CombatResolver().resolve(routes["meadow_path"], {}, ArmorLoadout(), 0, seed=1)
