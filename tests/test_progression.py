"""Tests for derived progression values, the clock and the starting state."""

import pytest

from idlefarm.enums import GamePhase, ScreenId, WeaponFamily
from idlefarm.state import progression
from idlefarm.state.model import (
    Gnome,
    InventoryState,
    LocationState,
    SimulationClock,
)


class TestDerivedValues:
    @pytest.mark.parametrize(
        "plots,stage", [(3, 1), (19, 1), (20, 2), (40, 3), (65, 4), (89, 4), (90, 5)]
    )
    def test_farm_stage(self, plots: int, stage: int) -> None:
        assert progression.farm_stage_for(plots) == stage

    def test_phase(self) -> None:
        assert progression.phase_for(3, 1) is GamePhase.TUTORIAL
        assert progression.phase_for(25, 1) is GamePhase.EARLY
        assert progression.phase_for(45, 6) is GamePhase.MID
        assert progression.phase_for(70, 9) is GamePhase.LATE
        assert progression.phase_for(90, 12) is GamePhase.END

    def test_tower_level_is_highest_reach(self) -> None:
        assert progression.tower_level_for({"farm"}) == 0
        assert progression.tower_level_for({"tower_reach_1", "tower_reach_3", "forge"}) == 3

    def test_unlocked_screens(self) -> None:
        assert progression.unlocked_screens_for({"farm"}) == {
            ScreenId.FARM,
            ScreenId.TOWN,
            ScreenId.ADVENTURE,
        }
        screens = progression.unlocked_screens_for({"tower_reach_2", "forge", "mine_entrance"})
        assert {ScreenId.TOWER, ScreenId.FORGE, ScreenId.MINE} <= screens

    def test_storage_limits(self) -> None:
        assert progression.storage_limit_for("wood", []) == 50
        assert progression.storage_limit_for("wood", ["material_crate_i"]) == 100
        # Tiers count in purchase order; a later upgrade alone does not help
        assert progression.storage_limit_for("wood", ["material_crate_ii"]) == 50
        assert progression.storage_limit_for("molten_core", []) == 999_999
        assert progression.storage_limit_for("glitter", []) == 50

    def test_housing_capacity(self) -> None:
        assert progression.housing_capacity_for([]) == 0
        assert progression.housing_capacity_for(["gnome_hut", "gnome_house"]) == 2

    def test_water_capacity(self) -> None:
        assert progression.water_capacity_for([], 20) == 20
        assert progression.water_capacity_for(["water_tank_ii"], 20) == 40

    def test_hero_max_hp(self) -> None:
        assert progression.hero_max_hp(1) == 120


class TestHeroExperience:
    def test_level_up_carries_remainder(self, state) -> None:
        gained = state.progression.add_experience(250)
        assert gained == 1
        assert state.progression.hero_level == 2
        assert state.progression.experience == 150

    def test_multiple_levels(self, state) -> None:
        assert state.progression.add_experience(300) == 2
        assert state.progression.hero_level == 3
        assert state.progression.experience == 0

    def test_non_positive_xp_is_ignored(self, state) -> None:
        assert state.progression.add_experience(0) == 0
        assert state.progression.experience == 0


class TestClock:
    def test_advance_rolls_hours_and_days(self) -> None:
        clock = SimulationClock()
        clock.advance(1500)
        assert (clock.day, clock.hour, clock.minute) == (2, 9, 0)
        assert clock.total_minutes == 1980

    def test_cannot_run_backwards(self) -> None:
        with pytest.raises(ValueError):
            SimulationClock().advance(-1)

    def test_weekend(self) -> None:
        assert not SimulationClock(day=5).is_weekend
        assert SimulationClock(day=6).is_weekend
        assert SimulationClock(day=7).is_weekend
        assert not SimulationClock(day=8).is_weekend


def test_initial_state(state) -> None:
    assert state.clock.total_minutes == 480
    assert state.resources.gold == 75
    assert state.resources.energy.current == 3
    assert state.resources.water.maximum == 20
    assert state.resources.seeds == {"carrot": 1, "radish": 1}
    assert state.resources.materials["stone"] == 5
    assert state.resources.materials["wood"] == 0
    assert state.progression.built_structures == {"farm"}
    assert state.location.current_screen is ScreenId.FARM
    assert state.empty_plots == 3
    assert state.tracking.last_progress_gold == 75


def test_snapshot_is_independent(state) -> None:
    snapshot = state.snapshot()
    state.resources.seeds["carrot"] = 10
    assert snapshot.resources.seeds["carrot"] == 1
    assert snapshot.resources.gold == 75


class TestInventory:
    def test_weapon_ownership_by_level(self) -> None:
        inventory = InventoryState(weapons={WeaponFamily.SPEAR: 3})
        assert inventory.owns("spear_1")
        assert inventory.owns("spear_3")
        assert not inventory.owns("spear_4")
        assert not inventory.owns("sword_1")

    def test_tools_and_unknown_items(self) -> None:
        inventory = InventoryState(tools={"hoe": True})
        assert inventory.owns("hoe")
        assert not inventory.owns("axe")
        assert not inventory.owns("net_2")


def test_screen_history_is_bounded() -> None:
    location = LocationState()
    for _ in range(60):
        location.move_to(ScreenId.TOWN, "errand")
    assert len(location.screen_history) == 50
    assert location.last_navigation_reason == "errand"


def test_gnome_efficiency() -> None:
    assert Gnome("gnome_pip", "Pip").efficiency == 1.0
    assert Gnome("gnome_pip", "Pip", level=3).efficiency == pytest.approx(1.4)
