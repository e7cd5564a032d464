"""Tests for the per-tick systems: clock, helpers and automation."""

import random

import pytest

from idlefarm.enums import HelperRole, ProcessKind
from idlefarm.processes import CropSpec, TrainingSpec
from idlefarm.state.model import Gnome
from idlefarm.systems import AutomationSystem, ClockSystem, HelperSystem, SystemResult, TickPhase
from idlefarm.systems.automation import best_rate


@pytest.fixture
def helper_system(store, process_manager, data_provider, params, event_bus):
    return HelperSystem(store, process_manager, data_provider, params, random.Random(3), event_bus)


@pytest.fixture
def automation(store, data_provider):
    return AutomationSystem(store, data_provider, random.Random(3))


def _hire(state, role: HelperRole, gnome_id: str = "gnome_pip", level: int = 1) -> Gnome:
    gnome = Gnome(gnome_id, gnome_id.split("_")[-1].title(), role, level=level, assigned=True)
    state.helpers.gnomes[gnome_id] = gnome
    return gnome


class TestSystemResult:
    def test_addition_sums_counters(self) -> None:
        total = SystemResult(affected=1, details={"water_pumped": 2}) + SystemResult(
            affected=2, events_emitted=1, details={"water_pumped": 3, "seeds_caught": 1}
        )
        assert total.affected == 3
        assert total.events_emitted == 1
        assert total.details == {"water_pumped": 5, "seeds_caught": 1}

    def test_skipped_results_are_ignored(self) -> None:
        result = SystemResult(affected=4)
        assert result + SystemResult.skipped_result() is result
        assert SystemResult.skipped_result() + result is result


class TestClockSystem:
    def test_advances_time_and_screen_time(self, store, state) -> None:
        clock = ClockSystem(store)
        result = clock.update(5)
        assert state.clock.total_minutes == 485
        assert state.location.time_on_screen == 5
        assert result.details == {"minutes": 5, "new_day": False}

    def test_new_day(self, store, state) -> None:
        result = ClockSystem(store).update(16 * 60)
        assert state.clock.day == 2
        assert result.details["new_day"]

    def test_phase_and_debug_info(self, store) -> None:
        clock = ClockSystem(store)
        assert clock.phase is TickPhase.CLOCK
        info = clock.get_debug_info()
        assert info["time"] == "08:00"
        assert info["phase"] == "CLOCK"

    def test_disabled_system_is_skipped(self, store, state) -> None:
        clock = ClockSystem(store)
        clock.enabled = False
        assert clock.update(5).skipped
        assert clock.update_count == 0
        assert state.clock.total_minutes == 480


class TestHelperSystem:
    def test_no_gnomes(self, helper_system) -> None:
        assert helper_system.update(1) == SystemResult.empty()

    def test_pump_operator_fills_the_tank(self, helper_system, state) -> None:
        _hire(state, HelperRole.PUMP_OPERATOR)
        result = helper_system.update(3)
        assert state.resources.water.current == 1
        assert result.details == {"pump_operator": 1}
        assert result.affected == 1

    def test_fractions_carry_over(self, helper_system, state) -> None:
        _hire(state, HelperRole.PUMP_OPERATOR)
        helper_system.update(1.5)
        assert state.resources.water.current == 0
        assert state.automation.helper_accumulators["gnome_pip"] == pytest.approx(0.5)
        helper_system.update(1.5)
        assert state.resources.water.current == 1

    def test_waterer_rewaters_dry_crops(self, helper_system, process_manager, state) -> None:
        process_manager.start(ProcessKind.CROP_GROWTH, CropSpec("plot_1", "radish", 0.2)).unwrap()
        state.resources.water.current = 10
        gnome = _hire(state, HelperRole.WATERER)

        helper_system.update(1)

        assert state.processes.crops["plot_1"].water_level == 1.0
        assert state.resources.water.current == 9
        assert gnome.current_task == "watered 1 plots"

    def test_waterer_waits_for_water(self, helper_system, process_manager, state) -> None:
        process_manager.start(ProcessKind.CROP_GROWTH, CropSpec("plot_1", "radish", 0.2)).unwrap()
        gnome = _hire(state, HelperRole.WATERER)
        assert helper_system.update(1).details == {"waterer": 0}
        assert gnome.current_task == "waiting for water"

    def test_watering_can_be_disabled(self, store, process_manager, data_provider, params, state) -> None:
        params = params.model_copy(deep=True)
        params.automation.watering_enabled = False
        system = HelperSystem(store, process_manager, data_provider, params)
        gnome = _hire(state, HelperRole.WATERER)
        system.update(1)
        assert gnome.current_task == "watering disabled"

    def test_sower_plants_the_most_plentiful_seed(self, helper_system, state) -> None:
        _hire(state, HelperRole.SOWER)
        state.resources.seeds["radish"] = 2

        result = helper_system.update(1)

        crops = state.processes.crops
        assert result.details == {"sower": 3}
        assert crops["plot_1"].crop_id == "radish"
        assert {crops["plot_2"].crop_id, crops["plot_3"].crop_id} == {"radish", "carrot"}
        assert state.resources.total_seeds == 0

    def test_harvester(self, helper_system, process_manager, state) -> None:
        process_manager.start(ProcessKind.CROP_GROWTH, CropSpec("plot_1", "carrot")).unwrap()
        state.processes.crops["plot_1"].ready_to_harvest = True
        _hire(state, HelperRole.HARVESTER)

        helper_system.update(1)

        assert state.processes.crops == {}
        assert state.resources.energy.current == 5
        assert state.progression.experience == 2

    def test_harvest_level_up_is_counted(
        self, helper_system, process_manager, state, game_events
    ) -> None:
        process_manager.start(ProcessKind.CROP_GROWTH, CropSpec("plot_1", "carrot")).unwrap()
        state.processes.crops["plot_1"].ready_to_harvest = True
        state.progression.experience = 99
        _hire(state, HelperRole.HARVESTER)

        result = helper_system.update(1)

        assert state.progression.hero_level == 2
        assert result.events_emitted == 1
        assert [e.type for e in game_events] == ["level_up"]
        assert helper_system.update(1).events_emitted == 0

    def test_harvester_stops_when_energy_is_full(self, helper_system, process_manager, state) -> None:
        process_manager.start(ProcessKind.CROP_GROWTH, CropSpec("plot_1", "carrot")).unwrap()
        state.processes.crops["plot_1"].ready_to_harvest = True
        state.resources.energy.current = 99
        gnome = _hire(state, HelperRole.HARVESTER)

        helper_system.update(1)

        assert "plot_1" in state.processes.crops
        assert gnome.current_task == "energy full"

    def test_forager_needs_cleared_stumps(self, helper_system, state) -> None:
        gnome = _hire(state, HelperRole.FORAGER)
        helper_system.update(60)
        assert gnome.current_task == "nothing to forage"

        state.progression.completed_cleanups.add("clear_stumps_1")
        helper_system.update(60)
        assert state.resources.materials["wood"] == 5

    def test_trainees_and_unassigned_gnomes_rest(self, helper_system, process_manager, state) -> None:
        _hire(state, HelperRole.PUMP_OPERATOR)
        state.helpers.gnomes["gnome_bo"] = Gnome("gnome_bo", "Bo")
        process_manager.start(ProcessKind.HELPER_TRAINING, TrainingSpec("gnome_pip")).unwrap()

        result = helper_system.update(60)

        assert result.affected == 0
        assert state.resources.water.current == 0


class TestAutomationSystem:
    def test_best_rate(self) -> None:
        rates = {"auto_pump_i": 0.1, "auto_pump_ii": 0.2}
        assert best_rate(["auto_pump_i", "auto_pump_ii"], rates) == 0.2
        assert best_rate([], rates) == 0.0

    def test_nothing_owned(self, automation) -> None:
        result = automation.update(60)
        assert result.details == {"water_pumped": 0, "seeds_caught": 0}
        assert result.affected == 0

    def test_auto_pump(self, automation, state) -> None:
        state.progression.unlocked_upgrades.append("auto_pump_i")
        state.resources.water.maximum = 60

        result = automation.update(10)

        assert result.details["water_pumped"] == 1
        assert state.resources.water.current == 1

    def test_full_tank_wastes_output(self, automation, state) -> None:
        state.progression.unlocked_upgrades.append("auto_pump_i")
        state.automation.pump_accumulator = 0.9
        state.resources.water.current = state.resources.water.maximum

        assert automation.update(10).details["water_pumped"] == 0
        assert state.automation.pump_accumulator == 0.0

    def test_auto_catcher_needs_a_tower(self, automation, state) -> None:
        state.progression.unlocked_upgrades.append("auto_catcher_tier_iii")
        assert automation.update(2).details["seeds_caught"] == 0

        state.progression.built_structures.add("tower_reach_1")
        assert automation.update(2).details["seeds_caught"] == 1
        assert state.resources.total_seeds == 3
