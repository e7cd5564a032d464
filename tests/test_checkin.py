"""Tests for check-in timing."""

import pytest

from idlefarm.config.parameters import PERSONA_PRESETS
from idlefarm.decision.checkin import emergency_interval, evaluate_check_in, should_check_in
from idlefarm.state.model import SimulationClock


def _clock(hour: int, day: int = 1) -> SimulationClock:
    return SimulationClock(day=day, hour=hour, total_minutes=(day - 1) * 1440 + hour * 60)


@pytest.fixture
def calm_state(state):
    """Plenty of seeds, a full tank, low energy and nothing ready."""
    state.resources.seeds["carrot"] = 5
    state.resources.water.current = state.resources.water.maximum
    return state


class TestCheckInRules:
    def test_first_check_in_is_immediate(self, state, params) -> None:
        decision = evaluate_check_in(state.clock, None, state, PERSONA_PRESETS["casual"], params)
        assert decision.allowed
        assert decision.reason == "first check-in"

    def test_early_game_plays_without_gaps(self, state, params) -> None:
        decision = evaluate_check_in(state.clock, 479, state, PERSONA_PRESETS["casual"], params)
        assert decision.reason == "early game"

    def test_night_blocks_check_ins(self, calm_state, params) -> None:
        now = _clock(23)
        decision = evaluate_check_in(now, now.total_minutes - 300, calm_state, PERSONA_PRESETS["casual"], params)
        assert not decision.allowed
        assert decision.reason == "night"

    def test_seed_crisis_overrides_night(self, state, params) -> None:
        now = _clock(2, day=2)
        decision = evaluate_check_in(now, now.total_minutes - 3, state, PERSONA_PRESETS["casual"], params)
        assert decision.allowed
        assert decision.reason == "emergency"

    def test_casual_reacts_slower_to_emergencies(self, state, params) -> None:
        now = _clock(12)
        casual = PERSONA_PRESETS["casual"]
        speedrunner = PERSONA_PRESETS["speedrunner"]

        waiting = evaluate_check_in(now, now.total_minutes - 2, state, casual, params)
        assert not waiting.allowed
        assert waiting.interval == pytest.approx(3.0)

        assert evaluate_check_in(now, now.total_minutes - 2, state, speedrunner, params).allowed

    def test_idle_too_long(self, calm_state, params) -> None:
        now = _clock(12)
        decision = evaluate_check_in(now, now.total_minutes - 46, calm_state, PERSONA_PRESETS["casual"], params)
        assert decision.reason == "idle too long"

    def test_interval_elapsed_and_waiting(self, calm_state, params) -> None:
        now = _clock(12)
        casual = PERSONA_PRESETS["casual"]
        assert evaluate_check_in(now, now.total_minutes - 10, calm_state, casual, params).reason == "interval elapsed"
        waiting = evaluate_check_in(now, now.total_minutes - 9, calm_state, casual, params)
        assert waiting.reason == "waiting"
        assert waiting.interval == 10

    def test_weekend_warrior_waits_longer(self, calm_state, params) -> None:
        now = _clock(12)
        persona = PERSONA_PRESETS["weekend_warrior"]
        assert not should_check_in(now, now.total_minutes - 14, calm_state, persona, params)
        assert should_check_in(now, now.total_minutes - 15, calm_state, persona, params)


class TestEmergencyInterval:
    def test_seed_crisis_comes_first(self, state, params) -> None:
        assert emergency_interval(state, params) == 2

    def test_water_crisis(self, state, params) -> None:
        state.resources.seeds["carrot"] = 5
        assert emergency_interval(state, params) == 5

    def test_high_energy(self, calm_state, params) -> None:
        calm_state.resources.energy.current = 90
        assert emergency_interval(calm_state, params) == 10

    def test_no_emergency(self, calm_state, params) -> None:
        assert emergency_interval(calm_state, params) == float("inf")
