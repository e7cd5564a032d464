"""End-to-end tests for the simulation engine."""

import pytest

from idlefarm.config import balance
from idlefarm.config.parameters import compile_config
from idlefarm.enums import ActionKind, Importance, ScreenId, WeaponFamily
from idlefarm.events.domain_events import TickFaultEvent
from idlefarm.simulation.engine import create_engine
from idlefarm.simulation.pipeline import (
    PipelineStep,
    TickPipeline,
    _step_clock,
    _step_progression,
    _step_terminal,
)


def _pipeline(*steps: PipelineStep) -> TickPipeline:
    return TickPipeline([PipelineStep("clock", _step_clock), *steps])


class TestEarlyGame:
    def test_first_tick_heads_to_town(self, engine) -> None:
        result = engine.tick()
        assert result.executed_actions[0].kind is ActionKind.MOVE
        assert engine.state.location.current_screen is ScreenId.TOWN
        assert engine.state.tracking.last_checkin_minute == 481

    def test_tower_gets_built(self, engine) -> None:
        """Buying and building the tower is the way out of the opening seed crisis."""
        for _ in range(600):
            engine.tick()
            if "tower_reach_1" in engine.state.progression.built_structures:
                break
        assert "tower_reach_1" in engine.state.progression.built_structures
        assert ScreenId.TOWER in engine.state.progression.unlocked_screens
        assert engine.fault_count == 0

    def test_snapshot_is_detached(self, engine) -> None:
        result = engine.tick()
        result.state_snapshot.resources.gold = 0
        result.state_snapshot.progression.built_structures.add("forge")
        assert engine.state.resources.gold == 75
        assert "forge" not in engine.state.progression.built_structures


def test_invariants_hold_over_a_long_run(engine) -> None:
    last_minute = engine.state.clock.total_minutes
    last_progress = (1, 1, 3)
    for _ in range(300):
        result = engine.tick()
        state = engine.state
        resources = state.resources
        progression = state.progression
        progress = (progression.farm_stage, progression.hero_level, progression.farm_plots)
        assert all(now >= before for now, before in zip(progress, last_progress))
        last_progress = progress
        for structure in progression.built_structures - {"farm"}:
            assert state.inventory.blueprints[f"blueprint_{structure}"].purchased
        assert 0 <= resources.energy.current <= resources.energy.maximum
        assert 0 <= resources.water.current <= resources.water.maximum
        assert resources.gold >= 0
        assert all(qty >= 0 for qty in resources.seeds.values())
        for material in balance.BASIC_MATERIALS:
            assert resources.materials.get(material, 0) <= state.progression.storage_limit(material)
        assert state.clock.total_minutes == last_minute + result.delta_time
        last_minute = state.clock.total_minutes
    assert engine.fault_count == 0


class TestTerminalConditions:
    def test_stuck_after_a_day_without_progress(self) -> None:
        config = compile_config("casual", {"victory.stuck_days": 1}, seed=1)
        pipeline = _pipeline(
            PipelineStep("progression", _step_progression),
            PipelineStep("terminal", _step_terminal),
        )
        engine = create_engine(config, pipeline=pipeline)

        summary = engine.run(2000)

        assert summary.stuck
        assert not summary.completed
        assert summary.ticks == 1440
        assert summary.days == 2

    def test_default_window_is_three_days(self) -> None:
        config = compile_config("casual", seed=1)
        assert config.parameters.victory.stuck_days == 3
        pipeline = _pipeline(
            PipelineStep("progression", _step_progression),
            PipelineStep("terminal", _step_terminal),
        )

        summary = create_engine(config, pipeline=pipeline).run(5000)

        assert summary.stuck
        assert summary.ticks == 3 * 1440
        assert summary.days == 4

    def test_keep_going_when_stuck(self) -> None:
        config = compile_config("casual", {"victory.stuck_days": 1}, seed=1)
        pipeline = _pipeline(PipelineStep("terminal", _step_terminal))
        summary = create_engine(config, pipeline=pipeline).run(1500, stop_on_stuck=False)
        assert summary.ticks == 1500
        assert summary.stuck

    def test_victory(self) -> None:
        config = compile_config("casual", {"victory.plots": 3}, seed=1)
        summary = create_engine(config).run(10)
        assert summary.completed
        assert summary.ticks == 1


class TestFaultBoundary:
    @pytest.fixture
    def faulty_engine(self, config):
        def explode(engine, ctx) -> None:
            engine.store.begin_transaction()
            engine.state.resources.gold += 1000
            raise RuntimeError("boom")

        return create_engine(config, pipeline=_pipeline(PipelineStep("explode", explode)))

    def test_tick_is_rolled_back(self, faulty_engine) -> None:
        faults: list = []
        faulty_engine.event_bus.subscribe(TickFaultEvent, faults.append)

        result = faulty_engine.tick()

        state = faulty_engine.state
        assert result.delta_time == 0.0
        assert result.executed_actions == ()
        assert state.resources.gold == 75
        assert state.clock.total_minutes == 480
        assert not faulty_engine.store.in_transaction
        assert faulty_engine.fault_count == 1
        assert faults[0].error_type == "RuntimeError"
        assert faults[0].message == "boom"

    def test_fault_is_reported_as_one_error_event(self, faulty_engine) -> None:
        (event,) = faulty_engine.tick().events
        assert event.type == "error"
        assert event.importance is Importance.HIGH
        assert event.data["error_type"] == "RuntimeError"

    def test_run_survives_faults(self, faulty_engine) -> None:
        summary = faulty_engine.run(3)
        assert summary.ticks == 3
        assert summary.faults == 3
        assert summary.event_counts == {"error": 3}


def test_storage_overflow_is_reported(config) -> None:
    def overfill(engine, ctx) -> None:
        engine.store.add_materials({"wood": 60})

    engine = create_engine(config, pipeline=_pipeline(PipelineStep("overfill", overfill)))
    (event,) = engine.tick().events
    assert event.type == "storage_limit"
    assert event.importance is Importance.LOW
    assert event.data == {"material": "wood", "discarded": 10}


def test_next_decision_leaves_the_run_untouched(engine) -> None:
    before = engine.state.snapshot()
    rng_state = engine._rng.getstate()

    explanation = engine.get_next_decision()

    assert explanation.best.kind is ActionKind.MOVE
    assert engine.state == before
    assert engine._rng.getstate() == rng_state


def test_equal_seeds_give_equal_runs() -> None:
    engine_a = create_engine(compile_config("speedrunner", seed=7))
    engine_b = create_engine(compile_config("speedrunner", seed=7))
    for _ in range(200):
        engine_a.tick()
        engine_b.tick()
    assert engine_a.state == engine_b.state
    assert engine_a.run_id != engine_b.run_id


def test_unaffordable_adventure_is_never_executed(engine) -> None:
    state = engine.state
    state.location.current_screen = ScreenId.ADVENTURE
    state.inventory.weapons[WeaponFamily.SPEAR] = 1
    state.resources.seeds["carrot"] = 20
    state.resources.energy.current = 2

    result = engine.tick()

    assert result.executed_actions
    assert all(a.kind is not ActionKind.ADVENTURE for a in result.executed_actions)
    assert engine.state.processes.adventure is None
    assert engine.state.progression.completed_adventures == set()
    assert engine.state.resources.energy.current == 2
