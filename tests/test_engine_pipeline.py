"""Tests for the tick pipeline and how the engine wires systems into it."""

import random

import pytest


def test_default_steps_follow_the_tick_order() -> None:
    from idlefarm.simulation.pipeline import default_pipeline

    assert default_pipeline().step_names == [
        "clock",
        "processes",
        "helpers",
        "automation",
        "decide",
        "execute",
        "progression",
        "terminal",
    ]


def test_tick_advances_clock(engine) -> None:
    start = engine.state.clock.total_minutes
    speed = engine.state.clock.speed

    result = engine.tick()

    assert engine.tick_count == 1
    assert result.delta_time == speed
    assert engine.state.clock.total_minutes == start + speed


def test_steps_share_one_context_in_order() -> None:
    """A pipeline hands the same TickContext to each step, first to last."""
    from idlefarm.simulation.pipeline import PipelineStep, TickPipeline

    seen: list = []

    def record(label: str):
        return lambda engine, ctx: seen.append((label, ctx))

    pipeline = TickPipeline(
        [
            PipelineStep("water", record("water")),
            PipelineStep("harvest", record("harvest")),
            PipelineStep("sell", record("sell")),
        ]
    )
    assert pipeline.step_names == ["water", "harvest", "sell"]

    ctx = pipeline.run(object(), 2.0)  # type: ignore[arg-type]

    assert [label for label, _ in seen] == ["water", "harvest", "sell"]
    assert all(c is ctx for _, c in seen)
    assert ctx.delta == 2.0


def test_engine_uses_custom_pipeline(config) -> None:
    """A clock-only pipeline moves time and nothing else."""
    from idlefarm.simulation.engine import create_engine
    from idlefarm.simulation.pipeline import PipelineStep, TickPipeline, _step_clock

    engine = create_engine(config, pipeline=TickPipeline([PipelineStep("clock", _step_clock)]))
    for _ in range(5):
        engine.tick()

    assert engine.pipeline.step_names == ["clock"]
    assert engine.state.clock.total_minutes == 480 + 5 * engine.state.clock.speed
    assert engine.state.tracking.actions_executed == 0
    assert engine.state.location.current_screen.value == "farm"
    assert engine.system_totals["Clock"].details["minutes"] == 5 * engine.state.clock.speed
    assert "Helpers" not in engine.system_totals


def test_systems_are_grouped_by_phase(engine) -> None:
    assert [s.name for s in engine.systems] == ["Clock", "Helpers", "Automation"]
    assert engine.get_debug_info()["pipeline"][0] == "clock"


def test_every_phase_is_described() -> None:
    from idlefarm.systems.phases import PHASE_DESCRIPTIONS, TickPhase

    assert set(PHASE_DESCRIPTIONS) == set(TickPhase)


def test_system_without_phase_is_rejected(
    store, process_manager, executor, data_provider, config, event_bus
) -> None:
    from idlefarm.decision.engine import DecisionEngine
    from idlefarm.simulation.engine import SimulationEngine
    from idlefarm.systems.base import BaseSystem

    class Unphased(BaseSystem):
        def _do_update(self, delta: float):
            return None

    with pytest.raises(ValueError, match="does not declare a tick phase"):
        SimulationEngine(
            store=store,
            process_manager=process_manager,
            decision_engine=DecisionEngine(config.persona, random.Random(1)),
            executor=executor,
            data=data_provider,
            config=config,
            event_bus=event_bus,
            rng=random.Random(1),
            systems=[Unphased("Unphased")],
        )
