"""Pluggable tick pipeline.

A ``TickPipeline`` is the ordered list of steps one ``SimulationEngine.tick``
runs. The default pipeline is the canonical order; tests and experiments
can build their own (drop helpers, run the decision step alone...) without
touching the engine.

Steps receive the engine AND a TickContext for explicit data flow.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, List

from idlefarm.simulation.tick_context import TickContext

if TYPE_CHECKING:
    from idlefarm.simulation.engine import SimulationEngine


@dataclass
class PipelineStep:
    """A single step in the tick pipeline.

    Attributes:
        name: Identifier for the step (e.g. "decide")
        fn: Function that executes this step, receiving engine and context
    """

    name: str
    fn: Callable[["SimulationEngine", TickContext], None]


class TickPipeline:
    """Ordered sequence of steps that make up one tick."""

    def __init__(self, steps: List[PipelineStep]) -> None:
        self._steps = steps

    @property
    def steps(self) -> List[PipelineStep]:
        return self._steps

    @property
    def step_names(self) -> List[str]:
        return [step.name for step in self._steps]

    def run(self, engine: "SimulationEngine", delta: float) -> TickContext:
        """Execute all steps in order.

        Creates a fresh TickContext and passes it through all steps.

        Returns:
            The context, filled in by the steps
        """
        ctx = TickContext(delta=delta)
        for step in self._steps:
            step.fn(engine, ctx)
        return ctx


# =============================================================================
# Default pipeline
# =============================================================================


def _step_clock(engine: "SimulationEngine", ctx: TickContext) -> None:
    """CLOCK: Remember where progression stood, then advance time."""
    progression = engine.state.progression
    ctx.stage_before = progression.farm_stage
    ctx.phase_before = progression.phase
    engine._phase_clock(ctx)


def _step_processes(engine: "SimulationEngine", ctx: TickContext) -> None:
    """PROCESSES: Advance every running process."""
    engine._phase_processes(ctx)


def _step_helpers(engine: "SimulationEngine", ctx: TickContext) -> None:
    """HELPERS: Assigned gnomes perform their roles."""
    engine._phase_helpers(ctx)


def _step_automation(engine: "SimulationEngine", ctx: TickContext) -> None:
    """AUTOMATION: Passive pump and auto-catcher."""
    engine._phase_automation(ctx)


def _step_decide(engine: "SimulationEngine", ctx: TickContext) -> None:
    """DECIDE: Rank actions if the persona checks in."""
    engine._phase_decide(ctx)


def _step_execute(engine: "SimulationEngine", ctx: TickContext) -> None:
    """EXECUTE: Apply ranked actions in order."""
    engine._phase_execute(ctx)


def _step_progression(engine: "SimulationEngine", ctx: TickContext) -> None:
    """PROGRESSION: Report stage/phase changes and record progress."""
    engine._phase_progression(ctx)


def _step_terminal(engine: "SimulationEngine", ctx: TickContext) -> None:
    """TERMINAL: Evaluate victory and stuck predicates."""
    engine._phase_terminal(ctx)


def default_pipeline() -> TickPipeline:
    """Build the canonical tick pipeline.

    Phase Order:
        1. clock: advance time
        2. processes: crops, crafting, mining, catching, adventures, training
        3. helpers: gnome roles
        4. automation: passive production
        5. decide: check-in predicate, then the decision engine
        6. execute: apply ranked actions
        7. progression: stage/phase change events, progress bookkeeping
        8. terminal: victory and stuck detection
    """
    return TickPipeline(
        [
            PipelineStep("clock", _step_clock),
            PipelineStep("processes", _step_processes),
            PipelineStep("helpers", _step_helpers),
            PipelineStep("automation", _step_automation),
            PipelineStep("decide", _step_decide),
            PipelineStep("execute", _step_execute),
            PipelineStep("progression", _step_progression),
            PipelineStep("terminal", _step_terminal),
        ]
    )
