"""Simulation engine - the slim orchestrator.

The engine is a COORDINATOR, not a DOER. It owns the collaborators (state
store, process manager, decision engine, executor, systems) and runs one
tick through the ``TickPipeline``; all game rules live in those
collaborators.

Fault boundary:
    Every tick runs inside a state-store transaction. An unexpected
    exception anywhere in the pipeline rolls the whole tick back, is logged
    with its traceback and comes back to the caller as a high-importance
    ``error`` event. ``tick()`` itself never raises.

Events:
    Collaborators publish ``GameEvent`` records on the shared event bus;
    the engine subscribes once and hands the tick's events back in the
    ``TickResult``.
"""

from __future__ import annotations

import logging
import random
import uuid
from collections import Counter
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple

from idlefarm.config import balance
from idlefarm.config.parameters import CompiledConfig, compile_config
from idlefarm.data.defaults import create_default_provider
from idlefarm.data.provider import StaticDataProvider
from idlefarm.decision.actions import GameAction
from idlefarm.decision.checkin import evaluate_check_in
from idlefarm.decision.engine import DecisionEngine, DecisionExplanation
from idlefarm.enums import Importance
from idlefarm.events.domain_events import GameEvent, StorageLimitHitEvent, TickFaultEvent
from idlefarm.events.event_bus import EventBus
from idlefarm.execution.executor import ActionExecutor
from idlefarm.processes.base import ProcessContext
from idlefarm.processes.manager import ProcessManager
from idlefarm.simulation import progress
from idlefarm.simulation.pipeline import TickPipeline, default_pipeline
from idlefarm.simulation.tick_context import TickContext
from idlefarm.state.model import GameState, create_initial_state
from idlefarm.state.store import StateStore
from idlefarm.systems.automation import AutomationSystem
from idlefarm.systems.base import BaseSystem, SystemResult
from idlefarm.systems.clock import ClockSystem
from idlefarm.systems.helpers import HelperSystem
from idlefarm.systems.phases import TickPhase

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TickResult:
    """What one tick did.

    Attributes:
        state_snapshot: Deep copy of the state after the tick
        executed_actions: Actions applied this tick, in order
        events: Events raised this tick, in order
        delta_time: In-game minutes the tick covered (0 for a faulted tick)
        is_complete: Victory reached
        is_stuck: No progress for too long
    """

    state_snapshot: GameState
    executed_actions: Tuple[GameAction, ...]
    events: Tuple[GameEvent, ...]
    delta_time: float
    is_complete: bool
    is_stuck: bool


@dataclass(frozen=True)
class RunSummary:
    """Outcome of ``SimulationEngine.run``."""

    run_id: str
    ticks: int
    final_state: GameState
    completed: bool
    stuck: bool
    faults: int
    actions_executed: int
    actions_failed: int
    event_counts: Dict[str, int] = field(default_factory=dict)

    @property
    def days(self) -> int:
        return self.final_state.clock.day


class SimulationEngine:
    """Headless, tick-driven idle-farm simulation.

    Architecture:
        SimulationEngine (coordinator)
        ├── StateStore (the GameState and its transactions)
        ├── ProcessManager (crops, crafting, mining, catching, adventures, training)
        ├── Systems (ClockSystem, HelperSystem, AutomationSystem)
        ├── DecisionEngine (what to do when the persona checks in)
        └── ActionExecutor (applies decided actions)
    """

    def __init__(
        self,
        store: StateStore,
        process_manager: ProcessManager,
        decision_engine: DecisionEngine,
        executor: ActionExecutor,
        data: StaticDataProvider,
        config: CompiledConfig,
        event_bus: EventBus,
        rng: random.Random,
        systems: Sequence[BaseSystem] = (),
        pipeline: Optional[TickPipeline] = None,
    ) -> None:
        self._store = store
        self._processes = process_manager
        self._decisions = decision_engine
        self._executor = executor
        self._data = data
        self.config = config
        self._event_bus = event_bus
        self._rng = rng
        self._pipeline = pipeline or default_pipeline()

        self._systems_by_phase: Dict[TickPhase, List[BaseSystem]] = {phase: [] for phase in TickPhase}
        for system in systems:
            if system.phase is None:
                raise ValueError(f"{system!r} does not declare a tick phase")
            self._systems_by_phase[system.phase].append(system)

        self.tick_count = 0
        self.fault_count = 0
        self.run_id = str(uuid.uuid4())
        self.system_totals: Dict[str, SystemResult] = {}
        self._tick_events: List[GameEvent] = []
        event_bus.subscribe(GameEvent, self._tick_events.append)
        event_bus.subscribe(StorageLimitHitEvent, self._on_storage_limit)
        logger.info(f"SimulationEngine initialized with run_id={self.run_id}")

    # =========================================================================
    # Accessors
    # =========================================================================

    @property
    def state(self) -> GameState:
        return self._store.state

    @property
    def store(self) -> StateStore:
        return self._store

    @property
    def event_bus(self) -> EventBus:
        return self._event_bus

    @property
    def pipeline(self) -> TickPipeline:
        return self._pipeline

    @property
    def systems(self) -> List[BaseSystem]:
        return [s for phase in TickPhase for s in self._systems_by_phase[phase]]

    # =========================================================================
    # Tick
    # =========================================================================

    def tick(self) -> TickResult:
        """Advance the simulation by one tick (``clock.speed`` minutes)."""
        self.tick_count += 1
        self._tick_events.clear()
        delta = float(self.state.clock.speed)

        tx = self._store.begin_transaction()
        try:
            ctx = self._pipeline.run(self, delta)
        except Exception as exc:
            self._store.unwind(tx)
            return self._fault_result(exc)
        self._store.commit(tx)
        for name, result in ctx.system_results.items():
            self.system_totals[name] = self.system_totals.get(name, SystemResult.empty()) + result

        return TickResult(
            state_snapshot=self.state.snapshot(),
            executed_actions=tuple(ctx.executed),
            events=tuple(self._tick_events),
            delta_time=delta,
            is_complete=ctx.is_complete,
            is_stuck=ctx.is_stuck,
        )

    def _fault_result(self, exc: Exception) -> TickResult:
        self.fault_count += 1
        state = self.state
        now = state.clock.total_minutes
        logger.exception(f"Tick {self.tick_count} faulted; state rolled back")
        self._tick_events.clear()
        self._event_bus.emit(TickFaultEvent(self.tick_count, now, type(exc).__name__, str(exc)))
        error = GameEvent(
            timestamp=now,
            type="error",
            description=f"Tick {self.tick_count} failed: {type(exc).__name__}: {exc}",
            importance=Importance.HIGH,
            data={"tick": self.tick_count, "error_type": type(exc).__name__},
        )
        victory = self.config.parameters.victory
        return TickResult(
            state_snapshot=state.snapshot(),
            executed_actions=(),
            events=(error,),
            delta_time=0.0,
            is_complete=progress.is_complete(state, victory),
            is_stuck=progress.is_stuck(state, victory),
        )

    def _run_systems(self, phase: TickPhase, ctx: TickContext) -> None:
        for system in self._systems_by_phase[phase]:
            result = system.update(ctx.delta)
            ctx.system_results[system.name] = result

    # -------------------------------------------------------------------------
    # Phase implementations (called by the pipeline steps)
    # -------------------------------------------------------------------------

    def _phase_clock(self, ctx: TickContext) -> None:
        self._run_systems(TickPhase.CLOCK, ctx)

    def _phase_processes(self, ctx: TickContext) -> None:
        ctx.process_report = self._processes.tick(ctx.delta)

    def _phase_helpers(self, ctx: TickContext) -> None:
        self._run_systems(TickPhase.HELPERS, ctx)

    def _phase_automation(self, ctx: TickContext) -> None:
        self._run_systems(TickPhase.AUTOMATION, ctx)

    def _phase_decide(self, ctx: TickContext) -> None:
        state = self.state
        ctx.check_in = evaluate_check_in(
            state.clock,
            state.tracking.last_checkin_minute,
            state,
            self.config.persona,
            self.config.parameters,
        )
        if not ctx.check_in.allowed:
            return
        ctx.decided = self._decisions.evaluate(state, self.config.parameters, self._data)
        logger.debug(f"Check-in at minute {state.clock.total_minutes} ({ctx.check_in.reason})")

    def _phase_execute(self, ctx: TickContext) -> None:
        state = self.state
        for action in ctx.decided:
            # Once the hero has moved, actions for the screen left behind are moot
            if action.screen is not state.location.current_screen:
                ctx.skipped.append(action)
                continue
            result = self._executor.execute(action)
            if result.is_ok():
                ctx.executed.append(action)
            else:
                ctx.failed.append((action, result.error))
        if ctx.executed:
            state.tracking.last_checkin_minute = state.clock.total_minutes

    def _phase_progression(self, ctx: TickContext) -> None:
        state = self.state
        progression = state.progression
        now = state.clock.total_minutes
        stage = progression.farm_stage
        if stage != ctx.stage_before:
            name = balance.FARM_STAGE_NAMES.get(stage, str(stage))
            self._event_bus.emit(
                GameEvent(
                    now,
                    "farm_stage_changed",
                    f"Farm reached stage {stage} ({name})",
                    Importance.HIGH,
                    {"stage": stage},
                )
            )
        phase = progression.phase
        if phase is not ctx.phase_before:
            self._event_bus.emit(
                GameEvent(
                    now,
                    "phase_changed",
                    f"Game phase is now {phase.value}",
                    Importance.HIGH,
                    {"phase": phase.value},
                )
            )
        progress.record_progress(state, self.config.parameters.victory)

    def _phase_terminal(self, ctx: TickContext) -> None:
        state = self.state
        victory = self.config.parameters.victory
        ctx.is_complete = progress.is_complete(state, victory)
        ctx.is_stuck = progress.is_stuck(state, victory)

    def _on_storage_limit(self, event: StorageLimitHitEvent) -> None:
        self._tick_events.append(
            GameEvent(
                self.state.clock.total_minutes,
                "storage_limit",
                f"Storage full for {event.material}: {event.discarded} discarded",
                Importance.LOW,
                {"material": event.material, "discarded": event.discarded},
            )
        )

    # =========================================================================
    # Diagnostics
    # =========================================================================

    def get_next_decision(self) -> DecisionExplanation:
        """What the persona would do right now, and why.

        Works on a snapshot with a copy of the run's RNG, so neither the
        state nor the random stream of the run is affected.
        """
        rng = random.Random()
        rng.setstate(self._rng.getstate())
        return self._decisions.explain(self.state.snapshot(), self.config.parameters, self._data, rng)

    def get_debug_info(self) -> Dict[str, Any]:
        state = self.state
        return {
            "run_id": self.run_id,
            "tick": self.tick_count,
            "minute": state.clock.total_minutes,
            "screen": state.location.current_screen.value,
            "processes": self._processes.get_debug_info(),
            "systems": [s.get_debug_info() for s in self.systems],
            "system_totals": {name: r.details for name, r in self.system_totals.items()},
            "pipeline": self._pipeline.step_names,
        }

    # =========================================================================
    # Run
    # =========================================================================

    def run(self, max_ticks: int, stop_on_stuck: bool = True) -> RunSummary:
        """Tick until victory, a stuck run (optional) or ``max_ticks``."""
        logger.info("=" * 60)
        logger.info(f"IDLE FARM SIMULATION ({self.config.persona.name})")
        logger.info("=" * 60)
        logger.info(f"Running for up to {max_ticks} ticks")

        event_counts: Counter = Counter()
        completed = stuck = False
        ticks = 0
        for _ in range(max_ticks):
            result = self.tick()
            ticks += 1
            event_counts.update(event.type for event in result.events)
            for event in result.events:
                if event.importance in (Importance.HIGH, Importance.CRITICAL):
                    logger.info(f"[day {result.state_snapshot.clock.day}] {event.description}")
            completed, stuck = result.is_complete, result.is_stuck
            if completed or (stuck and stop_on_stuck):
                break

        state = self.state
        logger.info("=" * 60)
        if completed:
            logger.info(f"VICTORY after {ticks} ticks (day {state.clock.day})")
        elif stuck:
            logger.info(f"STUCK after {ticks} ticks (day {state.clock.day})")
        else:
            logger.info(f"Stopped after {ticks} ticks (day {state.clock.day})")
        logger.info(
            f"Plots {state.progression.farm_plots}, hero level {state.progression.hero_level}, "
            f"gold {state.resources.gold}"
        )
        logger.info("=" * 60)

        return RunSummary(
            run_id=self.run_id,
            ticks=ticks,
            final_state=state.snapshot(),
            completed=completed,
            stuck=stuck,
            faults=self.fault_count,
            actions_executed=state.tracking.actions_executed,
            actions_failed=state.tracking.actions_failed,
            event_counts=dict(event_counts),
        )

    def __repr__(self) -> str:
        return f"SimulationEngine(run_id={self.run_id!r}, tick={self.tick_count})"


def create_engine(
    config: Optional[CompiledConfig] = None,
    data: Optional[StaticDataProvider] = None,
    pipeline: Optional[TickPipeline] = None,
) -> SimulationEngine:
    """Wire a ready-to-run engine from a compiled configuration.

    Every collaborator shares one event bus and one RNG seeded from
    ``config.seed``, so equal seeds give equal runs.

    Args:
        config: Compiled configuration (defaults to the casual persona)
        data: Static balance data (defaults to the built-in tables)
        pipeline: Custom tick pipeline (defaults to the canonical order)
    """
    config = config or compile_config()
    if data is None:
        data = create_default_provider()
    params = config.parameters
    rng = random.Random(config.seed)
    bus = EventBus()

    store = StateStore(create_initial_state(config), bus)
    processes = ProcessManager(ProcessContext(store, data, params, config.persona, rng), bus)
    executor = ActionExecutor(store, processes, data, params, bus, rng)
    systems = [
        ClockSystem(store),
        HelperSystem(store, processes, data, params, rng, bus),
        AutomationSystem(store, data, rng),
    ]
    return SimulationEngine(
        store=store,
        process_manager=processes,
        decision_engine=DecisionEngine(config.persona, rng),
        executor=executor,
        data=data,
        config=config,
        event_bus=bus,
        rng=rng,
        systems=systems,
        pipeline=pipeline,
    )
