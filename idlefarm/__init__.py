"""idlefarm: a headless, persona-driven idle-farming simulation.

Quick start:

    from idlefarm import compile_config, create_engine

    engine = create_engine(compile_config("speedrunner", seed=42))
    result = engine.tick()
    print(engine.get_next_decision().reasoning)
"""

from idlefarm.config.parameters import CompiledConfig, PersonaTraits, compile_config
from idlefarm.decision.actions import GameAction
from idlefarm.decision.engine import DecisionEngine, DecisionExplanation
from idlefarm.events.domain_events import GameEvent
from idlefarm.simulation.engine import RunSummary, SimulationEngine, TickResult, create_engine
from idlefarm.state.model import GameState, create_initial_state

__version__ = "0.1.0"

__all__ = [
    "CompiledConfig",
    "DecisionEngine",
    "DecisionExplanation",
    "GameAction",
    "GameEvent",
    "GameState",
    "PersonaTraits",
    "RunSummary",
    "SimulationEngine",
    "TickResult",
    "compile_config",
    "create_engine",
    "create_initial_state",
]
