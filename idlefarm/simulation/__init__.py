"""The tick loop and its pipeline."""

from idlefarm.simulation.engine import RunSummary, SimulationEngine, TickResult, create_engine
from idlefarm.simulation.pipeline import PipelineStep, TickPipeline, default_pipeline
from idlefarm.simulation.tick_context import TickContext

__all__ = [
    "PipelineStep",
    "RunSummary",
    "SimulationEngine",
    "TickContext",
    "TickPipeline",
    "TickResult",
    "create_engine",
    "default_pipeline",
]
