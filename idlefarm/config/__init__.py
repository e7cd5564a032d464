"""Run configuration (pydantic models) and world balance constants."""

from idlefarm.config.parameters import (
    PERSONA_PRESETS,
    CompiledConfig,
    PersonaTraits,
    SimulationParameters,
    compile_config,
)

__all__ = [
    "PERSONA_PRESETS",
    "CompiledConfig",
    "PersonaTraits",
    "SimulationParameters",
    "compile_config",
]
