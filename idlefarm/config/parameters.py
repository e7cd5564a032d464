"""Compiled run configuration: persona traits plus tunable parameters.

A run is configured once, at construction time, from a persona and a flat
mapping of dotted parameter paths to override values::

    config = compile_config(
        "speedrunner",
        overrides={"decisions.top_k": 5, "checkin.night_start_hour": 23},
        seed=42,
    )

Overrides are merged onto the built-in defaults and re-validated by pydantic,
so a typo in a path or an out-of-range value fails fast with a
``ConfigurationError`` instead of silently running a different experiment.
"""

from __future__ import annotations

import copy
from typing import Any, Dict, Literal, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from idlefarm.config import balance
from idlefarm.exceptions import ConfigurationError

StrategyName = Literal["casual", "speedrunner", "weekend_warrior"]


class _Section(BaseModel):
    model_config = ConfigDict(extra="forbid", validate_assignment=True)


class PersonaTraits(_Section):
    """Behavioural scalars biasing action scoring and check-in cadence.

    Attributes:
        strategy: Which persona strategy interprets these traits
        efficiency: Overall score multiplier (0..1)
        risk_tolerance: Scales adventure and mining scores (0..1)
        optimization: Scales planting, building, purchasing and crafting (0..1)
        learning_rate: Scales rescuing, assigning and training helpers (0..1)
    """

    id: str = "casual"
    name: str = "Casual Player"
    strategy: StrategyName = "casual"
    efficiency: float = Field(0.7, ge=0.0, le=1.0)
    risk_tolerance: float = Field(0.3, ge=0.0, le=1.0)
    optimization: float = Field(0.6, ge=0.0, le=1.0)
    learning_rate: float = Field(0.4, ge=0.0, le=1.0)

    @property
    def catching_skill(self) -> float:
        """Seed-catching skill in [0.7, 0.95]."""
        return 0.7 + 0.25 * self.optimization


class StartParameters(_Section):
    day: int = Field(balance.STARTING_DAY, ge=1)
    hour: int = Field(balance.STARTING_HOUR, ge=0, le=23)
    plots: int = Field(balance.STARTING_PLOTS, ge=1)
    gold: int = Field(balance.STARTING_GOLD, ge=0)
    energy: float = Field(balance.STARTING_ENERGY, ge=0.0)
    max_energy: float = Field(balance.STARTING_MAX_ENERGY, gt=0.0)
    water: float = Field(balance.STARTING_WATER, ge=0.0)
    max_water: float = Field(balance.STARTING_MAX_WATER, gt=0.0)
    seeds: Dict[str, int] = Field(default_factory=lambda: dict(balance.STARTING_SEEDS))
    materials: Dict[str, int] = Field(default_factory=lambda: dict(balance.STARTING_MATERIALS))


class FarmParameters(_Section):
    energy_reserve: float = Field(5.0, ge=0.0)
    watering_threshold: float = Field(0.25, ge=0.0, le=1.0)
    pump_threshold: float = Field(0.3, ge=0.0, le=1.0)
    water_emergency_fraction: float = Field(0.1, ge=0.0, le=1.0)
    energy_emergency_level: float = Field(10.0, ge=0.0)
    min_water_to_irrigate: float = Field(5.0, ge=0.0)
    seed_buffer_per_plot: int = Field(2, ge=1)
    seed_buffer_minimum: int = Field(6, ge=1)
    seed_low_fraction: float = Field(0.7, ge=0.0, le=1.0)
    material_sale_gold_ceiling: int = Field(200, ge=0)


class CropParameters(_Section):
    default_growth_minutes: float = Field(10.0, gt=0.0)
    max_stages: int = Field(3, ge=1)
    wet_threshold: float = Field(0.3, ge=0.0, le=1.0)
    drought_grace_minutes: float = Field(30.0, ge=0.0)
    wither_minutes: float = Field(120.0, gt=0.0)


class DecisionParameters(_Section):
    top_k: int = Field(3, ge=1, le=6)
    jitter: float = Field(2.0, ge=0.0)
    bottleneck_multiplier: float = Field(2.0, ge=1.0)
    screen_priorities: Dict[str, float] = Field(
        default_factory=lambda: {
            "farm": 30.0,
            "tower": 25.0,
            "town": 20.0,
            "adventure": 15.0,
            "forge": 10.0,
            "mine": 10.0,
        }
    )


class CheckInParameters(_Section):
    night_start_hour: int = Field(22, ge=0, le=23)
    night_end_hour: int = Field(6, ge=0, le=23)
    early_game_minutes: int = Field(600, ge=0)
    seed_crisis_interval: int = Field(2, ge=1)
    water_crisis_interval: int = Field(5, ge=1)
    high_energy_interval: int = Field(10, ge=1)
    ready_crop_interval: int = Field(8, ge=1)


class SeedParameters(_Section):
    manual_catch_min_minutes: int = Field(3, ge=1)
    manual_catch_max_minutes: int = Field(5, ge=1)
    emergency_catch_minutes: int = Field(5, ge=1)
    yield_spread: float = Field(0.2, ge=0.0, le=1.0)


class MiningParameters(_Section):
    planned_depth: float = Field(250.0, gt=0.0)
    energy_threshold: float = Field(30.0, ge=0.0)
    low_material_level: int = Field(10, ge=0)


class VictoryParameters(_Section):
    plots: int = Field(90, ge=1)
    hero_level: int = Field(15, ge=1)
    stuck_days: int = Field(3, ge=1)
    stuck_gold_threshold: int = Field(100, ge=0)


class AutomationParameters(_Section):
    planting_enabled: bool = True
    watering_enabled: bool = True
    harvesting_enabled: bool = True


class SimulationParameters(_Section):
    """Every tunable number the simulation reads, grouped by subsystem."""

    start: StartParameters = Field(default_factory=StartParameters)
    farm: FarmParameters = Field(default_factory=FarmParameters)
    crops: CropParameters = Field(default_factory=CropParameters)
    decisions: DecisionParameters = Field(default_factory=DecisionParameters)
    checkin: CheckInParameters = Field(default_factory=CheckInParameters)
    seeds: SeedParameters = Field(default_factory=SeedParameters)
    mining: MiningParameters = Field(default_factory=MiningParameters)
    victory: VictoryParameters = Field(default_factory=VictoryParameters)
    automation: AutomationParameters = Field(default_factory=AutomationParameters)


class CompiledConfig(_Section):
    """Everything needed to construct a simulation run."""

    persona: PersonaTraits = Field(default_factory=PersonaTraits)
    parameters: SimulationParameters = Field(default_factory=SimulationParameters)
    seed: Optional[int] = None


PERSONA_PRESETS: Dict[str, PersonaTraits] = {
    "casual": PersonaTraits(),
    "speedrunner": PersonaTraits(
        id="speedrunner",
        name="Speedrunner",
        strategy="speedrunner",
        efficiency=0.95,
        risk_tolerance=0.8,
        optimization=0.95,
        learning_rate=0.9,
    ),
    "weekend_warrior": PersonaTraits(
        id="weekend_warrior",
        name="Weekend Warrior",
        strategy="weekend_warrior",
        efficiency=0.8,
        risk_tolerance=0.5,
        optimization=0.7,
        learning_rate=0.6,
    ),
}


def _apply_override(tree: Dict[str, Any], path: str, value: Any) -> None:
    """Set ``tree[a][b][c] = value`` for ``path == "a.b.c"``.

    Only existing keys can be overridden; a path that names nothing is a
    configuration mistake.
    """
    parts = path.split(".")
    node: Any = tree
    for part in parts[:-1]:
        if not isinstance(node, dict) or part not in node:
            raise ConfigurationError(f"Unknown parameter path: {path!r}")
        node = node[part]
    leaf = parts[-1]
    if not isinstance(node, dict) or leaf not in node:
        raise ConfigurationError(f"Unknown parameter path: {path!r}")
    node[leaf] = value


def compile_config(
    persona: Union[str, PersonaTraits] = "casual",
    overrides: Optional[Mapping[str, Any]] = None,
    seed: Optional[int] = None,
) -> CompiledConfig:
    """Merge dotted-path overrides onto defaults and validate the result.

    Paths starting with ``persona.`` override persona traits; every other
    path addresses ``SimulationParameters``.

    Args:
        persona: Preset name or explicit traits
        overrides: Mapping of dotted parameter paths to values
        seed: RNG seed for the run (None for a random run)

    Returns:
        A validated CompiledConfig

    Raises:
        ConfigurationError: Unknown preset, unknown path or invalid value
    """
    if isinstance(persona, str):
        if persona not in PERSONA_PRESETS:
            raise ConfigurationError(
                f"Unknown persona {persona!r}; expected one of {sorted(PERSONA_PRESETS)}"
            )
        persona = PERSONA_PRESETS[persona]

    persona_tree = copy.deepcopy(persona.model_dump())
    parameter_tree = copy.deepcopy(SimulationParameters().model_dump())

    for path, value in (overrides or {}).items():
        if path.startswith("persona."):
            _apply_override(persona_tree, path[len("persona.") :], value)
        else:
            _apply_override(parameter_tree, path, value)

    try:
        return CompiledConfig(
            persona=PersonaTraits.model_validate(persona_tree),
            parameters=SimulationParameters.model_validate(parameter_tree),
            seed=seed,
        )
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid configuration: {exc}") from exc
