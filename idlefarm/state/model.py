"""The mutable simulation aggregate.

Everything the simulation knows lives in one ``GameState``. Subsystems read
it freely; writes go through ``idlefarm.state.store.StateStore`` (resources)
or through the process manager and executor while a store transaction is
open, so a faulting tick can be rolled back wholesale.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import Dict, FrozenSet, List, Optional, Set, Tuple

from idlefarm.config import balance
from idlefarm.config.parameters import CompiledConfig
from idlefarm.enums import (
    ArmorEffect,
    GamePhase,
    HelperRole,
    RouteLength,
    ScreenId,
    WeaponFamily,
)
from idlefarm.state import progression

MINUTES_PER_HOUR = 60
HOURS_PER_DAY = 24
MINUTES_PER_DAY = MINUTES_PER_HOUR * HOURS_PER_DAY
SCREEN_HISTORY_LIMIT = 50


@dataclass
class SimulationClock:
    """In-game time. Only the engine advances it."""

    day: int = 1
    hour: int = 8
    minute: int = 0
    total_minutes: int = 8 * MINUTES_PER_HOUR
    speed: int = 1

    def advance(self, minutes: int) -> None:
        if minutes < 0:
            raise ValueError(f"Clock cannot run backwards (minutes={minutes})")
        self.total_minutes += minutes
        self.minute += minutes
        if self.minute >= MINUTES_PER_HOUR:
            self.hour += self.minute // MINUTES_PER_HOUR
            self.minute %= MINUTES_PER_HOUR
        if self.hour >= HOURS_PER_DAY:
            self.day += self.hour // HOURS_PER_DAY
            self.hour %= HOURS_PER_DAY

    @property
    def is_weekend(self) -> bool:
        """Days 6 and 7 of every week."""
        return (self.day - 1) % 7 >= 5


@dataclass
class Meter:
    current: float
    maximum: float

    @property
    def fraction(self) -> float:
        if self.maximum <= 0:
            return 0.0
        return self.current / self.maximum

    @property
    def free(self) -> float:
        return max(0.0, self.maximum - self.current)


@dataclass
class ResourcePool:
    energy: Meter
    gold: int
    water: Meter
    seeds: Dict[str, int] = field(default_factory=dict)
    materials: Dict[str, int] = field(default_factory=dict)

    @property
    def total_seeds(self) -> int:
        return sum(self.seeds.values())


@dataclass
class ProgressionState:
    hero_level: int = 1
    experience: int = 0
    farm_plots: int = 3
    completed_cleanups: Set[str] = field(default_factory=set)
    built_structures: Set[str] = field(default_factory=set)
    unlocked_upgrades: List[str] = field(default_factory=list)
    completed_adventures: Set[str] = field(default_factory=set)

    @property
    def farm_stage(self) -> int:
        return progression.farm_stage_for(self.farm_plots)

    @property
    def phase(self) -> GamePhase:
        return progression.phase_for(self.farm_plots, self.hero_level)

    @property
    def unlocked_screens(self) -> FrozenSet[ScreenId]:
        return progression.unlocked_screens_for(self.built_structures)

    @property
    def tower_level(self) -> int:
        return progression.tower_level_for(self.built_structures)

    @property
    def housing_capacity(self) -> int:
        return progression.housing_capacity_for(self.unlocked_upgrades)

    def storage_limit(self, material: str) -> int:
        return progression.storage_limit_for(material, self.unlocked_upgrades)

    def add_experience(self, xp: int) -> int:
        """Add hero XP, levelling up as thresholds are crossed.

        Returns:
            Number of levels gained
        """
        if xp <= 0:
            return 0
        self.experience += xp
        gained = 0
        while self.experience >= progression.xp_for_next_level(self.hero_level):
            self.experience -= progression.xp_for_next_level(self.hero_level)
            self.hero_level += 1
            gained += 1
        return gained


@dataclass
class BuildCost:
    energy: float = 0
    materials: Dict[str, int] = field(default_factory=dict)


@dataclass
class BlueprintRecord:
    purchased: bool = False
    built: bool = False
    build_cost: BuildCost = field(default_factory=BuildCost)
    purchased_at: Optional[int] = None


@dataclass
class ArmorPiece:
    id: str
    defense: float
    effect: ArmorEffect = ArmorEffect.NONE


@dataclass
class InventoryState:
    tools: Dict[str, bool] = field(default_factory=dict)
    weapons: Dict[WeaponFamily, int] = field(default_factory=dict)
    armor: Dict[str, ArmorPiece] = field(default_factory=dict)
    equipped_armor: Optional[str] = None
    blueprints: Dict[str, BlueprintRecord] = field(default_factory=dict)

    @property
    def equipped_armor_piece(self) -> Optional[ArmorPiece]:
        if self.equipped_armor is None:
            return None
        return self.armor.get(self.equipped_armor)

    def owns(self, item_id: str) -> bool:
        """True for owned tools and for ``<family>_<level>`` weapons at or above that level."""
        if item_id in self.tools or item_id in self.armor:
            return True
        family, _, level = item_id.rpartition("_")
        if family and level.isdigit():
            try:
                weapon = WeaponFamily(family)
            except ValueError:
                return False
            return self.weapons.get(weapon, 0) >= int(level)
        return False


@dataclass
class CropRecord:
    """One planted plot.

    ``growth_progress`` runs 0..1; ``growth_stage`` is its quantized view.
    A withered crop is terminal and never becomes ready.
    """

    process_id: str
    plot_id: str
    crop_id: str
    planted_at: int
    growth_time: float
    water_level: float = 0.0
    growth_progress: float = 0.0
    growth_stage: int = 0
    max_stages: int = 3
    ready_to_harvest: bool = False
    withered: bool = False
    drought_minutes: float = 0.0
    completion_reported: bool = False


@dataclass
class CraftingJob:
    process_id: str
    recipe_id: str
    item_id: str
    item_kind: str
    total_minutes: float
    remaining_minutes: float
    heat_required: float
    success_chance: float = 1.0
    family: Optional[WeaponFamily] = None
    level: int = 0
    defense: float = 0.0


@dataclass
class MiningSession:
    process_id: str
    target_depth: float
    depth: float = 0.0
    elapsed: float = 0.0
    energy_drained: float = 0.0
    next_sample_at: float = 0.0
    materials: Dict[str, int] = field(default_factory=dict)
    exit_requested: bool = False


@dataclass
class SeedCatchingSession:
    process_id: str
    duration: float
    expected_yield: int
    wind_level: int
    seed_pool: Tuple[str, ...]
    elapsed: float = 0.0


@dataclass
class AdventureSession:
    process_id: str
    route_id: str
    length: RouteLength
    seed: int
    hero_hp: float
    started_at: int
    wave_index: int = 0


@dataclass
class TrainingSession:
    process_id: str
    gnome_id: str
    target_level: int
    remaining_minutes: float


@dataclass
class ProcessState:
    crops: Dict[str, CropRecord] = field(default_factory=dict)
    crafting_queue: List[CraftingJob] = field(default_factory=list)
    forge_heat: float = 0.0
    mining: Optional[MiningSession] = None
    seed_catching: Optional[SeedCatchingSession] = None
    adventure: Optional[AdventureSession] = None
    training: List[TrainingSession] = field(default_factory=list)
    next_process_number: int = 1

    def allocate_id(self, prefix: str) -> str:
        process_id = f"{prefix}-{self.next_process_number}"
        self.next_process_number += 1
        return process_id


@dataclass
class Gnome:
    id: str
    name: str
    role: Optional[HelperRole] = None
    level: int = 1
    experience: int = 0
    current_task: str = "idle"
    assigned: bool = False

    @property
    def efficiency(self) -> float:
        return 1.0 + balance.HELPER_EFFICIENCY_PER_LEVEL * (self.level - 1)


@dataclass
class HelperState:
    gnomes: Dict[str, Gnome] = field(default_factory=dict)

    @property
    def assigned_count(self) -> int:
        return sum(1 for gnome in self.gnomes.values() if gnome.assigned)

    def assigned_with_role(self, role: HelperRole) -> List[Gnome]:
        return [g for g in self.gnomes.values() if g.assigned and g.role == role]


@dataclass
class LocationState:
    current_screen: ScreenId = ScreenId.FARM
    time_on_screen: int = 0
    screen_history: List[ScreenId] = field(default_factory=list)
    last_navigation_reason: str = ""

    def move_to(self, screen: ScreenId, reason: str) -> None:
        self.screen_history.append(self.current_screen)
        del self.screen_history[:-SCREEN_HISTORY_LIMIT]
        self.current_screen = screen
        self.time_on_screen = 0
        self.last_navigation_reason = reason


@dataclass
class AutomationState:
    """Fractional production carried between ticks."""

    pump_accumulator: float = 0.0
    catcher_accumulator: float = 0.0
    helper_accumulators: Dict[str, float] = field(default_factory=dict)


@dataclass
class RunTracking:
    """Bookkeeping for check-ins, stuck detection and waste metrics."""

    last_checkin_minute: Optional[int] = None
    last_progress_minute: int = 0
    last_progress_plots: int = 0
    last_progress_level: int = 0
    last_progress_gold: int = 0
    wasted_materials: Dict[str, int] = field(default_factory=dict)
    actions_executed: int = 0
    actions_failed: int = 0


@dataclass
class GameState:
    clock: SimulationClock
    resources: ResourcePool
    progression: ProgressionState
    inventory: InventoryState = field(default_factory=InventoryState)
    processes: ProcessState = field(default_factory=ProcessState)
    helpers: HelperState = field(default_factory=HelperState)
    location: LocationState = field(default_factory=LocationState)
    automation: AutomationState = field(default_factory=AutomationState)
    tracking: RunTracking = field(default_factory=RunTracking)

    def snapshot(self) -> "GameState":
        """Independent deep copy; later ticks never alter it."""
        return copy.deepcopy(self)

    @property
    def empty_plots(self) -> int:
        occupied = sum(1 for crop in self.processes.crops.values() if not crop.withered)
        return max(0, self.progression.farm_plots - occupied)

    @property
    def ready_crops(self) -> List[CropRecord]:
        return [crop for crop in self.processes.crops.values() if crop.ready_to_harvest]


def create_initial_state(config: Optional[CompiledConfig] = None) -> GameState:
    """Build the starting aggregate from a compiled configuration."""
    if config is None:
        config = CompiledConfig()
    start = config.parameters.start

    materials = dict(balance.STARTING_MATERIALS)
    materials.update(start.materials)

    state = GameState(
        clock=SimulationClock(
            day=start.day,
            hour=start.hour,
            minute=0,
            total_minutes=(start.day - 1) * MINUTES_PER_DAY + start.hour * MINUTES_PER_HOUR,
        ),
        resources=ResourcePool(
            energy=Meter(start.energy, start.max_energy),
            gold=start.gold,
            water=Meter(start.water, start.max_water),
            seeds=dict(start.seeds),
            materials=materials,
        ),
        progression=ProgressionState(
            farm_plots=start.plots,
            built_structures=set(balance.STARTING_STRUCTURES),
        ),
    )
    tracking = state.tracking
    tracking.last_progress_minute = state.clock.total_minutes
    tracking.last_progress_plots = start.plots
    tracking.last_progress_level = 1
    tracking.last_progress_gold = start.gold
    return state
