"""Closed vocabularies used throughout the simulation.

Balance tables identify things with free-form strings ("town", "catch_seeds",
"materials"). Those strings are mapped onto these enums once, when static data
is loaded, so the rest of the code never compares raw strings for dispatch.
"""

from __future__ import annotations

from enum import Enum
from typing import TypeVar

from idlefarm.exceptions import DataError

E = TypeVar("E", bound="_IdEnum")


class _IdEnum(str, Enum):
    """String-valued enum with a strict lookup from external identifiers."""

    @classmethod
    def from_id(cls: type[E], value: str) -> E:
        """Map an external identifier onto a member.

        Raises:
            DataError: If the identifier does not name a member
        """
        normalized = value.strip().lower().replace(" ", "_").replace("-", "_")
        try:
            return cls(normalized)
        except ValueError as exc:
            raise DataError(f"Unknown {cls.__name__} identifier: {value!r}") from exc

    def __str__(self) -> str:
        return self.value


class ActionKind(_IdEnum):
    """Every action the decision engine can propose."""

    HARVEST = "harvest"
    WATER = "water"
    PLANT = "plant"
    PUMP = "pump"
    CLEANUP = "cleanup"
    BUILD = "build"
    CATCH_SEEDS = "catch_seeds"
    PURCHASE = "purchase"
    SELL_MATERIAL = "sell_material"
    ADVENTURE = "adventure"
    CRAFT = "craft"
    STOKE = "stoke"
    MINE = "mine"
    RESCUE_HELPER = "rescue_helper"
    ASSIGN_HELPER = "assign_helper"
    TRAIN_HELPER = "train_helper"
    MOVE = "move"


class ResourceKind(_IdEnum):
    ENERGY = "energy"
    GOLD = "gold"
    WATER = "water"
    SEEDS = "seeds"
    MATERIALS = "materials"


class ResourceOperation(_IdEnum):
    ADD = "add"
    SUBTRACT = "subtract"
    SET = "set"


class ScreenId(_IdEnum):
    """Locations the hero can stand on."""

    FARM = "farm"
    TOWER = "tower"
    TOWN = "town"
    ADVENTURE = "adventure"
    FORGE = "forge"
    MINE = "mine"


class ProcessKind(_IdEnum):
    CROP_GROWTH = "crop_growth"
    CRAFTING = "crafting"
    MINING = "mining"
    SEED_CATCHING = "seed_catching"
    ADVENTURE = "adventure"
    HELPER_TRAINING = "helper_training"


class Importance(_IdEnum):
    """Severity attached to every game event."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class GamePhase(_IdEnum):
    TUTORIAL = "tutorial"
    EARLY = "early"
    MID = "mid"
    LATE = "late"
    END = "end"


class HelperRole(_IdEnum):
    WATERER = "waterer"
    PUMP_OPERATOR = "pump_operator"
    SOWER = "sower"
    HARVESTER = "harvester"
    MINER = "miner"
    SEED_CATCHER = "seed_catcher"
    FORAGER = "forager"


class WeaponFamily(_IdEnum):
    SPEAR = "spear"
    SWORD = "sword"
    BOW = "bow"
    CROSSBOW = "crossbow"
    WAND = "wand"


class EnemyType(_IdEnum):
    SLIMES = "slimes"
    ARMORED_INSECTS = "armored_insects"
    PREDATORY_BEASTS = "predatory_beasts"
    FLYING_PREDATORS = "flying_predators"
    VENOMOUS_CRAWLERS = "venomous_crawlers"
    LIVING_PLANTS = "living_plants"


class BossId(_IdEnum):
    GIANT_SLIME = "giant_slime"
    BEETLE_LORD = "beetle_lord"
    ALPHA_WOLF = "alpha_wolf"
    SKY_SERPENT = "sky_serpent"
    CRYSTAL_SPIDER = "crystal_spider"
    FROST_WYRM = "frost_wyrm"
    LAVA_TITAN = "lava_titan"


class ArmorEffect(_IdEnum):
    NONE = "none"
    REFLECTION = "reflection"
    EVASION = "evasion"
    CRITICAL_SHIELD = "critical_shield"
    TYPE_RESIST = "type_resist"
    REGENERATION = "regeneration"
    VAMPIRIC = "vampiric"
    GOLD_MAGNET = "gold_magnet"


class RouteLength(_IdEnum):
    SHORT = "short"
    MEDIUM = "medium"
    LONG = "long"
