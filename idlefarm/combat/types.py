"""Value types shared by the combat modules."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Dict, Mapping, Optional, Tuple

from idlefarm.data.provider import Row, material_key
from idlefarm.enums import ArmorEffect, BossId, EnemyType, RouteLength
from idlefarm.exceptions import CombatError, DataError

_LOOT_TOKEN = re.compile(r"^\s*([A-Za-z][A-Za-z _-]*?)\s*x\s*(\d+)(?:\s*-\s*(\d+))?\s*$", re.IGNORECASE)


@dataclass(frozen=True)
class LootEntry:
    material: str
    minimum: int
    maximum: int


def parse_loot_table(raw: str) -> Tuple[LootEntry, ...]:
    """Parse ``"Wood x5-10;Copper x2"`` into loot entries."""
    entries = []
    for token in (raw or "").split(";"):
        if not token.strip():
            continue
        match = _LOOT_TOKEN.match(token)
        if match is None:
            raise DataError(f"Malformed loot token: {token!r}")
        low = int(match.group(2))
        high = int(match.group(3)) if match.group(3) else low
        entries.append(LootEntry(material_key(match.group(1)), min(low, high), max(low, high)))
    return tuple(entries)


@dataclass(frozen=True)
class RouteDefinition:
    """A parsed adventure route row."""

    id: str
    boss: BossId
    enemy_types: Tuple[EnemyType, ...]
    wave_counts: Mapping[RouteLength, int]
    energy_costs: Mapping[RouteLength, int]
    gold_rewards: Mapping[RouteLength, int]
    durations: Mapping[RouteLength, int]
    loot: Tuple[LootEntry, ...] = ()
    boss_material: Optional[str] = None
    min_level: int = 1
    prerequisites: Tuple[str, ...] = ()

    @classmethod
    def from_row(cls, row: Row) -> "RouteDefinition":
        enemies = row.get("enemy_types") or ()
        if isinstance(enemies, str):
            enemies = [part for part in enemies.split(";") if part.strip()]
        if not enemies:
            raise DataError(f"Route {row['id']!r} has no enemy types")

        def by_length(key: str) -> Dict[RouteLength, int]:
            raw = row.get(key) or {}
            return {RouteLength.from_id(name): int(value) for name, value in raw.items()}

        return cls(
            id=row["id"],
            boss=BossId.from_id(str(row["boss"])),
            enemy_types=tuple(EnemyType.from_id(e) for e in enemies),
            wave_counts=by_length("wave_counts"),
            energy_costs=by_length("energy_costs"),
            gold_rewards=by_length("gold_rewards"),
            durations=by_length("durations"),
            loot=parse_loot_table(row.get("loot") or ""),
            boss_material=row.get("boss_material"),
            min_level=int(row.get("min_level", 1)),
            prerequisites=tuple(row.get("prerequisites", ())),
        )

    def waves_for(self, length: RouteLength) -> int:
        try:
            return self.wave_counts[length]
        except KeyError as exc:
            raise CombatError(f"Route {self.id!r} has no {length} variant") from exc

    def energy_cost(self, length: RouteLength) -> int:
        return self.energy_costs.get(length, 0)


@dataclass(frozen=True)
class ArmorLoadout:
    defense: float = 0.0
    effect: ArmorEffect = ArmorEffect.NONE


@dataclass(frozen=True)
class ArmorDrop:
    id: str
    defense: float
    effect: ArmorEffect


@dataclass(frozen=True)
class AdventureOutcome:
    """Everything an adventure produced. Identical inputs give an equal outcome.

    Attributes:
        success: True when the boss died with hero HP remaining
        final_hp: Hero HP at the end (0 on failure)
        total_gold: Gold earned, including route reward on success
        total_xp: Experience earned
        loot: Materials dropped (material id -> quantity)
        log: Ordered combat log lines
        waves_cleared: Number of regular waves won
        armor_drop: Armor piece found, if any
    """

    route_id: str
    length: RouteLength
    success: bool
    final_hp: float
    total_gold: int
    total_xp: int
    loot: Mapping[str, int] = field(default_factory=dict)
    log: Tuple[str, ...] = ()
    waves_cleared: int = 0
    armor_drop: Optional[ArmorDrop] = None
