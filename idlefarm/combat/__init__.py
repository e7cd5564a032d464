"""Deterministic adventure combat."""

from idlefarm.combat.resolver import CombatResolver, loadout_from_inventory
from idlefarm.combat.types import AdventureOutcome, ArmorLoadout, RouteDefinition

__all__ = [
    "AdventureOutcome",
    "ArmorLoadout",
    "CombatResolver",
    "RouteDefinition",
    "loadout_from_inventory",
]
