"""Adventure sessions.

Adventures resolve atomically: the first ``tick`` after ``start`` runs the
whole route through the combat resolver and applies the outcome. Energy is
charged by the executor before the session starts and is never refunded.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional

from idlefarm.combat.resolver import CombatResolver, loadout_from_inventory
from idlefarm.combat.types import AdventureOutcome, RouteDefinition
from idlefarm.enums import Importance, ProcessKind, ResourceKind, RouteLength
from idlefarm.processes.base import ProcessContext, ProcessHandler, ProcessTickReport
from idlefarm.result import Err, Ok, Result
from idlefarm.state.model import AdventureSession, ArmorPiece
from idlefarm.state.progression import hero_max_hp

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AdventureSpec:
    route_id: str
    length: RouteLength
    seed: int


class AdventureHandler(ProcessHandler):
    kind = ProcessKind.ADVENTURE

    def __init__(self, context: ProcessContext, resolver: Optional[CombatResolver] = None) -> None:
        super().__init__(context)
        self._resolver = resolver or CombatResolver()

    def _route(self, route_id: str) -> Optional[RouteDefinition]:
        row = self._ctx.data.get_by_id(route_id)
        if row is None or row.get("category") != "route":
            return None
        return RouteDefinition.from_row(row)

    def start(self, spec: AdventureSpec) -> Result[str, str]:
        state = self._ctx.state
        if state.processes.adventure is not None:
            return Err("Already on an adventure")
        if self._route(spec.route_id) is None:
            return Err(f"Unknown route {spec.route_id!r}")

        process_id = state.processes.allocate_id("adventure")
        state.processes.adventure = AdventureSession(
            process_id=process_id,
            route_id=spec.route_id,
            length=spec.length,
            seed=spec.seed,
            hero_hp=hero_max_hp(state.progression.hero_level),
            started_at=self._ctx.now,
        )
        return Ok(process_id)

    def tick(self, delta: float) -> ProcessTickReport:
        report = ProcessTickReport()
        state = self._ctx.state
        session = state.processes.adventure
        if session is None:
            return report

        route = self._route(session.route_id)
        outcome = self._resolver.resolve(
            route,
            dict(state.inventory.weapons),
            loadout_from_inventory(state.inventory.equipped_armor_piece),
            state.progression.hero_level,
            session.seed,
            session.length,
        )
        session.wave_index = outcome.waves_cleared
        session.hero_hp = outcome.final_hp
        state.processes.adventure = None
        self._apply(outcome, report)
        (report.completed if outcome.success else report.failed).append(session.process_id)
        return report

    def _apply(self, outcome: AdventureOutcome, report: ProcessTickReport) -> None:
        state = self._ctx.state
        store = self._ctx.store
        if outcome.total_gold:
            store.add(ResourceKind.GOLD, outcome.total_gold, reason="adventure")
        levels = state.progression.add_experience(outcome.total_xp)
        if levels:
            report.events.append(
                self.event(
                    "level_up",
                    f"Hero reached level {state.progression.hero_level}",
                    Importance.MEDIUM,
                    level=state.progression.hero_level,
                )
            )

        label = f"{outcome.route_id} ({outcome.length.value})"
        if not outcome.success:
            report.events.append(
                self.event(
                    "adventure_failed",
                    f"Adventure on {label} failed after {outcome.waves_cleared} waves",
                    Importance.HIGH,
                    route=outcome.route_id,
                    gold=outcome.total_gold,
                )
            )
            return

        store.add_materials(outcome.loot, reason="adventure")
        state.progression.completed_adventures.add(outcome.route_id)
        state.progression.completed_adventures.add(f"{outcome.route_id}_{outcome.length.value}")
        if outcome.armor_drop is not None:
            drop = outcome.armor_drop
            state.inventory.armor[drop.id] = ArmorPiece(drop.id, drop.defense, drop.effect)
            equipped = state.inventory.equipped_armor_piece
            if equipped is None or equipped.defense < drop.defense:
                state.inventory.equipped_armor = drop.id
        report.events.append(
            self.event(
                "adventure_completed",
                f"Cleared {label}: +{outcome.total_gold} gold, +{outcome.total_xp} XP",
                Importance.MEDIUM,
                route=outcome.route_id,
                gold=outcome.total_gold,
                loot=dict(outcome.loot),
            )
        )
        logger.debug(f"Adventure {label} succeeded with {outcome.final_hp:g} HP")

    def cancel(self, process_id: str) -> bool:
        state = self._ctx.state
        session = state.processes.adventure
        if session is None or session.process_id != process_id:
            return False
        state.processes.adventure = None
        return True

    def active_ids(self) -> List[str]:
        session = self._ctx.state.processes.adventure
        return [session.process_id] if session else []
