"""Mine sessions.

Depth grows ``MINING_DEPTH_PER_MINUTE`` every minute. Energy drains faster
the deeper the hero goes::

    tier  = floor(depth / MINING_DEPTH_TIER_SIZE) + 1
    drain = 2 ** (tier - 1) x (1 - pickaxe efficiency) x (1 - miner reduction)

A material is sampled from the tier table every ``MINING_SAMPLE_INTERVAL``
minutes. The session ends when energy runs out, the planned depth is
reached or an exit is requested; the haul is then stored (clamped to the
storage caps).
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import List, Optional

from idlefarm.config import balance
from idlefarm.enums import HelperRole, Importance, ProcessKind, ResourceKind
from idlefarm.processes.base import ProcessHandler, ProcessTickReport, substeps
from idlefarm.result import Err, Ok, Result
from idlefarm.state.model import GameState, MiningSession

logger = logging.getLogger(__name__)

MAX_MINER_REDUCTION = 0.9


@dataclass(frozen=True)
class MiningSpec:
    target_depth: float


def depth_tier(depth: float) -> int:
    return math.floor(depth / balance.MINING_DEPTH_TIER_SIZE) + 1


def base_drain_per_minute(depth: float) -> float:
    return 2 ** (depth_tier(depth) - 1)


def best_pickaxe(state: GameState) -> Optional[str]:
    owned = [p for p in balance.PICKAXE_EFFICIENCY if p in state.inventory.tools]
    if not owned:
        return None
    return max(owned, key=lambda p: balance.PICKAXE_EFFICIENCY[p])


def miner_reduction(state: GameState) -> float:
    rate = balance.HELPER_ROLE_RATES[HelperRole.MINER]
    total = sum(rate * g.efficiency for g in state.helpers.assigned_with_role(HelperRole.MINER))
    return min(MAX_MINER_REDUCTION, total)


def drain_per_minute(state: GameState, depth: float) -> float:
    pickaxe = best_pickaxe(state)
    efficiency = balance.PICKAXE_EFFICIENCY.get(pickaxe, 0.0) if pickaxe else 0.0
    return base_drain_per_minute(depth) * (1 - efficiency) * (1 - miner_reduction(state))


class MiningHandler(ProcessHandler):
    kind = ProcessKind.MINING

    def start(self, spec: MiningSpec) -> Result[str, str]:
        state = self._ctx.state
        if state.processes.mining is not None:
            return Err("Already mining")
        if "mine_entrance" not in state.progression.built_structures:
            return Err("No mine entrance built")
        if best_pickaxe(state) is None:
            return Err("No pickaxe")
        if state.resources.energy.current < balance.MINING_MIN_ENERGY:
            return Err("Too tired to mine")
        if spec.target_depth <= 0:
            return Err(f"Invalid target depth {spec.target_depth}")

        process_id = state.processes.allocate_id("mine")
        state.processes.mining = MiningSession(
            process_id=process_id,
            target_depth=spec.target_depth,
            next_sample_at=balance.MINING_SAMPLE_INTERVAL,
        )
        return Ok(process_id)

    def request_exit(self) -> bool:
        session = self._ctx.state.processes.mining
        if session is None:
            return False
        session.exit_requested = True
        return True

    def tick(self, delta: float) -> ProcessTickReport:
        report = ProcessTickReport()
        state = self._ctx.state
        session = state.processes.mining
        if session is None:
            return report

        reason = None
        for step in substeps(delta):
            if session.exit_requested:
                reason = "exit requested"
                break
            self._dig(session, step)
            if state.resources.energy.current <= 0:
                reason = "energy exhausted"
                break
            if session.depth >= session.target_depth:
                reason = "planned depth reached"
                break
        if reason is None and session.exit_requested:
            reason = "exit requested"

        if reason is not None:
            self._finish(session, reason, report)
        return report

    def _dig(self, session: MiningSession, step: float) -> None:
        state = self._ctx.state
        drain = min(drain_per_minute(state, session.depth) * step, state.resources.energy.current)
        if drain > 0:
            self._ctx.store.subtract(ResourceKind.ENERGY, drain, reason="mining")
        session.energy_drained += drain
        session.depth += balance.MINING_DEPTH_PER_MINUTE * step
        session.elapsed += step

        tier = min(depth_tier(session.depth), max(balance.MINING_TIER_MATERIALS))
        table = balance.MINING_TIER_MATERIALS[tier]
        pickaxe = best_pickaxe(state)
        bonus = balance.PICKAXE_MATERIAL_BONUS.get(pickaxe, 0.0) if pickaxe else 0.0
        rng = self._ctx.rng
        while session.elapsed + 1e-9 >= session.next_sample_at:
            material = rng.choice(table)
            qty = 2 if bonus and rng.random() < bonus else 1
            session.materials[material] = session.materials.get(material, 0) + qty
            session.next_sample_at += balance.MINING_SAMPLE_INTERVAL

    def _finish(self, session: MiningSession, reason: str, report: ProcessTickReport) -> None:
        updates = self._ctx.store.add_materials(session.materials, reason="mining")
        stored = {m: int(u.delta) for m, u in updates.items()}
        self._ctx.state.processes.mining = None
        report.completed.append(session.process_id)
        report.details["materials_mined"] = sum(stored.values())
        report.events.append(
            self.event(
                "mining_finished",
                f"Mining ended at {session.depth:.0f}m ({reason}); brought back {stored}",
                Importance.MEDIUM,
                depth=session.depth,
                reason=reason,
                materials=stored,
            )
        )
        logger.debug(f"{session.process_id} ended at {session.depth:.0f}m: {reason}")

    def cancel(self, process_id: str) -> bool:
        state = self._ctx.state
        session = state.processes.mining
        if session is None or session.process_id != process_id:
            return False
        state.processes.mining = None
        return True

    def active_ids(self) -> List[str]:
        session = self._ctx.state.processes.mining
        return [session.process_id] if session else []
