"""Seed catching at the tower.

A session has a fixed duration. Its expected yield is fixed when it starts::

    rate = BASE_CATCH_RATE / wind difficulty x net efficiency x catching skill
    expected = floor(rate x duration)

The actual yield is drawn uniformly from ``expected x [1 - spread, 1 + spread]``
when the session ends and spread over the seed kinds the wind level carries.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from idlefarm.config import balance
from idlefarm.enums import ProcessKind, ResourceKind
from idlefarm.processes.base import ProcessHandler, ProcessTickReport
from idlefarm.result import Err, Ok, Result
from idlefarm.state.model import GameState, SeedCatchingSession

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SeedCatchingSpec:
    duration: float


def wind_level(state: GameState) -> int:
    """Tower reach sets the wind level the hero can catch from."""
    level = state.progression.tower_level
    return max(1, min(level, max(balance.WIND_LEVELS)))


def best_net_efficiency(state: GameState) -> float:
    return max(
        (eff for net, eff in balance.NET_EFFICIENCY.items() if net in state.inventory.tools),
        default=1.0,
    )


def seed_pool_for(wind: int, known_crops: Optional[set] = None) -> Tuple[str, ...]:
    tiers, _ = balance.WIND_LEVELS[wind]
    seeds = [seed for tier in tiers for seed in balance.SEED_TIER_MAP.get(tier, ())]
    if known_crops is not None:
        seeds = [seed for seed in seeds if seed in known_crops]
    return tuple(seeds)


def catch_rate(state: GameState, catching_skill: float) -> float:
    """Seeds per minute for a manual catching session."""
    _, difficulty = balance.WIND_LEVELS[wind_level(state)]
    return balance.BASE_CATCH_RATE / difficulty * best_net_efficiency(state) * catching_skill


def expected_yield(state: GameState, duration: float, catching_skill: float) -> int:
    return math.floor(catch_rate(state, catching_skill) * duration)


class SeedCatchingHandler(ProcessHandler):
    kind = ProcessKind.SEED_CATCHING

    def start(self, spec: SeedCatchingSpec) -> Result[str, str]:
        state = self._ctx.state
        if state.processes.seed_catching is not None:
            return Err("A seed-catching session is already running")
        if state.progression.tower_level < 1:
            return Err("Seed catching needs a tower")
        if spec.duration <= 0:
            return Err(f"Invalid catching duration {spec.duration}")

        wind = wind_level(state)
        known = {row["id"] for row in self._ctx.data.get_by_category("crop")}
        pool = seed_pool_for(wind, known)
        if not pool:
            return Err(f"No known seeds blow at wind level {wind}")

        process_id = state.processes.allocate_id("catch")
        state.processes.seed_catching = SeedCatchingSession(
            process_id=process_id,
            duration=spec.duration,
            expected_yield=expected_yield(state, spec.duration, self._ctx.persona.catching_skill),
            wind_level=wind,
            seed_pool=pool,
        )
        return Ok(process_id)

    def tick(self, delta: float) -> ProcessTickReport:
        report = ProcessTickReport()
        state = self._ctx.state
        session = state.processes.seed_catching
        if session is None:
            return report

        session.elapsed += delta
        if session.elapsed < session.duration:
            return report

        caught = self._roll_yield(session)
        for seed, qty in caught.items():
            self._ctx.store.add(ResourceKind.SEEDS, qty, seed, reason="seed_catching")
        state.processes.seed_catching = None
        total = sum(caught.values())
        report.completed.append(session.process_id)
        report.details["seeds_caught"] = total
        report.events.append(
            self.event(
                "seeds_caught",
                f"Caught {total} seeds at wind level {session.wind_level}",
                seeds=dict(caught),
            )
        )
        logger.debug(f"{session.process_id} caught {total} (expected {session.expected_yield})")
        return report

    def _roll_yield(self, session: SeedCatchingSession) -> Dict[str, int]:
        rng = self._ctx.rng
        spread = self._ctx.parameters.seeds.yield_spread
        amount = round(session.expected_yield * rng.uniform(1.0 - spread, 1.0 + spread))
        caught: Dict[str, int] = {}
        for _ in range(amount):
            seed = rng.choice(session.seed_pool)
            caught[seed] = caught.get(seed, 0) + 1
        return caught

    def cancel(self, process_id: str) -> bool:
        state = self._ctx.state
        session = state.processes.seed_catching
        if session is None or session.process_id != process_id:
            return False
        state.processes.seed_catching = None
        return True

    def active_ids(self) -> List[str]:
        session = self._ctx.state.processes.seed_catching
        return [session.process_id] if session else []
