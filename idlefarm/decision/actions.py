"""Candidate actions proposed by the decision engine."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Mapping, Tuple

from idlefarm.enums import ActionKind, ScreenId


@dataclass(frozen=True, eq=False)
class GameAction:
    """One thing the simulated player could do right now.

    Attributes:
        kind: What the action does
        screen: Screen the hero must stand on to perform it
        target: Id the action works on (plot, seed, blueprint, route, screen...)
        duration: In-game minutes the action keeps the hero busy
        energy_cost: Energy charged when it executes
        gold_cost: Gold charged when it executes
        water_cost: Tank water charged when it executes
        material_costs: Materials consumed
        seed_costs: Seeds consumed
        expected_rewards: Rough reward estimate used by scoring ({"energy": 2})
        prerequisites: Ids that must be satisfied (structures, tools, routes...)
        params: Extra arguments for the executor (plot id, route length...)
        is_emergency: Set for emergency overrides; they skip scoring
        score: Filled in by the scorer
        reason: Short explanation for diagnostics
    """

    kind: ActionKind
    screen: ScreenId
    target: str = ""
    duration: float = 0.0
    energy_cost: float = 0.0
    gold_cost: int = 0
    water_cost: float = 0.0
    material_costs: Mapping[str, int] = field(default_factory=dict)
    seed_costs: Mapping[str, int] = field(default_factory=dict)
    expected_rewards: Mapping[str, float] = field(default_factory=dict)
    prerequisites: Tuple[str, ...] = ()
    params: Mapping[str, Any] = field(default_factory=dict)
    is_emergency: bool = False
    score: float = 0.0
    reason: str = ""

    @property
    def id(self) -> str:
        return f"{self.kind.value}:{self.target}" if self.target else self.kind.value

    def with_score(self, score: float, reason: str = "") -> "GameAction":
        return replace(self, score=score, reason=reason or self.reason)

    def as_emergency(self, reason: str) -> "GameAction":
        return replace(self, is_emergency=True, reason=reason)

    def describe(self) -> str:
        text = f"{self.kind.value} {self.target}".strip()
        if self.kind is ActionKind.MOVE:
            text = f"move to {self.target}"
        return text

    def __repr__(self) -> str:
        flag = "!" if self.is_emergency else ""
        return f"GameAction({flag}{self.id}@{self.screen.value}, score={self.score:.1f})"
