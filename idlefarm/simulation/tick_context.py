"""TickContext - explicit per-tick state for pipeline steps.

Created at the start of each tick and passed through every step, so data
computed in one phase (the ranked actions, the stage before the tick) is
handed to later phases explicitly instead of through engine attributes.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from idlefarm.decision.actions import GameAction
from idlefarm.decision.checkin import CheckInDecision
from idlefarm.enums import GamePhase
from idlefarm.processes.base import ProcessTickReport
from idlefarm.systems.base import SystemResult


@dataclass
class TickContext:
    """Per-tick state shared by the pipeline steps.

    Attributes:
        delta: In-game minutes this tick covers
        stage_before: Farm stage when the tick started
        phase_before: Game phase when the tick started
        process_report: What the process manager reported
        system_results: Result per system name
        check_in: The check-in decision (None until the decide step runs)
        decided: Ranked actions returned by the decision engine
        executed: Actions that were applied, in order
        failed: Actions that could not be applied, with the reason
        skipped: Actions dropped because the hero left their screen
        is_complete: Victory reached
        is_stuck: No progress for too long
    """

    delta: float = 1.0
    stage_before: int = 1
    phase_before: GamePhase = GamePhase.TUTORIAL
    process_report: Optional[ProcessTickReport] = None
    system_results: Dict[str, SystemResult] = field(default_factory=dict)
    check_in: Optional[CheckInDecision] = None
    decided: List[GameAction] = field(default_factory=list)
    executed: List[GameAction] = field(default_factory=list)
    failed: List[Tuple[GameAction, str]] = field(default_factory=list)
    skipped: List[GameAction] = field(default_factory=list)
    is_complete: bool = False
    is_stuck: bool = False
