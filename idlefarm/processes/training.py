"""Helper training: a gnome studies for a while and gains one level."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List

from idlefarm.config import balance
from idlefarm.enums import Importance, ProcessKind
from idlefarm.processes.base import ProcessHandler, ProcessTickReport
from idlefarm.result import Err, Ok, Result
from idlefarm.state.model import TrainingSession

MAX_HELPER_LEVEL = 10


@dataclass(frozen=True)
class TrainingSpec:
    gnome_id: str


def training_cost(level: int) -> int:
    return balance.HELPER_TRAINING_GOLD_PER_LEVEL * level


class TrainingHandler(ProcessHandler):
    kind = ProcessKind.HELPER_TRAINING

    def start(self, spec: TrainingSpec) -> Result[str, str]:
        state = self._ctx.state
        gnome = state.helpers.gnomes.get(spec.gnome_id)
        if gnome is None:
            return Err(f"Unknown gnome {spec.gnome_id!r}")
        if gnome.level >= MAX_HELPER_LEVEL:
            return Err(f"{gnome.name} is fully trained")
        if any(s.gnome_id == spec.gnome_id for s in state.processes.training):
            return Err(f"{gnome.name} is already training")

        process_id = state.processes.allocate_id("training")
        state.processes.training.append(
            TrainingSession(
                process_id=process_id,
                gnome_id=spec.gnome_id,
                target_level=gnome.level + 1,
                remaining_minutes=float(balance.HELPER_TRAINING_MINUTES_PER_LEVEL * gnome.level),
            )
        )
        gnome.current_task = "training"
        return Ok(process_id)

    def tick(self, delta: float) -> ProcessTickReport:
        report = ProcessTickReport()
        state = self._ctx.state
        still_training = []
        for session in state.processes.training:
            session.remaining_minutes -= delta
            if session.remaining_minutes > 1e-9:
                still_training.append(session)
                continue
            gnome = state.helpers.gnomes.get(session.gnome_id)
            if gnome is None:
                report.failed.append(session.process_id)
                report.events.append(
                    self.event(
                        "training_failed",
                        f"Trainee {session.gnome_id} is gone",
                        Importance.HIGH,
                        gnome=session.gnome_id,
                    )
                )
                continue
            gnome.level = max(gnome.level, session.target_level)
            gnome.current_task = gnome.role.value if gnome.role else "idle"
            report.completed.append(session.process_id)
            report.events.append(
                self.event(
                    "helper_trained",
                    f"{gnome.name} reached level {gnome.level}",
                    Importance.MEDIUM,
                    gnome=gnome.id,
                    level=gnome.level,
                )
            )
        state.processes.training = still_training
        return report

    def cancel(self, process_id: str) -> bool:
        state = self._ctx.state
        for index, session in enumerate(state.processes.training):
            if session.process_id == process_id:
                del state.processes.training[index]
                return True
        return False

    def active_ids(self) -> List[str]:
        return [s.process_id for s in self._ctx.state.processes.training]
