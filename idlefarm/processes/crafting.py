"""Forge crafting queue.

The queue is FIFO and holds at most ``FORGE_MAX_QUEUE`` jobs. Only the head
job advances, and only during minutes in which the forge is at least as hot
as the job requires. Heat cools by ``FORGE_COOLING_PER_MINUTE`` every
minute. A finished job rolls its success chance (base items always
succeed); a failed roll consumes the job with no output.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List

from idlefarm.config import balance
from idlefarm.enums import Importance, ProcessKind
from idlefarm.processes.base import ProcessHandler, ProcessTickReport, substeps
from idlefarm.result import Err, Ok, Result
from idlefarm.state.model import ArmorPiece, CraftingJob, GameState

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CraftingSpec:
    recipe_id: str


def grant_item(state: GameState, job: CraftingJob) -> None:
    """Put a finished item into the inventory."""
    inventory = state.inventory
    if job.item_kind == "weapon" and job.family is not None:
        inventory.weapons[job.family] = max(inventory.weapons.get(job.family, 0), job.level)
    elif job.item_kind == "armor":
        inventory.armor[job.item_id] = ArmorPiece(job.item_id, job.defense)
        equipped = inventory.equipped_armor_piece
        if equipped is None or equipped.defense < job.defense:
            inventory.equipped_armor = job.item_id
    else:
        inventory.tools[job.item_id] = True


class CraftingHandler(ProcessHandler):
    kind = ProcessKind.CRAFTING

    def start(self, spec: CraftingSpec) -> Result[str, str]:
        state = self._ctx.state
        if "forge" not in state.progression.built_structures:
            return Err("No forge built")
        if len(state.processes.crafting_queue) >= balance.FORGE_MAX_QUEUE:
            return Err("Crafting queue is full")
        row = self._ctx.data.get_by_id(spec.recipe_id)
        if row is None or row.get("category") != "recipe":
            return Err(f"Unknown recipe {spec.recipe_id!r}")

        minutes = float(row.get("craft_time") or 1)
        process_id = state.processes.allocate_id("craft")
        state.processes.crafting_queue.append(
            CraftingJob(
                process_id=process_id,
                recipe_id=spec.recipe_id,
                item_id=row.get("item") or spec.recipe_id,
                item_kind=row.get("kind", "tool"),
                total_minutes=minutes,
                remaining_minutes=minutes,
                heat_required=float(
                    row.get("heat_required", balance.FORGE_DEFAULT_HEAT_REQUIREMENT)
                ),
                success_chance=float(row.get("success_chance", 1.0)),
                family=row.get("family"),
                level=int(row.get("level", 0)),
                defense=float(row.get("defense", 0.0)),
            )
        )
        return Ok(process_id)

    def tick(self, delta: float) -> ProcessTickReport:
        report = ProcessTickReport()
        processes = self._ctx.state.processes
        for step in substeps(delta):
            queue = processes.crafting_queue
            if queue and processes.forge_heat >= queue[0].heat_required:
                head = queue[0]
                head.remaining_minutes -= step
                if head.remaining_minutes <= 1e-9:
                    queue.pop(0)
                    self._finish(head, report)
            processes.forge_heat = max(
                0.0, processes.forge_heat - balance.FORGE_COOLING_PER_MINUTE * step
            )
        return report

    def _finish(self, job: CraftingJob, report: ProcessTickReport) -> None:
        succeeded = job.success_chance >= 1.0 or self._ctx.rng.random() < job.success_chance
        if succeeded:
            grant_item(self._ctx.state, job)
            report.completed.append(job.process_id)
            report.events.append(
                self.event(
                    "item_crafted",
                    f"Forged {job.item_id}",
                    Importance.MEDIUM,
                    item=job.item_id,
                )
            )
        else:
            report.failed.append(job.process_id)
            report.events.append(
                self.event(
                    "craft_failed",
                    f"Forging {job.item_id} failed ({job.success_chance:.0%} chance)",
                    Importance.HIGH,
                    item=job.item_id,
                )
            )
        logger.debug(f"{job.process_id} finished {job.item_id}: success={succeeded}")

    def cancel(self, process_id: str) -> bool:
        queue = self._ctx.state.processes.crafting_queue
        for index, job in enumerate(queue):
            if job.process_id == process_id:
                del queue[index]
                return True
        return False

    def active_ids(self) -> List[str]:
        return [job.process_id for job in self._ctx.state.processes.crafting_queue]
