"""Crop growth, one record per planted plot.

Growth rate depends on the plot's water level when each minute starts:

* above the wet threshold (0.3): full speed
* damp (0 < water <= 0.3): half speed
* dry, inside the drought grace window: quarter speed
* dry beyond the grace window: paused (progress never goes backwards)

A crop that stays dry for ``crops.wither_minutes`` withers. Withered crops
are terminal: they never become ready and are replaced by the next planting
on that plot. Ready crops stay in their plot until harvested.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import List, Tuple

from idlefarm.config import balance
from idlefarm.data.provider import StaticDataProvider
from idlefarm.enums import Importance, ProcessKind
from idlefarm.processes.base import ProcessHandler, ProcessTickReport, substeps
from idlefarm.result import Err, Ok, Result
from idlefarm.state.model import CropRecord, GameState

logger = logging.getLogger(__name__)

PROGRESS_EPSILON = 1e-9  # float sums of step/growth_time fall just short of 1.0


@dataclass(frozen=True)
class CropSpec:
    plot_id: str
    crop_id: str
    water_level: float = 0.0


def free_plot_ids(state: GameState) -> List[str]:
    """Plot ids that can take a new crop: never planted or withered."""
    crops = state.processes.crops
    free = []
    for number in range(1, state.progression.farm_plots + 1):
        plot_id = f"plot_{number}"
        crop = crops.get(plot_id)
        if crop is None or crop.withered:
            free.append(plot_id)
    return free


def harvest_rewards(data: StaticDataProvider, crop_id: str) -> Tuple[float, int]:
    """Energy and hero XP granted for harvesting one ``crop_id``."""
    row = data.get_by_id(crop_id) or {}
    return float(row.get("energy_gain") or 1), int(row.get("xp") or 1)


class CropGrowthHandler(ProcessHandler):
    kind = ProcessKind.CROP_GROWTH

    def start(self, spec: CropSpec) -> Result[str, str]:
        state = self._ctx.state
        crops = state.processes.crops
        if spec.plot_id not in free_plot_ids(state):
            return Err(f"Plot {spec.plot_id} is not free")

        row = self._ctx.data.get_by_id(spec.crop_id)
        if row is None or row.get("category") != "crop":
            return Err(f"Unknown crop {spec.crop_id!r}")

        crop_params = self._ctx.parameters.crops
        process_id = state.processes.allocate_id("crop")
        crops[spec.plot_id] = CropRecord(
            process_id=process_id,
            plot_id=spec.plot_id,
            crop_id=spec.crop_id,
            planted_at=self._ctx.now,
            growth_time=float(row.get("growth_time") or crop_params.default_growth_minutes),
            water_level=max(0.0, min(1.0, spec.water_level)),
            max_stages=crop_params.max_stages,
        )
        return Ok(process_id)

    def tick(self, delta: float) -> ProcessTickReport:
        report = ProcessTickReport()
        ready = 0
        for crop in self._ctx.state.processes.crops.values():
            if crop.withered or crop.ready_to_harvest:
                ready += int(crop.ready_to_harvest)
                continue
            for step in substeps(delta):
                self._grow(crop, step)
                if crop.withered or crop.ready_to_harvest:
                    break
            if crop.withered and not crop.completion_reported:
                crop.completion_reported = True
                report.failed.append(crop.process_id)
                report.events.append(
                    self.event(
                        "crop_withered",
                        f"{crop.crop_id} on {crop.plot_id} withered after "
                        f"{crop.drought_minutes:.0f} dry minutes",
                        Importance.HIGH,
                        plot_id=crop.plot_id,
                        crop_id=crop.crop_id,
                    )
                )
            elif crop.ready_to_harvest and not crop.completion_reported:
                crop.completion_reported = True
                ready += 1
                report.completed.append(crop.process_id)
                report.events.append(
                    self.event(
                        "crop_ready",
                        f"{crop.crop_id} on {crop.plot_id} is ready to harvest",
                        plot_id=crop.plot_id,
                        crop_id=crop.crop_id,
                    )
                )
        report.details["crops_ready"] = ready
        return report

    def _grow(self, crop: CropRecord, step: float) -> None:
        params = self._ctx.parameters.crops
        if crop.water_level > params.wet_threshold:
            rate = 1.0
            crop.drought_minutes = 0.0
        elif crop.water_level > 0:
            rate = 0.5
            crop.drought_minutes = 0.0
        else:
            crop.drought_minutes += step
            rate = 0.25 if crop.drought_minutes <= params.drought_grace_minutes else 0.0
            if crop.drought_minutes >= params.wither_minutes:
                crop.withered = True
                logger.debug(f"{crop.process_id} withered on {crop.plot_id}")
                return

        progress = crop.growth_progress + step / crop.growth_time * rate
        if progress >= 1.0 - PROGRESS_EPSILON:
            progress = 1.0
            crop.ready_to_harvest = True
        crop.growth_progress = progress
        crop.growth_stage = min(crop.max_stages, math.floor(progress * crop.max_stages))
        crop.water_level = max(0.0, crop.water_level - balance.WATER_DRAIN_PER_MINUTE * step)

    def cancel(self, process_id: str) -> bool:
        crops = self._ctx.state.processes.crops
        for plot_id, crop in list(crops.items()):
            if crop.process_id == process_id:
                del crops[plot_id]
                return True
        return False

    def active_ids(self) -> List[str]:
        return [
            crop.process_id
            for crop in self._ctx.state.processes.crops.values()
            if not crop.withered and not crop.ready_to_harvest
        ]
