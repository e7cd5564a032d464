"""Unified lifecycle for every long-running process.

The manager dispatches ``start`` to the handler of the requested kind,
advances all handlers in a fixed order on ``tick`` and routes ``cancel`` to
whichever handler owns the id. Reports are merged and their events are
forwarded to the event bus together with a typed ``ProcessFinishedEvent``
per completed or failed process.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from idlefarm.combat.resolver import CombatResolver
from idlefarm.enums import ProcessKind
from idlefarm.events.domain_events import ProcessFinishedEvent
from idlefarm.events.event_bus import EventBus
from idlefarm.exceptions import ProcessError
from idlefarm.processes.adventure import AdventureHandler
from idlefarm.processes.base import ProcessContext, ProcessHandler, ProcessTickReport
from idlefarm.processes.crafting import CraftingHandler
from idlefarm.processes.crops import CropGrowthHandler
from idlefarm.processes.mining import MiningHandler
from idlefarm.processes.seed_catching import SeedCatchingHandler
from idlefarm.processes.training import TrainingHandler
from idlefarm.result import Result

logger = logging.getLogger(__name__)


class ProcessManager:
    """Advances crops, crafting, mining, seed catching, adventures and training."""

    def __init__(
        self,
        context: ProcessContext,
        event_bus: Optional[EventBus] = None,
        resolver: Optional[CombatResolver] = None,
    ) -> None:
        self._ctx = context
        self._event_bus = event_bus
        self._mining = MiningHandler(context)
        # Tick order: crops first so harvest decisions see fresh growth
        self._handlers: Dict[ProcessKind, ProcessHandler] = {
            ProcessKind.CROP_GROWTH: CropGrowthHandler(context),
            ProcessKind.CRAFTING: CraftingHandler(context),
            ProcessKind.MINING: self._mining,
            ProcessKind.SEED_CATCHING: SeedCatchingHandler(context),
            ProcessKind.ADVENTURE: AdventureHandler(context, resolver),
            ProcessKind.HELPER_TRAINING: TrainingHandler(context),
        }

    @property
    def context(self) -> ProcessContext:
        return self._ctx

    def handler(self, kind: ProcessKind) -> ProcessHandler:
        try:
            return self._handlers[kind]
        except KeyError as exc:
            raise ProcessError(f"No handler for process kind {kind}") from exc

    def start(self, kind: ProcessKind, spec: Any) -> Result[str, str]:
        result = self.handler(kind).start(spec)
        if result.is_ok():
            logger.debug(f"Started {kind.value} process {result.unwrap()}")
        else:
            logger.debug(f"Could not start {kind.value}: {result.error}")
        return result

    def tick(self, delta: float) -> ProcessTickReport:
        if delta < 0:
            raise ProcessError(f"Negative process delta: {delta}")
        report = ProcessTickReport()
        now = self._ctx.now
        for kind, handler in self._handlers.items():
            handler_report = handler.tick(delta)
            if self._event_bus is not None:
                for process_id in handler_report.completed:
                    self._event_bus.emit(ProcessFinishedEvent(process_id, kind, True, now))
                for process_id in handler_report.failed:
                    self._event_bus.emit(ProcessFinishedEvent(process_id, kind, False, now))
            report = report + handler_report
        if self._event_bus is not None:
            for event in report.events:
                self._event_bus.emit(event)
        return report

    def cancel(self, process_id: str) -> bool:
        for handler in self._handlers.values():
            if handler.cancel(process_id):
                logger.debug(f"Cancelled process {process_id}")
                return True
        return False

    def request_mining_exit(self) -> bool:
        return self._mining.request_exit()

    def active_ids(self, kind: Optional[ProcessKind] = None) -> List[str]:
        if kind is not None:
            return self.handler(kind).active_ids()
        return [pid for handler in self._handlers.values() for pid in handler.active_ids()]

    def is_busy(self, kind: ProcessKind) -> bool:
        return bool(self.handler(kind).active_ids())

    def get_debug_info(self) -> Dict[str, Any]:
        return {kind.value: h.get_debug_info() for kind, h in self._handlers.items()}

    def __repr__(self) -> str:
        return f"ProcessManager(active={len(self.active_ids())})"
