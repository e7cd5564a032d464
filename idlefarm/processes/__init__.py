"""Long-running processes and the manager that advances them."""

from idlefarm.processes.adventure import AdventureSpec
from idlefarm.processes.base import ProcessContext, ProcessHandler, ProcessTickReport
from idlefarm.processes.crafting import CraftingSpec
from idlefarm.processes.crops import CropSpec
from idlefarm.processes.manager import ProcessManager
from idlefarm.processes.mining import MiningSpec
from idlefarm.processes.seed_catching import SeedCatchingSpec
from idlefarm.processes.training import TrainingSpec

__all__ = [
    "AdventureSpec",
    "CraftingSpec",
    "CropSpec",
    "MiningSpec",
    "ProcessContext",
    "ProcessHandler",
    "ProcessManager",
    "ProcessTickReport",
    "SeedCatchingSpec",
    "TrainingSpec",
]
