"""JSON-ready views of snapshots, tick results and run summaries.

The dictionaries only contain plain JSON types (sets become sorted lists,
enums become their string values) so they can go straight to ``orjson``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict

import orjson

from idlefarm.events.domain_events import GameEvent
from idlefarm.state.model import GameState

if TYPE_CHECKING:
    from idlefarm.simulation.engine import RunSummary, TickResult


def state_to_dict(state: GameState) -> Dict[str, Any]:
    clock = state.clock
    resources = state.resources
    progression = state.progression
    inventory = state.inventory
    processes = state.processes
    return {
        "clock": {
            "day": clock.day,
            "hour": clock.hour,
            "minute": clock.minute,
            "total_minutes": clock.total_minutes,
            "speed": clock.speed,
        },
        "resources": {
            "energy": {"current": resources.energy.current, "max": resources.energy.maximum},
            "water": {"current": resources.water.current, "max": resources.water.maximum},
            "gold": resources.gold,
            "seeds": {k: v for k, v in sorted(resources.seeds.items()) if v},
            "materials": {k: v for k, v in sorted(resources.materials.items()) if v},
        },
        "progression": {
            "hero_level": progression.hero_level,
            "experience": progression.experience,
            "farm_plots": progression.farm_plots,
            "farm_stage": progression.farm_stage,
            "phase": progression.phase.value,
            "unlocked_screens": sorted(s.value for s in progression.unlocked_screens),
            "built_structures": sorted(progression.built_structures),
            "unlocked_upgrades": list(progression.unlocked_upgrades),
            "completed_cleanups": sorted(progression.completed_cleanups),
            "completed_adventures": sorted(progression.completed_adventures),
        },
        "inventory": {
            "tools": sorted(inventory.tools),
            "weapons": {family.value: level for family, level in inventory.weapons.items()},
            "armor": sorted(inventory.armor),
            "equipped_armor": inventory.equipped_armor,
            "blueprints": {
                bp_id: {"purchased": record.purchased, "built": record.built}
                for bp_id, record in sorted(inventory.blueprints.items())
            },
        },
        "processes": {
            "crops": [
                {
                    "plot_id": crop.plot_id,
                    "crop_id": crop.crop_id,
                    "progress": round(crop.growth_progress, 3),
                    "water": round(crop.water_level, 3),
                    "ready": crop.ready_to_harvest,
                    "withered": crop.withered,
                }
                for crop in processes.crops.values()
            ],
            "crafting_queue": [job.item_id for job in processes.crafting_queue],
            "forge_heat": processes.forge_heat,
            "mining_depth": processes.mining.depth if processes.mining else None,
            "seed_catching": processes.seed_catching is not None,
            "adventure": processes.adventure.route_id if processes.adventure else None,
        },
        "helpers": [
            {
                "id": gnome.id,
                "name": gnome.name,
                "role": gnome.role.value if gnome.role else None,
                "level": gnome.level,
                "task": gnome.current_task,
            }
            for gnome in state.helpers.gnomes.values()
        ],
        "location": {
            "screen": state.location.current_screen.value,
            "time_on_screen": state.location.time_on_screen,
            "last_navigation_reason": state.location.last_navigation_reason,
        },
        "tracking": {
            "actions_executed": state.tracking.actions_executed,
            "actions_failed": state.tracking.actions_failed,
            "wasted_materials": dict(state.tracking.wasted_materials),
        },
    }


def event_to_dict(event: GameEvent) -> Dict[str, Any]:
    return {
        "timestamp": event.timestamp,
        "type": event.type,
        "description": event.description,
        "importance": event.importance.value,
        "data": {k: (v.value if hasattr(v, "value") else v) for k, v in event.data.items()},
    }


def tick_result_to_dict(result: "TickResult") -> Dict[str, Any]:
    return {
        "delta_time": result.delta_time,
        "executed_actions": [action.describe() for action in result.executed_actions],
        "events": [event_to_dict(event) for event in result.events],
        "is_complete": result.is_complete,
        "is_stuck": result.is_stuck,
        "state": state_to_dict(result.state_snapshot),
    }


def summary_to_dict(summary: "RunSummary") -> Dict[str, Any]:
    return {
        "run_id": summary.run_id,
        "ticks": summary.ticks,
        "days": summary.days,
        "completed": summary.completed,
        "stuck": summary.stuck,
        "faults": summary.faults,
        "actions_executed": summary.actions_executed,
        "actions_failed": summary.actions_failed,
        "event_counts": dict(sorted(summary.event_counts.items())),
        "final_state": state_to_dict(summary.final_state),
    }


def to_json(data: Dict[str, Any], pretty: bool = False) -> bytes:
    option = orjson.OPT_INDENT_2 if pretty else 0
    return orjson.dumps(data, option=option)
