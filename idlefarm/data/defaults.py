"""Built-in balance tables for the headless runner and the test-suite.

These rows mirror the shape a table loader would hand to the simulation:
ids, a category, and plain fields. Material fields use the same
``"Wood x5;Stone x3"`` notation as the source spreadsheets so that the
normalization path in ``idlefarm.data.provider`` is always exercised.
"""

from __future__ import annotations

from typing import Any, Dict, List

from idlefarm.config.balance import SEED_TIER_MAP
from idlefarm.data.provider import InMemoryDataProvider

# (crop id, growth minutes, energy on harvest)
_CROPS = (
    ("turnip", 8, 1),
    ("carrot", 10, 2),
    ("radish", 15, 2),
    ("potato", 20, 3),
    ("cabbage", 25, 3),
    ("corn", 30, 4),
    ("tomato", 35, 4),
    ("strawberry", 40, 5),
    ("spinach", 40, 5),
    ("onion", 45, 6),
    ("garlic", 50, 6),
    ("cucumber", 55, 7),
    ("leek", 60, 7),
    ("wheat", 60, 8),
    ("asparagus", 70, 8),
    ("cauliflower", 80, 9),
    ("caisim", 80, 9),
    ("pumpkin", 120, 12),
    ("watermelon", 150, 14),
    ("honeydew", 150, 14),
    ("pineapple", 180, 16),
    ("beetroot", 180, 16),
    ("eggplant", 180, 16),
    ("soybean", 240, 20),
    ("yam", 240, 20),
)

_SEED_TIER = {seed: tier for tier, seeds in SEED_TIER_MAP.items() for seed in seeds}


def crop_rows() -> List[Dict[str, Any]]:
    return [
        {
            "id": crop_id,
            "category": "crop",
            "growth_time": minutes,
            "energy_gain": energy,
            "xp": max(1, energy),
            "seed_tier": _SEED_TIER.get(crop_id, 0),
        }
        for crop_id, minutes, energy in _CROPS
    ]


def blueprint_rows() -> List[Dict[str, Any]]:
    return [
        {
            "id": "blueprint_tower_reach_1",
            "category": "blueprint",
            "gold_cost": 25,
            "build_energy": 5,
        },
        {
            "id": "blueprint_forge",
            "category": "blueprint",
            "gold_cost": 100,
            "build_energy": 15,
            "build_materials": "Stone x10;Wood x10",
            "prerequisites": "tower_reach_1",
        },
        {
            "id": "blueprint_tower_reach_2",
            "category": "blueprint",
            "gold_cost": 150,
            "build_energy": 20,
            "build_materials": "Wood x20;Stone x15",
            "prerequisites": "tower_reach_1",
        },
        {
            "id": "blueprint_mine_entrance",
            "category": "blueprint",
            "gold_cost": 300,
            "build_energy": 30,
            "build_materials": "Stone x30;Wood x25",
            "prerequisites": "forge",
        },
        {
            "id": "blueprint_tower_reach_3",
            "category": "blueprint",
            "gold_cost": 600,
            "build_energy": 40,
            "build_materials": "Wood x60;Stone x40;Copper x10",
            "prerequisites": "tower_reach_2",
        },
        {
            "id": "blueprint_tower_reach_4",
            "category": "blueprint",
            "gold_cost": 2000,
            "build_energy": 80,
            "build_materials": "Wood x150;Iron x30",
            "prerequisites": "tower_reach_3;forge",
        },
        {
            "id": "blueprint_tower_reach_5",
            "category": "blueprint",
            "gold_cost": 6000,
            "build_energy": 120,
            "build_materials": "Wood x300;Iron x80;Silver x10",
            "prerequisites": "tower_reach_4",
        },
    ]


def upgrade_rows() -> List[Dict[str, Any]]:
    rows: List[Dict[str, Any]] = [
        # Tools
        {"id": "hoe", "kind": "tool", "gold_cost": 20},
        {"id": "hammer", "kind": "tool", "gold_cost": 50, "prerequisites": "hoe"},
        {"id": "axe", "kind": "tool", "gold_cost": 80, "prerequisites": "hammer"},
        {"id": "shovel", "kind": "tool", "gold_cost": 150, "prerequisites": "axe"},
        {"id": "pickaxe_1", "kind": "tool", "gold_cost": 100, "prerequisites": "mine_entrance"},
        # Nets
        {"id": "net_i", "kind": "net", "gold_cost": 100, "prerequisites": "tower_reach_1"},
        {"id": "net_ii", "kind": "net", "gold_cost": 400, "prerequisites": "net_i;tower_reach_2"},
        {"id": "golden_net", "kind": "net", "gold_cost": 1500, "prerequisites": "net_ii;tower_reach_3"},
        {"id": "crystal_net", "kind": "net", "gold_cost": 5000, "materials_cost": "Crystal x5", "prerequisites": "golden_net"},
        # Water
        {"id": "water_tank_ii", "kind": "water_tank", "gold_cost": 80, "materials_cost": "Wood x10"},
        {"id": "water_tank_iii", "kind": "water_tank", "gold_cost": 300, "materials_cost": "Stone x30", "prerequisites": "water_tank_ii"},
        {"id": "reservoir", "kind": "water_tank", "gold_cost": 1000, "materials_cost": "Stone x80;Iron x10", "prerequisites": "water_tank_iii"},
        {"id": "auto_pump_i", "kind": "auto_pump", "gold_cost": 200, "prerequisites": "water_tank_ii"},
        {"id": "auto_pump_ii", "kind": "auto_pump", "gold_cost": 600, "materials_cost": "Copper x10", "prerequisites": "auto_pump_i"},
        {"id": "auto_pump_iii", "kind": "auto_pump", "gold_cost": 1800, "materials_cost": "Iron x20", "prerequisites": "auto_pump_ii"},
        {"id": "crystal_pump", "kind": "auto_pump", "gold_cost": 5000, "materials_cost": "Crystal x5", "prerequisites": "auto_pump_iii"},
        # Seed automation
        {"id": "auto_catcher_tier_i", "kind": "auto_catcher", "gold_cost": 300, "prerequisites": "tower_reach_2"},
        {"id": "auto_catcher_tier_ii", "kind": "auto_catcher", "gold_cost": 1200, "prerequisites": "auto_catcher_tier_i;tower_reach_3"},
        {"id": "auto_catcher_tier_iii", "kind": "auto_catcher", "gold_cost": 4000, "prerequisites": "auto_catcher_tier_ii;tower_reach_4"},
        # Storage
        {"id": "material_crate_i", "kind": "storage", "gold_cost": 150, "materials_cost": "Wood x20"},
        {"id": "material_crate_ii", "kind": "storage", "gold_cost": 400, "materials_cost": "Wood x50", "prerequisites": "material_crate_i"},
        {"id": "material_warehouse", "kind": "storage", "gold_cost": 1200, "materials_cost": "Wood x100;Stone x100", "prerequisites": "material_crate_ii"},
        {"id": "material_depot", "kind": "storage", "gold_cost": 3000, "materials_cost": "Iron x50", "prerequisites": "material_warehouse"},
        {"id": "material_silo", "kind": "storage", "gold_cost": 8000, "materials_cost": "Silver x30", "prerequisites": "material_depot"},
        {"id": "grand_warehouse", "kind": "storage", "gold_cost": 20000, "materials_cost": "Crystal x20", "prerequisites": "material_silo"},
        {"id": "infinite_vault", "kind": "storage", "gold_cost": 50000, "materials_cost": "Mythril x20", "prerequisites": "grand_warehouse"},
        # Gnome housing
        {"id": "gnome_hut", "kind": "housing", "gold_cost": 150, "materials_cost": "Wood x20"},
        {"id": "gnome_house", "kind": "housing", "gold_cost": 500, "materials_cost": "Wood x50;Stone x30", "prerequisites": "gnome_hut"},
        {"id": "gnome_lodge", "kind": "housing", "gold_cost": 1500, "materials_cost": "Wood x100;Iron x20", "prerequisites": "gnome_house"},
        {"id": "gnome_hall", "kind": "housing", "gold_cost": 4000, "materials_cost": "Stone x200;Silver x10", "prerequisites": "gnome_lodge"},
        {"id": "gnome_village", "kind": "housing", "gold_cost": 10000, "materials_cost": "Crystal x10", "prerequisites": "gnome_hall"},
        # Starter weapons; higher levels are forged
        {"id": "spear_1", "kind": "weapon", "family": "spear", "level": 1, "gold_cost": 40},
        {"id": "sword_1", "kind": "weapon", "family": "sword", "level": 1, "gold_cost": 60, "prerequisites": "meadow_path"},
        {"id": "bow_1", "kind": "weapon", "family": "bow", "level": 1, "gold_cost": 80, "prerequisites": "pine_vale"},
        {"id": "crossbow_1", "kind": "weapon", "family": "crossbow", "level": 1, "gold_cost": 120, "prerequisites": "dark_forest"},
        {"id": "wand_1", "kind": "weapon", "family": "wand", "level": 1, "gold_cost": 200, "prerequisites": "mountain_pass"},
        # Armor
        {"id": "leather_vest", "kind": "armor", "defense": 10, "gold_cost": 120, "prerequisites": "meadow_path"},
    ]
    for row in rows:
        row["category"] = "upgrade"
        row["screen"] = "town"
    return rows


# (id, energy, plots added, tool, materials gained, repeatable, priority, prerequisite)
_CLEANUPS = (
    ("clear_weeds_1", 5, 2, None, None, False, 1.0, None),
    ("clear_weeds_2", 8, 2, None, None, False, 1.0, "clear_weeds_1"),
    ("clear_weeds_3", 10, 3, "hoe", None, False, 1.0, "clear_weeds_2"),
    ("clear_rocks_1", 12, 3, "hammer", "Stone x5", False, 1.0, "clear_weeds_2"),
    ("clear_stumps_1", 15, 3, "axe", "Wood x10", False, 1.0, "clear_weeds_3"),
    ("clear_weeds_4", 15, 3, "hoe", None, False, 0.9, "clear_weeds_3"),
    ("clear_rocks_2", 20, 4, "hammer", "Stone x8", False, 0.9, "clear_rocks_1"),
    ("clear_stumps_2", 25, 4, "axe", "Wood x15", False, 0.9, "clear_stumps_1"),
    ("clear_weeds_5", 25, 4, "hoe", None, False, 0.9, "clear_weeds_4"),
    ("clear_rocks_3", 30, 4, "hammer", "Stone x12", False, 0.8, "clear_rocks_2"),
    ("clear_stumps_3", 35, 5, "axe", "Wood x20", False, 0.8, "clear_stumps_2"),
    ("dig_roots_1", 35, 5, "shovel", "Wood x5", False, 0.8, "clear_stumps_2"),
    ("clear_weeds_6", 40, 5, "hoe", None, False, 0.8, "clear_weeds_5"),
    ("clear_rocks_4", 45, 5, "hammer", "Stone x15", False, 0.7, "clear_rocks_3"),
    ("clear_stumps_4", 50, 5, "axe", "Wood x25", False, 0.7, "clear_stumps_3"),
    ("dig_roots_2", 55, 6, "shovel", "Wood x8", False, 0.7, "dig_roots_1"),
    ("clear_weeds_7", 60, 6, "hoe", None, False, 0.7, "clear_weeds_6"),
    ("clear_rocks_5", 65, 6, "hammer", "Stone x20", False, 0.6, "clear_rocks_4"),
    ("clear_stumps_5", 70, 6, "axe", "Wood x30", False, 0.6, "clear_stumps_4"),
    ("dig_roots_3", 80, 6, "shovel", "Wood x10", False, 0.6, "dig_roots_2"),
    ("gather_sticks", 5, 0, None, "Wood x3", True, 0.5, None),
    ("break_stones", 5, 0, "hammer", "Stone x3", True, 0.5, None),
)


def cleanup_rows() -> List[Dict[str, Any]]:
    rows = []
    for cleanup_id, energy, plots, tool, gain, repeatable, priority, prereq in _CLEANUPS:
        rows.append(
            {
                "id": cleanup_id,
                "category": "cleanup",
                "energy_cost": energy,
                "plots_added": plots,
                "tool_required": tool,
                "materials_gain": gain,
                "repeatable": repeatable,
                "priority": priority,
                "xp": max(1, energy // 2),
                "prerequisites": prereq,
            }
        )
    return rows


def recipe_rows() -> List[Dict[str, Any]]:
    rows: List[Dict[str, Any]] = []
    families = ("spear", "sword", "bow", "crossbow", "wand")
    for level, (materials, heat, minutes) in enumerate(
        (
            ("Copper x5;Wood x5", 40, 10),
            ("Iron x8;Wood x10", 55, 20),
            ("Silver x6;Iron x10", 70, 30),
            ("Crystal x3;Silver x10", 85, 45),
        ),
        start=2,
    ):
        for family in families:
            rows.append(
                {
                    "id": f"craft_{family}_{level}",
                    "item": f"{family}_{level}",
                    "kind": "weapon",
                    "family": family,
                    "level": level,
                    "materials_cost": materials,
                    "heat_required": heat,
                    "craft_time": minutes,
                    "energy_cost": 5 * level,
                    "success_chance": 1.0,
                    "prerequisites": f"forge;{family}_{level - 1}",
                }
            )
    rows.extend(
        [
            {"id": "craft_pickaxe_2", "item": "pickaxe_2", "kind": "tool", "materials_cost": "Copper x10;Wood x5", "heat_required": 40, "craft_time": 15, "energy_cost": 10, "success_chance": 1.0, "prerequisites": "forge;pickaxe_1"},
            {"id": "craft_pickaxe_3", "item": "pickaxe_3", "kind": "tool", "materials_cost": "Iron x15;Wood x10", "heat_required": 60, "craft_time": 25, "energy_cost": 15, "success_chance": 1.0, "prerequisites": "forge;pickaxe_2"},
            {"id": "craft_crystal_pick", "item": "crystal_pick", "kind": "tool", "materials_cost": "Crystal x5;Iron x20", "heat_required": 80, "craft_time": 40, "energy_cost": 25, "success_chance": 0.7, "prerequisites": "forge;pickaxe_3"},
            {"id": "craft_abyss_seeker", "item": "abyss_seeker", "kind": "tool", "materials_cost": "Obsidian x2;Mythril x3", "heat_required": 95, "craft_time": 60, "energy_cost": 40, "success_chance": 0.5, "prerequisites": "forge;crystal_pick"},
            {"id": "craft_iron_plate", "item": "iron_plate", "kind": "armor", "defense": 25, "materials_cost": "Iron x12", "heat_required": 50, "craft_time": 20, "energy_cost": 10, "success_chance": 1.0, "prerequisites": "forge;leather_vest"},
            {"id": "craft_silver_mail", "item": "silver_mail", "kind": "armor", "defense": 40, "materials_cost": "Silver x10;Iron x10", "heat_required": 70, "craft_time": 35, "energy_cost": 20, "success_chance": 0.8, "prerequisites": "forge;iron_plate"},
        ]
    )
    for row in rows:
        row["category"] = "recipe"
        row["screen"] = "forge"
    return rows


# (route, boss, enemies, waves s/m/l, energy s/m/l, gold s/m/l, loot, boss material, prereq, min level)
_ROUTES = (
    ("meadow_path", "giant_slime", "slimes", (3, 5, 8), (10, 20, 35), (20, 40, 70), "Wood x5-10;Copper x2", "enchanted_wood", None, 1),
    ("pine_vale", "beetle_lord", "armored_insects;slimes", (4, 6, 10), (15, 30, 50), (35, 60, 100), "Wood x20-30;Iron x3;Pine Resin x1", "pine_resin", "meadow_path", 2),
    ("dark_forest", "alpha_wolf", "predatory_beasts;armored_insects", (4, 7, 12), (25, 45, 70), (60, 100, 160), "Wood x20-40;Iron x5;Shadow Bark x1", "shadow_bark", "pine_vale", 4),
    ("mountain_pass", "sky_serpent", "flying_predators;predatory_beasts", (5, 8, 14), (35, 60, 90), (90, 150, 240), "Stone x20-40;Iron x8;Silver x2", "mountain_stone", "dark_forest", 6),
    ("crystal_caves", "crystal_spider", "venomous_crawlers;flying_predators;armored_insects", (5, 9, 16), (45, 75, 110), (130, 210, 330), "Stone x30;Silver x4;Crystal x1-2", "cave_crystal", "mountain_pass", 8),
    ("frozen_tundra", "frost_wyrm", "living_plants;venomous_crawlers;predatory_beasts", (6, 10, 18), (60, 95, 140), (180, 290, 450), "Iron x15;Silver x6;Mythril x1", "frozen_heart", "crystal_caves", 10),
    ("volcano_core", "lava_titan", "slimes;armored_insects;predatory_beasts;flying_predators;venomous_crawlers;living_plants", (6, 11, 20), (80, 120, 180), (250, 400, 650), "Iron x20;Crystal x2;Obsidian x1", "molten_core", "frozen_tundra", 12),
)


def route_rows() -> List[Dict[str, Any]]:
    rows = []
    for route, boss, enemies, waves, energy, gold, loot, boss_material, prereq, level in _ROUTES:
        rows.append(
            {
                "id": route,
                "category": "route",
                "screen": "adventure",
                "boss": boss,
                "enemy_types": enemies,
                "wave_counts": dict(zip(("short", "medium", "long"), waves)),
                "energy_costs": dict(zip(("short", "medium", "long"), energy)),
                "gold_rewards": dict(zip(("short", "medium", "long"), gold)),
                "durations": {"short": 15, "medium": 30, "long": 60},
                "loot": loot,
                "boss_material": boss_material,
                "prerequisites": prereq,
                "min_level": level,
            }
        )
    return rows


def helper_rows() -> List[Dict[str, Any]]:
    gnomes = (
        ("gnome_pip", "Pip", "meadow_path"),
        ("gnome_bramble", "Bramble", "pine_vale"),
        ("gnome_tuck", "Tuck", "dark_forest"),
        ("gnome_moss", "Moss", "mountain_pass"),
        ("gnome_fern", "Fern", "crystal_caves"),
    )
    return [
        {
            "id": gnome_id,
            "category": "helper",
            "name": name,
            "screen": "adventure",
            "energy_cost": 10,
            "prerequisites": route,
        }
        for gnome_id, name, route in gnomes
    ]


def default_rows() -> List[Dict[str, Any]]:
    return (
        crop_rows()
        + blueprint_rows()
        + upgrade_rows()
        + cleanup_rows()
        + recipe_rows()
        + route_rows()
        + helper_rows()
    )


def create_default_provider() -> InMemoryDataProvider:
    """Provider loaded with every built-in table."""
    return InMemoryDataProvider(default_rows())
