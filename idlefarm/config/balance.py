"""Balance constants that are not part of the per-run parameter set.

Tunable thresholds (check-in intervals, scoring weights, victory targets)
live in ``idlefarm.config.parameters``; the tables here describe the game
world itself and are shared by every run.
"""

from idlefarm.enums import HelperRole, ScreenId

# Starting state
STARTING_DAY = 1
STARTING_HOUR = 8
STARTING_PLOTS = 3
STARTING_GOLD = 75
STARTING_ENERGY = 3
STARTING_MAX_ENERGY = 100
STARTING_WATER = 0
STARTING_MAX_WATER = 20
STARTING_SEEDS = {"carrot": 1, "radish": 1}
STARTING_STRUCTURES = ("farm",)

# Every material the hero can hold; all start at 0 except stone
BASIC_MATERIALS = ("wood", "stone", "copper", "iron", "silver", "crystal", "mythril", "obsidian")
BOSS_MATERIALS = (
    "pine_resin",
    "shadow_bark",
    "mountain_stone",
    "cave_crystal",
    "frozen_heart",
    "molten_core",
    "enchanted_wood",
)
STARTING_MATERIALS = {name: 0 for name in BASIC_MATERIALS + BOSS_MATERIALS}
STARTING_MATERIALS["stone"] = 5

# Progression breakpoints (plot count -> farm stage)
FARM_STAGE_BREAKPOINTS = (20, 40, 65, 90)
FARM_STAGE_NAMES = {
    1: "Tutorial",
    2: "Small Hold",
    3: "Homestead",
    4: "Manor Grounds",
    5: "Great Estate",
}

# Screens reachable without building anything
BASE_SCREENS = (ScreenId.FARM, ScreenId.TOWN, ScreenId.ADVENTURE)

# Structures that open a screen; every tower_reach_N opens the tower
STRUCTURE_SCREENS = {
    "tower_reach": ScreenId.TOWER,
    "forge": ScreenId.FORGE,
    "mine_entrance": ScreenId.MINE,
}

# Hero levelling
BASE_XP_PER_LEVEL = 100  # XP needed for level N -> N+1 is N * BASE_XP_PER_LEVEL
HERO_BASE_HP = 100
HERO_HP_PER_LEVEL = 20

# Storage caps: base cap, then one cap per storage upgrade tier
MATERIAL_STORAGE_LIMITS = {
    "wood": (50, (100, 250, 500, 1000, 2500, 10000)),
    "stone": (50, (100, 250, 500, 1000, 2500, 10000)),
    "copper": (25, (50, 125, 250, 500, 1250, 5000)),
    "iron": (25, (50, 125, 250, 500, 1250, 5000)),
    "silver": (10, (20, 50, 100, 200, 500, 2000)),
    "crystal": (5, (10, 25, 50, 100, 250, 1000)),
    "mythril": (3, (6, 15, 30, 60, 150, 600)),
    "obsidian": (2, (4, 10, 20, 40, 100, 400)),
}
UNLIMITED_STORAGE = 999_999  # boss materials are never capped
DEFAULT_STORAGE_LIMIT = 50
STORAGE_UPGRADES = (
    "material_crate_i",
    "material_crate_ii",
    "material_warehouse",
    "material_depot",
    "material_silo",
    "grand_warehouse",
    "infinite_vault",  # top tier keeps the grand warehouse caps
)

# Town material trader: gold per unit and minimum lot size
MATERIAL_TRADE_RATES = {
    "stone": (2, 10),
    "wood": (3, 10),
    "copper": (5, 5),
    "iron": (10, 5),
    "silver": (25, 3),
    "crystal": (100, 1),
    "mythril": (500, 1),
    "obsidian": (1000, 1),
}

# Water
PUMP_WATER_GAIN = 20
PUMP_ENERGY_COST = 5
WATER_ENERGY_COST = 2
WATER_DRAIN_PER_MINUTE = 1 / 30  # a watered plot stays wet for 30 minutes
PLANTED_WATER_LEVEL = 1.0  # seedlings go in freshly watered
WATER_TANK_UPGRADES = {"water_tank_ii": 40, "water_tank_iii": 80, "reservoir": 150}
AUTO_PUMP_RATES = {  # share of water capacity generated per hour
    "auto_pump_i": 0.10,
    "auto_pump_ii": 0.20,
    "auto_pump_iii": 0.35,
    "crystal_pump": 0.50,
}

# Seed catching: wind level -> (seed tiers available, catch difficulty)
WIND_LEVELS = {
    1: ((0,), 1.0),
    2: ((0, 1), 1.1),
    3: ((0, 1, 2), 1.2),
    4: ((1, 2, 3), 1.3),
    5: ((2, 3, 4), 1.5),
    6: ((3, 4, 5), 1.7),
    7: ((4, 5, 6), 2.0),
    8: ((5, 6, 7), 2.3),
    9: ((6, 7, 8), 2.6),
    10: ((7, 8, 9), 3.0),
    11: ((8, 9), 3.5),
}
SEED_TIER_MAP = {
    0: ("turnip", "carrot", "radish"),
    1: ("potato", "cabbage", "corn"),
    2: ("tomato", "strawberry", "spinach"),
    3: ("onion", "garlic", "cucumber"),
    4: ("leek", "wheat", "asparagus"),
    5: ("cauliflower", "caisim"),
    6: ("pumpkin",),
    7: ("watermelon", "honeydew"),
    8: ("pineapple", "beetroot", "eggplant"),
    9: ("soybean", "yam"),
}
NET_EFFICIENCY = {
    "net_i": 1.2,
    "net_ii": 1.4,
    "golden_net": 1.6,
    "crystal_net": 1.8,
}
BASE_CATCH_RATE = 1.0  # seeds per minute at wind difficulty 1.0 with bare hands
AUTO_CATCHER_RATES = {  # seeds per minute
    "auto_catcher_tier_i": 0.1,
    "auto_catcher_tier_ii": 0.2,
    "auto_catcher_tier_iii": 0.5,
}

# Mining
MINING_DEPTH_PER_MINUTE = 10
MINING_DEPTH_TIER_SIZE = 500
MINING_SAMPLE_INTERVAL = 0.5  # minutes between material samples
MINING_MIN_ENERGY = 10
PICKAXE_EFFICIENCY = {  # energy drain reduction
    "pickaxe_1": 0.0,
    "pickaxe_2": 0.15,
    "pickaxe_3": 0.30,
    "crystal_pick": 0.45,
    "abyss_seeker": 0.60,
}
PICKAXE_MATERIAL_BONUS = {
    "pickaxe_1": 0.0,
    "pickaxe_2": 0.10,
    "pickaxe_3": 0.20,
    "crystal_pick": 0.30,
    "abyss_seeker": 0.50,
}
MINING_TIER_MATERIALS = {
    1: ("stone",),
    2: ("copper", "stone"),
    3: ("iron", "copper"),
    4: ("iron",),
    5: ("silver", "iron"),
    6: ("silver",),
    7: ("crystal", "silver"),
    8: ("crystal",),
    9: ("mythril", "crystal"),
    10: ("obsidian", "mythril"),
}

# Forge
FORGE_MAX_HEAT = 100.0
FORGE_HEAT_PER_WOOD = 10.0
FORGE_COOLING_PER_MINUTE = 1.0
FORGE_DEFAULT_HEAT_REQUIREMENT = 50.0
FORGE_MAX_QUEUE = 3
STOKE_HEAT_THRESHOLD = 30.0
STOKE_WOOD_COST = 5
STOKE_ENERGY_COST = 5

# Helpers
GNOME_HOUSING = (  # (upgrade id, capacity)
    ("gnome_hut", 1),
    ("gnome_house", 2),
    ("gnome_lodge", 3),
    ("gnome_hall", 4),
    ("gnome_village", 5),
)
HELPER_EFFICIENCY_PER_LEVEL = 0.2
HELPER_TRAINING_MINUTES_PER_LEVEL = 60
HELPER_TRAINING_GOLD_PER_LEVEL = 100
HELPER_ROLE_RATES = {
    HelperRole.WATERER: 5,  # plots per minute
    HelperRole.PUMP_OPERATOR: 20,  # water per hour
    HelperRole.SOWER: 3,  # seeds per minute
    HelperRole.HARVESTER: 4,  # plots per minute
    HelperRole.MINER: 0.15,  # drain reduction
    HelperRole.SEED_CATCHER: 0.1,  # bonus seed chance per hour
    HelperRole.FORAGER: 5,  # wood per hour
}
