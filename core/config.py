"""Game configuration constants"""
from data.loader import load_data

SERVICE_NAME = "mmorpgapi"

# Load data from JSON files (with fallback to hardcoded CONFIG)
_loaded_data = load_data()

_progression_data = _loaded_data.get("progression", {})
_xp_data = _progression_data.get("xp", {})
_power_data = _progression_data.get("power", {})
_combat_data = _progression_data.get("combat", {})
_global_data = _progression_data.get("global", {})

# Default enemy catalog, seeded into an empty store
ENEMY_CATALOG = _loaded_data.get("enemies", {}).get("enemies", [])

CONFIG = {
    # Experience and levels
    "XP_PER_LEVEL": _xp_data.get("xp_per_level", 100),
    "LEVEL_CAP": _xp_data.get("level_cap", 100),
    # Player power
    "BASE_POWER": _power_data.get("base_power", 10),
    "POWER_PER_LEVEL": _power_data.get("power_per_level", 5),
    "EQUIPMENT_POWER": _power_data.get("equipment_power", 2),
    # Combat
    "WIN_CHANCE_MIN": _combat_data.get("win_chance_min", 0.05),
    "WIN_CHANCE_MAX": _combat_data.get("win_chance_max", 0.95),
    "PROGRESS_PER_WIN": _combat_data.get("progress_per_win", 1),
    # Global progress
    "GLOBAL_GOAL": _global_data.get("goal", 1000),
    "GLOBAL_GOAL_GROWTH": _global_data.get("goal_growth", 1.5),
    # Input limits
    "MAX_NAME_LENGTH": 32,
    "MAX_TITLE_LENGTH": 200,
    "MAX_EQUIPMENT_ITEMS": 20,
    "MAX_LOOT_ENTRIES": 20,
}
