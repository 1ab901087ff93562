"""Core game logic functions"""
from fractions import Fraction
from typing import Iterable, Optional, Tuple
from core.config import CONFIG


def level_for_xp(xp: int) -> int:
    """Level reached with the given accumulated XP (levels start at 1)"""
    if xp < 0:
        raise ValueError("xp must be non-negative")
    return min(CONFIG["LEVEL_CAP"], xp // CONFIG["XP_PER_LEVEL"] + 1)


def xp_for_level(level: int) -> int:
    """Minimum accumulated XP needed to reach a level"""
    if level < 1:
        raise ValueError("level must be at least 1")
    level = min(level, CONFIG["LEVEL_CAP"])
    return (level - 1) * CONFIG["XP_PER_LEVEL"]


def xp_to_next_level(xp: int) -> int:
    """XP still missing until the next level, 0 once the cap is reached"""
    level = level_for_xp(xp)
    if level >= CONFIG["LEVEL_CAP"]:
        return 0
    return xp_for_level(level + 1) - xp


def apply_xp(xp: int, amount: int) -> Tuple[int, int, int]:
    """
    Add XP and recompute the level.

    Returns:
        Tuple of (new_xp, new_level, levels_gained)
    """
    if amount < 0:
        raise ValueError("amount must be non-negative")
    old_level = level_for_xp(xp)
    new_xp = xp + amount
    new_level = level_for_xp(new_xp)
    return new_xp, new_level, new_level - old_level


def player_power(level: int, stored_power: Optional[int] = None, equipment: Iterable[str] = ()) -> int:
    """
    Calculate a player's combat power.

    An explicitly stored positive power wins; otherwise power grows with
    level and each equipped item.
    """
    if stored_power is not None and stored_power > 0:
        return stored_power
    base = CONFIG["BASE_POWER"] + (max(level, 1) - 1) * CONFIG["POWER_PER_LEVEL"]
    return base + len(list(equipment)) * CONFIG["EQUIPMENT_POWER"]


def next_goal(goal: int) -> int:
    """Goal for the stage after one with the given goal"""
    # Exact integer scaling; goals may grow past float range
    growth = Fraction(str(CONFIG["GLOBAL_GOAL_GROWTH"]))
    grown = goal * growth.numerator // growth.denominator
    return max(grown, goal + 1)


def advance_progress(current: int, goal: int, stage: int, amount: int) -> Tuple[int, int, int, int]:
    """
    Add progress to the global counter, advancing stages as goals are met.

    Remainders carry over into the next stage.

    Returns:
        Tuple of (current, goal, stage, stages_gained)
    """
    if amount < 0:
        raise ValueError("amount must be non-negative")
    if goal < 1:
        raise ValueError("goal must be at least 1")

    current += amount
    stages_gained = 0
    while current >= goal:
        current -= goal
        stage += 1
        stages_gained += 1
        goal = next_goal(goal)
    return current, goal, stage, stages_gained
