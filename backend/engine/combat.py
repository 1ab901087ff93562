"""
Combat Engine - resolves a single attack of a player against an enemy.

The win chance comes from the ratio of the two power scores; one roll decides
the fight, and on a win every loot table entry is rolled independently.
"""
import random
from dataclasses import dataclass, field
from typing import Dict, List, Any

from core.config import CONFIG
from core.game_logic import apply_xp, player_power
from backend.models import Enemy, LootEntry, Player


def win_chance(attacker_power: float, defender_power: float) -> float:
    """
    Probability that the attacker wins.

    attacker / (attacker + defender), clamped to the configured bounds so no
    fight is ever certain.
    """
    if attacker_power <= 0 or defender_power <= 0:
        raise ValueError("power must be positive")
    chance = attacker_power / (attacker_power + defender_power)
    return max(CONFIG["WIN_CHANCE_MIN"], min(CONFIG["WIN_CHANCE_MAX"], chance))


def roll_loot(loot_table: List[LootEntry], rng: random.Random) -> Dict[str, int]:
    """Roll each entry once; drops of the same item add up"""
    drops: Dict[str, int] = {}
    for entry in loot_table:
        if rng.random() < entry.chance:
            drops[entry.item] = drops.get(entry.item, 0) + entry.quantity
    return drops


@dataclass
class CombatOutcome:
    """Result of one attack"""
    win: bool
    chance: float
    roll: float
    player_power: int
    enemy_power: int
    xp_gained: int
    xp: int
    level: int
    levels_gained: int
    loot: Dict[str, int] = field(default_factory=dict)

    @property
    def leveled_up(self) -> bool:
        return self.levels_gained > 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            'win': self.win,
            'chance': round(self.chance, 4),
            'roll': round(self.roll, 4),
            'player_power': self.player_power,
            'enemy_power': self.enemy_power,
            'xp_gained': self.xp_gained,
            'xp': self.xp,
            'level': self.level,
            'levels_gained': self.levels_gained,
            'leveled_up': self.leveled_up,
            'loot': self.loot,
        }


def resolve_attack(player: Player, enemy: Enemy, rng: random.Random) -> CombatOutcome:
    """
    Resolve an attack without touching storage.

    A loss leaves the player unchanged; a win grants the enemy's XP reward
    and rolls its loot table.
    """
    attacker = player_power(player.level, player.power, player.equipment)
    chance = win_chance(attacker, enemy.power)
    roll = rng.random()

    if roll >= chance:
        return CombatOutcome(
            win=False,
            chance=chance,
            roll=roll,
            player_power=attacker,
            enemy_power=enemy.power,
            xp_gained=0,
            xp=player.xp,
            level=player.level,
            levels_gained=0,
        )

    new_xp, new_level, levels_gained = apply_xp(player.xp, enemy.xp_reward)
    return CombatOutcome(
        win=True,
        chance=chance,
        roll=roll,
        player_power=attacker,
        enemy_power=enemy.power,
        xp_gained=enemy.xp_reward,
        xp=new_xp,
        level=new_level,
        levels_gained=levels_gained,
        loot=roll_loot(enemy.loot, rng),
    )
