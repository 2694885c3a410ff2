"""
Derived-stat recomputation.

Attack, defense and max HP are never edited directly. They are
recomputed from base values, equipped items and research whenever
one of those changes, and HP is clamped to the new maximum.
"""

from __future__ import annotations
from dataclasses import replace
import math

from .ports import ContentGenerator
from .state import GameState, PlayerStats


def research_multiplier(state: GameState, content: ContentGenerator) -> float:
    bonus = content.calculate_research_bonus(state.research.level, state.research.tier)
    return 1 + bonus / 100


def recompute_player_stats(state: GameState, content: ContentGenerator) -> GameState:
    """Return state with derived player stats refreshed and HP clamped."""
    stats = state.player_stats
    weapon = state.inventory.current_weapon
    armor = state.inventory.current_armor

    weapon_attack = weapon.stat_bonus if weapon else 0
    armor_defense = armor.stat_bonus if armor else 0
    multiplier = research_multiplier(state, content)

    max_hp = math.floor(stats.base_hp * multiplier)
    new_stats = replace(
        stats,
        attack=math.floor((stats.base_attack + weapon_attack) * multiplier),
        defense=math.floor((stats.base_defense + armor_defense) * multiplier),
        max_hp=max_hp,
        hp=min(stats.hp, max_hp),
    )
    return state._copy_with(player_stats=new_stats)


def with_hp(stats: PlayerStats, hp: int) -> PlayerStats:
    """Return stats with HP set, kept within [0, max_hp]."""
    return replace(stats, hp=max(0, min(hp, stats.max_hp)))
