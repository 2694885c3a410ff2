"""
Content - Reference implementations of the engine's collaborators.

This module contains:
- A seedable generator for weapons, armor and enemies
- The research bonus formula
- The achievement catalog and its predicates
"""

from .generators import RandomContentGenerator, RARITY_PROFILES, RarityProfile
from .achievements import ACHIEVEMENT_DEFS, AchievementDef, CatalogAchievementEngine

__all__ = [
    "RandomContentGenerator",
    "RARITY_PROFILES",
    "RarityProfile",
    "ACHIEVEMENT_DEFS",
    "AchievementDef",
    "CatalogAchievementEngine",
]
