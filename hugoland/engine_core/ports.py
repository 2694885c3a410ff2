"""
Collaborator Ports - Interfaces the reducer depends on.

The engine only relies on these signatures and on the statistical
shape of what they return. Reference implementations live in
hugoland.content.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .state import Achievement, Armor, Enemy, GameState, Weapon


class ContentGenerator(ABC):
    """Produces equipment and enemy instances."""

    @abstractmethod
    def generate_weapon(self, high_tier_allowed: bool = False) -> Weapon:
        """Create a new weapon. Mythical rarity only when high_tier_allowed."""
        pass

    @abstractmethod
    def generate_armor(self, high_tier_allowed: bool = False) -> Armor:
        """Create a new armor piece. Mythical rarity only when high_tier_allowed."""
        pass

    @abstractmethod
    def generate_enemy(self, zone: int) -> Enemy:
        """Create an enemy scaled to the zone, at full HP."""
        pass

    @abstractmethod
    def calculate_research_bonus(self, level: int, tier: int) -> float:
        """Stat bonus in percent for a research level and tier."""
        pass


class AchievementEngine(ABC):
    """Owns the achievement catalog and its unlock predicates."""

    @abstractmethod
    def initialize_achievements(self) -> list[Achievement]:
        """Full catalog, all locked."""
        pass

    @abstractmethod
    def check_achievements(self, state: GameState) -> list[Achievement]:
        """
        Achievements satisfied by state that are not yet unlocked in it.

        Returned entries are already marked unlocked. Must be a pure
        function of state.
        """
        pass
