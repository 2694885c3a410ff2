"""
Achievement Catalog - Definitions and unlock predicates.

Each definition pairs the data stored in GameState with a predicate
over the whole state. The engine evaluates predicates only for
entries that are still locked, so unlocks are never repeated.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Callable

from ..engine_core.ports import AchievementEngine
from ..engine_core.state import Achievement, AchievementReward, GameState, Rarity


@dataclass(frozen=True)
class AchievementDef:
    """A catalog entry with its unlock predicate."""
    id: str
    name: str
    description: str
    predicate: Callable[[GameState], bool]
    reward: AchievementReward | None = None

    def to_achievement(self) -> Achievement:
        return Achievement(
            id=self.id,
            name=self.name,
            description=self.description,
            reward=self.reward,
        )


ACHIEVEMENT_DEFS: list[AchievementDef] = [
    # Progression
    AchievementDef(
        "first_victory", "First Blood", "Defeat your first enemy",
        lambda s: s.statistics.zones_reached >= 2,
        AchievementReward(coins=50),
    ),
    AchievementDef(
        "zone_10", "Explorer", "Reach zone 10",
        lambda s: s.statistics.zones_reached >= 10,
        AchievementReward(coins=200, gems=10),
    ),
    AchievementDef(
        "zone_25", "Adventurer", "Reach zone 25",
        lambda s: s.statistics.zones_reached >= 25,
        AchievementReward(coins=500, gems=25),
    ),
    AchievementDef(
        "zone_50", "Legend of Hugoland", "Reach zone 50",
        lambda s: s.statistics.zones_reached >= 50,
        AchievementReward(coins=1000, gems=50),
    ),
    # Knowledge
    AchievementDef(
        "streak_5", "On Fire", "Answer 5 questions in a row correctly",
        lambda s: s.knowledge_streak.best >= 5,
        AchievementReward(gems=5),
    ),
    AchievementDef(
        "streak_10", "Unstoppable", "Answer 10 questions in a row correctly",
        lambda s: s.knowledge_streak.best >= 10,
        AchievementReward(gems=15),
    ),
    AchievementDef(
        "streak_25", "Genius", "Answer 25 questions in a row correctly",
        lambda s: s.knowledge_streak.best >= 25,
        AchievementReward(gems=50),
    ),
    AchievementDef(
        "scholar", "Scholar", "Answer 100 questions correctly",
        lambda s: s.statistics.correct_answers >= 100,
        AchievementReward(coins=300, gems=20),
    ),
    # Collection
    AchievementDef(
        "first_chest", "Treasure Hunter", "Open your first chest",
        lambda s: s.statistics.chests_opened >= 1,
        AchievementReward(coins=25),
    ),
    AchievementDef(
        "chests_25", "Hoarder", "Open 25 chests",
        lambda s: s.statistics.chests_opened >= 25,
        AchievementReward(gems=25),
    ),
    AchievementDef(
        "collector", "Collector", "Discover 10 different items",
        lambda s: s.statistics.items_collected >= 10,
        AchievementReward(gems=10),
    ),
    AchievementDef(
        "mythical_find", "Myth Made Real", "Discover a mythical item",
        lambda s: s.collection_book.rarity_stats.get(Rarity.MYTHICAL.value, 0) >= 1,
        AchievementReward(gems=100),
    ),
    # Research and wealth
    AchievementDef(
        "researcher", "Researcher", "Reach research level 10",
        lambda s: s.research.level >= 10,
        AchievementReward(gems=20),
    ),
    AchievementDef(
        "wealthy", "Wealthy", "Hold 10,000 coins at once",
        lambda s: s.coins >= 10000,
    ),
]


class CatalogAchievementEngine(AchievementEngine):
    """Achievement engine backed by a list of AchievementDefs."""

    def __init__(self, definitions: list[AchievementDef] | None = None):
        self.definitions = list(ACHIEVEMENT_DEFS if definitions is None else definitions)

    def initialize_achievements(self) -> list[Achievement]:
        return [d.to_achievement() for d in self.definitions]

    def check_achievements(self, state: GameState) -> list[Achievement]:
        unlocked = []
        for definition in self.definitions:
            existing = state.get_achievement(definition.id)
            if existing is not None and existing.unlocked:
                continue
            if definition.predicate(state):
                unlocked.append((existing or definition.to_achievement()).unlock())
        return unlocked
