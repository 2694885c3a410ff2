"""
Pydantic Schemas for saved snapshots.

These models define the exact shape of the persisted blob. Keys are
camelCase so saves stay compatible with the browser-era storage format.

Every field has a default: a snapshot written by an older version
validates and has its missing fields filled in. Combat fields are
written as empty and ignored on load.
"""

from datetime import datetime
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from ..engine_core.state import GameModeType, Rarity

SNAPSHOT_VERSION = 1


class SnapshotModel(BaseModel):
    """
    Base for all snapshot models.

    Keys are camelCase, unknown keys are ignored and nulls take the
    default, so a partial or hand-edited save still loads.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    @model_validator(mode="before")
    @classmethod
    def _drop_nulls(cls, data: Any) -> Any:
        """A null value falls back to the field default."""
        if isinstance(data, dict):
            return {key: value for key, value in data.items() if value is not None}
        return data


# =============================================================================
# Player and equipment
# =============================================================================

class PlayerStatsSnapshot(SnapshotModel):
    hp: int = 200
    max_hp: int = 200
    atk: int = 50
    defense: int = Field(default=0, alias="def")
    base_atk: int = 50
    base_def: int = 0
    base_hp: int = 200


class WeaponSnapshot(SnapshotModel):
    id: str
    name: str
    rarity: Rarity = Rarity.COMMON
    level: int = 1
    base_atk: int = 0
    upgrade_cost: int = 0
    sell_price: int = 0
    kind: Literal["weapon"] = "weapon"

    @field_validator("level")
    @classmethod
    def _level_at_least_one(cls, value: int) -> int:
        return max(1, value)


class ArmorSnapshot(SnapshotModel):
    id: str
    name: str
    rarity: Rarity = Rarity.COMMON
    level: int = 1
    base_def: int = 0
    upgrade_cost: int = 0
    sell_price: int = 0
    kind: Literal["armor"] = "armor"

    @field_validator("level")
    @classmethod
    def _level_at_least_one(cls, value: int) -> int:
        return max(1, value)


class InventorySnapshot(SnapshotModel):
    """Equipped items are stored whole, resolved by id on load."""
    weapons: list[WeaponSnapshot] = Field(default_factory=list)
    armor: list[ArmorSnapshot] = Field(default_factory=list)
    current_weapon: Optional[WeaponSnapshot] = None
    current_armor: Optional[ArmorSnapshot] = None


# =============================================================================
# Progression
# =============================================================================

class ResearchSnapshot(SnapshotModel):
    level: int = 0
    tier: int = 0
    total_spent: int = 0

    @field_validator("level", "tier", "total_spent")
    @classmethod
    def _not_negative(cls, value: int) -> int:
        return max(0, value)


class AchievementRewardSnapshot(SnapshotModel):
    coins: int = 0
    gems: int = 0


class AchievementSnapshot(SnapshotModel):
    id: str
    name: str = ""
    description: str = ""
    reward: Optional[AchievementRewardSnapshot] = None
    unlocked: bool = False
    unlocked_at: Optional[datetime] = None


def _empty_rarity_stats() -> dict[str, int]:
    return {rarity.value: 0 for rarity in Rarity}


class CollectionBookSnapshot(SnapshotModel):
    """Discovered names are stored as name -> true maps."""
    weapons: dict[str, bool] = Field(default_factory=dict)
    armor: dict[str, bool] = Field(default_factory=dict)
    total_weapons_found: int = 0
    total_armor_found: int = 0
    rarity_stats: dict[str, int] = Field(default_factory=_empty_rarity_stats)


class KnowledgeStreakSnapshot(SnapshotModel):
    current: int = 0
    best: int = 0
    multiplier: float = 1.0  # derived, written for readers of the blob
    last_correct_time: Optional[datetime] = None

    @field_validator("current", "best")
    @classmethod
    def _not_negative(cls, value: int) -> int:
        return max(0, value)


class GameModeSnapshot(SnapshotModel):
    current: GameModeType = GameModeType.NORMAL
    speed_mode_active: bool = False  # derived
    survival_lives: int = 3
    max_survival_lives: int = 3


class CategoryAccuracySnapshot(SnapshotModel):
    correct: int = 0
    total: int = 0


class StatisticsSnapshot(SnapshotModel):
    total_questions_answered: int = 0
    correct_answers: int = 0
    total_play_time: int = 0
    zones_reached: int = 1
    items_collected: int = 0
    coins_earned: int = 0
    gems_earned: int = 0
    chests_opened: int = 0
    accuracy_by_category: dict[str, CategoryAccuracySnapshot] = Field(default_factory=dict)
    session_start_time: Optional[datetime] = None  # reset on load


# =============================================================================
# Root
# =============================================================================

class GameSnapshot(SnapshotModel):
    """
    The whole persisted game.

    achievements is None when the save predates the achievement
    system; the catalog is then created fresh.
    """
    version: int = SNAPSHOT_VERSION
    coins: int = 100
    gems: int = 0
    zone: int = 1
    player_stats: PlayerStatsSnapshot = Field(default_factory=PlayerStatsSnapshot)
    inventory: InventorySnapshot = Field(default_factory=InventorySnapshot)

    # Combat is never persisted
    current_enemy: Optional[Any] = None
    in_combat: bool = False
    combat_log: list[str] = Field(default_factory=list)

    research: ResearchSnapshot = Field(default_factory=ResearchSnapshot)
    is_premium: bool = False  # derived from zone
    achievements: Optional[list[AchievementSnapshot]] = None
    collection_book: CollectionBookSnapshot = Field(default_factory=CollectionBookSnapshot)
    knowledge_streak: KnowledgeStreakSnapshot = Field(default_factory=KnowledgeStreakSnapshot)
    game_mode: GameModeSnapshot = Field(default_factory=GameModeSnapshot)
    statistics: StatisticsSnapshot = Field(default_factory=StatisticsSnapshot)

    @field_validator("coins", "gems")
    @classmethod
    def _not_negative(cls, value: int) -> int:
        return max(0, value)

    @field_validator("zone")
    @classmethod
    def _zone_at_least_one(cls, value: int) -> int:
        return max(1, value)
