"""
Game State - The canonical, serializable model of player progress.

Design principles:
- Immutable-friendly: transitions return new objects, inputs are never mutated
- Serializable: everything except the current enemy round-trips through a snapshot
- Derived values (premium flag, streak multiplier, speed flag) are computed, not stored
- Absent references are None, never a sentinel
"""

from __future__ import annotations
from copy import deepcopy
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum
import math

from ..config import MAX_SURVIVAL_LIVES, PREMIUM_ZONE


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class Rarity(Enum):
    """Equipment rarity, lowest to highest."""
    COMMON = "common"
    RARE = "rare"
    EPIC = "epic"
    LEGENDARY = "legendary"
    MYTHICAL = "mythical"


class ItemKind(Enum):
    """Discriminant for the Weapon | Armor variant."""
    WEAPON = "weapon"
    ARMOR = "armor"


class GameModeType(Enum):
    NORMAL = "normal"
    SPEED = "speed"
    SURVIVAL = "survival"


# Per-level stat growth for equipped items
WEAPON_ATTACK_PER_LEVEL = 10
ARMOR_DEFENSE_PER_LEVEL = 5

UPGRADE_COST_GROWTH = 1.5
SELL_PRICE_GROWTH = 1.2

# Knowledge streak
STREAK_STEP = 5
STREAK_BONUS_PER_STEP = 0.1
MAX_STREAK_MULTIPLIER = 2.0

# Seconds allowed per question
QUESTION_TIME_LIMIT = 5
SPEED_QUESTION_TIME_LIMIT = 3


class _Upgradable:
    """Shared upgrade rule for equipment items."""

    def upgraded(self):
        """Return a copy one level higher with grown cost and price."""
        return replace(
            self,
            level=self.level + 1,
            upgrade_cost=math.floor(self.upgrade_cost * UPGRADE_COST_GROWTH),
            sell_price=math.floor(self.sell_price * SELL_PRICE_GROWTH),
        )


@dataclass
class Weapon(_Upgradable):
    """An owned weapon instance."""
    id: str
    name: str
    rarity: Rarity
    base_attack: int
    level: int = 1
    upgrade_cost: int = 0
    sell_price: int = 0
    kind: ItemKind = field(default=ItemKind.WEAPON, init=False)

    @property
    def stat_bonus(self) -> int:
        """Attack contributed while equipped."""
        return self.base_attack + (self.level - 1) * WEAPON_ATTACK_PER_LEVEL


@dataclass
class Armor(_Upgradable):
    """An owned armor instance."""
    id: str
    name: str
    rarity: Rarity
    base_defense: int
    level: int = 1
    upgrade_cost: int = 0
    sell_price: int = 0
    kind: ItemKind = field(default=ItemKind.ARMOR, init=False)

    @property
    def stat_bonus(self) -> int:
        """Defense contributed while equipped."""
        return self.base_defense + (self.level - 1) * ARMOR_DEFENSE_PER_LEVEL


EquipmentItem = Weapon | Armor


@dataclass
class Enemy:
    """
    The opponent of the current encounter.

    Ephemeral: created at combat start, dropped at combat end,
    never persisted.
    """
    name: str
    zone: int
    hp: int
    max_hp: int
    attack: int
    defense: int

    @property
    def is_defeated(self) -> bool:
        return self.hp <= 0


@dataclass
class PlayerStats:
    """
    Player combat stats.

    hp/max_hp/attack/defense are derived from the base values, the
    equipped items and research. See engine_core.stats.
    """
    hp: int = 200
    max_hp: int = 200
    attack: int = 50
    defense: int = 0
    base_attack: int = 50
    base_defense: int = 0
    base_hp: int = 200

    @property
    def is_defeated(self) -> bool:
        return self.hp <= 0


@dataclass
class Inventory:
    """
    Owned equipment, keyed by item id.

    Equipped items are referenced by id, so an equipped reference
    always resolves to the current version of the item.
    """
    weapons: dict[str, Weapon] = field(default_factory=dict)
    armor: dict[str, Armor] = field(default_factory=dict)
    current_weapon_id: str | None = None
    current_armor_id: str | None = None

    @property
    def current_weapon(self) -> Weapon | None:
        if self.current_weapon_id is None:
            return None
        return self.weapons.get(self.current_weapon_id)

    @property
    def current_armor(self) -> Armor | None:
        if self.current_armor_id is None:
            return None
        return self.armor.get(self.current_armor_id)

    def find(self, item_id: str) -> EquipmentItem | None:
        """Look an item up across both collections."""
        if item_id in self.weapons:
            return self.weapons[item_id]
        return self.armor.get(item_id)

    def is_equipped(self, item: EquipmentItem) -> bool:
        if item.kind is ItemKind.WEAPON:
            return self.current_weapon_id == item.id
        return self.current_armor_id == item.id

    def with_item(self, item: EquipmentItem) -> Inventory:
        """Return new inventory with item added (or replaced by id)."""
        if item.kind is ItemKind.WEAPON:
            return replace(self, weapons={**self.weapons, item.id: item})
        return replace(self, armor={**self.armor, item.id: item})

    def with_items(self, items: list[EquipmentItem]) -> Inventory:
        inventory = self
        for item in items:
            inventory = inventory.with_item(item)
        return inventory

    def without_item(self, item: EquipmentItem) -> Inventory:
        """Return new inventory with item removed."""
        if item.kind is ItemKind.WEAPON:
            weapons = {k: v for k, v in self.weapons.items() if k != item.id}
            return replace(self, weapons=weapons)
        armor = {k: v for k, v in self.armor.items() if k != item.id}
        return replace(self, armor=armor)

    def equip(self, item: EquipmentItem) -> Inventory:
        """Return new inventory with item as the active reference."""
        if item.kind is ItemKind.WEAPON:
            return replace(self, current_weapon_id=item.id)
        return replace(self, current_armor_id=item.id)


@dataclass
class Research:
    level: int = 0
    tier: int = 0
    total_spent: int = 0


def _empty_rarity_stats() -> dict[str, int]:
    return {rarity.value: 0 for rarity in Rarity}


@dataclass
class CollectionBook:
    """
    Item names discovered so far.

    A name is recorded once no matter how many copies are found.
    """
    weapons: set[str] = field(default_factory=set)
    armor: set[str] = field(default_factory=set)
    total_weapons_found: int = 0
    total_armor_found: int = 0
    rarity_stats: dict[str, int] = field(default_factory=_empty_rarity_stats)

    def has_discovered(self, item: EquipmentItem) -> bool:
        names = self.weapons if item.kind is ItemKind.WEAPON else self.armor
        return item.name in names

    def record(self, item: EquipmentItem) -> CollectionBook:
        """Return book with item marked discovered; unchanged if already known."""
        if self.has_discovered(item):
            return self

        rarity_stats = dict(self.rarity_stats)
        rarity_stats[item.rarity.value] = rarity_stats.get(item.rarity.value, 0) + 1

        if item.kind is ItemKind.WEAPON:
            return replace(
                self,
                weapons=self.weapons | {item.name},
                total_weapons_found=self.total_weapons_found + 1,
                rarity_stats=rarity_stats,
            )
        return replace(
            self,
            armor=self.armor | {item.name},
            total_armor_found=self.total_armor_found + 1,
            rarity_stats=rarity_stats,
        )


@dataclass
class KnowledgeStreak:
    """Consecutive correct answers."""
    current: int = 0
    best: int = 0
    last_correct_time: datetime | None = None

    @property
    def multiplier(self) -> float:
        """Reward multiplier: +10% per 5 in a row, capped at 2x."""
        steps = self.current // STREAK_STEP
        return min(1 + steps * STREAK_BONUS_PER_STEP, MAX_STREAK_MULTIPLIER)


@dataclass
class GameMode:
    current: GameModeType = GameModeType.NORMAL
    survival_lives: int = MAX_SURVIVAL_LIVES
    max_survival_lives: int = MAX_SURVIVAL_LIVES

    @property
    def speed_mode_active(self) -> bool:
        return self.current is GameModeType.SPEED

    @property
    def is_survival(self) -> bool:
        return self.current is GameModeType.SURVIVAL

    @property
    def question_time_limit(self) -> int:
        """Seconds the player has to answer a question."""
        if self.speed_mode_active:
            return SPEED_QUESTION_TIME_LIMIT
        return QUESTION_TIME_LIMIT


@dataclass
class CategoryAccuracy:
    correct: int = 0
    total: int = 0


@dataclass
class Statistics:
    """Cumulative counters across sessions."""
    total_questions_answered: int = 0
    correct_answers: int = 0
    total_play_time: int = 0  # seconds
    zones_reached: int = 1
    items_collected: int = 0
    coins_earned: int = 0
    gems_earned: int = 0
    chests_opened: int = 0
    accuracy_by_category: dict[str, CategoryAccuracy] = field(default_factory=dict)
    session_start_time: datetime = field(default_factory=utc_now)


@dataclass
class AchievementReward:
    coins: int = 0
    gems: int = 0


@dataclass
class Achievement:
    """
    A catalog entry.

    The unlock predicate lives in the achievement engine; the state
    only tracks whether and when it was satisfied.
    """
    id: str
    name: str
    description: str = ""
    reward: AchievementReward | None = None
    unlocked: bool = False
    unlocked_at: datetime | None = None

    def unlock(self, at: datetime | None = None) -> Achievement:
        return replace(self, unlocked=True, unlocked_at=at or utc_now())


@dataclass
class ChestReward:
    """Result of opening a chest. Returned to the caller, never persisted."""
    type: ItemKind
    items: list[EquipmentItem] = field(default_factory=list)


@dataclass
class GameState:
    """
    Complete player progress at a point in time.

    This is the canonical state the engine operates on.
    All state changes go through the reducer.
    """
    coins: int = 100
    gems: int = 0
    zone: int = 1

    player_stats: PlayerStats = field(default_factory=PlayerStats)
    inventory: Inventory = field(default_factory=Inventory)

    # Combat (never persisted)
    current_enemy: Enemy | None = None
    in_combat: bool = False
    combat_log: list[str] = field(default_factory=list)

    research: Research = field(default_factory=Research)
    achievements: list[Achievement] = field(default_factory=list)
    collection_book: CollectionBook = field(default_factory=CollectionBook)
    knowledge_streak: KnowledgeStreak = field(default_factory=KnowledgeStreak)
    game_mode: GameMode = field(default_factory=GameMode)
    statistics: Statistics = field(default_factory=Statistics)

    @property
    def is_premium(self) -> bool:
        return self.zone >= PREMIUM_ZONE

    def get_achievement(self, achievement_id: str) -> Achievement | None:
        for achievement in self.achievements:
            if achievement.id == achievement_id:
                return achievement
        return None

    def without_combat(self) -> GameState:
        """Return state with the encounter and its log cleared."""
        return self._copy_with(current_enemy=None, in_combat=False, combat_log=[])

    def _copy_with(self, **kwargs) -> GameState:
        """Create a copy with some fields replaced."""
        return replace(self, **kwargs)

    def clone(self) -> GameState:
        """Deep copy the state."""
        return deepcopy(self)

    @classmethod
    def create(cls, achievements: list[Achievement] | None = None) -> GameState:
        """Factory for a brand new game."""
        return cls(achievements=list(achievements or []))
