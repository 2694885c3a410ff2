"""
Engine Core - Deterministic game state management.

The engine is the runtime that:
1. Holds the GameState model
2. Accepts intents as Actions
3. Applies them via the reducer
4. Reports feedback signals and follow-up actions to the session
"""

from .state import (
    Achievement,
    AchievementReward,
    Armor,
    CategoryAccuracy,
    ChestReward,
    CollectionBook,
    Enemy,
    EquipmentItem,
    GameMode,
    GameModeType,
    GameState,
    Inventory,
    ItemKind,
    KnowledgeStreak,
    PlayerStats,
    Rarity,
    Research,
    Statistics,
    Weapon,
)
from .action import Action, ActionType, ActionPayload, ActionResult, ErrorCode
from .feedback import (
    FeedbackChannel,
    FeedbackSignal,
    NullFeedbackChannel,
    RecordingFeedbackChannel,
    SignalKind,
)
from .ports import AchievementEngine, ContentGenerator
from .reducer import Reducer, apply_action
from .stats import recompute_player_stats

__all__ = [
    "Achievement",
    "AchievementReward",
    "Armor",
    "CategoryAccuracy",
    "ChestReward",
    "CollectionBook",
    "Enemy",
    "EquipmentItem",
    "GameMode",
    "GameModeType",
    "GameState",
    "Inventory",
    "ItemKind",
    "KnowledgeStreak",
    "PlayerStats",
    "Rarity",
    "Research",
    "Statistics",
    "Weapon",
    "Action",
    "ActionType",
    "ActionPayload",
    "ActionResult",
    "ErrorCode",
    "FeedbackChannel",
    "FeedbackSignal",
    "NullFeedbackChannel",
    "RecordingFeedbackChannel",
    "SignalKind",
    "AchievementEngine",
    "ContentGenerator",
    "Reducer",
    "apply_action",
    "recompute_player_stats",
]
