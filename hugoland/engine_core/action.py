"""
Action System - Intents, payloads, and results.

Actions represent:
1. Player intents (start combat, attack, equip, upgrade, sell, open chest)
2. Progression intents (research, game mode)
3. System transitions (play-time tick, achievement check, reset)

All state changes flow through actions.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from .feedback import FeedbackSignal


class ActionType(Enum):
    """Types of actions in the system."""
    # Combat
    START_COMBAT = "start_combat"
    ATTACK = "attack"

    # Equipment
    EQUIP = "equip"
    UPGRADE_ITEM = "upgrade_item"
    SELL_ITEM = "sell_item"

    # Economy and progression
    UPGRADE_RESEARCH = "upgrade_research"
    OPEN_CHEST = "open_chest"
    CHECK_ACHIEVEMENTS = "check_achievements"
    SET_GAME_MODE = "set_game_mode"

    # System
    TICK = "tick"
    RESET_GAME = "reset_game"


class ErrorCode(str, Enum):
    """Reasons an action was rejected. The state is left untouched."""
    NOT_IN_COMBAT = "NOT_IN_COMBAT"
    INSUFFICIENT_COINS = "INSUFFICIENT_COINS"
    INSUFFICIENT_GEMS = "INSUFFICIENT_GEMS"
    UNKNOWN_ITEM = "UNKNOWN_ITEM"
    ITEM_EQUIPPED = "ITEM_EQUIPPED"
    INVALID_MODE = "INVALID_MODE"
    INVALID_COST = "INVALID_COST"
    NO_HANDLER = "NO_HANDLER"
    HANDLER_ERROR = "HANDLER_ERROR"


@dataclass
class ActionPayload:
    """
    Payload for an action - contains the action parameters.

    Different action types use different fields.
    Validation happens in the reducer.
    """
    # Attack
    hit: bool | None = None
    category: str | None = None

    # Equipment
    item_id: str | None = None

    # Chest
    cost: int | None = None

    # Game mode
    mode: str | None = None

    # Tick
    seconds: int = 1


@dataclass
class Action:
    """
    A complete intent to be applied to the game state.

    delay is only meaningful for follow-up actions: it asks the
    session to apply the action that many seconds after the
    triggering transition has settled.
    """
    action_type: ActionType
    payload: ActionPayload = field(default_factory=ActionPayload)
    delay: float = 0.0

    @classmethod
    def start_combat(cls) -> Action:
        return cls(action_type=ActionType.START_COMBAT)

    @classmethod
    def attack(cls, hit: bool, category: str | None = None) -> Action:
        """Factory for an answered question."""
        return cls(
            action_type=ActionType.ATTACK,
            payload=ActionPayload(hit=hit, category=category),
        )

    @classmethod
    def equip(cls, item_id: str) -> Action:
        return cls(action_type=ActionType.EQUIP, payload=ActionPayload(item_id=item_id))

    @classmethod
    def upgrade_item(cls, item_id: str) -> Action:
        return cls(action_type=ActionType.UPGRADE_ITEM, payload=ActionPayload(item_id=item_id))

    @classmethod
    def sell_item(cls, item_id: str) -> Action:
        return cls(action_type=ActionType.SELL_ITEM, payload=ActionPayload(item_id=item_id))

    @classmethod
    def upgrade_research(cls) -> Action:
        return cls(action_type=ActionType.UPGRADE_RESEARCH)

    @classmethod
    def open_chest(cls, cost: int) -> Action:
        return cls(action_type=ActionType.OPEN_CHEST, payload=ActionPayload(cost=cost))

    @classmethod
    def check_achievements(cls, delay: float = 0.0) -> Action:
        return cls(action_type=ActionType.CHECK_ACHIEVEMENTS, delay=delay)

    @classmethod
    def set_game_mode(cls, mode: str) -> Action:
        """Factory for a mode switch ("normal", "speed" or "survival")."""
        return cls(action_type=ActionType.SET_GAME_MODE, payload=ActionPayload(mode=mode))

    @classmethod
    def tick(cls, seconds: int = 1) -> Action:
        return cls(action_type=ActionType.TICK, payload=ActionPayload(seconds=seconds))

    @classmethod
    def reset_game(cls) -> Action:
        return cls(action_type=ActionType.RESET_GAME)


@dataclass
class ActionResult:
    """
    Result of applying an action.

    Contains:
    - Whether action succeeded
    - New state (if succeeded)
    - Error (if rejected)
    - Side effects for the session: feedback signals, follow-up actions,
      and the chest reward for OPEN_CHEST
    """
    success: bool
    new_state: Any | None = None  # GameState
    error: str | None = None
    error_code: ErrorCode | None = None

    # For UI/presentation
    state_changes: list[str] = field(default_factory=list)
    signals: list[FeedbackSignal] = field(default_factory=list)

    chest_reward: Any | None = None  # ChestReward
    follow_ups: list[Action] = field(default_factory=list)

    @classmethod
    def failure(cls, error: str, error_code: ErrorCode | None = None) -> ActionResult:
        """Create a failure result."""
        return cls(success=False, error=error, error_code=error_code)

    @classmethod
    def success_with_state(
        cls,
        state: Any,
        changes: list[str] | None = None,
        signals: list[FeedbackSignal] | None = None,
        follow_ups: list[Action] | None = None,
    ) -> ActionResult:
        """Create a success result with new state."""
        return cls(
            success=True,
            new_state=state,
            state_changes=changes or [],
            signals=signals or [],
            follow_ups=follow_ups or [],
        )
