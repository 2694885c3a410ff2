"""
Reducer - Applies actions to game state.

The reducer is the single point of state mutation.
All state changes must go through apply().

Design principles:
- Pure function of (state, action, random draws) -> ActionResult
- The input state is never mutated
- Rejected actions come back as failures and leave state untouched
- Randomness comes from an injected random.Random for determinism
"""

from __future__ import annotations
from dataclasses import dataclass, field, replace
import logging
import random

from ..config import ACHIEVEMENT_CHECK_DELAY, RESEARCH_COST
from . import combat, economy
from .achievements import check_and_unlock
from .action import Action, ActionResult, ActionType, ErrorCode
from .ports import AchievementEngine, ContentGenerator
from .state import GameModeType, GameState
from .stats import recompute_player_stats

logger = logging.getLogger(__name__)


@dataclass
class Reducer:
    """
    Reducer applies actions to game state.

    Stateless apart from its RNG - all game state is in GameState.
    The collaborators supply content and achievement rules.
    """
    content: ContentGenerator
    achievement_engine: AchievementEngine
    rng: random.Random = field(default_factory=random.Random)
    research_cost: int = RESEARCH_COST
    achievement_check_delay: float = ACHIEVEMENT_CHECK_DELAY

    def new_game(self) -> GameState:
        """Create the state of a brand new game."""
        state = GameState.create(self.achievement_engine.initialize_achievements())
        return recompute_player_stats(state, self.content)

    def apply(self, state: GameState, action: Action) -> ActionResult:
        """
        Apply an action to the game state.

        Returns ActionResult with new state or error.
        """
        handler = self._get_handler(action.action_type)
        if not handler:
            return ActionResult.failure(
                f"No handler for action type: {action.action_type}",
                error_code=ErrorCode.NO_HANDLER,
            )

        try:
            result = handler(state, action)
        except Exception as e:
            logger.exception("Handler for %s failed", action.action_type.value)
            return ActionResult.failure(str(e), error_code=ErrorCode.HANDLER_ERROR)

        if result.success:
            logger.debug("Applied %s: %s", action.action_type.value, result.state_changes)
        else:
            logger.debug("Rejected %s: %s", action.action_type.value, result.error)
        return result

    def _get_handler(self, action_type: ActionType):
        """Get the handler function for an action type."""
        handlers = {
            ActionType.START_COMBAT: self._handle_start_combat,
            ActionType.ATTACK: self._handle_attack,
            ActionType.EQUIP: self._handle_equip,
            ActionType.UPGRADE_ITEM: self._handle_upgrade_item,
            ActionType.SELL_ITEM: self._handle_sell_item,
            ActionType.UPGRADE_RESEARCH: self._handle_upgrade_research,
            ActionType.OPEN_CHEST: self._handle_open_chest,
            ActionType.CHECK_ACHIEVEMENTS: self._handle_check_achievements,
            ActionType.SET_GAME_MODE: self._handle_set_game_mode,
            ActionType.TICK: self._handle_tick,
            ActionType.RESET_GAME: self._handle_reset_game,
        }
        return handlers.get(action_type)

    def _handle_start_combat(self, state: GameState, action: Action) -> ActionResult:
        return combat.start_combat(state, self.content)

    def _handle_attack(self, state: GameState, action: Action) -> ActionResult:
        return combat.resolve_attack(
            state,
            hit=bool(action.payload.hit),
            category=action.payload.category,
            rng=self.rng,
            achievement_check_delay=self.achievement_check_delay,
        )

    def _handle_equip(self, state: GameState, action: Action) -> ActionResult:
        return economy.equip_item(state, action.payload.item_id, self.content)

    def _handle_upgrade_item(self, state: GameState, action: Action) -> ActionResult:
        return economy.upgrade_item(state, action.payload.item_id, self.content)

    def _handle_sell_item(self, state: GameState, action: Action) -> ActionResult:
        return economy.sell_item(state, action.payload.item_id)

    def _handle_upgrade_research(self, state: GameState, action: Action) -> ActionResult:
        return economy.upgrade_research(state, self.content, cost=self.research_cost)

    def _handle_open_chest(self, state: GameState, action: Action) -> ActionResult:
        return economy.open_chest(state, action.payload.cost, self.content, self.rng)

    def _handle_check_achievements(self, state: GameState, action: Action) -> ActionResult:
        return check_and_unlock(state, self.achievement_engine)

    def _handle_set_game_mode(self, state: GameState, action: Action) -> ActionResult:
        """
        Switch game mode.

        Entering survival refills the lives; leaving it keeps whatever
        is left until survival is entered again.
        """
        try:
            mode = GameModeType(action.payload.mode)
        except ValueError:
            return ActionResult.failure(
                f"Invalid game mode: {action.payload.mode}",
                error_code=ErrorCode.INVALID_MODE,
            )

        game_mode = replace(state.game_mode, current=mode)
        if mode is GameModeType.SURVIVAL:
            game_mode = replace(game_mode, survival_lives=game_mode.max_survival_lives)

        return ActionResult.success_with_state(
            state._copy_with(game_mode=game_mode),
            changes=[f"Game mode set to {mode.value}"],
        )

    def _handle_tick(self, state: GameState, action: Action) -> ActionResult:
        return economy.tick(state, action.payload.seconds)

    def _handle_reset_game(self, state: GameState, action: Action) -> ActionResult:
        return ActionResult.success_with_state(self.new_game(), changes=["Game reset"])


def apply_action(
    content: ContentGenerator,
    achievement_engine: AchievementEngine,
    state: GameState,
    action: Action,
    rng: random.Random | None = None,
) -> ActionResult:
    """
    Convenience function to apply an action.

    Creates a Reducer and applies the action.
    """
    reducer = Reducer(
        content=content,
        achievement_engine=achievement_engine,
        rng=rng or random.Random(),
    )
    return reducer.apply(state, action)
