"""
Game Store - Owns the canonical GameState for one player.

LIFECYCLE:
1. Store created with a reducer, a storage backend and a feedback channel
2. load() once at startup: restores the saved snapshot (or a new game)
3. Intents are dispatched one at a time; each either commits a whole
   new state or is rejected with the state untouched
4. After every commit: listeners get the new state, feedback signals
   go out, follow-up actions run, and the snapshot is queued for saving

PERSISTENCE RULES:
- Nothing is saved before load() has completed
- Saves are best-effort: failures are logged, never rolled back or retried
- Only the latest snapshot matters; intermediate ones may be skipped
"""

from __future__ import annotations
from typing import Any, Callable
import asyncio
import logging
import random

from ..config import STORAGE_KEY, EngineConfig
from ..content import CatalogAchievementEngine, RandomContentGenerator
from ..engine_core.action import Action, ActionResult
from ..engine_core.feedback import FeedbackChannel, NullFeedbackChannel
from ..engine_core.reducer import Reducer
from ..engine_core.state import ChestReward, GameState
from ..engine_core.stats import recompute_player_stats
from ..errors import PersistenceError
from ..persistence import JsonFileStorage, PersistencePort, decode_state, encode_state

logger = logging.getLogger(__name__)

StateListener = Callable[[GameState], None]
Scheduler = Callable[[Action], None]


class GameStore:
    """
    The Game State Store.

    Usage:
        store = GameStore(reducer, storage=JsonFileStorage("~/.hugoland"))
        await store.load()

        store.start_combat()
        store.attack(hit=True, category="science")
        reward = store.open_chest(500)

        await store.flush()
    """

    def __init__(
        self,
        reducer: Reducer,
        storage: PersistencePort | None = None,
        feedback: FeedbackChannel | None = None,
        storage_key: str = STORAGE_KEY,
    ):
        self.reducer = reducer
        self.storage = storage
        self.feedback = feedback or NullFeedbackChannel()
        self.storage_key = storage_key

        self._state = reducer.new_game()
        self._loaded = False
        self._listeners: list[StateListener] = []
        self._scheduler: Scheduler | None = None

        # Single writer: the newest unsaved blob and the task draining it
        self._pending_blob: dict[str, Any] | None = None
        self._save_task: asyncio.Task | None = None

    @property
    def state(self) -> GameState:
        """Current state. Treat as read-only."""
        return self._state

    @property
    def is_loaded(self) -> bool:
        return self._loaded

    def snapshot(self) -> GameState:
        """Deep copy of the current state, safe to hand to renderers."""
        return self._state.clone()

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """Register a listener for committed states. Returns an unsubscribe callable."""
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def set_scheduler(self, scheduler: Scheduler | None):
        """
        Install the callable that runs delayed follow-up actions.

        Without one, delayed follow-ups are dispatched immediately.
        """
        self._scheduler = scheduler

    # -------------------------------------------------------------------------
    # Transitions
    # -------------------------------------------------------------------------

    def dispatch(self, action: Action) -> ActionResult:
        """Apply an action and commit the result if it succeeded."""
        result = self.reducer.apply(self._state, action)
        if not result.success or result.new_state is None:
            return result

        if result.new_state is not self._state:
            self._commit(result.new_state)

        for signal in result.signals:
            self.feedback.emit(signal)

        for follow_up in result.follow_ups:
            if follow_up.delay > 0 and self._scheduler is not None:
                self._scheduler(follow_up)
            else:
                self.dispatch(follow_up)

        return result

    def start_combat(self) -> ActionResult:
        return self.dispatch(Action.start_combat())

    def attack(self, hit: bool, category: str | None = None) -> ActionResult:
        return self.dispatch(Action.attack(hit, category))

    def equip(self, item_id: str) -> ActionResult:
        return self.dispatch(Action.equip(item_id))

    def upgrade_item(self, item_id: str) -> ActionResult:
        return self.dispatch(Action.upgrade_item(item_id))

    def sell_item(self, item_id: str) -> ActionResult:
        return self.dispatch(Action.sell_item(item_id))

    def upgrade_research(self) -> ActionResult:
        return self.dispatch(Action.upgrade_research())

    def open_chest(self, cost: int) -> ChestReward | None:
        """Open a chest; None when it cannot be afforded."""
        result = self.dispatch(Action.open_chest(cost))
        return result.chest_reward if result.success else None

    def set_game_mode(self, mode: str) -> ActionResult:
        return self.dispatch(Action.set_game_mode(mode))

    def check_and_unlock_achievements(self) -> ActionResult:
        return self.dispatch(Action.check_achievements())

    def tick(self, seconds: int = 1) -> ActionResult:
        return self.dispatch(Action.tick(seconds))

    def _commit(self, state: GameState):
        self._state = state
        for listener in list(self._listeners):
            listener(state)
        self._queue_save()

    # -------------------------------------------------------------------------
    # Persistence
    # -------------------------------------------------------------------------

    async def load(self) -> GameState:
        """
        Restore the saved game, or start a new one.

        Unreadable or invalid saves are logged and replaced by a new
        game; loading never fails.
        """
        if self._loaded:
            logger.warning("Game already loaded; ignoring repeated load")
            return self._state

        state = None
        if self.storage is not None:
            try:
                data = await self.storage.load(self.storage_key)
                if data is not None:
                    catalog = self.reducer.achievement_engine.initialize_achievements()
                    state = decode_state(data, catalog)
            except PersistenceError:
                logger.exception("Could not load saved game; starting a new one")

        if state is None:
            logger.info("No saved game found; starting a new game")
            state = self.reducer.new_game()
        else:
            state = recompute_player_stats(state, self.reducer.content)
            logger.info("Loaded saved game at zone %d", state.zone)

        self._state = state
        self._loaded = True
        for listener in list(self._listeners):
            listener(state)
        return state

    async def save(self) -> bool:
        """Write the current state now. Returns False if the write failed."""
        if self.storage is None:
            return False
        self._pending_blob = None
        return await self._write(encode_state(self._state))

    async def flush(self) -> bool:
        """Wait until every queued snapshot has been written."""
        if self._save_task is not None:
            await self._save_task
        if self._pending_blob is not None:
            blob, self._pending_blob = self._pending_blob, None
            return await self._write(blob)
        return True

    async def reset(self) -> GameState:
        """Erase the saved game and start over."""
        if self.storage is not None:
            try:
                await self.storage.remove(self.storage_key)
            except PersistenceError:
                logger.exception("Could not remove saved game")
        self.dispatch(Action.reset_game())
        logger.info("Game reset")
        return self._state

    def _queue_save(self):
        if not self._loaded or self.storage is None:
            return
        self._pending_blob = encode_state(self._state)
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            return  # written by the next flush()
        if self._save_task is None or self._save_task.done():
            self._save_task = loop.create_task(self._drain_saves())

    async def _drain_saves(self):
        while self._pending_blob is not None:
            blob, self._pending_blob = self._pending_blob, None
            await self._write(blob)

    async def _write(self, blob: dict[str, Any]) -> bool:
        try:
            await self.storage.save(self.storage_key, blob)
        except PersistenceError:
            logger.exception("Could not save game")
            return False
        return True


def build_store(
    config: EngineConfig,
    feedback: FeedbackChannel | None = None,
    storage: PersistencePort | None = None,
) -> GameStore:
    """Wire a store with the reference content, achievements and file storage."""
    rng = random.Random(config.seed)
    reducer = Reducer(
        content=RandomContentGenerator(random.Random(rng.getrandbits(64))),
        achievement_engine=CatalogAchievementEngine(),
        rng=rng,
        achievement_check_delay=config.achievement_check_delay,
    )
    return GameStore(
        reducer,
        storage=storage if storage is not None else JsonFileStorage(config.save_dir),
        feedback=feedback,
        storage_key=config.storage_key,
    )
