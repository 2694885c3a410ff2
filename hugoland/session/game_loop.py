"""
Game Loop - Drives the timed parts of a play session.

The loop:
1. A new encounter starts (enemy generated, question shown)
2. The question timer runs (5 seconds, 3 in speed mode)
3. The player answers, or the timer expires and counts as a miss
4. The answer is revealed for a moment before the attack resolves
5. Delayed follow-ups (achievement checks) run on their own timers
6. Play time ticks once per second throughout

Every timer belonging to an encounter is cancelled when the next
encounter starts, so a stale reveal can never hit a newer enemy.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
import asyncio
import logging

from ..config import EngineConfig
from ..engine_core.action import Action, ActionResult
from .store import GameStore

logger = logging.getLogger(__name__)


class LoopState(Enum):
    """State of the game loop."""
    STOPPED = "stopped"
    IDLE = "idle"
    WAITING_ANSWER = "waiting_answer"
    REVEALING = "revealing"


@dataclass
class EncounterToken:
    """
    Cancellation handle for everything scheduled during one encounter.

    Deferred work checks the token before touching the store.
    """
    encounter_id: int
    cancelled: bool = False
    tasks: set[asyncio.Task] = field(default_factory=set)

    def track(self, task: asyncio.Task):
        self.tasks.add(task)
        task.add_done_callback(self.tasks.discard)

    def cancel(self):
        self.cancelled = True
        for task in list(self.tasks):
            task.cancel()


class GameLoop:
    """
    The asyncio driver around a GameStore.

    Usage:
        loop = GameLoop(store, config)
        await loop.start()

        loop.start_combat()
        loop.present_question("science")
        loop.answer(correct=True, category="science")

        await loop.stop()
    """

    def __init__(self, store: GameStore, config: EngineConfig):
        self.store = store
        self.config = config
        self.state = LoopState.STOPPED

        self._encounter: EncounterToken | None = None
        self._encounter_count = 0
        self._question_timer: asyncio.Task | None = None
        self._tick_task: asyncio.Task | None = None
        self._follow_up_tasks: set[asyncio.Task] = set()

    async def start(self):
        """Load the game, then start the play-time clock."""
        if not self.store.is_loaded:
            await self.store.load()
        self.store.set_scheduler(self.schedule)
        self._tick_task = asyncio.create_task(self._run_ticks())
        self.state = LoopState.IDLE
        logger.info("Game loop started")

    async def stop(self):
        """Cancel every timer and write out the last snapshot."""
        tasks = list(self._follow_up_tasks)
        if self._encounter is not None:
            tasks.extend(self._encounter.tasks)
        self._cancel_encounter()
        if self._tick_task is not None:
            tasks.append(self._tick_task)
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)

        self._tick_task = None
        self.store.set_scheduler(None)
        self.state = LoopState.STOPPED
        await self.store.flush()
        logger.info("Game loop stopped")

    # -------------------------------------------------------------------------
    # Encounters
    # -------------------------------------------------------------------------

    def start_combat(self) -> ActionResult:
        """Begin a new encounter, abandoning anything pending from the last one."""
        self._cancel_encounter()
        self._encounter_count += 1
        self._encounter = EncounterToken(self._encounter_count)
        self.state = LoopState.IDLE
        return self.store.start_combat()

    def present_question(self, category: str | None = None):
        """Start the answer timer for the question now on screen."""
        if not self.store.state.in_combat or self._encounter is None:
            logger.debug("No encounter in progress; question timer not started")
            return

        self._cancel_question_timer()
        limit = self.store.state.game_mode.question_time_limit
        token = self._encounter
        self._question_timer = asyncio.create_task(
            self._expire_question(token, limit, category)
        )
        token.track(self._question_timer)
        self.state = LoopState.WAITING_ANSWER

    def answer(self, correct: bool, category: str | None = None) -> bool:
        """
        Submit an answer.

        The attack resolves after the reveal delay. Returns False when
        there is no question to answer or an answer is already pending.
        """
        token = self._encounter
        if token is None or token.cancelled or not self.store.state.in_combat:
            return False
        if self.state is LoopState.REVEALING:
            return False

        self._cancel_question_timer()
        self.state = LoopState.REVEALING
        task = asyncio.create_task(self._reveal(token, correct, category))
        token.track(task)
        return True

    async def _expire_question(self, token: EncounterToken, limit: float, category: str | None):
        await asyncio.sleep(limit)
        if token.cancelled:
            return
        logger.debug("Question timed out after %ss", limit)
        self._question_timer = None
        self.answer(False, category)

    async def _reveal(self, token: EncounterToken, correct: bool, category: str | None):
        await asyncio.sleep(self.config.reveal_delay)
        if token.cancelled:
            return
        self.state = LoopState.IDLE
        self.store.attack(correct, category)

    def _cancel_question_timer(self):
        timer, self._question_timer = self._question_timer, None
        if timer is not None and timer is not asyncio.current_task():
            timer.cancel()

    def _cancel_encounter(self):
        self._question_timer = None
        if self._encounter is not None:
            self._encounter.cancel()
            self._encounter = None

    # -------------------------------------------------------------------------
    # Scheduling
    # -------------------------------------------------------------------------

    def schedule(self, action: Action):
        """Dispatch an action after its delay. Installed as the store's scheduler."""
        task = asyncio.create_task(self._dispatch_later(action))
        self._follow_up_tasks.add(task)
        task.add_done_callback(self._follow_up_tasks.discard)

    async def _dispatch_later(self, action: Action):
        await asyncio.sleep(action.delay)
        self.store.dispatch(action)

    async def _run_ticks(self):
        """Credit whole seconds of wall time; the remainder carries over."""
        clock = asyncio.get_running_loop()
        interval = self.config.tick_interval
        elapsed = 0.0
        last = clock.time()
        while True:
            await asyncio.sleep(interval)
            now = clock.time()
            elapsed += now - last
            last = now
            seconds = int(elapsed)
            if seconds:
                elapsed -= seconds
                self.store.tick(seconds)
