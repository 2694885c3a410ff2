"""
Tests for the asyncio game loop (timers and deferred answers).
"""

import asyncio
import random

import pytest

from ..config import STORAGE_KEY, EngineConfig
from ..content import CatalogAchievementEngine
from ..engine_core.reducer import Reducer
from ..engine_core.state import GameMode
from ..persistence import InMemoryStorage
from ..session import GameLoop, GameStore, LoopState
from .conftest import ScriptedContent


@pytest.fixture
def config(tmp_path) -> EngineConfig:
    return EngineConfig(
        save_dir=tmp_path,
        reveal_delay=0.01,
        tick_interval=60.0,
        achievement_check_delay=0.01,
    )


def _make_loop(config, enemy_hp=100, storage=None):
    reducer = Reducer(
        ScriptedContent(enemy_hp=enemy_hp),
        CatalogAchievementEngine(),
        rng=random.Random(11),
        achievement_check_delay=config.achievement_check_delay,
    )
    store = GameStore(reducer, storage=storage or InMemoryStorage())
    return GameLoop(store, config)


class TestAnswers:
    """Tests for the reveal delay."""

    def test_attack_resolves_after_reveal(self, config):
        loop = _make_loop(config)

        async def run():
            await loop.start()
            loop.start_combat()
            assert loop.answer(True, "science")
            before = loop.store.state.current_enemy.hp
            await asyncio.sleep(0.05)
            after = loop.store.state.current_enemy.hp
            await loop.stop()
            return before, after

        before, after = asyncio.run(run())
        assert before == 100
        assert after == 50

    def test_stale_answer_cancelled_by_new_encounter(self, config):
        """A reveal pending from the last encounter never hits the next enemy."""
        loop = _make_loop(config)

        async def run():
            await loop.start()
            loop.start_combat()
            loop.answer(True)
            loop.start_combat()
            await asyncio.sleep(0.05)
            await loop.stop()
            return loop.store.state

        state = asyncio.run(run())
        assert state.current_enemy.hp == 100
        assert state.statistics.total_questions_answered == 0

    def test_answer_without_combat(self, config):
        loop = _make_loop(config)

        async def run():
            await loop.start()
            answered = loop.answer(True)
            await loop.stop()
            return answered

        assert asyncio.run(run()) is False

    def test_one_answer_per_reveal(self, config):
        loop = _make_loop(config)

        async def run():
            await loop.start()
            loop.start_combat()
            first = loop.answer(True)
            second = loop.answer(True)
            state = loop.state
            await asyncio.sleep(0.05)
            await loop.stop()
            return first, second, state

        first, second, state = asyncio.run(run())
        assert first is True
        assert second is False
        assert state is LoopState.REVEALING
        assert loop.store.state.statistics.total_questions_answered == 1


class TestQuestionTimer:
    """Tests for the answer window."""

    def test_timeout_counts_as_miss(self, config, monkeypatch):
        monkeypatch.setattr(GameMode, "question_time_limit", property(lambda self: 0.01))
        loop = _make_loop(config)

        async def run():
            await loop.start()
            loop.start_combat()
            loop.present_question("geography")
            await asyncio.sleep(0.1)
            await loop.stop()
            return loop.store.state

        state = asyncio.run(run())
        assert state.player_stats.hp == 180
        assert state.statistics.accuracy_by_category["geography"].total == 1
        assert state.statistics.correct_answers == 0

    def test_answer_stops_timer(self, config, monkeypatch):
        monkeypatch.setattr(GameMode, "question_time_limit", property(lambda self: 0.03))
        loop = _make_loop(config)

        async def run():
            await loop.start()
            loop.start_combat()
            loop.present_question()
            loop.answer(True)
            await asyncio.sleep(0.1)
            await loop.stop()
            return loop.store.state

        state = asyncio.run(run())
        assert state.statistics.total_questions_answered == 1
        assert state.statistics.correct_answers == 1

    def test_no_timer_outside_combat(self, config):
        loop = _make_loop(config)

        async def run():
            await loop.start()
            loop.present_question()
            state = loop.state
            await loop.stop()
            return state

        assert asyncio.run(run()) is LoopState.IDLE


class TestScheduling:
    """Tests for the clock and delayed follow-ups."""

    def test_play_time_ticks(self, tmp_path):
        """Short intervals add up to whole seconds of play time."""
        config = EngineConfig(save_dir=tmp_path, tick_interval=0.25)
        loop = _make_loop(config)

        async def run():
            await loop.start()
            await asyncio.sleep(1.1)
            await loop.stop()
            return loop.store.state

        assert asyncio.run(run()).statistics.total_play_time == 1

    def test_sub_second_ticks_not_rounded_up(self, tmp_path):
        """Less than a second of wall time credits no play time."""
        config = EngineConfig(save_dir=tmp_path, tick_interval=0.01)
        loop = _make_loop(config)

        async def run():
            await loop.start()
            await asyncio.sleep(0.1)
            await loop.stop()
            return loop.store.state

        assert asyncio.run(run()).statistics.total_play_time == 0

    def test_delayed_achievement_check(self, config):
        """The check after a victory runs on its own timer."""
        loop = _make_loop(config, enemy_hp=30)

        async def run():
            await loop.start()
            loop.start_combat()
            loop.answer(True)
            await asyncio.sleep(0.1)
            await loop.stop()
            return loop.store.state

        state = asyncio.run(run())
        assert state.zone == 2
        assert state.get_achievement("first_victory").unlocked

    def test_stop_awaits_pending_reveal(self, config):
        """Stopping mid-reveal cancels and awaits the encounter's tasks."""
        loop = _make_loop(config)

        async def run():
            await loop.start()
            loop.start_combat()
            loop.answer(True)
            pending = list(loop._encounter.tasks)
            await loop.stop()
            done = all(task.done() for task in pending)
            await asyncio.sleep(0.05)
            return pending, done

        pending, done = asyncio.run(run())
        assert pending
        assert done
        assert loop.store.state.current_enemy.hp == 100
        assert loop.store.state.statistics.total_questions_answered == 0

    def test_stop_flushes_save(self, config):
        storage = InMemoryStorage()
        loop = _make_loop(config, storage=storage)

        async def run():
            await loop.start()
            loop.store.set_game_mode("survival")
            await loop.stop()
            return await storage.load(STORAGE_KEY)

        blob = asyncio.run(run())
        assert blob["gameMode"]["current"] == "survival"
        assert loop.state is LoopState.STOPPED
