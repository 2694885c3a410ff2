"""
Tests for the game store (commit, publish, persist).
"""

import asyncio
import logging
import random

import pytest

from ..config import STORAGE_KEY, EngineConfig
from ..content import CatalogAchievementEngine
from ..engine_core.action import ActionType, ErrorCode
from ..engine_core.feedback import RecordingFeedbackChannel, SignalKind
from ..engine_core.reducer import Reducer
from ..errors import PersistenceError
from ..persistence import InMemoryStorage, JsonFileStorage, encode_state
from ..session import GameStore, build_store
from .conftest import ScriptedContent


class FailingStorage(InMemoryStorage):
    """Storage whose writes always fail."""

    async def save(self, key, data):
        raise PersistenceError("disk full")


@pytest.fixture
def storage() -> InMemoryStorage:
    return InMemoryStorage()


@pytest.fixture
def feedback() -> RecordingFeedbackChannel:
    return RecordingFeedbackChannel()


@pytest.fixture
def store(storage, feedback) -> GameStore:
    reducer = Reducer(ScriptedContent(), CatalogAchievementEngine(), rng=random.Random(3))
    return GameStore(reducer, storage=storage, feedback=feedback)


class TestLoad:
    """Tests for restoring the saved game."""

    def test_new_game_when_nothing_saved(self, store):
        state = asyncio.run(store.load())

        assert store.is_loaded
        assert state.coins == 100
        assert store.state is state

    def test_restores_saved_game(self, storage, store, equipped_state):
        blob = encode_state(equipped_state._copy_with(coins=777, zone=9))
        asyncio.run(storage.save(STORAGE_KEY, blob))

        state = asyncio.run(store.load())

        assert state.coins == 777
        assert state.zone == 9
        assert state.player_stats.attack == 60
        assert state.inventory.current_weapon.name == "Test Blade"

    def test_invalid_save_starts_new_game(self, storage, store, caplog):
        asyncio.run(storage.save(STORAGE_KEY, {"coins": "lots"}))

        with caplog.at_level(logging.ERROR):
            state = asyncio.run(store.load())

        assert state.coins == 100
        assert store.is_loaded
        assert "Could not load saved game" in caplog.text

    def test_null_sections_keep_progress(self, storage, store):
        """A save with null sections restores instead of starting over."""
        blob = {"coins": 5000, "zone": 30, "knowledgeStreak": None, "research": None}
        asyncio.run(storage.save(STORAGE_KEY, blob))

        state = asyncio.run(store.load())

        assert state.coins == 5000
        assert state.zone == 30

    def test_corrupt_file_starts_new_game(self, tmp_path):
        (tmp_path / f"{STORAGE_KEY}.json").write_text("garbage", encoding="utf-8")
        store = build_store(EngineConfig(save_dir=tmp_path, seed=1))

        state = asyncio.run(store.load())
        assert state.zone == 1

    def test_invalid_utf8_file_starts_new_game(self, tmp_path):
        (tmp_path / f"{STORAGE_KEY}.json").write_bytes(b'{"coins": "\xff\xfe"}')
        store = build_store(EngineConfig(save_dir=tmp_path, seed=1))

        state = asyncio.run(store.load())

        assert store.is_loaded
        assert state.coins == 100

    def test_second_load_ignored(self, storage, store):
        async def run():
            await store.load()
            store.tick(5)
            await storage.save(STORAGE_KEY, {"coins": 1})
            return await store.load()

        state = asyncio.run(run())
        assert state.coins == 100
        assert state.statistics.total_play_time == 5

    def test_listeners_see_loaded_state(self, store):
        seen = []
        store.subscribe(seen.append)
        state = asyncio.run(store.load())
        assert seen == [state]


class TestDispatch:
    """Tests for committing transitions."""

    def test_commit_and_notify(self, store, feedback):
        seen = []
        store.subscribe(seen.append)

        result = store.start_combat()

        assert result.success
        assert store.state.in_combat
        assert seen == [store.state]

    def test_rejected_action_keeps_state(self, store):
        seen = []
        store.subscribe(seen.append)
        before = store.state

        result = store.attack(True)

        assert result.error_code is ErrorCode.NOT_IN_COMBAT
        assert store.state is before
        assert seen == []

    def test_unsubscribe(self, store):
        seen = []
        unsubscribe = store.subscribe(seen.append)
        unsubscribe()
        store.tick()
        assert seen == []

    def test_signals_forwarded(self, store, feedback):
        store.start_combat()
        store.attack(False)

        assert [s.kind for s in feedback.drain()] == [SignalKind.SHAKE]

    def test_follow_ups_run_without_scheduler(self, store):
        """Without a scheduler, delayed follow-ups run immediately."""
        store._state = store.state._copy_with(coins=600)

        reward = store.open_chest(500)

        assert reward is not None
        assert store.state.get_achievement("first_chest").unlocked
        assert store.state.coins == 100 + 25

    def test_follow_ups_go_to_scheduler(self, store):
        scheduled = []
        store.set_scheduler(scheduled.append)
        store.start_combat()

        store.attack(True)

        assert [a.action_type for a in scheduled] == [ActionType.CHECK_ACHIEVEMENTS]

    def test_open_chest_unaffordable(self, store):
        assert store.open_chest(500) is None
        assert store.state.coins == 100

    def test_snapshot_is_a_copy(self, store):
        snapshot = store.snapshot()
        snapshot.achievements.clear()
        assert store.state.achievements


class TestSaving:
    """Tests for background saves."""

    def test_nothing_saved_before_load(self, storage, store):
        async def run():
            store.tick()
            await store.flush()

        asyncio.run(run())
        assert storage.keys() == []

    def test_commit_saved_after_load(self, storage, store):
        async def run():
            await store.load()
            store.tick(4)
            store.tick(2)
            await store.flush()
            return await storage.load(STORAGE_KEY)

        blob = asyncio.run(run())
        assert blob["statistics"]["totalPlayTime"] == 6

    def test_save_to_file(self, tmp_path):
        store = build_store(EngineConfig(save_dir=tmp_path, seed=1))

        async def run():
            await store.load()
            store.set_game_mode("speed")
            await store.flush()

        asyncio.run(run())
        reloaded = build_store(EngineConfig(save_dir=tmp_path, seed=1))
        state = asyncio.run(reloaded.load())
        assert state.game_mode.speed_mode_active

    def test_failed_save_logged(self, feedback, caplog):
        reducer = Reducer(ScriptedContent(), CatalogAchievementEngine(), rng=random.Random(3))
        store = GameStore(reducer, storage=FailingStorage(), feedback=feedback)

        async def run():
            await store.load()
            store.tick()
            flushed = await store.flush()
            saved = await store.save()
            return flushed, saved

        with caplog.at_level(logging.ERROR):
            flushed, saved = asyncio.run(run())

        assert saved is False
        assert flushed is True  # background write already ran and failed
        assert store.state.statistics.total_play_time == 1
        assert "Could not save game" in caplog.text

    def test_reset_clears_save(self, storage, store):
        async def run():
            await store.load()
            store.tick(30)
            await store.flush()
            state = await store.reset()
            await store.flush()
            return state, await storage.load(STORAGE_KEY)

        state, blob = asyncio.run(run())
        assert state.statistics.total_play_time == 0
        assert blob["statistics"]["totalPlayTime"] == 0


class TestBuildStore:
    """Tests for the default wiring."""

    def test_uses_file_storage(self, tmp_path):
        store = build_store(EngineConfig(save_dir=tmp_path, storage_key="slot"))

        assert isinstance(store.storage, JsonFileStorage)
        assert store.storage_key == "slot"

    def test_seed_makes_runs_repeatable(self, tmp_path):
        first = build_store(EngineConfig(save_dir=tmp_path, seed=42))
        second = build_store(EngineConfig(save_dir=tmp_path, seed=42))

        first.start_combat()
        second.start_combat()
        assert first.state.current_enemy == second.state.current_enemy
