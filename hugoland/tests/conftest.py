"""
Pytest fixtures for Hugoland tests.
"""

import random

import pytest

from ..content import CatalogAchievementEngine
from ..engine_core.action import Action
from ..engine_core.ports import ContentGenerator
from ..engine_core.reducer import Reducer
from ..engine_core.state import Armor, Enemy, GameState, Rarity, Weapon
from ..engine_core.stats import recompute_player_stats


class ScriptedContent(ContentGenerator):
    """
    Deterministic content for tests.

    Every weapon is a "Test Blade" and every armor a "Test Vest" with
    a fresh id, and every enemy is the same configurable goblin.
    """

    def __init__(self, enemy_hp=100, enemy_attack=20, enemy_defense=0):
        self.enemy_hp = enemy_hp
        self.enemy_attack = enemy_attack
        self.enemy_defense = enemy_defense
        self.high_tier_calls: list[bool] = []
        self._next_id = 0

    def generate_weapon(self, high_tier_allowed=False):
        self.high_tier_calls.append(high_tier_allowed)
        return Weapon(
            id=self._make_id("w"),
            name="Test Blade",
            rarity=Rarity.COMMON,
            base_attack=10,
            upgrade_cost=5,
            sell_price=25,
        )

    def generate_armor(self, high_tier_allowed=False):
        self.high_tier_calls.append(high_tier_allowed)
        return Armor(
            id=self._make_id("a"),
            name="Test Vest",
            rarity=Rarity.COMMON,
            base_defense=6,
            upgrade_cost=5,
            sell_price=25,
        )

    def generate_enemy(self, zone):
        return Enemy(
            name="Test Goblin",
            zone=zone,
            hp=self.enemy_hp,
            max_hp=self.enemy_hp,
            attack=self.enemy_attack,
            defense=self.enemy_defense,
        )

    def calculate_research_bonus(self, level, tier):
        return level * 2 + tier * 10

    def _make_id(self, prefix):
        self._next_id += 1
        return f"{prefix}{self._next_id}"


class FixedRandom(random.Random):
    """Random whose draws are always the lowest possible value."""

    def randrange(self, *args, **kwargs):
        return args[0] if len(args) > 1 else 0

    def random(self):
        return 0.0


@pytest.fixture
def content() -> ScriptedContent:
    return ScriptedContent()


@pytest.fixture
def achievement_engine() -> CatalogAchievementEngine:
    return CatalogAchievementEngine()


@pytest.fixture
def reducer(content, achievement_engine) -> Reducer:
    """Reducer with scripted content and a seeded RNG."""
    return Reducer(
        content=content,
        achievement_engine=achievement_engine,
        rng=random.Random(1234),
    )


@pytest.fixture
def fixed_reducer(content, achievement_engine) -> Reducer:
    """Reducer whose random draws are all minimal."""
    return Reducer(
        content=content,
        achievement_engine=achievement_engine,
        rng=FixedRandom(),
    )


@pytest.fixture
def new_state(reducer) -> GameState:
    """A brand new game: 100 coins, zone 1, 50 attack, 200 HP."""
    return reducer.new_game()


@pytest.fixture
def equipped_state(new_state, content) -> GameState:
    """New game owning and wearing one weapon (w1) and one armor (a2)."""
    weapon = content.generate_weapon()
    armor = content.generate_armor()
    inventory = new_state.inventory.with_items([weapon, armor]).equip(weapon).equip(armor)
    content.high_tier_calls.clear()
    return recompute_player_stats(new_state._copy_with(inventory=inventory), content)


@pytest.fixture
def combat_state(reducer, new_state) -> GameState:
    """New game with an encounter against a 100 HP goblin in progress."""
    result = reducer.apply(new_state, Action.start_combat())
    return result.new_state
