"""
Combat - Encounter lifecycle and answer resolution.

States:
    Idle      no enemy, in_combat False
    InCombat  enemy present, in_combat True

An encounter returns to Idle when the enemy or the player reaches
0 HP. In survival mode the player carries HP between encounters and
has a limited pool of lives; losing the last one resets progression.
"""

from __future__ import annotations
from dataclasses import replace
import math
import random

from ..config import ACHIEVEMENT_CHECK_DELAY
from .action import Action, ActionResult, ErrorCode
from .feedback import FeedbackSignal
from .ports import ContentGenerator
from .state import Enemy, GameMode, GameModeType, GameState
from .stats import with_hp
from .streak import apply_answer

# (coin multiplier, gem multiplier) applied to victory rewards
MODE_REWARD_MULTIPLIERS: dict[GameModeType, tuple[float, float]] = {
    GameModeType.NORMAL: (1.0, 1.0),
    GameModeType.SPEED: (1.5, 1.25),
    GameModeType.SURVIVAL: (2.0, 2.0),
}

COINS_PER_ZONE = 8
COIN_ROLL = 15  # extra coins drawn from [0, 15)
GEM_ROLL = 3  # gems drawn from [1, 3]


def start_combat(state: GameState, content: ContentGenerator) -> ActionResult:
    """Generate an enemy for the current zone and enter combat."""
    enemy = content.generate_enemy(state.zone)

    stats = state.player_stats
    if not state.game_mode.is_survival:
        stats = replace(stats, hp=stats.max_hp)

    new_state = state._copy_with(
        current_enemy=enemy,
        in_combat=True,
        player_stats=stats,
        combat_log=[f"You encounter a {enemy.name} in Zone {enemy.zone}!"],
    )
    return ActionResult.success_with_state(
        new_state,
        changes=[f"Encounter started: {enemy.name} (zone {enemy.zone})"],
    )


def roll_rewards(state: GameState, rng: random.Random) -> tuple[int, int]:
    """Coins and gems for defeating the current zone's enemy."""
    coin_multiplier, gem_multiplier = MODE_REWARD_MULTIPLIERS[state.game_mode.current]
    streak_multiplier = state.knowledge_streak.multiplier

    base_coins = state.zone * COINS_PER_ZONE + rng.randrange(COIN_ROLL)
    base_gems = rng.randrange(GEM_ROLL) + 1

    coins = math.floor(base_coins * coin_multiplier * streak_multiplier)
    gems = math.floor(base_gems * gem_multiplier * streak_multiplier)
    return coins, gems


def resolve_attack(
    state: GameState,
    hit: bool,
    category: str | None,
    rng: random.Random,
    achievement_check_delay: float = ACHIEVEMENT_CHECK_DELAY,
) -> ActionResult:
    """
    Apply an answered question to the current encounter.

    The answer is first recorded in statistics and the knowledge
    streak, so a victory on this answer is paid with the updated
    streak multiplier.
    """
    if not state.in_combat or state.current_enemy is None:
        return ActionResult.failure("Not in combat", error_code=ErrorCode.NOT_IN_COMBAT)

    state, signals = apply_answer(state, hit, category)
    enemy = state.current_enemy
    stats = state.player_stats
    log = list(state.combat_log)
    follow_ups = [Action.check_achievements(delay=achievement_check_delay)]

    if hit:
        damage = max(1, stats.attack - enemy.defense)
        enemy = replace(enemy, hp=max(0, enemy.hp - damage))
        log.append(f"You deal {damage} damage to the {enemy.name}!")
        signals.append(FeedbackSignal.text(f"-{damage}", "text-red-400"))

        if enemy.is_defeated:
            log.append(f"You defeated the {enemy.name}!")
            signals.append(FeedbackSignal.particles())
            return _resolve_victory(state, enemy, log, signals, follow_ups, rng)
    else:
        damage = max(1, enemy.attack - stats.defense)
        stats = with_hp(stats, stats.hp - damage)
        log.append(f"You missed! The {enemy.name} deals {damage} damage to you!")
        signals.append(FeedbackSignal.shake())

        if stats.is_defeated:
            log.append(f"You were defeated by the {enemy.name}...")
            return _resolve_defeat(state, enemy, log, signals, follow_ups)

    new_state = state._copy_with(current_enemy=enemy, player_stats=stats, combat_log=log)
    return ActionResult.success_with_state(
        new_state,
        changes=[log[-1]],
        signals=signals,
        follow_ups=follow_ups,
    )


def _resolve_victory(
    state: GameState,
    enemy: Enemy,
    log: list[str],
    signals: list[FeedbackSignal],
    follow_ups: list[Action],
    rng: random.Random,
) -> ActionResult:
    coins, gems = roll_rewards(state, rng)
    log.append(f"You earned {coins} coins and {gems} gems!")
    zone = state.zone + 1

    statistics = replace(
        state.statistics,
        zones_reached=max(state.statistics.zones_reached, zone),
        coins_earned=state.statistics.coins_earned + coins,
        gems_earned=state.statistics.gems_earned + gems,
    )
    new_state = state._copy_with(
        coins=state.coins + coins,
        gems=state.gems + gems,
        zone=zone,
        current_enemy=None,
        in_combat=False,
        combat_log=log,
        statistics=statistics,
    )
    return ActionResult.success_with_state(
        new_state,
        changes=[f"Defeated {enemy.name}: +{coins} coins, +{gems} gems, zone {zone}"],
        signals=signals,
        follow_ups=follow_ups,
    )


def _resolve_defeat(
    state: GameState,
    enemy: Enemy,
    log: list[str],
    signals: list[FeedbackSignal],
    follow_ups: list[Action],
) -> ActionResult:
    stats = with_hp(state.player_stats, 0)
    mode = state.game_mode

    if not mode.is_survival:
        new_state = state._copy_with(
            current_enemy=None,
            in_combat=False,
            combat_log=log,
            player_stats=stats,
        )
        return ActionResult.success_with_state(
            new_state,
            changes=[f"Defeated by {enemy.name}"],
            signals=signals,
            follow_ups=follow_ups,
        )

    lives = mode.survival_lives - 1
    if lives > 0:
        new_state = state._copy_with(
            current_enemy=None,
            in_combat=False,
            combat_log=log,
            player_stats=stats,
            game_mode=replace(mode, survival_lives=lives),
        )
        return ActionResult.success_with_state(
            new_state,
            changes=[f"Defeated by {enemy.name}: {lives} survival lives left"],
            signals=signals,
            follow_ups=follow_ups,
        )

    log.append("Game Over! No lives remaining.")
    new_state = state._copy_with(
        zone=1,
        current_enemy=None,
        in_combat=False,
        combat_log=log,
        player_stats=stats,
        game_mode=GameMode(max_survival_lives=mode.max_survival_lives,
                           survival_lives=mode.max_survival_lives),
        knowledge_streak=replace(state.knowledge_streak, current=0),
    )
    return ActionResult.success_with_state(
        new_state,
        changes=["Survival run over: back to zone 1 in normal mode"],
        signals=signals,
        follow_ups=follow_ups,
    )
