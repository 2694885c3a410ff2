"""
Achievement unlocking.

The achievement engine decides which predicates hold; this module
applies rewards and records unlocks. Unlocks are permanent, so
running the check twice without new progress changes nothing.
"""

from __future__ import annotations

from .action import ActionResult
from .feedback import FeedbackSignal
from .ports import AchievementEngine
from .state import Achievement, GameState


def check_and_unlock(state: GameState, engine: AchievementEngine) -> ActionResult:
    """Unlock newly satisfied achievements and pay their rewards."""
    unlocks: list[Achievement] = []
    for candidate in engine.check_achievements(state):
        existing = state.get_achievement(candidate.id)
        if existing is not None and existing.unlocked:
            continue
        if any(u.id == candidate.id for u in unlocks):
            continue
        unlocks.append(candidate if candidate.unlocked else candidate.unlock())

    if not unlocks:
        return ActionResult.success_with_state(state)

    bonus_coins = sum(a.reward.coins for a in unlocks if a.reward)
    bonus_gems = sum(a.reward.gems for a in unlocks if a.reward)

    by_id = {a.id: a for a in unlocks}
    catalog = [by_id.pop(a.id, a) for a in state.achievements]
    catalog.extend(by_id.values())  # unlocked but missing from the stored catalog

    if bonus_coins or bonus_gems:
        summary = FeedbackSignal.text(
            f"Achievement Rewards: +{bonus_coins} coins, +{bonus_gems} gems!", "text-green-400"
        )
    else:
        names = ", ".join(a.name for a in unlocks)
        summary = FeedbackSignal.text(f"Achievement Unlocked: {names}", "text-green-400")

    new_state = state._copy_with(
        coins=state.coins + bonus_coins,
        gems=state.gems + bonus_gems,
        achievements=catalog,
    )
    return ActionResult.success_with_state(
        new_state,
        changes=[f"Achievement unlocked: {a.name}" for a in unlocks],
        signals=[FeedbackSignal.particles(), summary],
    )
