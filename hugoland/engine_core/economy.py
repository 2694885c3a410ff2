"""
Economy - Equipment management, research and chests.

Every operation here either applies fully or is rejected with the
state left untouched (insufficient currency, unknown item, selling
an equipped item).
"""

from __future__ import annotations
from collections import Counter
from dataclasses import replace
import math
import random

from ..config import MYTHICAL_CHEST_COST, RESEARCH_COST
from .action import Action, ActionResult, ErrorCode
from .feedback import FeedbackSignal
from .ports import ContentGenerator
from .state import ChestReward, EquipmentItem, GameState, ItemKind, Research
from .stats import recompute_player_stats

RESEARCH_LEVELS_PER_TIER = 10

CHEST_ITEM_ROLL = 2  # 2 + [0, 2) items
CHEST_MIN_ITEMS = 2
CHEST_GEM_ROLL = 10  # 5 + [0, 10) gems
CHEST_MIN_GEMS = 5

UPGRADE_SIGNALS = {
    ItemKind.WEAPON: ("Weapon Upgraded!", "text-green-400"),
    ItemKind.ARMOR: ("Armor Upgraded!", "text-blue-400"),
}


def _unknown_item(item_id: str | None) -> ActionResult:
    return ActionResult.failure(f"Item {item_id} not in inventory", error_code=ErrorCode.UNKNOWN_ITEM)


def equip_item(state: GameState, item_id: str | None, content: ContentGenerator) -> ActionResult:
    """Make an owned item the active weapon or armor."""
    item = state.inventory.find(item_id) if item_id else None
    if item is None:
        return _unknown_item(item_id)

    new_state = state._copy_with(inventory=state.inventory.equip(item))
    new_state = recompute_player_stats(new_state, content)
    return ActionResult.success_with_state(
        new_state,
        changes=[f"Equipped {item.name}"],
    )


def upgrade_item(state: GameState, item_id: str | None, content: ContentGenerator) -> ActionResult:
    """Spend gems to raise an item's level."""
    item = state.inventory.find(item_id) if item_id else None
    if item is None:
        return _unknown_item(item_id)
    if state.gems < item.upgrade_cost:
        return ActionResult.failure(
            f"Upgrading {item.name} costs {item.upgrade_cost} gems, have {state.gems}",
            error_code=ErrorCode.INSUFFICIENT_GEMS,
        )

    upgraded = item.upgraded()
    new_state = state._copy_with(
        gems=state.gems - item.upgrade_cost,
        inventory=state.inventory.with_item(upgraded),
    )
    new_state = recompute_player_stats(new_state, content)

    message, style = UPGRADE_SIGNALS[item.kind]
    return ActionResult.success_with_state(
        new_state,
        changes=[f"Upgraded {item.name} to level {upgraded.level}"],
        signals=[FeedbackSignal.text(message, style)],
    )


def sell_item(state: GameState, item_id: str | None) -> ActionResult:
    """Trade an unequipped item for its sell price in coins."""
    item = state.inventory.find(item_id) if item_id else None
    if item is None:
        return _unknown_item(item_id)
    if state.inventory.is_equipped(item):
        return ActionResult.failure(
            f"{item.name} is equipped", error_code=ErrorCode.ITEM_EQUIPPED
        )

    new_state = state._copy_with(
        coins=state.coins + item.sell_price,
        inventory=state.inventory.without_item(item),
    )
    return ActionResult.success_with_state(
        new_state,
        changes=[f"Sold {item.name} for {item.sell_price} coins"],
    )


def upgrade_research(
    state: GameState,
    content: ContentGenerator,
    cost: int = RESEARCH_COST,
) -> ActionResult:
    """Buy one research level. Every tenth level unlocks a new tier."""
    if state.coins < cost:
        return ActionResult.failure(
            f"Research costs {cost} coins, have {state.coins}",
            error_code=ErrorCode.INSUFFICIENT_COINS,
        )

    level = state.research.level + 1
    tier = level // RESEARCH_LEVELS_PER_TIER
    signals = []
    if tier > state.research.tier:
        signals.append(FeedbackSignal.text(f"Research Tier {tier + 1} Unlocked!", "text-purple-400"))
        signals.append(FeedbackSignal.particles())

    new_state = state._copy_with(
        coins=state.coins - cost,
        research=Research(
            level=level,
            tier=tier,
            total_spent=state.research.total_spent + cost,
        ),
    )
    new_state = recompute_player_stats(new_state, content)
    return ActionResult.success_with_state(
        new_state,
        changes=[f"Research level {level} (tier {tier})"],
        signals=signals,
        follow_ups=[Action.check_achievements()],
    )


def _chest_label(items: list[EquipmentItem]) -> ItemKind:
    counts = Counter(item.kind for item in items)
    if counts[ItemKind.ARMOR] > counts[ItemKind.WEAPON]:
        return ItemKind.ARMOR
    return ItemKind.WEAPON


def open_chest(
    state: GameState,
    cost: int | None,
    content: ContentGenerator,
    rng: random.Random,
) -> ActionResult:
    """
    Buy a chest of 2-3 random items plus bonus gems.

    Only a chest costing exactly MYTHICAL_CHEST_COST can roll mythical
    items. Bonus gems scale with the knowledge streak.
    """
    if cost is None or cost < 0:
        return ActionResult.failure(f"Invalid chest cost: {cost}", error_code=ErrorCode.INVALID_COST)
    if state.coins < cost:
        return ActionResult.failure(
            f"Chest costs {cost} coins, have {state.coins}",
            error_code=ErrorCode.INSUFFICIENT_COINS,
        )

    high_tier = cost == MYTHICAL_CHEST_COST
    item_count = rng.randrange(CHEST_ITEM_ROLL) + CHEST_MIN_ITEMS
    bonus_gems = rng.randrange(CHEST_GEM_ROLL) + CHEST_MIN_GEMS

    items: list[EquipmentItem] = []
    book = state.collection_book
    discovered = 0
    for _ in range(item_count):
        if rng.random() < 0.5:
            item = content.generate_weapon(high_tier)
        else:
            item = content.generate_armor(high_tier)
        items.append(item)
        if not book.has_discovered(item):
            book = book.record(item)
            discovered += 1

    gems = math.floor(bonus_gems * state.knowledge_streak.multiplier)
    statistics = replace(
        state.statistics,
        items_collected=state.statistics.items_collected + discovered,
        chests_opened=state.statistics.chests_opened + 1,
        gems_earned=state.statistics.gems_earned + gems,
    )
    new_state = state._copy_with(
        coins=state.coins - cost,
        gems=state.gems + gems,
        inventory=state.inventory.with_items(items),
        collection_book=book,
        statistics=statistics,
    )

    result = ActionResult.success_with_state(
        new_state,
        changes=[f"Opened chest: {len(items)} items, +{gems} gems"],
        signals=[FeedbackSignal.particles()],
        follow_ups=[Action.check_achievements()],
    )
    result.chest_reward = ChestReward(type=_chest_label(items), items=items)
    return result


def tick(state: GameState, seconds: int = 1) -> ActionResult:
    """Advance total play time."""
    statistics = replace(
        state.statistics,
        total_play_time=state.statistics.total_play_time + max(0, seconds),
    )
    return ActionResult.success_with_state(state._copy_with(statistics=statistics))
