"""
Snapshot codec - GameState <-> GameSnapshot.

Encoding drops the encounter (enemy, combat flag, log). Decoding fills
missing fields from defaults, merges saved achievements over the
current catalog and starts a fresh session clock.
"""

from __future__ import annotations
from typing import Any, Mapping

from pydantic import ValidationError

from ..engine_core.state import (
    Achievement,
    AchievementReward,
    Armor,
    CategoryAccuracy,
    CollectionBook,
    GameMode,
    GameState,
    Inventory,
    KnowledgeStreak,
    PlayerStats,
    Research,
    Statistics,
    Weapon,
    utc_now,
)
from ..errors import SnapshotDecodeError
from .schemas import (
    AchievementRewardSnapshot,
    AchievementSnapshot,
    ArmorSnapshot,
    CategoryAccuracySnapshot,
    CollectionBookSnapshot,
    GameModeSnapshot,
    GameSnapshot,
    InventorySnapshot,
    KnowledgeStreakSnapshot,
    PlayerStatsSnapshot,
    ResearchSnapshot,
    StatisticsSnapshot,
    WeaponSnapshot,
)


# =============================================================================
# Encoding
# =============================================================================

def _weapon_snapshot(weapon: Weapon) -> WeaponSnapshot:
    return WeaponSnapshot(
        id=weapon.id,
        name=weapon.name,
        rarity=weapon.rarity,
        level=weapon.level,
        base_atk=weapon.base_attack,
        upgrade_cost=weapon.upgrade_cost,
        sell_price=weapon.sell_price,
    )


def _armor_snapshot(armor: Armor) -> ArmorSnapshot:
    return ArmorSnapshot(
        id=armor.id,
        name=armor.name,
        rarity=armor.rarity,
        level=armor.level,
        base_def=armor.base_defense,
        upgrade_cost=armor.upgrade_cost,
        sell_price=armor.sell_price,
    )


def _achievement_snapshot(achievement: Achievement) -> AchievementSnapshot:
    reward = None
    if achievement.reward is not None:
        reward = AchievementRewardSnapshot(
            coins=achievement.reward.coins, gems=achievement.reward.gems
        )
    return AchievementSnapshot(
        id=achievement.id,
        name=achievement.name,
        description=achievement.description,
        reward=reward,
        unlocked=achievement.unlocked,
        unlocked_at=achievement.unlocked_at,
    )


def state_to_snapshot(state: GameState) -> GameSnapshot:
    """Build the persisted form of a state. The encounter is left out."""
    stats = state.player_stats
    inventory = state.inventory
    book = state.collection_book
    streak = state.knowledge_streak
    mode = state.game_mode
    statistics = state.statistics

    current_weapon = inventory.current_weapon
    current_armor = inventory.current_armor

    return GameSnapshot(
        coins=state.coins,
        gems=state.gems,
        zone=state.zone,
        player_stats=PlayerStatsSnapshot(
            hp=stats.hp,
            max_hp=stats.max_hp,
            atk=stats.attack,
            defense=stats.defense,
            base_atk=stats.base_attack,
            base_def=stats.base_defense,
            base_hp=stats.base_hp,
        ),
        inventory=InventorySnapshot(
            weapons=[_weapon_snapshot(w) for w in inventory.weapons.values()],
            armor=[_armor_snapshot(a) for a in inventory.armor.values()],
            current_weapon=_weapon_snapshot(current_weapon) if current_weapon else None,
            current_armor=_armor_snapshot(current_armor) if current_armor else None,
        ),
        research=ResearchSnapshot(
            level=state.research.level,
            tier=state.research.tier,
            total_spent=state.research.total_spent,
        ),
        is_premium=state.is_premium,
        achievements=[_achievement_snapshot(a) for a in state.achievements],
        collection_book=CollectionBookSnapshot(
            weapons={name: True for name in sorted(book.weapons)},
            armor={name: True for name in sorted(book.armor)},
            total_weapons_found=book.total_weapons_found,
            total_armor_found=book.total_armor_found,
            rarity_stats=dict(book.rarity_stats),
        ),
        knowledge_streak=KnowledgeStreakSnapshot(
            current=streak.current,
            best=streak.best,
            multiplier=streak.multiplier,
            last_correct_time=streak.last_correct_time,
        ),
        game_mode=GameModeSnapshot(
            current=mode.current,
            speed_mode_active=mode.speed_mode_active,
            survival_lives=mode.survival_lives,
            max_survival_lives=mode.max_survival_lives,
        ),
        statistics=StatisticsSnapshot(
            total_questions_answered=statistics.total_questions_answered,
            correct_answers=statistics.correct_answers,
            total_play_time=statistics.total_play_time,
            zones_reached=statistics.zones_reached,
            items_collected=statistics.items_collected,
            coins_earned=statistics.coins_earned,
            gems_earned=statistics.gems_earned,
            chests_opened=statistics.chests_opened,
            accuracy_by_category={
                category: CategoryAccuracySnapshot(correct=acc.correct, total=acc.total)
                for category, acc in statistics.accuracy_by_category.items()
            },
            session_start_time=statistics.session_start_time,
        ),
    )


def encode_state(state: GameState) -> dict[str, Any]:
    """JSON-ready dict of the persisted form."""
    return state_to_snapshot(state).model_dump(mode="json", by_alias=True)


# =============================================================================
# Decoding
# =============================================================================

def _weapon_from(snapshot: WeaponSnapshot) -> Weapon:
    return Weapon(
        id=snapshot.id,
        name=snapshot.name,
        rarity=snapshot.rarity,
        base_attack=snapshot.base_atk,
        level=snapshot.level,
        upgrade_cost=snapshot.upgrade_cost,
        sell_price=snapshot.sell_price,
    )


def _armor_from(snapshot: ArmorSnapshot) -> Armor:
    return Armor(
        id=snapshot.id,
        name=snapshot.name,
        rarity=snapshot.rarity,
        base_defense=snapshot.base_def,
        level=snapshot.level,
        upgrade_cost=snapshot.upgrade_cost,
        sell_price=snapshot.sell_price,
    )


def _achievement_from(snapshot: AchievementSnapshot) -> Achievement:
    reward = None
    if snapshot.reward is not None:
        reward = AchievementReward(coins=snapshot.reward.coins, gems=snapshot.reward.gems)
    return Achievement(
        id=snapshot.id,
        name=snapshot.name,
        description=snapshot.description,
        reward=reward,
        unlocked=snapshot.unlocked,
        unlocked_at=snapshot.unlocked_at,
    )


def _inventory_from(snapshot: InventorySnapshot) -> Inventory:
    weapons = {w.id: _weapon_from(w) for w in snapshot.weapons}
    armor = {a.id: _armor_from(a) for a in snapshot.armor}

    # Equipped references must point at owned items
    weapon_id = snapshot.current_weapon.id if snapshot.current_weapon else None
    armor_id = snapshot.current_armor.id if snapshot.current_armor else None
    return Inventory(
        weapons=weapons,
        armor=armor,
        current_weapon_id=weapon_id if weapon_id in weapons else None,
        current_armor_id=armor_id if armor_id in armor else None,
    )


def merge_achievements(
    saved: list[AchievementSnapshot] | None,
    catalog: list[Achievement],
) -> list[Achievement]:
    """
    Lay saved achievements over the current catalog.

    Catalog entries missing from the save are added locked. Saved
    entries no longer in the catalog are kept so unlocks are not lost.
    """
    if saved is None:
        return list(catalog)

    saved_by_id = {s.id: _achievement_from(s) for s in saved}
    merged = []
    for entry in catalog:
        restored = saved_by_id.pop(entry.id, None)
        if restored is None:
            merged.append(entry)
        else:
            # Catalog text and reward win, unlock status comes from the save
            merged.append(Achievement(
                id=entry.id,
                name=entry.name,
                description=entry.description,
                reward=entry.reward,
                unlocked=restored.unlocked,
                unlocked_at=restored.unlocked_at,
            ))
    merged.extend(saved_by_id.values())
    return merged


def snapshot_to_state(snapshot: GameSnapshot, catalog: list[Achievement]) -> GameState:
    """Rebuild a GameState from a snapshot. Combat starts cleared."""
    stats = snapshot.player_stats
    book = snapshot.collection_book
    streak = snapshot.knowledge_streak
    mode = snapshot.game_mode
    statistics = snapshot.statistics
    max_lives = max(1, mode.max_survival_lives)

    return GameState(
        coins=snapshot.coins,
        gems=snapshot.gems,
        zone=snapshot.zone,
        player_stats=PlayerStats(
            hp=max(0, min(stats.hp, stats.max_hp)),
            max_hp=stats.max_hp,
            attack=stats.atk,
            defense=stats.defense,
            base_attack=stats.base_atk,
            base_defense=stats.base_def,
            base_hp=stats.base_hp,
        ),
        inventory=_inventory_from(snapshot.inventory),
        current_enemy=None,
        in_combat=False,
        combat_log=[],
        research=Research(
            level=snapshot.research.level,
            tier=snapshot.research.tier,
            total_spent=snapshot.research.total_spent,
        ),
        achievements=merge_achievements(snapshot.achievements, catalog),
        collection_book=CollectionBook(
            weapons={name for name, found in book.weapons.items() if found},
            armor={name for name, found in book.armor.items() if found},
            total_weapons_found=book.total_weapons_found,
            total_armor_found=book.total_armor_found,
            rarity_stats={**CollectionBook().rarity_stats, **book.rarity_stats},
        ),
        knowledge_streak=KnowledgeStreak(
            current=streak.current,
            best=max(streak.best, streak.current),
            last_correct_time=streak.last_correct_time,
        ),
        game_mode=GameMode(
            current=mode.current,
            survival_lives=max(0, min(mode.survival_lives, max_lives)),
            max_survival_lives=max_lives,
        ),
        statistics=Statistics(
            total_questions_answered=statistics.total_questions_answered,
            correct_answers=statistics.correct_answers,
            total_play_time=statistics.total_play_time,
            zones_reached=max(statistics.zones_reached, snapshot.zone),
            items_collected=statistics.items_collected,
            coins_earned=statistics.coins_earned,
            gems_earned=statistics.gems_earned,
            chests_opened=statistics.chests_opened,
            accuracy_by_category={
                category: CategoryAccuracy(correct=acc.correct, total=acc.total)
                for category, acc in statistics.accuracy_by_category.items()
            },
            session_start_time=utc_now(),
        ),
    )


def decode_state(data: Mapping[str, Any], catalog: list[Achievement]) -> GameState:
    """
    Validate a stored blob and rebuild the state.

    Raises SnapshotDecodeError if the blob does not fit the schema.
    """
    try:
        snapshot = GameSnapshot.model_validate(data)
    except ValidationError as exc:
        raise SnapshotDecodeError(f"Invalid snapshot: {exc.error_count()} validation errors") from exc
    return snapshot_to_state(snapshot, catalog)
