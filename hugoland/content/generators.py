"""
Content Generator - Random weapons, armor and enemies.

Rarity decides the stat range, the starting upgrade cost and the
sell price of an item. Enemies scale linearly with the zone.
Mythical items only drop when the caller allows high-tier content.
"""

from __future__ import annotations
from dataclasses import dataclass
import random
import uuid

from ..engine_core.ports import ContentGenerator
from ..engine_core.state import Armor, Enemy, Rarity, Weapon


@dataclass(frozen=True)
class RarityProfile:
    weight: int
    stat_range: tuple[int, int]
    upgrade_cost: int  # gems
    sell_price: int  # coins


RARITY_PROFILES: dict[Rarity, RarityProfile] = {
    Rarity.COMMON: RarityProfile(weight=50, stat_range=(10, 20), upgrade_cost=5, sell_price=25),
    Rarity.RARE: RarityProfile(weight=30, stat_range=(20, 35), upgrade_cost=10, sell_price=60),
    Rarity.EPIC: RarityProfile(weight=15, stat_range=(35, 55), upgrade_cost=20, sell_price=150),
    Rarity.LEGENDARY: RarityProfile(weight=5, stat_range=(55, 80), upgrade_cost=40, sell_price=400),
    Rarity.MYTHICAL: RarityProfile(weight=4, stat_range=(80, 120), upgrade_cost=80, sell_price=1000),
}

WEAPON_NAMES: dict[Rarity, list[str]] = {
    Rarity.COMMON: ["Wooden Sword", "Rusty Dagger", "Oak Staff", "Stone Axe"],
    Rarity.RARE: ["Steel Sword", "Hunter's Bow", "Iron Mace", "Silver Spear"],
    Rarity.EPIC: ["Flame Blade", "Frost Hammer", "Storm Bow", "Shadow Scythe"],
    Rarity.LEGENDARY: ["Dragon Slayer", "Excalibur", "Thunder Fury", "Soul Reaper"],
    Rarity.MYTHICAL: ["Blade of Eternity", "Worldbreaker", "Starforged Lance"],
}

ARMOR_NAMES: dict[Rarity, list[str]] = {
    Rarity.COMMON: ["Leather Vest", "Cloth Robe", "Padded Tunic", "Hide Cloak"],
    Rarity.RARE: ["Chainmail", "Scale Armor", "Reinforced Coat", "Bronze Plate"],
    Rarity.EPIC: ["Mithril Mail", "Phoenix Robe", "Frostguard Plate", "Warden's Aegis"],
    Rarity.LEGENDARY: ["Dragon Scale Armor", "Aegis of Kings", "Titan Plate", "Celestial Robe"],
    Rarity.MYTHICAL: ["Mantle of the Cosmos", "Eternal Bulwark", "Voidwoven Shroud"],
}

ENEMY_NAMES = [
    "Goblin", "Skeleton", "Orc Brute", "Dark Wizard", "Troll",
    "Harpy", "Cave Spider", "Wraith", "Minotaur", "Young Dragon",
]

# Enemy scaling per zone
ENEMY_BASE_HP = 80
ENEMY_HP_PER_ZONE = 20
ENEMY_BASE_ATTACK = 15
ENEMY_ATTACK_PER_ZONE = 5
ENEMY_DEFENSE_PER_ZONE = 2

# Research bonus in percent
RESEARCH_BONUS_PER_LEVEL = 2
RESEARCH_BONUS_PER_TIER = 10


class RandomContentGenerator(ContentGenerator):
    """
    Seedable content generator.

    Usage:
        content = RandomContentGenerator(random.Random(42))
        weapon = content.generate_weapon()
        enemy = content.generate_enemy(zone=3)
    """

    def __init__(self, rng: random.Random | None = None):
        self.rng = rng or random.Random()

    def generate_weapon(self, high_tier_allowed: bool = False) -> Weapon:
        rarity = self._roll_rarity(high_tier_allowed)
        profile = RARITY_PROFILES[rarity]
        return Weapon(
            id=self._make_id(),
            name=self.rng.choice(WEAPON_NAMES[rarity]),
            rarity=rarity,
            base_attack=self.rng.randint(*profile.stat_range),
            upgrade_cost=profile.upgrade_cost,
            sell_price=profile.sell_price,
        )

    def generate_armor(self, high_tier_allowed: bool = False) -> Armor:
        rarity = self._roll_rarity(high_tier_allowed)
        profile = RARITY_PROFILES[rarity]
        return Armor(
            id=self._make_id(),
            name=self.rng.choice(ARMOR_NAMES[rarity]),
            rarity=rarity,
            base_defense=self.rng.randint(*profile.stat_range) // 2,
            upgrade_cost=profile.upgrade_cost,
            sell_price=profile.sell_price,
        )

    def generate_enemy(self, zone: int) -> Enemy:
        zone = max(1, zone)
        max_hp = ENEMY_BASE_HP + zone * ENEMY_HP_PER_ZONE
        return Enemy(
            name=self.rng.choice(ENEMY_NAMES),
            zone=zone,
            hp=max_hp,
            max_hp=max_hp,
            attack=ENEMY_BASE_ATTACK + zone * ENEMY_ATTACK_PER_ZONE,
            defense=zone * ENEMY_DEFENSE_PER_ZONE,
        )

    def calculate_research_bonus(self, level: int, tier: int) -> float:
        return level * RESEARCH_BONUS_PER_LEVEL + tier * RESEARCH_BONUS_PER_TIER

    def _roll_rarity(self, high_tier_allowed: bool) -> Rarity:
        rarities = [
            r for r in RARITY_PROFILES
            if high_tier_allowed or r is not Rarity.MYTHICAL
        ]
        weights = [RARITY_PROFILES[r].weight for r in rarities]
        return self.rng.choices(rarities, weights=weights)[0]

    def _make_id(self) -> str:
        return str(uuid.UUID(int=self.rng.getrandbits(128), version=4))
