"""Chest rarity and loot rolling.

Rarity is derived from area difficulty plus a small bonus per player level
above 5. Loot is rolled item by item: a category roll (materials, equipment or
coins) against the tier's category weights, then a cumulative-weight sub-roll
inside the chosen category.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Tuple

from .tiles import (
    ADAMANTITE,
    COAL,
    CRYSTAL,
    DIAMOND,
    DIRT,
    DRAGON_SCALE,
    EMERALD,
    GEM,
    GOLD,
    IRON,
    OBSIDIAN,
    ROCK,
    RUBY,
    SAPPHIRE,
    cell_name,
    material_value,
)

COMMON = "common"
RARE = "rare"
EPIC = "epic"
LEGENDARY = "legendary"

# key -> (name, slot, stats, durability, value)
EQUIPMENT_DEFINITIONS: Dict[str, Tuple[str, str, dict, int, int]] = {
    "WOODEN_PICKAXE": ("Wooden Pickaxe", "pickaxe", {"mining_power": 1, "attack": 2}, 50, 10),
    "STONE_PICKAXE": ("Stone Pickaxe", "pickaxe", {"mining_power": 2, "attack": 4}, 100, 25),
    "IRON_PICKAXE": ("Iron Pickaxe", "pickaxe", {"mining_power": 3, "attack": 6}, 200, 50),
    "GOLD_PICKAXE": ("Gold Pickaxe", "pickaxe", {"mining_power": 4, "attack": 8}, 150, 100),
    "DIAMOND_PICKAXE": ("Diamond Pickaxe", "pickaxe", {"mining_power": 5, "attack": 10}, 500, 200),
    "LEATHER_HELMET": ("Leather Helmet", "helmet", {"defense": 2}, 80, 15),
    "IRON_HELMET": ("Iron Helmet", "helmet", {"defense": 5}, 150, 40),
    "DIAMOND_HELMET": ("Diamond Helmet", "helmet", {"defense": 10}, 300, 150),
    "LEATHER_ARMOR": ("Leather Armor", "armor", {"defense": 3}, 100, 20),
    "IRON_ARMOR": ("Iron Armor", "armor", {"defense": 8}, 200, 60),
    "DIAMOND_ARMOR": ("Diamond Armor", "armor", {"defense": 15}, 400, 200),
    "LEATHER_BOOTS": ("Leather Boots", "boots", {"defense": 1, "speed": 0.1}, 80, 12),
    "IRON_BOOTS": ("Iron Boots", "boots", {"defense": 3, "speed": 0.05}, 150, 35),
    "DIAMOND_BOOTS": ("Diamond Boots", "boots", {"defense": 6, "speed": 0.15}, 300, 120),
    "POWER_GLOVES": ("Power Gloves", "gloves", {"mining_power": 1, "attack": 3}, 120, 30),
    "LUCKY_AMULET": ("Lucky Amulet", "amulet", {"luck": 10}, 200, 80),
}


@dataclass(frozen=True)
class LootTable:
    min_items: int
    max_items: int
    # (materials, equipment, coins) out of 100
    category_weights: Tuple[int, int, int]
    # (cell code, weight, min count, max count)
    materials: Tuple[Tuple[int, int, int, int], ...]
    # (equipment key, weight)
    equipment: Tuple[Tuple[str, int], ...]
    coin_range: Tuple[int, int]


LOOT_TABLES: Dict[str, LootTable] = {
    COMMON: LootTable(
        1, 3, (70, 25, 5),
        ((DIRT, 20, 1, 5), (ROCK, 25, 1, 4), (COAL, 20, 1, 3), (IRON, 15, 1, 2),
         (GOLD, 10, 1, 2), (CRYSTAL, 8, 1, 1), (GEM, 2, 1, 1)),
        (("WOODEN_PICKAXE", 30), ("LEATHER_HELMET", 20), ("LEATHER_ARMOR", 20),
         ("LEATHER_BOOTS", 20), ("POWER_GLOVES", 10)),
        (10, 50),
    ),
    RARE: LootTable(
        2, 4, (50, 35, 15),
        ((IRON, 25, 1, 3), (GOLD, 25, 1, 3), (CRYSTAL, 20, 1, 2), (GEM, 15, 1, 2),
         (DIAMOND, 10, 1, 1), (EMERALD, 3, 1, 1), (RUBY, 2, 1, 1)),
        (("STONE_PICKAXE", 25), ("IRON_HELMET", 20), ("IRON_ARMOR", 20),
         ("IRON_BOOTS", 20), ("POWER_GLOVES", 10), ("LUCKY_AMULET", 5)),
        (50, 150),
    ),
    EPIC: LootTable(
        3, 5, (40, 45, 15),
        ((GOLD, 20, 1, 3), (CRYSTAL, 20, 2, 4), (GEM, 20, 1, 3), (DIAMOND, 15, 1, 2),
         (EMERALD, 10, 1, 2), (RUBY, 8, 1, 2), (SAPPHIRE, 5, 1, 1), (OBSIDIAN, 2, 1, 1)),
        (("IRON_PICKAXE", 20), ("DIAMOND_HELMET", 15), ("DIAMOND_ARMOR", 15),
         ("DIAMOND_BOOTS", 15), ("POWER_GLOVES", 15), ("LUCKY_AMULET", 10), ("GOLD_PICKAXE", 10)),
        (150, 400),
    ),
    LEGENDARY: LootTable(
        4, 6, (30, 50, 20),
        ((DIAMOND, 25, 1, 3), (EMERALD, 20, 1, 3), (RUBY, 15, 1, 2), (SAPPHIRE, 15, 1, 2),
         (OBSIDIAN, 10, 1, 2), (DRAGON_SCALE, 10, 1, 2), (ADAMANTITE, 5, 1, 1)),
        (("DIAMOND_PICKAXE", 40), ("DIAMOND_HELMET", 15), ("DIAMOND_ARMOR", 15),
         ("DIAMOND_BOOTS", 15), ("LUCKY_AMULET", 10), ("POWER_GLOVES", 5)),
        (500, 1000),
    ),
}


def chest_rarity(difficulty: int, player_level: int = 1) -> str:
    total = difficulty + max(0, player_level - 5) * 0.1
    if total >= 3.5 or (difficulty >= 5 and player_level >= 15):
        return LEGENDARY
    if total >= 2.5 or (difficulty >= 3 and player_level >= 10):
        return EPIC
    if total >= 1.5 or (difficulty >= 2 and player_level >= 7):
        return RARE
    return COMMON


def _cumulative_pick(entries, roll: float):
    """Return the first entry whose running weight reaches ``roll`` (None past the end)."""
    upto = 0
    for entry in entries:
        upto += entry[1]
        if roll <= upto:
            return entry
    return None


def roll_loot(rarity: str, rng) -> List[dict]:
    table = LOOT_TABLES[rarity]
    loot: List[dict] = []
    mat_w, equip_w, _coin_w = table.category_weights
    for _ in range(rng.randint(table.min_items, table.max_items)):
        roll = rng.random() * 100
        if roll < mat_w:
            picked = _cumulative_pick(table.materials, rng.random() * 100)
            if picked:
                code, _w, lo, hi = picked
                count = rng.randint(lo, hi)
                loot.append({
                    "type": "material",
                    "material": code,
                    "name": cell_name(code),
                    "count": count,
                    "value": material_value(code) * count,
                })
        elif roll < mat_w + equip_w:
            picked = _cumulative_pick(table.equipment, rng.random() * 100)
            if picked:
                key = picked[0]
                name, slot, stats, durability, value = EQUIPMENT_DEFINITIONS[key]
                loot.append({
                    "type": "equipment",
                    "equipment": key,
                    "name": name,
                    "slot": slot,
                    "stats": dict(stats),
                    "durability": durability,
                    "value": value,
                })
        else:
            amount = rng.randint(*table.coin_range)
            loot.append({"type": "coins", "name": f"{amount} Coins", "count": amount, "value": amount})
    return loot


__all__ = ["chest_rarity", "roll_loot", "LOOT_TABLES", "EQUIPMENT_DEFINITIONS"]
