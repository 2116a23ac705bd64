"""Entity records placed on an area grid.

Enemies and merchants are opaque to world generation beyond their coordinate
and type; combat and trade systems own the rest of their state.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import List

SLIME = "SLIME"
BAT = "BAT"
SPIDER = "SPIDER"
ZOMBIE = "ZOMBIE"
SKELETON = "SKELETON"
GOLEM = "GOLEM"
DRAGON = "DRAGON"

BOSS_TYPE = DRAGON


def enemy_types_for(difficulty: int) -> List[str]:
    types = [SLIME, BAT]
    if difficulty >= 2:
        types += [SPIDER, ZOMBIE]
    if difficulty >= 3:
        types += [SKELETON, GOLEM]
    return types


@dataclass
class Enemy:
    x: int
    y: int
    type: str = SLIME
    is_boss: bool = False

    def to_dict(self):
        return {"x": self.x, "y": self.y, "type": self.type, "is_boss": self.is_boss}

    @classmethod
    def from_dict(cls, data) -> "Enemy":
        return cls(int(data["x"]), int(data["y"]), data.get("type", SLIME), bool(data.get("is_boss", False)))


@dataclass
class Merchant:
    x: int
    y: int

    def to_dict(self):
        return {"x": self.x, "y": self.y}

    @classmethod
    def from_dict(cls, data) -> "Merchant":
        return cls(int(data["x"]), int(data["y"]))


@dataclass
class Chest:
    x: int
    y: int
    rarity: str
    loot: list = field(default_factory=list)
    opened: bool = False

    def to_dict(self):
        return {"x": self.x, "y": self.y, "rarity": self.rarity, "loot": self.loot, "opened": self.opened}

    @classmethod
    def from_dict(cls, data) -> "Chest":
        return cls(int(data["x"]), int(data["y"]), data["rarity"], list(data.get("loot", [])), bool(data.get("opened", False)))
