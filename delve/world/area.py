"""Area: the rectangular cell grid plus per-area metadata.

The grid is a flat row-major list (index ``y * width + x``). Coordinate access
is always bounds-checked: reads outside the grid return ``None`` and writes
outside the grid are ignored. Entity maps are keyed by ``(x, y)`` tuples and
serialized as ``[["x,y", {...}], ...]`` entry lists.
"""
from __future__ import annotations

from typing import Dict, List, Optional, Set, Tuple

from .entities import Chest, Enemy, Merchant
from .metrics import init_metrics
from .rooms import Room
from .tiles import ALL_CELL_TYPES, DOOR, WALL, char_for

Coord = Tuple[int, int]


def coord_key(pos: Coord) -> str:
    return f"{pos[0]},{pos[1]}"


def parse_coord_key(key: str) -> Coord:
    x, y = key.split(",")
    return int(x), int(y)


class Area:
    def __init__(self, width: int, height: int, biome: str, difficulty: int = 1,
                 fill: int = WALL, area_id: Optional[str] = None, name: Optional[str] = None):
        if width <= 0 or height <= 0:
            raise ValueError(f"area dimensions must be positive, got {width}x{height}")
        self.width = width
        self.height = height
        self.biome = biome
        self.difficulty = difficulty
        self.id = area_id
        self.name = name
        self.grid: List[int] = [fill] * (width * height)
        self.rooms: List[Room] = []
        self.corridors: List[Tuple[Coord, Coord]] = []
        self.special_cells: Set[Coord] = set()
        self.exits: List[Coord] = []
        self.enemies: Dict[Coord, Enemy] = {}
        self.merchants: Dict[Coord, Merchant] = {}
        self.chests: Dict[Coord, Chest] = {}
        self.metrics: Dict = init_metrics()

    def __repr__(self):
        return f"<Area {self.id} {self.biome} {self.width}x{self.height} d={self.difficulty}>"

    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def get_cell(self, x: int, y: int) -> Optional[int]:
        if not self.in_bounds(x, y):
            return None
        return self.grid[y * self.width + x]

    def set_cell(self, x: int, y: int, cell: int) -> None:
        if self.in_bounds(x, y):
            self.grid[y * self.width + x] = cell

    def fill(self, cell: int) -> None:
        self.grid = [cell] * (self.width * self.height)

    def cells_of(self, cell: int) -> List[Coord]:
        """Row-major list of coordinates holding ``cell``."""
        w = self.width
        return [(i % w, i // w) for i, c in enumerate(self.grid) if c == cell]

    def count(self, cell: int) -> int:
        return self.grid.count(cell)

    def is_occupied(self, x: int, y: int) -> bool:
        pos = (x, y)
        return pos in self.enemies or pos in self.merchants

    @property
    def center(self) -> Coord:
        return (self.width // 2, self.height // 2)

    def clamp(self, x: int, y: int) -> Coord:
        return (max(0, min(self.width - 1, x)), max(0, min(self.height - 1, y)))

    def add_exit(self, x: int, y: int) -> None:
        self.set_cell(x, y, DOOR)
        if (x, y) not in self.exits:
            self.exits.append((x, y))
        self.special_cells.add((x, y))

    # --- Rendering -------------------------------------------------------
    def to_ascii(self, player: Optional[Coord] = None) -> List[str]:
        rows = []
        for y in range(self.height):
            row = []
            for x in range(self.width):
                if player is not None and (x, y) == tuple(player):
                    row.append("@")
                elif (x, y) in self.enemies:
                    row.append("B" if self.enemies[(x, y)].is_boss else "e")
                else:
                    row.append(char_for(self.grid[y * self.width + x]))
            rows.append("".join(row))
        return rows

    # --- Persistence -----------------------------------------------------
    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "width": self.width,
            "height": self.height,
            "biome": self.biome,
            "difficulty": self.difficulty,
            "grid": list(self.grid),
            "rooms": [r.to_dict() for r in self.rooms],
            "corridors": [[list(a), list(b)] for a, b in self.corridors],
            "special_cells": [list(c) for c in sorted(self.special_cells)],
            "exits": [{"x": x, "y": y} for x, y in self.exits],
            "enemies": [[coord_key(k), v.to_dict()] for k, v in self.enemies.items()],
            "merchants": [[coord_key(k), v.to_dict()] for k, v in self.merchants.items()],
            "chests": [[coord_key(k), v.to_dict()] for k, v in self.chests.items()],
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Area":
        """Rebuild an Area from :meth:`to_dict` output.

        Raises ``ValueError`` when the cell array does not match the declared
        dimensions or holds an unknown cell code, and ``KeyError`` when a
        required key is absent.
        """
        width, height = int(data["width"]), int(data["height"])
        grid = [int(c) for c in data["grid"]]
        if len(grid) != width * height:
            raise ValueError(f"grid length {len(grid)} does not match {width}x{height}")
        unknown = set(grid) - ALL_CELL_TYPES
        if unknown:
            raise ValueError(f"unknown cell codes {sorted(unknown)}")
        area = cls(width, height, data["biome"], int(data.get("difficulty", 1)),
                   area_id=data.get("id"), name=data.get("name"))
        area.grid = grid
        area.rooms = [Room.from_dict(r) for r in data.get("rooms", [])]
        area.corridors = [(tuple(a), tuple(b)) for a, b in data.get("corridors", [])]
        area.special_cells = {tuple(c) for c in data.get("special_cells", [])}
        area.exits = [(int(e["x"]), int(e["y"])) for e in data.get("exits", [])]
        area.enemies = {parse_coord_key(k): Enemy.from_dict(v) for k, v in data.get("enemies", [])}
        area.merchants = {parse_coord_key(k): Merchant.from_dict(v) for k, v in data.get("merchants", [])}
        area.chests = {parse_coord_key(k): Chest.from_dict(v) for k, v in data.get("chests", [])}
        return area


__all__ = ["Area", "Coord", "coord_key", "parse_coord_key"]
