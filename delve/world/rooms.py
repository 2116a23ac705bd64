from dataclasses import dataclass
from typing import List, Tuple

from .config import WorldConfig
from .tiles import EMPTY


@dataclass
class Room:
    x: int
    y: int
    w: int
    h: int

    def cells(self):
        for ix in range(self.x, self.x + self.w):
            for iy in range(self.y, self.y + self.h):
                yield ix, iy

    @property
    def center(self) -> Tuple[int, int]:
        return (self.x + self.w // 2, self.y + self.h // 2)

    def overlaps(self, other: "Room") -> bool:
        # Touching edges count as overlap
        return not (
            self.x + self.w < other.x
            or other.x + other.w < self.x
            or self.y + self.h < other.y
            or other.y + other.h < self.y
        )

    def to_dict(self):
        return {"x": self.x, "y": self.y, "width": self.w, "height": self.h}

    @classmethod
    def from_dict(cls, data) -> "Room":
        return cls(int(data["x"]), int(data["y"]), int(data["width"]), int(data["height"]))


def place_rooms(area, config: WorldConfig, rng):
    """Propose and carve non-overlapping rectangular rooms.

    Returns (rooms, target, proposals). Each room gets ``room_attempts``
    proposals; a room that never fits is skipped rather than retried.
    """
    target = rng.randint(config.min_rooms, config.max_rooms)
    rooms: List[Room] = []
    proposals = 0
    for _ in range(target):
        for _attempt in range(config.room_attempts):
            proposals += 1
            w = rng.randint(config.min_room_size, config.max_room_size)
            h = rng.randint(config.min_room_size, config.max_room_size)
            if area.width - w - 1 < 1 or area.height - h - 1 < 1:
                break
            x = rng.randint(1, area.width - w - 1)
            y = rng.randint(1, area.height - h - 1)
            room = Room(x, y, w, h)
            if any(room.overlaps(r) for r in rooms):
                continue
            for ix, iy in room.cells():
                area.set_cell(ix, iy, EMPTY)
            rooms.append(room)
            break
    return rooms, target, proposals


def carve_corridor(area, start, end, rng, cell=EMPTY):
    """Randomized Manhattan walk from start to end carving ``cell``.

    Each step moves one unit toward the target along x or y chosen by coin
    flip (forced onto the remaining axis once the other is aligned), so the
    path never leaves a diagonal gap. Returns the carved coordinates.
    """
    x, y = start
    tx, ty = end
    path = [(x, y)]
    area.set_cell(x, y, cell)
    while (x, y) != (tx, ty):
        if x != tx and (y == ty or rng.random() < 0.5):
            x += 1 if tx > x else -1
        else:
            y += 1 if ty > y else -1
        area.set_cell(x, y, cell)
        path.append((x, y))
    return path


def connect_rooms(area, rooms: List[Room], rng):
    corridors = []
    for a, b in zip(rooms, rooms[1:]):
        carve_corridor(area, a.center, b.center, rng)
        corridors.append((a.center, b.center))
    return corridors


__all__ = ["Room", "place_rooms", "carve_corridor", "connect_rooms"]
