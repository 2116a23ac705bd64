"""Reachability check and corridor repair.

Every non-wall cell is either walkable or mineable, so the only true barriers
inside an enclosed area are WALL and BEDROCK. ``flood_reachable`` explores
from the first exit across everything else; ``repair_connectivity`` carves a
Manhattan corridor to each exit, chest or crafting station the flood missed.
"""
from __future__ import annotations

from collections import deque
from typing import List, Set

from ..logging_utils import get_logger
from .area import Area, Coord
from .enclosure import border_thickness_for, is_border
from .tiles import BEDROCK, CHEST, CRAFTING, EMPTY, WALL

log = get_logger("delve.world.connectivity")

BARRIERS = frozenset({WALL, BEDROCK})


def flood_reachable(area: Area, start: Coord) -> Set[Coord]:
    if area.get_cell(*start) in (None, WALL, BEDROCK):
        return set()
    visited = {start}
    q = deque([start])
    while q:
        cx, cy = q.popleft()
        for dx, dy in ((-1, 0), (1, 0), (0, -1), (0, 1)):
            nxt = (cx + dx, cy + dy)
            if nxt in visited:
                continue
            cell = area.get_cell(*nxt)
            if cell is not None and cell not in BARRIERS:
                visited.add(nxt)
                q.append(nxt)
    return visited


def feature_targets(area: Area) -> List[Coord]:
    targets = list(area.exits)
    targets += area.cells_of(CHEST)
    targets += area.cells_of(CRAFTING)
    return targets


def unreachable_features(area: Area) -> List[Coord]:
    if not area.exits:
        return []
    reach = flood_reachable(area, area.exits[0])
    return [t for t in feature_targets(area) if t not in reach]


def carve_repair_corridor(area: Area, start: Coord, end: Coord, thickness: int) -> int:
    """Walk x then y from start to end, opening barrier cells on the way.

    Feature cells and the border are never touched. Returns cells opened.
    """
    x, y = start
    tx, ty = end
    opened = 0
    while (x, y) != (tx, ty):
        if x != tx:
            x += 1 if tx > x else -1
        else:
            y += 1 if ty > y else -1
        cell = area.get_cell(x, y)
        if cell in BARRIERS and not is_border(area, x, y, thickness):
            area.set_cell(x, y, EMPTY)
            opened += 1
    return opened


def repair_connectivity(area: Area, thickness: int = 1) -> int:
    """Carve corridors from the first exit to unreachable features.

    Returns the number of corridors carved; records counts on area.metrics.
    """
    missing = unreachable_features(area)
    area.metrics["unreachable_features_initial"] = len(missing)
    if not missing:
        return 0
    thickness = border_thickness_for(area, thickness)
    origin = area.exits[0]
    carved = 0
    for target in missing:
        if target in flood_reachable(area, origin):
            continue
        carve_repair_corridor(area, origin, target, thickness)
        carved += 1
    area.metrics["corridors_carved"] = carved
    log.info(event="connectivity_repaired", area=area.id, unreachable=len(missing), corridors=carved)
    return carved
