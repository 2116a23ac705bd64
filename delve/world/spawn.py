"""Spawn safety predicates and player placement helpers.

Used both for the initial spawn in a fresh world and for every door
transition. A position is safe when all four cardinal neighbours are inside
the grid and walkable; grid edges are therefore never safe.
"""
from __future__ import annotations

from typing import List, Optional

from ..logging_utils import get_logger
from .area import Area, Coord
from .features import CARDINALS, clear_area_around_door
from .tiles import CHEST_CELLS, EMPTY, OPEN_CELLS, WALL

log = get_logger("delve.world.spawn")

DEFAULT_SPAWN = (25, 25)
SYNTHESIZED_DOOR_MIN_CELLS = 5
FALLBACK_ATTEMPTS = 100


def is_walkable_neighbor(area: Area, x: int, y: int) -> bool:
    cell = area.get_cell(x, y)
    if cell is None or cell == WALL:
        return False
    if cell in OPEN_CELLS:
        return True
    return cell not in CHEST_CELLS and (x, y) not in area.enemies


def is_safe_spawn_position(area: Area, x: int, y: int) -> bool:
    return all(is_walkable_neighbor(area, x + dx, y + dy) for dx, dy in CARDINALS)


def calculate_position_safety(area: Area, x: int, y: int) -> int:
    score = 0
    for dx, dy in CARDINALS:
        cell = area.get_cell(x + dx, y + dy)
        if cell is None or cell == WALL:
            continue
        score += 2 if cell in OPEN_CELLS else 1
    return score


def rank_adjacent_positions(area: Area, door: Coord) -> List[Coord]:
    """Empty, unoccupied cardinal neighbours of ``door``, safest first."""
    dx0, dy0 = door
    candidates = []
    for dx, dy in CARDINALS:
        x, y = dx0 + dx, dy0 + dy
        if area.get_cell(x, y) == EMPTY and not area.is_occupied(x, y):
            candidates.append((x, y))
    # sorted() is stable so equal scores keep cardinal order
    return sorted(candidates, key=lambda p: calculate_position_safety(area, *p), reverse=True)


def place_near_door(area: Area, door: Coord) -> Coord:
    ranked = rank_adjacent_positions(area, door)
    if ranked:
        return ranked[0]
    log.warn(event="spawn_on_door", area=area.id, x=door[0], y=door[1])
    return area.clamp(*door)


def find_spawn_position(area: Area, rng) -> Coord:
    """Initial spawn for a freshly generated area.

    Prefers an empty, unoccupied cell next to the first exit, then any empty
    unoccupied cell, then the default coordinate clamped into the grid.
    """
    if area.exits:
        ex, ey = area.exits[0]
        near = [
            (ex + dx, ey + dy)
            for dx, dy in CARDINALS
            if area.get_cell(ex + dx, ey + dy) == EMPTY and not area.is_occupied(ex + dx, ey + dy)
        ]
        if near:
            return rng.choice(near)
    empties = [p for p in area.cells_of(EMPTY) if not area.is_occupied(*p)]
    if empties:
        return rng.choice(empties)
    log.warn(event="spawn_default", area=area.id)
    return area.clamp(*DEFAULT_SPAWN)


def find_safe_spawn_door(area: Area) -> Optional[Coord]:
    for door in area.exits:
        if is_safe_spawn_position(area, *door):
            return door
    return None


def create_safe_spawn_door(area: Area) -> Optional[Coord]:
    """Carve a new door on the first empty, safe interior cell."""
    for y in range(2, area.height - 2):
        for x in range(2, area.width - 2):
            if area.get_cell(x, y) == EMPTY and not area.is_occupied(x, y) and is_safe_spawn_position(area, x, y):
                area.add_exit(x, y)
                clear_area_around_door(area, x, y, SYNTHESIZED_DOOR_MIN_CELLS)
                log.info(event="spawn_door_synthesized", area=area.id, x=x, y=y)
                return x, y
    return None


def find_companion_door(area: Area) -> Optional[Coord]:
    return find_safe_spawn_door(area) or create_safe_spawn_door(area)


def place_player_with_fallback(area: Area, rng) -> Coord:
    for _ in range(FALLBACK_ATTEMPTS):
        x = rng.randint(1, max(1, area.width - 2))
        y = rng.randint(1, max(1, area.height - 2))
        if area.get_cell(x, y) == EMPTY and not area.is_occupied(x, y) and is_safe_spawn_position(area, x, y):
            return x, y
    log.warn(event="spawn_fallback_center", area=area.id)
    return area.center
