"""Feature placement on a generated area.

Routines run in a fixed order (enemies, merchants, chests, crafting station,
exits) and mutate the area in place. Each uses bounded random retries followed
by a deterministic fallback, so the hard guarantees hold for every area:
exactly one crafting station and at least one exit.

Random coordinates are sampled from the interior only (inside the border
thickness) so the enclosure pass never overwrites a placed feature.
"""
from __future__ import annotations

from typing import Optional

from ..logging_utils import get_logger
from .area import Area, Coord
from .config import WorldConfig
from .entities import BOSS_TYPE, Chest, Enemy, Merchant, enemy_types_for
from .loot import chest_rarity, roll_loot
from .tiles import CHEST, CHEST_CELLS, CRAFTING, EMPTY, MERCHANT, PRESERVED_CELLS, WALL

log = get_logger("delve.world.features")

CARDINALS = ((-1, 0), (1, 0), (0, -1), (0, 1))
DOOR_MIN_CLEARABLE = 3
DOOR_CLEAR_CELLS = 3


def _interior_coord(area: Area, rng, margin: int) -> Coord:
    x = rng.randint(margin, max(margin, area.width - 1 - margin))
    y = rng.randint(margin, max(margin, area.height - 1 - margin))
    return x, y


def _scan_empty(area: Area, margin: int) -> Optional[Coord]:
    """First EMPTY cell in a row-major scan of the interior."""
    for y in range(margin, area.height - margin):
        for x in range(margin, area.width - margin):
            if area.get_cell(x, y) == EMPTY:
                return x, y
    return None


def _scan_carvable(area: Area, margin: int) -> Optional[Coord]:
    """First interior cell that holds no feature, for carving a forced door."""
    for y in range(margin, area.height - margin):
        for x in range(margin, area.width - margin):
            if area.get_cell(x, y) not in PRESERVED_CELLS:
                return x, y
    return None


def place_enemies(area: Area, rng, config: WorldConfig) -> int:
    margin = config.border_thickness
    attempts = (area.width * area.height // 100) * area.difficulty
    types = enemy_types_for(area.difficulty)
    placed = 0
    for _ in range(attempts):
        x, y = _interior_coord(area, rng, margin)
        if area.get_cell(x, y) == EMPTY and (x, y) not in area.enemies:
            area.enemies[(x, y)] = Enemy(x, y, rng.choice(types))
            placed += 1
    area.metrics["enemies_attempted"] = attempts
    if area.difficulty >= 3 and area.rooms:
        bx, by = area.rooms[-1].center
        area.enemies[(bx, by)] = Enemy(bx, by, BOSS_TYPE, is_boss=True)
        area.metrics["boss_placed"] = True
    area.metrics["enemies_placed"] = len(area.enemies)
    return placed


def place_merchants(area: Area, rng, config: WorldConfig) -> int:
    margin = config.border_thickness
    target = rng.randint(0, 3)
    placed = 0
    attempts = 0
    while placed < target and attempts < config.merchant_attempts:
        attempts += 1
        x, y = _interior_coord(area, rng, margin)
        if area.get_cell(x, y) == EMPTY and (x, y) not in area.enemies:
            area.merchants[(x, y)] = Merchant(x, y)
            area.set_cell(x, y, MERCHANT)
            placed += 1
    displaced = 0
    if placed < target:
        log.debug(event="merchant_displacement", area=area.id, placed=placed, target=target)
        while placed + displaced < target and attempts < config.merchant_attempts * 2:
            attempts += 1
            pos = _interior_coord(area, rng, margin)
            enemy = area.enemies.get(pos)
            if enemy is not None and not enemy.is_boss:
                del area.enemies[pos]
                area.merchants[pos] = Merchant(*pos)
                area.set_cell(pos[0], pos[1], MERCHANT)
                displaced += 1
    area.metrics["merchants_target"] = target
    area.metrics["merchants_placed"] = placed + displaced
    area.metrics["merchants_displacing"] = displaced
    area.metrics["enemies_placed"] = len(area.enemies)
    return placed + displaced


def place_chests(area: Area, rng, config: WorldConfig, player_level: int = 1) -> int:
    margin = config.border_thickness
    placed = 0
    for _ in range(rng.randint(2, 5)):
        x, y = _interior_coord(area, rng, margin)
        if area.get_cell(x, y) != EMPTY or (x, y) in area.enemies:
            continue
        rarity = chest_rarity(area.difficulty, player_level)
        area.chests[(x, y)] = Chest(x, y, rarity, roll_loot(rarity, rng))
        area.set_cell(x, y, CHEST)
        placed += 1
    area.metrics["chests_placed"] = placed
    return placed


def place_crafting_station(area: Area, rng, config: WorldConfig) -> Coord:
    """Place exactly one crafting station; never skipped."""
    margin = config.border_thickness
    for _ in range(config.crafting_attempts):
        x, y = _interior_coord(area, rng, margin)
        if area.get_cell(x, y) == EMPTY and not area.is_occupied(x, y):
            area.set_cell(x, y, CRAFTING)
            area.special_cells.add((x, y))
            return x, y
    pos = _scan_empty(area, margin)
    if pos is None:
        pos = area.center
        log.warn(event="crafting_forced_center", area=area.id, x=pos[0], y=pos[1])
    else:
        log.warn(event="crafting_forced_scan", area=area.id, x=pos[0], y=pos[1])
    area.enemies.pop(pos, None)
    area.set_cell(pos[0], pos[1], CRAFTING)
    area.special_cells.add(pos)
    area.metrics["crafting_forced"] = True
    return pos


def is_clearable(area: Area, x: int, y: int) -> bool:
    cell = area.get_cell(x, y)
    if cell is None:
        return False
    if cell == EMPTY:
        return True
    return cell != WALL and cell not in CHEST_CELLS and (x, y) not in area.enemies


def is_valid_door_position(area: Area, x: int, y: int) -> bool:
    if area.get_cell(x, y) != EMPTY or area.is_occupied(x, y):
        return False
    clearable = sum(1 for dx, dy in CARDINALS if is_clearable(area, x + dx, y + dy))
    return clearable >= DOOR_MIN_CLEARABLE


def clear_area_around_door(area: Area, x: int, y: int, min_cells: int = DOOR_CLEAR_CELLS) -> int:
    """Open the 3x3 neighbourhood of a door for safe spawning.

    Walls, doors, chests, crafting stations and merchants are preserved;
    everything else becomes EMPTY and enemies standing there are removed.
    Returns the number of open cells around the door afterwards.
    """
    open_cells = 0
    for dy in (-1, 0, 1):
        for dx in (-1, 0, 1):
            if dx == 0 and dy == 0:
                continue
            px, py = x + dx, y + dy
            cell = area.get_cell(px, py)
            if cell is None:
                continue
            if cell not in PRESERVED_CELLS:
                area.set_cell(px, py, EMPTY)
                area.enemies.pop((px, py), None)
                open_cells += 1
    if open_cells < min_cells:
        log.warn(event="door_clearing_short", area=area.id, x=x, y=y, cleared=open_cells, wanted=min_cells)
    return open_cells


def place_exits(area: Area, rng, config: WorldConfig) -> int:
    # Doors keep one ring of interior between them and the border so the
    # cleared neighbourhood never touches the enclosure.
    margin = config.border_thickness + 1
    target = rng.randint(1, 3)
    attempts = 0
    while len(area.exits) < target and attempts < config.exit_attempts:
        attempts += 1
        x, y = _interior_coord(area, rng, margin)
        if is_valid_door_position(area, x, y):
            area.add_exit(x, y)
            clear_area_around_door(area, x, y)
    if not area.exits:
        pos = _scan_empty(area, margin) or _scan_carvable(area, margin) or area.center
        log.warn(event="exit_forced", area=area.id, x=pos[0], y=pos[1])
        area.enemies.pop(pos, None)
        area.add_exit(*pos)
        clear_area_around_door(area, *pos)
        area.metrics["exits_forced"] = True
    area.metrics["exits_target"] = target
    area.metrics["exits_placed"] = len(area.exits)
    area.metrics["enemies_placed"] = len(area.enemies)
    return len(area.exits)


def place_features(area: Area, rng, config: Optional[WorldConfig] = None, player_level: int = 1) -> None:
    config = config or WorldConfig()
    place_enemies(area, rng, config)
    place_merchants(area, rng, config)
    place_chests(area, rng, config, player_level)
    place_crafting_station(area, rng, config)
    place_exits(area, rng, config)


__all__ = [
    "place_features",
    "place_enemies",
    "place_merchants",
    "place_chests",
    "place_crafting_station",
    "place_exits",
    "is_valid_door_position",
    "clear_area_around_door",
]
