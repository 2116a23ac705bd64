"""Biome terrain generation.

Every generator takes an :class:`Area` (already sized), the active
:class:`WorldConfig` and a ``random.Random``-compatible source and fills the
grid in place. ``generate_terrain`` is the public entry point: it allocates the
area, dispatches on biome (unknown biomes fall back to the mine layout) and
applies the biome's special features (pools, flows, pits).

Shared primitives live at module level so tests can exercise them directly:
cellular automata smoothing, disc stamping with an inner/outer split, pools
that only flood empty cells, and uniform / clustered material sprinkling.
"""
from __future__ import annotations

import math
from typing import Callable, Dict, Optional, Sequence

from . import biomes
from .area import Area
from .config import WorldConfig
from .rooms import connect_rooms, place_rooms
from .tiles import (
    ADAMANTITE,
    BEDROCK,
    COAL,
    CRYSTAL,
    DIAMOND,
    DIRT,
    DRAGON_SCALE,
    EMERALD,
    EMPTY,
    ENCHANTED,
    GEM,
    GOLD,
    GRASS,
    ICE,
    IRON,
    LAVA,
    MYTHRIL,
    OBSIDIAN,
    ROCK,
    RUBY,
    SAND,
    SAPPHIRE,
    WALL,
    WATER,
    WOOD,
)

SPRINKLE_TARGETS = (ROCK, EMPTY)
UNIFORM_SPRINKLE_CHANCE = 0.1
CLUSTER_TAIL_CHANCE = 0.05


def _randint(rng, lo: int, hi: int) -> int:
    """Inclusive randint that tolerates ranges inverted by tiny areas."""
    return rng.randint(lo, hi) if hi >= lo else lo


def count_neighbors(area: Area, x: int, y: int, cell: int) -> int:
    """Count 8-neighbours of (x, y) holding ``cell``; out of bounds never counts."""
    count = 0
    for dy in (-1, 0, 1):
        for dx in (-1, 0, 1):
            if dx == 0 and dy == 0:
                continue
            if area.get_cell(x + dx, y + dy) == cell:
                count += 1
    return count


def seed_interior(area: Area, rng, chance: float, cell: int = EMPTY) -> None:
    for y in range(1, area.height - 1):
        for x in range(1, area.width - 1):
            if rng.random() < chance:
                area.set_cell(x, y, cell)


def cellular_automata(area: Area, rng, open_chance: float, iterations: int,
                      open_threshold: int, closed_threshold: int, solid: int = ROCK) -> None:
    """Seed the interior with open cells then smooth with a majority rule.

    A cell with at least ``open_threshold`` open neighbours opens, one with at
    most ``closed_threshold`` open neighbours turns ``solid``, anything in
    between keeps its state. Each iteration reads the previous generation.
    """
    seed_interior(area, rng, open_chance)
    w = area.width
    for _ in range(iterations):
        nxt = list(area.grid)
        for y in range(1, area.height - 1):
            for x in range(1, w - 1):
                n = count_neighbors(area, x, y, EMPTY)
                if n >= open_threshold:
                    nxt[y * w + x] = EMPTY
                elif n <= closed_threshold:
                    nxt[y * w + x] = solid
        area.grid = nxt


def stamp_disc(area: Area, cx: int, cy: int, radius: int, inner: int, outer: Optional[int] = None,
               targets: Optional[Sequence[int]] = None) -> int:
    """Stamp a disc of Euclidean radius ``radius`` centred at (cx, cy).

    Cells strictly closer than ``radius - 1`` get ``inner``; the rim gets
    ``outer`` (defaults to ``inner``). With ``targets`` only cells currently
    holding one of those codes are replaced. Returns cells written.
    """
    outer = inner if outer is None else outer
    written = 0
    for dy in range(-radius, radius + 1):
        for dx in range(-radius, radius + 1):
            d = math.sqrt(dx * dx + dy * dy)
            if d > radius:
                continue
            px, py = cx + dx, cy + dy
            current = area.get_cell(px, py)
            if current is None or (targets is not None and current not in targets):
                continue
            area.set_cell(px, py, inner if d < radius - 1 else outer)
            written += 1
    return written


def create_pool(area: Area, cx: int, cy: int, liquid: int, radius: int) -> int:
    """Flood a disc with ``liquid``, replacing only empty cells."""
    return stamp_disc(area, cx, cy, radius, liquid, targets=(EMPTY,))


def replace_with_chance(area: Area, rng, source: int, target: int, chance: float) -> None:
    for i, c in enumerate(area.grid):
        if c == source and rng.random() < chance:
            area.grid[i] = target


def fill_with_materials(area: Area, materials: Sequence[int], rng,
                        chance: float = UNIFORM_SPRINKLE_CHANCE) -> None:
    for i, c in enumerate(area.grid):
        if c in SPRINKLE_TARGETS and rng.random() < chance:
            area.grid[i] = rng.choice(materials)


def cluster_stamp_probability(distance: float, cluster_size: int) -> float:
    """Probability that a cell ``distance`` away from a cluster seed is stamped."""
    return max(0.0, 1 - distance / (cluster_size + 1))


def stamp_cluster(area: Area, x: int, y: int, material: int, cluster_size: int, rng) -> None:
    for dy in range(-cluster_size, cluster_size + 1):
        for dx in range(-cluster_size, cluster_size + 1):
            cx, cy = x + dx, y + dy
            if area.get_cell(cx, cy) not in SPRINKLE_TARGETS:
                continue
            d = math.sqrt(dx * dx + dy * dy)
            if rng.random() < cluster_stamp_probability(d, cluster_size):
                area.set_cell(cx, cy, material)


def fill_with_clustered_materials(area: Area, materials: Sequence[int], rng,
                                  cluster_chance: float = 0.1, cluster_size: int = 3) -> None:
    """Two-pass clustered sprinkle: seeded clusters then a sparse uniform tail."""
    for y in range(area.height):
        for x in range(area.width):
            if area.get_cell(x, y) in SPRINKLE_TARGETS and rng.random() < cluster_chance:
                stamp_cluster(area, x, y, rng.choice(materials), cluster_size, rng)
    fill_with_materials(area, materials, rng, chance=CLUSTER_TAIL_CHANCE)


# --- Biome generators --------------------------------------------------------

def generate_mine(area: Area, config: WorldConfig, rng) -> None:
    area.fill(WALL)
    rooms, target, proposals = place_rooms(area, config, rng)
    area.rooms = rooms
    area.corridors = connect_rooms(area, rooms, rng)
    area.metrics["rooms_target"] = target
    area.metrics["rooms_placed"] = len(rooms)
    area.metrics["room_proposals"] = proposals
    fill_with_materials(area, [DIRT, ROCK, COAL, IRON, GOLD], rng)


def generate_cave(area: Area, config: WorldConfig, rng) -> None:
    area.fill(ROCK)
    cellular_automata(area, rng, 0.45, 5, 5, 2)
    fill_with_clustered_materials(area, [ROCK, DIRT, CRYSTAL, GEM, COAL], rng, 0.15, 4)


def add_crystal_formations(area: Area, rng) -> None:
    for _ in range(rng.randint(3, 8)):
        x = _randint(rng, 2, area.width - 2)
        y = _randint(rng, 2, area.height - 2)
        if area.get_cell(x, y) != EMPTY:
            continue
        area.set_cell(x, y, CRYSTAL)
        for dy in (-1, 0, 1):
            for dx in (-1, 0, 1):
                if (dx or dy) and area.get_cell(x + dx, y + dy) == EMPTY and rng.random() < 0.5:
                    area.set_cell(x + dx, y + dy, CRYSTAL)


def generate_crystal_cavern(area: Area, config: WorldConfig, rng) -> None:
    generate_cave(area, config, rng)
    replace_with_chance(area, rng, ROCK, CRYSTAL, 0.3)
    add_crystal_formations(area, rng)


def generate_ancient_ruins(area: Area, config: WorldConfig, rng) -> None:
    generate_mine(area, config, rng)
    replace_with_chance(area, rng, WALL, OBSIDIAN, 0.2)
    fill_with_materials(area, [DIAMOND, EMERALD, RUBY, SAPPHIRE, GOLD], rng)


def generate_cosmic_region(area: Area, config: WorldConfig, rng) -> None:
    area.fill(EMPTY)
    for _ in range(rng.randint(3, 6)):
        cx = _randint(rng, 10, area.width - 10)
        cy = _randint(rng, 10, area.height - 10)
        stamp_disc(area, cx, cy, rng.randint(3, 8), ENCHANTED, BEDROCK)
    fill_with_materials(area, [ENCHANTED, DIAMOND, CRYSTAL], rng)


def generate_volcanic(area: Area, config: WorldConfig, rng) -> None:
    area.fill(ROCK)
    cellular_automata(area, rng, 0.35, 4, 4, 2)
    replace_with_chance(area, rng, ROCK, OBSIDIAN, 0.15)
    fill_with_clustered_materials(area, [ROCK, DIRT, OBSIDIAN, GOLD, DIAMOND, DRAGON_SCALE], rng, 0.08, 4)


def generate_frozen(area: Area, config: WorldConfig, rng) -> None:
    area.fill(ICE)
    for y in range(1, area.height - 1):
        for x in range(1, area.width - 1):
            if rng.random() < 0.6:
                area.set_cell(x, y, EMPTY)
            elif rng.random() < 0.2:
                area.set_cell(x, y, ROCK)
    for _ in range(rng.randint(2, 4)):
        cx = _randint(rng, 5, area.width - 5)
        cy = _randint(rng, 5, area.height - 5)
        create_pool(area, cx, cy, WATER, rng.randint(2, 5))
    replace_with_chance(area, rng, EMPTY, ICE, 0.08)
    fill_with_clustered_materials(area, [ICE, ROCK, CRYSTAL, DIAMOND, SAPPHIRE, EMERALD], rng, 0.12, 3)


def generate_desert(area: Area, config: WorldConfig, rng) -> None:
    area.fill(SAND)
    seed_interior(area, rng, 0.8)
    for _ in range(rng.randint(3, 6)):
        rx = _randint(rng, 5, area.width - 10)
        ry = _randint(rng, 5, area.height - 10)
        rw, rh = rng.randint(3, 6), rng.randint(3, 6)
        for y in range(ry, ry + rh):
            for x in range(rx, rx + rw):
                if area.in_bounds(x, y) and rng.random() < 0.7:
                    area.set_cell(x, y, EMPTY)
    replace_with_chance(area, rng, EMPTY, ROCK, 0.05)
    fill_with_clustered_materials(area, [SAND, ROCK, GOLD, CRYSTAL, RUBY, DIAMOND], rng, 0.06, 2)


def generate_jungle(area: Area, config: WorldConfig, rng) -> None:
    area.fill(DIRT)
    for y in range(1, area.height - 1):
        for x in range(1, area.width - 1):
            if rng.random() < 0.4:
                area.set_cell(x, y, EMPTY)
            elif rng.random() < 0.3:
                area.set_cell(x, y, GRASS)
    for _ in range(rng.randint(3, 5)):
        cx = _randint(rng, 5, area.width - 5)
        cy = _randint(rng, 5, area.height - 5)
        create_pool(area, cx, cy, WATER, rng.randint(1, 3))
    replace_with_chance(area, rng, DIRT, GRASS, 0.2)
    fill_with_clustered_materials(area, [DIRT, GRASS, WOOD, CRYSTAL, GEM, DIAMOND, EMERALD, RUBY], rng, 0.1, 3)


def generate_abyss(area: Area, config: WorldConfig, rng) -> None:
    area.fill(ROCK)
    for _ in range(rng.randint(2, 4)):
        sx = _randint(rng, 3, area.width - 3)
        top = rng.randint(2, 5)
        bottom = _randint(rng, area.height - 8, area.height - 3)
        for y in range(top, bottom):
            area.set_cell(sx, y, EMPTY)
            if rng.random() < 0.6:
                area.set_cell(sx - 1, y, OBSIDIAN)
                area.set_cell(sx + 1, y, OBSIDIAN)
    y = 5
    while y < area.height - 5:
        start = _randint(rng, 3, area.width - 10)
        length = rng.randint(5, 12)
        for x in range(start, min(start + length, area.width)):
            if area.get_cell(x, y) == ROCK:
                area.set_cell(x, y, EMPTY)
        y += rng.randint(3, 6)
    fill_with_clustered_materials(area, [ROCK, OBSIDIAN, DIAMOND, ADAMANTITE, DRAGON_SCALE, MYTHRIL], rng, 0.05, 2)


BIOME_GENERATORS: Dict[str, Callable[[Area, WorldConfig, object], None]] = {
    biomes.MINE: generate_mine,
    biomes.CAVE: generate_cave,
    biomes.CRYSTAL_CAVERN: generate_crystal_cavern,
    biomes.ANCIENT_RUINS: generate_ancient_ruins,
    biomes.COSMIC_REGION: generate_cosmic_region,
    biomes.VOLCANIC: generate_volcanic,
    biomes.FROZEN: generate_frozen,
    biomes.DESERT: generate_desert,
    biomes.JUNGLE: generate_jungle,
    biomes.ABYSS: generate_abyss,
}


# --- Special features --------------------------------------------------------

def _scatter_pools(area: Area, rng, count_range, margin: int, liquid: int, radius: int) -> None:
    for _ in range(rng.randint(*count_range)):
        cx = _randint(rng, margin, area.width - margin)
        cy = _randint(rng, margin, area.height - margin)
        create_pool(area, cx, cy, liquid, radius)


def add_special_features(area: Area, rng) -> None:
    """Biome flavour pass: lava pools and flows, water, ice, oases, grass, pits."""
    biome = area.biome
    if biome == biomes.VOLCANIC:
        _scatter_pools(area, rng, (2, 4), 5, LAVA, 3)
        _scatter_pools(area, rng, (1, 3), 3, LAVA, 1)
    elif biome == biomes.CAVE:
        _scatter_pools(area, rng, (1, 3), 5, WATER, 2)
    elif biome == biomes.FROZEN:
        _scatter_pools(area, rng, (3, 6), 3, ICE, 2)
    elif biome == biomes.DESERT:
        _scatter_pools(area, rng, (1, 2), 5, WATER, 2)
    elif biome == biomes.JUNGLE:
        _scatter_pools(area, rng, (4, 8), 3, GRASS, 2)
    elif biome == biomes.ABYSS:
        # Pits open the surrounding rock into a void
        for _ in range(rng.randint(1, 3)):
            cx = _randint(rng, 4, area.width - 4)
            cy = _randint(rng, 4, area.height - 4)
            stamp_disc(area, cx, cy, 3, EMPTY, targets=(ROCK,))


def generate_terrain(width: int, height: int, biome: str, difficulty: int, rng,
                     config: Optional[WorldConfig] = None) -> Area:
    """Allocate an Area and fill it with the biome's terrain.

    Deterministic for a given ``rng`` state. Features, enclosure and spawn
    selection are separate passes (see ``pipeline.generate_area``).
    """
    config = config or WorldConfig()
    area = Area(width, height, biome, difficulty)
    generator = BIOME_GENERATORS.get(biome, generate_mine)
    generator(area, config, rng)
    add_special_features(area, rng)
    return area


__all__ = [
    "generate_terrain",
    "cellular_automata",
    "stamp_disc",
    "create_pool",
    "fill_with_materials",
    "fill_with_clustered_materials",
    "cluster_stamp_probability",
    "BIOME_GENERATORS",
]
