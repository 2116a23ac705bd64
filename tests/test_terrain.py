import random

import pytest

from delve.world import biomes
from delve.world.area import Area
from delve.world.config import WorldConfig
from delve.world.rooms import Room, carve_corridor
from delve.world.terrain import (
    BIOME_GENERATORS,
    cellular_automata,
    create_pool,
    fill_with_materials,
    generate_terrain,
    stamp_disc,
)
from delve.world.tiles import ALL_CELL_TYPES, BEDROCK, EMPTY, ENCHANTED, LAVA, ROCK, WALL, WATER

from world_test_utils import CARDINALS, count_cells


@pytest.mark.structure
@pytest.mark.parametrize("biome", biomes.BIOME_ORDER)
def test_every_biome_fills_valid_grid(biome):
    area = generate_terrain(45, 41, biome, 2, random.Random(5))
    assert area.biome == biome
    assert len(area.grid) == 45 * 41
    assert set(area.grid) <= ALL_CELL_TYPES


def test_generators_registered_for_all_biomes():
    assert set(BIOME_GENERATORS) == set(biomes.BIOME_ORDER)


def test_generation_is_deterministic_per_seed():
    a = generate_terrain(50, 50, "cave", 1, random.Random(99))
    b = generate_terrain(50, 50, "cave", 1, random.Random(99))
    c = generate_terrain(50, 50, "cave", 1, random.Random(100))
    assert a.grid == b.grid
    assert a.grid != c.grid


def test_unknown_biome_falls_back_to_mine_layout():
    area = generate_terrain(40, 40, "nowhere", 1, random.Random(3))
    assert area.rooms, "room-and-corridor layout expected"


def test_mine_rooms_do_not_overlap_and_are_in_bounds():
    area = generate_terrain(60, 60, "mine", 1, random.Random(8))
    assert 1 <= len(area.rooms) <= 10
    for i, r in enumerate(area.rooms):
        assert 4 <= r.w <= 8 and 4 <= r.h <= 8
        assert r.x >= 1 and r.y >= 1
        assert r.x + r.w <= area.width - 1 and r.y + r.h <= area.height - 1
        for other in area.rooms[i + 1:]:
            assert not r.overlaps(other)


def test_room_overlap_counts_touching():
    assert Room(0, 0, 4, 4).overlaps(Room(4, 0, 4, 4))
    assert not Room(0, 0, 4, 4).overlaps(Room(5, 0, 4, 4))


def test_corridor_is_gap_free():
    area = Area(30, 30, "mine")
    path = carve_corridor(area, (2, 3), (25, 20), random.Random(4))
    assert path[0] == (2, 3) and path[-1] == (25, 20)
    for a, b in zip(path, path[1:]):
        assert abs(a[0] - b[0]) + abs(a[1] - b[1]) == 1
    assert all(area.get_cell(x, y) == EMPTY for x, y in path)


def test_cellular_automata_keeps_border_solid():
    area = Area(30, 20, "cave", fill=ROCK)
    cellular_automata(area, random.Random(12), 0.45, 5, 5, 2)
    for x in range(area.width):
        assert area.get_cell(x, 0) == ROCK
        assert area.get_cell(x, area.height - 1) == ROCK
    assert 0 < count_cells(area, EMPTY) < area.width * area.height


def test_cellular_automata_full_open_stays_open():
    area = Area(12, 12, "cave", fill=ROCK)
    cellular_automata(area, random.Random(1), 1.0, 3, 5, 2)
    # Interior corners see 3 open neighbours: below the open threshold, above closed
    assert area.get_cell(6, 6) == EMPTY
    assert area.get_cell(1, 1) == EMPTY


def test_stamp_disc_inner_outer_split():
    area = Area(21, 21, "cosmic_region", fill=EMPTY)
    stamp_disc(area, 10, 10, 5, ENCHANTED, BEDROCK)
    assert area.get_cell(10, 10) == ENCHANTED
    assert area.get_cell(13, 10) == ENCHANTED  # d=3 < r-1
    assert area.get_cell(14, 10) == BEDROCK  # d=4 on the rim
    assert area.get_cell(15, 10) == BEDROCK  # d=5 == r
    assert area.get_cell(16, 10) == EMPTY
    assert area.get_cell(14, 14) == EMPTY  # d>5 diagonal


def test_create_pool_only_floods_empty():
    area = Area(11, 11, "volcanic", fill=EMPTY)
    area.set_cell(5, 6, ROCK)
    create_pool(area, 5, 5, LAVA, 2)
    assert area.get_cell(5, 5) == LAVA
    assert area.get_cell(5, 6) == ROCK


def test_uniform_sprinkle_only_touches_rock_and_empty():
    area = Area(40, 40, "mine", fill=WALL)
    for x in range(40):
        area.set_cell(x, 20, EMPTY)
    fill_with_materials(area, [WATER], random.Random(2), chance=1.0)
    assert count_cells(area, WATER) == 40
    assert count_cells(area, WALL) == 40 * 39


def test_cosmic_islands_and_voids():
    area = generate_terrain(60, 60, "cosmic_region", 5, random.Random(21))
    assert count_cells(area, BEDROCK) > 0
    assert count_cells(area, EMPTY) > 0


def test_abyss_has_open_shafts():
    area = generate_terrain(50, 50, "abyss", 4, random.Random(6))
    open_cells = [(x, y) for y in range(50) for x in range(50) if area.get_cell(x, y) == EMPTY]
    assert open_cells
    assert any(
        sum(1 for dx, dy in CARDINALS if area.get_cell(x + dx, y + dy) == EMPTY) >= 1 for x, y in open_cells
    )


def test_config_room_bounds_are_respected():
    cfg = WorldConfig(min_rooms=2, max_rooms=2)
    area = generate_terrain(50, 50, "mine", 1, random.Random(4), cfg)
    assert len(area.rooms) <= 2
    assert area.metrics["rooms_target"] == 2
