import random

import pytest

from delve.world import biomes
from delve.world.area import Area
from delve.world.config import WorldConfig
from delve.world.entities import Enemy
from delve.world.features import (
    clear_area_around_door,
    is_valid_door_position,
    place_crafting_station,
    place_enemies,
    place_exits,
    place_features,
    place_merchants,
)
from delve.world.loot import COMMON, EPIC, EQUIPMENT_DEFINITIONS, LEGENDARY, LOOT_TABLES, RARE, chest_rarity, roll_loot
from delve.world.pipeline import generate_area
from delve.world.rooms import Room
from delve.world.tiles import ALL_CELL_TYPES, CHEST, CRAFTING, DOOR, EMPTY, MERCHANT, ROCK, WALL

from world_test_utils import SAMPLE_SEEDS, area_from_rows, count_cells


@pytest.mark.structure
@pytest.mark.parametrize("seed", SAMPLE_SEEDS)
@pytest.mark.parametrize("biome", biomes.BIOME_ORDER)
def test_exactly_one_crafting_station_and_an_exit(seed, biome):
    area = generate_area(42, 40, biome, 2, random.Random(seed))
    assert count_cells(area, CRAFTING) == 1
    assert len(area.exits) >= 1
    for x, y in area.exits:
        assert area.get_cell(x, y) == DOOR


@pytest.mark.structure
@pytest.mark.parametrize("seed", SAMPLE_SEEDS)
def test_mine_feature_counts(seed):
    area = generate_area(40, 40, "mine", 1, random.Random(seed))
    assert 5 <= area.metrics["rooms_target"] <= 10
    assert 5 <= len(area.rooms) <= 10
    assert len(area.rooms) == area.metrics["rooms_placed"]
    assert 1 <= len(area.exits) <= 3
    assert count_cells(area, CRAFTING) == 1
    assert len(area.enemies) <= 16
    assert area.metrics["runtime_ms"] >= 0
    assert set(area.metrics["phase_ms"]) == {"terrain", "features", "enclosure", "connectivity"}


@pytest.mark.structure
def test_entities_sit_on_matching_cells():
    for seed in SAMPLE_SEEDS:
        area = generate_area(50, 50, "cave", 3, random.Random(seed))
        assert set(area.grid) <= ALL_CELL_TYPES
        for pos in area.merchants:
            assert area.get_cell(*pos) == MERCHANT
        for pos in area.chests:
            assert area.get_cell(*pos) == CHEST
        assert not set(area.enemies) & set(area.merchants)


def test_area_gets_id_and_level_name():
    area = generate_area(40, 40, "frozen", 3, random.Random(55))
    assert area.id.isdigit() and 10000 <= int(area.id) <= 99999
    assert area.name.endswith("(Level 3)")
    assert generate_area(40, 40, "mine", 1, random.Random(55)).name.count("(") == 0


def test_all_rock_area_forces_crafting_and_exit():
    area = Area(20, 20, "mine", fill=ROCK)
    cfg = WorldConfig()
    rng = random.Random(0)
    pos = place_crafting_station(area, rng, cfg)
    assert pos == area.center
    assert area.metrics["crafting_forced"] is True
    place_exits(area, rng, cfg)
    assert len(area.exits) == 1
    assert area.metrics["exits_forced"] is True
    door = area.exits[0]
    assert door != pos
    assert area.get_cell(*door) == DOOR
    assert area.get_cell(*pos) == CRAFTING


def test_forced_crafting_scans_for_empty():
    area = Area(20, 20, "mine", fill=ROCK)
    area.set_cell(7, 3, EMPTY)
    cfg = WorldConfig(crafting_attempts=0)
    assert place_crafting_station(area, random.Random(0), cfg) == (7, 3)
    assert count_cells(area, CRAFTING) == 1


def test_boss_in_last_room_at_difficulty_three():
    area = Area(30, 30, "mine", difficulty=3, fill=EMPTY)
    area.rooms = [Room(2, 2, 4, 4), Room(20, 20, 6, 6)]
    place_enemies(area, random.Random(3), WorldConfig())
    boss = area.enemies[(23, 23)]
    assert boss.is_boss
    assert area.metrics["boss_placed"] is True


def test_no_boss_below_difficulty_three():
    area = Area(30, 30, "mine", difficulty=2, fill=EMPTY)
    area.rooms = [Room(2, 2, 4, 4)]
    place_enemies(area, random.Random(3), WorldConfig())
    assert not any(e.is_boss for e in area.enemies.values())


class _ThreeMerchants(random.Random):
    def randint(self, a, b):
        if (a, b) == (0, 3):
            return 3
        return super().randint(a, b)


def test_merchants_displace_enemies_when_floor_is_full():
    rows = [
        "#####",
        "#eee#",
        "#eee#",
        "#eee#",
        "#####",
    ]
    area = area_from_rows(rows)
    placed = place_merchants(area, _ThreeMerchants(11), WorldConfig())
    assert placed == 3
    assert area.metrics["merchants_target"] == 3
    assert area.metrics["merchants_displacing"] == 3
    assert len(area.enemies) == 6
    for pos in area.merchants:
        assert pos not in area.enemies
        assert area.get_cell(*pos) == MERCHANT


def test_boss_is_never_displaced():
    area = area_from_rows(["###", "#e#", "###"])
    area.enemies[(1, 1)] = Enemy(1, 1, "DRAGON", is_boss=True)
    assert place_merchants(area, _ThreeMerchants(2), WorldConfig()) == 0
    assert area.enemies[(1, 1)].is_boss


def test_door_position_needs_three_clearable_neighbours():
    area = area_from_rows([
        "#####",
        "#...#",
        "#.#.#",
        "#####",
    ])
    assert is_valid_door_position(area, 2, 1) is False  # wall below and above
    area.set_cell(2, 2, ROCK)
    assert is_valid_door_position(area, 2, 1) is True
    open_area = area_from_rows(["#####", "#...#", "#...#", "#...#", "#####"])
    assert is_valid_door_position(open_area, 2, 2) is True
    open_area.enemies[(2, 2)] = Enemy(2, 2)
    assert is_valid_door_position(open_area, 2, 2) is False


def test_clearing_preserves_features_and_removes_enemies():
    area = area_from_rows([
        "oooo",
        "oCeo",
        "o.#o",
        "oooo",
    ])
    area.set_cell(3, 1, CRAFTING)
    opened = clear_area_around_door(area, 2, 2)
    assert area.get_cell(1, 1) == CHEST
    assert area.get_cell(2, 3) == EMPTY
    assert area.get_cell(3, 1) == CRAFTING
    assert (2, 1) not in area.enemies
    assert area.get_cell(2, 1) == EMPTY
    # chest and crafting kept; the other six neighbours open
    assert opened == 6


def test_clearing_counts_only_in_bounds_cells():
    area = area_from_rows(["..", ".."])
    assert clear_area_around_door(area, 0, 0) == 3


@pytest.mark.parametrize(
    "difficulty,level,expected",
    [
        (1, 1, COMMON),
        (2, 1, RARE),
        (3, 1, EPIC),
        (4, 1, LEGENDARY),
        (1, 9, COMMON),
        (1, 10, RARE),
        (1, 11, RARE),
        (2, 7, RARE),
        (3, 10, LEGENDARY),
        (2, 9, RARE),
        (2, 10, EPIC),
        (5, 15, LEGENDARY),
        (3, 11, LEGENDARY),
    ],
)
def test_chest_rarity(difficulty, level, expected):
    assert chest_rarity(difficulty, level) == expected


@pytest.mark.parametrize("rarity", [COMMON, RARE, EPIC, LEGENDARY])
def test_roll_loot_shape(rarity):
    rng = random.Random(77)
    table = LOOT_TABLES[rarity]
    for _ in range(30):
        loot = roll_loot(rarity, rng)
        assert len(loot) <= table.max_items
        for item in loot:
            assert item["type"] in {"material", "equipment", "coins"}
            if item["type"] == "coins":
                assert table.coin_range[0] <= item["count"] <= table.coin_range[1]
                assert item["value"] == item["count"]
            elif item["type"] == "equipment":
                assert item["equipment"] in EQUIPMENT_DEFINITIONS
                assert item["durability"] > 0
            else:
                assert item["count"] >= 1
                assert item["material"] in {m[0] for m in table.materials}


def test_place_features_respects_config_object():
    area = Area(30, 30, "mine", fill=EMPTY)
    place_features(area, random.Random(8), WorldConfig())
    assert count_cells(area, CRAFTING) == 1
    assert 1 <= len(area.exits) <= 3
    assert count_cells(area, WALL) == 0
