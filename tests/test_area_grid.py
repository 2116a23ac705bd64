import pytest

from delve.world.area import Area, coord_key, parse_coord_key
from delve.world.entities import Chest, Enemy, Merchant
from delve.world.rooms import Room
from delve.world.tiles import ALL_CELL_TYPES, DOOR, EMPTY, ROCK, WALL


def test_grid_is_row_major_and_prefilled():
    a = Area(7, 3, "mine")
    assert len(a.grid) == 21
    assert set(a.grid) == {WALL}
    a.set_cell(6, 2, EMPTY)
    assert a.grid[2 * 7 + 6] == EMPTY
    assert a.get_cell(6, 2) == EMPTY


@pytest.mark.parametrize("x,y", [(-1, 0), (0, -1), (7, 0), (0, 3), (100, 100)])
def test_out_of_bounds_reads_return_none(x, y):
    a = Area(7, 3, "mine")
    assert a.get_cell(x, y) is None


def test_out_of_bounds_writes_are_ignored():
    a = Area(4, 4, "mine", fill=ROCK)
    before = list(a.grid)
    a.set_cell(-1, 2, EMPTY)
    a.set_cell(4, 0, EMPTY)
    assert a.grid == before


def test_invalid_dimensions_rejected():
    with pytest.raises(ValueError):
        Area(0, 5, "mine")


def test_clamp_and_center():
    a = Area(10, 6, "cave")
    assert a.clamp(-3, 99) == (0, 5)
    assert a.center == (5, 3)


def test_add_exit_marks_door_once():
    a = Area(6, 6, "mine", fill=EMPTY)
    a.add_exit(2, 3)
    a.add_exit(2, 3)
    assert a.exits == [(2, 3)]
    assert a.get_cell(2, 3) == DOOR
    assert (2, 3) in a.special_cells


def test_coord_keys():
    assert coord_key((3, 14)) == "3,14"
    assert parse_coord_key("3,14") == (3, 14)


def _populated_area():
    a = Area(8, 6, "frozen", difficulty=2, area_id="12345", name="Icy Tundra (Level 2)")
    a.fill(EMPTY)
    a.rooms = [Room(1, 1, 3, 2)]
    a.add_exit(4, 4)
    a.enemies[(2, 2)] = Enemy(2, 2, "BAT")
    a.merchants[(5, 1)] = Merchant(5, 1)
    a.chests[(6, 4)] = Chest(6, 4, "rare", [{"type": "coins", "count": 60, "value": 60, "name": "60 Coins"}])
    return a


def test_round_trip_preserves_grid_and_entity_keys():
    a = _populated_area()
    data = a.to_dict()
    b = Area.from_dict(data)
    assert b.grid == a.grid
    assert set(b.enemies) == set(a.enemies)
    assert set(b.merchants) == set(a.merchants)
    assert set(b.chests) == set(a.chests)
    assert b.exits == a.exits
    assert b.rooms == a.rooms
    assert (b.width, b.height, b.biome, b.difficulty, b.id, b.name) == (8, 6, "frozen", 2, "12345", "Icy Tundra (Level 2)")
    assert b.chests[(6, 4)].loot == a.chests[(6, 4)].loot


def test_serialized_entities_are_flat_entry_lists():
    data = _populated_area().to_dict()
    assert data["enemies"] == [["2,2", {"x": 2, "y": 2, "type": "BAT", "is_boss": False}]]
    assert data["exits"] == [{"x": 4, "y": 4}]


def test_from_dict_rejects_bad_grid():
    data = _populated_area().to_dict()
    data["grid"] = data["grid"][:-1]
    with pytest.raises(ValueError):
        Area.from_dict(data)
    data = _populated_area().to_dict()
    data["grid"][0] = 999
    assert 999 not in ALL_CELL_TYPES
    with pytest.raises(ValueError):
        Area.from_dict(data)


def test_from_dict_requires_dimensions():
    data = _populated_area().to_dict()
    del data["width"]
    with pytest.raises(KeyError):
        Area.from_dict(data)


def test_ascii_marks_player_and_enemies():
    a = _populated_area()
    rows = a.to_ascii(player=(1, 1))
    assert len(rows) == 6 and all(len(r) == 8 for r in rows)
    assert rows[1][1] == "@"
    assert rows[2][2] == "e"
    assert rows[4][4] == "D"
