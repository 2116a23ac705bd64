import pytest

from delve import db
from delve.models.world_save import WorldSave
from delve.routes.world_api import _coerce_seed


@pytest.fixture()
def small_worlds(test_app):
    test_app.config.update(WORLD_MIN_AREA_SIZE=40, WORLD_MAX_AREA_SIZE=40)
    yield
    test_app.config.update(WORLD_MIN_AREA_SIZE=None, WORLD_MAX_AREA_SIZE=None)


def test_state_without_world_is_404(client):
    resp = client.get("/api/world/state")
    assert resp.status_code == 404
    assert resp.get_json()["error"]


def test_new_world_reports_first_area(client, small_worlds):
    resp = client.post("/api/world/new", json={"seed": 42})
    assert resp.status_code == 200
    data = resp.get_json()
    assert data["seed"] == 42
    assert data["areas_generated"] == 1
    area = data["area"]
    assert area["index"] == 0 and area["biome"] == "mine"
    assert area["width"] == 40 and area["height"] == 40
    assert len(data["ascii"]) == 40
    x, y = data["player_pos"]
    assert data["ascii"][y][x] == "@"
    assert data["progression"]["main_path_progress"] == 1


def test_same_seed_same_first_area(client, small_worlds):
    a = client.post("/api/world/new", json={"seed": "delve"}).get_json()
    b = client.post("/api/world/new", json={"seed": "delve"}).get_json()
    assert a["seed"] == b["seed"]
    assert a["ascii"] == b["ascii"]


def test_bad_seed_rejected(client):
    resp = client.post("/api/world/new", json={"seed": [1, 2]})
    assert resp.status_code == 400


def test_move_and_direction_validation(client, small_worlds):
    assert client.post("/api/world/move", json={"direction": "n"}).status_code == 404
    client.post("/api/world/new", json={"seed": 5})
    bad = client.post("/api/world/move", json={"direction": "up"})
    assert bad.status_code == 400
    resp = client.post("/api/world/move", json={"direction": "e"})
    assert resp.status_code == 200
    data = resp.get_json()
    assert set(data) >= {"moved", "teleported", "area", "player_pos"}
    assert "ascii" not in data


def test_save_and_load_round_trip(client, small_worlds):
    created = client.post("/api/world/new", json={"seed": 99}).get_json()
    assert client.post("/api/world/save", json={}).status_code == 400
    resp = client.post("/api/world/save", json={"slot": "alpha"})
    assert resp.status_code == 200
    assert resp.get_json()["slot"] == "alpha"
    # Saving again updates the same row
    assert client.post("/api/world/save", json={"slot": "alpha"}).status_code == 200
    with client.application.app_context():
        assert WorldSave.query.filter_by(slot="alpha").count() == 1

    client.post("/api/world/new", json={"seed": 1})
    loaded = client.post("/api/world/load", json={"slot": "alpha"})
    assert loaded.status_code == 200
    data = loaded.get_json()
    assert data["seed"] == 99
    assert data["ascii"] == created["ascii"]
    assert data["player_pos"] == created["player_pos"]


def test_save_without_world_is_404(client):
    assert client.post("/api/world/save", json={"slot": "x"}).status_code == 404


def test_load_errors(client):
    assert client.post("/api/world/load", json={}).status_code == 400
    assert client.post("/api/world/load", json={"slot": "missing"}).status_code == 404
    with client.application.app_context():
        db.session.add(WorldSave(slot="broken", seed=1, state={"history": []}))
        db.session.commit()
    resp = client.post("/api/world/load", json={"slot": "broken"})
    assert resp.status_code == 400
    assert resp.get_json()["error"] == "corrupt save"


@pytest.mark.parametrize(
    "raw,expected",
    [
        (7, 7),
        ("123", 123),
        (" 88 ", 88),
        (2**63 + 4, (2**63 + 4) % (2**63 - 1)),
    ],
)
def test_coerce_seed_numbers(raw, expected):
    assert _coerce_seed(raw) == expected


def test_coerce_seed_strings_and_blanks():
    assert _coerce_seed("delve") == _coerce_seed("delve")
    assert 0 <= _coerce_seed("delve") < 2**63 - 1
    assert 1 <= _coerce_seed("   ") <= 1_000_000
    assert 1 <= _coerce_seed(None) <= 1_000_000
    with pytest.raises(ValueError):
        _coerce_seed(True)
    with pytest.raises(ValueError):
        _coerce_seed(1.5)
