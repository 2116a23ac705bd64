"""
project: Delve
module: world_api.py
License: MIT

World exploration API routes.

Each browser session owns one WorldGraphController held in a small in-process
cache. Endpoints create a world, report state, move the player (doors trigger
area transitions) and persist/restore snapshots through the WorldSave model.
"""

import hashlib
import random
import threading
import time
import uuid

from flask import Blueprint, current_app, jsonify, request, session

from delve import db
from delve.logging_utils import get_logger
from delve.models.world_save import WorldSave
from delve.world.config import WorldConfig
from delve.world.controller import DIRECTIONS, WorldGraphController

log = get_logger("delve.routes.world")

SQLITE_MAX_INT = 2**63 - 1

bp_world = Blueprint("world", __name__)

# world_id -> {"controller", "seed", "last_tick"}. Thread-safe with a lock because
# the dev server may serve requests from several threads.
_world_cache = {}
_world_cache_lock = threading.Lock()


def _cache_max() -> int:
    return int(current_app.config.get("WORLD_CACHE_MAX", 8))


def _coerce_seed(payload_seed):
    """Convert provided seed (int or str) into bounded 64-bit signed int."""
    if payload_seed is None:
        return random.randint(1, 1_000_000)
    if isinstance(payload_seed, bool):
        raise ValueError("seed must be an integer or string")
    if isinstance(payload_seed, int):
        return payload_seed % SQLITE_MAX_INT
    if isinstance(payload_seed, str):
        s = payload_seed.strip()
        if not s:
            return random.randint(1, 1_000_000)
        if s.isdigit():
            return int(s) % SQLITE_MAX_INT
        h = hashlib.sha256(s.encode("utf-8")).digest()
        return int.from_bytes(h[:8], "big") % SQLITE_MAX_INT
    raise ValueError("seed must be an integer or string")


def _store(controller: WorldGraphController, seed) -> str:
    world_id = uuid.uuid4().hex
    with _world_cache_lock:
        _world_cache[world_id] = {"controller": controller, "seed": seed, "last_tick": time.monotonic()}
        while len(_world_cache) > _cache_max():
            oldest = next(iter(_world_cache))
            if oldest == world_id:
                break
            _world_cache.pop(oldest, None)
    session["world_id"] = world_id
    return world_id


def _current_world():
    world_id = session.get("world_id")
    if not world_id:
        return None
    with _world_cache_lock:
        return _world_cache.get(world_id)


def get_world_state(controller: WorldGraphController, include_ascii: bool = True) -> dict:
    area = controller.current_area
    state = {
        "area": {
            "index": controller.current_area_index,
            "id": area.id,
            "name": area.name,
            "biome": area.biome,
            "difficulty": area.difficulty,
            "width": area.width,
            "height": area.height,
            "exits": [{"x": x, "y": y} for x, y in area.exits],
            "enemies": len(area.enemies),
            "merchants": len(area.merchants),
            "chests": len(area.chests),
        },
        "player_pos": list(controller.player_pos),
        "areas_generated": len(controller.history),
        "is_teleporting": controller.is_teleporting,
        "progression": controller.progression.to_dict(),
    }
    if include_ascii:
        state["ascii"] = area.to_ascii(player=controller.player_pos)
    return state


@bp_world.route("/api/world/new", methods=["POST"])
def new_world():
    """Create a fresh world for this session.

    Body JSON (optional): { "seed": <int|str|null> }
    """
    data = request.get_json(silent=True) or {}
    try:
        seed = _coerce_seed(data.get("seed"))
    except ValueError as exc:
        return jsonify({"error": str(exc)}), 400
    config = WorldConfig.from_env(seed=seed)
    controller = WorldGraphController(config, random.Random(seed))
    controller.start()
    _store(controller, seed)
    log.info(event="world_created", seed=seed, biome=controller.current_area.biome)
    return jsonify({"seed": seed, **get_world_state(controller)})


@bp_world.route("/api/world/state")
def world_state():
    world = _current_world()
    if world is None:
        return jsonify({"error": "no active world"}), 404
    return jsonify({"seed": world["seed"], **get_world_state(world["controller"])})


@bp_world.route("/api/world/move", methods=["POST"])
def move():
    """Move one step. Body JSON: { "direction": "n"|"s"|"e"|"w" }"""
    world = _current_world()
    if world is None:
        return jsonify({"error": "no active world"}), 404
    data = request.get_json(silent=True) or {}
    direction = str(data.get("direction", "")).lower()
    if direction not in DIRECTIONS:
        return jsonify({"error": "invalid direction"}), 400
    controller = world["controller"]
    now = time.monotonic()
    controller.update(now - world["last_tick"])
    world["last_tick"] = now
    result = controller.move_player(*DIRECTIONS[direction])
    return jsonify({**result, **get_world_state(controller, include_ascii=False)})


@bp_world.route("/api/world/save", methods=["POST"])
def save_world():
    """Persist the session's world. Body JSON: { "slot": <str> }"""
    world = _current_world()
    if world is None:
        return jsonify({"error": "no active world"}), 404
    data = request.get_json(silent=True) or {}
    slot = str(data.get("slot") or "").strip()
    if not slot:
        return jsonify({"error": "slot required"}), 400
    record = WorldSave.query.filter_by(slot=slot).first()
    if record is None:
        record = WorldSave(slot=slot)
        db.session.add(record)
    record.seed = world["seed"]
    record.state = world["controller"].to_dict()
    db.session.commit()
    log.info(event="world_saved", slot=slot, areas=len(world["controller"].history))
    return jsonify({"status": "ok", "slot": slot, "id": record.id})


@bp_world.route("/api/world/load", methods=["POST"])
def load_world():
    """Restore a saved world into this session. Body JSON: { "slot": <str> }"""
    data = request.get_json(silent=True) or {}
    slot = str(data.get("slot") or "").strip()
    if not slot:
        return jsonify({"error": "slot required"}), 400
    record = WorldSave.query.filter_by(slot=slot).first()
    if record is None:
        return jsonify({"error": "unknown slot"}), 404
    try:
        config = WorldConfig.from_env(seed=record.seed)
        controller = WorldGraphController.from_dict(record.state, config, random.Random(record.seed))
    except (KeyError, ValueError, TypeError) as exc:
        log.error(event="world_load_failed", slot=slot, error=exc)
        return jsonify({"error": "corrupt save"}), 400
    _store(controller, record.seed)
    return jsonify({"seed": record.seed, **get_world_state(controller)})
