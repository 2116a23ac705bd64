"""World graph controller.

Owns the ordered area history, the door-to-door connection table and the
player's live coordinate. Areas are generated on demand when an unconnected
door is traversed and reused unchanged on every revisit.

The connection table stores area indices, never Area references: each
connection is recorded twice, keyed by ``(area_index, door_x, door_y)`` of
either end, with the record oriented so that ``from_area_index`` is the end
it is keyed by.
"""
from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from ..logging_utils import get_logger
from .area import Area, Coord
from .biomes import MAIN_PATH, biome_position, difficulty_for_index
from .config import WorldConfig
from .pipeline import generate_area
from .progression import ProgressionState
from .spawn import (
    find_companion_door,
    find_spawn_position,
    is_safe_spawn_position,
    place_near_door,
    place_player_with_fallback,
)
from .tiles import CRAFTING, DOOR, EMPTY

log = get_logger("delve.world.controller")

MAX_FAR_CONNECTIONS = 2
WALKABLE_CELLS = frozenset({EMPTY, DOOR, CRAFTING})
DIRECTIONS = {"n": (0, -1), "s": (0, 1), "e": (1, 0), "w": (-1, 0)}

DoorKey = Tuple[int, int, int]


@dataclass
class AreaHistoryEntry:
    area: Area
    player_pos: Coord
    index: int
    biome: str
    is_main_path: bool

    def to_dict(self) -> dict:
        return {
            "area": self.area.to_dict(),
            "player_pos": list(self.player_pos),
            "index": self.index,
            "biome": self.biome,
            "is_main_path": self.is_main_path,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "AreaHistoryEntry":
        return cls(
            Area.from_dict(data["area"]),
            tuple(data["player_pos"]),
            int(data["index"]),
            data["biome"],
            bool(data.get("is_main_path", False)),
        )


@dataclass(frozen=True)
class DoorConnection:
    from_area_index: int
    from_door: Coord
    to_area_index: int
    to_door: Coord

    def reversed(self) -> "DoorConnection":
        return DoorConnection(self.to_area_index, self.to_door, self.from_area_index, self.from_door)

    def forward(self) -> "DoorConnection":
        """Orientation from the earlier area to the later one."""
        return self if self.from_area_index <= self.to_area_index else self.reversed()

    @property
    def from_key(self) -> DoorKey:
        return (self.from_area_index, self.from_door[0], self.from_door[1])

    @property
    def to_key(self) -> DoorKey:
        return (self.to_area_index, self.to_door[0], self.to_door[1])

    def to_dict(self) -> dict:
        return {
            "from_area_index": self.from_area_index,
            "from_door": {"x": self.from_door[0], "y": self.from_door[1]},
            "to_area_index": self.to_area_index,
            "to_door": {"x": self.to_door[0], "y": self.to_door[1]},
        }

    @classmethod
    def from_dict(cls, data: dict) -> "DoorConnection":
        return cls(
            int(data["from_area_index"]),
            (int(data["from_door"]["x"]), int(data["from_door"]["y"])),
            int(data["to_area_index"]),
            (int(data["to_door"]["x"]), int(data["to_door"]["y"])),
        )


def door_key_str(key: DoorKey) -> str:
    return f"{key[0]}:{key[1]},{key[2]}"


def parse_door_key(raw: str) -> DoorKey:
    idx, coord = raw.split(":")
    x, y = coord.split(",")
    return int(idx), int(x), int(y)


def rng_state_to_json(rng) -> Optional[list]:
    """JSON-safe form of a ``random.Random`` state; None for other sources."""
    if not isinstance(rng, random.Random):
        return None
    version, internal, gauss_next = rng.getstate()
    return [version, list(internal), gauss_next]


def restore_rng_state(rng, state) -> None:
    version, internal, gauss_next = state
    rng.setstate((int(version), tuple(int(v) for v in internal), gauss_next))


class WorldGraphController:
    def __init__(self, config: Optional[WorldConfig] = None, rng=None,
                 progression: Optional[ProgressionState] = None, player_level: int = 1):
        self.config = config or WorldConfig()
        self.rng = rng if rng is not None else random.Random(self.config.seed)
        if progression is None:
            progression = ProgressionState(exploration_branches_allowed=self.config.exploration_branches_allowed)
        self.progression = progression
        self.player_level = player_level
        self.history: List[AreaHistoryEntry] = []
        self.connections: Dict[DoorKey, DoorConnection] = {}
        self.current_area_index = 0
        self.pos_x = 0
        self.pos_y = 0
        self.is_teleporting = False
        self._latch_remaining = 0.0

    # --- Accessors -------------------------------------------------------
    @property
    def current_area(self) -> Optional[Area]:
        if 0 <= self.current_area_index < len(self.history):
            return self.history[self.current_area_index].area
        return None

    @property
    def player_pos(self) -> Coord:
        return (self.pos_x, self.pos_y)

    @property
    def areas_completed(self) -> int:
        return len(self.history)

    def start(self) -> Area:
        """Generate the first area if the world is empty."""
        if not self.history:
            self.generate_new_area()
        return self.current_area

    def connection_for(self, area_index: int, door: Coord) -> Optional[DoorConnection]:
        return self.connections.get((area_index, door[0], door[1]))

    # --- Generation ------------------------------------------------------
    def select_biome_for_next_area(self) -> str:
        index = len(self.history)
        current = self.current_area
        return self.progression.select_biome(
            difficulty_for_index(index),
            self.areas_completed,
            current.biome if current is not None else None,
            self.rng,
        )

    def generate_new_area(self) -> AreaHistoryEntry:
        index = len(self.history)
        biome = self.select_biome_for_next_area()
        width = self.rng.randint(self.config.min_area_size, self.config.max_area_size)
        height = self.rng.randint(self.config.min_area_size, self.config.max_area_size)
        difficulty = difficulty_for_index(index)
        area = generate_area(width, height, biome, difficulty, self.rng, self.config, self.player_level)
        spawn = area.clamp(*find_spawn_position(area, self.rng))
        entry = AreaHistoryEntry(area, spawn, index, biome, biome in MAIN_PATH)
        self.history.append(entry)
        self.progression.record_visit(biome)
        self.current_area_index = index
        self.pos_x, self.pos_y = spawn
        log.info(
            event="area_added",
            index=index,
            biome=biome,
            difficulty=difficulty,
            main_path=self.progression.main_path_progress,
            branches=self.progression.exploration_branches,
        )
        return entry

    # --- Connection rules ------------------------------------------------
    def count_connections_from_area(self, area_index: int, ignore: Tuple[DoorKey, ...] = ()) -> int:
        """Connections leading from ``area_index`` to a later area."""
        return sum(
            1
            for key, conn in self.connections.items()
            if key[0] == area_index and conn.to_area_index > area_index and key not in ignore
        )

    def can_create_connection(self, from_index: int, to_index: int, ignore: Tuple[DoorKey, ...] = ()) -> bool:
        if to_index < from_index:
            log.debug(event="connection_rejected_backwards", from_index=from_index, to_index=to_index)
            return False
        if not (0 <= from_index < len(self.history) and 0 <= to_index < len(self.history)):
            return False
        a = biome_position(self.history[from_index].biome, self.progression.main_path)
        b = biome_position(self.history[to_index].biome, self.progression.main_path)
        if abs(a - b) <= 1:
            return True
        return self.count_connections_from_area(from_index, ignore) < MAX_FAR_CONNECTIONS

    def _register(self, conn: DoorConnection) -> None:
        self.connections[conn.from_key] = conn
        self.connections[conn.to_key] = conn.reversed()

    def _drop(self, conn: DoorConnection) -> None:
        self.connections.pop(conn.from_key, None)
        self.connections.pop(conn.to_key, None)

    # --- Traversal -------------------------------------------------------
    def teleport_through_door(self, door: Coord) -> Area:
        """Move the player through ``door`` of the current area.

        Replays a recorded connection when it still satisfies the connection
        rule, otherwise (or when the door is fresh) generates the next area
        and links the two doors.
        """
        door = (int(door[0]), int(door[1]))
        self.is_teleporting = True
        self._latch_remaining = self.config.transition_delay
        conn = self.connection_for(self.current_area_index, door)
        if conn is not None:
            fwd = conn.forward()
            if self.can_create_connection(fwd.from_area_index, fwd.to_area_index, ignore=(fwd.from_key,)):
                self.load_area_from_history(conn.to_area_index, conn.to_door)
            else:
                log.warn(
                    event="connection_rerouted",
                    from_index=conn.from_area_index,
                    to_index=conn.to_area_index,
                )
                self._drop(conn)
                self._create_new_connection(door)
        else:
            self._create_new_connection(door)
        self._clamp_player(reason="teleport")
        return self.current_area

    def _create_new_connection(self, exit_door: Coord) -> None:
        from_index = self.current_area_index
        entry = self.generate_new_area()
        area = entry.area
        target = find_companion_door(area)
        if (
            target is not None
            and is_safe_spawn_position(area, *target)
            and self.can_create_connection(from_index, entry.index)
        ):
            self._register(DoorConnection(from_index, exit_door, entry.index, target))
            self.pos_x, self.pos_y = place_near_door(area, target)
            log.info(event="connection_created", from_index=from_index, to_index=entry.index, door=target)
            return
        log.warn(event="connection_unregistered", from_index=from_index, to_index=entry.index, door=target)
        self.pos_x, self.pos_y = place_player_with_fallback(area, self.rng)

    def load_area_from_history(self, index: int, door: Optional[Coord] = None) -> Area:
        if not 0 <= index < len(self.history):
            log.warn(event="history_miss", index=index, size=len(self.history))
            return self.generate_new_area().area
        entry = self.history[index]
        self.current_area_index = index
        if door is not None:
            self.pos_x, self.pos_y = place_near_door(entry.area, door)
        else:
            self.pos_x, self.pos_y = entry.player_pos
        return entry.area

    # --- Tick ------------------------------------------------------------
    def update(self, dt: float) -> None:
        if self.is_teleporting:
            self._latch_remaining -= dt
            if self._latch_remaining <= 0:
                self.is_teleporting = False
                self._latch_remaining = 0.0
            return
        self.validate_player_bounds()

    def validate_player_bounds(self) -> bool:
        """Clamp the player into the current area; True when a correction happened."""
        if self.is_teleporting:
            return False
        return self._clamp_player(reason="tick")

    def _clamp_player(self, reason: str) -> bool:
        area = self.current_area
        if area is None:
            return False
        clamped = area.clamp(self.pos_x, self.pos_y)
        if clamped == (self.pos_x, self.pos_y):
            return False
        log.error(
            event="player_out_of_bounds",
            reason=reason,
            x=self.pos_x,
            y=self.pos_y,
            width=area.width,
            height=area.height,
        )
        self.pos_x, self.pos_y = clamped
        return True

    def move_player(self, dx: int, dy: int) -> dict:
        """Step the player one cell; stepping onto an exit teleports."""
        area = self.current_area
        if area is None or self.is_teleporting:
            return {"moved": False, "teleported": False}
        nx, ny = self.pos_x + dx, self.pos_y + dy
        cell = area.get_cell(nx, ny)
        if cell not in WALKABLE_CELLS or area.is_occupied(nx, ny):
            return {"moved": False, "teleported": False}
        self.pos_x, self.pos_y = nx, ny
        if cell == DOOR and (nx, ny) in area.exits:
            self.teleport_through_door((nx, ny))
            return {"moved": True, "teleported": True}
        return {"moved": True, "teleported": False}

    # --- Persistence -----------------------------------------------------
    def to_dict(self) -> dict:
        return {
            "history": [e.to_dict() for e in self.history],
            "connections": [[door_key_str(k), c.to_dict()] for k, c in self.connections.items()],
            "progression": self.progression.to_dict(),
            "current_area_index": self.current_area_index,
            "player_pos": [self.pos_x, self.pos_y],
            "player_level": self.player_level,
            "rng_state": rng_state_to_json(self.rng),
        }

    @classmethod
    def from_dict(cls, data: dict, config: Optional[WorldConfig] = None, rng=None) -> "WorldGraphController":
        ctrl = cls(
            config=config,
            rng=rng,
            progression=ProgressionState.from_dict(data.get("progression", {})),
            player_level=int(data.get("player_level", 1)),
        )
        ctrl.history = [AreaHistoryEntry.from_dict(e) for e in data["history"]]
        if not ctrl.history:
            raise ValueError("snapshot holds no areas")
        ctrl.connections = {parse_door_key(k): DoorConnection.from_dict(v) for k, v in data.get("connections", [])}
        ctrl.current_area_index = int(data.get("current_area_index", 0))
        if not 0 <= ctrl.current_area_index < len(ctrl.history):
            raise ValueError(f"current_area_index {ctrl.current_area_index} out of range")
        ctrl.pos_x, ctrl.pos_y = (int(v) for v in data.get("player_pos", (0, 0)))
        if data.get("rng_state") is not None and isinstance(ctrl.rng, random.Random):
            # Continue the saved stream so later areas do not replay the seed's start
            restore_rng_state(ctrl.rng, data["rng_state"])
        ctrl._clamp_player(reason="load")
        return ctrl


__all__ = ["WorldGraphController", "AreaHistoryEntry", "DoorConnection", "DIRECTIONS"]
