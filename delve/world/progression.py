"""Biome progression state machine.

Tracks which biomes have been visited, how far along the fixed main path the
player is and how many exploration detours have been taken since the last
main-path stop. The state is mutated only when a new area is generated.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Set

from ..logging_utils import get_logger
from . import biomes

log = get_logger("delve.world.progression")


@dataclass
class Gate:
    min_difficulty: int
    min_areas_visited: int

    def is_open(self, difficulty: int, areas_completed: int) -> bool:
        return difficulty >= self.min_difficulty and areas_completed >= self.min_areas_visited


def _default_gates() -> Dict[str, Gate]:
    return {b: Gate(d, a) for b, (d, a) in biomes.DIFFICULTY_GATES.items()}


@dataclass
class ProgressionState:
    visited_biomes: Set[str] = field(default_factory=set)
    main_path_progress: int = 0
    exploration_branches: int = 0
    exploration_branches_allowed: int = 2
    main_path: List[str] = field(default_factory=lambda: list(biomes.MAIN_PATH))
    gates: Dict[str, Gate] = field(default_factory=_default_gates)

    def gate_open(self, biome: str, difficulty: int, areas_completed: int) -> bool:
        gate = self.gates.get(biome)
        return gate is None or gate.is_open(difficulty, areas_completed)

    def unlocked(self, difficulty: int, areas_completed: int) -> List[str]:
        """Gated biomes whose gate is open; ungated biomes never enter the rotation."""
        return [b for b in self.gates if self.gates[b].is_open(difficulty, areas_completed)]

    def next_main_path_biome(self) -> Optional[str]:
        if self.main_path_progress < len(self.main_path):
            return self.main_path[self.main_path_progress]
        return None

    def select_biome(self, difficulty: int, areas_completed: int, current_biome: Optional[str], rng) -> str:
        """Pick the next biome in priority order.

        1. the next main-path biome when its gate is open;
        2. an exploration branch to another open biome, while under the cap;
        3. a uniform revisit among visited, still-open biomes;
        4. any open biome, then the default biome.
        """
        nxt = self.next_main_path_biome()
        if nxt is not None and self.gate_open(nxt, difficulty, areas_completed):
            return nxt
        unlocked = self.unlocked(difficulty, areas_completed)
        if self.exploration_branches < self.exploration_branches_allowed:
            options = [b for b in unlocked if b != current_biome]
            if options:
                self.exploration_branches += 1
                choice = rng.choice(options)
                log.debug(event="exploration_branch", biome=choice, branches=self.exploration_branches)
                return choice
        revisits = sorted(b for b in self.visited_biomes if self.gate_open(b, difficulty, areas_completed))
        if revisits:
            return rng.choice(revisits)
        if unlocked:
            return rng.choice(unlocked)
        return biomes.DEFAULT_BIOME

    def record_visit(self, biome: str) -> None:
        self.visited_biomes.add(biome)
        if biome in self.main_path:
            pos = self.main_path.index(biome)
            if pos >= self.main_path_progress:
                self.main_path_progress = pos + 1
                self.exploration_branches = 0

    def to_dict(self) -> dict:
        return {
            "visited_biomes": sorted(self.visited_biomes),
            "main_path_progress": self.main_path_progress,
            "exploration_branches": self.exploration_branches,
            "exploration_branches_allowed": self.exploration_branches_allowed,
            "main_path": list(self.main_path),
            "difficulty_gates": {
                b: {"min_difficulty": g.min_difficulty, "min_areas_visited": g.min_areas_visited}
                for b, g in self.gates.items()
            },
        }

    @classmethod
    def from_dict(cls, data: dict) -> "ProgressionState":
        state = cls(
            visited_biomes=set(data.get("visited_biomes", [])),
            main_path_progress=int(data.get("main_path_progress", 0)),
            exploration_branches=int(data.get("exploration_branches", 0)),
            exploration_branches_allowed=int(data.get("exploration_branches_allowed", 2)),
        )
        if "main_path" in data:
            state.main_path = list(data["main_path"])
        if "difficulty_gates" in data:
            state.gates = {
                b: Gate(int(g["min_difficulty"]), int(g["min_areas_visited"]))
                for b, g in data["difficulty_gates"].items()
            }
        return state
