"""Area generation pipeline.

Runs the ordered phases that turn a biome choice into a finished Area:
terrain, feature placement, wall enclosure and connectivity repair. Each
phase is timed into ``area.metrics['phase_ms']`` when metrics are enabled so
slow biomes show up without a profiler.
"""
from __future__ import annotations

import random
import time
from typing import Optional

from ..logging_utils import get_logger
from .area import Area
from .biomes import generate_area_name
from .config import WorldConfig
from .connectivity import repair_connectivity
from .enclosure import apply_wall_enclosure
from .features import place_features
from .terrain import generate_terrain

log = get_logger("delve.world.pipeline")


def generate_area(width: int, height: int, biome: str, difficulty: int, rng=None,
                  config: Optional[WorldConfig] = None, player_level: int = 1) -> Area:
    config = config or WorldConfig()
    if rng is None:
        rng = random.Random(config.seed)
    phase_times = {}
    start = time.perf_counter()

    def _phase(label, fn, *a, **k):
        ps = time.perf_counter()
        r = fn(*a, **k)
        phase_times[label] = int((time.perf_counter() - ps) * 1000)
        return r

    area = _phase("terrain", generate_terrain, width, height, biome, difficulty, rng, config)
    area.id = str(rng.randint(10000, 99999))
    area.name = generate_area_name(biome, difficulty, rng)
    _phase("features", place_features, area, rng, config, player_level)
    _phase("enclosure", apply_wall_enclosure, area, config.border_thickness)
    if config.enforce_connectivity:
        _phase("connectivity", repair_connectivity, area, config.border_thickness)
    if config.enable_metrics:
        area.metrics["runtime_ms"] = int((time.perf_counter() - start) * 1000)
        area.metrics["phase_ms"] = phase_times
    log.bind(area=area.id, biome=biome).info(
        event="area_generated",
        width=width,
        height=height,
        difficulty=difficulty,
        rooms=len(area.rooms),
        exits=len(area.exits),
        enemies=len(area.enemies),
        runtime_ms=area.metrics.get("runtime_ms"),
    )
    return area


__all__ = ["generate_area", "Area"]
