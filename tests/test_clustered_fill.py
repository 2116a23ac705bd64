import math
import random

import pytest

from delve.world.area import Area
from delve.world.terrain import cluster_stamp_probability, fill_with_clustered_materials, stamp_cluster
from delve.world.tiles import DIAMOND, GOLD, ROCK, WALL


@pytest.mark.parametrize(
    "distance,size,expected",
    [
        (0, 3, 1.0),
        (1, 3, 0.75),
        (2, 3, 0.5),
        (3, 3, 0.25),
        (4, 3, 0.0),
        (6, 3, 0.0),
        (math.sqrt(2), 1, 1 - math.sqrt(2) / 2),
    ],
)
def test_stamp_probability_formula(distance, size, expected):
    assert cluster_stamp_probability(distance, size) == pytest.approx(expected)


@pytest.mark.statistical
def test_stamp_frequency_falls_off_with_distance():
    size = 3
    trials = 400
    hits = {0: 0, 1: 0, 2: 0, 3: 0}
    rng = random.Random(4242)
    for _ in range(trials):
        area = Area(9, 9, "cave", fill=ROCK)
        stamp_cluster(area, 4, 4, GOLD, size, rng)
        for d in hits:
            if area.get_cell(4 + d, 4) == GOLD:
                hits[d] += 1
    assert hits[0] == trials
    for d in (1, 2, 3):
        observed = hits[d] / trials
        assert abs(observed - cluster_stamp_probability(d, size)) < 0.08


def test_cluster_leaves_non_target_cells_alone():
    area = Area(9, 9, "cave", fill=WALL)
    area.set_cell(4, 4, ROCK)
    stamp_cluster(area, 4, 4, GOLD, 3, random.Random(1))
    assert area.get_cell(4, 4) == GOLD
    assert area.count(WALL) == 80


@pytest.mark.statistical
def test_clustered_fill_groups_materials():
    area = Area(60, 60, "cave", fill=ROCK)
    fill_with_clustered_materials(area, [DIAMOND], random.Random(9), cluster_chance=0.02, cluster_size=3)
    diamonds = area.cells_of(DIAMOND)
    assert diamonds
    with_neighbour = sum(
        1
        for x, y in diamonds
        if any(area.get_cell(x + dx, y + dy) == DIAMOND for dx, dy in ((1, 0), (-1, 0), (0, 1), (0, -1)))
    )
    # Clusters dominate the sparse uniform tail
    assert with_neighbour / len(diamonds) > 0.6
