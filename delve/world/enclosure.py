from ..logging_utils import get_logger
from .area import Area
from .biomes import interior_material
from .tiles import WALL

log = get_logger("delve.world.enclosure")


def border_thickness_for(area: Area, desired: int = 1) -> int:
    return max(1, min(desired, min(area.width, area.height) // 2))


def is_border(area: Area, x: int, y: int, thickness: int) -> bool:
    return x < thickness or y < thickness or x >= area.width - thickness or y >= area.height - thickness


def apply_wall_enclosure(area: Area, thickness: int = 1) -> int:
    """Force a solid wall border and retheme leftover interior walls.

    Returns the number of interior wall cells converted to the biome's
    interior material.
    """
    thickness = border_thickness_for(area, thickness)
    material = interior_material(area.biome)
    converted = 0
    for y in range(area.height):
        for x in range(area.width):
            if is_border(area, x, y, thickness):
                area.set_cell(x, y, WALL)
                area.enemies.pop((x, y), None)
            elif area.get_cell(x, y) == WALL:
                area.set_cell(x, y, material)
                converted += 1
    lost = [e for e in area.exits if is_border(area, e[0], e[1], thickness)]
    if lost:
        log.warn(event="exits_on_border_dropped", area=area.id, count=len(lost))
        area.exits = [e for e in area.exits if e not in lost]
    return converted
