"""Biome catalogue: names, ordering, progression gates and naming tables."""

from .tiles import DIRT, ENCHANTED, GEM, ICE, LAVA, OBSIDIAN, ROCK, SAND

MINE = "mine"
CAVE = "cave"
CRYSTAL_CAVERN = "crystal_cavern"
ANCIENT_RUINS = "ancient_ruins"
COSMIC_REGION = "cosmic_region"
VOLCANIC = "volcanic"
FROZEN = "frozen"
DESERT = "desert"
JUNGLE = "jungle"
ABYSS = "abyss"

# Every biome with a generator; the main path is its prefix and the only
# part the progression rotates through.
BIOME_ORDER = [
    MINE,
    CAVE,
    CRYSTAL_CAVERN,
    ANCIENT_RUINS,
    COSMIC_REGION,
    VOLCANIC,
    FROZEN,
    DESERT,
    JUNGLE,
    ABYSS,
]
MAIN_PATH = BIOME_ORDER[:5]
DEFAULT_BIOME = MINE

# biome -> (min_difficulty, min_areas_visited)
DIFFICULTY_GATES = {
    MINE: (1, 0),
    CAVE: (2, 2),
    CRYSTAL_CAVERN: (3, 4),
    ANCIENT_RUINS: (4, 6),
    COSMIC_REGION: (5, 8),
}

INTERIOR_MATERIALS = {
    MINE: DIRT,
    CAVE: DIRT,
    CRYSTAL_CAVERN: GEM,
    ABYSS: OBSIDIAN,
    VOLCANIC: ROCK,
    FROZEN: ICE,
    DESERT: SAND,
    JUNGLE: DIRT,
    ANCIENT_RUINS: LAVA,
    COSMIC_REGION: ENCHANTED,
}

_NAME_PREFIXES = {
    MINE: ["Abandoned", "Forgotten", "Dark", "Deep"],
    CAVE: ["Mysterious", "Echoing", "Hidden", "Ancient"],
    CRYSTAL_CAVERN: ["Shimmering", "Radiant", "Prismatic", "Luminous"],
    ANCIENT_RUINS: ["Lost", "Sunken", "Crumbling", "Haunted"],
    COSMIC_REGION: ["Starlit", "Void", "Celestial", "Ethereal"],
    VOLCANIC: ["Fiery", "Smoldering", "Lava-filled", "Ash-covered"],
    FROZEN: ["Frozen", "Icy", "Glacial", "Arctic"],
    DESERT: ["Barren", "Sandy", "Scorching", "Wind-swept"],
    JUNGLE: ["Dense", "Verdant", "Overgrown", "Tropical"],
    ABYSS: ["Bottomless", "Deep", "Endless", "Abyssal"],
}
_NAME_SUFFIXES = {
    MINE: ["Mine", "Shaft", "Tunnels", "Excavation"],
    CAVE: ["Cavern", "Grotto", "Cave", "Chasm"],
    CRYSTAL_CAVERN: ["Cavern", "Grotto", "Cave", "Chamber"],
    ANCIENT_RUINS: ["Ruins", "Temple", "Crypt", "Dungeon"],
    COSMIC_REGION: ["Void", "Nexus", "Realm", "Dimension"],
    VOLCANIC: ["Volcano", "Crater", "Caldera", "Forge"],
    FROZEN: ["Tundra", "Glacier", "Ice Cave", "Frostlands"],
    DESERT: ["Desert", "Wasteland", "Dunes", "Badlands"],
    JUNGLE: ["Jungle", "Wilds", "Thicket", "Rainforest"],
    ABYSS: ["Abyss", "Chasm", "Pit", "Depths"],
}


def interior_material(biome: str) -> int:
    return INTERIOR_MATERIALS.get(biome, DIRT)


def biome_position(biome: str, order=None) -> int:
    """Index of a biome along the main path (-1 when off it)."""
    order = MAIN_PATH if order is None else order
    try:
        return order.index(biome)
    except ValueError:
        return -1


def difficulty_for_index(index: int) -> int:
    return int(1 + index * 0.2)


def generate_area_name(biome: str, difficulty: int, rng) -> str:
    prefix = rng.choice(_NAME_PREFIXES.get(biome, ["Uncharted"]))
    suffix = rng.choice(_NAME_SUFFIXES.get(biome, ["Depths"]))
    level = f" (Level {difficulty})" if difficulty > 1 else ""
    return f"{prefix} {suffix}{level}"
