# Cell code constants centralized for modular imports
EMPTY = 0
DIRT = 1
ROCK = 2
CRYSTAL = 3
GEM = 4
GOLD = 5
WALL = 6
DOOR = 7
MERCHANT = 8
CHEST = 9
BOSS = 10
BEDROCK = 11
LAVA = 12
WATER = 13
GRASS = 14
SAND = 15
ICE = 16
OBSIDIAN = 17
DIAMOND = 18
EMERALD = 19
RUBY = 20
SAPPHIRE = 21
AMETHYST = 22
COAL = 23
IRON = 24
COPPER = 25
SILVER = 26
PLATINUM = 27
MYTHRIL = 28
ADAMANTITE = 29
ENCHANTED = 30
GEL = 31
SILK = 32
ROTTEN_FLESH = 33
BONE = 34
DRAGON_SCALE = 35
WOOD = 36
CRAFTING = 37
CHEST_OPENED = 38  # looted chest, stays solid for movement

# (name, coin value) for every code that can be mined or looted
MATERIALS = {
    DIRT: ("Dirt", 1),
    ROCK: ("Rock", 2),
    CRYSTAL: ("Crystal", 10),
    GEM: ("Gem", 25),
    GOLD: ("Gold", 50),
    BEDROCK: ("Bedrock", 0),
    LAVA: ("Lava", 0),
    WATER: ("Water", 0),
    GRASS: ("Grass", 2),
    SAND: ("Sand", 1),
    ICE: ("Ice", 8),
    OBSIDIAN: ("Obsidian", 120),
    DIAMOND: ("Diamond", 100),
    EMERALD: ("Emerald", 75),
    RUBY: ("Ruby", 80),
    SAPPHIRE: ("Sapphire", 85),
    AMETHYST: ("Amethyst", 90),
    COAL: ("Coal", 5),
    IRON: ("Iron", 15),
    COPPER: ("Copper", 12),
    SILVER: ("Silver", 25),
    PLATINUM: ("Platinum", 60),
    MYTHRIL: ("Mythril", 150),
    ADAMANTITE: ("Adamantite", 200),
    ENCHANTED: ("Enchanted Stone", 100),
    GEL: ("Gel", 3),
    SILK: ("Silk", 8),
    ROTTEN_FLESH: ("Rotten Flesh", 2),
    BONE: ("Bone", 5),
    DRAGON_SCALE: ("Dragon Scale", 200),
    WOOD: ("Wood", 2),
    CRAFTING: ("Crafting Station", 0),
}

CELL_NAMES = {
    EMPTY: "Empty",
    WALL: "Wall",
    DOOR: "Door",
    MERCHANT: "Merchant",
    CHEST: "Chest",
    BOSS: "Boss",
    CHEST_OPENED: "Opened Chest",
}
CELL_NAMES.update({code: name for code, (name, _value) in MATERIALS.items()})

ALL_CELL_TYPES = frozenset(CELL_NAMES)

# Cells that block spawning and door clearing regardless of contents
CHEST_CELLS = frozenset({CHEST, CHEST_OPENED})
# Cells a door clearing pass must leave untouched
PRESERVED_CELLS = frozenset({WALL, DOOR, CHEST, CHEST_OPENED, CRAFTING, MERCHANT})
# Cells the player can stand on without mining
OPEN_CELLS = frozenset({EMPTY, DOOR, CRAFTING})

_GLYPHS = {
    EMPTY: ".",
    WALL: "#",
    DOOR: "D",
    MERCHANT: "M",
    CHEST: "C",
    CHEST_OPENED: "c",
    BOSS: "B",
    CRAFTING: "X",
    BEDROCK: "%",
    LAVA: "^",
    WATER: "~",
    ICE: "=",
    SAND: ",",
    GRASS: '"',
    DIRT: ":",
    ROCK: "o",
    OBSIDIAN: "O",
    ENCHANTED: "*",
}
MATERIAL_GLYPH = "$"


def char_for(code: int) -> str:
    """Return a single ASCII glyph for a cell code (valuables share '$')."""
    return _GLYPHS.get(code, MATERIAL_GLYPH)


def material_value(code: int) -> int:
    entry = MATERIALS.get(code)
    return entry[1] if entry else 1


def cell_name(code: int) -> str:
    return CELL_NAMES.get(code, "Unknown")


__all__ = [
    "ALL_CELL_TYPES",
    "CELL_NAMES",
    "MATERIALS",
    "CHEST_CELLS",
    "PRESERVED_CELLS",
    "OPEN_CELLS",
    "char_for",
    "material_value",
    "cell_name",
]
