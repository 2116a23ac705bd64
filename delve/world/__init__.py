"""Public world package interface."""

from .area import Area
from .config import WorldConfig
from .controller import AreaHistoryEntry, DoorConnection, WorldGraphController
from .pipeline import generate_area
from .progression import ProgressionState
from .terrain import generate_terrain

__all__ = [
    "Area",
    "WorldConfig",
    "WorldGraphController",
    "AreaHistoryEntry",
    "DoorConnection",
    "ProgressionState",
    "generate_area",
    "generate_terrain",
]
