from .world_save import WorldSave  # noqa: F401

__all__ = ["WorldSave"]
