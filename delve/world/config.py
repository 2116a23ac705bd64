import os
from dataclasses import dataclass, fields
from typing import Optional

from flask import current_app, has_app_context


@dataclass
class WorldConfig:
    min_area_size: int = 40
    max_area_size: int = 80
    border_thickness: int = 1
    min_rooms: int = 5
    max_rooms: int = 10
    min_room_size: int = 4
    max_room_size: int = 8
    room_attempts: int = 50
    merchant_attempts: int = 200
    crafting_attempts: int = 100
    exit_attempts: int = 100
    exploration_branches_allowed: int = 2
    transition_delay: float = 0.1
    enforce_connectivity: bool = True
    enable_metrics: bool = True
    seed: Optional[int] = None

    @classmethod
    def from_env(cls, environ=None, **overrides) -> "WorldConfig":
        """Build a config from ``DELVE_<FIELD>`` variables, then explicit overrides.

        Flask app config keys ``WORLD_<FIELD>`` take precedence over the
        environment when an application context is active.
        """
        env = os.environ if environ is None else environ
        cfg = cls()
        for f in fields(cls):
            key = f"DELVE_{f.name.upper()}"
            if key in env:
                setattr(cfg, f.name, _coerce(f.name, env[key], getattr(cfg, f.name)))
        if has_app_context():
            app_cfg = current_app.config
            for f in fields(cls):
                key = f"WORLD_{f.name.upper()}"
                if key in app_cfg and app_cfg[key] is not None:
                    setattr(cfg, f.name, _coerce(f.name, app_cfg[key], getattr(cfg, f.name)))
        for k, v in overrides.items():
            setattr(cfg, k, v)
        cfg.validate()
        return cfg

    def validate(self) -> None:
        if self.min_area_size < 5 or self.max_area_size < self.min_area_size:
            raise ValueError(f"invalid area size range {self.min_area_size}..{self.max_area_size}")
        if self.min_rooms > self.max_rooms or self.min_room_size > self.max_room_size:
            raise ValueError("room ranges must be ascending")
        if self.border_thickness < 1:
            raise ValueError("border_thickness must be >= 1")


def _coerce(name: str, raw, current):
    if isinstance(raw, str):
        if isinstance(current, bool):
            return raw.lower() not in {"0", "false", "no", ""}
        if name == "seed":
            return int(raw) if raw.strip() else None
        if isinstance(current, float):
            return float(raw)
        if isinstance(current, int):
            return int(raw)
    return raw


__all__ = ["WorldConfig"]
