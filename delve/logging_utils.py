"""Structured event logging for world generation and the API.

Every record is one line on stdout (stderr for errors) made of ``key=value``
pairs, or a compact JSON object when ``DELVE_LOG_JSON`` is set. Records carry
an ``event`` name plus whatever counters the caller has at hand::

    log = get_logger("delve.world.pipeline")
    log.info(event="area_generated", biome="mine", width=40)

``bind()`` returns a child logger that stamps fixed fields (an area id, a
world id) on every record it emits. Fields set to ``None`` are dropped.
"""

from __future__ import annotations

import json
import os
import sys
import time

LEVELS = {"debug": 10, "info": 20, "warn": 30, "error": 40}
CURRENT_LEVEL = LEVELS.get(os.getenv("DELVE_LOG_LEVEL", "info").lower(), 20)
JSON_MODE = os.getenv("DELVE_LOG_JSON", "0").lower() in ("1", "true", "yes", "on")


def _kv(value) -> str:
    if isinstance(value, (int, float)):
        return str(value)
    return str(value).replace(" ", "_")


def _render(level: str, fields: dict) -> str:
    ts = int(time.time())
    if JSON_MODE:
        try:
            return json.dumps({**fields, "level": level, "ts": ts}, separators=(",", ":"), default=str)
        except (TypeError, ValueError):
            return json.dumps({"level": level, "ts": ts, "error": "json_encode_failed"})
    return " ".join([f"level={level}", f"ts={ts}"] + [f"{k}={_kv(v)}" for k, v in fields.items()])


class EventLogger:
    def __init__(self, name: str, context: dict | None = None):
        self.name = name
        self.context = dict(context or {})

    def bind(self, **fields) -> "EventLogger":
        return EventLogger(self.name, {**self.context, **fields})

    def _emit(self, level: str, fields: dict) -> None:
        if LEVELS[level] < CURRENT_LEVEL:
            return
        merged = {k: v for k, v in {**self.context, **fields}.items() if v is not None}
        merged.setdefault("logger", self.name)
        stream = sys.stderr if level == "error" else sys.stdout
        print(_render(level, merged), file=stream)

    def debug(self, **fields):
        self._emit("debug", fields)

    def info(self, **fields):
        self._emit("info", fields)

    def warn(self, **fields):
        self._emit("warn", fields)

    def error(self, **fields):
        self._emit("error", fields)


_LOGGERS: dict[str, EventLogger] = {}


def get_logger(name: str) -> EventLogger:
    if name not in _LOGGERS:
        _LOGGERS[name] = EventLogger(name)
    return _LOGGERS[name]
