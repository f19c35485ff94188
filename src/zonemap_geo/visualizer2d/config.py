# config.py
from dataclasses import dataclass
from pathlib import Path
import json
import logging

from zonemap_geo.model.models import DEFAULT_COLOR

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


@dataclass
class ExportConfig:
    map: str = ""
    out: str | None = None
    default_icon: str = ""
    default_color: str = DEFAULT_COLOR
    strict: bool = False
    skip_invalid: bool = False
    overlay_map: bool = False
    tiles: str = "OpenStreetMap.Mapnik"
    zoom: int | None = None
    log_level: str = "WARNING"

    def __post_init__(self):
        if not self.map:
            raise ValueError("map record path is required (positional MAP or 'map' in config)")
        self.log_level = self.log_level.upper()
        if self.log_level not in _LOG_LEVELS:
            raise ValueError(f"log_level must be one of {_LOG_LEVELS}, got {self.log_level!r}")

    def logging_level(self) -> int:
        return getattr(logging, self.log_level)


def load_json(path: str | None) -> dict:
    if not path: return {}
    p = Path(path)
    if not p.exists(): raise FileNotFoundError(path)
    with p.open("r", encoding="utf-8") as f: data = json.load(f)
    if not isinstance(data, dict):
        raise ValueError("config json must be an object")
    return data
