# csv_io.py
"""
Landmark CSV export / import.

The export format is a compatibility surface for the globe viewer and any
tool that ingests it:

    name,lon,lat,icon,color,contentUrl

one row per zone in input order, lon/lat fixed-point with 7 decimals, rows
joined with ``\\n`` and no trailing newline. Every text column goes through
:func:`escape_csv_field`.
"""
from __future__ import annotations
import csv
import io
import logging
import math
from typing import Iterable, List, Optional

from zonemap_geo.model.errors import MissingGeographicBounds
from zonemap_geo.model.models import (
    DEFAULT_COLOR,
    CanvasConfig,
    GeographicBounds,
    LandmarkRecord,
)
from .builder import ZoneLike, build_landmark, project_zones

logger = logging.getLogger(__name__)

CSV_COLUMNS = ("name", "lon", "lat", "icon", "color", "contentUrl")
CSV_HEADER = ",".join(CSV_COLUMNS)
REQUIRED_COLUMNS = ("name", "lon", "lat", "icon")
COORD_DECIMALS = 7

_NEEDS_QUOTING = (",", '"', "\n", "\r")


def escape_csv_field(value: Optional[str]) -> str:
    """Quote a field containing , " or a line break; inner quotes are doubled."""
    if not value:
        return ""
    if any(ch in value for ch in _NEEDS_QUOTING):
        return '"' + value.replace('"', '""') + '"'
    return value


def format_coord(value: float) -> str:
    return f"{value:.{COORD_DECIMALS}f}"


def landmark_to_row(lm: LandmarkRecord) -> str:
    return ",".join((
        escape_csv_field(lm.name),
        format_coord(lm.lon),
        format_coord(lm.lat),
        escape_csv_field(lm.icon),
        escape_csv_field(lm.color),
        escape_csv_field(lm.content_url),
    ))


def landmarks_to_csv(landmarks: Iterable[LandmarkRecord]) -> str:
    return "\n".join([CSV_HEADER, *(landmark_to_row(lm) for lm in landmarks)])


def zones_to_csv(
    zones: Iterable[ZoneLike],
    canvas_config: CanvasConfig,
    bounds: Optional[GeographicBounds],
    default_icon: str = "",
    default_color: str = DEFAULT_COLOR,
    *,
    strict: bool = False,
    skip_invalid: bool = False,
) -> str:
    """
    Zones -> CSV text for the globe viewer.

    Unlike :func:`zones_to_landmarks`, a missing ``bounds`` is an error: an
    export file with no rows is almost certainly a caller mistake.
    Only the six CSV columns are exported (no description/images/links/videos).
    """
    if bounds is None:
        raise MissingGeographicBounds()

    landmarks = [
        build_landmark(zone, point, default_icon, default_color)
        for zone, point in project_zones(
            zones, canvas_config, bounds, strict=strict, skip_invalid=skip_invalid
        )
    ]
    logger.debug("writing %d landmark rows", len(landmarks))
    return landmarks_to_csv(landmarks)


# --- 読み込み -----------------------------------------------------------

def _parse_coord(text: str) -> float:
    try:
        value = float(text)
    except ValueError:
        return 0.0
    return value if math.isfinite(value) else 0.0


def parse_landmarks_csv(text: str) -> List[LandmarkRecord]:
    """
    CSV text -> landmarks (the globe viewer's reader).

    ``name, lon, lat, icon`` are required columns, ``color`` and
    ``contentUrl`` optional. Unparseable coordinates read as 0.0.
    """
    reader = csv.reader(io.StringIO(text.strip()))
    rows = [r for r in reader if any(cell.strip() for cell in r)]
    if len(rows) < 2:
        raise ValueError("CSV must contain at least a header row and one data row")

    header = [h.strip() for h in rows[0]]
    missing = [c for c in REQUIRED_COLUMNS if c not in header]
    if missing:
        raise ValueError(f"CSV must contain required columns: {', '.join(REQUIRED_COLUMNS)} "
                         f"(missing: {', '.join(missing)})")
    idx = {name: header.index(name) for name in CSV_COLUMNS if name in header}

    def cell(row: List[str], column: str) -> str:
        i = idx.get(column)
        if i is None or i >= len(row):
            return ""
        return row[i].strip()

    landmarks: List[LandmarkRecord] = []
    for row in rows[1:]:
        landmarks.append(
            LandmarkRecord(
                name=cell(row, "name"),
                lon=_parse_coord(cell(row, "lon")),
                lat=_parse_coord(cell(row, "lat")),
                icon=cell(row, "icon"),
                color=cell(row, "color") or None,
                content_url=cell(row, "contentUrl") or None,
            )
        )
    logger.debug("parsed %d landmarks from CSV", len(landmarks))
    return landmarks


__all__ = [
    "CSV_HEADER",
    "escape_csv_field",
    "landmarks_to_csv",
    "zones_to_csv",
    "parse_landmarks_csv",
]
