# zonemap_geo/__init__.py
"""
Zone map -> geography.

- projection: pixel <-> lat/lng (Web Mercator consistent)
- landmark:   zones -> landmark records for the globe viewer
- csv_io:     landmark records <-> CSV text
"""
from .model.errors import (
    ZoneMapError,
    InvalidCanvasSize,
    InvalidBounds,
    MalformedZonePayload,
    MissingGeographicBounds,
    UnsupportedZoneType,
)
from .model.models import (
    GeographicBounds,
    CanvasConfig,
    PointGeometry,
    RectangleGeometry,
    CircleGeometry,
    ZoneType,
    ZoneLink,
    ZoneContent,
    ZoneStyle,
    ZoneRecord,
    Zone,
    GeoPoint,
    LandmarkRecord,
)
from .projection.projection import pixel_to_geo, geo_to_pixel, geometry_to_geo
from .landmark.builder import zones_to_landmarks
from .landmark.csv_io import zones_to_csv, landmarks_to_csv, parse_landmarks_csv

__all__ = [
    "ZoneMapError",
    "InvalidCanvasSize",
    "InvalidBounds",
    "MalformedZonePayload",
    "MissingGeographicBounds",
    "UnsupportedZoneType",
    "GeographicBounds",
    "CanvasConfig",
    "PointGeometry",
    "RectangleGeometry",
    "CircleGeometry",
    "ZoneType",
    "ZoneLink",
    "ZoneContent",
    "ZoneStyle",
    "ZoneRecord",
    "Zone",
    "GeoPoint",
    "LandmarkRecord",
    "pixel_to_geo",
    "geo_to_pixel",
    "geometry_to_geo",
    "zones_to_landmarks",
    "zones_to_csv",
    "landmarks_to_csv",
    "parse_landmarks_csv",
]
