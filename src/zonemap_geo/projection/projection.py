# projection.py
from __future__ import annotations
from dataclasses import dataclass, field
from functools import lru_cache
import math
from typing import Optional, Protocol, Tuple

from zonemap_geo.model.errors import (
    MalformedZonePayload,
    MissingGeographicBounds,
    UnsupportedZoneType,
    ZoneMapError,
)
from zonemap_geo.model.models import (
    CircleGeometry,
    GeographicBounds,
    GeoPoint,
    Geometry,
    PointGeometry,
    RectangleGeometry,
    ZoneType,
    check_canvas_size,
)

_GEOMETRY_FOR_TYPE = {
    ZoneType.POINT.value: PointGeometry,
    ZoneType.RECTANGLE.value: RectangleGeometry,
    ZoneType.CIRCLE.value: CircleGeometry,
}


class Projection(Protocol):
    def lonlat_to_xy(self, lon: float, lat: float) -> Tuple[float, float]: ...
    def xy_to_lonlat(self, x: float, y: float) -> Tuple[float, float]: ...


@dataclass(frozen=True)
class WebMercatorProjection:
    """EPSG:4326 <-> EPSG:3857"""
    def __post_init__(self):
        from pyproj import Transformer
        object.__setattr__(self, "_to_merc",
            Transformer.from_crs("EPSG:4326", "EPSG:3857", always_xy=True))
        object.__setattr__(self, "_to_geo",
            Transformer.from_crs("EPSG:3857", "EPSG:4326", always_xy=True))
    def lonlat_to_xy(self, lon, lat):
        return self._to_merc.transform(lon, lat)
    def xy_to_lonlat(self, x, y):
        return self._to_geo.transform(x, y)


@lru_cache(maxsize=None)
def web_mercator() -> WebMercatorProjection:
    return WebMercatorProjection()


def mercator_y(lat: float) -> float:
    """Web Mercator northing (m) of a latitude: R * ln(tan(pi/4 + lat/2))."""
    _, y = web_mercator().lonlat_to_xy(0.0, lat)
    return y


def inverse_mercator_y(y: float) -> float:
    _, lat = web_mercator().xy_to_lonlat(0.0, y)
    return lat


@dataclass(frozen=True)
class CanvasProjector:
    """
    Canvas pixels (origin top-left, y down) <-> lat/lng.

    Longitude is linear in x. Latitude is interpolated in Web Mercator Y so
    the result lines up with standard web map tiles.
    """
    canvas_width: float
    canvas_height: float
    bounds: GeographicBounds
    proj: Projection = field(default_factory=web_mercator)

    def __post_init__(self):
        check_canvas_size(self.canvas_width, self.canvas_height)
        if self.bounds is None:
            raise MissingGeographicBounds("geographic bounds are required for projection")
        _, y_top = self.proj.lonlat_to_xy(self.bounds.min_lng, self.bounds.max_lat)
        _, y_bottom = self.proj.lonlat_to_xy(self.bounds.min_lng, self.bounds.min_lat)
        object.__setattr__(self, "_y_top", y_top)
        object.__setattr__(self, "_y_bottom", y_bottom)

    def pixel_to_geo(self, x: float, y: float) -> GeoPoint:
        _check_finite(x, y)
        b = self.bounds
        lng = b.min_lng + (x / self.canvas_width) * (b.max_lng - b.min_lng)
        relative_y = y / self.canvas_height  # 0 = top (max_lat), 1 = bottom (min_lat)
        merc_y = self._y_top + relative_y * (self._y_bottom - self._y_top)
        _, lat = self.proj.xy_to_lonlat(0.0, merc_y)
        return GeoPoint(lat=lat, lng=lng)

    def geo_to_pixel(self, lat: float, lng: float) -> Tuple[float, float]:
        _check_finite(lat, lng)
        b = self.bounds
        x = (lng - b.min_lng) / (b.max_lng - b.min_lng) * self.canvas_width
        _, merc_y = self.proj.lonlat_to_xy(0.0, lat)
        y = (self._y_top - merc_y) / (self._y_top - self._y_bottom) * self.canvas_height
        return x, y

    def geometry_to_geo(self, geometry: Geometry, zone_type: str, strict: bool = False,
                        zone_id: Optional[str] = None) -> GeoPoint:
        """
        Project the zone's representative point, chosen by ``zone_type``:
        point -> (x, y), rectangle/circle -> centre. A rectangle or circle
        zone whose geometry is of another kind is a MalformedZonePayload.
        """
        zone_type = getattr(zone_type, "value", zone_type)
        expected = _GEOMETRY_FOR_TYPE.get(zone_type)
        if expected is None:
            if strict:
                raise UnsupportedZoneType(zone_type, zone_id)
            # 未知の type は point 扱い
            x, y = geometry.x, geometry.y
        elif zone_type == ZoneType.POINT.value:
            x, y = geometry.x, geometry.y
        elif isinstance(geometry, expected):
            x, y = geometry.anchor()
        else:
            raise MalformedZonePayload(
                zone_id, "coordinates",
                f"{zone_type} zone needs {expected.__name__}, got {type(geometry).__name__}",
            )
        return self.pixel_to_geo(x, y)


def _check_finite(a: float, b: float) -> None:
    if not (math.isfinite(a) and math.isfinite(b)):
        raise ZoneMapError(f"coordinates must be finite, got ({a}, {b})")


# --- 関数 API -----------------------------------------------------------

def pixel_to_geo(x: float, y: float, canvas_width: float, canvas_height: float,
                 bounds: GeographicBounds) -> GeoPoint:
    return CanvasProjector(canvas_width, canvas_height, bounds).pixel_to_geo(x, y)


def geo_to_pixel(lat: float, lng: float, canvas_width: float, canvas_height: float,
                 bounds: GeographicBounds) -> Tuple[float, float]:
    return CanvasProjector(canvas_width, canvas_height, bounds).geo_to_pixel(lat, lng)


def geometry_to_geo(geometry: Geometry, zone_type: str, canvas_width: float, canvas_height: float,
                    bounds: GeographicBounds, strict: bool = False) -> GeoPoint:
    return CanvasProjector(canvas_width, canvas_height, bounds).geometry_to_geo(geometry, zone_type, strict)
