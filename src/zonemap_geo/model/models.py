from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
import math
from typing import Any, Dict, Mapping, Optional, Tuple, Union

from .errors import InvalidBounds, InvalidCanvasSize

# Web Mercator は |lat| > 85.0511... で Y が発散する
MERCATOR_MAX_LAT = 85.0511287798066

DEFAULT_ZONE_NAME = "Unnamed Zone"
DEFAULT_COLOR = "#0066CC"


def _finite_number(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)


# --- 座標系 -----------------------------------------------------------

@dataclass(frozen=True)
class GeographicBounds:
    """Real-world rectangle the full canvas extent maps onto (degrees)."""
    min_lat: float
    max_lat: float
    min_lng: float
    max_lng: float

    def __post_init__(self):
        values = (self.min_lat, self.max_lat, self.min_lng, self.max_lng)
        if not all(_finite_number(v) for v in values):
            raise InvalidBounds(f"bounds must be finite numbers, got {values}")
        if self.min_lat >= self.max_lat:
            raise InvalidBounds(f"min_lat ({self.min_lat}) must be < max_lat ({self.max_lat})")
        if self.min_lng >= self.max_lng:
            raise InvalidBounds(f"min_lng ({self.min_lng}) must be < max_lng ({self.max_lng})")
        if self.min_lat < -MERCATOR_MAX_LAT or self.max_lat > MERCATOR_MAX_LAT:
            raise InvalidBounds(
                f"latitudes must lie within ±{MERCATOR_MAX_LAT} for Web Mercator, "
                f"got [{self.min_lat}, {self.max_lat}]"
            )

    def lat_span(self) -> float:
        return self.max_lat - self.min_lat

    def lng_span(self) -> float:
        return self.max_lng - self.min_lng

    def contains(self, lat: float, lng: float) -> bool:
        return self.min_lat <= lat <= self.max_lat and self.min_lng <= lng <= self.max_lng

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "GeographicBounds":
        """{minLat, maxLat, minLng, maxLng} (map record の形) から生成"""
        try:
            values = {k: float(data[k]) for k in ("minLat", "maxLat", "minLng", "maxLng")}
        except KeyError as e:
            raise InvalidBounds(f"missing bounds field: {e}") from e
        except (TypeError, ValueError) as e:
            raise InvalidBounds(f"invalid bounds data: {e}") from e
        return cls(
            min_lat=values["minLat"],
            max_lat=values["maxLat"],
            min_lng=values["minLng"],
            max_lng=values["maxLng"],
        )

    def to_dict(self) -> Dict[str, float]:
        return {
            "minLat": self.min_lat,
            "maxLat": self.max_lat,
            "minLng": self.min_lng,
            "maxLng": self.max_lng,
        }


@dataclass(frozen=True)
class CanvasConfig:
    width: float
    height: float
    coordinate_system: str = "pixel"
    scale: Optional[float] = None

    def __post_init__(self):
        check_canvas_size(self.width, self.height)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "CanvasConfig":
        if not isinstance(data, Mapping):
            raise InvalidCanvasSize(None, None, f"canvas config must be an object, got {type(data).__name__}")
        try:
            width, height = data["width"], data["height"]
        except KeyError as e:
            raise InvalidCanvasSize(data.get("width"), data.get("height")) from e
        scale = data.get("scale")
        return cls(
            width=width,
            height=height,
            coordinate_system=data.get("coordinateSystem", "pixel"),
            scale=float(scale) if scale is not None else None,
        )


def check_canvas_size(width: Any, height: Any) -> None:
    if not (_finite_number(width) and _finite_number(height)) or width <= 0 or height <= 0:
        raise InvalidCanvasSize(width, height)


# --- ゾーン形状 ---------------------------------------------------------

class ZoneType(str, Enum):
    POINT = "point"
    RECTANGLE = "rectangle"
    CIRCLE = "circle"


@dataclass(frozen=True)
class PointGeometry:
    x: float
    y: float

    def anchor(self) -> Tuple[float, float]:
        return (self.x, self.y)


@dataclass(frozen=True)
class RectangleGeometry:
    """top-left corner + extent"""
    x: float
    y: float
    width: float
    height: float

    def center(self) -> Tuple[float, float]:
        return (self.x + self.width / 2, self.y + self.height / 2)

    def anchor(self) -> Tuple[float, float]:
        return self.center()


@dataclass(frozen=True)
class CircleGeometry:
    x: float
    y: float
    radius: float

    def anchor(self) -> Tuple[float, float]:
        # radius は投影しない（中心のみ）
        return (self.x, self.y)


Geometry = Union[PointGeometry, RectangleGeometry, CircleGeometry]

# JSON text, or an already decoded object
Payload = Union[str, Mapping[str, Any]]


# --- ゾーン内容 ---------------------------------------------------------

def _optional_str(data: Mapping[str, Any], key: str) -> Optional[str]:
    value = data.get(key)
    if value is not None and not isinstance(value, str):
        raise TypeError(f"{key} must be a string, got {type(value).__name__}")
    return value


def _required_str(data: Mapping[str, Any], key: str) -> str:
    if key not in data:
        raise KeyError(key)
    value = _optional_str(data, key)
    if value is None:
        raise TypeError(f"{key} must be a string, got null")
    return value


def _str_tuple(data: Mapping[str, Any], key: str) -> Tuple[str, ...]:
    values = data.get(key) or ()
    if isinstance(values, str) or not all(isinstance(v, str) for v in values):
        raise TypeError(f"{key} must be a list of strings")
    return tuple(values)


@dataclass(frozen=True)
class ZoneLink:
    url: str
    label: Optional[str] = None

    def to_dict(self) -> Dict[str, str]:
        d = {"url": self.url}
        if self.label is not None:
            d["label"] = self.label
        return d


@dataclass(frozen=True)
class ZoneContent:
    title: Optional[str] = None
    description: Optional[str] = None
    images: Tuple[str, ...] = ()
    videos: Tuple[str, ...] = ()
    links: Tuple[ZoneLink, ...] = ()

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ZoneContent":
        links = []
        for lk in data.get("links") or ():
            if not isinstance(lk, Mapping):
                raise TypeError(f"links entries must be objects, got {type(lk).__name__}")
            links.append(ZoneLink(url=_required_str(lk, "url"), label=_optional_str(lk, "label")))
        return cls(
            title=_optional_str(data, "title"),
            description=_optional_str(data, "description"),
            images=_str_tuple(data, "images"),
            videos=_str_tuple(data, "videos"),
            links=tuple(links),
        )


@dataclass(frozen=True)
class ZoneStyle:
    icon: Optional[str] = None
    color: Optional[str] = None
    border_color: Optional[str] = None
    opacity: Optional[float] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ZoneStyle":
        opacity = data.get("opacity")
        return cls(
            icon=_optional_str(data, "icon"),
            color=_optional_str(data, "color"),
            border_color=_optional_str(data, "borderColor"),
            opacity=float(opacity) if opacity is not None else None,
        )


@dataclass(frozen=True)
class ZoneRecord:
    """Zone as stored by the persistence service: payloads are JSON text."""
    id: str
    type: str
    coordinates: Payload
    content: Payload
    style: Optional[Payload] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ZoneRecord":
        return cls(
            id=str(data["id"]),
            type=str(data["type"]),
            coordinates=data["coordinates"],
            content=data["content"],
            style=data.get("style"),
        )


@dataclass(frozen=True)
class Zone:
    id: str
    type: str
    geometry: Geometry
    content: ZoneContent = field(default_factory=ZoneContent)
    style: ZoneStyle = field(default_factory=ZoneStyle)


@dataclass(frozen=True)
class MapRecord:
    """Map as exported by the persistence service (CLI input)."""
    canvas: CanvasConfig
    bounds: Optional[GeographicBounds]
    zones: Tuple[ZoneRecord, ...] = ()
    id: Optional[str] = None
    title: Optional[str] = None


# --- 出力 ---------------------------------------------------------------

@dataclass(frozen=True)
class GeoPoint:
    lat: float
    lng: float


@dataclass(frozen=True)
class LandmarkRecord:
    """Normalized landmark consumed by the globe viewer."""
    name: str
    lon: float
    lat: float
    icon: str
    color: Optional[str] = None
    content_url: Optional[str] = None
    description: Optional[str] = None
    images: Optional[Tuple[str, ...]] = None
    links: Optional[Tuple[ZoneLink, ...]] = None
    videos: Optional[Tuple[str, ...]] = None

    def to_dict(self) -> Dict[str, Any]:
        """External (camelCase) shape; absent fields are omitted."""
        d: Dict[str, Any] = {
            "name": self.name,
            "lon": self.lon,
            "lat": self.lat,
            "icon": self.icon,
        }
        if self.color is not None:
            d["color"] = self.color
        if self.content_url is not None:
            d["contentUrl"] = self.content_url
        if self.description is not None:
            d["description"] = self.description
        if self.images is not None:
            d["images"] = list(self.images)
        if self.links is not None:
            d["links"] = [lk.to_dict() for lk in self.links]
        if self.videos is not None:
            d["videos"] = list(self.videos)
        return d


__all__ = [
    "MERCATOR_MAX_LAT",
    "DEFAULT_ZONE_NAME",
    "DEFAULT_COLOR",
    "GeographicBounds",
    "CanvasConfig",
    "check_canvas_size",
    "ZoneType",
    "PointGeometry",
    "RectangleGeometry",
    "CircleGeometry",
    "Geometry",
    "ZoneLink",
    "ZoneContent",
    "ZoneStyle",
    "ZoneRecord",
    "Payload",
    "Zone",
    "MapRecord",
    "GeoPoint",
    "LandmarkRecord",
]
