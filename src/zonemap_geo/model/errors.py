# errors.py
from __future__ import annotations
from typing import Optional


class ZoneMapError(ValueError):
    """Base class for every error raised by the zone -> geo conversion."""


class InvalidCanvasSize(ZoneMapError):
    def __init__(self, width: float, height: float, message: Optional[str] = None):
        self.width = width
        self.height = height
        super().__init__(message or f"canvas size must be positive and finite, got {width}x{height}")


class InvalidBounds(ZoneMapError):
    pass


class MalformedZonePayload(ZoneMapError):
    """A zone's coordinates/content/style payload could not be decoded."""

    def __init__(self, zone_id: Optional[str], field: str, reason: str):
        self.zone_id = zone_id
        self.field = field
        self.reason = reason
        where = f"zone {zone_id!r}: " if zone_id is not None else ""
        super().__init__(f"{where}malformed {field} payload: {reason}")


class MissingGeographicBounds(ZoneMapError):
    def __init__(self, message: str = "geographic bounds are required to generate CSV for the globe"):
        super().__init__(message)


class UnsupportedZoneType(ZoneMapError):
    def __init__(self, zone_type: str, zone_id: Optional[str] = None):
        self.zone_type = zone_type
        self.zone_id = zone_id
        where = f"zone {zone_id!r}: " if zone_id is not None else ""
        super().__init__(f"{where}unsupported zone type {zone_type!r}")


__all__ = [
    "ZoneMapError",
    "InvalidCanvasSize",
    "InvalidBounds",
    "MalformedZonePayload",
    "MissingGeographicBounds",
    "UnsupportedZoneType",
]
