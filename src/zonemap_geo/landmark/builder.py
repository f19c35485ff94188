# builder.py
from __future__ import annotations
import logging
from typing import Iterable, Iterator, List, Optional, Tuple, Union

from zonemap_geo.model.errors import MalformedZonePayload, UnsupportedZoneType
from zonemap_geo.model.loader import ModelLoader
from zonemap_geo.model.models import (
    DEFAULT_COLOR,
    DEFAULT_ZONE_NAME,
    CanvasConfig,
    GeographicBounds,
    GeoPoint,
    LandmarkRecord,
    Zone,
    ZoneRecord,
)
from zonemap_geo.projection.projection import CanvasProjector

logger = logging.getLogger(__name__)

ZoneLike = Union[ZoneRecord, Zone]

_default_loader = ModelLoader()


def project_zones(
    zones: Iterable[ZoneLike],
    canvas: CanvasConfig,
    bounds: GeographicBounds,
    *,
    strict: bool = False,
    skip_invalid: bool = False,
    loader: Optional[ModelLoader] = None,
) -> Iterator[Tuple[Zone, GeoPoint]]:
    """Decode each zone and project its representative point, in input order."""
    loader = loader or _default_loader
    projector = CanvasProjector(canvas.width, canvas.height, bounds)
    for index, item in enumerate(zones):
        try:
            zone = loader.decode_zone(item, strict=strict)
            point = projector.geometry_to_geo(zone.geometry, zone.type, strict=strict, zone_id=zone.id)
        except (MalformedZonePayload, UnsupportedZoneType) as e:
            if not skip_invalid:
                raise
            logger.warning("skipping zone %d: %s", index, e)
            continue
        logger.debug("zone %d (%s, %s) -> lat=%.7f lng=%.7f", index, zone.id, zone.type, point.lat, point.lng)
        yield zone, point


def build_landmark(
    zone: Zone,
    point: GeoPoint,
    default_icon: str = "",
    default_color: str = DEFAULT_COLOR,
) -> LandmarkRecord:
    content, style = zone.content, zone.style

    # videos[0] -> links[0].url の優先順で 1 つだけ
    content_url = None
    if content.videos:
        content_url = content.videos[0]
    elif content.links:
        content_url = content.links[0].url

    return LandmarkRecord(
        name=content.title or DEFAULT_ZONE_NAME,
        lon=point.lng,
        lat=point.lat,
        icon=style.icon or default_icon,
        color=style.color or default_color or None,
        content_url=content_url,
        description=content.description or None,
        images=content.images or None,
        links=content.links or None,
        videos=content.videos or None,
    )


def zones_to_landmarks(
    zones: Iterable[ZoneLike],
    canvas_config: CanvasConfig,
    bounds: Optional[GeographicBounds],
    default_icon: str = "",
    default_color: str = DEFAULT_COLOR,
    *,
    strict: bool = False,
    skip_invalid: bool = False,
) -> List[LandmarkRecord]:
    """
    Zones -> landmark records for the globe viewer.

    A map without geographic bounds cannot be placed on the globe, so
    ``bounds=None`` yields an empty list instead of an error.
    """
    if bounds is None:
        logger.warning("no geographic bounds provided, returning no landmarks")
        return []

    zones = list(zones)
    landmarks = [
        build_landmark(zone, point, default_icon, default_color)
        for zone, point in project_zones(
            zones, canvas_config, bounds, strict=strict, skip_invalid=skip_invalid
        )
    ]
    logger.debug("converted %d/%d zones to landmarks", len(landmarks), len(zones))
    return landmarks


__all__ = ["project_zones", "build_landmark", "zones_to_landmarks"]
