from __future__ import annotations

import json
import logging

import pytest

from zonemap_geo.landmark.builder import zones_to_landmarks
from zonemap_geo.model.errors import MalformedZonePayload, UnsupportedZoneType
from zonemap_geo.model.models import (
    CanvasConfig,
    GeographicBounds,
    PointGeometry,
    RectangleGeometry,
    Zone,
    ZoneContent,
    ZoneLink,
    ZoneRecord,
    ZoneStyle,
)

CANVAS = CanvasConfig(800, 600)
NYC = GeographicBounds(min_lat=40.70, max_lat=40.80, min_lng=-74.02, max_lng=-73.92)


def zone(zone_id, content=None, style=None, zone_type="point", coordinates=None):
    return ZoneRecord(
        id=zone_id,
        type=zone_type,
        coordinates=json.dumps(coordinates or {"x": 400, "y": 300}),
        content=json.dumps(content if content is not None else {}),
        style=json.dumps(style) if style is not None else None,
    )


def test_no_bounds_is_an_empty_result(caplog):
    with caplog.at_level(logging.WARNING):
        assert zones_to_landmarks([zone("a")], CANVAS, None) == []
    assert "no geographic bounds" in caplog.text


def test_hq_end_to_end():
    [lm] = zones_to_landmarks([zone("hq", {"title": "HQ"}, {"icon": "pin"})], CANVAS, NYC)
    assert lm.name == "HQ"
    assert lm.icon == "pin"
    assert lm.color == "#0066CC"
    assert lm.lon == pytest.approx(-73.97, abs=1e-10)
    assert lm.lat == pytest.approx(40.750018798407, abs=1e-9)
    assert lm.content_url is None


def test_defaults_for_name_icon_color():
    [lm] = zones_to_landmarks([zone("a", {"title": ""}, {"icon": "", "color": ""})], CANVAS, NYC,
                              default_icon="dot", default_color="#FF0000")
    assert (lm.name, lm.icon, lm.color) == ("Unnamed Zone", "dot", "#FF0000")


def test_style_overrides_defaults():
    [lm] = zones_to_landmarks([zone("a", {"title": "A"}, {"icon": "cup", "color": "#123456"})], CANVAS, NYC,
                              default_icon="dot", default_color="#FF0000")
    assert (lm.icon, lm.color) == ("cup", "#123456")


def test_content_url_prefers_first_video():
    content = {
        "title": "A",
        "videos": ["https://v1.example", "https://v2.example"],
        "links": [{"url": "https://l1.example", "label": "L"}],
    }
    [lm] = zones_to_landmarks([zone("a", content)], CANVAS, NYC)
    assert lm.content_url == "https://v1.example"


def test_content_url_falls_back_to_first_link():
    content = {"title": "A", "videos": [], "links": [{"url": "https://l1.example"}, {"url": "https://l2.example"}]}
    [lm] = zones_to_landmarks([zone("a", content)], CANVAS, NYC)
    assert lm.content_url == "https://l1.example"
    assert lm.videos is None


def test_detail_fields_copied_when_present():
    content = {
        "title": "A",
        "description": "Front desk",
        "images": ["a.png"],
        "links": [{"url": "https://l.example", "label": "site"}],
        "videos": ["https://v.example"],
    }
    [lm] = zones_to_landmarks([zone("a", content)], CANVAS, NYC)
    assert lm.description == "Front desk"
    assert lm.images == ("a.png",)
    assert lm.links == (ZoneLink("https://l.example", "site"),)
    assert lm.videos == ("https://v.example",)


def test_empty_detail_fields_are_omitted():
    content = {"title": "A", "description": "", "images": [], "links": [], "videos": []}
    [lm] = zones_to_landmarks([zone("a", content)], CANVAS, NYC)
    assert lm.description is None and lm.images is None and lm.links is None and lm.videos is None
    assert set(lm.to_dict()) == {"name", "lon", "lat", "icon", "color"}


def test_order_and_length_preserved():
    zones = [
        zone("c", {"title": "C"}, coordinates={"x": 700, "y": 100}),
        zone("a", {"title": "A"}, coordinates={"x": 100, "y": 500}),
        zone("b", {}, zone_type="circle", coordinates={"x": 400, "y": 300, "radius": 40}),
    ]
    landmarks = zones_to_landmarks(zones, CANVAS, NYC)
    assert [lm.name for lm in landmarks] == ["C", "A", "Unnamed Zone"]
    assert landmarks[0].lon > landmarks[1].lon
    assert landmarks[0].lat > landmarks[1].lat


def test_rectangle_zone_uses_center():
    rect = zone("r", {"title": "R"}, zone_type="rectangle",
                coordinates={"x": 10, "y": 10, "width": 20, "height": 10})
    point = zone("p", {"title": "P"}, coordinates={"x": 20, "y": 15})
    r, p = zones_to_landmarks([rect, point], CANVAS, NYC)
    assert (r.lat, r.lon) == (p.lat, p.lon)


def test_decoded_zones_are_accepted():
    z = Zone(id="z", type="point", geometry=PointGeometry(400, 300),
             content=ZoneContent(title="HQ"), style=ZoneStyle(icon="pin"))
    [lm] = zones_to_landmarks([z], CANVAS, NYC)
    assert (lm.name, lm.icon) == ("HQ", "pin")


def test_stops_at_first_malformed_zone():
    bad = ZoneRecord(id="broken", type="point", coordinates="{", content="{}")
    with pytest.raises(MalformedZonePayload) as exc:
        zones_to_landmarks([zone("a"), bad, zone("b")], CANVAS, NYC)
    assert exc.value.zone_id == "broken"


def test_skip_invalid_drops_and_logs(caplog):
    bad = ZoneRecord(id="broken", type="point", coordinates="{", content="{}")
    with caplog.at_level(logging.WARNING):
        landmarks = zones_to_landmarks([zone("a", {"title": "A"}), bad, zone("b", {"title": "B"})],
                                       CANVAS, NYC, skip_invalid=True)
    assert [lm.name for lm in landmarks] == ["A", "B"]
    assert "broken" in caplog.text


def test_unknown_type_fallback_and_strict():
    odd = zone("odd", {"title": "Odd"}, zone_type="marker", coordinates={"x": 400, "y": 300})
    [lm] = zones_to_landmarks([odd], CANVAS, NYC)
    assert lm.lon == pytest.approx(-73.97, abs=1e-10)

    with pytest.raises(UnsupportedZoneType):
        zones_to_landmarks([odd], CANVAS, NYC, strict=True)
    assert zones_to_landmarks([odd], CANVAS, NYC, strict=True, skip_invalid=True) == []


def test_overflowing_coordinates_can_be_skipped():
    huge = ZoneRecord(id="huge", type="point", coordinates='{"x": 1e400, "y": 1}', content="{}")
    with pytest.raises(MalformedZonePayload) as exc:
        zones_to_landmarks([huge], CANVAS, NYC)
    assert exc.value.zone_id == "huge"
    assert zones_to_landmarks([zone("a", {"title": "A"}), huge], CANVAS, NYC, skip_invalid=True)[0].name == "A"


def test_decoded_zone_with_mismatched_geometry():
    as_point = Zone(id="p", type="point", geometry=RectangleGeometry(10, 10, 20, 10))
    [lm] = zones_to_landmarks([as_point], CANVAS, NYC)
    assert lm.lon == pytest.approx(-74.01875, abs=1e-10)

    as_circle = Zone(id="c", type="circle", geometry=PointGeometry(10, 10))
    with pytest.raises(MalformedZonePayload) as exc:
        zones_to_landmarks([as_circle], CANVAS, NYC)
    assert exc.value.zone_id == "c"
    assert zones_to_landmarks([as_circle], CANVAS, NYC, skip_invalid=True) == []
