from __future__ import annotations

import math

import pytest

from zonemap_geo.model.errors import (
    InvalidBounds,
    InvalidCanvasSize,
    MalformedZonePayload,
    MissingGeographicBounds,
    UnsupportedZoneType,
)
from zonemap_geo.model.models import CircleGeometry, GeographicBounds, PointGeometry, RectangleGeometry
from zonemap_geo.projection.projection import (
    CanvasProjector,
    geo_to_pixel,
    geometry_to_geo,
    inverse_mercator_y,
    mercator_y,
    pixel_to_geo,
)

W, H = 800, 600
NYC = GeographicBounds(min_lat=40.70, max_lat=40.80, min_lng=-74.02, max_lng=-73.92)
# Mercator 補間の中央値（直接計算した golden value。線形補間なら 40.75）
NYC_CENTER_LAT = 40.750018798407
EARTH_RADIUS = 6378137.0


def test_center_of_canvas_golden_value():
    p = pixel_to_geo(400, 300, W, H, NYC)
    assert p.lng == pytest.approx(-73.97, abs=1e-10)
    assert p.lat == pytest.approx(NYC_CENTER_LAT, abs=1e-9)
    # 線形補間とは測定可能な差がある
    assert abs(p.lat - 40.75) > 1e-5


def test_corners_map_to_bounds():
    top_left = pixel_to_geo(0, 0, W, H, NYC)
    assert top_left.lat == pytest.approx(NYC.max_lat, abs=1e-10)
    assert top_left.lng == NYC.min_lng

    bottom_right = pixel_to_geo(W, H, W, H, NYC)
    assert bottom_right.lat == pytest.approx(NYC.min_lat, abs=1e-10)
    assert bottom_right.lng == pytest.approx(NYC.max_lng, abs=1e-10)


def test_mercator_y_matches_closed_form():
    for lat in (-60.0, -12.5, 0.0, 40.75, 85.0):
        expected = EARTH_RADIUS * math.log(math.tan(math.pi / 4 + math.radians(lat) / 2))
        assert mercator_y(lat) == pytest.approx(expected, rel=1e-10, abs=1e-6)
        assert inverse_mercator_y(mercator_y(lat)) == pytest.approx(lat, abs=1e-10)


@pytest.mark.parametrize("bounds", [
    NYC,
    GeographicBounds(min_lat=-34.0, max_lat=-33.8, min_lng=151.1, max_lng=151.3),
    GeographicBounds(min_lat=-60.0, max_lat=70.0, min_lng=-170.0, max_lng=170.0),
])
def test_geo_pixel_round_trip(bounds):
    for i in range(1, 10):
        for j in range(1, 10):
            lat = bounds.min_lat + bounds.lat_span() * i / 10
            lng = bounds.min_lng + bounds.lng_span() * j / 10
            x, y = geo_to_pixel(lat, lng, W, H, bounds)
            back = pixel_to_geo(x, y, W, H, bounds)
            assert back.lat == pytest.approx(lat, abs=1e-9)
            assert back.lng == pytest.approx(lng, abs=1e-9)


def test_pixel_geo_round_trip():
    proj = CanvasProjector(W, H, NYC)
    for x in (1.0, 123.4, 400.0, 799.0):
        for y in (1.0, 250.5, 599.0):
            p = proj.pixel_to_geo(x, y)
            bx, by = proj.geo_to_pixel(p.lat, p.lng)
            assert bx == pytest.approx(x, abs=1e-6)
            assert by == pytest.approx(y, abs=1e-6)


def test_monotonic():
    proj = CanvasProjector(W, H, NYC)
    lngs = [proj.pixel_to_geo(x, 300).lng for x in range(0, W + 1, 50)]
    lats = [proj.pixel_to_geo(400, y).lat for y in range(0, H + 1, 50)]
    assert all(a < b for a, b in zip(lngs, lngs[1:]))
    assert all(a > b for a, b in zip(lats, lats[1:]))


def test_rectangle_projects_to_its_center():
    rect = geometry_to_geo(RectangleGeometry(x=10, y=10, width=20, height=10), "rectangle", W, H, NYC)
    point = geometry_to_geo(PointGeometry(x=20, y=15), "point", W, H, NYC)
    assert rect == point


def test_circle_projects_its_center_ignoring_radius():
    small = geometry_to_geo(CircleGeometry(x=100, y=200, radius=1), "circle", W, H, NYC)
    large = geometry_to_geo(CircleGeometry(x=100, y=200, radius=500), "circle", W, H, NYC)
    assert small == large == pixel_to_geo(100, 200, W, H, NYC)


def test_unknown_type_falls_back_to_point():
    # rectangle geometry under an unknown type: its x/y is used as-is
    got = geometry_to_geo(RectangleGeometry(x=10, y=10, width=20, height=10), "polygon", W, H, NYC)
    assert got == pixel_to_geo(10, 10, W, H, NYC)


def test_unknown_type_strict():
    with pytest.raises(UnsupportedZoneType):
        geometry_to_geo(PointGeometry(1, 1), "polygon", W, H, NYC, strict=True)


@pytest.mark.parametrize("w,h", [(0, H), (W, 0), (-W, H), (W, -1)])
def test_invalid_canvas_size(w, h):
    with pytest.raises(InvalidCanvasSize):
        pixel_to_geo(10, 10, w, h, NYC)
    with pytest.raises(InvalidCanvasSize):
        geo_to_pixel(40.75, -73.97, w, h, NYC)


def test_degenerate_bounds():
    with pytest.raises(InvalidBounds):
        pixel_to_geo(10, 10, W, H, GeographicBounds(40.8, 40.8, -74.0, -73.9))
    with pytest.raises(InvalidBounds):
        geo_to_pixel(40.75, -73.95, W, H, GeographicBounds(40.7, 40.8, -73.9, -73.9))


def test_missing_bounds():
    with pytest.raises(MissingGeographicBounds):
        CanvasProjector(W, H, None)


def test_non_finite_pixel_rejected():
    with pytest.raises(ValueError):
        pixel_to_geo(float("nan"), 10, W, H, NYC)


def test_point_zone_uses_geometry_origin():
    # point は型で決まる: rectangle 形状でも x/y をそのまま使う
    got = geometry_to_geo(RectangleGeometry(x=10, y=10, width=20, height=10), "point", W, H, NYC)
    assert got == pixel_to_geo(10, 10, W, H, NYC)
    assert got.lng == pytest.approx(-74.01875, abs=1e-10)


@pytest.mark.parametrize("zone_type,geometry", [
    ("rectangle", PointGeometry(10, 10)),
    ("circle", RectangleGeometry(10, 10, 20, 10)),
])
def test_geometry_must_match_zone_type(zone_type, geometry):
    with pytest.raises(MalformedZonePayload) as exc:
        geometry_to_geo(geometry, zone_type, W, H, NYC)
    assert exc.value.field == "coordinates"

    proj = CanvasProjector(W, H, NYC)
    with pytest.raises(MalformedZonePayload) as exc:
        proj.geometry_to_geo(geometry, zone_type, zone_id="z9")
    assert exc.value.zone_id == "z9"
