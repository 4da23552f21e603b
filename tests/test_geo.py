import pytest

from geopin.core.errors import ValidationFailure
from geopin.core.geo import (
    BoundingBox,
    GeoPoint,
    distance_m,
    haversine_m,
    in_bounding_box,
    point_geometry,
    validate_coordinates,
)

LONDON_EYE = (51.503399, -0.119519)
BIG_BEN = (51.500729, -0.124625)


def test_distance_between_london_eye_and_big_ben():
    d = distance_m(*LONDON_EYE, *BIG_BEN)
    assert abs(d - 460.0) <= 10.0


def test_distance_identical_points_is_effectively_zero():
    for lat, lon in [LONDON_EYE, (0.0, 0.0), (89.9999, 179.9999), (-45.5, -120.25)]:
        assert distance_m(lat, lon, lat, lon) <= 0.1


def test_distance_is_symmetric():
    pairs = [
        (LONDON_EYE, BIG_BEN),
        ((51.5080, -0.1284), (51.5138, -0.0983)),
        ((-33.8688, 151.2093), (40.7128, -74.0060)),
        ((0.0, 179.9), (0.0, -179.9)),
    ]
    for a, b in pairs:
        assert distance_m(*a, *b) == pytest.approx(distance_m(*b, *a), abs=1e-6)


def test_distance_across_antimeridian_takes_short_path():
    # 0.2 degrees of longitude at the equator, not 359.8.
    d = distance_m(0.0, 179.9, 0.0, -179.9)
    assert d == pytest.approx(22_239, abs=5)


def test_distance_across_pole_takes_short_path():
    d = distance_m(89.9, 0.0, 89.9, 180.0)
    assert d == pytest.approx(22_239, abs=5)


def test_distance_antipodal_points_do_not_fail():
    d = distance_m(0.0, 0.0, 0.0, 180.0)
    assert d == pytest.approx(20_015_087, rel=1e-3)


def test_haversine_point_form_matches_coordinate_form():
    a = GeoPoint(lat=LONDON_EYE[0], lon=LONDON_EYE[1])
    b = GeoPoint(lat=BIG_BEN[0], lon=BIG_BEN[1])
    assert haversine_m(a, b) == distance_m(*LONDON_EYE, *BIG_BEN)


def test_point_inside_central_london_box():
    assert in_bounding_box(*LONDON_EYE, 51.500000, -0.125000, 51.505000, -0.115000)


def test_point_outside_central_london_box():
    heathrow = (51.470020, -0.454295)
    assert not in_bounding_box(*heathrow, 51.500000, -0.125000, 51.505000, -0.115000)


def test_bounding_box_edges_and_corners_are_inside():
    box = (10.0, 20.0, 11.0, 21.0)
    assert in_bounding_box(10.0, 20.5, *box)
    assert in_bounding_box(11.0, 20.5, *box)
    assert in_bounding_box(10.5, 20.0, *box)
    assert in_bounding_box(10.5, 21.0, *box)
    assert in_bounding_box(10.0, 20.0, *box)
    assert in_bounding_box(11.0, 21.0, *box)
    assert not in_bounding_box(11.000001, 20.5, *box)


def test_naive_box_test_never_matches_antimeridian_crossing_box():
    # sw_lon > ne_lon: the plain rectangle test cannot be satisfied.
    assert not in_bounding_box(0.0, 179.5, -1.0, 179.0, 1.0, -179.0)
    assert not in_bounding_box(0.0, -179.5, -1.0, 179.0, 1.0, -179.0)


def test_bounding_box_split_at_antimeridian():
    box = BoundingBox(-1.0, 179.0, 1.0, -179.0)
    assert box.crosses_antimeridian
    east, west = box.split()
    assert (east.sw_lon, east.ne_lon) == (179.0, 180.0)
    assert (west.sw_lon, west.ne_lon) == (-180.0, -179.0)
    assert any(b.contains(0.0, 179.5) for b in box.split())
    assert any(b.contains(0.0, -179.5) for b in box.split())
    assert not any(b.contains(0.0, 0.0) for b in box.split())


def test_non_crossing_box_split_is_identity():
    box = BoundingBox(10.0, 20.0, 11.0, 21.0)
    assert box.split() == [box]


def test_point_geometry_is_lon_lat():
    assert point_geometry(51.5, -0.12) == {"type": "Point", "coordinates": [-0.12, 51.5]}


@pytest.mark.parametrize(
    "lat,lon",
    [(90.0001, 0.0), (-91.0, 0.0), (0.0, 180.5), (0.0, -181.0), (float("nan"), 0.0), (0.0, float("inf"))],
)
def test_validate_coordinates_rejects_out_of_domain(lat, lon):
    with pytest.raises(ValidationFailure):
        validate_coordinates(lat, lon)


def test_validate_coordinates_accepts_domain_limits():
    for lat, lon in [(90.0, 180.0), (-90.0, -180.0), (0.0, 0.0)]:
        validate_coordinates(lat, lon)
