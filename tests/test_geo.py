import math

import pytest

from cafe_finder.core.geo import destination_point, distance_meters, format_distance

POINTS = [
    (37.7749, -122.4194),
    (51.5074, -0.1278),
    (-33.8688, 151.2093),
    (0.0, 0.0),
    (89.9, 179.9),
]


@pytest.mark.parametrize("lat,lng", POINTS)
def test_distance_to_self_is_zero(lat, lng):
    assert distance_meters(lat, lng, lat, lng) == 0


def test_distance_is_symmetric():
    for a in POINTS:
        for b in POINTS:
            assert distance_meters(*a, *b) == pytest.approx(distance_meters(*b, *a))


def test_one_degree_of_latitude():
    # 6371 km * pi / 180
    assert distance_meters(0, 0, 1, 0) == pytest.approx(111194.9266, rel=1e-6)


def test_format_distance_meters_branch():
    assert format_distance(0) == "0 m"
    assert format_distance(999) == "999 m"
    assert format_distance(250.4) == "250 m"
    assert format_distance(250.5) == "251 m"


def test_format_distance_switches_to_miles_at_one_km():
    assert format_distance(1000) == "0.6 mi"
    assert format_distance(5000) == "3.1 mi"
    assert format_distance(16093.4) == "10.0 mi"


@pytest.mark.parametrize("bearing", [0, math.pi / 4, math.pi, 3 * math.pi / 2])
def test_destination_point_lands_at_requested_distance(bearing):
    lat, lng = destination_point(37.7749, -122.4194, bearing, 1234)
    assert distance_meters(37.7749, -122.4194, lat, lng) == pytest.approx(1234, abs=0.01)


def test_destination_point_wraps_longitude():
    lat, lng = destination_point(0.0, 179.9999, math.pi / 2, 50000)
    assert -180 <= lng <= 180
    assert lng < 0
    assert -90 <= lat <= 90
