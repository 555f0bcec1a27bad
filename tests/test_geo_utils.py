import math

import pytest

from utils.geo_utils import (
    CAMPUS_LAT,
    CAMPUS_LNG,
    EARTH_RADIUS_METERS,
    CampusBoundary,
    distance_meters,
    within_campus,
)

# meters per degree of latitude on the haversine sphere
METERS_PER_DEG = EARTH_RADIUS_METERS * math.pi / 180


def north_of_campus(meters):
    return CAMPUS_LAT + meters / METERS_PER_DEG, CAMPUS_LNG


def test_distance_to_self_is_zero():
    assert distance_meters(CAMPUS_LAT, CAMPUS_LNG, CAMPUS_LAT, CAMPUS_LNG) == 0


def test_one_degree_along_equator():
    assert distance_meters(0, 0, 0, 1) == pytest.approx(METERS_PER_DEG, rel=1e-9)


def test_distance_is_symmetric_and_deterministic():
    a = distance_meters(22.3, 73.36, 23.0, 72.5)
    assert a == pytest.approx(distance_meters(23.0, 72.5, 22.3, 73.36))
    assert a == distance_meters(22.3, 73.36, 23.0, 72.5)


def test_antipodal_points():
    assert distance_meters(0, 0, 0, 180) == pytest.approx(math.pi * EARTH_RADIUS_METERS)


@pytest.mark.parametrize("meters,inside", [
    (0, True),
    (500, True),
    (1999, True),
    (2001, False),
    (10_000, False),
])
def test_within_campus(meters, inside):
    lat, lng = north_of_campus(meters)
    assert within_campus(lat, lng) is inside


def test_null_island_is_outside():
    assert within_campus(0, 0) is False


def test_boundary_circle_counts_as_inside():
    lat, lng = north_of_campus(2000)
    exact = CampusBoundary(radius=distance_meters(lat, lng, CAMPUS_LAT, CAMPUS_LNG))
    assert exact.contains(lat, lng)


def test_custom_boundary():
    boundary = CampusBoundary(lat=0, lng=0, radius=100)
    assert boundary.contains(0, 0)
    assert not boundary.contains(0, 0.01)
    assert boundary.distance_from_center(0, 0.01) == pytest.approx(METERS_PER_DEG / 100)
