"""Unit tests for distance helpers"""
import math
import pytest
from badger_claims.eligibility.geo import EARTH_RADIUS_METERS, haversine_distance, is_valid_coordinate


def test_identical_points():
    assert haversine_distance(43.0722, -89.4050, 43.0722, -89.4050) == 0


def test_one_degree_latitude():
    distance = haversine_distance(43.0, -89.4, 44.0, -89.4)
    assert distance == pytest.approx(111_320, rel=0.01)


def test_symmetric():
    a = haversine_distance(43.0722, -89.4050, 43.0751, -89.3993)
    b = haversine_distance(43.0751, -89.3993, 43.0722, -89.4050)
    assert a == pytest.approx(b)


def test_meridian_offset_matches_arc_length():
    offset = 500 / (EARTH_RADIUS_METERS * math.pi / 180)
    assert haversine_distance(43.0722, -89.4050, 43.0722 + offset, -89.4050) == pytest.approx(500)


@pytest.mark.parametrize("lat,lng,valid", [
    (43.07, -89.40, True),
    (90, 180, True),
    (-90, -180, True),
    (90.1, 0, False),
    (0, -180.5, False),
    (float("nan"), 0, False),
    (0, float("inf"), False),
])
def test_is_valid_coordinate(lat, lng, valid):
    assert is_valid_coordinate(lat, lng) is valid
