"""Proximity Matcher — tests for radius filtering, ordering and query parsing.

Tests cover:
    - Results within radius only, nearest first, rounded to 2 decimals
    - Stable ordering for equal distances
    - Boundary: the radius check uses the unrounded distance
    - Candidates without a location are skipped
    - parse_nearby_query: required coordinates, "0" accepted, radius rules
"""

import pytest

from mutual_aid.core.geo import GeoPoint, distance_km
from mutual_aid.core.proximity import NearbyQuery, find_nearby, parse_nearby_query
from mutual_aid.core.rejection import ErrorKind, Rejection

ORIGIN = GeoPoint(0.0, 0.0)


# ─── find_nearby ─────────────────────────────────────────────────

def test_filters_and_sorts_by_distance():
    candidates = [
        ("far", GeoPoint(0.0, 0.2)),      # ~22.2 km
        ("mid", GeoPoint(0.0, 0.05)),     # ~5.6 km
        ("near", GeoPoint(0.0, 0.01)),    # ~1.1 km
    ]
    results = find_nearby(ORIGIN, 10.0, candidates)
    assert [r.resource_id for r in results] == ["near", "mid"]
    assert results[0].distance_km == 1.11
    assert results[1].distance_km == 5.56


def test_ties_keep_input_order():
    same = GeoPoint(0.0, 0.01)
    results = find_nearby(ORIGIN, 5.0, [("b", same), ("a", same), ("c", same)])
    assert [r.resource_id for r in results] == ["b", "a", "c"]


def test_point_exactly_on_radius_is_included():
    point = GeoPoint(0.0, 0.09)
    radius = distance_km(ORIGIN, point)
    assert [r.resource_id for r in find_nearby(ORIGIN, radius, [("edge", point)])] == ["edge"]


def test_radius_check_uses_unrounded_distance():
    point = GeoPoint(0.0, 0.09)
    radius = distance_km(ORIGIN, point) - 1e-6
    # Rounded distance equals the rounded radius, but the point is still outside
    assert round(radius, 2) == round(distance_km(ORIGIN, point), 2)
    assert find_nearby(ORIGIN, radius, [("edge", point)]) == []


def test_skips_candidates_without_location():
    results = find_nearby(ORIGIN, 10.0, [("none", None), ("near", GeoPoint(0.0, 0.01))])
    assert [r.resource_id for r in results] == ["near"]


def test_empty_candidates():
    assert find_nearby(ORIGIN, 10.0, []) == []


def test_origin_itself_is_distance_zero():
    results = find_nearby(ORIGIN, 1.0, [("here", ORIGIN)])
    assert results[0].distance_km == 0


# ─── parse_nearby_query ──────────────────────────────────────────

def _parse(lat, lon, radius=None, max_radius=None):
    return parse_nearby_query(lat, lon, radius, default_radius_km=10.0, max_radius_km=max_radius)


def test_parse_uses_default_radius():
    query = _parse("40.7", "-74.0")
    assert query == NearbyQuery(origin=GeoPoint(40.7, -74.0), radius_km=10.0)


def test_parse_accepts_zero_coordinates():
    query = _parse("0", "0")
    assert isinstance(query, NearbyQuery)
    assert query.origin == GeoPoint(0.0, 0.0)


def test_parse_blank_radius_falls_back_to_default():
    assert _parse("1", "1", "  ").radius_km == 10.0


@pytest.mark.parametrize("lat,lon", [(None, "1"), ("1", None), (None, None)])
def test_parse_requires_both_coordinates(lat, lon):
    rejection = _parse(lat, lon)
    assert isinstance(rejection, Rejection)
    assert rejection.kind == ErrorKind.INVALID_INPUT
    assert rejection.code == "COORDINATES_REQUIRED"


@pytest.mark.parametrize("lat,lon,code", [
    ("abc", "1", "INVALID_LATITUDE"),
    ("95", "1", "INVALID_LATITUDE"),
    ("nan", "1", "INVALID_LATITUDE"),
    ("1", "200", "INVALID_LONGITUDE"),
    ("1", "", "INVALID_LONGITUDE"),
])
def test_parse_rejects_bad_coordinates(lat, lon, code):
    assert _parse(lat, lon).code == code


@pytest.mark.parametrize("radius", ["0", "-5", "abc", "inf"])
def test_parse_rejects_non_positive_or_unparseable_radius(radius):
    assert _parse("1", "1", radius).code == "INVALID_RADIUS"


def test_parse_enforces_max_radius():
    assert _parse("1", "1", "600", max_radius=500.0).code == "RADIUS_TOO_LARGE"
    assert _parse("1", "1", "500", max_radius=500.0).radius_km == 500.0
