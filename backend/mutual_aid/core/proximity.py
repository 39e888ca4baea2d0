"""Proximity Matcher — radius-bounded, distance-ranked matching of candidate points.

Invariants:
    - Every result has distance_km <= radius_km (compared before rounding)
    - Results are sorted non-decreasing by distance; ties keep candidate input order
    - Candidates without a GeoPoint are excluded, never an error
    - Empty input or nothing in range yields an empty list

Design Decisions:
    - Rounding to 2 decimals happens only for presentation, after the radius check,
      so a point at 10.004 km never flickers in or out of a 10 km search
    - Query parsing returns a Rejection value instead of raising; "0" is a real
      coordinate (Gulf of Guinea) and only absent/unparseable input is rejected
"""

import math
from dataclasses import dataclass
from typing import Iterable

from mutual_aid.core.geo import (
    GeoPoint, distance_km, is_valid_latitude, is_valid_longitude,
)
from mutual_aid.core.rejection import Rejection, invalid_input


@dataclass(frozen=True)
class ProximityResult:
    resource_id: str
    distance_km: float


@dataclass(frozen=True)
class NearbyQuery:
    origin: GeoPoint
    radius_km: float


def find_nearby(
    origin: GeoPoint,
    radius_km: float,
    candidates: Iterable[tuple[str, GeoPoint | None]],
) -> list[ProximityResult]:
    """Filter candidates to those within radius_km of origin, nearest first."""
    in_range: list[tuple[float, str]] = []
    for resource_id, point in candidates:
        if point is None:
            continue
        distance = distance_km(origin, point)
        if distance <= radius_km:
            in_range.append((distance, resource_id))

    # sorted() is stable: equal distances stay in input order
    in_range = sorted(in_range, key=lambda item: item[0])
    return [
        ProximityResult(resource_id=resource_id, distance_km=round(distance, 2))
        for distance, resource_id in in_range
    ]


def parse_nearby_query(
    latitude: str | None,
    longitude: str | None,
    radius_km: str | None,
    default_radius_km: float,
    max_radius_km: float | None = None,
) -> NearbyQuery | Rejection:
    """Turn raw query-string values into a NearbyQuery, or reject them."""
    if latitude is None or longitude is None:
        return invalid_input(
            "COORDINATES_REQUIRED", "latitude and longitude are required",
        )

    lat = _parse_float(latitude)
    if lat is None or not is_valid_latitude(lat):
        return invalid_input(
            "INVALID_LATITUDE",
            "latitude must be a finite number in [-90, 90]",
            field="latitude",
        )

    lon = _parse_float(longitude)
    if lon is None or not is_valid_longitude(lon):
        return invalid_input(
            "INVALID_LONGITUDE",
            "longitude must be a finite number in [-180, 180]",
            field="longitude",
        )

    radius = default_radius_km
    if radius_km is not None and radius_km.strip() != "":
        parsed = _parse_float(radius_km)
        if parsed is None or parsed <= 0:
            return invalid_input(
                "INVALID_RADIUS",
                "radius_km must be a positive finite number",
                field="radius_km",
            )
        radius = parsed

    if max_radius_km is not None and radius > max_radius_km:
        return invalid_input(
            "RADIUS_TOO_LARGE",
            f"radius_km must not exceed {max_radius_km}",
            field="radius_km",
        )

    return NearbyQuery(origin=GeoPoint(lat, lon), radius_km=radius)


def _parse_float(raw: str) -> float | None:
    try:
        value = float(raw)
    except (TypeError, ValueError):
        return None
    return value if math.isfinite(value) else None
