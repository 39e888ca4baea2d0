"""Distance Calculator — great-circle geometry over latitude/longitude pairs.

Invariants:
    - distance_km is pure and total for finite input: never raises, never negative
    - distance_km(p, p) == 0 and distance_km(a, b) == distance_km(b, a)
    - A coordinate pair is both-present or both-absent; one-sided pairs are rejected
      by check_coordinate_pair and never coerced into a GeoPoint

Design Decisions:
    - Haversine on a spherical Earth (6371 km): accurate to ~0.5% at neighborhood scale,
      no GIS dependency
    - Range validation lives in check_coordinate_pair, not in distance_km: callers
      validate at the boundary, the math stays total
"""

import math
from dataclasses import dataclass

from mutual_aid.core.domain_types import EARTH_RADIUS_KM


@dataclass(frozen=True)
class GeoPoint:
    """A latitude/longitude pair in decimal degrees."""
    latitude: float
    longitude: float


def distance_km(a: GeoPoint, b: GeoPoint) -> float:
    """Great-circle distance in kilometers between two points."""
    lat1 = math.radians(a.latitude)
    lat2 = math.radians(b.latitude)
    dlat = lat2 - lat1
    dlon = math.radians(b.longitude - a.longitude)

    h = (
        math.sin(dlat / 2) ** 2
        + math.cos(lat1) * math.cos(lat2) * math.sin(dlon / 2) ** 2
    )
    # float error can push h a hair past 1 for antipodal points
    h = min(1.0, max(0.0, h))
    return EARTH_RADIUS_KM * 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h))


def is_valid_latitude(value: float) -> bool:
    return math.isfinite(value) and -90.0 <= value <= 90.0


def is_valid_longitude(value: float) -> bool:
    return math.isfinite(value) and -180.0 <= value <= 180.0


def check_coordinate_pair(
    latitude: float | None, longitude: float | None,
) -> str | None:
    """Validate a pair supplied on write. Returns an error message or None.

    Both absent is valid (the record simply has no location).
    """
    if latitude is None and longitude is None:
        return None
    if latitude is None or longitude is None:
        return "latitude and longitude must be provided together"
    if not is_valid_latitude(latitude):
        return f"latitude must be a finite number in [-90, 90], got {latitude}"
    if not is_valid_longitude(longitude):
        return f"longitude must be a finite number in [-180, 180], got {longitude}"
    return None


def to_geo_point(
    latitude: float | None, longitude: float | None,
) -> GeoPoint | None:
    """GeoPoint for a stored pair, or None when the pair is absent or incomplete."""
    if latitude is None or longitude is None:
        return None
    return GeoPoint(float(latitude), float(longitude))
