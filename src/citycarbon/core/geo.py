from __future__ import annotations
from dataclasses import dataclass
from math import atan2, cos, radians, sin, sqrt

"""
Geospatial helpers.

City-to-city distances only need a spherical earth, so we keep a tiny geometry
layer here instead of pulling in heavier GIS dependencies.
"""

EARTH_RADIUS_KM = 6371.0


@dataclass(frozen=True)
class GeoPoint:
    """A latitude/longitude pair in decimal degrees."""

    lat: float
    lon: float


def haversine_km(a: GeoPoint, b: GeoPoint) -> float:
    """Compute great-circle distance in kilometers between two points."""
    lat1 = radians(a.lat)
    lat2 = radians(b.lat)
    dlat = radians(b.lat - a.lat)
    dlon = radians(b.lon - a.lon)

    h = sin(dlat / 2) ** 2 + cos(lat1) * cos(lat2) * sin(dlon / 2) ** 2
    # Rounding can push h a hair above 1 for near-antipodal points.
    h = min(1.0, h)
    return 2 * EARTH_RADIUS_KM * atan2(sqrt(h), sqrt(1 - h))
