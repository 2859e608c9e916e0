"""
City-to-city distance.

Resolves ids through the gazetteer and delegates the math to `citycarbon.core.geo`.
Unknown ids yield None rather than an error; the HTTP layer turns that into a 404.
"""

from __future__ import annotations

from citycarbon.core.geo import haversine_km
from citycarbon.gazetteer.loader import Gazetteer


class DistanceCalculator:
    def __init__(self, gazetteer: Gazetteer):
        self._gazetteer = gazetteer

    def distance(self, city_id_a: str, city_id_b: str) -> float | None:
        """Great-circle distance in km between two cities, or None if either id is unknown."""
        a = self._gazetteer.get_by_id(city_id_a)
        b = self._gazetteer.get_by_id(city_id_b)
        if a is None or b is None:
            return None
        return haversine_km(a.location, b.location)
