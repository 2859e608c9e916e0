"""
City directory: the read-only query facade over one gazetteer.

`CityDirectory` composes the gazetteer, ranker and distance calculator and adds the
categorized views the calculator UI needs (popular cities, by state/region/tier,
related and nearest cities, smart suggestions, route plans). Every method is a pure
function of the immutable gazetteer, so one instance can be shared across threads.
"""

from __future__ import annotations

from citycarbon.config.settings import Settings, get_settings
from citycarbon.domain.models import CityMatch, CityRecord, RoutePlan, SmartSuggestions
from citycarbon.directory.routes import route_options
from citycarbon.directory.suggestions import build_suggestions
from citycarbon.core.geo import haversine_km
from citycarbon.gazetteer.loader import Gazetteer, load_gazetteer
from citycarbon.search.distance import DistanceCalculator
from citycarbon.search.ranker import CityRanker


def _by_population(cities: list[CityRecord]) -> list[CityRecord]:
    return sorted(cities, key=lambda c: c.population, reverse=True)


def _check_limit(limit: int | None, default: int) -> int:
    if limit is None:
        return default
    if int(limit) < 1:
        raise ValueError(f"limit must be a positive integer, got {limit}")
    return int(limit)


class CityDirectory:
    def __init__(self, gazetteer: Gazetteer, settings: Settings | None = None):
        self.settings = settings or get_settings()
        self.gazetteer = gazetteer
        self.ranker = CityRanker(gazetteer, self.settings.search)
        self.distances = DistanceCalculator(gazetteer)

    def search(self, query: str | None, limit: int | None = None) -> list[CityRecord]:
        return self.ranker.search(query, limit)

    def search_scored(self, query: str | None, limit: int | None = None) -> list[CityMatch]:
        return self.ranker.search_scored(query, limit)

    def get_by_id(self, city_id: str | None) -> CityRecord | None:
        return self.gazetteer.get_by_id(city_id)

    def distance(self, city_id_a: str, city_id_b: str) -> float | None:
        return self.distances.distance(city_id_a, city_id_b)

    def by_state(self, state: str) -> list[CityRecord]:
        """Cities in `state` (case-insensitive), most populous first."""
        key = (state or "").strip().lower()
        return _by_population(self.gazetteer.filter(lambda c: c.state.lower() == key))

    def by_region(self, region: str) -> list[CityRecord]:
        """Cities in `region` (case-insensitive), most populous first."""
        key = (region or "").strip().lower()
        return _by_population(self.gazetteer.filter(lambda c: c.region.lower() == key))

    def by_tier(self, tier: int) -> list[CityRecord]:
        """Cities of `tier`, most populous first."""
        return _by_population(self.gazetteer.filter(lambda c: c.tier == int(tier)))

    def popular(self, limit: int | None = None) -> list[CityRecord]:
        """Top cities by tier (ascending), then population (descending)."""
        limit = _check_limit(limit, self.settings.directory.popular_limit_default)
        ranked = sorted(self.gazetteer.records, key=lambda c: (c.tier, -c.population))
        return ranked[:limit]

    def related_cities(self, city_id: str, limit: int | None = None) -> list[CityRecord]:
        """Cities sharing the state or region of `city_id`, most populous first.

        This is a membership filter, not geographic proximity; see `nearest_cities`.
        Unknown ids return an empty list.
        """
        limit = _check_limit(limit, self.settings.directory.related_limit_default)
        city = self.gazetteer.get_by_id(city_id)
        if city is None:
            return []
        related = self.gazetteer.filter(
            lambda c: c.id != city.id and (c.state == city.state or c.region == city.region)
        )
        return _by_population(related)[:limit]

    # Name used by the calculator UI; same semantics as related_cities.
    nearby = related_cities

    def nearest_cities(self, city_id: str, limit: int | None = None) -> list[tuple[CityRecord, float]]:
        """Closest cities to `city_id` by great-circle distance, with km."""
        limit = _check_limit(limit, self.settings.directory.nearest_limit_default)
        city = self.gazetteer.get_by_id(city_id)
        if city is None:
            return []
        scored = [(c, haversine_km(city.location, c.location)) for c in self.gazetteer if c.id != city.id]
        scored.sort(key=lambda pair: pair[1])
        return scored[:limit]

    def smart_suggestions(self, query: str | None) -> SmartSuggestions:
        return build_suggestions(
            query,
            gazetteer=self.gazetteer,
            ranker=self.ranker,
            settings=self.settings.suggestions,
        )

    def plan_route(self, origin_id: str, destination_id: str) -> RoutePlan | None:
        """Distance and per-mode travel options between two cities, or None if either is unknown."""
        origin = self.gazetteer.get_by_id(origin_id)
        destination = self.gazetteer.get_by_id(destination_id)
        if origin is None or destination is None:
            return None
        km = haversine_km(origin.location, destination.location)
        return RoutePlan(
            origin=origin,
            destination=destination,
            distance_km=round(km, 3),
            options=route_options(km, self.settings.routes),
        )


def build_directory(settings: Settings | None = None) -> CityDirectory:
    """Load the configured gazetteer and wrap it in a directory."""
    settings = settings or get_settings()
    gazetteer = load_gazetteer(
        settings.gazetteer.path, duplicate_policy=settings.gazetteer.duplicate_policy
    )
    return CityDirectory(gazetteer, settings)
