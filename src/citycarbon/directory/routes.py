"""
Travel options between two cities.

Each configured travel mode turns the great-circle distance into a route distance
(`distance_multiplier`), a CO2 estimate over that route distance (`kg_co2_per_km`)
and a duration over the great-circle distance (`minutes_per_km`). Options are
returned lowest-emissions first.
"""

from __future__ import annotations

from citycarbon.config.settings import RouteSettings, TravelMode
from citycarbon.domain.models import RouteOption


def _option(mode: TravelMode, distance_km: float) -> RouteOption:
    route_km = distance_km * mode.distance_multiplier
    return RouteOption(
        mode=mode.mode,
        distance_km=round(route_km, 3),
        duration_minutes=round(distance_km * mode.minutes_per_km, 1),
        emissions_kg=round(route_km * mode.kg_co2_per_km, 3),
        description=mode.description.format(distance_km=route_km),
        eco_friendly=mode.eco_friendly,
    )


def route_options(distance_km: float, settings: RouteSettings) -> list[RouteOption]:
    """Build one option per configured mode, sorted by emissions (stable)."""
    if distance_km < 0:
        raise ValueError(f"distance_km must be >= 0, got {distance_km}")
    options = [_option(mode, float(distance_km)) for mode in settings.modes]
    options.sort(key=lambda o: o.emissions_kg)
    return options
