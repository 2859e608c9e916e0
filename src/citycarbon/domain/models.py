"""
Domain models (Pydantic).

These types represent the stable "contract" between layers:
- reference data (`CityRecord`)
- ranked search output (`CityMatch`)
- facade outputs (`SmartSuggestions`, `RoutePlan`)

Keeping these models in one place helps:
- validation (reject bad reference data at load time),
- typed refactors,
- consistent JSON output across CLI/API.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from citycarbon.core.geo import GeoPoint

Region = Literal["North", "South", "East", "West", "Central", "Northeast"]
Tier = Literal[1, 2, 3, 4]


class CityRecord(BaseModel):
    """One gazetteer entry. Immutable once loaded."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    state: str
    district: str | None = None
    region: Region
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)
    population: int = Field(..., gt=0)
    tier: Tier
    aliases: tuple[str, ...] = ()
    is_capital: bool = False
    is_metro: bool = False

    @field_validator("id")
    @classmethod
    def _normalize_id(cls, value: str) -> str:
        value = value.strip().lower()
        if not value:
            raise ValueError("city id must not be blank")
        return value

    @field_validator("aliases")
    @classmethod
    def _strip_aliases(cls, aliases: tuple[str, ...]) -> tuple[str, ...]:
        return tuple(a.strip() for a in aliases if a and a.strip())

    @property
    def location(self) -> GeoPoint:
        return GeoPoint(lat=self.latitude, lon=self.longitude)


class CityMatch(BaseModel):
    """A ranked search hit with its score and the rules that produced it."""

    city: CityRecord
    score: int
    reasons: list[str] = Field(default_factory=list)


class SmartSuggestions(BaseModel):
    """Ranked search results plus rule-based category groupings for a query."""

    query: str
    cities: list[CityRecord]
    suggestions: list[str] = Field(default_factory=list)
    categories: dict[str, list[CityRecord]] = Field(default_factory=dict)


class RouteOption(BaseModel):
    """One way to travel between two cities, with its estimated footprint."""

    mode: str
    distance_km: float = Field(..., ge=0)
    duration_minutes: float = Field(..., ge=0)
    emissions_kg: float = Field(..., ge=0)
    description: str
    eco_friendly: bool


class RoutePlan(BaseModel):
    """All travel options between two resolved cities, lowest emissions first."""

    origin: CityRecord
    destination: CityRecord
    distance_km: float = Field(..., ge=0)
    options: list[RouteOption]
