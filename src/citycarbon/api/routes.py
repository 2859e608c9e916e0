"""
API routes.

Endpoints:
- GET/POST `/api/cities/search`: ranked fuzzy city search (with score reasons).
- GET  `/api/cities/popular`, `/api/cities/suggestions`: directory views.
- GET  `/api/cities/{city_id}` (+ `/related`, `/nearest`): single-city lookups.
- GET  `/api/states|regions|tiers/{key}/cities`: categorized listings.
- GET  `/api/distance`, `/api/routes`: city-pair distance and travel options.
- GET  `/api/gazetteer/quality`, `/api/settings`: offline diagnostics and public settings.

The library returns None/[] for unknown ids; this layer maps None to 404.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Any

from fastapi import APIRouter, HTTPException, Path, Query
from pydantic import BaseModel, Field

from citycarbon.config.overrides import apply_settings_overrides
from citycarbon.config.settings import get_settings
from citycarbon.directory.views import CityDirectory, build_directory
from citycarbon.domain.models import CityMatch, CityRecord, RoutePlan, SmartSuggestions
from citycarbon.quality.report import build_quality_report

router = APIRouter()


class SearchRequest(BaseModel):
    query: str = ""
    limit: int | None = Field(default=None, ge=1, le=100)
    settings_overrides: dict[str, Any] | None = None


@lru_cache
def _directory() -> CityDirectory:
    return build_directory(get_settings())


def _not_found(city_id: str) -> HTTPException:
    return HTTPException(
        status_code=404,
        detail={"code": "CITY_NOT_FOUND", "message": f"Unknown city id: '{city_id}'"},
    )


def _search_payload(query: str, hits: list[CityMatch]) -> dict:
    return {"query": query, "results": [h.model_dump(mode="json") for h in hits]}


@router.get("/api/cities/search")
def get_city_search(
    q: str = "",
    limit: int | None = Query(default=None, ge=1, le=100),
) -> dict:
    """Rank cities against free text; short queries return the unranked head of the gazetteer."""
    return _search_payload(q, _directory().search_scored(q, limit))


@router.post("/api/cities/search")
def post_city_search(request: SearchRequest) -> dict:
    """Ranked search with optional per-request search-weight overrides."""
    directory = _directory()
    try:
        settings = apply_settings_overrides(directory.settings, request.settings_overrides)
    except ValueError as e:
        raise HTTPException(
            status_code=400,
            detail={"code": "VALIDATION_ERROR", "message": str(e)},
        ) from e
    if settings is not directory.settings:
        directory = CityDirectory(directory.gazetteer, settings)
    return _search_payload(request.query, directory.search_scored(request.query, request.limit))


@router.get("/api/cities/popular", response_model=list[CityRecord])
def get_popular_cities(limit: int | None = Query(default=None, ge=1, le=100)) -> list[CityRecord]:
    return _directory().popular(limit)


@router.get("/api/cities/suggestions", response_model=SmartSuggestions)
def get_smart_suggestions(q: str = "") -> SmartSuggestions:
    return _directory().smart_suggestions(q)


@router.get("/api/cities/{city_id}", response_model=CityRecord)
def get_city(city_id: str) -> CityRecord:
    city = _directory().get_by_id(city_id)
    if city is None:
        raise _not_found(city_id)
    return city


@router.get("/api/cities/{city_id}/related", response_model=list[CityRecord])
def get_related_cities(city_id: str, limit: int | None = Query(default=None, ge=1, le=100)) -> list[CityRecord]:
    """Cities sharing the state or region (membership, not proximity)."""
    directory = _directory()
    if directory.get_by_id(city_id) is None:
        raise _not_found(city_id)
    return directory.related_cities(city_id, limit)


@router.get("/api/cities/{city_id}/nearest")
def get_nearest_cities(city_id: str, limit: int | None = Query(default=None, ge=1, le=100)) -> dict:
    directory = _directory()
    if directory.get_by_id(city_id) is None:
        raise _not_found(city_id)
    return {
        "city_id": city_id,
        "results": [
            {"city": c.model_dump(mode="json"), "distance_km": round(km, 3)}
            for c, km in directory.nearest_cities(city_id, limit)
        ],
    }


@router.get("/api/states/{state}/cities", response_model=list[CityRecord])
def get_cities_by_state(state: str) -> list[CityRecord]:
    return _directory().by_state(state)


@router.get("/api/regions/{region}/cities", response_model=list[CityRecord])
def get_cities_by_region(region: str) -> list[CityRecord]:
    return _directory().by_region(region)


@router.get("/api/tiers/{tier}/cities", response_model=list[CityRecord])
def get_cities_by_tier(tier: int = Path(..., ge=1, le=4)) -> list[CityRecord]:
    return _directory().by_tier(tier)


@router.get("/api/distance")
def get_distance(
    origin: str = Query(..., alias="from"),
    destination: str = Query(..., alias="to"),
) -> dict:
    """Great-circle distance (km) between two city ids."""
    km = _directory().distance(origin, destination)
    if km is None:
        missing = origin if _directory().get_by_id(origin) is None else destination
        raise _not_found(missing)
    return {"from": origin, "to": destination, "distance_km": round(km, 3)}


@router.get("/api/routes", response_model=RoutePlan)
def get_route_plan(
    origin: str = Query(..., alias="from"),
    destination: str = Query(..., alias="to"),
) -> RoutePlan:
    """Per-mode travel options between two cities, lowest emissions first."""
    plan = _directory().plan_route(origin, destination)
    if plan is None:
        missing = origin if _directory().get_by_id(origin) is None else destination
        raise _not_found(missing)
    return plan


@router.get("/api/gazetteer/quality")
def get_gazetteer_quality() -> dict:
    """Offline data-integrity report for the configured gazetteer."""
    return build_quality_report(get_settings())


@router.get("/api/settings")
def get_public_settings() -> dict:
    """Return the tunable settings the UI needs (no file paths)."""
    data = get_settings().model_dump(mode="json")
    return {
        "app": {"name": data.get("app", {}).get("name")},
        "search": data.get("search", {}),
        "directory": data.get("directory", {}),
        "suggestions": data.get("suggestions", {}),
        "routes": data.get("routes", {}),
    }
