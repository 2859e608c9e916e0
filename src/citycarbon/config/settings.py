# src/citycarbon/config/settings.py
"""
Application settings (Pydantic).

Settings are loaded from `src/citycarbon/config/defaults.yaml`, then optionally overridden by:
- environment variables (e.g., `CITYCARBON_LOG_LEVEL`, `CITYCARBON_GAZETTEER_PATH`)
- an external YAML file via `CITYCARBON_CONFIG_PATH`

Design rule:
- Tuning knobs (search weights, suggestion rules, emission factors) live in YAML,
  not hard-coded in business logic.
"""

from __future__ import annotations

import os
from functools import lru_cache
from importlib import resources
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, Field

from citycarbon.core.env import load_dotenv_if_present
from citycarbon.domain.models import Region, Tier

DuplicatePolicy = Literal["error", "first", "last", "max_population"]


def _read_package_yaml(filename: str) -> dict[str, Any]:
    """Read a YAML file packaged inside `citycarbon.config`."""
    text = resources.files("citycarbon.config").joinpath(filename).read_text(encoding="utf-8")
    data = yaml.safe_load(text) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Invalid YAML root object for {filename}; expected a mapping.")
    return data


def _read_yaml_file(path: str | Path) -> dict[str, Any]:
    """Read a YAML file from disk and return its mapping root."""
    data = yaml.safe_load(Path(path).read_text(encoding="utf-8")) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Invalid YAML root object for {path}; expected a mapping.")
    return data


class AppSettings(BaseModel):
    name: str = "CityCarbon"
    log_level: str = "INFO"


class GazetteerSettings(BaseModel):
    # None means the dataset packaged in `citycarbon.data`.
    path: str | None = None
    duplicate_policy: DuplicatePolicy = "max_population"


class SearchWeights(BaseModel):
    """Additive points awarded by the city ranker (see `citycarbon.search.ranker`)."""

    name_exact: int = 100
    name_prefix: int = 80
    name_substring: int = 60
    alias_exact: int = 90
    alias_prefix: int = 70
    alias_substring: int = 50
    state_substring: int = 40
    district_substring: int = 30
    tier_1_bonus: int = 20
    tier_2_bonus: int = 15
    tier_3_bonus: int = 10
    tier_4_bonus: int = 0
    capital_bonus: int = 10
    metro_bonus: int = 15

    def tier_bonus(self, tier: int) -> int:
        return {
            1: self.tier_1_bonus,
            2: self.tier_2_bonus,
            3: self.tier_3_bonus,
            4: self.tier_4_bonus,
        }.get(tier, 0)


class SearchSettings(BaseModel):
    min_query_length: int = Field(2, ge=0)
    default_limit: int = Field(10, ge=1)
    # "sum" adds every matching alias; "max" keeps only the best alias per city.
    alias_scoring: Literal["sum", "max"] = "sum"
    weights: SearchWeights = Field(default_factory=SearchWeights)


class DirectorySettings(BaseModel):
    popular_limit_default: int = Field(20, ge=1)
    related_limit_default: int = Field(5, ge=1)
    nearest_limit_default: int = Field(5, ge=1)


class CityFilter(BaseModel):
    """Declarative city predicate; every field that is set must match.

    `alias_contains` and `ids` count as a single condition that a city meets by
    satisfying either of them.
    """

    tier: Tier | None = None
    region: Region | None = None
    state: str | None = None
    is_capital: bool | None = None
    is_metro: bool | None = None
    alias_contains: str | None = None
    ids: list[str] | None = None


class SuggestionRule(BaseModel):
    label: str
    hint: str = ""
    keywords: list[str] = Field(default_factory=list)
    words: list[str] = Field(default_factory=list)
    filter: CityFilter = Field(default_factory=CityFilter)
    order: Literal["gazetteer", "population"] = "gazetteer"


class SuggestionSettings(BaseModel):
    result_limit: int = Field(8, ge=1)
    category_limit: int = Field(5, ge=1)
    rules: list[SuggestionRule] = Field(default_factory=list)


class TravelMode(BaseModel):
    mode: str
    description: str = "{distance_km:.1f} km"
    distance_multiplier: float = Field(1.0, gt=0)
    minutes_per_km: float = Field(..., ge=0)
    kg_co2_per_km: float = Field(..., ge=0)
    eco_friendly: bool = False


class RouteSettings(BaseModel):
    modes: list[TravelMode] = Field(default_factory=list)


class Settings(BaseModel):
    app: AppSettings = Field(default_factory=AppSettings)
    gazetteer: GazetteerSettings = Field(default_factory=GazetteerSettings)
    search: SearchSettings = Field(default_factory=SearchSettings)
    directory: DirectorySettings = Field(default_factory=DirectorySettings)
    suggestions: SuggestionSettings = Field(default_factory=SuggestionSettings)
    routes: RouteSettings = Field(default_factory=RouteSettings)


def _apply_env_overrides(data: dict[str, Any]) -> dict[str, Any]:
    """Overlay selected environment variables onto raw settings payload.

    Note: We intentionally keep this whitelist small.
    """
    load_dotenv_if_present()
    data = dict(data)

    log_level = os.getenv("CITYCARBON_LOG_LEVEL")
    if log_level:
        data.setdefault("app", {})["log_level"] = log_level

    gazetteer_path = os.getenv("CITYCARBON_GAZETTEER_PATH")
    if gazetteer_path:
        data.setdefault("gazetteer", {})["path"] = gazetteer_path

    duplicate_policy = os.getenv("CITYCARBON_DUPLICATE_POLICY")
    if duplicate_policy:
        data.setdefault("gazetteer", {})["duplicate_policy"] = duplicate_policy

    return data


@lru_cache
def get_settings() -> Settings:
    """Load and validate settings (cached)."""
    load_dotenv_if_present()
    config_path = os.getenv("CITYCARBON_CONFIG_PATH")
    raw = _read_yaml_file(config_path) if config_path else _read_package_yaml("defaults.yaml")
    raw = _apply_env_overrides(raw)
    return Settings.model_validate(raw)


@lru_cache
def get_logging_config() -> dict[str, Any]:
    """Load logging configuration (cached)."""
    return _read_package_yaml("logging.yaml")
