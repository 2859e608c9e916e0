"""
City gazetteer loader.

The gazetteer is a JSON list of city records (default: the dataset packaged in
`citycarbon/data/indian_cities.json`). We validate it into typed Pydantic models,
resolve duplicate ids with a configured policy, and wrap the result in an
immutable `Gazetteer` value that the ranker, distance calculator and directory
receive at construction time.
"""

from __future__ import annotations

import json
import logging
from importlib import resources
from pathlib import Path
from types import MappingProxyType
from typing import Callable, Iterable, Iterator

from pydantic import TypeAdapter

from citycarbon.config.settings import CityFilter, DuplicatePolicy
from citycarbon.core.env import resolve_project_path
from citycarbon.domain.models import CityRecord
from citycarbon.gazetteer.errors import CityNotFound, DuplicateIdConflict

logger = logging.getLogger(__name__)

PACKAGED_DATASET = "indian_cities.json"

_CITIES_ADAPTER = TypeAdapter(list[CityRecord])

CityPredicate = Callable[[CityRecord], bool]


def city_matches(city: CityRecord, flt: CityFilter) -> bool:
    """Return True when `city` satisfies every field set on `flt`."""
    if flt.tier is not None and city.tier != flt.tier:
        return False
    if flt.region is not None and city.region.lower() != flt.region.lower():
        return False
    if flt.state is not None and city.state.lower() != flt.state.strip().lower():
        return False
    if flt.is_capital is not None and city.is_capital != flt.is_capital:
        return False
    if flt.is_metro is not None and city.is_metro != flt.is_metro:
        return False

    if flt.alias_contains is None and flt.ids is None:
        return True
    if flt.alias_contains is not None:
        needle = flt.alias_contains.lower()
        if any(needle in alias.lower() for alias in city.aliases):
            return True
    if flt.ids is not None and city.id in {i.strip().lower() for i in flt.ids}:
        return True
    return False


class Gazetteer:
    """Read-only collection of city records in stable load order."""

    def __init__(self, records: Iterable[CityRecord]):
        self._records: tuple[CityRecord, ...] = tuple(records)
        by_id: dict[str, CityRecord] = {}
        for city in self._records:
            if city.id in by_id:
                raise DuplicateIdConflict([city.id])
            by_id[city.id] = city
        self._by_id = MappingProxyType(by_id)

    @property
    def records(self) -> tuple[CityRecord, ...]:
        return self._records

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[CityRecord]:
        return iter(self._records)

    def __contains__(self, city_id: object) -> bool:
        return isinstance(city_id, str) and self.get_by_id(city_id) is not None

    def get_by_id(self, city_id: str | None) -> CityRecord | None:
        """Look up a city by id; unknown ids return None."""
        if not city_id:
            return None
        return self._by_id.get(str(city_id).strip().lower())

    def require(self, city_id: str) -> CityRecord:
        """Like `get_by_id`, but raise `CityNotFound` for unknown ids."""
        city = self.get_by_id(city_id)
        if city is None:
            raise CityNotFound(city_id)
        return city

    def filter(self, predicate: CityFilter | CityPredicate) -> list[CityRecord]:
        """Return the records matching `predicate`, in load order."""
        if isinstance(predicate, CityFilter):
            flt = predicate
            return [c for c in self._records if city_matches(c, flt)]
        return [c for c in self._records if predicate(c)]


def _pick(candidates: list[CityRecord], policy: DuplicatePolicy) -> CityRecord:
    if policy == "first":
        return candidates[0]
    if policy == "last":
        return candidates[-1]
    # max_population: max() keeps the first of equal keys.
    return max(candidates, key=lambda c: c.population)


def resolve_duplicates(records: list[CityRecord], *, policy: DuplicatePolicy) -> list[CityRecord]:
    """Collapse records sharing an id down to one per id.

    The survivor takes the slot of the id's first occurrence so load order stays stable.
    """
    groups: dict[str, list[CityRecord]] = {}
    for city in records:
        groups.setdefault(city.id, []).append(city)

    duplicated = [city_id for city_id, group in groups.items() if len(group) > 1]
    if not duplicated:
        return list(records)
    if policy == "error":
        raise DuplicateIdConflict(duplicated)

    resolved: list[CityRecord] = []
    for city_id, group in groups.items():
        keep = _pick(group, policy)
        if len(group) > 1:
            logger.warning(
                "Gazetteer has %d records with id=%s; kept population=%s (policy=%s)",
                len(group),
                city_id,
                keep.population,
                policy,
            )
        resolved.append(keep)
    return resolved


def build_gazetteer(
    records: Iterable[CityRecord], *, duplicate_policy: DuplicatePolicy = "max_population"
) -> Gazetteer:
    """Build a gazetteer from in-memory records (fixtures, synthetic datasets)."""
    return Gazetteer(resolve_duplicates(list(records), policy=duplicate_policy))


def read_city_records(path: str | Path | None = None) -> list[CityRecord]:
    """Load and validate raw city records, duplicates included."""
    if path is None:
        text = resources.files("citycarbon.data").joinpath(PACKAGED_DATASET).read_text(encoding="utf-8")
    else:
        text = resolve_project_path(path).read_text(encoding="utf-8")
    payload = json.loads(text)
    return _CITIES_ADAPTER.validate_python(payload)


def load_gazetteer(
    path: str | Path | None = None, *, duplicate_policy: DuplicatePolicy = "max_population"
) -> Gazetteer:
    """Load, validate and de-duplicate a gazetteer JSON file."""
    records = read_city_records(path)
    gazetteer = build_gazetteer(records, duplicate_policy=duplicate_policy)
    logger.info(
        "Loaded gazetteer: %d records (%d raw) from %s",
        len(gazetteer),
        len(records),
        path or PACKAGED_DATASET,
    )
    return gazetteer
