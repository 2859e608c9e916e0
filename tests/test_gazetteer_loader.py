import json
import logging

import pytest
from pydantic import ValidationError

from citycarbon.config.settings import CityFilter
from citycarbon.domain.models import CityRecord
from citycarbon.gazetteer.errors import CityNotFound, DuplicateIdConflict
from citycarbon.gazetteer.loader import (
    Gazetteer,
    build_gazetteer,
    load_gazetteer,
    read_city_records,
)


def _city(city_id: str, population: int = 1000, **kw) -> CityRecord:
    payload = {
        "id": city_id,
        "name": city_id.title(),
        "state": "Test State",
        "region": "North",
        "latitude": 10.0,
        "longitude": 70.0,
        "population": population,
        "tier": 3,
    }
    payload.update(kw)
    return CityRecord(**payload)


def test_packaged_dataset_keeps_raw_duplicates():
    records = read_city_records()
    ids = [c.id for c in records]
    assert len(records) == 98
    assert ids.count("mangalore") == 2
    assert ids.count("kochi") == 2


def test_load_gazetteer_resolves_duplicates_to_single_lookup():
    gazetteer = load_gazetteer()
    assert len(gazetteer) == 96
    assert len({c.id for c in gazetteer}) == 96

    # Default policy keeps the most populous of the duplicated records.
    mangalore = gazetteer.get_by_id("mangalore")
    assert mangalore is not None
    assert mangalore.population == 623841
    assert [c for c in gazetteer if c.id == "mangalore"] == [mangalore]


def test_load_gazetteer_error_policy_fails_fast():
    with pytest.raises(DuplicateIdConflict) as exc_info:
        load_gazetteer(duplicate_policy="error")
    assert exc_info.value.city_ids == ["mangalore", "kochi"]


@pytest.mark.parametrize(
    "policy,expected_population",
    [("max_population", 30), ("first", 10), ("last", 30)],
)
def test_duplicate_policies_are_deterministic(policy, expected_population):
    records = [_city("a", 10), _city("b"), _city("a", 30, name="A Prime")]
    gazetteer = build_gazetteer(records, duplicate_policy=policy)

    assert [c.id for c in gazetteer] == ["a", "b"]
    assert gazetteer.get_by_id("a").population == expected_population


def test_max_population_tie_keeps_first_record():
    records = [_city("a", 10, name="First"), _city("a", 10, name="Second")]
    gazetteer = build_gazetteer(records)
    assert gazetteer.get_by_id("a").name == "First"


def test_duplicate_resolution_is_logged(caplog):
    with caplog.at_level(logging.WARNING, logger="citycarbon.gazetteer.loader"):
        build_gazetteer([_city("a", 10), _city("a", 20)])
    assert any("id=a" in r.getMessage() for r in caplog.records)


def test_gazetteer_constructor_rejects_duplicate_ids():
    with pytest.raises(DuplicateIdConflict):
        Gazetteer([_city("a"), _city("a")])


def test_get_by_id_unknown_returns_none_and_require_raises():
    gazetteer = build_gazetteer([_city("alpha")])
    assert gazetteer.get_by_id("atlantis") is None
    assert gazetteer.get_by_id("") is None
    assert gazetteer.get_by_id(None) is None
    assert gazetteer.get_by_id("  ALPHA ") is not None
    assert "alpha" in gazetteer
    with pytest.raises(CityNotFound):
        gazetteer.require("atlantis")


def test_filter_accepts_callables_and_city_filters():
    gazetteer = build_gazetteer(
        [
            _city("a", tier=1, is_metro=True),
            _city("b", region="South", is_capital=True),
            _city("c", aliases=["Silicon Town"]),
            _city("d", tier=1),
        ]
    )
    assert [c.id for c in gazetteer.filter(lambda c: c.tier == 1)] == ["a", "d"]
    assert [c.id for c in gazetteer.filter(CityFilter(tier=1, is_metro=True))] == ["a"]
    assert [c.id for c in gazetteer.filter(CityFilter(region="South"))] == ["b"]
    assert [c.id for c in gazetteer.filter(CityFilter(alias_contains="silicon", ids=["d"]))] == ["c", "d"]
    assert len(gazetteer.filter(CityFilter())) == 4


def test_alias_and_id_filters_are_one_either_or_condition():
    gazetteer = build_gazetteer(
        [
            _city("a", aliases=["Silicon Valley of India"]),
            _city("b", tier=1),
            _city("c", tier=1, aliases=["Silicon Plateau"]),
            _city("d"),
        ]
    )
    either = CityFilter(alias_contains="silicon", ids=["B"])
    assert [c.id for c in gazetteer.filter(either)] == ["a", "b", "c"]
    # The pair is still AND-ed with every other field that is set.
    both = either.model_copy(update={"tier": 1})
    assert [c.id for c in gazetteer.filter(both)] == ["b", "c"]


def test_load_gazetteer_from_json_file(tmp_path):
    path = tmp_path / "cities.json"
    path.write_text(
        json.dumps(
            [
                {
                    "id": " Alpha ",
                    "name": "Alpha",
                    "state": "S",
                    "region": "East",
                    "latitude": 1.0,
                    "longitude": 2.0,
                    "population": 5,
                    "tier": 4,
                    "aliases": ["A1", " ", "A2"],
                    "is_capital": False,
                    "is_metro": False,
                }
            ]
        ),
        encoding="utf-8",
    )
    gazetteer = load_gazetteer(path)
    city = gazetteer.get_by_id("alpha")
    assert city.aliases == ("A1", "A2")
    assert city.district is None
    assert city.location.lat == 1.0


def test_city_record_validation_rejects_bad_reference_data():
    with pytest.raises(ValidationError):
        _city("a", latitude=95.0)
    with pytest.raises(ValidationError):
        _city("a", population=0)
    with pytest.raises(ValidationError):
        _city("a", tier=5)
    with pytest.raises(ValidationError):
        _city("a", region="Southwest")


def test_city_record_is_immutable():
    city = _city("a")
    with pytest.raises(ValidationError):
        city.population = 5
