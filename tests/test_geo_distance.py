import itertools

import pytest

from citycarbon.core.geo import GeoPoint, haversine_km
from citycarbon.gazetteer.loader import load_gazetteer
from citycarbon.search.distance import DistanceCalculator


def test_haversine_identical_points_is_zero():
    p = GeoPoint(lat=19.0760, lon=72.8777)
    assert haversine_km(p, p) == 0.0


def test_haversine_quarter_meridian():
    # Equator to pole along a meridian is a quarter of the great circle.
    d = haversine_km(GeoPoint(lat=0.0, lon=0.0), GeoPoint(lat=90.0, lon=0.0))
    assert d == pytest.approx(6371.0 * 3.141592653589793 / 2, rel=1e-9)


def test_haversine_antipodal_points_do_not_fail():
    d = haversine_km(GeoPoint(lat=0.0, lon=0.0), GeoPoint(lat=0.0, lon=180.0))
    assert d == pytest.approx(6371.0 * 3.141592653589793, rel=1e-9)


def test_distance_mumbai_delhi():
    calc = DistanceCalculator(load_gazetteer())
    d = calc.distance("mumbai", "delhi")
    # Exact great-circle value for the packaged coordinates.
    assert d == pytest.approx(1148.09, abs=0.5)


def test_distance_is_symmetric_and_zero_on_diagonal():
    gazetteer = load_gazetteer()
    calc = DistanceCalculator(gazetteer)
    ids = [c.id for c in gazetteer]
    for a, b in itertools.combinations(ids, 2):
        assert calc.distance(a, b) == pytest.approx(calc.distance(b, a), rel=1e-12)
        assert calc.distance(a, b) >= 0
    for a in ids:
        assert calc.distance(a, a) == 0.0


def test_distance_unknown_id_is_absent():
    calc = DistanceCalculator(load_gazetteer())
    assert calc.distance("mumbai", "atlantis") is None
    assert calc.distance("atlantis", "mumbai") is None
