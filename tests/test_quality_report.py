from citycarbon.config.settings import get_settings
from citycarbon.domain.models import CityRecord
from citycarbon.gazetteer.loader import read_city_records
from citycarbon.quality.report import build_quality_report, gazetteer_issues


def _by_code(issues):
    return {i.code: i for i in issues}


def test_packaged_gazetteer_issues():
    issues = _by_code(gazetteer_issues(read_city_records(), duplicate_policy="max_population"))

    dup = issues["GAZETTEER_DUPLICATE_ID"]
    assert dup.severity == "warning"
    assert dup.sample == ["kochi", "mangalore"]

    # The two kochi records are identical; only mangalore disagrees.
    assert issues["GAZETTEER_DUPLICATE_CONFLICT"].sample == ["mangalore"]
    # e.g. "Steel City" and "City of Lakes" each belong to three cities.
    assert issues["GAZETTEER_SHARED_ALIAS"].count >= 5


def test_duplicate_ids_are_errors_under_fail_fast_policy():
    issues = _by_code(gazetteer_issues(read_city_records(), duplicate_policy="error"))
    assert issues["GAZETTEER_DUPLICATE_ID"].severity == "error"


def test_alias_shadowing_another_city_name_is_flagged():
    base = {"state": "S", "region": "North", "latitude": 1.0, "longitude": 1.0, "population": 1, "tier": 3}
    records = [
        CityRecord(id="a", name="Alpha", aliases=["Beta"], **base),
        CityRecord(id="b", name="Beta", district="D", **base),
    ]
    issues = _by_code(gazetteer_issues(records, duplicate_policy="max_population"))
    assert issues["GAZETTEER_ALIAS_SHADOWS_NAME"].sample == ["a:Beta"]
    assert issues["GAZETTEER_MISSING_DISTRICT"].sample == ["a"]
    assert "GAZETTEER_DUPLICATE_ID" not in issues


def test_build_quality_report_shape():
    report = build_quality_report(get_settings())
    assert report["overall"]["severity"] == "warning"
    assert report["gazetteer"] == {"raw_records": 98, "unique_ids": 96, "duplicate_policy": "max_population"}
    assert report["paths"]["gazetteer_path"].startswith("package:")


def test_build_quality_report_load_failure(tmp_path):
    settings = get_settings()
    broken = settings.model_copy(
        update={"gazetteer": settings.gazetteer.model_copy(update={"path": str(tmp_path / "missing.json")})}
    )
    report = build_quality_report(broken)
    assert report["overall"]["severity"] == "error"
    assert report["issues"][0]["code"] == "GAZETTEER_LOAD_FAILED"
