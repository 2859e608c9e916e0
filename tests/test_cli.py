import json
import logging

from citycarbon.cli import main
from citycarbon.core.logging import configure_logging


def test_cli_search_json(capsys):
    assert main(["search", "bombay", "--limit", "3", "--json"]) == 0
    hits = json.loads(capsys.readouterr().out)
    assert hits[0]["city"]["id"] == "mumbai"
    assert len(hits) <= 3


def test_cli_distance_text_and_unknown(capsys):
    assert main(["distance", "mumbai", "delhi"]) == 0
    assert "mumbai -> delhi:" in capsys.readouterr().out
    assert main(["distance", "mumbai", "atlantis"]) == 1


def test_cli_routes_json(capsys):
    assert main(["routes", "pune", "mumbai", "--json"]) == 0
    plan = json.loads(capsys.readouterr().out)
    assert plan["origin"]["id"] == "pune"
    assert [o["mode"] for o in plan["options"]][0] == "Walking"


def test_cli_suggest_text(capsys):
    assert main(["suggest", "metro cities"]) == 0
    out = capsys.readouterr().out
    assert "Metro Cities:" in out
    assert "* Explore major metropolitan areas" in out


def test_cli_quality_report(capsys):
    assert main(["quality-report"]) == 0
    report = json.loads(capsys.readouterr().out)
    assert report["gazetteer"]["unique_ids"] == 96


def test_cli_log_level_flag(capsys):
    try:
        assert main(["--log-level", "debug", "popular", "--limit", "1"]) == 0
        assert logging.getLogger("citycarbon").level == logging.DEBUG
        assert logging.getLogger().level == logging.DEBUG
    finally:
        configure_logging()
