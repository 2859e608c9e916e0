from __future__ import annotations

import pytest

from citycarbon.config.overrides import apply_settings_overrides
from citycarbon.config.settings import get_settings


def test_packaged_defaults_match_the_search_rule_table():
    settings = get_settings()
    w = settings.search.weights
    assert (w.name_exact, w.name_prefix, w.name_substring) == (100, 80, 60)
    assert (w.alias_exact, w.alias_prefix, w.alias_substring) == (90, 70, 50)
    assert (w.state_substring, w.district_substring) == (40, 30)
    assert [w.tier_bonus(t) for t in (1, 2, 3, 4)] == [20, 15, 10, 0]
    assert (w.capital_bonus, w.metro_bonus) == (10, 15)
    assert settings.search.alias_scoring == "sum"
    assert settings.gazetteer.duplicate_policy == "max_population"
    assert [m.mode for m in settings.routes.modes] == [
        "Walking",
        "Cycling",
        "Public Transport",
        "Driving",
        "Flight",
    ]


def test_env_overrides_duplicate_policy(monkeypatch):
    monkeypatch.setenv("CITYCARBON_DUPLICATE_POLICY", "first")
    get_settings.cache_clear()
    try:
        assert get_settings().gazetteer.duplicate_policy == "first"
    finally:
        monkeypatch.delenv("CITYCARBON_DUPLICATE_POLICY")
        get_settings.cache_clear()


def test_apply_settings_overrides_returns_same_object_when_none():
    settings = get_settings()
    assert apply_settings_overrides(settings, None) is settings
    assert apply_settings_overrides(settings, {}) is settings


def test_apply_settings_overrides_can_override_search_weights():
    settings = get_settings()
    overrides = {"search": {"alias_scoring": "max", "weights": {"metro_bonus": 0}}}

    out = apply_settings_overrides(settings, overrides)

    assert out.search.alias_scoring == "max"
    assert out.search.weights.metro_bonus == 0
    # Untouched siblings survive the deep merge.
    assert out.search.weights.capital_bonus == 10
    # The shared settings object is not mutated.
    assert settings.search.weights.metro_bonus == 15


def test_apply_settings_overrides_rejects_gazetteer_changes():
    settings = get_settings()
    with pytest.raises(ValueError, match=r"'gazetteer'"):
        apply_settings_overrides(settings, {"gazetteer": {"path": "/etc/passwd"}})


def test_apply_settings_overrides_rejects_disallowed_nested_keys_with_clear_path():
    settings = get_settings()
    with pytest.raises(ValueError, match=r"suggestions\.rules"):
        apply_settings_overrides(settings, {"suggestions": {"rules": []}})


def test_apply_settings_overrides_rejects_wrong_value_shapes_for_restricted_subtrees():
    settings = get_settings()
    with pytest.raises(ValueError, match=r"settings_overrides key 'suggestions' must be a mapping"):
        apply_settings_overrides(settings, {"suggestions": 1})


def test_apply_settings_overrides_revalidates_values():
    settings = get_settings()
    with pytest.raises(ValueError):
        apply_settings_overrides(settings, {"search": {"alias_scoring": "median"}})
