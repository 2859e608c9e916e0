"""
Smart suggestions.

A fixed keyword rule table (see `suggestions.rules` in defaults.yaml) maps query text
to pre-filtered city groupings shown next to the ranked search results:
- `keywords` fire when they appear anywhere in the lower-cased query ("capitals" -> capital),
- `words` fire only as whole words; the default rules do not use them.
"""

from __future__ import annotations

import re

from citycarbon.config.settings import SuggestionRule, SuggestionSettings
from citycarbon.domain.models import CityRecord, SmartSuggestions
from citycarbon.gazetteer.loader import Gazetteer
from citycarbon.search.ranker import CityRanker


def rule_fires(rule: SuggestionRule, query: str) -> bool:
    text = query.lower()
    if any(k.lower() in text for k in rule.keywords if k):
        return True
    return any(re.search(rf"\b{re.escape(w.lower())}\b", text) for w in rule.words if w)


def _category(rule: SuggestionRule, gazetteer: Gazetteer, limit: int) -> list[CityRecord]:
    cities = gazetteer.filter(rule.filter)
    if rule.order == "population":
        cities = sorted(cities, key=lambda c: c.population, reverse=True)
    return cities[:limit]


def build_suggestions(
    query: str | None,
    *,
    gazetteer: Gazetteer,
    ranker: CityRanker,
    settings: SuggestionSettings,
) -> SmartSuggestions:
    """Run the ranked search plus every rule that fires for `query`."""
    text = query or ""
    cities = ranker.search(text, settings.result_limit)

    suggestions: list[str] = []
    categories: dict[str, list[CityRecord]] = {}
    for rule in settings.rules:
        if not rule_fires(rule, text):
            continue
        categories[rule.label] = _category(rule, gazetteer, settings.category_limit)
        if rule.hint:
            suggestions.append(rule.hint)

    return SmartSuggestions(query=text, cities=cities, suggestions=suggestions, categories=categories)
