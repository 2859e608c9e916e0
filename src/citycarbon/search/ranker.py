# src/citycarbon/search/ranker.py
"""
Fuzzy city search (rule-table ranker).

Every gazetteer record gets an integer score from an explicit, additive rule table:
- text rules compare the normalized query against name, aliases, state and district,
- importance bonuses (tier, capital, metro) are added regardless of text match.

Weights come from settings (`search.weights`), so the table is tunable without code changes.
A city is dropped only when its total is exactly 0; ties keep gazetteer order.
"""

from __future__ import annotations

import logging

from citycarbon.config.settings import SearchSettings, SearchWeights
from citycarbon.domain.models import CityMatch, CityRecord
from citycarbon.gazetteer.loader import Gazetteer

logger = logging.getLogger(__name__)


def normalize_query(query: str | None) -> str:
    """Lower-case and trim a raw query (None becomes an empty string)."""
    return (query or "").strip().lower()


def _text_points(
    text: str, query: str, *, exact: int, prefix: int, substring: int
) -> tuple[int, str | None]:
    value = text.lower()
    if value == query:
        return exact, "exact"
    if value.startswith(query):
        return prefix, "prefix"
    if query in value:
        return substring, "substring"
    return 0, None


def explain_city_score(
    city: CityRecord,
    query: str,
    *,
    weights: SearchWeights,
    alias_scoring: str = "sum",
) -> tuple[int, list[str]]:
    """Score one city against an already-normalized query, with reasons."""
    score = 0
    reasons: list[str] = []

    points, kind = _text_points(
        city.name,
        query,
        exact=weights.name_exact,
        prefix=weights.name_prefix,
        substring=weights.name_substring,
    )
    if points:
        score += points
        reasons.append(f"name {kind} +{points}")

    alias_hits: list[tuple[int, str]] = []
    for alias in city.aliases:
        points, kind = _text_points(
            alias,
            query,
            exact=weights.alias_exact,
            prefix=weights.alias_prefix,
            substring=weights.alias_substring,
        )
        if points:
            alias_hits.append((points, f"alias '{alias}' {kind} +{points}"))
    if alias_hits and alias_scoring == "max":
        # max() keeps the first alias among equal scores.
        alias_hits = [max(alias_hits, key=lambda hit: hit[0])]
    for points, reason in alias_hits:
        score += points
        reasons.append(reason)

    if query in city.state.lower():
        score += weights.state_substring
        reasons.append(f"state +{weights.state_substring}")
    if city.district and query in city.district.lower():
        score += weights.district_substring
        reasons.append(f"district +{weights.district_substring}")

    tier_points = weights.tier_bonus(city.tier)
    if tier_points:
        score += tier_points
        reasons.append(f"tier {city.tier} +{tier_points}")
    if city.is_capital and weights.capital_bonus:
        score += weights.capital_bonus
        reasons.append(f"capital +{weights.capital_bonus}")
    if city.is_metro and weights.metro_bonus:
        score += weights.metro_bonus
        reasons.append(f"metro +{weights.metro_bonus}")

    return score, reasons


def score_city(
    city: CityRecord,
    query: str,
    *,
    weights: SearchWeights,
    alias_scoring: str = "sum",
) -> int:
    """Score one city against an already-normalized query."""
    score, _ = explain_city_score(city, query, weights=weights, alias_scoring=alias_scoring)
    return score


class CityRanker:
    """Rank gazetteer records against free-text queries."""

    def __init__(self, gazetteer: Gazetteer, settings: SearchSettings | None = None):
        self._gazetteer = gazetteer
        self._settings = settings or SearchSettings()

    @property
    def settings(self) -> SearchSettings:
        return self._settings

    def search_scored(self, query: str | None, limit: int | None = None) -> list[CityMatch]:
        """Return up to `limit` hits, best first, each with score and reasons.

        Queries shorter than `min_query_length` (after trimming) skip scoring and
        return the first `limit` records in gazetteer order with score 0.
        """
        if limit is None:
            limit = self._settings.default_limit
        if int(limit) < 1:
            raise ValueError(f"limit must be a positive integer, got {limit}")
        limit = int(limit)

        normalized = normalize_query(query)
        if len(normalized) < self._settings.min_query_length:
            return [CityMatch(city=c, score=0) for c in self._gazetteer.records[:limit]]

        hits: list[CityMatch] = []
        for city in self._gazetteer:
            score, reasons = explain_city_score(
                city,
                normalized,
                weights=self._settings.weights,
                alias_scoring=self._settings.alias_scoring,
            )
            if score != 0:
                hits.append(CityMatch(city=city, score=score, reasons=reasons))

        # list.sort is stable, so equal scores keep gazetteer order.
        hits.sort(key=lambda hit: hit.score, reverse=True)
        logger.debug("City search q=%r matched %d of %d records", normalized, len(hits), len(self._gazetteer))
        return hits[:limit]

    def search(self, query: str | None, limit: int | None = None) -> list[CityRecord]:
        """Return up to `limit` cities ranked by score (see `search_scored`)."""
        return [hit.city for hit in self.search_scored(query, limit)]
