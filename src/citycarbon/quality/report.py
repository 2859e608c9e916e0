"""
Offline gazetteer quality report.

Goal: a deterministic view of "is our reference data complete and sane?" computed
from the raw records, before duplicate resolution hides anything.
Used by:
- CLI `quality-report`
- API `/api/gazetteer/quality`
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from citycarbon.config.settings import Settings
from citycarbon.domain.models import CityRecord
from citycarbon.gazetteer.loader import PACKAGED_DATASET, read_city_records


@dataclass(frozen=True)
class Issue:
    severity: str  # "info" | "warning" | "error"
    code: str
    message: str
    count: int = 1
    sample: list[str] | None = None

    def as_dict(self) -> dict[str, Any]:
        return {
            "severity": self.severity,
            "code": self.code,
            "message": self.message,
            "count": int(self.count),
            "sample": list(self.sample or []),
        }


def gazetteer_issues(records: list[CityRecord], *, duplicate_policy: str) -> list[Issue]:
    issues: list[Issue] = []

    groups: dict[str, list[CityRecord]] = {}
    for city in records:
        groups.setdefault(city.id, []).append(city)
    dup = sorted(city_id for city_id, group in groups.items() if len(group) > 1)
    if dup:
        issues.append(
            Issue(
                severity="error" if duplicate_policy == "error" else "warning",
                code="GAZETTEER_DUPLICATE_ID",
                message=f"Duplicate city ids in gazetteer (resolved with policy '{duplicate_policy}').",
                count=len(dup),
                sample=dup[:8],
            )
        )
    conflicting = [city_id for city_id in dup if len(set(groups[city_id])) > 1]
    if conflicting:
        issues.append(
            Issue(
                severity="warning",
                code="GAZETTEER_DUPLICATE_CONFLICT",
                message="Some duplicated ids carry different field values.",
                count=len(conflicting),
                sample=conflicting[:8],
            )
        )

    owners: dict[str, set[str]] = {}
    for city in records:
        for alias in city.aliases:
            owners.setdefault(alias.lower(), set()).add(city.id)
    shared = sorted(alias for alias, ids in owners.items() if len(ids) > 1)
    if shared:
        issues.append(
            Issue(
                severity="info",
                code="GAZETTEER_SHARED_ALIAS",
                message="Some aliases belong to more than one city.",
                count=len(shared),
                sample=shared[:8],
            )
        )

    names = {city.name.lower(): city.id for city in records}
    shadowing = sorted(
        f"{city.id}:{alias}"
        for city in records
        for alias in city.aliases
        if names.get(alias.lower(), city.id) != city.id
    )
    if shadowing:
        issues.append(
            Issue(
                severity="warning",
                code="GAZETTEER_ALIAS_SHADOWS_NAME",
                message="Some aliases equal another city's name.",
                count=len(shadowing),
                sample=shadowing[:8],
            )
        )

    missing_district = [city.id for city in records if not city.district]
    if missing_district:
        issues.append(
            Issue(
                severity="info",
                code="GAZETTEER_MISSING_DISTRICT",
                message="Some cities are missing `district`.",
                count=len(missing_district),
                sample=missing_district[:8],
            )
        )

    return issues


def build_quality_report(settings: Settings) -> dict[str, Any]:
    path = settings.gazetteer.path
    try:
        records = read_city_records(path)
    except (OSError, ValueError) as e:
        records = []
        issues = [Issue(severity="error", code="GAZETTEER_LOAD_FAILED", message=str(e))]
    else:
        issues = gazetteer_issues(records, duplicate_policy=settings.gazetteer.duplicate_policy)

    severity_rank = {"error": 3, "warning": 2, "info": 1}
    worst = "info"
    for i in issues:
        if severity_rank.get(i.severity, 0) > severity_rank.get(worst, 0):
            worst = i.severity

    return {
        "overall": {"severity": worst, "issue_count": len(issues)},
        "paths": {"gazetteer_path": str(path) if path else f"package:{PACKAGED_DATASET}"},
        "gazetteer": {
            "raw_records": len(records),
            "unique_ids": len({c.id for c in records}),
            "duplicate_policy": settings.gazetteer.duplicate_policy,
        },
        "issues": [i.as_dict() for i in issues],
    }
