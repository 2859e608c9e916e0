"""
CityCarbon CLI entrypoint.

This CLI is intended for quick local lookups and debugging without the API server.
It delegates all logic to `citycarbon.directory.views.CityDirectory`.
"""

from __future__ import annotations

import argparse
import json
from typing import Any

from citycarbon.config.settings import get_settings
from citycarbon.core.logging import configure_logging
from citycarbon.directory.views import CityDirectory, build_directory
from citycarbon.domain.models import CityRecord
from citycarbon.quality.report import build_quality_report


def _city_line(city: CityRecord) -> str:
    flags = [f"tier {city.tier}"]
    if city.is_capital:
        flags.append("capital")
    if city.is_metro:
        flags.append("metro")
    return f"{city.name}, {city.state} [{city.id}] ({', '.join(flags)})"


def _print_json(payload: Any) -> None:
    print(json.dumps(payload, ensure_ascii=False, indent=2))


def _print_cities(cities: list[CityRecord], as_json: bool) -> None:
    if as_json:
        _print_json([c.model_dump(mode="json") for c in cities])
        return
    for i, city in enumerate(cities, start=1):
        print(f"{i:>2}. {_city_line(city)}")


def _cmd_search(args: argparse.Namespace, directory: CityDirectory) -> int:
    hits = directory.search_scored(args.query, args.limit)
    if args.json:
        _print_json([h.model_dump(mode="json") for h in hits])
        return 0
    for i, hit in enumerate(hits, start=1):
        print(f"{i:>2}. {_city_line(hit.city)}  score={hit.score}")
        if hit.reasons:
            print(f"    - {'; '.join(hit.reasons)}")
    return 0


def _cmd_city(args: argparse.Namespace, directory: CityDirectory) -> int:
    city = directory.get_by_id(args.city_id)
    if city is None:
        print(f"Unknown city id: '{args.city_id}'")
        return 1
    if args.json:
        _print_json(city.model_dump(mode="json"))
    else:
        print(_city_line(city))
        print(f"  district: {city.district or '-'}  region: {city.region}")
        print(f"  location: {city.latitude:.4f}, {city.longitude:.4f}  population: {city.population:,}")
        print(f"  aliases: {', '.join(city.aliases) or '-'}")
    return 0


def _cmd_distance(args: argparse.Namespace, directory: CityDirectory) -> int:
    km = directory.distance(args.origin, args.destination)
    if km is None:
        print(f"Unknown city id in: '{args.origin}', '{args.destination}'")
        return 1
    if args.json:
        _print_json({"from": args.origin, "to": args.destination, "distance_km": round(km, 3)})
    else:
        print(f"{args.origin} -> {args.destination}: {km:.1f} km")
    return 0


def _cmd_popular(args: argparse.Namespace, directory: CityDirectory) -> int:
    _print_cities(directory.popular(args.limit), args.json)
    return 0


def _cmd_related(args: argparse.Namespace, directory: CityDirectory) -> int:
    if directory.get_by_id(args.city_id) is None:
        print(f"Unknown city id: '{args.city_id}'")
        return 1
    _print_cities(directory.related_cities(args.city_id, args.limit), args.json)
    return 0


def _cmd_nearest(args: argparse.Namespace, directory: CityDirectory) -> int:
    if directory.get_by_id(args.city_id) is None:
        print(f"Unknown city id: '{args.city_id}'")
        return 1
    pairs = directory.nearest_cities(args.city_id, args.limit)
    if args.json:
        _print_json([{"city": c.model_dump(mode="json"), "distance_km": round(km, 3)} for c, km in pairs])
        return 0
    for i, (city, km) in enumerate(pairs, start=1):
        print(f"{i:>2}. {_city_line(city)}  {km:.1f} km")
    return 0


def _cmd_suggest(args: argparse.Namespace, directory: CityDirectory) -> int:
    result = directory.smart_suggestions(args.query)
    if args.json:
        _print_json(result.model_dump(mode="json"))
        return 0
    print("Cities:")
    for i, city in enumerate(result.cities, start=1):
        print(f"{i:>2}. {_city_line(city)}")
    for label, cities in result.categories.items():
        print(f"{label}: {', '.join(c.name for c in cities)}")
    for hint in result.suggestions:
        print(f"* {hint}")
    return 0


def _cmd_routes(args: argparse.Namespace, directory: CityDirectory) -> int:
    plan = directory.plan_route(args.origin, args.destination)
    if plan is None:
        print(f"Unknown city id in: '{args.origin}', '{args.destination}'")
        return 1
    if args.json:
        _print_json(plan.model_dump(mode="json"))
        return 0
    print(f"{plan.origin.name} -> {plan.destination.name}: {plan.distance_km:.1f} km")
    for opt in plan.options:
        eco = "eco" if opt.eco_friendly else "   "
        print(
            f"  {eco} {opt.mode:<17} {opt.emissions_kg:>9.2f} kg CO2  "
            f"{opt.duration_minutes:>7.0f} min  {opt.description}"
        )
    return 0


def _cmd_quality_report(_: argparse.Namespace) -> int:
    report = build_quality_report(get_settings())
    _print_json(report)
    return 0


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser for the CityCarbon CLI."""
    parser = argparse.ArgumentParser(prog="citycarbon")
    parser.add_argument(
        "--log-level",
        type=str.upper,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help="Override app.log_level (CITYCARBON_LOG_LEVEL) for this run.",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    s = sub.add_parser("search", help="Fuzzy-search the city gazetteer.")
    s.add_argument("query")
    s.add_argument("--limit", type=int, default=None)
    s.set_defaults(func=_cmd_search)

    c = sub.add_parser("city", help="Show one city by id.")
    c.add_argument("city_id")
    c.set_defaults(func=_cmd_city)

    d = sub.add_parser("distance", help="Great-circle distance between two city ids.")
    d.add_argument("origin")
    d.add_argument("destination")
    d.set_defaults(func=_cmd_distance)

    p = sub.add_parser("popular", help="Popular cities (tier, then population).")
    p.add_argument("--limit", type=int, default=None)
    p.set_defaults(func=_cmd_popular)

    r = sub.add_parser("related", help="Cities sharing the state or region of a city.")
    r.add_argument("city_id")
    r.add_argument("--limit", type=int, default=None)
    r.set_defaults(func=_cmd_related)

    n = sub.add_parser("nearest", help="Closest cities by great-circle distance.")
    n.add_argument("city_id")
    n.add_argument("--limit", type=int, default=None)
    n.set_defaults(func=_cmd_nearest)

    g = sub.add_parser("suggest", help="Search results plus keyword-based category suggestions.")
    g.add_argument("query")
    g.set_defaults(func=_cmd_suggest)

    t = sub.add_parser("routes", help="Travel options and CO2 estimates between two cities.")
    t.add_argument("origin")
    t.add_argument("destination")
    t.set_defaults(func=_cmd_routes)

    for p_ in (s, c, d, p, r, n, g, t):
        p_.add_argument("--json", action="store_true", help="Output machine-readable JSON")

    q = sub.add_parser("quality-report", help="Offline data quality report for the gazetteer.")
    q.set_defaults(func=_cmd_quality_report, needs_directory=False)
    return parser


def main(argv: list[str] | None = None) -> int:
    """CLI entrypoint callable used by `python -m citycarbon.cli`."""
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.log_level)
    func: Any = getattr(args, "func")
    if not getattr(args, "needs_directory", True):
        return int(func(args))
    return int(func(args, build_directory(get_settings())))


if __name__ == "__main__":
    raise SystemExit(main())
