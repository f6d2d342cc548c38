"""CLI job to query the shop discovery engine."""

import argparse
import json
import logging
import math
import sys
from typing import List, Optional

from src.core.config import get_settings
from src.core.db import PostgresShopRepository
from src.core.models import DiscoveryQuery, RankedShopResult
from src.discovery.categories import get_service_category
from src.discovery.engine import ShopDiscoveryEngine, filter_shops_with_email
from src.discovery.geo import format_distance, validate_coordinates

logger = logging.getLogger(__name__)


def build_engine() -> ShopDiscoveryEngine:
    return ShopDiscoveryEngine(PostgresShopRepository(), country_match=get_settings().country_match)


def format_result_line(result: RankedShopResult) -> str:
    rating = f"{result.rating:.1f}" if result.rating is not None else "-"
    location = ", ".join(filter(None, [result.city, result.country]))
    return f"{format_distance(result.distance_km):>10}  {rating:>4}  {result.name} ({location})"


def run_nearby(engine: ShopDiscoveryEngine, args: argparse.Namespace) -> List[RankedShopResult]:
    if not validate_coordinates(args.lat, args.lon):
        raise ValueError("lat must be within [-90, 90] and lon within [-180, 180]")
    if not math.isfinite(args.radius) or args.radius < 0:
        raise ValueError("radius must be a finite, non-negative number of kilometres")

    max_limit = get_settings().max_result_limit
    query = DiscoveryQuery(
        latitude=args.lat,
        longitude=args.lon,
        service_category=args.service,
        max_distance_km=args.radius,
        result_limit=max(1, min(args.limit, max_limit)),
        country=args.country,
    )
    results = engine.find_nearby_shops(query)
    if args.with_email:
        results = filter_shops_with_email(results)

    if args.json:
        print(json.dumps([result.to_dict() for result in results], ensure_ascii=False, indent=2))
        return results

    category = get_service_category(args.service)
    label = category.label if category else (args.service or "any service")
    print(f"{len(results)} shops for {label} within {args.radius:g} km")
    for result in results:
        print(format_result_line(result))
    return results


def run_countries(engine: ShopDiscoveryEngine, args: argparse.Namespace) -> None:
    countries = engine.list_shop_countries()
    if args.json:
        print(json.dumps([{"country": c.country, "shop_count": c.shop_count} for c in countries], indent=2))
        return
    for entry in countries:
        print(f"{entry.shop_count:>6}  {entry.country}")


def build_parser() -> argparse.ArgumentParser:
    settings = get_settings()
    output = argparse.ArgumentParser(add_help=False)
    output.add_argument("--json", action="store_true", help="Print results as JSON")

    parser = argparse.ArgumentParser(description="Find motorcycle repair shops")
    subparsers = parser.add_subparsers(dest="command", required=True)

    nearby = subparsers.add_parser("nearby", parents=[output], help="Rank shops around a coordinate")
    nearby.add_argument("--lat", type=float, required=True, help="Query latitude in degrees")
    nearby.add_argument("--lon", type=float, required=True, help="Query longitude in degrees")
    nearby.add_argument("--service", dest="service", help="Service category, e.g. brake")
    nearby.add_argument("--country", dest="country", help="Only shops in this country")
    nearby.add_argument(
        "--radius",
        dest="radius",
        type=float,
        default=settings.default_radius_km,
        help="Maximum distance in kilometres",
    )
    nearby.add_argument(
        "--limit",
        dest="limit",
        type=int,
        default=settings.default_result_limit,
        help="Maximum number of shops to return",
    )
    nearby.add_argument("--with-email", dest="with_email", action="store_true", help="Only shops with an email address")

    subparsers.add_parser("countries", parents=[output], help="List countries with shop counts")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s - %(message)s")
    parser = build_parser()
    args = parser.parse_args(argv)
    engine = build_engine()

    try:
        if args.command == "nearby":
            run_nearby(engine, args)
        else:
            run_countries(engine, args)
    except ValueError as exc:
        logger.error("Invalid query: %s", exc)
        return 2
    except RuntimeError as exc:  # ShopStoreError, or DATABASE_URL missing
        logger.error("Shop lookup failed: %s", exc)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
