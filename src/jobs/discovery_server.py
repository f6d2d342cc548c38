"""HTTP entrypoint exposing the shop discovery engine (Cloud Run friendly)."""

from __future__ import annotations

import logging
import math
import os
from functools import lru_cache
from typing import Any, Dict, Optional, Tuple

import requests
from flask import Flask, jsonify, request

from src.core.config import get_settings
from src.core.db import PostgresShopRepository, ShopStoreError
from src.core.models import DiscoveryQuery, ShopSearchFilters
from src.discovery.categories import COUNTRIES, SERVICE_CATEGORIES
from src.discovery.engine import ShopDiscoveryEngine, filter_shops_with_email
from src.discovery.geo import validate_coordinates
from src.etl.transform import parse_reverse_geocode
from src.vendors import nominatim

# ---------- Logging ----------
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s - %(message)s",
)
logger = logging.getLogger(__name__)

# ---------- App ----------
app = Flask(__name__)


@lru_cache(maxsize=1)
def get_engine() -> ShopDiscoveryEngine:
    settings = get_settings()
    return ShopDiscoveryEngine(PostgresShopRepository(), country_match=settings.country_match)


# ---------- Parameter parsing ----------


def _parse_float(args: Dict[str, Any], name: str, default: Optional[float] = None) -> Optional[float]:
    raw = args.get(name)
    if raw is None or str(raw).strip() == "":
        return default
    try:
        value = float(raw)
    except (TypeError, ValueError):
        raise ValueError(f"{name} must be numeric") from None
    if not math.isfinite(value):
        raise ValueError(f"{name} must be finite")
    return value


def _parse_limit(args: Dict[str, Any], default: int) -> int:
    """Parse ``limit`` and clamp it to [1, MAX_RESULT_LIMIT]."""
    raw = args.get("limit")
    if raw is None or str(raw).strip() == "":
        return default
    try:
        limit = int(raw)
    except (TypeError, ValueError):
        raise ValueError("limit must be an integer") from None
    return max(1, min(limit, get_settings().max_result_limit))


def _parse_point(args: Dict[str, Any]) -> Tuple[float, float]:
    latitude = _parse_float(args, "lat")
    longitude = _parse_float(args, "lon")
    if latitude is None or longitude is None:
        raise ValueError("lat and lon are required")
    if not validate_coordinates(latitude, longitude):
        raise ValueError("lat must be within [-90, 90] and lon within [-180, 180]")
    return latitude, longitude


def _parse_flag(args: Dict[str, Any], name: str) -> bool:
    raw = (args.get(name) or "").strip().lower()
    if raw in ("", "0", "false", "no"):
        return False
    if raw in ("1", "true", "yes"):
        return True
    raise ValueError(f"{name} must be a boolean")


def _optional_str(args: Dict[str, Any], name: str) -> Optional[str]:
    value = (args.get(name) or "").strip()
    return value or None


# ---------- Error handlers ----------


@app.errorhandler(ShopStoreError)
def handle_store_error(exc: ShopStoreError) -> Any:
    logger.error("Shop store unavailable: %s", exc, exc_info=exc)
    return jsonify({"error": "shop store unavailable"}), 503


# ---------- Routes ----------


@app.get("/")
def root() -> Any:
    """Simple root to avoid 404 on GET /"""
    return "ok", 200


@app.get("/healthz")
def healthcheck() -> Any:
    """Lightweight health endpoint; reads settings only, never touches the database."""
    settings = get_settings()
    return (
        jsonify(
            {
                "status": "ok",
                "api_port_config": settings.api_port,
                "country_match": settings.country_match,
                "revision": os.getenv("K_REVISION", "unknown"),
            }
        ),
        200,
    )


@app.get("/shops/nearby")
def nearby_shops() -> Any:
    """
    Ranked shops around a point.
    Required query params: lat, lon
    Optional: service, radius (km), limit, country, with_email
    """
    settings = get_settings()
    args = request.args
    try:
        latitude, longitude = _parse_point(args)
        radius = _parse_float(args, "radius", default=settings.default_radius_km)
        if radius < 0:
            raise ValueError("radius must not be negative")
        with_email = _parse_flag(args, "with_email")
        limit = _parse_limit(args, default=settings.default_result_limit)
    except ValueError as exc:
        return jsonify({"error": str(exc)}), 400

    query = DiscoveryQuery(
        latitude=latitude,
        longitude=longitude,
        service_category=_optional_str(args, "service"),
        max_distance_km=radius,
        result_limit=limit,
        country=_optional_str(args, "country"),
    )
    results = get_engine().find_nearby_shops(query)
    if with_email:
        results = filter_shops_with_email(results)
    return jsonify({"data": [result.to_dict() for result in results]}), 200


@app.get("/shops/countries")
def shop_countries() -> Any:
    countries = get_engine().list_shop_countries()
    return jsonify({"data": [{"country": c.country, "shop_count": c.shop_count} for c in countries]}), 200


@app.get("/shops/search")
def search_shops() -> Any:
    args = request.args
    try:
        min_rating = _parse_float(args, "min_rating")
        limit = _parse_limit(args, default=get_settings().max_result_limit)
    except ValueError as exc:
        return jsonify({"error": str(exc)}), 400

    filters = ShopSearchFilters(
        search=_optional_str(args, "q"),
        city=_optional_str(args, "city"),
        country=_optional_str(args, "country"),
        min_rating=min_rating,
        limit=limit,
    )
    shops = get_engine().search_shops(filters)
    return jsonify({"data": [shop.to_dict() for shop in shops]}), 200


@app.get("/shops/<shop_id>")
def shop_detail(shop_id: str) -> Any:
    shop = get_engine().get_shop(shop_id)
    if shop is None:
        return jsonify({"error": "shop not found"}), 404
    return jsonify({"data": shop.to_dict()}), 200


@app.get("/shops/<shop_id>/services")
def shop_services(shop_id: str) -> Any:
    offerings = get_engine().list_shop_services(shop_id)
    return jsonify({"data": [offering.to_dict() for offering in offerings]}), 200


@app.get("/countries")
def country_catalogue() -> Any:
    return jsonify({"data": [{"code": code, "name": name} for code, name in COUNTRIES]}), 200


@app.get("/services/categories")
def service_categories() -> Any:
    data = [
        {"value": category.value, "label": category.label, "description": category.description}
        for category in SERVICE_CATEGORIES
    ]
    return jsonify({"data": data}), 200


@app.get("/services/<category>/shops")
def shops_for_category(category: str) -> Any:
    try:
        limit = _parse_limit(request.args, default=50)
    except ValueError as exc:
        return jsonify({"error": str(exc)}), 400
    shops = get_engine().shops_by_service_category(category, limit=limit)
    return jsonify({"data": [shop.to_dict() for shop in shops]}), 200


@app.get("/geocode/reverse")
def reverse_geocode() -> Any:
    """Resolve a coordinate to a country so clients can prefill the country filter."""
    try:
        latitude, longitude = _parse_point(request.args)
    except ValueError as exc:
        return jsonify({"error": str(exc)}), 400

    try:
        payload = nominatim.reverse_geocode(latitude, longitude)
    except (nominatim.NominatimError, requests.RequestException) as exc:
        logger.warning("Reverse geocoding failed for (%s, %s): %s", latitude, longitude, exc)
        return jsonify({"error": "reverse geocoding failed"}), 502

    location = parse_reverse_geocode(payload)
    if location is None:
        return jsonify({"error": "location not found"}), 404
    return (
        jsonify(
            {
                "data": {
                    "latitude": latitude,
                    "longitude": longitude,
                    "country": location.country,
                    "country_code": location.country_code,
                    "city": location.city,
                    "state": location.state,
                    "address": location.address,
                }
            }
        ),
        200,
    )


def main() -> None:
    """Cloud Run injects PORT; fall back to API_PORT locally."""
    env_port = os.getenv("PORT")
    port = int(env_port or get_settings().api_port)
    logger.info("[BOOT] Binding on 0.0.0.0:%d", port)
    app.run(host="0.0.0.0", port=port)


if __name__ == "__main__":
    main()
