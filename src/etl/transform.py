"""Utilities for turning database rows and geocoder payloads into typed models."""

import logging
import math
from typing import Any, Dict, Mapping, Optional

from src.core.models import ReverseGeocodeResult, ServiceOffering, Shop
from src.discovery.categories import get_country_name

logger = logging.getLogger(__name__)

_CITY_KEYS = ("city", "town", "village")


def _strip_or_none(value: Any) -> Optional[str]:
    if value is None:
        return None
    value_str = str(value).strip()
    return value_str or None


def _safe_float(value: Any) -> Optional[float]:
    try:
        if value is None:
            return None
        return float(value)
    except (TypeError, ValueError):
        return None


def _safe_coordinate(value: Any) -> Optional[float]:
    number = _safe_float(value)
    if number is None or not math.isfinite(number):
        return None
    return number


def _safe_int(value: Any) -> Optional[int]:
    try:
        if value is None:
            return None
        return int(value)
    except (TypeError, ValueError):
        return None


def _parse_rating(value: Any, shop_id: str) -> Optional[float]:
    rating = _safe_float(value)
    if rating is not None and not 0.0 <= rating <= 5.0:
        logger.debug("Dropping out-of-range rating %.2f for shop %s", rating, shop_id)
        return None
    return rating


def _parse_bool(value: Any, default: bool) -> bool:
    if value is None:
        return default
    if isinstance(value, str):
        return value.strip().lower() in {"1", "t", "true", "yes"}
    return bool(value)


def to_shop(row: Mapping[str, Any]) -> Shop:
    """Parse a motorcycle_repairs row; numeric columns may arrive as strings or Decimals."""
    shop_id = _strip_or_none(row.get("id"))
    if not shop_id:
        raise ValueError("shop row is missing an id")

    return Shop(
        id=shop_id,
        name=_strip_or_none(row.get("name")) or "",
        address=_strip_or_none(row.get("address")),
        city=_strip_or_none(row.get("city")),
        country=_strip_or_none(row.get("country")),
        latitude=_safe_coordinate(row.get("latitude")),
        longitude=_safe_coordinate(row.get("longitude")),
        phone=_strip_or_none(row.get("phone")),
        email=_strip_or_none(row.get("email")),
        website=_strip_or_none(row.get("website")),
        rating=_parse_rating(row.get("rating"), shop_id),
        reviews_count=_safe_int(row.get("reviews_count")),
        hours=_strip_or_none(row.get("hours")),
    )


def to_service_offering(row: Mapping[str, Any]) -> ServiceOffering:
    shop_id = _strip_or_none(row.get("shop_id"))
    category = _strip_or_none(row.get("service_category"))
    if not shop_id or not category:
        raise ValueError("service row requires shop_id and service_category")

    return ServiceOffering(
        shop_id=shop_id,
        service_category=category,
        is_available=_parse_bool(row.get("is_available"), default=True),
        service_name=_strip_or_none(row.get("service_name")),
        description=_strip_or_none(row.get("description")),
        estimated_duration=_safe_int(row.get("estimated_duration")),
        price_from=_safe_float(row.get("price_from")),
        price_to=_safe_float(row.get("price_to")),
    )


def parse_reverse_geocode(payload: Optional[Dict[str, Any]]) -> Optional[ReverseGeocodeResult]:
    """Map a Nominatim /reverse response onto a ReverseGeocodeResult."""
    if not payload or not isinstance(payload.get("address"), dict):
        logger.warning("Reverse geocoding payload has no address block")
        return None

    address = payload["address"]
    city = None
    for key in _CITY_KEYS:
        city = _strip_or_none(address.get(key))
        if city:
            break
    country_code = _strip_or_none(address.get("country_code"))
    country = _strip_or_none(address.get("country"))
    if country is None and country_code:
        country = get_country_name(country_code.upper())

    return ReverseGeocodeResult(
        country=country or "Unknown",
        country_code=country_code.upper() if country_code else "XX",
        city=city,
        state=_strip_or_none(address.get("state")),
        address=_strip_or_none(payload.get("display_name")),
    )
