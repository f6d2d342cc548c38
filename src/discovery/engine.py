"""
Shop discovery engine.

Responsibilities:
- Find geolocated shops around a query point, optionally restricted to one
  country and to shops offering a given service category.
- Rank them by service match, distance and rating, and cap the result.
- Aggregate the country catalogue and serve the plain directory lookups.

The engine only talks to an injected repository and keeps no state between
calls.
"""
from __future__ import annotations

import logging
from collections import Counter
from typing import Iterable, List, Optional, Tuple

from src.core.models import (
    DiscoveryQuery,
    RankedShopResult,
    ServiceOffering,
    Shop,
    ShopCountry,
    ShopSearchFilters,
)
from src.discovery.geo import haversine_km
from src.discovery.repository import ShopRepository

logger = logging.getLogger(__name__)

COUNTRY_MATCH_EXACT = "exact"
COUNTRY_MATCH_PREFIX = "prefix"


def _blank_to_none(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


def country_matches(stored: Optional[str], requested: str, policy: str = COUNTRY_MATCH_EXACT) -> bool:
    """Case-insensitive country comparison; shops without a country never match."""
    if stored is None:
        return False
    stored_lower = stored.lower()
    requested_lower = requested.lower()
    if stored_lower == requested_lower:
        return True
    return policy == COUNTRY_MATCH_PREFIX and stored_lower.startswith(requested_lower)


def _ranking_key(result: RankedShopResult) -> Tuple[bool, float, bool, float]:
    return (
        not result.offers_service,
        result.distance_km,
        result.rating is None,
        -(result.rating or 0.0),
    )


def _rating_key(shop: Shop) -> Tuple[bool, float]:
    return (shop.rating is None, -(shop.rating or 0.0))


def filter_shops_with_email(results: Iterable[RankedShopResult]) -> List[RankedShopResult]:
    """Keep results that can be contacted by email."""
    return [result for result in results if result.email and "@" in result.email]


class ShopDiscoveryEngine:
    def __init__(self, repository: ShopRepository, country_match: str = COUNTRY_MATCH_EXACT) -> None:
        if country_match not in (COUNTRY_MATCH_EXACT, COUNTRY_MATCH_PREFIX):
            raise ValueError(f"unsupported country match policy: {country_match}")
        self._repository = repository
        self._country_match = country_match

    def find_nearby_shops(self, query: DiscoveryQuery) -> List[RankedShopResult]:
        category = _blank_to_none(query.service_category)
        country = _blank_to_none(query.country)

        results: List[RankedShopResult] = []
        with self._repository.snapshot() as store:
            candidates = [shop for shop in store.list_geolocated_shops() if shop.is_geolocated]
            if country is not None:
                candidates = [
                    shop for shop in candidates if country_matches(shop.country, country, self._country_match)
                ]
            logger.debug("Discovery candidates after country filter: %d (country=%s)", len(candidates), country)

            for shop in candidates:
                distance_km = haversine_km(query.latitude, query.longitude, shop.latitude, shop.longitude)
                if not distance_km <= query.max_distance_km:
                    continue

                if category is None:
                    offers_service = True
                else:
                    offers_service = store.has_available_offering(shop.id, category)
                if not offers_service:
                    continue

                results.append(RankedShopResult.from_shop(shop, distance_km, offers_service))

        results.sort(key=_ranking_key)
        limited = results[: max(query.result_limit, 0)]
        logger.info(
            "Found %d shops within %.1f km of (%.4f, %.4f) service=%s country=%s",
            len(limited),
            query.max_distance_km,
            query.latitude,
            query.longitude,
            category,
            country,
        )
        return limited

    def list_shop_countries(self) -> List[ShopCountry]:
        counts = Counter(shop.country for shop in self._repository.list_shops() if shop.country is not None)
        ordered = sorted(counts.items(), key=lambda item: (-item[1], item[0]))
        return [ShopCountry(country=country, shop_count=count) for country, count in ordered]

    def search_shops(self, filters: ShopSearchFilters) -> List[Shop]:
        search = (_blank_to_none(filters.search) or "").lower()
        city = (_blank_to_none(filters.city) or "").lower()
        country = (_blank_to_none(filters.country) or "").lower()

        matches: List[Shop] = []
        for shop in self._repository.list_shops():
            if search and not any(search in (value or "").lower() for value in (shop.name, shop.city, shop.address)):
                continue
            if city and city not in (shop.city or "").lower():
                continue
            if country and country not in (shop.country or "").lower():
                continue
            if filters.min_rating is not None and (shop.rating is None or shop.rating < filters.min_rating):
                continue
            matches.append(shop)

        matches.sort(key=_rating_key)
        return matches[: max(filters.limit, 0)]

    def get_shop(self, shop_id: str) -> Optional[Shop]:
        return self._repository.get_shop(shop_id)

    def list_shop_services(self, shop_id: str) -> List[ServiceOffering]:
        offerings = [offering for offering in self._repository.list_offerings(shop_id) if offering.is_available]
        offerings.sort(key=lambda offering: offering.service_category)
        return offerings

    def shops_by_service_category(self, category: str, limit: int = 50) -> List[Shop]:
        shops: List[Shop] = []
        with self._repository.snapshot() as store:
            for shop_id in store.list_shop_ids_offering(category):
                if len(shops) >= limit:
                    break
                shop = store.get_shop(shop_id)
                if shop is not None:
                    shops.append(shop)
        return shops
