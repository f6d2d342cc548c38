"""Core data models shared by the shop discovery service."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional


@dataclass(slots=True)
class Shop:
    """Read-only snapshot of a row from the motorcycle_repairs table."""

    id: str
    name: str
    address: Optional[str] = None
    city: Optional[str] = None
    country: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    website: Optional[str] = None
    rating: Optional[float] = None
    reviews_count: Optional[int] = None
    hours: Optional[str] = None

    @property
    def is_geolocated(self) -> bool:
        return self.latitude is not None and self.longitude is not None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(slots=True)
class ServiceOffering:
    """A (shop, service category) association from the shop_services table."""

    shop_id: str
    service_category: str
    is_available: bool = True
    service_name: Optional[str] = None
    description: Optional[str] = None
    estimated_duration: Optional[int] = None
    price_from: Optional[float] = None
    price_to: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class DiscoveryQuery:
    latitude: float
    longitude: float
    service_category: Optional[str] = None
    max_distance_km: float = 50.0
    result_limit: int = 20
    country: Optional[str] = None


@dataclass(slots=True)
class RankedShopResult:
    """A shop annotated with its distance from the query point."""

    id: str
    name: str
    address: Optional[str]
    city: Optional[str]
    country: Optional[str]
    phone: Optional[str]
    email: Optional[str]
    website: Optional[str]
    rating: Optional[float]
    latitude: float
    longitude: float
    distance_km: float
    offers_service: bool

    @classmethod
    def from_shop(cls, shop: Shop, distance_km: float, offers_service: bool) -> "RankedShopResult":
        return cls(
            id=shop.id,
            name=shop.name,
            address=shop.address,
            city=shop.city,
            country=shop.country,
            phone=shop.phone,
            email=shop.email,
            website=shop.website,
            rating=shop.rating,
            latitude=shop.latitude,
            longitude=shop.longitude,
            distance_km=distance_km,
            offers_service=offers_service,
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class ShopCountry:
    country: str
    shop_count: int


@dataclass(frozen=True)
class ShopSearchFilters:
    """Plain directory search, no geolocation involved."""

    search: Optional[str] = None
    city: Optional[str] = None
    country: Optional[str] = None
    min_rating: Optional[float] = None
    limit: int = 100


@dataclass(frozen=True)
class ServiceCategory:
    value: str
    label: str
    description: str


@dataclass(slots=True)
class ReverseGeocodeResult:
    country: str
    country_code: str
    city: Optional[str] = None
    state: Optional[str] = None
    address: Optional[str] = None
