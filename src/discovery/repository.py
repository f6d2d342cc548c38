"""Read interface the discovery engine depends on."""

from __future__ import annotations

from contextlib import contextmanager
from typing import ContextManager, Dict, Iterable, Iterator, List, Optional, Protocol, Set

from src.core.models import ServiceOffering, Shop


class ShopReader(Protocol):
    def list_geolocated_shops(self) -> List[Shop]: ...

    def has_available_offering(self, shop_id: str, category: str) -> bool: ...

    def list_shops(self) -> List[Shop]: ...

    def get_shop(self, shop_id: str) -> Optional[Shop]: ...

    def list_offerings(self, shop_id: str) -> List[ServiceOffering]: ...

    def list_shop_ids_offering(self, category: str) -> List[str]: ...


class ShopRepository(ShopReader, Protocol):
    def snapshot(self) -> ContextManager[ShopReader]:
        """Yield a reader whose calls all see the same consistent view of the store."""
        ...


class InMemoryShopRepository:
    """Repository backed by plain lists, used for fixtures and offline runs."""

    def __init__(self, shops: Iterable[Shop] = (), offerings: Iterable[ServiceOffering] = ()) -> None:
        self._shops: Dict[str, Shop] = {}
        for shop in shops:
            self._shops[shop.id] = shop
        self._offerings: List[ServiceOffering] = list(offerings)

    @contextmanager
    def snapshot(self) -> Iterator["InMemoryShopRepository"]:
        yield self

    def list_geolocated_shops(self) -> List[Shop]:
        return [shop for shop in self._shops.values() if shop.is_geolocated]

    def has_available_offering(self, shop_id: str, category: str) -> bool:
        return any(
            offering.shop_id == shop_id and offering.service_category == category and offering.is_available
            for offering in self._offerings
        )

    def list_shops(self) -> List[Shop]:
        return list(self._shops.values())

    def get_shop(self, shop_id: str) -> Optional[Shop]:
        return self._shops.get(shop_id)

    def list_offerings(self, shop_id: str) -> List[ServiceOffering]:
        return [offering for offering in self._offerings if offering.shop_id == shop_id]

    def list_shop_ids_offering(self, category: str) -> List[str]:
        seen: Set[str] = set()
        shop_ids: List[str] = []
        for offering in self._offerings:
            if offering.service_category != category or not offering.is_available:
                continue
            if offering.shop_id not in seen:
                seen.add(offering.shop_id)
                shop_ids.append(offering.shop_id)
        return shop_ids
