"""Database helpers for reading shops and their service offerings."""

import logging
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional

import psycopg2
from psycopg2 import extras, pool

from src.core.config import get_settings
from src.core.models import ServiceOffering, Shop
from src.etl.transform import to_service_offering, to_shop

logger = logging.getLogger(__name__)

_connection_pool: Optional[pool.SimpleConnectionPool] = None


class ShopStoreError(RuntimeError):
    """Raised when the shop tables cannot be read."""


def init_pool(minconn: int = 1, maxconn: int = 5) -> pool.SimpleConnectionPool:
    """Initialise and return the shared connection pool."""
    global _connection_pool
    if _connection_pool is None:
        settings = get_settings()
        if not settings.database_url:
            raise RuntimeError("DATABASE_URL is required for database connections")
        _connection_pool = pool.SimpleConnectionPool(
            minconn,
            maxconn,
            dsn=settings.database_url,
            connect_timeout=10,
        )
        logger.info("Database connection pool initialised")
    return _connection_pool


@contextmanager
def get_connection():
    """Context manager yielding a pooled connection."""
    pg_pool = init_pool()
    conn = pg_pool.getconn()
    try:
        yield conn
    finally:
        pg_pool.putconn(conn)


_SHOP_COLUMNS = """
    id,
    name,
    address,
    city,
    country,
    latitude,
    longitude,
    phone,
    email,
    website,
    rating,
    reviews_count,
    hours
"""

_SNAPSHOT = "SET TRANSACTION ISOLATION LEVEL REPEATABLE READ READ ONLY"

_SELECT_GEOLOCATED_SHOPS = f"""
SELECT {_SHOP_COLUMNS}
FROM motorcycle_repairs
WHERE latitude IS NOT NULL
  AND longitude IS NOT NULL;
"""

_SELECT_ALL_SHOPS = f"""
SELECT {_SHOP_COLUMNS}
FROM motorcycle_repairs;
"""

_SELECT_SHOP_BY_ID = f"""
SELECT {_SHOP_COLUMNS}
FROM motorcycle_repairs
WHERE id::text = %(shop_id)s;
"""

_HAS_AVAILABLE_OFFERING = """
SELECT EXISTS (
    SELECT 1
    FROM shop_services
    WHERE shop_id::text = %(shop_id)s
      AND service_category = %(category)s
      AND is_available = true
) AS offers_service;
"""

_SELECT_OFFERINGS = """
SELECT
    shop_id,
    service_category,
    is_available,
    service_name,
    description,
    estimated_duration,
    price_from,
    price_to
FROM shop_services
WHERE shop_id::text = %(shop_id)s
ORDER BY service_category;
"""

_SELECT_SHOP_IDS_OFFERING = """
SELECT shop_id
FROM shop_services
WHERE service_category = %(category)s
  AND is_available = true
GROUP BY shop_id
ORDER BY MIN(created_at), shop_id;
"""


class _PostgresShopReader:
    """Runs read queries on one connection inside the caller's snapshot transaction."""

    def __init__(self, conn) -> None:
        self._conn = conn

    def _fetch_all(self, sql: str, params: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        with self._conn.cursor(cursor_factory=extras.RealDictCursor) as cur:
            cur.execute(sql, params)
            return list(cur.fetchall())

    def list_geolocated_shops(self) -> List[Shop]:
        return [to_shop(row) for row in self._fetch_all(_SELECT_GEOLOCATED_SHOPS)]

    def has_available_offering(self, shop_id: str, category: str) -> bool:
        rows = self._fetch_all(_HAS_AVAILABLE_OFFERING, {"shop_id": shop_id, "category": category})
        return bool(rows and rows[0]["offers_service"])

    def list_shops(self) -> List[Shop]:
        return [to_shop(row) for row in self._fetch_all(_SELECT_ALL_SHOPS)]

    def get_shop(self, shop_id: str) -> Optional[Shop]:
        rows = self._fetch_all(_SELECT_SHOP_BY_ID, {"shop_id": shop_id})
        return to_shop(rows[0]) if rows else None

    def list_offerings(self, shop_id: str) -> List[ServiceOffering]:
        return [to_service_offering(row) for row in self._fetch_all(_SELECT_OFFERINGS, {"shop_id": shop_id})]

    def list_shop_ids_offering(self, category: str) -> List[str]:
        rows = self._fetch_all(_SELECT_SHOP_IDS_OFFERING, {"category": category})
        return [str(row["shop_id"]) for row in rows]


class PostgresShopRepository:
    """Shop repository backed by the motorcycle_repairs and shop_services tables."""

    @contextmanager
    def snapshot(self) -> Iterator[_PostgresShopReader]:
        try:
            with get_connection() as conn:
                try:
                    with conn.cursor() as cur:
                        cur.execute(_SNAPSHOT)
                    yield _PostgresShopReader(conn)
                finally:
                    conn.rollback()
        except psycopg2.Error as exc:
            logger.error("Shop store read failed: %s", exc)
            raise ShopStoreError(f"shop store read failed: {exc}") from exc

    def list_geolocated_shops(self) -> List[Shop]:
        with self.snapshot() as reader:
            return reader.list_geolocated_shops()

    def has_available_offering(self, shop_id: str, category: str) -> bool:
        with self.snapshot() as reader:
            return reader.has_available_offering(shop_id, category)

    def list_shops(self) -> List[Shop]:
        with self.snapshot() as reader:
            return reader.list_shops()

    def get_shop(self, shop_id: str) -> Optional[Shop]:
        with self.snapshot() as reader:
            return reader.get_shop(shop_id)

    def list_offerings(self, shop_id: str) -> List[ServiceOffering]:
        with self.snapshot() as reader:
            return reader.list_offerings(shop_id)

    def list_shop_ids_offering(self, category: str) -> List[str]:
        with self.snapshot() as reader:
            return reader.list_shop_ids_offering(category)
