"""Application configuration helpers."""

import logging
import os
from dataclasses import dataclass
from functools import lru_cache

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

COUNTRY_MATCH_POLICIES = ("exact", "prefix")


@dataclass(frozen=True)
class Settings:
    database_url: str
    api_port: int = 8080
    default_radius_km: float = 50.0
    default_result_limit: int = 20
    max_result_limit: int = 100
    country_match: str = "exact"
    nominatim_url: str = "https://nominatim.openstreetmap.org"
    nominatim_user_agent: str = "MotorcycleServiceDirectory/1.0"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Load settings from environment variables with sensible defaults."""
    load_dotenv()

    database_url = os.getenv("DATABASE_URL", "")
    api_port = int(os.getenv("API_PORT", "8080"))
    default_radius_km = float(os.getenv("DEFAULT_RADIUS_KM", "50"))
    default_result_limit = int(os.getenv("DEFAULT_RESULT_LIMIT", "20"))
    max_result_limit = int(os.getenv("MAX_RESULT_LIMIT", "100"))
    country_match = os.getenv("COUNTRY_MATCH", "exact").strip().lower()
    nominatim_url = os.getenv("NOMINATIM_URL", "https://nominatim.openstreetmap.org").rstrip("/")
    nominatim_user_agent = os.getenv("NOMINATIM_USER_AGENT", "MotorcycleServiceDirectory/1.0")

    if not database_url:
        logger.warning("DATABASE_URL is not set; shop lookups will fail.")
    if country_match not in COUNTRY_MATCH_POLICIES:
        logger.warning("COUNTRY_MATCH=%s is not supported; falling back to exact matching.", country_match)
        country_match = "exact"
    if max_result_limit < 1:
        logger.warning("MAX_RESULT_LIMIT must be positive; using 100.")
        max_result_limit = 100
    default_result_limit = max(1, min(default_result_limit, max_result_limit))

    return Settings(
        database_url=database_url,
        api_port=api_port,
        default_radius_km=default_radius_km,
        default_result_limit=default_result_limit,
        max_result_limit=max_result_limit,
        country_match=country_match,
        nominatim_url=nominatim_url,
        nominatim_user_agent=nominatim_user_agent,
    )
