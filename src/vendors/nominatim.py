"""Client utilities for the OpenStreetMap Nominatim reverse geocoder."""

import logging
from typing import Any, Dict, Optional

import requests

from src.core.config import Settings, get_settings

logger = logging.getLogger(__name__)
_SESSION = requests.Session()


class NominatimError(RuntimeError):
    """Raised when Nominatim answers with an error payload."""


def reverse_geocode(latitude: float, longitude: float, settings: Optional[Settings] = None) -> Dict[str, Any]:
    settings = settings or get_settings()
    params = {
        "format": "json",
        "lat": latitude,
        "lon": longitude,
        "zoom": 10,
        "addressdetails": 1,
    }
    headers = {"User-Agent": settings.nominatim_user_agent}
    response = _SESSION.get(f"{settings.nominatim_url}/reverse", params=params, headers=headers, timeout=10)
    response.raise_for_status()
    payload = response.json()
    if not isinstance(payload, dict):
        raise NominatimError("unexpected reverse geocoding payload")
    if payload.get("error"):
        logger.error("reverse_geocode failed: lat=%s lon=%s error=%s", latitude, longitude, payload["error"])
        raise NominatimError(payload["error"])
    return payload
