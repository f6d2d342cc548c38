"""Great-circle distance helpers."""

import math
from typing import Optional

EARTH_RADIUS_KM = 6371.0


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Return the great-circle distance in kilometres between two points given in degrees.

    Uses the spherical law of cosines. Rounding can push the cosine sum just past
    1.0 for points very close together, so it is clamped to [-1, 1] before acos.
    """
    if lat1 == lat2 and lon1 == lon2:
        return 0.0

    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    delta_lambda = math.radians(abs(lon2 - lon1))

    cosine = math.cos(phi1) * math.cos(phi2) * math.cos(delta_lambda) + math.sin(phi1) * math.sin(phi2)
    cosine = max(-1.0, min(1.0, cosine))
    return EARTH_RADIUS_KM * math.acos(cosine)


def validate_coordinates(latitude: float, longitude: float) -> bool:
    if not (math.isfinite(latitude) and math.isfinite(longitude)):
        return False
    return -90.0 <= latitude <= 90.0 and -180.0 <= longitude <= 180.0


def format_distance(distance_km: Optional[float]) -> str:
    if distance_km is None:
        return "Distance unknown"
    if distance_km < 1:
        return f"{round(distance_km * 1000)} m"
    if distance_km < 10:
        return f"{distance_km:.1f} km"
    return f"{round(distance_km)} km"
