"""Static catalogues for motorcycle service categories and supported countries."""

from typing import Optional, Tuple

from src.core.models import ServiceCategory

SERVICE_CATEGORIES: Tuple[ServiceCategory, ...] = (
    ServiceCategory("oil_change", "Oil Change", "Engine oil and filter replacement"),
    ServiceCategory("brake", "Brake Service", "Brake pad/rotor replacement, brake fluid service"),
    ServiceCategory("tire", "Tire Service", "Tire replacement, repair, balancing, alignment"),
    ServiceCategory("engine", "Engine Repair", "Engine diagnostics, repair, rebuild"),
    ServiceCategory("electrical", "Electrical", "Wiring, battery, alternator, lights"),
    ServiceCategory("chain", "Chain & Sprocket", "Chain adjustment, lubrication, replacement"),
    ServiceCategory("suspension", "Suspension", "Fork service, shock replacement, adjustment"),
    ServiceCategory("transmission", "Transmission", "Clutch, gearbox, transmission repair"),
    ServiceCategory("cooling", "Cooling System", "Radiator, coolant, hoses"),
    ServiceCategory("exhaust", "Exhaust System", "Muffler, pipes, catalytic converter"),
    ServiceCategory("fuel", "Fuel System", "Carburetor, fuel injection, tank"),
    ServiceCategory("bodywork", "Bodywork", "Fairings, panels, paint, dent repair"),
    ServiceCategory("inspection", "Inspection", "Safety inspection, pre-purchase inspection"),
    ServiceCategory("custom", "Custom Work", "Modifications, custom builds, upgrades"),
    ServiceCategory("diagnostic", "Diagnostics", "Computer diagnostics, troubleshooting"),
    ServiceCategory("maintenance", "General Maintenance", "Routine service, tune-ups"),
)

COUNTRIES: Tuple[Tuple[str, str], ...] = (
    ("SE", "Sweden"),
    ("NO", "Norway"),
    ("DK", "Denmark"),
    ("FI", "Finland"),
    ("DE", "Germany"),
    ("FR", "France"),
    ("ES", "Spain"),
    ("IT", "Italy"),
    ("GB", "United Kingdom"),
    ("NL", "Netherlands"),
    ("BE", "Belgium"),
    ("AT", "Austria"),
    ("CH", "Switzerland"),
    ("PL", "Poland"),
    ("CZ", "Czech Republic"),
    ("PT", "Portugal"),
    ("GR", "Greece"),
    ("IE", "Ireland"),
)


def get_service_category(value: Optional[str]) -> Optional[ServiceCategory]:
    for category in SERVICE_CATEGORIES:
        if category.value == value:
            return category
    return None


def get_country_name(country_code: str) -> str:
    """Map an ISO code to the country name; unknown codes come back unchanged."""
    code = country_code.upper()
    for known_code, name in COUNTRIES:
        if known_code == code:
            return name
    return country_code
