"""Population density by country.

Static table of people per km² keyed by lower-case ISO 3166-1 alpha-2
code. Codes absent from the table resolve to the world average.
"""

from __future__ import annotations

from polygon_insight.core.constants import WORLD_AVERAGE_DENSITY_PER_KM2

COUNTRY_DENSITY_PER_KM2: dict[str, float] = {
    "af": 54.4,  # Afghanistan
    "al": 104.8,  # Albania
    "dz": 15.9,  # Algeria
    "us": 33.2,  # United States
    "fr": 117.6,  # France
    "de": 235.6,  # Germany
    "gb": 270.7,  # United Kingdom
    "it": 201.3,  # Italy
    "es": 92.9,  # Spain
    "ch": 207.3,  # Switzerland
    "ca": 3.9,  # Canada
    "mx": 57.3,  # Mexico
    "br": 24.7,  # Brazil
    "ar": 15.6,  # Argentina
    "au": 3.1,  # Australia
    "nz": 17.9,  # New Zealand
    "jp": 334.8,  # Japan
    "cn": 147.8,  # China
    "in": 393.3,  # India
    "ru": 8.6,  # Russia
}


def country_density(country_code: str | None) -> float:
    """Return the density for *country_code*, or the world average."""
    if not country_code:
        return WORLD_AVERAGE_DENSITY_PER_KM2
    return COUNTRY_DENSITY_PER_KM2.get(country_code.strip().lower(), WORLD_AVERAGE_DENSITY_PER_KM2)
