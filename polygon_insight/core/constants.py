"""Shared constants: single source of truth.

Centralises the Earth model, area thresholds, category names and
provenance tags that are otherwise repeated across the geometry engine,
estimators, providers and the aggregator.
"""

from __future__ import annotations

# ---------------------------------------------------------------------------
# Earth model
# ---------------------------------------------------------------------------

EARTH_RADIUS_M: float = 6_371_000.0
"""Mean Earth radius in metres used by both area and perimeter."""

SQ_METRES_PER_KM2: float = 1_000_000.0

MIN_RING_VERTICES: int = 3
"""Below this many vertices a ring has no area and no GeoJSON form."""

# ---------------------------------------------------------------------------
# Aggregation thresholds
# ---------------------------------------------------------------------------

DEFAULT_LAND_USE_MAX_AREA_KM2: float = 100.0
"""Polygons larger than this skip network land-use providers entirely."""

DEFAULT_PROVIDER_TIMEOUT_S: float = 10.0

WORLD_AVERAGE_DENSITY_PER_KM2: float = 50.0
"""Density used for country codes missing from the density table."""

# ---------------------------------------------------------------------------
# Categories
# ---------------------------------------------------------------------------

POPULATION = "population"
LAND_USE = "land_use"
CLIMATE = "climate"
ELEVATION = "elevation"
WEATHER = "weather"

CATEGORIES: tuple[str, ...] = (POPULATION, LAND_USE, CLIMATE, ELEVATION, WEATHER)

# ---------------------------------------------------------------------------
# Provenance
# ---------------------------------------------------------------------------

ESTIMATE_PREFIX: str = "Estimate"
"""Every estimator ``data_source`` starts with this tag."""

MONTH_LABELS: tuple[str, ...] = (
    "Jan",
    "Feb",
    "Mar",
    "Apr",
    "May",
    "Jun",
    "Jul",
    "Aug",
    "Sep",
    "Oct",
    "Nov",
    "Dec",
)

ELEVATION_UNIT: str = "metres"
