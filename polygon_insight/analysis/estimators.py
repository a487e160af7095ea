"""Location-based estimators for every data category.

These are the terminal fallback of each source chain: they always
succeed and need no network. Each estimator is a pure function of the
polygon centroid (and area, for population) plus an explicit
``random.Random`` source, so tests can seed it and concurrent chains can
each own an independent generator.

Every ``data_source`` produced here starts with ``ESTIMATE_PREFIX``.
"""

from __future__ import annotations

import logging
import math
from typing import TYPE_CHECKING

from polygon_insight.analysis.ocean import Region, is_likely_ocean
from polygon_insight.core.constants import (
    CLIMATE,
    ELEVATION,
    ESTIMATE_PREFIX,
    LAND_USE,
    MONTH_LABELS,
    POPULATION,
    WEATHER,
)
from polygon_insight.models.results import (
    ClimateResult,
    ElevationResult,
    LandUseResult,
    PopulationResult,
    WeatherResult,
)
from polygon_insight.utils.helpers import round_half_up

if TYPE_CHECKING:
    import random
    from collections.abc import Callable

    from polygon_insight.models.geometry import Point, PolygonMetrics
    from polygon_insight.models.results import CategoryResult

logger = logging.getLogger("polygon_insight.analysis.estimators")

# ---------------------------------------------------------------------------
# Latitude bands
# ---------------------------------------------------------------------------

POLAR = "polar"
SUBPOLAR = "subpolar"
TEMPERATE = "temperate"
TROPICAL = "tropical"


def latitude_band(lat: float) -> str:
    """Classify a latitude as polar (>60), subpolar (>45), temperate (>23) or tropical."""
    abs_lat = abs(lat)
    if abs_lat > 60:
        return POLAR
    if abs_lat > 45:
        return SUBPOLAR
    if abs_lat > 23:
        return TEMPERATE
    return TROPICAL


# ---------------------------------------------------------------------------
# Population
# ---------------------------------------------------------------------------

#: People per km², sampled uniformly within the band.
DENSITY_RANGES: dict[str, tuple[float, float]] = {
    POLAR: (0.1, 2.1),
    SUBPOLAR: (5.0, 45.0),
    TEMPERATE: (50.0, 250.0),
    TROPICAL: (30.0, 180.0),
}


def estimate_population(
    area_km2: float,
    centre: Point,
    rng: random.Random,
    *,
    ocean: bool | None = None,
) -> PopulationResult:
    """Estimate population from a latitude-banded density.

    Over open ocean the density, and therefore the population, is zero.
    """
    if ocean is None:
        ocean = is_likely_ocean(centre.lat, centre.lon)

    lo, hi = DENSITY_RANGES[latitude_band(centre.lat)]
    density = rng.uniform(lo, hi)
    if ocean:
        density = 0.0

    area_km2 = max(0.0, area_km2)
    return PopulationResult(
        population=round_half_up(area_km2 * density),
        density_per_km2=round(density, 1),
        area_km2=round(area_km2, 2),
        data_source=f"{ESTIMATE_PREFIX} (location-based)",
    )


# ---------------------------------------------------------------------------
# Land use
# ---------------------------------------------------------------------------

#: Half-open ``[lo, hi)`` integer percentage ranges per biome archetype.
LAND_USE_RANGES: dict[str, dict[str, tuple[int, int]]] = {
    POLAR: {
        "water": (0, 15),
        "urban": (0, 5),
        "agriculture": (0, 10),
        "forest": (40, 70),
        "other": (10, 40),
    },
    SUBPOLAR: {
        "water": (0, 15),
        "urban": (5, 20),
        "agriculture": (15, 40),
        "forest": (20, 50),
        "other": (5, 20),
    },
    TEMPERATE: {
        "water": (0, 10),
        "urban": (15, 45),
        "agriculture": (20, 50),
        "forest": (10, 30),
        "other": (0, 15),
    },
    TROPICAL: {
        "water": (0, 15),
        "urban": (5, 25),
        "agriculture": (15, 40),
        "forest": (20, 55),
        "other": (0, 20),
    },
}

_BAND_LABELS = {
    POLAR: "polar zone",
    SUBPOLAR: "subpolar zone",
    TEMPERATE: "temperate zone",
    TROPICAL: "tropical zone",
}


def estimate_land_use(
    centre: Point,
    rng: random.Random,
    *,
    ocean: bool | None = None,
) -> LandUseResult:
    """Sample a plausible land-use split for the centroid's biome.

    Each bucket, ``other`` included, is sampled independently, so the
    split does not necessarily sum to 100. Open ocean short-circuits to
    98 % water.
    """
    if ocean is None:
        ocean = is_likely_ocean(centre.lat, centre.lon)
    if ocean:
        return LandUseResult(
            urban=0,
            agriculture=0,
            forest=0,
            water=98,
            other=2,
            data_source=f"{ESTIMATE_PREFIX} (ocean)",
        )

    band = latitude_band(centre.lat)
    sampled = {name: rng.randrange(lo, hi) for name, (lo, hi) in LAND_USE_RANGES[band].items()}
    return LandUseResult(
        **sampled,
        data_source=f"{ESTIMATE_PREFIX} ({_BAND_LABELS[band]})",
    )


# ---------------------------------------------------------------------------
# Climate
# ---------------------------------------------------------------------------


def estimate_climate(centre: Point, rng: random.Random) -> ClimateResult:
    """Synthesise twelve monthly temperature and precipitation values.

    Temperatures follow a sine wave around ``max(5, 25 − |lat|/2)`` whose
    peak-to-peak swing is ``min(35, |lat|) + 5``, peaking in local
    summer. Rain starts from a random 20–60 mm baseline and grows with
    the month-to-month temperature change and with warmth.
    """
    abs_lat = abs(centre.lat)
    swing = min(35.0, abs_lat) + 5
    baseline = max(5.0, 25 - abs_lat / 2)
    shift = -3 if centre.lat >= 0 else 3

    temperatures = [
        baseline + (swing / 2) * math.sin(((index + shift) / 12) * 2 * math.pi)
        for index in range(len(MONTH_LABELS))
    ]

    base_rain = rng.uniform(20, 60)
    precipitation: list[float] = []
    for index, temp in enumerate(temperatures):
        # Index -1 wraps January back to December.
        delta = abs(temp - temperatures[index - 1])
        rain_factor = delta * 5 + temp / 3
        precipitation.append(max(5.0, base_rain + rng.random() * rain_factor))

    return ClimateResult(
        months=MONTH_LABELS,
        temperatures_c=tuple(round(t, 1) for t in temperatures),
        precipitation_mm=tuple(float(round_half_up(p)) for p in precipitation),
        data_source=f"{ESTIMATE_PREFIX} (location-based climate)",
    )


# ---------------------------------------------------------------------------
# Elevation
# ---------------------------------------------------------------------------

#: Mountain ranges with their sampled elevation band in metres.
MOUNTAIN_RANGES: tuple[tuple[Region, tuple[float, float]], ...] = (
    (Region("Alps", 43, 48, 5, 15), (1000.0, 3000.0)),
    (Region("Himalaya", 27, 36, 70, 95), (2000.0, 5000.0)),
    (Region("Andes", -50, 10, -80, -65), (1500.0, 4500.0)),
    (Region("Rockies", 35, 60, -125, -105), (1000.0, 3000.0)),
)

BASE_ELEVATION_RANGE: tuple[float, float] = (50.0, 250.0)


def mountain_range_at(lat: float, lon: float) -> str | None:
    """Name of the mountain box containing the point, if any."""
    for region, _ in MOUNTAIN_RANGES:
        if region.contains(lat, lon):
            return region.name
    return None


def estimate_elevation(
    centre: Point,
    rng: random.Random,
    *,
    ocean: bool | None = None,
) -> ElevationResult:
    """Estimate centroid elevation: 0 at sea, higher inside known ranges."""
    if ocean is None:
        ocean = is_likely_ocean(centre.lat, centre.lon)
    if ocean:
        return ElevationResult(
            center_elevation_meters=0.0,
            data_source=f"{ESTIMATE_PREFIX} (ocean)",
        )

    lo, hi = BASE_ELEVATION_RANGE
    for region, band in MOUNTAIN_RANGES:
        if region.contains(centre.lat, centre.lon):
            lo, hi = band
            break

    return ElevationResult(
        center_elevation_meters=float(round_half_up(rng.uniform(lo, hi))),
        data_source=f"{ESTIMATE_PREFIX} (location-based)",
    )


# ---------------------------------------------------------------------------
# Weather
# ---------------------------------------------------------------------------

#: Fixed seasonal offset for the reference date (northern spring).
SEASONAL_ADJUSTMENT_C = 3.0


def estimate_weather(centre: Point, rng: random.Random) -> WeatherResult:
    """Synthesise current conditions from latitude plus bounded noise."""
    temperature = 25 - abs(centre.lat) * 0.5
    temperature += (rng.random() - 0.5) * 5
    if centre.lat >= 0:
        temperature += SEASONAL_ADJUSTMENT_C
    else:
        temperature -= SEASONAL_ADJUSTMENT_C

    return WeatherResult(
        temperature_c=round(temperature, 1),
        humidity_percent=float(rng.randrange(30, 80)),
        wind_speed_ms=rng.randrange(10, 60) / 10,
        pressure_hpa=float(1013 + rng.randrange(-10, 10)),
        clouds_percent=float(rng.randrange(0, 100)),
        description="Estimated weather",
        data_source=f"{ESTIMATE_PREFIX} (location-based weather)",
    )


# ---------------------------------------------------------------------------
# Dispatch
# ---------------------------------------------------------------------------

ESTIMATORS: dict[str, Callable[[PolygonMetrics, random.Random], CategoryResult]] = {
    POPULATION: lambda m, rng: estimate_population(m.area_km2, m.centroid, rng),
    LAND_USE: lambda m, rng: estimate_land_use(m.centroid, rng),
    CLIMATE: lambda m, rng: estimate_climate(m.centroid, rng),
    ELEVATION: lambda m, rng: estimate_elevation(m.centroid, rng),
    WEATHER: lambda m, rng: estimate_weather(m.centroid, rng),
}


def estimate(category: str, metrics: PolygonMetrics, rng: random.Random) -> CategoryResult:
    """Run the estimator registered for *category*.

    Raises:
        KeyError: If *category* is unknown.
    """
    result = ESTIMATORS[category](metrics, rng)
    logger.debug("Estimator used | category=%s | source=%s", category, result.data_source)
    return result
