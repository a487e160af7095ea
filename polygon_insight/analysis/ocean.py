"""Coarse land/water classifier.

A point is land if it falls strictly inside one of six continental
bounding boxes or in the polar band (``|lat| > 60``); everything else is
ocean. False positives and negatives near coastlines are expected: the
classifier only biases synthetic estimates and is not a geographic
authority.
"""

from __future__ import annotations

from typing import NamedTuple


class Region(NamedTuple):
    """Open latitude/longitude box ``south < lat < north, west < lon < east``."""

    name: str
    south: float
    north: float
    west: float
    east: float

    def contains(self, lat: float, lon: float) -> bool:
        return self.south < lat < self.north and self.west < lon < self.east


CONTINENTS: tuple[Region, ...] = (
    Region("Europe", 35, 70, -10, 40),
    Region("North America", 15, 70, -170, -50),
    Region("South America", -60, 15, -80, -35),
    Region("Africa", -40, 35, -20, 55),
    Region("Asia", 0, 75, 40, 180),
    Region("Australia", -45, -10, 110, 155),
)

POLAR_LATITUDE = 60.0


def continent_at(lat: float, lon: float) -> str | None:
    """Name of the first continental box containing the point, if any."""
    for region in CONTINENTS:
        if region.contains(lat, lon):
            return region.name
    return None


def is_likely_ocean(lat: float, lon: float) -> bool:
    """Return ``True`` when the point is probably over open water."""
    if continent_at(lat, lon) is not None:
        return False
    # Polar ice counts as land in both hemispheres.
    return abs(lat) <= POLAR_LATITUDE
