"""Geometry value objects.

All coordinates are WGS 84 degrees in ``(latitude, longitude)`` order,
the order in which a ring is drawn on the map. GeoJSON conversion (which
flips to ``(longitude, latitude)``) lives in ``analysis.geometry``.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import NamedTuple

from polygon_insight.core.constants import SQ_METRES_PER_KM2


class Point(NamedTuple):
    """A ``(lat, lon)`` pair in degrees."""

    lat: float
    lon: float


#: Ordered vertices of a simple polygon; closure is implied.
Ring = Sequence[tuple[float, float]]


@dataclass(frozen=True, slots=True)
class BoundingBox:
    """Axis-aligned box over a ring's latitudes and longitudes.

    No date-line unwrapping is applied: ``west`` is simply the minimum
    longitude and ``east`` the maximum.
    """

    north: float = 0.0
    south: float = 0.0
    east: float = 0.0
    west: float = 0.0

    @property
    def center(self) -> Point:
        """Midpoint of the box."""
        return Point((self.north + self.south) / 2, (self.east + self.west) / 2)

    def to_dict(self) -> dict[str, float]:
        return {
            "north": self.north,
            "south": self.south,
            "east": self.east,
            "west": self.west,
        }


@dataclass(frozen=True, slots=True)
class PolygonMetrics:
    """Measurements of a single ring, computed once per request.

    Attributes:
        area_square_meters: Spherical area in square metres.
        perimeter_meters: Great-circle perimeter in metres.
        vertex_count: Number of vertices as supplied.
        centroid: Arithmetic mean of vertex latitudes and longitudes.
        bounding_box: Tight bounding box of the ring.
        is_degenerate: ``True`` when the ring cannot enclose any area.
    """

    area_square_meters: float
    perimeter_meters: float
    vertex_count: int
    centroid: Point
    bounding_box: BoundingBox = BoundingBox()
    is_degenerate: bool = False

    @property
    def area_km2(self) -> float:
        return self.area_square_meters / SQ_METRES_PER_KM2

    def to_dict(self) -> dict[str, object]:
        return {
            "area_square_meters": self.area_square_meters,
            "perimeter_meters": self.perimeter_meters,
            "vertex_count": self.vertex_count,
            "centroid": {"lat": self.centroid.lat, "lon": self.centroid.lon},
            "bounding_box": self.bounding_box.to_dict(),
            "is_degenerate": self.is_degenerate,
        }
