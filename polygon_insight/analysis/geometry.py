"""Spherical polygon measurements.

Every public function takes a ring of ``(lat, lon)`` pairs in degrees and
never raises for malformed input: empty, short or unparseable rings yield
zero/``None`` sentinels instead. Trigonometry is done in radians
internally.

Area uses the longitude/sine-latitude line integral
``Σ lon_i·sin(lat_{i+1}) − lon_{i+1}·sin(lat_i)`` scaled by ``R²/2``. It is
exact for the Lambert cylindrical equal-area image of the ring and a good
approximation for user-drawn shapes; it is not geodesically exact for
polygons spanning a hemisphere.
"""

from __future__ import annotations

import logging
import math
from typing import TYPE_CHECKING, Any

from polygon_insight.core.constants import EARTH_RADIUS_M, MIN_RING_VERTICES
from polygon_insight.models.geometry import BoundingBox, Point, PolygonMetrics

if TYPE_CHECKING:
    from collections.abc import Iterable

logger = logging.getLogger("polygon_insight.analysis.geometry")


# ---------------------------------------------------------------------------
# Input normalisation
# ---------------------------------------------------------------------------


def normalize_ring(ring: Iterable[Any] | None) -> list[Point]:
    """Coerce *ring* into a list of float ``Point``s.

    Values after the first two of a vertex (altitude, for instance) are
    ignored. Returns an empty list if *ring* is ``None`` or any vertex
    cannot be read as a finite ``(lat, lon)`` pair.
    """
    if ring is None:
        return []
    points: list[Point] = []
    try:
        for vertex in ring:
            lat, lon = (float(v) for v in tuple(vertex)[:2])
            if not (math.isfinite(lat) and math.isfinite(lon)):
                raise ValueError("non-finite coordinate")
            points.append(Point(lat, lon))
    except (TypeError, ValueError) as exc:
        logger.warning("Unreadable ring treated as empty | error=%s", exc)
        return []
    return points


# ---------------------------------------------------------------------------
# Bounding box
# ---------------------------------------------------------------------------


def bounding_box(ring: Iterable[Any] | None) -> BoundingBox:
    """Return the min/max box over the ring, or an all-zero box when empty."""
    points = normalize_ring(ring)
    if not points:
        return BoundingBox()

    north = south = points[0].lat
    east = west = points[0].lon
    for lat, lon in points:
        north = max(north, lat)
        south = min(south, lat)
        east = max(east, lon)
        west = min(west, lon)
    return BoundingBox(north=north, south=south, east=east, west=west)


# ---------------------------------------------------------------------------
# Area and perimeter
# ---------------------------------------------------------------------------


def polygon_area(ring: Iterable[Any] | None, *, radius_m: float = EARTH_RADIUS_M) -> float:
    """Spherical polygon area in square metres (0 for fewer than 3 vertices).

    The absolute value is taken, so winding direction does not matter.
    """
    points = normalize_ring(ring)
    n = len(points)
    if n < MIN_RING_VERTICES:
        return 0.0

    total = 0.0
    for i in range(n):
        lat1, lon1 = points[i]
        lat2, lon2 = points[(i + 1) % n]
        total += math.radians(lon1) * math.sin(math.radians(lat2)) - math.radians(
            lon2
        ) * math.sin(math.radians(lat1))

    return abs(total * radius_m * radius_m / 2)


def haversine_distance(a: Point, b: Point, *, radius_m: float = EARTH_RADIUS_M) -> float:
    """Great-circle distance between two points in metres."""
    lat1, lon1 = math.radians(a.lat), math.radians(a.lon)
    lat2, lon2 = math.radians(b.lat), math.radians(b.lon)
    d_lat = lat2 - lat1
    d_lon = lon2 - lon1
    h = math.sin(d_lat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(d_lon / 2) ** 2
    # Clamp against rounding drift just above 1 for antipodal points.
    h = min(1.0, max(0.0, h))
    return 2 * radius_m * math.atan2(math.sqrt(h), math.sqrt(1 - h))


def polygon_perimeter(ring: Iterable[Any] | None, *, radius_m: float = EARTH_RADIUS_M) -> float:
    """Sum of great-circle edge lengths in metres, wrapping last → first.

    Returns 0 for fewer than 2 vertices.
    """
    points = normalize_ring(ring)
    n = len(points)
    if n < 2:
        return 0.0
    return sum(
        haversine_distance(points[i], points[(i + 1) % n], radius_m=radius_m) for i in range(n)
    )


# ---------------------------------------------------------------------------
# Centroid
# ---------------------------------------------------------------------------


def centroid(ring: Iterable[Any] | None) -> Point:
    """Arithmetic mean of vertex latitudes and longitudes.

    This is a vertex average, not the area-weighted centroid, and is
    ``(0, 0)`` for an empty ring.
    """
    points = normalize_ring(ring)
    if not points:
        return Point(0.0, 0.0)
    n = len(points)
    return Point(sum(p.lat for p in points) / n, sum(p.lon for p in points) / n)


# ---------------------------------------------------------------------------
# Degeneracy
# ---------------------------------------------------------------------------


def is_degenerate(ring: Iterable[Any] | None) -> bool:
    """Whether the ring cannot enclose any area.

    True for fewer than 3 distinct vertices or a zero-area (collinear)
    outline as judged by shapely in lon/lat space.
    """
    points = normalize_ring(ring)
    if len(set(points)) < MIN_RING_VERTICES:
        return True

    from shapely.geometry import Polygon

    try:
        poly = Polygon([(p.lon, p.lat) for p in points])
    except Exception:
        logger.warning("shapely rejected ring with %d vertices", len(points), exc_info=True)
        return True
    return poly.is_empty or poly.area == 0


# ---------------------------------------------------------------------------
# GeoJSON
# ---------------------------------------------------------------------------


def to_geojson(ring: Iterable[Any] | None) -> dict[str, Any] | None:
    """Convert the ring to a GeoJSON Polygon Feature.

    Coordinates are flipped to ``[lon, lat]`` and the ring is explicitly
    closed. Returns ``None`` for fewer than 3 vertices.
    """
    points = normalize_ring(ring)
    if len(points) < MIN_RING_VERTICES:
        return None

    coordinates = [[p.lon, p.lat] for p in points]
    if coordinates[0] != coordinates[-1]:
        coordinates.append(list(coordinates[0]))

    return {
        "type": "Feature",
        "properties": {},
        "geometry": {
            "type": "Polygon",
            "coordinates": [coordinates],
        },
    }


def ring_from_geojson(document: dict[str, Any]) -> list[Point]:
    """Extract the exterior ring of a GeoJSON Feature or Polygon as ``(lat, lon)``.

    The closing vertex, if present, is dropped. Returns an empty list when
    the document has no polygon exterior.
    """
    geometry = document.get("geometry", document) if isinstance(document, dict) else {}
    if not isinstance(geometry, dict) or geometry.get("type") != "Polygon":
        return []
    rings = geometry.get("coordinates") or []
    if not rings:
        return []
    points = normalize_ring((vertex[1], vertex[0]) for vertex in rings[0] if len(vertex) >= 2)
    if len(points) > 1 and points[0] == points[-1]:
        points = points[:-1]
    return points


# ---------------------------------------------------------------------------
# Combined metrics
# ---------------------------------------------------------------------------


def compute_metrics(ring: Iterable[Any] | None) -> PolygonMetrics:
    """Compute every ring measurement in one pass over the normalised input."""
    points = normalize_ring(ring)
    metrics = PolygonMetrics(
        area_square_meters=polygon_area(points),
        perimeter_meters=polygon_perimeter(points),
        vertex_count=len(points),
        centroid=centroid(points),
        bounding_box=bounding_box(points),
        is_degenerate=is_degenerate(points),
    )

    if metrics.is_degenerate:
        logger.warning(
            "Degenerate ring | vertices=%d | area=%.2f m2",
            metrics.vertex_count,
            metrics.area_square_meters,
        )

    logger.info(
        "Metrics computed | vertices=%d | area=%.2f km2 | perimeter=%.1f m | centroid=(%.5f, %.5f)",
        metrics.vertex_count,
        metrics.area_km2,
        metrics.perimeter_meters,
        metrics.centroid.lat,
        metrics.centroid.lon,
    )
    return metrics
