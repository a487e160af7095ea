"""Typed models for the provider adapter layer.

- ``ProviderConfig``: Per-provider settings (base URL, extra parameters)
- ``ProviderRequest``: Everything a provider may need about the polygon

A ``ProviderRequest`` is built once per aggregate call from the
already-computed ``PolygonMetrics`` and shared read-only by every chain.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from polygon_insight.models.results import ModelValidationError

if TYPE_CHECKING:
    from polygon_insight.models.geometry import BoundingBox, Point, PolygonMetrics


@dataclass(frozen=True, slots=True)
class ProviderConfig:
    """Configuration for a specific data provider.

    Attributes:
        name: Provider identifier (must match the registry key).
        api_base_url: Endpoint override; empty means the adapter default.
        extra_params: Provider-specific configuration parameters.
    """

    name: str
    api_base_url: str = ""
    extra_params: dict[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not self.name or not self.name.strip():
            raise ModelValidationError("ProviderConfig", "name", self.name, "must not be empty")


@dataclass(frozen=True, slots=True)
class ProviderRequest:
    """Polygon inputs handed to every provider of every chain.

    Attributes:
        ring: Vertices as ``(lat, lon)`` points, as drawn.
        metrics: Geometry measurements computed for the ring.
        geojson: GeoJSON Feature of the ring (``None`` for short rings).
    """

    ring: tuple[Point, ...]
    metrics: PolygonMetrics
    geojson: dict[str, Any] | None = None

    @property
    def bbox(self) -> BoundingBox:
        return self.metrics.bounding_box

    @property
    def centroid(self) -> Point:
        return self.metrics.centroid

    @property
    def area_km2(self) -> float:
        return self.metrics.area_km2
