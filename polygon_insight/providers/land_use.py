"""OpenStreetMap land-use provider (Overpass API).

Counts residential, farmland, wood and water features inside the
polygon's bounding box and turns the counts into whole percentages.
A response with no matching features is reported as empty so the chain
falls through to the estimator.

The aggregator never calls this provider for polygons above the
configured land-use area limit.

References:
    Overpass QL: https://wiki.openstreetmap.org/wiki/Overpass_API/Overpass_QL
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from polygon_insight.core.constants import LAND_USE
from polygon_insight.models.results import LandUseResult
from polygon_insight.providers.base import DataProvider
from polygon_insight.utils.helpers import round_half_up

if TYPE_CHECKING:
    from polygon_insight.models.geometry import BoundingBox
    from polygon_insight.models.provider import ProviderRequest

logger = logging.getLogger("polygon_insight.providers.land_use")

_DEFAULT_OVERPASS_URL = "https://overpass-api.de/api/interpreter"

#: Bucket → (OSM tag key, tag value).
LAND_USE_TAGS: dict[str, tuple[str, str]] = {
    "urban": ("landuse", "residential"),
    "agriculture": ("landuse", "farmland"),
    "forest": ("natural", "wood"),
    "water": ("natural", "water"),
}


def build_overpass_query(bbox: BoundingBox) -> str:
    """Overpass QL selecting every tagged node/way/relation in *bbox*."""
    box = f"({bbox.south},{bbox.west},{bbox.north},{bbox.east})"
    selectors = [
        f'  {kind}["{key}"="{value}"]{box};'
        for key, value in LAND_USE_TAGS.values()
        for kind in ("node", "way", "relation")
    ]
    return "[out:json];\n(\n" + "\n".join(selectors) + "\n);\nout body;\n>;\nout skel qt;\n"


def count_land_use_elements(elements: list[Any]) -> dict[str, int]:
    """Count elements per bucket by their tags; untagged elements are ignored."""
    counts = dict.fromkeys(LAND_USE_TAGS, 0)
    for element in elements:
        tags = element.get("tags") if isinstance(element, dict) else None
        if not isinstance(tags, dict):
            continue
        for bucket, (key, value) in LAND_USE_TAGS.items():
            if tags.get(key) == value:
                counts[bucket] += 1
    return counts


def land_use_split(counts: dict[str, int]) -> dict[str, int]:
    """Convert bucket counts into rounded percentages plus ``other``.

    ``other`` is ``100 − sum`` of the four rounded buckets, clamped at 0;
    the four buckets are not renormalised when the clamp applies.

    Raises:
        ZeroDivisionError: If every count is zero.
    """
    total = sum(counts.values())
    split = {
        bucket: round_half_up(counts.get(bucket, 0) / total * 100) for bucket in LAND_USE_TAGS
    }
    split["other"] = max(0, 100 - sum(split.values()))
    return split


class OverpassLandUseProvider(DataProvider):
    """Land-use split from OpenStreetMap feature counts."""

    category = LAND_USE
    default_base_url = _DEFAULT_OVERPASS_URL
    data_source = "OpenStreetMap"

    async def fetch(self, request: ProviderRequest, credential: str | None) -> LandUseResult:
        query = build_overpass_query(request.bbox)
        payload = await self._post_json(self.base_url, data={"data": query})

        if not isinstance(payload, dict):
            raise self._malformed(f"Expected JSON object, got {type(payload).__name__}")
        elements = payload.get("elements")
        if not isinstance(elements, list):
            raise self._malformed("'elements' is missing or not a list")

        counts = count_land_use_elements(elements)
        if sum(counts.values()) == 0:
            raise self._empty(f"No land-use features among {len(elements)} elements")

        logger.debug("Overpass counts | provider=%s | counts=%s", self.name, counts)
        return LandUseResult(**land_use_split(counts), data_source=self.data_source)
