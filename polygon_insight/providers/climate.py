"""World Bank Climate Knowledge Portal provider.

Fetches the 1901–2016 monthly-average series for the 0.5° grid cell
nearest the polygon centroid. Items are placed by their ``month`` label;
months the portal omits stay at zero.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from polygon_insight.core.constants import CLIMATE, MONTH_LABELS
from polygon_insight.models.results import ClimateResult
from polygon_insight.providers.base import DataProvider
from polygon_insight.utils.helpers import round_half_up

if TYPE_CHECKING:
    from polygon_insight.models.provider import ProviderRequest

logger = logging.getLogger("polygon_insight.providers.climate")

_DEFAULT_WORLDBANK_URL = (
    "https://climateknowledgeportal.worldbank.org"
    "/api/data/get-download-data/historical/mavg/1901-2016"
)


def snap_to_half_degree(value: float) -> float:
    """Round a coordinate to the nearest 0.5°."""
    return round_half_up(value * 2) / 2


class WorldBankClimateProvider(DataProvider):
    """Monthly temperature and precipitation normals for the centroid cell."""

    category = CLIMATE
    default_base_url = _DEFAULT_WORLDBANK_URL
    data_source = "World Bank Climate"

    async def fetch(self, request: ProviderRequest, credential: str | None) -> ClimateResult:
        centre = request.centroid
        lat = snap_to_half_degree(centre.lat)
        lon = snap_to_half_degree(centre.lon)
        payload = await self._get_json(f"{self.base_url.rstrip('/')}/{lat}/{lon}")

        if not isinstance(payload, list):
            raise self._malformed(f"Expected JSON array, got {type(payload).__name__}")
        if not payload:
            raise self._empty(f"No climate series for cell ({lat}, {lon})")

        temperatures = [0.0] * len(MONTH_LABELS)
        precipitation = [0.0] * len(MONTH_LABELS)
        placed = 0
        for item in payload:
            if not isinstance(item, dict):
                raise self._malformed(f"Climate item is not an object: {item!r}")
            month = item.get("month")
            if month not in MONTH_LABELS:
                continue
            index = MONTH_LABELS.index(month)
            temperatures[index] = _as_float(self, item, "temperature")
            precipitation[index] = _as_float(self, item, "precipitation")
            placed += 1

        if placed == 0:
            raise self._empty(f"No recognised month in {len(payload)} climate items")

        logger.debug(
            "Climate series parsed | provider=%s | cell=(%s, %s) | months=%d",
            self.name,
            lat,
            lon,
            placed,
        )
        return ClimateResult(
            months=MONTH_LABELS,
            temperatures_c=tuple(temperatures),
            precipitation_mm=tuple(precipitation),
            data_source=self.data_source,
        )


def _as_float(provider: DataProvider, item: dict[str, Any], key: str) -> float:
    value = item.get(key, 0.0)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise provider._malformed(f"{key!r} is not a number: {value!r}")
    return float(value)
