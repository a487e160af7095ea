"""Population providers.

- ``WorldPopProvider``: zonal statistics over the polygon's GeoJSON from
  the WorldPop stats service (``wpgp`` dataset, 2020).
- ``CountryDensityProvider``: reverse-geocodes the centroid with OpenCage
  and multiplies the country's density from the static table by the
  polygon area. Requires the ``opencage`` credential.

References:
    WorldPop API: https://www.worldpop.org/sdi/introapi/
    OpenCage reverse geocoding: https://opencagedata.com/api
"""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any

from polygon_insight.analysis.country_density import country_density
from polygon_insight.core.constants import POPULATION
from polygon_insight.models.results import PopulationResult
from polygon_insight.providers.base import DataProvider
from polygon_insight.utils.helpers import round_half_up

if TYPE_CHECKING:
    from polygon_insight.models.provider import ProviderRequest

logger = logging.getLogger("polygon_insight.providers.population")

_DEFAULT_WORLDPOP_URL = "https://api.worldpop.org/v1/services/stats"
_DEFAULT_OPENCAGE_URL = "https://api.opencagedata.com/geocode/v1/json"


class WorldPopProvider(DataProvider):
    """WorldPop gridded population statistics for the polygon."""

    category = POPULATION
    default_base_url = _DEFAULT_WORLDPOP_URL
    data_source = "WorldPop"

    async def fetch(self, request: ProviderRequest, credential: str | None) -> PopulationResult:
        if request.geojson is None:
            raise self._empty("Ring has no polygon GeoJSON to query")

        params = {
            "dataset": self.config.extra_params.get("dataset", "wpgp"),
            "year": self.config.extra_params.get("year", "2020"),
            "geojson": json.dumps(request.geojson, separators=(",", ":")),
        }
        payload = await self._get_json(self.base_url, params=params)
        if not isinstance(payload, dict):
            raise self._malformed(f"Expected JSON object, got {type(payload).__name__}")

        data = payload.get("data")
        if not data:
            raise self._empty("Response carries no population statistics")
        if not isinstance(data, dict):
            raise self._malformed(f"'data' must be an object, got {type(data).__name__}")

        raw_population = data.get("population")
        if isinstance(raw_population, bool) or not isinstance(raw_population, (int, float)):
            raise self._malformed(f"'data.population' is not a number: {raw_population!r}")

        area_km2 = request.area_km2
        population = max(0, round_half_up(raw_population))
        density = round_half_up(population / area_km2) if area_km2 > 0 else 0

        return PopulationResult(
            population=population,
            density_per_km2=float(density),
            area_km2=round(area_km2, 2),
            data_source=self.data_source,
        )


class CountryDensityProvider(DataProvider):
    """Reverse-geocode the centroid, then apply the country's density."""

    category = POPULATION
    credential_name = "opencage"
    default_base_url = _DEFAULT_OPENCAGE_URL
    data_source = "OpenCage + country density"

    async def fetch(self, request: ProviderRequest, credential: str | None) -> PopulationResult:
        centre = request.centroid
        params = {
            "q": f"{centre.lat},{centre.lon}",
            "key": credential or "",
            "no_annotations": "1",
        }
        payload = await self._get_json(self.base_url, params=params)
        components = self._first_components(payload)

        country_code = components.get("country_code")
        if not country_code or not isinstance(country_code, str):
            raise self._empty("Geocoder returned no country code")

        density = country_density(country_code)
        area_km2 = request.area_km2
        logger.debug(
            "Country density resolved | provider=%s | country=%s | density=%.1f",
            self.name,
            country_code,
            density,
        )

        locality = components.get("city") or components.get("town") or components.get("state")
        country = components.get("country")
        return PopulationResult(
            population=round_half_up(density * area_km2),
            density_per_km2=density,
            area_km2=round(area_km2, 2),
            data_source=self.data_source,
            country=str(country) if country else None,
            locality=str(locality) if locality else None,
        )

    def _first_components(self, payload: Any) -> dict[str, Any]:
        if not isinstance(payload, dict):
            raise self._malformed(f"Expected JSON object, got {type(payload).__name__}")
        results = payload.get("results")
        if not isinstance(results, list):
            raise self._malformed("'results' is missing or not a list")
        if not results:
            raise self._empty("Geocoder returned no results")
        first = results[0]
        components = first.get("components") if isinstance(first, dict) else None
        if not isinstance(components, dict):
            raise self._malformed("'results[0].components' is missing or not an object")
        return components
