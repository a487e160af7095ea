"""Elevation providers.

Both services take a single ``lat,lon`` location (the polygon centroid)
and answer with ``results[0].elevation`` in metres.

- ``OpenElevationProvider``: public Open-Elevation lookup, no key.
- ``GoogleElevationProvider``: Google Maps Elevation API, needs the
  ``google`` credential.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from polygon_insight.core.constants import ELEVATION
from polygon_insight.models.results import ElevationResult
from polygon_insight.providers.base import DataProvider

if TYPE_CHECKING:
    from polygon_insight.models.provider import ProviderRequest


class _LookupElevationProvider(DataProvider):
    """Shared ``results[0].elevation`` parsing."""

    category = ELEVATION

    def _params(self, location: str, credential: str | None) -> dict[str, str]:
        return {"locations": location}

    async def fetch(self, request: ProviderRequest, credential: str | None) -> ElevationResult:
        centre = request.centroid
        location = f"{centre.lat},{centre.lon}"
        payload = await self._get_json(self.base_url, params=self._params(location, credential))
        return ElevationResult(
            center_elevation_meters=self._parse_elevation(payload),
            data_source=self.data_source,
        )

    def _parse_elevation(self, payload: Any) -> float:
        if not isinstance(payload, dict):
            raise self._malformed(f"Expected JSON object, got {type(payload).__name__}")
        results = payload.get("results")
        if not isinstance(results, list):
            raise self._malformed("'results' is missing or not a list")
        if not results:
            raise self._empty("Lookup returned no results")
        first = results[0]
        elevation = first.get("elevation") if isinstance(first, dict) else None
        if isinstance(elevation, bool) or not isinstance(elevation, (int, float)):
            raise self._malformed(f"'results[0].elevation' is not a number: {elevation!r}")
        return float(elevation)


class OpenElevationProvider(_LookupElevationProvider):
    default_base_url = "https://api.open-elevation.com/api/v1/lookup"
    data_source = "Open-Elevation"


class GoogleElevationProvider(_LookupElevationProvider):
    credential_name = "google"
    default_base_url = "https://maps.googleapis.com/maps/api/elevation/json"
    data_source = "Google Elevation"

    def _params(self, location: str, credential: str | None) -> dict[str, str]:
        return {"locations": location, "key": credential or ""}
