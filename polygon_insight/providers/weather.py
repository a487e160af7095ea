"""Current-weather providers.

- ``OpenWeatherMapProvider``: ``/data/2.5/weather`` in metric units.
- ``WeatherApiProvider``: ``/v1/current.json``; wind arrives in km/h and
  is converted to m/s.

Both need a credential and query the polygon centroid.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from polygon_insight.core.constants import WEATHER
from polygon_insight.models.results import WeatherResult
from polygon_insight.providers.base import DataProvider

if TYPE_CHECKING:
    from polygon_insight.models.provider import ProviderRequest


KPH_PER_MS = 3.6


class OpenWeatherMapProvider(DataProvider):
    """OpenWeatherMap current conditions."""

    category = WEATHER
    credential_name = "openweathermap"
    default_base_url = "https://api.openweathermap.org/data/2.5/weather"
    data_source = "OpenWeatherMap"

    async def fetch(self, request: ProviderRequest, credential: str | None) -> WeatherResult:
        centre = request.centroid
        params = {
            "lat": str(centre.lat),
            "lon": str(centre.lon),
            "units": "metric",
            "appid": credential or "",
        }
        payload = await self._get_json(self.base_url, params=params)
        if not isinstance(payload, dict):
            raise self._malformed(f"Expected JSON object, got {type(payload).__name__}")

        main = _section(self, payload, "main")
        wind = _section(self, payload, "wind")
        conditions = payload.get("weather")
        if not (isinstance(conditions, list) and conditions and isinstance(conditions[0], dict)):
            raise self._malformed("'weather' is missing or empty")
        clouds = payload.get("clouds") or {}
        rain = payload.get("rain") or {}
        sys_info = payload.get("sys") or {}

        return WeatherResult(
            temperature_c=_number(self, main, "temp"),
            humidity_percent=_number(self, main, "humidity"),
            wind_speed_ms=_number(self, wind, "speed"),
            pressure_hpa=_number(self, main, "pressure"),
            clouds_percent=_number(self, clouds, "all", default=0.0),
            description=str(conditions[0].get("description", "")),
            data_source=self.data_source,
            icon=conditions[0].get("icon"),
            rain_mm=_number(self, rain, "1h", default=0.0),
            location=payload.get("name") or None,
            country=sys_info.get("country") or None,
        )


class WeatherApiProvider(DataProvider):
    """WeatherAPI.com current conditions."""

    category = WEATHER
    credential_name = "weatherapi"
    default_base_url = "https://api.weatherapi.com/v1/current.json"
    data_source = "WeatherAPI"

    async def fetch(self, request: ProviderRequest, credential: str | None) -> WeatherResult:
        centre = request.centroid
        params = {
            "key": credential or "",
            "q": f"{centre.lat},{centre.lon}",
            "aqi": "no",
        }
        payload = await self._get_json(self.base_url, params=params)
        if not isinstance(payload, dict):
            raise self._malformed(f"Expected JSON object, got {type(payload).__name__}")

        current = _section(self, payload, "current")
        condition = current.get("condition") or {}
        location = payload.get("location") or {}

        return WeatherResult(
            temperature_c=_number(self, current, "temp_c"),
            humidity_percent=_number(self, current, "humidity"),
            wind_speed_ms=round(_number(self, current, "wind_kph") / KPH_PER_MS, 2),
            pressure_hpa=_number(self, current, "pressure_mb"),
            clouds_percent=_number(self, current, "cloud", default=0.0),
            description=str(condition.get("text", "")),
            data_source=self.data_source,
            icon=condition.get("icon"),
            rain_mm=_number(self, current, "precip_mm", default=0.0),
            location=location.get("name") or None,
            country=location.get("country") or None,
        )


# ---------------------------------------------------------------------------
# Payload helpers
# ---------------------------------------------------------------------------


def _section(provider: DataProvider, payload: dict[str, Any], key: str) -> dict[str, Any]:
    value = payload.get(key)
    if not isinstance(value, dict):
        raise provider._malformed(f"{key!r} is missing or not an object")
    return value


def _number(
    provider: DataProvider,
    section: Any,
    key: str,
    *,
    default: float | None = None,
) -> float:
    value = section.get(key, default) if isinstance(section, dict) else default
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise provider._malformed(f"{key!r} is not a number: {value!r}")
    return float(value)
