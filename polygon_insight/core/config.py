"""Aggregator configuration and provider credentials.

Settings are loaded from environment variables with sensible defaults;
credentials are an explicit value threaded into ``aggregate`` rather than
looked up by each provider.

Fail-fast validation:
    ``AggregatorConfig.from_env()`` raises ``ConfigValidationError`` if a
    numeric value is out of range or a provider list names an unknown
    provider (or one registered for a different category).
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass

from polygon_insight import __version__
from polygon_insight.core.constants import (
    CLIMATE,
    DEFAULT_LAND_USE_MAX_AREA_KM2,
    DEFAULT_PROVIDER_TIMEOUT_S,
    ELEVATION,
    LAND_USE,
    POPULATION,
    WEATHER,
)
from polygon_insight.core.exceptions import InsightError
from polygon_insight.providers.factory import (
    GOOGLE_ELEVATION,
    OPEN_ELEVATION,
    OPENCAGE_COUNTRY_DENSITY,
    OPENWEATHERMAP,
    OVERPASS,
    WEATHERAPI,
    WORLDBANK_CLIMATE,
    WORLDPOP,
    provider_category,
)


class ConfigValidationError(InsightError):
    """Raised when configuration values are out of valid range.

    Attributes:
        key: The configuration key that failed validation.
        value: The invalid value.
        message: Human-readable description of the valid range.
    """

    default_stage = "config"
    default_code = "CONFIG_VALIDATION_FAILED"

    def __init__(self, key: str, value: object, message: str) -> None:
        self.key = key
        self.value = value
        super().__init__(f"Invalid configuration {key}={value!r}: {message}")


@dataclass(frozen=True, slots=True)
class AggregatorConfig:
    """Immutable aggregator configuration.

    Attributes:
        provider_timeout_s: Upper bound for a single provider call in seconds.
        land_use_max_area_km2: Area above which land use goes straight to
            the estimator.
        population_providers: Population provider names in priority order.
        land_use_providers: Land-use provider names in priority order.
        climate_providers: Climate provider names in priority order.
        elevation_providers: Elevation provider names in priority order.
        weather_providers: Weather provider names in priority order.
        user_agent: ``User-Agent`` header sent with every provider request.
    """

    provider_timeout_s: float = DEFAULT_PROVIDER_TIMEOUT_S
    land_use_max_area_km2: float = DEFAULT_LAND_USE_MAX_AREA_KM2
    population_providers: tuple[str, ...] = (WORLDPOP, OPENCAGE_COUNTRY_DENSITY)
    land_use_providers: tuple[str, ...] = (OVERPASS,)
    climate_providers: tuple[str, ...] = (WORLDBANK_CLIMATE,)
    elevation_providers: tuple[str, ...] = (OPEN_ELEVATION, GOOGLE_ELEVATION)
    weather_providers: tuple[str, ...] = (OPENWEATHERMAP, WEATHERAPI)
    user_agent: str = f"polygon-insight/{__version__}"

    def providers_for(self, category: str) -> tuple[str, ...]:
        """Return the configured provider names for *category*."""
        return {
            POPULATION: self.population_providers,
            LAND_USE: self.land_use_providers,
            CLIMATE: self.climate_providers,
            ELEVATION: self.elevation_providers,
            WEATHER: self.weather_providers,
        }[category]

    @classmethod
    def from_env(cls) -> AggregatorConfig:
        """Load and validate configuration from environment variables.

        Raises:
            ConfigValidationError: If a numeric value is out of range or a
                provider list is invalid.
            ValueError: If a numeric environment variable cannot be
                parsed (e.g. ``PROVIDER_TIMEOUT_S=abc``).
        """
        defaults = cls()
        config = cls(
            provider_timeout_s=float(
                os.getenv("PROVIDER_TIMEOUT_S", str(DEFAULT_PROVIDER_TIMEOUT_S))
            ),
            land_use_max_area_km2=float(
                os.getenv("LAND_USE_MAX_AREA_KM2", str(DEFAULT_LAND_USE_MAX_AREA_KM2))
            ),
            population_providers=_env_list("POPULATION_PROVIDERS", defaults.population_providers),
            land_use_providers=_env_list("LAND_USE_PROVIDERS", defaults.land_use_providers),
            climate_providers=_env_list("CLIMATE_PROVIDERS", defaults.climate_providers),
            elevation_providers=_env_list("ELEVATION_PROVIDERS", defaults.elevation_providers),
            weather_providers=_env_list("WEATHER_PROVIDERS", defaults.weather_providers),
            user_agent=os.getenv("HTTP_USER_AGENT", defaults.user_agent),
        )
        validate_config(config)
        return config


#: Environment variable holding each credential.
CREDENTIAL_ENV_VARS: dict[str, str] = {
    "openweathermap": "OPENWEATHER_API_KEY",
    "weatherapi": "WEATHERAPI_KEY",
    "opencage": "OPENCAGE_API_KEY",
    "google": "GOOGLE_API_KEY",
}


@dataclass(frozen=True, slots=True)
class Credentials:
    """Per-provider API tokens. Absent or blank tokens are ``None``.

    Attributes:
        openweathermap: OpenWeatherMap ``appid``.
        weatherapi: WeatherAPI.com key.
        opencage: OpenCage geocoding key.
        google: Google Maps Platform key (elevation).
    """

    openweathermap: str | None = None
    weatherapi: str | None = None
    opencage: str | None = None
    google: str | None = None

    def get(self, name: str) -> str | None:
        """Return the token for *name*, or ``None`` when absent or blank."""
        if name not in CREDENTIAL_ENV_VARS:
            return None
        token = getattr(self, name)
        if token is None or not str(token).strip():
            return None
        return str(token)

    @classmethod
    def from_env(cls) -> Credentials:
        """Read every known token from its environment variable."""
        return cls(**{name: os.getenv(env) or None for name, env in CREDENTIAL_ENV_VARS.items()})

    @classmethod
    def coerce(cls, value: Credentials | Mapping[str, str | None] | None) -> Credentials:
        """Accept a ``Credentials`` instance, a plain mapping, or ``None``.

        Unknown mapping keys are ignored.
        """
        if value is None:
            return cls()
        if isinstance(value, Credentials):
            return value
        return cls(**{k: v for k, v in value.items() if k in CREDENTIAL_ENV_VARS})


def _env_list(key: str, default: tuple[str, ...]) -> tuple[str, ...]:
    """Parse a comma-separated provider list; unset keeps *default*."""
    raw = os.getenv(key)
    if raw is None:
        return default
    return tuple(part.strip() for part in raw.split(",") if part.strip())


def validate_config(config: AggregatorConfig) -> None:
    """Validate configuration ranges and provider lists.

    Raises:
        ConfigValidationError: On the first invalid value found.
    """
    if config.provider_timeout_s <= 0:
        raise ConfigValidationError(
            "PROVIDER_TIMEOUT_S",
            config.provider_timeout_s,
            "must be > 0 (seconds)",
        )

    if config.land_use_max_area_km2 <= 0:
        raise ConfigValidationError(
            "LAND_USE_MAX_AREA_KM2",
            config.land_use_max_area_km2,
            "must be > 0 (square kilometres)",
        )

    for category in (POPULATION, LAND_USE, CLIMATE, ELEVATION, WEATHER):
        key = f"{category.upper()}_PROVIDERS"
        for name in config.providers_for(category):
            registered = provider_category(name)
            if registered is None:
                raise ConfigValidationError(key, name, "unknown provider")
            if registered != category:
                raise ConfigValidationError(
                    key,
                    name,
                    f"is a {registered} provider, not {category}",
                )
