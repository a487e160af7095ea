"""Provider factory: builds the ordered provider list for each category.

The factory maintains a registry of known adapters keyed by name. Each
entry records the adapter's category and a lazy loader returning the
adapter *class*, so importing the factory (for example from
``core.config`` to validate provider lists) stays cheap.

Usage::

    from polygon_insight.providers.factory import build_providers

    providers = build_providers("elevation", ["open_elevation"], client)
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, NamedTuple

from polygon_insight.core.constants import CLIMATE, ELEVATION, LAND_USE, POPULATION, WEATHER
from polygon_insight.models.provider import ProviderConfig
from polygon_insight.providers.base import DataProvider, ProviderError

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Mapping

    import httpx

logger = logging.getLogger("polygon_insight.providers.factory")

# ---------------------------------------------------------------------------
# Provider name constants
# ---------------------------------------------------------------------------

WORLDPOP = "worldpop"
OPENCAGE_COUNTRY_DENSITY = "opencage_country_density"
OVERPASS = "overpass"
WORLDBANK_CLIMATE = "worldbank_climate"
OPEN_ELEVATION = "open_elevation"
GOOGLE_ELEVATION = "google_elevation"
OPENWEATHERMAP = "openweathermap"
WEATHERAPI = "weatherapi"


class _Registration(NamedTuple):
    category: str
    loader: Callable[[], type[DataProvider]]


# ---------------------------------------------------------------------------
# Lazy-import adapter registry
# ---------------------------------------------------------------------------

_ADAPTER_REGISTRY: dict[str, _Registration] = {}


def _register_builtin_adapters() -> None:
    """Register the built-in provider adapters.

    Called once on first registry access. Each registration is a lazy
    import thunk.
    """

    def _worldpop() -> type[DataProvider]:
        from polygon_insight.providers.population import WorldPopProvider

        return WorldPopProvider

    def _opencage() -> type[DataProvider]:
        from polygon_insight.providers.population import CountryDensityProvider

        return CountryDensityProvider

    def _overpass() -> type[DataProvider]:
        from polygon_insight.providers.land_use import OverpassLandUseProvider

        return OverpassLandUseProvider

    def _worldbank() -> type[DataProvider]:
        from polygon_insight.providers.climate import WorldBankClimateProvider

        return WorldBankClimateProvider

    def _open_elevation() -> type[DataProvider]:
        from polygon_insight.providers.elevation import OpenElevationProvider

        return OpenElevationProvider

    def _google_elevation() -> type[DataProvider]:
        from polygon_insight.providers.elevation import GoogleElevationProvider

        return GoogleElevationProvider

    def _openweathermap() -> type[DataProvider]:
        from polygon_insight.providers.weather import OpenWeatherMapProvider

        return OpenWeatherMapProvider

    def _weatherapi() -> type[DataProvider]:
        from polygon_insight.providers.weather import WeatherApiProvider

        return WeatherApiProvider

    _ADAPTER_REGISTRY[WORLDPOP] = _Registration(POPULATION, _worldpop)
    _ADAPTER_REGISTRY[OPENCAGE_COUNTRY_DENSITY] = _Registration(POPULATION, _opencage)
    _ADAPTER_REGISTRY[OVERPASS] = _Registration(LAND_USE, _overpass)
    _ADAPTER_REGISTRY[WORLDBANK_CLIMATE] = _Registration(CLIMATE, _worldbank)
    _ADAPTER_REGISTRY[OPEN_ELEVATION] = _Registration(ELEVATION, _open_elevation)
    _ADAPTER_REGISTRY[GOOGLE_ELEVATION] = _Registration(ELEVATION, _google_elevation)
    _ADAPTER_REGISTRY[OPENWEATHERMAP] = _Registration(WEATHER, _openweathermap)
    _ADAPTER_REGISTRY[WEATHERAPI] = _Registration(WEATHER, _weatherapi)


def _ensure_registry() -> None:
    """Initialise the adapter registry once (idempotent)."""
    if not _ADAPTER_REGISTRY:
        _register_builtin_adapters()


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def register_provider(
    name: str,
    category: str,
    loader: Callable[[], type[DataProvider]],
) -> None:
    """Register a custom provider adapter.

    Args:
        name: Provider name (e.g. ``"my_population_service"``).
        category: Category the adapter serves.
        loader: A zero-argument callable that returns the adapter class.

    Raises:
        ValueError: If the name is empty.
    """
    if not name:
        msg = "Provider name must be non-empty"
        raise ValueError(msg)
    _ensure_registry()
    _ADAPTER_REGISTRY[name] = _Registration(category, loader)
    logger.debug("Registered provider adapter: %s (%s)", name, category)


def provider_category(name: str) -> str | None:
    """Return the category *name* is registered under, or ``None``."""
    _ensure_registry()
    registration = _ADAPTER_REGISTRY.get(name)
    return registration.category if registration else None


def get_provider(
    name: str,
    client: httpx.AsyncClient,
    config: ProviderConfig | None = None,
) -> DataProvider:
    """Create and return a provider instance.

    Args:
        name: Provider identifier (e.g. ``"overpass"``).
        client: HTTP client shared by the aggregate call.
        config: Optional ``ProviderConfig``. If ``None``, a default config
                with just the provider name is used.

    Raises:
        ProviderError: If the named provider is not registered or the
            config name does not match.
    """
    _ensure_registry()

    registration = _ADAPTER_REGISTRY.get(name)
    if registration is None:
        available = ", ".join(sorted(_ADAPTER_REGISTRY))
        msg = f"Unknown data provider: {name!r}. Available: {available}"
        raise ProviderError(provider=name, message=msg)

    adapter_cls = registration.loader()

    if config is None:
        config = ProviderConfig(name=name)
    elif config.name != name:
        msg = f"ProviderConfig.name {config.name!r} does not match requested provider {name!r}"
        raise ProviderError(provider=name, message=msg)

    logger.debug("Creating data provider: %s", name)
    return adapter_cls(config, client)


def build_providers(
    category: str,
    names: Iterable[str],
    client: httpx.AsyncClient,
    overrides: Mapping[str, ProviderConfig] | None = None,
) -> list[DataProvider]:
    """Instantiate *names* in priority order for one category chain.

    Raises:
        ProviderError: If a name is unknown or registered for another category.
    """
    overrides = overrides or {}
    providers: list[DataProvider] = []
    for name in names:
        registered = provider_category(name)
        if registered is not None and registered != category:
            msg = f"Provider {name!r} serves {registered}, not {category}"
            raise ProviderError(provider=name, message=msg)
        providers.append(get_provider(name, client, overrides.get(name)))
    return providers


def list_providers(category: str | None = None) -> list[str]:
    """Return registered provider names, optionally for one category."""
    _ensure_registry()
    return sorted(
        name
        for name, registration in _ADAPTER_REGISTRY.items()
        if category is None or registration.category == category
    )
