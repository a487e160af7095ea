"""Tests for the data provider factory.

Covers: list_providers, provider_category, get_provider,
build_providers, register_provider, error handling and lazy loading.
"""

from __future__ import annotations

import unittest
from unittest.mock import MagicMock

import httpx

from polygon_insight.core.constants import CATEGORIES, ELEVATION, LAND_USE, POPULATION, WEATHER
from polygon_insight.models.provider import ProviderConfig
from polygon_insight.providers.base import DataProvider, ProviderError
from polygon_insight.providers.elevation import GoogleElevationProvider, OpenElevationProvider
from polygon_insight.providers.factory import (
    _ADAPTER_REGISTRY,
    GOOGLE_ELEVATION,
    OPEN_ELEVATION,
    OVERPASS,
    WORLDPOP,
    _ensure_registry,
    build_providers,
    get_provider,
    list_providers,
    provider_category,
    register_provider,
)

_CLIENT = MagicMock(spec=httpx.AsyncClient)


class TestListProviders(unittest.TestCase):
    def test_includes_builtin_providers(self) -> None:
        providers = list_providers()
        for name in (WORLDPOP, OVERPASS, OPEN_ELEVATION, GOOGLE_ELEVATION):
            assert name in providers

    def test_returns_sorted(self) -> None:
        providers = list_providers()
        assert providers == sorted(providers)

    def test_filter_by_category(self) -> None:
        assert list_providers(ELEVATION) == [GOOGLE_ELEVATION, OPEN_ELEVATION]

    def test_every_category_has_a_provider(self) -> None:
        for category in CATEGORIES:
            assert list_providers(category)


class TestProviderCategory(unittest.TestCase):
    def test_known(self) -> None:
        assert provider_category(OVERPASS) == LAND_USE
        assert provider_category("weatherapi") == WEATHER

    def test_unknown(self) -> None:
        assert provider_category("nope") is None


class TestGetProvider(unittest.TestCase):
    def test_builds_instance(self) -> None:
        provider = get_provider(OPEN_ELEVATION, _CLIENT)
        assert isinstance(provider, OpenElevationProvider)
        assert provider.name == OPEN_ELEVATION
        assert provider.category == ELEVATION

    def test_uses_supplied_config(self) -> None:
        config = ProviderConfig(name=GOOGLE_ELEVATION, api_base_url="https://mirror.test")
        provider = get_provider(GOOGLE_ELEVATION, _CLIENT, config)
        assert isinstance(provider, GoogleElevationProvider)
        assert provider.base_url == "https://mirror.test"
        assert provider.requires_credential

    def test_unknown_provider_raises(self) -> None:
        with self.assertRaises(ProviderError) as ctx:
            get_provider("nonexistent", _CLIENT)
        assert "Unknown data provider" in ctx.exception.message
        assert "overpass" in ctx.exception.message

    def test_config_name_mismatch_raises(self) -> None:
        with self.assertRaises(ProviderError):
            get_provider(WORLDPOP, _CLIENT, ProviderConfig(name="other"))


class TestBuildProviders(unittest.TestCase):
    def test_preserves_priority_order(self) -> None:
        providers = build_providers(ELEVATION, [GOOGLE_ELEVATION, OPEN_ELEVATION], _CLIENT)
        assert [p.name for p in providers] == [GOOGLE_ELEVATION, OPEN_ELEVATION]

    def test_empty_list(self) -> None:
        assert build_providers(LAND_USE, [], _CLIENT) == []

    def test_wrong_category_raises(self) -> None:
        with self.assertRaises(ProviderError) as ctx:
            build_providers(POPULATION, [OVERPASS], _CLIENT)
        assert "land_use" in ctx.exception.message

    def test_overrides_applied_by_name(self) -> None:
        override = ProviderConfig(name=WORLDPOP, extra_params={"year": "2019"})
        (provider,) = build_providers(POPULATION, [WORLDPOP], _CLIENT, {WORLDPOP: override})
        assert provider.config.extra_params == {"year": "2019"}


class TestRegisterProvider(unittest.TestCase):
    def tearDown(self) -> None:
        _ADAPTER_REGISTRY.pop("custom_elevation", None)

    def test_register_and_build(self) -> None:
        class _Custom(DataProvider):
            category = ELEVATION

            async def fetch(self, request, credential):  # type: ignore[override]
                raise NotImplementedError

        register_provider("custom_elevation", ELEVATION, lambda: _Custom)
        provider = get_provider("custom_elevation", _CLIENT)
        assert isinstance(provider, _Custom)
        assert provider_category("custom_elevation") == ELEVATION

    def test_empty_name_rejected(self) -> None:
        with self.assertRaises(ValueError):
            register_provider("", ELEVATION, lambda: DataProvider)

    def test_loader_called_lazily(self) -> None:
        loader = MagicMock(return_value=OpenElevationProvider)
        register_provider("custom_elevation", ELEVATION, loader)
        loader.assert_not_called()
        list_providers()
        loader.assert_not_called()
        get_provider("custom_elevation", _CLIENT)
        loader.assert_called_once()


class TestRegistry(unittest.TestCase):
    def test_ensure_registry_idempotent(self) -> None:
        _ensure_registry()
        before = dict(_ADAPTER_REGISTRY)
        _ensure_registry()
        assert _ADAPTER_REGISTRY == before
