"""Tests for the WorldPop and OpenCage country-density providers."""

from __future__ import annotations

import json
from collections.abc import Callable
from typing import Any

import httpx
import pytest

from polygon_insight.models.provider import ProviderConfig, ProviderRequest
from polygon_insight.providers.base import (
    ProviderAuthError,
    ProviderEmptyError,
    ProviderMalformedError,
    ProviderUnavailableError,
)
from polygon_insight.providers.factory import OPENCAGE_COUNTRY_DENSITY, WORLDPOP
from polygon_insight.utils.helpers import round_half_up


class TestWorldPopProvider:
    def test_population_and_density(
        self,
        fetch: Callable[..., Any],
        json_handler: Callable[..., Any],
        provider_request: ProviderRequest,
    ) -> None:
        result = fetch(WORLDPOP, json_handler({"data": {"population": 25000.4}}), provider_request)
        assert result.population == 25000
        assert result.density_per_km2 == pytest.approx(25000 / provider_request.area_km2, abs=1)
        assert result.area_km2 == pytest.approx(provider_request.area_km2, abs=0.01)
        assert result.data_source == "WorldPop"
        assert not result.is_estimate

    def test_request_carries_dataset_year_and_geojson(
        self,
        fetch: Callable[..., Any],
        json_handler: Callable[..., Any],
        provider_request: ProviderRequest,
    ) -> None:
        seen: list[httpx.Request] = []
        fetch(WORLDPOP, json_handler({"data": {"population": 1}}, seen), provider_request)
        params = seen[0].url.params
        assert params["dataset"] == "wpgp"
        assert params["year"] == "2020"
        assert json.loads(params["geojson"]) == provider_request.geojson

    def test_extra_params_override_year(
        self,
        fetch: Callable[..., Any],
        json_handler: Callable[..., Any],
        provider_request: ProviderRequest,
    ) -> None:
        seen: list[httpx.Request] = []
        config = ProviderConfig(name=WORLDPOP, extra_params={"year": "2018"})
        handler = json_handler({"data": {"population": 1}}, seen)
        fetch(WORLDPOP, handler, provider_request, None, config)
        assert seen[0].url.params["year"] == "2018"

    def test_half_person_rounds_up(
        self,
        fetch: Callable[..., Any],
        json_handler: Callable[..., Any],
        provider_request: ProviderRequest,
    ) -> None:
        result = fetch(WORLDPOP, json_handler({"data": {"population": 2.5}}), provider_request)
        assert result.population == 3

    def test_negative_population_clamped(
        self,
        fetch: Callable[..., Any],
        json_handler: Callable[..., Any],
        provider_request: ProviderRequest,
    ) -> None:
        result = fetch(WORLDPOP, json_handler({"data": {"population": -3}}), provider_request)
        assert result.population == 0

    @pytest.mark.parametrize("payload", [{}, {"data": None}, {"data": {}}])
    def test_no_data_is_empty(
        self,
        payload: dict[str, Any],
        fetch: Callable[..., Any],
        json_handler: Callable[..., Any],
        provider_request: ProviderRequest,
    ) -> None:
        with pytest.raises(ProviderEmptyError):
            fetch(WORLDPOP, json_handler(payload), provider_request)

    @pytest.mark.parametrize(
        "payload",
        [[1, 2], {"data": [1]}, {"data": {"population": "many"}}, {"data": {"population": True}}],
    )
    def test_bad_shape_is_malformed(
        self,
        payload: Any,
        fetch: Callable[..., Any],
        json_handler: Callable[..., Any],
        provider_request: ProviderRequest,
    ) -> None:
        with pytest.raises(ProviderMalformedError):
            fetch(WORLDPOP, json_handler(payload), provider_request)

    def test_short_ring_has_nothing_to_query(
        self,
        fetch: Callable[..., Any],
        json_handler: Callable[..., Any],
        make_request: Callable[..., ProviderRequest],
    ) -> None:
        calls: list[httpx.Request] = []
        with pytest.raises(ProviderEmptyError):
            fetch(WORLDPOP, json_handler({}, calls), make_request([(1.0, 1.0), (2.0, 2.0)]))
        assert calls == []

    def test_http_error_is_unavailable(
        self,
        fetch: Callable[..., Any],
        json_handler: Callable[..., Any],
        provider_request: ProviderRequest,
    ) -> None:
        with pytest.raises(ProviderUnavailableError):
            fetch(WORLDPOP, lambda request: httpx.Response(500), provider_request)


_OPENCAGE_PARIS = {
    "results": [
        {
            "components": {
                "country_code": "fr",
                "country": "France",
                "city": "Paris",
                "state": "Ile-de-France",
            }
        }
    ]
}


class TestCountryDensityProvider:
    def test_density_from_country_table(
        self,
        fetch: Callable[..., Any],
        json_handler: Callable[..., Any],
        provider_request: ProviderRequest,
    ) -> None:
        result = fetch(
            OPENCAGE_COUNTRY_DENSITY, json_handler(_OPENCAGE_PARIS), provider_request, "oc-key"
        )
        assert result.density_per_km2 == 117.6
        assert result.population == round_half_up(117.6 * provider_request.area_km2)
        assert result.country == "France"
        assert result.locality == "Paris"
        assert result.data_source == "OpenCage + country density"

    def test_request_carries_key_and_centroid(
        self,
        fetch: Callable[..., Any],
        json_handler: Callable[..., Any],
        provider_request: ProviderRequest,
    ) -> None:
        seen: list[httpx.Request] = []
        fetch(
            OPENCAGE_COUNTRY_DENSITY,
            json_handler(_OPENCAGE_PARIS, seen),
            provider_request,
            "oc-key",
        )
        params = seen[0].url.params
        assert params["key"] == "oc-key"
        assert "%2B" not in str(seen[0].url)
        lat, lon = params["q"].split(",")
        assert float(lat) == pytest.approx(provider_request.centroid.lat)
        assert float(lon) == pytest.approx(provider_request.centroid.lon)

    def test_unlisted_country_uses_world_average(
        self,
        fetch: Callable[..., Any],
        json_handler: Callable[..., Any],
        provider_request: ProviderRequest,
    ) -> None:
        payload = {"results": [{"components": {"country_code": "is", "town": "Vik"}}]}
        result = fetch(OPENCAGE_COUNTRY_DENSITY, json_handler(payload), provider_request, "k")
        assert result.density_per_km2 == 50.0
        assert result.locality == "Vik"
        assert result.country is None

    def test_falls_back_to_state_for_locality(
        self,
        fetch: Callable[..., Any],
        json_handler: Callable[..., Any],
        provider_request: ProviderRequest,
    ) -> None:
        payload = {"results": [{"components": {"country_code": "us", "state": "Nevada"}}]}
        result = fetch(OPENCAGE_COUNTRY_DENSITY, json_handler(payload), provider_request, "k")
        assert result.locality == "Nevada"

    @pytest.mark.parametrize(
        "payload",
        [{"results": []}, {"results": [{"components": {"country": "Nowhere"}}]}],
    )
    def test_no_country_is_empty(
        self,
        payload: dict[str, Any],
        fetch: Callable[..., Any],
        json_handler: Callable[..., Any],
        provider_request: ProviderRequest,
    ) -> None:
        with pytest.raises(ProviderEmptyError):
            fetch(OPENCAGE_COUNTRY_DENSITY, json_handler(payload), provider_request, "k")

    @pytest.mark.parametrize("payload", [[], {"results": "x"}, {"results": [{"components": 1}]}])
    def test_bad_shape_is_malformed(
        self,
        payload: Any,
        fetch: Callable[..., Any],
        json_handler: Callable[..., Any],
        provider_request: ProviderRequest,
    ) -> None:
        with pytest.raises(ProviderMalformedError):
            fetch(OPENCAGE_COUNTRY_DENSITY, json_handler(payload), provider_request, "k")

    def test_rejected_key_is_auth_error(
        self,
        fetch: Callable[..., Any],
        json_handler: Callable[..., Any],
        provider_request: ProviderRequest,
    ) -> None:
        with pytest.raises(ProviderAuthError):
            fetch(
                OPENCAGE_COUNTRY_DENSITY,
                lambda request: httpx.Response(401, json={"status": {"code": 401}}),
                provider_request,
                "bad",
            )
