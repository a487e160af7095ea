"""Shared pytest fixtures for the polygon-insight test suite."""

from __future__ import annotations

import asyncio
import random
from collections.abc import Callable
from typing import Any

import httpx
import pytest

from polygon_insight.analysis.geometry import compute_metrics, normalize_ring, to_geojson
from polygon_insight.models.provider import ProviderConfig, ProviderRequest
from polygon_insight.providers.factory import get_provider

# ---------------------------------------------------------------------------
# Ring fixtures, (lat, lon) in degrees
# ---------------------------------------------------------------------------

# ~1.11 km × 1.11 km at the equator.
EQUATOR_SQUARE = [(0.0, 0.0), (0.0, 0.01), (0.01, 0.01), (0.01, 0.0)]

# ~1.1 km² block in central Paris.
PARIS_SQUARE = [(48.85, 2.34), (48.85, 2.355), (48.86, 2.355), (48.86, 2.34)]

# Mid-Atlantic, outside every continental box.
ATLANTIC_SQUARE = [(-0.5, -30.5), (-0.5, -29.5), (0.5, -29.5), (0.5, -30.5)]

# ~1° × 1° over France, well above the land-use area limit.
LARGE_FRANCE_SQUARE = [(46.0, 2.0), (46.0, 3.0), (47.0, 3.0), (47.0, 2.0)]


@pytest.fixture()
def equator_square() -> list[tuple[float, float]]:
    return list(EQUATOR_SQUARE)


@pytest.fixture()
def paris_square() -> list[tuple[float, float]]:
    return list(PARIS_SQUARE)


@pytest.fixture()
def atlantic_square() -> list[tuple[float, float]]:
    return list(ATLANTIC_SQUARE)


@pytest.fixture()
def large_square() -> list[tuple[float, float]]:
    return list(LARGE_FRANCE_SQUARE)


@pytest.fixture()
def rng() -> random.Random:
    """Seeded random source for deterministic estimator output."""
    return random.Random(1234)


# ---------------------------------------------------------------------------
# Provider fixtures
# ---------------------------------------------------------------------------


def build_request(ring: list[tuple[float, float]]) -> ProviderRequest:
    points = normalize_ring(ring)
    return ProviderRequest(
        ring=tuple(points),
        metrics=compute_metrics(points),
        geojson=to_geojson(points),
    )


@pytest.fixture()
def provider_request(paris_square: list[tuple[float, float]]) -> ProviderRequest:
    """ProviderRequest for the Paris block."""
    return build_request(paris_square)


@pytest.fixture()
def fetch() -> Callable[..., Any]:
    """Run one provider ``fetch`` against an ``httpx.MockTransport`` handler.

    Usage::

        result = fetch("open_elevation", handler, provider_request)
    """

    def _fetch(
        name: str,
        handler: Callable[[httpx.Request], httpx.Response],
        request: ProviderRequest,
        credential: str | None = None,
        config: ProviderConfig | None = None,
    ) -> Any:
        async def _run() -> Any:
            async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
                provider = get_provider(name, client, config)
                return await provider.fetch(request, credential)

        return asyncio.run(_run())

    return _fetch


@pytest.fixture()
def make_request() -> Callable[[list[tuple[float, float]]], ProviderRequest]:
    """Build a ProviderRequest for an arbitrary ring."""
    return build_request


@pytest.fixture()
def json_handler() -> Callable[..., Callable[[httpx.Request], httpx.Response]]:
    """Factory for MockTransport handlers answering every request with *payload*.

    Requests are appended to *seen* when a list is passed.
    """

    def _factory(
        payload: Any,
        seen: list[httpx.Request] | None = None,
        status_code: int = 200,
    ) -> Callable[[httpx.Request], httpx.Response]:
        def handler(request: httpx.Request) -> httpx.Response:
            if seen is not None:
                seen.append(request)
            return httpx.Response(status_code, json=payload)

        return handler

    return _factory
