"""Data aggregator: fan-out/fan-in over the five category chains.

``DataAggregator.aggregate`` computes the polygon metrics once, builds a
``SourceChain`` per category and runs them all concurrently with
``asyncio.gather``. The call resolves only when every chain has, and it
always returns a complete ``AggregatedReport``: provider failures end
up in the attempt log and in each result's provenance, never as
exceptions.

Large polygons (above ``land_use_max_area_km2``) never reach the
land-use providers; their configured providers are logged as skipped
and the land-use estimator answers directly.

Usage::

    report = asyncio.run(DataAggregator().aggregate(ring, credentials))
"""

from __future__ import annotations

import asyncio
import logging
import random
import time
import uuid
from typing import TYPE_CHECKING, Any

import httpx

from polygon_insight.analysis.geometry import compute_metrics, normalize_ring, to_geojson
from polygon_insight.core.config import AggregatorConfig, Credentials
from polygon_insight.core.constants import (
    CATEGORIES,
    CLIMATE,
    ELEVATION,
    LAND_USE,
    POPULATION,
    WEATHER,
)
from polygon_insight.core.exceptions import InsightError
from polygon_insight.models.provider import ProviderRequest
from polygon_insight.models.report import AggregatedReport, AttemptOutcome, ChainAttempt
from polygon_insight.orchestrators.chain import SourceChain
from polygon_insight.providers.factory import build_providers

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Mapping

    from polygon_insight.models.provider import ProviderConfig
    from polygon_insight.models.report import ChainOutcome

logger = logging.getLogger("polygon_insight.orchestrators.aggregator")

AREA_LIMIT_CODE = "AREA_LIMIT"


class DataAggregator:
    """Run every category chain for one polygon per ``aggregate`` call.

    Args:
        config: Timeouts, thresholds and provider order. Defaults to
            ``AggregatorConfig()``.
        client: Shared ``httpx.AsyncClient``. When omitted, each
            ``aggregate`` call opens and closes its own.
        rng_factory: Zero-argument callable returning a fresh random
            source; called once per chain so estimators never share state.
        provider_overrides: Per-provider ``ProviderConfig`` (base URL,
            extra parameters) keyed by provider name.
    """

    def __init__(
        self,
        config: AggregatorConfig | None = None,
        *,
        client: httpx.AsyncClient | None = None,
        rng_factory: Callable[[], random.Random] = random.Random,
        provider_overrides: Mapping[str, ProviderConfig] | None = None,
    ) -> None:
        self.config = config or AggregatorConfig()
        self._client = client
        self._rng_factory = rng_factory
        self._overrides = dict(provider_overrides or {})

    async def aggregate(
        self,
        ring: Iterable[Any] | None,
        credentials: Credentials | Mapping[str, str | None] | None = None,
        *,
        cancel: asyncio.Event | None = None,
        correlation_id: str = "",
    ) -> AggregatedReport:
        """Compute metrics and resolve every category for *ring*.

        Args:
            ring: Vertices as ``(lat, lon)`` pairs in degrees.
            credentials: Provider tokens; a mapping or ``None`` is accepted.
            cancel: When set, outstanding provider calls are abandoned and
                unfinished chains return their estimator result.
            correlation_id: Id stamped on every recorded error. A random
                one is generated when empty.
        """
        started = time.perf_counter()
        correlation_id = correlation_id or uuid.uuid4().hex
        creds = Credentials.coerce(credentials)
        points = normalize_ring(ring)
        metrics = compute_metrics(points)
        request = ProviderRequest(
            ring=tuple(points),
            metrics=metrics,
            geojson=to_geojson(points),
        )

        if self._client is not None:
            outcomes = await self._run_chains(
                self._client, request, creds, cancel, correlation_id
            )
        else:
            async with httpx.AsyncClient(
                timeout=self.config.provider_timeout_s,
                headers={"User-Agent": self.config.user_agent},
                follow_redirects=True,
            ) as client:
                outcomes = await self._run_chains(client, request, creds, cancel, correlation_id)

        attempts = {outcome.category: outcome.attempts for outcome in outcomes}
        results = {outcome.category: outcome.result for outcome in outcomes}
        if metrics.area_km2 > self.config.land_use_max_area_km2:
            attempts[LAND_USE] = _area_limited(
                self.config.providers_for(LAND_USE), metrics.area_km2, correlation_id
            ) + attempts[LAND_USE]

        report = AggregatedReport(
            metrics=metrics,
            population=results[POPULATION],
            land_use=results[LAND_USE],
            climate=results[CLIMATE],
            elevation=results[ELEVATION],
            weather=results[WEATHER],
            attempts=attempts,
            geojson=request.geojson,
            correlation_id=correlation_id,
        )

        logger.info(
            "Aggregation complete | correlation_id=%s | area=%.3f km2 | estimated=%s"
            " | duration=%.3fs",
            correlation_id,
            metrics.area_km2,
            ",".join(report.estimated_categories()) or "none",
            time.perf_counter() - started,
        )
        return report

    def build_chains(
        self, client: httpx.AsyncClient, area_km2: float, correlation_id: str = ""
    ) -> list[SourceChain]:
        """One ``SourceChain`` per category, each with its own random source."""
        chains = []
        for category in CATEGORIES:
            names = self.config.providers_for(category)
            if category == LAND_USE and area_km2 > self.config.land_use_max_area_km2:
                logger.info(
                    "Land-use providers skipped | area=%.3f km2 | limit=%.1f km2",
                    area_km2,
                    self.config.land_use_max_area_km2,
                )
                names = ()
            chains.append(
                SourceChain(
                    category,
                    build_providers(category, names, client, self._overrides),
                    timeout_s=self.config.provider_timeout_s,
                    rng=self._rng_factory(),
                    correlation_id=correlation_id,
                )
            )
        return chains

    async def _run_chains(
        self,
        client: httpx.AsyncClient,
        request: ProviderRequest,
        credentials: Credentials,
        cancel: asyncio.Event | None,
        correlation_id: str,
    ) -> list[ChainOutcome]:
        chains = self.build_chains(client, request.area_km2, correlation_id)
        return list(
            await asyncio.gather(*(chain.run(request, credentials, cancel) for chain in chains))
        )


def _area_limited(
    names: Iterable[str], area_km2: float, correlation_id: str
) -> tuple[ChainAttempt, ...]:
    message = f"Polygon area {area_km2:.1f} km2 exceeds the land-use limit"
    return tuple(
        ChainAttempt.from_error(
            name,
            AttemptOutcome.SKIPPED,
            InsightError(
                message, stage="aggregator", code=AREA_LIMIT_CODE, correlation_id=correlation_id
            ),
        )
        for name in names
    )


def aggregate_polygon(
    ring: Iterable[Any] | None,
    credentials: Credentials | Mapping[str, str | None] | None = None,
    config: AggregatorConfig | None = None,
) -> AggregatedReport:
    """Synchronous wrapper around ``DataAggregator.aggregate``.

    Must not be called from inside a running event loop.
    """
    return asyncio.run(DataAggregator(config).aggregate(ring, credentials))
