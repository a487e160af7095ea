"""Aggregated report for one polygon request.

An ``AggregatedReport`` is built fresh for each ``aggregate`` call and
has no identity beyond it. Alongside the five category results it keeps
the ordered ``ChainAttempt`` log of every chain, which is how provider
failures surface to callers (they are never raised).
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from polygon_insight.core.exceptions import InsightError
    from polygon_insight.models.geometry import PolygonMetrics
    from polygon_insight.models.results import (
        CategoryResult,
        ClimateResult,
        ElevationResult,
        LandUseResult,
        PopulationResult,
        WeatherResult,
    )


class AttemptOutcome(enum.Enum):
    """How a single step of a source chain ended.

    Values:
        SUCCESS:   The provider returned a well-formed result.
        FAILED:    The provider raised, timed out or returned an unusable body.
        SKIPPED:   The provider was not called (missing credential, cancelled).
        ESTIMATED: The terminal estimator produced the result.
    """

    SUCCESS = "success"
    FAILED = "failed"
    SKIPPED = "skipped"
    ESTIMATED = "estimated"


@dataclass(frozen=True, slots=True)
class ChainAttempt:
    """One step of a source chain.

    Attributes:
        provider: Provider registry name, or ``"estimator"``.
        outcome: How the step ended.
        error_code: Machine-readable code of the failure (empty on success).
        message: Failure description (empty on success).
        duration_s: Wall-clock time spent on the step in seconds.
        error: ``InsightError.to_error_dict()`` of the failure, carrying its
            category, retryability and correlation id; ``None`` on success.
    """

    provider: str
    outcome: AttemptOutcome
    error_code: str = ""
    message: str = ""
    duration_s: float = 0.0
    error: dict[str, object] | None = None

    @classmethod
    def from_error(
        cls,
        provider: str,
        outcome: AttemptOutcome,
        error: InsightError,
        duration_s: float = 0.0,
    ) -> ChainAttempt:
        """Record a failed or skipped step from the error that ended it."""
        return cls(
            provider=provider,
            outcome=outcome,
            error_code=error.code,
            message=error.message,
            duration_s=duration_s,
            error=error.to_error_dict(),
        )

    def to_dict(self) -> dict[str, object]:
        return {
            "provider": self.provider,
            "outcome": self.outcome.value,
            "error_code": self.error_code,
            "message": self.message,
            "duration_s": round(self.duration_s, 4),
            "error": dict(self.error) if self.error is not None else None,
        }


@dataclass(frozen=True, slots=True)
class ChainOutcome:
    """Result of running one source chain plus the attempts that led to it."""

    category: str
    result: CategoryResult
    attempts: tuple[ChainAttempt, ...] = ()

    @property
    def estimated(self) -> bool:
        return self.result.is_estimate


@dataclass(frozen=True, slots=True)
class AggregatedReport:
    """Combined output of a single ``aggregate`` call.

    Attributes:
        metrics: Geometry measurements of the input ring.
        population: Population result.
        land_use: Land-use result.
        climate: Monthly climate result.
        elevation: Centroid elevation result.
        weather: Current-weather result.
        attempts: Chain attempt log keyed by category name.
        geojson: GeoJSON Feature of the input ring (``None`` for short rings).
        correlation_id: Id shared by every error recorded during the call.
    """

    metrics: PolygonMetrics
    population: PopulationResult
    land_use: LandUseResult
    climate: ClimateResult
    elevation: ElevationResult
    weather: WeatherResult
    attempts: dict[str, tuple[ChainAttempt, ...]] = field(default_factory=dict)
    geojson: dict[str, Any] | None = None
    correlation_id: str = ""

    def results(self) -> dict[str, CategoryResult]:
        """Return every category result keyed by category name."""
        return {
            "population": self.population,
            "land_use": self.land_use,
            "climate": self.climate,
            "elevation": self.elevation,
            "weather": self.weather,
        }

    def estimated_categories(self) -> list[str]:
        """Names of the categories that fell back to an estimator."""
        return [name for name, result in self.results().items() if result.is_estimate]
