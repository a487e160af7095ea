"""Data models.

Defines the data structures used throughout the package:
- Point, BoundingBox, PolygonMetrics: geometry value objects
- PopulationResult, LandUseResult, ClimateResult, ElevationResult,
  WeatherResult: per-category results with provenance
- AggregatedReport, ChainAttempt: the combined per-request output
- ReportRecord: JSON document form of a report
"""

from polygon_insight.models.geometry import BoundingBox, Point, PolygonMetrics
from polygon_insight.models.record import ReportRecord
from polygon_insight.models.report import (
    AggregatedReport,
    AttemptOutcome,
    ChainAttempt,
    ChainOutcome,
)
from polygon_insight.models.results import (
    CategoryResult,
    ClimateResult,
    ElevationResult,
    LandUseResult,
    ModelValidationError,
    PopulationResult,
    WeatherResult,
)

__all__ = [
    "AggregatedReport",
    "AttemptOutcome",
    "BoundingBox",
    "CategoryResult",
    "ChainAttempt",
    "ChainOutcome",
    "ClimateResult",
    "ElevationResult",
    "LandUseResult",
    "ModelValidationError",
    "Point",
    "PolygonMetrics",
    "PopulationResult",
    "ReportRecord",
    "WeatherResult",
]
