"""Pydantic document model for an aggregated report.

``ReportRecord`` is the stable JSON form of an ``AggregatedReport``, as
printed by the command-line interface. It keeps three sections:

- **metrics**: area, perimeter, centroid, bounding box, degeneracy
- **categories**: one entry per category with its provenance and values
- **attempts**: the ordered chain attempt log per category, with the
  structured error (category, retryability, correlation id) of each failure

Units are explicit in field names (``_square_meters``, ``_km2``,
``_meters``); the elevation unit is carried alongside the value.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, Field

if TYPE_CHECKING:
    from polygon_insight.models.report import AggregatedReport

# Schema version for forward compatibility
SCHEMA_VERSION = "polygon-report-v1"


class MetricsRecord(BaseModel):
    """Geometry section of the report.

    Attributes:
        area_square_meters: Spherical area in square metres.
        area_km2: Same area in square kilometres.
        perimeter_meters: Great-circle perimeter in metres.
        vertex_count: Number of ring vertices.
        centroid: ``[lat, lon]`` vertex mean.
        bounding_box: ``north``/``south``/``east``/``west`` in degrees.
        is_degenerate: Whether the ring encloses no area.
    """

    area_square_meters: float = 0.0
    area_km2: float = 0.0
    perimeter_meters: float = 0.0
    vertex_count: int = 0
    centroid: list[float] = Field(default_factory=list)
    bounding_box: dict[str, float] = Field(default_factory=dict)
    is_degenerate: bool = False


class CategoryRecord(BaseModel):
    """One category result with its provenance."""

    data_source: str = ""
    estimated: bool = False
    values: dict[str, Any] = Field(default_factory=dict)


class ErrorRecord(BaseModel):
    """Structured failure attached to a failed or skipped step."""

    category: str
    code: str = ""
    stage: str = ""
    message: str = ""
    retryable: bool = False
    correlation_id: str = ""


class AttemptRecord(BaseModel):
    """One chain step."""

    provider: str
    outcome: str
    error_code: str = ""
    message: str = ""
    duration_s: float = 0.0
    error: ErrorRecord | None = None


class ReportRecord(BaseModel):
    """Complete JSON document for one aggregation.

    Attributes:
        schema_version: Schema identifier for forward compatibility.
        generated_at: ISO 8601 UTC timestamp of record creation.
        correlation_id: Id of the aggregate call; repeated in every error.
        metrics: Polygon measurements.
        geojson: GeoJSON Feature of the ring, or ``None`` for short rings.
        categories: Results keyed by category name.
        attempts: Chain attempt log keyed by category name.
    """

    schema_version: str = Field(default=SCHEMA_VERSION, alias="$schema")
    generated_at: str = ""
    correlation_id: str = ""
    metrics: MetricsRecord = Field(default_factory=MetricsRecord)
    geojson: dict[str, Any] | None = None
    categories: dict[str, CategoryRecord] = Field(default_factory=dict)
    attempts: dict[str, list[AttemptRecord]] = Field(default_factory=dict)

    model_config = {"populate_by_name": True}

    @classmethod
    def from_report(cls, report: AggregatedReport, *, timestamp: str = "") -> ReportRecord:
        """Build a record from an ``AggregatedReport``.

        Args:
            report: Output of ``DataAggregator.aggregate``.
            timestamp: ISO 8601 timestamp. If empty, uses the current UTC time.
        """
        from polygon_insight.models.report import AggregatedReport as ReportModel

        if not isinstance(report, ReportModel):
            msg = f"Expected AggregatedReport instance, got {type(report).__name__}"
            raise TypeError(msg)

        metrics = report.metrics
        categories = {}
        for name, result in report.results().items():
            values = result.to_dict()
            data_source = values.pop("data_source")
            categories[name] = CategoryRecord(
                data_source=data_source,
                estimated=result.is_estimate,
                values=values,
            )

        return cls(
            generated_at=timestamp or datetime.now(UTC).isoformat(),
            correlation_id=report.correlation_id,
            metrics=MetricsRecord(
                area_square_meters=metrics.area_square_meters,
                area_km2=metrics.area_km2,
                perimeter_meters=metrics.perimeter_meters,
                vertex_count=metrics.vertex_count,
                centroid=[metrics.centroid.lat, metrics.centroid.lon],
                bounding_box=metrics.bounding_box.to_dict(),
                is_degenerate=metrics.is_degenerate,
            ),
            geojson=report.geojson,
            categories=categories,
            attempts={
                name: [AttemptRecord(**attempt.to_dict()) for attempt in steps]
                for name, steps in report.attempts.items()
            },
        )

    def to_json(self, *, indent: int | None = 2) -> str:
        """Serialise to a JSON string with the ``$schema`` alias."""
        return self.model_dump_json(indent=indent, by_alias=True)

    def to_dict(self) -> dict[str, object]:
        return self.model_dump(by_alias=True)  # type: ignore[return-value]
