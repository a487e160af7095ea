"""Tests for the ReportRecord pydantic model.

Covers: schema alias, metrics section, per-category provenance, attempt
log, JSON round-trip through ``json.loads`` and type checking.
"""

from __future__ import annotations

import json

import pytest

from polygon_insight.analysis.geometry import compute_metrics, to_geojson
from polygon_insight.core.constants import MONTH_LABELS
from polygon_insight.models.record import SCHEMA_VERSION, ReportRecord
from polygon_insight.models.report import AggregatedReport, AttemptOutcome, ChainAttempt
from polygon_insight.models.results import (
    ClimateResult,
    ElevationResult,
    LandUseResult,
    PopulationResult,
    WeatherResult,
)
from polygon_insight.providers.base import ProviderUnavailableError

RING = [(48.85, 2.34), (48.85, 2.355), (48.86, 2.355), (48.86, 2.34)]


@pytest.fixture()
def report() -> AggregatedReport:
    return AggregatedReport(
        metrics=compute_metrics(RING),
        population=PopulationResult(21000, 19000.0, 1.1, "WorldPop"),
        land_use=LandUseResult(60, 5, 15, 10, 10, "OpenStreetMap"),
        climate=ClimateResult(
            months=MONTH_LABELS,
            temperatures_c=(5.0,) * 12,
            precipitation_mm=(50.0,) * 12,
            data_source="Estimate (location-based climate)",
        ),
        elevation=ElevationResult(35.0, "Open-Elevation"),
        weather=WeatherResult(14.0, 70.0, 4.1, 1015.0, 75.0, "broken clouds", "OpenWeatherMap"),
        attempts={
            "climate": (
                ChainAttempt.from_error(
                    "worldbank_climate",
                    AttemptOutcome.FAILED,
                    ProviderUnavailableError("worldbank_climate", "HTTP 503").bind("req-9"),
                ),
                ChainAttempt("estimator", AttemptOutcome.ESTIMATED),
            ),
        },
        geojson=to_geojson(RING),
        correlation_id="req-9",
    )


class TestReportRecord:
    def test_schema_alias(self, report: AggregatedReport) -> None:
        d = ReportRecord.from_report(report, timestamp="2026-01-01T00:00:00+00:00").to_dict()
        assert d["$schema"] == SCHEMA_VERSION
        assert d["generated_at"] == "2026-01-01T00:00:00+00:00"

    def test_generated_at_defaults_to_now(self, report: AggregatedReport) -> None:
        assert ReportRecord.from_report(report).generated_at

    def test_metrics_section(self, report: AggregatedReport) -> None:
        record = ReportRecord.from_report(report)
        assert record.metrics.vertex_count == 4
        assert record.metrics.area_km2 == pytest.approx(report.metrics.area_km2)
        assert record.metrics.centroid == [report.metrics.centroid.lat, report.metrics.centroid.lon]
        assert set(record.metrics.bounding_box) == {"north", "south", "east", "west"}

    def test_categories_carry_provenance(self, report: AggregatedReport) -> None:
        record = ReportRecord.from_report(report)
        assert set(record.categories) == set(report.results())
        assert record.categories["population"].data_source == "WorldPop"
        assert record.categories["population"].values["population"] == 21000
        assert "data_source" not in record.categories["population"].values
        assert record.categories["climate"].estimated
        assert not record.categories["land_use"].estimated

    def test_attempts(self, report: AggregatedReport) -> None:
        record = ReportRecord.from_report(report)
        steps = record.attempts["climate"]
        assert [s.outcome for s in steps] == ["failed", "estimated"]
        assert steps[0].error_code == "PROVIDER_UNAVAILABLE"
        assert steps[1].error is None

    def test_failed_attempt_carries_structured_error(self, report: AggregatedReport) -> None:
        record = ReportRecord.from_report(report)
        assert record.correlation_id == "req-9"
        error = record.attempts["climate"][0].error
        assert error is not None
        assert error.category == "transient"
        assert error.retryable is True
        assert error.stage == "provider"
        assert error.correlation_id == "req-9"

    def test_error_serialised_in_json(self, report: AggregatedReport) -> None:
        doc = json.loads(ReportRecord.from_report(report).to_json())
        assert doc["correlation_id"] == "req-9"
        assert doc["attempts"]["climate"][0]["error"]["code"] == "PROVIDER_UNAVAILABLE"
        assert doc["attempts"]["climate"][1]["error"] is None

    def test_to_json_is_valid_json(self, report: AggregatedReport) -> None:
        doc = json.loads(ReportRecord.from_report(report).to_json())
        assert doc["geojson"]["geometry"]["type"] == "Polygon"
        assert doc["categories"]["climate"]["values"]["months"] == list(MONTH_LABELS)

    def test_compact_json(self, report: AggregatedReport) -> None:
        assert "\n" not in ReportRecord.from_report(report).to_json(indent=None)

    def test_rejects_non_report(self) -> None:
        with pytest.raises(TypeError, match="AggregatedReport"):
            ReportRecord.from_report({"metrics": {}})  # type: ignore[arg-type]
