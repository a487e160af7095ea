"""Per-category result models.

Each result carries a ``data_source`` provenance string naming the
provider or estimator that produced it. Estimator provenance always
starts with ``ESTIMATE_PREFIX`` so callers can tell degraded data apart
without inspecting exceptions.

Design notes:
- All models are frozen dataclasses.
- Invariants are checked in ``__post_init__`` and raise
  ``ModelValidationError``; a provider payload that violates them is
  therefore treated as malformed by the source chain.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass

from polygon_insight.core.constants import ELEVATION_UNIT, ESTIMATE_PREFIX, MONTH_LABELS
from polygon_insight.core.exceptions import InsightError

# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


class ModelValidationError(ValueError, InsightError):
    """Raised when a result model is constructed with invalid field values.

    Attributes:
        model: Name of the model class that failed validation.
        field_name: The field that violated the invariant.
        value: The invalid value.
    """

    default_stage = "model_validation"
    default_code = "MODEL_VALIDATION_FAILED"

    def __init__(self, model: str, field_name: str, value: object, message: str) -> None:
        self.model = model
        self.field_name = field_name
        self.value = value
        formatted = f"{model}.{field_name}={value!r}: {message}"
        InsightError.__init__(self, formatted)


class _Provenance:
    """Mixin for results that carry a ``data_source`` tag."""

    __slots__ = ()

    data_source: str

    @property
    def is_estimate(self) -> bool:
        """Whether an estimator (rather than a provider) produced this result."""
        return self.data_source.startswith(ESTIMATE_PREFIX)

    def to_dict(self) -> dict[str, object]:
        return asdict(self)  # type: ignore[call-overload]


# ---------------------------------------------------------------------------
# Category results
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class PopulationResult(_Provenance):
    """Population inside the polygon.

    Attributes:
        population: Head count (>= 0).
        density_per_km2: People per square kilometre.
        area_km2: Polygon area the figures refer to.
        data_source: Provenance tag.
        country: Country name, when a geocoder resolved one.
        locality: City, town or state, when a geocoder resolved one.
    """

    population: int
    density_per_km2: float
    area_km2: float
    data_source: str
    country: str | None = None
    locality: str | None = None

    def __post_init__(self) -> None:
        _check_min("PopulationResult", "population", self.population, 0)
        _check_min("PopulationResult", "density_per_km2", self.density_per_km2, 0)
        _check_min("PopulationResult", "area_km2", self.area_km2, 0)


@dataclass(frozen=True, slots=True)
class LandUseResult(_Provenance):
    """Land-use split in whole percentages.

    Provider-derived splits sum to 100 except where the ``other`` bucket
    was clamped at zero. Estimated splits are sampled independently and
    carry no sum guarantee.
    """

    urban: int
    agriculture: int
    forest: int
    water: int
    other: int
    data_source: str

    def __post_init__(self) -> None:
        for name in ("urban", "agriculture", "forest", "water", "other"):
            _check_range("LandUseResult", name, getattr(self, name), 0, 100)

    @property
    def total(self) -> int:
        return self.urban + self.agriculture + self.forest + self.water + self.other


@dataclass(frozen=True, slots=True)
class ClimateResult(_Provenance):
    """Twelve monthly averages, January first.

    Attributes:
        months: Month labels (``MONTH_LABELS``).
        temperatures_c: Mean temperature per month in degrees Celsius.
        precipitation_mm: Precipitation per month in millimetres (>= 0).
        data_source: Provenance tag.
    """

    months: tuple[str, ...]
    temperatures_c: tuple[float, ...]
    precipitation_mm: tuple[float, ...]
    data_source: str

    def __post_init__(self) -> None:
        for name in ("months", "temperatures_c", "precipitation_mm"):
            values = getattr(self, name)
            if len(values) != len(MONTH_LABELS):
                raise ModelValidationError(
                    "ClimateResult", name, values, f"must have {len(MONTH_LABELS)} entries"
                )
        for value in self.precipitation_mm:
            _check_min("ClimateResult", "precipitation_mm", value, 0)


@dataclass(frozen=True, slots=True)
class ElevationResult(_Provenance):
    """Elevation at the polygon centroid (``None`` when unknown)."""

    center_elevation_meters: float | None
    data_source: str
    unit: str = ELEVATION_UNIT


@dataclass(frozen=True, slots=True)
class WeatherResult(_Provenance):
    """Current conditions at the polygon centroid.

    The optional trailing fields are passed through when a provider
    supplies them and stay ``None`` for estimates.
    """

    temperature_c: float
    humidity_percent: float
    wind_speed_ms: float
    pressure_hpa: float
    clouds_percent: float
    description: str
    data_source: str
    icon: str | None = None
    rain_mm: float | None = None
    location: str | None = None
    country: str | None = None

    def __post_init__(self) -> None:
        _check_range("WeatherResult", "humidity_percent", self.humidity_percent, 0, 100)
        _check_range("WeatherResult", "clouds_percent", self.clouds_percent, 0, 100)
        _check_min("WeatherResult", "wind_speed_ms", self.wind_speed_ms, 0)


CategoryResult = (
    PopulationResult | LandUseResult | ClimateResult | ElevationResult | WeatherResult
)


# ---------------------------------------------------------------------------
# Validation helpers (module-private)
# ---------------------------------------------------------------------------


def _check_range(model: str, field_name: str, value: float, lo: float, hi: float) -> None:
    """Raise `ModelValidationError` if *value* falls outside [lo, hi]."""
    if value < lo or value > hi:
        raise ModelValidationError(model, field_name, value, f"must be between {lo} and {hi}")


def _check_min(model: str, field_name: str, value: float | int, lo: float | int) -> None:
    """Raise `ModelValidationError` if *value* is below *lo*."""
    if value < lo:
        raise ModelValidationError(model, field_name, value, f"must be >= {lo}")
