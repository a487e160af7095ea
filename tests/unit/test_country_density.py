"""Tests for the country population-density table."""

from __future__ import annotations

import pytest

from polygon_insight.analysis.country_density import COUNTRY_DENSITY_PER_KM2, country_density
from polygon_insight.core.constants import WORLD_AVERAGE_DENSITY_PER_KM2


class TestCountryDensity:
    def test_known_code(self) -> None:
        assert country_density("fr") == 117.6

    @pytest.mark.parametrize("code", ["FR", " fr ", "Fr"])
    def test_code_is_normalised(self, code: str) -> None:
        assert country_density(code) == COUNTRY_DENSITY_PER_KM2["fr"]

    @pytest.mark.parametrize("code", ["zz", "", None])
    def test_unknown_code_uses_world_average(self, code: str | None) -> None:
        assert country_density(code) == WORLD_AVERAGE_DENSITY_PER_KM2 == 50.0

    def test_table_keys_are_lowercase_alpha2(self) -> None:
        for code in COUNTRY_DENSITY_PER_KM2:
            assert len(code) == 2
            assert code == code.lower()
