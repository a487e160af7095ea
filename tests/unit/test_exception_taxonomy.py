"""Tests for the unified exception taxonomy.

Validates:
- InsightError structured attributes
- Category classification (validation, transient, permanent, contract)
- ``to_error_dict()`` produces stable payload keys
- ``bind()`` stamps the correlation id once
- Retry semantics of the provider exceptions
- All domain exceptions are InsightError subclasses
"""

from __future__ import annotations

import pytest

from polygon_insight.core.config import ConfigValidationError
from polygon_insight.core.exceptions import (
    ContractError,
    InsightError,
    PermanentError,
    TransientError,
    ValidationError,
)
from polygon_insight.models.results import ModelValidationError
from polygon_insight.providers.base import (
    CredentialMissingError,
    ProviderAuthError,
    ProviderEmptyError,
    ProviderError,
    ProviderMalformedError,
    ProviderTimeoutError,
    ProviderUnavailableError,
)


class TestInsightErrorBase:
    def test_default_attributes(self) -> None:
        err = InsightError("boom")
        assert err.message == "boom"
        assert err.stage == ""
        assert err.code == ""
        assert err.retryable is False
        assert err.correlation_id == ""

    def test_custom_attributes(self) -> None:
        err = InsightError(
            "fail",
            stage="provider",
            code="PROVIDER_UNAVAILABLE",
            retryable=True,
            correlation_id="req-7",
        )
        assert err.stage == "provider"
        assert err.code == "PROVIDER_UNAVAILABLE"
        assert err.retryable is True
        assert err.correlation_id == "req-7"

    def test_str_is_message(self) -> None:
        assert str(InsightError("human-readable error")) == "human-readable error"

    def test_to_error_dict_keys(self) -> None:
        d = InsightError("x", stage="s", code="C", retryable=True).to_error_dict()
        assert set(d) == {"category", "code", "stage", "message", "retryable", "correlation_id"}
        assert d["category"] == "transient"

    def test_bind_sets_correlation_id_once(self) -> None:
        err = InsightError("x")
        assert err.bind("req-1") is err
        err.bind("req-2")
        assert err.correlation_id == "req-1"
        assert err.to_error_dict()["correlation_id"] == "req-1"

    def test_bare_error_category_follows_retryable(self) -> None:
        assert InsightError("x").category == "permanent"
        assert InsightError("x", retryable=True).category == "transient"


class TestCategoryBaseClasses:
    @pytest.mark.parametrize(
        ("cls", "category", "retryable"),
        [
            (ValidationError, "validation", False),
            (TransientError, "transient", True),
            (PermanentError, "permanent", False),
            (ContractError, "contract", False),
        ],
    )
    def test_category_and_retry_default(
        self, cls: type[InsightError], category: str, retryable: bool
    ) -> None:
        err = cls("x")
        assert err.category == category
        assert err.retryable is retryable


class TestProviderErrors:
    @pytest.mark.parametrize(
        ("err", "category", "code", "retryable"),
        [
            (ProviderUnavailableError("p", "down"), "transient", "PROVIDER_UNAVAILABLE", True),
            (ProviderTimeoutError("p", "slow"), "transient", "PROVIDER_TIMEOUT", True),
            (ProviderAuthError("p", "401"), "permanent", "PROVIDER_AUTH_FAILED", False),
            (ProviderMalformedError("p", "shape"), "contract", "PROVIDER_MALFORMED", False),
            (ProviderEmptyError("p", "nothing"), "permanent", "PROVIDER_EMPTY", False),
            (CredentialMissingError("p", "google"), "validation", "CREDENTIAL_MISSING", False),
        ],
    )
    def test_classification(
        self, err: ProviderError, category: str, code: str, retryable: bool
    ) -> None:
        assert err.category == category
        assert err.code == code
        assert err.retryable is retryable
        assert err.stage == "provider"

    def test_timeout_is_unavailable(self) -> None:
        assert isinstance(ProviderTimeoutError("p", "slow"), ProviderUnavailableError)

    def test_str_includes_provider(self) -> None:
        assert str(ProviderUnavailableError("worldpop", "HTTP 503")) == "[worldpop] HTTP 503"

    def test_credential_missing_names_credential(self) -> None:
        err = CredentialMissingError("openweathermap", "openweathermap")
        assert err.credential_name == "openweathermap"
        assert "openweathermap" in err.message


class TestAllErrorsAreInsightErrors:
    @pytest.mark.parametrize(
        "err",
        [
            ConfigValidationError("KEY", 1, "bad"),
            ModelValidationError("Model", "field", -1, "must be >= 0"),
            ProviderError("p", "generic"),
        ],
    )
    def test_subclass(self, err: Exception) -> None:
        assert isinstance(err, InsightError)
        assert isinstance(err.to_error_dict(), dict)  # type: ignore[attr-defined]

    def test_model_validation_is_value_error(self) -> None:
        err = ModelValidationError("LandUseResult", "urban", 120, "must be between 0 and 100")
        assert isinstance(err, ValueError)
        assert err.code == "MODEL_VALIDATION_FAILED"
        assert err.field_name == "urban"
