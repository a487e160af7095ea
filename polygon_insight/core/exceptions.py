"""Error taxonomy shared by the geometry, provider, config and model layers.

Every error raised on purpose inside the package is an ``InsightError``.
The category base a subclass derives from decides how a failed attempt is
reported:

================  =========  ==========================================
Base              Retryable  Typical cause
================  =========  ==========================================
TransientError    yes        connection failure, HTTP 5xx, timeout
PermanentError    no         empty payload, rejected credential
ValidationError   no         missing credential, bad setting, bad model
ContractError     no         response body of the wrong shape
================  =========  ==========================================

The source chain stores ``to_error_dict()`` on each failed ``ChainAttempt``
after stamping the error with the aggregate call's correlation id.
"""

from __future__ import annotations

from typing import ClassVar


class InsightError(Exception):
    """Base for every polygon-insight error.

    Attributes:
        message: Human-readable description.
        stage: Layer that raised (``"provider"``, ``"config"``, ...).
        code: Stable machine-readable code such as ``"PROVIDER_EMPTY"``.
        retryable: True when repeating the same call might succeed.
        correlation_id: Id of the aggregate call the error belongs to.
    """

    default_stage: ClassVar[str] = ""
    default_code: ClassVar[str] = ""
    default_retryable: ClassVar[bool] = False
    #: Fixed category for a family; empty means "derive from retryable".
    error_category: ClassVar[str] = ""

    def __init__(
        self,
        message: str = "",
        *,
        stage: str = "",
        code: str = "",
        retryable: bool | None = None,
        correlation_id: str = "",
    ) -> None:
        self.message = message
        self.stage = stage or self.default_stage
        self.code = code or self.default_code
        self.retryable = self.default_retryable if retryable is None else retryable
        self.correlation_id = correlation_id
        super().__init__(message)

    @property
    def category(self) -> str:
        if self.error_category:
            return self.error_category
        return "transient" if self.retryable else "permanent"

    def bind(self, correlation_id: str) -> InsightError:
        """Attach *correlation_id* unless the error already carries one."""
        if not self.correlation_id:
            self.correlation_id = correlation_id
        return self

    def to_error_dict(self) -> dict[str, object]:
        return {
            "category": self.category,
            "code": self.code,
            "stage": self.stage,
            "message": self.message,
            "retryable": self.retryable,
            "correlation_id": self.correlation_id,
        }


# ---------------------------------------------------------------------------
# Category bases
# ---------------------------------------------------------------------------


class ValidationError(InsightError):
    """Bad input: a missing credential, a setting or a model field."""

    error_category = "validation"


class TransientError(InsightError):
    """May succeed if tried again later."""

    error_category = "transient"
    default_retryable = True


class PermanentError(InsightError):
    """Will fail the same way for this request."""

    error_category = "permanent"


class ContractError(InsightError):
    """An external service answered with an unexpected shape."""

    error_category = "contract"
