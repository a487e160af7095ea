"""DataProvider abstract base class.

Defines the contract every data provider adapter must implement. The
source chain interacts exclusively with this interface: it never knows
which concrete service is behind a provider, only its registry name,
category and whether it needs a credential.

Lifecycle:
    1. The chain checks ``credential_name``; a missing token short-circuits
       with ``CredentialMissingError`` before any network call.
    2. ``fetch(request, credential)`` queries the service and returns a
       well-formed ``CategoryResult`` or raises a ``ProviderError``.

Shared HTTP plumbing (``_get_json`` / ``_post_json``) maps transport and
status failures to ``ProviderUnavailableError`` and undecodable bodies to
``ProviderMalformedError`` so adapters only deal with payload shape.
"""

from __future__ import annotations

import abc
import logging
from typing import TYPE_CHECKING, Any, ClassVar

import httpx

from polygon_insight.core.exceptions import (
    ContractError,
    InsightError,
    PermanentError,
    TransientError,
    ValidationError,
)

if TYPE_CHECKING:
    from polygon_insight.models.provider import ProviderConfig, ProviderRequest
    from polygon_insight.models.results import CategoryResult

logger = logging.getLogger("polygon_insight.providers.base")


class DataProvider(abc.ABC):
    """Abstract base class for category data providers.

    Subclasses set the class attributes and implement ``fetch``. The
    constructor receives a ``ProviderConfig`` and the ``httpx.AsyncClient``
    shared by the whole aggregate call.

    Class attributes:
        category: Category this provider serves (``"population"``, ...).
        credential_name: Key in ``Credentials`` this provider needs, or ``None``.
        default_base_url: Endpoint used when the config has no override.
        data_source: Provenance tag stamped on successful results.
    """

    category: ClassVar[str]
    credential_name: ClassVar[str | None] = None
    default_base_url: ClassVar[str] = ""
    data_source: ClassVar[str] = ""

    def __init__(self, config: ProviderConfig, client: httpx.AsyncClient) -> None:
        self._config = config
        self._client = client

    @property
    def name(self) -> str:
        """Return the provider name from configuration."""
        return self._config.name

    @property
    def config(self) -> ProviderConfig:
        """Return the provider configuration (read-only)."""
        return self._config

    @property
    def base_url(self) -> str:
        return self._config.api_base_url or self.default_base_url

    @property
    def requires_credential(self) -> bool:
        return self.credential_name is not None

    # ------------------------------------------------------------------
    # Abstract method: every adapter must implement this
    # ------------------------------------------------------------------

    @abc.abstractmethod
    async def fetch(self, request: ProviderRequest, credential: str | None) -> CategoryResult:
        """Query the provider for *request*'s polygon.

        Args:
            request: Polygon inputs (ring, metrics, GeoJSON).
            credential: The token named by ``credential_name``, already
                checked to be present when the provider requires one.

        Returns:
            A well-formed result tagged with this provider's ``data_source``.

        Raises:
            ProviderError: On transport, status, shape or empty-payload failures.
        """

    # ------------------------------------------------------------------
    # HTTP helpers
    # ------------------------------------------------------------------

    async def _get_json(self, url: str, *, params: dict[str, Any] | None = None) -> Any:
        return await self._request_json("GET", url, params=params)

    async def _post_json(
        self,
        url: str,
        *,
        data: dict[str, str] | str | None = None,
        headers: dict[str, str] | None = None,
    ) -> Any:
        return await self._request_json("POST", url, data=data, headers=headers)

    async def _request_json(self, method: str, url: str, **kwargs: Any) -> Any:
        """Perform a request and decode its JSON body.

        Raises:
            ProviderAuthError: On HTTP 401/403.
            ProviderUnavailableError: On transport errors, timeouts or any
                other HTTP status >= 400.
            ProviderMalformedError: If the body is not JSON.
        """
        if isinstance(kwargs.get("data"), str):
            kwargs["content"] = kwargs.pop("data")
        try:
            response = await self._client.request(method, url, **kwargs)
        except httpx.TimeoutException as exc:
            raise ProviderTimeoutError(self.name, f"Request timed out: {exc}") from exc
        except httpx.HTTPError as exc:
            raise ProviderUnavailableError(self.name, f"Request failed: {exc}") from exc

        logger.debug(
            "Provider response | provider=%s | method=%s | host=%s | status=%d",
            self.name,
            method,
            response.url.host,
            response.status_code,
        )

        if response.status_code in (401, 403):
            msg = f"HTTP {response.status_code} from {response.url.host}"
            raise ProviderAuthError(self.name, msg)
        if response.status_code >= 400:
            msg = f"HTTP {response.status_code} from {response.url.host}"
            raise ProviderUnavailableError(self.name, msg)

        try:
            return response.json()
        except ValueError as exc:
            msg = f"Response body is not JSON: {exc}"
            raise ProviderMalformedError(self.name, msg) from exc

    def _malformed(self, message: str) -> ProviderMalformedError:
        return ProviderMalformedError(self.name, message)

    def _empty(self, message: str) -> ProviderEmptyError:
        return ProviderEmptyError(self.name, message)


# ---------------------------------------------------------------------------
# Provider exceptions
# ---------------------------------------------------------------------------


class ProviderError(InsightError):
    """Base exception for provider adapter errors.

    Attributes:
        provider: Name of the provider that raised the error.
        message: Human-readable error description.
        retryable: Whether a later attempt could succeed.
    """

    default_stage = "provider"
    default_code = "PROVIDER_ERROR"

    def __init__(
        self,
        provider: str,
        message: str,
        *,
        retryable: bool | None = None,
    ) -> None:
        self.provider = provider
        super().__init__(
            message,
            retryable=retryable,
            code=self.default_code,
            stage=self.default_stage,
        )

    def __str__(self) -> str:
        return f"[{self.provider}] {self.message}"


class ProviderUnavailableError(ProviderError, TransientError):
    """Network, timeout or HTTP failure. The chain advances."""

    default_code = "PROVIDER_UNAVAILABLE"


class ProviderTimeoutError(ProviderUnavailableError):
    """The call exceeded its time budget."""

    default_code = "PROVIDER_TIMEOUT"


class ProviderAuthError(ProviderError, PermanentError):
    """The provider rejected the supplied credential."""

    default_code = "PROVIDER_AUTH_FAILED"


class ProviderMalformedError(ProviderError, ContractError):
    """The response did not have the expected shape."""

    default_code = "PROVIDER_MALFORMED"


class ProviderEmptyError(ProviderError, PermanentError):
    """Well-formed response with nothing usable in it (e.g. zero elements)."""

    default_code = "PROVIDER_EMPTY"


class CredentialMissingError(ProviderError, ValidationError):
    """The provider needs a credential that was not supplied."""

    default_code = "CREDENTIAL_MISSING"

    def __init__(self, provider: str, credential_name: str) -> None:
        self.credential_name = credential_name
        super().__init__(provider, f"Missing credential {credential_name!r}")
