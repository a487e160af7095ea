"""Source chain: ordered provider fallback ending in an estimator.

A ``SourceChain`` serves one category. Providers are tried strictly one
after another: the next provider starts only once the previous one has
failed or run out of time. When every provider has failed (or the
caller's cancel event fires) the category estimator produces the result,
so ``run`` always returns a ``ChainOutcome`` and never raises for
data-availability reasons.

Failure handling per provider:
- Missing credential → ``SKIPPED`` attempt, no network call.
- Timeout, HTTP or transport error → ``FAILED`` (unavailable).
- Unexpected payload shape or invalid model values → ``FAILED`` (malformed).
- Cancel event set → ``SKIPPED`` with code ``CANCELLED`` for the
  in-flight provider and every provider after it.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import TYPE_CHECKING

import httpx

from polygon_insight.analysis.estimators import ESTIMATORS
from polygon_insight.core.exceptions import InsightError
from polygon_insight.models.report import AttemptOutcome, ChainAttempt, ChainOutcome
from polygon_insight.providers.base import (
    CredentialMissingError,
    ProviderError,
    ProviderMalformedError,
    ProviderTimeoutError,
    ProviderUnavailableError,
)

if TYPE_CHECKING:
    import random
    from collections.abc import Callable, Sequence

    from polygon_insight.core.config import Credentials
    from polygon_insight.models.geometry import PolygonMetrics
    from polygon_insight.models.provider import ProviderRequest
    from polygon_insight.models.results import CategoryResult
    from polygon_insight.providers.base import DataProvider

    Estimator = Callable[[PolygonMetrics, random.Random], CategoryResult]

logger = logging.getLogger("polygon_insight.orchestrators.chain")

ESTIMATOR_STEP = "estimator"
CANCELLED_CODE = "CANCELLED"


class _ChainCancelled(Exception):
    """The caller's cancel event fired while a provider call was pending."""


def classify_failure(provider: str, exc: BaseException) -> ProviderError:
    """Map any exception raised by a provider onto the provider taxonomy.

    ``ProviderError`` instances pass through unchanged. Timeouts and
    ``httpx`` errors count as unavailable; ``KeyError``, ``TypeError``,
    ``ValueError`` and ``IndexError`` (model validation included) count
    as malformed. Anything else is wrapped in a plain ``ProviderError``.
    """
    if isinstance(exc, ProviderError):
        return exc
    if isinstance(exc, TimeoutError):
        return ProviderTimeoutError(provider, f"Timed out: {exc}")
    if isinstance(exc, httpx.HTTPError):
        return ProviderUnavailableError(provider, f"{type(exc).__name__}: {exc}")
    if isinstance(exc, (KeyError, TypeError, ValueError, IndexError)):
        return ProviderMalformedError(provider, f"{type(exc).__name__}: {exc}")
    return ProviderError(provider, f"Unexpected {type(exc).__name__}: {exc}")


class SourceChain:
    """Prioritised providers for one category, terminated by an estimator.

    Args:
        category: Category served (``"population"``, ``"land_use"``, ...).
        providers: Providers in priority order (may be empty).
        timeout_s: Per-provider call budget in seconds.
        rng: Random source for the estimator; one per chain.
        estimator: Override for the category estimator.
        correlation_id: Stamped on every error the chain records.
    """

    def __init__(
        self,
        category: str,
        providers: Sequence[DataProvider],
        *,
        timeout_s: float,
        rng: random.Random,
        estimator: Estimator | None = None,
        correlation_id: str = "",
    ) -> None:
        self.category = category
        self.providers = list(providers)
        self.timeout_s = timeout_s
        self._rng = rng
        self._estimator = estimator or ESTIMATORS[category]
        self.correlation_id = correlation_id

    async def run(
        self,
        request: ProviderRequest,
        credentials: Credentials,
        cancel: asyncio.Event | None = None,
    ) -> ChainOutcome:
        """Try each provider in order; fall back to the estimator on exhaustion."""
        attempts: list[ChainAttempt] = []

        for index, provider in enumerate(self.providers):
            if cancel is not None and cancel.is_set():
                attempts.extend(self._cancelled(self.providers[index:]))
                break

            credential = None
            if provider.credential_name is not None:
                credential = credentials.get(provider.credential_name)
                if credential is None:
                    missing = CredentialMissingError(provider.name, provider.credential_name)
                    missing.bind(self.correlation_id)
                    logger.debug(
                        "Provider skipped | category=%s | provider=%s | reason=%s",
                        self.category,
                        provider.name,
                        missing.code,
                    )
                    attempts.append(
                        ChainAttempt.from_error(provider.name, AttemptOutcome.SKIPPED, missing)
                    )
                    continue

            started = time.perf_counter()
            try:
                result = await self._call(provider, request, credential, cancel)
                _check_provenance(provider, result)
            except _ChainCancelled:
                attempts.extend(
                    self._cancelled(self.providers[index:], time.perf_counter() - started)
                )
                break
            except Exception as exc:
                error = classify_failure(provider.name, exc)
                error.bind(self.correlation_id)
                elapsed = time.perf_counter() - started
                logger.warning(
                    "Provider failed | category=%s | provider=%s | code=%s | retryable=%s"
                    " | duration=%.3fs | correlation_id=%s | error=%s",
                    self.category,
                    provider.name,
                    error.code,
                    error.retryable,
                    elapsed,
                    self.correlation_id,
                    error.message,
                )
                attempts.append(
                    ChainAttempt.from_error(
                        provider.name, AttemptOutcome.FAILED, error, duration_s=elapsed
                    )
                )
                continue

            elapsed = time.perf_counter() - started
            logger.debug(
                "Provider succeeded | category=%s | provider=%s | duration=%.3fs",
                self.category,
                provider.name,
                elapsed,
            )
            attempts.append(
                ChainAttempt(
                    provider=provider.name,
                    outcome=AttemptOutcome.SUCCESS,
                    duration_s=elapsed,
                )
            )
            return ChainOutcome(self.category, result, tuple(attempts))

        return self._fallback(request.metrics, attempts)

    def _fallback(self, metrics: PolygonMetrics, attempts: list[ChainAttempt]) -> ChainOutcome:
        started = time.perf_counter()
        result = self._estimator(metrics, self._rng)
        attempts.append(
            ChainAttempt(
                provider=ESTIMATOR_STEP,
                outcome=AttemptOutcome.ESTIMATED,
                duration_s=time.perf_counter() - started,
            )
        )
        logger.info(
            "Estimator fallback | category=%s | providers_tried=%d | source=%s",
            self.category,
            len(attempts) - 1,
            result.data_source,
        )
        return ChainOutcome(self.category, result, tuple(attempts))

    async def _call(
        self,
        provider: DataProvider,
        request: ProviderRequest,
        credential: str | None,
        cancel: asyncio.Event | None,
    ) -> CategoryResult:
        """Run one ``fetch`` bounded by the timeout and the cancel event.

        Raises:
            ProviderTimeoutError: If the call exceeds ``timeout_s``.
            _ChainCancelled: If *cancel* fires first.
        """
        fetch = asyncio.ensure_future(provider.fetch(request, credential))
        waiters: set[asyncio.Future[object]] = {fetch}
        cancel_wait = None
        if cancel is not None:
            cancel_wait = asyncio.ensure_future(cancel.wait())
            waiters.add(cancel_wait)

        try:
            done, _ = await asyncio.wait(
                waiters,
                timeout=self.timeout_s,
                return_when=asyncio.FIRST_COMPLETED,
            )
        finally:
            pending = [w for w in waiters if not w.done()]
            for waiter in pending:
                waiter.cancel()
            if pending:
                await asyncio.gather(*pending, return_exceptions=True)

        if fetch in done:
            return fetch.result()
        if cancel_wait is not None and cancel_wait in done:
            raise _ChainCancelled
        msg = f"No response within {self.timeout_s:g}s"
        raise ProviderTimeoutError(provider.name, msg)

    def _cancelled(
        self, providers: Sequence[DataProvider], duration_s: float = 0.0
    ) -> list[ChainAttempt]:
        """``SKIPPED``/``CANCELLED`` attempts; only the first carries the elapsed time."""
        attempts = []
        for i, provider in enumerate(providers):
            error = InsightError(
                "Aggregation cancelled",
                stage="chain",
                code=CANCELLED_CODE,
                correlation_id=self.correlation_id,
            )
            attempts.append(
                ChainAttempt.from_error(
                    provider.name,
                    AttemptOutcome.SKIPPED,
                    error,
                    duration_s=duration_s if i == 0 else 0.0,
                )
            )
        return attempts


def _check_provenance(provider: DataProvider, result: CategoryResult) -> None:
    if not result.data_source or result.is_estimate:
        msg = f"Result carries invalid provenance {result.data_source!r}"
        raise ProviderMalformedError(provider.name, msg)
