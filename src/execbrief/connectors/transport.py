"""
Retrying transport — the single choke point for every outbound HTTP call.

Wraps one shared ``httpx.AsyncClient`` with tenacity-driven retries and
exponential backoff. Callers get back either an ``httpx.Response`` or a
``RequestFailed`` sentinel; the transport never raises, because every
downstream stage treats "no data" as a normal outcome for an unreliable
provider.

Default policy: 3 attempts, 2s then 4s between them, 10s connect timeout
and a 30s cap on each attempt.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any

import httpx
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    RetryError,
    retry_if_exception_type,
    retry_if_result,
    stop_after_attempt,
    wait_exponential,
)

logger = logging.getLogger("execbrief.connectors.transport")

_RETRY_STATUSES = frozenset({429, 500, 502, 503, 504})


@dataclass(frozen=True)
class RetryPolicy:
    """Retry and timeout settings applied to every attempt."""

    max_attempts: int = 3
    base_delay: float = 2.0
    backoff_multiplier: float = 2.0
    connect_timeout: float = 10.0
    total_timeout: float = 30.0
    retry_statuses: frozenset[int] = _RETRY_STATUSES


@dataclass
class RetryableRequest:
    """Descriptor for one outbound call. Built fresh for every call."""

    method: str
    url: str
    params: dict[str, Any] | None = None
    json: Any = None
    headers: dict[str, str] | None = None
    auth: tuple[str, str] | None = None
    policy: RetryPolicy | None = None


@dataclass
class RequestFailed:
    """Sentinel returned when a request could not be completed."""

    method: str
    url: str
    attempts: int
    reason: str
    status_code: int | None = None

    def __bool__(self) -> bool:
        return False


class _AttemptTimeout(Exception):
    """An attempt ran past the policy's total timeout."""


@dataclass
class RetryingTransport:
    """Execute requests with bounded retries and exponential delay.

    Usage::

        transport = RetryingTransport()
        result = await transport.execute(RetryableRequest("GET", url))
        if isinstance(result, RequestFailed):
            ...  # treat as "no data"
        await transport.close()

    ``sleep`` is injectable so tests can record the backoff schedule
    without waiting for it.
    """

    policy: RetryPolicy = field(default_factory=RetryPolicy)
    sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep
    client: httpx.AsyncClient | None = None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the shared httpx client."""
        if self.client is None or self.client.is_closed:
            self.client = httpx.AsyncClient(
                timeout=httpx.Timeout(
                    self.policy.total_timeout,
                    connect=self.policy.connect_timeout,
                ),
            )
        return self.client

    async def close(self) -> None:
        """Close the shared HTTP client."""
        if self.client and not self.client.is_closed:
            await self.client.aclose()

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------

    async def execute(self, request: RetryableRequest) -> httpx.Response | RequestFailed:
        """Send ``request``, retrying transient failures.

        Returns the response for anything that is not retryable (including
        4xx such as 401, which callers interpret themselves), or a
        ``RequestFailed`` once attempts are exhausted.
        """
        policy = request.policy or self.policy
        retrying = AsyncRetrying(
            sleep=self.sleep,
            stop=stop_after_attempt(policy.max_attempts),
            wait=wait_exponential(
                multiplier=policy.base_delay,
                exp_base=policy.backoff_multiplier,
            ),
            retry=(
                retry_if_exception_type((httpx.TransportError, _AttemptTimeout))
                | retry_if_result(lambda resp: resp.status_code in policy.retry_statuses)
            ),
            before_sleep=self._log_retry(policy),
        )

        try:
            return await retrying(self._attempt, request, policy)
        except RetryError as e:
            last = e.last_attempt
            if last.failed:
                exc = last.exception()
                reason = str(exc) or type(exc).__name__
                status = None
            else:
                resp = last.result()
                reason = f"HTTP {resp.status_code}"
                status = resp.status_code
            logger.warning(
                "%s %s failed after %d attempts: %s",
                request.method, _redact(request.url), last.attempt_number, reason,
            )
            return RequestFailed(
                method=request.method,
                url=request.url,
                attempts=last.attempt_number,
                reason=reason,
                status_code=status,
            )
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.warning("%s %s failed: %s", request.method, _redact(request.url), e)
            return RequestFailed(
                method=request.method,
                url=request.url,
                attempts=1,
                reason=str(e) or type(e).__name__,
            )

    async def _attempt(self, request: RetryableRequest, policy: RetryPolicy) -> httpx.Response:
        client = await self._get_client()
        try:
            return await asyncio.wait_for(
                client.request(
                    request.method,
                    request.url,
                    params=request.params,
                    json=request.json,
                    headers=request.headers,
                    auth=request.auth,
                ),
                timeout=policy.total_timeout,
            )
        except asyncio.TimeoutError as e:
            raise _AttemptTimeout(f"no response within {policy.total_timeout:g}s") from e

    @staticmethod
    def _log_retry(policy: RetryPolicy) -> Callable[[RetryCallState], None]:
        def before_sleep(state: RetryCallState) -> None:
            delay = state.next_action.sleep if state.next_action else 0
            logger.warning(
                "Retry %d/%d after %gs...",
                state.attempt_number, policy.max_attempts, delay,
            )

        return before_sleep


def _redact(url: str) -> str:
    """Drop the query string from a URL before logging it."""
    return url.split("?", 1)[0]
