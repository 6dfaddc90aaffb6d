"""Retrying, rate-limited async client for JSON-over-HTTP endpoints."""

from __future__ import annotations

from typing import TYPE_CHECKING

import httpx
from aiolimiter import AsyncLimiter
from httpx_retries import Retry, RetryTransport

from feedsync.config.http_resilience import (
    RateLimit,
    ResilienceConfig,
    RetryablePayloadError,
    RetryPolicy,
)

if TYPE_CHECKING:
    from types import TracebackType

__all__ = [
    "RateLimit",
    "ResilienceConfig",
    "ResilientClient",
    "RetryPolicy",
    "RetryablePayloadError",
    "retry_for",
]


def retry_for(policy: RetryPolicy) -> Retry:
    return Retry(
        total=policy.total,
        backoff_factor=policy.backoff_factor,
        backoff_jitter=policy.backoff_jitter,
        max_backoff_wait=policy.max_backoff_wait,
        respect_retry_after_header=True,
        allowed_methods=("POST",),
        status_forcelist=tuple(sorted(policy.retry_statuses)),
        retry_on_exceptions=policy.retry_on_exceptions,
    )


class ResilientClient:
    """``httpx.AsyncClient`` with transport retries below and a call budget above.

    Response hooks from the config run after the retry transport has given up or
    succeeded, so a hook raising :class:`RetryablePayloadError` surfaces to the caller.
    """

    def __init__(self, config: ResilienceConfig) -> None:
        self.config = config
        budget = config.ratelimit
        self._limiter = AsyncLimiter(budget.max_calls, budget.per_seconds) if budget else None
        self._client = httpx.AsyncClient(
            timeout=config.timeout_seconds,
            headers=dict(config.default_headers or {}),
            event_hooks={"response": list(config.response_hooks)},
            transport=RetryTransport(retry=retry_for(config.retry)),
        )

    async def __aenter__(self) -> ResilientClient:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self._client.aclose()

    async def post_json(self, payload: object, *, url: str | None = None) -> httpx.Response:
        """POST ``payload`` to ``url`` (default: the configured endpoint)."""

        target = url or self.config.base_url
        if target is None:
            raise ValueError(f"{self.config.name}: no endpoint configured")
        if self._limiter is None:
            return await self._client.post(target, json=payload)
        async with self._limiter:
            return await self._client.post(target, json=payload)
