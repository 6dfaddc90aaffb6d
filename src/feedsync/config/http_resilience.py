"""Settings for the retrying HTTP client used by remote adapters."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

import httpx

if TYPE_CHECKING:
    from collections.abc import Mapping

type ResponseHook = Callable[[httpx.Response], Awaitable[None] | None]

TRANSIENT_STATUSES = frozenset({429, 502, 503, 504})


class RetryablePayloadError(httpx.HTTPError):
    """A 200 response whose body says "try again later" (e.g. a throttled GraphQL call)."""

    def __init__(self, message: str, *, response: httpx.Response) -> None:
        super().__init__(message)
        self.response = response


@dataclass(slots=True, frozen=True)
class RetryPolicy:
    """Transport-level retries; business-level retries live in ``RetryingCatalog``."""

    total: int = 4
    backoff_factor: float = 0.5
    backoff_jitter: float = 1.0
    max_backoff_wait: float = 60.0
    retry_statuses: frozenset[int] = TRANSIENT_STATUSES
    retry_on_exceptions: tuple[type[httpx.HTTPError], ...] = (
        httpx.TimeoutException,
        httpx.NetworkError,
        httpx.RemoteProtocolError,
    )


@dataclass(slots=True, frozen=True)
class RateLimit:
    max_calls: int
    per_seconds: float


@dataclass(slots=True, frozen=True)
class ResilienceConfig:
    name: str
    base_url: str | None = None
    timeout_seconds: float = 30.0
    retry: RetryPolicy = field(default_factory=RetryPolicy)
    ratelimit: RateLimit | None = None
    response_hooks: tuple[ResponseHook, ...] = ()
    default_headers: Mapping[str, str] | None = None
