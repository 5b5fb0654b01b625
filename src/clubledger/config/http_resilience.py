"""Retry, rate-limit and timeout settings for the outbound HTTP clients."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

import httpx
from httpx_retries import Retry

if TYPE_CHECKING:
    from collections.abc import Mapping

ResponseHook = Callable[[httpx.Response], Awaitable[None]]

TRANSIENT_STATUSES = frozenset({429, 500, 502, 503, 504})


@dataclass(slots=True, frozen=True)
class RetryPolicy:
    """How often a single request is retried before the caller sees the failure.

    Only idempotent reads are retried. A contents-API PUT that timed out may
    already have been committed, and replaying it with the old SHA would turn a
    success into a conflict.
    """

    attempts: int = 3
    backoff_factor: float = 0.5
    max_backoff_wait: float = 10.0
    methods: frozenset[str] = frozenset({"GET", "HEAD"})
    statuses: frozenset[int] = TRANSIENT_STATUSES

    def build(self) -> Retry:
        return Retry(
            total=self.attempts,
            backoff_factor=self.backoff_factor,
            max_backoff_wait=self.max_backoff_wait,
            respect_retry_after_header=True,
            allowed_methods=tuple(self.methods),
            status_forcelist=tuple(self.statuses),
            retry_on_exceptions=(httpx.TimeoutException, httpx.NetworkError),
        )


@dataclass(slots=True, frozen=True)
class RateLimit:
    max_calls: int
    per_seconds: float


@dataclass(slots=True, frozen=True)
class ResilienceConfig:
    name: str
    base_url: str | None = None
    timeout_seconds: float = 15.0
    retry: RetryPolicy = field(default_factory=RetryPolicy)
    ratelimit: RateLimit | None = None
    response_hooks: tuple[ResponseHook, ...] = ()
    default_headers: Mapping[str, str] | None = None
