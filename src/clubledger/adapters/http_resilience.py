from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

import httpx
from aiolimiter import AsyncLimiter
from httpx_retries import RetryTransport

from clubledger.config.http_resilience import RateLimit, ResilienceConfig, RetryPolicy

if TYPE_CHECKING:
    from collections.abc import Mapping
    from types import TracebackType

__all__ = [
    "RateLimit",
    "ResilienceConfig",
    "ResilientClient",
    "RetryPolicy",
    "default_client_factory",
    "shared_limiter",
]

log = getLogger(__name__)

_limiters: dict[str, AsyncLimiter] = {}


def shared_limiter(config: ResilienceConfig) -> AsyncLimiter | None:
    """Return the limiter for ``config.name``; the limit spans every client of that name."""

    if config.ratelimit is None:
        return None
    limiter = _limiters.get(config.name)
    if limiter is None:
        limiter = AsyncLimiter(config.ratelimit.max_calls, config.ratelimit.per_seconds)
        _limiters[config.name] = limiter
    return limiter


class ResilientClient:
    """Short-lived ``httpx.AsyncClient`` for one store or feed operation.

    Requests go through a retrying transport and, when configured, the
    client-side rate limit shared by all clients with the same ``config.name``.
    Passing ``transport`` replaces the retrying transport entirely.
    """

    def __init__(
        self,
        config: ResilienceConfig,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.config = config
        self._limiter = shared_limiter(config)
        self._client = httpx.AsyncClient(
            base_url=config.base_url or "",
            timeout=config.timeout_seconds,
            headers=dict(config.default_headers or {}),
            transport=transport or RetryTransport(retry=config.retry.build()),
            event_hooks={"response": [self._log_response, *config.response_hooks]},
        )

    async def __aenter__(self) -> ResilientClient:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def get(self, url: str, *, params: Mapping[str, str] | None = None) -> httpx.Response:
        return await self.request("GET", url, params=params)

    async def put(self, url: str, *, json: object) -> httpx.Response:
        return await self.request("PUT", url, json=json)

    async def request(
        self,
        method: str,
        url: str,
        *,
        params: Mapping[str, str] | None = None,
        json: object = None,
    ) -> httpx.Response:
        if self._limiter is None:
            return await self._client.request(method, url, params=params, json=json)
        async with self._limiter:
            return await self._client.request(method, url, params=params, json=json)

    async def _log_response(self, response: httpx.Response) -> None:
        request = response.request
        log.debug(
            "%s %s %s%s -> %s",
            self.config.name,
            request.method,
            request.url.host,
            request.url.path,
            response.status_code,
        )


def default_client_factory(config: ResilienceConfig) -> ResilientClient:
    return ResilientClient(config)
