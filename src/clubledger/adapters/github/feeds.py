"""Plain-text directive feeds served as raw repository files."""

from __future__ import annotations

import time
from typing import TYPE_CHECKING

import httpx

from clubledger.adapters.http_resilience import ResilientClient, default_client_factory
from clubledger.domain.errors import SourceUnavailable

if TYPE_CHECKING:
    from collections.abc import Callable

    from clubledger.config.github import FeedConfig
    from clubledger.config.http_resilience import ResilienceConfig


class RawFeedFetcher:
    def __init__(
        self,
        *,
        config: FeedConfig,
        client_factory: Callable[[ResilienceConfig], ResilientClient] | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._config = config
        self._client_factory = client_factory or default_client_factory
        self._clock = clock

    @property
    def has_trophy_feed(self) -> bool:
        return self._config.trophy_url is not None

    async def fetch_balance_text(self) -> str:
        return await self._fetch(self._config.balance_url)

    async def fetch_trophy_text(self) -> str:
        if self._config.trophy_url is None:
            raise SourceUnavailable("No trophy feed configured")
        return await self._fetch(self._config.trophy_url)

    async def _fetch(self, url: str) -> str:
        # Raw hosts cache aggressively; a throwaway query parameter forces a fresh copy.
        params = {"t": str(int(self._clock() * 1000))}
        try:
            async with self._client_factory(self._config.resilience) as client:
                response = await client.get(url, params=params)
            response.raise_for_status()
        except httpx.HTTPError as exc:
            raise SourceUnavailable(f"Cannot fetch {url}: {exc}") from exc
        return response.text
