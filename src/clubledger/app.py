"""Ledger service: owns the state cell and wires loader, mutator and persister."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

from clubledger.adapters.github import GitHubContentStore, RawFeedFetcher
from clubledger.adapters.local_cache import JsonFileCache
from clubledger.config import (
    get_feed_config,
    get_github_config,
    get_ledger_config,
    get_storage_config,
)
from clubledger.config.ledger import DEFAULT_REFRESH_SECONDS
from clubledger.domain.ledger import LedgerMutator, LedgerState
from clubledger.domain.loader import (
    FallbackLoader,
    LocalCacheTier,
    RawFeedTier,
    RemoteStoreTier,
    SeedTier,
)
from clubledger.domain.persister import DurablePersister
from clubledger.domain.ranks import DEFAULT_LADDER

if TYPE_CHECKING:
    from collections.abc import Coroutine

    from clubledger.domain.ledger import DeltaOutcome, ReplaceOutcome
    from clubledger.domain.loader import LoadResult
    from clubledger.domain.model import CanonicalMap, PlayerRecord
    from clubledger.domain.ports import LoadTier, PlayerCache, VersionedStore
    from clubledger.domain.ranks import RankLadder, RankTier

log = getLogger(__name__)


@dataclass(frozen=True, slots=True)
class PlayerView:
    record: PlayerRecord
    tier: RankTier


class LedgerService:
    """Single logical owner of the canonical map.

    Refreshes are started from a timer and are never chained to the previous run,
    so a stuck fetch cannot hold back later refreshes. A refresh that completes
    after a manual mutation still replaces the map; the discarded mutations are
    logged, not replayed.
    """

    def __init__(
        self,
        *,
        loader: FallbackLoader,
        persister: DurablePersister,
        refresh_interval_seconds: float = DEFAULT_REFRESH_SECONDS,
        ladder: RankLadder = DEFAULT_LADDER,
    ) -> None:
        self.state = LedgerState()
        self.loader = loader
        self.persister = persister
        self.ladder = ladder
        self.mutator = LedgerMutator(self.state, persist=persister.persist, ladder=ladder)
        self.refresh_interval_seconds = refresh_interval_seconds
        self.last_source: str | None = None
        self._ready = False
        self._timer: asyncio.Task[None] | None = None
        self._background: set[asyncio.Task[object]] = set()

    @property
    def ready(self) -> bool:
        return self._ready

    async def start(self) -> None:
        await self.reconcile()
        self._ready = True
        self._timer = asyncio.create_task(self._refresh_timer(), name="ledger-refresh-timer")

    async def stop(self) -> None:
        tasks = [*self._background]
        if self._timer is not None:
            tasks.append(self._timer)
            self._timer = None
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        self._ready = False

    async def reconcile(self) -> LoadResult:
        started_at = self.state.generation
        result = await self.loader.load()
        discarded = self.state.generation - started_at
        if discarded:
            log.warning(
                "Refresh from %s replaced the ledger after %s concurrent change(s); "
                "those changes were discarded",
                result.source,
                discarded,
            )
        self.state.swap(result.players, refresh=True)
        self.last_source = result.source
        return result

    def spawn(self, coro: Coroutine[object, object, object], *, name: str | None = None) -> None:
        """Run ``coro`` in the background, keeping a reference until it finishes."""

        task: asyncio.Task[object] = asyncio.create_task(coro, name=name)
        self._background.add(task)
        task.add_done_callback(self._reap)

    def _reap(self, task: asyncio.Task[object]) -> None:
        self._background.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            log.error("Background task %s failed: %r", task.get_name(), exc)

    async def _refresh_timer(self) -> None:
        while True:
            await asyncio.sleep(self.refresh_interval_seconds)
            self.spawn(self.reconcile(), name="ledger-refresh")

    def players(self) -> CanonicalMap:
        return self.state.players

    def lookup(self, username: str) -> PlayerView | None:
        record = self.state.players.get(username)
        if record is None:
            return None
        return PlayerView(record=record, tier=self.ladder.classify(record.balance))

    async def apply_delta(self, username: str, delta: int) -> DeltaOutcome:
        return await self.mutator.apply_delta(username, delta)

    async def replace_all(self, entries: object) -> ReplaceOutcome:
        return await self.mutator.replace_all(entries)

    async def reset_balances(self) -> ReplaceOutcome:
        return await self.mutator.reset_balances()


def build_tiers(
    *,
    cache: PlayerCache,
    remote: VersionedStore | None = None,
    feeds: RawFeedFetcher | None = None,
) -> list[LoadTier]:
    tiers: list[LoadTier] = []
    if remote is not None:
        tiers.append(RemoteStoreTier(remote))
    if feeds is not None:
        tiers.append(RawFeedTier(feeds))
    tiers.append(LocalCacheTier(cache))
    return tiers


def build_service() -> LedgerService:
    """Assemble a service from environment configuration."""

    storage = get_storage_config()
    cache = JsonFileCache(storage.cache_path())

    github_config = get_github_config()
    remote = GitHubContentStore(config=github_config) if github_config else None
    feed_config = get_feed_config()
    feeds = RawFeedFetcher(config=feed_config) if feed_config else None

    if remote is not None and github_config is not None:
        log.info(
            "Remote store enabled: %s/%s (branch %s)",
            github_config.repo,
            github_config.file_path,
            github_config.branch,
        )

    loader = FallbackLoader(
        build_tiers(cache=cache, remote=remote, feeds=feeds),
        cache=cache,
        seed=SeedTier(),
    )
    return LedgerService(
        loader=loader,
        persister=DurablePersister(cache, remote),
        refresh_interval_seconds=get_ledger_config().refresh_interval_seconds,
    )
