"""Prioritised fallback chain that produces the canonical map.

Tiers are tried strictly in order; the first one that returns a map wins and the
others are not consulted. Results are never merged across tiers. The seed tier
closes the chain and cannot fail, so every pass ends with a usable map.
"""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

from .codec import parse_canonical_json
from .directives import Grammar, parse_directives
from .errors import PersistenceFailure, SourceAbsent, SourceUnavailable, ValidationError
from .merge import ParsedSource, SourceKind, merge_sources
from .seed import seed_players

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from .model import CanonicalMap
    from .ports import FeedSource, LoadTier, PlayerCache, VersionedStore

log = getLogger(__name__)


@dataclass(frozen=True, slots=True)
class LoadResult:
    players: CanonicalMap
    source: str


class RemoteStoreTier:
    """Remote versioned store; a successful read also refreshes the store's token."""

    propagate = True

    def __init__(self, store: VersionedStore) -> None:
        self.store = store
        self.name = f"remote-store:{store.label}"

    async def load(self) -> CanonicalMap:
        snapshot = await self.store.read()
        try:
            return parse_canonical_json(snapshot.content)
        except ValidationError as exc:
            raise SourceUnavailable(f"Remote store content is not a player list: {exc}") from exc


class RawFeedTier:
    """Balance feed (mandatory) merged with the trophy feed (optional)."""

    name = "raw-feeds"
    propagate = True

    def __init__(self, feeds: FeedSource) -> None:
        self.feeds = feeds

    async def load(self) -> CanonicalMap:
        balance_text = await self.feeds.fetch_balance_text()
        balances = parse_directives(balance_text, Grammar.BALANCE)
        sources = [ParsedSource(SourceKind.BALANCE, balances)]

        if self.feeds.has_trophy_feed:
            try:
                trophy_text = await self.feeds.fetch_trophy_text()
            except Exception as exc:  # noqa: BLE001
                log.warning("Trophy feed unavailable, using balances only: %s", exc)
            else:
                sources.append(
                    ParsedSource(SourceKind.TROPHY, parse_directives(trophy_text, Grammar.TROPHY))
                )

        return merge_sources(sources)


class LocalCacheTier:
    name = "local-cache"
    propagate = False

    def __init__(self, cache: PlayerCache) -> None:
        self.cache = cache

    async def load(self) -> CanonicalMap:
        return self.cache.read()


class SeedTier:
    name = "seed"
    propagate = True

    def __init__(self, factory: Callable[[], CanonicalMap] = seed_players) -> None:
        self.factory = factory

    async def load(self) -> CanonicalMap:
        return self.factory()


class FallbackLoader:
    def __init__(
        self,
        tiers: Sequence[LoadTier],
        *,
        cache: PlayerCache,
        seed: SeedTier | None = None,
    ) -> None:
        self.tiers = tuple(tiers)
        self.cache = cache
        self.seed = seed or SeedTier()

    async def load(self) -> LoadResult:
        for tier in self.tiers:
            try:
                players = await tier.load()
            except SourceAbsent as exc:
                log.info("Tier %s has no data yet: %s", tier.name, exc)
                continue
            except SourceUnavailable as exc:
                log.warning("Tier %s unavailable: %s", tier.name, exc)
                continue
            except Exception as exc:  # noqa: BLE001
                log.warning("Tier %s failed: %s: %s", tier.name, type(exc).__name__, exc)
                continue
            return self._accept(tier, players)

        log.warning("All data sources failed; falling back to built-in seed players")
        return self._accept(self.seed, await self.seed.load())

    def _accept(self, tier: LoadTier, players: CanonicalMap) -> LoadResult:
        log.info("Loaded %s players from %s", len(players), tier.name)
        if tier.propagate:
            try:
                self.cache.write(players)
            except PersistenceFailure as exc:
                log.error("Could not copy %s result into the local cache: %s", tier.name, exc)
        return LoadResult(players=players, source=tier.name)
