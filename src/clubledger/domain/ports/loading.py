"""Ports for acquiring player data."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from clubledger.domain.model import CanonicalMap


@runtime_checkable
class LoadTier(Protocol):
    """One candidate source in the fallback chain.

    ``load`` raises ``SourceUnavailable`` (or any other exception) when the tier
    cannot produce a map. ``propagate`` tells the loader whether a successful result
    should be copied into the local cache.
    """

    name: str
    propagate: bool

    async def load(self) -> CanonicalMap: ...


@runtime_checkable
class FeedSource(Protocol):
    """Plain-text directive feeds."""

    @property
    def has_trophy_feed(self) -> bool: ...

    async def fetch_balance_text(self) -> str: ...

    async def fetch_trophy_text(self) -> str: ...


__all__ = ["FeedSource", "LoadTier"]
