"""Domain port definitions for adapters."""

from __future__ import annotations

from .loading import FeedSource, LoadTier
from .persistence import PlayerCache, VersionedStore

__all__ = [
    "FeedSource",
    "LoadTier",
    "PlayerCache",
    "VersionedStore",
]
