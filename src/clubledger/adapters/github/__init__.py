"""Public interface for the GitHub adapter."""

from __future__ import annotations

from .feeds import RawFeedFetcher
from .schema import ContentsFile, WriteResponse
from .store import GitHubContentStore, RemoteStoreError

__all__ = [
    "ContentsFile",
    "GitHubContentStore",
    "RawFeedFetcher",
    "RemoteStoreError",
    "WriteResponse",
]
