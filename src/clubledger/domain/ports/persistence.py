"""Ports for persisting the player map."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from clubledger.domain.model import CanonicalMap, VersionedSnapshot


@runtime_checkable
class PlayerCache(Protocol):
    """Local copy of the last persisted map."""

    def read(self) -> CanonicalMap:
        """Raise ``SourceUnavailable`` when nothing valid is stored."""
        ...

    def write(self, players: CanonicalMap) -> None:
        """Raise ``PersistenceFailure`` when the write does not reach storage."""
        ...


@runtime_checkable
class VersionedStore(Protocol):
    """Remote content store with optimistic concurrency.

    The store handle owns the version token: it is set by a successful ``read`` or
    ``write`` and sent along with the next ``write``.
    """

    @property
    def version_token(self) -> str | None: ...

    @property
    def label(self) -> str: ...

    async def read(self) -> VersionedSnapshot:
        """Raise ``SourceAbsent`` when the remote file does not exist yet."""
        ...

    async def write(self, content: str, *, message: str) -> str:
        """Return the new token; raise ``PersistenceConflict`` on a stale token."""
        ...


__all__ = ["PlayerCache", "VersionedStore"]
