"""Write-through persistence: local cache first, then the remote versioned store."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from logging import getLogger
from typing import TYPE_CHECKING

from .codec import serialize_canonical
from .errors import PersistenceConflict

if TYPE_CHECKING:
    from .model import CanonicalMap
    from .ports import PlayerCache, VersionedStore

log = getLogger(__name__)


class RemoteWriteStatus(StrEnum):
    SKIPPED = "skipped"
    WRITTEN = "written"
    CONFLICT = "conflict"
    FAILED = "failed"


@dataclass(frozen=True, slots=True)
class PersistOutcome:
    remote: RemoteWriteStatus
    version_token: str | None = None
    error: str | None = None


def commit_message(players: CanonicalMap, *, file_label: str) -> str:
    return f"Update {file_label}: {len(players)} players, total {players.total_balance()}"


class DurablePersister:
    def __init__(self, cache: PlayerCache, remote: VersionedStore | None = None) -> None:
        self.cache = cache
        self.remote = remote

    async def persist(self, players: CanonicalMap) -> PersistOutcome:
        """Persist ``players``.

        Raises:
            PersistenceFailure: the local cache write failed; the remote store is
                not attempted in that case.
        """

        self.cache.write(players)
        log.debug("Saved %s players to the local cache", len(players))

        if self.remote is None:
            return PersistOutcome(remote=RemoteWriteStatus.SKIPPED)

        content = serialize_canonical(players)
        message = commit_message(players, file_label=self.remote.label)
        try:
            token = await self.remote.write(content, message=message)
        except PersistenceConflict as exc:
            log.warning("Remote write abandoned, version token is stale: %s", exc)
            return PersistOutcome(
                remote=RemoteWriteStatus.CONFLICT,
                version_token=self.remote.version_token,
                error=str(exc),
            )
        except Exception as exc:  # noqa: BLE001
            log.error("Remote write failed: %s: %s", type(exc).__name__, exc)
            return PersistOutcome(
                remote=RemoteWriteStatus.FAILED,
                version_token=self.remote.version_token,
                error=str(exc),
            )

        log.info("Saved %s players to %s (revision %s)", len(players), self.remote.label, token[:7])
        return PersistOutcome(remote=RemoteWriteStatus.WRITTEN, version_token=token)
