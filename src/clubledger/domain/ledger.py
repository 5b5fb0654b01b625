"""Ledger state cell and the mutations applied to it.

All mutations run on one event loop, so the state needs no lock. They are not
serialised against in-flight I/O, though: a reconciliation that started before a
mutation can still swap in its older map afterwards. ``generation`` lets callers
notice when that happens.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from logging import getLogger
from typing import TYPE_CHECKING

from .codec import records_from_payload
from .errors import PersistenceFailure
from .model import CanonicalMap, PlayerRecord
from .ranks import DEFAULT_LADDER

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from .persister import PersistOutcome
    from .ranks import RankLadder, RankTier

    type Persist = Callable[[CanonicalMap], Awaitable[PersistOutcome]]

log = getLogger(__name__)


class LedgerState:
    """The single owner of the current canonical map."""

    __slots__ = ("_generation", "_players")

    def __init__(self, players: CanonicalMap | None = None) -> None:
        self._players = players if players is not None else CanonicalMap()
        self._generation = 0

    @property
    def players(self) -> CanonicalMap:
        return self._players

    @property
    def generation(self) -> int:
        return self._generation

    def swap(self, players: CanonicalMap, *, refresh: bool = False) -> CanonicalMap:
        """Replace the whole map as a unit, returning the previous one.

        Refresh swaps leave ``generation`` alone; it only counts mutations.
        """

        previous = self._players
        self._players = players
        if not refresh:
            self._generation += 1
        return previous

    def touch(self) -> None:
        """Record an in-place mutation of the current map."""

        self._generation += 1


@dataclass(frozen=True, slots=True)
class DeltaOutcome:
    username: str
    delta: int
    created: bool
    previous_balance: int | None
    new_balance: int
    previous_tier: RankTier | None
    new_tier: RankTier
    persisted: PersistOutcome | None

    @property
    def tier_changed(self) -> bool:
        return self.previous_tier is not None and self.previous_tier.name != self.new_tier.name


@dataclass(frozen=True, slots=True)
class ReplaceOutcome:
    count: int
    previous_count: int
    persisted: PersistOutcome | None


class LedgerMutator:
    def __init__(
        self,
        state: LedgerState,
        *,
        persist: Persist,
        ladder: RankLadder = DEFAULT_LADDER,
    ) -> None:
        self.state = state
        self._persist = persist
        self.ladder = ladder

    async def apply_delta(self, username: str, delta: int) -> DeltaOutcome:
        """Add ``delta`` to a player's balance, creating the player if needed.

        A new player starts at ``delta`` and reports no previous tier, so creation
        never counts as a tier change.
        """

        username = username.strip()
        if not username:
            raise ValueError("username must not be blank")

        players = self.state.players
        record = players.get(username)
        if record is None:
            record = players.put(PlayerRecord(username=username, balance=delta))
            previous_balance = None
            previous_tier = None
        else:
            previous_balance = record.balance
            previous_tier = self.ladder.classify(previous_balance)
            record.balance += delta
        self.state.touch()

        outcome = DeltaOutcome(
            username=record.username,
            delta=delta,
            created=previous_balance is None,
            previous_balance=previous_balance,
            new_balance=record.balance,
            previous_tier=previous_tier,
            new_tier=self.ladder.classify(record.balance),
            persisted=None,
        )
        log.info(
            "Balance %s: %s -> %s (%+d)",
            outcome.username,
            previous_balance,
            outcome.new_balance,
            delta,
        )
        persisted = await self._safe_persist(players)
        return replace(outcome, persisted=persisted)

    async def replace_all(self, entries: object) -> ReplaceOutcome:
        """Replace the whole map with ``entries`` (decoded JSON).

        Raises:
            ValidationError: ``entries`` is not a list of record-shaped objects; the
                current map is left untouched.
        """

        players = records_from_payload(entries)
        return await self._swap(players, reason="replace")

    async def reset_balances(self) -> ReplaceOutcome:
        players = CanonicalMap(
            PlayerRecord(username=r.username, balance=0, trophies=list(r.trophies))
            for r in self.state.players
        )
        return await self._swap(players, reason="reset")

    async def _swap(self, players: CanonicalMap, *, reason: str) -> ReplaceOutcome:
        previous = self.state.swap(players)
        log.info("Ledger %s: %s -> %s players", reason, len(previous), len(players))
        persisted = await self._safe_persist(players)
        return ReplaceOutcome(count=len(players), previous_count=len(previous), persisted=persisted)

    async def _safe_persist(self, players: CanonicalMap) -> PersistOutcome | None:
        try:
            return await self._persist(players)
        except PersistenceFailure as exc:
            log.error("Persisting ledger failed, in-memory state kept: %s", exc)
            return None
