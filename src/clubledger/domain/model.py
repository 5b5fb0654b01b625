"""Player records and the canonical map."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator


def normalize_username(username: str) -> str:
    return username.strip().lower()


@dataclass(slots=True)
class PlayerRecord:
    username: str
    balance: int = 0
    trophies: list[str] = field(default_factory=list)

    @property
    def key(self) -> str:
        return normalize_username(self.username)

    def to_payload(self) -> dict[str, object]:
        return {"username": self.username, "balance": self.balance, "trophies": list(self.trophies)}


@dataclass(frozen=True, slots=True)
class VersionedSnapshot:
    """Remote store content together with the revision it was read at."""

    content: str
    version_token: str


class CanonicalMap:
    """Ordered, case-insensitive collection holding one record per username.

    Keys are normalised usernames; records keep the casing they were first seen with.
    Iteration follows first-seen insertion order.
    """

    __slots__ = ("_records",)

    def __init__(self, records: Iterable[PlayerRecord] = ()) -> None:
        self._records: dict[str, PlayerRecord] = {}
        for record in records:
            self.put(record)

    @classmethod
    def from_records(cls, records: Iterable[PlayerRecord]) -> CanonicalMap:
        return cls(records)

    def put(self, record: PlayerRecord) -> PlayerRecord:
        """Insert ``record`` or fold it into the existing entry for the same username.

        A repeated username overwrites balance and trophies but keeps the original
        casing and position.
        """

        existing = self._records.get(record.key)
        if existing is None:
            self._records[record.key] = record
            return record
        existing.balance = record.balance
        existing.trophies = list(record.trophies)
        return existing

    def get(self, username: str) -> PlayerRecord | None:
        return self._records.get(normalize_username(username))

    def records(self) -> list[PlayerRecord]:
        return list(self._records.values())

    def total_balance(self) -> int:
        return sum(record.balance for record in self._records.values())

    def to_payload(self) -> list[dict[str, object]]:
        return [record.to_payload() for record in self._records.values()]

    def copy(self) -> CanonicalMap:
        return CanonicalMap(
            PlayerRecord(r.username, r.balance, list(r.trophies)) for r in self._records.values()
        )

    def __contains__(self, username: object) -> bool:
        return isinstance(username, str) and normalize_username(username) in self._records

    def __iter__(self) -> Iterator[PlayerRecord]:
        return iter(self._records.values())

    def __len__(self) -> int:
        return len(self._records)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, CanonicalMap):
            return NotImplemented
        return self.records() == other.records()

    def __repr__(self) -> str:
        return f"CanonicalMap({len(self)} players)"
