"""Rank tiers derived purely from balance."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator


@dataclass(frozen=True, slots=True)
class RankTier:
    minimum: int
    name: str
    css_class: str


class RankLadder:
    """Threshold bands ordered from the highest minimum down to the catch-all."""

    __slots__ = ("_tiers",)

    def __init__(self, tiers: Iterable[RankTier]) -> None:
        ordered = sorted(tiers, key=lambda tier: tier.minimum, reverse=True)
        if not ordered:
            raise ValueError("Rank ladder needs at least one tier")
        if ordered[-1].minimum != 0:
            raise ValueError("Lowest rank tier must have minimum 0")
        minimums = [tier.minimum for tier in ordered]
        if len(set(minimums)) != len(minimums):
            raise ValueError("Rank tier minimums must be unique")
        self._tiers = tuple(ordered)

    @property
    def catch_all(self) -> RankTier:
        return self._tiers[-1]

    def classify(self, balance: int) -> RankTier:
        for tier in self._tiers:
            if balance >= tier.minimum:
                return tier
        # Only negative balances get here.
        return self.catch_all

    def __iter__(self) -> Iterator[RankTier]:
        return iter(self._tiers)

    def __len__(self) -> int:
        return len(self._tiers)


DEFAULT_LADDER = RankLadder(
    (
        RankTier(1500, "Gold", "gold"),
        RankTier(1000, "Silver", "silver"),
        RankTier(500, "Bronze", "bronze"),
        RankTier(250, "Metal", "metal"),
        RankTier(100, "Wood", "wood"),
        RankTier(0, "Novice", "wood"),
    )
)


def classify(balance: int, ladder: RankLadder = DEFAULT_LADDER) -> RankTier:
    return ladder.classify(balance)
