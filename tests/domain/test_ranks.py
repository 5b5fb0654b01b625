from __future__ import annotations

import pytest

from clubledger.domain.ranks import DEFAULT_LADDER, RankLadder, RankTier, classify


@pytest.mark.parametrize(
    ("balance", "expected"),
    [
        (1500, "Gold"),
        (1499, "Silver"),
        (1000, "Silver"),
        (500, "Bronze"),
        (250, "Metal"),
        (100, "Wood"),
        (99, "Novice"),
        (0, "Novice"),
    ],
)
def test_boundaries_are_inclusive_at_minimum(balance: int, expected: str) -> None:
    assert classify(balance).name == expected


@pytest.mark.parametrize("balance", [-1, -10_000, 10**12])
def test_every_balance_has_a_tier(balance: int) -> None:
    tier = classify(balance)

    assert tier in tuple(DEFAULT_LADDER)


def test_negative_balance_maps_to_catch_all() -> None:
    assert classify(-250) == DEFAULT_LADDER.catch_all


def test_ladder_sorts_bands_descending() -> None:
    ladder = RankLadder([RankTier(0, "low", "l"), RankTier(50, "high", "h")])

    assert [tier.name for tier in ladder] == ["high", "low"]
    assert ladder.classify(50).name == "high"


def test_ladder_requires_zero_catch_all() -> None:
    with pytest.raises(ValueError, match="minimum 0"):
        RankLadder([RankTier(10, "only", "o")])


def test_ladder_rejects_duplicate_minimums() -> None:
    with pytest.raises(ValueError, match="unique"):
        RankLadder([RankTier(0, "a", "a"), RankTier(0, "b", "b")])
