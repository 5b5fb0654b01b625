"""Combine parsed feeds into one canonical player map."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING

from .directives import BalanceDirective, TrophyDirective
from .model import CanonicalMap, PlayerRecord

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

    from .directives import Directive


class SourceKind(StrEnum):
    BALANCE = "balance"
    TROPHY = "trophy"


@dataclass(frozen=True, slots=True)
class ParsedSource:
    kind: SourceKind
    directives: Mapping[str, Directive]


def merge_sources(sources: Sequence[ParsedSource]) -> CanonicalMap:
    """Fold ``sources`` in order into a fresh map.

    Balance sources create records or overwrite their balance. Trophy sources
    replace the trophy list, creating a zero-balance record for names the balance
    sources never mentioned.
    """

    players = CanonicalMap()
    for source in sources:
        for directive in source.directives.values():
            if source.kind is SourceKind.BALANCE:
                _apply_balance(players, directive)
            else:
                _apply_trophies(players, directive)
    return players


def _apply_balance(players: CanonicalMap, directive: Directive) -> None:
    if not isinstance(directive, BalanceDirective):
        raise TypeError(f"Balance source carried {type(directive).__name__}")
    record = players.get(directive.username)
    if record is None:
        players.put(PlayerRecord(username=directive.username, balance=directive.total))
    else:
        record.balance = directive.total


def _apply_trophies(players: CanonicalMap, directive: Directive) -> None:
    if not isinstance(directive, TrophyDirective):
        raise TypeError(f"Trophy source carried {type(directive).__name__}")
    record = players.get(directive.username)
    if record is None:
        players.put(PlayerRecord(username=directive.username, trophies=list(directive.trophies)))
    else:
        record.trophies = list(directive.trophies)
