"""Line grammar for the balance and trophy feeds.

Each line has the shape ``username: payload``. Balance payloads are signed
integers that add up; trophy payloads are whitespace-separated labels. A line that
does not fit the shape is skipped, so one bad line never breaks a reconciliation.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum, StrEnum
from typing import TYPE_CHECKING, Final, Literal

from .errors import SourceUnavailable
from .model import normalize_username

if TYPE_CHECKING:
    from collections.abc import Iterable

SEPARATOR: Final[str] = ":"
INTEGER_TOKEN_RE = re.compile(r"[+-]?[0-9]+")


class Grammar(StrEnum):
    BALANCE = "balance"
    TROPHY = "trophy"


class _Skip(Enum):
    SKIP = "skip"

    def __repr__(self) -> str:
        return "SKIP"


SKIP: Final = _Skip.SKIP
type Skip = Literal[_Skip.SKIP]


@dataclass(frozen=True, slots=True)
class BalanceDirective:
    username: str
    deltas: tuple[int, ...]

    @property
    def total(self) -> int:
        return sum(self.deltas)


@dataclass(frozen=True, slots=True)
class TrophyDirective:
    username: str
    trophies: tuple[str, ...]


type Directive = BalanceDirective | TrophyDirective


def split_line(line: str) -> tuple[str, str] | Skip:
    """Split ``line`` into ``(identifier, rest)`` at the first separator."""

    identifier, separator, rest = line.strip().partition(SEPARATOR)
    if not separator:
        return SKIP
    identifier = identifier.strip()
    if not identifier:
        return SKIP
    return identifier, rest


def parse_balance_payload(rest: str) -> tuple[int, ...]:
    return tuple(int(token) for token in INTEGER_TOKEN_RE.findall(rest))


def parse_trophy_payload(rest: str) -> tuple[str, ...]:
    return tuple(rest.split())


def parse_line(line: str, grammar: Grammar) -> Directive | Skip:
    split = split_line(line)
    if split is SKIP:
        return SKIP
    username, rest = split
    if grammar is Grammar.BALANCE:
        return BalanceDirective(username=username, deltas=parse_balance_payload(rest))
    return TrophyDirective(username=username, trophies=parse_trophy_payload(rest))


def parse_directives(text: str | None, grammar: Grammar) -> dict[str, Directive]:
    """Parse a whole feed into directives keyed by normalised username.

    Keys keep first-seen order. A later line for the same username replaces the
    earlier payload but keeps the first spelling of the name.

    Raises:
        SourceUnavailable: ``text`` is ``None``, i.e. the feed could not be read at all.
    """

    if text is None:
        raise SourceUnavailable(f"No {grammar} feed text to parse")
    return collect_directives(text.splitlines(), grammar)


def collect_directives(lines: Iterable[str], grammar: Grammar) -> dict[str, Directive]:
    directives: dict[str, Directive] = {}
    for line in lines:
        directive = parse_line(line, grammar)
        if directive is SKIP:
            continue
        key = normalize_username(directive.username)
        previous = directives.get(key)
        if previous is not None and previous.username != directive.username:
            directive = _rename(directive, previous.username)
        directives[key] = directive
    return directives


def _rename(directive: Directive, username: str) -> Directive:
    if isinstance(directive, BalanceDirective):
        return BalanceDirective(username=username, deltas=directive.deltas)
    return TrophyDirective(username=username, trophies=directive.trophies)
