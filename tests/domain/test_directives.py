from __future__ import annotations

import pytest

from clubledger.domain.directives import (
    SKIP,
    BalanceDirective,
    Grammar,
    TrophyDirective,
    parse_directives,
    parse_line,
    split_line,
)
from clubledger.domain.errors import SourceUnavailable


class TestSplitLine:
    def test_splits_at_first_separator(self) -> None:
        assert split_line("alice: +1 -2") == ("alice", " +1 -2")

    def test_strips_identifier(self) -> None:
        assert split_line("   Bob   :5") == ("Bob", "5")

    @pytest.mark.parametrize("line", ["", "   ", "no separator here", ": 100", "   : +5"])
    def test_skips_malformed_lines(self, line: str) -> None:
        assert split_line(line) is SKIP

    def test_keeps_later_separators_in_rest(self) -> None:
        assert split_line("carol: 1: 2") == ("carol", " 1: 2")


class TestBalanceGrammar:
    def test_sums_same_line_deltas(self) -> None:
        directive = parse_line("u: +10 -3 +2", Grammar.BALANCE)

        assert isinstance(directive, BalanceDirective)
        assert directive.deltas == (10, -3, 2)
        assert directive.total == 9

    def test_ignores_non_numeric_tokens(self) -> None:
        directive = parse_line("u: +100 bonus -50 oops", Grammar.BALANCE)

        assert isinstance(directive, BalanceDirective)
        assert directive.total == 50

    def test_empty_payload_sums_to_zero(self) -> None:
        directive = parse_line("newcomer:", Grammar.BALANCE)

        assert isinstance(directive, BalanceDirective)
        assert directive.total == 0

    def test_only_ascii_digits_count(self) -> None:
        directive = parse_line("u: \u0661\u0660\u0660 \uff15 +7", Grammar.BALANCE)

        assert isinstance(directive, BalanceDirective)
        assert directive.deltas == (7,)

    def test_malformed_line_is_skipped(self) -> None:
        assert parse_line("just some words", Grammar.BALANCE) is SKIP


class TestTrophyGrammar:
    def test_splits_on_whitespace_runs(self) -> None:
        directive = parse_line("alice:  cup\tmedal   star ", Grammar.TROPHY)

        assert directive == TrophyDirective(username="alice", trophies=("cup", "medal", "star"))

    def test_empty_trophy_list(self) -> None:
        directive = parse_line("alice:   ", Grammar.TROPHY)

        assert directive == TrophyDirective(username="alice", trophies=())


class TestParseDirectives:
    def test_keys_are_case_insensitive_in_first_seen_order(self) -> None:
        text = "Zed: 1\nalice: 2\nZED: 5\n"

        directives = parse_directives(text, Grammar.BALANCE)

        assert list(directives) == ["zed", "alice"]
        zed = directives["zed"]
        assert isinstance(zed, BalanceDirective)
        assert zed.username == "Zed"
        assert zed.total == 5

    def test_later_trophy_line_replaces_earlier(self) -> None:
        text = "alice: cup\nALICE: medal star"

        directives = parse_directives(text, Grammar.TROPHY)

        assert directives["alice"] == TrophyDirective(username="alice", trophies=("medal", "star"))

    def test_bad_lines_do_not_break_parse(self) -> None:
        text = "garbage\n: 10\nbob: +7\n\n   \nwho knows"

        directives = parse_directives(text, Grammar.BALANCE)

        assert list(directives) == ["bob"]

    def test_empty_text_yields_nothing(self) -> None:
        assert parse_directives("", Grammar.BALANCE) == {}

    def test_missing_text_is_unavailable(self) -> None:
        with pytest.raises(SourceUnavailable):
            parse_directives(None, Grammar.TROPHY)
