from __future__ import annotations

import asyncio
import json

import pytest

from clubledger.app import LedgerService
from clubledger.domain.loader import FallbackLoader
from clubledger.domain.persister import DurablePersister
from clubledger.ui.chat import MAX_JSON_REPLY, ChatCommands
from tests.helpers.ledger import MemoryCache, players_of

ADMIN = "42"
USER = "7"


@pytest.fixture
def service() -> LedgerService:
    cache = MemoryCache()
    service = LedgerService(
        loader=FallbackLoader([], cache=cache), persister=DurablePersister(cache)
    )
    service.state.swap(players_of(("Alice", 480, ["cup"]), ("bob", 20)), refresh=True)
    return service


@pytest.fixture
def commands(service: LedgerService) -> ChatCommands:
    return ChatCommands(service, admin_ids=[ADMIN])


def _say(commands: ChatCommands, text: str, user_id: str = ADMIN) -> str | None:
    return asyncio.run(commands.handle(text, user_id))


def test_balance_lookup_is_case_insensitive(commands: ChatCommands) -> None:
    reply = _say(commands, "/bal ALICE", USER)

    assert reply == "Player: Alice\nBalance: 480 usov\nRank: Metal"


def test_balance_unknown_player(commands: ChatCommands) -> None:
    assert _say(commands, "/bal Ghost", USER) == 'Player "ghost" not found.'


def test_update_balance_reports_rank_change(commands: ChatCommands) -> None:
    reply = _say(commands, "Update balance lichess alice +30")

    assert reply == "Alice: 480 -> 510 usov (+30)\nRank change! Metal -> Bronze"


def test_update_balance_creates_player(commands: ChatCommands, service: LedgerService) -> None:
    reply = _say(commands, "Update balance lichess carol -15")

    assert reply == "Added: carol (-15 usov)"
    assert "carol" in service.players()


def test_update_balance_requires_admin(commands: ChatCommands, service: LedgerService) -> None:
    reply = _say(commands, "Update balance lichess bob +5", USER)

    assert reply == "Only an admin can update balances."
    record = service.players().get("bob")
    assert record is not None
    assert record.balance == 20


def test_update_balance_bad_format(commands: ChatCommands) -> None:
    reply = _say(commands, "Update balance lichess bob lots")

    assert reply is not None
    assert reply.startswith("Format:")


def test_json_view(commands: ChatCommands) -> None:
    reply = _say(commands, "/json view")

    assert reply is not None
    body = reply.removeprefix("```json\n").removesuffix("\n```")
    assert json.loads(body)[0] == {"username": "Alice", "balance": 480, "trophies": ["cup"]}
    assert _say(commands, "/json view", USER) == "Access denied."


def test_json_view_too_large(commands: ChatCommands, service: LedgerService) -> None:
    service.state.swap(
        players_of(*((f"player{i}", i) for i in range(MAX_JSON_REPLY // 20))), refresh=True
    )

    reply = _say(commands, "/json view")

    assert reply is not None
    assert "too large" in reply


def test_json_edit_replaces_players(commands: ChatCommands, service: LedgerService) -> None:
    reply = _say(commands, '/json edit [{"username": "zed", "balance": 5}]')

    assert reply == "JSON updated. Players: 1"
    assert [r.username for r in service.players()] == ["zed"]


@pytest.mark.parametrize(
    ("text", "prefix"),
    [
        ("/json edit", "Usage:"),
        ("/json edit [{", "JSON parse error"),
        ("/json edit [{\"username\": \"a\", \"balance\": " + "9" * 5000 + "}]", "JSON parse error"),
        ("/json edit " + "[" * 100_000 + "]" * 100_000, "JSON parse error"),
        ('/json edit {"username": "zed", "balance": 5}', "Rejected:"),
    ],
)
def test_json_edit_rejections_leave_map(
    commands: ChatCommands, service: LedgerService, text: str, prefix: str
) -> None:
    before = service.players()

    reply = _say(commands, text)

    assert reply is not None
    assert reply.startswith(prefix)
    assert service.players() is before


def test_reset_zeroes_balances(commands: ChatCommands, service: LedgerService) -> None:
    assert _say(commands, "/nule") == "Balances of all 2 players reset to zero."
    assert service.players().total_balance() == 0


def test_help_shows_admin_section_only_to_admins(commands: ChatCommands) -> None:
    admin_help = _say(commands, "/com")
    user_help = _say(commands, "/com", USER)

    assert admin_help is not None
    assert user_help is not None
    assert "Admin commands" in admin_help
    assert "Admin commands" not in user_help


def test_without_admins_everyone_is_admin(service: LedgerService) -> None:
    commands = ChatCommands(service)

    assert commands.is_admin("anyone")


@pytest.mark.parametrize("text", [None, "", "hello there", "/unknown"])
def test_non_commands_get_no_reply(commands: ChatCommands, text: str | None) -> None:
    assert asyncio.run(commands.handle(text, ADMIN)) is None
