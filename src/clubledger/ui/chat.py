"""Chat-bot command interpreter.

Turns message text into ledger calls and returns the reply text. Delivering
messages is the transport's job; nothing here talks to a chat service.
"""

from __future__ import annotations

import json
import re
from logging import getLogger
from typing import TYPE_CHECKING

from clubledger.domain.codec import serialize_canonical
from clubledger.domain.errors import ValidationError

if TYPE_CHECKING:
    from collections.abc import Iterable

    from clubledger.app import LedgerService
    from clubledger.domain.ledger import DeltaOutcome

log = getLogger(__name__)

MAX_JSON_REPLY = 4000
BALANCE_UNIT = "usov"

UPDATE_PREFIX = "Update balance lichess "
UPDATE_RE = re.compile(r"^Update balance lichess (\w+) ([+-]?\d+)$")
BAL_RE = re.compile(r"^/bal\s+(\w+)")
JSON_VIEW_RE = re.compile(r"^/json\s+view", re.IGNORECASE)
JSON_EDIT_RE = re.compile(r"^/json\s+edit([\s\S]*)$")
RESET_RE = re.compile(r"^/nule", re.IGNORECASE)
HELP_RE = re.compile(r"^/com", re.IGNORECASE)

HELP_TEXT = """Bot commands:

Update balance lichess <name> +100
   Change a player's balance

/bal <name>
   Show a player's balance"""

ADMIN_HELP_TEXT = """

Admin commands:

/json view
   Show the ledger JSON

/json edit [...]
   Replace all players

/nule
   Reset every balance to zero

/com
   Show this help"""


class ChatCommands:
    def __init__(self, service: LedgerService, *, admin_ids: Iterable[str] = ()) -> None:
        self.service = service
        self.admin_ids = frozenset(admin_ids)

    def is_admin(self, user_id: str) -> bool:
        # With no admins configured every user may run admin commands.
        return not self.admin_ids or user_id in self.admin_ids

    async def handle(self, text: str | None, user_id: str) -> str | None:
        """Return the reply for ``text``, or ``None`` when it is not a command."""

        if not text:
            return None
        text = text.strip()

        if match := BAL_RE.match(text):
            return self._balance(match.group(1))
        if JSON_VIEW_RE.match(text):
            return self._json_view(user_id)
        if match := JSON_EDIT_RE.match(text):
            return await self._json_edit(match.group(1), user_id)
        if RESET_RE.match(text):
            return await self._reset(user_id)
        if HELP_RE.match(text):
            return HELP_TEXT + (ADMIN_HELP_TEXT if self.is_admin(user_id) else "")
        if text.startswith(UPDATE_PREFIX):
            return await self._update_balance(text, user_id)
        return None

    def _balance(self, username: str) -> str:
        view = self.service.lookup(username)
        if view is None:
            return f'Player "{username.lower()}" not found.'
        return (
            f"Player: {view.record.username}\n"
            f"Balance: {view.record.balance} {BALANCE_UNIT}\n"
            f"Rank: {view.tier.name}"
        )

    def _json_view(self, user_id: str) -> str:
        if not self.is_admin(user_id):
            return "Access denied."
        data = serialize_canonical(self.service.players())
        if len(data) > MAX_JSON_REPLY:
            return f"JSON is too large ({len(data)} characters). Use the website instead."
        return f"```json\n{data}\n```"

    async def _json_edit(self, raw: str, user_id: str) -> str:
        if not self.is_admin(user_id):
            return "Only an admin can edit the JSON."
        raw = raw.strip()
        if not raw:
            return "Usage: /json edit [new JSON]"
        try:
            entries = json.loads(raw)
        except json.JSONDecodeError as exc:
            return f"JSON parse error:\n{exc.msg}"
        except (ValueError, RecursionError) as exc:
            return f"JSON parse error:\n{exc}"
        try:
            outcome = await self.service.replace_all(entries)
        except ValidationError as exc:
            return f"Rejected: {exc}"
        return f"JSON updated. Players: {outcome.count}"

    async def _reset(self, user_id: str) -> str:
        if not self.is_admin(user_id):
            return "Only an admin can reset balances."
        outcome = await self.service.reset_balances()
        return f"Balances of all {outcome.count} players reset to zero."

    async def _update_balance(self, text: str, user_id: str) -> str:
        if not self.is_admin(user_id):
            return "Only an admin can update balances."
        match = UPDATE_RE.match(text)
        if match is None:
            return "Format: Update balance lichess <name> +100 or -50"
        outcome = await self.service.apply_delta(match.group(1), int(match.group(2)))
        return format_delta(outcome)


def format_delta(outcome: DeltaOutcome) -> str:
    if outcome.created:
        return f"Added: {outcome.username} ({outcome.new_balance} {BALANCE_UNIT})"
    reply = (
        f"{outcome.username}: {outcome.previous_balance} -> {outcome.new_balance} "
        f"{BALANCE_UNIT} ({outcome.delta:+d})"
    )
    if outcome.tier_changed and outcome.previous_tier is not None:
        reply += f"\nRank change! {outcome.previous_tier.name} -> {outcome.new_tier.name}"
    return reply
