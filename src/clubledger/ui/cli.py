from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from clubledger import app as app_module
from clubledger.config import configure_logging, get_server_config
from clubledger.domain.codec import serialize_canonical
from clubledger.ui.chat import format_delta

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

    from clubledger.app import LedgerService

log = logging.getLogger(__name__)


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Chess-club balance ledger")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("serve", help="Serve the JSON API and refresh the ledger periodically")
    subparsers.add_parser("reconcile", help="Run one load pass through the fallback chain")

    show = subparsers.add_parser("show", help="Print the ledger, or one player, as JSON")
    show.add_argument("username", nargs="?", help="Player to show (case-insensitive)")

    apply = subparsers.add_parser("apply", help="Add a signed delta to a player's balance")
    apply.add_argument("username", type=str)
    apply.add_argument("delta", type=_parse_delta, help="Signed integer, e.g. +100 or -50")

    return parser.parse_args(list(argv))


def _parse_delta(value: str) -> int:
    try:
        return int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"Invalid delta: {value}") from exc


async def _reconcile(service: LedgerService) -> None:
    result = await service.reconcile()
    log.info("Reconciled %s players from %s", len(result.players), result.source)


async def _show(service: LedgerService, username: str | None) -> str:
    await service.reconcile()
    if username is None:
        return serialize_canonical(service.players())
    view = service.lookup(username)
    if view is None:
        raise LookupError(f"Player {username!r} not found")
    return (
        f"{view.record.username}: {view.record.balance} "
        f"({view.tier.name}) {' '.join(view.record.trophies)}".rstrip()
    )


async def _apply(service: LedgerService, username: str, delta: int) -> str:
    await service.reconcile()
    outcome = await service.apply_delta(username, delta)
    if outcome.persisted is None:
        raise RuntimeError("Balance changed in memory but could not be saved")
    return format_delta(outcome)


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    parsed_args = _parse_args(args_list)
    configure_logging(level=logging.DEBUG if parsed_args.verbose else logging.INFO)

    try:
        service = app_module.build_service()
        if parsed_args.command == "serve":
            from clubledger.web import run as run_web

            run_web(service, get_server_config())
        elif parsed_args.command == "reconcile":
            asyncio.run(_reconcile(service))
        elif parsed_args.command == "show":
            print(asyncio.run(_show(service, parsed_args.username)))  # noqa: T201
        elif parsed_args.command == "apply":
            reply = asyncio.run(_apply(service, parsed_args.username, parsed_args.delta))
            print(reply)  # noqa: T201
        else:
            raise ValueError(f"Unsupported command: {parsed_args.command}")  # noqa: TRY301
    except Exception:
        log.exception("Fatal error")
        sys.exit(1)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


def run() -> None:
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()
