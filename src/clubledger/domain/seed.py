"""Built-in players used when no other source is reachable."""

from __future__ import annotations

from .model import CanonicalMap, PlayerRecord

SEED_PLAYERS: tuple[tuple[str, int], ...] = (
    ("atemmax", 660),
    ("loloky", 76),
    ("hentera", 1200),
    ("chessmaster", 200),
    ("grandpaw", 1800),
)


def seed_players() -> CanonicalMap:
    return CanonicalMap(
        PlayerRecord(username=name, balance=balance) for name, balance in SEED_PLAYERS
    )
