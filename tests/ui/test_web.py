from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

from aiohttp import test_utils

from clubledger.app import LedgerService
from clubledger.domain.loader import FallbackLoader, SeedTier
from clubledger.domain.persister import DurablePersister
from clubledger.web import SERVICE_KEY, create_app
from tests.helpers.ledger import MemoryCache, players_of

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable


def _service() -> LedgerService:
    cache = MemoryCache()
    loader = FallbackLoader(
        [], cache=cache, seed=SeedTier(lambda: players_of(("Alice", 1600, ["crown"]), ("bob", 5)))
    )
    return LedgerService(loader=loader, persister=DurablePersister(cache))


def _with_client(check: Callable[[test_utils.TestClient], Awaitable[None]]) -> None:
    async def scenario() -> None:
        client = test_utils.TestClient(test_utils.TestServer(create_app(_service())))
        await client.start_server()
        try:
            await check(client)
        finally:
            await client.close()

    asyncio.run(scenario())


def test_health_reports_loaded_ledger() -> None:
    async def check(client: test_utils.TestClient) -> None:
        response = await client.get("/health")
        assert response.status == 200
        body = await response.json()
        assert body["ok"] is True
        assert body["players"] == 2
        assert body["source"] == "seed"

    _with_client(check)


def test_players_listing_preserves_order() -> None:
    async def check(client: test_utils.TestClient) -> None:
        response = await client.get("/api/players")
        body = await response.json()
        assert [entry["username"] for entry in body] == ["Alice", "bob"]

    _with_client(check)


def test_single_player_includes_rank() -> None:
    async def check(client: test_utils.TestClient) -> None:
        response = await client.get("/api/players/ALICE")
        assert response.status == 200
        body = await response.json()
        assert body == {
            "username": "Alice",
            "balance": 1600,
            "trophies": ["crown"],
            "rank": {"name": "Gold", "class": "gold"},
        }

    _with_client(check)


def test_unknown_player_is_404() -> None:
    async def check(client: test_utils.TestClient) -> None:
        response = await client.get("/api/players/ghost")
        assert response.status == 404

    _with_client(check)


def test_service_is_reachable_from_app() -> None:
    service = _service()

    assert create_app(service)[SERVICE_KEY] is service
