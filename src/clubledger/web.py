"""Read-only JSON API over the ledger (aiohttp)."""

from __future__ import annotations

import time
from typing import TYPE_CHECKING

from aiohttp import web

from clubledger import __version__
from clubledger.app import LedgerService

if TYPE_CHECKING:
    from clubledger.config.ledger import ServerConfig

SERVICE_KEY = web.AppKey("service", LedgerService)


def create_app(service: LedgerService) -> web.Application:
    app = web.Application()
    app[SERVICE_KEY] = service
    started_at = time.time()

    async def on_startup(_: web.Application) -> None:
        await service.start()

    async def on_cleanup(_: web.Application) -> None:
        await service.stop()

    app.on_startup.append(on_startup)
    app.on_cleanup.append(on_cleanup)

    async def health(_: web.Request) -> web.Response:
        return web.json_response(
            {
                "ok": service.ready,
                "uptimeSec": time.time() - started_at,
                "players": len(service.players()),
                "source": service.last_source,
                "version": __version__,
            }
        )

    async def players(_: web.Request) -> web.Response:
        return web.json_response(service.players().to_payload())

    async def player(request: web.Request) -> web.Response:
        username = request.match_info["username"]
        view = service.lookup(username)
        if view is None:
            raise web.HTTPNotFound(text=f"player {username!r} not found")
        return web.json_response(
            {
                **view.record.to_payload(),
                "rank": {"name": view.tier.name, "class": view.tier.css_class},
            }
        )

    app.router.add_get("/health", health)
    app.router.add_get("/api/players", players)
    app.router.add_get("/api/players/{username}", player)

    return app


def run(service: LedgerService, config: ServerConfig) -> None:
    web.run_app(create_app(service), host=config.host, port=config.port)
