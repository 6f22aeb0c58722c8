"""Gemeinsame Fixtures: lokaler Fake-Discord-Server für den REST-Client."""

import pytest_asyncio
from aiohttp import web
from aiohttp.test_utils import TestServer

from rest import RestClient


@pytest_asyncio.fixture
async def fake_api():
    """
    Startet pro Aufruf einen aiohttp-Server mit den übergebenen Routen und
    liefert einen RestClient, der auf ihn zeigt.

    Beispiel:
        client = await fake_api([("GET", "/users/@me", handler)], max_retries=2)
    """
    servers = []
    clients = []

    async def _start(routes, **client_kwargs):
        app = web.Application()
        for method, path, handler in routes:
            app.router.add_route(method, "/v10" + path, handler)

        server = TestServer(app)
        await server.start_server()
        servers.append(server)

        client = RestClient(
            "test-token",
            api_base=str(server.make_url("/")).rstrip("/"),
            api_version=10,
            **client_kwargs,
        )
        clients.append(client)
        return client

    yield _start

    for client in clients:
        await client.close()
    for server in servers:
        await server.close()
