"""
Shared fixtures for exporter tests.
"""

import httpx
import pytest
from aiohttp.test_utils import TestServer
from prometheus_client import CollectorRegistry

from keylight_exporter.handler import ScrapeHandler
from keylight_exporter.server import create_app


@pytest.fixture
async def exporter():
    """Start a scrape handler on a local server and return its base URL."""
    servers: list[TestServer] = []

    async def _start(fetcher, timeout: float = 1.0, registry: CollectorRegistry | None = None) -> str:
        handler = ScrapeHandler(registry or CollectorRegistry(), fetcher, timeout=timeout)
        server = TestServer(create_app(handler))
        await server.start_server()
        servers.append(server)
        return f"http://{server.host}:{server.port}"

    yield _start

    for server in servers:
        await server.close()


@pytest.fixture
async def client():
    async with httpx.AsyncClient(timeout=5.0) as c:
        yield c
