"""
Exporter HTTP server.

Exposes:
- GET <metrics path>?target=<device> — Key Light metrics for one device
- GET anything else — redirect to the metrics path
"""

from __future__ import annotations

import asyncio
import signal

import structlog
from aiohttp import web
from prometheus_client import CollectorRegistry

from .config import ExporterConfig
from .fetcher import Fetcher, HttpFetcher
from .handler import ScrapeHandler

log = structlog.get_logger()

SHUTDOWN_TIMEOUT = 15.0


def create_app(handler: ScrapeHandler, metrics_path: str = "/metrics") -> web.Application:
    """Create the aiohttp application routing scrapes to handler."""

    async def redirect(request: web.Request) -> web.Response:
        raise web.HTTPMovedPermanently(location=metrics_path)

    app = web.Application()
    # Routes resolve in registration order, so the catch-all goes last.
    app.router.add_get(metrics_path, handler.handle)
    app.router.add_get("/{tail:.*}", redirect)
    return app


class ExporterServer:
    """Owns the registry, fetcher and aiohttp runner for one process."""

    def __init__(
        self,
        config: ExporterConfig,
        registry: CollectorRegistry | None = None,
        fetcher: Fetcher | None = None,
    ):
        self._config = config
        self._registry = registry or CollectorRegistry()
        self._http_fetcher: HttpFetcher | None = None
        if fetcher is None:
            fetcher = self._http_fetcher = HttpFetcher(
                timeout=config.fetch.timeout_seconds,
                verify_tls=config.fetch.verify_tls,
            )
        self._handler = ScrapeHandler(
            self._registry,
            fetcher,
            timeout=config.fetch.timeout_seconds,
        )
        self.app = create_app(self._handler, config.metrics.path)
        self._runner: web.AppRunner | None = None
        self._shutdown_event = asyncio.Event()

    async def start(self) -> None:
        if self._http_fetcher:
            await self._http_fetcher.open()

        self._runner = web.AppRunner(self.app)
        try:
            await self._runner.setup()
            site = web.TCPSite(self._runner, self._config.metrics.host, self._config.metrics.port)
            await site.start()
        except Exception:
            await self.stop()
            raise
        log.info(
            "exporter.started",
            addr=self._config.metrics.addr,
            path=self._config.metrics.path,
        )

    async def stop(self) -> None:
        if self._runner:
            await self._runner.cleanup()
            self._runner = None
        if self._http_fetcher:
            await self._http_fetcher.close()
        log.info("exporter.stopped")

    def shutdown(self) -> None:
        self._shutdown_event.set()

    async def run_forever(self) -> None:
        """Serve until a shutdown signal arrives."""
        loop = asyncio.get_running_loop()
        for sig in (signal.SIGTERM, signal.SIGINT):
            loop.add_signal_handler(sig, self.shutdown)

        await self.start()
        try:
            await self._shutdown_event.wait()
        finally:
            await asyncio.wait_for(self.stop(), timeout=SHUTDOWN_TIMEOUT)
