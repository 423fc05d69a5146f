"""
Scrape request handler.

Each request names a device with the ``target`` query parameter. The device
is fetched, translated into the shared collector, and the registry rendered
back to the caller.
"""

from __future__ import annotations

import asyncio

import structlog
from aiohttp import web
from prometheus_client import CollectorRegistry

from .address import normalize
from .exceptions import AddressError, FetchError
from .fetcher import DEFAULT_TIMEOUT_SECONDS, Fetcher
from .metrics import KeyLightCollector, PrometheusMetricsRenderer
from .scrape import scrape_device

log = structlog.get_logger()


class ScrapeHandler:
    """
    aiohttp handler serving Prometheus metrics for Key Light devices.

    One collector and registry are shared by every request, so the span from
    populating observations through writing the rendered body is serialized
    with a lock. The lock is never held while fetching.
    """

    def __init__(
        self,
        registry: CollectorRegistry,
        fetcher: Fetcher,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
    ):
        self._fetcher = fetcher
        self._timeout = timeout
        self._collector = KeyLightCollector(registry)
        self._renderer = PrometheusMetricsRenderer(registry)
        self._lock = asyncio.Lock()

    async def handle(self, request: web.Request) -> web.StreamResponse:
        # Prometheus is configured to send a target parameter with each
        # scrape request.
        target = request.query.get("target", "")
        if not target:
            log.info("scrape.missing_target")
            return _error(web.HTTPBadRequest.status_code, "missing target parameter")

        try:
            endpoint = normalize(target)
        except AddressError as exc:
            log.info("scrape.malformed_target", target=target, error=str(exc))
            return _error(
                web.HTTPBadRequest.status_code,
                f"malformed target parameter: {exc}",
            )

        try:
            data = await asyncio.wait_for(self._fetcher.fetch(endpoint), timeout=self._timeout)
        except asyncio.TimeoutError:
            log.warning("scrape.fetch_timeout", endpoint=endpoint, timeout=self._timeout)
            return _error(
                web.HTTPInternalServerError.status_code,
                f"failed to fetch Key Light data from {endpoint!r}: "
                f"timed out after {self._timeout}s",
            )
        except FetchError as exc:
            log.warning("scrape.fetch_failed", endpoint=endpoint, error=str(exc))
            return _error(
                web.HTTPInternalServerError.status_code,
                f"failed to fetch Key Light data from {endpoint!r}: {exc}",
            )

        # The body write must stay inside the lock.
        async with self._lock:
            self._collector.on_scrape(scrape_device(data))
            body = self._renderer.generate()

            resp = web.StreamResponse(headers={"Content-Type": self._renderer.content_type})
            resp.content_length = len(body)
            await resp.prepare(request)
            await resp.write(body)
            await resp.write_eof()

        log.debug(
            "scrape.completed",
            endpoint=endpoint,
            serial=data.device.serial_number,
            lights=len(data.lights),
        )
        return resp


def _error(status: int, message: str) -> web.Response:
    return web.Response(status=status, text=message + "\n", content_type="text/plain")
