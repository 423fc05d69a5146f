"""
Device data fetching.

A Fetcher retrieves the accessory metadata and light states of a single Key
Light device. HttpFetcher talks to the device's HTTP API; tests supply their
own implementation of the protocol.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

import httpx
import structlog
from pydantic import BaseModel, ConfigDict, Field

from .exceptions import FetchError

log = structlog.get_logger()

DEFAULT_TIMEOUT_SECONDS = 5.0


class Device(BaseModel):
    """Metadata about a Key Light device."""

    model_config = ConfigDict(populate_by_name=True)

    product_name: str = Field(default="", alias="productName")
    display_name: str = Field(default="", alias="displayName")
    firmware_version: str = Field(default="", alias="firmwareVersion")
    serial_number: str = Field(default="", alias="serialNumber")


class Light(BaseModel):
    """State of a single light. Temperature is in Kelvin."""

    on: bool = False
    brightness: int = 0
    temperature: int = 0


class DeviceData(BaseModel):
    """A snapshot of one device and its lights, in device order."""

    device: Device
    lights: list[Light] = Field(default_factory=list)


@runtime_checkable
class Fetcher(Protocol):
    """Fetches DeviceData from a normalized device endpoint."""

    async def fetch(self, endpoint: str) -> DeviceData:
        """Return the device's current data or raise FetchError."""
        ...


# --- Device wire format ---


class _WireLight(BaseModel):
    on: int = 0
    brightness: int = 0
    # Device units, not Kelvin.
    temperature: int = 0


class _WireLights(BaseModel):
    number_of_lights: int = Field(default=0, alias="numberOfLights")
    lights: list[_WireLight] = Field(default_factory=list)


def kelvin(value: int) -> int:
    """Convert a device color temperature value to Kelvin."""
    if value <= 0:
        return 0
    return round(1_000_000 / value)


class HttpFetcher:
    """
    Fetcher backed by the Key Light HTTP API.

    The client is shared across requests; each fetch targets the endpoint it
    is given.
    """

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        verify_tls: bool = True,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._timeout = timeout
        self._verify_tls = verify_tls
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def open(self) -> None:
        self._client = httpx.AsyncClient(
            timeout=httpx.Timeout(self._timeout),
            verify=self._verify_tls,
            transport=self._transport,
        )

    async def close(self) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    async def fetch(self, endpoint: str) -> DeviceData:
        if self._client is None:
            raise FetchError("failed to create client: fetcher is not open")

        try:
            device = Device.model_validate(
                await self._get_json(f"{endpoint}/elgato/accessory-info")
            )
        except (httpx.HTTPError, httpx.InvalidURL, ValueError) as exc:
            raise FetchError(f"failed to fetch device: {exc}") from exc

        try:
            wire = _WireLights.model_validate(
                await self._get_json(f"{endpoint}/elgato/lights")
            )
        except (httpx.HTTPError, httpx.InvalidURL, ValueError) as exc:
            raise FetchError(f"failed to fetch lights: {exc}") from exc

        lights = [
            Light(on=bool(l.on), brightness=l.brightness, temperature=kelvin(l.temperature))
            for l in wire.lights
        ]
        log.debug(
            "fetcher.fetched",
            endpoint=endpoint,
            serial=device.serial_number,
            lights=len(lights),
        )
        return DeviceData(device=device, lights=lights)

    async def _get_json(self, url: str) -> object:
        assert self._client
        resp = await self._client.get(url)
        resp.raise_for_status()
        return resp.json()
