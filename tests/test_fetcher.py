"""Tests for the Key Light HTTP fetcher."""

import httpx
import pytest

from keylight_exporter.exceptions import FetchError
from keylight_exporter.fetcher import Fetcher, HttpFetcher, kelvin

ACCESSORY_INFO = {
    "productName": "Elgato Key Light",
    "hardwareBoardType": 53,
    "firmwareBuildNumber": 192,
    "firmwareVersion": "1.0.3",
    "serialNumber": "BW33J1A02740",
    "displayName": "Office",
}

LIGHTS = {
    "numberOfLights": 2,
    "lights": [
        {"on": 1, "brightness": 20, "temperature": 250},
        {"on": 0, "brightness": 3, "temperature": 143},
    ],
}


def _transport(routes: dict[str, httpx.Response]) -> httpx.MockTransport:
    def handler(request: httpx.Request) -> httpx.Response:
        resp = routes.get(request.url.path)
        if resp is None:
            return httpx.Response(404)
        return resp

    return httpx.MockTransport(handler)


@pytest.fixture
async def open_fetcher():
    fetchers: list[HttpFetcher] = []

    async def _open(routes: dict[str, httpx.Response]) -> HttpFetcher:
        f = HttpFetcher(timeout=1.0, transport=_transport(routes))
        await f.open()
        fetchers.append(f)
        return f

    yield _open

    for f in fetchers:
        await f.close()


def test_http_fetcher_is_fetcher():
    assert isinstance(HttpFetcher(), Fetcher)


@pytest.mark.parametrize("value, want", [(0, 0), (-1, 0), (143, 6993), (250, 4000), (344, 2907)])
def test_kelvin(value, want):
    assert kelvin(value) == want


async def test_fetch(open_fetcher):
    fetcher = await open_fetcher({
        "/elgato/accessory-info": httpx.Response(200, json=ACCESSORY_INFO),
        "/elgato/lights": httpx.Response(200, json=LIGHTS),
    })

    data = await fetcher.fetch("http://keylight:9123")

    assert data.device.display_name == "Office"
    assert data.device.firmware_version == "1.0.3"
    assert data.device.serial_number == "BW33J1A02740"
    assert data.device.product_name == "Elgato Key Light"
    assert [(l.on, l.brightness, l.temperature) for l in data.lights] == [
        (True, 20, 4000),
        (False, 3, 6993),
    ]


async def test_fetch_device_error(open_fetcher):
    fetcher = await open_fetcher({
        "/elgato/accessory-info": httpx.Response(503),
        "/elgato/lights": httpx.Response(200, json=LIGHTS),
    })

    with pytest.raises(FetchError, match="failed to fetch device"):
        await fetcher.fetch("http://keylight:9123")


async def test_fetch_lights_malformed(open_fetcher):
    fetcher = await open_fetcher({
        "/elgato/accessory-info": httpx.Response(200, json=ACCESSORY_INFO),
        "/elgato/lights": httpx.Response(200, json={"lights": [{"brightness": "bright"}]}),
    })

    with pytest.raises(FetchError, match="failed to fetch lights"):
        await fetcher.fetch("http://keylight:9123")


async def test_fetch_invalid_json(open_fetcher):
    fetcher = await open_fetcher({
        "/elgato/accessory-info": httpx.Response(200, content=b"<html>"),
    })

    with pytest.raises(FetchError, match="failed to fetch device"):
        await fetcher.fetch("http://keylight:9123")


async def test_fetch_without_open():
    with pytest.raises(FetchError):
        await HttpFetcher().fetch("http://keylight:9123")


async def test_fetch_invalid_url(open_fetcher):
    fetcher = await open_fetcher({})

    with pytest.raises(FetchError, match="failed to fetch device"):
        await fetcher.fetch("http://foo\x00bar:9123")
