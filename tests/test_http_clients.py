"""Tests for HTTP-based adapters."""

import asyncio

import httpx
import pytest

from location_share.adapters.nominatim_client import HttpxNominatimClient
from location_share.domain.errors import GeocodingUnavailable


def test_nominatim_client_sends_reverse_query() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"address": {"road": "Rua Augusta"}})

    transport = httpx.MockTransport(handler)
    async_client = httpx.AsyncClient(
        transport=transport, headers={"User-Agent": "location-share-tests"}
    )
    client = HttpxNominatimClient(
        base_url="https://nominatim.test/reverse", http_client=async_client
    )

    payload = asyncio.run(client.reverse(-23.55, -46.63))

    assert payload == {"address": {"road": "Rua Augusta"}}
    params = seen[0].url.params
    assert seen[0].url.path == "/reverse"
    assert params["format"] == "json"
    assert params["lat"] == "-23.55"
    assert params["lon"] == "-46.63"
    assert params["addressdetails"] == "1"
    assert params["zoom"] == "18"
    assert seen[0].headers["User-Agent"] == "location-share-tests"


def test_nominatim_client_raises_unavailable_on_error_status() -> None:
    transport = httpx.MockTransport(lambda request: httpx.Response(503))
    client = HttpxNominatimClient(
        base_url="https://nominatim.test/reverse",
        http_client=httpx.AsyncClient(transport=transport),
    )

    with pytest.raises(GeocodingUnavailable):
        asyncio.run(client.reverse(0.0, 0.0))


def test_nominatim_client_raises_unavailable_on_transport_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("no route", request=request)

    client = HttpxNominatimClient(
        base_url="https://nominatim.test/reverse",
        http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
    )

    with pytest.raises(GeocodingUnavailable):
        asyncio.run(client.reverse(0.0, 0.0))


def test_nominatim_client_create_sets_user_agent() -> None:
    client = HttpxNominatimClient.create(user_agent="tracker/1.0")

    assert client.http_client.headers["User-Agent"] == "tracker/1.0"
    asyncio.run(client.close())
