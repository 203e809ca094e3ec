from __future__ import annotations

import httpx
import pytest
from respx import MockRouter

from src.upstream.links import is_mobile, resolve_desktop_url, shorten_link, shorten_url


SHORTENER = "https://tinyurl.com/api-create.php"
MOBILE_URL = "https://vt.tiktok.com/ZSabc123/"
DESKTOP_URL = "https://www.tiktok.com/@someone/video/7300000000000000000"


@pytest.mark.parametrize(
    "url,expected",
    [
        ("https://vt.tiktok.com/ZSabc123/", True),
        ("https://m.tiktok.com/ZSabc123", True),
        ("https://www.tiktok.com/@someone/video/1", False),
        ("http://vt.tiktok.com/ZSabc123/", False),
        ("", False),
        (None, False),
    ],
)
def test_is_mobile(url, expected) -> None:
    assert is_mobile(url) is expected


@pytest.mark.asyncio
async def test_resolve_desktop_url_uses_first_location(respx_mock: MockRouter) -> None:
    route = respx_mock.get(MOBILE_URL).mock(
        return_value=httpx.Response(301, headers={"Location": DESKTOP_URL})
    )
    async with httpx.AsyncClient() as http:
        out = await resolve_desktop_url(http, MOBILE_URL)

    assert route.call_count == 1
    assert out.url == DESKTOP_URL
    assert out.changed is True


@pytest.mark.asyncio
async def test_resolve_desktop_url_leaves_desktop_links_alone(respx_mock: MockRouter) -> None:
    async with httpx.AsyncClient() as http:
        out = await resolve_desktop_url(http, DESKTOP_URL)

    assert out.url == DESKTOP_URL
    assert out.changed is False
    assert respx_mock.calls.call_count == 0


@pytest.mark.asyncio
async def test_resolve_desktop_url_without_location_falls_back(respx_mock: MockRouter) -> None:
    respx_mock.get(MOBILE_URL).mock(return_value=httpx.Response(200, text="<html></html>"))
    async with httpx.AsyncClient() as http:
        out = await resolve_desktop_url(http, MOBILE_URL)

    assert out.url == MOBILE_URL
    assert out.changed is False


@pytest.mark.asyncio
async def test_resolve_desktop_url_on_network_error_falls_back(respx_mock: MockRouter) -> None:
    respx_mock.get(MOBILE_URL).mock(side_effect=httpx.ConnectError("boom"))
    async with httpx.AsyncClient() as http:
        out = await resolve_desktop_url(http, MOBILE_URL)

    assert out.url == MOBILE_URL


@pytest.mark.asyncio
async def test_shorten_link_returns_service_body(respx_mock: MockRouter) -> None:
    route = respx_mock.get(host="tinyurl.com", path="/api-create.php").mock(
        return_value=httpx.Response(200, text="https://tinyurl.com/abc123\n")
    )
    async with httpx.AsyncClient() as http:
        out = await shorten_link(http, "https://cdn.example/video.mp4", endpoint=SHORTENER)

    assert out.url == "https://tinyurl.com/abc123"
    assert out.changed is True
    assert route.calls.last.request.url.params["url"] == "https://cdn.example/video.mp4"


@pytest.mark.asyncio
async def test_shorten_url_error_status_falls_back(respx_mock: MockRouter) -> None:
    respx_mock.get(host="tinyurl.com", path="/api-create.php").mock(return_value=httpx.Response(500, text="Error"))
    async with httpx.AsyncClient() as http:
        out = await shorten_url(http, "https://cdn.example/video.mp4", endpoint=SHORTENER)

    assert out == "https://cdn.example/video.mp4"


@pytest.mark.asyncio
async def test_shorten_url_unexpected_body_falls_back(respx_mock: MockRouter) -> None:
    respx_mock.get(host="tinyurl.com", path="/api-create.php").mock(return_value=httpx.Response(200, text="Error"))
    async with httpx.AsyncClient() as http:
        out = await shorten_url(http, "https://cdn.example/video.mp4", endpoint=SHORTENER)

    assert out == "https://cdn.example/video.mp4"


@pytest.mark.asyncio
async def test_shorten_url_disabled_or_empty_makes_no_request(respx_mock: MockRouter) -> None:
    async with httpx.AsyncClient() as http:
        assert await shorten_url(http, "https://cdn.example/a.mp4", endpoint=SHORTENER, enabled=False) == (
            "https://cdn.example/a.mp4"
        )
        assert await shorten_url(http, "", endpoint=SHORTENER) == ""

    assert respx_mock.calls.call_count == 0


@pytest.mark.asyncio
@pytest.mark.respx(assert_all_called=False)
async def test_resolve_desktop_url_follows_a_single_hop(respx_mock: MockRouter) -> None:
    first_hop = "https://vm.tiktok.com/ZShop2/"
    respx_mock.get(MOBILE_URL).mock(return_value=httpx.Response(301, headers={"Location": first_hop}))
    second = respx_mock.get(first_hop).mock(return_value=httpx.Response(302, headers={"Location": DESKTOP_URL}))
    async with httpx.AsyncClient() as http:
        out = await resolve_desktop_url(http, MOBILE_URL)

    assert out.url == first_hop
    assert second.call_count == 0


@pytest.mark.asyncio
async def test_resolve_desktop_url_invalid_url_falls_back(respx_mock: MockRouter) -> None:
    bad = MOBILE_URL + "\x01"
    async with httpx.AsyncClient() as http:
        out = await resolve_desktop_url(http, bad)

    assert out.url == bad
    assert out.changed is False
    assert respx_mock.calls.call_count == 0
