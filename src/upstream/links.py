from __future__ import annotations

import re
from dataclasses import dataclass

import httpx

from src.utils.logging import get_logger


logger = get_logger(component="links")

MOBILE_URL_RE = re.compile(r"^https://(vt|m)\.tiktok\.com/[a-zA-Z0-9]+/?")


@dataclass(frozen=True)
class LinkResult:
    """Outcome of a best-effort link rewrite. `url` is always usable."""

    url: str
    original: str

    @property
    def changed(self) -> bool:
        return self.url != self.original


def is_mobile(url: str | None) -> bool:
    return bool(url) and MOBILE_URL_RE.match(url) is not None


async def resolve_desktop_url(http: httpx.AsyncClient, url: str) -> LinkResult:
    """
    Turn a vt./m.tiktok.com short link into the desktop URL it redirects to.

    Only the first hop's Location header is consulted.
    """
    if not is_mobile(url):
        return LinkResult(url=url, original=url)
    try:
        resp = await http.get(url, follow_redirects=False)
    except (httpx.HTTPError, httpx.InvalidURL) as e:
        logger.warning("desktop_url_resolution_failed", url=url, error=str(e))
        return LinkResult(url=url, original=url)

    location = resp.headers.get("location")
    if not location:
        logger.info("desktop_url_missing_location", url=url, status_code=resp.status_code)
        return LinkResult(url=url, original=url)
    return LinkResult(url=location, original=url)


async def get_desktop_url(http: httpx.AsyncClient, url: str) -> str:
    return (await resolve_desktop_url(http, url)).url


async def shorten_link(
    http: httpx.AsyncClient,
    long_url: str,
    *,
    endpoint: str,
    enabled: bool = True,
) -> LinkResult:
    if not enabled or not long_url:
        return LinkResult(url=long_url, original=long_url)
    try:
        resp = await http.get(endpoint, params={"url": long_url})
        resp.raise_for_status()
        text = resp.text.strip()
    except httpx.HTTPError as e:
        logger.warning("shorten_url_failed", url=long_url, error=str(e))
        return LinkResult(url=long_url, original=long_url)

    if not text.startswith(("http://", "https://")):
        logger.warning("shorten_url_unexpected_body", url=long_url)
        return LinkResult(url=long_url, original=long_url)
    return LinkResult(url=text, original=long_url)


async def shorten_url(http: httpx.AsyncClient, long_url: str, *, endpoint: str, enabled: bool = True) -> str:
    return (await shorten_link(http, long_url, endpoint=endpoint, enabled=enabled)).url
