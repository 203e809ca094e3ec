from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import httpx

from src.utils.logging import get_logger


logger = get_logger(component="upstream")


class UpstreamError(Exception):
    pass


class UpstreamConfigError(UpstreamError):
    pass


class UpstreamTimeoutError(UpstreamError):
    pass


class UpstreamDecodeError(UpstreamError):
    pass


class UpstreamStatusError(UpstreamError):
    def __init__(self, upstream: str, status_code: int, body_text: str | None = None) -> None:
        super().__init__(f"{upstream} responded with status code {status_code}")
        self.upstream = upstream
        self.status_code = status_code
        self.body_text = body_text


@dataclass(frozen=True)
class APIResult:
    status_code: int
    data: Any
    headers: dict[str, str]


class UpstreamClient:
    """
    Base for the provider clients.
    - GET-only
    - Shares one pooled httpx.AsyncClient owned by the app lifespan
    - Non-2xx, transport and JSON errors are raised as UpstreamError subclasses
    """

    name = "upstream"

    def __init__(
        self,
        http: httpx.AsyncClient,
        *,
        base_url: str,
        bounded_timeout_seconds: float | None = None,
    ) -> None:
        self._http = http
        self._base_url = base_url.rstrip("/")
        self._bounded_timeout = float(bounded_timeout_seconds) if bounded_timeout_seconds is not None else None

    @property
    def base_url(self) -> str:
        return self._base_url

    def url_for(self, endpoint: str) -> str:
        if endpoint.startswith(("http://", "https://")):
            return endpoint
        if not endpoint.startswith("/"):
            endpoint = f"/{endpoint}"
        return f"{self._base_url}{endpoint}"

    async def _send(
        self,
        endpoint: str,
        *,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
        bounded: bool = False,
    ) -> httpx.Response:
        url = self.url_for(endpoint)
        kwargs: dict[str, Any] = {"params": params or {}, "headers": headers or {}}
        if bounded and self._bounded_timeout is not None:
            kwargs["timeout"] = self._bounded_timeout

        try:
            resp = await self._http.get(url, **kwargs)
        except httpx.TimeoutException as e:
            logger.warning("upstream_request_timeout", upstream=self.name, url=url)
            raise UpstreamTimeoutError(f"{self.name} request timed out") from e
        except httpx.RequestError as e:
            logger.warning("upstream_request_failed", upstream=self.name, url=url, error=str(e))
            raise UpstreamError(f"{self.name} request error: {e}") from e

        if resp.is_success:
            return resp

        body_text: str | None
        try:
            body_text = resp.text
        except UnicodeDecodeError:
            body_text = None
        logger.warning("upstream_bad_status", upstream=self.name, url=url, status_code=resp.status_code)
        raise UpstreamStatusError(self.name, resp.status_code, body_text=body_text)

    async def get_json(
        self,
        endpoint: str,
        params: dict[str, Any] | None = None,
        *,
        headers: dict[str, str] | None = None,
        bounded: bool = False,
    ) -> APIResult:
        resp = await self._send(endpoint, params=params, headers=headers, bounded=bounded)
        try:
            data = resp.json()
        except ValueError as e:
            raise UpstreamDecodeError(f"Failed to parse JSON from {self.name}") from e
        return APIResult(status_code=resp.status_code, data=data, headers=dict(resp.headers.items()))

    async def get_text(
        self,
        endpoint: str,
        params: dict[str, Any] | None = None,
        *,
        headers: dict[str, str] | None = None,
        bounded: bool = False,
    ) -> str:
        resp = await self._send(endpoint, params=params, headers=headers, bounded=bounded)
        return resp.text
