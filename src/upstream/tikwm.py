from __future__ import annotations

from typing import Any

from src.upstream.api_client import UpstreamClient, UpstreamDecodeError


class TikwmClient(UpstreamClient):
    """
    TikTok data provider (tikwm).

    Every call returns the raw envelope `{"code", "msg", "processed_time", "data"}`.
    The provider answers 200 with `data` absent when nothing matches, so callers
    decide "not found" from the envelope, never from the status code.
    """

    name = "tikwm"

    async def _envelope(self, endpoint: str, params: dict[str, Any], *, bounded: bool = False) -> dict[str, Any]:
        result = await self.get_json(endpoint, params, bounded=bounded)
        if not isinstance(result.data, dict):
            raise UpstreamDecodeError(f"Unexpected {self.name} payload for {endpoint}")
        return result.data

    async def video_info(self, url: str) -> dict[str, Any]:
        return await self._envelope("/api/", {"url": url, "hd": 1})

    async def music_info(self, url: str) -> dict[str, Any]:
        return await self._envelope("/api/music/info", {"url": url}, bounded=True)

    async def search_videos(self, keywords: str, *, cursor: int = 0, count: int = 10) -> dict[str, Any]:
        return await self._envelope("/api/feed/search", {"keywords": keywords, "cursor": cursor, "count": count})

    async def trending(self, region_code: str) -> dict[str, Any]:
        return await self._envelope("/api/feed/list", {"region": region_code.lower()}, bounded=True)

    async def user_info(self, unique_id: str) -> dict[str, Any]:
        return await self._envelope("/api/user/info", {"unique_id": unique_id})

    async def user_posts(self, unique_id: str) -> dict[str, Any]:
        return await self._envelope("/api/user/posts", {"unique_id": unique_id}, bounded=True)

    async def user_following(self, unique_id: str, user_id: str) -> dict[str, Any]:
        return await self._envelope(
            "/api/user/following",
            {"unique_id": unique_id, "user_id": user_id},
            bounded=True,
        )

    async def user_favorites(self, unique_id: str) -> dict[str, Any]:
        return await self._envelope("/api/user/favorite", {"unique_id": unique_id}, bounded=True)

    async def comments(self, url: str) -> dict[str, Any]:
        return await self._envelope("/api/comment/list", {"url": url}, bounded=True)

    def media_url(self, value: str | None) -> str | None:
        # Media links are sometimes returned relative to the provider host.
        if not value:
            return None
        if value.startswith(("http://", "https://")):
            return value
        return self.url_for(value)
