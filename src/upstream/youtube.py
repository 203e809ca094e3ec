from __future__ import annotations

import os
from typing import Any

import httpx
from dotenv import load_dotenv

from src.upstream.api_client import UpstreamClient, UpstreamConfigError, UpstreamDecodeError, UpstreamStatusError


VIDEO_PARTS = "snippet,contentDetails,statistics,liveStreamingDetails"


class YouTubeClient(UpstreamClient):
    """
    YouTube Data API v3 (videos.list only).

    The API key is read from the environment on each call so the TikTok routes
    keep working when no key is configured.
    """

    name = "youtube"

    def __init__(self, http: httpx.AsyncClient, *, base_url: str, api_key_env: str = "YOUTUBE_API_KEY") -> None:
        super().__init__(http, base_url=base_url)
        self._api_key_env = api_key_env

    def _api_key(self) -> str:
        load_dotenv()
        api_key = os.getenv(self._api_key_env)
        if not api_key:
            raise UpstreamConfigError(f"Missing API key env var: {self._api_key_env}")
        return api_key

    async def videos(self, video_id: str) -> dict[str, Any]:
        result = await self.get_json(
            "/videos",
            {"part": VIDEO_PARTS, "id": video_id, "key": self._api_key()},
        )
        if not isinstance(result.data, dict):
            raise UpstreamDecodeError("Unexpected youtube payload for /videos")
        return result.data


class DislikeClient(UpstreamClient):
    """Return YouTube Dislike public API."""

    name = "dislikes"

    async def votes(self, video_id: str) -> dict[str, Any] | None:
        try:
            result = await self.get_json("/votes", {"videoId": video_id})
        except UpstreamStatusError as e:
            # Unknown ids are reported as 404 (or 400 for malformed ids).
            if e.status_code in (400, 404):
                return None
            raise
        return result.data if isinstance(result.data, dict) else None
