from __future__ import annotations

import json
import re
from typing import Any

import httpx

from src.upstream.api_client import UpstreamClient, UpstreamDecodeError


REHYDRATION_RE = re.compile(
    r'<script id="__UNIVERSAL_DATA_FOR_REHYDRATION__"[^>]*>(.*?)</script>',
    re.DOTALL,
)


def extract_user_info(html: str) -> dict[str, Any] | None:
    """
    Pull `webapp.user-detail.userInfo` out of a profile page.

    Returns None when the rehydration script is missing, and an empty dict when
    the script exists but carries no user detail.
    """
    match = REHYDRATION_RE.search(html or "")
    if not match:
        return None
    try:
        payload = json.loads(match.group(1))
    except json.JSONDecodeError as e:
        raise UpstreamDecodeError("Failed to parse TikTok rehydration data") from e

    scope = (payload or {}).get("__DEFAULT_SCOPE__") or {}
    detail = scope.get("webapp.user-detail") or {}
    user_info = detail.get("userInfo")
    return user_info if isinstance(user_info, dict) else {}


class TikTokWebClient(UpstreamClient):
    name = "tiktok_web"

    def __init__(self, http: httpx.AsyncClient, *, base_url: str, user_agent: str) -> None:
        super().__init__(http, base_url=base_url)
        self._user_agent = user_agent

    async def profile_html(self, username: str) -> str:
        return await self.get_text(f"/@{username}", headers={"User-Agent": self._user_agent})

    async def user_info(self, username: str) -> dict[str, Any] | None:
        return extract_user_info(await self.profile_html(username))
