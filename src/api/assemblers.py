from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass
from datetime import tzinfo
from typing import Any, Iterable

import httpx
from fastapi import HTTPException

from src.api.streaming import MediaTarget, audio_filename, video_filename
from src.transforms.countries import resolve_region
from src.transforms.formatters import resolve_timezone
from src.transforms.tiktok import (
    FAVORITE_COUNTS,
    POST_COUNTS,
    SEARCH_COUNTS,
    TRENDING_COUNTS,
    format_comment,
    format_feed_video,
    format_following,
    format_music,
    format_user_detail,
    format_user_stats,
    format_video_detail,
)
from src.transforms.youtube import extract_video_id, format_votes, format_youtube_video
from src.upstream.links import get_desktop_url, shorten_url
from src.upstream.tikwm import TikwmClient
from src.upstream.tiktok_web import TikTokWebClient
from src.upstream.youtube import DislikeClient, YouTubeClient
from src.utils.config import ServiceConfig
from src.utils.logging import get_logger


logger = get_logger(component="assemblers")


@dataclass(frozen=True)
class Services:
    """Per-process upstream clients sharing one pooled httpx client."""

    config: ServiceConfig
    http: httpx.AsyncClient
    tikwm: TikwmClient
    tiktok_web: TikTokWebClient
    youtube: YouTubeClient
    dislikes: DislikeClient
    tz: tzinfo

    @classmethod
    def build(cls, config: ServiceConfig, http: httpx.AsyncClient) -> "Services":
        return cls(
            config=config,
            http=http,
            tikwm=TikwmClient(
                http,
                base_url=config.upstream.tikwm_base_url,
                bounded_timeout_seconds=config.http.bounded_timeout_seconds,
            ),
            tiktok_web=TikTokWebClient(
                http,
                base_url=config.upstream.tiktok_web_base_url,
                user_agent=config.http.user_agent,
            ),
            youtube=YouTubeClient(
                http,
                base_url=config.youtube.base_url,
                api_key_env=config.youtube.api_key_env,
            ),
            dislikes=DislikeClient(http, base_url=config.upstream.dislikes_base_url),
            tz=resolve_timezone(config.display.timezone),
        )

    async def desktop_url(self, url: str) -> str:
        return await get_desktop_url(self.http, url)

    async def shorten(self, url: str) -> str:
        return await shorten_url(
            self.http,
            url,
            endpoint=self.config.shortener.endpoint,
            enabled=self.config.shortener.enabled,
        )


def require_param(value: str | None, message: str) -> str:
    if value is None or not value.strip():
        raise HTTPException(status_code=400, detail=message)
    return value.strip()


def not_found(message: str) -> HTTPException:
    logger.info("upstream_not_found", reason=message)
    return HTTPException(status_code=404, detail=message)


def _data(envelope: dict[str, Any]) -> dict[str, Any]:
    data = envelope.get("data")
    return data if isinstance(data, dict) else {}


async def _decorate_feed(
    services: Services,
    videos: list[dict[str, Any]],
    *,
    counts: Iterable[str],
    with_region: bool = False,
) -> list[dict[str, Any]]:
    counts = tuple(counts)
    shortened = await asyncio.gather(*(services.shorten(v.get("play") or "") for v in videos))
    return [
        format_feed_video(v, shortened_play=short, counts=counts, tz=services.tz, with_region=with_region)
        for v, short in zip(videos, shortened)
    ]


# ---------------------------
# TikTok videos & audio
# ---------------------------

async def fetch_video(services: Services, url: str) -> dict[str, Any]:
    """Raw provider envelope for a (desktop) video URL. Shared by info, download and comments."""
    return await services.tikwm.video_info(url)


def require_video(envelope: dict[str, Any]) -> dict[str, Any]:
    if not envelope.get("data"):
        raise not_found("Video not found")
    return _data(envelope)


async def video_info(services: Services, url: str | None) -> dict[str, Any]:
    url = require_param(url, "Video URL is required")
    final_url = await services.desktop_url(url)
    envelope = await fetch_video(services, final_url)
    data = require_video(envelope)

    images = data.get("images")
    shortened_images: list[str] = []
    if isinstance(images, list):
        shortened_images = list(await asyncio.gather(*(services.shorten(i) for i in images)))

    return {**envelope, "data": format_video_detail(data, shortened_images=shortened_images, tz=services.tz)}


async def video_download_target(services: Services, url: str | None, quality: str | None = None) -> MediaTarget:
    url = require_param(url, "Video URL is required")
    final_url = await services.desktop_url(url)
    data = require_video(await fetch_video(services, final_url))

    play = (data.get("hdplay") or data.get("play")) if quality == "hd" else data.get("play")
    media_url = services.tikwm.media_url(play)
    if not media_url:
        raise not_found("Video not found")
    return MediaTarget(url=media_url, filename=video_filename(data), media_type="video/mp4")


async def _fetch_music(services: Services, url: str | None) -> tuple[dict[str, Any], dict[str, Any]]:
    url = require_param(url, "Audio URL is required")
    final_url = await services.desktop_url(url)
    envelope = await services.tikwm.music_info(final_url)
    if not envelope.get("data"):
        raise not_found("Audio not found")
    return envelope, _data(envelope)


async def audio_detail(services: Services, url: str | None) -> dict[str, Any]:
    envelope, data = await _fetch_music(services, url)
    return {**envelope, "data": format_music(data)}


async def audio_download_target(services: Services, url: str | None) -> MediaTarget:
    _, data = await _fetch_music(services, url)
    media_url = services.tikwm.media_url(data.get("play"))
    if not media_url:
        raise not_found("Audio not found")
    return MediaTarget(url=media_url, filename=audio_filename(data), media_type="audio/mpeg")


async def video_comments(services: Services, url: str | None) -> dict[str, Any]:
    url = require_param(url, "Video URL is required")
    final_url = await services.desktop_url(url)
    video_envelope, comments_envelope = await asyncio.gather(
        fetch_video(services, final_url),
        services.tikwm.comments(final_url),
    )
    author = require_video(video_envelope).get("author") or {}

    comments = _data(comments_envelope).get("comments")
    if not comments:
        raise not_found("No comments found for this video")

    return {
        "data": {
            "comments": [format_comment(c, tz=services.tz) for c in comments],
            "unique_id": author.get("unique_id") or "unknown",
            "user_id": author.get("id") or "unknown",
        }
    }


# ---------------------------
# TikTok feeds
# ---------------------------

async def search_videos(services: Services, keywords: str | None, cursor: int = 0, count: int = 10) -> dict[str, Any]:
    keywords = require_param(keywords, "Keywords parameter is required")
    envelope = await services.tikwm.search_videos(keywords, cursor=cursor, count=count)
    data = _data(envelope)
    videos = data.get("videos")
    if not videos:
        raise not_found("No videos found")

    decorated = await _decorate_feed(services, videos, counts=SEARCH_COUNTS)
    return {**envelope, "data": {**data, "videos": decorated}}


async def trending(services: Services, region: str | None) -> dict[str, Any]:
    region = require_param(region, "Region is required")
    country = resolve_region(region)
    if country is None:
        raise not_found("Region not found")

    envelope = await services.tikwm.trending(country.id)
    videos = envelope.get("data")
    if not isinstance(videos, list) or not videos:
        raise not_found("No trending videos found for this region")

    decorated = await _decorate_feed(services, videos, counts=TRENDING_COUNTS)
    return {"data": {"region": country.name, "formattedVideos": decorated}}


# ---------------------------
# TikTok users
# ---------------------------

def _username(value: str | None) -> str:
    return require_param(value, "Username is required").lstrip("@")


async def user_detail(services: Services, username: str | None) -> dict[str, Any]:
    username = _username(username)
    started = time.perf_counter()

    user_info = await services.tiktok_web.user_info(username)
    if user_info is None:
        raise not_found("User data not found or script element missing")
    if not user_info.get("user"):
        raise not_found("User not found")

    formatted = format_user_detail(user_info, tz=services.tz)
    return {
        "msg": "success",
        **formatted,
        "processTime": int((time.perf_counter() - started) * 1000),
    }


async def user_posts(services: Services, username: str | None) -> dict[str, Any]:
    username = _username(username)
    info_envelope, posts_envelope = await asyncio.gather(
        services.tikwm.user_info(username),
        services.tikwm.user_posts(username),
    )
    stats = _data(info_envelope).get("stats")
    if not stats:
        raise not_found("User not found")

    videos = _data(posts_envelope).get("videos")
    if not videos:
        raise not_found("No videos found for this user")

    decorated = await _decorate_feed(services, videos, counts=POST_COUNTS)
    return {"data": {"videos": decorated, "user_stats": format_user_stats(stats)}}


async def user_following(services: Services, username: str | None) -> dict[str, Any]:
    username = _username(username)
    # The following list is keyed by the numeric id, so this lookup must come first.
    info_envelope = await services.tikwm.user_info(username)
    user_id = (_data(info_envelope).get("user") or {}).get("id")
    if not user_id:
        raise not_found("Failed to get user ID")

    envelope = await services.tikwm.user_following(username, str(user_id))
    followings = _data(envelope).get("followings")
    if not followings:
        raise not_found("No following accounts found")

    return {"data": {"followings": [format_following(u) for u in followings]}}


async def user_favorites(services: Services, username: str | None) -> dict[str, Any]:
    username = _username(username)
    envelope = await services.tikwm.user_favorites(username)
    data = _data(envelope)
    videos = data.get("videos")
    if not videos:
        raise not_found("No favorite videos found for this user")

    decorated = await _decorate_feed(services, videos, counts=FAVORITE_COUNTS, with_region=True)
    return {**envelope, "data": {**data, "videos": decorated}}


# ---------------------------
# YouTube
# ---------------------------

def _video_id(video_id: str | None, url: str | None) -> str:
    raw = require_param(video_id or url, "id parameter is required")
    resolved = extract_video_id(raw)
    if resolved is None:
        raise HTTPException(status_code=400, detail="Invalid YouTube video id or URL")
    return resolved


async def youtube_video(services: Services, video_id: str | None, url: str | None = None) -> dict[str, Any]:
    vid = _video_id(video_id, url)
    payload, votes = await asyncio.gather(
        services.youtube.videos(vid),
        services.dislikes.votes(vid),
    )
    items = payload.get("items") or []
    if not items:
        raise not_found("Video not found")

    return {**payload, "items": [format_youtube_video(item, votes, tz=services.tz) for item in items]}


async def youtube_dislikes(services: Services, video_id: str | None, url: str | None = None) -> dict[str, Any]:
    vid = _video_id(video_id, url)
    votes = await services.dislikes.votes(vid)
    if not votes:
        raise not_found("Video not found")
    return format_votes(votes)
