from __future__ import annotations

from datetime import tzinfo
from typing import Any, Iterable

from src.transforms.formatters import format_bytes, format_duration, format_number, format_region, format_time, parse_int


SEARCH_COUNTS = ("play_count", "digg_count", "comment_count", "collect_count")
TRENDING_COUNTS = ("play_count", "digg_count", "comment_count")
FAVORITE_COUNTS = ("play_count", "digg_count", "comment_count", "share_count", "collect_count")
POST_COUNTS = ("play_count", "digg_count", "comment_count", "share_count", "download_count", "collect_count")
VIDEO_DETAIL_COUNTS = ("play_count", "digg_count", "comment_count", "collect_count")

NO_DURATION = "0:00"


def _counts(item: dict[str, Any], keys: Iterable[str]) -> dict[str, str]:
    return {k: format_number(item.get(k) or 0) for k in keys}


def video_duration(data: dict[str, Any]) -> str:
    """Video duration, else the soundtrack duration (photo posts), else 0:00."""
    duration = parse_int(data.get("duration")) or 0
    if duration > 0:
        return format_duration(duration)
    music_duration = parse_int((data.get("music_info") or {}).get("duration")) or 0
    if music_duration > 0:
        return format_duration(music_duration)
    return NO_DURATION


def format_video_detail(
    data: dict[str, Any],
    *,
    shortened_images: list[str],
    tz: tzinfo | None = None,
) -> dict[str, Any]:
    return {
        **data,
        "shortened_images": shortened_images,
        "formatted": {
            "duration": video_duration(data),
            "size": format_bytes(data.get("size") or 0),
            "hd_size": format_bytes(data.get("hd_size") or 0),
            **_counts(data, VIDEO_DETAIL_COUNTS),
            "create_time": format_time(data.get("create_time"), tz),
            "region": format_region(data.get("region")),
        },
    }


def format_feed_video(
    video: dict[str, Any],
    *,
    shortened_play: str,
    counts: Iterable[str],
    tz: tzinfo | None = None,
    with_region: bool = False,
) -> dict[str, Any]:
    formatted: dict[str, Any] = {
        **_counts(video, counts),
        "create_time": format_time(video.get("create_time"), tz),
    }
    if with_region:
        formatted["region"] = format_region(video.get("region"))
    return {**video, "shortened_play": shortened_play, "formatted": formatted}


def format_music(data: dict[str, Any]) -> dict[str, Any]:
    return {
        **data,
        "formatted": {
            "duration": format_duration(data.get("duration") or 0),
            "video_count": format_number(data.get("video_count") or 0),
        },
    }


def format_user_stats(stats: dict[str, Any]) -> dict[str, str]:
    return {
        "aweme_count": format_number(stats.get("aweme_count") or 0),
        "following_count": format_number(stats.get("following_count") or 0),
        "follower_count": format_number(stats.get("follower_count") or 0),
        "favoriting_count": format_number(stats.get("digg_count") or 0),
        "total_favorited": format_number(stats.get("heart_count") or 0),
    }


def format_following(user: dict[str, Any]) -> dict[str, Any]:
    return {
        **user,
        "formatted": {
            "follower_count": format_number(user.get("follower_count") or 0),
            "aweme_count": format_number(user.get("aweme_count") or 0),
            "region": format_region(user.get("region")),
        },
    }


def format_comment(comment: dict[str, Any], *, tz: tzinfo | None = None) -> dict[str, Any]:
    return {
        **comment,
        "formatted": {
            "create_time": format_time(comment.get("create_time"), tz),
            "digg_count": format_number(comment.get("digg_count") or 0),
        },
    }


def format_user_detail(user_info: dict[str, Any], *, tz: tzinfo | None = None) -> dict[str, Any]:
    """
    Decorate `webapp.user-detail.userInfo` from the profile page.

    `createTime`/`nickNameModifyTime` are replaced by their display strings;
    the raw numbers stay available under `stats`.
    """
    user = user_info.get("user") or {}
    stats = user_info.get("stats") or {}
    return {
        **user_info,
        "user": {
            **user,
            "createTime": format_time(user.get("createTime"), tz),
            "nickNameModifyTime": format_time(user.get("nickNameModifyTime"), tz),
            "formattedStats": {
                "followerCount": format_number(stats.get("followerCount") or 0),
                "heartCount": format_number(stats.get("heartCount") or 0),
                "videoCount": format_number(stats.get("videoCount") or 0),
                "followingCount": format_number(stats.get("followingCount") or 0),
            },
            "formattedRegion": format_region(user.get("region")),
        },
    }
