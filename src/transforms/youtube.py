from __future__ import annotations

import re
from datetime import datetime, tzinfo
from typing import Any

from src.transforms.formatters import (
    format_duration,
    format_number,
    format_time,
    from_now,
    iso8601_duration_to_seconds,
    parse_iso8601_datetime,
)


VIDEO_ID_RE = re.compile(r"^[\w-]{11}$")
YOUTUBE_URL_RE = re.compile(
    r"^((?:https?:)?//)?((?:www|m|music)\.)?(youtube(?:-nocookie)?\.com|youtu\.be)"
    r"/(?:watch\?(?:.*&)?v=|embed/|live/|v/|shorts/)?(?P<id>[\w-]{11})",
    re.IGNORECASE,
)


def extract_video_id(value: str | None) -> str | None:
    """Accept a bare video id or any watch/shorts/live/youtu.be URL."""
    if not value:
        return None
    value = value.strip()
    if VIDEO_ID_RE.match(value):
        return value
    match = YOUTUBE_URL_RE.match(value)
    return match.group("id") if match else None


def is_live_broadcast(item: dict[str, Any]) -> bool:
    return (item.get("snippet") or {}).get("liveBroadcastContent") == "live"


def format_youtube_video(
    item: dict[str, Any],
    votes: dict[str, Any] | None,
    *,
    tz: tzinfo | None = None,
    now: datetime | None = None,
) -> dict[str, Any]:
    snippet = item.get("snippet") or {}
    statistics = item.get("statistics") or {}
    details = item.get("contentDetails") or {}
    live_details = item.get("liveStreamingDetails") or {}

    is_live = is_live_broadcast(item)
    # A running stream is dated from its actual start, not from when it was scheduled.
    published_at = (live_details.get("actualStartTime") if is_live else None) or snippet.get("publishedAt")
    published_dt = parse_iso8601_datetime(published_at)

    formatted: dict[str, Any] = {
        "duration": format_duration(iso8601_duration_to_seconds(details.get("duration"))),
        "view_count": format_number(statistics.get("viewCount") or 0),
        "like_count": format_number(statistics.get("likeCount") or 0),
        "comment_count": format_number(statistics.get("commentCount") or 0),
        "dislike_count": format_number(votes.get("dislikes") or 0) if votes else None,
        "is_live": is_live,
        "published": from_now(published_at, is_live, now=now) if published_dt else None,
        "published_at": format_time(published_dt.timestamp(), tz) if published_dt else None,
    }
    if is_live and live_details.get("concurrentViewers") is not None:
        formatted["concurrent_viewers"] = format_number(live_details.get("concurrentViewers"))

    return {**item, "dislikes": votes, "formatted": formatted}


def format_votes(votes: dict[str, Any]) -> dict[str, Any]:
    rating = votes.get("rating")
    return {
        **votes,
        "formatted": {
            "likes": format_number(votes.get("likes") or 0),
            "dislikes": format_number(votes.get("dislikes") or 0),
            "view_count": format_number(votes.get("viewCount") or 0),
            "rating": f"{float(rating):.2f}" if isinstance(rating, (int, float)) else None,
        },
    }
