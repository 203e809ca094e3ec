from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any
from urllib.parse import quote

import httpx
from fastapi.responses import StreamingResponse
from starlette.background import BackgroundTask

from src.upstream.api_client import UpstreamError, UpstreamStatusError, UpstreamTimeoutError
from src.utils.logging import get_logger


logger = get_logger(component="streaming")

_UNSAFE_FILENAME_RE = re.compile(r'[\\/:*?"<>|\x00-\x1f\x7f]+')
_ORIGINAL_SOUND_RE = re.compile(r"^original sound - ")


@dataclass(frozen=True)
class MediaTarget:
    url: str
    filename: str
    media_type: str


def sanitize_filename_part(value: Any, fallback: str = "unknown") -> str:
    text = _UNSAFE_FILENAME_RE.sub("_", str(value or "")).strip(" ._")
    return text or fallback


def video_filename(data: dict[str, Any]) -> str:
    username = sanitize_filename_part((data.get("author") or {}).get("unique_id"))
    video_id = sanitize_filename_part(data.get("id"))
    return f"TikTok_{username}_{video_id}.mp4"


def audio_filename(data: dict[str, Any]) -> str:
    title = _ORIGINAL_SOUND_RE.sub("", str(data.get("title") or "unknown"))
    return f"{sanitize_filename_part(title)}-{sanitize_filename_part(data.get('id'))}.mp3"


def content_disposition(filename: str) -> str:
    # Header values must be latin-1; keep a plain ASCII name and add the RFC 5987 form.
    ascii_name = filename.encode("ascii", "replace").decode("ascii").replace("?", "_")
    return f"attachment; filename=\"{ascii_name}\"; filename*=UTF-8''{quote(filename)}"


async def open_media(http: httpx.AsyncClient, url: str) -> httpx.Response:
    """
    Start the upstream download and return the open response.

    Opening happens before the client response starts, so a dead media link is
    still reported as a JSON error instead of an empty attachment.
    """
    request = http.build_request("GET", url)
    try:
        resp = await http.send(request, stream=True, follow_redirects=True)
    except httpx.TimeoutException as e:
        raise UpstreamTimeoutError("media request timed out") from e
    except httpx.RequestError as e:
        raise UpstreamError(f"media request error: {e}") from e

    if not resp.is_success:
        await resp.aclose()
        logger.warning("media_bad_status", url=url, status_code=resp.status_code)
        raise UpstreamStatusError("media", resp.status_code)
    return resp


async def stream_media(http: httpx.AsyncClient, target: MediaTarget, *, chunk_size: int = 64 * 1024) -> StreamingResponse:
    upstream = await open_media(http, target.url)

    headers = {"Content-Disposition": content_disposition(target.filename)}
    # aiter_bytes decodes; a compressed upstream length would not match the body.
    if upstream.headers.get("content-length") and not upstream.headers.get("content-encoding"):
        headers["Content-Length"] = upstream.headers["content-length"]

    logger.info("media_stream_started", filename=target.filename, media_type=target.media_type)
    return StreamingResponse(
        upstream.aiter_bytes(chunk_size),
        media_type=target.media_type,
        headers=headers,
        background=BackgroundTask(upstream.aclose),
    )
