from __future__ import annotations

import time
import uuid
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Awaitable, Callable

import httpx
from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from starlette.exceptions import HTTPException as StarletteHTTPException

from src.api import assemblers
from src.api.assemblers import Services
from src.api.streaming import stream_media
from src.upstream.api_client import UpstreamError
from src.utils.config import load_service_config
from src.utils.logging import bind_request_context, clear_request_context, get_logger, setup_logging


logger = get_logger(component="api")

SERVICE_CONFIG = load_service_config()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    setup_logging()
    config = SERVICE_CONFIG
    async with httpx.AsyncClient(
        timeout=config.http.timeout_seconds,
        headers={"User-Agent": config.http.user_agent},
    ) as http:
        app.state.services = Services.build(config, http)
        logger.info("service_started", tikwm=config.upstream.tikwm_base_url, timezone=config.display.timezone)
        yield
    logger.info("service_stopped")


app = FastAPI(title="media-proxy", version="v1", lifespan=lifespan)
app.add_middleware(
    CORSMiddleware,
    allow_origins=list(SERVICE_CONFIG.cors.allow_origins),
    allow_methods=["GET"],
    allow_headers=["*"],
)


@app.middleware("http")
async def request_context(request: Request, call_next: Callable[[Request], Awaitable[Response]]) -> Response:
    request_id = request.headers.get("x-request-id") or uuid.uuid4().hex[:12]
    bind_request_context(request_id=request_id, method=request.method, path=request.url.path)
    started = time.perf_counter()
    try:
        try:
            response = await call_next(request)
        except Exception as exc:
            # Errors without a registered handler would otherwise bypass this middleware.
            response = await unhandled_error_handler(request, exc)
        response.headers["X-Request-ID"] = request_id
        logger.info(
            "request_completed",
            status_code=response.status_code,
            duration_ms=int((time.perf_counter() - started) * 1000),
        )
        return response
    finally:
        clear_request_context()


def get_services(request: Request) -> Services:
    return request.app.state.services


# ---------------------------
# Error mapping: every failure answers {"error": <message>}
# ---------------------------

@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"error": exc.detail}, headers=exc.headers)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    problems = []
    for err in exc.errors():
        loc = ".".join(str(x) for x in err.get("loc", ()) if x != "query")
        problems.append(f"{loc}: {err.get('msg')}" if loc else str(err.get("msg")))
    return JSONResponse(status_code=400, content={"error": "; ".join(problems) or "Invalid request"})


@app.exception_handler(UpstreamError)
async def upstream_error_handler(request: Request, exc: UpstreamError) -> JSONResponse:
    logger.error("upstream_error", path=request.url.path, error_type=type(exc).__name__, error=str(exc))
    return JSONResponse(status_code=500, content={"error": str(exc)})


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("unhandled_error", path=request.url.path)
    return JSONResponse(status_code=500, content={"error": str(exc)})


# ---------------------------
# Service
# ---------------------------

@app.get("/")
async def index() -> dict[str, Any]:
    return {
        "name": "media-proxy",
        "version": "v1",
        "endpoints": sorted(
            r.path for r in app.routes if getattr(r, "path", "").startswith("/api/")
        ),
    }


@app.get("/health")
async def health() -> dict:
    return {"ok": True}


# ---------------------------
# TikTok
# ---------------------------

@app.get("/api/tt/v-get")
async def tt_video_info(url: str | None = None, services: Services = Depends(get_services)) -> dict[str, Any]:
    return await assemblers.video_info(services, url)


@app.get("/api/tt/v-download")
async def tt_video_download(
    url: str | None = None,
    quality: str | None = None,
    services: Services = Depends(get_services),
) -> Response:
    target = await assemblers.video_download_target(services, url, quality)
    return await stream_media(services.http, target, chunk_size=services.config.http.stream_chunk_size)


@app.get("/api/tt/audio-detail")
async def tt_audio_detail(url: str | None = None, services: Services = Depends(get_services)) -> dict[str, Any]:
    return await assemblers.audio_detail(services, url)


@app.get("/api/tt/audio-download")
async def tt_audio_download(url: str | None = None, services: Services = Depends(get_services)) -> Response:
    target = await assemblers.audio_download_target(services, url)
    return await stream_media(services.http, target, chunk_size=services.config.http.stream_chunk_size)


@app.get("/api/tt/video-comments")
async def tt_video_comments(url: str | None = None, services: Services = Depends(get_services)) -> dict[str, Any]:
    return await assemblers.video_comments(services, url)


@app.get("/api/tt/search-videos")
async def tt_search_videos(
    keywords: str | None = None,
    cursor: int = 0,
    count: int = 10,
    services: Services = Depends(get_services),
) -> dict[str, Any]:
    return await assemblers.search_videos(services, keywords, cursor=cursor, count=count)


@app.get("/api/tt/trending")
async def tt_trending(region: str | None = None, services: Services = Depends(get_services)) -> dict[str, Any]:
    return await assemblers.trending(services, region)


@app.get("/api/tt/user-get")
async def tt_user_get(username: str | None = None, services: Services = Depends(get_services)) -> dict[str, Any]:
    return await assemblers.user_detail(services, username)


@app.get("/api/tt/user-posts")
async def tt_user_posts(username: str | None = None, services: Services = Depends(get_services)) -> dict[str, Any]:
    return await assemblers.user_posts(services, username)


@app.get("/api/tt/user-following")
async def tt_user_following(username: str | None = None, services: Services = Depends(get_services)) -> dict[str, Any]:
    return await assemblers.user_following(services, username)


@app.get("/api/tt/user-favorites")
async def tt_user_favorites(username: str | None = None, services: Services = Depends(get_services)) -> dict[str, Any]:
    return await assemblers.user_favorites(services, username)


# ---------------------------
# YouTube
# ---------------------------

@app.get("/api/yt/v-get")
async def yt_video_info(
    id: str | None = None,
    url: str | None = None,
    services: Services = Depends(get_services),
) -> dict[str, Any]:
    return await assemblers.youtube_video(services, id, url)


@app.get("/api/yt/dislikes")
async def yt_dislikes(
    id: str | None = None,
    url: str | None = None,
    services: Services = Depends(get_services),
) -> dict[str, Any]:
    return await assemblers.youtube_dislikes(services, id, url)
