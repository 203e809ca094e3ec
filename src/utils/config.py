from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import os
import yaml


@dataclass(frozen=True)
class UpstreamConfig:
    tikwm_base_url: str
    tiktok_web_base_url: str
    dislikes_base_url: str


@dataclass(frozen=True)
class YouTubeConfig:
    base_url: str
    api_key_env: str


@dataclass(frozen=True)
class ShortenerConfig:
    endpoint: str
    enabled: bool = True


@dataclass(frozen=True)
class HTTPConfig:
    # NOTE: timeout_seconds is the client default; bounded_timeout_seconds caps the slow provider calls.
    timeout_seconds: float
    bounded_timeout_seconds: float
    user_agent: str
    stream_chunk_size: int = 64 * 1024


@dataclass(frozen=True)
class DisplayConfig:
    timezone: str = "UTC"


@dataclass(frozen=True)
class CORSConfig:
    allow_origins: tuple[str, ...] = ("*",)


@dataclass(frozen=True)
class ServiceConfig:
    upstream: UpstreamConfig
    youtube: YouTubeConfig
    shortener: ShortenerConfig
    http: HTTPConfig
    display: DisplayConfig = field(default_factory=DisplayConfig)
    cors: CORSConfig = field(default_factory=CORSConfig)


def _project_root() -> Path:
    # Resolve from this file: .../src/utils/config.py -> project root is 3 parents up.
    return Path(__file__).resolve().parents[2]


def _as_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in {"1", "true", "yes", "on"}


def load_service_config(path: str | None = None) -> ServiceConfig:
    """
    Load service config from YAML.

    Precedence:
    - explicit `path`
    - env `MEDIA_PROXY_CONFIG`
    - project default `config/service.yaml`
    """
    cfg_path = Path(path or os.getenv("MEDIA_PROXY_CONFIG") or (_project_root() / "config" / "service.yaml"))
    cfg = yaml.safe_load(cfg_path.read_text(encoding="utf-8")) or {}

    upstream = cfg.get("upstream") or {}
    youtube = cfg.get("youtube") or {}
    shortener = cfg.get("shortener") or {}
    http = cfg.get("http") or {}
    display = cfg.get("display") or {}
    cors = cfg.get("cors") or {}

    required = {
        "upstream.tikwm_base_url": upstream.get("tikwm_base_url"),
        "upstream.tiktok_web_base_url": upstream.get("tiktok_web_base_url"),
        "upstream.dislikes_base_url": upstream.get("dislikes_base_url"),
        "youtube.base_url": youtube.get("base_url"),
        "youtube.api_key_env": youtube.get("api_key_env"),
        "shortener.endpoint": shortener.get("endpoint"),
        "http.timeout_seconds": http.get("timeout_seconds"),
        "http.bounded_timeout_seconds": http.get("bounded_timeout_seconds"),
        "http.user_agent": http.get("user_agent"),
    }
    missing = [k for k, v in required.items() if v is None or v == ""]
    if missing:
        raise ValueError(f"Missing {', '.join(missing)} in {cfg_path}")

    origins = cors.get("allow_origins")
    if origins is None:
        origins = ["*"]
    if isinstance(origins, str):
        origins = [x.strip() for x in origins.split(",") if x.strip()]

    return ServiceConfig(
        upstream=UpstreamConfig(
            tikwm_base_url=str(upstream["tikwm_base_url"]).rstrip("/"),
            tiktok_web_base_url=str(upstream["tiktok_web_base_url"]).rstrip("/"),
            dislikes_base_url=str(upstream["dislikes_base_url"]).rstrip("/"),
        ),
        youtube=YouTubeConfig(
            base_url=str(youtube["base_url"]).rstrip("/"),
            api_key_env=str(youtube["api_key_env"]),
        ),
        shortener=ShortenerConfig(
            endpoint=str(shortener["endpoint"]),
            enabled=_as_bool(shortener.get("enabled", True)),
        ),
        http=HTTPConfig(
            timeout_seconds=float(http["timeout_seconds"]),
            bounded_timeout_seconds=float(http["bounded_timeout_seconds"]),
            user_agent=str(http["user_agent"]),
            stream_chunk_size=int(http.get("stream_chunk_size") or 64 * 1024),
        ),
        display=DisplayConfig(timezone=str(display.get("timezone") or "UTC")),
        cors=CORSConfig(allow_origins=tuple(str(o) for o in origins)),
    )
