from __future__ import annotations

from pathlib import Path

import pytest

from src.utils.config import load_service_config


def test_default_config_loads() -> None:
    cfg = load_service_config()
    assert cfg.upstream.tikwm_base_url == "https://www.tikwm.com"
    assert cfg.youtube.api_key_env == "YOUTUBE_API_KEY"
    assert cfg.shortener.enabled is True
    assert cfg.http.bounded_timeout_seconds < cfg.http.timeout_seconds
    assert cfg.display.timezone == "UTC"


def _write(tmp_path: Path, body: str) -> Path:
    p = tmp_path / "service.yaml"
    p.write_text(body, encoding="utf-8")
    return p


MINIMAL = """
upstream:
  tikwm_base_url: https://tikwm.test/
  tiktok_web_base_url: https://tiktok.test
  dislikes_base_url: https://votes.test
youtube:
  base_url: https://yt.test/v3
  api_key_env: YT_KEY
shortener:
  endpoint: https://short.test/api
  enabled: "no"
http:
  timeout_seconds: 20
  bounded_timeout_seconds: 5
  user_agent: test-agent
cors:
  allow_origins: "https://a.test, https://b.test"
"""


def test_env_path_and_defaults(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("MEDIA_PROXY_CONFIG", str(_write(tmp_path, MINIMAL)))
    cfg = load_service_config()

    assert cfg.upstream.tikwm_base_url == "https://tikwm.test"
    assert cfg.shortener.enabled is False
    assert cfg.http.stream_chunk_size == 64 * 1024
    assert cfg.display.timezone == "UTC"
    assert cfg.cors.allow_origins == ("https://a.test", "https://b.test")


def test_missing_keys_are_listed(tmp_path: Path) -> None:
    path = _write(tmp_path, "upstream:\n  tikwm_base_url: https://tikwm.test\n")
    with pytest.raises(ValueError) as exc_info:
        load_service_config(str(path))

    message = str(exc_info.value)
    assert "upstream.tiktok_web_base_url" in message
    assert "http.user_agent" in message
    assert "upstream.tikwm_base_url" not in message
