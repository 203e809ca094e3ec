from __future__ import annotations

from typing import Iterator

import pytest
from fastapi.testclient import TestClient

import src.api.app as api


@pytest.fixture
def client(monkeypatch: pytest.MonkeyPatch) -> Iterator[TestClient]:
    # Outgoing provider calls go through the app's own httpx client; tests mock them with respx.
    monkeypatch.setenv("YOUTUBE_API_KEY", "test-key")
    with TestClient(api.app) as c:
        yield c
