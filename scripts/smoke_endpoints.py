from __future__ import annotations

import argparse
import asyncio
import sys

import httpx


# (path, params, expected status codes)
CHECKS: list[tuple[str, dict[str, str], set[int]]] = [
    ("/health", {}, {200}),
    ("/api/tt/v-get", {}, {400}),
    ("/api/tt/search-videos", {}, {400}),
    ("/api/tt/user-get", {}, {400}),
    ("/api/yt/v-get", {}, {400}),
    ("/api/does-not-exist", {}, {404}),
]

LIVE_CHECKS: list[tuple[str, dict[str, str], set[int]]] = [
    ("/api/tt/search-videos", {"keywords": "cat", "count": "3"}, {200, 404}),
    ("/api/tt/trending", {"region": "Indonesia"}, {200, 404}),
    ("/api/yt/dislikes", {"id": "dQw4w9WgXcQ"}, {200}),
]


async def _run(base_url: str, live: bool) -> int:
    checks = CHECKS + (LIVE_CHECKS if live else [])
    failures = 0
    async with httpx.AsyncClient(base_url=base_url, timeout=60.0) as client:
        for path, params, expected in checks:
            try:
                resp = await client.get(path, params=params)
            except httpx.HTTPError as e:
                print(f"❌ {path} request failed: {e}")
                failures += 1
                continue
            body = resp.json() if resp.headers.get("content-type", "").startswith("application/json") else {}
            if resp.status_code not in expected:
                print(f"❌ {path} {params} -> {resp.status_code} (expected {sorted(expected)}) {body}")
                failures += 1
                continue
            if resp.status_code >= 400 and "error" not in body:
                print(f"❌ {path} -> {resp.status_code} without an error field")
                failures += 1
                continue
            print(f"✅ {path} {params} -> {resp.status_code}")
    return 1 if failures else 0


def main() -> int:
    parser = argparse.ArgumentParser(description="Smoke-test a running media-proxy instance.")
    parser.add_argument("--base-url", default="http://127.0.0.1:4000")
    parser.add_argument("--live", action="store_true", help="also call endpoints that reach real upstreams")
    args = parser.parse_args()
    return asyncio.run(_run(args.base_url, args.live))


if __name__ == "__main__":
    sys.exit(main())
