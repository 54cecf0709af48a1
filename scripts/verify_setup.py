"""Verify the Redis store and the Gremlin Server are reachable."""

from __future__ import annotations

import asyncio
import os
import sys


async def check_redis() -> bool:
    url = os.getenv("REDIS_URL", "redis://localhost:6379/0")
    try:
        from redis.asyncio import from_url

        client = from_url(url)
        pong = await client.ping()
        assert pong is True
        await client.aclose()
        print("[OK] Redis connection successful")
        return True
    except Exception as exc:
        print(f"[WARN] Redis: {exc} (the API falls back to in-memory storage)")
        return True


async def check_gremlin() -> bool:
    url = os.getenv("DEFAULT_SERVER_URL", "ws://localhost:8182/gremlin")
    try:
        from src.gremlin_db.connection import GremlinConnection

        conn = GremlinConnection("local", {"url": url})
        try:
            assert await conn.health_check()
        finally:
            await conn.close()
        print(f"[OK] Gremlin Server reachable at {url}")
        return True
    except Exception as exc:
        print(f"[FAIL] Gremlin Server ({url}): {exc}")
        return False


async def check_api() -> bool:
    url = os.getenv("GXPLORER_API_URL", "")
    if not url:
        print("[SKIP] API: GXPLORER_API_URL not set (optional)")
        return True
    try:
        import requests

        resp = await asyncio.to_thread(requests.get, f"{url.rstrip('/')}/api/v1/ready", timeout=5)
        resp.raise_for_status()
        print(f"[OK] API ready: {resp.json()}")
        return True
    except Exception as exc:
        print(f"[FAIL] API: {exc}")
        return False


async def main() -> None:
    print("=" * 50)
    print("gxplorer — Infrastructure Verification")
    print("=" * 50)

    results = await asyncio.gather(
        check_redis(),
        check_gremlin(),
        check_api(),
    )

    print("=" * 50)
    passed = sum(results)
    total = len(results)
    print(f"Results: {passed}/{total} checks passed")
    if not all(results):
        print("Some checks failed. Review output above.")
        sys.exit(1)
    print("All systems operational.")


if __name__ == "__main__":
    asyncio.run(main())
