"""
Unit Tests: Access Control

Email allowlist, token verification and brief staleness.
"""

import asyncio
from datetime import datetime, timedelta, timezone

import httpx
import pytest
from fastapi import HTTPException

from tubebrief.api.auth import IdentityProvider, is_email_allowed
from tubebrief.config import AuthConfig
from tubebrief.models import Brief


def test_email_allowlist_is_case_insensitive():
    allowed = ["Alice@Example.com ", "bob@example.com"]
    assert is_email_allowed("alice@example.com", allowed)
    assert is_email_allowed("BOB@EXAMPLE.COM", allowed)
    assert not is_email_allowed("eve@example.com", allowed)
    assert not is_email_allowed(None, allowed)


def test_empty_allowlist_denies_everyone():
    assert not is_email_allowed("alice@example.com", [])
    assert not is_email_allowed("alice@example.com", ["", "  "])


def _provider(handler):
    return IdentityProvider(
        AuthConfig(userinfo_url="https://idp.test/userinfo", cache_ttl_seconds=60),
        transport=httpx.MockTransport(handler),
    )


def test_identity_provider_resolves_and_caches():
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request.headers["Authorization"])
        return httpx.Response(200, json={"sub": "user_1", "email": "a@example.com"})

    provider = _provider(handler)

    async def _run():
        first = await provider.resolve("tok")
        second = await provider.resolve("tok")
        return first, second

    first, second = asyncio.run(_run())

    assert first.id == "user_1"
    assert first.email == "a@example.com"
    assert second == first
    assert calls == ["Bearer tok"]


def test_identity_provider_evicts_expired_tokens():
    clock = [1000.0]
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request.headers["Authorization"])
        return httpx.Response(200, json={"sub": "user_1"})

    provider = IdentityProvider(
        AuthConfig(userinfo_url="https://idp.test/userinfo", cache_ttl_seconds=60),
        transport=httpx.MockTransport(handler),
        timer=lambda: clock[0],
    )

    async def _run():
        for i in range(50):
            await provider.resolve(f"tok-{i}")
        clock[0] += 61
        await provider.resolve("tok-0")

    asyncio.run(_run())

    assert len(provider._cache) == 1
    assert calls.count("Bearer tok-0") == 2


def test_identity_provider_rejected_token():
    provider = _provider(lambda request: httpx.Response(401))
    assert asyncio.run(provider.resolve("bad")) is None


def test_identity_provider_outage_is_503():
    provider = _provider(lambda request: httpx.Response(500))
    with pytest.raises(HTTPException) as exc_info:
        asyncio.run(provider.resolve("tok"))
    assert exc_info.value.status_code == 503


def test_brief_staleness_window():
    now = datetime(2025, 1, 2, 12, 0, tzinfo=timezone.utc)

    fresh = Brief(video_id="dQw4w9WgXcQ", title="t", updated_at=now - timedelta(hours=23))
    stale = Brief(video_id="dQw4w9WgXcQ", title="t", updated_at=now - timedelta(hours=25))
    naive = Brief(
        video_id="dQw4w9WgXcQ",
        title="t",
        updated_at=(now - timedelta(hours=1)).replace(tzinfo=None),
    )

    assert not fresh.is_stale(24, now=now)
    assert stale.is_stale(24, now=now)
    assert not naive.is_stale(24, now=now)
    assert Brief(video_id="x", title="t").is_stale(24, now=now)
