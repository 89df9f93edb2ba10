"""Tests for shop sessions and the session cache."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from portal.errors import ShopSessionNotFoundError
from portal.services import session_svc
from portal.services.session_svc import CachedSession, SessionCache


def test_cache_exact_delete():
    cache = SessionCache()
    cache.set("acme.myshopify.com", CachedSession("t1", False))
    cache.set("acme-eu.myshopify.com", CachedSession("t2", False))

    assert cache.delete_by_shop_domain("acme.myshopify.com") == 1
    assert cache.get("acme.myshopify.com") is None
    assert cache.get("acme-eu.myshopify.com").access_token == "t2"


def test_cache_pattern_delete():
    cache = SessionCache()
    cache.set("offline_acme.myshopify.com", CachedSession("t1", False))
    cache.set("acme.myshopify.com_42", CachedSession("t2", True))
    cache.set("other.myshopify.com", CachedSession("t3", False))

    assert cache.delete_by_shop_domain("acme.myshopify.com", exact_match=False) == 2
    assert len(cache) == 1


@pytest.mark.asyncio
async def test_save_and_get_access_token(db: AsyncSession):
    await session_svc.save_session(db, "https://Acme.myshopify.com/", "shpat_1")

    assert await session_svc.get_access_token(db, "acme") == "shpat_1"
    assert session_svc.session_cache.get("acme.myshopify.com").access_token == "shpat_1"


@pytest.mark.asyncio
async def test_save_replaces_token_and_clears_cache(db: AsyncSession):
    await session_svc.save_session(db, "acme.myshopify.com", "shpat_1")
    await session_svc.get_access_token(db, "acme.myshopify.com")

    await session_svc.save_session(db, "acme.myshopify.com", "shpat_2")

    assert session_svc.session_cache.get("acme.myshopify.com") is None
    assert await session_svc.get_access_token(db, "acme.myshopify.com") == "shpat_2"


@pytest.mark.asyncio
async def test_offline_session_preferred(db: AsyncSession):
    await session_svc.save_session(db, "acme.myshopify.com", "online_tok", is_online=True)
    await session_svc.save_session(db, "acme.myshopify.com", "offline_tok")

    assert await session_svc.get_access_token(db, "acme.myshopify.com") == "offline_tok"


@pytest.mark.asyncio
async def test_expired_session_skipped(db: AsyncSession):
    past = datetime.now(timezone.utc) - timedelta(hours=1)
    await session_svc.save_session(db, "acme.myshopify.com", "old", is_online=True, expires_at=past)

    with pytest.raises(ShopSessionNotFoundError):
        await session_svc.get_access_token(db, "acme.myshopify.com")


@pytest.mark.asyncio
async def test_missing_session(db: AsyncSession):
    with pytest.raises(ShopSessionNotFoundError) as exc_info:
        await session_svc.get_access_token(db, "ghost.myshopify.com")

    assert exc_info.value.status_code == 401
    assert exc_info.value.message == "No session found for store: ghost.myshopify.com"


def test_clear_shop_cache():
    session_svc.session_cache.set("acme.myshopify.com", CachedSession("t", False))
    assert session_svc.clear_shop_cache("acme") == 1
    assert session_svc.clear_shop_cache("acme") == 0
