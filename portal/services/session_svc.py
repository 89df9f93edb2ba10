"""Shop session store - resolves Admin API access tokens per installed store."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from b2bkit.api import normalize_store_domain

from ..config import settings
from ..errors import ShopSessionNotFoundError
from ..models.shop_session import ShopSession

logger = logging.getLogger(__name__)


@dataclass
class CachedSession:
    access_token: str
    is_online: bool


class SessionCache:
    """In-process cache of store sessions keyed by shop domain."""

    def __init__(self):
        self._entries: dict[str, CachedSession] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, key: str) -> CachedSession | None:
        value = self._entries.get(key)
        if value is not None:
            logger.debug("Session cache hit for %s", key)
        return value

    def set(self, key: str, value: CachedSession) -> None:
        self._entries[key] = value
        logger.debug("Session cached for %s", key)

    def delete(self, key: str) -> None:
        self._entries.pop(key, None)

    def clear(self) -> None:
        self._entries.clear()

    def delete_by_shop_domain(self, shop_domain: str, exact_match: bool = True) -> int:
        """Drop entries for a shop. With exact_match=False, any key containing it."""
        if exact_match:
            return 1 if self._entries.pop(shop_domain, None) is not None else 0

        pattern = re.compile(f".*{re.escape(shop_domain)}.*")
        doomed = [key for key in self._entries if pattern.match(key)]
        for key in doomed:
            del self._entries[key]
        logger.debug("Deleted %d cached sessions matching %s", len(doomed), shop_domain)
        return len(doomed)


session_cache = SessionCache()


def _is_expired(session: ShopSession, now: datetime) -> bool:
    if session.expires_at is None:
        return False
    expires_at = session.expires_at
    if expires_at.tzinfo is None:
        expires_at = expires_at.replace(tzinfo=timezone.utc)
    return expires_at <= now


async def save_session(
    db: AsyncSession,
    shop: str,
    access_token: str,
    *,
    is_online: bool = False,
    scope: str | None = None,
    expires_at: datetime | None = None,
) -> ShopSession:
    """Create or replace the stored session of the given kind for a shop."""
    shop = normalize_store_domain(shop)
    stmt = select(ShopSession).where(ShopSession.shop == shop, ShopSession.is_online == is_online)
    session = (await db.execute(stmt)).scalars().first()
    if session:
        session.access_token = access_token
        session.scope = scope
        session.expires_at = expires_at
    else:
        session = ShopSession(
            shop=shop,
            access_token=access_token,
            is_online=is_online,
            scope=scope,
            expires_at=expires_at,
        )
        db.add(session)
    await db.commit()
    await db.refresh(session)
    session_cache.delete_by_shop_domain(shop)
    return session


async def get_access_token(db: AsyncSession, shop: str) -> str:
    """Resolve the Admin API access token for a shop, preferring offline sessions.

    Raises:
        ShopSessionNotFoundError: If no usable session is stored.
    """
    shop = normalize_store_domain(shop)
    if settings.session_cache_enabled:
        cached = session_cache.get(shop)
        if cached:
            return cached.access_token

    stmt = (
        select(ShopSession)
        .where(ShopSession.shop == shop)
        .order_by(ShopSession.is_online, ShopSession.created_at.desc())
    )
    sessions = list((await db.execute(stmt)).scalars().all())
    now = datetime.now(timezone.utc)
    session = next((s for s in sessions if s.access_token and not _is_expired(s, now)), None)
    if not session:
        logger.error("No usable session found for %s", shop)
        raise ShopSessionNotFoundError(shop)

    if settings.session_cache_enabled:
        session_cache.set(shop, CachedSession(access_token=session.access_token, is_online=session.is_online))
    logger.info("Resolved %s access token for %s", "online" if session.is_online else "offline", shop)
    return session.access_token


def clear_shop_cache(shop: str) -> int:
    """Forget cached sessions for a shop (e.g. after uninstall)."""
    deleted = session_cache.delete_by_shop_domain(normalize_store_domain(shop))
    logger.info("Cleared %d cached sessions for %s", deleted, shop)
    return deleted
