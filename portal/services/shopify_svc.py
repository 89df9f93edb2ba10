"""Shopify API service - builds Admin API clients from stored shop sessions."""

from __future__ import annotations

from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from b2bkit.api import ShopifyClient, ShopifyConfig

from ..config import settings
from . import session_svc


async def get_shopify_client(db: AsyncSession, store_name: str) -> ShopifyClient:
    """Get an authenticated Shopify client as async context manager.

    Usage:
        async with await get_shopify_client(db, "acme.myshopify.com") as shopify:
            customer = await shopify.customers.get_details(customer_id)

    Raises:
        ShopSessionNotFoundError: If the store has no stored access token.
    """
    token = await session_svc.get_access_token(db, store_name)
    return ShopifyClient(
        ShopifyConfig(
            store_domain=store_name,
            access_token=token,
            api_version=settings.shopify_api_version,
            timeout=settings.shopify_timeout_seconds,
        )
    )


async def fetch_customer_details(
    db: AsyncSession, store_name: str, customer_id: str
) -> dict[str, Any] | None:
    """Fetch a customer with company-contact profiles and role assignments."""
    async with await get_shopify_client(db, store_name) as shopify:
        return await shopify.customers.get_details(customer_id)
