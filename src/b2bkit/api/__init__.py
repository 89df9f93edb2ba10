"""Shopify Admin API client module.

Usage:
    from b2bkit.api import ShopifyClient, ShopifyConfig

    config = ShopifyConfig(store_domain="acme.myshopify.com", access_token="shpat_...")
    async with ShopifyClient(config) as shopify:
        customer = await shopify.customers.get_details("gid://shopify/Customer/1")
"""

from .client import (
    ShopifyClient,
    ShopifyConfig,
    ShopifyGraphQLError,
    ShopifyUserError,
    extract_operation_name,
    normalize_store_domain,
)
from .companies import CompaniesAPI
from .customers import CustomersAPI

__all__ = [
    "ShopifyClient",
    "ShopifyConfig",
    "ShopifyGraphQLError",
    "ShopifyUserError",
    "CompaniesAPI",
    "CustomersAPI",
    "extract_operation_name",
    "normalize_store_domain",
]
