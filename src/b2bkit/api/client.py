"""Shopify Admin API client - typed async wrapper over the Admin GraphQL endpoint.

Access tokens are supplied by the caller (the portal resolves them from its
shop-session store), so this module never touches the database.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Any, TYPE_CHECKING

import httpx

if TYPE_CHECKING:
    from .companies import CompaniesAPI
    from .customers import CustomersAPI

logger = logging.getLogger(__name__)

DEFAULT_API_VERSION = "2025-01"

_OPERATION_RE = re.compile(r"(?:query|mutation)\s+(\w+)\s*[({]")


class ShopifyGraphQLError(Exception):
    """Raised when the GraphQL payload carries top-level ``errors``."""

    def __init__(
        self,
        message: str,
        errors: list[dict[str, Any]] | None = None,
        operation_name: str | None = None,
    ):
        self.message = message
        self.errors = errors or []
        self.operation_name = operation_name
        super().__init__(self.message)


class ShopifyUserError(ShopifyGraphQLError):
    """Raised when a mutation succeeds at the transport level but reports ``userErrors``."""


def extract_operation_name(query: str) -> str:
    """Return the named operation of a GraphQL document, or ``"Unknown"``."""
    normalized = " ".join(query.split())
    match = _OPERATION_RE.search(normalized)
    return match.group(1) if match else "Unknown"


def normalize_store_domain(store: str) -> str:
    """Normalize ``https://acme.myshopify.com/`` or ``acme`` to ``acme.myshopify.com``."""
    domain = store.strip().lower()
    domain = re.sub(r"^https?://", "", domain).rstrip("/")
    if domain and "." not in domain:
        domain = f"{domain}.myshopify.com"
    return domain


@dataclass
class ShopifyConfig:
    """Shopify Admin API configuration for a single store."""

    store_domain: str
    access_token: str
    api_version: str = DEFAULT_API_VERSION
    timeout: float = 30.0

    @property
    def shop(self) -> str:
        return normalize_store_domain(self.store_domain)

    @property
    def graphql_url(self) -> str:
        return f"https://{self.shop}/admin/api/{self.api_version}/graphql.json"

    def to_dict(self) -> dict[str, Any]:
        """Export config as dictionary."""
        return {
            "store_domain": self.shop,
            "access_token": self.access_token[:8] + "..." if self.access_token else None,
            "api_version": self.api_version,
        }


class ShopifyClient:
    """Shopify Admin API client with domain-specific sub-APIs.

    Usage:
        config = ShopifyConfig(store_domain="acme.myshopify.com", access_token="shpat_...")
        async with ShopifyClient(config) as shopify:
            customer = await shopify.customers.get_details("gid://shopify/Customer/1")
    """

    def __init__(self, config: ShopifyConfig):
        self.config = config
        self._client: httpx.AsyncClient | None = None

        # Domain APIs (initialized on enter)
        self._customers: CustomersAPI | None = None
        self._companies: CompaniesAPI | None = None

    async def __aenter__(self) -> "ShopifyClient":
        self._client = httpx.AsyncClient(
            timeout=self.config.timeout,
            headers={
                "X-Shopify-Access-Token": self.config.access_token,
                "Content-Type": "application/json",
                "Accept": "application/json",
            },
        )

        from .companies import CompaniesAPI
        from .customers import CustomersAPI

        self._customers = CustomersAPI(self)
        self._companies = CompaniesAPI(self)
        return self

    async def __aexit__(self, *args):
        if self._client:
            await self._client.aclose()

    @property
    def customers(self) -> "CustomersAPI":
        """Customers API."""
        if not self._customers:
            raise RuntimeError("Client not initialized. Use 'async with' context.")
        return self._customers

    @property
    def companies(self) -> "CompaniesAPI":
        """Companies API (contact roles, role assignment, contact deletion)."""
        if not self._companies:
            raise RuntimeError("Client not initialized. Use 'async with' context.")
        return self._companies

    async def _graphql(self, query: str, variables: dict[str, Any] | None = None) -> dict[str, Any]:
        """Execute a GraphQL document and return its ``data`` block."""
        if not self._client:
            raise RuntimeError("Client not initialized. Use 'async with' context.")

        operation_name = extract_operation_name(query)
        logger.info("Shopify GraphQL %s on %s", operation_name, self.config.shop)

        resp = await self._client.post(
            self.config.graphql_url,
            json={"query": query, "variables": variables or {}},
        )
        resp.raise_for_status()
        payload = resp.json()

        errors = payload.get("errors")
        if errors:
            logger.warning(
                "Shopify GraphQL %s on %s returned errors: %s",
                operation_name, self.config.shop, errors,
            )
            if isinstance(errors, list):
                messages = [e.get("message", str(e)) if isinstance(e, dict) else str(e) for e in errors]
            else:
                messages = [str(errors)]
                errors = [{"message": str(errors)}]
            raise ShopifyGraphQLError("; ".join(messages), errors=errors, operation_name=operation_name)

        data = payload.get("data") or {}
        logger.debug("Shopify GraphQL %s returned keys %s", operation_name, sorted(data))
        return data
