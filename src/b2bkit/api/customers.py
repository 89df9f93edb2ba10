"""Customers API - B2B customer lookups against the Admin GraphQL API."""

from __future__ import annotations

from typing import Any, TYPE_CHECKING

if TYPE_CHECKING:
    from .client import ShopifyClient

CUSTOMER_DETAILS_QUERY = """
query getCustomer($customerId: ID!) {
  customer(id: $customerId) {
    id
    firstName
    lastName
    email
    phone
    state
    companyContactProfiles {
      id
      isMainContact
      roleAssignments(first: 250) {
        edges {
          node {
            id
            companyLocation { id name }
            company { id name }
            role { id name }
          }
        }
      }
      company { id name }
    }
  }
}
"""

CUSTOMER_BY_EMAIL_QUERY = """
query getCustomerByEmail($email: String!) {
  customers(first: 1, query: $email) {
    edges {
      node { id email firstName lastName state }
    }
  }
}
"""

CUSTOMER_COMPANY_LOCATIONS_QUERY = """
query getAllCustomerLocationsByCustomerId($customerId: ID!) {
  customer(id: $customerId) {
    id
    companyContactProfiles {
      company {
        id
        name
        locations(first: 250) {
          edges { node { id name } }
        }
      }
    }
  }
}
"""


class CustomersAPI:
    """Customers API for the Shopify Admin GraphQL endpoint.

    Usage:
        async with ShopifyClient(config) as shopify:
            # Customer with company-contact profiles and role assignments
            customer = await shopify.customers.get_details("gid://shopify/Customer/1")

            # Lookup by email
            customer = await shopify.customers.find_by_email("buyer@example.com")

            # Company locations reachable by the customer
            locations = await shopify.customers.company_locations("gid://shopify/Customer/1")
    """

    def __init__(self, client: "ShopifyClient"):
        self._client = client

    async def get_details(self, customer_id: str) -> dict[str, Any] | None:
        """Get a customer with company-contact profiles and role assignments.

        Returns:
            The raw ``customer`` object, or None when Shopify has no such customer.
        """
        data = await self._client._graphql(CUSTOMER_DETAILS_QUERY, {"customerId": customer_id})
        return data.get("customer")

    async def find_by_email(self, email: str) -> dict[str, Any] | None:
        """Find the first customer matching an email address."""
        data = await self._client._graphql(CUSTOMER_BY_EMAIL_QUERY, {"email": email})
        edges = (data.get("customers") or {}).get("edges") or []
        return edges[0]["node"] if edges else None

    async def company_locations(self, customer_id: str) -> list[dict[str, Any]]:
        """List company locations across all of the customer's company-contact profiles.

        Returns:
            [{"id": ..., "name": ..., "companyId": ..., "companyName": ...}, ...]
        """
        data = await self._client._graphql(
            CUSTOMER_COMPANY_LOCATIONS_QUERY, {"customerId": customer_id}
        )
        customer = data.get("customer") or {}
        locations: list[dict[str, Any]] = []
        for profile in customer.get("companyContactProfiles") or []:
            company = profile.get("company") or {}
            for edge in (company.get("locations") or {}).get("edges") or []:
                node = edge.get("node") or {}
                locations.append({
                    "id": node.get("id"),
                    "name": node.get("name"),
                    "companyId": company.get("id"),
                    "companyName": company.get("name"),
                })
        return locations
