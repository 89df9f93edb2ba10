"""Shared test fixtures for the b2bkit test suite."""

import pytest
from unittest.mock import AsyncMock, MagicMock
from typing import Any

# Sample IDs used across tests
SAMPLE_STORE = "acme.myshopify.com"
SAMPLE_TOKEN = "shpat_test_abc123"
SAMPLE_CUSTOMER_ID = "gid://shopify/Customer/1001"
SAMPLE_CONTACT_ID = "gid://shopify/CompanyContact/2001"
SAMPLE_COMPANY_ID = "gid://shopify/Company/3001"
SAMPLE_LOCATION_ID = "gid://shopify/CompanyLocation/4001"
SAMPLE_ASSIGNMENT_ID = "gid://shopify/CompanyContactRoleAssignment/5001"


# ============================================================================
# Mock Response Data
# ============================================================================

MOCK_CUSTOMER = {
    "id": SAMPLE_CUSTOMER_ID,
    "firstName": "Ada",
    "lastName": "Buyer",
    "email": "ada@acme.test",
    "phone": "+15550001111",
    "state": "ENABLED",
    "companyContactProfiles": [
        {
            "id": SAMPLE_CONTACT_ID,
            "isMainContact": True,
            "company": {"id": SAMPLE_COMPANY_ID, "name": "Acme Wholesale"},
            "roleAssignments": {
                "edges": [
                    {
                        "node": {
                            "id": SAMPLE_ASSIGNMENT_ID,
                            "role": {"id": "gid://shopify/CompanyContactRole/1", "name": "Location admin"},
                            "company": {"id": SAMPLE_COMPANY_ID, "name": "Acme Wholesale"},
                            "companyLocation": {"id": SAMPLE_LOCATION_ID, "name": "Warehouse"},
                        }
                    }
                ]
            },
        }
    ],
}


# ============================================================================
# Fixtures
# ============================================================================

@pytest.fixture
def mock_config():
    """Create a ShopifyConfig for the sample store."""
    from b2bkit.api.client import ShopifyConfig
    return ShopifyConfig(store_domain=SAMPLE_STORE, access_token=SAMPLE_TOKEN)


@pytest.fixture
def mock_http_client():
    """Create a mock httpx.AsyncClient."""
    client = AsyncMock()

    # Default successful response
    response = MagicMock()
    response.status_code = 200
    response.json.return_value = {"data": {}}
    response.raise_for_status = MagicMock()

    client.post = AsyncMock(return_value=response)
    client.aclose = AsyncMock()

    return client


@pytest.fixture
def mock_shopify_client(mock_config, mock_http_client):
    """Create a ShopifyClient with a mocked transport and initialized APIs."""
    from b2bkit.api.client import ShopifyClient
    from b2bkit.api.companies import CompaniesAPI
    from b2bkit.api.customers import CustomersAPI

    client = ShopifyClient(mock_config)
    client._client = mock_http_client
    client._customers = CustomersAPI(client)
    client._companies = CompaniesAPI(client)

    return client


@pytest.fixture
def mock_response():
    """Factory fixture to create mock HTTP responses."""
    def _create_response(data: dict[str, Any], status_code: int = 200):
        response = MagicMock()
        response.status_code = status_code
        response.json.return_value = data
        response.raise_for_status = MagicMock()
        if status_code >= 400:
            from httpx import HTTPStatusError
            response.raise_for_status.side_effect = HTTPStatusError(
                f"HTTP {status_code}", request=MagicMock(), response=response
            )
        return response
    return _create_response


# ============================================================================
# CLI Testing Fixtures
# ============================================================================

@pytest.fixture
def cli_runner():
    """Create a Typer CLI test runner."""
    from typer.testing import CliRunner
    return CliRunner()


@pytest.fixture
def mock_session_scope():
    """Replacement for ``b2bkit.cli._session_scope`` yielding a dummy session."""
    db = MagicMock(name="db")

    def _scope():
        ctx = MagicMock()
        ctx.__aenter__ = AsyncMock(return_value=db)
        ctx.__aexit__ = AsyncMock(return_value=None)
        return ctx

    _scope.db = db
    return _scope
