"""Tests for the Customers API."""

import pytest
from unittest.mock import AsyncMock

from b2bkit.api.customers import CUSTOMER_DETAILS_QUERY
from tests.conftest import (
    MOCK_CUSTOMER,
    SAMPLE_COMPANY_ID,
    SAMPLE_CUSTOMER_ID,
    SAMPLE_LOCATION_ID,
)


@pytest.mark.asyncio
async def test_get_details(mock_shopify_client, mock_response):
    mock_shopify_client._client.post = AsyncMock(
        return_value=mock_response({"data": {"customer": MOCK_CUSTOMER}})
    )

    customer = await mock_shopify_client.customers.get_details(SAMPLE_CUSTOMER_ID)

    assert customer["id"] == SAMPLE_CUSTOMER_ID
    body = mock_shopify_client._client.post.call_args.kwargs["json"]
    assert body["query"] == CUSTOMER_DETAILS_QUERY
    assert body["variables"] == {"customerId": SAMPLE_CUSTOMER_ID}


@pytest.mark.asyncio
async def test_get_details_missing_customer(mock_shopify_client, mock_response):
    mock_shopify_client._client.post = AsyncMock(
        return_value=mock_response({"data": {"customer": None}})
    )

    assert await mock_shopify_client.customers.get_details("gid://shopify/Customer/0") is None


@pytest.mark.asyncio
async def test_find_by_email(mock_shopify_client, mock_response):
    node = {"id": SAMPLE_CUSTOMER_ID, "email": "ada@acme.test"}
    mock_shopify_client._client.post = AsyncMock(
        return_value=mock_response({"data": {"customers": {"edges": [{"node": node}]}}})
    )

    assert await mock_shopify_client.customers.find_by_email("ada@acme.test") == node

    mock_shopify_client._client.post = AsyncMock(
        return_value=mock_response({"data": {"customers": {"edges": []}}})
    )
    assert await mock_shopify_client.customers.find_by_email("nobody@acme.test") is None


@pytest.mark.asyncio
async def test_company_locations_flattens_profiles(mock_shopify_client, mock_response):
    mock_shopify_client._client.post = AsyncMock(return_value=mock_response({
        "data": {
            "customer": {
                "id": SAMPLE_CUSTOMER_ID,
                "companyContactProfiles": [
                    {
                        "company": {
                            "id": SAMPLE_COMPANY_ID,
                            "name": "Acme Wholesale",
                            "locations": {
                                "edges": [
                                    {"node": {"id": SAMPLE_LOCATION_ID, "name": "Warehouse"}},
                                    {"node": {"id": "gid://shopify/CompanyLocation/2", "name": "Storefront"}},
                                ]
                            },
                        }
                    }
                ],
            }
        }
    }))

    locations = await mock_shopify_client.customers.company_locations(SAMPLE_CUSTOMER_ID)

    assert [loc["name"] for loc in locations] == ["Warehouse", "Storefront"]
    assert locations[0] == {
        "id": SAMPLE_LOCATION_ID,
        "name": "Warehouse",
        "companyId": SAMPLE_COMPANY_ID,
        "companyName": "Acme Wholesale",
    }


@pytest.mark.asyncio
async def test_company_locations_unknown_customer(mock_shopify_client, mock_response):
    mock_shopify_client._client.post = AsyncMock(
        return_value=mock_response({"data": {"customer": None}})
    )

    assert await mock_shopify_client.customers.company_locations("gid://shopify/Customer/0") == []
