"""Tests for the Shopify Admin GraphQL client."""

import pytest
from unittest.mock import AsyncMock
from httpx import HTTPStatusError

from b2bkit.api import (
    ShopifyClient,
    ShopifyConfig,
    ShopifyGraphQLError,
    extract_operation_name,
    normalize_store_domain,
)
from tests.conftest import SAMPLE_STORE, SAMPLE_TOKEN


@pytest.mark.parametrize(
    "store,expected",
    [
        ("acme.myshopify.com", "acme.myshopify.com"),
        ("https://Acme.myshopify.com/", "acme.myshopify.com"),
        ("acme", "acme.myshopify.com"),
        ("shop.acme.com", "shop.acme.com"),
    ],
)
def test_normalize_store_domain(store, expected):
    assert normalize_store_domain(store) == expected


def test_extract_operation_name():
    assert extract_operation_name("query getCustomer($id: ID!) { customer(id: $id) { id } }") == "getCustomer"
    assert extract_operation_name("mutation\n  companyAssignRole { x }") == "companyAssignRole"
    assert extract_operation_name("{ shop { name } }") == "Unknown"


class TestShopifyConfig:
    def test_graphql_url(self, mock_config):
        assert mock_config.graphql_url == f"https://{SAMPLE_STORE}/admin/api/2025-01/graphql.json"

    def test_custom_version(self):
        config = ShopifyConfig(store_domain="acme", access_token="x", api_version="2024-10")
        assert config.graphql_url == "https://acme.myshopify.com/admin/api/2024-10/graphql.json"

    def test_to_dict_masks_token(self, mock_config):
        exported = mock_config.to_dict()
        assert exported["access_token"] == SAMPLE_TOKEN[:8] + "..."
        assert exported["store_domain"] == SAMPLE_STORE


class TestShopifyClient:
    def test_requires_context(self, mock_config):
        client = ShopifyClient(mock_config)
        with pytest.raises(RuntimeError, match="async with"):
            client.customers
        with pytest.raises(RuntimeError, match="async with"):
            client.companies

    @pytest.mark.asyncio
    async def test_context_sets_auth_header(self, mock_config):
        async with ShopifyClient(mock_config) as shopify:
            assert shopify._client.headers["X-Shopify-Access-Token"] == SAMPLE_TOKEN
            assert shopify.customers is not None
            assert shopify.companies is not None
        assert shopify._client.is_closed

    @pytest.mark.asyncio
    async def test_graphql_posts_query_and_variables(self, mock_shopify_client, mock_response):
        mock_shopify_client._client.post = AsyncMock(
            return_value=mock_response({"data": {"shop": {"name": "Acme"}}})
        )

        data = await mock_shopify_client._graphql("query getShop { shop { name } }", {"a": 1})

        assert data == {"shop": {"name": "Acme"}}
        url = mock_shopify_client._client.post.call_args.args[0]
        body = mock_shopify_client._client.post.call_args.kwargs["json"]
        assert url == mock_shopify_client.config.graphql_url
        assert body == {"query": "query getShop { shop { name } }", "variables": {"a": 1}}

    @pytest.mark.asyncio
    async def test_graphql_errors_raise(self, mock_shopify_client, mock_response):
        mock_shopify_client._client.post = AsyncMock(
            return_value=mock_response({"errors": [{"message": "Field 'x' doesn't exist"}], "data": None})
        )

        with pytest.raises(ShopifyGraphQLError) as exc_info:
            await mock_shopify_client._graphql("query getThing { x }")

        assert exc_info.value.operation_name == "getThing"
        assert exc_info.value.errors == [{"message": "Field 'x' doesn't exist"}]
        assert "doesn't exist" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_graphql_string_error(self, mock_shopify_client, mock_response):
        mock_shopify_client._client.post = AsyncMock(
            return_value=mock_response({"errors": "Invalid API key or access token"})
        )

        with pytest.raises(ShopifyGraphQLError) as exc_info:
            await mock_shopify_client._graphql("query getShop { shop { name } }")

        assert exc_info.value.errors == [{"message": "Invalid API key or access token"}]

    @pytest.mark.asyncio
    async def test_http_errors_propagate(self, mock_shopify_client, mock_response):
        mock_shopify_client._client.post = AsyncMock(return_value=mock_response({}, status_code=401))

        with pytest.raises(HTTPStatusError) as exc_info:
            await mock_shopify_client._graphql("query getShop { shop { name } }")

        assert exc_info.value.response.status_code == 401
