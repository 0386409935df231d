# API client unit tests
import json

import httpx
import pytest

from stockwatch.core.exceptions import MutationError, UpstreamFetchError
from stockwatch.services.shopify.client import ShopifyCatalogClient

PRODUCT_JSON = {
    "product": {
        "id": 632910392,
        "title": "IPod Nano - 8GB",
        "status": "active",
        "variants": [
            {"id": 808950810, "sku": "IPOD2008PINK", "inventory_quantity": 10, "inventory_item_id": 808950810},
            {"id": 49148385, "sku": "IPOD2008RED", "inventory_quantity": None, "inventory_item_id": 49148385},
        ],
    }
}


def make_client(handler) -> ShopifyCatalogClient:
    return ShopifyCatalogClient(
        "test-shop.myshopify.com",
        "shpat_test",
        api_version="2024-01",
        transport=httpx.MockTransport(handler),
    )


"""
1. Reads
"""

async def test_get_product_parses_variants():
    seen = {}

    def handler(request: httpx.Request):
        seen["url"] = str(request.url)
        seen["token"] = request.headers["X-Shopify-Access-Token"]
        return httpx.Response(200, json=PRODUCT_JSON)

    product = await make_client(handler).get_product("gid://shopify/Product/632910392")

    assert seen["url"].startswith("https://test-shop.myshopify.com/admin/api/2024-01/products/632910392.json")
    assert seen["token"] == "shpat_test"
    assert product.id == "632910392"
    assert product.total_quantity == 10
    assert product.find_variant("49148385").quantity == 0
    assert product.combined_sku == "IPOD2008PINK, IPOD2008RED"


async def test_get_product_404_is_none():
    product = await make_client(lambda request: httpx.Response(404, json={"errors": "Not Found"})).get_product("1")

    assert product is None


async def test_get_product_server_error_raises():
    with pytest.raises(UpstreamFetchError):
        await make_client(lambda request: httpx.Response(503, text="unavailable")).get_product("1")


async def test_network_error_raises_upstream_error():
    def handler(request):
        raise httpx.ConnectTimeout("timed out", request=request)

    with pytest.raises(UpstreamFetchError):
        await make_client(handler).list_products(250)


async def test_list_products_passes_paging_params():
    seen = {}

    def handler(request: httpx.Request):
        seen["params"] = dict(request.url.params)
        return httpx.Response(200, json={"products": [PRODUCT_JSON["product"]]})

    products = await make_client(handler).list_products(50, since_id="632910000")

    assert seen["params"]["limit"] == "50"
    assert seen["params"]["since_id"] == "632910000"
    assert seen["params"]["fields"] == "id,title,status,variants"
    assert [p.id for p in products] == ["632910392"]


"""
2. Visibility mutation
"""

async def test_hide_sends_draft_status():
    seen = {}

    def handler(request: httpx.Request):
        seen["url"] = str(request.url)
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={
            "data": {"productUpdate": {"product": {"id": "gid://shopify/Product/1", "status": "DRAFT"}, "userErrors": []}}
        })

    await make_client(handler).set_product_visibility("1", visible=False)

    assert seen["url"].endswith("/admin/api/2024-01/graphql.json")
    assert seen["body"]["variables"]["product"] == {"id": "gid://shopify/Product/1", "status": "DRAFT"}


async def test_user_errors_raise_mutation_error():
    def handler(request):
        return httpx.Response(200, json={
            "data": {"productUpdate": {"product": None, "userErrors": [{"field": ["id"], "message": "Product does not exist"}]}}
        })

    with pytest.raises(MutationError, match="Product does not exist"):
        await make_client(handler).set_product_visibility("1", visible=True)


async def test_graphql_errors_raise_mutation_error():
    def handler(request):
        return httpx.Response(200, json={"errors": [{"message": "Throttled"}]})

    with pytest.raises(MutationError, match="Throttled"):
        await make_client(handler).set_product_visibility("1", visible=True)


async def test_mutation_http_error_raises():
    with pytest.raises(MutationError):
        await make_client(lambda request: httpx.Response(401, text="Unauthorized")).set_product_visibility("1", True)


def test_client_requires_credentials():
    with pytest.raises(ValueError):
        ShopifyCatalogClient("test-shop.myshopify.com", "")
