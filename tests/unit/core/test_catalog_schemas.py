import pytest

from stockwatch.core.utils import legacy_id, normalize_shop_domain
from stockwatch.schemas.catalog import CatalogProduct
from stockwatch.schemas.webhook import InventoryLevelPayload


@pytest.mark.parametrize("value,expected", [
    ("gid://shopify/Product/123", "123"),
    ("gid://shopify/InventoryItem/808950810", "808950810"),
    (123, "123"),
    (" 42 ", "42"),
    (None, None),
    ("", None),
])
def test_legacy_id(value, expected):
    assert legacy_id(value) == expected


@pytest.mark.parametrize("value,expected", [
    ("Test-Shop.myshopify.com", "test-shop.myshopify.com"),
    ("https://test-shop.myshopify.com/", "test-shop.myshopify.com"),
    (None, None),
])
def test_normalize_shop_domain(value, expected):
    assert normalize_shop_domain(value) == expected


def test_rest_product_payload():
    product = CatalogProduct.model_validate({
        "id": 632910392,
        "title": None,
        "variants": [
            {"id": 1, "sku": "A", "inventory_quantity": 3, "inventory_item_id": 11, "price": "9.99"},
            {"id": 2, "sku": None, "inventory_quantity": None, "inventory_item_id": 12},
        ],
    })

    assert product.id == "632910392"
    assert product.title == ""
    assert product.total_quantity == 3
    assert product.combined_sku == "A"
    assert product.find_variant(12).id == "2"
    assert product.find_variant("gid://shopify/InventoryItem/11").id == "1"
    assert product.find_variant(99) is None


def test_inventory_level_payload_coerces_ids():
    level = InventoryLevelPayload.model_validate({"inventory_item_id": 808950810, "location_id": 905684977, "available": 6})

    assert level.inventory_item_id == "808950810"
    assert level.location_id == "905684977"
