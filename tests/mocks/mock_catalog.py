from typing import Dict, List, Optional

from stockwatch.core.exceptions import MutationError, UpstreamFetchError
from stockwatch.core.utils import legacy_id
from stockwatch.integrations.base import CatalogGateway
from stockwatch.schemas.catalog import CatalogProduct, CatalogVariant


def make_product(product_id, *variants, title: Optional[str] = None, status: str = "active") -> CatalogProduct:
    """Variants are (variant_id, inventory_item_id, quantity, sku) tuples."""
    return CatalogProduct(
        id=str(product_id),
        title=title or f"Product {product_id}",
        status=status,
        variants=[
            CatalogVariant(id=str(v_id), inventory_item_id=str(item_id), quantity=qty, sku=sku)
            for v_id, item_id, qty, sku in variants
        ],
    )


class MockCatalog(CatalogGateway):
    def __init__(self, products: Optional[List[CatalogProduct]] = None):
        self.products: Dict[str, CatalogProduct] = {p.id: p for p in products or []}
        self.get_calls: list = []
        self.list_calls: list = []
        self.visibility_calls: list = []  # Track calls for testing
        self.fail_get = False  # Toggle to test error scenarios
        self.fail_list = False
        self.fail_mutation = False

    def add(self, product: CatalogProduct):
        self.products[product.id] = product

    def remove(self, product_id):
        self.products.pop(str(product_id), None)

    async def get_product(self, product_id):
        self.get_calls.append(str(product_id))
        if self.fail_get:
            raise UpstreamFetchError(f"Failed to fetch product {product_id}")
        return self.products.get(legacy_id(product_id))

    async def list_products(self, page_size, since_id=None):
        self.list_calls.append({"page_size": page_size, "since_id": since_id})
        if self.fail_list:
            raise UpstreamFetchError("Failed to list products")
        ordered = sorted(self.products.values(), key=lambda p: int(p.id))
        if since_id is not None:
            ordered = [p for p in ordered if int(p.id) > int(since_id)]
        return ordered[:page_size]

    async def set_product_visibility(self, product_id, visible):
        self.visibility_calls.append((str(product_id), visible))
        if self.fail_mutation:
            raise MutationError(f"productUpdate rejected for {product_id}")
        product = self.products.get(str(product_id))
        if product is not None:
            product.status = "active" if visible else "draft"
