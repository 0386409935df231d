# stockwatch/services/item_resolver.py
"""
Maps an inventory item id from a webhook to the product and variant that own it.

Two tiers:
1. ``InventoryItemCache`` - the persistent index, O(1) per lookup. Never
   trusted blindly: a hit is confirmed against the catalog and the entry is
   invalidated when the product is gone, can't be fetched, or no longer
   carries the item.
2. The catalog itself - a bounded, paged scan of the store's products. A hit
   here repairs the index so the next event for the same item takes tier 1.

Resolution writes to the index only; it never touches tracked products.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from stockwatch.core.config import get_settings
from stockwatch.core.exceptions import UnresolvedItemError, UpstreamFetchError
from stockwatch.core.utils import legacy_id
from stockwatch.integrations.base import CatalogGateway
from stockwatch.models import InventoryItemIndex
from stockwatch.schemas.catalog import CatalogProduct, CatalogVariant
from stockwatch.services.inventory_store import InventoryStore

logger = logging.getLogger(__name__)


@dataclass
class ResolvedItem:
    product: CatalogProduct
    variant: CatalogVariant
    via_index: bool


class InventoryItemCache:
    """Read/write/invalidate access to the inventory item index for one store."""

    def __init__(self, store: InventoryStore, store_id: int):
        self.store = store
        self.store_id = store_id

    async def lookup(self, inventory_item_id: str) -> Optional[InventoryItemIndex]:
        return await self.store.get_index_entry(self.store_id, inventory_item_id)

    async def remember(self, inventory_item_id: str, product_id: str, variant_id: Optional[str]) -> None:
        await self.store.upsert_index_entry(self.store_id, inventory_item_id, product_id, variant_id)

    async def invalidate(self, inventory_item_id: str) -> None:
        await self.store.delete_index_entry(self.store_id, inventory_item_id)


class ItemResolver:

    def __init__(
        self,
        store: InventoryStore,
        catalog: CatalogGateway,
        page_size: Optional[int] = None,
        max_pages: Optional[int] = None,
    ):
        settings = get_settings()
        self.store = store
        self.catalog = catalog
        self.page_size = page_size if page_size is not None else settings.FALLBACK_SCAN_PAGE_SIZE
        self.max_pages = max_pages if max_pages is not None else settings.FALLBACK_SCAN_MAX_PAGES

    async def resolve(self, store_id: int, inventory_item_id) -> ResolvedItem:
        """
        Return the product (with all variants) and the variant owning the item.

        Raises:
            UnresolvedItemError: no product in the scanned catalog owns the item.
            UpstreamFetchError: the fallback scan could not reach the catalog.
        """
        item_id = legacy_id(inventory_item_id)
        cache = InventoryItemCache(self.store, store_id)

        resolved = await self._from_index(cache, item_id)
        if resolved is not None:
            return resolved

        return await self._from_catalog_scan(cache, store_id, item_id)

    async def _from_index(self, cache: InventoryItemCache, item_id: str) -> Optional[ResolvedItem]:
        entry = await cache.lookup(item_id)
        if entry is None:
            return None

        try:
            product = await self.catalog.get_product(entry.product_id)
        except UpstreamFetchError as e:
            logger.warning(f"Index hit for item {item_id} but product {entry.product_id} fetch failed: {e}")
            await cache.invalidate(item_id)
            return None

        if product is None:
            logger.info(f"Product {entry.product_id} no longer exists; dropping index entry for item {item_id}")
            await cache.invalidate(item_id)
            return None

        variant = product.find_variant(item_id)
        if variant is None:
            logger.info(f"Product {product.id} no longer carries item {item_id}; dropping index entry")
            await cache.invalidate(item_id)
            return None

        return ResolvedItem(product=product, variant=variant, via_index=True)

    async def _from_catalog_scan(self, cache: InventoryItemCache, store_id: int, item_id: str) -> ResolvedItem:
        since_id = None
        for page_number in range(1, self.max_pages + 1):
            page = await self.catalog.list_products(self.page_size, since_id=since_id)

            for product in page:
                variant = product.find_variant(item_id)
                if variant is not None:
                    await cache.remember(item_id, product.id, variant.id)
                    logger.info(f"Resolved item {item_id} to product {product.id} by scan (page {page_number}); index repaired")
                    return ResolvedItem(product=product, variant=variant, via_index=False)

            if len(page) < self.page_size:
                break
            since_id = page[-1].id

        logger.info(f"Inventory item {item_id} not found in catalog scan for store {store_id}")
        raise UnresolvedItemError(item_id, store_id=store_id)
